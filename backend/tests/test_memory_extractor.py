"""Tests for documentation memory extraction."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from docdrift.core.config import ConfigurationError
from docdrift.services.git_notes import NoteRef
from docdrift.services.github import GitHubAPIError
from docdrift.services.memory_extractor import (
    ChangedDoc,
    DocumentationMemoryExtractor,
    build_memory_prompt,
    format_memories_note,
    parse_memory_response,
)

COMMIT = {
    "sha": "abc123",
    "files": [
        {"filename": "README.md", "status": "modified", "additions": 4, "deletions": 1},
        {"filename": "docs/setup.md", "status": "added", "additions": 20, "deletions": 0},
        {"filename": "docs/old.md", "status": "removed", "additions": 0, "deletions": 9},
        {"filename": "node_modules/pkg/README.md", "status": "modified", "additions": 1, "deletions": 0},
        {"filename": "app/main.py", "status": "modified", "additions": 2, "deletions": 2},
    ],
}


@pytest.fixture
def github():
    service = MagicMock()
    service.get_commit = AsyncMock(return_value=COMMIT)
    service.get_file_content = AsyncMock(side_effect=lambda owner, repo, path, ref=None: f"content of {path}")
    return service


@pytest.fixture
def notes():
    store = MagicMock()
    store.namespace = "documentation/memories"
    store.store.return_value = True
    return store


def _extractor(github, notes, llm=None, operation="extract", **kwargs):
    return DocumentationMemoryExtractor(
        repository="octo/docs",
        github=github,
        llm=llm,
        commit_sha="abc123",
        exclude_patterns=["node_modules/**"],
        notes=notes,
        operation=operation,
        batch_pause=0,
        **kwargs,
    )


def _llm(*responses):
    llm = MagicMock()
    llm.complete_text = AsyncMock(side_effect=list(responses))
    return llm


class TestConstruction:
    def test_requires_repository(self, github, notes):
        with pytest.raises(ConfigurationError, match="Repository is required"):
            DocumentationMemoryExtractor(repository="", github=github, llm=MagicMock(), commit_sha="a")

    def test_extract_requires_commit(self, github, notes):
        with pytest.raises(ConfigurationError, match="Commit SHA is required"):
            DocumentationMemoryExtractor(repository="octo/docs", github=github, llm=MagicMock())

    def test_extract_requires_llm(self, github, notes):
        with pytest.raises(ConfigurationError, match="Copilot token is required"):
            DocumentationMemoryExtractor(repository="octo/docs", github=github, commit_sha="a")

    def test_list_notes_needs_no_commit_or_llm(self, github, notes):
        extractor = DocumentationMemoryExtractor(
            repository="octo/docs", github=github, notes=notes, operation="list_notes"
        )
        assert extractor.commit_sha is None


class TestPromptAndParsing:
    def test_prompt_numbers_documents(self):
        prompt = build_memory_prompt([ChangedDoc(path="docs/a.md", content="hello")])
        assert '"document_number": 1' in prompt
        assert '"file_name": "a.md"' in prompt
        assert '"content": "hello"' in prompt

    def test_parse_keeps_requested_paths_only(self):
        files = [ChangedDoc(path="README.md"), ChangedDoc(path="docs/a.md")]
        response = "```json\n" + json.dumps(
            {"README.md": ["Fact one", "Fact two"], "other.md": ["ignored"], "docs/a.md": "not a list"}
        ) + "\n```"

        assert parse_memory_response(response, files) == {"README.md": ["Fact one", "Fact two"]}

    def test_parse_rejects_arrays(self):
        assert parse_memory_response("[]", [ChangedDoc(path="a.md")]) == {}

    def test_parse_invalid_json(self):
        assert parse_memory_response("no json here", [ChangedDoc(path="a.md")]) == {}

    def test_format_note(self):
        note = format_memories_note({"README.md": ["A", "B"], "docs/a.md": ["C"]})
        assert note == "# README.md\nA\nB\n\n# docs/a.md\nC"


class TestDiscovery:
    @pytest.mark.asyncio
    async def test_filters_changed_files(self, github, notes):
        docs = await _extractor(github, notes, llm=MagicMock()).discover_changed_docs()

        assert [d.path for d in docs] == ["README.md", "docs/setup.md"]
        assert docs[1].status == "added"
        assert docs[1].additions == 20

    @pytest.mark.asyncio
    async def test_github_error_yields_nothing(self, github, notes):
        github.get_commit.side_effect = GitHubAPIError("Resource not found", 404)
        assert await _extractor(github, notes, llm=MagicMock()).discover_changed_docs() == []

    @pytest.mark.asyncio
    async def test_custom_doc_patterns(self, github, notes):
        extractor = _extractor(github, notes, llm=MagicMock(), docs_patterns=["docs/**"])
        docs = await extractor.discover_changed_docs()
        assert [d.path for d in docs] == ["docs/setup.md"]


class TestExtractAndStore:
    @pytest.mark.asyncio
    async def test_stores_note_for_commit(self, github, notes):
        llm = _llm(json.dumps({"README.md": ["Needs Python 3.12"], "docs/setup.md": ["Uses PostgreSQL"]}))
        extractor = _extractor(github, notes, llm=llm)

        memories = await extractor.extract_and_store()

        assert memories == {"README.md": ["Needs Python 3.12"], "docs/setup.md": ["Uses PostgreSQL"]}
        notes.store.assert_called_once_with(
            "abc123", "# README.md\nNeeds Python 3.12\n\n# docs/setup.md\nUses PostgreSQL"
        )
        github.get_file_content.assert_any_await("octo", "docs", "README.md", ref="abc123")
        assert extractor.outputs(memories) == {
            "memories-extracted": 2,
            "files-processed": 2,
            "commit-sha": "abc123",
        }

    @pytest.mark.asyncio
    async def test_no_doc_changes(self, github, notes):
        github.get_commit.return_value = {"files": [{"filename": "app.py", "status": "modified"}]}
        llm = _llm()

        assert await _extractor(github, notes, llm=llm).extract_and_store() == {}
        llm.complete_text.assert_not_called()
        notes.store.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_llm_stores_nothing(self, github, notes):
        assert await _extractor(github, notes, llm=_llm(None)).extract_and_store() == {}
        notes.store.assert_not_called()

    @pytest.mark.asyncio
    async def test_batches_of_three(self, github, notes):
        github.get_commit.return_value = {
            "files": [{"filename": f"docs/d{i}.md", "status": "modified"} for i in range(5)]
        }
        llm = _llm("{}", "{}")

        await _extractor(github, notes, llm=llm).extract_memories(
            await _extractor(github, notes, llm=llm).discover_changed_docs()
        )

        assert llm.complete_text.await_count == 2

    @pytest.mark.asyncio
    async def test_unfetchable_docs_skipped(self, github, notes):
        github.get_file_content.side_effect = ValueError("Path is a directory, not a file")
        llm = _llm()

        result = await _extractor(github, notes, llm=llm).extract_batch([ChangedDoc(path="docs")])

        assert result == {}
        llm.complete_text.assert_not_called()


class TestNoteOperations:
    def test_get_note(self, github, notes):
        notes.show.return_value = "# README.md\nfact"
        assert _extractor(github, notes, operation="get_note").get_note() == "# README.md\nfact"

    def test_get_missing_note(self, github, notes):
        notes.show.return_value = None
        assert _extractor(github, notes, operation="get_note").get_note() is None

    def test_check_note(self, github, notes):
        notes.exists.return_value = True
        assert _extractor(github, notes, operation="check_note").check_note() is True
        notes.exists.assert_called_once_with("abc123")

    def test_list_notes(self, github, notes):
        notes.list.return_value = [NoteRef("n1", "c1"), NoteRef("n2", "c2")]
        assert _extractor(github, notes, operation="list_notes").list_notes() == ["n1 c1", "n2 c2"]

    def test_list_notes_empty(self, github, notes):
        notes.list.return_value = []
        assert _extractor(github, notes, operation="list_notes").list_notes() == []
