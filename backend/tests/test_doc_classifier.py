"""Tests for documentation discovery and classification."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from docdrift.schemas.knowledge_base import KnowledgeBase
from docdrift.services.doc_classifier import (
    MAX_CONTENT_CHARS,
    DocumentFile,
    RepositoryDocClassifier,
    build_classification_prompt,
    discover_documentation_files,
    is_excluded,
    parse_classification_response,
)


@pytest.fixture
def checkout(tmp_path):
    """A small repository checkout with docs in a few places."""
    (tmp_path / "README.md").write_text("# Project\n\nSetup steps.\n")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "api.md").write_text("## API\n\n`GET /users`\n")
    (tmp_path / "docs" / "guide.markdown").write_text("Guide\n")
    (tmp_path / "node_modules" / "pkg").mkdir(parents=True)
    (tmp_path / "node_modules" / "pkg" / "README.md").write_text("vendored\n")
    (tmp_path / ".github").mkdir()
    (tmp_path / ".github" / "CONTRIBUTING.md").write_text("Contribute\n")
    (tmp_path / "app.py").write_text("print('hi')\n")
    return tmp_path


def _reply(*entries):
    return "```json\n" + json.dumps(list(entries)) + "\n```"


def _entry(number, sensitivity=2, staleness=2, **extra):
    return {
        "document_number": number,
        "code_sensitivity_level": sensitivity,
        "staleness_risk": staleness,
        "technical_patterns": ["API/Routing"],
        "doc_category": "API Reference (Advanced)",
        "confidence_score": 0.8,
        "key_indicators": ["endpoints"],
        **extra,
    }


class TestIsExcluded:
    def test_double_star_matches_nested(self):
        assert is_excluded("node_modules/a/b/README.md", ["node_modules/**"])

    def test_no_match(self):
        assert not is_excluded("docs/api.md", ["node_modules/**", ".git/**"])


class TestDiscovery:
    def test_finds_docs_and_applies_excludes(self, checkout):
        files = discover_documentation_files(
            ["**/*.md", "**/*.markdown"], ["node_modules/**"], root=checkout
        )
        paths = [f.path for f in files]

        assert "README.md" in paths
        assert "docs/api.md" in paths
        assert "docs/guide.markdown" in paths
        assert ".github/CONTRIBUTING.md" in paths
        assert not any(p.startswith("node_modules/") for p in paths)
        assert "app.py" not in paths

    def test_deduplicates_across_patterns(self, checkout):
        files = discover_documentation_files(["**/*.md", "docs/*.md"], [], root=checkout)
        paths = [f.path for f in files]
        assert paths.count("docs/api.md") == 1

    def test_records_sha_and_size(self, checkout):
        files = discover_documentation_files(["README.md"], [], root=checkout)
        assert len(files) == 1
        assert len(files[0].sha) == 40
        assert files[0].size == len(b"# Project\n\nSetup steps.\n")

    def test_no_patterns_no_files(self, checkout):
        assert discover_documentation_files([], [], root=checkout) == []


class TestPrompt:
    def test_numbers_documents_from_one(self):
        files = [
            DocumentFile(path="docs/a.md", sha="1", size=1, content="alpha"),
            DocumentFile(path="docs/b.md", sha="2", size=1, content="b" * 5000),
        ]
        prompt = build_classification_prompt(files)

        assert "Analyze the following 2 documentation files" in prompt
        assert '"document_number": 1' in prompt
        assert '"file_name": "b.md"' in prompt
        assert "b" * 3000 in prompt
        assert "b" * 3001 not in prompt


class TestParseResponse:
    def setup_method(self):
        self.files = [
            DocumentFile(path="README.md", sha="aaa", size=1),
            DocumentFile(path="docs/api.md", sha="bbb", size=1),
        ]

    def test_maps_entries_onto_files(self):
        result = parse_classification_response(_reply(_entry(2, 3, 1), _entry(1, 0, 1)), self.files)

        assert [c.path for c in result] == ["docs/api.md", "README.md"]
        assert result[0].sha == "bbb"
        assert result[0].code_sensitivity_level == 3
        assert result[0].classified_at is not None

    def test_skips_out_of_range_numbers(self):
        result = parse_classification_response(_reply(_entry(0), _entry(3), _entry(1)), self.files)
        assert [c.path for c in result] == ["README.md"]

    def test_skips_invalid_levels(self):
        result = parse_classification_response(_reply(_entry(1, sensitivity=7), _entry(2)), self.files)
        assert [c.path for c in result] == ["docs/api.md"]

    def test_accepts_staleness_risk_level_key(self):
        entry = _entry(1)
        entry["staleness_risk_level"] = entry.pop("staleness_risk")
        result = parse_classification_response(_reply(entry), self.files)
        assert result[0].staleness_risk == 2

    def test_unparseable_reply_is_empty(self):
        assert parse_classification_response("Sorry, I can't help.", self.files) == []

    def test_non_array_reply_is_empty(self):
        assert parse_classification_response('{"document_number": 1}', self.files) == []


class TestRepositoryDocClassifier:
    def _classifier(self, root, llm, output):
        return RepositoryDocClassifier(
            repository="octo/docs",
            llm=llm,
            docs_patterns=["**/*.md"],
            exclude_patterns=["node_modules/**"],
            output_path=output,
            root=root,
            batch_pause=0,
        )

    @pytest.mark.asyncio
    async def test_classifies_and_writes_knowledge_base(self, checkout, tmp_path):
        llm = MagicMock()
        llm.complete_text = AsyncMock(return_value=_reply(_entry(1, 3, 3), _entry(2, 1, 1), _entry(3, 2, 2)))
        output = tmp_path / "out" / "kb.json"

        kb = await self._classifier(checkout, llm, output).classify_repository()

        assert kb.total_files == 3
        assert kb.high_sensitivity_files == 1
        assert KnowledgeBase.load(output).repository == "octo/docs"
        llm.complete_text.assert_awaited_once()
        assert llm.complete_text.call_args.kwargs["max_tokens"] == 4000

    @pytest.mark.asyncio
    async def test_empty_checkout_writes_empty_knowledge_base(self, tmp_path):
        llm = MagicMock()
        llm.complete_text = AsyncMock()
        output = tmp_path / "kb.json"
        (tmp_path / "repo").mkdir()

        kb = await self._classifier(tmp_path / "repo", llm, output).classify_repository()

        assert kb.total_files == 0
        assert output.exists()
        llm.complete_text.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_batch_yields_no_entries(self, checkout, tmp_path):
        llm = MagicMock()
        llm.complete_text = AsyncMock(return_value=None)

        kb = await self._classifier(checkout, llm, tmp_path / "kb.json").classify_repository()

        assert kb.total_files == 0

    @pytest.mark.asyncio
    async def test_oversized_files_are_not_sent(self, tmp_path):
        (tmp_path / "big.md").write_text("x" * MAX_CONTENT_CHARS)
        llm = MagicMock()
        llm.complete_text = AsyncMock()

        classifier = self._classifier(tmp_path, llm, tmp_path / "kb.json")
        result = await classifier.classify_files(
            discover_documentation_files(["*.md"], [], root=tmp_path)
        )

        assert result == []
        llm.complete_text.assert_not_called()

    @pytest.mark.asyncio
    async def test_batches_of_ten(self, tmp_path):
        for i in range(12):
            (tmp_path / f"doc{i:02d}.md").write_text(f"doc {i}")
        llm = MagicMock()
        llm.complete_text = AsyncMock(return_value="[]")

        classifier = self._classifier(tmp_path, llm, tmp_path / "kb.json")
        await classifier.classify_files(discover_documentation_files(["*.md"], [], root=tmp_path))

        assert llm.complete_text.await_count == 2

    def test_outputs(self, tmp_path):
        classifier = self._classifier(tmp_path, MagicMock(), tmp_path / "kb.json")
        kb = KnowledgeBase(repository="octo/docs", total_files=4, high_sensitivity_files=2)

        assert classifier.outputs(kb) == {
            "knowledge-base-path": str(tmp_path / "kb.json"),
            "classified-files-count": 4,
            "high-sensitivity-files": 2,
        }
