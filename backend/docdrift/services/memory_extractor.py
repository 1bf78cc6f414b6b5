"""Documentation memory extractor.

Distills the documentation files changed in a commit into short factual
statements ("memories") and stores them as a git note on that commit.
"""

import asyncio
import json
import logging
import os
from dataclasses import dataclass
from typing import Any

import httpx
from pathspec import PathSpec

from docdrift.core.config import ConfigurationError
from docdrift.services.git_notes import GitNotesStore
from docdrift.services.github import GitHubAPIError, GitHubService, split_repository
from docdrift.services.llm_gateway import LLMGateway
from docdrift.services.llm_json import LLMResponseParseError, parse_llm_json, preview

logger = logging.getLogger(__name__)

BATCH_SIZE = 3
BATCH_PAUSE_SECONDS = 1.0


@dataclass
class ChangedDoc:
    """A documentation file touched by the commit."""

    path: str
    status: str | None = None
    additions: int = 0
    deletions: int = 0
    content: str | None = None


def build_memory_prompt(files: list[ChangedDoc]) -> str:
    files_json = [
        {
            "document_number": index + 1,
            "file_path": f.path,
            "file_name": os.path.basename(f.path),
            "content": f.content,
        }
        for index, f in enumerate(files)
    ]

    return f"""You are a documentation analysis expert specializing in extracting factual assumptions and statements from technical documentation. Your task is to distill documentation into discrete "memories" - factual statements that capture the essential knowledge, assumptions, and technical facts contained within the documentation.

## EXTRACTION GUIDELINES

**What to extract as memories:**
1. **Factual technical statements** - APIs that exist, components that are available, processes that occur
2. **System assumptions** - What entities, services, or infrastructure is presumed to exist
3. **Configuration facts** - Specific settings, values, paths, or requirements that are stated
4. **Dependency relationships** - What depends on what, integration points, required connections
5. **Behavioral statements** - How things work, what happens when actions are taken
6. **Implicit technical requirements** - Unstated but necessary prerequisites or conditions

**Memory quality standards:**
- **Context-aware**: Include relevant system/project context when it helps clarify the statement
- **Technically precise**: Use specific terms rather than vague descriptions
- **Assumption-explicit**: Call out implicit dependencies and prerequisites
- **Consolidatable**: Combine related facts when they strengthen each other
- **Succinct**: Each memory should be one clear, complete factual statement

**Example transformation:**
Original: "You can install the 1Password CLI in your Codespace to automatically load the necessary secrets from the team vault when the server starts. This eliminates the need to set or update secrets manually."

Extracted memories:
- "A team 1Password vault exists and contains necessary secrets for server operation"
- "The server startup process includes logic to invoke the 1Password CLI for secret loading"
- "1Password CLI is compatible with Codespace environments"
- "Manual secret management is the default approach without 1Password CLI integration"

**Prioritization:**
1. Technical facts over procedural steps
2. System architecture insights over user instructions
3. Dependencies and integrations over standalone features
4. Implicit assumptions over explicit statements (when the implicit adds value)

## DOCUMENTS TO ANALYZE

{json.dumps(files_json, indent=2)}

## RESPONSE FORMAT

Respond with a JSON object where each key is the file path and each value is an array of memory strings. Each memory should be a standalone factual statement that captures essential knowledge from that document.

```json
{{
  "docs/api.md": [
    "Authentication endpoints require Bearer token format in Authorization header",
    "Rate limiting applies at 100 requests per minute per API key",
    "Database connection pooling is configured for API backend services"
  ],
  "README.md": [
    "Application requires Node.js version 18 or higher",
    "PostgreSQL database must be running on port 5432 for local development"
  ]
}}
```

Focus on extracting memories that would be valuable for understanding system architecture, dependencies, and technical requirements. Avoid procedural steps unless they reveal important technical facts about the system.
"""


def parse_memory_response(response: str, files: list[ChangedDoc]) -> dict[str, list[str]]:
    """Keep the memory lists for the requested paths only."""
    try:
        data = parse_llm_json(response)
    except LLMResponseParseError as e:
        logger.warning(f"⚠️  Error parsing memory response: {e}")
        logger.info(f"📋 Raw response preview: {preview(response)}")
        return {}

    if not isinstance(data, dict):
        logger.warning("⚠️  Memory response is not a JSON object")
        return {}

    memories: dict[str, list[str]] = {}
    for f in files:
        value = data.get(f.path)
        if isinstance(value, list):
            memories[f.path] = [str(m) for m in value]
            logger.info(f"✅ Extracted {len(value)} memories from {f.path}")
        else:
            logger.warning(f"⚠️  No memories extracted for {f.path}")
    return memories


def format_memories_note(memories_by_file: dict[str, list[str]]) -> str:
    """Render memories as a note: a ``# path`` heading per file, blank line between files."""
    blocks = ["\n".join([f"# {path}", *memories]) for path, memories in memories_by_file.items()]
    return "\n\n".join(blocks)


class DocumentationMemoryExtractor:
    """Extract memories for one commit and manage the notes namespace."""

    def __init__(
        self,
        repository: str,
        github: GitHubService,
        llm: LLMGateway | None = None,
        commit_sha: str | None = None,
        docs_patterns: list[str] | None = None,
        exclude_patterns: list[str] | None = None,
        notes: GitNotesStore | None = None,
        operation: str = "extract",
        batch_pause: float = BATCH_PAUSE_SECONDS,
    ):
        if not repository:
            raise ConfigurationError("Repository is required")
        if operation in ("extract", "get_note", "check_note") and not commit_sha:
            raise ConfigurationError("Commit SHA is required")
        if operation == "extract" and llm is None:
            raise ConfigurationError("Copilot token is required")
        try:
            self.owner, self.repo = split_repository(repository)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        self.repository = repository
        self.github = github
        self.llm = llm
        self.commit_sha = commit_sha
        self.docs_spec = PathSpec.from_lines("gitignore", docs_patterns or ["**/*.md", "**/*.markdown"])
        self.exclude_spec = PathSpec.from_lines("gitignore", exclude_patterns or [])
        self.notes = notes or GitNotesStore()
        self.operation = operation
        self.batch_pause = batch_pause

    async def extract_and_store(self) -> dict[str, list[str]]:
        """Extract memories for the commit's changed docs and store the note.

        Returns:
            Memories keyed by file path; empty when nothing was extracted.
        """
        logger.info(f"🧠 Extracting memories for documentation changes in commit {self.commit_sha}...")

        changed_docs = await self.discover_changed_docs()
        if not changed_docs:
            logger.info("ℹ️  No documentation files changed in this commit")
            return {}

        logger.info(f"📄 Found {len(changed_docs)} changed documentation files")
        for doc in changed_docs:
            logger.info(f"   - {doc.path}")

        logger.info("🤖 Extracting memories using AI...")
        memories = await self.extract_memories(changed_docs)
        if not memories:
            logger.warning("⚠️  No memories extracted from documentation files")
            return {}

        note = format_memories_note(memories)
        logger.info(f"🧠 Extracted memories:\n{'=' * 50}\n{note}\n{'=' * 50}")

        logger.info("📝 Storing memories as git note...")
        self.notes.store(self.commit_sha, note)
        self.log_summary(memories)
        return memories

    def is_doc_path(self, path: str) -> bool:
        return self.docs_spec.match_file(path)

    def is_excluded(self, path: str) -> bool:
        return self.exclude_spec.match_file(path)

    async def discover_changed_docs(self) -> list[ChangedDoc]:
        try:
            commit = await self.github.get_commit(self.owner, self.repo, self.commit_sha)
        except (GitHubAPIError, httpx.HTTPError) as e:
            logger.warning(f"⚠️  GitHub API error: {e}")
            return []

        docs: list[ChangedDoc] = []
        for f in commit.get("files") or []:
            path = f.get("filename", "")
            if not self.is_doc_path(path):
                continue
            if self.is_excluded(path):
                logger.info(f"🚫 Excluding {path} (matched exclude pattern)")
                continue
            if f.get("status") == "removed":
                continue

            logger.info(f"✅ Including changed documentation file: {path}")
            docs.append(
                ChangedDoc(
                    path=path,
                    status=f.get("status"),
                    additions=f.get("additions") or 0,
                    deletions=f.get("deletions") or 0,
                )
            )
        return docs

    async def extract_memories(self, docs: list[ChangedDoc]) -> dict[str, list[str]]:
        memories: dict[str, list[str]] = {}
        for start in range(0, len(docs), BATCH_SIZE):
            memories.update(await self.extract_batch(docs[start:start + BATCH_SIZE]))
            if len(docs) > BATCH_SIZE:
                await asyncio.sleep(self.batch_pause)
        return memories

    async def extract_batch(self, docs: list[ChangedDoc]) -> dict[str, list[str]]:
        for doc in docs:
            doc.content = await self.fetch_content(doc.path)

        valid = [d for d in docs if d.content is not None]
        if not valid:
            return {}

        response = await self.llm.complete_text(build_memory_prompt(valid), max_tokens=4000)
        if not response:
            return {}
        return parse_memory_response(response, valid)

    async def fetch_content(self, path: str) -> str | None:
        try:
            return await self.github.get_file_content(self.owner, self.repo, path, ref=self.commit_sha)
        except (GitHubAPIError, httpx.HTTPError, ValueError) as e:
            logger.warning(f"⚠️  Error fetching {path}: {e}")
            return None

    def get_note(self) -> str | None:
        logger.info(f"🔍 Looking for git note for commit {self.commit_sha} in namespace {self.notes.namespace}")
        note = self.notes.show(self.commit_sha)
        if note is None:
            logger.warning(f"⚠️  No git note found for commit {self.commit_sha} in namespace {self.notes.namespace}")
            return None
        logger.info(f"✅ Found git note for commit {self.commit_sha}")
        return note

    def check_note(self) -> bool:
        exists = self.notes.exists(self.commit_sha)
        if exists:
            logger.info(f"✅ Git note exists for commit {self.commit_sha}")
        else:
            logger.info(f"❌ No git note found for commit {self.commit_sha}")
        return exists

    def list_notes(self) -> list[str]:
        logger.info(f"📋 Listing all git notes in namespace: {self.notes.namespace}")
        refs = self.notes.list()
        if not refs:
            logger.info(f"ℹ️  No git notes found in namespace {self.notes.namespace}")
            return []
        for index, ref in enumerate(refs, start=1):
            logger.info(f"  {index}. Commit: {ref.commit_sha} (Note: {ref.note_sha})")
        return [f"{ref.note_sha} {ref.commit_sha}" for ref in refs]

    def log_summary(self, memories: dict[str, list[str]]) -> None:
        total = sum(len(m) for m in memories.values())
        logger.info("🧠 Memory Extraction Summary:")
        logger.info(f"   Files processed: {len(memories)}")
        logger.info(f"   Total memories extracted: {total}")
        logger.info(f"   Average memories per file: {round(total / len(memories), 1)}")
        for path, items in memories.items():
            logger.info(f"   {path}: {len(items)} memories")

    def outputs(self, memories: dict[str, list[str]]) -> dict[str, Any]:
        """Step outputs for the workflow."""
        return {
            "memories-extracted": sum(len(m) for m in memories.values()),
            "files-processed": len(memories),
            "commit-sha": self.commit_sha,
        }
