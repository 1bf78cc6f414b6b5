"""Repository documentation classifier.

Discovers documentation files in a local checkout, asks the LLM to classify
them in batches, and writes the resulting knowledge base to disk.
"""

import asyncio
import glob
import hashlib
import json
import logging
import os
from dataclasses import dataclass
from fnmatch import fnmatch
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from docdrift.schemas.knowledge_base import DocClassification, KnowledgeBase, utc_now_iso
from docdrift.services.llm_gateway import LLMGateway
from docdrift.services.llm_json import LLMResponseParseError, parse_llm_json, preview

logger = logging.getLogger(__name__)

BATCH_SIZE = 10
BATCH_PAUSE_SECONDS = 0.5
MAX_CONTENT_CHARS = 50_000
PREVIEW_CONTENT_CHARS = 3_000


@dataclass
class DocumentFile:
    """A documentation file found in the checkout."""

    path: str
    sha: str
    size: int
    content: str | None = None


def read_text(path: str | Path) -> str | None:
    """Read a file as UTF-8, replacing undecodable bytes.

    Returns None (after logging a warning) when the file can't be read.
    """
    try:
        return Path(path).read_bytes().decode("utf-8", errors="replace")
    except OSError as e:
        logger.warning(f"⚠️  Error reading {path}: {e}")
        return None


def is_excluded(path: str, exclude_patterns: list[str]) -> bool:
    """True if the path matches any exclude pattern."""
    return any(fnmatch(path, pattern) for pattern in exclude_patterns)


def discover_documentation_files(
    docs_patterns: list[str],
    exclude_patterns: list[str],
    root: str | Path = ".",
) -> list[DocumentFile]:
    """Find documentation files under ``root``.

    Paths are reported relative to ``root`` and de-duplicated across
    patterns, keeping first-seen order.
    """
    root = Path(root)
    logger.info(f"🔍 Working directory: {root.resolve()}")

    files: dict[str, DocumentFile] = {}
    for pattern in docs_patterns:
        matches = sorted(glob.glob(pattern, root_dir=root, recursive=True, include_hidden=True))
        logger.info(f"🔍 Pattern '{pattern}' found {len(matches)} matches")

        for rel_path in matches:
            rel_path = rel_path.replace(os.sep, "/")
            full_path = root / rel_path
            if rel_path in files or not full_path.is_file():
                continue

            if is_excluded(rel_path, exclude_patterns):
                logger.info(f"🚫 Excluding {rel_path} (matched exclude pattern)")
                continue
            logger.info(f"✅ Including {rel_path}")

            data = full_path.read_bytes()
            files[rel_path] = DocumentFile(
                path=rel_path,
                sha=hashlib.sha1(data).hexdigest(),
                size=len(data),
            )

    return list(files.values())


def build_classification_prompt(files: list[DocumentFile]) -> str:
    """Build the batch classification prompt."""
    files_json = [
        {
            "document_number": index + 1,
            "file_path": f.path,
            "file_name": os.path.basename(f.path),
            "file_size": len(f.content or ""),
            "content_preview": (f.content or "")[:PREVIEW_CONTENT_CHARS],
        }
        for index, f in enumerate(files)
    ]

    return f"""You are a documentation classification expert. Analyze the following {len(files)} documentation files and classify each one across four key dimensions for code change impact assessment.

For each document, provide:

1. **Code Sensitivity Level** (0-3): How sensitive is this documentation to code changes?
   - 0: Not sensitive (general docs, external content, non-technical)
   - 1: Low sensitivity (broad concepts, no specific implementation details)
   - 2: Medium sensitivity (references specific components, modules, patterns)
   - 3: High sensitivity (mentions function names, signatures, specific code structure)

2. **Staleness Risk** (1-3): How likely is this documentation to become outdated?
   - 1: Low risk - Stable concepts that rarely change
   - 2: Medium risk - May become outdated as features evolve
   - 3: High risk - Likely to become outdated quickly due to frequent changes

3. **Technical Patterns** (array): Which technical areas does this document cover?
   - API/Routing, Database/Schema, Background/Jobs, Authentication/Authorization
   - Frontend/UI, Infrastructure/DevOps, Testing/QA, Configuration/Environment
   - Data/Analytics, Integration/External, Performance/Optimization
   - Security/Compliance, Documentation/Process

4. **Document Type**: High-specificity classification
   - API Reference (Beginner), API Reference (Advanced), Setup Guide (Quick Start)
   - Setup Guide (Comprehensive), Tutorial (Step-by-Step), Tutorial (Interactive)
   - Architecture Overview, Architecture Deep-Dive, Process Documentation
   - Troubleshooting Guide, Contributing Guidelines, Reference Documentation
   - Policy/Compliance, Release Notes, FAQ/Help, Personal Notes, External Links

Files to classify:
{json.dumps(files_json, indent=2)}

Respond with a JSON array containing one object per document with this exact schema:
{{
  "document_number": 1,
  "code_sensitivity_level": 2,
  "staleness_risk": 3,
  "technical_patterns": ["API/Routing", "Authentication/Authorization"],
  "doc_category": "API Reference (Advanced)",
  "confidence_score": 0.85,
  "key_indicators": ["function signatures", "endpoint documentation", "authentication flow"]
}}
"""


def parse_classification_response(response: str, files: list[DocumentFile]) -> list[DocClassification]:
    """Map a classification reply back onto the batch it describes.

    Entries with an out-of-range ``document_number`` or values outside the
    schema are skipped. An unparseable reply yields an empty list.
    """
    try:
        classifications = parse_llm_json(response)
    except LLMResponseParseError as e:
        logger.warning(f"⚠️  Error parsing classification response: {e}")
        logger.info(f"📋 Raw response preview: {preview(response)}")
        return []

    if not isinstance(classifications, list):
        logger.warning("⚠️  Classification response is not a JSON array")
        return []

    classified: list[DocClassification] = []
    for item in classifications:
        if not isinstance(item, dict):
            continue
        try:
            doc_index = int(item.get("document_number")) - 1
        except (TypeError, ValueError):
            continue
        if doc_index < 0 or doc_index >= len(files):
            continue

        source = files[doc_index]
        try:
            classified.append(
                DocClassification.model_validate(
                    {
                        **item,
                        "path": source.path,
                        "sha": source.sha,
                        "classified_at": utc_now_iso(),
                    }
                )
            )
        except ValidationError as e:
            logger.warning(f"⚠️  Skipping invalid classification for {source.path}: {e.error_count()} errors")

    return classified


class RepositoryDocClassifier:
    """Classify a repository's documentation into a knowledge base."""

    def __init__(
        self,
        repository: str,
        llm: LLMGateway,
        docs_patterns: list[str],
        exclude_patterns: list[str],
        output_path: str | Path,
        root: str | Path = ".",
        batch_pause: float = BATCH_PAUSE_SECONDS,
    ):
        self.repository = repository
        self.llm = llm
        self.docs_patterns = docs_patterns
        self.exclude_patterns = exclude_patterns
        self.output_path = Path(output_path)
        self.root = Path(root)
        self.batch_pause = batch_pause

    async def classify_repository(self) -> KnowledgeBase:
        """Run discovery, classification and persistence."""
        logger.info(f"🔍 Discovering documentation files in {self.repository}...")
        files = discover_documentation_files(self.docs_patterns, self.exclude_patterns, self.root)
        logger.info(f"📄 Found {len(files)} documentation files")

        if not files:
            logger.info("ℹ️  No documentation files found")
            knowledge_base = KnowledgeBase.empty(self.repository)
        else:
            logger.info("🤖 Classifying files using AI...")
            classified = await self.classify_files(files)
            logger.info("💾 Generating knowledge base...")
            knowledge_base = KnowledgeBase.from_classifications(self.repository, classified)

        knowledge_base.save(self.output_path)
        logger.info(f"💾 Knowledge base saved to {self.output_path}")
        self.log_summary(knowledge_base)
        return knowledge_base

    async def classify_files(self, files: list[DocumentFile]) -> list[DocClassification]:
        """Classify files in fixed-size batches, pausing between batches."""
        classified: list[DocClassification] = []

        for start in range(0, len(files), BATCH_SIZE):
            batch = files[start:start + BATCH_SIZE]
            for f in batch:
                f.content = read_text(self.root / f.path)

            valid = [f for f in batch if f.content is not None and len(f.content) < MAX_CONTENT_CHARS]
            if valid:
                classified.extend(await self.classify_batch(valid))

            await asyncio.sleep(self.batch_pause)

        return classified

    async def classify_batch(self, files: list[DocumentFile]) -> list[DocClassification]:
        prompt = build_classification_prompt(files)
        response = await self.llm.complete_text(prompt, max_tokens=4000)
        if not response:
            return []
        return parse_classification_response(response, files)

    def log_summary(self, knowledge_base: KnowledgeBase) -> None:
        logger.info("📊 Classification Summary:")
        logger.info(f"   Total files: {knowledge_base.total_files}")
        logger.info(f"   High sensitivity files: {knowledge_base.high_sensitivity_files}")
        logger.info(f"   High staleness files: {knowledge_base.high_staleness_files}")
        logger.info(f"   High risk files: {knowledge_base.high_risk_files}")
        logger.info(f"   Average confidence: {knowledge_base.avg_confidence}")

    def outputs(self, knowledge_base: KnowledgeBase) -> dict[str, Any]:
        """Step outputs for the workflow."""
        return {
            "knowledge-base-path": str(self.output_path),
            "classified-files-count": knowledge_base.total_files,
            "high-sensitivity-files": knowledge_base.high_sensitivity_files,
        }
