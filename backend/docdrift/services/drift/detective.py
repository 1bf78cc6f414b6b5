"""Documentation drift detective.

Orchestrates one PR analysis: load the knowledge base, read the PR's code
changes, select candidate docs, ask the LLM which are outdated and how, then
comment on the PR.
"""

import asyncio
import logging
import re
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from docdrift.core.config import ConfigurationError
from docdrift.schemas.drift import AffectedDoc, DocDriftResult, IdentifiedDoc, PRDiff
from docdrift.schemas.knowledge_base import DocClassification, KnowledgeBase
from docdrift.services.drift.candidates import select_candidates
from docdrift.services.drift.prompts import build_analysis_prompt, build_identification_prompt
from docdrift.services.drift.report import (
    NO_ISSUES_COMMENT,
    DriftReport,
    high_priority_count,
    total_issues,
)
from docdrift.services.drift.scope import AnalysisScope
from docdrift.services.github import GitHubAPIError, GitHubService, split_repository
from docdrift.services.llm_gateway import LLMGateway
from docdrift.services.llm_json import LLMResponseParseError, parse_llm_json, preview

logger = logging.getLogger(__name__)

DEFAULT_KNOWLEDGE_BASE_PATH = ".github/docs-knowledge-base.json"
DOC_FILE_RE = re.compile(r"\.(md|markdown|rst|txt)$", re.IGNORECASE)

ANALYSIS_BATCH_SIZE = 5
BATCH_PAUSE_SECONDS = 1.0
MAX_CONTENT_CHARS = 4_000
COMMENT_MODES = ("comment", "review")


def is_code_file(file: dict[str, Any]) -> bool:
    """True for changed, non-removed files that aren't documentation."""
    return (
        not DOC_FILE_RE.search(file.get("filename", ""))
        and file.get("status") != "removed"
        and (file.get("changes") or 0) > 0
    )


def build_pr_diff(pr_files: list[dict[str, Any]]) -> PRDiff:
    code_files = [f for f in pr_files if is_code_file(f)]
    return PRDiff(
        pr_files=pr_files,
        code_files=code_files,
        total_additions=sum(f.get("additions") or 0 for f in code_files),
        total_deletions=sum(f.get("deletions") or 0 for f in code_files),
        modified_paths=[f["filename"] for f in code_files],
    )


def parse_identification_response(
    response: str,
    candidates: list[DocClassification],
) -> list[AffectedDoc]:
    """Match the identification reply back to candidate docs.

    Unknown paths are dropped. Low-likelihood docs are kept but flagged.
    The result is sorted by priority, then with high likelihood first.
    """
    try:
        identified = parse_llm_json(response)
    except LLMResponseParseError as e:
        logger.warning(f"⚠️  Error parsing identification response: {e}")
        logger.info(f"📋 Raw response preview: {preview(response)}")
        return []

    if not isinstance(identified, list):
        logger.warning("⚠️  Identification response is not a JSON array")
        return []

    logger.info(f"✅ Successfully parsed AI response with {len(identified)} document assessments")

    by_path = {doc.path: doc for doc in candidates}
    affected: list[AffectedDoc] = []
    low_likelihood: list[IdentifiedDoc] = []

    for raw in identified:
        if not isinstance(raw, dict):
            continue
        try:
            entry = IdentifiedDoc.model_validate(raw)
        except ValidationError:
            logger.warning(f"⚠️  Skipping malformed assessment: {raw}")
            continue

        doc = by_path.get(entry.path) if entry.path else None
        if doc is None:
            logger.warning(f"⚠️  AI referenced unknown document: {entry.path}")
            continue

        if entry.likelihood == "low":
            low_likelihood.append(entry)
            affected.append(
                AffectedDoc(
                    doc=doc,
                    likelihood=entry.likelihood,
                    reasoning=entry.reasoning,
                    priority=entry.priority if entry.priority is not None else 1,
                    low_confidence=True,
                )
            )
            continue

        affected.append(
            AffectedDoc(
                doc=doc,
                likelihood=entry.likelihood,
                reasoning=entry.reasoning,
                priority=entry.priority if entry.priority is not None else 2,
            )
        )

    logger.info("📊 AI Analysis Results:")
    logger.info(f"   - Total assessments: {len(identified)}")
    logger.info(f"   - Flagged as potentially affected: {len(affected)}")
    logger.info(f"   - Low likelihood: {len(low_likelihood)}")
    for entry in low_likelihood:
        logger.info(f"   - {entry.path}: {entry.reasoning}")

    return sorted(affected, key=lambda d: (-d.priority, 0 if d.likelihood == "high" else 1))


def parse_analysis_response(response: str) -> list[DocDriftResult]:
    """Parse and normalize the analysis reply."""
    try:
        parsed = parse_llm_json(response)
    except LLMResponseParseError as e:
        logger.warning(f"⚠️  Error parsing analysis response: {e}")
        logger.info(f"📋 Raw response preview: {preview(response)}")
        return []

    if isinstance(parsed, dict):
        parsed = [parsed]
    if not isinstance(parsed, list):
        logger.warning("⚠️  Analysis response is not a JSON array")
        return []

    results: list[DocDriftResult] = []
    for item in parsed:
        if not isinstance(item, dict):
            continue
        try:
            results.append(DocDriftResult.model_validate(item))
        except ValidationError:
            logger.warning(f"⚠️  Skipping malformed analysis entry: {preview(str(item))}")

    logger.info(f"✅ Successfully parsed and normalized analysis response with {len(results)} files")
    logger.info(f"📊 Total issues found: {total_issues(results)}")
    return results


def load_knowledge_base(path: str | Path) -> KnowledgeBase | None:
    """Load the knowledge base, or None when it is missing or unreadable."""
    path = Path(path)
    if not path.exists():
        logger.warning(f"⚠️  Knowledge base not found at {path}")
        logger.info("💡 Run the documentation knowledge base classifier first")
        return None

    try:
        knowledge_base = KnowledgeBase.load(path)
    except ValueError as e:
        logger.warning(f"⚠️  Error parsing knowledge base: {e}")
        return None

    logger.info("📚 Loaded knowledge base:")
    logger.info(f"   - Total documented files: {len(knowledge_base.files)}")
    logger.info(f"   - Generated: {knowledge_base.generated_at or 'unknown'}")
    logger.info(f"   - Confidence: {knowledge_base.avg_confidence}")
    if knowledge_base.files:
        distribution = ", ".join(
            f"level {level}: {count}" for level, count in knowledge_base.sensitivity_histogram().items()
        )
        logger.info(f"   - Sensitivity distribution: {distribution}")
    return knowledge_base


class DriftDetective:
    """Detects documentation drift for a single pull request."""

    def __init__(
        self,
        repository: str,
        pr_number: int | None,
        github: GitHubService,
        llm: LLMGateway,
        knowledge_base_path: str | Path = DEFAULT_KNOWLEDGE_BASE_PATH,
        sensitivity_threshold: int = 2,
        comment_mode: str = "comment",
        max_docs: int = 20,
        analysis_scope: AnalysisScope | str | None = AnalysisScope.MEDIUM,
        batch_pause: float = BATCH_PAUSE_SECONDS,
    ):
        if not repository:
            raise ConfigurationError("Repository is required")
        if not pr_number:
            raise ConfigurationError("PR number is required")
        try:
            self.owner, self.repo = split_repository(repository)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        self.repository = repository
        self.pr_number = int(pr_number)
        self.github = github
        self.llm = llm
        self.knowledge_base_path = Path(knowledge_base_path)
        self.sensitivity_threshold = int(sensitivity_threshold)
        self.comment_mode = comment_mode
        self.max_docs = int(max_docs)
        if isinstance(analysis_scope, AnalysisScope):
            self.scope = analysis_scope
        else:
            self.scope = AnalysisScope.from_string(analysis_scope)
        self.policy = self.scope.policy
        self.batch_pause = batch_pause
        self._head_branch: str | None = None
        self._pr_info_loaded = False

    async def run(self) -> list[DocDriftResult]:
        """Analyze the PR and post the results.

        Returns:
            Per-document analysis results; empty when there was nothing to do.
        """
        logger.info(f"🔍 Analyzing PR #{self.pr_number} for documentation drift...")

        knowledge_base = load_knowledge_base(self.knowledge_base_path)
        if knowledge_base is None:
            return []

        pr_diff = await self.get_pr_diff()
        if pr_diff is None:
            return []

        affected = await self.identify_affected_docs(pr_diff, knowledge_base)
        if not affected:
            meeting = sum(
                1 for f in knowledge_base.files if f.code_sensitivity_level >= self.sensitivity_threshold
            )
            logger.info("✅ No potentially affected documentation found")
            logger.info("💡 Analysis Summary:")
            logger.info(f"   - Knowledge base contains {len(knowledge_base.files)} documentation files")
            logger.info(
                f"   - {meeting} files met sensitivity threshold (>= {self.sensitivity_threshold})"
            )
            await self.post_comment(NO_ISSUES_COMMENT)
            return []

        logger.info(f"📄 Found {len(affected)} potentially affected documentation files")
        results = await self.analyze_affected_docs(affected, pr_diff)
        await self.post_results(results)
        self.log_summary(results)
        return results

    async def get_pr_diff(self) -> PRDiff | None:
        """Fetch PR files and keep the changed code files."""
        try:
            pr_files = await self.github.list_pull_request_files(self.owner, self.repo, self.pr_number)
        except (GitHubAPIError, httpx.HTTPError) as e:
            logger.warning(f"⚠️  GitHub API error: {e}")
            return None
        return build_pr_diff(pr_files)

    async def identify_affected_docs(
        self,
        pr_diff: PRDiff,
        knowledge_base: KnowledgeBase,
    ) -> list[AffectedDoc]:
        logger.info("📋 Starting documentation drift analysis...")
        logger.info(
            f"🔍 Sensitivity threshold: {self.sensitivity_threshold} "
            f"(analyzing docs with code-sensitivity >= {self.sensitivity_threshold})"
        )
        logger.info(f"📏 Analysis scope: {self.scope.value} ({self.policy.description})")
        logger.info(f"📊 Total files in knowledge base: {len(knowledge_base.files)}")

        selection = select_candidates(
            knowledge_base.files, pr_diff, self.sensitivity_threshold, self.policy
        )
        candidates = selection.all
        if not candidates:
            logger.info("ℹ️  No documentation files meet the criteria")
            logger.info("   Consider lowering the threshold if you expect more files to be analyzed")
            return []

        logger.info("🤖 Using AI to analyze which docs might be affected by PR changes...")
        logger.info(f"📝 PR contains {len(pr_diff.code_files)} code file changes:")
        for f in pr_diff.code_files[:10]:
            logger.info(f"   - {f['filename']} (+{f.get('additions', 0)}/-{f.get('deletions', 0)})")
        if len(pr_diff.code_files) > 10:
            logger.info("   ... (showing first 10 files)")

        prompt = build_identification_prompt(candidates, pr_diff, self.policy)
        response = await self.llm.complete_text(prompt, max_tokens=3000)
        if not response:
            return []

        affected = parse_identification_response(response, candidates)
        logger.info(f"🎯 AI identified {len(affected)} potentially affected docs:")
        for doc in affected:
            logger.info(f"   - {doc.path} (likelihood: {doc.likelihood}, priority: {doc.priority})")

        limited = affected[:self.max_docs]
        if len(limited) < len(affected):
            logger.info(f"⚠️  Limited analysis to top {self.max_docs} docs (configured max-docs limit)")
        return limited

    async def analyze_affected_docs(
        self,
        affected: list[AffectedDoc],
        pr_diff: PRDiff,
    ) -> list[DocDriftResult]:
        """Analyze affected docs in batches."""
        results: list[DocDriftResult] = []
        for start in range(0, len(affected), ANALYSIS_BATCH_SIZE):
            batch = affected[start:start + ANALYSIS_BATCH_SIZE]
            results.extend(await self.analyze_batch(batch, pr_diff))
            await asyncio.sleep(self.batch_pause)
        return results

    async def analyze_batch(self, batch: list[AffectedDoc], pr_diff: PRDiff) -> list[DocDriftResult]:
        contents = {doc.path: await self.fetch_doc_content(doc.path) for doc in batch}
        prompt = build_analysis_prompt(batch, contents, pr_diff)

        response = await self.llm.complete_text(prompt, max_tokens=3000)
        if not response:
            return []

        results = parse_analysis_response(response)
        low_confidence_paths = {doc.path for doc in batch if doc.low_confidence}
        for result in results:
            if result.path in low_confidence_paths:
                result.analysis_metadata = {"low_confidence": True}
        return results

    async def fetch_doc_content(self, path: str) -> str | None:
        """Current doc content, truncated for the prompt."""
        try:
            content = await self.github.get_file_content(self.owner, self.repo, path)
        except (GitHubAPIError, httpx.HTTPError, ValueError) as e:
            logger.warning(f"⚠️  Error fetching {path}: {e}")
            return None
        return content[:MAX_CONTENT_CHARS]

    async def head_branch(self) -> str | None:
        """PR head branch, fetched once."""
        if not self._pr_info_loaded:
            self._pr_info_loaded = True
            try:
                pr = await self.github.get_pull_request(self.owner, self.repo, self.pr_number)
                self._head_branch = pr["head"]["ref"]
            except (GitHubAPIError, httpx.HTTPError, KeyError, TypeError) as e:
                logger.warning(f"⚠️  Could not load PR details: {e}")
        return self._head_branch

    async def post_results(self, results: list[DocDriftResult]) -> None:
        if not results:
            return

        body = DriftReport(self.repository, await self.head_branch()).render(results)

        if self.comment_mode == "comment":
            await self.post_comment(body)
        elif self.comment_mode == "review":
            await self.post_review(body)
        else:
            logger.warning(f"⚠️  Unknown comment mode: {self.comment_mode}")

    async def post_comment(self, body: str) -> None:
        try:
            await self.github.create_issue_comment(self.owner, self.repo, self.pr_number, body)
        except (GitHubAPIError, httpx.HTTPError) as e:
            logger.warning(f"⚠️  Failed to post PR comment: {e}")
            return
        logger.info("✅ Posted analysis results as PR comment")

    async def post_review(self, body: str) -> None:
        try:
            await self.github.create_pull_request_review(
                self.owner, self.repo, self.pr_number, body, event="COMMENT"
            )
        except (GitHubAPIError, httpx.HTTPError) as e:
            logger.warning(f"⚠️  Failed to post PR review: {e}")
            return
        logger.info("✅ Posted analysis results as PR review")

    def log_summary(self, results: list[DocDriftResult]) -> None:
        logger.info("📊 Analysis Summary:")
        logger.info(f"   Files analyzed: {len(results)}")
        logger.info(f"   Potential updates: {total_issues(results)}")
        logger.info(f"   High priority: {high_priority_count(results)}")

    @staticmethod
    def outputs(results: list[DocDriftResult]) -> dict[str, Any]:
        """Step outputs for the workflow."""
        return {
            "docs-analyzed": len(results),
            "potential-updates-found": total_issues(results),
            "high-priority-updates": high_priority_count(results),
        }
