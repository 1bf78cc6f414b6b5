"""Multi-tier candidate selection.

Narrows the knowledge base to the documents worth showing the LLM for a given
pull request. Tiers are filled in order (primary, secondary, path, tertiary)
and no document is selected twice.
"""

import logging
import os

from docdrift.schemas.drift import CandidateSelection, PRDiff
from docdrift.schemas.knowledge_base import DocClassification
from docdrift.services.drift.patterns import extract_technical_patterns
from docdrift.services.drift.scope import ScopePolicy

logger = logging.getLogger(__name__)


def changed_path_parts(paths: list[str]) -> list[str]:
    """Directory names and extension-less file stems of changed paths, unique."""
    parts: dict[str, None] = {}
    for path in paths:
        segments = path.split("/")
        for directory in segments[:-1]:
            if directory:
                parts.setdefault(directory, None)
        stem = os.path.splitext(segments[-1])[0]
        if stem:
            parts.setdefault(stem, None)
    return list(parts)


def _mentions_part(doc: DocClassification, parts: list[str]) -> bool:
    doc_path = doc.path.lower()
    indicators = [i.lower() for i in doc.key_indicators]
    for part in parts:
        needle = part.lower()
        if needle in doc_path or any(needle in indicator for indicator in indicators):
            return True
    return False


def select_candidates(
    files: list[DocClassification],
    pr_diff: PRDiff,
    threshold: int,
    policy: ScopePolicy,
) -> CandidateSelection:
    """Pick candidate documents for a pull request.

    Args:
        files: Knowledge-base file entries.
        pr_diff: Code-file view of the PR.
        threshold: Minimum code sensitivity for primary candidates.
        policy: Limits for the configured analysis scope.

    Returns:
        CandidateSelection with each tier populated.
    """
    selection = CandidateSelection()
    taken: set[str] = set()

    def take(docs: list[DocClassification], limit: int | None = None) -> list[DocClassification]:
        picked: list[DocClassification] = []
        for doc in docs:
            if limit is not None and len(picked) >= limit:
                break
            if doc.path in taken:
                continue
            taken.add(doc.path)
            picked.append(doc)
        return picked

    changed_patterns = extract_technical_patterns(pr_diff.code_files)

    selection.primary = take([d for d in files if d.code_sensitivity_level >= threshold])

    if policy.include_secondary and threshold > 0 and changed_patterns:
        changed = set(changed_patterns)
        selection.secondary = take(
            [
                d for d in files
                if d.code_sensitivity_level < threshold and changed.intersection(d.technical_patterns)
            ]
        )

    if policy.include_path:
        parts = changed_path_parts(pr_diff.modified_paths)
        if parts:
            selection.path = take(
                [d for d in files if _mentions_part(d, parts)],
                limit=policy.max_path_candidates,
            )

    if policy.include_tertiary:
        tertiary: list[DocClassification] = []

        if policy.include_small_pr_stale and len(pr_diff.code_files) <= policy.small_pr_threshold:
            stale = take(
                [d for d in files if d.staleness_risk >= policy.staleness_threshold],
                limit=policy.max_stale_candidates,
            )
            if stale:
                logger.info(f"🕰️  Small PR detected: including {len(stale)} high-staleness docs as tertiary candidates")
            tertiary += stale

        if len(tertiary) < policy.max_very_stale_candidates:
            very_stale = take(
                [d for d in files if d.staleness_risk == 3],
                limit=policy.max_very_stale_candidates - len(tertiary),
            )
            if very_stale:
                logger.info(f"⚠️  Including {len(very_stale)} very stale docs as tertiary candidates")
            tertiary += very_stale

        if policy.include_api_docs and any("API" in p for p in changed_patterns):
            api_docs = take(
                [
                    d for d in files
                    if d.category_contains("API") and d.confidence_score >= policy.min_api_confidence
                ],
                limit=policy.max_api_candidates,
            )
            if api_docs:
                logger.info(
                    f"🔌 API changes detected: including {len(api_docs)} high-confidence API docs as tertiary candidates"
                )
            tertiary += api_docs

        if policy.include_setup_docs and any(
            "Configuration" in p or "Dependencies" in p for p in changed_patterns
        ):
            setup_docs = take(
                [d for d in files if d.category_contains("Setup", "Installation")],
                limit=policy.max_setup_candidates,
            )
            if setup_docs:
                logger.info(
                    f"⚙️  Configuration changes detected: including {len(setup_docs)} "
                    "setup/installation docs as tertiary candidates"
                )
            tertiary += setup_docs

        selection.tertiary = tertiary

    _log_selection(selection, threshold, changed_patterns)
    return selection


def _log_selection(selection: CandidateSelection, threshold: int, changed_patterns: list[str]) -> None:
    logger.info(f"🎯 Primary candidates (sensitivity >= {threshold}): {len(selection.primary)}")
    for doc in selection.primary:
        logger.info(
            f"   - {doc.path} (sensitivity: {doc.code_sensitivity_level}, staleness: {doc.staleness_risk})"
        )

    if selection.secondary:
        logger.info(f"🔍 Secondary candidates (lower sensitivity, relevant patterns): {len(selection.secondary)}")
        for doc in selection.secondary:
            matching = [p for p in doc.technical_patterns if p in changed_patterns]
            logger.info(
                f"   - {doc.path} (sensitivity: {doc.code_sensitivity_level}, patterns: {', '.join(matching)})"
            )

    if selection.path:
        logger.info(f"🛤️  Path-based candidates (directory/module name matches): {len(selection.path)}")
        for doc in selection.path:
            logger.info(f"   - {doc.path} (sensitivity: {doc.code_sensitivity_level}, matched components)")

    if selection.tertiary:
        logger.info(f"🎯 Tertiary candidates (edge cases): {len(selection.tertiary)}")
        for doc in selection.tertiary:
            logger.info(
                f"   - {doc.path} (sensitivity: {doc.code_sensitivity_level}, staleness: {doc.staleness_risk})"
            )
