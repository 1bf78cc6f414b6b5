"""Analysis scope policies for candidate selection.

Each scope is a fixed bundle of switches and limits that controls how wide a
net the drift detective casts before asking the LLM.
"""

import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class AnalysisScope(str, Enum):
    """How many candidate docs to consider."""

    NARROW = "narrow"
    MEDIUM = "medium"
    WIDE = "wide"
    AGGRESSIVE = "aggressive"

    @classmethod
    def from_string(cls, value: str | None) -> "AnalysisScope":
        """Parse a scope name, falling back to MEDIUM with a warning."""
        normalized = (value or cls.MEDIUM.value).strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            logger.warning(f"⚠️  Invalid analysis-scope '{value}', defaulting to 'medium'")
            return cls.MEDIUM

    @property
    def policy(self) -> "ScopePolicy":
        return POLICIES[self]


@dataclass(frozen=True)
class ScopePolicy:
    """Candidate-selection limits for one scope."""

    description: str
    ai_strategy: str

    include_secondary: bool
    include_path: bool
    include_tertiary: bool
    include_small_pr_stale: bool
    include_api_docs: bool
    include_setup_docs: bool

    max_path_candidates: int
    small_pr_threshold: int
    staleness_threshold: int
    max_stale_candidates: int
    max_very_stale_candidates: int
    min_api_confidence: float
    max_api_candidates: int
    max_setup_candidates: int


POLICIES: dict[AnalysisScope, ScopePolicy] = {
    AnalysisScope.NARROW: ScopePolicy(
        description="conservative analysis, fewer candidates",
        ai_strategy=(
            "Be very conservative - only flag documentation with explicit, exact references "
            "to the changed code that would now be factually wrong or cause failures. "
            "Require clear evidence of broken functionality."
        ),
        include_secondary=False,
        include_path=False,
        include_tertiary=False,
        include_small_pr_stale=False,
        include_api_docs=False,
        include_setup_docs=False,
        max_path_candidates=3,
        small_pr_threshold=3,
        staleness_threshold=2,
        max_stale_candidates=3,
        max_very_stale_candidates=1,
        min_api_confidence=0.8,
        max_api_candidates=2,
        max_setup_candidates=2,
    ),
    AnalysisScope.MEDIUM: ScopePolicy(
        description="balanced analysis, moderate candidates",
        ai_strategy=(
            "Be selective - flag documentation that contains specific references to the "
            "changed code that would mislead users or cause errors. Focus on concrete drift, "
            "not general relatedness."
        ),
        include_secondary=True,
        include_path=False,
        include_tertiary=True,
        include_small_pr_stale=False,
        include_api_docs=True,
        include_setup_docs=False,
        max_path_candidates=3,
        small_pr_threshold=3,
        staleness_threshold=2,
        max_stale_candidates=3,
        max_very_stale_candidates=2,
        min_api_confidence=0.8,
        max_api_candidates=2,
        max_setup_candidates=2,
    ),
    AnalysisScope.WIDE: ScopePolicy(
        description="comprehensive analysis, many candidates",
        ai_strategy=(
            "Be thorough - include documentation that contains direct references to changed "
            "components where the information would now be incorrect. Still require factual "
            "incorrectness, not just topical overlap."
        ),
        include_secondary=True,
        include_path=True,
        include_tertiary=True,
        include_small_pr_stale=True,
        include_api_docs=True,
        include_setup_docs=True,
        max_path_candidates=5,
        small_pr_threshold=3,
        staleness_threshold=2,
        max_stale_candidates=4,
        max_very_stale_candidates=3,
        min_api_confidence=0.6,
        max_api_candidates=3,
        max_setup_candidates=3,
    ),
    AnalysisScope.AGGRESSIVE: ScopePolicy(
        description="exhaustive analysis, maximum candidates",
        ai_strategy=(
            "Be comprehensive - include any documentation that contains specific technical "
            "details that these changes made factually incorrect. Focus on what would mislead "
            "or break for users, not general improvements."
        ),
        include_secondary=True,
        include_path=True,
        include_tertiary=True,
        include_small_pr_stale=True,
        include_api_docs=True,
        include_setup_docs=True,
        max_path_candidates=10,
        small_pr_threshold=5,
        staleness_threshold=1,
        max_stale_candidates=6,
        max_very_stale_candidates=5,
        min_api_confidence=0.4,
        max_api_candidates=5,
        max_setup_candidates=4,
    ),
}
