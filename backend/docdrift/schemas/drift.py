"""Drift detection schemas.

Pydantic models here normalize the loosely-structured JSON the LLM returns
for the identification and analysis passes. Missing or null fields fall back
to defaults instead of failing validation.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from docdrift.schemas.knowledge_base import DocClassification

logger = logging.getLogger(__name__)

# Length above which a one-sentence field is probably a paragraph
LONG_FIELD_CHARS = 200

DEFAULT_SECTION = "Unknown section"
DEFAULT_OUTDATED = "Content may be outdated"
DEFAULT_SUGGESTION = "Review and update as needed"


def _first_present(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """First non-empty value among ``keys``."""
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return default


@dataclass
class PRDiff:
    """Code-file view of a pull request's changes."""

    pr_files: list[dict[str, Any]]
    code_files: list[dict[str, Any]]
    total_additions: int
    total_deletions: int
    modified_paths: list[str]


@dataclass
class CandidateSelection:
    """Documents selected for identification, by tier."""

    primary: list[DocClassification] = field(default_factory=list)
    secondary: list[DocClassification] = field(default_factory=list)
    path: list[DocClassification] = field(default_factory=list)
    tertiary: list[DocClassification] = field(default_factory=list)

    @property
    def all(self) -> list[DocClassification]:
        """Every candidate, primary first."""
        return self.primary + self.secondary + self.path + self.tertiary

    def __len__(self) -> int:
        return len(self.primary) + len(self.secondary) + len(self.path) + len(self.tertiary)


class IdentifiedDoc(BaseModel):
    """One entry of the identification reply."""

    model_config = ConfigDict(extra="ignore")

    path: str | None = None
    likelihood: str | None = None
    reasoning: str | None = None
    priority: int | None = None

    @model_validator(mode="before")
    @classmethod
    def coerce_priority(cls, data: Any) -> Any:
        """Drop priorities that are not integers so the default applies."""
        if isinstance(data, dict) and data.get("priority") is not None:
            try:
                data = {**data, "priority": int(data["priority"])}
            except (TypeError, ValueError):
                data = {**data, "priority": None}
        return data


@dataclass
class AffectedDoc:
    """A candidate document the LLM considers possibly outdated."""

    doc: DocClassification
    likelihood: str | None
    reasoning: str | None
    priority: int
    low_confidence: bool = False

    @property
    def path(self) -> str:
        return self.doc.path


class DriftIssue(BaseModel):
    """A single outdated passage and its suggested fix."""

    model_config = ConfigDict(extra="ignore")

    section_name: str = DEFAULT_SECTION
    line_reference: str = ""
    outdated_content: str = DEFAULT_OUTDATED
    suggested_change: str = DEFAULT_SUGGESTION
    severity: str = "medium"

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data: Any) -> Any:
        """Accept the short field names and fill missing values."""
        if not isinstance(data, dict):
            return data

        issue = {
            "section_name": str(_first_present(data, "section_name", "section", default=DEFAULT_SECTION)),
            "line_reference": str(_first_present(data, "line_reference", default="")),
            "outdated_content": str(
                _first_present(data, "outdated_content", "issue", default=DEFAULT_OUTDATED)
            ),
            "suggested_change": str(
                _first_present(data, "suggested_change", "suggestion", default=DEFAULT_SUGGESTION)
            ),
            "severity": str(_first_present(data, "severity", default="medium")),
        }

        if len(issue["outdated_content"]) > LONG_FIELD_CHARS:
            logger.warning("⚠️  Long outdated_content field detected - consider shortening")
        if len(issue["suggested_change"]) > LONG_FIELD_CHARS:
            logger.warning("⚠️  Long suggested_change field detected - consider shortening")

        return issue

    @property
    def is_low_severity(self) -> bool:
        return self.severity == "low"


class DocDriftResult(BaseModel):
    """Analysis of one documentation file."""

    model_config = ConfigDict(extra="ignore")

    path: str = "unknown"
    issues: list[DriftIssue] = Field(default_factory=list)
    overall_priority: str = "medium"
    analysis_metadata: dict[str, Any] | None = None

    @model_validator(mode="before")
    @classmethod
    def fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        issues = data.get("issues")
        metadata = data.get("analysis_metadata")
        return {
            **data,
            "path": str(_first_present(data, "path", default="unknown")),
            "overall_priority": str(_first_present(data, "overall_priority", default="medium")),
            "issues": [i for i in issues if isinstance(i, dict)] if isinstance(issues, list) else [],
            "analysis_metadata": metadata if isinstance(metadata, dict) else None,
        }

    @property
    def low_confidence(self) -> bool:
        return bool((self.analysis_metadata or {}).get("low_confidence"))
