"""Documentation knowledge base schemas.

The knowledge base is a flat JSON snapshot written by the classifier and read
by the drift detective. Each run overwrites it whole.
"""

import json
import logging
from collections import Counter
from datetime import UTC, datetime
from pathlib import Path

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

TOP_N = 10


def utc_now_iso() -> str:
    """Current time as an ISO-8601 string with offset, to the second."""
    return datetime.now(UTC).replace(microsecond=0).isoformat()


class DocClassification(BaseModel):
    """Classification of a single documentation file."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    path: str = Field(..., min_length=1)
    sha: str | None = None
    code_sensitivity_level: int = Field(..., ge=0, le=3)
    staleness_risk: int = Field(
        ...,
        ge=1,
        le=3,
        validation_alias=AliasChoices("staleness_risk", "staleness_risk_level"),
    )
    technical_patterns: list[str] = Field(default_factory=list)
    doc_category: str | None = None
    confidence_score: float = Field(default=0.0, ge=0.0, le=1.0)
    key_indicators: list[str] = Field(default_factory=list)
    classified_at: str | None = None

    @field_validator("technical_patterns", "key_indicators", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        """The classifier sometimes emits null for empty tag lists."""
        return [] if v is None else v

    @field_validator("confidence_score", mode="before")
    @classmethod
    def none_to_zero(cls, v):
        return 0.0 if v is None else v

    def category_contains(self, *needles: str) -> bool:
        """True if the document category contains any of the given words."""
        return bool(self.doc_category) and any(n in self.doc_category for n in needles)


class KnowledgeBase(BaseModel):
    """Repository-level snapshot of documentation classifications."""

    model_config = ConfigDict(extra="ignore")

    repository: str
    generated_at: str = Field(default_factory=utc_now_iso)
    total_files: int = 0

    avg_code_sensitivity: float = 0
    avg_staleness_risk: float = 0
    avg_confidence: float = 0

    high_sensitivity_files: int = 0
    high_staleness_files: int = 0
    high_risk_files: int = 0

    sensitivity_distribution: dict[str, int] = Field(default_factory=dict)
    staleness_distribution: dict[str, int] = Field(default_factory=dict)
    top_patterns: dict[str, int] = Field(default_factory=dict)
    top_categories: dict[str, int] = Field(default_factory=dict)

    files: list[DocClassification] = Field(default_factory=list)

    @classmethod
    def empty(cls, repository: str) -> "KnowledgeBase":
        """Knowledge base for a repository with no classified docs."""
        return cls(repository=repository)

    @classmethod
    def from_classifications(
        cls,
        repository: str,
        files: list[DocClassification],
    ) -> "KnowledgeBase":
        """Build a knowledge base and its aggregate statistics."""
        total = len(files)
        if total == 0:
            return cls.empty(repository)

        sensitivity_counts = Counter(str(f.code_sensitivity_level) for f in files)
        staleness_counts = Counter(str(f.staleness_risk) for f in files)
        pattern_counts = Counter(p for f in files for p in f.technical_patterns)
        category_counts = Counter(f.doc_category for f in files if f.doc_category)

        return cls(
            repository=repository,
            total_files=total,
            avg_code_sensitivity=round(sum(f.code_sensitivity_level for f in files) / total, 2),
            avg_staleness_risk=round(sum(f.staleness_risk for f in files) / total, 2),
            avg_confidence=round(sum(f.confidence_score for f in files) / total, 2),
            high_sensitivity_files=sensitivity_counts.get("3", 0),
            high_staleness_files=staleness_counts.get("3", 0),
            high_risk_files=sum(
                1 for f in files if f.code_sensitivity_level >= 2 and f.staleness_risk >= 2
            ),
            sensitivity_distribution=dict(sensitivity_counts),
            staleness_distribution=dict(staleness_counts),
            top_patterns=dict(pattern_counts.most_common(TOP_N)),
            top_categories=dict(category_counts.most_common(TOP_N)),
            files=files,
        )

    def sensitivity_histogram(self) -> dict[int, int]:
        """Sensitivity counts recomputed from the file entries."""
        return dict(sorted(Counter(f.code_sensitivity_level for f in self.files).items()))

    def save(self, path: str | Path) -> Path:
        """Write the knowledge base as pretty-printed JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.model_dump(mode="json"), indent=2) + "\n", encoding="utf-8")
        return path

    @classmethod
    def load(cls, path: str | Path) -> "KnowledgeBase":
        """Read a knowledge base file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file is not valid JSON or does not match the schema.
        """
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)
