"""Pydantic schemas for request/response validation and LLM replies."""

from docdrift.schemas.drift import (
    AffectedDoc,
    CandidateSelection,
    DocDriftResult,
    DriftIssue,
    IdentifiedDoc,
    PRDiff,
)
from docdrift.schemas.knowledge_base import (
    DocClassification,
    KnowledgeBase,
)
from docdrift.schemas.post import (
    PostCreate,
    PostResponse,
    PostUpdate,
)

__all__ = [
    # Knowledge base
    "DocClassification",
    "KnowledgeBase",
    # Drift detection
    "PRDiff",
    "CandidateSelection",
    "IdentifiedDoc",
    "AffectedDoc",
    "DriftIssue",
    "DocDriftResult",
    # Posts
    "PostCreate",
    "PostUpdate",
    "PostResponse",
]
