"""Documentation drift detection for pull requests."""

from docdrift.services.drift.detective import DriftDetective
from docdrift.services.drift.scope import POLICIES, AnalysisScope, ScopePolicy

__all__ = ["DriftDetective", "AnalysisScope", "ScopePolicy", "POLICIES"]
