"""Tests for normalization of LLM drift replies."""

from docdrift.schemas.drift import (
    CandidateSelection,
    DocDriftResult,
    DriftIssue,
    IdentifiedDoc,
)
from docdrift.schemas.knowledge_base import DocClassification


class TestDriftIssue:
    def test_accepts_short_field_names(self):
        issue = DriftIssue.model_validate(
            {"section": "Install", "issue": "Old command.", "suggestion": "Use the new one."}
        )

        assert issue.section_name == "Install"
        assert issue.outdated_content == "Old command."
        assert issue.suggested_change == "Use the new one."
        assert issue.severity == "medium"

    def test_fills_defaults(self):
        issue = DriftIssue.model_validate({"section_name": None, "line_reference": None})

        assert issue.section_name == "Unknown section"
        assert issue.line_reference == ""
        assert issue.outdated_content == "Content may be outdated"
        assert issue.suggested_change == "Review and update as needed"

    def test_long_fields_warn(self, caplog):
        DriftIssue.model_validate({"outdated_content": "x" * 201})
        assert "Long outdated_content field detected" in caplog.text

    def test_low_severity(self):
        assert DriftIssue(severity="low").is_low_severity
        assert not DriftIssue(severity="high").is_low_severity


class TestDocDriftResult:
    def test_defaults_and_issue_filtering(self):
        result = DocDriftResult.model_validate(
            {"path": None, "issues": [{"issue": "a"}, "not an issue", None]}
        )

        assert result.path == "unknown"
        assert result.overall_priority == "medium"
        assert len(result.issues) == 1

    def test_null_issues(self):
        assert DocDriftResult.model_validate({"path": "a.md", "issues": None}).issues == []

    def test_non_string_path_and_priority_are_coerced(self):
        result = DocDriftResult.model_validate(
            {"path": 7, "issues": "none", "overall_priority": 3, "analysis_metadata": "x"}
        )

        assert result.path == "7"
        assert result.overall_priority == "3"
        assert result.issues == []
        assert result.analysis_metadata is None

    def test_low_confidence_from_metadata(self):
        assert DocDriftResult(path="a.md", analysis_metadata={"low_confidence": True}).low_confidence
        assert not DocDriftResult(path="a.md").low_confidence


class TestIdentifiedDoc:
    def test_numeric_string_priority(self):
        assert IdentifiedDoc.model_validate({"path": "a.md", "priority": "3"}).priority == 3

    def test_non_numeric_priority_dropped(self):
        assert IdentifiedDoc.model_validate({"path": "a.md", "priority": "urgent"}).priority is None


class TestCandidateSelection:
    def test_all_and_len(self):
        doc = DocClassification(path="a.md", code_sensitivity_level=1, staleness_risk=1)
        other = DocClassification(path="b.md", code_sensitivity_level=1, staleness_risk=1)
        selection = CandidateSelection(primary=[doc], tertiary=[other])

        assert [d.path for d in selection.all] == ["a.md", "b.md"]
        assert len(selection) == 2
