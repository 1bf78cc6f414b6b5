"""Tests for PR comment rendering."""

import pytest

from docdrift.schemas.drift import DocDriftResult
from docdrift.services.drift.report import (
    NO_ISSUES_COMMENT,
    DriftReport,
    build_file_link,
    high_priority_count,
    total_issues,
)


def _result(path, *issues, priority="medium", low_confidence=False):
    return DocDriftResult.model_validate(
        {
            "path": path,
            "issues": list(issues),
            "overall_priority": priority,
            "analysis_metadata": {"low_confidence": low_confidence},
        }
    )


def _issue(section, outdated, suggestion, severity="high", line_reference=""):
    return {
        "section_name": section,
        "line_reference": line_reference,
        "outdated_content": outdated,
        "suggested_change": suggestion,
        "severity": severity,
    }


class TestBuildFileLink:
    @pytest.mark.parametrize(
        "line_reference,anchor",
        [("", ""), ("line 10", "#L10"), ("lines 10-20", "#L10-L20"), ("1, 2, 3", "")],
    )
    def test_line_anchors(self, line_reference, anchor):
        link = build_file_link("octo/docs", "feature", "docs/api.md", "Auth", line_reference)
        assert link == f"[api.md (Auth)](https://github.com/octo/docs/blob/feature/docs/api.md{anchor})"

    def test_without_section(self):
        link = build_file_link("octo/docs", "main", "README.md")
        assert link == "[README.md](https://github.com/octo/docs/blob/main/README.md)"

    def test_without_branch_returns_path(self):
        assert build_file_link("octo/docs", None, "docs/api.md", "Auth") == "docs/api.md"


class TestCounts:
    def test_totals(self):
        results = [
            _result("a.md", _issue("A", "x", "y"), _issue("B", "x", "y"), priority="high"),
            _result("b.md"),
        ]
        assert total_issues(results) == 2
        assert high_priority_count(results) == 1


class TestDriftReport:
    def setup_method(self):
        self.report = DriftReport("octo/docs", "feature")

    def test_no_issues(self):
        body = self.report.render([_result("a.md")])

        assert body.startswith("## 📚 Documentation Drift Analysis")
        assert "**Analysis Summary:** 1 files analyzed, 0 potential updates identified" in body
        assert "No documentation updates needed." in body
        assert body.rstrip().endswith("update documentation as needed.*")

    def test_main_issues_grouped_by_file(self):
        body = self.report.render(
            [
                _result(
                    "docs/api.md",
                    _issue("Auth", "Calls authenticate().", "Use verify().", line_reference="12"),
                    _issue("Setup", "Old flag.", "Use --new."),
                    priority="high",
                )
            ]
        )

        assert body.count("**docs/api.md**") == 1
        assert (
            "* [api.md (Auth)](https://github.com/octo/docs/blob/feature/docs/api.md#L12): "
            "Calls authenticate(). Use verify()."
        ) in body
        assert "<details>" not in body

    def test_low_severity_collapsed(self):
        body = self.report.render(
            [_result("a.md", _issue("A", "Minor.", "Tweak.", severity="low"))]
        )

        assert "<summary>Suggestions suppressed due to low priority (1)</summary>" in body
        assert "</details>" in body

    def test_low_confidence_collapsed(self):
        body = self.report.render(
            [
                _result("a.md", _issue("A", "Wrong.", "Fix."), low_confidence=True),
                _result("b.md", _issue("B", "Minor.", "Tweak.", severity="low")),
            ]
        )

        assert (
            "<summary>Suggestions suppressed due to low confidence (1) and low priority (1)</summary>"
        ) in body

    def test_no_issues_comment(self):
        assert "No documentation updates needed" in NO_ISSUES_COMMENT
        assert NO_ISSUES_COMMENT.startswith("## 📚 Documentation Drift Analysis")
