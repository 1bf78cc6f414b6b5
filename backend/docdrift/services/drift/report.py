"""Markdown rendering of drift analysis results for PR comments."""

import os
import re
from collections import defaultdict
from dataclasses import dataclass

from docdrift.schemas.drift import DocDriftResult, DriftIssue

HEADER = "## 📚 Documentation Drift Analysis"

FOOTER = (
    "---\n"
    "*This analysis was performed by the Documentation Drift Detective action. "
    "Please review the suggestions and update documentation as needed.*\n"
)

NO_ISSUES_COMMENT = f"""{HEADER}

✅ **No documentation updates needed**

I analyzed this pull request against the documentation knowledge base and found no documentation files that are likely to be affected by these changes.

---
*This analysis was performed by the Documentation Drift Detective action using AI-powered classification.*
"""

_DIGITS_RE = re.compile(r"\d+")


@dataclass
class IssueItem:
    """An issue together with the file it belongs to."""

    file_path: str
    issue: DriftIssue
    low_confidence: bool = False


def build_file_link(
    repository: str,
    head_branch: str | None,
    file_path: str,
    section_name: str | None = None,
    line_reference: str | None = None,
) -> str:
    """Markdown link to a doc on the PR head branch.

    A line reference with one number anchors that line, with two numbers
    anchors the range. Without a head branch the bare path is returned.
    """
    if not head_branch:
        return file_path

    url = f"https://github.com/{repository}/blob/{head_branch}/{file_path}"
    if line_reference:
        lines = _DIGITS_RE.findall(line_reference)
        if len(lines) == 2:
            url = f"{url}#L{lines[0]}-L{lines[1]}"
        elif len(lines) == 1:
            url = f"{url}#L{lines[0]}"

    name = os.path.basename(file_path)
    display_text = f"{name} ({section_name})" if section_name else name
    return f"[{display_text}]({url})"


def total_issues(results: list[DocDriftResult]) -> int:
    return sum(len(r.issues) for r in results)


def high_priority_count(results: list[DocDriftResult]) -> int:
    return sum(1 for r in results if r.overall_priority == "high")


class DriftReport:
    """Renders analysis results into a PR comment body."""

    def __init__(self, repository: str, head_branch: str | None):
        self.repository = repository
        self.head_branch = head_branch

    def render(self, results: list[DocDriftResult]) -> str:
        issue_count = total_issues(results)

        body = (
            f"{HEADER}\n\n"
            f"**Analysis Summary:** {len(results)} files analyzed, "
            f"{issue_count} potential updates identified\n\n"
        )

        if issue_count > 0:
            body += self.format_recommendations(results)
        else:
            body += "No documentation updates needed.\n\n"

        return body + FOOTER

    def format_recommendations(self, results: list[DocDriftResult]) -> str:
        """Main section for confident high/medium issues, collapsed block for the rest."""
        main: list[IssueItem] = []
        low_severity: list[IssueItem] = []
        low_confidence: list[IssueItem] = []

        for result in results:
            for issue in result.issues:
                item = IssueItem(result.path, issue, result.low_confidence)
                if item.low_confidence:
                    low_confidence.append(item)
                elif issue.is_low_severity:
                    low_severity.append(item)
                else:
                    main.append(item)

        content = ""
        if main:
            content += self.format_issues_by_file(main)

        suppressed = low_severity + low_confidence
        if suppressed:
            if low_confidence and low_severity:
                summary = f"low confidence ({len(low_confidence)}) and low priority ({len(low_severity)})"
            elif low_confidence:
                summary = f"low confidence ({len(low_confidence)})"
            else:
                summary = f"low priority ({len(low_severity)})"

            content += "\n<details>\n"
            content += f"<summary>Suggestions suppressed due to {summary}</summary>\n\n"
            content += self.format_issues_by_file(suppressed)
            content += "</details>\n"

        return content + "\n"

    def format_issues_by_file(self, items: list[IssueItem]) -> str:
        by_file: dict[str, list[IssueItem]] = defaultdict(list)
        for item in items:
            by_file[item.file_path].append(item)

        content = ""
        for file_path, file_items in by_file.items():
            content += f"**{file_path}**\n"
            for item in file_items:
                issue = item.issue
                link = build_file_link(
                    self.repository,
                    self.head_branch,
                    file_path,
                    issue.section_name,
                    issue.line_reference,
                )
                content += f"* {link}: {issue.outdated_content} {issue.suggested_change}\n"
            content += "\n"
        return content
