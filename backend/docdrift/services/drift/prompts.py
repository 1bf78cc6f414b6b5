"""Prompt builders for the two drift-detection LLM passes."""

import json

from docdrift.schemas.drift import AffectedDoc, PRDiff
from docdrift.schemas.knowledge_base import DocClassification
from docdrift.services.drift.scope import ScopePolicy

MAX_IDENTIFICATION_PATHS = 20
MAX_IDENTIFICATION_DOCS = 30
MAX_ANALYSIS_PATHS = 15


def _bullets(paths: list[str]) -> str:
    return "\n".join(f"- {p}" for p in paths)


def build_identification_prompt(
    docs: list[DocClassification],
    pr_diff: PRDiff,
    policy: ScopePolicy,
) -> str:
    """Ask which candidate documents the PR may have made incorrect."""
    changed_files = pr_diff.modified_paths[:MAX_IDENTIFICATION_PATHS]
    docs_summary = [
        {
            "path": doc.path,
            "technical_patterns": doc.technical_patterns,
            "doc_category": doc.doc_category,
            "key_indicators": doc.key_indicators,
        }
        for doc in docs[:MAX_IDENTIFICATION_DOCS]
    ]

    return f"""You are a documentation drift detection expert. Determine which documentation files might contain OUTDATED content due to the specific code changes in this PR.

## Pull Request Changes
**Files modified:** {len(changed_files)} files
**Key changed files:**
{_bullets(changed_files)}

**Change summary:**
- {pr_diff.total_additions} lines added
- {pr_diff.total_deletions} lines deleted

## Documentation Files to Evaluate
{json.dumps(docs_summary, indent=2)}

## FOCUS ON DRIFT DETECTION

Only flag documentation that is likely to contain FACTUALLY INCORRECT information due to these specific changes. The key test is: **Would a user following this documentation encounter broken code, wrong behavior, or incorrect information?**

Ask yourself these specific questions:

1. **Does this doc contain exact references to changed files/functions/classes?**
2. **Are there code examples that would now fail or behave differently?**
3. **Does it describe APIs/endpoints/methods that were modified or removed?**
4. **Are there step-by-step instructions that would no longer work?**
5. **Does it reference specific configuration values, paths, or parameters that changed?**

**CRITICAL: Being "related" is NOT enough - content must be factually wrong**

**DO NOT flag docs just because:**
- They're about the same general topic/area as the changes
- They could benefit from general improvements or additions
- They're missing new information (unless old info was specifically removed)
- They could have more examples added
- They mention the same files/components but describe different aspects that remain valid
- They're high-level guides that remain accurate despite implementation changes

**Analysis strategy**: {policy.ai_strategy}

Respond with a JSON array of documentation that likely contains OUTDATED content:
```json
[
  {{
    "path": "docs/api.md",
    "likelihood": "high",
    "reasoning": "Contains specific code examples calling AuthController.authenticate() which was renamed to verify() in this PR - users would get method not found errors",
    "priority": 3
  }}
]
```

Likelihood: "high" (likely contains outdated code/references), "medium" (might contain outdated info), "low" (small chance of outdated content)
Priority: 1-3 (3 = most important to check for outdated content)
"""


def build_analysis_prompt(
    docs: list[AffectedDoc],
    contents: dict[str, str | None],
    pr_diff: PRDiff,
) -> str:
    """Ask for concrete outdated passages in each affected document."""
    changed_files = pr_diff.modified_paths[:MAX_ANALYSIS_PATHS]
    docs_for_analysis = [
        {
            "path": affected.path,
            "doc_category": affected.doc.doc_category,
            "technical_patterns": affected.doc.technical_patterns,
            "analysis_reasoning": affected.reasoning,
            "content_preview": contents.get(affected.path),
        }
        for affected in docs
    ]

    return f"""You are a documentation drift detection expert. Your job is to identify content that has become OUTDATED due to the specific code changes in this PR.

## Code Changes in This PR
**Modified files:**
{_bullets(changed_files)}

## Documentation Files to Analyze
{json.dumps(docs_for_analysis, indent=2)}

## CRITICAL INSTRUCTIONS

**Your ONLY job is to identify content that has become FACTUALLY INCORRECT due to these specific code changes.**

**The key test: Would a user following this documentation encounter broken functionality, wrong behavior, or get incorrect results?**

**ONLY flag content that:**
1. **Contains exact code examples that now fail or behave differently** - Look for specific function calls, imports, syntax
2. **Describes specific processes/workflows that these changes broke** - Not general processes, but exact steps that no longer work
3. **References specific files, classes, methods, or endpoints that were renamed/removed/changed** - Must be exact matches, not just similar
4. **Has configuration examples with values/paths/settings that these changes invalidated** - Specific config that would now cause errors
5. **Contains URLs, endpoints, or API calls that these changes modified** - Must be specific technical references

**DO NOT flag content that:**
- Is about the same general topic but describes different aspects that remain valid
- Mentions the same components but in ways that are still accurate
- Could be enhanced with new information (unless old information is now wrong)
- Is missing coverage of new features (unless it explicitly describes old behavior)
- Is a high-level guide that remains conceptually correct despite implementation changes
- Uses general terminology that might overlap with changed code but describes valid concepts

**Example of what TO flag:** "Call AuthController.authenticate(token)" when that method was renamed to verify()
**Example of what NOT to flag:** "This app uses authentication" when AuthController methods changed but authentication still exists

## RESPONSE FORMAT REQUIREMENTS

For each issue you identify:
- `section_name`: Keep it simple - just the section name, NO line numbers
- `line_reference`: Leave empty "" (do not make up line numbers)
- `outdated_content`: ONE clear sentence describing what is now FACTUALLY WRONG or BROKEN
- `suggested_change`: ONE clear sentence describing how to fix the broken/incorrect content
- Keep both sentences concise and actionable
- Focus on what would fail or mislead users, not what could be improved

**If the documentation doesn't contain anything that's specifically broken or factually incorrect due to these changes, return an empty issues array.**

Respond with JSON using this EXACT schema:
```json
[
  {{
    "path": "docs/api.md",
    "issues": [
      {{
        "section_name": "Authentication section",
        "line_reference": "",
        "outdated_content": "Shows code example `AuthController.authenticate(token)` but this method was renamed to `verify()` and would now throw a NoMethodError",
        "suggested_change": "Update the code example to use `AuthController.verify(token)` instead of the removed authenticate method",
        "severity": "high"
      }}
    ],
    "overall_priority": "high"
  }}
]
```

**Required fields:**
- `section_name`: Name of the section (NO line numbers unless you can see them in the content)
- `line_reference`: Leave empty "" unless you can identify specific lines from the provided content
- `outdated_content`: ONE sentence describing what is outdated
- `suggested_change`: ONE sentence describing the fix
- `severity`: "high" (broken examples/links), "medium" (misleading info), "low" (minor inaccuracies)

Severity: "high", "medium", "low"
Priority: "high", "medium", "low"
"""
