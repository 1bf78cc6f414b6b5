"""Map changed files to technical-pattern tags.

The tags use the same vocabulary the classifier assigns to documents, so the
two can be intersected when picking secondary candidates.
"""

import re
from typing import Any

# Rules are (regex, tags). For path segments and file names the first
# matching rule wins; patch rules all apply independently.
SEGMENT_RULES: list[tuple[re.Pattern, list[str]]] = [
    (re.compile(r"app|application"), ["Application/Core", "Business Logic"]),
    (re.compile(r"controller"), ["API/Routing", "MVC/Controllers", "HTTP/REST", "Request/Response"]),
    (re.compile(r"model"), ["Database/Models", "Data/Validation", "ORM/ActiveRecord", "Business Logic"]),
    (re.compile(r"view|template"), ["UI/Views", "Templates/Rendering", "Frontend/Forms", "User Interface"]),
    (re.compile(r"migration"), ["Database/Schema", "Database/Migrations", "Data Structure"]),
    (re.compile(r"route"), ["API/Routing", "URL/Routing", "Navigation"]),
    (re.compile(r"config"), ["Configuration", "Environment/Setup", "Application/Settings"]),
    (re.compile(r"test|spec"), ["Testing/Unit", "Testing/Integration", "Quality Assurance"]),
    (re.compile(r"api"), ["API/Endpoints", "API/Documentation", "External/Integration"]),
    (re.compile(r"auth"), ["Authentication/Authorization", "Security/Access", "User/Management"]),
    (re.compile(r"job|worker"), ["Background/Jobs", "Processing/Queue", "Async/Operations"]),
    (re.compile(r"mailer"), ["Email/Notifications", "Communication/Messages"]),
    (re.compile(r"helper"), ["Utility/Helpers", "Code/Organization", "DRY/Principles"]),
    (re.compile(r"service"), ["Service/Layer", "Business/Logic", "Architecture/Patterns"]),
    (re.compile(r"lib|library"), ["Library/Code", "Shared/Utilities", "Core/Logic"]),
    (re.compile(r"db|database"), ["Database/Schema", "Data/Persistence", "Storage/Management"]),
    (re.compile(r"public|assets"), ["Static/Assets", "Public/Resources", "Frontend/Assets"]),
]

FILENAME_RULES: list[tuple[re.Pattern, list[str]]] = [
    (re.compile(r"controller", re.I), ["API/Routing", "MVC/Controllers", "HTTP/REST", "Request/Response"]),
    (re.compile(r"model", re.I), ["Database/Models", "Data/Validation", "ORM/ActiveRecord", "Business Logic"]),
    (re.compile(r"view|erb|html", re.I), ["UI/Views", "Templates/Rendering", "Frontend/Forms", "User Interface"]),
    (re.compile(r"migration", re.I), ["Database/Schema", "Database/Migrations", "Data Structure"]),
    (re.compile(r"route", re.I), ["API/Routing", "URL/Routing", "Navigation"]),
    (re.compile(r"config", re.I), ["Configuration", "Environment/Setup", "Application/Settings"]),
    (re.compile(r"test|spec", re.I), ["Testing/Unit", "Testing/Integration", "Quality Assurance"]),
    (re.compile(r"api", re.I), ["API/Endpoints", "API/Documentation", "External/Integration"]),
    (re.compile(r"auth", re.I), ["Authentication/Authorization", "Security/Access", "User/Management"]),
    (re.compile(r"css|scss|style", re.I), ["UI/Styling", "Frontend/CSS", "Visual/Design"]),
    (re.compile(r"js|javascript|ts|typescript", re.I), ["Frontend/JavaScript", "UI/Interaction", "Client/Side"]),
    (re.compile(r"helper", re.I), ["Utility/Helpers", "Code/Organization", "DRY/Principles"]),
    (re.compile(r"seed", re.I), ["Database/Seeds", "Sample/Data", "Initial/Setup"]),
    (re.compile(r"lib", re.I), ["Library/Code", "Shared/Utilities", "Core/Logic"]),
    (re.compile(r"service", re.I), ["Service/Layer", "Business/Logic", "Architecture/Patterns"]),
    (re.compile(r"job|worker", re.I), ["Background/Jobs", "Processing/Queue", "Async/Operations"]),
    (re.compile(r"mailer", re.I), ["Email/Notifications", "Communication/Messages"]),
    (re.compile(r"gemfile|package\.json", re.I), ["Dependencies/Management", "Package/Configuration"]),
    (re.compile(r"dockerfile|docker", re.I), ["Infrastructure/DevOps", "Deployment/Containers"]),
    (re.compile(r"yml|yaml", re.I), ["Configuration", "Infrastructure/DevOps", "CI/CD"]),
]

PATCH_RULES: list[tuple[re.Pattern, list[str]]] = [
    (re.compile(r"schema|table|column|index|constraint"), ["Database/Schema", "Data Structure"]),
    (re.compile(r"migrate|migration|add_column|create_table"), ["Database/Migrations"]),
    (re.compile(r"valid|validate|presence|format|length"), ["Data/Validation"]),
    (re.compile(r"route|endpoint|path|url"), ["API/Routing", "URL/Routing"]),
    (re.compile(r"get|post|put|delete|patch|api"), ["API/Endpoints"]),
    (re.compile(r"auth|login|password|token|session"), ["Authentication/Authorization"]),
    (re.compile(r"permit|allow|secure|protect"), ["Security/Access"]),
    (re.compile(r"form|input|submit|field"), ["UI/Forms", "Frontend/Forms"]),
    (re.compile(r"render|display|show|view"), ["User Interface", "UI/Views"]),
    (re.compile(r"config|setting|environment|setup"), ["Configuration", "Environment/Setup"]),
    (re.compile(r"test|spec|expect|assert"), ["Testing/Unit", "Testing/Integration"]),
    (re.compile(r"job|worker|queue|async|background"), ["Background/Jobs", "Processing/Queue"]),
    (re.compile(r"mail|email|notify|message"), ["Email/Notifications"]),
    (re.compile(r"cache|optimize|performance|memory"), ["Performance/Optimization"]),
    (re.compile(r"webhook|external|third.party|integration"), ["Integration/External"]),
    (re.compile(r"process|calculate|logic|rule"), ["Business Logic", "Core/Logic"]),
]


def _first_match(rules: list[tuple[re.Pattern, list[str]]], text: str) -> list[str]:
    for pattern, tags in rules:
        if pattern.search(text):
            return tags
    return []


def patterns_for_file(file: dict[str, Any]) -> list[str]:
    """Tags for a single changed file, with possible repeats."""
    filename = file.get("filename", "")
    tags: list[str] = []

    for part in filename.split("/"):
        tags.extend(_first_match(SEGMENT_RULES, part.lower()))

    tags.extend(_first_match(FILENAME_RULES, filename))

    patch = file.get("patch")
    if patch:
        patch = patch.lower()
        for pattern, rule_tags in PATCH_RULES:
            if pattern.search(patch):
                tags.extend(rule_tags)

    return tags


def extract_technical_patterns(code_files: list[dict[str, Any]]) -> list[str]:
    """Unique technical-pattern tags for a set of changed files, in first-seen order."""
    seen: dict[str, None] = {}
    for file in code_files:
        for tag in patterns_for_file(file):
            seen.setdefault(tag, None)
    return list(seen)
