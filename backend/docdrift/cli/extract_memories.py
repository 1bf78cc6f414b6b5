"""Extract documentation memories for a commit and store them as a git note.

Usage:
    # Extract memories from docs changed in a commit
    docdrift-extract-memories --repository owner/name --commit-sha <sha>

    # Show, check or list stored notes
    docdrift-extract-memories --repository owner/name --commit-sha <sha> --get-note
    docdrift-extract-memories --repository owner/name --commit-sha <sha> --check-note
    docdrift-extract-memories --repository owner/name --list-notes

--check-note exits 0 when a note exists and 1 otherwise.
"""

import argparse
import asyncio
import logging
import sys

from docdrift.cli.common import configure_logging, resolve_github_token, resolve_llm_token
from docdrift.core.actions import set_outputs
from docdrift.core.config import parse_patterns, settings
from docdrift.services.git_notes import GitNotesStore
from docdrift.services.github import GitHubService
from docdrift.services.llm_gateway import LLMGateway
from docdrift.services.memory_extractor import DocumentationMemoryExtractor

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract documentation memories and store them as git notes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--repository", help="Repository to analyze (owner/name)")
    parser.add_argument("--commit-sha", help="Commit SHA to extract memories for")
    parser.add_argument(
        "--docs-patterns",
        default=settings.docs_patterns,
        help="Newline-separated file patterns to include",
    )
    parser.add_argument(
        "--exclude-patterns",
        default=settings.exclude_patterns,
        help="Newline-separated file patterns to exclude",
    )
    parser.add_argument("--github-token", help="GitHub token (defaults to $GITHUB_TOKEN)")
    parser.add_argument("--copilot-token", help="LLM token (defaults to $COPILOT_TOKEN)")

    operation = parser.add_mutually_exclusive_group()
    operation.add_argument(
        "--get-note",
        dest="operation",
        action="store_const",
        const="get_note",
        help="Retrieve and display the git note for the commit",
    )
    operation.add_argument(
        "--check-note",
        dest="operation",
        action="store_const",
        const="check_note",
        help="Check whether a git note exists for the commit",
    )
    operation.add_argument(
        "--list-notes",
        dest="operation",
        action="store_const",
        const="list_notes",
        help=f"List all git notes in the {settings.notes_namespace} namespace",
    )
    parser.set_defaults(operation="extract")
    return parser


def build_extractor(args: argparse.Namespace) -> DocumentationMemoryExtractor:
    github_token = resolve_github_token(args.github_token)

    llm = None
    if args.operation == "extract":
        llm_token = resolve_llm_token(args.copilot_token, github_token)
        if llm_token:
            llm = LLMGateway(api_key=llm_token)

    return DocumentationMemoryExtractor(
        repository=args.repository,
        github=GitHubService(github_token, user_agent="docdrift-memory-extractor"),
        llm=llm,
        commit_sha=args.commit_sha,
        docs_patterns=parse_patterns(args.docs_patterns),
        exclude_patterns=parse_patterns(args.exclude_patterns),
        notes=GitNotesStore(settings.notes_namespace),
        operation=args.operation,
    )


def run(args: argparse.Namespace) -> int:
    extractor = build_extractor(args)

    if args.operation == "get_note":
        note = extractor.get_note()
        if note is not None:
            print(note)
        return 0

    if args.operation == "check_note":
        return 0 if extractor.check_note() else 1

    if args.operation == "list_notes":
        for line in extractor.list_notes():
            print(line)
        return 0

    memories = asyncio.run(extractor.extract_and_store())
    if memories:
        set_outputs(extractor.outputs(memories))
    return 0


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)
    try:
        return run(args)
    except Exception as e:
        logger.error(f"❌ Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
