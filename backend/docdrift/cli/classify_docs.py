"""Classify a repository's documentation into a knowledge base.

Usage:
    docdrift-classify --repository owner/name \\
        --output-path .github/docs-knowledge-base.json \\
        --docs-patterns $'**/*.md\\n**/*.markdown' \\
        --exclude-patterns $'node_modules/**\\n.git/**'

Tokens are read from GITHUB_TOKEN and COPILOT_TOKEN unless passed as flags.
"""

import argparse
import asyncio
import logging
import sys

from docdrift.cli.common import configure_logging, resolve_github_token, resolve_llm_token
from docdrift.core.actions import set_outputs
from docdrift.core.config import ConfigurationError, parse_patterns, settings
from docdrift.services.doc_classifier import RepositoryDocClassifier
from docdrift.services.llm_gateway import LLMGateway

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Classify documentation files into a knowledge base",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--repository", help="Repository to classify (owner/name)")
    parser.add_argument(
        "--output-path",
        default=settings.knowledge_base_path,
        help="Output path for the knowledge base",
    )
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
    return parser


async def run(args: argparse.Namespace) -> RepositoryDocClassifier:
    github_token = resolve_github_token(args.github_token)
    if not args.repository:
        raise ConfigurationError("Repository is required")
    llm_token = resolve_llm_token(args.copilot_token, github_token)
    if not llm_token:
        raise ConfigurationError("Copilot token is required")

    classifier = RepositoryDocClassifier(
        repository=args.repository,
        llm=LLMGateway(api_key=llm_token),
        docs_patterns=parse_patterns(args.docs_patterns),
        exclude_patterns=parse_patterns(args.exclude_patterns),
        output_path=args.output_path,
    )
    knowledge_base = await classifier.classify_repository()
    set_outputs(classifier.outputs(knowledge_base))
    return classifier


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)
    try:
        asyncio.run(run(args))
    except Exception as e:
        logger.error(f"❌ Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
