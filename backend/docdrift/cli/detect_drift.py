"""Detect documentation drift for a pull request and comment on it.

Usage:
    docdrift-detect-drift --repository owner/name --pr-number 42 \\
        --analysis-scope wide --comment-mode review

Tokens are read from GITHUB_TOKEN and COPILOT_TOKEN unless passed as flags.
"""

import argparse
import asyncio
import logging
import sys

from docdrift.cli.common import configure_logging, resolve_github_token, resolve_llm_token
from docdrift.core.actions import set_outputs
from docdrift.core.config import ConfigurationError, settings
from docdrift.services.drift import AnalysisScope, DriftDetective
from docdrift.services.github import GitHubService
from docdrift.services.llm_gateway import LLMGateway

logger = logging.getLogger(__name__)

SCOPE_CHOICES = ", ".join(s.value for s in AnalysisScope)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Analyze a pull request for documentation drift",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--repository", help="Repository to analyze (owner/name)")
    parser.add_argument("--pr-number", type=int, help="Pull request number")
    parser.add_argument(
        "--knowledge-base-path",
        default=settings.knowledge_base_path,
        help="Path to the knowledge base file",
    )
    parser.add_argument(
        "--sensitivity-threshold",
        type=int,
        default=2,
        help="Minimum sensitivity level (0-3)",
    )
    parser.add_argument(
        "--comment-mode",
        default="comment",
        help="Comment mode (comment, review)",
    )
    parser.add_argument("--max-docs", type=int, default=20, help="Maximum docs to analyze")
    parser.add_argument("--analysis-scope", help=f"Analysis scope ({SCOPE_CHOICES})")
    parser.add_argument(
        "--net-width",
        help=f"Analysis scope ({SCOPE_CHOICES}) [deprecated: use --analysis-scope]",
    )
    parser.add_argument("--github-token", help="GitHub token (defaults to $GITHUB_TOKEN)")
    parser.add_argument("--copilot-token", help="LLM token (defaults to $COPILOT_TOKEN)")
    return parser


async def run(args: argparse.Namespace) -> dict[str, object]:
    github_token = resolve_github_token(args.github_token)
    llm_token = resolve_llm_token(args.copilot_token, github_token)
    if not llm_token:
        raise ConfigurationError("Copilot token is required")

    if args.net_width and not args.analysis_scope:
        logger.warning("⚠️  --net-width is deprecated, use --analysis-scope")

    detective = DriftDetective(
        repository=args.repository,
        pr_number=args.pr_number,
        github=GitHubService(github_token, user_agent="docdrift-drift-detective"),
        llm=LLMGateway(api_key=llm_token),
        knowledge_base_path=args.knowledge_base_path,
        sensitivity_threshold=args.sensitivity_threshold,
        comment_mode=args.comment_mode,
        max_docs=args.max_docs,
        analysis_scope=args.analysis_scope or args.net_width or AnalysisScope.MEDIUM.value,
    )
    results = await detective.run()
    outputs = detective.outputs(results)
    set_outputs(outputs)
    return outputs


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
