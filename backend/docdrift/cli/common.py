"""Shared helpers for the documentation CLIs."""

import logging

from docdrift.core.config import ConfigurationError, settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


def _clean(token: str | None, name: str) -> str:
    if not token:
        return ""
    if token != token.strip():
        logger.warning(f"⚠️  Warning: {name} contains whitespace or newlines")
    return token.strip()


def resolve_github_token(flag_value: str | None = None) -> str:
    """GitHub token from the flag or ``GITHUB_TOKEN``.

    Raises:
        ConfigurationError: If no token is available.
    """
    token = _clean(flag_value or settings.github_token, "GitHub token")
    if not token:
        raise ConfigurationError("GitHub token is required")
    return token


def resolve_llm_token(flag_value: str | None = None, github_token: str | None = None) -> str:
    """LLM token from the flag or ``COPILOT_TOKEN``, falling back to the GitHub token."""
    token = flag_value or settings.copilot_token
    if not token and github_token:
        logger.debug("Using GitHub token as Copilot token fallback")
        token = github_token
    return _clean(token, "Copilot token")
