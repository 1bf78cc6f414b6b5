"""Tolerant JSON extraction from LLM replies.

Models frequently wrap JSON in Markdown fences or add a sentence of preamble.
The helpers here pull the payload out of the first fenced block when one is
present and fall back to the raw text otherwise.
"""

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_JSON_FENCE_RE = re.compile(r"```json\s*(.*?)\s*```", re.DOTALL)
_ANY_FENCE_RE = re.compile(r"```\s*(.*?)\s*```", re.DOTALL)

PREVIEW_CHARS = 200


class LLMResponseParseError(ValueError):
    """Raised when an LLM reply does not contain valid JSON."""

    def __init__(self, message: str, raw: str):
        self.raw = raw
        super().__init__(message)


def extract_json_text(text: str) -> str:
    """Return the JSON-bearing part of a reply.

    A ```json fence wins over a bare ``` fence. Unfenced text is returned
    unchanged.
    """
    if "```json" in text:
        match = _JSON_FENCE_RE.search(text)
        if match:
            return match.group(1).strip()
    elif "```" in text:
        match = _ANY_FENCE_RE.search(text)
        if match:
            return match.group(1).strip()
    return text


def parse_llm_json(text: str) -> Any:
    """Parse the JSON payload of an LLM reply.

    Raises:
        LLMResponseParseError: If no valid JSON can be decoded.
    """
    try:
        return json.loads(extract_json_text(text))
    except json.JSONDecodeError as e:
        raise LLMResponseParseError(str(e), raw=text) from e


def preview(text: str, limit: int = PREVIEW_CHARS) -> str:
    """Shorten a reply for log output."""
    return text[:limit] + ("..." if len(text) > limit else "")
