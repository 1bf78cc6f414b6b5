"""Business logic services.

Note: LLMGateway is NOT imported at module level; importing LiteLLM is slow
and the blog API never needs it.
Import directly: from docdrift.services.llm_gateway import LLMGateway
"""

__all__ = [
    "LLMGateway",
]


def __getattr__(name: str):
    """Lazy import of the LLM gateway."""
    if name == "LLMGateway":
        from docdrift.services.llm_gateway import LLMGateway
        return LLMGateway
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
