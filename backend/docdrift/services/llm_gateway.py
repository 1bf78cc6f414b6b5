"""LLM Gateway - Unified interface using LiteLLM.

The documentation tools talk to a hosted chat-completion endpoint. By default
that is the GitHub Copilot API, which speaks the OpenAI protocol, so LiteLLM's
``openai/`` provider is pointed at it through ``api_base``. Any other
LiteLLM model string (``anthropic/...``, ``gemini/...``) works as well.

Note: LiteLLM is imported lazily; importing it is slow and the blog API never
needs it.
"""

import logging
import os
from typing import Any

from docdrift.core.config import settings

logger = logging.getLogger(__name__)

# Module-level flag to track if litellm is initialized
_litellm_initialized = False


def _ensure_litellm():
    """Lazy initialize LiteLLM on first use."""
    global _litellm_initialized
    if _litellm_initialized:
        return

    import litellm

    if settings.debug:
        os.environ["LITELLM_LOG"] = "DEBUG"

    litellm.drop_params = True  # Drop unsupported params instead of error

    # Disable LiteLLM's internal logging callbacks; the CLIs are short-lived
    # and the async logging workers outlive the event loop
    litellm.success_callback = []
    litellm.failure_callback = []
    litellm._async_success_callback = []
    litellm._async_failure_callback = []

    _litellm_initialized = True
    logger.debug("LiteLLM initialized")


class LLMError(Exception):
    """LLM Gateway error."""
    pass


class LLMGateway:
    """
    Chat-completion gateway used by the documentation tools.

    Model naming follows LiteLLM's provider prefix convention:
    - openai/gpt-4 (with api_base pointing at Copilot or any OpenAI-compatible host)
    - anthropic/claude-sonnet-4-5
    - gemini/gemini-2.5-pro
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        api_base: str | None = None,
        integration_id: str | None = None,
    ):
        """Initialize the gateway.

        Args:
            api_key: Bearer token for the endpoint. Defaults to the Copilot
                token, falling back to the GitHub token.
            model: LiteLLM model string.
            api_base: Endpoint root. Only sent for ``openai/`` models.
            integration_id: Value of the ``Copilot-Integration-Id`` header.
        """
        self.api_key = (api_key if api_key is not None else settings.llm_api_key).strip()
        self.model = model or settings.llm_model
        self.api_base = api_base if api_base is not None else settings.llm_api_base
        self.integration_id = (
            integration_id if integration_id is not None else settings.llm_integration_id
        )

    def _provider_params(self, model: str) -> dict[str, Any]:
        """Build endpoint-specific parameters for a model."""
        params: dict[str, Any] = {}
        if self.api_key:
            params["api_key"] = self.api_key
        if model.startswith("openai/") and self.api_base:
            params["api_base"] = self.api_base
            if self.integration_id:
                params["extra_headers"] = {"Copilot-Integration-Id": self.integration_id}
        return params

    async def complete(
        self,
        prompt: str,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int = 4000,
        system_prompt: str | None = None,
        **kwargs,
    ) -> dict[str, Any]:
        """
        Generate a completion for a single user prompt.

        Args:
            prompt: User prompt
            model: Model name with provider prefix (e.g., "openai/gpt-4")
            temperature: Sampling temperature, defaults to settings.llm_temperature
            max_tokens: Maximum tokens in response
            system_prompt: Optional system prompt
            **kwargs: Additional parameters passed to LiteLLM

        Returns:
            dict with:
                - content: Response text
                - model: Model used
                - usage: Token usage stats
        """
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        return await self.chat(
            messages=messages,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs,
        )

    async def chat(
        self,
        messages: list[dict],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int = 4000,
        **kwargs,
    ) -> dict[str, Any]:
        """
        Send chat messages and return the first choice.

        Raises:
            LLMError: When the request fails or the reply has no content.
        """
        _ensure_litellm()
        from litellm import acompletion

        model = model or self.model

        params = {
            "model": model,
            "messages": messages,
            "temperature": settings.llm_temperature if temperature is None else temperature,
            "max_tokens": max_tokens,
            **self._provider_params(model),
            **kwargs,
        }

        try:
            response = await acompletion(**params)
        except Exception as e:
            logger.error(f"LLM completion failed: {e}")
            raise LLMError(f"Completion failed: {str(e)}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise LLMError(f"Model {model} returned an empty response")

        usage = getattr(response, "usage", None)
        return {
            "content": content,
            "model": getattr(response, "model", model),
            "usage": {
                "prompt_tokens": getattr(usage, "prompt_tokens", 0) or 0,
                "completion_tokens": getattr(usage, "completion_tokens", 0) or 0,
                "total_tokens": getattr(usage, "total_tokens", 0) or 0,
            },
        }

    async def complete_text(self, prompt: str, **kwargs) -> str | None:
        """Return the reply text, or None after logging a warning on failure."""
        try:
            result = await self.complete(prompt, **kwargs)
        except LLMError as e:
            logger.warning(f"⚠️  LLM API request failed: {e}")
            return None
        return result["content"]
