"""Tests for the LiteLLM-backed gateway."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from docdrift.services.llm_gateway import LLMError, LLMGateway


def _completion(content, model="openai/gpt-4"):
    message = SimpleNamespace(content=content)
    usage = SimpleNamespace(prompt_tokens=12, completion_tokens=5, total_tokens=17)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)], model=model, usage=usage)


class TestProviderParams:
    def test_openai_models_get_api_base_and_integration_header(self):
        gateway = LLMGateway(
            api_key=" key ",
            model="openai/gpt-4",
            api_base="https://api.githubcopilot.com",
            integration_id="copilot-developer-cli",
        )
        params = gateway._provider_params("openai/gpt-4")

        assert params["api_key"] == "key"
        assert params["api_base"] == "https://api.githubcopilot.com"
        assert params["extra_headers"] == {"Copilot-Integration-Id": "copilot-developer-cli"}

    def test_other_providers_skip_api_base(self):
        gateway = LLMGateway(api_key="key", api_base="https://api.githubcopilot.com")
        params = gateway._provider_params("anthropic/claude-sonnet-4-5")

        assert params == {"api_key": "key"}

    def test_empty_key_not_sent(self):
        gateway = LLMGateway(api_key="", api_base="")
        assert gateway._provider_params("openai/gpt-4") == {}


class TestComplete:
    def setup_method(self):
        self.gateway = LLMGateway(api_key="key", model="openai/gpt-4", api_base="https://llm.test")

    @pytest.mark.asyncio
    async def test_returns_content_and_usage(self):
        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_acompletion:
            mock_acompletion.return_value = _completion("hello")

            result = await self.gateway.complete("Say hello", max_tokens=100, temperature=0.1)

        assert result["content"] == "hello"
        assert result["usage"]["total_tokens"] == 17
        kwargs = mock_acompletion.call_args.kwargs
        assert kwargs["messages"] == [{"role": "user", "content": "Say hello"}]
        assert kwargs["max_tokens"] == 100
        assert kwargs["temperature"] == 0.1
        assert kwargs["api_base"] == "https://llm.test"

    @pytest.mark.asyncio
    async def test_system_prompt_is_first_message(self):
        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_acompletion:
            mock_acompletion.return_value = _completion("ok")

            await self.gateway.complete("question", system_prompt="be terse")

        messages = mock_acompletion.call_args.kwargs["messages"]
        assert messages[0] == {"role": "system", "content": "be terse"}

    @pytest.mark.asyncio
    async def test_provider_failure_raises_llm_error(self):
        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_acompletion:
            mock_acompletion.side_effect = RuntimeError("503 upstream")

            with pytest.raises(LLMError, match="503 upstream"):
                await self.gateway.complete("x")

    @pytest.mark.asyncio
    async def test_empty_reply_raises_llm_error(self):
        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_acompletion:
            mock_acompletion.return_value = _completion("")

            with pytest.raises(LLMError, match="empty"):
                await self.gateway.complete("x")


class TestCompleteText:
    @pytest.mark.asyncio
    async def test_returns_text(self):
        gateway = LLMGateway(api_key="key")
        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_acompletion:
            mock_acompletion.return_value = _completion("[]")
            assert await gateway.complete_text("x") == "[]"

    @pytest.mark.asyncio
    async def test_returns_none_on_failure(self):
        gateway = LLMGateway(api_key="key")
        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_acompletion:
            mock_acompletion.side_effect = RuntimeError("boom")
            assert await gateway.complete_text("x") is None
