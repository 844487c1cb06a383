"""Tests for LLMClient provider abstraction."""

import pytest
from unittest.mock import Mock

from triage.common.config import LLMConfig
from triage.common.llm_client import LLMClient


class TestLLMClientInit:
    def test_missing_anthropic_key_logs_info(self, caplog):
        import logging
        with caplog.at_level(logging.INFO, logger="triage.common.llm_client"):
            client = LLMClient(provider="anthropic")
        assert not client.is_available
        assert "API key not provided" in caplog.text

    def test_missing_openai_key_logs_info(self, caplog):
        import logging
        with caplog.at_level(logging.INFO, logger="triage.common.llm_client"):
            client = LLMClient(provider="openai")
        assert not client.is_available
        assert "API key not provided" in caplog.text

    def test_unsupported_provider_logs_warning(self, caplog):
        import logging
        with caplog.at_level(logging.WARNING, logger="triage.common.llm_client"):
            client = LLMClient(provider="unsupported_xyz", api_key="k")
        assert not client.is_available
        assert "Unsupported" in caplog.text

    def test_from_config_uses_configured_provider(self):
        cfg = LLMConfig(provider="openai", openai_model="gpt-test")
        client = LLMClient.from_config(cfg)
        assert client.provider == "openai"
        assert client.model == "gpt-test"
        assert not client.is_available

    def test_from_config_provider_override(self):
        cfg = LLMConfig(provider="openai")
        client = LLMClient.from_config(cfg, provider="google")
        assert client.provider == "google"
        assert client.model == cfg.google_model


class TestLLMClientGenerate:
    def test_generate_raises_when_unavailable(self):
        client = LLMClient(provider="anthropic")
        with pytest.raises(RuntimeError, match="not available"):
            client.generate("test")

    def test_anthropic_generate(self):
        client = LLMClient(provider="anthropic", model="m")
        block = Mock()
        block.text = '  {"important": true}  '
        sdk = Mock()
        sdk.messages.create.return_value = Mock(content=[block])
        client._client = sdk

        result = client.generate("hello", system="be brief", max_tokens=50, timeout=2.0)

        assert result == '{"important": true}'
        kwargs = sdk.messages.create.call_args.kwargs
        assert kwargs["system"] == "be brief"
        assert kwargs["max_tokens"] == 50
        assert kwargs["timeout"] == 2.0

    def test_openai_generate_puts_system_first(self):
        client = LLMClient(provider="openai", model="m")
        message = Mock()
        message.content = "ok"
        sdk = Mock()
        sdk.chat.completions.create.return_value = Mock(choices=[Mock(message=message)])
        client._client = sdk

        assert client.generate("hello", system="sys") == "ok"
        messages = sdk.chat.completions.create.call_args.kwargs["messages"]
        assert messages[0] == {"role": "system", "content": "sys"}
        assert messages[1] == {"role": "user", "content": "hello"}

    def test_google_generate_caches_model_per_system_prompt(self):
        client = LLMClient(provider="google", model="gemini")
        genai = Mock()
        genai.GenerativeModel.return_value.generate_content.return_value = Mock(text="done")
        client._client = genai

        client.generate("a", system="sys")
        client.generate("b", system="sys")

        assert genai.GenerativeModel.call_count == 1
        genai.GenerativeModel.assert_called_once_with(model_name="gemini", system_instruction="sys")

    def test_google_generate_passes_timeout(self):
        client = LLMClient(provider="google", model="gemini")
        genai = Mock()
        model = genai.GenerativeModel.return_value
        model.generate_content.return_value = Mock(text=" done ")
        client._client = genai

        assert client.generate("a", max_tokens=50, timeout=2.5) == "done"

        genai.GenerativeModel.assert_called_once_with(model_name="gemini")
        model.generate_content.assert_called_once_with(
            "a",
            generation_config={"max_output_tokens": 50},
            request_options={"timeout": 2.5},
        )
