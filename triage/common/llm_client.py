"""
Provider-agnostic LLM client for the advisory classifier.

Supports Anthropic, OpenAI, and Google Gemini behind one text-generation call.
The provider SDK is created once per client; a missing key or package leaves the
client unavailable instead of raising.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from .config import LLMConfig

logger = logging.getLogger("triage.common.llm_client")

SUPPORTED_PROVIDERS = ("anthropic", "openai", "google")


class LLMClient:
    """Unified text generation client across LLM providers."""

    def __init__(
        self,
        provider: str = "anthropic",
        model: str = "",
        api_key: Optional[str] = None,
    ) -> None:
        self.provider = (provider or "anthropic").lower()
        self.model = model
        self._client = None
        self._google_models: Dict[Optional[str], object] = {}

        if self.provider not in SUPPORTED_PROVIDERS:
            logger.warning("Unsupported LLM provider: %s", self.provider)
            return

        if not api_key:
            logger.info("%s API key not provided, LLM client unavailable", self.provider)
            return

        try:
            if self.provider == "anthropic":
                import anthropic

                self._client = anthropic.Anthropic(api_key=api_key)
            elif self.provider == "openai":
                from openai import OpenAI

                self._client = OpenAI(api_key=api_key)
            else:
                import google.generativeai as genai

                genai.configure(api_key=api_key)
                self._client = genai  # models are built per system prompt
        except ImportError:
            logger.warning("%s SDK package not installed", self.provider)
        except Exception as e:
            logger.warning("Failed to initialize %s client: %s", self.provider, e)

    @classmethod
    def from_config(cls, llm_config: LLMConfig, provider: Optional[str] = None) -> "LLMClient":
        """Build a client for ``provider`` (default: the configured one)."""
        provider = (provider or llm_config.provider or "anthropic").lower()
        return cls(
            provider=provider,
            model=llm_config.model_for(provider),
            api_key=llm_config.api_key_for(provider),
        )

    @property
    def is_available(self) -> bool:
        return self._client is not None

    def generate(
        self,
        prompt: str,
        *,
        system: Optional[str] = None,
        max_tokens: int = 200,
        timeout: float = 5.0,
    ) -> str:
        if not self.is_available:
            raise RuntimeError("LLM client is not available")

        if self.provider == "anthropic":
            kwargs = {}
            if system:
                kwargs["system"] = system
            response = self._client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
                timeout=timeout,
                **kwargs,
            )
            return response.content[0].text.strip()

        if self.provider == "openai":
            messages = []
            if system:
                messages.append({"role": "system", "content": system})
            messages.append({"role": "user", "content": prompt})
            response = self._client.chat.completions.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=0.3,
                messages=messages,
                timeout=timeout,
            )
            return (response.choices[0].message.content or "").strip()

        # Gemini binds the system prompt to the model object
        model = self._google_models.get(system)
        if model is None:
            kwargs = {"model_name": self.model}
            if system:
                kwargs["system_instruction"] = system
            model = self._google_models[system] = self._client.GenerativeModel(**kwargs)
        response = model.generate_content(
            prompt,
            generation_config={"max_output_tokens": max_tokens},
            request_options={"timeout": timeout},
        )
        return response.text.strip()
