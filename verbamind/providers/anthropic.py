"""Anthropic Claude provider using anthropic SDK with native async."""

import asyncio
import logging
import time

import anthropic as anthropic_sdk

from config.config_loader import ModelConfig
from verbamind.providers.base import ProviderError, TextGenerationProvider, status_of

logger = logging.getLogger(__name__)


class AnthropicProvider(TextGenerationProvider):
    """Anthropic Claude provider via anthropic SDK."""

    def __init__(self, config: ModelConfig) -> None:
        self._config = config

    def name(self) -> str:
        return self._config.name

    def _make_client(self, credential: str) -> anthropic_sdk.AsyncAnthropic:
        return anthropic_sdk.AsyncAnthropic(api_key=credential)

    async def call(self, credential: str, prompt: str) -> str:
        start = time.monotonic()
        try:
            async with self._make_client(credential) as client:
                response = await asyncio.wait_for(
                    client.messages.create(
                        model=self._config.model,
                        max_tokens=self._config.max_tokens,
                        messages=[{"role": "user", "content": prompt}],
                    ),
                    timeout=self._config.timeout_sec,
                )
        except TimeoutError as exc:
            raise ProviderError(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"API call failed: {exc}", status_of(exc)) from exc

        if not response.content:
            raise ProviderError(self._config.name, "Empty response content")

        first = response.content[0]
        text = getattr(first, "text", None)
        if first.type != "text" or not text:
            raise ProviderError(self._config.name, "First content block has no text")

        logger.info("Anthropic %s: %.2fs", self._config.model, time.monotonic() - start)
        return text
