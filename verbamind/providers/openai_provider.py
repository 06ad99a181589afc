"""OpenAI provider using openai SDK with native async."""

import asyncio
import logging
import time

from openai import AsyncOpenAI

from config.config_loader import ModelConfig
from verbamind.providers.base import ProviderError, TextGenerationProvider, status_of

logger = logging.getLogger(__name__)


class OpenAIProvider(TextGenerationProvider):
    """OpenAI provider via openai SDK."""

    def __init__(self, config: ModelConfig) -> None:
        self._config = config

    def name(self) -> str:
        return self._config.name

    def _make_client(self, credential: str) -> AsyncOpenAI:
        return AsyncOpenAI(api_key=credential)

    async def call(self, credential: str, prompt: str) -> str:
        start = time.monotonic()
        try:
            async with self._make_client(credential) as client:
                response = await asyncio.wait_for(
                    client.chat.completions.create(
                        model=self._config.model,
                        messages=[{"role": "user", "content": prompt}],
                        max_tokens=self._config.max_tokens,
                    ),
                    timeout=self._config.timeout_sec,
                )
        except TimeoutError as exc:
            raise ProviderError(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"API call failed: {exc}", status_of(exc)) from exc

        choice = response.choices[0] if response.choices else None
        if not choice or not choice.message.content:
            raise ProviderError(self._config.name, "Empty response content")

        logger.info("OpenAI %s: %.2fs", self._config.model, time.monotonic() - start)
        return choice.message.content
