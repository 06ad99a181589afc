"""Gemini provider using google-genai SDK, walking a list of model ids."""

import asyncio
import logging
import time

from google import genai
from google.genai import types as genai_types

from config.config_loader import ModelConfig
from verbamind.providers.base import ProviderError, TextGenerationProvider, status_of

logger = logging.getLogger(__name__)


class GeminiProvider(TextGenerationProvider):
    """Google Gemini provider via google-genai SDK.

    Model ids are retired often, so each call tries ``config.models`` in
    order and only fails once all of them have failed.
    """

    def __init__(self, config: ModelConfig) -> None:
        self._config = config

    def name(self) -> str:
        return self._config.name

    def model_candidates(self) -> list[str]:
        return list(self._config.models) or [self._config.model]

    def _make_client(self, credential: str) -> genai.Client:
        return genai.Client(api_key=credential)

    async def _generate_once(self, client: genai.Client, model: str, prompt: str) -> str:
        try:
            response = await asyncio.wait_for(
                client.aio.models.generate_content(
                    model=model,
                    contents=prompt,
                    config=genai_types.GenerateContentConfig(
                        max_output_tokens=self._config.max_tokens,
                    ),
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderError(
                self._config.name, f"{model}: request timed out after {self._config.timeout_sec}s"
            ) from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"{model}: API call failed: {exc}", status_of(exc)) from exc

        candidates = response.candidates or []
        content = candidates[0].content if candidates else None
        parts = (content.parts or []) if content else []
        text = parts[0].text if parts else None
        if not text:
            raise ProviderError(self._config.name, f"{model}: response has no candidate text")
        return text

    async def call(self, credential: str, prompt: str) -> str:
        client = self._make_client(credential)
        try:
            return await self._walk_models(client, prompt)
        finally:
            await client.aio.aclose()

    async def _walk_models(self, client: genai.Client, prompt: str) -> str:
        last_error: ProviderError | None = None

        for model in self.model_candidates():
            start = time.monotonic()
            try:
                text = await self._generate_once(client, model, prompt)
            except ProviderError as exc:
                logger.warning("Gemini model %s failed, trying next: %s", model, exc)
                last_error = exc
                continue
            logger.info("Gemini %s: %.2fs", model, time.monotonic() - start)
            return text

        if last_error is None:
            raise ProviderError(self._config.name, "No Gemini models configured")
        raise ProviderError(
            self._config.name,
            f"All models failed; last error: {last_error.message}",
            last_error.http_status,
        )
