"""Provider selection: try vendors in preference order until one answers."""

import logging

from config.config_loader import AppConfig
from verbamind.models import ApiKeys
from verbamind.providers.anthropic import AnthropicProvider
from verbamind.providers.base import NoProviderAvailable, ProviderError, TextGenerationProvider
from verbamind.providers.gemini import GeminiProvider
from verbamind.providers.openai_provider import OpenAIProvider

logger = logging.getLogger(__name__)

FALLBACK_ORDER = ("claude", "openai", "gemini")

PROVIDER_CLASSES: dict[str, type[TextGenerationProvider]] = {
    "claude": AnthropicProvider,
    "openai": OpenAIProvider,
    "gemini": GeminiProvider,
}


def build_providers(config: AppConfig) -> dict[str, TextGenerationProvider]:
    """Instantiate one adapter per configured provider. Returns dict keyed by name."""
    providers: dict[str, TextGenerationProvider] = {}
    for name, model_cfg in config.models.items():
        if name not in PROVIDER_CLASSES:
            logger.warning("Provider '%s' unknown, skipping", name)
            continue
        providers[name] = PROVIDER_CLASSES[name](model_cfg)
    return providers


def provider_order(preferred: str) -> list[str]:
    """Preferred provider first, the rest in fallback order."""
    if preferred not in FALLBACK_ORDER:
        raise ValueError(f"Unknown provider: {preferred}")
    return [preferred] + [p for p in FALLBACK_ORDER if p != preferred]


async def call_best_available(
    credentials: ApiKeys,
    prompt: str,
    preferred: str,
    providers: dict[str, TextGenerationProvider],
) -> str:
    """Return the text of the first provider in order that succeeds.

    Providers without a credential are skipped. Each failure is logged and
    the next candidate is tried.

    Raises:
        NoProviderAvailable: If no candidate has a credential or all failed.
    """
    errors: list[ProviderError] = []

    for name in provider_order(preferred):
        key = credentials.get(name)
        if not key:
            continue
        provider = providers.get(name)
        if provider is None:
            logger.debug("No adapter registered for %s, skipping", name)
            continue
        try:
            return await provider.call(key, prompt)
        except ProviderError as exc:
            logger.warning("%s failed, trying next: %s", name, exc)
            errors.append(exc)

    raise NoProviderAvailable(errors)
