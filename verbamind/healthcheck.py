"""Provider health checks — ping each API that has a key."""

import asyncio
import logging

from verbamind.models import ApiKeys
from verbamind.providers.base import TextGenerationProvider

logger = logging.getLogger(__name__)

_PING_PROMPT = "Reply with the word OK only."
_TIMEOUT_SEC = 15.0


async def _check_one(name: str, provider: TextGenerationProvider, credential: str) -> tuple[str, bool, str]:
    """Ping a single provider. Returns (name, ok, error_message)."""
    try:
        await asyncio.wait_for(provider.call(credential, _PING_PROMPT), timeout=_TIMEOUT_SEC)
        return name, True, ""
    except Exception as exc:
        return name, False, str(exc) or type(exc).__name__


async def run_health_checks(
    providers: dict[str, TextGenerationProvider],
    credentials: ApiKeys,
) -> dict[str, tuple[bool, str]]:
    """Ping every provider that has a credential, in parallel.

    Returns:
        Dict mapping provider name -> (ok, error_message).
        error_message is "" when ok is True. Providers without a key are absent.
    """
    checks = [
        _check_one(name, provider, credentials.get(name))
        for name, provider in providers.items()
        if credentials.get(name)
    ]
    results = await asyncio.gather(*checks)
    return {name: (ok, err) for name, ok, err in results}
