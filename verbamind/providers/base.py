"""Abstract base for all text-generation providers."""

from abc import ABC, abstractmethod


class ProviderError(Exception):
    """Raised when a provider call fails."""

    def __init__(self, provider_name: str, message: str, http_status: int | None = None) -> None:
        self.provider_name = provider_name
        self.http_status = http_status
        self.message = message
        super().__init__(f"[{provider_name}] {message}")


class NoProviderAvailable(Exception):
    """Raised when every candidate provider is missing a key or has failed."""

    def __init__(self, errors: list[ProviderError] | None = None) -> None:
        self.errors = list(errors or [])
        if self.errors:
            detail = "; ".join(str(e) for e in self.errors)
            super().__init__(f"No working API available ({detail})")
        else:
            super().__init__("No working API available (no credentials)")


def status_of(exc: BaseException) -> int | None:
    """Best-effort HTTP status from an SDK exception."""
    for attr in ("status_code", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    return None


class TextGenerationProvider(ABC):
    """Uniform call contract for a single LLM vendor."""

    @abstractmethod
    def name(self) -> str:
        """Return the short provider name ('claude', 'openai', 'gemini')."""
        ...

    @abstractmethod
    async def call(self, credential: str, prompt: str) -> str:
        """Send the prompt and return the generated text.

        Args:
            credential: The API key for this provider.
            prompt: The full prompt text to send.

        Returns:
            The generated text.

        Raises:
            ProviderError: On API failure, timeout, or missing content.
        """
        ...
