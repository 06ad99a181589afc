"""Shared pytest fixtures."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from config.config_loader import AppConfig, DefaultsConfig, ModelConfig
from verbamind.models import ApiKeys, GenerationResult, SpeechParams, VerificationResult
from verbamind.providers.base import TextGenerationProvider


@pytest.fixture
def sample_model_config() -> ModelConfig:
    return ModelConfig(
        name="test_model",
        sdk="test",
        model="test-model-1",
        api_key_env="TEST_API_KEY",
        timeout_sec=30,
        max_tokens=1024,
    )


@pytest.fixture
def sample_defaults_config(tmp_path: Path) -> DefaultsConfig:
    return DefaultsConfig(
        output_dir=tmp_path / "output",
        history_path=tmp_path / "history.json",
    )


@pytest.fixture
def sample_app_config(sample_defaults_config: DefaultsConfig) -> AppConfig:
    model_cfg = ModelConfig(
        name="claude",
        sdk="anthropic",
        model="claude-3-5-sonnet-20241022",
        api_key_env="ANTHROPIC_API_KEY",
        timeout_sec=60,
        max_tokens=4096,
    )
    return AppConfig(
        defaults=sample_defaults_config,
        models={"claude": model_cfg},
        available_providers={"claude"},
    )


@pytest.fixture
def sample_params() -> SpeechParams:
    return SpeechParams(
        topic="Team kickoff",
        tone="casual",
        duration="5 minut",
        audience="mieszana",
    )


@pytest.fixture
def all_keys() -> ApiKeys:
    return ApiKeys(claude="sk-ant-test", openai="sk-test", gemini="AIza-test")


@pytest.fixture
def sample_result() -> GenerationResult:
    return GenerationResult(
        text="Drodzy państwo, zaczynamy!",
        verification_results=[
            VerificationResult("naturalness", 80, ("Too formal opening",)),
            VerificationResult("style", 90, ()),
        ],
        overall_score=85,
        was_refined=False,
    )


class MockProvider(TextGenerationProvider):
    """Test double TextGenerationProvider."""

    def __init__(self, provider_name: str = "mock", response_text: str = "Mock response") -> None:
        self._name = provider_name
        self._response_text = response_text
        # Shadow the class method with an AsyncMock at the instance level.
        # ABC check passes because call is defined in the class body below.
        self.call = AsyncMock(return_value=response_text)  # type: ignore[method-assign]

    def name(self) -> str:
        return self._name

    async def call(self, credential: str, prompt: str) -> str:  # type: ignore[override]
        """Default implementation; replaced by AsyncMock in __init__."""
        return self._response_text


@pytest.fixture
def mock_providers() -> dict[str, MockProvider]:
    return {
        "claude": MockProvider("claude", "Text from claude"),
        "openai": MockProvider("openai", "Text from openai"),
        "gemini": MockProvider("gemini", "Text from gemini"),
    }
