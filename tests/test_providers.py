"""Unit tests for provider adapters — SDK clients are mocked, no network."""

import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from config.config_loader import ModelConfig
from verbamind.providers.anthropic import AnthropicProvider
from verbamind.providers.base import NoProviderAvailable, ProviderError, status_of
from verbamind.providers.gemini import GeminiProvider
from verbamind.providers.openai_provider import OpenAIProvider


def _config(name: str, models: list[str] | None = None) -> ModelConfig:
    return ModelConfig(
        name=name, sdk="test", model="model-1", api_key_env="K",
        timeout_sec=5, max_tokens=100, models=models or [],
    )


def _sdk_client() -> MagicMock:
    """SDK client double usable as `async with client:`."""
    client = MagicMock()
    client.__aenter__.return_value = client
    client.__aexit__.return_value = False
    return client


def _genai_client() -> MagicMock:
    client = MagicMock()
    client.aio.aclose = AsyncMock()
    return client


def test_provider_error_message_and_status():
    err = ProviderError("openai", "API call failed", 429)
    assert str(err) == "[openai] API call failed"
    assert err.http_status == 429
    assert err.provider_name == "openai"


def test_no_provider_available_message():
    assert "no credentials" in str(NoProviderAvailable())
    err = NoProviderAvailable([ProviderError("claude", "boom")])
    assert "[claude] boom" in str(err)


def test_status_of_reads_sdk_attributes():
    assert status_of(SimpleNamespace(status_code=401)) == 401
    assert status_of(SimpleNamespace(code=404)) == 404
    assert status_of(ValueError("x")) is None


# --- Anthropic ---

async def test_anthropic_returns_first_text_block():
    provider = AnthropicProvider(_config("claude"))
    client = _sdk_client()
    client.messages.create = AsyncMock(
        return_value=SimpleNamespace(content=[SimpleNamespace(type="text", text="Speech")])
    )
    with patch.object(AnthropicProvider, "_make_client", return_value=client):
        text = await provider.call("sk-ant", "prompt")

    assert text == "Speech"
    kwargs = client.messages.create.await_args.kwargs
    assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]
    assert kwargs["max_tokens"] == 100
    assert kwargs["model"] == "model-1"


async def test_anthropic_empty_content_raises():
    provider = AnthropicProvider(_config("claude"))
    client = _sdk_client()
    client.messages.create = AsyncMock(return_value=SimpleNamespace(content=[]))
    with patch.object(AnthropicProvider, "_make_client", return_value=client):
        with pytest.raises(ProviderError, match="Empty response"):
            await provider.call("sk-ant", "prompt")


async def test_anthropic_wraps_sdk_error_with_status():
    provider = AnthropicProvider(_config("claude"))
    sdk_error = RuntimeError("unauthorized")
    sdk_error.status_code = 401  # type: ignore[attr-defined]
    client = _sdk_client()
    client.messages.create = AsyncMock(side_effect=sdk_error)
    with patch.object(AnthropicProvider, "_make_client", return_value=client):
        with pytest.raises(ProviderError) as exc_info:
            await provider.call("bad", "prompt")
    assert exc_info.value.http_status == 401


# --- OpenAI ---

async def test_openai_returns_first_choice():
    provider = OpenAIProvider(_config("openai"))
    client = _sdk_client()
    client.chat.completions.create = AsyncMock(
        return_value=SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="Hello"))])
    )
    with patch.object(OpenAIProvider, "_make_client", return_value=client):
        assert await provider.call("sk", "prompt") == "Hello"


async def test_openai_no_choices_raises():
    provider = OpenAIProvider(_config("openai"))
    client = _sdk_client()
    client.chat.completions.create = AsyncMock(return_value=SimpleNamespace(choices=[]))
    with patch.object(OpenAIProvider, "_make_client", return_value=client):
        with pytest.raises(ProviderError, match="Empty response"):
            await provider.call("sk", "prompt")


# --- client lifecycle ---

def _recording_factory(sdk_class, body: dict, created: list):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=body)

    def make(credential):
        client = sdk_class(api_key=credential, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        created.append(client)
        return client

    return make


async def test_openai_call_closes_its_client():
    provider = OpenAIProvider(_config("openai"))
    body = {
        "id": "x", "object": "chat.completion", "created": 0, "model": "gpt-4o",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": "Hello"}, "finish_reason": "stop"}],
    }
    created: list = []
    with patch.object(OpenAIProvider, "_make_client", side_effect=_recording_factory(AsyncOpenAI, body, created)):
        assert await provider.call("sk", "one") == "Hello"
        assert await provider.call("sk", "two") == "Hello"

    assert [c.is_closed() for c in created] == [True, True]


async def test_anthropic_call_closes_its_client():
    provider = AnthropicProvider(_config("claude"))
    body = {
        "id": "msg_1", "type": "message", "role": "assistant", "model": "m",
        "content": [{"type": "text", "text": "Hi"}],
        "stop_reason": "end_turn", "usage": {"input_tokens": 1, "output_tokens": 1},
    }
    created: list = []
    with patch.object(AnthropicProvider, "_make_client", side_effect=_recording_factory(AsyncAnthropic, body, created)):
        assert await provider.call("sk-ant", "prompt") == "Hi"

    assert len(created) == 1
    assert created[0].is_closed()


async def test_gemini_call_closes_client_on_success_and_failure():
    provider = GeminiProvider(_config("gemini", ["g-1"]))
    client = _genai_client()

    with patch.object(GeminiProvider, "_make_client", return_value=client), \
            patch.object(GeminiProvider, "_generate_once", side_effect=["ok", ProviderError("gemini", "down", 503)]):
        assert await provider.call("AIza", "prompt") == "ok"
        with pytest.raises(ProviderError):
            await provider.call("AIza", "prompt")

    assert client.aio.aclose.await_count == 2


# --- Gemini model fallback ---

async def test_gemini_falls_through_to_third_model(caplog):
    provider = GeminiProvider(_config("gemini", ["g-1", "g-2", "g-3", "g-4"]))
    attempts: list[str] = []

    async def generate_once(client, model, prompt):
        attempts.append(model)
        if model in ("g-1", "g-2"):
            raise ProviderError("gemini", f"{model}: API call failed: 404", 404)
        return f"text from {model}"

    with patch.object(GeminiProvider, "_make_client", return_value=_genai_client()), \
            patch.object(GeminiProvider, "_generate_once", side_effect=generate_once):
        with caplog.at_level(logging.WARNING):
            text = await provider.call("AIza", "prompt")

    assert text == "text from g-3"
    assert attempts == ["g-1", "g-2", "g-3"]
    assert sum("trying next" in m for m in caplog.messages) == 2


async def test_gemini_raises_last_error_after_exhausting_models():
    provider = GeminiProvider(_config("gemini", ["g-1", "g-2"]))
    errors = [
        ProviderError("gemini", "g-1: API call failed: 404", 404),
        ProviderError("gemini", "g-2: API call failed: 503", 503),
    ]

    with patch.object(GeminiProvider, "_make_client", return_value=_genai_client()), \
            patch.object(GeminiProvider, "_generate_once", side_effect=errors):
        with pytest.raises(ProviderError) as exc_info:
            await provider.call("AIza", "prompt")

    assert "g-2" in str(exc_info.value)
    assert exc_info.value.http_status == 503


async def test_gemini_missing_candidate_text_advances_model():
    provider = GeminiProvider(_config("gemini", ["g-1", "g-2"]))
    empty = SimpleNamespace(candidates=[])
    good = SimpleNamespace(
        candidates=[SimpleNamespace(content=SimpleNamespace(parts=[SimpleNamespace(text="Witajcie")]))]
    )
    client = _genai_client()
    client.aio.models.generate_content = AsyncMock(side_effect=[empty, good])

    with patch.object(GeminiProvider, "_make_client", return_value=client):
        text = await provider.call("AIza", "prompt")

    assert text == "Witajcie"
    models_tried = [c.kwargs["model"] for c in client.aio.models.generate_content.await_args_list]
    assert models_tried == ["g-1", "g-2"]


def test_gemini_candidates_default_to_primary_model():
    provider = GeminiProvider(_config("gemini"))
    assert provider.model_candidates() == ["model-1"]
