"""Load settings.yaml into typed dataclasses. Resolves API keys from the environment."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from verbamind.models import ApiKeys

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"


@dataclass
class ModelConfig:
    name: str
    sdk: str
    model: str
    api_key_env: str
    timeout_sec: int
    max_tokens: int
    # Ordered fallback list; only the gemini adapter walks more than one entry
    models: list[str] = field(default_factory=list)


@dataclass
class DefaultsConfig:
    output_dir: Path
    history_path: Path
    fast_mode: bool = True
    history_limit: int = 50


@dataclass
class AppConfig:
    defaults: DefaultsConfig
    models: dict[str, ModelConfig]
    available_providers: set[str] = field(default_factory=set)


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing.
    Logs which providers have an API key but does not raise — the CLI
    checks that at least one credential is present.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    defaults_raw = raw["defaults"]
    defaults = DefaultsConfig(
        output_dir=Path(defaults_raw["output_dir"]),
        history_path=Path(defaults_raw["history_path"]),
        fast_mode=bool(defaults_raw.get("fast_mode", True)),
        history_limit=int(defaults_raw.get("history_limit", 50)),
    )

    models: dict[str, ModelConfig] = {}
    available_providers: set[str] = set()

    for provider_name, model_raw in raw["models"].items():
        model_list = [str(m) for m in model_raw.get("models", [])]
        primary = model_raw.get("model") or (model_list[0] if model_list else None)
        if not primary:
            raise ValueError(f"Provider '{provider_name}' needs 'model' or 'models'")
        model_cfg = ModelConfig(
            name=provider_name,
            sdk=model_raw["sdk"],
            model=str(primary),
            api_key_env=model_raw["api_key_env"],
            timeout_sec=int(model_raw["timeout_sec"]),
            max_tokens=int(model_raw["max_tokens"]),
            models=model_list or [str(primary)],
        )
        models[provider_name] = model_cfg

        api_key = os.environ.get(model_raw["api_key_env"], "").strip()
        if api_key:
            available_providers.add(provider_name)
            logger.info("Provider available: %s", provider_name)
        else:
            logger.info(
                "Provider skipped (no API key): %s — set %s in .env",
                provider_name,
                model_raw["api_key_env"],
            )

    return AppConfig(
        defaults=defaults,
        models=models,
        available_providers=available_providers,
    )


def load_credentials(config: AppConfig) -> ApiKeys:
    """Build the credential set from the env vars named in the config."""
    keys: dict[str, str | None] = {}
    for name in ("claude", "openai", "gemini"):
        model_cfg = config.models.get(name)
        if model_cfg is None:
            keys[name] = None
            continue
        keys[name] = os.environ.get(model_cfg.api_key_env, "").strip() or None
    return ApiKeys(**keys)
