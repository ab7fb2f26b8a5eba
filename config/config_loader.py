"""Load settings.yaml into typed dataclasses. Reports available providers at startup."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"

# Overrides engine.max_concurrent_batches when set
MAX_CONCURRENT_BATCHES_ENV = "AI_MAX_CONCURRENT_BATCHES"


@dataclass
class ModelConfig:
    name: str
    sdk: str
    model: str
    api_key_env: str
    timeout_sec: int
    max_tokens: int
    temperature: float = 0.9
    top_p: float | None = None
    top_k: int | None = None
    base_url: str | None = None


@dataclass
class EngineSettings:
    provider: str = "gemini"
    max_concurrent_batches: int = 3
    trait_jitter: int = 8
    timeout_retries: int = 1
    enforce_diversity: bool = True
    validate_demographics: bool = False
    output_dir: Path = Path("./output")


@dataclass
class AppConfig:
    engine: EngineSettings
    models: dict[str, ModelConfig]
    available_providers: set[str] = field(default_factory=set)


def _max_concurrent_batches(configured: int) -> int:
    raw = os.environ.get(MAX_CONCURRENT_BATCHES_ENV, "").strip()
    if not raw:
        return configured
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", MAX_CONCURRENT_BATCHES_ENV, raw)
        return configured
    if value < 1:
        logger.warning("Ignoring %s=%d: must be at least 1", MAX_CONCURRENT_BATCHES_ENV, value)
        return configured
    return value


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing.
    Missing API keys are logged, not raised; the provider constructor is
    where a missing credential becomes fatal.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    engine_raw = raw.get("engine", {})
    defaults = EngineSettings()
    engine = EngineSettings(
        provider=str(engine_raw.get("provider", defaults.provider)),
        max_concurrent_batches=_max_concurrent_batches(
            int(engine_raw.get("max_concurrent_batches", defaults.max_concurrent_batches))
        ),
        trait_jitter=int(engine_raw.get("trait_jitter", defaults.trait_jitter)),
        timeout_retries=int(engine_raw.get("timeout_retries", defaults.timeout_retries)),
        enforce_diversity=bool(engine_raw.get("enforce_diversity", defaults.enforce_diversity)),
        validate_demographics=bool(engine_raw.get("validate_demographics", defaults.validate_demographics)),
        output_dir=Path(engine_raw.get("output_dir", defaults.output_dir)),
    )

    models: dict[str, ModelConfig] = {}
    available_providers: set[str] = set()

    for provider_name, model_raw in raw["models"].items():
        model_cfg = ModelConfig(
            name=provider_name,
            sdk=model_raw["sdk"],
            model=model_raw["model"],
            api_key_env=model_raw["api_key_env"],
            timeout_sec=int(model_raw["timeout_sec"]),
            max_tokens=int(model_raw["max_tokens"]),
            temperature=float(model_raw.get("temperature", 0.9)),
            top_p=model_raw.get("top_p"),
            top_k=model_raw.get("top_k"),
            base_url=model_raw.get("base_url"),
        )
        models[provider_name] = model_cfg

        api_key = os.environ.get(model_raw["api_key_env"], "").strip()
        if api_key:
            available_providers.add(provider_name)
            logger.info("Provider available: %s", provider_name)
        else:
            logger.info(
                "Provider skipped (no API key): %s, set %s in .env",
                provider_name,
                model_raw["api_key_env"],
            )

    return AppConfig(
        engine=engine,
        models=models,
        available_providers=available_providers,
    )
