"""Runtime configuration for PromptWatt.

Settings come from ``~/.promptwatt/config.yaml`` (optional) with
environment variables taking precedence. The file looks like:

    api_url: https://openrouter.ai/api/v1/chat/completions
    timeout_ms: 30000
    classifier_model: gpt-4o
    log_level: INFO

API keys are read from the environment only (``OPENROUTER_API_KEY``
for model calls; the classifier model uses whatever key litellm
expects for it, e.g. ``OPENAI_API_KEY``).
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

DEFAULT_API_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_TIMEOUT_MS = 30_000
DEFAULT_CLASSIFIER_MODEL = "gpt-4o"


class ConfigurationError(RuntimeError):
    """Raised when required configuration (e.g. a credential) is missing."""


@dataclass(frozen=True)
class Settings:
    """Resolved settings. Immutable once loaded."""
    api_key: str | None = None
    api_url: str = DEFAULT_API_URL
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    classifier_model: str = DEFAULT_CLASSIFIER_MODEL
    referer: str = "https://vercel.com"
    title: str = "LLM Model Comparison"
    log_level: str = "INFO"

    def require_api_key(self) -> str:
        """Return the model API key or raise ConfigurationError."""
        if not self.api_key:
            raise ConfigurationError(
                "API key configuration error. Please check server configuration.")
        return self.api_key


def get_config_dir() -> Path:
    """Get the PromptWatt config directory."""
    return Path.home() / ".promptwatt"


def get_config_path() -> Path:
    """Get the config file path (``PROMPTWATT_CONFIG`` overrides it)."""
    override = os.environ.get("PROMPTWATT_CONFIG")
    if override:
        return Path(override)
    return get_config_dir() / "config.yaml"


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load the YAML config file, or an empty dict if there is none."""
    config_path = path or get_config_path()
    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Invalid config file {config_path}: must be a mapping")
        return data
    return {}


def load_settings(
    path: Path | None = None,
    env: dict[str, str] | None = None,
) -> Settings:
    """Build Settings from the config file and the environment."""
    env = os.environ if env is None else env
    file_config = load_config(path)

    def pick(env_var: str, key: str, default: Any) -> Any:
        if env.get(env_var):
            return env[env_var]
        return file_config.get(key, default)

    timeout_raw = pick("PROMPTWATT_TIMEOUT_MS", "timeout_ms", DEFAULT_TIMEOUT_MS)
    try:
        timeout_ms = int(timeout_raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid timeout_ms: {timeout_raw!r}")
    if timeout_ms <= 0:
        raise ConfigurationError(f"timeout_ms must be positive, got {timeout_ms}")

    return Settings(
        api_key=env.get("OPENROUTER_API_KEY") or None,
        api_url=pick("PROMPTWATT_API_URL", "api_url", DEFAULT_API_URL),
        timeout_ms=timeout_ms,
        classifier_model=pick(
            "PROMPTWATT_CLASSIFIER_MODEL", "classifier_model", DEFAULT_CLASSIFIER_MODEL),
        referer=pick("PROMPTWATT_REFERER", "referer", Settings.referer),
        title=pick("PROMPTWATT_TITLE", "title", Settings.title),
        log_level=str(pick("PROMPTWATT_LOG_LEVEL", "log_level", "INFO")).upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    """Basic log format for the CLI and the web server."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ─── Global instance ──────────────────────────────────────────────

_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Forget cached settings so the next get_settings() reloads them."""
    global _settings
    _settings = None
