"""YAML config loader with validation and defaults."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import click
import yaml
from dotenv import load_dotenv

from market_pulse.utils.logger import get_logger

logger = get_logger()

DEFAULT_COOLDOWN_HOURS = 3


def get_app_dir() -> Path:
    """Get the platform-specific application config directory.

    - macOS: ~/Library/Application Support/market-pulse/
    - Windows: C:\\Users\\<user>\\AppData\\Roaming\\market-pulse\\
    - Linux: ~/.config/market-pulse/
    """
    return Path(click.get_app_dir("market-pulse"))


_DEFAULT_CONFIG = {
    "topics": {
        "domain": "Digital Marketing",
    },
    "cache": {
        "cooldown_hours": DEFAULT_COOLDOWN_HOURS,
    },
    "generation": {
        "provider": None,  # Auto-detected from model name if not set
        "model": "gemini-2.0-flash",
        "max_tokens": 4096,
        "temperature": 0.7,
        "trend_count": 6,
    },
    "database": {"path": "data/market_pulse.db"},
    "logging": {"level": "INFO", "file": "data/logs/market_pulse.log", "max_size_mb": 5, "backup_count": 3},
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base, returning a new dict."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class Config:
    """Application configuration loaded from YAML with env var support."""

    def __init__(self, data: dict[str, Any], project_root: Path):
        self._data = data
        self.project_root = project_root

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> Config:
        """Load config from YAML file, merging with defaults.

        Resolution order:
        1. Explicit config_path argument (--config flag)
        2. CWD ./config/config.yaml (development mode)
        3. APP_DIR/config.yaml (installed mode)
        """
        if config_path is not None:
            config_path = Path(config_path)
            project_root = config_path.parent.parent if config_path.parent.name == "config" else config_path.parent
        else:
            cwd_config = Path.cwd() / "config" / "config.yaml"
            app_dir_config = get_app_dir() / "config.yaml"

            if cwd_config.exists():
                config_path = cwd_config
                project_root = Path.cwd()
            elif app_dir_config.exists():
                config_path = app_dir_config
                project_root = get_app_dir()
            else:
                # No config found, use CWD as project root (defaults only)
                config_path = cwd_config
                project_root = Path.cwd()

        env_path = project_root / ".env"
        if env_path.exists():
            load_dotenv(env_path)

        user_config: dict = {}
        if config_path.exists():
            with open(config_path) as f:
                user_config = yaml.safe_load(f) or {}

        data = _deep_merge(_DEFAULT_CONFIG, user_config)
        return cls(data, project_root)

    def get(self, *keys: str, default: Any = None) -> Any:
        """Get a nested config value using dot-separated keys or varargs."""
        if len(keys) == 1 and "." in keys[0]:
            keys = tuple(keys[0].split("."))

        current = self._data
        for key in keys:
            if isinstance(current, dict):
                current = current.get(key)
                if current is None:
                    return default
            else:
                return default
        return current

    @property
    def db_path(self) -> Path:
        return self.project_root / self.get("database.path", default="data/market_pulse.db")

    @property
    def log_file(self) -> Path | None:
        log = self.get("logging.file")
        return self.project_root / log if log else None

    @property
    def domain(self) -> str:
        return self.get("topics.domain", default="Digital Marketing")

    def _cooldown_hours(self) -> float | None:
        try:
            return float(self.get("cache.cooldown_hours", default=DEFAULT_COOLDOWN_HOURS))
        except (TypeError, ValueError):
            return None

    @property
    def cooldown_ms(self) -> int:
        """Cooldown in milliseconds; a non-numeric setting falls back to the default."""
        hours = self._cooldown_hours()
        if hours is None:
            logger.warning(
                "cache.cooldown_hours is not a number: %r, using %s",
                self.get("cache.cooldown_hours"), DEFAULT_COOLDOWN_HOURS,
            )
            hours = DEFAULT_COOLDOWN_HOURS
        return int(hours * 60 * 60 * 1000)

    @property
    def generation(self) -> dict:
        return self._data.get("generation", {})

    @property
    def raw(self) -> dict:
        return self._data

    def env(self, key: str, default: str | None = None) -> str | None:
        """Get an environment variable."""
        return os.environ.get(key, default)

    @property
    def llm_provider(self) -> str:
        """Get the effective LLM provider (explicit or auto-detected from model)."""
        provider = self.get("generation.provider")
        if provider:
            return provider
        model = self.get("generation.model", default="gemini-2.0-flash")
        if model.startswith("claude-"):
            return "anthropic"
        elif model.startswith(("gpt-", "o1", "o3")):
            return "openai"
        elif model.startswith("gemini-"):
            return "google"
        return "google"

    def validate(self) -> list[str]:
        """Return a list of validation warnings."""
        warnings = []

        provider = self.llm_provider
        provider_env_keys = {
            "anthropic": "ANTHROPIC_API_KEY",
            "openai": "OPENAI_API_KEY",
            "google": "GOOGLE_API_KEY",
        }
        env_key = provider_env_keys.get(provider, "GOOGLE_API_KEY")
        if not self.env(env_key):
            warnings.append(f"{env_key} not set (required for {provider} provider)")

        hours = self._cooldown_hours()
        if hours is None:
            warnings.append(f"cache.cooldown_hours is not a number: {self.get('cache.cooldown_hours')!r}")
        elif hours < 0:
            warnings.append("cache.cooldown_hours is negative; every load will refetch")
        return warnings
