import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # Python 3.10
from typing import Any
from dataclasses import dataclass, replace

from .core.exceptions import ConfigError


def _as_int(value: Any, source: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{source} must be an integer, got {value!r}") from None


@dataclass
class Settings:
    """Settings for the brainus command line.

    The library itself never reads the environment; only the CLI loads these.

    Priority (highest to lowest):
    1. CLI arguments (set at runtime)
    2. Environment variables (including .env in cwd)
    3. config.toml file
    4. Default values (None = client default)
    """

    api_key: str | None = None
    base_url: str | None = None
    timeout: int | None = None
    max_retries: int | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Settings":
        """Load settings from all sources with proper priority.

        Args:
            config_path: Path to config.toml file (defaults to cwd/config.toml)

        Returns:
            Settings instance with merged values
        """
        config_data: dict[str, Any] = {}

        if config_path is None:
            config_path = Path.cwd() / "config.toml"

        if config_path.exists():
            config_data = cls._load_toml(config_path)

        config_data = cls._merge_env(config_data)

        return cls(**config_data)

    @staticmethod
    def _load_toml(path: Path) -> dict[str, Any]:
        """Load the [brainus] table from a TOML file."""
        with open(path, "rb") as f:
            data = tomllib.load(f)

        result: dict[str, Any] = {}

        section = data.get("brainus", {})
        if "api_key" in section:
            result["api_key"] = section["api_key"]
        if "base_url" in section:
            result["base_url"] = section["base_url"]
        if "timeout" in section:
            result["timeout"] = _as_int(section["timeout"], "brainus.timeout")
        if "max_retries" in section:
            result["max_retries"] = _as_int(section["max_retries"], "brainus.max_retries")

        return result

    @staticmethod
    def _merge_env(config_data: dict[str, Any]) -> dict[str, Any]:
        """Merge environment variables into settings (env takes priority over file)."""
        from dotenv import load_dotenv

        env_path = Path.cwd() / ".env"
        if env_path.exists():
            load_dotenv(env_path, override=True)

        env_mappings = {
            "BRAINUS_API_KEY": "api_key",
            "BRAINUS_BASE_URL": "base_url",
            "BRAINUS_TIMEOUT": "timeout",
            "BRAINUS_MAX_RETRIES": "max_retries",
        }

        for env_var, config_key in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                if config_key in ["timeout", "max_retries"]:
                    config_data[config_key] = _as_int(value, env_var)
                else:
                    config_data[config_key] = value

        return config_data

    def merge_cli_args(self, **kwargs) -> "Settings":
        """Create new Settings with CLI arguments merged in (None values are ignored)."""
        updates = {k: v for k, v in kwargs.items() if v is not None}
        return replace(self, **updates)

    def client_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for BrainusAI."""
        return {
            "api_key": self.api_key or "",
            "base_url": self.base_url,
            "timeout": self.timeout,
            "max_retries": self.max_retries,
        }


_global_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance, loading it if not already loaded."""
    global _global_settings
    if _global_settings is None:
        _global_settings = Settings.load()
    return _global_settings


def set_settings(settings: Settings | None) -> None:
    """Set (or with None, reset) the global settings instance."""
    global _global_settings
    _global_settings = settings
