"""Tailscale LocalAPI Configuration System.

YAML configuration with Pydantic validation. Keys missing from the file
fall back to the environment (TAILSCALE_LOCALAPI_ prefix, "__" for nested
keys).

Config Layer Priority (highest to lowest):
1. Runtime overrides (in-memory, e.g. CLI flags)
2. Config file (~/.config/tailscale-localapi/config.yaml)
3. Environment variables
4. Defaults (defined in Pydantic models)

Usage:
    from tailscale_localapi.core.config import get_settings

    settings = get_settings()
    print(settings.connection.max_retries)  # 5 (default)
"""

from __future__ import annotations

import threading
import warnings
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tailscale_localapi.core.exceptions import ConfigurationError

DEFAULT_CONFIG_DIR = Path.home() / ".config" / "tailscale-localapi"


# =============================================================================
# Sub-configuration Models (nested sections)
# =============================================================================


class TransportSettings(BaseModel):
    """How requests reach tailscaled."""

    socket_path: Optional[str] = None
    use_socket_only: bool = False
    timeout: Optional[float] = Field(default=None, gt=0)  # None = no deadline


class ConnectionSettings(BaseModel):
    """Startup probe retry policy."""

    max_retries: int = Field(default=5, ge=0)
    retry_delay_ms: PositiveInt = 5000
    backoff_factor: float = Field(default=1.5, gt=1)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "console"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate renderer name."""
        if v.lower() not in {"json", "console"}:
            raise ValueError(f"Invalid log format: {v}. Must be 'json' or 'console'")
        return v.lower()


class Settings(BaseSettings):
    """Main settings class.

    Loads configuration from:
    1. Config file values passed in by create_settings()
    2. Environment variables (TAILSCALE_LOCALAPI_ prefix)
    3. Defaults defined in Pydantic models
    """

    model_config = SettingsConfigDict(
        env_prefix="TAILSCALE_LOCALAPI_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    transport: TransportSettings = Field(default_factory=TransportSettings)
    connection: ConnectionSettings = Field(default_factory=ConnectionSettings)
    logging_config: LoggingConfig = Field(
        default_factory=LoggingConfig, alias="logging"
    )

    @property
    def logging(self) -> LoggingConfig:
        """Alias for logging_config to match YAML key and common usage."""
        return self.logging_config


# =============================================================================
# Configuration Loading Functions
# =============================================================================


def load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML content as dictionary.

    Raises:
        ConfigurationError: If file cannot be read or parsed.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(
            config_path=str(path),
            message=f"Configuration file not found: {path}",
        )
    except yaml.YAMLError as e:
        raise ConfigurationError(
            config_path=str(path),
            message=f"Invalid YAML in {path}: {e}",
        )

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigurationError(
            config_path=str(path),
            message=f"Configuration root in {path} must be a mapping",
        )
    return content


def load_config_file(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the configuration file.

    A missing default file is not an error; a missing explicit file is.
    """
    if path is None:
        path = DEFAULT_CONFIG_DIR / "config.yaml"
        if not path.exists():
            return {}

    return load_yaml_file(Path(path).expanduser())


def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge multiple configuration dictionaries.

    Later configs override earlier ones.
    """
    result: Dict[str, Any] = {}

    for config in configs:
        for key, value in config.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = merge_configs(result[key], value)
            else:
                result[key] = value

    return result


def create_settings(
    config_path: Optional[Path] = None,
    runtime_overrides: Optional[Dict[str, Any]] = None,
) -> Settings:
    """Create a Settings instance from file, environment and overrides.

    Args:
        config_path: Optional path to the YAML config file.
        runtime_overrides: Optional overrides applied last.

    Returns:
        Configured Settings instance.

    Raises:
        ConfigurationError: If configuration is invalid.
    """
    config_base = Path(config_path).expanduser().parent if config_path else DEFAULT_CONFIG_DIR

    env_path = config_base / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    merged = load_config_file(config_path)
    if runtime_overrides:
        merged = merge_configs(merged, runtime_overrides)

    try:
        return Settings(**merged)
    except Exception as e:
        raise ConfigurationError(
            config_path=str(config_path or DEFAULT_CONFIG_DIR / "config.yaml"),
            message=f"Configuration validation failed: {e}",
        ) from e


# =============================================================================
# Singleton Settings Access
# =============================================================================


class _SettingsHolder:
    """Thread-safe singleton holder for Settings instance."""

    _instance: Optional[Settings] = None
    _lock: threading.Lock = threading.Lock()

    @classmethod
    def get(cls, force_reload: bool = False, **kwargs: Any) -> Settings:
        if cls._instance is None or force_reload:
            with cls._lock:
                if cls._instance is None or force_reload:  # pragma: no cover
                    cls._instance = create_settings(**kwargs)
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton (for testing)."""
        with cls._lock:
            cls._instance = None


def get_settings(
    force_reload: bool = False,
    config_path: Optional[Path] = None,
    runtime_overrides: Optional[Dict[str, Any]] = None,
) -> Settings:
    """Get the global Settings singleton.

    Settings are loaded once and cached for subsequent calls.

    Examples:
        >>> settings = get_settings()
        >>> settings = get_settings(
        ...     force_reload=True,
        ...     runtime_overrides={"transport": {"use_socket_only": True}},
        ... )
    """
    if not force_reload and _SettingsHolder._instance is not None:
        if config_path is not None or runtime_overrides is not None:
            warnings.warn(
                "Arguments provided to get_settings() are ignored because "
                "singleton is already initialized. Use force_reload=True "
                "to apply new configuration.",
                RuntimeWarning,
                stacklevel=2,
            )

    return _SettingsHolder.get(
        force_reload=force_reload,
        config_path=config_path,
        runtime_overrides=runtime_overrides,
    )


def reset_settings() -> None:
    """Reset the settings singleton (for testing)."""
    _SettingsHolder.reset()
