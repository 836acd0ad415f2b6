"""Configuration management for GrociSmart."""

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_MODEL = "google-gla:gemini-2.0-flash"


@dataclass
class DataConfig:
    """Data storage configuration."""

    storage_dir: Path
    backend: str = "json"


@dataclass
class AIConfig:
    """Generative model configuration."""

    model: str = DEFAULT_MODEL
    number_of_people: int = 2


@dataclass
class PantryConfig:
    """Pantry defaults."""

    expiring_within_days: int = 30
    default_unit: str = "pcs"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"


@dataclass
class Config:
    """Complete application configuration."""

    data: DataConfig
    ai: AIConfig
    pantry: PantryConfig
    logging: LoggingConfig


class ConfigManager:
    """Manages application configuration from TOML files."""

    def __init__(self, config_path: Path | None = None):
        """Initialize configuration manager.

        Args:
            config_path: Optional explicit path to config file.
                        If not provided, searches standard locations.
        """
        self.config_path = config_path or self._find_config()
        self._config = self._load_config()

    @property
    def data(self) -> DataConfig:
        """Get data configuration."""
        return self._config.data

    @property
    def ai(self) -> AIConfig:
        """Get AI configuration."""
        return self._config.ai

    @property
    def pantry(self) -> PantryConfig:
        """Get pantry configuration."""
        return self._config.pantry

    @property
    def logging(self) -> LoggingConfig:
        """Get logging configuration."""
        return self._config.logging

    def _find_config(self) -> Path:
        """Find config file in standard locations."""
        locations = [
            Path.cwd() / "config.toml",
            Path.home() / ".config" / "grocismart" / "config.toml",
            Path.home() / ".grocismart" / "config.toml",
        ]

        for loc in locations:
            if loc.exists():
                return loc

        # Return default location if none found
        return Path.home() / ".config" / "grocismart" / "config.toml"

    def _load_config(self) -> Config:
        """Load configuration from TOML file."""
        if not self.config_path.exists():
            return self._default_config()

        with open(self.config_path, "rb") as f:
            data = tomllib.load(f)

        data_section = data.get("data", {})
        ai_section = data.get("ai", {})
        pantry_section = data.get("pantry", {})

        return Config(
            data=DataConfig(
                storage_dir=Path(
                    data_section.get("storage_dir", "~/grocismart/data")
                ).expanduser(),
                backend=data_section.get("backend", "json"),
            ),
            ai=AIConfig(
                model=ai_section.get("model", DEFAULT_MODEL),
                number_of_people=ai_section.get("number_of_people", 2),
            ),
            pantry=PantryConfig(
                expiring_within_days=pantry_section.get("expiring_within_days", 30),
                default_unit=pantry_section.get("default_unit", "pcs"),
            ),
            logging=LoggingConfig(
                level=data.get("logging", {}).get("level", "WARNING"),
            ),
        )

    def _default_config(self) -> Config:
        """Return default configuration."""
        return Config(
            data=DataConfig(storage_dir=Path.home() / "grocismart" / "data"),
            ai=AIConfig(),
            pantry=PantryConfig(),
            logging=LoggingConfig(),
        )

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get config value by dot-notation path.

        Args:
            key_path: Dot-separated path like 'data.storage_dir'
            default: Default value if path not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split(".")
        value: Any = self._config

        for key in keys:
            if hasattr(value, key):
                value = getattr(value, key)
            elif isinstance(value, dict):
                value = value.get(key)
                if value is None:
                    return default
            else:
                return default

        return value if value is not None else default
