"""
Configuration management for the regulatory intelligence service.

Handles loading and accessing configuration from YAML files and environment variables.
"""

import copy
import os
from difflib import get_close_matches
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


class Config:
    """Configuration manager for the regulatory intelligence service."""

    # Default configuration values
    DEFAULTS: Dict[str, Any] = {
        "paths": {
            "base_dir": None,  # Set dynamically
            "database": "db/regintel.db",
            "exports": "exports",
            "logs": "logs",
        },
        "regions": [
            "US",
            "EU",
            "DE",
            "CH",
            "UK",
            "CA",
            "JP",
            "AU",
            "Global",
        ],
        "priorities": ["critical", "high", "medium", "low"],
        "update_types": [
            "regulation",
            "guidance",
            "standard",
            "approval",
            "alert",
            "recall",
        ],
        "scraper": {
            "request_timeout": 30,
            "delay_seconds": 3,
            "fallback_items": 4,
            "user_agent": (
                "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
                "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
            ),
            "rss_enabled": True,
            "rss_delay_seconds": 2,
        },
        "openfda": {
            "enabled": True,
            "base_url": "https://api.fda.gov",
            "api_key_env": "FDA_API_KEY",
            "limit_510k": 3,
            "limit_recalls": 2,
            "delay_seconds": 0.25,
        },
        "approval": {
            "auto_threshold": 0.85,
            "senior_threshold": 0.70,
            "expert_threshold": 0.50,
        },
        "scheduler": {
            "enabled": False,
            "timezone": "Europe/Berlin",
            "collection_interval_hours": 6,
            "enhancement_time": "03:00",
        },
        "logging": {
            "level": "INFO",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "file_enabled": True,
        },
    }

    _instance: Optional["Config"] = None
    _config: Dict[str, Any] = {}
    _base_dir: Optional[Path] = None

    def __new__(cls) -> "Config":
        """Singleton pattern to ensure single configuration instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        """Initialize configuration if not already done."""
        if self._initialized:
            return
        self._initialized = True
        self._config = copy.deepcopy(self.DEFAULTS)
        self._base_dir = self._find_base_dir()
        self._load_config_file()

    def _find_base_dir(self) -> Path:
        """Find the base directory of the installation."""
        env_base = os.environ.get("REGINTEL_BASE_DIR")
        if env_base:
            return Path(env_base)

        # scripts/regintel/config.py -> scripts/regintel -> scripts -> base
        current_file = Path(__file__).resolve()
        return current_file.parent.parent.parent

    def _load_config_file(self) -> None:
        """Load configuration from YAML file if it exists."""
        config_path = self._base_dir / "config" / "config.yaml"
        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                file_config = yaml.safe_load(f) or {}
                self._merge_config(file_config)

        self._config["paths"]["base_dir"] = str(self._base_dir)

    def _merge_config(self, new_config: Dict[str, Any]) -> None:
        """Deep merge new configuration into existing configuration."""
        for key, value in new_config.items():
            if key in self._config and isinstance(self._config[key], dict) and isinstance(value, dict):
                self._config[key].update(value)
            else:
                self._config[key] = value

    @property
    def base_dir(self) -> Path:
        """Get the base directory path."""
        return self._base_dir

    @property
    def database_path(self) -> Path:
        """Get the database file path."""
        return self._base_dir / self._config["paths"]["database"]

    @property
    def exports_dir(self) -> Path:
        """Get the directory PDF exports are written to by the CLI."""
        return self._base_dir / self._config["paths"]["exports"]

    @property
    def logs_dir(self) -> Path:
        """Get the logs directory path."""
        return self._base_dir / self._config["paths"]["logs"]

    @property
    def regions(self) -> List[str]:
        return self._config["regions"]

    @property
    def priorities(self) -> List[str]:
        return self._config["priorities"]

    @property
    def update_types(self) -> List[str]:
        return self._config["update_types"]

    def _validate_choice(self, value: str, choices: List[str], label: str) -> tuple[bool, str]:
        """
        Validate a value against a list of configured choices.

        Args:
            value: Value to validate.
            choices: Allowed values.
            label: Human-readable name used in messages.

        Returns:
            Tuple of (is_valid, suggestion_or_error)
        """
        if not value:
            return False, f"{label.capitalize()} cannot be empty"

        lowered = [c.lower() for c in choices]
        if value.lower() in lowered:
            return True, ""

        matches = get_close_matches(value.lower(), lowered, n=1, cutoff=0.6)
        if matches:
            return False, f"Invalid {label} '{value}'. Did you mean '{matches[0]}'? Valid values: {', '.join(choices)}"
        return False, f"Invalid {label} '{value}'. Valid values: {', '.join(choices)}"

    def validate_region(self, region: str) -> tuple[bool, str]:
        """Validate a region code against configured regions."""
        return self._validate_choice(region, self.regions, "region")

    def validate_priority(self, priority: str) -> tuple[bool, str]:
        """Validate a priority against configured priorities."""
        return self._validate_choice(priority, self.priorities, "priority")

    def validate_update_type(self, update_type: str) -> tuple[bool, str]:
        """Validate an update type against configured update types."""
        return self._validate_choice(update_type, self.update_types, "update type")

    def normalize_region(self, region: str) -> str:
        """
        Normalize a region to match configured case.

        Returns:
            Normalized region or 'Global' if unknown.
        """
        for valid in self.regions:
            if region and region.lower() == valid.lower():
                return valid
        return "Global"

    def normalize_priority(self, priority: str) -> str:
        """Normalize a priority, falling back to 'medium'."""
        for valid in self.priorities:
            if priority and priority.lower() == valid.lower():
                return valid
        return "medium"

    def normalize_update_type(self, update_type: str) -> str:
        """Normalize an update type, falling back to 'regulation'."""
        for valid in self.update_types:
            if update_type and update_type.lower() == valid.lower():
                return valid
        return "regulation"

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by key.

        Supports dot notation for nested keys (e.g., 'scraper.delay_seconds').
        """
        keys = key.split(".")
        value = self._config
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def reload(self) -> None:
        """Reload configuration from file."""
        self._config = copy.deepcopy(self.DEFAULTS)
        self._load_config_file()


# Global configuration instance
config = Config()
