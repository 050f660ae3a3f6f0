"""
Centralized configuration management for LetsFocus
Handles environment-specific configs and Pydantic schema validation
"""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from .config_schema import FocusConfig, validate_config_dict

logger = logging.getLogger(__name__)

# Environment variables that override file values
ENV_OVERRIDES = {
    "LETSFOCUS_AUDIO_BACKEND": "audio_backend",
    "LETSFOCUS_MUSIC_DIR": "music_dir",
    "LETSFOCUS_MUSIC_BASE_URL": "music_base_url",
    "LETSFOCUS_LOG_LEVEL": "log_level",
    "PORT": "port",
}


class ConfigManager:
    """Manages configuration loading and validation"""

    def __init__(self, base_path: Optional[str] = None):
        self.base_path = Path(base_path) if base_path else Path(__file__).parent.parent
        self.config_dir = self.base_path / "config"
        self.environment = os.getenv("LETSFOCUS_ENV", "development")
        self._lock = threading.RLock()

    def _read_json(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Could not load config file {path.name}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file {path.name}: top-level value is not an object")
            return {}
        return data

    def load_config(self, config_name: Optional[str] = None) -> Dict[str, Any]:
        """
        Load configuration based on environment

        Args:
            config_name: Specific config file name (without .json)
                        If None, uses environment-based config

        Returns:
            Configuration dictionary
        """
        if config_name is None:
            config_name = self.environment

        with self._lock:
            default_config = self._read_json(self.config_dir / "default_config.json")
            env_config = self._read_json(self.config_dir / f"{config_name}.json")

        config = {**default_config, **env_config, "environment": self.environment}
        for env_name, key in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value:
                config[key] = value

        validated = self.validate_config(config)
        validated["_runtime"] = {
            "environment": self.environment,
            "config_file": str(self.config_dir / f"{config_name}.json"),
            "base_path": str(self.base_path),
        }
        return validated

    def validate_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and clean configuration; invalid configs fall back to defaults."""
        try:
            validated_model, warnings = validate_config_dict(config)
        except ValueError as e:
            logger.error(f"❌ Configuration schema validation failed: {e}")
            logger.warning("Falling back to default configuration")
            return FocusConfig(environment=self.environment).to_dict()

        for warning in warnings:
            logger.warning(f"Config validation warning: {warning}")
        logger.debug("✅ Configuration validated against Pydantic schema")
        return validated_model.to_dict()

    def resolve_path(self, value: str) -> Path:
        """Resolve a config path relative to the project base path."""
        path = Path(value).expanduser()
        return path if path.is_absolute() else self.base_path / path


# Global config manager instance
config_manager = ConfigManager()


def load_config() -> Dict[str, Any]:
    """Load current environment configuration"""
    return config_manager.load_config()
