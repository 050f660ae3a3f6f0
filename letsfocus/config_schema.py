"""
Pydantic models for LetsFocus configuration validation

Type-safe configuration schema with automatic validation, preventing runtime
errors from malformed config files.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field, field_validator

from .constants import (DEFAULT_DURATION_MINUTES, DEFAULT_EXTRA_TRACK_NAMES,
                        DEFAULT_MUSIC_VOLUME, DEFAULT_TRACK_NAME_PATTERN,
                        DEFAULT_TRACK_PROBE_LIMIT, MAX_DURATION_MINUTES,
                        MIN_DURATION_MINUTES)


class FocusConfig(BaseModel):
    """Complete LetsFocus configuration schema.

    Example:
        >>> config = FocusConfig(**json.load(open("config/development.json")))
        >>> config.default_duration_minutes
        25
    """

    # Timer settings
    default_duration_minutes: int = Field(
        default=DEFAULT_DURATION_MINUTES,
        ge=MIN_DURATION_MINUTES,
        le=MAX_DURATION_MINUTES,
        description="Session length used at startup and after reset (minutes)",
    )

    # Background music settings
    music_volume: float = Field(default=DEFAULT_MUSIC_VOLUME, ge=0.0, le=1.0, description="Playback gain (0-1)")
    music_dir: str = Field(default="music", description="Directory holding music files (relative to base path)")
    music_base_url: str = Field(default="", description="Probe tracks over HTTP at this URL instead of music_dir")
    track_name_pattern: str = Field(default=DEFAULT_TRACK_NAME_PATTERN, description="Numbered track file name")
    track_probe_limit: int = Field(default=DEFAULT_TRACK_PROBE_LIMIT, ge=1, le=100, description="Highest ordinal probed")
    extra_track_names: List[str] = Field(
        default_factory=lambda: list(DEFAULT_EXTRA_TRACK_NAMES),
        description="Additional well-known track names appended after numbered tracks",
    )
    audio_backend: str = Field(default="auto", pattern=r"^(auto|mpg123|null)$", description="Audio output backend")
    mpg123_binary: str = Field(default="mpg123", description="mpg123 executable")
    autostart_music: bool = Field(default=False, description="Enable background music once discovery settles")

    # Runtime settings
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$", description="Logging level")
    host: str = Field(default="127.0.0.1", description="HTTP bind address")
    port: int = Field(default=5050, ge=1, le=65535, description="HTTP port")

    model_config = {
        "extra": "allow",
        "str_strip_whitespace": True,
        "validate_assignment": True,
    }

    @field_validator("track_name_pattern")
    @classmethod
    def validate_track_name_pattern(cls, v: str) -> str:
        """Pattern must embed the ordinal as {index}."""
        if "{index}" not in v:
            raise ValueError("track_name_pattern must contain '{index}'")
        try:
            v.format(index=1)
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(f"Invalid track_name_pattern: {e}")
        return v

    @field_validator("extra_track_names")
    @classmethod
    def validate_extra_track_names(cls, v: List[str]) -> List[str]:
        """Drop blanks and duplicates, keep order, refuse path separators."""
        cleaned: List[str] = []
        for name in v:
            name = name.strip()
            if not name:
                continue
            if "/" in name or "\\" in name:
                raise ValueError(f"Track name must not contain path separators: {name}")
            if name not in cleaned:
                cleaned.append(name)
        return cleaned

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


def validate_config_dict(config_dict: Dict[str, Any]) -> tuple[FocusConfig, list[str]]:
    """Validate a config dictionary against the schema.

    Returns:
        Tuple of (validated_config, warnings_list)

    Raises:
        ValueError: If config is invalid with detailed error messages
    """
    warnings = []
    known = set(FocusConfig.model_fields)
    for key in config_dict:
        if key not in known and not key.startswith("_"):
            warnings.append(f"Unknown config field '{key}' ignored")

    try:
        validated = FocusConfig(**{k: v for k, v in config_dict.items() if not k.startswith("_")})
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {str(e)}")
    return validated, warnings
