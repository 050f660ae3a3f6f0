import json

import pytest

from letsfocus.config import ConfigManager
from letsfocus.config_schema import FocusConfig, validate_config_dict


def write_config(directory, name, payload):
    config_dir = directory / "config"
    config_dir.mkdir(exist_ok=True)
    (config_dir / f"{name}.json").write_text(json.dumps(payload), encoding="utf-8")


def test_defaults_match_focus_session_defaults():
    config = FocusConfig()
    assert config.default_duration_minutes == 25
    assert config.music_volume == 0.3
    assert config.track_name_pattern == "music{index}.mp3"
    assert config.extra_track_names == ["background.mp3", "ambient.mp3", "focus.mp3", "chill.mp3"]
    assert config.audio_backend == "auto"


@pytest.mark.parametrize("field,value", [
    ("default_duration_minutes", 0),
    ("default_duration_minutes", 61),
    ("music_volume", 1.5),
    ("track_probe_limit", 0),
    ("audio_backend", "alsa"),
    ("log_level", "LOUD"),
    ("track_name_pattern", "music.mp3"),
    ("extra_track_names", ["../secret.mp3"]),
])
def test_invalid_values_rejected(field, value):
    with pytest.raises(ValueError):
        validate_config_dict({field: value})


def test_extra_track_names_cleaned():
    config, _ = validate_config_dict({"extra_track_names": [" focus.mp3", "", "focus.mp3", "chill.mp3"]})
    assert config.extra_track_names == ["focus.mp3", "chill.mp3"]


def test_unknown_keys_produce_warnings():
    _, warnings = validate_config_dict({"theme_color": "x", "_runtime": {}})
    assert warnings == ["Unknown config field 'theme_color' ignored"]


def test_environment_config_overrides_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv("LETSFOCUS_ENV", "production")
    write_config(tmp_path, "default_config", {"default_duration_minutes": 25, "music_volume": 0.3})
    write_config(tmp_path, "production", {"default_duration_minutes": 50})

    config = ConfigManager(str(tmp_path)).load_config()
    assert config["default_duration_minutes"] == 50
    assert config["music_volume"] == 0.3
    assert config["environment"] == "production"
    assert config["_runtime"]["environment"] == "production"


def test_env_variable_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("LETSFOCUS_AUDIO_BACKEND", "null")
    monkeypatch.setenv("PORT", "8080")
    write_config(tmp_path, "default_config", {"audio_backend": "mpg123"})

    config = ConfigManager(str(tmp_path)).load_config()
    assert config["audio_backend"] == "null"
    assert config["port"] == 8080


def test_invalid_config_falls_back_to_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("LETSFOCUS_ENV", raising=False)
    write_config(tmp_path, "default_config", {"default_duration_minutes": 500})

    config = ConfigManager(str(tmp_path)).load_config()
    assert config["default_duration_minutes"] == 25


def test_malformed_json_is_ignored(tmp_path):
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "default_config.json").write_text("{not json", encoding="utf-8")
    config = ConfigManager(str(tmp_path)).load_config()
    assert config["default_duration_minutes"] == 25


def test_resolve_path_relative_to_base(tmp_path):
    manager = ConfigManager(str(tmp_path))
    assert manager.resolve_path("music") == tmp_path / "music"
    assert manager.resolve_path(str(tmp_path / "abs")) == tmp_path / "abs"
