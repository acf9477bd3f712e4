"""Tests for configuration loading."""

import pytest
from typedprops.config import Config, get_config, load_config, reset_config
from typedprops.errors import ConfigError


def test_defaults():
    config = Config()
    assert config.widget.blur_settle_ms == 100
    assert config.types.extension_prefix == "typedprops:"
    assert config.menu.confirm_property_delete is True
    assert config.storage.auto_save is True


def test_load_yaml_with_env_expansion(tmp_path, monkeypatch):
    # Register for restore, then unset so the .env file provides it
    monkeypatch.setenv("TYPEDPROPS_SETTINGS", "unset")
    monkeypatch.delenv("TYPEDPROPS_SETTINGS")
    env_file = tmp_path / ".env"
    env_file.write_text("TYPEDPROPS_SETTINGS=/tmp/props.yaml\n", encoding="utf-8")
    config_file = tmp_path / "typedprops.yaml"
    config_file.write_text(
        "widget:\n"
        "  blur_settle_ms: 250\n"
        "types:\n"
        "  default_currency: EUR\n"
        "storage:\n"
        "  settings_path: ${TYPEDPROPS_SETTINGS}\n"
        "unknown_section: ignored\n",
        encoding="utf-8",
    )

    config = load_config(config_file, env_file)

    assert config.widget.blur_settle_ms == 250
    assert config.types.default_currency == "EUR"
    assert config.storage.settings_path == "/tmp/props.yaml"
    assert get_config() is config


def test_missing_file_gives_defaults(tmp_path):
    config = load_config(tmp_path / "nope.yaml", tmp_path / ".env")
    assert config == Config()


def test_invalid_values_rejected(tmp_path):
    config_file = tmp_path / "bad.yaml"
    config_file.write_text("widget:\n  blur_settle_ms: -5\n", encoding="utf-8")
    with pytest.raises(ConfigError) as exc_info:
        load_config(config_file, tmp_path / ".env")
    assert exc_info.value.source == str(config_file)
    assert exc_info.value.details["errors"]


def test_reset_config():
    first = get_config()
    reset_config()
    assert get_config() is not first


class TestConfigSources:
    def test_config_path_from_environment(self, tmp_path, monkeypatch):
        config_file = tmp_path / "elsewhere.yaml"
        config_file.write_text("types:\n  default_currency: JPY\n", encoding="utf-8")
        monkeypatch.setenv("TYPEDPROPS_CONFIG", str(config_file))

        config = load_config(env_path=tmp_path / ".env")

        assert config.types.default_currency == "JPY"

    def test_field_overrides_beat_the_file(self, tmp_path, monkeypatch):
        config_file = tmp_path / "typedprops.yaml"
        config_file.write_text("widget:\n  blur_settle_ms: 250\n", encoding="utf-8")
        monkeypatch.setenv("TYPEDPROPS_WIDGET__BLUR_SETTLE_MS", "40")
        monkeypatch.setenv("TYPEDPROPS_TYPES__PROMPT_FOR_UNIT_PRESET", "false")
        monkeypatch.setenv("TYPEDPROPS_TYPES__EXTENSION_PREFIX", "ext:")
        monkeypatch.setenv("TYPEDPROPS_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("TYPEDPROPS_UNRELATED", "ignored")

        config = load_config(config_file, tmp_path / ".env")

        assert config.widget.blur_settle_ms == 40
        assert config.types.prompt_for_unit_preset is False
        assert config.types.extension_prefix == "ext:"
        assert config.log_level == "DEBUG"

    def test_relative_settings_path_follows_config_file(self, tmp_path):
        config_dir = tmp_path / "conf"
        config_dir.mkdir()
        config_file = config_dir / "typedprops.yaml"
        config_file.write_text("storage:\n  settings_path: data/props.yaml\n", encoding="utf-8")

        config = load_config(config_file, tmp_path / ".env")

        assert config.storage.settings_path == str(config_dir / "data" / "props.yaml")

    def test_references_inside_strings(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PROPS_HOME", "/srv/props")
        config_file = tmp_path / "typedprops.yaml"
        config_file.write_text("storage:\n  settings_path: ${PROPS_HOME}/settings.yaml\n", encoding="utf-8")

        config = load_config(config_file, tmp_path / ".env")

        assert config.storage.settings_path == "/srv/props/settings.yaml"

    def test_dotenv_beside_config_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TYPEDPROPS_MENU__CONFIRM_PROPERTY_DELETE", "unset")
        monkeypatch.delenv("TYPEDPROPS_MENU__CONFIRM_PROPERTY_DELETE")
        (tmp_path / ".env").write_text("TYPEDPROPS_MENU__CONFIRM_PROPERTY_DELETE=false\n", encoding="utf-8")
        config_file = tmp_path / "typedprops.yaml"
        config_file.write_text("{}\n", encoding="utf-8")

        config = load_config(config_file)

        assert config.menu.confirm_property_delete is False
