"""Tests for niri-settings' own TOML settings."""

from pathlib import Path

import pytest
import tomli

from niri_settings.config import Settings, validate_toml_structure
from niri_settings.exceptions import SettingsError, SettingsValidationError


class TestSettingsLoading:
    
    def test_missing_file_gives_defaults(self, temp_dir):
        settings = Settings.load(temp_dir / "none.toml")
        assert settings.niri.backup_suffix == ".bak"
        assert settings.niri.command == "niri"
        assert settings.niri.get_config_path() is None
        assert settings.layout.move_step == 10
        assert settings.logging.level == "INFO"
    
    def test_load_values(self, temp_dir):
        settings_file = temp_dir / "config.toml"
        settings_file.write_text("""
[niri]
config_path = "~/dotfiles/niri/config.kdl"
backup_suffix = ".orig"
timeout = 3

[layout]
move_step = 50

[logging]
level = "DEBUG"
""")
        settings = Settings.load(settings_file)
        assert settings.niri.get_config_path() == Path("~/dotfiles/niri/config.kdl").expanduser()
        assert settings.niri.backup_suffix == ".orig"
        assert settings.niri.timeout == 3
        assert settings.layout.move_step == 50
        assert settings.logging.level == "DEBUG"
    
    def test_default_location_uses_xdg(self, settings_home):
        assert Settings.get_settings_file() == settings_home / "niri-settings" / "config.toml"
    
    def test_invalid_toml(self, temp_dir):
        settings_file = temp_dir / "config.toml"
        settings_file.write_text("[niri\n")
        with pytest.raises(SettingsError) as exc_info:
            Settings.load(settings_file)
        assert "Invalid TOML" in str(exc_info.value)
    
    @pytest.mark.parametrize("content,message", [
        ("[window]\nx = 1\n", "Unknown settings section 'window'"),
        ("[niri]\nsocket = 'x'\n", "Unknown key 'socket'"),
        ("[niri]\ntimeout = 'soon'\n", "must be of type int"),
        ("[layout]\nmove_step = true\n", "must be of type int"),
        ("niri = 5\n", "must be a table"),
    ])
    def test_structure_errors(self, temp_dir, content, message):
        settings_file = temp_dir / "config.toml"
        settings_file.write_text(content)
        with pytest.raises(SettingsValidationError) as exc_info:
            Settings.load(settings_file)
        assert message in str(exc_info.value)
    
    @pytest.mark.parametrize("content", [
        "[niri]\ntimeout = 0\n",
        "[niri]\nbackup_suffix = ''\n",
        "[layout]\nmove_step = 0\n",
        "[layout]\nmove_step = 5000\n",
        "[logging]\nlevel = 'LOUD'\n",
    ])
    def test_range_errors(self, temp_dir, content):
        settings_file = temp_dir / "config.toml"
        settings_file.write_text(content)
        with pytest.raises(SettingsValidationError):
            Settings.load(settings_file)
    
    def test_validate_accepts_empty(self):
        validate_toml_structure({}, Path("config.toml"))


class TestSettingsSaving:
    
    def test_save_round_trip(self, temp_dir):
        settings_file = temp_dir / "nested" / "config.toml"
        settings = Settings()
        settings.layout.move_step = 25
        assert settings.save(settings_file) == settings_file
        
        data = tomli.loads(settings_file.read_text())
        assert data["layout"]["move_step"] == 25
        assert "config_path" not in data["niri"]
        assert Settings.load(settings_file) == settings
    
    def test_save_failure(self, temp_dir):
        blocker = temp_dir / "file"
        blocker.write_text("")
        with pytest.raises(SettingsError):
            Settings().save(blocker / "config.toml")
