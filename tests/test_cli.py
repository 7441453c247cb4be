"""Tests for the niri-settings command line."""

import json
from unittest.mock import patch

import pytest
import tomli

from niri_settings import cli
from niri_settings.commands.binds import _normalize_combo, _same_combo
from niri_settings.accessors import read_appearance, read_keybindings, read_positions
from niri_settings.document import ConfigDocument
from niri_settings.exceptions import CompositorCommunicationError, CompositorNotFoundError
from niri_settings.models import Position

from conftest import SAMPLE_CONFIG


@pytest.fixture
def run(config_file, temp_dir, mock_client):
    """Run the CLI against the fixture config with a mocked compositor."""
    settings_file = temp_dir / "settings.toml"
    
    def _run(*args):
        argv = ["--settings", str(settings_file), "--config", str(config_file), *args]
        with patch("niri_settings.cli.NiriClient", return_value=mock_client):
            return cli.main(argv)
    
    return _run


class TestStatus:
    
    def test_status_json(self, run, capsys):
        assert run("status", "--json") == 0
        status = json.loads(capsys.readouterr().out)
        assert status["config"]["exists"] is True
        assert status["config"]["configured_outputs"] == ["DP-1", "HDMI-A-1"]
        assert status["config"]["keybindings"] == 5
        assert status["compositor"]["reachable"] is True
        assert status["compositor"]["outputs"]["HDMI-A-1"]["position"] == [2560, 0]
    
    def test_status_text_with_unreachable_compositor(self, run, mock_client, capsys):
        mock_client.list_outputs.side_effect = CompositorNotFoundError("Could not find 'niri' command.")
        assert run("status") == 0
        out = capsys.readouterr().out
        assert "niri-settings Status" in out
        assert "Bindings:   5" in out
        assert "Unreachable: Could not find 'niri' command." in out
    
    def test_default_command_is_status(self, run, capsys):
        assert run() == 0
        assert "niri-settings Status" in capsys.readouterr().out


class TestOutputs:
    
    def test_list(self, run, capsys):
        assert run("outputs", "list") == 0
        out = capsys.readouterr().out
        assert "DP-1" in out and "HDMI-A-1" in out
        assert "configured" in out
    
    def test_dry_run_leaves_file(self, run, config_file, capsys):
        assert run("outputs", "set", "DP-1", "10", "10") == 0
        assert "dry run" in capsys.readouterr().out
        assert config_file.read_text() == SAMPLE_CONFIG
    
    def test_snap_and_save(self, run, config_file, mock_client):
        assert run("outputs", "snap", "HDMI-A-1", "left", "--save", "--preview") == 0
        mock_client.set_output_position_preview.assert_called_once_with("HDMI-A-1", Position(-1920, 0))
        assert read_positions(ConfigDocument.load(config_file))["HDMI-A-1"] == Position(-1920, 0)
    
    def test_normalize_already_at_origin(self, run, capsys):
        assert run("outputs", "normalize", "--save") == 0
        # Already at the origin, every enabled output is still recorded
        assert "DP-1: 0,0" in capsys.readouterr().out
    
    def test_unknown_output(self, run):
        assert run("outputs", "set", "eDP-9", "0", "0") == 64
    
    def test_compositor_failure_exit_code(self, run, mock_client):
        mock_client.list_outputs.side_effect = CompositorCommunicationError("refused")
        assert run("outputs", "list") == 69


class TestBinds:
    
    def test_list_with_search(self, run, capsys):
        assert run("binds", "list", "--search", "fuzzel") == 0
        out = capsys.readouterr().out
        assert "Mod+D" in out
        assert "no-repeat" in out
        assert "Mod+T" not in out
    
    def test_add(self, run, config_file, mock_client):
        assert run("binds", "add", "Mod+Return", "foot -e htop", "--type", "spawn", "--no-repeat") == 0
        bindings = read_keybindings(ConfigDocument.load(config_file))
        assert bindings[-1].combo == "Mod+Return"
        assert bindings[-1].properties.repeat is False
        mock_client.reload_configuration.assert_called_once_with()
    
    def test_add_reload_failure_still_saves(self, run, config_file, mock_client, capsys):
        mock_client.reload_configuration.side_effect = CompositorCommunicationError("down")
        assert run("binds", "add", "Mod+O", "toggle-overview") == 0
        assert "Saved, but failed to reload niri config: down" in capsys.readouterr().err
        assert "Mod+O" in config_file.read_text()
    
    def test_delete(self, run, config_file):
        assert run("binds", "delete", "mod+q") == 0
        text = config_file.read_text()
        assert "close-window" not in text
        assert "// Programs" in text
    
    def test_delete_ignores_key_case(self, run, config_file, capsys):
        assert run("binds", "delete", "super+shift+e") == 0
        assert "Deleted 1 binding(s) for Mod+Shift+E" in capsys.readouterr().out
        assert "skip-confirmation" not in config_file.read_text()
    
    @pytest.mark.parametrize("typed", ["mod+q", "MOD+Q", "Super+q", "logo+Q"])
    def test_combo_matching_ignores_case(self, typed):
        assert _same_combo("Mod+Q", typed)
    
    def test_combo_matching_keeps_modifiers(self):
        assert not _same_combo("Mod+Q", "Mod+Shift+q")
        assert _normalize_combo("ctrl+mod+q") == "Mod+Ctrl+q"
    
    def test_delete_unknown(self, run):
        assert run("binds", "delete", "Mod+F12") == 64


class TestAppearance:
    
    def test_show(self, run, capsys):
        assert run("appearance", "show") == 0
        out = capsys.readouterr().out
        assert "Focus Ring" in out
        assert "border.off" in out
    
    def test_set(self, run, config_file, mock_client):
        assert run("appearance", "set", "gaps", "8") == 0
        assert read_appearance(ConfigDocument.load(config_file)).gaps == 8
        mock_client.reload_configuration.assert_called_once_with()
    
    def test_set_color(self, run, config_file):
        assert run("appearance", "set", "border.active-color", "#ff00ff") == 0
        assert '"#ff00ff"' in config_file.read_text()
    
    def test_unknown_field(self, run):
        assert run("appearance", "set", "blur", "on") == 64
    
    def test_invalid_value(self, run):
        assert run("appearance", "set", "gaps", "wide") == 64


class TestErrors:
    
    def test_missing_config(self, run, config_file):
        config_file.unlink()
        assert run("binds", "list") == 74
    
    def test_parse_error(self, run, config_file, capsys):
        config_file.write_text("binds {\n")
        assert run("binds", "list") == 65
        assert "config.kdl" in capsys.readouterr().err
    
    def test_invalid_settings(self, run, temp_dir):
        (temp_dir / "settings.toml").write_text("[bogus]\n")
        assert run("status") == 78


class TestInit:
    
    def test_init_writes_defaults(self, temp_dir):
        settings_file = temp_dir / "conf" / "config.toml"
        assert cli.main(["--settings", str(settings_file), "init"]) == 0
        data = tomli.loads(settings_file.read_text())
        assert data["layout"]["move_step"] == 10
    
    def test_init_keeps_existing_without_force(self, temp_dir, capsys):
        settings_file = temp_dir / "config.toml"
        settings_file.write_text("[bogus]\n")
        assert cli.main(["--settings", str(settings_file), "init"]) == 0
        assert settings_file.read_text() == "[bogus]\n"
        
        assert cli.main(["--settings", str(settings_file), "init", "--force"]) == 0
        assert "[niri]" in settings_file.read_text()
