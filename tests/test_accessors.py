"""Tests for the typed accessors over the config document."""

import pytest

from niri_settings.accessors import (
    configured_output_names,
    read_appearance,
    read_keybindings,
    read_positions,
    write_appearance,
    write_keybindings,
    write_position,
    write_positions,
)
from niri_settings.document import ConfigDocument
from niri_settings.exceptions import DocumentIOError, MissingBlockError
from niri_settings.models import (
    AddBinding,
    ArgAction,
    BindingProperties,
    CenterFocusedColumn,
    DeleteBinding,
    GradientColor,
    Keybinding,
    Modifiers,
    ModifyBinding,
    Position,
    SimpleAction,
    SolidColor,
    SpawnAction,
    SpawnShellAction,
)

from conftest import SAMPLE_CONFIG


def binding(combo: str, action, **props) -> Keybinding:
    modifiers, key = Modifiers.parse(combo)
    return Keybinding(modifiers=modifiers, key=key, action=action, properties=BindingProperties(**props))


# ============================================================================
# Positions
# ============================================================================

class TestPositions:
    
    def test_read_includes_disabled_outputs(self, doc):
        assert read_positions(doc) == {
            "DP-1": Position(0, 0),
            "HDMI-A-1": Position(2560, 0),
        }
    
    def test_missing_coordinate_reads_as_zero(self):
        doc = ConfigDocument.from_string('output "DP-1" {\n    position x=100\n}\n')
        assert read_positions(doc) == {"DP-1": Position(100, 0)}
    
    def test_non_integer_position_skipped(self):
        doc = ConfigDocument.from_string('output "DP-1" {\n    position x="left" y=0\n}\n')
        assert read_positions(doc) == {}
    
    def test_output_without_position_skipped(self):
        doc = ConfigDocument.from_string('output "DP-1" {\n    scale 2.0\n}\n')
        assert read_positions(doc) == {}
        assert configured_output_names(doc) == {"DP-1"}
    
    def test_configured_names(self, doc):
        assert configured_output_names(doc) == {"DP-1", "HDMI-A-1"}
    
    def test_write_existing_output(self, doc):
        write_position(doc, "DP-1", Position(1920, 0))
        assert doc.to_string() == SAMPLE_CONFIG.replace(
            "    position x=0 y=0\n", "    position x=1920 y=0\n"
        )
    
    def test_write_reenables_disabled_output_in_place(self, doc):
        write_position(doc, "HDMI-A-1", Position(-1920, 0))
        text = doc.to_string()
        assert '/-output "HDMI-A-1"' not in text
        assert text.count('output "HDMI-A-1"') == 1
        assert 'output "HDMI-A-1" {\n    position x=-1920 y=0\n}' in text
        # Still between the DP-1 output and the layout block
        assert text.index('output "HDMI-A-1"') < text.index("layout {")
    
    def test_write_unknown_output_appends_node(self, doc):
        write_position(doc, "eDP-1", Position(0, 1440))
        assert doc.to_string() == SAMPLE_CONFIG + 'output "eDP-1" {\n    position x=0 y=1440\n}\n'
    
    def test_write_adds_position_child(self):
        doc = ConfigDocument.from_string('output "DP-1" {\n    scale 2.0\n}\n')
        write_position(doc, "DP-1", Position(5, 6))
        assert doc.to_string() == 'output "DP-1" {\n    scale 2.0\n    position x=5 y=6\n}\n'
    
    def test_write_positions_saves(self, doc, config_file):
        write_positions(doc, {"DP-1": Position(0, 1080), "HDMI-A-1": Position(0, 0)})
        reloaded = ConfigDocument.load(config_file)
        assert read_positions(reloaded) == {"DP-1": Position(0, 1080), "HDMI-A-1": Position(0, 0)}
        assert "// niri config" in config_file.read_text()
    
    def test_write_positions_failure_rolls_back(self, doc, config_file):
        doc.backup_path.mkdir()
        with pytest.raises(DocumentIOError):
            write_positions(doc, {"DP-1": Position(10, 10)})
        assert doc.to_string() == SAMPLE_CONFIG
        assert config_file.read_text() == SAMPLE_CONFIG


# ============================================================================
# Keybindings
# ============================================================================

class TestReadKeybindings:
    
    def test_reads_enabled_bindings_in_order(self, doc):
        bindings = read_keybindings(doc)
        assert [b.combo for b in bindings] == ["Mod+T", "Mod+D", "Mod+Q", "Mod+1", "Mod+Shift+E"]
        assert [b.source_index for b in bindings] == [0, 1, 3, 4, 5]
    
    def test_actions(self, doc):
        actions = [b.action for b in read_keybindings(doc)]
        assert actions == [
            SpawnAction(("alacritty",)),
            SpawnAction(("fuzzel",)),
            SimpleAction("close-window"),
            ArgAction("focus-workspace", 1),
            SimpleAction("quit"),
        ]
    
    def test_properties(self, doc):
        bindings = read_keybindings(doc)
        assert bindings[0].properties == BindingProperties()
        assert bindings[1].properties.repeat is False
    
    def test_modifiers_are_case_insensitive(self):
        doc = ConfigDocument.from_string(
            "binds {\n    super+CONTROL+alt+x { close-window; }\n    LOGO+shift+y { close-window; }\n}\n"
        )
        combos = [b.combo for b in read_keybindings(doc)]
        assert combos == ["Mod+Ctrl+Alt+x", "Mod+Shift+y"]
    
    def test_spawn_shell_spellings(self):
        doc = ConfigDocument.from_string(
            'binds {\n    Mod+A { spawn-sh "notify-send hi"; }\n    Mod+B { spawn-shell "ls | wc"; }\n}\n'
        )
        assert [b.action for b in read_keybindings(doc)] == [
            SpawnShellAction("notify-send hi"),
            SpawnShellAction("ls | wc"),
        ]
    
    def test_typed_arguments(self):
        doc = ConfigDocument.from_string(
            'binds {\n'
            '    Mod+A { set-column-width "-10%"; }\n'
            '    Mod+B { toggle-window-floating true; }\n'
            '    Mod+C { move-column-to-workspace 3; }\n'
            '}\n'
        )
        assert [b.action for b in read_keybindings(doc)] == [
            ArgAction("set-column-width", "-10%"),
            ArgAction("toggle-window-floating", True),
            ArgAction("move-column-to-workspace", 3),
        ]
    
    def test_all_properties(self):
        doc = ConfigDocument.from_string(
            "binds {\n    Mod+L repeat=false cooldown-ms=150 allow-when-locked=true { close-window; }\n}\n"
        )
        props = read_keybindings(doc)[0].properties
        assert props == BindingProperties(repeat=False, cooldown_ms=150, allow_when_locked=True)
    
    def test_entry_without_action_skipped(self):
        doc = ConfigDocument.from_string("binds {\n    Mod+A\n    Mod+B { close-window; }\n}\n")
        bindings = read_keybindings(doc)
        assert [b.combo for b in bindings] == ["Mod+B"]
        assert bindings[0].source_index == 1
    
    @pytest.mark.parametrize("entry", [
        "spawn",
        "spawn 42",
        "spawn-sh",
        "spawn-shell true",
    ])
    def test_spawn_without_command_skipped(self, entry):
        doc = ConfigDocument.from_string(f"binds {{\n    Mod+A {{ {entry}; }}\n    Mod+B {{ close-window; }}\n}}\n")
        assert [b.combo for b in read_keybindings(doc)] == ["Mod+B"]
    
    def test_missing_binds_block(self):
        assert read_keybindings(ConfigDocument.from_string("layout {\n}\n")) == []


class TestWriteKeybindings:
    
    def test_missing_binds_block_raises_before_changes(self):
        doc = ConfigDocument.from_string("layout {\n}\n")
        with pytest.raises(MissingBlockError):
            write_keybindings(doc, [AddBinding(binding("Mod+T", SimpleAction("close-window")))])
        assert doc.to_string() == "layout {\n}\n"
    
    def test_add_appends_formatted_node(self):
        doc = ConfigDocument.from_string('binds {\n    Mod+T { spawn "alacritty"; }\n}\n')
        write_keybindings(doc, [AddBinding(binding("Mod+Q", SimpleAction("close-window")))])
        assert doc.to_string() == (
            "binds {\n"
            '    Mod+T { spawn "alacritty"; }\n'
            "    Mod+Q {\n"
            "        close-window\n"
            "    }\n"
            "}\n"
        )
    
    def test_add_writes_explicit_properties_and_args(self):
        doc = ConfigDocument.from_string("binds {\n}\n")
        new = binding(
            "Mod+Return",
            SpawnAction(("foot", "-e", "htop")),
            repeat=False,
            allow_when_locked=True,
        )
        write_keybindings(doc, [AddBinding(new)])
        assert doc.to_string() == (
            "binds {\n"
            "    Mod+Return repeat=false allow-when-locked=true {\n"
            '        spawn "foot" "-e" "htop"\n'
            "    }\n"
            "}\n"
        )
        assert read_keybindings(doc)[0].action == SpawnAction(("foot", "-e", "htop"))
    
    def test_modify_in_place_keeps_comment(self, doc):
        write_keybindings(doc, [ModifyBinding(0, binding("Mod+T", SpawnAction(("kitty",))))])
        text = doc.to_string()
        assert "    // Programs\n    Mod+T {\n        spawn \"kitty\"\n    }\n    Mod+D" in text
    
    def test_delete_keeps_disabled_entries(self, doc):
        write_keybindings(doc, [DeleteBinding(3)])
        text = doc.to_string()
        assert "close-window" not in text
        assert '/-Mod+X { spawn "disabled"; }' in text
    
    def test_modify_then_delete_uses_original_indices(self, doc):
        write_keybindings(doc, [
            DeleteBinding(0),
            ModifyBinding(4, binding("Mod+2", ArgAction("focus-workspace", 2))),
            DeleteBinding(3),
            AddBinding(binding("Mod+W", SimpleAction("toggle-overview"))),
        ])
        combos = [b.combo for b in read_keybindings(doc)]
        assert combos == ["Mod+D", "Mod+2", "Mod+Shift+E", "Mod+W"]
    
    def test_duplicate_and_out_of_range_deletes(self, doc):
        write_keybindings(doc, [DeleteBinding(1), DeleteBinding(1), DeleteBinding(42)])
        assert [b.combo for b in read_keybindings(doc)] == ["Mod+T", "Mod+Q", "Mod+1", "Mod+Shift+E"]
    
    def test_spawn_shell_written_as_spawn_sh(self):
        doc = ConfigDocument.from_string("binds {\n}\n")
        write_keybindings(doc, [AddBinding(binding("Mod+S", SpawnShellAction("grim - | wl-copy")))])
        assert 'spawn-sh "grim - | wl-copy"' in doc.to_string()


# ============================================================================
# Appearance
# ============================================================================

class TestReadAppearance:
    
    def test_reads_sample(self, doc):
        settings = read_appearance(doc)
        assert settings.gaps == 16
        assert settings.center_focused_column is CenterFocusedColumn.NEVER
        assert settings.focus_ring.active_color == SolidColor("#7fc8ff")
        assert settings.border.off is True
        assert settings.border.active_color == SolidColor("#ffc87f")
    
    def test_defaults_without_layout(self):
        settings = read_appearance(ConfigDocument.from_string(""))
        assert settings.gaps == 16
        assert settings.shadow.on is False
        assert settings.struts.left is None
    
    def test_gradient_wins_over_color(self):
        doc = ConfigDocument.from_string(
            "layout {\n"
            "    focus-ring {\n"
            '        active-color "#ff0000"\n'
            '        active-gradient from="#80c8ff" to="#bbddff" angle=45 relative-to="workspace-view" in="oklch"\n'
            "    }\n"
            "}\n"
        )
        gradient = read_appearance(doc).focus_ring.active_color
        assert gradient == GradientColor("#80c8ff", "#bbddff", 45, "workspace-view", "oklch")
        assert str(gradient) == 'gradient(from=#80c8ff to=#bbddff angle=45 relative-to=workspace-view in=oklch)'
    
    def test_border_on_overrides_off(self):
        doc = ConfigDocument.from_string("layout {\n    border {\n        off\n        on\n    }\n}\n")
        assert read_appearance(doc).border.off is False
    
    def test_shadow_and_struts(self):
        doc = ConfigDocument.from_string(
            "layout {\n"
            "    shadow {\n"
            "        on\n"
            "        draw-behind-window true\n"
            "        softness 40\n"
            "        offset x=2 y=-3\n"
            '        color "#00000080"\n'
            "    }\n"
            "    struts {\n"
            "        left 64\n"
            "        bottom 8\n"
            "    }\n"
            "}\n"
        )
        settings = read_appearance(doc)
        assert settings.shadow.on is True
        assert settings.shadow.draw_behind_window is True
        assert settings.shadow.softness == 40
        assert settings.shadow.spread == 5
        assert (settings.shadow.offset_x, settings.shadow.offset_y) == (2, -3)
        assert settings.shadow.color == SolidColor("#00000080")
        assert settings.struts.left == 64
        assert settings.struts.right is None
        assert settings.struts.bottom == 8
    
    def test_unparseable_values_keep_defaults(self):
        doc = ConfigDocument.from_string('layout {\n    gaps "wide"\n    center-focused-column "sometimes"\n}\n')
        settings = read_appearance(doc)
        assert settings.gaps == 16
        assert settings.center_focused_column is CenterFocusedColumn.NEVER


class TestWriteAppearance:
    
    def test_unchanged_settings_keep_existing_lines(self, doc):
        settings = read_appearance(doc)
        write_appearance(doc, settings)
        text = doc.to_string()
        assert text.startswith(SAMPLE_CONFIG.split("layout {")[0])
        assert "    gaps 16\n" in text
        assert "// Programs" in text
        assert read_appearance(doc) == settings
    
    def test_gradient_replaces_color(self, doc):
        settings = read_appearance(doc)
        settings.focus_ring.active_color = GradientColor("#111111", "#222222", angle=90)
        write_appearance(doc, settings)
        focus_ring = doc.find("layout").child("focus-ring")
        assert not focus_ring.has_child("active-color")
        assert focus_ring.child("active-gradient").properties == {
            "from": "#111111", "to": "#222222", "angle": 90,
        }
    
    def test_color_replaces_gradient(self):
        doc = ConfigDocument.from_string(
            'layout {\n    border {\n        active-gradient from="#000" to="#fff"\n    }\n}\n'
        )
        settings = read_appearance(doc)
        settings.border.active_color = SolidColor("#abcdef")
        write_appearance(doc, settings)
        border = doc.find("layout").child("border")
        assert not border.has_child("active-gradient")
        assert border.child("active-color").get(0) == "#abcdef"
    
    def test_flags_and_optionals(self, doc):
        settings = read_appearance(doc)
        settings.border.off = False
        settings.border.urgent_color = None
        settings.shadow.on = True
        settings.struts.top = 12
        write_appearance(doc, settings)
        
        layout = doc.find("layout")
        assert not layout.child("border").has_child("off")
        assert layout.child("border").has_child("on")
        assert not layout.child("border").has_child("urgent-color")
        assert layout.child("shadow").has_child("on")
        assert layout.child("struts").child("top").get(0) == 12
        assert not layout.child("struts").has_child("left")
        
        reread = read_appearance(doc)
        assert reread.border.off is False
        assert reread.shadow.on is True
        assert reread.struts.top == 12
    
    def test_creates_layout_block(self):
        doc = ConfigDocument.from_string("binds {\n}\n")
        write_appearance(doc, read_appearance(doc))
        assert doc.find("layout") is not None
        assert read_appearance(doc).gaps == 16
    
    def test_no_struts_block_when_unset(self, doc):
        write_appearance(doc, read_appearance(doc))
        assert not doc.find("layout").has_child("struts")
        assert "struts" not in doc.to_string()
    
    def test_existing_struts_block_updated_in_place(self):
        doc = ConfigDocument.from_string("layout {\n    struts {\n        left 64\n    }\n    gaps 8\n}\n")
        settings = read_appearance(doc)
        settings.struts.left = None
        write_appearance(doc, settings)
        layout = doc.find("layout")
        assert layout.has_child("struts")
        assert not layout.child("struts").has_child("left")
        assert [c.name for c in layout.child_nodes][:2] == ["struts", "gaps"]
