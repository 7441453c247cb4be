"""Tests for snap, normalize and move."""

import pytest

from niri_settings.geometry import SnapDirection, move, normalize, snap, snap_position
from niri_settings.models import Position, Size
from niri_settings.overlay import PositionOverlay

from conftest import make_output


@pytest.fixture
def overlay():
    return PositionOverlay()


class TestSnap:
    
    @pytest.mark.parametrize("direction,expected", [
        (SnapDirection.RIGHT, Position(2560, 0)),
        (SnapDirection.LEFT, Position(-1920, 0)),
        (SnapDirection.ABOVE, Position(320, -1080)),
        (SnapDirection.BELOW, Position(320, 1440)),
    ])
    def test_snap_against_first_other_output(self, outputs, overlay, direction, expected):
        assert snap(outputs, "HDMI-A-1", direction, overlay) == expected
        assert overlay.get("HDMI-A-1") == expected
    
    def test_centering_truncates_toward_zero(self):
        # Reference narrower than the snapped output: offset is negative and odd
        assert snap_position(Size(1921, 1080), Position(0, 0), Size(1920, 1080), SnapDirection.BELOW) \
            == Position(0, 1080)
        assert snap_position(Size(1, 1), Position(0, 0), Size(4, 2), SnapDirection.ABOVE) == Position(1, -1)
    
    def test_uses_effective_reference_position(self, outputs, overlay):
        overlay.set("DP-1", Position(100, 50))
        assert snap(outputs, "HDMI-A-1", SnapDirection.RIGHT, overlay) == Position(2660, 50)
    
    def test_skips_disabled_reference(self, overlay):
        outputs = [
            make_output("DP-1", 0, 0, 2560, 1440, enabled=False),
            make_output("DP-2", 0, 0, 1920, 1080),
            make_output("HDMI-A-1", 5000, 0, 1920, 1080),
        ]
        assert snap(outputs, "HDMI-A-1", SnapDirection.RIGHT, overlay) == Position(1920, 0)
    
    def test_no_reference_changes_nothing(self, overlay):
        outputs = [make_output("DP-1", 10, 10, 2560, 1440)]
        assert snap(outputs, "DP-1", SnapDirection.LEFT, overlay) is None
        assert not overlay
    
    def test_unknown_output(self, outputs, overlay):
        assert snap(outputs, "eDP-1", SnapDirection.LEFT, overlay) is None
        assert not overlay


class TestNormalize:
    
    def test_shifts_to_origin(self, overlay):
        outputs = [
            make_output("DP-1", 100, 200, 2560, 1440),
            make_output("HDMI-A-1", 2660, 300, 1920, 1080),
        ]
        assert normalize(outputs, overlay) == {
            "DP-1": Position(0, 0),
            "HDMI-A-1": Position(2560, 100),
        }
        assert overlay.as_dict() == {"DP-1": Position(0, 0), "HDMI-A-1": Position(2560, 100)}
    
    def test_negative_positions(self, overlay):
        outputs = [
            make_output("DP-1", 0, 0, 2560, 1440),
            make_output("HDMI-A-1", -1920, -200, 1920, 1080),
        ]
        normalize(outputs, overlay)
        assert overlay.get("DP-1") == Position(1920, 200)
        assert overlay.get("HDMI-A-1") == Position(0, 0)
    
    def test_disabled_outputs_ignored(self, overlay):
        outputs = [
            make_output("DP-1", 10, 10, 2560, 1440),
            make_output("DP-2", -5000, -5000, 1920, 1080, enabled=False),
        ]
        assert normalize(outputs, overlay) == {"DP-1": Position(0, 0)}
        assert "DP-2" not in overlay
    
    def test_uses_pending_positions(self, outputs, overlay):
        overlay.set("HDMI-A-1", Position(-100, 0))
        normalize(outputs, overlay)
        assert overlay.get("DP-1") == Position(100, 0)
        assert overlay.get("HDMI-A-1") == Position(0, 0)
    
    def test_no_enabled_outputs(self, overlay):
        assert normalize([make_output("DP-1", 5, 5, 10, 10, enabled=False)], overlay) == {}
        assert not overlay


class TestMove:
    
    def test_move_accumulates(self, outputs, overlay):
        move(outputs, "DP-1", 10, 0, overlay)
        assert move(outputs, "DP-1", 0, -10, overlay) == Position(10, -10)
    
    def test_unknown_output(self, outputs, overlay):
        assert move(outputs, "eDP-1", 10, 0, overlay) is None
