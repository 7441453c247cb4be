"""Test configuration and fixtures."""

import json
import tempfile
from pathlib import Path
from typing import Generator, List
from unittest.mock import MagicMock

import pytest

from niri_settings.compositor import NiriClient
from niri_settings.document import ConfigDocument
from niri_settings.models import OutputDescriptor, Position, Size


SAMPLE_CONFIG = """\
// niri config
input {
    keyboard {
        xkb {
            layout "us"
        }
    }
}

output "DP-1" {
    mode "2560x1440@143.912"
    scale 1.0
    position x=0 y=0
}

/-output "HDMI-A-1" {
    position x=2560 y=0
}

layout {
    gaps 16
    center-focused-column "never"

    focus-ring {
        width 4
        active-color "#7fc8ff"
        inactive-color "#505050"
    }

    border {
        off
        width 4
        active-color "#ffc87f"
    }
}

binds {
    // Programs
    Mod+T { spawn "alacritty"; }
    Mod+D repeat=false { spawn "fuzzel"; }
    /-Mod+X { spawn "disabled"; }
    Mod+Q { close-window; }
    Mod+1 { focus-workspace 1; }
    Super+Shift+E { quit skip-confirmation=true; }
}
"""


def make_output(name: str, x: int, y: int, width: int, height: int, enabled: bool = True) -> OutputDescriptor:
    """Build an output descriptor the way list_outputs would."""
    return OutputDescriptor(
        name=name,
        position=Position(x, y),
        logical_size=Size(width, height),
        enabled=enabled,
    )


def ipc_output(name: str, x: int, y: int, width: int, height: int) -> dict:
    """One entry of ``niri msg --json outputs``."""
    return {
        "name": name,
        "make": "Dell Inc.",
        "model": "U2720Q",
        "modes": [{"width": width, "height": height, "refresh_rate": 60000, "is_preferred": True}],
        "current_mode": 0,
        "logical": {
            "x": x,
            "y": y,
            "width": width,
            "height": height,
            "scale": 1.0,
            "transform": "Normal",
        },
    }


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """A temporary directory removed after the test."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def config_file(temp_dir: Path) -> Path:
    """A config.kdl with outputs, a layout block and binds."""
    path = temp_dir / "config.kdl"
    path.write_text(SAMPLE_CONFIG)
    return path


@pytest.fixture
def doc(config_file: Path) -> ConfigDocument:
    return ConfigDocument.load(config_file)


@pytest.fixture
def settings_home(temp_dir: Path, monkeypatch) -> Path:
    """Point XDG_CONFIG_HOME at a temporary directory."""
    home = temp_dir / "xdg"
    home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home))
    return home


@pytest.fixture
def outputs() -> List[OutputDescriptor]:
    """Two side-by-side monitors with different sizes."""
    return [
        make_output("DP-1", 0, 0, 2560, 1440),
        make_output("HDMI-A-1", 2560, 0, 1920, 1080),
    ]


@pytest.fixture
def niri_outputs_reply() -> str:
    return json.dumps({
        "HDMI-A-1": ipc_output("HDMI-A-1", 2560, 0, 1920, 1080),
        "DP-1": ipc_output("DP-1", 0, 0, 2560, 1440),
    })


@pytest.fixture
def mock_client(outputs) -> MagicMock:
    """A compositor collaborator that answers without running niri."""
    client = MagicMock(spec=NiriClient)
    client.list_outputs.return_value = outputs
    return client
