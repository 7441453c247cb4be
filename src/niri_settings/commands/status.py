"""Status command."""

import json
import logging
from pathlib import Path
from typing import Any, Dict

from ..accessors import read_appearance, read_keybindings, read_positions
from ..compositor import NiriClient
from ..config import Settings
from ..exceptions import CompositorError, DocumentError
from .common import open_document

logger = logging.getLogger(__name__)


def _get_document_status(config_path: Path, backup_suffix: str) -> Dict[str, Any]:
    """Summarize the niri config file."""
    status: Dict[str, Any] = {
        "path": str(config_path),
        "exists": config_path.exists(),
    }
    if not config_path.exists():
        return status
    try:
        doc = open_document(config_path, backup_suffix)
    except DocumentError as e:
        status["error"] = str(e)
        return status

    appearance = read_appearance(doc)
    status.update({
        "configured_outputs": sorted(read_positions(doc)),
        "keybindings": len(read_keybindings(doc)),
        "gaps": appearance.gaps,
        "backup": str(doc.backup_path),
    })
    return status


def _get_compositor_status(client: NiriClient) -> Dict[str, Any]:
    """Query connected outputs."""
    try:
        outputs = client.list_outputs()
    except CompositorError as e:
        return {"reachable": False, "error": str(e)}
    return {
        "reachable": True,
        "outputs": {
            o.name: {
                "mode": o.mode_string(),
                "position": [o.position.x, o.position.y],
                "scale": o.scale,
                "enabled": o.enabled,
            }
            for o in outputs
        },
    }


def get_status_json(settings: Settings, config_path: Path, client: NiriClient) -> Dict[str, Any]:
    """Full status as a JSON-serializable dict."""
    return {
        "settings_file": str(Settings.get_settings_file()),
        "config": _get_document_status(config_path, settings.niri.backup_suffix),
        "compositor": _get_compositor_status(client),
    }


def show_status(
    settings: Settings,
    config_path: Path,
    client: NiriClient,
    json_output: bool = False,
) -> None:
    """
    Display the config file and compositor state.
    
    Args:
        settings: Loaded settings
        config_path: niri config file
        client: Compositor client
        json_output: If True, output JSON instead of human-readable text
    """
    status = get_status_json(settings, config_path, client)
    if json_output:
        print(json.dumps(status, indent=2))
        return
    
    config = status["config"]
    print("niri-settings Status")
    print("=" * 40)
    
    print(f"\nConfiguration")
    print(f"  Settings:   {status['settings_file']}")
    print(f"  Config:     {config['path']}")
    if not config["exists"]:
        print("  (config file does not exist)")
    elif "error" in config:
        print(f"  Error:      {config['error']}")
    else:
        outputs = ", ".join(config["configured_outputs"]) or "none"
        print(f"  Outputs:    {outputs}")
        print(f"  Bindings:   {config['keybindings']}")
        print(f"  Gaps:       {config['gaps']}")
    
    compositor = status["compositor"]
    print(f"\nCompositor")
    if not compositor["reachable"]:
        print(f"  Unreachable: {compositor['error'].splitlines()[0]}")
        return
    for name, info in compositor["outputs"].items():
        state = "" if info["enabled"] else " (disabled)"
        x, y = info["position"]
        print(f"  {name}: {info['mode']} at {x},{y} scale {info['scale']}{state}")
