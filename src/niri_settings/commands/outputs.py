"""Output arrangement commands."""

import logging
from pathlib import Path
from typing import Optional

from ..compositor import NiriClient
from ..config import Settings
from ..exceptions import EditValidationError
from ..geometry import SnapDirection
from ..viewmodels import OutputsViewModel
from .common import open_document

logger = logging.getLogger(__name__)


def _load_view_model(settings: Settings, config_path: Path, client: NiriClient):
    doc = open_document(config_path, settings.niri.backup_suffix)
    vm = OutputsViewModel(move_step=settings.layout.move_step)
    vm.set_outputs(client.list_outputs(), doc)
    return doc, vm


def _select(vm: OutputsViewModel, name: str) -> None:
    for index, output in enumerate(vm.outputs):
        if output.name == name:
            vm.select(index)
            return
    known = ", ".join(o.name for o in vm.outputs) or "none"
    raise EditValidationError(
        f"Unknown output '{name}'.\n"
        f"Connected outputs: {known}"
    )


def list_outputs(settings: Settings, config_path: Path, client: NiriClient) -> None:
    """Print connected outputs with their configured state."""
    _, vm = _load_view_model(settings, config_path, client)
    if not vm.outputs:
        print("No outputs reported by niri")
        return
    for output in vm.outputs:
        flags = []
        if not output.enabled:
            flags.append("disabled")
        if output.configured:
            flags.append("configured")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        print(
            f"{output.name:12} {output.mode_string():24} "
            f"at {output.position.x},{output.position.y} "
            f"{output.logical_size.width}x{output.logical_size.height} logical{suffix}"
        )
        if output.make or output.model:
            print(f"{'':12} {output.make} {output.model}".rstrip())


def arrange_outputs(
    settings: Settings,
    config_path: Path,
    client: NiriClient,
    action: str,
    name: Optional[str] = None,
    x: Optional[int] = None,
    y: Optional[int] = None,
    direction: Optional[str] = None,
    preview: bool = False,
    save: bool = False,
) -> None:
    """
    Compute new positions and optionally preview and/or save them.
    
    Args:
        action: One of "set", "snap", "normalize"
        name: Output to move (set and snap)
        x, y: Target position (set)
        direction: left, right, above or below (snap)
        preview: Apply the positions live via niri without saving
        save: Write the positions to config.kdl
    """
    doc, vm = _load_view_model(settings, config_path, client)
    
    if action == "normalize":
        vm.normalize()
    else:
        _select(vm, name)
        if action == "set":
            vm.set_selected_position(x, y)
        elif action == "snap":
            if vm.snap_selected(SnapDirection(direction)) is None:
                print(f"No other enabled output to snap {name} against")
        else:
            raise ValueError(f"Unknown output action: {action}")
    
    if not vm.has_pending_changes():
        print("Nothing to change")
        return
    
    for output_name, position in vm.pending.items():
        print(f"{output_name}: {position.x},{position.y}")
    
    if preview:
        vm.preview(client)
        print(f"Previewed {len(vm.pending)} outputs")
    if save:
        vm.save(doc)
        print(f"Saved positions to {config_path}")
    elif not preview:
        print("(dry run: use --preview or --save to apply)")
