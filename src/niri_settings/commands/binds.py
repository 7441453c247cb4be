"""Keybinding commands."""

import logging
from pathlib import Path
from typing import Optional

from ..accessors import read_keybindings
from ..compositor import NiriClient
from ..config import Settings
from ..exceptions import EditValidationError
from ..models import ActionType, Modifiers
from ..viewmodels import KeybindingsViewModel
from .common import open_document, reload_compositor

logger = logging.getLogger(__name__)

ACTION_TYPES = {
    "spawn": ActionType.SPAWN,
    "spawn-sh": ActionType.SPAWN_SHELL,
    "action": ActionType.BUILT_IN,
}


def _normalize_combo(combo: str) -> str:
    modifiers, key = Modifiers.parse(combo)
    mods = str(modifiers)
    return f"{mods}+{key}" if mods else key


def _same_combo(a: str, b: str) -> bool:
    """Key names match case-insensitively, like modifiers."""
    return _normalize_combo(a).lower() == _normalize_combo(b).lower()


def list_binds(settings: Settings, config_path: Path, search: Optional[str] = None) -> None:
    """Print bindings, optionally filtered by a search string."""
    doc = open_document(config_path, settings.niri.backup_suffix)
    vm = KeybindingsViewModel()
    vm.load(read_keybindings(doc))
    if search:
        vm.set_search(search)
    
    bindings = vm.filtered_bindings()
    if not bindings:
        print("No keybindings found")
        return
    for eb in bindings:
        binding = eb.binding
        props = []
        if binding.properties.repeat is False:
            props.append("no-repeat")
        if binding.properties.allow_when_locked:
            props.append("when-locked")
        if binding.properties.cooldown_ms is not None:
            props.append(f"cooldown {binding.properties.cooldown_ms}ms")
        suffix = f"  ({', '.join(props)})" if props else ""
        print(f"{binding.combo:24} {binding.category:18} {binding.action}{suffix}")


def add_bind(
    settings: Settings,
    config_path: Path,
    client: NiriClient,
    combo: str,
    action: str,
    action_type: str = "action",
    repeat: Optional[bool] = None,
    allow_when_locked: Optional[bool] = None,
) -> None:
    """Append a binding to the binds block, save and reload niri."""
    doc = open_document(config_path, settings.niri.backup_suffix)
    vm = KeybindingsViewModel()
    vm.load(read_keybindings(doc))
    
    vm.start_add()
    vm.draft.key_combo = combo
    vm.draft.action_type = ACTION_TYPES[action_type]
    vm.draft.action_value = action
    vm.draft.repeat = repeat
    vm.draft.allow_when_locked = allow_when_locked
    change = vm.confirm_edit()
    
    existing = [eb for eb in vm.effective_bindings() if eb.binding.combo == change.binding.combo]
    if len(existing) > 1:
        logger.warning(f"{change.binding.combo} is already bound; niri will use the first one")
    
    vm.save(doc)
    print(f"Added {change.binding.combo}: {change.binding.action}")
    reload_compositor(client)


def delete_bind(settings: Settings, config_path: Path, client: NiriClient, combo: str) -> None:
    """Remove every binding for a key combo, save and reload niri."""
    doc = open_document(config_path, settings.niri.backup_suffix)
    vm = KeybindingsViewModel()
    vm.load(read_keybindings(doc))
    
    matches = [i for i, b in enumerate(vm.bindings) if _same_combo(b.combo, combo)]
    if not matches:
        raise EditValidationError(
            f"No binding for '{combo}'.\n"
            "Run 'niri-settings binds list' to see existing bindings."
        )
    deleted = vm.bindings[matches[0]].combo
    for index in matches:
        vm.pending.delete(index)
    
    vm.save(doc)
    print(f"Deleted {len(matches)} binding(s) for {deleted}")
    reload_compositor(client)
