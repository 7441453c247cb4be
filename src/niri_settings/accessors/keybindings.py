"""
Read and write the ``binds`` block of config.kdl.

    binds {
        Mod+T repeat=false { spawn "alacritty"; }
        Mod+Q { close-window; }
        Mod+1 { focus-workspace 1; }
    }
"""

import logging
from typing import List, Optional, Sequence

from ..document import ConfigDocument, Node
from ..exceptions import MissingBlockError
from ..models import (
    AddBinding,
    ArgAction,
    BindingAction,
    BindingProperties,
    DeleteBinding,
    Keybinding,
    KeybindingChange,
    Modifiers,
    ModifyBinding,
    SimpleAction,
    SpawnAction,
    SpawnShellAction,
)

logger = logging.getLogger(__name__)

BINDS_NODE = "binds"
SPAWN = "spawn"
SPAWN_SHELL = "spawn-sh"
SPAWN_SHELL_ALIASES = (SPAWN_SHELL, "spawn-shell")

PROP_REPEAT = "repeat"
PROP_COOLDOWN = "cooldown-ms"
PROP_ALLOW_WHEN_LOCKED = "allow-when-locked"


# ============================================================================
# Reading
# ============================================================================

def _optional_bool(node: Node, key: str) -> Optional[bool]:
    value = node.get(key)
    return value if isinstance(value, bool) else None


def _optional_int(node: Node, key: str) -> Optional[int]:
    value = node.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def parse_action(node: Node) -> Optional[BindingAction]:
    """
    Turn an action node (the single child of a binding) into an action.

    Returns:
        The action, or None for a spawn without a command
    """
    args = node.arguments
    if node.name == SPAWN:
        command = tuple(a for a in args if isinstance(a, str))
        return SpawnAction(command) if command else None
    if node.name in SPAWN_SHELL_ALIASES:
        command = next((a for a in args if isinstance(a, str)), None)
        return SpawnShellAction(command) if command is not None else None
    if not args:
        return SimpleAction(node.name)
    value = args[0]
    if isinstance(value, (bool, int, str)):
        return ArgAction(node.name, value)
    # Floats and nulls have no typed form; keep the action itself
    return SimpleAction(node.name)


def parse_binding(node: Node, source_index: int) -> Optional[Keybinding]:
    """
    Parse one binding node.

    Returns:
        The binding, or None if the node has no usable action child
    """
    actions = [c for c in node.child_nodes if not c.disabled]
    action = parse_action(actions[0]) if actions else None
    if action is None:
        logger.warning(f"Skipping binding '{node.name}': no action")
        return None

    modifiers, key = Modifiers.parse(node.name)
    properties = BindingProperties(
        repeat=_optional_bool(node, PROP_REPEAT),
        cooldown_ms=_optional_int(node, PROP_COOLDOWN),
        allow_when_locked=_optional_bool(node, PROP_ALLOW_WHEN_LOCKED),
    )
    return Keybinding(
        modifiers=modifiers,
        key=key,
        action=action,
        properties=properties,
        source_index=source_index,
    )


def read_keybindings(doc: ConfigDocument) -> List[Keybinding]:
    """
    Read all enabled bindings in document order.

    A missing ``binds`` block gives an empty list. Entries that cannot be
    parsed are skipped without affecting the others.
    """
    binds = doc.find(BINDS_NODE)
    if binds is None:
        logger.debug("No binds block in config")
        return []

    bindings = []
    for index, node in enumerate(binds.child_nodes):
        if node.disabled:
            continue
        binding = parse_binding(node, index)
        if binding is not None:
            bindings.append(binding)
    logger.debug(f"Read {len(bindings)} keybindings")
    return bindings


# ============================================================================
# Writing
# ============================================================================

def action_node(action: BindingAction) -> Node:
    if isinstance(action, SpawnAction):
        return Node.create(SPAWN, *action.args)
    if isinstance(action, SpawnShellAction):
        return Node.create(SPAWN_SHELL, action.command)
    if isinstance(action, ArgAction):
        return Node.create(action.name, action.value)
    return Node.create(action.name)


def binding_node(binding: Keybinding) -> Node:
    """Build the node for a binding: combo name, explicit properties, one action child."""
    props = {}
    if binding.properties.repeat is not None:
        props[PROP_REPEAT] = binding.properties.repeat
    if binding.properties.cooldown_ms is not None:
        props[PROP_COOLDOWN] = binding.properties.cooldown_ms
    if binding.properties.allow_when_locked is not None:
        props[PROP_ALLOW_WHEN_LOCKED] = binding.properties.allow_when_locked
    return Node.create(binding.combo, props=props, children=[action_node(binding.action)])


def write_keybindings(doc: ConfigDocument, changes: Sequence[KeybindingChange]) -> None:
    """
    Apply binding changes to the document (not on disk).

    Indices in the changes are positions among the children of the ``binds``
    block. Modifies are applied first, in place, so no index has shifted yet;
    deletes follow in descending order so each removal leaves the remaining
    lower indices valid; adds are appended last.

    Raises:
        MissingBlockError: If there is no binds block. Nothing is changed.
    """
    binds = doc.find(BINDS_NODE)
    if binds is None:
        raise MissingBlockError(BINDS_NODE)

    count = len(binds.child_nodes)

    for change in changes:
        if isinstance(change, ModifyBinding):
            if 0 <= change.index < count:
                binds.replace_child(change.index, binding_node(change.binding))
            else:
                logger.warning(f"Ignoring modify of missing binding index {change.index}")

    deleted = sorted({c.index for c in changes if isinstance(c, DeleteBinding)}, reverse=True)
    for index in deleted:
        if 0 <= index < count:
            binds.remove_child_at(index)
        else:
            logger.warning(f"Ignoring delete of missing binding index {index}")

    for change in changes:
        if isinstance(change, AddBinding):
            binds.append_child(binding_node(change.binding))

    logger.debug(
        f"Applied {len(changes)} keybinding changes "
        f"({len(deleted)} deletions)"
    )
