"""
Key binding value types.

A binding is a modifier set, a key, a few optional properties and exactly one
action. Actions and pending changes are small tagged unions built from frozen
dataclasses.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

from ..exceptions import EditValidationError

MODIFIER_SEPARATOR = "+"

MODIFIER_KEYWORDS = {
    "mod": "mod_key",
    "super": "mod_key",
    "logo": "mod_key",
    "ctrl": "ctrl",
    "control": "ctrl",
    "shift": "shift",
    "alt": "alt",
}


@dataclass(frozen=True)
class Modifiers:
    """Modifier keys held for a binding. ``mod_key`` is niri's Mod (Super/Logo)."""
    mod_key: bool = False
    ctrl: bool = False
    shift: bool = False
    alt: bool = False

    @classmethod
    def parse(cls, combo: str) -> Tuple["Modifiers", str]:
        """
        Split a combo like ``Mod+Shift+T`` into modifiers and key.

        Modifier keywords are matched case-insensitively; unknown ones are
        ignored. The key is always the last segment.
        """
        parts = combo.split(MODIFIER_SEPARATOR)
        key = parts[-1]
        flags = {}
        for part in parts[:-1]:
            attr = MODIFIER_KEYWORDS.get(part.lower())
            if attr:
                flags[attr] = True
        return cls(**flags), key

    def __str__(self) -> str:
        names = []
        if self.mod_key:
            names.append("Mod")
        if self.ctrl:
            names.append("Ctrl")
        if self.shift:
            names.append("Shift")
        if self.alt:
            names.append("Alt")
        return MODIFIER_SEPARATOR.join(names)


@dataclass(frozen=True)
class BindingProperties:
    """Optional per-binding overrides. None means niri's default applies."""
    repeat: Optional[bool] = None  # niri default: true
    cooldown_ms: Optional[int] = None
    allow_when_locked: Optional[bool] = None

    def has_custom_properties(self) -> bool:
        return (
            self.repeat is not None
            or self.cooldown_ms is not None
            or self.allow_when_locked is not None
        )


# ============================================================================
# Actions
# ============================================================================

BindingArg = Union[int, bool, str]


def _arg_to_str(value: BindingArg) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True)
class SpawnAction:
    """``spawn "cmd" "arg"...``"""
    args: tuple = ()

    @property
    def short_description(self) -> str:
        if not self.args:
            return "spawn"
        name = os.path.basename(self.args[0]) or self.args[0]
        return f"{name} ..." if len(self.args) > 1 else name

    def __str__(self) -> str:
        return f'spawn "{" ".join(self.args)}"'


@dataclass(frozen=True)
class SpawnShellAction:
    """``spawn-sh "command"``"""
    command: str

    @property
    def short_description(self) -> str:
        if len(self.command) > 20:
            return self.command[:20] + "..."
        return self.command

    def __str__(self) -> str:
        return f'spawn-sh "{self.command}"'


@dataclass(frozen=True)
class SimpleAction:
    """A built-in action without arguments, e.g. ``close-window``."""
    name: str

    @property
    def short_description(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ArgAction:
    """A built-in action with one typed argument, e.g. ``focus-workspace 1``."""
    name: str
    value: BindingArg

    @property
    def short_description(self) -> str:
        return f"{self.name} {_arg_to_str(self.value)}"

    def __str__(self) -> str:
        return self.short_description


BindingAction = Union[SpawnAction, SpawnShellAction, SimpleAction, ArgAction]

_PREFIX_CATEGORIES = [
    ("focus-", "Focus"),
    ("move-", "Movement"),
    ("set-", "Layout"),
    ("switch-", "Workspace"),
    ("consume-", "Column"),
    ("expel-", "Column"),
]


def action_category(action: BindingAction) -> str:
    """Group an action for display."""
    if isinstance(action, (SpawnAction, SpawnShellAction)):
        return "Program Execution"
    name = action.name
    if name in ("close-window", "quit", "power-off-monitors"):
        return "Window Management"
    if name in ("screenshot", "screenshot-screen", "screenshot-window"):
        return "Screenshot"
    for prefix, category in _PREFIX_CATEGORIES:
        if name.startswith(prefix):
            return category
    return "Other"


def parse_typed_arg(text: str) -> BindingArg:
    """Type a user-entered argument: integer, then boolean, then string."""
    try:
        return int(text)
    except ValueError:
        pass
    if text == "true":
        return True
    if text == "false":
        return False
    return text


def parse_command_args(text: str) -> List[str]:
    """
    Split a command line on spaces, honoring single and double quotes.

    >>> parse_command_args("sh -c 'echo hello'")
    ['sh', '-c', 'echo hello']
    """
    args = []
    current = []
    quote = None
    for ch in text:
        if quote is None and ch in ("'", '"'):
            quote = ch
        elif quote is not None and ch == quote:
            quote = None
        elif ch == " " and quote is None:
            if current:
                args.append("".join(current))
                current = []
        else:
            current.append(ch)
    if current:
        args.append("".join(current))
    return args


# ============================================================================
# Bindings and changes
# ============================================================================

@dataclass(frozen=True)
class Keybinding:
    """
    One entry of the ``binds`` block.

    ``source_index`` is the node's position among the children of the
    ``binds`` block (disabled entries included), or None for bindings that
    have not been saved yet.
    """
    modifiers: Modifiers
    key: str
    action: BindingAction
    properties: BindingProperties = field(default_factory=BindingProperties)
    source_index: Optional[int] = None

    @property
    def combo(self) -> str:
        mods = str(self.modifiers)
        return f"{mods}{MODIFIER_SEPARATOR}{self.key}" if mods else self.key

    @property
    def category(self) -> str:
        return action_category(self.action)

    def matches_search(self, query: str) -> bool:
        """Case-insensitive substring match on combo or action description."""
        query = query.lower()
        return (
            query in self.combo.lower()
            or query in self.action.short_description.lower()
        )


@dataclass(frozen=True)
class AddBinding:
    binding: Keybinding


@dataclass(frozen=True)
class ModifyBinding:
    index: int
    binding: Keybinding


@dataclass(frozen=True)
class DeleteBinding:
    index: int


KeybindingChange = Union[AddBinding, ModifyBinding, DeleteBinding]


class BindingStatus(Enum):
    UNCHANGED = "unchanged"
    MODIFIED = "modified"
    ADDED = "added"


@dataclass(frozen=True)
class EffectiveBinding:
    """A binding as it would be saved, with where it came from."""
    binding: Keybinding
    base_index: Optional[int]
    status: BindingStatus


# ============================================================================
# Edit form
# ============================================================================

class ActionType(Enum):
    SPAWN = "Run Command"
    SPAWN_SHELL = "Shell Command"
    BUILT_IN = "Built-in Action"

    @property
    def label(self) -> str:
        return self.value

    def next(self) -> "ActionType":
        members = list(ActionType)
        return members[(members.index(self) + 1) % len(members)]

    def previous(self) -> "ActionType":
        members = list(ActionType)
        return members[(members.index(self) - 1) % len(members)]


class EditField(Enum):
    KEY_COMBO = "key_combo"
    ACTION_TYPE = "action_type"
    ACTION_VALUE = "action_value"
    REPEAT = "repeat"
    ALLOW_WHEN_LOCKED = "allow_when_locked"

    def next(self) -> "EditField":
        members = list(EditField)
        return members[(members.index(self) + 1) % len(members)]

    def previous(self) -> "EditField":
        members = list(EditField)
        return members[(members.index(self) - 1) % len(members)]


@dataclass
class BindingDraft:
    """
    Editable form state for adding or changing a binding.

    ``base_index`` is the index in the base binding list of the binding
    being edited; it is None for a new binding.
    """
    key_combo: str = ""
    action_type: ActionType = ActionType.SPAWN
    action_value: str = ""
    repeat: Optional[bool] = None
    allow_when_locked: Optional[bool] = None
    cooldown_ms: Optional[int] = None
    base_index: Optional[int] = None
    is_new: bool = True
    focused_field: EditField = EditField.KEY_COMBO
    # Action the form was opened on; None for a new binding
    original_action: Optional[BindingAction] = None

    @classmethod
    def from_binding(cls, binding: Keybinding, base_index: Optional[int]) -> "BindingDraft":
        action = binding.action
        if isinstance(action, SpawnAction):
            action_type, value = ActionType.SPAWN, " ".join(action.args)
        elif isinstance(action, SpawnShellAction):
            action_type, value = ActionType.SPAWN_SHELL, action.command
        else:
            action_type, value = ActionType.BUILT_IN, action.short_description
        return cls(
            key_combo=binding.combo,
            action_type=action_type,
            action_value=value,
            repeat=binding.properties.repeat,
            allow_when_locked=binding.properties.allow_when_locked,
            cooldown_ms=binding.properties.cooldown_ms,
            base_index=base_index,
            is_new=False,
            original_action=action,
        )

    def toggle_repeat(self) -> None:
        """Cycle default -> explicit false -> explicit true -> default."""
        self.repeat = {None: False, False: True, True: None}[self.repeat]

    def toggle_allow_when_locked(self) -> None:
        """Cycle default -> explicit true -> explicit false -> default."""
        self.allow_when_locked = {None: True, True: False, False: None}[self.allow_when_locked]

    def build_action(self) -> BindingAction:
        value = self.action_value.strip()
        if not value:
            raise EditValidationError("Action cannot be empty")

        if self.action_type is ActionType.SPAWN:
            args = parse_command_args(value)
            if not args:
                raise EditValidationError("Command cannot be empty")
            return SpawnAction(tuple(args))

        if self.action_type is ActionType.SPAWN_SHELL:
            return SpawnShellAction(value)

        original = self.original_action
        if isinstance(original, ArgAction) and value == original.short_description:
            # Untouched text keeps the argument type it was read with
            return original

        name, _, arg = value.partition(" ")
        arg = arg.strip()
        if not arg:
            return SimpleAction(name)
        return ArgAction(name, parse_typed_arg(arg))

    def to_keybinding(self) -> Keybinding:
        """
        Build the binding described by this form.

        Raises:
            EditValidationError: If the key combo or action is empty
        """
        combo = self.key_combo.strip()
        if not combo:
            raise EditValidationError("Key combo cannot be empty")
        action = self.build_action()
        modifiers, key = Modifiers.parse(combo)
        if not key:
            raise EditValidationError(f"Key combo '{combo}' has no key")
        return Keybinding(
            modifiers=modifiers,
            key=key,
            action=action,
            properties=BindingProperties(
                repeat=self.repeat,
                cooldown_ms=self.cooldown_ms,
                allow_when_locked=self.allow_when_locked,
            ),
        )
