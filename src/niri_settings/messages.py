"""
Messages understood by AppState.update().

An input layer turns key presses into these; each maps to exactly one
operation on the application state. Category-relative messages (selection,
save, revert...) act on the current category.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .geometry import SnapDirection


class Category(Enum):
    OUTPUTS = "Outputs"
    KEYBINDINGS = "Keybindings"
    APPEARANCE = "Appearance"

    @property
    def label(self) -> str:
        return self.value

    @property
    def function_key(self) -> int:
        """1-based F-key that switches to this category."""
        return list(Category).index(self) + 1

    @classmethod
    def from_function_key(cls, number: int) -> Optional["Category"]:
        members = list(cls)
        if 1 <= number <= len(members):
            return members[number - 1]
        return None


# ============================================================================
# Navigation
# ============================================================================

@dataclass(frozen=True)
class SwitchCategory:
    category: Category


@dataclass(frozen=True)
class SelectNext:
    pass


@dataclass(frozen=True)
class SelectPrevious:
    pass


@dataclass(frozen=True)
class SelectIndex:
    index: int


@dataclass(frozen=True)
class DismissError:
    pass


# ============================================================================
# Outputs
# ============================================================================

@dataclass(frozen=True)
class MoveOutput:
    dx: int
    dy: int


@dataclass(frozen=True)
class NudgeOutput:
    """Move by whole steps of the configured move step."""
    x_steps: int
    y_steps: int


@dataclass(frozen=True)
class SetPosition:
    x: int
    y: int


@dataclass(frozen=True)
class Snap:
    direction: SnapDirection


@dataclass(frozen=True)
class Normalize:
    pass


@dataclass(frozen=True)
class Preview:
    pass


@dataclass(frozen=True)
class RevertPreview:
    pass


@dataclass(frozen=True)
class RefreshOutputs:
    pass


# ============================================================================
# Persistence (current category)
# ============================================================================

@dataclass(frozen=True)
class Save:
    pass


@dataclass(frozen=True)
class Reload:
    """Drop every pending change and re-read outputs and the config file."""
    pass


@dataclass(frozen=True)
class Revert:
    """Drop the current category's pending changes."""
    pass


# ============================================================================
# Keybindings
# ============================================================================

@dataclass(frozen=True)
class StartSearch:
    pass


@dataclass(frozen=True)
class UpdateSearch:
    query: str


@dataclass(frozen=True)
class ClearSearch:
    pass


@dataclass(frozen=True)
class AddKeybinding:
    pass


@dataclass(frozen=True)
class DeleteKeybinding:
    pass


# ============================================================================
# Editing (keybindings and appearance)
# ============================================================================

@dataclass(frozen=True)
class StartEdit:
    pass


@dataclass(frozen=True)
class CancelEdit:
    pass


@dataclass(frozen=True)
class ConfirmEdit:
    pass


@dataclass(frozen=True)
class ToggleSection:
    pass


@dataclass(frozen=True)
class ToggleValue:
    pass


@dataclass(frozen=True)
class AdjustValue:
    amount: int


@dataclass(frozen=True)
class CycleValue:
    forward: bool = True


Message = Union[
    SwitchCategory, SelectNext, SelectPrevious, SelectIndex, DismissError,
    MoveOutput, NudgeOutput, SetPosition, Snap, Normalize, Preview, RevertPreview,
    RefreshOutputs, Save, Reload, Revert,
    StartSearch, UpdateSearch, ClearSearch, AddKeybinding, DeleteKeybinding,
    StartEdit, CancelEdit, ConfirmEdit,
    ToggleSection, ToggleValue, AdjustValue, CycleValue,
]
