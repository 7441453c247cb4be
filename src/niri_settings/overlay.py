"""
Pending-change overlays.

An overlay holds edits that have not been saved yet, kept apart from the base
state read from the document. The UI always shows the effective state (base
with the overlay applied); the base only changes when a save succeeds.

Three shapes are used:
- positions: a name -> Position map
- keybindings: an ordered Add/Modify/Delete log against the base list
- appearance: a working copy of the settings plus at most one pending
  change per field
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

from .models import (
    AddBinding,
    AppearanceField,
    AppearanceSettings,
    BindingStatus,
    DeleteBinding,
    EffectiveBinding,
    Keybinding,
    KeybindingChange,
    ModifyBinding,
    Position,
)
from .models.appearance import get_field_value, set_field_value

logger = logging.getLogger(__name__)


# ============================================================================
# Positions
# ============================================================================

class PositionOverlay:
    """Pending output positions keyed by output name."""

    def __init__(self) -> None:
        self._positions: Dict[str, Position] = {}

    def set(self, name: str, position: Position) -> None:
        self._positions[name] = position

    def get(self, name: str) -> Optional[Position]:
        return self._positions.get(name)

    def effective(self, name: str, base: Position) -> Position:
        """The pending position for ``name`` if there is one, else ``base``."""
        return self._positions.get(name, base)

    def items(self) -> List[Tuple[str, Position]]:
        return list(self._positions.items())

    def as_dict(self) -> Dict[str, Position]:
        return dict(self._positions)

    def clear(self) -> None:
        self._positions.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._positions

    def __len__(self) -> int:
        return len(self._positions)

    def __bool__(self) -> bool:
        return bool(self._positions)


# ============================================================================
# Keybindings
# ============================================================================

class KeybindingOverlay:
    """
    Ordered log of pending binding changes.

    Indices in Modify and Delete entries always refer to the base list the
    overlay is resolved against, never to a filtered view of it.
    """

    def __init__(self) -> None:
        self.changes: List[KeybindingChange] = []

    def add(self, binding: Keybinding) -> None:
        self.changes.append(AddBinding(binding))

    def modify(self, index: int, binding: Keybinding) -> None:
        self.changes.append(ModifyBinding(index, binding))

    def delete(self, index: int) -> None:
        self.changes.append(DeleteBinding(index))

    def pending_adds(self) -> List[Keybinding]:
        return [c.binding for c in self.changes if isinstance(c, AddBinding)]

    def replace_pending_add(self, position: int, binding: Keybinding) -> None:
        """
        Replace the ``position``-th pending Add (0-based, in log order).

        Used when a binding that has not been saved yet is edited again.
        """
        seen = 0
        for i, change in enumerate(self.changes):
            if isinstance(change, AddBinding):
                if seen == position:
                    self.changes[i] = AddBinding(binding)
                    return
                seen += 1
        raise IndexError(f"No pending add at position {position}")

    def remove_pending_add(self, combo: str) -> int:
        """
        Drop every pending Add whose combo equals ``combo``.

        When two unsaved Adds share a combo both are dropped; callers that
        need to remove exactly one should use the Add's position instead.

        Returns:
            Number of entries removed
        """
        before = len(self.changes)
        self.changes = [
            c for c in self.changes
            if not (isinstance(c, AddBinding) and c.binding.combo == combo)
        ]
        removed = before - len(self.changes)
        if removed > 1:
            logger.warning(f"Removed {removed} pending bindings sharing combo {combo}")
        return removed

    def deleted_indices(self) -> Set[int]:
        return {c.index for c in self.changes if isinstance(c, DeleteBinding)}

    def modified_map(self) -> Dict[int, Keybinding]:
        """Base index -> replacement. A later Modify for an index wins."""
        modified = {}
        for change in self.changes:
            if isinstance(change, ModifyBinding):
                modified[change.index] = change.binding
        return modified

    def effective(self, base: List[Keybinding]) -> List[EffectiveBinding]:
        """
        Resolve the bindings as they would be saved.

        Survivors of the base list come first in base order, tagged unchanged
        or modified, followed by every pending Add in log order.
        """
        deleted = self.deleted_indices()
        modified = self.modified_map()

        result = []
        for index, binding in enumerate(base):
            if index in deleted:
                continue
            if index in modified:
                result.append(EffectiveBinding(modified[index], index, BindingStatus.MODIFIED))
            else:
                result.append(EffectiveBinding(binding, index, BindingStatus.UNCHANGED))

        for change in self.changes:
            if isinstance(change, AddBinding):
                result.append(EffectiveBinding(change.binding, None, BindingStatus.ADDED))
        return result

    def clear(self) -> None:
        self.changes = []

    def __iter__(self) -> Iterator[KeybindingChange]:
        return iter(self.changes)

    def __len__(self) -> int:
        return len(self.changes)

    def __bool__(self) -> bool:
        return bool(self.changes)


# ============================================================================
# Appearance
# ============================================================================

@dataclass(frozen=True)
class AppearanceChange:
    field_id: AppearanceField
    value: Any


class AppearanceOverlay:
    """
    Appearance edits folded into a working copy of the settings.

    Each new change for a field replaces any earlier pending change for the
    same field, so there is at most one entry per field.
    """

    def __init__(self, base: Optional[AppearanceSettings] = None) -> None:
        self.base = base if base is not None else AppearanceSettings()
        self.settings = self.base.copy()
        self.changes: List[AppearanceChange] = []

    def get(self, fld: AppearanceField) -> Any:
        return get_field_value(self.settings, fld)

    def set(self, fld: AppearanceField, value: Any) -> None:
        set_field_value(self.settings, fld, value)
        self.changes = [c for c in self.changes if c.field_id is not fld]
        self.changes.append(AppearanceChange(fld, value))

    def is_modified(self, fld: AppearanceField) -> bool:
        return any(c.field_id is fld for c in self.changes)

    def reset(self) -> None:
        """Drop all pending changes and return to the base settings."""
        self.settings = self.base.copy()
        self.changes = []

    def commit(self) -> None:
        """Make the working copy the new base (after a successful save)."""
        self.base = self.settings.copy()
        self.changes = []

    def rebase(self, base: AppearanceSettings) -> None:
        """Replace the base with freshly read settings, discarding changes."""
        self.base = base
        self.reset()

    def __len__(self) -> int:
        return len(self.changes)

    def __bool__(self) -> bool:
        return bool(self.changes)
