"""
Keybindings view model: the base binding list, pending changes, search and
the edit form.
"""

import logging
from typing import List, Optional, Tuple

from ..accessors import read_keybindings, write_keybindings
from ..document import ConfigDocument
from ..exceptions import EditValidationError
from ..models import (
    AddBinding,
    BindingDraft,
    BindingStatus,
    DeleteBinding,
    EffectiveBinding,
    Keybinding,
    KeybindingChange,
    ModifyBinding,
)
from ..overlay import KeybindingOverlay
from .selection import clamp_index, next_index, previous_index, scroll_to

logger = logging.getLogger(__name__)


class KeybindingsViewModel:
    """
    Binding list state.

    ``bindings`` is the base list as read from the document. Selection and
    scrolling work on the filtered effective list; every change recorded in
    the overlay refers to base indices.
    """

    def __init__(self) -> None:
        self.bindings: List[Keybinding] = []
        self.pending = KeybindingOverlay()
        self.selected_index = 0
        self.scroll_offset = 0
        self.search_query = ""
        self.search_mode = False
        self.draft: Optional[BindingDraft] = None
        # Position among pending Adds of the unsaved binding being edited
        self._editing_add: Optional[int] = None

    def load(self, bindings: List[Keybinding]) -> None:
        """Replace the base list and drop pending changes."""
        self.bindings = list(bindings)
        self.pending.clear()
        self.selected_index = 0
        self.scroll_offset = 0
        self.draft = None
        self._editing_add = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def effective_bindings(self) -> List[EffectiveBinding]:
        return self.pending.effective(self.bindings)

    def _filtered(self) -> List[Tuple[EffectiveBinding, Optional[int]]]:
        """Filtered effective list, each entry with its pending-Add position."""
        result = []
        add_position = 0
        for eb in self.effective_bindings():
            position = None
            if eb.status is BindingStatus.ADDED:
                position = add_position
                add_position += 1
            if not self.search_query or eb.binding.matches_search(self.search_query):
                result.append((eb, position))
        return result

    def filtered_bindings(self) -> List[EffectiveBinding]:
        return [eb for eb, _ in self._filtered()]

    def visible_count(self) -> int:
        return len(self._filtered())

    def selected_effective_binding(self) -> Optional[EffectiveBinding]:
        filtered = self.filtered_bindings()
        if 0 <= self.selected_index < len(filtered):
            return filtered[self.selected_index]
        return None

    def selected_binding(self) -> Optional[Keybinding]:
        eb = self.selected_effective_binding()
        return eb.binding if eb else None

    def has_pending_changes(self) -> bool:
        return bool(self.pending)

    # ------------------------------------------------------------------
    # Selection and search
    # ------------------------------------------------------------------

    def select_next(self) -> None:
        self.selected_index = next_index(self.selected_index, self.visible_count())

    def select_previous(self) -> None:
        self.selected_index = previous_index(self.selected_index, self.visible_count())

    def select(self, index: int) -> None:
        if 0 <= index < self.visible_count():
            self.selected_index = index

    def update_scroll(self, visible_height: int) -> None:
        self.scroll_offset = scroll_to(self.selected_index, self.scroll_offset, visible_height)

    def start_search(self) -> None:
        self.search_mode = True

    def set_search(self, query: str) -> None:
        self.search_query = query
        self.selected_index = 0
        self.scroll_offset = 0

    def clear_search(self) -> None:
        self.search_query = ""
        self.selected_index = 0
        self.scroll_offset = 0
        self.search_mode = False

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def start_add(self) -> None:
        self.draft = BindingDraft()
        self._editing_add = None

    def start_edit(self) -> bool:
        """
        Open the edit form on the selected binding.

        Returns:
            False if nothing is selected
        """
        filtered = self._filtered()
        if not 0 <= self.selected_index < len(filtered):
            return False
        eb, add_position = filtered[self.selected_index]
        self.draft = BindingDraft.from_binding(eb.binding, eb.base_index)
        self._editing_add = add_position
        return True

    def cancel_edit(self) -> None:
        self.draft = None
        self._editing_add = None

    def confirm_edit(self) -> Optional[KeybindingChange]:
        """
        Turn the edit form into a pending change.

        A new binding becomes an Add; an existing one a Modify of its base
        index. Editing a binding that is itself still pending replaces that
        pending Add instead. The form stays open when validation fails.

        Returns:
            The recorded change, or None if no form is open

        Raises:
            EditValidationError: If the key combo or action is invalid
        """
        draft = self.draft
        if draft is None:
            return None

        binding = draft.to_keybinding()

        if draft.is_new:
            change: KeybindingChange = AddBinding(binding)
            self.pending.add(binding)
        elif draft.base_index is not None:
            change = ModifyBinding(draft.base_index, binding)
            self.pending.modify(draft.base_index, binding)
        elif self._editing_add is not None:
            change = AddBinding(binding)
            self.pending.replace_pending_add(self._editing_add, binding)
        else:
            raise EditValidationError("Binding being edited no longer exists")

        self.draft = None
        self._editing_add = None
        logger.debug(f"Pending keybinding change: {change}")
        return change

    def delete_selected(self) -> bool:
        """
        Delete the selected binding.

        A saved binding gets a pending Delete of its base index. An unsaved
        one is dropped from the pending Adds by combo, which removes every
        pending Add sharing that combo.

        Returns:
            False if nothing is selected
        """
        eb = self.selected_effective_binding()
        if eb is None:
            return False

        if eb.base_index is not None:
            self.pending.delete(eb.base_index)
        else:
            self.pending.remove_pending_add(eb.binding.combo)

        self.selected_index = clamp_index(self.selected_index, self.visible_count())
        return True

    def revert(self) -> None:
        self.pending.clear()
        self.draft = None
        self._editing_add = None
        self.selected_index = clamp_index(self.selected_index, self.visible_count())

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def document_changes(self) -> List[KeybindingChange]:
        """
        The pending changes with base-list indices translated to positions
        in the document's ``binds`` block.
        """
        changes: List[KeybindingChange] = []
        for change in self.pending:
            if isinstance(change, ModifyBinding):
                changes.append(ModifyBinding(self._source_index(change.index), change.binding))
            elif isinstance(change, DeleteBinding):
                changes.append(DeleteBinding(self._source_index(change.index)))
            else:
                changes.append(change)
        return changes

    def _source_index(self, base_index: int) -> int:
        source_index = self.bindings[base_index].source_index
        return base_index if source_index is None else source_index

    def save(self, doc: ConfigDocument) -> bool:
        """
        Write pending changes to the document, save it and re-read the base.

        On failure the document is rolled back and the pending changes are
        left exactly as they were.

        Returns:
            False if there was nothing to save

        Raises:
            MissingBlockError: If the config has no binds block
            DocumentIOError: If the backup or write fails
        """
        if not self.pending:
            return False

        changes = self.document_changes()
        with doc.transaction():
            write_keybindings(doc, changes)
            doc.save()

        count = len(self.pending)
        self.load(read_keybindings(doc))
        logger.info(f"Saved {count} keybinding changes")
        return True
