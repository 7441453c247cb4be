"""
Appearance view model: a collapsible list of layout settings with pending
edits.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Set

from ..accessors import write_appearance
from ..document import ConfigDocument
from ..exceptions import EditValidationError
from ..models import (
    AppearanceDraft,
    AppearanceField,
    AppearanceSection,
    AppearanceSettings,
    FieldKind,
    GradientColor,
)
from ..models.appearance import format_field_value
from ..overlay import AppearanceOverlay
from .selection import next_index, previous_index, scroll_to

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppearanceListItem:
    """A row of the list: a section header (``field_id`` None) or a field."""
    section: AppearanceSection
    field_id: Optional[AppearanceField] = None

    @property
    def is_header(self) -> bool:
        return self.field_id is None


class AppearanceViewModel:
    def __init__(self, settings: Optional[AppearanceSettings] = None) -> None:
        self.pending = AppearanceOverlay(settings)
        self.selected_index = 0
        self.scroll_offset = 0
        self.collapsed: Set[AppearanceSection] = set()
        self.draft: Optional[AppearanceDraft] = None

    def load(self, settings: AppearanceSettings) -> None:
        self.pending.rebase(settings)
        self.draft = None

    @property
    def settings(self) -> AppearanceSettings:
        """Effective settings (pending changes applied)."""
        return self.pending.settings

    # ------------------------------------------------------------------
    # List
    # ------------------------------------------------------------------

    def visible_items(self) -> List[AppearanceListItem]:
        """Every section header, each followed by its fields unless collapsed."""
        items = []
        for section in AppearanceSection:
            items.append(AppearanceListItem(section))
            if section not in self.collapsed:
                items.extend(AppearanceListItem(section, f) for f in AppearanceField.in_section(section))
        return items

    def selected_item(self) -> Optional[AppearanceListItem]:
        items = self.visible_items()
        if 0 <= self.selected_index < len(items):
            return items[self.selected_index]
        return None

    def selected_field(self) -> Optional[AppearanceField]:
        item = self.selected_item()
        return item.field_id if item else None

    def select_next(self) -> None:
        self.selected_index = next_index(self.selected_index, len(self.visible_items()))

    def select_previous(self) -> None:
        self.selected_index = previous_index(self.selected_index, len(self.visible_items()))

    def select(self, index: int) -> None:
        if 0 <= index < len(self.visible_items()):
            self.selected_index = index

    def toggle_section(self, section: AppearanceSection) -> None:
        if section in self.collapsed:
            self.collapsed.remove(section)
        else:
            self.collapsed.add(section)

    def toggle_selected_section(self) -> None:
        item = self.selected_item()
        if item is not None and item.is_header:
            self.toggle_section(item.section)

    def update_scroll(self, visible_height: int) -> None:
        self.scroll_offset = scroll_to(self.selected_index, self.scroll_offset, visible_height)

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    def field_value(self, fld: AppearanceField) -> Any:
        return self.pending.get(fld)

    def display_value(self, fld: AppearanceField) -> str:
        return format_field_value(fld, self.field_value(fld))

    def is_modified(self, fld: AppearanceField) -> bool:
        return self.pending.is_modified(fld)

    def has_pending_changes(self) -> bool:
        return bool(self.pending)

    def set_value(self, fld: AppearanceField, value: Any) -> None:
        self.pending.set(fld, value)

    def toggle_boolean(self, fld: AppearanceField) -> None:
        if fld.is_boolean:
            self.pending.set(fld, not self.field_value(fld))

    def increment(self, fld: AppearanceField, amount: int) -> None:
        """Add ``amount`` to an integer field; an unset optional counts as 0."""
        if not fld.is_integer:
            return
        current = self.field_value(fld)
        self.pending.set(fld, (current or 0) + amount)

    def cycle_enum(self, fld: AppearanceField, forward: bool = True) -> None:
        if fld.is_enum:
            current = self.field_value(fld)
            self.pending.set(fld, current.next() if forward else current.previous())

    def toggle_selected(self) -> None:
        fld = self.selected_field()
        if fld is not None:
            self.toggle_boolean(fld)

    def adjust_selected(self, amount: int) -> None:
        fld = self.selected_field()
        if fld is not None:
            self.increment(fld, amount)

    def cycle_selected(self, forward: bool = True) -> None:
        fld = self.selected_field()
        if fld is not None:
            self.cycle_enum(fld, forward)

    # ------------------------------------------------------------------
    # Edit form
    # ------------------------------------------------------------------

    def start_edit(self) -> bool:
        """
        Edit the selected field.

        Booleans toggle and enums cycle right away; other fields open a form.

        Returns:
            True if a form was opened
        """
        fld = self.selected_field()
        if fld is None:
            return False
        if fld.is_boolean:
            self.toggle_boolean(fld)
            return False
        if fld.is_enum:
            self.cycle_enum(fld, True)
            return False
        self.draft = AppearanceDraft.for_field(fld, self.field_value(fld))
        return True

    def cancel_edit(self) -> None:
        self.draft = None

    def confirm_edit(self) -> Optional[Any]:
        """
        Store the form's value as a pending change and close the form.

        Returns:
            The new value, or None if no form is open

        Raises:
            EditValidationError: If the value does not parse (the form stays open)
        """
        draft = self.draft
        if draft is None:
            return None
        color = draft.color
        if (
            draft.field_id.kind is FieldKind.OPTIONAL_COLOR
            and color is not None
            and not color.is_gradient
            and not color.solid.strip()
        ):
            # Clearing an optional color unsets it
            value = None
        else:
            value = draft.parse()
        if draft.field_id is AppearanceField.SHADOW_COLOR and isinstance(value, GradientColor):
            raise EditValidationError("Shadow color cannot be a gradient")
        self.pending.set(draft.field_id, value)
        self.draft = None
        return value

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Discard pending changes."""
        self.pending.reset()
        self.draft = None

    def save(self, doc: ConfigDocument) -> bool:
        """
        Write the effective settings to the document and save it.

        On failure the document is rolled back and pending changes stay.

        Returns:
            False if there was nothing to save

        Raises:
            DocumentIOError: If the backup or write fails
        """
        if not self.pending:
            return False
        with doc.transaction():
            write_appearance(doc, self.pending.settings)
            doc.save()
        count = len(self.pending)
        self.pending.commit()
        logger.info(f"Saved {count} appearance changes")
        return True
