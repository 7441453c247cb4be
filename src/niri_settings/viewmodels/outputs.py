"""
Outputs view model: connected monitors plus pending position edits.
"""

import logging
from typing import Dict, List, Optional, Set

from .. import geometry
from ..accessors import configured_output_names, write_positions
from ..compositor import NiriClient
from ..document import ConfigDocument
from ..geometry import SnapDirection
from ..models import OutputDescriptor, Position
from ..overlay import PositionOverlay
from .selection import clamp_index, next_index, previous_index

logger = logging.getLogger(__name__)


class OutputsViewModel:
    """
    Monitor arrangement state.

    ``outputs`` are the descriptors from the last compositor query (the base);
    ``pending`` holds unsaved positions. Geometry always works on effective
    positions so edits can be chained before saving.
    """

    def __init__(self, move_step: int = geometry.DEFAULT_MOVE_STEP) -> None:
        self.outputs: List[OutputDescriptor] = []
        self.selected_index = 0
        self.pending = PositionOverlay()
        self.move_step = move_step
        # Outputs whose live position was changed by a preview
        self.previewed: Set[str] = set()

    def set_outputs(self, outputs: List[OutputDescriptor], doc: Optional[ConfigDocument] = None) -> None:
        """Replace the base outputs, marking those the document already configures."""
        configured = configured_output_names(doc) if doc is not None else set()
        for output in outputs:
            output.configured = output.name in configured
        self.outputs = list(outputs)
        self.selected_index = clamp_index(self.selected_index, len(self.outputs))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def selected_output(self) -> Optional[OutputDescriptor]:
        if 0 <= self.selected_index < len(self.outputs):
            return self.outputs[self.selected_index]
        return None

    def get(self, name: str) -> Optional[OutputDescriptor]:
        return next((o for o in self.outputs if o.name == name), None)

    def effective_position(self, name: str) -> Optional[Position]:
        output = self.get(name)
        if output is None:
            return None
        return self.pending.effective(name, output.position)

    def effective_outputs(self) -> List[OutputDescriptor]:
        """Copies of the outputs with pending positions applied."""
        return [o.with_position(self.pending.effective(o.name, o.position)) for o in self.outputs]

    def has_pending_changes(self) -> bool:
        return bool(self.pending)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_next(self) -> None:
        self.selected_index = next_index(self.selected_index, len(self.outputs))

    def select_previous(self) -> None:
        self.selected_index = previous_index(self.selected_index, len(self.outputs))

    def select(self, index: int) -> None:
        """Select by index; out-of-range indices are ignored."""
        if 0 <= index < len(self.outputs):
            self.selected_index = index

    # ------------------------------------------------------------------
    # Edits (all land in the overlay)
    # ------------------------------------------------------------------

    def move_selected(self, dx: int, dy: int) -> Optional[Position]:
        output = self.selected_output()
        if output is None:
            return None
        return geometry.move(self.outputs, output.name, dx, dy, self.pending)

    def nudge_selected(self, x_steps: int, y_steps: int) -> Optional[Position]:
        """Move by whole steps of ``move_step`` pixels."""
        return self.move_selected(x_steps * self.move_step, y_steps * self.move_step)

    def set_selected_position(self, x: int, y: int) -> Optional[Position]:
        output = self.selected_output()
        if output is None:
            return None
        position = Position(x, y)
        self.pending.set(output.name, position)
        return position

    def snap_selected(self, direction: SnapDirection) -> Optional[Position]:
        output = self.selected_output()
        if output is None:
            return None
        return geometry.snap(self.outputs, output.name, direction, self.pending)

    def normalize(self) -> Dict[str, Position]:
        return geometry.normalize(self.outputs, self.pending)

    def revert(self) -> None:
        """Discard all pending positions."""
        self.pending.clear()

    # ------------------------------------------------------------------
    # Compositor and document
    # ------------------------------------------------------------------

    def preview(self, client: NiriClient) -> int:
        """
        Apply pending positions live without saving.

        Stops at the first failure; outputs already sent stay moved.

        Returns:
            Number of outputs previewed

        Raises:
            CompositorError: If a preview request fails
        """
        count = 0
        for name, position in self.pending.items():
            client.set_output_position_preview(name, position)
            self.previewed.add(name)
            count += 1
        logger.info(f"Previewed {count} output positions")
        return count

    def revert_preview(self, client: Optional[NiriClient] = None) -> None:
        """
        Discard pending positions, moving previewed outputs back when a
        client is given.

        The overlay is cleared before talking to the compositor.

        Raises:
            CompositorError: If restoring a live position fails
        """
        self.revert()
        previewed, self.previewed = self.previewed, set()
        if client is None:
            return
        for name in sorted(previewed):
            output = self.get(name)
            if output is not None and output.enabled:
                client.set_output_position_preview(name, output.position)

    def save(self, doc: ConfigDocument) -> bool:
        """
        Write pending positions to the document and save it.

        On success the pending positions become the base. On failure nothing
        changes and the error propagates.

        Returns:
            False if there was nothing to save

        Raises:
            DocumentIOError: If the backup or write fails
        """
        if not self.pending:
            return False

        positions = self.pending.as_dict()
        write_positions(doc, positions)

        for name, position in positions.items():
            output = self.get(name)
            if output is not None:
                output.position = position
                output.configured = True
        self.pending.clear()
        self.previewed.clear()
        return True
