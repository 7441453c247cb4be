"""
Multi-monitor layout geometry.

Snap places one output flush against an edge of a reference output; normalize
shifts every enabled output so the layout's top-left corner is (0, 0). All
calculations use effective positions (pending overlay applied) so snaps can be
chained before saving, and all results go into the overlay.
"""

import logging
from enum import Enum
from typing import Dict, Optional, Sequence, Tuple

from .models import OutputDescriptor, Position, Size
from .overlay import PositionOverlay

logger = logging.getLogger(__name__)

DEFAULT_MOVE_STEP = 10


class SnapDirection(Enum):
    LEFT = "left"
    RIGHT = "right"
    ABOVE = "above"
    BELOW = "below"


def effective_position(output: OutputDescriptor, overlay: PositionOverlay) -> Position:
    return overlay.effective(output.name, output.position)


def _centered(offset: int) -> int:
    # Integer halving that truncates toward zero
    return int(offset / 2)


def reference_output(
    outputs: Sequence[OutputDescriptor],
    name: str,
    overlay: PositionOverlay,
) -> Optional[Tuple[Position, Size]]:
    """
    Find the output to snap against: the first other enabled output.

    Returns:
        Its effective position and logical size, or None if there is none
    """
    for output in outputs:
        if output.name == name or not output.enabled:
            continue
        return effective_position(output, overlay), output.logical_size
    return None


def snap_position(
    size: Size,
    ref_position: Position,
    ref_size: Size,
    direction: SnapDirection,
) -> Position:
    """
    Position for an output of ``size`` snapped against the reference.

    Left/right align top edges; above/below center horizontally.
    """
    if direction is SnapDirection.LEFT:
        return Position(ref_position.x - size.width, ref_position.y)
    if direction is SnapDirection.RIGHT:
        return Position(ref_position.x + ref_size.width, ref_position.y)

    x = ref_position.x + _centered(ref_size.width - size.width)
    if direction is SnapDirection.ABOVE:
        return Position(x, ref_position.y - size.height)
    return Position(x, ref_position.y + ref_size.height)


def snap(
    outputs: Sequence[OutputDescriptor],
    name: str,
    direction: SnapDirection,
    overlay: PositionOverlay,
) -> Optional[Position]:
    """
    Snap output ``name`` and record the result in the overlay.

    Returns:
        The new position, or None if the output is unknown or there is no
        reference output (nothing is changed then)
    """
    output = next((o for o in outputs if o.name == name), None)
    if output is None:
        logger.debug(f"Cannot snap unknown output {name}")
        return None

    reference = reference_output(outputs, name, overlay)
    if reference is None:
        logger.debug(f"No reference output to snap {name} against")
        return None

    ref_position, ref_size = reference
    position = snap_position(output.logical_size, ref_position, ref_size, direction)
    overlay.set(name, position)
    logger.debug(f"Snapped {name} {direction.value} to {position.x},{position.y}")
    return position


def normalize(
    outputs: Sequence[OutputDescriptor],
    overlay: PositionOverlay,
) -> Dict[str, Position]:
    """
    Shift all enabled outputs so their bounding box starts at (0, 0).

    Disabled outputs are left alone. With no enabled outputs nothing happens.

    Returns:
        The new position of every shifted output
    """
    enabled = [o for o in outputs if o.enabled]
    if not enabled:
        return {}

    positions = {o.name: effective_position(o, overlay) for o in enabled}
    min_x = min(p.x for p in positions.values())
    min_y = min(p.y for p in positions.values())

    shifted = {}
    for name, position in positions.items():
        new_position = position.offset(-min_x, -min_y)
        overlay.set(name, new_position)
        shifted[name] = new_position
    logger.debug(f"Normalized {len(shifted)} outputs by ({-min_x}, {-min_y})")
    return shifted


def move(
    outputs: Sequence[OutputDescriptor],
    name: str,
    dx: int,
    dy: int,
    overlay: PositionOverlay,
) -> Optional[Position]:
    """Nudge output ``name`` by (dx, dy) from its effective position."""
    output = next((o for o in outputs if o.name == name), None)
    if output is None:
        return None
    position = effective_position(output, overlay).offset(dx, dy)
    overlay.set(name, position)
    return position
