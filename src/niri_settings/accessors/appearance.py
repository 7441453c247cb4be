"""
Read and write the ``layout`` block of config.kdl.

    layout {
        gaps 16
        center-focused-column "never"
        focus-ring {
            width 4
            active-color "#7fc8ff"
            inactive-gradient from="#505050" to="#808080" angle=45
        }
        border { off; }
        shadow { on; softness 30; offset x=0 y=5; }
        struts { left 64; }
    }

A color slot is stored either as ``<slot>-color "..."`` or as
``<slot>-gradient from=.. to=..``, never both.
"""

import logging
from typing import Optional

from ..document import ConfigDocument, Node
from ..models import (
    AppearanceSettings,
    BorderSettings,
    CenterFocusedColumn,
    ColorValue,
    FocusRingSettings,
    GradientColor,
    ShadowSettings,
    SolidColor,
    StrutsSettings,
)

logger = logging.getLogger(__name__)

LAYOUT_NODE = "layout"


# ============================================================================
# Reading
# ============================================================================

def _int_arg(node: Optional[Node]) -> Optional[int]:
    if node is None:
        return None
    value = node.get(0)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    logger.debug(f"Ignoring non-integer value for '{node.name}': {value!r}")
    return None


def _str_arg(node: Optional[Node]) -> Optional[str]:
    if node is None:
        return None
    value = node.get(0)
    return value if isinstance(value, str) else None


def _int_prop(node: Node, key: str) -> Optional[int]:
    value = node.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _read_gradient(node: Optional[Node]) -> Optional[GradientColor]:
    if node is None:
        return None
    from_color = node.get("from")
    to_color = node.get("to")
    if not isinstance(from_color, str) or not isinstance(to_color, str):
        logger.debug(f"Ignoring incomplete gradient '{node.name}'")
        return None
    relative_to = node.get("relative-to")
    color_space = node.get("in")
    return GradientColor(
        from_color=from_color,
        to_color=to_color,
        angle=_int_prop(node, "angle"),
        relative_to=relative_to if isinstance(relative_to, str) else None,
        color_space=color_space if isinstance(color_space, str) else None,
    )


def _read_slot(block: Node, slot: str):
    """Read ``<slot>-color`` and ``<slot>-gradient``; the gradient wins."""
    gradient = _read_gradient(block.child(f"{slot}-gradient"))
    if gradient is not None:
        return gradient, gradient
    solid = _str_arg(block.child(f"{slot}-color"))
    return (SolidColor(solid) if solid is not None else None), None


def _read_focus_ring(block: Node) -> FocusRingSettings:
    settings = FocusRingSettings()
    if block.has_child("off"):
        settings.off = True
    width = _int_arg(block.child("width"))
    if width is not None:
        settings.width = width
    color, settings.active_gradient = _read_slot(block, "active")
    if color is not None:
        settings.active_color = color
    color, settings.inactive_gradient = _read_slot(block, "inactive")
    if color is not None:
        settings.inactive_color = color
    return settings


def _read_border(block: Node) -> BorderSettings:
    settings = BorderSettings()
    if block.has_child("off"):
        settings.off = True
    if block.has_child("on"):
        settings.off = False
    width = _int_arg(block.child("width"))
    if width is not None:
        settings.width = width
    color, settings.active_gradient = _read_slot(block, "active")
    if color is not None:
        settings.active_color = color
    color, settings.inactive_gradient = _read_slot(block, "inactive")
    if color is not None:
        settings.inactive_color = color
    color, settings.urgent_gradient = _read_slot(block, "urgent")
    if color is not None:
        settings.urgent_color = color
    return settings


def _read_shadow(block: Node) -> ShadowSettings:
    settings = ShadowSettings()
    if block.has_child("on"):
        settings.on = True
    draw_behind = block.child("draw-behind-window")
    if draw_behind is not None:
        value = draw_behind.get(0, True)
        settings.draw_behind_window = value if isinstance(value, bool) else True
    for attr in ("softness", "spread"):
        value = _int_arg(block.child(attr))
        if value is not None:
            setattr(settings, attr, value)
    offset = block.child("offset")
    if offset is not None:
        x = _int_prop(offset, "x")
        y = _int_prop(offset, "y")
        if x is not None:
            settings.offset_x = x
        if y is not None:
            settings.offset_y = y
    color = _str_arg(block.child("color"))
    if color is not None:
        settings.color = SolidColor(color)
    return settings


def _read_struts(block: Node) -> StrutsSettings:
    return StrutsSettings(
        left=_int_arg(block.child("left")),
        right=_int_arg(block.child("right")),
        top=_int_arg(block.child("top")),
        bottom=_int_arg(block.child("bottom")),
    )


def read_appearance(doc: ConfigDocument) -> AppearanceSettings:
    """
    Read appearance settings from the first ``layout`` block.

    Anything absent or unreadable keeps its default.
    """
    settings = AppearanceSettings()
    layout = doc.find(LAYOUT_NODE)
    if layout is None:
        logger.debug("No layout block in config, using defaults")
        return settings

    gaps = _int_arg(layout.child("gaps"))
    if gaps is not None:
        settings.gaps = gaps

    centering = _str_arg(layout.child("center-focused-column"))
    if centering is not None:
        try:
            settings.center_focused_column = CenterFocusedColumn(centering)
        except ValueError:
            logger.warning(f"Unknown center-focused-column value {centering!r}, using default")

    focus_ring = layout.child("focus-ring")
    if focus_ring is not None:
        settings.focus_ring = _read_focus_ring(focus_ring)
    border = layout.child("border")
    if border is not None:
        settings.border = _read_border(border)
    shadow = layout.child("shadow")
    if shadow is not None:
        settings.shadow = _read_shadow(shadow)
    struts = layout.child("struts")
    if struts is not None:
        settings.struts = _read_struts(struts)
    return settings


# ============================================================================
# Writing
# ============================================================================

def _set_flag(block: Node, name: str, present: bool) -> None:
    """Make a bare flag node like ``off`` present or absent."""
    if present:
        if not block.has_child(name):
            block.append_child(Node.create(name))
    else:
        block.remove_children(name)


def _set_optional(block: Node, name: str, value: Optional[int]) -> None:
    if value is None:
        block.remove_children(name)
    else:
        block.set_child(name, value)


def _write_slot(block: Node, slot: str, color: Optional[ColorValue]) -> None:
    """Store a color slot as solid or gradient, removing the other form."""
    color_name = f"{slot}-color"
    gradient_name = f"{slot}-gradient"
    if color is None:
        block.remove_children(color_name)
        block.remove_children(gradient_name)
    elif isinstance(color, GradientColor):
        block.remove_children(color_name)
        props = {"from": color.from_color, "to": color.to_color}
        if color.angle is not None:
            props["angle"] = color.angle
        if color.relative_to is not None:
            props["relative-to"] = color.relative_to
        if color.color_space is not None:
            props["in"] = color.color_space
        block.set_child(gradient_name, props=props)
    else:
        block.remove_children(gradient_name)
        block.set_child(color_name, color.color)


def _write_focus_ring(block: Node, settings: FocusRingSettings) -> None:
    _set_flag(block, "off", settings.off)
    if settings.off:
        block.remove_children("on")
    block.set_child("width", settings.width)
    _write_slot(block, "active", settings.active_color)
    _write_slot(block, "inactive", settings.inactive_color)


def _write_border(block: Node, settings: BorderSettings) -> None:
    _set_flag(block, "off", settings.off)
    _set_flag(block, "on", not settings.off)
    block.set_child("width", settings.width)
    _write_slot(block, "active", settings.active_color)
    _write_slot(block, "inactive", settings.inactive_color)
    _write_slot(block, "urgent", settings.urgent_color)


def _write_shadow(block: Node, settings: ShadowSettings) -> None:
    _set_flag(block, "on", settings.on)
    if settings.draw_behind_window:
        block.set_child("draw-behind-window", True)
    else:
        block.remove_children("draw-behind-window")
    block.set_child("softness", settings.softness)
    block.set_child("spread", settings.spread)
    block.set_child("offset", props={"x": settings.offset_x, "y": settings.offset_y})
    color = settings.color
    if isinstance(color, GradientColor):
        logger.warning("Shadow color does not support gradients, writing the start color")
        color = SolidColor(color.from_color)
    block.set_child("color", color.color)


def _write_struts(block: Node, settings: StrutsSettings) -> None:
    _set_optional(block, "left", settings.left)
    _set_optional(block, "right", settings.right)
    _set_optional(block, "top", settings.top)
    _set_optional(block, "bottom", settings.bottom)


def write_appearance(doc: ConfigDocument, settings: AppearanceSettings) -> None:
    """
    Write appearance settings into the document (not on disk).

    The ``layout`` block and its sections are created when absent; existing
    entries are updated in place. A ``struts`` block is only created when at
    least one side is set.
    """
    layout = doc.get_or_create(LAYOUT_NODE)
    layout.set_child("gaps", settings.gaps)
    layout.set_child("center-focused-column", settings.center_focused_column.value)
    _write_focus_ring(layout.get_or_create_child_block("focus-ring"), settings.focus_ring)
    _write_border(layout.get_or_create_child_block("border"), settings.border)
    _write_shadow(layout.get_or_create_child_block("shadow"), settings.shadow)
    struts = settings.struts
    sides = (struts.left, struts.right, struts.top, struts.bottom)
    if layout.has_child("struts") or any(v is not None for v in sides):
        _write_struts(layout.get_or_create_child_block("struts"), struts)
    logger.debug("Wrote appearance settings to layout block")
