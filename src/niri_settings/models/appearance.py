"""
Appearance (layout block) value types.

Covers gaps, column centering, focus ring, border, shadow and struts, plus
the field table the editor walks to present them as a flat list.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from ..exceptions import EditValidationError


# ============================================================================
# Colors
# ============================================================================

@dataclass(frozen=True)
class SolidColor:
    color: str

    def __str__(self) -> str:
        return self.color


@dataclass(frozen=True)
class GradientColor:
    """A two-stop gradient as written by ``active-gradient from=.. to=..``."""
    from_color: str
    to_color: str
    angle: Optional[int] = None
    relative_to: Optional[str] = None
    color_space: Optional[str] = None

    def __str__(self) -> str:
        parts = [f"from={self.from_color}", f"to={self.to_color}"]
        if self.angle is not None:
            parts.append(f"angle={self.angle}")
        if self.relative_to is not None:
            parts.append(f"relative-to={self.relative_to}")
        if self.color_space is not None:
            parts.append(f"in={self.color_space}")
        return f"gradient({' '.join(parts)})"


ColorValue = Union[SolidColor, GradientColor]


class CenterFocusedColumn(Enum):
    NEVER = "never"
    ALWAYS = "always"
    ON_OVERFLOW = "on-overflow"

    def next(self) -> "CenterFocusedColumn":
        members = list(CenterFocusedColumn)
        return members[(members.index(self) + 1) % len(members)]

    def previous(self) -> "CenterFocusedColumn":
        members = list(CenterFocusedColumn)
        return members[(members.index(self) - 1) % len(members)]

    def __str__(self) -> str:
        return self.value


# ============================================================================
# Settings
# ============================================================================

@dataclass
class FocusRingSettings:
    off: bool = False
    width: int = 4
    active_color: ColorValue = SolidColor("#7fc8ff")
    inactive_color: ColorValue = SolidColor("#505050")
    active_gradient: Optional[GradientColor] = None
    inactive_gradient: Optional[GradientColor] = None


@dataclass
class BorderSettings:
    off: bool = True
    width: int = 4
    active_color: ColorValue = SolidColor("#ffc87f")
    inactive_color: ColorValue = SolidColor("#505050")
    urgent_color: Optional[ColorValue] = SolidColor("#9b0000")
    active_gradient: Optional[GradientColor] = None
    inactive_gradient: Optional[GradientColor] = None
    urgent_gradient: Optional[GradientColor] = None


@dataclass
class ShadowSettings:
    on: bool = False
    draw_behind_window: bool = False
    softness: int = 30
    spread: int = 5
    offset_x: int = 0
    offset_y: int = 5
    color: ColorValue = SolidColor("#0007")


@dataclass
class StrutsSettings:
    """Outer gaps; None means the entry is absent from the config."""
    left: Optional[int] = None
    right: Optional[int] = None
    top: Optional[int] = None
    bottom: Optional[int] = None


@dataclass
class AppearanceSettings:
    """Everything the editor reads from and writes to the ``layout`` block."""
    gaps: int = 16
    center_focused_column: CenterFocusedColumn = CenterFocusedColumn.NEVER
    focus_ring: FocusRingSettings = field(default_factory=FocusRingSettings)
    border: BorderSettings = field(default_factory=BorderSettings)
    shadow: ShadowSettings = field(default_factory=ShadowSettings)
    struts: StrutsSettings = field(default_factory=StrutsSettings)

    def copy(self) -> "AppearanceSettings":
        return copy.deepcopy(self)


# ============================================================================
# Field table
# ============================================================================

class AppearanceSection(Enum):
    GENERAL = "General"
    FOCUS_RING = "Focus Ring"
    BORDER = "Border"
    SHADOW = "Shadow"
    STRUTS = "Struts"


class FieldKind(Enum):
    BOOLEAN = "boolean"
    INTEGER = "integer"
    OPTIONAL_INTEGER = "optional_integer"
    ENUM = "enum"
    COLOR = "color"
    OPTIONAL_COLOR = "optional_color"


@dataclass(frozen=True)
class FieldInfo:
    section: AppearanceSection
    label: str
    description: str
    kind: FieldKind
    path: str  # attribute path on AppearanceSettings
    off_semantic: bool = False  # True means "disabled"


class AppearanceField(Enum):
    """Every editable appearance field, keyed by a dotted name."""
    GAPS = "gaps"
    CENTER_FOCUSED_COLUMN = "center-focused-column"
    FOCUS_RING_OFF = "focus-ring.off"
    FOCUS_RING_WIDTH = "focus-ring.width"
    FOCUS_RING_ACTIVE_COLOR = "focus-ring.active-color"
    FOCUS_RING_INACTIVE_COLOR = "focus-ring.inactive-color"
    BORDER_OFF = "border.off"
    BORDER_WIDTH = "border.width"
    BORDER_ACTIVE_COLOR = "border.active-color"
    BORDER_INACTIVE_COLOR = "border.inactive-color"
    BORDER_URGENT_COLOR = "border.urgent-color"
    SHADOW_ON = "shadow.on"
    SHADOW_DRAW_BEHIND_WINDOW = "shadow.draw-behind-window"
    SHADOW_SOFTNESS = "shadow.softness"
    SHADOW_SPREAD = "shadow.spread"
    SHADOW_OFFSET_X = "shadow.offset-x"
    SHADOW_OFFSET_Y = "shadow.offset-y"
    SHADOW_COLOR = "shadow.color"
    STRUTS_LEFT = "struts.left"
    STRUTS_RIGHT = "struts.right"
    STRUTS_TOP = "struts.top"
    STRUTS_BOTTOM = "struts.bottom"

    @property
    def info(self) -> FieldInfo:
        return FIELD_INFO[self]

    @property
    def section(self) -> AppearanceSection:
        return self.info.section

    @property
    def label(self) -> str:
        return self.info.label

    @property
    def description(self) -> str:
        return self.info.description

    @property
    def kind(self) -> FieldKind:
        return self.info.kind

    @property
    def is_boolean(self) -> bool:
        return self.kind is FieldKind.BOOLEAN

    @property
    def is_off_semantic(self) -> bool:
        return self.info.off_semantic

    @property
    def is_enum(self) -> bool:
        return self.kind is FieldKind.ENUM

    @property
    def is_color(self) -> bool:
        return self.kind in (FieldKind.COLOR, FieldKind.OPTIONAL_COLOR)

    @property
    def is_integer(self) -> bool:
        return self.kind in (FieldKind.INTEGER, FieldKind.OPTIONAL_INTEGER)

    @classmethod
    def in_section(cls, section: AppearanceSection) -> List["AppearanceField"]:
        return [f for f in cls if f.section is section]


_G = AppearanceSection.GENERAL
_F = AppearanceSection.FOCUS_RING
_B = AppearanceSection.BORDER
_S = AppearanceSection.SHADOW
_T = AppearanceSection.STRUTS

FIELD_INFO: Dict[AppearanceField, FieldInfo] = {
    AppearanceField.GAPS: FieldInfo(
        _G, "gaps", "Gap size between windows in logical pixels",
        FieldKind.INTEGER, "gaps"),
    AppearanceField.CENTER_FOCUSED_COLUMN: FieldInfo(
        _G, "center-focused-column",
        "When to center the focused column: never, always, or on-overflow",
        FieldKind.ENUM, "center_focused_column"),
    AppearanceField.FOCUS_RING_OFF: FieldInfo(
        _F, "off", "Disable the focus ring entirely",
        FieldKind.BOOLEAN, "focus_ring.off", off_semantic=True),
    AppearanceField.FOCUS_RING_WIDTH: FieldInfo(
        _F, "width", "Width of the focus ring in logical pixels",
        FieldKind.INTEGER, "focus_ring.width"),
    AppearanceField.FOCUS_RING_ACTIVE_COLOR: FieldInfo(
        _F, "active-color", "Color of the focus ring on the active monitor",
        FieldKind.COLOR, "focus_ring.active_color"),
    AppearanceField.FOCUS_RING_INACTIVE_COLOR: FieldInfo(
        _F, "inactive-color", "Color of the focus ring on inactive monitors",
        FieldKind.COLOR, "focus_ring.inactive_color"),
    AppearanceField.BORDER_OFF: FieldInfo(
        _B, "off", "Disable/enable the border (off by default)",
        FieldKind.BOOLEAN, "border.off", off_semantic=True),
    AppearanceField.BORDER_WIDTH: FieldInfo(
        _B, "width", "Width of the border in logical pixels",
        FieldKind.INTEGER, "border.width"),
    AppearanceField.BORDER_ACTIVE_COLOR: FieldInfo(
        _B, "active-color", "Color of the border on the active window",
        FieldKind.COLOR, "border.active_color"),
    AppearanceField.BORDER_INACTIVE_COLOR: FieldInfo(
        _B, "inactive-color", "Color of the border on inactive windows",
        FieldKind.COLOR, "border.inactive_color"),
    AppearanceField.BORDER_URGENT_COLOR: FieldInfo(
        _B, "urgent-color", "Color of the border for urgent windows",
        FieldKind.OPTIONAL_COLOR, "border.urgent_color"),
    AppearanceField.SHADOW_ON: FieldInfo(
        _S, "on", "Enable drop shadows for windows",
        FieldKind.BOOLEAN, "shadow.on"),
    AppearanceField.SHADOW_DRAW_BEHIND_WINDOW: FieldInfo(
        _S, "draw-behind-window", "Draw shadow behind the window (fixes CSD corners)",
        FieldKind.BOOLEAN, "shadow.draw_behind_window"),
    AppearanceField.SHADOW_SOFTNESS: FieldInfo(
        _S, "softness", "Shadow blur radius in logical pixels",
        FieldKind.INTEGER, "shadow.softness"),
    AppearanceField.SHADOW_SPREAD: FieldInfo(
        _S, "spread", "Shadow expansion in logical pixels",
        FieldKind.INTEGER, "shadow.spread"),
    AppearanceField.SHADOW_OFFSET_X: FieldInfo(
        _S, "offset x", "Horizontal shadow offset in logical pixels",
        FieldKind.INTEGER, "shadow.offset_x"),
    AppearanceField.SHADOW_OFFSET_Y: FieldInfo(
        _S, "offset y", "Vertical shadow offset in logical pixels",
        FieldKind.INTEGER, "shadow.offset_y"),
    AppearanceField.SHADOW_COLOR: FieldInfo(
        _S, "color", "Shadow color (supports alpha, e.g. #0007)",
        FieldKind.COLOR, "shadow.color"),
    AppearanceField.STRUTS_LEFT: FieldInfo(
        _T, "left", "Left strut (outer gap) in logical pixels",
        FieldKind.OPTIONAL_INTEGER, "struts.left"),
    AppearanceField.STRUTS_RIGHT: FieldInfo(
        _T, "right", "Right strut (outer gap) in logical pixels",
        FieldKind.OPTIONAL_INTEGER, "struts.right"),
    AppearanceField.STRUTS_TOP: FieldInfo(
        _T, "top", "Top strut (outer gap) in logical pixels",
        FieldKind.OPTIONAL_INTEGER, "struts.top"),
    AppearanceField.STRUTS_BOTTOM: FieldInfo(
        _T, "bottom", "Bottom strut (outer gap) in logical pixels",
        FieldKind.OPTIONAL_INTEGER, "struts.bottom"),
}

# Gradient detail kept alongside each gradient-capable color field
GRADIENT_PATHS = {
    AppearanceField.FOCUS_RING_ACTIVE_COLOR: "focus_ring.active_gradient",
    AppearanceField.FOCUS_RING_INACTIVE_COLOR: "focus_ring.inactive_gradient",
    AppearanceField.BORDER_ACTIVE_COLOR: "border.active_gradient",
    AppearanceField.BORDER_INACTIVE_COLOR: "border.inactive_gradient",
    AppearanceField.BORDER_URGENT_COLOR: "border.urgent_gradient",
}


def get_field_value(settings: AppearanceSettings, fld: AppearanceField) -> Any:
    target: Any = settings
    for attr in fld.info.path.split("."):
        target = getattr(target, attr)
    return target


def set_field_value(settings: AppearanceSettings, fld: AppearanceField, value: Any) -> None:
    """
    Store a value into settings.

    Writing a color to a gradient-capable slot also updates its gradient
    detail so the two never disagree.
    """
    *parents, attr = fld.info.path.split(".")
    target: Any = settings
    for parent in parents:
        target = getattr(target, parent)
    setattr(target, attr, value)

    gradient_path = GRADIENT_PATHS.get(fld)
    if gradient_path:
        section, gradient_attr = gradient_path.split(".")
        gradient = value if isinstance(value, GradientColor) else None
        setattr(getattr(settings, section), gradient_attr, gradient)


def format_field_value(fld: AppearanceField, value: Any) -> str:
    """Render a value the way the editor lists it."""
    if fld.is_boolean:
        return "on" if value else "off"
    if value is None:
        return "(not set)"
    return str(value)


# ============================================================================
# Edit forms
# ============================================================================

@dataclass
class ColorDraft:
    """Editable solid-or-gradient color."""
    is_gradient: bool = False
    solid: str = ""
    gradient_from: str = ""
    gradient_to: str = ""
    angle: str = ""
    relative_to: str = "window"
    color_space: Optional[str] = None

    @classmethod
    def from_color(cls, color: Optional[ColorValue]) -> "ColorDraft":
        if isinstance(color, GradientColor):
            return cls(
                is_gradient=True,
                gradient_from=color.from_color,
                gradient_to=color.to_color,
                angle="" if color.angle is None else str(color.angle),
                relative_to=color.relative_to or "window",
                color_space=color.color_space,
            )
        return cls(solid=color.color if color else "")

    def toggle_type(self) -> None:
        """Switch between solid and gradient, seeding the empty side."""
        self.is_gradient = not self.is_gradient
        if self.is_gradient and not self.gradient_from and self.solid:
            self.gradient_from = self.solid
        elif not self.is_gradient and not self.solid and self.gradient_from:
            self.solid = self.gradient_from

    def cycle_relative_to(self) -> None:
        self.relative_to = "workspace-view" if self.relative_to == "window" else "window"

    def to_color(self) -> ColorValue:
        """
        Build the color.

        Raises:
            EditValidationError: If a required color is empty or the angle is not a number
        """
        if not self.is_gradient:
            solid = self.solid.strip()
            if not solid:
                raise EditValidationError("Color cannot be empty")
            return SolidColor(solid)

        if not self.gradient_from.strip() or not self.gradient_to.strip():
            raise EditValidationError("Gradient needs both a 'from' and a 'to' color")
        angle = None
        if self.angle.strip():
            try:
                angle = int(self.angle.strip())
            except ValueError as e:
                raise EditValidationError(f"Invalid gradient angle: {self.angle!r}") from e
        return GradientColor(
            from_color=self.gradient_from.strip(),
            to_color=self.gradient_to.strip(),
            angle=angle,
            relative_to=None if self.relative_to == "window" else self.relative_to,
            color_space=self.color_space,
        )


@dataclass
class AppearanceDraft:
    """Text being typed for one field; colors use a ColorDraft instead."""
    field_id: AppearanceField
    text: str = ""
    color: Optional[ColorDraft] = None

    @classmethod
    def for_field(cls, fld: AppearanceField, current: Any) -> "AppearanceDraft":
        if fld.is_color:
            return cls(field_id=fld, color=ColorDraft.from_color(current))
        return cls(field_id=fld, text="" if current is None else str(current))

    def parse(self) -> Any:
        """
        Convert the typed text to a value for the field.

        Raises:
            EditValidationError: If the text is not valid for the field
        """
        kind = self.field_id.kind
        if self.color is not None:
            return self.color.to_color()
        text = self.text.strip()
        if kind is FieldKind.OPTIONAL_INTEGER and not text:
            return None
        if kind in (FieldKind.INTEGER, FieldKind.OPTIONAL_INTEGER):
            try:
                return int(text)
            except ValueError as e:
                raise EditValidationError(f"Invalid integer value: {text!r}") from e
        if kind is FieldKind.ENUM:
            try:
                return CenterFocusedColumn(text)
            except ValueError as e:
                raise EditValidationError(
                    f"Invalid value {text!r}. Expected one of: never, always, on-overflow"
                ) from e
        if kind is FieldKind.BOOLEAN:
            if text in ("on", "true", "yes"):
                return True
            if text in ("off", "false", "no"):
                return False
            raise EditValidationError(f"Invalid boolean value: {text!r}")
        raise EditValidationError(f"Field {self.field_id.value} cannot be edited as text")
