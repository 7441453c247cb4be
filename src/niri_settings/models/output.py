"""
Output (monitor) value types.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Position:
    """Output position in logical pixels."""
    x: int = 0
    y: int = 0

    def offset(self, dx: int, dy: int) -> "Position":
        return Position(self.x + dx, self.y + dy)


@dataclass(frozen=True)
class Size:
    """Size in logical pixels."""
    width: int = 0
    height: int = 0


@dataclass
class OutputMode:
    """A supported resolution and refresh rate."""
    width: int
    height: int
    refresh_rate: float  # Hz
    is_preferred: bool = False

    @classmethod
    def from_ipc(cls, data: Dict[str, Any]) -> "OutputMode":
        """Parse a mode as reported by niri (refresh rate in mHz)."""
        return cls(
            width=int(data["width"]),
            height=int(data["height"]),
            refresh_rate=int(data["refresh_rate"]) / 1000.0,
            is_preferred=bool(data.get("is_preferred", False)),
        )


class OutputTransform(Enum):
    """Output rotation/flip, valued by its config spelling."""
    NORMAL = "normal"
    ROTATE_90 = "90"
    ROTATE_180 = "180"
    ROTATE_270 = "270"
    FLIPPED = "flipped"
    FLIPPED_90 = "flipped-90"
    FLIPPED_180 = "flipped-180"
    FLIPPED_270 = "flipped-270"

    @classmethod
    def from_ipc(cls, name: str) -> "OutputTransform":
        """Map niri's IPC spelling (``Normal``, ``_90``, ``Flipped270``...)."""
        mapping = {
            "Normal": cls.NORMAL,
            "_90": cls.ROTATE_90,
            "_180": cls.ROTATE_180,
            "_270": cls.ROTATE_270,
            "Flipped": cls.FLIPPED,
            "Flipped90": cls.FLIPPED_90,
            "Flipped180": cls.FLIPPED_180,
            "Flipped270": cls.FLIPPED_270,
        }
        try:
            return mapping[name]
        except KeyError as e:
            raise ValueError(f"Unknown output transform: {name!r}") from e


@dataclass
class OutputDescriptor:
    """
    A connected output as reported by the compositor.

    Recreated on every query. Only ``position`` is ever written back to the
    config; ``configured`` says whether the config already has a node for it.
    """
    name: str
    modes: List[OutputMode] = field(default_factory=list)
    current_mode_index: Optional[int] = None
    scale: float = 1.0
    transform: OutputTransform = OutputTransform.NORMAL
    position: Position = field(default_factory=Position)
    logical_size: Size = field(default_factory=Size)
    physical_size: Size = field(default_factory=Size)
    enabled: bool = True
    connected: bool = True
    configured: bool = False
    make: str = ""
    model: str = ""

    @classmethod
    def from_ipc(cls, data: Dict[str, Any]) -> "OutputDescriptor":
        """
        Build a descriptor from one entry of ``niri msg --json outputs``.

        An output without logical geometry is disabled.
        """
        modes = [OutputMode.from_ipc(m) for m in data.get("modes") or []]
        current = data.get("current_mode")
        logical = data.get("logical")

        if logical:
            position = Position(int(logical["x"]), int(logical["y"]))
            logical_size = Size(int(logical["width"]), int(logical["height"]))
            scale = float(logical.get("scale", 1.0))
            transform = OutputTransform.from_ipc(logical.get("transform", "Normal"))
            enabled = True
        else:
            position = Position()
            logical_size = Size()
            scale = 1.0
            transform = OutputTransform.NORMAL
            enabled = False

        physical_size = Size()
        if current is not None and 0 <= current < len(modes):
            physical_size = Size(modes[current].width, modes[current].height)

        return cls(
            name=data["name"],
            modes=modes,
            current_mode_index=current,
            scale=scale,
            transform=transform,
            position=position,
            logical_size=logical_size,
            physical_size=physical_size,
            enabled=enabled,
            connected=True,
            configured=False,
            make=data.get("make") or "",
            model=data.get("model") or "",
        )

    def current_mode(self) -> Optional[OutputMode]:
        if self.current_mode_index is None:
            return None
        if 0 <= self.current_mode_index < len(self.modes):
            return self.modes[self.current_mode_index]
        return None

    def mode_string(self) -> str:
        mode = self.current_mode()
        if mode is None:
            return "Unknown"
        return f"{mode.width}x{mode.height}@{mode.refresh_rate:.2f}Hz"

    def with_position(self, position: Position) -> "OutputDescriptor":
        return replace(self, position=position)

    def __repr__(self) -> str:
        return f"OutputDescriptor({self.name}, {self.mode_string()}, at {self.position.x},{self.position.y})"
