"""
Typed read/write access to the niri config document.

Each submodule maps one settings domain onto the generic document tree and
touches it only through the ConfigDocument and Node primitives.
"""

from .positions import configured_output_names, read_positions, write_position, write_positions
from .keybindings import read_keybindings, write_keybindings
from .appearance import read_appearance, write_appearance

__all__ = [
    "configured_output_names",
    "read_positions",
    "write_position",
    "write_positions",
    "read_keybindings",
    "write_keybindings",
    "read_appearance",
    "write_appearance",
]
