"""
niri-settings - State management for niri compositor settings.

Reads niri's config.kdl into a format-preserving document, tracks pending
edits to output positions, keybindings and appearance as overlays, and
writes them back without disturbing anything it did not change.
"""

__version__ = "0.1.0"

from .document import ConfigDocument
from .compositor import NiriClient
from .config import Settings
from .overlay import AppearanceOverlay, KeybindingOverlay, PositionOverlay
from .app_state import AppState
from .messages import Category

__all__ = [
    "AppState",
    "AppearanceOverlay",
    "Category",
    "ConfigDocument",
    "KeybindingOverlay",
    "NiriClient",
    "PositionOverlay",
    "Settings",
]
