"""
Per-category view models.

Each composes the accessors, its overlay and (for outputs) the geometry
helpers. They raise NiriSettingsError subclasses; AppState turns those into
the single visible error message.
"""

from .outputs import OutputsViewModel
from .keybindings import KeybindingsViewModel
from .appearance import AppearanceListItem, AppearanceViewModel

__all__ = [
    "OutputsViewModel",
    "KeybindingsViewModel",
    "AppearanceListItem",
    "AppearanceViewModel",
]
