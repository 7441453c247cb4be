"""CLI commands module."""

from .status import show_status
from .outputs import arrange_outputs, list_outputs
from .binds import add_bind, delete_bind, list_binds
from .appearance import set_appearance, show_appearance
from .init import init_settings

__all__ = [
    "show_status",
    "list_outputs",
    "arrange_outputs",
    "list_binds",
    "add_bind",
    "delete_bind",
    "show_appearance",
    "set_appearance",
    "init_settings",
]
