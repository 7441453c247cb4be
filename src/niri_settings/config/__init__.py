"""
Settings package for niri-settings.
"""

from .main import Settings
from .dataclasses import LayoutConfig, LoggingConfig, NiriConfig
from .validation import validate_toml_structure
