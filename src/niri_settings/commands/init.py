"""Initialization command."""

import logging
from pathlib import Path
from typing import Optional

from ..config import Settings

logger = logging.getLogger(__name__)


def init_settings(settings_file: Optional[Path] = None, force: bool = False) -> None:
    """Write a settings file with default values."""
    target = settings_file or Settings.get_settings_file()
    if target.exists() and not force:
        print(f"Settings already exist at {target} (use --force to overwrite)")
        return
    
    path = Settings().save(target)
    print(f"Settings initialized at {path}")
