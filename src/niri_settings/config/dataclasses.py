"""
Settings dataclasses for niri-settings.
"""

from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass


@dataclass
class NiriConfig:
    """Where the niri config lives and how to reach the compositor."""
    config_path: Optional[str] = None  # Defaults to $XDG_CONFIG_HOME/niri/config.kdl
    backup_suffix: str = ".bak"
    command: str = "niri"
    timeout: int = 10

    def get_config_path(self) -> Optional[Path]:
        """Expanded config path, or None to use niri's default location."""
        if self.config_path:
            return Path(self.config_path).expanduser()
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NiriConfig':
        return cls(
            config_path=data.get('config_path'),
            backup_suffix=data.get('backup_suffix', '.bak'),
            command=data.get('command', 'niri'),
            timeout=data.get('timeout', 10),
        )


@dataclass
class LayoutConfig:
    """Output arrangement settings."""
    move_step: int = 10  # Pixels per directional nudge

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LayoutConfig':
        return cls(move_step=data.get('move_step', 10))


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LoggingConfig':
        return cls(level=data.get('level', 'INFO'))
