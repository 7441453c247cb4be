"""
Main Settings class for niri-settings.

Settings live in ``$XDG_CONFIG_HOME/niri-settings/config.toml``. Every key is
optional; a missing file means all defaults.
"""

import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

try:
    import tomli
    import tomli_w
except ImportError:
    raise ImportError("Required packages 'tomli' and 'tomli-w' not found. Install with: pip install tomli tomli-w")

from ..exceptions import SettingsError, SettingsValidationError
from .dataclasses import LayoutConfig, LoggingConfig, NiriConfig
from .validation import validate_toml_structure

logger = logging.getLogger(__name__)

VALID_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


@dataclass
class Settings:
    """
    niri-settings' own configuration (not niri's config.kdl).
    
    Loaded from TOML; unknown keys and wrong types are rejected.
    """
    
    niri: NiriConfig = field(default_factory=NiriConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    
    def __post_init__(self) -> None:
        """Validate value ranges."""
        if self.niri.timeout <= 0:
            raise SettingsValidationError(
                f"niri timeout ({self.niri.timeout}s) must be positive."
            )
        
        if not self.niri.backup_suffix:
            raise SettingsValidationError(
                "backup_suffix cannot be empty.\n"
                "Use something like '.bak' so saves never overwrite the backup target."
            )
        
        if self.layout.move_step <= 0 or self.layout.move_step > 1000:
            raise SettingsValidationError(
                f"move_step ({self.layout.move_step}) out of range.\n"
                "Must be between 1 and 1000 pixels."
            )
        
        if self.logging.level.upper() not in VALID_LEVELS:
            raise SettingsValidationError(
                f"Invalid log level: {self.logging.level}\n"
                f"Must be one of: {VALID_LEVELS}"
            )
    
    @classmethod
    def get_settings_dir(cls) -> Path:
        """
        Get user settings directory.
        
        Uses XDG_CONFIG_HOME if set, otherwise defaults to ~/.config.
        """
        xdg_config = os.environ.get("XDG_CONFIG_HOME")
        if xdg_config:
            return Path(xdg_config) / "niri-settings"
        return Path.home() / ".config" / "niri-settings"
    
    @classmethod
    def get_settings_file(cls) -> Path:
        return cls.get_settings_dir() / "config.toml"
    
    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'Settings':
        return cls(
            niri=NiriConfig.from_dict(config_dict.get('niri', {})),
            layout=LayoutConfig.from_dict(config_dict.get('layout', {})),
            logging=LoggingConfig.from_dict(config_dict.get('logging', {})),
        )
    
    @classmethod
    def load(cls, settings_file: Optional[Path] = None) -> 'Settings':
        """
        Load settings from a TOML file.
        
        Args:
            settings_file: Path to the settings file (defaults to the XDG location)
            
        Returns:
            Settings instance; all defaults if the file does not exist
            
        Raises:
            SettingsError: If the file cannot be read or is not valid TOML
            SettingsValidationError: If a section, key or value is invalid
        """
        if not settings_file:
            settings_file = cls.get_settings_file()
        
        config_dict: Dict[str, Any] = {}
        if settings_file.exists():
            try:
                with open(settings_file, 'rb') as f:
                    config_dict = tomli.load(f)
            except tomli.TOMLDecodeError as e:
                raise SettingsError(
                    f"Invalid TOML in {settings_file}: {e}\n"
                    "Fix the file or delete it to use defaults."
                ) from e
            except OSError as e:
                raise SettingsError(f"Failed to read settings from {settings_file}: {e}") from e
            
            validate_toml_structure(config_dict, settings_file)
            logger.info(f"Loaded settings from {settings_file}")
        else:
            logger.debug(f"No settings file at {settings_file}, using defaults")
        
        return cls.from_dict(config_dict)
    
    def to_dict(self) -> Dict[str, Any]:
        config_dict: Dict[str, Any] = {
            'niri': {
                'backup_suffix': self.niri.backup_suffix,
                'command': self.niri.command,
                'timeout': self.niri.timeout,
            },
            'layout': {
                'move_step': self.layout.move_step,
            },
            'logging': {
                'level': self.logging.level,
            },
        }
        # TOML has no null; leave the key out to mean "niri's default path"
        if self.niri.config_path:
            config_dict['niri']['config_path'] = self.niri.config_path
        return config_dict
    
    def save(self, settings_file: Optional[Path] = None) -> Path:
        """
        Write settings as TOML.
        
        Returns:
            The path written
            
        Raises:
            SettingsError: If the file cannot be written
        """
        if not settings_file:
            settings_file = self.get_settings_file()
        
        try:
            settings_file.parent.mkdir(parents=True, exist_ok=True)
            with open(settings_file, 'wb') as f:
                tomli_w.dump(self.to_dict(), f)
        except OSError as e:
            raise SettingsError(f"Failed to save settings to {settings_file}: {e}") from e
        
        logger.info(f"Saved settings to {settings_file}")
        return settings_file
