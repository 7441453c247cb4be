"""
Settings file validation for niri-settings.
"""

from pathlib import Path
from typing import Any, Dict

from ..exceptions import SettingsValidationError


VALID_STRUCTURE = {
    'niri': {
        'config_path': str,
        'backup_suffix': str,
        'command': str,
        'timeout': int,
    },
    'layout': {
        'move_step': int,
    },
    'logging': {
        'level': str,
    },
}


def validate_toml_structure(config_dict: Dict[str, Any], config_file: Path) -> None:
    """
    Validate TOML structure before creating dataclasses.
    
    Checks for unknown sections and keys, providing helpful error messages.
    
    Args:
        config_dict: Loaded TOML configuration dictionary
        config_file: Path to settings file for error messages
        
    Raises:
        SettingsValidationError: If structure validation fails
    """
    for section in config_dict:
        if section not in VALID_STRUCTURE:
            raise SettingsValidationError(
                f"Unknown settings section '{section}' in {config_file}.\n"
                f"Valid sections: {list(VALID_STRUCTURE.keys())}"
            )
    
    for section_name, section_config in config_dict.items():
        if not isinstance(section_config, dict):
            raise SettingsValidationError(
                f"Section '{section_name}' must be a table in {config_file}"
            )
        
        valid_keys = VALID_STRUCTURE[section_name]
        for key, value in section_config.items():
            if key not in valid_keys:
                raise SettingsValidationError(
                    f"Unknown key '{key}' in section '{section_name}' in {config_file}.\n"
                    f"Valid keys: {list(valid_keys.keys())}"
                )
            
            # bool is an int subclass; reject it for int keys
            expected_type = valid_keys[key]
            if isinstance(value, bool) and expected_type is not bool:
                wrong_type = True
            else:
                wrong_type = not isinstance(value, expected_type)
            if wrong_type:
                raise SettingsValidationError(
                    f"Key '{section_name}.{key}' must be of type {expected_type.__name__} "
                    f"in {config_file}, got {type(value).__name__}"
                )
