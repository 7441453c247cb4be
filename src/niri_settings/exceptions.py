"""
Common exception classes for niri-settings.

Provides domain-specific exceptions for consistent error handling across modules.
All exceptions inherit from NiriSettingsError for unified catching at the
view-model and CLI level.
"""

from pathlib import Path
from typing import Optional


class NiriSettingsError(Exception):
    """
    Base exception for all niri-settings errors.
    
    All domain-specific exceptions inherit from this class, allowing
    callers to catch all niri-settings errors with a single except clause.
    """
    pass


# ============================================================================
# Document Errors
# ============================================================================

class DocumentError(NiriSettingsError):
    """
    Errors related to the niri config document.
    
    Raised when:
    - The document cannot be parsed
    - The document cannot be read, backed up or written
    - A block required by a write is missing
    """
    pass


class DocumentParseError(DocumentError):
    """
    The config document is malformed.
    
    Carries the path (if the text came from a file), the 1-based line and
    column of the offending character, and a short description of the cause.
    """
    
    def __init__(
        self,
        cause: str,
        path: Optional[Path] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        self.cause = cause
        self.path = path
        self.line = line
        self.column = column
        location = str(path) if path else "<string>"
        if line is not None:
            location = f"{location}:{line}:{column}"
        super().__init__(f"Failed to parse {location}: {cause}")


class DocumentIOError(DocumentError):
    """
    Reading, backing up or writing the config document failed.
    
    Wraps the underlying OSError as ``cause`` (also chained via ``from``).
    """
    
    def __init__(self, message: str, path: Path, cause: Optional[BaseException] = None) -> None:
        self.path = path
        self.cause = cause
        super().__init__(message)


class MissingBlockError(DocumentError, LookupError):
    """
    A block required by a write is absent (e.g. no ``binds`` block).
    
    Nothing is written when this is raised.
    """
    
    def __init__(self, block: str) -> None:
        self.block = block
        super().__init__(
            f"No '{block}' block found in config.\n"
            f"Add an empty '{block} {{}}' section to your config.kdl first."
        )


# ============================================================================
# Edit Errors
# ============================================================================

class EditValidationError(NiriSettingsError):
    """
    A user-entered edit failed domain validation.
    
    Raised for empty key combos, empty actions, non-numeric values where an
    integer is required, and empty colors.
    """
    pass


# ============================================================================
# Compositor Errors
# ============================================================================

class CompositorError(NiriSettingsError):
    """
    Talking to the running compositor failed.
    
    Raised when:
    - The compositor binary is not installed
    - A request times out or exits with an error
    - The response cannot be understood
    """
    pass


class CompositorNotFoundError(CompositorError):
    """The niri command could not be found."""
    pass


class CompositorCommunicationError(CompositorError):
    """A request to niri failed or returned an unexpected response."""
    pass


# ============================================================================
# Settings Errors
# ============================================================================

class SettingsError(NiriSettingsError):
    """
    Errors in niri-settings' own settings file.
    
    Raised when the TOML file is malformed or cannot be read.
    """
    pass


class SettingsValidationError(SettingsError):
    """
    A settings value is present but invalid.
    
    Raised for unknown sections or keys and for values of the wrong type.
    """
    pass
