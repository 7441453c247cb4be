"""
Format-preserving KDL document model for niri's config.kdl.
"""

from .model import Document, Entry, Node, INDENT, format_value, format_identifier
from .parser import KdlParser, parse_document
from .config_document import ConfigDocument, default_config_path

__all__ = [
    "ConfigDocument",
    "Document",
    "Entry",
    "Node",
    "INDENT",
    "KdlParser",
    "default_config_path",
    "format_identifier",
    "format_value",
    "parse_document",
]
