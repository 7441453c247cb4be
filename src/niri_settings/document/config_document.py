"""
The niri config document: load, backup, save and top-level lookups.

All domain code reaches the KDL tree through this class and the node
mutation primitives in ``model.py``.
"""

import copy
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Optional

from ..exceptions import DocumentIOError, MissingBlockError
from .model import Document, Node, append_node, remove_node
from .parser import parse_document

logger = logging.getLogger(__name__)

DEFAULT_BACKUP_SUFFIX = ".bak"

_ANY = object()


def default_config_path() -> Path:
    """
    Get the niri config path.

    Uses $XDG_CONFIG_HOME if set, otherwise ~/.config.
    """
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg_config) if xdg_config else Path.home() / ".config"
    return base / "niri" / "config.kdl"


class ConfigDocument:
    """
    A parsed config.kdl bound to its path on disk.

    Untouched parts of the file are written back exactly as they were read.
    """

    def __init__(
        self,
        root: Optional[Document] = None,
        path: Optional[Path] = None,
        backup_suffix: str = DEFAULT_BACKUP_SUFFIX,
    ) -> None:
        self.root = root if root is not None else Document()
        self.path = path
        self.backup_suffix = backup_suffix

    @classmethod
    def load(cls, path: Path, backup_suffix: str = DEFAULT_BACKUP_SUFFIX) -> "ConfigDocument":
        """
        Read and parse a config file.

        Args:
            path: Path to config.kdl
            backup_suffix: Suffix appended to the file name for backups

        Returns:
            The loaded document

        Raises:
            DocumentIOError: If the file cannot be read
            DocumentParseError: If the file is not valid KDL
        """
        path = Path(path).expanduser()
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise DocumentIOError(
                f"Failed to read config file {path}: {e}\n"
                "Check that the file exists and is readable.",
                path,
                e,
            ) from e

        root = parse_document(text, path)
        logger.info(f"Loaded config from {path}")
        return cls(root, path, backup_suffix)

    @classmethod
    def from_string(cls, text: str, path: Optional[Path] = None) -> "ConfigDocument":
        """Parse a document from text, optionally bound to a path for saving."""
        return cls(parse_document(text, path), path)

    def to_string(self) -> str:
        return self.root.to_kdl()

    @property
    def backup_path(self) -> Optional[Path]:
        if self.path is None:
            return None
        return self.path.with_suffix(self.path.suffix + self.backup_suffix)

    def backup(self) -> Optional[Path]:
        """
        Copy the current on-disk file next to itself.

        Returns:
            The backup path, or None if there is nothing on disk yet

        Raises:
            DocumentIOError: If the copy fails
        """
        if self.path is None or not self.path.exists():
            return None
        backup_path = self.backup_path
        try:
            backup_path.write_bytes(self.path.read_bytes())
        except OSError as e:
            raise DocumentIOError(
                f"Failed to back up {self.path} to {backup_path}: {e}\n"
                "The config file was not modified.",
                backup_path,
                e,
            ) from e
        logger.debug(f"Backed up config to {backup_path}")
        return backup_path

    def save(self) -> None:
        """
        Back up the on-disk file, then write the serialized tree over it.

        If the backup fails the original file is left untouched.

        Raises:
            DocumentIOError: If the document has no path, or backup/write fails
        """
        if self.path is None:
            raise DocumentIOError("Document has no path to save to", Path("."))

        self.backup()
        try:
            self.path.write_text(self.to_string(), encoding="utf-8")
        except OSError as e:
            raise DocumentIOError(
                f"Failed to write config file {self.path}: {e}\n"
                f"A backup of the previous version is at {self.backup_path}.",
                self.path,
                e,
            ) from e
        logger.info(f"Saved config to {self.path}")

    # ========================================================================
    # Top-level lookups and edits
    # ========================================================================

    @property
    def nodes(self) -> List[Node]:
        return list(self.root.nodes)

    def find_all(self, name: str, include_disabled: bool = False) -> List[Node]:
        return [
            n for n in self.root.nodes
            if n.name == name and (include_disabled or not n.disabled)
        ]

    def find(self, name: str, arg: Any = _ANY, include_disabled: bool = False) -> Optional[Node]:
        """
        Find the first top-level node with this name.

        Args:
            name: Node name
            arg: If given, the node's first positional argument must equal it
            include_disabled: Also match nodes commented out with ``/-``

        Returns:
            The node, or None
        """
        for node in self.find_all(name, include_disabled):
            if arg is _ANY or node.get(0) == arg:
                return node
        return None

    def require(self, name: str) -> Node:
        """Like find, but raise MissingBlockError when absent."""
        node = self.find(name)
        if node is None:
            raise MissingBlockError(name)
        return node

    def append(self, node: Node) -> Node:
        """Append a top-level node at the end of the document."""
        node.depth = 0
        node.autoformat("")
        append_node(self.root, node, "", "", after_brace=False)
        return node

    def get_or_create(self, name: str, *args: Any) -> Node:
        """Find an enabled top-level node, or append a new one with an empty block."""
        arg = args[0] if args else _ANY
        node = self.find(name, arg)
        if node is None:
            node = self.append(Node.create(name, *args, children=[]))
        elif node.children is None:
            node.children = Document()
        return node

    def remove(self, node: Node) -> None:
        for index, candidate in enumerate(self.root.nodes):
            if candidate is node:
                remove_node(self.root, index)
                return
        raise ValueError(f"node '{node.name}' is not in this document")

    @contextmanager
    def transaction(self) -> Iterator["ConfigDocument"]:
        """
        Roll the in-memory tree back if the block raises.

        Used around write-then-save sequences so a failed save leaves the
        document as it was before the edit.
        """
        snapshot = copy.deepcopy(self.root)
        try:
            yield self
        except BaseException:
            self.root = snapshot
            logger.debug("Rolled back in-memory document after failed edit")
            raise
