"""
KDL v1 parser that records the source text of every piece it reads.

The parser is a small hand-written scanner. It produces the tree from
``model.py`` with all whitespace, comments and slashdashed entries kept in
the ``leading``/``trailing`` fields so the text can be reproduced exactly.
"""

import logging
import re
from pathlib import Path
from typing import Any, Optional, Tuple

from ..exceptions import DocumentParseError
from .model import NON_IDENTIFIER_CHARS, Document, Entry, Node

logger = logging.getLogger(__name__)

NEWLINES = ("\r\n", "\n", "\r", "\x85", "\x0c", "\u2028", "\u2029")

WHITESPACE = set(
    "\t \u00a0\u1680\u2000\u2001\u2002\u2003\u2004\u2005\u2006"
    "\u2007\u2008\u2009\u200a\u202f\u205f\u3000\ufeff"
)

_NUMBER_PATTERNS = [
    (re.compile(r"[+-]?0x[0-9a-fA-F][0-9a-fA-F_]*"), 16),
    (re.compile(r"[+-]?0o[0-7][0-7_]*"), 8),
    (re.compile(r"[+-]?0b[01][01_]*"), 2),
    (re.compile(r"[+-]?[0-9][0-9_]*(\.[0-9][0-9_]*)?([eE][+-]?[0-9][0-9_]*)?"), 10),
]

_SIMPLE_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "\\": "\\",
    "/": "/",
    '"': '"',
    "b": "\b",
    "f": "\f",
}


class KdlParser:
    """
    Parse KDL text into a format-preserving Document.

    Usage:
        document = KdlParser(text, path).parse()
    """

    def __init__(self, text: str, path: Optional[Path] = None) -> None:
        self.text = text
        self.path = path
        self.pos = 0

    def parse(self) -> Document:
        """
        Parse the whole text.

        Returns:
            The top-level Document

        Raises:
            DocumentParseError: If the text is not valid KDL
        """
        document = self._parse_nodes(depth=0, in_block=False)
        logger.debug(f"Parsed {len(document.nodes)} top-level nodes")
        return document

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _error(self, message: str, pos: Optional[int] = None) -> DocumentParseError:
        if pos is None:
            pos = self.pos
        line = self.text.count("\n", 0, pos) + 1
        column = pos - (self.text.rfind("\n", 0, pos) + 1) + 1
        return DocumentParseError(message, path=self.path, line=line, column=column)

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        return self.text[idx] if idx < len(self.text) else ""

    def _at_end(self) -> bool:
        return self.pos >= len(self.text)

    def _startswith(self, prefix: str) -> bool:
        return self.text.startswith(prefix, self.pos)

    def _newline_at(self) -> str:
        for newline in NEWLINES:
            if self.text.startswith(newline, self.pos):
                return newline
        return ""

    def _skip_block_comment(self) -> None:
        start = self.pos
        self.pos += 2
        depth = 1
        while depth:
            if self._at_end():
                raise self._error("unterminated block comment", start)
            if self._startswith("/*"):
                depth += 1
                self.pos += 2
            elif self._startswith("*/"):
                depth -= 1
                self.pos += 2
            else:
                self.pos += 1

    def _skip_line_comment(self) -> None:
        """Skip a // comment up to, not including, the newline."""
        while not self._at_end() and not self._newline_at():
            self.pos += 1

    def _skip_linespace(self) -> None:
        """Skip whitespace, newlines and comments between nodes."""
        while not self._at_end():
            ch = self._peek()
            newline = self._newline_at()
            if ch in WHITESPACE:
                self.pos += 1
            elif newline:
                self.pos += len(newline)
            elif self._startswith("//"):
                self._skip_line_comment()
            elif self._startswith("/*"):
                self._skip_block_comment()
            else:
                break

    def _skip_node_space(self) -> None:
        """Skip whitespace, block comments and line continuations inside a node."""
        while not self._at_end():
            ch = self._peek()
            if ch in WHITESPACE:
                self.pos += 1
            elif self._startswith("/*"):
                self._skip_block_comment()
            elif ch == "\\":
                start = self.pos
                self.pos += 1
                while self._peek() in WHITESPACE and not self._at_end():
                    self.pos += 1
                if self._startswith("//"):
                    self._skip_line_comment()
                newline = self._newline_at()
                if newline:
                    self.pos += len(newline)
                elif not self._at_end():
                    raise self._error("expected newline after line continuation", start)
            else:
                break

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def _parse_nodes(self, depth: int, in_block: bool) -> Document:
        document = Document()
        while True:
            start = self.pos
            self._skip_linespace()
            leading = self.text[start:self.pos]
            if self._at_end():
                if in_block:
                    raise self._error("unclosed child block")
                document.trailing = leading
                return document
            if self._peek() == "}":
                if not in_block:
                    raise self._error("unexpected '}'")
                document.trailing = leading
                return document
            node = self._parse_node(depth)
            node.leading = leading
            document.nodes.append(node)

    def _parse_node(self, depth: int) -> Node:
        node = Node(name="", depth=depth, trailing="")
        if self._startswith("/-"):
            start = self.pos
            self.pos += 2
            self._skip_node_space()
            node.disabled = True
            node.raw_disabled = self.text[start:self.pos]

        name_start = self.pos
        node.type_annotation = self._parse_type_annotation()
        node.name = self._parse_identifier()
        node.raw_name = self.text[name_start:self.pos]

        pending = ""
        while True:
            before = self.pos
            self._skip_node_space()
            spacing = self.text[before:self.pos]

            if self._at_end() or self._peek() == "}":
                # Whitespace before a closing brace belongs to the block
                self.pos = before
                node.trailing = pending
                return node

            if self._peek() == ";":
                self.pos += 1
                node.trailing = pending + spacing + ";"
                return node

            newline = self._newline_at()
            if newline:
                self.pos += len(newline)
                node.trailing = pending + spacing + newline
                return node

            if self._startswith("//"):
                comment_start = self.pos
                self._skip_line_comment()
                newline = self._newline_at()
                self.pos += len(newline)
                node.trailing = pending + spacing + self.text[comment_start:self.pos]
                return node

            if self._startswith("/-"):
                sd_start = self.pos
                self.pos += 2
                self._skip_node_space()
                if self._peek() == "{":
                    self.pos += 1
                    self._parse_nodes(depth + 1, in_block=True)
                    self.pos += 1
                else:
                    self._parse_entry()
                pending += spacing + self.text[sd_start:self.pos]
                continue

            if node.children is not None:
                raise self._error(f"unexpected content after child block of '{node.name}'")

            if self._peek() == "{":
                node.before_children = pending + spacing
                pending = ""
                self.pos += 1
                node.children = self._parse_nodes(depth + 1, in_block=True)
                self.pos += 1  # closing brace
                continue

            if not spacing and not pending:
                raise self._error(f"expected whitespace in node '{node.name}'")

            entry = self._parse_entry()
            entry.leading = pending + spacing
            pending = ""
            node.entries.append(entry)

    def _parse_entry(self) -> Entry:
        start = self.pos
        type_annotation = self._parse_type_annotation()

        if type_annotation is None and self._at_string_or_identifier():
            key_pos = self.pos
            key, is_bare = self._parse_string_or_bare()
            if self._peek() == "=":
                self.pos += 1
                value_type = self._parse_type_annotation()
                value = self._parse_value()
                return Entry(
                    value=value,
                    name=key,
                    type_annotation=value_type,
                    raw=self.text[start:self.pos],
                )
            if is_bare:
                if key not in ("true", "false", "null"):
                    raise self._error(f"bare identifier '{key}' is not a value", key_pos)
                value = {"true": True, "false": False, "null": None}[key]
            else:
                value = key
            return Entry(value=value, raw=self.text[start:self.pos])

        value = self._parse_value()
        return Entry(value=value, type_annotation=type_annotation, raw=self.text[start:self.pos])

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def _parse_type_annotation(self) -> Optional[str]:
        if self._peek() != "(":
            return None
        self.pos += 1
        name = self._parse_identifier()
        if self._peek() != ")":
            raise self._error("expected ')' after type annotation")
        self.pos += 1
        return name

    def _at_raw_string(self) -> bool:
        if self._peek() != "r":
            return False
        offset = 1
        while self._peek(offset) == "#":
            offset += 1
        return self._peek(offset) == '"'

    def _at_bare_identifier_start(self) -> bool:
        ch = self._peek()
        if not ch or ch in NON_IDENTIFIER_CHARS or ch.isspace():
            return False
        if ch.isdigit():
            return False
        if ch in "+-" and self._peek(1).isdigit():
            return False
        return True

    def _at_string_or_identifier(self) -> bool:
        return self._peek() == '"' or self._at_raw_string() or self._at_bare_identifier_start()

    def _parse_identifier(self) -> str:
        if not self._at_string_or_identifier():
            raise self._error("expected identifier")
        name, _ = self._parse_string_or_bare()
        return name

    def _parse_string_or_bare(self) -> Tuple[str, bool]:
        if self._peek() == '"':
            return self._parse_string(), False
        if self._at_raw_string():
            return self._parse_raw_string(), False
        start = self.pos
        while not self._at_end():
            ch = self._peek()
            if ch in NON_IDENTIFIER_CHARS or ch.isspace() or ch in WHITESPACE:
                break
            self.pos += 1
        return self.text[start:self.pos], True

    def _parse_value(self) -> Any:
        ch = self._peek()
        if ch == '"':
            return self._parse_string()
        if self._at_raw_string():
            return self._parse_raw_string()
        if ch.isdigit() or (ch in "+-" and self._peek(1).isdigit()):
            return self._parse_number()
        for keyword, value in (("true", True), ("false", False), ("null", None)):
            if self._startswith(keyword) and self._is_delimiter(self.pos + len(keyword)):
                self.pos += len(keyword)
                return value
        raise self._error("expected value")

    def _is_delimiter(self, pos: int) -> bool:
        if pos >= len(self.text):
            return True
        ch = self.text[pos]
        return ch in WHITESPACE or ch in "\r\n\x85\x0c\u2028\u2029;{}=/\\" or ch.isspace()

    def _parse_number(self) -> Any:
        for pattern, base in _NUMBER_PATTERNS:
            match = pattern.match(self.text, self.pos)
            if not match:
                continue
            if not self._is_delimiter(match.end()):
                continue
            token = match.group(0).replace("_", "")
            self.pos = match.end()
            if base != 10:
                sign = -1 if token.startswith("-") else 1
                digits = token.lstrip("+-")[2:]
                return sign * int(digits, base)
            if match.group(1) or match.group(2):
                return float(token)
            return int(token)
        raise self._error("invalid number")

    def _parse_string(self) -> str:
        start = self.pos
        self.pos += 1
        out = []
        while True:
            if self._at_end():
                raise self._error("unterminated string", start)
            ch = self._peek()
            if ch == '"':
                self.pos += 1
                return "".join(out)
            if ch == "\\":
                escape = self._peek(1)
                if escape in _SIMPLE_ESCAPES:
                    out.append(_SIMPLE_ESCAPES[escape])
                    self.pos += 2
                elif escape == "u" and self._peek(2) == "{":
                    end = self.text.find("}", self.pos + 3)
                    digits = self.text[self.pos + 3:end] if end != -1 else ""
                    if not digits or len(digits) > 6:
                        raise self._error("invalid unicode escape")
                    try:
                        out.append(chr(int(digits, 16)))
                    except ValueError as e:
                        raise self._error(f"invalid unicode escape: {e}") from e
                    self.pos = end + 1
                else:
                    raise self._error(f"invalid escape '\\{escape}'")
                continue
            out.append(ch)
            self.pos += 1

    def _parse_raw_string(self) -> str:
        start = self.pos
        self.pos += 1
        hashes = 0
        while self._peek() == "#":
            hashes += 1
            self.pos += 1
        self.pos += 1  # opening quote
        closing = '"' + "#" * hashes
        end = self.text.find(closing, self.pos)
        if end == -1:
            raise self._error("unterminated raw string", start)
        value = self.text[self.pos:end]
        self.pos = end + len(closing)
        return value


def parse_document(text: str, path: Optional[Path] = None) -> Document:
    """Parse KDL text into a Document."""
    return KdlParser(text, path).parse()
