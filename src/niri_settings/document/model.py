"""
Format-preserving KDL node tree.

Every node keeps the exact source text it was parsed from, split into pieces
(leading trivia, name token, each entry with its spacing, brace spacing and
terminator). Serializing an untouched tree reproduces the input byte for byte.
Mutations only clear the pieces they touch; cleared pieces are regenerated
with a deterministic layout.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

INDENT = "    "

# Characters that may never appear in a bare identifier
NON_IDENTIFIER_CHARS = set('\\/(){}<>;[]=,"')
KEYWORDS = {"true", "false", "null"}

_STRING_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
}

_DIGIT_START = re.compile(r"^[+-]?[0-9]")


def is_bare_identifier(text: str) -> bool:
    """Check whether text can be written as a KDL identifier without quotes."""
    if not text or text in KEYWORDS:
        return False
    if _DIGIT_START.match(text):
        return False
    for ch in text:
        if ch in NON_IDENTIFIER_CHARS or ch.isspace() or ord(ch) < 0x21:
            return False
    return True


def format_string(text: str) -> str:
    """Quote and escape a string value."""
    out = []
    for ch in text:
        if ch in _STRING_ESCAPES:
            out.append(_STRING_ESCAPES[ch])
        elif ord(ch) < 0x20:
            out.append(f"\\u{{{ord(ch):x}}}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def format_identifier(name: str) -> str:
    """Write a node name or property key, quoting only when needed."""
    return name if is_bare_identifier(name) else format_string(name)


def format_value(value: Any) -> str:
    """Serialize a Python scalar as a KDL value."""
    # bool before int: bool is an int subclass
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        text = repr(value)
        if "inf" in text or "nan" in text:
            raise ValueError(f"KDL cannot represent {value}")
        return text
    if isinstance(value, str):
        return format_string(value)
    raise TypeError(f"Unsupported KDL value type: {type(value).__name__}")


def _line_indent(text: str) -> Optional[str]:
    """Return the whitespace after the last newline in text, if that is all there is."""
    idx = text.rfind("\n")
    if idx == -1:
        return None
    tail = text[idx + 1:]
    return tail if tail.strip() == "" else None


@dataclass
class Entry:
    """A positional argument (``name is None``) or a ``key=value`` property."""
    value: Any
    name: Optional[str] = None
    type_annotation: Optional[str] = None
    leading: str = " "
    raw: Optional[str] = None  # Source text, None once regenerated

    @property
    def is_property(self) -> bool:
        return self.name is not None

    def to_kdl(self) -> str:
        if self.raw is not None:
            return self.leading + self.raw
        text = format_value(self.value)
        if self.type_annotation:
            text = f"({format_identifier(self.type_annotation)}){text}"
        if self.name is not None:
            text = f"{format_identifier(self.name)}={text}"
        return self.leading + text


@dataclass
class Node:
    """
    A KDL node: name, entries, optional child block.

    ``disabled`` marks a node commented out with the ``/-`` slashdash. Such
    nodes keep their full structure so they can be re-enabled in place.
    """
    name: str
    entries: List[Entry] = field(default_factory=list)
    children: Optional["Document"] = None
    disabled: bool = False
    type_annotation: Optional[str] = None
    depth: int = 0
    leading: str = ""
    trailing: str = "\n"
    before_children: str = " "
    raw_name: Optional[str] = None
    raw_disabled: Optional[str] = None

    @classmethod
    def create(
        cls,
        name: str,
        *args: Any,
        props: Optional[Dict[str, Any]] = None,
        children: Optional[List["Node"]] = None,
    ) -> "Node":
        """
        Build a new node that has no source text.

        Args:
            name: Node name
            *args: Positional argument values
            props: Property values, written in insertion order
            children: Child nodes; an empty list creates an empty block

        Returns:
            The new node; layout is assigned when it is inserted
        """
        entries = [Entry(value=a) for a in args]
        for key, value in (props or {}).items():
            entries.append(Entry(value=value, name=key))
        block = Document(nodes=list(children)) if children is not None else None
        return cls(name=name, entries=entries, children=block)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    @property
    def arguments(self) -> List[Any]:
        return [e.value for e in self.entries if e.name is None]

    @property
    def properties(self) -> Dict[str, Any]:
        """Properties by key; a repeated key keeps its last value."""
        props: Dict[str, Any] = {}
        for entry in self.entries:
            if entry.name is not None:
                props[entry.name] = entry.value
        return props

    def get(self, key: Union[int, str], default: Any = None) -> Any:
        """Get a positional argument by index or a property by key."""
        if isinstance(key, int):
            args = self.arguments
            return args[key] if 0 <= key < len(args) else default
        return self.properties.get(key, default)

    @property
    def child_nodes(self) -> List["Node"]:
        """All children in order, disabled ones included."""
        return list(self.children.nodes) if self.children is not None else []

    def children_named(self, name: str, include_disabled: bool = False) -> List["Node"]:
        return [
            c for c in self.child_nodes
            if c.name == name and (include_disabled or not c.disabled)
        ]

    def child(self, name: str) -> Optional["Node"]:
        """First enabled child with the given name."""
        matches = self.children_named(name)
        return matches[0] if matches else None

    def has_child(self, name: str) -> bool:
        return self.child(name) is not None

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    @property
    def indent(self) -> str:
        """Indentation of this node's own line."""
        found = _line_indent(self.leading)
        if found is not None:
            return found
        return INDENT * self.depth

    @property
    def child_indent(self) -> str:
        """Indentation for children, following existing siblings when possible."""
        for child in self.child_nodes:
            found = _line_indent(child.leading)
            if found is not None:
                return found
        return self.indent + INDENT

    def autoformat(self, indent: str) -> None:
        """
        Regenerate this subtree's layout.

        The node's own leading text is left to the caller, which knows what
        precedes it.
        """
        self.raw_name = None
        self.raw_disabled = None
        for entry in self.entries:
            entry.leading = " "
            entry.raw = None
        self.before_children = " "
        self.trailing = "\n"
        if self.children is not None:
            inner = indent + INDENT
            for i, child in enumerate(self.children.nodes):
                child.depth = self.depth + 1
                child.autoformat(inner)
                child.leading = ("\n" if i == 0 else "") + inner
            self.children.trailing = indent if self.children.nodes else ""

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def enable(self) -> None:
        """Drop the ``/-`` marker, keeping everything else as written."""
        self.disabled = False
        self.raw_disabled = None

    def set_properties(self, props: Dict[str, Any]) -> None:
        """Replace all properties, keeping positional arguments."""
        kept = [e for e in self.entries if e.name is None]
        for key, value in props.items():
            kept.append(Entry(value=value, name=key))
        self.entries = kept

    def set_arguments(self, args: List[Any]) -> None:
        """Replace all positional arguments, keeping properties."""
        new_entries = [Entry(value=a) for a in args]
        new_entries.extend(e for e in self.entries if e.name is not None)
        self.entries = new_entries

    def append_child(self, child: "Node") -> "Node":
        """Append a child node at the end of the block, creating the block if needed."""
        if self.children is None:
            self.children = Document()
            self.before_children = " "
        child.depth = self.depth + 1
        indent = self.child_indent
        child.autoformat(indent)
        append_node(self.children, child, indent, self.indent, after_brace=True)
        return child

    def get_or_create_child(self, name: str) -> "Node":
        existing = self.child(name)
        if existing is not None:
            return existing
        return self.append_child(Node.create(name))

    def get_or_create_child_block(self, name: str) -> "Node":
        """Like get_or_create_child, but the child is guaranteed a ``{}`` block."""
        node = self.get_or_create_child(name)
        if node.children is None:
            node.children = Document()
            node.before_children = " "
        return node

    def remove_child_at(self, index: int) -> "Node":
        if self.children is None:
            raise IndexError("node has no children")
        return remove_node(self.children, index)

    def remove_children(self, name: str) -> int:
        """Remove every enabled child with the given name. Returns the count."""
        if self.children is None:
            return 0
        removed = 0
        for index in reversed(range(len(self.children.nodes))):
            node = self.children.nodes[index]
            if node.name == name and not node.disabled:
                remove_node(self.children, index)
                removed += 1
        return removed

    def replace_child(self, index: int, new: "Node") -> "Node":
        """Replace the child at index, keeping the old node's leading comments."""
        if self.children is None:
            raise IndexError("node has no children")
        replace_node(self.children, index, new, self.depth + 1, self.child_indent)
        return new

    def set_child(self, name: str, *args: Any, props: Optional[Dict[str, Any]] = None) -> "Node":
        """
        Update the first child with this name in place, or append one.

        Existing positional arguments and properties are replaced.
        """
        existing = self.child(name)
        if existing is None:
            return self.append_child(Node.create(name, *args, props=props))
        existing.set_arguments(list(args))
        existing.set_properties(props or {})
        return existing

    def to_kdl(self) -> str:
        parts = [self.leading]
        if self.disabled:
            parts.append(self.raw_disabled if self.raw_disabled is not None else "/-")
        if self.raw_name is not None:
            parts.append(self.raw_name)
        else:
            if self.type_annotation:
                parts.append(f"({format_identifier(self.type_annotation)})")
            parts.append(format_identifier(self.name))
        for entry in self.entries:
            parts.append(entry.to_kdl())
        if self.children is not None:
            parts.append(self.before_children)
            parts.append("{")
            parts.append(self.children.to_kdl())
            parts.append("}")
        parts.append(self.trailing)
        return "".join(parts)


@dataclass
class Document:
    """An ordered list of nodes plus the text after the last one."""
    nodes: List[Node] = field(default_factory=list)
    trailing: str = ""

    def to_kdl(self) -> str:
        return "".join(node.to_kdl() for node in self.nodes) + self.trailing


# ============================================================================
# Sibling list editing
# ============================================================================

def _split_trailing(text: str):
    """Split block trailing text into (content, closing indent or None)."""
    idx = text.rfind("\n")
    if idx == -1:
        return ("" if not text.strip() else text), None
    return text[:idx + 1], text[idx + 1:]


def append_node(
    doc: Document,
    node: Node,
    indent: str,
    closing_indent: str,
    after_brace: bool,
) -> None:
    """Append an already formatted node, moving trailing comments ahead of it."""
    if doc.nodes:
        prev_ends_line = doc.nodes[-1].trailing.endswith("\n")
    else:
        prev_ends_line = not after_brace
    body, closing = _split_trailing(doc.trailing)
    lead = body
    if not prev_ends_line and not lead.startswith("\n"):
        lead = "\n" + lead
    if lead and not lead.endswith("\n"):
        lead += "\n"
    node.leading = lead + indent
    node.trailing = "\n"
    doc.trailing = closing if closing is not None else closing_indent
    doc.nodes.append(node)


def remove_node(doc: Document, index: int) -> Node:
    """Remove a node; comment lines above it move to whatever follows."""
    node = doc.nodes.pop(index)
    idx = node.leading.rfind("\n")
    carry = node.leading[:idx + 1] if idx != -1 else ""
    if index < len(doc.nodes):
        doc.nodes[index].leading = carry + doc.nodes[index].leading
    else:
        doc.trailing = carry + doc.trailing
    return node


def replace_node(doc: Document, index: int, new: Node, depth: int, fallback_indent: str) -> None:
    old = doc.nodes[index]
    indent = _line_indent(old.leading)
    if indent is None:
        indent = fallback_indent
    new.depth = depth
    new.autoformat(indent)
    new.leading = old.leading
    new.trailing = "\n" if old.trailing.endswith("\n") else old.trailing
    doc.nodes[index] = new
