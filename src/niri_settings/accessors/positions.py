"""
Read and write output positions in config.kdl.

    output "DP-1" {
        position x=0 y=0
    }
"""

import logging
from typing import Dict, Mapping, Optional, Set

from ..document import ConfigDocument, Node
from ..models import Position

logger = logging.getLogger(__name__)

OUTPUT_NODE = "output"
POSITION_NODE = "position"


def _read_position(node: Node) -> Optional[Position]:
    position = node.child(POSITION_NODE)
    if position is None:
        return None
    x = position.get("x", 0)
    y = position.get("y", 0)
    if isinstance(x, bool) or isinstance(y, bool) or not isinstance(x, int) or not isinstance(y, int):
        logger.warning(f"Ignoring non-integer position for output {node.get(0)!r}: x={x!r} y={y!r}")
        return None
    return Position(x, y)


def read_positions(doc: ConfigDocument) -> Dict[str, Position]:
    """
    Collect configured positions for every output node, disabled ones included.

    A missing x or y reads as 0. The first node for a name wins.
    """
    positions: Dict[str, Position] = {}
    for node in doc.find_all(OUTPUT_NODE, include_disabled=True):
        name = node.get(0)
        if not isinstance(name, str) or name in positions:
            continue
        position = _read_position(node)
        if position is not None:
            positions[name] = position
    return positions


def configured_output_names(doc: ConfigDocument) -> Set[str]:
    """Names of all outputs that have a node in the config, enabled or not."""
    names = set()
    for node in doc.find_all(OUTPUT_NODE, include_disabled=True):
        name = node.get(0)
        if isinstance(name, str):
            names.add(name)
    return names


def write_position(doc: ConfigDocument, name: str, position: Position) -> None:
    """
    Set an output's position in the document (not on disk).

    A commented-out output node is re-enabled in place; an unknown output gets
    a new node at the end of the document.
    """
    node = doc.find(OUTPUT_NODE, name, include_disabled=True)
    if node is None:
        logger.debug(f"Adding output node for {name}")
        node = doc.append(Node.create(OUTPUT_NODE, name, children=[]))
    elif node.disabled:
        logger.debug(f"Re-enabling output node for {name}")
        node.enable()

    position_node = node.get_or_create_child(POSITION_NODE)
    position_node.set_properties({"x": position.x, "y": position.y})


def write_positions(doc: ConfigDocument, positions: Mapping[str, Position]) -> None:
    """
    Write several positions and save the document.

    Raises:
        DocumentIOError: If the backup or write fails
    """
    with doc.transaction():
        for name, position in positions.items():
            write_position(doc, name, position)
        doc.save()
    logger.info(f"Saved positions for {len(positions)} outputs")
