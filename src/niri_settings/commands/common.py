"""Helpers shared by the CLI commands."""

import logging
import sys
from pathlib import Path

from ..compositor import NiriClient
from ..document import ConfigDocument
from ..exceptions import CompositorError

logger = logging.getLogger(__name__)


def open_document(config_path: Path, backup_suffix: str) -> ConfigDocument:
    """Load the niri config, raising DocumentError on failure."""
    return ConfigDocument.load(config_path, backup_suffix)


def reload_compositor(client: NiriClient) -> bool:
    """
    Ask niri to pick up a saved config.

    A failure is reported but not raised: the file is already saved.
    """
    try:
        client.reload_configuration()
    except CompositorError as e:
        logger.warning(f"Reload failed: {e}")
        print(f"Saved, but failed to reload niri config: {e}", file=sys.stderr)
        return False
    return True
