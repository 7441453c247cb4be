"""
Talking to the running niri compositor through ``niri msg``.

Three requests are used:
- ``niri msg --json outputs`` to list connected outputs
- ``niri msg output NAME position set X Y`` to preview a position
  without touching the config file
- ``niri msg action load-config-file`` to make niri re-read config.kdl
"""

import json
import logging
import subprocess
from typing import Any, List

from .exceptions import CompositorCommunicationError, CompositorNotFoundError
from .models import OutputDescriptor, Position

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = "niri"
DEFAULT_TIMEOUT = 10


class NiriClient:
    """
    Blocking one-shot requests to niri.

    Every call runs a short-lived subprocess with a timeout and no retry.
    A failure leaves nothing changed on our side.
    """

    def __init__(self, command: str = DEFAULT_COMMAND, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.command = command
        self.timeout = timeout

    def _run(self, *args: str) -> str:
        """
        Run ``niri msg ARGS`` and return its stdout.

        Raises:
            CompositorNotFoundError: If the niri binary is not installed
            CompositorCommunicationError: On timeout or non-zero exit
        """
        cmd = [self.command, "msg", *args]
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise CompositorCommunicationError(
                f"Timeout talking to niri after {e.timeout}s.\n"
                f"'{' '.join(cmd)}' took too long to respond."
            ) from e
        except FileNotFoundError as e:
            raise CompositorNotFoundError(
                f"Could not find '{self.command}' command.\n"
                "Make sure niri is installed and in PATH."
            ) from e

        if result.returncode != 0:
            error_msg = result.stderr.strip() or "Unknown error"
            raise CompositorCommunicationError(
                f"niri request failed: {error_msg}\n"
                "Make sure niri is running and 'niri msg' works."
            )
        return result.stdout

    def list_outputs(self) -> List[OutputDescriptor]:
        """
        Query all connected outputs, sorted by name.

        Raises:
            CompositorNotFoundError: If niri is not installed
            CompositorCommunicationError: If the request fails or the reply
                is not the expected JSON
        """
        stdout = self._run("--json", "outputs")
        try:
            data: Any = json.loads(stdout)
        except json.JSONDecodeError as e:
            raise CompositorCommunicationError(
                f"Could not parse niri outputs reply: {e}\n"
                "Check that your niri version supports 'niri msg --json outputs'."
            ) from e

        # niri replies with an object keyed by output name
        entries = list(data.values()) if isinstance(data, dict) else data
        if not isinstance(entries, list):
            raise CompositorCommunicationError(
                f"Unexpected niri outputs reply of type {type(data).__name__}"
            )

        try:
            outputs = [OutputDescriptor.from_ipc(entry) for entry in entries]
        except (KeyError, TypeError, ValueError) as e:
            raise CompositorCommunicationError(f"Unexpected niri output description: {e}") from e

        outputs.sort(key=lambda o: o.name)
        logger.info(f"Found {len(outputs)} outputs")
        return outputs

    def set_output_position_preview(self, name: str, position: Position) -> None:
        """
        Move an output live without changing config.kdl.

        Raises:
            CompositorError: If the request fails
        """
        self._run("output", name, "position", "set", str(position.x), str(position.y))
        logger.debug(f"Previewed {name} at {position.x},{position.y}")

    def reload_configuration(self) -> None:
        """
        Ask niri to re-read its config file.

        Raises:
            CompositorError: If the request fails
        """
        self._run("action", "load-config-file")
        logger.info("Requested niri config reload")
