"""
Application state: the loaded document, the three view models and the one
visible error message.

update() applies one message at a time. Domain errors never escape it; they
become ``error`` (replacing any previous message) and the state is left as
it was before the failed operation.
"""

import logging
from pathlib import Path
from typing import Callable, Optional

from . import messages as msg
from .accessors import read_appearance, read_keybindings
from .compositor import NiriClient
from .document import ConfigDocument, default_config_path
from .document.config_document import DEFAULT_BACKUP_SUFFIX
from .exceptions import NiriSettingsError
from .geometry import DEFAULT_MOVE_STEP
from .messages import Category
from .viewmodels import AppearanceViewModel, KeybindingsViewModel, OutputsViewModel

logger = logging.getLogger(__name__)

RELOAD_FAILED = "Saved, but failed to reload niri config"
NO_CONFIG = "No config loaded"


class AppState:
    """
    Everything the settings UI works on.

    Args:
        client: Compositor collaborator
        config_path: niri config file (defaults to niri's standard location)
        backup_suffix: Suffix for the backup written before every save
        move_step: Pixels per directional nudge of an output
    """

    def __init__(
        self,
        client: NiriClient,
        config_path: Optional[Path] = None,
        backup_suffix: str = DEFAULT_BACKUP_SUFFIX,
        move_step: int = DEFAULT_MOVE_STEP,
    ) -> None:
        self.client = client
        self.config_path = config_path or default_config_path()
        self.backup_suffix = backup_suffix
        self.category = Category.OUTPUTS
        self.document: Optional[ConfigDocument] = None
        self.outputs = OutputsViewModel(move_step=move_step)
        self.keybindings = KeybindingsViewModel()
        self.appearance = AppearanceViewModel()
        self.error: Optional[str] = None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Query outputs and load the config, keeping the first failure visible."""
        self._run_all(self.refresh_outputs, self.load_config)

    def refresh_outputs(self) -> bool:
        return self._attempt(
            "Failed to query outputs",
            lambda: self.outputs.set_outputs(self.client.list_outputs(), self.document),
        )

    def load_config(self) -> bool:
        """Load the document and populate the keybinding and appearance bases."""
        def load() -> None:
            document = ConfigDocument.load(self.config_path, self.backup_suffix)
            self.document = document
            self.keybindings.load(read_keybindings(document))
            self.appearance.load(read_appearance(document))
            self.outputs.set_outputs(self.outputs.outputs, document)

        return self._attempt("Failed to load config", load)

    def reload(self) -> bool:
        """Drop all pending changes and read outputs and the config again."""
        self.outputs.revert()
        self.keybindings.revert()
        self.appearance.reset()
        return self._run_all(self.refresh_outputs, self.load_config)

    def _run_all(self, *steps: Callable[[], bool]) -> bool:
        first_error = None
        ok = True
        for step in steps:
            if not step():
                ok = False
                first_error = first_error or self.error
        self.error = first_error
        return ok

    # ------------------------------------------------------------------
    # Error handling
    # ------------------------------------------------------------------

    def _fail(self, prefix: str, error: NiriSettingsError) -> None:
        logger.warning(f"{prefix}: {error}")
        self.error = f"{prefix}: {error}"

    def _attempt(self, prefix: str, action: Callable[[], object]) -> bool:
        """
        Run one operation, turning a domain error into the visible message.

        Returns:
            True on success (the error message is cleared)
        """
        try:
            action()
        except NiriSettingsError as e:
            self._fail(prefix, e)
            return False
        self.error = None
        return True

    def dismiss_error(self) -> None:
        self.error = None

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def save(self) -> bool:
        """Save the current category's pending changes."""
        if self.document is None:
            self.error = NO_CONFIG
            return False
        document = self.document

        if self.category is Category.OUTPUTS:
            return self._attempt("Failed to save", lambda: self.outputs.save(document))

        if self.category is Category.KEYBINDINGS:
            prefix, vm = "Failed to save keybindings", self.keybindings
        else:
            prefix, vm = "Failed to save appearance", self.appearance

        try:
            saved = vm.save(document)
        except NiriSettingsError as e:
            self._fail(prefix, e)
            return False
        self.error = None
        if saved:
            self._reload_compositor()
        return True

    def _reload_compositor(self) -> None:
        """Tell niri to re-read the file we just saved."""
        try:
            self.client.reload_configuration()
        except NiriSettingsError as e:
            self._fail(RELOAD_FAILED, e)

    def revert(self) -> None:
        if self.category is Category.OUTPUTS:
            self.outputs.revert()
        elif self.category is Category.KEYBINDINGS:
            self.keybindings.revert()
        else:
            self.appearance.reset()
        self.error = None

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def update(self, message: msg.Message) -> None:
        """Apply one message."""
        logger.debug(f"update: {message}")

        if isinstance(message, msg.SwitchCategory):
            self.category = message.category
            self.error = None
        elif isinstance(message, msg.DismissError):
            self.dismiss_error()
        elif isinstance(message, msg.Save):
            self.save()
        elif isinstance(message, msg.Reload):
            self.reload()
        elif isinstance(message, msg.Revert):
            self.revert()
        elif isinstance(message, (msg.SelectNext, msg.SelectPrevious, msg.SelectIndex)):
            self._select(message)
        elif self.category is Category.OUTPUTS:
            self._update_outputs(message)
        elif self.category is Category.KEYBINDINGS:
            self._update_keybindings(message)
        else:
            self._update_appearance(message)

    def _select(self, message: msg.Message) -> None:
        vm = {
            Category.OUTPUTS: self.outputs,
            Category.KEYBINDINGS: self.keybindings,
            Category.APPEARANCE: self.appearance,
        }[self.category]
        if isinstance(message, msg.SelectNext):
            vm.select_next()
        elif isinstance(message, msg.SelectPrevious):
            vm.select_previous()
        elif isinstance(message, msg.SelectIndex):
            vm.select(message.index)

    def _update_outputs(self, message: msg.Message) -> None:
        vm = self.outputs
        if isinstance(message, msg.MoveOutput):
            vm.move_selected(message.dx, message.dy)
        elif isinstance(message, msg.NudgeOutput):
            vm.nudge_selected(message.x_steps, message.y_steps)
        elif isinstance(message, msg.SetPosition):
            vm.set_selected_position(message.x, message.y)
        elif isinstance(message, msg.Snap):
            vm.snap_selected(message.direction)
        elif isinstance(message, msg.Normalize):
            vm.normalize()
        elif isinstance(message, msg.Preview):
            if vm.has_pending_changes():
                self._attempt("Preview failed", lambda: vm.preview(self.client))
        elif isinstance(message, msg.RevertPreview):
            self._attempt("Failed to revert preview", lambda: vm.revert_preview(self.client))
        elif isinstance(message, msg.RefreshOutputs):
            self.refresh_outputs()
        else:
            logger.debug(f"Ignoring {type(message).__name__} in outputs")

    def _update_keybindings(self, message: msg.Message) -> None:
        vm = self.keybindings
        if isinstance(message, msg.StartSearch):
            vm.start_search()
        elif isinstance(message, msg.UpdateSearch):
            vm.set_search(message.query)
        elif isinstance(message, msg.ClearSearch):
            vm.clear_search()
        elif isinstance(message, msg.AddKeybinding):
            vm.start_add()
            self.error = None
        elif isinstance(message, msg.StartEdit):
            if vm.start_edit():
                self.error = None
        elif isinstance(message, msg.CancelEdit):
            vm.cancel_edit()
            self.error = None
        elif isinstance(message, msg.ConfirmEdit):
            self._attempt("Invalid keybinding", vm.confirm_edit)
        elif isinstance(message, msg.DeleteKeybinding):
            vm.delete_selected()
        else:
            logger.debug(f"Ignoring {type(message).__name__} in keybindings")

    def _update_appearance(self, message: msg.Message) -> None:
        vm = self.appearance
        if isinstance(message, msg.ToggleSection):
            vm.toggle_selected_section()
        elif isinstance(message, msg.ToggleValue):
            vm.toggle_selected()
        elif isinstance(message, msg.AdjustValue):
            vm.adjust_selected(message.amount)
        elif isinstance(message, msg.CycleValue):
            vm.cycle_selected(message.forward)
        elif isinstance(message, msg.StartEdit):
            vm.start_edit()
            self.error = None
        elif isinstance(message, msg.CancelEdit):
            vm.cancel_edit()
            self.error = None
        elif isinstance(message, msg.ConfirmEdit):
            self._attempt("Invalid value", vm.confirm_edit)
        else:
            logger.debug(f"Ignoring {type(message).__name__} in appearance")
