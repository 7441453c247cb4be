"""Appearance commands."""

import logging
from pathlib import Path

from ..accessors import read_appearance
from ..compositor import NiriClient
from ..config import Settings
from ..exceptions import EditValidationError
from ..models import AppearanceDraft, AppearanceField, AppearanceSection, ColorDraft
from ..viewmodels import AppearanceViewModel
from .common import open_document, reload_compositor

logger = logging.getLogger(__name__)


def _parse_field(key: str) -> AppearanceField:
    try:
        return AppearanceField(key)
    except ValueError as e:
        valid = ", ".join(f.value for f in AppearanceField)
        raise EditValidationError(
            f"Unknown appearance field '{key}'.\n"
            f"Valid fields: {valid}"
        ) from e


def show_appearance(settings: Settings, config_path: Path) -> None:
    """Print every appearance field grouped by section."""
    doc = open_document(config_path, settings.niri.backup_suffix)
    vm = AppearanceViewModel(read_appearance(doc))
    for section in AppearanceSection:
        print(section.value)
        for fld in AppearanceField.in_section(section):
            print(f"  {fld.value:28} {vm.display_value(fld)}")


def set_appearance(
    settings: Settings,
    config_path: Path,
    client: NiriClient,
    key: str,
    value: str,
) -> None:
    """
    Set one appearance field, save and reload niri.
    
    Colors accept a plain color string; booleans on/off; struts an empty
    string to unset.
    """
    fld = _parse_field(key)
    doc = open_document(config_path, settings.niri.backup_suffix)
    vm = AppearanceViewModel(read_appearance(doc))
    
    if fld.is_color:
        vm.draft = AppearanceDraft(field_id=fld, color=ColorDraft(solid=value))
    else:
        vm.draft = AppearanceDraft(field_id=fld, text=value)
    vm.confirm_edit()
    
    if not vm.save(doc):
        print("Nothing to change")
        return
    print(f"{fld.value} = {vm.display_value(fld)}")
    reload_compositor(client)
