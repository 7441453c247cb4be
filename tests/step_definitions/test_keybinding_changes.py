"""
Step definitions for pending keybinding changes.
"""

import dataclasses
import tempfile
from pathlib import Path

import pytest
from pytest_bdd import scenarios, given, when, then, parsers

from niri_settings.accessors import read_keybindings
from niri_settings.document import ConfigDocument
from niri_settings.models import Keybinding, Modifiers, SimpleAction
from niri_settings.viewmodels import KeybindingsViewModel

# Load all scenarios from the feature file
scenarios("../features/keybinding_changes.feature")


BINDS_CONFIG = """\
binds {
    // Programs
    Mod+T { spawn "alacritty"; }
    /-Mod+X { spawn "disabled"; }
    Mod+Q { close-window; }
    Mod+1 { focus-workspace 1; }
}
"""


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def binds_context():
    """Context for keybinding state."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield {
            "path": Path(temp_dir) / "config.kdl",
            "doc": None,
            "vm": KeybindingsViewModel(),
        }


def _base_index(vm: KeybindingsViewModel, combo: str) -> int:
    for index, binding in enumerate(vm.bindings):
        if binding.combo == combo:
            return index
    raise AssertionError(f"No binding {combo} in {[b.combo for b in vm.bindings]}")


def _saved_bindings(binds_context):
    return read_keybindings(ConfigDocument.load(binds_context["path"]))


# ============================================================================
# Given Steps
# ============================================================================

@given('a config with bindings "Mod+T", "Mod+Q" and "Mod+1" and a disabled "Mod+X"')
def given_config_with_bindings(binds_context):
    """Write the config and load its bindings."""
    binds_context["path"].write_text(BINDS_CONFIG)
    doc = ConfigDocument.load(binds_context["path"])
    binds_context["doc"] = doc
    binds_context["vm"].load(read_keybindings(doc))


# ============================================================================
# When Steps
# ============================================================================

@when(parsers.parse('I change "{combo}" to run "{action}"'))
def when_change_binding(binds_context, combo, action):
    vm = binds_context["vm"]
    index = _base_index(vm, combo)
    vm.pending.modify(index, dataclasses.replace(vm.bindings[index], action=SimpleAction(action)))


@when(parsers.parse('I delete "{combo}"'))
def when_delete_binding(binds_context, combo):
    vm = binds_context["vm"]
    vm.pending.delete(_base_index(vm, combo))


@when(parsers.parse('I add "{combo}" running "{action}"'))
def when_add_binding(binds_context, combo, action):
    modifiers, key = Modifiers.parse(combo)
    binds_context["vm"].pending.add(Keybinding(modifiers, key, SimpleAction(action)))


@when("I save the keybindings")
def when_save(binds_context):
    assert binds_context["vm"].save(binds_context["doc"])


# ============================================================================
# Then Steps
# ============================================================================

@then(parsers.parse('the saved bindings are "{combos}"'))
def then_saved_bindings(binds_context, combos):
    expected = [c.strip() for c in combos.split(",")]
    assert [b.combo for b in _saved_bindings(binds_context)] == expected


@then(parsers.parse('the config file still contains "{text}"'))
def then_config_contains(binds_context, text):
    assert text in binds_context["path"].read_text()


@then(parsers.parse('"{combo}" runs "{action}"'))
def then_binding_runs(binds_context, combo, action):
    binding = next(b for b in _saved_bindings(binds_context) if b.combo == combo)
    assert binding.action == SimpleAction(action)


@then("no changes are pending")
def then_nothing_pending(binds_context):
    assert not binds_context["vm"].has_pending_changes()
