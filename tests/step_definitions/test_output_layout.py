"""
Step definitions for output layout.
"""

import pytest
from pytest_bdd import scenarios, given, when, then, parsers

from niri_settings import geometry
from niri_settings.geometry import SnapDirection
from niri_settings.models import OutputDescriptor, Position, Size
from niri_settings.overlay import PositionOverlay

# Load all scenarios from the feature file
scenarios("../features/output_layout.feature")


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def layout_context():
    """Context for output arrangement state."""
    return {
        "outputs": [],
        "overlay": PositionOverlay(),
    }


def _add_output(layout_context, name, w, h, x, y, enabled=True):
    layout_context["outputs"].append(
        OutputDescriptor(
            name=name,
            position=Position(x, y),
            logical_size=Size(w, h),
            enabled=enabled,
        )
    )


# ============================================================================
# Given Steps
# ============================================================================

@given(parsers.parse('output "{name}" of size {w:d}x{h:d} at {x:d},{y:d}'))
def given_output(layout_context, name, w, h, x, y):
    _add_output(layout_context, name, w, h, x, y)


@given(parsers.parse('disabled output "{name}" of size {w:d}x{h:d} at {x:d},{y:d}'))
def given_disabled_output(layout_context, name, w, h, x, y):
    _add_output(layout_context, name, w, h, x, y, enabled=False)


# ============================================================================
# When Steps
# ============================================================================

@when(parsers.parse('I snap "{name}" {direction}'))
def when_snap(layout_context, name, direction):
    position = geometry.snap(
        layout_context["outputs"], name, SnapDirection(direction), layout_context["overlay"]
    )
    assert position is not None


@when("I normalize the layout")
def when_normalize(layout_context):
    geometry.normalize(layout_context["outputs"], layout_context["overlay"])


# ============================================================================
# Then Steps
# ============================================================================

@then(parsers.parse('"{name}" is pending at {x:d},{y:d}'))
def then_pending_at(layout_context, name, x, y):
    assert layout_context["overlay"].get(name) == Position(x, y)


@then(parsers.parse('"{name}" has no pending position'))
def then_not_pending(layout_context, name):
    assert name not in layout_context["overlay"]
