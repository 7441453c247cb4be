"""
Domain value types for outputs, key bindings and appearance.
"""

from .output import OutputDescriptor, OutputMode, OutputTransform, Position, Size
from .keybindings import (
    ActionType,
    AddBinding,
    ArgAction,
    BindingAction,
    BindingDraft,
    BindingProperties,
    BindingStatus,
    DeleteBinding,
    EditField,
    EffectiveBinding,
    Keybinding,
    KeybindingChange,
    Modifiers,
    ModifyBinding,
    SimpleAction,
    SpawnAction,
    SpawnShellAction,
    parse_command_args,
)
from .appearance import (
    AppearanceDraft,
    AppearanceField,
    AppearanceSection,
    AppearanceSettings,
    BorderSettings,
    CenterFocusedColumn,
    ColorDraft,
    ColorValue,
    FieldKind,
    FocusRingSettings,
    GradientColor,
    ShadowSettings,
    SolidColor,
    StrutsSettings,
)
