"""Keyboard shortcuts — bindings, key capture, the override registry and its dialog."""

from .binding import BindingError, KeyBinding, canonicalize, is_valid_binding, MODIFIER_ORDER
from .capture import CaptureOutcome, CaptureResult, CaptureState, KeyCapture, KeyEvent
from .defaults import DEFAULT_SHORTCUTS
from .registry import (
    ShortcutEntry, ShortcutRegistry, ShortcutSaveError, UnknownActionError, create_registry,
)
from .dialog import ShortcutDialog, ShortcutRow

__all__ = [
    # Binding
    "BindingError", "KeyBinding", "canonicalize", "is_valid_binding", "MODIFIER_ORDER",
    # Capture
    "CaptureOutcome", "CaptureResult", "CaptureState", "KeyCapture", "KeyEvent",
    # Registry
    "DEFAULT_SHORTCUTS", "ShortcutEntry", "ShortcutRegistry", "ShortcutSaveError",
    "UnknownActionError", "create_registry",
    # Dialog
    "ShortcutDialog", "ShortcutRow",
]
