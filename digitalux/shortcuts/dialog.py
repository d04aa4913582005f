"""Shortcut dialog model — the table behind the "Keyboard Shortcuts" dialog.

Two columns: the action description (read-only) and its binding (edited by
key capture or by typing a combination).  Edits mark the dialog modified;
closing saves only when something changed.  "Reset All" restores every
default and saves immediately.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .capture import CaptureOutcome, CaptureResult, KeyCapture, KeyEvent, PROMPT
from .registry import ShortcutRegistry

log = logging.getLogger("digitalux.shortcuts.dialog")

TITLE = "Keyboard Shortcuts"
HEADER = "Configure keyboard shortcuts for actions:"
COLUMNS = ("Action", "Shortcut")
RESET_MESSAGE = "All shortcuts reset to defaults.\nRestart the application for changes to take effect."


@dataclass(frozen=True)
class ShortcutRow:
    action_id: str
    description: str
    binding: str
    default_binding: str

    @property
    def is_default(self) -> bool:
        return self.binding == self.default_binding


class ShortcutDialog:
    def __init__(self, registry: ShortcutRegistry, dark_mode: bool = True) -> None:
        registry.load()
        self.registry = registry
        self.dark_mode = dark_mode
        self.capture = KeyCapture()
        self.modified = False

    # ── Table model ────────────────────────────────────────────────

    def rows(self) -> list[ShortcutRow]:
        return [
            ShortcutRow(e.action_id, e.description, e.current_binding, e.default_binding)
            for e in self.registry.entries
        ]

    @property
    def row_count(self) -> int:
        return len(self.registry.entries)

    def value_at(self, row: int, col: int) -> str:
        entry = self.registry.entries[row]
        return entry.description if col == 0 else entry.current_binding

    @staticmethod
    def is_cell_editable(row: int, col: int) -> bool:
        return col == 1

    def set_value(self, row: int, value: str) -> str:
        """Typed edit of a binding cell.  Raises BindingError, keeping the old value."""
        return self.set_binding(self.registry.entries[row].action_id, value)

    def set_binding(self, action_id: str, value: str) -> str:
        binding = self.registry.set_binding(action_id, value)
        self.modified = True
        return binding

    # ── Key capture editing ────────────────────────────────────────

    def begin_edit(self, action_id: str) -> str:
        """Start capturing for ``action_id``; returns the editor prompt."""
        self.registry.entry(action_id)           # unknown ids fail here
        self.capture.begin(action_id)
        return PROMPT

    def feed_key(self, event: KeyEvent) -> CaptureOutcome:
        outcome = self.capture.feed(event)
        if outcome.result is CaptureResult.COMMIT and outcome.action_id and outcome.binding:
            self.registry.set_binding(outcome.action_id, outcome.binding)
            self.modified = True
        return outcome

    def cancel_edit(self) -> None:
        self.capture.cancel()

    # ── Buttons ────────────────────────────────────────────────────

    def reset_all(self) -> str:
        """Restore all defaults and save.  Returns the message to show."""
        self.capture.cancel()
        self.modified = True
        self.registry.reset_all()
        log.info("All shortcuts reset to defaults")
        return RESET_MESSAGE

    def close(self) -> bool:
        """Close the dialog, saving if anything changed.  Returns True if saved."""
        self.capture.cancel()
        if not self.modified:
            return False
        self.registry.save()
        self.modified = False
        return True

    def to_dict(self) -> dict:
        return {
            "title": TITLE,
            "header": HEADER,
            "columns": list(COLUMNS),
            "dark_mode": self.dark_mode,
            "modified": self.modified,
            "capturing": self.capture.action_id,
            "rows": [
                {
                    "action_id": r.action_id,
                    "description": r.description,
                    "binding": r.binding,
                    "default": r.default_binding,
                    "is_default": r.is_default,
                }
                for r in self.rows()
            ],
        }
