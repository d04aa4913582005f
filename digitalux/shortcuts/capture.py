"""Key capture — the "press a key..." step of editing a shortcut.

Two states, one transition function::

    IDLE --begin(action)--> AWAITING_KEY_PRESS
    AWAITING_KEY_PRESS --feed(modifier only)--> AWAITING_KEY_PRESS   (CONTINUE)
    AWAITING_KEY_PRESS --feed(bad key)-------> AWAITING_KEY_PRESS    (REJECTED)
    AWAITING_KEY_PRESS --feed(Escape)--------> IDLE                  (CANCELLED)
    AWAITING_KEY_PRESS --feed(valid key)-----> IDLE                  (COMMIT)

A rejected key leaves the capture open and the previous binding in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .binding import BindingError, KeyBinding

log = logging.getLogger("digitalux.shortcuts.capture")


class CaptureState(Enum):
    IDLE = "idle"
    AWAITING_KEY_PRESS = "awaiting_key_press"


class CaptureResult(Enum):
    IGNORED = "ignored"         # no capture in progress
    CONTINUE = "continue"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    COMMIT = "commit"


@dataclass(frozen=True)
class KeyEvent:
    """Raw key-press event as reported by the input layer."""

    key: str
    ctrl: bool = False
    alt: bool = False
    shift: bool = False
    meta: bool = False

    @property
    def has_modifiers(self) -> bool:
        return self.ctrl or self.alt or self.shift or self.meta


@dataclass(frozen=True)
class CaptureOutcome:
    result: CaptureResult
    action_id: str | None = None
    binding: KeyBinding | None = None
    message: str = ""


PROMPT = "Press a key..."


class KeyCapture:
    def __init__(self) -> None:
        self.state = CaptureState.IDLE
        self.action_id: str | None = None

    @property
    def awaiting(self) -> bool:
        return self.state is CaptureState.AWAITING_KEY_PRESS

    def begin(self, action_id: str) -> None:
        self.state = CaptureState.AWAITING_KEY_PRESS
        self.action_id = action_id

    def cancel(self) -> None:
        self.state = CaptureState.IDLE
        self.action_id = None

    def feed(self, event: KeyEvent) -> CaptureOutcome:
        if self.state is CaptureState.IDLE:
            return CaptureOutcome(CaptureResult.IGNORED)

        action_id = self.action_id
        if event.key.strip().lower() in ("escape", "esc") and not event.has_modifiers:
            self.cancel()
            return CaptureOutcome(CaptureResult.CANCELLED, action_id)

        try:
            binding = KeyBinding.from_event(
                event.key, ctrl=event.ctrl, alt=event.alt, shift=event.shift, meta=event.meta,
            )
        except BindingError as exc:
            log.debug("Rejected key during capture for %s: %s", action_id, exc)
            return CaptureOutcome(CaptureResult.REJECTED, action_id, message=str(exc))

        if binding is None:
            return CaptureOutcome(CaptureResult.CONTINUE, action_id)

        self.cancel()
        return CaptureOutcome(CaptureResult.COMMIT, action_id, binding)
