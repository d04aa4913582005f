"""Popup controller — visibility, placement and dismissal of the results surface.

States: CLOSED, OPEN.  The popup is a passive display: it never takes
input focus, so every keystroke stays with the query field.

Placement:
  sidebar    below the query field, ``max(field_width + 30, min_width)`` wide,
             ``rows * row_height + 4`` high
  spotlight  centred over the host window, ``top_offset`` below its top edge,
             ``header + rows * row_height + 6`` high (one empty row when
             there are no results)

Rows beyond ``max_visible_rows`` scroll; they never grow the popup.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from digitalux.config import Settings
from .session import SearchMode

log = logging.getLogger("digitalux.search.popup")


class PopupState(Enum):
    CLOSED = "closed"
    OPEN = "open"


class DismissReason(Enum):
    QUERY_EMPTY = "query_empty"
    NO_RESULTS = "no_results"
    DISMISS_KEY = "dismiss_key"
    FOCUS_LOST = "focus_lost"
    WINDOW_MOVED = "window_moved"
    WINDOW_RESIZED = "window_resized"
    WINDOW_DEACTIVATED = "window_deactivated"
    WINDOW_ICONIFIED = "window_iconified"
    CONFIRMED = "confirmed"
    CLEARED = "cleared"


WINDOW_EVENTS = {
    "moved": DismissReason.WINDOW_MOVED,
    "resized": DismissReason.WINDOW_RESIZED,
    "deactivated": DismissReason.WINDOW_DEACTIVATED,
    "iconified": DismissReason.WINDOW_ICONIFIED,
}


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class PopupGeometry:
    mode: SearchMode
    row_height: int
    max_visible_rows: int
    min_width: int = 0
    width: int = 0                  # fixed width (spotlight)
    header_height: int = 0          # search field strip above the rows (spotlight)
    top_offset: int = 0

    @classmethod
    def for_mode(cls, mode: SearchMode, settings: Settings | None = None) -> PopupGeometry:
        s = settings or Settings()
        if mode is SearchMode.SIDEBAR:
            return cls(
                mode=mode,
                row_height=s.sidebar_row_height,
                max_visible_rows=s.sidebar_max_results,
                min_width=s.sidebar_min_width,
            )
        return cls(
            mode=mode,
            row_height=s.spotlight_row_height,
            max_visible_rows=s.spotlight_max_results,
            width=s.spotlight_width,
            header_height=s.spotlight_header_height,
            top_offset=s.spotlight_top_offset,
        )

    def visible_rows(self, row_count: int) -> int:
        return max(0, min(row_count, self.max_visible_rows))

    def bounds(self, anchor: Rect, row_count: int) -> Rect:
        """Popup rectangle for ``row_count`` results.

        ``anchor`` is the query field (sidebar) or the host window (spotlight).
        """
        rows = self.visible_rows(row_count)
        if self.mode is SearchMode.SIDEBAR:
            return Rect(
                x=anchor.x - 4,
                y=anchor.y + anchor.height + 2,
                width=max(anchor.width + 30, self.min_width),
                height=rows * self.row_height + 4,
            )
        if rows == 0:
            height = self.header_height + self.row_height      # "no results" row
        else:
            height = self.header_height + rows * self.row_height + 6
        return Rect(
            x=anchor.x + (anchor.width - self.width) // 2,
            y=anchor.y + self.top_offset,
            width=self.width,
            height=height,
        )


# ── Debounce scheduling ────────────────────────────────────────────

class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable: ...


class TimerScheduler:
    """Runs callbacks on a ``threading.Timer``.

    The lock is the one that guards the surface state, so a callback never
    runs while a request handler is mutating that state.
    """

    def __init__(self, lock: threading.RLock) -> None:
        self._lock = lock

    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        def run() -> None:
            with self._lock:
                callback()

        timer = threading.Timer(delay, run)
        timer.daemon = True
        timer.start()
        return timer


class _PendingCheck:
    """One focus-loss check: fires at most once, cancellable until then."""

    def __init__(self, check: Callable[[], None]) -> None:
        self._check = check
        self.done = False
        self.handle: Cancellable | None = None

    def fire(self) -> None:
        if self.done:
            return
        self.done = True
        self._check()

    def cancel(self) -> None:
        if self.done:
            return
        self.done = True
        if self.handle is not None:
            self.handle.cancel()


# ── Controller ─────────────────────────────────────────────────────

class PopupController:
    def __init__(
        self,
        geometry: PopupGeometry,
        scheduler: Scheduler,
        debounce_s: float = 0.2,
    ) -> None:
        self.geometry = geometry
        self.state = PopupState.CLOSED
        self.bounds: Rect | None = None
        self.anchor: Rect | None = None
        self.last_dismiss: DismissReason | None = None
        self._scheduler = scheduler
        self._debounce_s = debounce_s
        self._pending: _PendingCheck | None = None
        self.on_close: Callable[[DismissReason], None] | None = None

    @property
    def is_open(self) -> bool:
        return self.state is PopupState.OPEN

    @property
    def focusable(self) -> bool:
        return False

    # ── Transitions ────────────────────────────────────────────────

    def open(self, row_count: int, anchor: Rect | None = None) -> Rect | None:
        """CLOSED -> OPEN (or re-layout while OPEN).

        Until the host reports an anchor rectangle the popup is open but
        unplaced (``bounds`` is None).
        """
        if anchor is not None:
            self.anchor = anchor
        self.bounds = self.geometry.bounds(self.anchor, row_count) if self.anchor else None
        if self.state is PopupState.CLOSED:
            log.debug("popup opened (%s rows)", row_count)
        self.state = PopupState.OPEN
        self.last_dismiss = None
        return self.bounds

    def update(self, row_count: int) -> Rect | None:
        """OPEN -> OPEN: recompute the size for the new result count."""
        if self.state is PopupState.OPEN and self.anchor is not None:
            self.bounds = self.geometry.bounds(self.anchor, row_count)
        return self.bounds

    def close(self, reason: DismissReason) -> bool:
        """OPEN -> CLOSED.  Returns False if the popup was already closed."""
        self.cancel_pending()
        if self.state is PopupState.CLOSED:
            return False
        self.state = PopupState.CLOSED
        self.bounds = None
        self.last_dismiss = reason
        log.debug("popup closed: %s", reason.value)
        if self.on_close is not None:
            self.on_close(reason)
        return True

    # ── Focus and window events ────────────────────────────────────

    def on_focus_lost(self, field_has_focus: Callable[[], bool]) -> None:
        """Close after the debounce delay unless focus came back to the field."""
        self.cancel_pending()
        if self.state is PopupState.CLOSED:
            return

        def check() -> None:
            self._pending = None
            if not field_has_focus():
                self.close(DismissReason.FOCUS_LOST)

        pending = _PendingCheck(check)
        self._pending = pending
        pending.handle = self._scheduler.call_later(self._debounce_s, pending.fire)

    def cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    @property
    def has_pending_focus_check(self) -> bool:
        return self._pending is not None

    def on_window_event(self, event: str) -> bool:
        """Host window moved / resized / deactivated / iconified -> close."""
        reason = WINDOW_EVENTS.get(event)
        if reason is None:
            raise ValueError(f"Unknown window event '{event}'")
        return self.close(reason)
