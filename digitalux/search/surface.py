"""Search surfaces — a query field wired to a session, a popup and the inserter.

All keyboard handling happens here, in the query field's handler; the
popup only displays the session's results and cursor highlight.

Sidebar (persistent inline field):
  - typing a non-empty query with results opens the popup, otherwise closes it
  - Down with the popup closed re-opens it and selects the first result
  - Up above the first result clears the cursor, so Enter becomes a no-op
  - Enter inserts the selection, closes the popup and clears the field
  - Escape closes the popup; the query text is kept

Spotlight (invoked on demand by a global key):
  - invoking resets the query and lists the first entries unfiltered
  - Enter inserts the selection and closes the whole surface
  - Escape, focus loss and host window changes close the whole surface
"""

from __future__ import annotations

import logging
from enum import Enum

from digitalux.catalog import IndexHolder
from digitalux.config import Settings
from digitalux.insertion import ComponentInserter, InsertCommand
from .popup import DismissReason, PopupController, PopupGeometry, Rect, Scheduler
from .session import SearchConfig, SearchMode, SearchSession

log = logging.getLogger("digitalux.search.surface")

SPOTLIGHT_INSERT_POSITION = (10, 10)


class Key(Enum):
    UP = "Up"
    DOWN = "Down"
    ENTER = "Enter"
    ESCAPE = "Escape"

    @classmethod
    def parse(cls, name: str) -> Key:
        aliases = {
            "up": cls.UP, "arrowup": cls.UP,
            "down": cls.DOWN, "arrowdown": cls.DOWN,
            "enter": cls.ENTER, "return": cls.ENTER,
            "escape": cls.ESCAPE, "esc": cls.ESCAPE,
        }
        try:
            return aliases[name.strip().lower()]
        except KeyError:
            raise ValueError(f"Unsupported navigation key '{name}'") from None


class SurfaceClosedError(RuntimeError):
    """Raised when input arrives for a spotlight that is not open."""


class SearchSurface:
    def __init__(
        self,
        holder: IndexHolder,
        config: SearchConfig,
        popup: PopupController,
        inserter: ComponentInserter,
    ) -> None:
        self._holder = holder
        self.config = config
        self.popup = popup
        self.inserter = inserter
        self.field_focused = False
        self.session: SearchSession | None = None
        if config.mode is SearchMode.SIDEBAR:
            # The inline field is always there; its session lives as long as it does.
            self.session = SearchSession(holder, config)
        self.popup.on_close = self._on_popup_closed

    @classmethod
    def create(
        cls,
        mode: SearchMode,
        holder: IndexHolder,
        inserter: ComponentInserter,
        scheduler: Scheduler,
        settings: Settings | None = None,
    ) -> SearchSurface:
        s = settings or Settings()
        config = SearchConfig.sidebar(s) if mode is SearchMode.SIDEBAR else SearchConfig.spotlight(s)
        popup = PopupController(
            PopupGeometry.for_mode(mode, s),
            scheduler=scheduler,
            debounce_s=s.focus_debounce_s,
        )
        return cls(holder, config, popup, inserter)

    @property
    def mode(self) -> SearchMode:
        return self.config.mode

    @property
    def is_spotlight(self) -> bool:
        return self.config.mode is SearchMode.SPOTLIGHT

    def _require_session(self) -> SearchSession:
        if self.session is None:
            raise SurfaceClosedError("Spotlight search is not open")
        return self.session

    def _on_popup_closed(self, reason: DismissReason) -> None:
        if self.is_spotlight and self.session is not None:
            self.session.close()
            self.session = None
            self.field_focused = False

    # ── Opening ────────────────────────────────────────────────────

    def invoke(self, anchor: Rect | None = None) -> None:
        """Spotlight: open with an empty query.  Sidebar: same as focusing the field."""
        if not self.is_spotlight:
            self.focus_gained(anchor)
            return
        self.session = SearchSession(self._holder, self.config)
        self.field_focused = True
        self.popup.cancel_pending()
        self.popup.open(len(self.session.results), anchor)

    # ── Query field events ─────────────────────────────────────────

    def type_text(self, text: str) -> None:
        session = self._require_session()
        results = session.on_query_changed(text)
        if self.is_spotlight:
            self.popup.update(len(results))
            return
        if not text.strip():
            self.popup.close(DismissReason.QUERY_EMPTY)
        elif not results:
            self.popup.close(DismissReason.NO_RESULTS)
        else:
            self.popup.open(len(results))

    def clear(self) -> None:
        """Sidebar clear button: empty the field and close the popup."""
        session = self._require_session()
        session.on_query_changed("")
        self.popup.close(DismissReason.CLEARED)

    def press_key(self, key: Key | str) -> InsertCommand | None:
        """Handle a navigation key.  Returns the insertion when Enter confirms."""
        if isinstance(key, str):
            key = Key.parse(key)
        if self.session is None:
            return None
        session = self.session

        if not self.popup.is_open:
            if key is Key.DOWN and session.results:
                self.popup.open(len(session.results))
                session.select(0)
            return None

        if key is Key.DOWN:
            session.move_selection(1)
        elif key is Key.UP:
            session.move_selection(-1)
        elif key is Key.ENTER:
            return self._confirm()
        elif key is Key.ESCAPE:
            self.popup.close(DismissReason.DISMISS_KEY)
        return None

    # ── Pointer events on popup rows ───────────────────────────────

    def hover(self, row: int) -> None:
        if self.session is not None and self.popup.is_open:
            self.session.select(row)

    def click(self, row: int) -> InsertCommand | None:
        if self.session is None or not self.popup.is_open:
            return None
        if self.session.select(row) != row:
            return None
        return self._confirm()

    # ── Focus and host window ──────────────────────────────────────

    def focus_gained(self, anchor: Rect | None = None) -> None:
        self.field_focused = True
        self.popup.cancel_pending()
        if anchor is not None:
            self.popup.anchor = anchor
        session = self.session
        if not self.is_spotlight and session is not None:
            if session.query.strip() and session.results:
                self.popup.open(len(session.results))

    def focus_lost(self, to_popup: bool = False) -> None:
        """The query field lost focus.

        A click on a popup row keeps the field focused, so ``to_popup``
        is ignored; anything else closes the popup after the debounce
        delay unless focus has come back by then.
        """
        if to_popup:
            return
        self.field_focused = False
        self.popup.on_focus_lost(lambda: self.field_focused)

    def window_event(self, event: str) -> None:
        self.popup.on_window_event(event)

    def close(self) -> None:
        self.popup.close(DismissReason.DISMISS_KEY)
        if self.is_spotlight and self.session is not None:
            self.session.close()
            self.session = None

    # ── Confirmation ───────────────────────────────────────────────

    def _confirm(self) -> InsertCommand | None:
        session = self._require_session()
        entry = session.confirm_selection()
        if entry is None:
            return None
        position = SPOTLIGHT_INSERT_POSITION if self.is_spotlight else None
        # InsertionError propagates with the session and popup untouched.
        command = self.inserter.insert(entry, position)
        self.popup.close(DismissReason.CONFIRMED)
        if not self.is_spotlight:
            session.on_query_changed("")
        return command

    # ── Presentation ───────────────────────────────────────────────

    def view(self) -> dict:
        """Snapshot for the presentation layer."""
        session = self.session
        results = []
        if session is not None:
            results = [
                {
                    "id": m.entry.id,
                    "name": m.entry.display_name,
                    "category": session.category_of(m.entry),
                    "tier": m.tier.name.lower(),
                }
                for m in session.results
            ]
        bounds = self.popup.bounds
        return {
            "mode": self.mode.value,
            "active": session is not None,
            "query": session.query if session else "",
            "results": results,
            "cursor": session.cursor if session else None,
            "popup": {
                "state": self.popup.state.value,
                "bounds": (
                    {"x": bounds.x, "y": bounds.y, "width": bounds.width, "height": bounds.height}
                    if bounds else None
                ),
                "last_dismiss": self.popup.last_dismiss.value if self.popup.last_dismiss else None,
                "focusable": self.popup.focusable,
            },
        }
