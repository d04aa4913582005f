"""Search session — live query state, ranked results and the selection cursor.

One session backs each search surface.  The sidebar and spotlight variants
share this class and differ only in their SearchConfig:

  sidebar    idle (empty query) shows nothing; moving above the first
             result clears the cursor ("typing, no selection")
  spotlight  idle shows a capped unfiltered list; moving above the first
             result keeps the cursor on the first row

Invariant: ``cursor`` is always None or a valid index into ``results``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from digitalux.catalog import CatalogEntry, IndexHolder
from digitalux.config import Settings
from .matcher import MatchResult, rank

log = logging.getLogger("digitalux.search")


class SearchMode(Enum):
    SIDEBAR = "sidebar"
    SPOTLIGHT = "spotlight"


@dataclass(frozen=True)
class SearchConfig:
    mode: SearchMode
    max_results: int

    @property
    def show_all_when_idle(self) -> bool:
        return self.mode is SearchMode.SPOTLIGHT

    @property
    def clear_cursor_above_first(self) -> bool:
        return self.mode is SearchMode.SIDEBAR

    @classmethod
    def sidebar(cls, settings: Settings | None = None) -> SearchConfig:
        s = settings or Settings()
        return cls(SearchMode.SIDEBAR, s.sidebar_max_results)

    @classmethod
    def spotlight(cls, settings: Settings | None = None) -> SearchConfig:
        s = settings or Settings()
        return cls(SearchMode.SPOTLIGHT, s.spotlight_max_results)


class SearchSession:
    def __init__(self, holder: IndexHolder, config: SearchConfig) -> None:
        self._holder = holder
        self.config = config
        self.query = ""                         # display text, untouched
        self.results: list[MatchResult] = []
        self.cursor: int | None = None
        self.closed = False
        self._refresh()

    # ── Queries ────────────────────────────────────────────────────

    def on_query_changed(self, text: str) -> list[MatchResult]:
        """Recompute results for new field text; cursor goes to the first result."""
        self.query = text
        self.closed = False
        self._refresh()
        return self.results

    def _refresh(self) -> None:
        needle = self.query.strip().lower()
        index = self._holder.current            # one snapshot per recompute
        self.results = rank(
            needle, index, self.config.max_results,
            all_entries=self.config.show_all_when_idle,
        )
        self.cursor = 0 if self.results else None
        log.debug("query %r -> %d results", needle, len(self.results))

    # ── Cursor ─────────────────────────────────────────────────────

    def move_selection(self, delta: int) -> int | None:
        """Move the cursor by ``delta`` rows, clamped to the result list.

        Never wraps.  Moving above the first row clears the cursor in the
        sidebar variant and leaves it on the first row in the spotlight.
        """
        count = len(self.results)
        if count == 0:
            self.cursor = None
            return None

        current = -1 if self.cursor is None else self.cursor
        target = current + delta
        if target < 0:
            if self.config.clear_cursor_above_first:
                self.cursor = None
            elif self.cursor is not None:
                self.cursor = 0
        else:
            self.cursor = min(target, count - 1)
        return self.cursor

    def select(self, index: int) -> int | None:
        """Point the cursor at ``index`` (pointer hover); out-of-range is ignored."""
        if 0 <= index < len(self.results):
            self.cursor = index
        return self.cursor

    def clear_selection(self) -> None:
        self.cursor = None

    # ── Confirmation ───────────────────────────────────────────────

    @property
    def selected(self) -> MatchResult | None:
        if self.cursor is None:
            return None
        return self.results[self.cursor]

    def confirm_selection(self) -> CatalogEntry | None:
        """Entry under the cursor, or None.  Does not change session state."""
        match = self.selected
        return match.entry if match else None

    def category_of(self, entry: CatalogEntry) -> str:
        return self._holder.current.category_of(entry)

    def close(self) -> None:
        """Discard all session state."""
        self.query = ""
        self.results = []
        self.cursor = None
        self.closed = True
