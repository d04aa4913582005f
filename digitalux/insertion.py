"""Hand-off of a confirmed search result to the host editor.

The search surfaces never touch the circuit themselves.  A confirmed
entry is turned into an InsertCommand by a materializer (the host's
"create an instance of this component" step) and recorded in the insert
history, which backs the "insert last component" action.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

from digitalux.catalog import CatalogEntry, IndexHolder

log = logging.getLogger("digitalux.insertion")


@dataclass(frozen=True)
class InsertCommand:
    """Opaque instruction for the host: attach this component to the cursor."""

    entry_id: str
    display_name: str
    category: str = ""
    position: tuple[int, int] | None = None     # initial offset, None = host default

    def to_dict(self) -> dict:
        return {
            "entry_id": self.entry_id,
            "name": self.display_name,
            "category": self.category,
            "position": list(self.position) if self.position else None,
        }


class InsertionError(Exception):
    """A catalog entry could not be materialized into an insertable instance."""

    def __init__(self, entry_id: str, reason: str) -> None:
        self.entry_id = entry_id
        self.reason = reason
        super().__init__(f"Cannot insert '{entry_id}': {reason}")


Position = tuple[int, int] | None
Materializer = Callable[[CatalogEntry, Position], InsertCommand]


def catalog_materializer(holder: IndexHolder) -> Materializer:
    """Materialize entries against the *current* index.

    An entry picked from a stale result list whose component disappeared
    in a catalog reload fails here.
    """
    def materialize(entry: CatalogEntry, position: tuple[int, int] | None) -> InsertCommand:
        current = holder.current.get(entry.id)
        if current is None:
            raise LookupError(f"component '{entry.id}' is not in the library")
        return InsertCommand(
            entry_id=current.id,
            display_name=current.display_name,
            category=current.category,
            position=position,
        )
    return materialize


class InsertHistory:
    """Most-recent-last record of inserted components."""

    def __init__(self, maxlen: int = 20) -> None:
        self._items: deque[InsertCommand] = deque(maxlen=maxlen)

    def add(self, command: InsertCommand) -> None:
        self._items.append(command)

    @property
    def last(self) -> InsertCommand | None:
        return self._items[-1] if self._items else None

    def __len__(self) -> int:
        return len(self._items)


class ComponentInserter:
    def __init__(self, materialize: Materializer, history: InsertHistory | None = None) -> None:
        self._materialize = materialize
        self.history = history if history is not None else InsertHistory()

    def insert(self, entry: CatalogEntry, position: tuple[int, int] | None = None) -> InsertCommand:
        """Materialize ``entry`` and record it.  Raises InsertionError."""
        if not entry.is_selectable:
            raise InsertionError(entry.id, "entry is not an insertable component")
        try:
            command = self._materialize(entry, position)
        except (LookupError, ValueError, OSError) as exc:
            log.warning("Insertion of '%s' failed: %s", entry.id, exc)
            raise InsertionError(entry.id, str(exc)) from exc
        self.history.add(command)
        log.info("Inserting component '%s'", entry.id)
        return command

    def insert_last(self) -> InsertCommand | None:
        """Re-issue the most recent insertion, if any."""
        last = self.history.last
        if last is None:
            return None
        self.history.add(last)
        return last
