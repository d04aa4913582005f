"""Catalog index — flattens the library tree into a searchable entry list.

Traversal is depth-first in catalog order.  A leaf is kept iff it is not
hidden and is unique (not a duplicate alias).  Hidden categories are
skipped together with everything below them.  Each kept entry is tagged
with the translated name of its *immediate* parent category; labels are
never accumulated into full paths.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from .models import CatalogEntry, CatalogError, CatalogNode, CategoryNode, LeafNode

log = logging.getLogger("digitalux.catalog")


class CatalogIndex:
    """Immutable, ordered list of selectable catalog entries."""

    def __init__(self, entries: list[CatalogEntry] | tuple[CatalogEntry, ...] = ()) -> None:
        self._entries = tuple(entries)
        self._by_id = {e.id: e for e in self._entries}
        # Lower-cased (display_name, id) pairs, aligned with _entries.
        self._keys = tuple((e.display_name.lower(), e.id.lower()) for e in self._entries)

    @classmethod
    def build(cls, root: CatalogNode | None) -> CatalogIndex:
        return build_index(root)

    @property
    def entries(self) -> tuple[CatalogEntry, ...]:
        return self._entries

    def search_keys(self) -> Iterator[tuple[CatalogEntry, str, str]]:
        """Yield ``(entry, lower_name, lower_id)`` in catalog order."""
        for entry, (name, ident) in zip(self._entries, self._keys):
            yield entry, name, ident

    def get(self, entry_id: str) -> CatalogEntry | None:
        return self._by_id.get(entry_id)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._by_id

    def category_of(self, entry: CatalogEntry) -> str:
        """Category label shown next to a result (empty for top-level leaves)."""
        known = self._by_id.get(entry.id)
        return known.category if known else ""

    def categories(self) -> list[str]:
        """Distinct non-empty category labels, in first-seen order."""
        seen: dict[str, None] = {}
        for e in self._entries:
            if e.category:
                seen.setdefault(e.category)
        return list(seen)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries)


# ── Flattening ─────────────────────────────────────────────────────

class _Frame:
    """A category being walked and the position of its next child."""

    __slots__ = ("category", "next")

    def __init__(self, category: CategoryNode) -> None:
        self.category = category
        self.next = 0


def _path(stack: list[_Frame]) -> str:
    # Each frame has already advanced past the child being visited.
    return "".join(f"/{f.category.name}[{f.next - 1}]" for f in stack)


def _collect(root: CatalogNode, out: list[CatalogEntry], skipped: dict[str, int]) -> None:
    """Depth-first walk with an explicit stack, so nesting depth is unbounded."""
    stack: list[_Frame] = []
    on_path: set[int] = set()

    def visit(node: CatalogNode, parent_category: str) -> None:
        match node:
            case LeafNode(hidden=True):
                skipped["hidden"] += 1
            case LeafNode(unique=False):
                skipped["duplicate"] += 1
            case LeafNode():
                out.append(CatalogEntry(
                    id=node.id,
                    display_name=node.display_name,
                    category=parent_category,
                    is_selectable=True,
                ))
            case CategoryNode():
                if id(node) in on_path:
                    raise CatalogError(f"cycle through category '{node.name}'", _path(stack))
                on_path.add(id(node))
                stack.append(_Frame(node))
            case None:
                raise CatalogError("null node", _path(stack))
            case _:
                raise CatalogError(f"unexpected node type {type(node).__name__}", _path(stack))

    visit(root, "")
    while stack:
        frame = stack[-1]
        children = frame.category.children
        if frame.next >= len(children):
            stack.pop()
            on_path.discard(id(frame.category))
            continue
        child = children[frame.next]
        frame.next += 1
        if isinstance(child, CategoryNode) and child.hidden:
            skipped["hidden"] += 1
            continue
        visit(child, frame.category.name)


def build_index(root: CatalogNode | None) -> CatalogIndex:
    """Flatten a catalog tree.  Raises CatalogError for a null or cyclic root."""
    if root is None:
        raise CatalogError("catalog root is null")

    entries: list[CatalogEntry] = []
    skipped = {"hidden": 0, "duplicate": 0}
    _collect(root, entries, skipped)

    # Ids are unique: a repeated id that was not flagged as an alias keeps
    # its first (catalog-order) occurrence.
    unique_entries: list[CatalogEntry] = []
    seen: set[str] = set()
    for e in entries:
        if e.id in seen:
            log.warning("Duplicate component id '%s' in category '%s' ignored", e.id, e.category)
            skipped["duplicate"] += 1
            continue
        seen.add(e.id)
        unique_entries.append(e)
    entries = unique_entries

    log.info(
        "Catalog index built: %d entries (%d hidden, %d aliases skipped)",
        len(entries), skipped["hidden"], skipped["duplicate"],
    )
    return CatalogIndex(entries)


class IndexHolder:
    """Holds the current index; a rebuild swaps in a complete new index.

    Readers take ``holder.current`` once per search and keep using that
    snapshot, so a reload never exposes a half-built index.
    """

    def __init__(self, index: CatalogIndex | None = None) -> None:
        self._index = index if index is not None else CatalogIndex()

    @property
    def current(self) -> CatalogIndex:
        return self._index

    def rebuild(self, root: CatalogNode | None) -> CatalogIndex:
        index = build_index(root)
        self._index = index
        return index
