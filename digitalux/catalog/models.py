"""Catalog dataclasses — the component library tree and its flattened entries."""

from __future__ import annotations

from dataclasses import dataclass, field


# ── Library tree ───────────────────────────────────────────────────
#
# A catalog node is either a LeafNode (an insertable component) or a
# CategoryNode (a named group of further nodes).  Nothing else is a
# valid node; the index builder rejects any other object.


@dataclass(frozen=True)
class LeafNode:
    id: str                             # stable machine name, e.g. "NAnd"
    display_name: str                   # translated name, e.g. "NAND"
    hidden: bool = False
    unique: bool = True                 # False for a duplicate alias of another entry


@dataclass(eq=False)
class CategoryNode:
    name: str                           # translated group name
    children: list[CatalogNode] = field(default_factory=list)
    hidden: bool = False


CatalogNode = LeafNode | CategoryNode


# ── Flattened index entries ────────────────────────────────────────


@dataclass(frozen=True)
class CatalogEntry:
    """One searchable component, tagged with its immediate parent category."""

    id: str
    display_name: str
    category: str = ""
    is_selectable: bool = True


class CatalogError(Exception):
    """Raised when the catalog tree (or the file holding it) is malformed."""

    def __init__(self, reason: str, path: str = "") -> None:
        self.reason = reason
        self.path = path
        where = f" at '{path}'" if path else ""
        super().__init__(f"Malformed catalog{where}: {reason}")
