"""Catalog serialization — convert entries and index summaries to JSON-safe dicts."""

from __future__ import annotations

from .index import CatalogIndex
from .models import CatalogEntry


def entry_to_dict(entry: CatalogEntry) -> dict:
    return {
        "id": entry.id,
        "name": entry.display_name,
        "category": entry.category,
        "selectable": entry.is_selectable,
    }


def index_to_dict(index: CatalogIndex, include_entries: bool = False) -> dict:
    """Summarize an index for the web API."""
    d: dict = {
        "entry_count": len(index),
        "categories": index.categories(),
    }
    if include_entries:
        d["entries"] = [entry_to_dict(e) for e in index]
    return d
