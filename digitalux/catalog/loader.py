"""Catalog loader — reads the JSON component library into a node tree.

File layout (``digitalux/catalog/data/library.json``, shipped as package data)::

    {
      "name": "Components",
      "children": [
        {"name": "Logic", "translations": {"de": "Logik"}, "children": [
          {"id": "And", "name": "AND"},
          {"id": "NAnd", "name": "NAND"}
        ]}
      ]
    }

A node with a ``children`` list is a category; any other node must carry an
``id`` and is a leaf.  ``hidden`` and ``unique`` are optional booleans.
``translations`` maps a language code to a localized display name.
"""

from __future__ import annotations

import json
from pathlib import Path

from .models import CatalogError, CatalogNode, CategoryNode, LeafNode


CATALOG_DIR = Path(__file__).resolve().parent / "data"
DEFAULT_CATALOG = CATALOG_DIR / "library.json"


# ── Parsing ────────────────────────────────────────────────────────

def _translated(data: dict, language: str | None) -> str:
    if language:
        translations = data.get("translations") or {}
        if language in translations:
            return translations[language]
    return data["name"]


def _parse_node(data: dict, path: str, language: str | None) -> CatalogNode:
    if not isinstance(data, dict):
        raise CatalogError(f"expected an object, got {type(data).__name__}", path)

    try:
        if "children" in data:
            children = data["children"]
            if not isinstance(children, list):
                raise CatalogError("'children' must be a list", path)
            return CategoryNode(
                name=_translated(data, language),
                hidden=bool(data.get("hidden", False)),
                children=[
                    _parse_node(child, f"{path}.children[{i}]", language)
                    for i, child in enumerate(children)
                ],
            )
        node_id = data["id"]
        if not isinstance(node_id, str) or not node_id:
            raise CatalogError("leaf 'id' must be a non-empty string", path)
        return LeafNode(
            id=node_id,
            display_name=_translated(data, language) if "name" in data else node_id,
            hidden=bool(data.get("hidden", False)),
            unique=bool(data.get("unique", True)),
        )
    except KeyError as exc:
        raise CatalogError(f"missing field {exc}", path) from None


# ── Public API ─────────────────────────────────────────────────────

def parse_catalog(data: dict, language: str | None = None) -> CategoryNode:
    """Turn an already-decoded catalog document into a node tree."""
    try:
        root = _parse_node(data, "root", language)
    except RecursionError:
        raise CatalogError("catalog nested too deeply", "root") from None
    if not isinstance(root, CategoryNode):
        raise CatalogError("root node must be a category", "root")
    return root


def load_catalog(path: Path | None = None, language: str | None = None) -> CategoryNode:
    """Read and parse a catalog file.  Raises CatalogError on any failure."""
    p = path or DEFAULT_CATALOG
    try:
        raw = json.loads(Path(p).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise CatalogError(f"parse error: {exc}", str(p)) from exc
    except RecursionError:
        raise CatalogError("catalog nested too deeply", str(p)) from None
    except OSError as exc:
        raise CatalogError(f"read error: {exc}", str(p)) from exc
    return parse_catalog(raw, language=language)
