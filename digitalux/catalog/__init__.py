"""Component catalog — load the library tree and flatten it into a searchable index."""

from .models import CatalogEntry, CatalogError, CatalogNode, CategoryNode, LeafNode
from .loader import load_catalog, parse_catalog, CATALOG_DIR, DEFAULT_CATALOG
from .index import CatalogIndex, IndexHolder, build_index
from .serialization import entry_to_dict, index_to_dict

__all__ = [
    # Models
    "CatalogEntry", "CatalogError", "CatalogNode", "CategoryNode", "LeafNode",
    # Loader
    "load_catalog", "parse_catalog", "CATALOG_DIR", "DEFAULT_CATALOG",
    # Index
    "CatalogIndex", "IndexHolder", "build_index",
    # Serialization
    "entry_to_dict", "index_to_dict",
]
