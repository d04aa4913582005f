"""Matcher / ranker — tiered, case-insensitive substring search over the index.

Ranking:
  Tier PREFIX     display name or id starts with the query
  Tier SUBSTRING  display name or id contains the query, neither starts with it

Within a tier results keep catalog order.  The PREFIX tier is exhausted
(up to ``limit``) before SUBSTRING contributes, and the two tiers are
disjoint, so an entry never appears twice.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from digitalux.catalog import CatalogEntry, CatalogIndex


class Tier(IntEnum):
    UNFILTERED = 0      # idle "all entries" listing, no query
    PREFIX = 1
    SUBSTRING = 2


@dataclass(frozen=True)
class MatchResult:
    entry: CatalogEntry
    tier: Tier


def unfiltered(index: CatalogIndex, limit: int) -> list[MatchResult]:
    """First ``limit`` entries in catalog order (the idle spotlight list)."""
    if limit <= 0:
        return []
    return [MatchResult(e, Tier.UNFILTERED) for e in index.entries[:limit]]


def rank(query: str, index: CatalogIndex, limit: int, all_entries: bool = False) -> list[MatchResult]:
    """Return at most ``limit`` ranked matches for ``query``.

    An empty query yields no results unless ``all_entries`` is set, in
    which case the unfiltered catalog listing is returned instead.
    """
    needle = query.lower()
    if not needle:
        return unfiltered(index, limit) if all_entries else []
    if limit <= 0:
        return []

    results: list[MatchResult] = []

    # First pass: names or ids that START with the query
    for entry, name, ident in index.search_keys():
        if len(results) >= limit:
            return results
        if name.startswith(needle) or ident.startswith(needle):
            results.append(MatchResult(entry, Tier.PREFIX))

    # Second pass: names or ids that CONTAIN the query but start with neither
    for entry, name, ident in index.search_keys():
        if len(results) >= limit:
            break
        if name.startswith(needle) or ident.startswith(needle):
            continue
        if needle in name or needle in ident:
            results.append(MatchResult(entry, Tier.SUBSTRING))

    return results
