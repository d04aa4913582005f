"""Component search — ranking, search sessions, the results popup and the two surfaces.

Submodules:
  matcher   Tiered prefix/substring ranking over the catalog index.
  session   Query, results and selection cursor of one search surface.
  popup     Popup open/closed state machine, placement and focus debounce.
  surface   Sidebar and spotlight surfaces: key, pointer, focus and window events.
"""

from .matcher import MatchResult, Tier, rank, unfiltered
from .session import SearchConfig, SearchMode, SearchSession
from .popup import (
    DismissReason, PopupController, PopupGeometry, PopupState, Rect,
    Scheduler, TimerScheduler,
)
from .surface import Key, SearchSurface, SurfaceClosedError

__all__ = [
    # Matcher
    "MatchResult", "Tier", "rank", "unfiltered",
    # Session
    "SearchConfig", "SearchMode", "SearchSession",
    # Popup
    "DismissReason", "PopupController", "PopupGeometry", "PopupState", "Rect",
    "Scheduler", "TimerScheduler",
    # Surface
    "Key", "SearchSurface", "SurfaceClosedError",
]
