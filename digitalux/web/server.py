"""
FastAPI host surface — exposes the component search surfaces and the
shortcut dialog to a browser front end.

State (catalog index, shortcut registry, the two search surfaces and the
shortcut dialog) is built once per app in ``create_app`` and guarded by a
single lock, so request handlers and the focus-debounce timer see it one
event at a time.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from digitalux.catalog import CatalogError, IndexHolder, build_index, index_to_dict, load_catalog
from digitalux.config import Settings, load_settings
from digitalux.insertion import ComponentInserter, InsertionError, catalog_materializer
from digitalux.search import (
    Rect, Scheduler, SearchMode, SearchSurface, SurfaceClosedError, TimerScheduler,
)
from digitalux.shortcuts import (
    BindingError, KeyBinding, KeyEvent, ShortcutDialog, ShortcutRegistry, ShortcutSaveError,
    UnknownActionError, create_registry,
)

log = logging.getLogger("digitalux.server")


# ── App state ──────────────────────────────────────────────────────

@dataclass
class UxState:
    settings: Settings
    lock: threading.RLock
    holder: IndexHolder
    registry: ShortcutRegistry
    inserter: ComponentInserter
    surfaces: dict[str, SearchSurface]
    dialog: ShortcutDialog | None = None


def _state(request: Request) -> UxState:
    return request.app.state.ux


def _surface(state: UxState, variant: str) -> SearchSurface:
    surface = state.surfaces.get(variant)
    if surface is None:
        raise HTTPException(404, f"Unknown search surface '{variant}'.")
    return surface


def _dialog(state: UxState) -> ShortcutDialog:
    if state.dialog is None:
        state.dialog = ShortcutDialog(state.registry, dark_mode=state.settings.dark_mode)
    return state.dialog


# ── Models ─────────────────────────────────────────────────────────

class RectModel(BaseModel):
    x: int
    y: int
    width: int
    height: int

    def to_rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)


class OpenRequest(BaseModel):
    anchor: RectModel | None = None


class QueryRequest(BaseModel):
    text: str


class KeyRequest(BaseModel):
    key: str


class RowRequest(BaseModel):
    index: int


class FocusRequest(BaseModel):
    gained: bool
    to_popup: bool = False
    anchor: RectModel | None = None


class WindowEventRequest(BaseModel):
    event: str      # "moved" | "resized" | "deactivated" | "iconified"


class BindingRequest(BaseModel):
    binding: str


class KeyEventRequest(BaseModel):
    key: str
    ctrl: bool = False
    alt: bool = False
    shift: bool = False
    meta: bool = False


# ── Routes ─────────────────────────────────────────────────────────

router = APIRouter(prefix="/api")


def _view(surface: SearchSurface, inserted=None) -> dict:
    view = surface.view()
    view["inserted"] = inserted.to_dict() if inserted else None
    return view


@router.get("/catalog")
def get_catalog(request: Request, entries: bool = False):
    state = _state(request)
    return index_to_dict(state.holder.current, include_entries=entries)


@router.post("/catalog/reload")
def reload_catalog(request: Request):
    """Re-read the catalog file and swap in the new index."""
    state = _state(request)
    with state.lock:
        try:
            root = load_catalog(state.settings.catalog_path, state.settings.language)
            index = state.holder.rebuild(root)
        except CatalogError as exc:
            log.error("Catalog reload failed: %s", exc)
            raise HTTPException(500, str(exc))
    return {"status": "ok", "entry_count": len(index)}


@router.get("/search/{variant}")
def get_search(request: Request, variant: str):
    state = _state(request)
    with state.lock:
        return _view(_surface(state, variant))


@router.post("/search/{variant}/open")
def open_search(request: Request, variant: str, req: OpenRequest | None = None):
    """Spotlight: invoke the popup.  Sidebar: the field gained focus."""
    state = _state(request)
    with state.lock:
        surface = _surface(state, variant)
        surface.invoke(req.anchor.to_rect() if req and req.anchor else None)
        return _view(surface)


@router.post("/search/{variant}/close")
def close_search(request: Request, variant: str):
    state = _state(request)
    with state.lock:
        surface = _surface(state, variant)
        surface.close()
        return _view(surface)


@router.post("/search/{variant}/query")
def update_query(request: Request, variant: str, req: QueryRequest):
    state = _state(request)
    with state.lock:
        surface = _surface(state, variant)
        try:
            surface.type_text(req.text)
        except SurfaceClosedError as exc:
            raise HTTPException(409, str(exc))
        return _view(surface)


@router.post("/search/{variant}/clear")
def clear_query(request: Request, variant: str):
    state = _state(request)
    with state.lock:
        surface = _surface(state, variant)
        try:
            surface.clear()
        except SurfaceClosedError as exc:
            raise HTTPException(409, str(exc))
        return _view(surface)


@router.post("/search/{variant}/key")
def press_key(request: Request, variant: str, req: KeyRequest):
    state = _state(request)
    with state.lock:
        surface = _surface(state, variant)
        try:
            inserted = surface.press_key(req.key)
        except ValueError as exc:
            raise HTTPException(400, str(exc))
        except InsertionError as exc:
            raise HTTPException(409, str(exc))
        return _view(surface, inserted)


@router.post("/search/{variant}/hover")
def hover_row(request: Request, variant: str, req: RowRequest):
    state = _state(request)
    with state.lock:
        surface = _surface(state, variant)
        surface.hover(req.index)
        return _view(surface)


@router.post("/search/{variant}/click")
def click_row(request: Request, variant: str, req: RowRequest):
    state = _state(request)
    with state.lock:
        surface = _surface(state, variant)
        try:
            inserted = surface.click(req.index)
        except InsertionError as exc:
            raise HTTPException(409, str(exc))
        return _view(surface, inserted)


@router.post("/search/{variant}/focus")
def focus_change(request: Request, variant: str, req: FocusRequest):
    state = _state(request)
    with state.lock:
        surface = _surface(state, variant)
        if req.gained:
            surface.focus_gained(req.anchor.to_rect() if req.anchor else None)
        else:
            surface.focus_lost(to_popup=req.to_popup)
        return _view(surface)


@router.post("/window")
def window_event(request: Request, req: WindowEventRequest):
    """Host window moved / resized / deactivated: every open popup closes."""
    state = _state(request)
    with state.lock:
        try:
            for surface in state.surfaces.values():
                surface.window_event(req.event)
        except ValueError as exc:
            raise HTTPException(400, str(exc))
        return {name: _view(s) for name, s in state.surfaces.items()}


@router.post("/insert/last")
def insert_last(request: Request):
    state = _state(request)
    with state.lock:
        command = state.inserter.insert_last()
        if command is None:
            raise HTTPException(404, "Nothing inserted yet.")
        return command.to_dict()


# ── Shortcuts ──────────────────────────────────────────────────────

@router.get("/shortcuts")
def list_shortcuts(request: Request):
    state = _state(request)
    with state.lock:
        return _dialog(state).to_dict()


@router.get("/shortcuts/{action_id}")
def get_shortcut(request: Request, action_id: str):
    """Binding lookup for the host's action setup."""
    state = _state(request)
    with state.lock:
        try:
            binding = state.registry.get_binding(action_id)
        except UnknownActionError as exc:
            raise HTTPException(404, str(exc))
        return {
            "action_id": action_id,
            "binding": binding,
            "accelerator": KeyBinding.parse(binding).to_accelerator(),
        }


@router.put("/shortcuts/{action_id}")
def set_shortcut(request: Request, action_id: str, req: BindingRequest):
    state = _state(request)
    with state.lock:
        dialog = _dialog(state)
        try:
            binding = dialog.set_binding(action_id, req.binding)
        except UnknownActionError as exc:
            raise HTTPException(404, str(exc))
        except BindingError as exc:
            raise HTTPException(400, str(exc))
        return {"action_id": action_id, "binding": binding, "modified": dialog.modified}


@router.post("/shortcuts/{action_id}/capture")
def begin_capture(request: Request, action_id: str):
    state = _state(request)
    with state.lock:
        try:
            prompt = _dialog(state).begin_edit(action_id)
        except UnknownActionError as exc:
            raise HTTPException(404, str(exc))
        return {"action_id": action_id, "prompt": prompt}


@router.post("/shortcuts/capture/key")
def capture_key(request: Request, req: KeyEventRequest):
    state = _state(request)
    with state.lock:
        dialog = _dialog(state)
        outcome = dialog.feed_key(KeyEvent(req.key, req.ctrl, req.alt, req.shift, req.meta))
        return {
            "result": outcome.result.value,
            "action_id": outcome.action_id,
            "binding": outcome.binding.canonical() if outcome.binding else None,
            "message": outcome.message,
            "capturing": dialog.capture.awaiting,
        }


@router.post("/shortcuts/capture/cancel")
def cancel_capture(request: Request):
    state = _state(request)
    with state.lock:
        _dialog(state).cancel_edit()
        return {"status": "ok"}


@router.post("/shortcuts/reset")
def reset_shortcuts(request: Request):
    state = _state(request)
    with state.lock:
        try:
            message = _dialog(state).reset_all()
        except ShortcutSaveError as exc:
            raise HTTPException(500, str(exc))
        return {"status": "ok", "message": message}


@router.post("/shortcuts/save")
def save_shortcuts(request: Request):
    state = _state(request)
    with state.lock:
        dialog = _dialog(state)
        try:
            state.registry.save()
        except ShortcutSaveError as exc:
            raise HTTPException(500, str(exc))
        dialog.modified = False
        return {"status": "ok", "overrides": state.registry.overrides}


@router.post("/shortcuts/close")
def close_shortcuts(request: Request):
    """Close the dialog; saves first if anything was edited."""
    state = _state(request)
    with state.lock:
        dialog = _dialog(state)
        try:
            saved = dialog.close()
        except ShortcutSaveError as exc:
            raise HTTPException(500, str(exc))
        state.dialog = None
        return {"status": "ok", "saved": saved}


# ── App factory ────────────────────────────────────────────────────

def create_app(settings: Settings | None = None, scheduler: Scheduler | None = None) -> FastAPI:
    s = settings or load_settings()
    lock = threading.RLock()

    holder = IndexHolder(build_index(load_catalog(s.catalog_path, s.language)))
    registry = create_registry(s.shortcuts_path)
    inserter = ComponentInserter(catalog_materializer(holder))
    sched = scheduler or TimerScheduler(lock)
    surfaces = {
        mode.value: SearchSurface.create(mode, holder, inserter, settings=s, scheduler=sched)
        for mode in SearchMode
    }

    app = FastAPI(title="digitalux")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.ux = UxState(
        settings=s,
        lock=lock,
        holder=holder,
        registry=registry,
        inserter=inserter,
        surfaces=surfaces,
    )
    app.include_router(router)
    log.info("digitalux ready: %d components, %d shortcuts",
             len(holder.current), len(registry.entries))
    return app


# ── Entry point ────────────────────────────────────────────────────

def main(host: str = "127.0.0.1", port: int = 8000):
    import uvicorn
    uvicorn.run("digitalux.web.server:create_app", host=host, port=port, reload=False, factory=True)


if __name__ == "__main__":
    main()
