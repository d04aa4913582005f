"""
Tests for the FastAPI host surface.

Runs against the bundled component library with a temporary shortcut file
and a manual scheduler, so focus-loss debouncing is driven by the test.

Run: python -m pytest tests/test_server.py -v
"""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from digitalux.config import Settings
from digitalux.web.server import create_app
from tests.logic_catalog_fixture import ManualScheduler


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def shortcuts_path(tmp_path):
    return tmp_path / "shortcuts.cfg"


@pytest.fixture
def client(shortcuts_path, scheduler):
    app = create_app(Settings(shortcuts_path=shortcuts_path), scheduler=scheduler)
    return TestClient(app)


ANCHOR = {"x": 0, "y": 0, "width": 1280, "height": 800}
FIELD = {"x": 100, "y": 50, "width": 200, "height": 24}


class TestCatalogRoutes:

    def test_summary(self, client):
        resp = client.get("/api/catalog")
        assert resp.status_code == 200
        data = resp.json()
        assert data["entry_count"] > 0
        assert data["categories"][0] == "Logic"
        assert "entries" not in data

    def test_entries(self, client):
        entries = client.get("/api/catalog", params={"entries": True}).json()["entries"]
        ids = [e["id"] for e in entries]
        assert ids[:2] == ["And", "NAnd"]
        assert "GraphicsRAM" not in ids
        assert ids.count("NAnd") == 1

    def test_reload(self, client):
        resp = client.post("/api/catalog/reload")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    def test_reload_failure(self, tmp_path, shortcuts_path, scheduler):
        lib = tmp_path / "lib.json"
        lib.write_text(json.dumps({"name": "root", "children": [{"id": "And", "name": "AND"}]}), encoding="utf-8")
        client = TestClient(create_app(Settings(catalog_path=lib, shortcuts_path=shortcuts_path), scheduler=scheduler))
        lib.write_text("{broken", encoding="utf-8")
        resp = client.post("/api/catalog/reload")
        assert resp.status_code == 500
        # The previous index is still served
        assert client.get("/api/catalog").json()["entry_count"] == 1


class TestSidebarRoutes:

    def test_query_and_confirm(self, client):
        client.post("/api/search/sidebar/focus", json={"gained": True, "anchor": FIELD})
        view = client.post("/api/search/sidebar/query", json={"text": "nand"}).json()
        assert [r["id"] for r in view["results"]] == ["NAnd"]
        assert view["cursor"] == 0
        assert view["popup"]["state"] == "open"
        assert view["popup"]["bounds"]["y"] == 76

        view = client.post("/api/search/sidebar/key", json={"key": "Enter"}).json()
        assert view["inserted"]["entry_id"] == "NAnd"
        assert view["inserted"]["position"] is None
        assert view["query"] == ""
        assert view["popup"]["state"] == "closed"
        assert view["popup"]["last_dismiss"] == "confirmed"

    def test_bad_key(self, client):
        resp = client.post("/api/search/sidebar/key", json={"key": "Tab"})
        assert resp.status_code == 400

    def test_unknown_surface(self, client):
        assert client.get("/api/search/floating").status_code == 404

    def test_focus_loss_debounced(self, client, scheduler):
        client.post("/api/search/sidebar/query", json={"text": "and"})
        view = client.post("/api/search/sidebar/focus", json={"gained": False}).json()
        assert view["popup"]["state"] == "open"
        scheduler.run_pending()
        view = client.get("/api/search/sidebar").json()
        assert view["popup"]["state"] == "closed"
        assert view["popup"]["last_dismiss"] == "focus_lost"

    def test_hover_and_click(self, client):
        client.post("/api/search/sidebar/query", json={"text": "and"})
        view = client.post("/api/search/sidebar/hover", json={"index": 1}).json()
        assert view["cursor"] == 1
        view = client.post("/api/search/sidebar/click", json={"index": 0}).json()
        assert view["inserted"]["entry_id"] == "And"

    def test_clear(self, client):
        client.post("/api/search/sidebar/query", json={"text": "and"})
        view = client.post("/api/search/sidebar/clear").json()
        assert view["query"] == ""
        assert view["popup"]["last_dismiss"] == "cleared"


class TestSpotlightRoutes:

    def test_query_before_open(self, client):
        assert client.post("/api/search/spotlight/query", json={"text": "and"}).status_code == 409

    def test_open_lists_entries(self, client):
        view = client.post("/api/search/spotlight/open", json={"anchor": ANCHOR}).json()
        assert view["active"] is True
        assert len(view["results"]) == 10
        assert all(r["tier"] == "unfiltered" for r in view["results"])
        assert view["popup"]["bounds"] == {"x": 400, "y": 80, "width": 480, "height": 438}

    def test_open_without_body(self, client):
        view = client.post("/api/search/spotlight/open").json()
        assert view["active"] is True
        assert view["popup"]["bounds"] is None

    def test_confirm_closes_surface(self, client):
        client.post("/api/search/spotlight/open", json={"anchor": ANCHOR})
        client.post("/api/search/spotlight/query", json={"text": "nand"})
        view = client.post("/api/search/spotlight/key", json={"key": "Enter"}).json()
        assert view["inserted"]["entry_id"] == "NAnd"
        assert view["inserted"]["position"] == [10, 10]
        assert view["active"] is False

    def test_escape(self, client):
        client.post("/api/search/spotlight/open", json={"anchor": ANCHOR})
        view = client.post("/api/search/spotlight/key", json={"key": "Escape"}).json()
        assert view["active"] is False
        assert view["popup"]["last_dismiss"] == "dismiss_key"

    def test_close(self, client):
        client.post("/api/search/spotlight/open", json={"anchor": ANCHOR})
        view = client.post("/api/search/spotlight/close").json()
        assert view["active"] is False


class TestWindowAndInsertRoutes:

    def test_window_event_closes_all(self, client):
        client.post("/api/search/spotlight/open", json={"anchor": ANCHOR})
        client.post("/api/search/sidebar/query", json={"text": "and"})
        views = client.post("/api/window", json={"event": "moved"}).json()
        assert views["sidebar"]["popup"]["state"] == "closed"
        assert views["spotlight"]["active"] is False

    def test_bad_window_event(self, client):
        assert client.post("/api/window", json={"event": "exploded"}).status_code == 400

    def test_insert_last(self, client):
        assert client.post("/api/insert/last").status_code == 404
        client.post("/api/search/sidebar/query", json={"text": "nand"})
        client.post("/api/search/sidebar/key", json={"key": "Enter"})
        resp = client.post("/api/insert/last")
        assert resp.status_code == 200
        assert resp.json()["entry_id"] == "NAnd"


class TestShortcutRoutes:

    def test_list(self, client):
        data = client.get("/api/shortcuts").json()
        assert data["title"] == "Keyboard Shortcuts"
        assert len(data["rows"]) == 32

    def test_get_binding(self, client):
        data = client.get("/api/shortcuts/view.zoomIn").json()
        assert data == {"action_id": "view.zoomIn", "binding": "Ctrl+Plus", "accelerator": "ctrl PLUS"}

    def test_get_unknown(self, client):
        assert client.get("/api/shortcuts/nope").status_code == 404

    def test_set_and_close_saves(self, client, shortcuts_path):
        resp = client.put("/api/shortcuts/edit.undo", json={"binding": "shift+ctrl+z"})
        assert resp.status_code == 200
        assert resp.json()["binding"] == "Ctrl+Shift+Z"
        assert resp.json()["modified"] is True

        resp = client.post("/api/shortcuts/close")
        assert resp.json() == {"status": "ok", "saved": True}
        assert "edit.undo=Ctrl+Shift+Z" in shortcuts_path.read_text(encoding="utf-8")

    def test_set_invalid(self, client):
        assert client.put("/api/shortcuts/edit.undo", json={"binding": "Ctrl+"}).status_code == 400
        assert client.put("/api/shortcuts/nope", json={"binding": "Ctrl+Q"}).status_code == 404

    def test_capture_flow(self, client):
        data = client.post("/api/shortcuts/file.save/capture").json()
        assert data["prompt"] == "Press a key..."

        data = client.post("/api/shortcuts/capture/key", json={"key": "Shift", "shift": True}).json()
        assert data["result"] == "continue"
        assert data["capturing"] is True

        data = client.post("/api/shortcuts/capture/key", json={"key": "s", "ctrl": True, "alt": True}).json()
        assert data["result"] == "commit"
        assert data["binding"] == "Ctrl+Alt+S"
        assert data["capturing"] is False
        assert client.get("/api/shortcuts/file.save").json()["binding"] == "Ctrl+Alt+S"

    def test_capture_cancel(self, client):
        client.post("/api/shortcuts/file.save/capture")
        client.post("/api/shortcuts/capture/cancel")
        data = client.post("/api/shortcuts/capture/key", json={"key": "q"}).json()
        assert data["result"] == "ignored"

    def test_reset(self, client, shortcuts_path):
        client.put("/api/shortcuts/edit.undo", json={"binding": "Ctrl+Shift+Z"})
        data = client.post("/api/shortcuts/reset").json()
        assert data["message"].startswith("All shortcuts reset to defaults.")
        assert client.get("/api/shortcuts/edit.undo").json()["binding"] == "Ctrl+Z"
        assert shortcuts_path.exists()

    def test_save(self, client, shortcuts_path):
        client.put("/api/shortcuts/edit.redo", json={"binding": "Ctrl+Shift+Z"})
        data = client.post("/api/shortcuts/save").json()
        assert data["overrides"] == {"edit.redo": "Ctrl+Shift+Z"}
        assert "edit.redo=Ctrl+Shift+Z" in shortcuts_path.read_text(encoding="utf-8")
