"""Tests for the popup controller: placement, state transitions, focus debounce."""

from __future__ import annotations

import threading
import time
import unittest

import pytest

from digitalux.config import Settings
from digitalux.insertion import ComponentInserter, catalog_materializer
from digitalux.search import (
    DismissReason, PopupController, PopupGeometry, PopupState, Rect, SearchMode, SearchSurface,
    TimerScheduler,
)
from tests.logic_catalog_fixture import HOST_WINDOW, SIDEBAR_FIELD, ManualScheduler, make_holder


class TestGeometry(unittest.TestCase):

    def setUp(self):
        self.sidebar = PopupGeometry.for_mode(SearchMode.SIDEBAR)
        self.spotlight = PopupGeometry.for_mode(SearchMode.SPOTLIGHT)

    def test_sidebar_below_field(self):
        self.assertEqual(self.sidebar.bounds(SIDEBAR_FIELD, 3), Rect(96, 76, 260, 106))

    def test_sidebar_wide_field(self):
        wide = Rect(0, 0, 300, 24)
        self.assertEqual(self.sidebar.bounds(wide, 1).width, 330)

    def test_sidebar_height_capped(self):
        self.assertEqual(self.sidebar.bounds(SIDEBAR_FIELD, 40).height, 12 * 34 + 4)

    def test_spotlight_centred(self):
        self.assertEqual(self.spotlight.bounds(HOST_WINDOW, 10), Rect(400, 80, 480, 52 + 380 + 6))

    def test_spotlight_no_results_row(self):
        self.assertEqual(self.spotlight.bounds(HOST_WINDOW, 0).height, 52 + 38)

    def test_spotlight_offset_window(self):
        window = Rect(200, 100, 1000, 700)
        bounds = self.spotlight.bounds(window, 2)
        self.assertEqual((bounds.x, bounds.y), (460, 180))

    def test_settings_override(self):
        geometry = PopupGeometry.for_mode(SearchMode.SIDEBAR, Settings(sidebar_row_height=20))
        self.assertEqual(geometry.bounds(SIDEBAR_FIELD, 2).height, 44)


class TestPopupController(unittest.TestCase):

    def setUp(self):
        self.scheduler = ManualScheduler()
        self.popup = PopupController(
            PopupGeometry.for_mode(SearchMode.SIDEBAR), scheduler=self.scheduler,
        )
        self.closed_with: list[DismissReason] = []
        self.popup.on_close = self.closed_with.append

    def test_starts_closed(self):
        self.assertEqual(self.popup.state, PopupState.CLOSED)
        self.assertIsNone(self.popup.bounds)

    def test_never_focusable(self):
        self.assertFalse(self.popup.focusable)
        self.popup.open(2, SIDEBAR_FIELD)
        self.assertFalse(self.popup.focusable)

    def test_open_and_close(self):
        bounds = self.popup.open(2, SIDEBAR_FIELD)
        self.assertTrue(self.popup.is_open)
        self.assertEqual(bounds, self.popup.bounds)
        self.assertTrue(self.popup.close(DismissReason.DISMISS_KEY))
        self.assertEqual(self.popup.state, PopupState.CLOSED)
        self.assertEqual(self.popup.last_dismiss, DismissReason.DISMISS_KEY)
        self.assertEqual(self.closed_with, [DismissReason.DISMISS_KEY])

    def test_close_when_closed_is_noop(self):
        self.assertFalse(self.popup.close(DismissReason.DISMISS_KEY))
        self.assertEqual(self.closed_with, [])

    def test_open_without_anchor_is_unplaced(self):
        self.assertIsNone(self.popup.open(3))
        self.assertTrue(self.popup.is_open)

    def test_anchor_remembered(self):
        self.popup.open(1, SIDEBAR_FIELD)
        self.popup.close(DismissReason.QUERY_EMPTY)
        self.assertEqual(self.popup.open(2), Rect(96, 76, 260, 72))

    def test_update_resizes(self):
        self.popup.open(1, SIDEBAR_FIELD)
        self.assertEqual(self.popup.update(5).height, 5 * 34 + 4)

    def test_update_when_closed(self):
        self.assertIsNone(self.popup.update(5))
        self.assertFalse(self.popup.is_open)

    def test_focus_lost_closes_after_debounce(self):
        self.popup.open(2, SIDEBAR_FIELD)
        self.popup.on_focus_lost(lambda: False)
        self.assertTrue(self.popup.is_open)
        self.assertEqual(self.scheduler.handles[0].delay, 0.2)
        self.scheduler.run_pending()
        self.assertFalse(self.popup.is_open)
        self.assertEqual(self.popup.last_dismiss, DismissReason.FOCUS_LOST)

    def test_focus_returned_keeps_open(self):
        self.popup.open(2, SIDEBAR_FIELD)
        self.popup.on_focus_lost(lambda: True)
        self.scheduler.run_pending()
        self.assertTrue(self.popup.is_open)
        self.assertFalse(self.popup.has_pending_focus_check)

    def test_cancel_pending(self):
        self.popup.open(2, SIDEBAR_FIELD)
        self.popup.on_focus_lost(lambda: False)
        self.popup.cancel_pending()
        self.assertEqual(self.scheduler.pending, [])
        self.scheduler.run_pending()
        self.assertTrue(self.popup.is_open)

    def test_close_cancels_pending(self):
        self.popup.open(2, SIDEBAR_FIELD)
        self.popup.on_focus_lost(lambda: False)
        self.popup.close(DismissReason.CONFIRMED)
        self.assertFalse(self.popup.has_pending_focus_check)
        self.assertEqual(self.scheduler.pending, [])

    def test_repeated_focus_loss_single_check(self):
        self.popup.open(2, SIDEBAR_FIELD)
        self.popup.on_focus_lost(lambda: False)
        self.popup.on_focus_lost(lambda: False)
        self.assertEqual(len(self.scheduler.pending), 1)
        self.scheduler.run_pending()
        self.assertEqual(self.closed_with, [DismissReason.FOCUS_LOST])

    def test_focus_lost_while_closed(self):
        self.popup.on_focus_lost(lambda: False)
        self.assertEqual(self.scheduler.handles, [])

    def test_window_events(self):
        for event, reason in (
            ("moved", DismissReason.WINDOW_MOVED),
            ("resized", DismissReason.WINDOW_RESIZED),
            ("deactivated", DismissReason.WINDOW_DEACTIVATED),
            ("iconified", DismissReason.WINDOW_ICONIFIED),
        ):
            self.popup.open(1, SIDEBAR_FIELD)
            self.assertTrue(self.popup.on_window_event(event))
            self.assertEqual(self.popup.last_dismiss, reason)

    def test_unknown_window_event(self):
        with self.assertRaises(ValueError):
            self.popup.on_window_event("exploded")


class TestTimerScheduler:

    def test_runs_callback(self):
        fired = threading.Event()
        TimerScheduler(threading.RLock()).call_later(0.01, fired.set)
        assert fired.wait(2.0)

    def test_cancel(self):
        fired = threading.Event()
        timer = TimerScheduler(threading.RLock()).call_later(0.5, fired.set)
        timer.cancel()
        assert not fired.wait(0.7)

    def test_runs_under_lock(self):
        lock = threading.RLock()
        held = []
        done = threading.Event()

        def callback():
            # RLock exposes no public "is held"; a non-blocking acquire from
            # another thread would fail while the callback holds it.
            held.append(_locked_elsewhere(lock))
            done.set()

        TimerScheduler(lock).call_later(0.01, callback)
        assert done.wait(2.0)
        assert held == [True]

    def test_lock_required(self):
        with pytest.raises(TypeError):
            TimerScheduler()

    def test_scheduler_required(self):
        geometry = PopupGeometry.for_mode(SearchMode.SIDEBAR)
        with pytest.raises(TypeError):
            PopupController(geometry)
        with pytest.raises(TypeError):
            SearchSurface.create(SearchMode.SIDEBAR, make_holder(), ComponentInserter(lambda e, p: None))

    def test_focus_loss_close_waits_for_lock(self):
        lock = threading.RLock()
        holder = make_holder()
        surface = SearchSurface.create(
            SearchMode.SIDEBAR, holder, ComponentInserter(catalog_materializer(holder)),
            scheduler=TimerScheduler(lock), settings=Settings(focus_debounce_s=0.01),
        )
        closed_on: list[threading.Thread] = []
        surface.popup.on_close = lambda reason: closed_on.append(threading.current_thread())

        with lock:
            surface.focus_gained(SIDEBAR_FIELD)
            surface.type_text("and")
            surface.focus_lost()
            time.sleep(0.2)
            # The timer has fired but is parked on the lock
            assert surface.popup.is_open
            assert closed_on == []

        deadline = time.monotonic() + 2.0
        while surface.popup.is_open and time.monotonic() < deadline:
            time.sleep(0.01)
        assert not surface.popup.is_open
        assert surface.popup.last_dismiss is DismissReason.FOCUS_LOST
        assert closed_on and closed_on[0] is not threading.main_thread()


def _locked_elsewhere(lock) -> bool:
    result = []

    def try_acquire():
        acquired = lock.acquire(blocking=False)
        if acquired:
            lock.release()
        result.append(not acquired)

    t = threading.Thread(target=try_acquire)
    t.start()
    t.join()
    return result[0]


@pytest.mark.parametrize("reason", list(DismissReason))
def test_any_reason_closes(reason):
    popup = PopupController(PopupGeometry.for_mode(SearchMode.SPOTLIGHT), scheduler=ManualScheduler())
    popup.open(0, HOST_WINDOW)
    assert popup.close(reason)
    assert popup.last_dismiss is reason
