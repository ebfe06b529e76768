"""Shared fixtures: an in-memory browser and a scheduler that only records."""

import logging

import pytest

from tabmover.host.base import (
    DisplayRegistry,
    HostError,
    Scheduler,
    ScriptExecutor,
    TabRegistry,
    WindowRegistry,
)


def make_display(display_id, left, top=0, width=1920, height=1080, taskbar=40):
    return {
        "id": display_id,
        "bounds": {"left": left, "top": top, "width": width, "height": height},
        "workArea": {"left": left, "top": top, "width": width, "height": height - taskbar},
    }


def make_window(window_id, left, top=0, width=800, height=600, **extra):
    window = {
        "id": window_id,
        "type": "normal",
        "incognito": False,
        "left": left,
        "top": top,
        "width": width,
        "height": height,
        "state": "normal",
        "focused": False,
    }
    window.update(extra)
    return window


class FakeBrowser(WindowRegistry, TabRegistry, DisplayRegistry, ScriptExecutor):
    """Browser state kept in dicts; every mutation is appended to ``calls``."""

    def __init__(self, displays=None, windows=None, tabs=None, current_window_id=None):
        self.displays = displays or []
        self.windows = windows or []
        self.tabs = tabs or []
        self.current_window_id = current_window_id
        self.calls = []
        self.script_results = {}
        self.script_calls = []
        self.fail_on = set()
        self.create_returns_none = False
        self._next_window_id = 1000
        self._next_tab_id = 5000

    def _check(self, name):
        if name in self.fail_on:
            raise HostError(f"{name} failed")

    def mutations(self):
        return [c for c in self.calls if c[0] in ("create", "update", "queue_update", "move", "activate", "remove")]

    def window(self, window_id):
        return next(w for w in self.windows if w["id"] == window_id)

    def get_current_window(self):
        self._check("current")
        for w in self.windows:
            if w["id"] == self.current_window_id:
                return dict(w)
        return None

    def get_all_windows(self):
        self._check("all")
        return [dict(w) for w in self.windows]

    def create_window(self, bounds, incognito):
        self._check("create")
        self.calls.append(("create", dict(bounds), incognito))
        if self.create_returns_none:
            return None
        self._next_window_id += 1
        window = make_window(self._next_window_id, incognito=incognito, focused=True, **bounds)
        self.windows.append(window)
        # New windows open with a starter tab
        self._next_tab_id += 1
        self.tabs.append({"id": self._next_tab_id, "windowId": window["id"], "active": True})
        return dict(window)

    def update_window(self, window_id, **changes):
        self._check("update")
        self.calls.append(("update", window_id, changes))
        self.window(window_id).update(changes)
        return dict(self.window(window_id))

    def queue_window_update(self, window_id, **changes):
        self.calls.append(("queue_update", window_id, changes))
        self.window(window_id).update(changes)

    def get_active_tab(self, window_id):
        self._check("active_tab")
        for t in self.tabs:
            if t["windowId"] == window_id and t.get("active"):
                return dict(t)
        return None

    def get_tabs(self, window_id):
        return [dict(t) for t in self.tabs if t["windowId"] == window_id]

    def move_tab(self, tab_id, window_id):
        self._check("move")
        self.calls.append(("move", tab_id, window_id))
        for t in self.tabs:
            if t["id"] == tab_id:
                t["windowId"] = window_id

    def activate_tab(self, tab_id):
        self._check("activate")
        self.calls.append(("activate", tab_id))

    def remove_tab(self, tab_id):
        self.calls.append(("remove", tab_id))
        self.tabs = [t for t in self.tabs if t["id"] != tab_id]

    def get_displays(self):
        self._check("displays")
        return [dict(d) for d in self.displays]

    def execute_script(self, tab_id, script, args=None):
        self.script_calls.append((tab_id, script, args))
        self._check(script)
        result = self.script_results.get(script)
        if callable(result):
            return result(tab_id, args)
        return result


class RecordingScheduler(Scheduler):
    """Keeps scheduled tasks so tests can inspect delays and run them."""

    def __init__(self):
        self.tasks = []

    def schedule(self, delay_seconds, func, *args):
        self.tasks.append((delay_seconds, func, args))
        return len(self.tasks)

    @property
    def delays(self):
        return [delay for delay, _, _ in self.tasks]

    def run_all(self):
        for _, func, args in sorted(self.tasks, key=lambda t: t[0]):
            func(*args)


@pytest.fixture
def two_displays():
    return [make_display("right", 1920), make_display("left", 0)]


@pytest.fixture
def browser(two_displays):
    source = make_window(1, left=100, top=100, focused=True)
    return FakeBrowser(
        displays=two_displays,
        windows=[source],
        tabs=[{"id": 10, "windowId": 1, "active": True}, {"id": 11, "windowId": 1}],
        current_window_id=1,
    )


@pytest.fixture
def scheduler():
    return RecordingScheduler()


@pytest.fixture(autouse=True)
def setup_logging(caplog):
    """Setup logging for tests"""
    caplog.set_level(logging.DEBUG)
