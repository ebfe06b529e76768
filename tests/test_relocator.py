import pytest

from tabmover.host.base import HostError
from tabmover.relocator import MAXIMIZE_DELAY_SECONDS, SETTLE_DELAY_SECONDS, TabRelocator

from conftest import FakeBrowser, make_display, make_window

RIGHT_WORK = {"left": 1920, "top": 0, "width": 1920, "height": 1040}


def make_relocator(browser, scheduler, sleeps=None):
    sleep = sleeps.append if sleeps is not None else (lambda seconds: None)
    return TabRelocator(browser, browser, browser, browser, scheduler, sleep=sleep)


def test_merges_into_maximized_window_on_next_display(browser, scheduler):
    # Source centered at x=500 on the left display
    browser.windows.append(make_window(2, left=2400, state="maximized"))
    sleeps = []

    result = make_relocator(browser, scheduler, sleeps).move(False)

    assert result["action"] == "merged"
    assert result["window_id"] == 2
    assert result["target_display"] == 1
    assert not any(c[0] == "create" for c in browser.calls)
    assert browser.calls[0] == (
        "update",
        2,
        dict(focused=True, state="normal", **RIGHT_WORK),
    )
    assert browser.calls[1:] == [("move", 10, 2), ("activate", 10)]
    assert sleeps == [SETTLE_DELAY_SECONDS]


def test_maximize_follows_after_delay(browser, scheduler):
    browser.windows.append(make_window(2, left=2400))
    make_relocator(browser, scheduler).move(False)

    assert scheduler.delays == [MAXIMIZE_DELAY_SECONDS]
    scheduler.run_all()
    assert browser.calls[-1] == ("queue_update", 2, {"state": "maximized", "focused": True})


def test_creates_window_when_no_destination(browser, scheduler):
    result = make_relocator(browser, scheduler).move(False)

    assert result["action"] == "created"
    new_id = result["window_id"]
    assert browser.calls[0] == ("create", RIGHT_WORK, False)
    assert ("move", 10, new_id) in browser.calls
    # Starter tab closed, only the moved tab remains
    assert [t["id"] for t in browser.get_tabs(new_id)] == [10]
    assert any(c[0] == "update" and c[1] == new_id for c in browser.calls)


def test_create_keeps_privacy_mode(browser, scheduler):
    browser.window(1)["incognito"] = True
    browser.windows.append(make_window(2, left=2400, state="maximized"))

    result = make_relocator(browser, scheduler).move(True)

    assert result["action"] == "created"
    assert browser.calls[0] == ("create", RIGHT_WORK, True)


def test_privacy_mismatch_does_nothing(browser, scheduler):
    browser.windows.append(make_window(2, left=2400, state="maximized"))

    result = make_relocator(browser, scheduler).move(True)

    assert result == {"success": False, "action": "skipped", "reason": "privacy mode mismatch"}
    assert browser.mutations() == []
    assert browser.script_calls == []
    assert scheduler.tasks == []


@pytest.mark.parametrize(
    "setup, reason",
    [
        (lambda b: setattr(b, "current_window_id", None), "no current window"),
        (lambda b: b.tabs.clear(), "no active tab"),
        (lambda b: b.displays.pop(), "1 display(s) available"),
    ],
)
def test_preconditions_are_silent_no_ops(browser, scheduler, setup, reason):
    setup(browser)
    result = make_relocator(browser, scheduler).move(False)

    assert result["action"] == "skipped"
    assert result["reason"] == reason
    assert browser.mutations() == []


def test_two_moves_return_to_original_display(browser, scheduler):
    relocator = make_relocator(browser, scheduler)
    first = relocator.move(False)
    scheduler.run_all()

    # The new window is now current; move back
    browser.current_window_id = first["window_id"]
    second = relocator.move(False)

    assert first["target_display"] == 1
    assert second["source_display"] == 1
    assert second["target_display"] == 0


def test_fullscreen_captured_before_move_and_restored(browser, scheduler):
    browser.windows.append(make_window(2, left=2400))
    order = []
    browser.script_results["fullscreenInfo"] = lambda tab_id, args: (
        order.append(("capture", list(browser.calls))) or {"isFs": True, "host": "twitch.tv"}
    )

    result = make_relocator(browser, scheduler).move(False)

    assert result["fullscreen"] is True
    assert order == [("capture", [])]
    assert scheduler.delays == [MAXIMIZE_DELAY_SECONDS, 0.18, 0.42, 0.82]


def test_not_fullscreen_schedules_only_maximize(browser, scheduler):
    browser.script_results["fullscreenInfo"] = {"isFs": False, "host": "example.com"}
    make_relocator(browser, scheduler).move(False)
    assert scheduler.delays == [MAXIMIZE_DELAY_SECONDS]


def test_window_creation_refused_aborts(browser, scheduler):
    browser.create_returns_none = True

    result = make_relocator(browser, scheduler).move(False)

    assert result["action"] == "aborted"
    assert [c[0] for c in browser.calls] == ["create"]


def test_host_failure_stops_remaining_steps(browser, scheduler):
    browser.windows.append(make_window(2, left=2400))
    browser.fail_on.add("move")

    with pytest.raises(HostError):
        make_relocator(browser, scheduler).move(False)

    # The destination was already focused; nothing is rolled back
    assert [c[0] for c in browser.calls] == ["update"]
    assert not any(c[0] == "activate" for c in browser.calls)


def test_off_screen_source_moves_to_second_display(scheduler):
    browser = FakeBrowser(
        displays=[make_display("a", 0), make_display("b", 1920)],
        windows=[make_window(1, left=-9000)],
        tabs=[{"id": 10, "windowId": 1, "active": True}],
        current_window_id=1,
    )
    result = make_relocator(browser, scheduler).move(False)
    assert result["source_display"] == 0
    assert result["target_display"] == 1


def test_delayed_maximize_does_not_wait_for_browser(browser, scheduler):
    result = make_relocator(browser, scheduler).move(False)
    browser.fail_on.add("update")

    scheduler.run_all()

    assert browser.calls[-1] == (
        "queue_update",
        result["window_id"],
        {"state": "maximized", "focused": True},
    )
