import logging
import time
from typing import Any, Dict

from .display_manager import DisplayTopology
from .fullscreen import FullscreenRestorer
from .window_selector import DestinationSelector

# Window geometry read right after window events can be stale
SETTLE_DELAY_SECONDS = 0.08

# The browser ignores "maximized" sent together with new bounds
MAXIMIZE_DELAY_SECONDS = 0.08


class TabRelocator:
    """Moves the active tab to the next display, preserving fullscreen."""

    def __init__(
        self,
        window_registry,
        tab_registry,
        display_registry,
        script_executor,
        scheduler,
        sleep=time.sleep,
    ):
        """Initialize the relocator.

        Args:
            window_registry (WindowRegistry): Browser windows
            tab_registry (TabRegistry): Browser tabs
            display_registry (DisplayRegistry): Physical displays
            script_executor (ScriptExecutor): Page script runner
            scheduler (Scheduler): Delayed task runner
            sleep (callable, optional): Blocking sleep used for the settling delay
        """
        self.logger = logging.getLogger("TabMover.Relocator")
        self.windows = window_registry
        self.tabs = tab_registry
        self.scheduler = scheduler
        self.sleep = sleep

        self.topology = DisplayTopology(display_registry)
        self.selector = DestinationSelector(window_registry)
        self.fullscreen = FullscreenRestorer(script_executor, scheduler)

    def move(self, incognito: bool) -> Dict[str, Any]:
        """Move the active tab of the current window to the next display.

        The tab is merged into a suitable window already on that display,
        or a new window is created for it. Fullscreen restoration runs in
        the background after this returns.

        Args:
            incognito (bool): Privacy mode the current window must be in

        Returns:
            dict: {"success", "action", ...}; action is "merged", "created",
                "skipped" (a precondition did not hold) or "aborted"

        Raises:
            HostError: A browser call failed; steps already applied stay applied
        """
        src_win = self.windows.get_current_window()
        if not src_win:
            return self._skipped("no current window")

        if bool(src_win.get("incognito")) != bool(incognito):
            return self._skipped("privacy mode mismatch")

        tab = self.tabs.get_active_tab(src_win["id"])
        if not tab:
            return self._skipped("no active tab")

        displays = self.topology.resolve()
        if len(displays) < 2:
            return self._skipped(f"{len(displays)} display(s) available")

        src_idx = self.topology.display_index_of(displays, src_win)
        target_idx = self.topology.next_index(displays, src_idx)
        work = self.topology.work_area(displays[target_idx])

        # Must be read while the tab is still in its original window
        fs_snapshot = self.fullscreen.capture(tab["id"])

        self.sleep(SETTLE_DELAY_SECONDS)

        result = {
            "success": True,
            "tab_id": tab["id"],
            "source_display": src_idx,
            "target_display": target_idx,
            "fullscreen": fs_snapshot.is_fullscreen,
        }

        dest = self.selector.select(work, incognito, src_win["id"])
        if dest:
            self.logger.info(
                f"Merging tab {tab['id']} into window {dest['id']} "
                f"on display {target_idx}"
            )
            self.focus_and_maximize(dest["id"], work)
            self.tabs.move_tab(tab["id"], dest["id"])
            self.tabs.activate_tab(tab["id"])
            self.fullscreen.restore(tab["id"], fs_snapshot)
            result.update({"action": "merged", "window_id": dest["id"]})
            return result

        self.logger.info(f"Creating new window for tab {tab['id']} on display {target_idx}")
        new_win = self.windows.create_window(work, incognito)
        if not new_win:
            self.logger.warning("Browser did not create a window; giving up")
            return {"success": False, "action": "aborted", "reason": "window not created"}

        self.tabs.move_tab(tab["id"], new_win["id"])
        self.cleanup_starter_tabs(new_win["id"], tab["id"])
        self.focus_and_maximize(new_win["id"], work)
        self.fullscreen.restore(tab["id"], fs_snapshot)
        result.update({"action": "created", "window_id": new_win["id"]})
        return result

    def cleanup_starter_tabs(self, window_id, keep_tab_id) -> int:
        """Close every tab of a fresh window except the moved one.

        Returns:
            int: Number of tabs closed
        """
        removed = 0
        for tab in self.tabs.get_tabs(window_id):
            if tab.get("id") != keep_tab_id:
                self.tabs.remove_tab(tab["id"])
                removed += 1
        if removed:
            self.logger.debug(f"Closed {removed} starter tab(s) in window {window_id}")
        return removed

    def focus_and_maximize(self, window_id, work: Dict[str, int]) -> None:
        """Place a window on the work area, focus it, then maximize it shortly after."""
        self.windows.update_window(
            window_id,
            focused=True,
            state="normal",
            left=work["left"],
            top=work["top"],
            width=work["width"],
            height=work["height"],
        )
        self.scheduler.schedule(MAXIMIZE_DELAY_SECONDS, self._maximize, window_id)

    def _maximize(self, window_id) -> None:
        self.windows.queue_window_update(window_id, state="maximized", focused=True)

    def _skipped(self, reason: str) -> Dict[str, Any]:
        self.logger.debug(f"Move skipped: {reason}")
        return {"success": False, "action": "skipped", "reason": reason}
