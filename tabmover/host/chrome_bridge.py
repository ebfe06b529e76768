"""Command bridge to the browser extension.

The extension polls ``/chrome-commands`` for work, runs each command
against the browser's extension API and posts the outcome back. Calls
on the Python side block until that outcome arrives or time out.
"""

import logging
import threading
import time
from typing import Any, Dict, List, Optional

from .base import (
    DisplayRegistry,
    HostError,
    HostTimeoutError,
    ScriptExecutor,
    TabRegistry,
    WindowRegistry,
)


class ChromeBridge:
    """Thread-safe queue of commands waiting for the extension."""

    def __init__(self, timeout_seconds: float = 5.0):
        """Initialize the bridge.

        Args:
            timeout_seconds: Default time to wait for a command result
        """
        self.logger = logging.getLogger("TabMover.ChromeBridge")
        self.timeout_seconds = timeout_seconds
        self._commands: List[Dict[str, Any]] = []
        self._waiters: Dict[int, Dict[str, Any]] = {}
        self._command_id = 0
        self._lock = threading.Lock()
        self._queued = threading.Condition(self._lock)

    def _enqueue(
        self, action: str, params: Optional[Dict[str, Any]], awaited: bool = False
    ) -> int:
        # Caller holds the lock
        self._command_id += 1
        self._commands.append(
            {
                "id": self._command_id,
                "action": action,
                "params": params or {},
                "timestamp": time.time(),
                "delivered": False,
                "awaited": awaited,
            }
        )
        self._queued.notify_all()
        return self._command_id

    def _drop(self, cmd_id: int) -> bool:
        # Caller holds the lock
        before = len(self._commands)
        self._commands = [c for c in self._commands if c["id"] != cmd_id]
        return len(self._commands) != before

    def post(self, action: str, params: Optional[Dict[str, Any]] = None) -> int:
        """Queue a command without waiting for its result.

        Returns:
            int: The command ID
        """
        with self._queued:
            cmd_id = self._enqueue(action, params)
        self.logger.debug(f"Posted {action} as command {cmd_id}")
        return cmd_id

    def call(
        self,
        action: str,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Queue a command and block until the extension answers it.

        Args:
            action: Extension API name, e.g. "windows.getAll"
            params: JSON-serializable arguments
            timeout: Seconds to wait; defaults to the bridge timeout

        Returns:
            The result reported by the extension

        Raises:
            HostTimeoutError: No answer within the timeout
            HostError: The extension reported a failure
        """
        if timeout is None:
            timeout = self.timeout_seconds

        event = threading.Event()
        with self._queued:
            cmd_id = self._enqueue(action, params, awaited=True)
            self._waiters[cmd_id] = {"event": event, "response": None}

        event.wait(timeout)
        with self._lock:
            # The answer may land between the wait expiring and this lock
            response = self._waiters.pop(cmd_id)["response"]
            if response is None:
                self._drop(cmd_id)
        if response is None:
            raise HostTimeoutError(f"{action} (command {cmd_id}) timed out after {timeout}s")

        if not response["ok"]:
            raise HostError(f"{action} failed: {response.get('error') or 'unknown error'}")
        return response.get("result")

    def pending_commands(self, wait: float = 0.0) -> List[Dict[str, Any]]:
        """Hand out commands the extension has not seen yet.

        Posted commands nobody waits on are forgotten once handed out.

        Args:
            wait: Seconds to long-poll when nothing is queued

        Returns:
            list: Commands as {id, action, params, timestamp}
        """
        with self._queued:
            if wait > 0 and not any(not c["delivered"] for c in self._commands):
                self._queued.wait(wait)

            fresh = []
            for command in self._commands:
                if not command["delivered"]:
                    command["delivered"] = True
                    fresh.append(
                        {
                            k: v
                            for k, v in command.items()
                            if k not in ("delivered", "awaited")
                        }
                    )
            self._commands = [
                c for c in self._commands if c["awaited"] or not c["delivered"]
            ]
            return fresh

    def acknowledge(self, cmd_id: int) -> bool:
        """Drop a command the extension finished without a result."""
        with self._lock:
            return self._drop(cmd_id)

    def complete(
        self, cmd_id: int, ok: bool, result: Any = None, error: Optional[str] = None
    ) -> bool:
        """Deliver the extension's answer to a command.

        Returns:
            bool: False if the command is unknown (already answered or timed out)
        """
        with self._lock:
            known = self._drop(cmd_id)
            waiter = self._waiters.get(cmd_id)
            if waiter is None:
                if not known:
                    self.logger.debug(f"Result for unknown command {cmd_id} ignored")
                return known
            waiter["response"] = {"ok": bool(ok), "result": result, "error": error}
            waiter["event"].set()
            return True

    def in_flight(self) -> int:
        """Number of commands not yet acknowledged or answered."""
        with self._lock:
            return len(self._commands)


class ChromeHost(WindowRegistry, TabRegistry, DisplayRegistry, ScriptExecutor):
    """Browser capabilities served by the extension through a ChromeBridge."""

    def __init__(self, bridge: ChromeBridge):
        self.logger = logging.getLogger("TabMover.ChromeHost")
        self.bridge = bridge

    def _call_list(self, action: str, params: Optional[Dict[str, Any]] = None) -> List:
        result = self.bridge.call(action, params)
        if result is None:
            return []
        if not isinstance(result, list):
            raise HostError(f"{action} returned {type(result).__name__}, expected list")
        return result

    # Windows

    def get_current_window(self) -> Optional[Dict[str, Any]]:
        return self.bridge.call("windows.getCurrent", {"populate": False})

    def get_all_windows(self) -> List[Dict[str, Any]]:
        return self._call_list("windows.getAll", {})

    def create_window(
        self, bounds: Dict[str, int], incognito: bool
    ) -> Optional[Dict[str, Any]]:
        return self.bridge.call(
            "windows.create",
            {
                "incognito": incognito,
                "focused": True,
                "state": "normal",
                "left": bounds["left"],
                "top": bounds["top"],
                "width": bounds["width"],
                "height": bounds["height"],
            },
        )

    def update_window(self, window_id: int, **changes) -> Optional[Dict[str, Any]]:
        return self.bridge.call(
            "windows.update", {"windowId": window_id, "updateInfo": changes}
        )

    def queue_window_update(self, window_id: int, **changes) -> None:
        self.bridge.post("windows.update", {"windowId": window_id, "updateInfo": changes})

    # Tabs

    def get_active_tab(self, window_id: int) -> Optional[Dict[str, Any]]:
        tabs = self._call_list("tabs.query", {"active": True, "windowId": window_id})
        return tabs[0] if tabs else None

    def get_tabs(self, window_id: int) -> List[Dict[str, Any]]:
        return self._call_list("tabs.query", {"windowId": window_id})

    def move_tab(self, tab_id: int, window_id: int) -> None:
        self.bridge.call(
            "tabs.move",
            {"tabIds": tab_id, "moveProperties": {"windowId": window_id, "index": -1}},
        )

    def activate_tab(self, tab_id: int) -> None:
        self.bridge.call(
            "tabs.update", {"tabId": tab_id, "updateProperties": {"active": True}}
        )

    def remove_tab(self, tab_id: int) -> None:
        # Nothing depends on the removal finishing
        self.bridge.post("tabs.remove", {"tabIds": tab_id})

    # Displays

    def get_displays(self) -> List[Dict[str, Any]]:
        return self._call_list("system.display.getInfo")

    # Page scripts

    def execute_script(
        self, tab_id: int, script: str, args: Optional[Dict[str, Any]] = None
    ) -> Any:
        results = self._call_list(
            "scripting.executeScript",
            {
                "target": {"tabId": tab_id},
                "script": script,
                "args": [args] if args else [],
            },
        )
        if not results or not isinstance(results[0], dict):
            return None
        return results[0].get("result")
