import time
import logging
import threading
from datetime import datetime

from .config_manager import ConfigManager
from .host import ChromeBridge, ChromeHost, ScreenInfoDisplayRegistry, ThreadingScheduler
from .relocator import TabRelocator

# Extension keyboard commands and the privacy mode each one moves
COMMANDS = {
    "move-normal": False,
    "move-incog": True,
}


class CommandGuard:
    """Rejects a command while one is running or within the debounce window."""

    def __init__(self, debounce_ms=120, clock=time.monotonic):
        self.debounce_ms = debounce_ms
        self.clock = clock
        self._last_run = None
        self._busy = False
        self._lock = threading.Lock()

    def enter(self):
        """Claim the guard.

        Returns:
            bool: False if the caller must drop the command
        """
        with self._lock:
            now = self.clock()
            if self._busy:
                return False
            if self._last_run is not None and (now - self._last_run) * 1000 < self.debounce_ms:
                return False
            self._last_run = now
            self._busy = True
            return True

    def exit(self):
        with self._lock:
            self._busy = False


class TabMoverService:
    """Wires the browser bridge, settings and relocator together."""

    def __init__(self, config_path=None, config_manager=None, bridge=None, relocator=None):
        """Initialize the TabMover service.

        Args:
            config_path (str, optional): Path to the config file. If None, uses default location.
            config_manager (ConfigManager, optional): Use this instead of loading config_path.
            bridge (ChromeBridge, optional): Command bridge to the extension.
            relocator (TabRelocator, optional): Prebuilt relocator.
        """
        self.logger = logging.getLogger("TabMover.Service")

        self.config_manager = config_manager or ConfigManager(config_path)
        settings = self.config_manager.get_settings()

        self.bridge = bridge or ChromeBridge(settings["command_timeout_seconds"])
        self.host = ChromeHost(self.bridge)
        self.scheduler = ThreadingScheduler()

        if settings["display_source"] == "screeninfo":
            self.display_registry = ScreenInfoDisplayRegistry()
        else:
            self.display_registry = self.host

        self.relocator = relocator or TabRelocator(
            self.host, self.host, self.display_registry, self.host, self.scheduler
        )
        self.guard = CommandGuard(settings["debounce_ms"])

        self.status = {
            "status": "ready",
            "last_run": None,
            "moves": 0,
            "errors": 0,
            "last_result": None,
            "last_error": None,
        }
        self._status_lock = threading.Lock()

    def apply_settings(self):
        """Push changed settings into the running components."""
        settings = self.config_manager.get_settings()
        self.guard.debounce_ms = settings["debounce_ms"]
        self.bridge.timeout_seconds = settings["command_timeout_seconds"]

    def get_status(self):
        """Get the current service status.

        Returns:
            dict: Service status information
        """
        with self._status_lock:
            status = dict(self.status)
        status["commands_in_flight"] = self.bridge.in_flight()
        return status

    def handle_command(self, name):
        """Run a named command to completion.

        Never raises: failures are logged and reported in the returned dict.

        Returns:
            dict: Relocation result, or {"success": False, "action", "message"}
        """
        if name not in COMMANDS:
            self.logger.warning(f"Unknown command: {name}")
            return {"success": False, "action": "rejected", "message": f"Unknown command '{name}'"}

        if not self.guard.enter():
            self.logger.debug(f"Debounced: {name}")
            return {"success": False, "action": "debounced", "message": "Command debounced"}

        try:
            result = self.relocator.move(COMMANDS[name])
            self._record(result)
            return result
        except Exception as e:
            self.logger.exception(f"Command {name} failed")
            self._record(None, error=str(e))
            return {"success": False, "action": "error", "message": str(e)}
        finally:
            self.guard.exit()

    def dispatch_command(self, name):
        """Run a named command on a worker thread.

        The relocation waits on the extension, which answers through the
        same HTTP server, so request handlers must not block on it.

        Returns:
            bool: False if the command name is unknown
        """
        if name not in COMMANDS:
            self.logger.warning(f"Unknown command: {name}")
            return False

        worker = threading.Thread(
            target=self.handle_command, args=(name,), name=f"tabmover-{name}"
        )
        worker.daemon = True
        worker.start()
        return True

    def _record(self, result, error=None):
        with self._status_lock:
            self.status["last_run"] = datetime.now().isoformat()
            if error is not None:
                self.status["errors"] += 1
                self.status["last_error"] = error
                self.status["last_result"] = None
                return
            self.status["last_result"] = result
            if result.get("success"):
                self.status["moves"] += 1
