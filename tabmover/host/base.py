"""Abstract host capabilities the relocation core is written against."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional


class HostError(Exception):
    """A host call failed (rejected, malformed answer, or no answer)."""


class HostTimeoutError(HostError):
    """The host did not answer a call in time."""


class WindowRegistry(ABC):
    """Enumerates and mutates browser windows."""

    @abstractmethod
    def get_current_window(self) -> Optional[Dict[str, Any]]:
        """Get the window the user is currently working in.

        Returns:
            Window dict with keys:
                - id, type ('normal', 'popup', ...), incognito
                - left, top, width, height (may be missing)
                - state ('normal', 'maximized', 'minimized', 'fullscreen')
                - focused
            or None if there is no current window.
        """
        pass

    @abstractmethod
    def get_all_windows(self) -> List[Dict[str, Any]]:
        """Get all windows in discovery order."""
        pass

    @abstractmethod
    def create_window(
        self, bounds: Dict[str, int], incognito: bool
    ) -> Optional[Dict[str, Any]]:
        """Create a focused window at the given bounds.

        Returns:
            The new window dict, or None if the host refused to create one.
        """
        pass

    @abstractmethod
    def update_window(self, window_id: int, **changes) -> Optional[Dict[str, Any]]:
        """Update bounds/state/focus of a window."""
        pass

    @abstractmethod
    def queue_window_update(self, window_id: int, **changes) -> None:
        """Send a window update without waiting for the host to apply it."""
        pass


class TabRegistry(ABC):
    """Queries and moves content units (tabs)."""

    @abstractmethod
    def get_active_tab(self, window_id: int) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    def get_tabs(self, window_id: int) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    def move_tab(self, tab_id: int, window_id: int) -> None:
        """Move a tab to the end of another window."""
        pass

    @abstractmethod
    def activate_tab(self, tab_id: int) -> None:
        pass

    @abstractmethod
    def remove_tab(self, tab_id: int) -> None:
        pass


class DisplayRegistry(ABC):
    """Enumerates physical displays."""

    @abstractmethod
    def get_displays(self) -> List[Dict[str, Any]]:
        """Get displays in host order.

        Returns:
            List of display dicts with keys:
                - id
                - bounds: {left, top, width, height}
                - workArea: {left, top, width, height} (optional)
        """
        pass


class ScriptExecutor(ABC):
    """Runs named page scripts inside a tab's document."""

    @abstractmethod
    def execute_script(
        self, tab_id: int, script: str, args: Optional[Dict[str, Any]] = None
    ) -> Any:
        """Run a page script and return its structured result."""
        pass


class Scheduler(ABC):
    """Runs callables after a delay without blocking the caller."""

    @abstractmethod
    def schedule(self, delay_seconds: float, func: Callable, *args) -> Any:
        pass
