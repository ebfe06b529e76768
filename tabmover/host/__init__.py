"""Host capabilities: abstract interfaces and their implementations."""

from .base import (
    DisplayRegistry,
    HostError,
    HostTimeoutError,
    Scheduler,
    ScriptExecutor,
    TabRegistry,
    WindowRegistry,
)
from .chrome_bridge import ChromeBridge, ChromeHost
from .scheduler import ThreadingScheduler
from .screen_displays import ScreenInfoDisplayRegistry

__all__ = [
    "ChromeBridge",
    "ChromeHost",
    "DisplayRegistry",
    "HostError",
    "HostTimeoutError",
    "Scheduler",
    "ScreenInfoDisplayRegistry",
    "ScriptExecutor",
    "TabRegistry",
    "ThreadingScheduler",
    "WindowRegistry",
]
