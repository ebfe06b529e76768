"""Display registry backed by the OS monitor list."""

import logging
from typing import Any, Dict, List

from screeninfo import get_monitors

from .base import DisplayRegistry


class ScreenInfoDisplayRegistry(DisplayRegistry):
    """Reads displays from ``screeninfo`` instead of the extension.

    screeninfo reports no taskbar/dock geometry, so the work area equals
    the display bounds.
    """

    def __init__(self):
        self.logger = logging.getLogger("TabMover.ScreenInfoDisplays")

    def get_displays(self) -> List[Dict[str, Any]]:
        displays = []
        for index, monitor in enumerate(get_monitors()):
            bounds = {
                "left": monitor.x,
                "top": monitor.y,
                "width": monitor.width,
                "height": monitor.height,
            }
            displays.append(
                {
                    "id": monitor.name or str(index),
                    "isPrimary": bool(getattr(monitor, "is_primary", False)),
                    "bounds": bounds,
                    "workArea": dict(bounds),
                }
            )
        self.logger.debug(f"screeninfo reported {len(displays)} displays")
        return displays
