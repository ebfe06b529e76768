import logging
from typing import Any, Dict, List

from .geometry import center_of, containing_display, has_geometry


class DisplayTopology:
    """Orders displays left to right and finds neighbours."""

    def __init__(self, display_registry):
        """Initialize the display topology resolver.

        Args:
            display_registry (DisplayRegistry): Source of the display list.
                Queried on every call; displays can be rearranged between moves.
        """
        self.logger = logging.getLogger("TabMover.DisplayTopology")
        self.display_registry = display_registry

    def resolve(self) -> List[Dict[str, Any]]:
        """Get the current displays sorted by their left edge.

        Returns:
            list: Display dicts, ``sorted`` keeps host order for equal left edges
        """
        displays = self.display_registry.get_displays() or []
        ordered = sorted(displays, key=lambda d: d["bounds"]["left"])
        self.logger.debug(
            f"Resolved {len(ordered)} displays: "
            f"{[d.get('id') for d in ordered]}"
        )
        return ordered

    def display_index_of(self, displays: List[Dict[str, Any]], window: Dict[str, Any]) -> int:
        """Get the index of the display holding the window's center.

        Args:
            displays: Ordered displays from ``resolve``
            window: Window dict with left/top/width/height

        Returns:
            int: Display index, 0 if the center is off every display
        """
        if not has_geometry(window):
            return 0
        return containing_display(displays, center_of(window))

    def next_index(self, displays: List[Dict[str, Any]], index: int) -> int:
        """Get the index of the display after ``index``, wrapping around."""
        return (index + 1) % len(displays)

    def work_area(self, display: Dict[str, Any]) -> Dict[str, int]:
        """Get the usable area of a display, falling back to its bounds."""
        return display.get("workArea") or display["bounds"]
