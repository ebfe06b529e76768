"""Choosing an existing window to receive a relocated tab."""

import logging
from typing import Any, Dict, List, Optional

from .geometry import center_of, has_geometry, rect_contains


class DestinationSelector:
    """Picks the window on the target display a tab should merge into."""

    def __init__(self, window_registry):
        """Initialize the selector.

        Args:
            window_registry (WindowRegistry): Source of the window list
        """
        self.logger = logging.getLogger("TabMover.DestinationSelector")
        self.window_registry = window_registry

    def get_candidates(
        self, work_area: Dict[str, int], incognito: bool, exclude_id: Any
    ) -> List[Dict[str, Any]]:
        """Get windows eligible to receive the tab, in discovery order.

        A candidate is a normal window other than the source, in the same
        privacy mode, with known geometry whose center lies in ``work_area``.
        """
        candidates = []
        for window in self.window_registry.get_all_windows():
            if not window or window.get("type") != "normal":
                continue
            if window.get("id") == exclude_id:
                continue
            if bool(window.get("incognito")) != bool(incognito):
                continue
            if not has_geometry(window):
                continue
            if not rect_contains(work_area, center_of(window)):
                continue
            candidates.append(window)
        return candidates

    def select(
        self, work_area: Dict[str, int], incognito: bool, exclude_id: Any
    ) -> Optional[Dict[str, Any]]:
        """Get the best destination window, or None if a new one is needed.

        Maximized windows win over the rest, then focused ones. ``sorted`` is
        stable, so ties keep the order the host reported them in.
        """
        candidates = self.get_candidates(work_area, incognito, exclude_id)
        if not candidates:
            self.logger.debug("No destination window on target display")
            return None

        ranked = sorted(
            candidates,
            key=lambda w: (w.get("state") != "maximized", not w.get("focused")),
        )
        best = ranked[0]
        self.logger.debug(
            f"Picked window {best.get('id')} out of {len(candidates)} candidates "
            f"(state={best.get('state')}, focused={bool(best.get('focused'))})"
        )
        return best
