"""Rectangle helpers shared by display and window lookups.

Rectangles are plain dicts in the browser's vocabulary:
``{"left": int, "top": int, "width": int, "height": int}``.
"""

from typing import Dict, List, Tuple

Point = Tuple[float, float]


def center_of(rect: Dict) -> Point:
    """Return the center point of a rectangle."""
    return (rect["left"] + rect["width"] / 2, rect["top"] + rect["height"] / 2)


def rect_contains(rect: Dict, point: Point) -> bool:
    """Check whether a point lies inside a rectangle.

    The interval is half-open: the left/top edges are inside, the
    right/bottom edges belong to the neighbour.
    """
    x, y = point
    return (
        rect["left"] <= x < rect["left"] + rect["width"]
        and rect["top"] <= y < rect["top"] + rect["height"]
    )


def containing_display(displays: List[Dict], point: Point) -> int:
    """Get the index of the first display whose bounds contain the point.

    Args:
        displays: Displays ordered left to right, each with a ``bounds`` rect
        point: (x, y) screen coordinate

    Returns:
        int: Index into ``displays``; 0 when no display contains the point
    """
    for index, display in enumerate(displays):
        if rect_contains(display["bounds"], point):
            return index
    return 0


def has_geometry(rect: Dict) -> bool:
    """Check that a rect-like dict carries numeric left/top/width/height."""
    for key in ("left", "top", "width", "height"):
        value = rect.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
    return True
