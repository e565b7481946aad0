import math
from typing import Sequence

from shapely.geometry import box

from mapaxis.constructs.extent import Extent


def extents_intersect(a: Sequence[float], b: Sequence[float]) -> bool:
    """
    Test whether two axis-aligned extents overlap.

    Both extents are treated as closed rectangles, so extents that only share an
    edge or a corner are considered to intersect.

    Args:
        a: The first extent as (minx, miny, maxx, maxy)
        b: The second extent as (minx, miny, maxx, maxy), in the same CRS and axis order as a

    Returns:
        True if the extents overlap on both axes

    Examples:
        >>> extents_intersect((0, 0, 10, 10), (10, 10, 20, 20))
        True
        >>> extents_intersect((0, 0, 10, 10), (11, 0, 20, 10))
        False
    """
    return box(*a).intersects(box(*b))


def swap_extent(extent: Sequence[float]) -> Extent:
    """Swap the coordinate pairs of an extent: (a0, b0, a1, b1) -> (b0, a0, b1, a1)."""
    a0, b0, a1, b1 = extent
    return (b0, a0, b1, a1)


def is_finite(values: Sequence[float]) -> bool:
    return all(math.isfinite(v) for v in values)
