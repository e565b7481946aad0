from __future__ import annotations

from typing import Iterable, NamedTuple, Tuple


Extent = Tuple[float, float, float, float]


def as_extent(values: Iterable[float]) -> Extent:
    """
    Coerce four numbers into an extent tuple.

    Args:
        values: Any iterable of exactly four numbers

    Returns:
        A tuple of four floats

    Raises:
        ValueError: If the iterable does not contain exactly four numbers
    """
    extent = tuple(float(v) for v in values)
    if len(extent) != 4:
        raise ValueError(f"an extent needs exactly four numbers but found {extent}")
    return extent  # type: ignore


class BoundingBox(NamedTuple):
    """
    A CRS-tagged rectangular extent advertised by a capabilities document.

    The four numbers are kept in the order the server wrote them. Whether the first
    pair is (east, north) or (north, east) depends on the axis orientation of the CRS,
    which is exactly what the axis-order reconciler resolves.

    Attributes:
        crs: The CRS code the extent is expressed in (e.g. 'EPSG:2154')
        extent: The extent as (minA, minB, maxA, maxB)

    Examples:
        >>> bbox = BoundingBox("EPSG:2154", (700000, 6600000, 1200000, 7200000))
        >>> bbox.swapped().extent
        (6600000.0, 700000.0, 7200000.0, 1200000.0)
    """

    crs: str
    extent: Extent

    @classmethod
    def from_values(cls, crs: str, values: Iterable[float]) -> BoundingBox:
        return cls(crs=crs, extent=as_extent(values))

    def swapped(self) -> BoundingBox:
        """
        Get the same bounding box with each coordinate pair swapped.

        Returns:
            A new BoundingBox with (minB, minA, maxB, maxA) as its extent
        """
        a0, b0, a1, b1 = self.extent
        return BoundingBox(self.crs, (b0, a0, b1, a1))


class GeographicExtent(NamedTuple):
    """
    The authoritative extent of a capabilities document in the reference CRS.

    A GeographicExtent is always in (longitude, latitude) order, so it is the ground
    truth the bounding boxes are compared against.

    Attributes:
        west: The western bound in decimal degrees
        south: The southern bound in decimal degrees
        east: The eastern bound in decimal degrees
        north: The northern bound in decimal degrees
    """

    west: float
    south: float
    east: float
    north: float

    @property
    def extent(self) -> Extent:
        return (self.west, self.south, self.east, self.north)
