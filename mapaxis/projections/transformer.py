from __future__ import annotations

from typing import Sequence

from pyproj.exceptions import ProjError

from mapaxis.constructs.extent import Extent, as_extent
from mapaxis.constructs.projection import Point
from mapaxis.projections.registry_interface import RegistryInterface
from mapaxis.utils.exceptions import TransformError
from mapaxis.utils.geo import is_finite

# number of points added along each extent edge when transforming bounds
DEFAULT_DENSIFY_POINTS = 21


class CoordinateTransformer:
    """
    Point and extent transforms between two registered CRS codes.

    The transformer holds a handle to a projection registry and reads the registry's
    current definitions on every call, so it sees a reconciled axis order as soon as
    the registry has been committed. Coordinates are always given and returned in
    the axis order of their CRS: a CRS with reversed (north, east) orientation takes
    and returns (north, east) pairs.

    Args:
        registry: The projection registry to read definitions from
        densify_points: Number of points added along each edge when transforming extents

    Examples:
        >>> transformer = CoordinateTransformer(registry)
        >>> transformer.transform_point((3.0, 46.5), "CRS:84", "EPSG:2154")
        (700000.0, 6600000.0)
    """

    def __init__(
        self,
        registry: RegistryInterface,
        densify_points: int = DEFAULT_DENSIFY_POINTS,
    ):
        self.registry = registry
        self.densify_points = densify_points

    def transform_point(self, point: Sequence[float], source: str, destination: str) -> Point:
        """
        Transform a coordinate from one CRS to another.

        This returns a new coordinate and does not modify the original.

        Args:
            point: The coordinate in the source CRS's axis order
            source: The source CRS code
            destination: The destination CRS code

        Returns:
            The coordinate in the destination CRS's axis order

        Raises:
            UnknownCRS: If either code is not registered
            TransformError: If the transform fails or produces non-finite values
        """
        src = self.registry.get_projection(source)
        dst = self.registry.get_projection(destination)
        if source == destination:
            return (float(point[0]), float(point[1]))

        x, y = src.to_xy((point[0], point[1]))
        transformer = self.registry.transformer(source, destination)
        try:
            new_x, new_y = transformer.transform(x, y, errcheck=True)
        except ProjError as e:
            raise TransformError(
                f"unable to transform {source} {tuple(point)} -> {destination}"
            ) from e

        if not is_finite((new_x, new_y)):
            raise TransformError(
                f"unable to transform {source} {tuple(point)} -> {destination} ({new_x}, {new_y})"
            )

        return dst.from_xy((new_x, new_y))

    def transform_extent(
        self, extent: Sequence[float], source: str, destination: str
    ) -> Extent:
        """
        Transform an extent from one CRS to another.

        The edges of the extent are densified before transforming, so the result is
        the bounding extent of the transformed rectangle rather than of its four
        corners only. This returns a new extent and does not modify the original.

        Args:
            extent: The extent in the source CRS's axis order, e.g. (minx, miny, maxx, maxy) for an ENU CRS
            source: The source CRS code
            destination: The destination CRS code

        Returns:
            The extent in the destination CRS's axis order

        Raises:
            UnknownCRS: If either code is not registered
            TransformError: If the transform fails or produces non-finite values
        """
        extent = as_extent(extent)
        src = self.registry.get_projection(source)
        dst = self.registry.get_projection(destination)
        if source == destination:
            return extent

        xy_extent = src.extent_to_xy(extent)
        transformer = self.registry.transformer(source, destination)
        try:
            bounds = transformer.transform_bounds(
                *xy_extent, densify_pts=self.densify_points
            )
        except ProjError as e:
            raise TransformError(
                f"unable to transform extent {source} {extent} -> {destination}"
            ) from e

        if not is_finite(bounds):
            raise TransformError(
                f"unable to transform extent {source} {extent} -> {destination} {bounds}"
            )

        return dst.extent_from_xy(bounds)
