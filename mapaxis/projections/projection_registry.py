from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Tuple

from pyproj import Geod, Transformer
from pyproj.exceptions import CRSError, ProjError

from mapaxis.constructs.projection import (
    Point,
    PointResolutionFunction,
    Projection,
    ProjectionDefinition,
)
from mapaxis.projections.registry_interface import RegistryInterface
from mapaxis.utils.crs import LATLON_CRS
from mapaxis.utils.exceptions import TransformError, UnknownCRS

log = logging.getLogger(__name__)

GEODESIC_ELLIPSOID = "WGS84"


def identity_point_resolution(resolution: float, point: Point) -> float:
    """
    A point-resolution function that applies no geodesic correction.

    Installing it on a projection keeps displayed scales equal to the nominal
    resolution instead of adjusting them for ellipsoidal distortion.
    """
    return resolution


class ProjectionRegistry(RegistryInterface):
    """
    A projection registry backed by pyproj.

    The registry owns a table of proj definitions keyed by CRS code, and two caches
    derived from it: projection objects (a pyproj CRS plus axis orientation) and
    pyproj transformers between pairs of codes. Both caches are only discarded by
    rebuild_all, so re-registering a code that was already used leaves the stale
    projection in place until the registry is rebuilt. Use commit to do both at once.

    Args:
        definitions: An optional mapping of code to definition to register up front

    Examples:
        >>> registry = ProjectionRegistry({"CRS:84": "+proj=longlat +datum=WGS84 +no_defs +type=crs"})
        >>> registry.lookup("CRS:84").axis_orientation
        <AxisOrientation.ENU: 'enu'>
        >>> _ = registry.commit("CRS:84", "+proj=longlat +datum=WGS84 +no_defs +type=crs +axis=neu")
        >>> registry.get_projection("CRS:84").axis_orientation
        <AxisOrientation.NEU: 'neu'>
    """

    def __init__(self, definitions: Optional[Mapping[str, str]] = None):
        self._definitions: Dict[str, ProjectionDefinition] = {}
        self._projections: Dict[str, Projection] = {}
        self._transformers: Dict[Tuple[str, str], Transformer] = {}
        self._geodesic_transformers: Dict[str, Transformer] = {}
        self._geod = Geod(ellps=GEODESIC_ELLIPSOID)

        if definitions:
            self.register_many(definitions)

    def __len__(self):
        return len(self._definitions)

    def __repr__(self):
        return f"ProjectionRegistry(codes={self.codes()})"

    def register(self, code: str, param_string: str) -> ProjectionDefinition:
        if not code:
            raise ValueError("cannot register a projection definition without a code")
        if not isinstance(param_string, str):
            raise TypeError(
                f"projection definition for {code} must be a string but found {type(param_string)}"
            )

        definition = ProjectionDefinition.from_param_string(code, param_string)
        self._definitions[code] = definition
        log.debug(
            "registered %s (%s): %s",
            code,
            definition.axis_orientation.value,
            param_string,
        )
        return definition

    def register_if_unknown(self, code: str, param_string: str) -> bool:
        """
        Register a definition only if the code has none yet.

        Returns:
            True if the definition was registered
        """
        if not code or code in self._definitions:
            return False
        self.register(code, param_string)
        return True

    def register_many(
        self, definitions: Mapping[str, str], only_unknown: bool = False
    ) -> List[str]:
        """
        Register a table of definitions.

        Entries with an empty code are ignored.

        Args:
            definitions: A mapping of code to definition
            only_unknown: If True, codes that are already registered keep their definition

        Returns:
            The codes that were registered
        """
        registered = []
        for code, param_string in definitions.items():
            if not code:
                continue
            if only_unknown:
                if self.register_if_unknown(code, param_string):
                    registered.append(code)
            else:
                self.register(code, param_string)
                registered.append(code)
        return registered

    def lookup(self, code: str) -> Optional[ProjectionDefinition]:
        return self._definitions.get(code)

    def codes(self) -> List[str]:
        return list(self._definitions.keys())

    def get_projection(self, code: str) -> Projection:
        projection = self._projections.get(code)
        if projection is not None:
            return projection

        definition = self._definitions.get(code)
        if definition is None:
            raise UnknownCRS(code)

        try:
            projection = Projection(definition)
        except CRSError as e:
            raise TransformError(
                f"could not build a projection for {code} from '{definition.param_string}'"
            ) from e

        self._projections[code] = projection
        return projection

    def rebuild_all(self):
        self._projections.clear()
        self._transformers.clear()
        self._geodesic_transformers.clear()

        for code in self._definitions:
            try:
                self.get_projection(code)
            except TransformError as e:
                log.warning("skipping %s while rebuilding projections: %s", code, e)

        log.info("rebuilt %d projections", len(self._projections))

    def transformer(self, source: str, destination: str) -> Transformer:
        """
        Get a pyproj transformer between two registered codes.

        Transformers always work in (east, north) order; callers reorder
        coordinates for codes with reversed axis orientation.

        Args:
            source: The source CRS code
            destination: The destination CRS code

        Returns:
            A cached pyproj Transformer

        Raises:
            UnknownCRS: If either code is not registered
            TransformError: If pyproj cannot build the transformation
        """
        key = (source, destination)
        transformer = self._transformers.get(key)
        if transformer is not None:
            return transformer

        src = self.get_projection(source)
        dst = self.get_projection(destination)
        try:
            transformer = Transformer.from_crs(src.crs, dst.crs, always_xy=True)
        except (CRSError, ProjError) as e:
            raise TransformError(
                f"could not build a transformation {source} -> {destination}"
            ) from e

        self._transformers[key] = transformer
        return transformer

    def set_point_resolution(self, code: str, func: PointResolutionFunction):
        """
        Force a custom point-resolution function on a code's projection.

        The function is attached to the projection object, so it is discarded by
        rebuild_all and must be installed after startup reconciliation.

        Args:
            code: The CRS code
            func: A function of (resolution, point) returning the point resolution
        """
        self.get_projection(code).point_resolution_function = func

    def point_resolution(self, code: str, resolution: float, point: Point) -> float:
        """
        Get the resolution at a point, in projection units per pixel, corrected for geodesic distortion.

        When a custom point-resolution function is installed it is used as is.
        Degree-based projections return the nominal resolution. Otherwise the width
        and height of one pixel centered on the point are measured on the WGS84
        ellipsoid and averaged.

        Args:
            code: The CRS code of the projection
            resolution: The nominal resolution in projection units per pixel
            point: The point, in the projection's axis order

        Returns:
            The point resolution in projection units per pixel

        Raises:
            UnknownCRS: If the code is not registered
            TransformError: If the pixel cannot be transformed to lat/lon
        """
        projection = self.get_projection(code)
        if projection.point_resolution_function is not None:
            return projection.point_resolution_function(resolution, point)
        if projection.crs.is_geographic:
            return resolution

        to_lonlat = self._geodesic_transformers.get(code)
        if to_lonlat is None:
            to_lonlat = Transformer.from_crs(projection.crs, LATLON_CRS, always_xy=True)
            self._geodesic_transformers[code] = to_lonlat

        x, y = projection.to_xy(point)
        half = resolution / 2
        try:
            lons, lats = to_lonlat.transform(
                [x - half, x + half, x, x],
                [y, y, y - half, y + half],
                errcheck=True,
            )
        except ProjError as e:
            raise TransformError(
                f"could not compute the point resolution of {code} at {point}"
            ) from e

        _, _, width = self._geod.inv(lons[0], lats[0], lons[1], lats[1])
        _, _, height = self._geod.inv(lons[2], lats[2], lons[3], lats[3])

        return ((width + height) / 2) / projection.meters_per_unit
