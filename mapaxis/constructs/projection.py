from __future__ import annotations

from enum import Enum
from typing import Callable, List, NamedTuple, Optional, Tuple

from pyproj import CRS
from pyproj.exceptions import CRSError

from mapaxis.constructs.extent import Extent, as_extent
from mapaxis.utils.crs import AXIS_KEY, NEU_AXIS_TOKEN
from mapaxis.utils.geo import swap_extent

Point = Tuple[float, float]
PointResolutionFunction = Callable[[float, Point], float]

# meters per degree on the sphere used by web-map scale computations
METERS_PER_DEGREE = 2 * 3.141592653589793 * 6370997 / 360


class AxisOrientation(Enum):
    """
    Order of the first two axes of a CRS.

    Values:
        ENU: (east, north), the standard proj4 order
        NEU: (north, east), reversed order used by many EPSG geographic and some projected CRSs
        UNKNOWN: Any other orientation (e.g. 'wsu') or one that cannot be determined
    """

    ENU = "enu"
    NEU = "neu"
    UNKNOWN = "unknown"

    @classmethod
    def from_token(cls, token: Optional[str]) -> AxisOrientation:
        if token is None:
            return cls.ENU
        token = token.lower()
        for orientation in (cls.ENU, cls.NEU):
            if token == orientation.value:
                return orientation
        return cls.UNKNOWN


def is_proj_string(param_string: str) -> bool:
    return param_string.lstrip().startswith("+")


def _tokens(param_string: str) -> List[str]:
    return param_string.split()


def axis_token(param_string: str) -> Optional[str]:
    """
    Get the value of the '+axis=' parameter of a proj string.

    Args:
        param_string: A proj-style parameter string

    Returns:
        The axis value (e.g. 'neu') or None if the string carries no axis parameter
    """
    prefix = f"+{AXIS_KEY}="
    for token in _tokens(param_string):
        if token.startswith(prefix):
            return token[len(prefix) :]
    return None


def strip_axis(param_string: str) -> str:
    """Remove every '+axis=' parameter from a proj string."""
    prefix = f"+{AXIS_KEY}="
    return " ".join(t for t in _tokens(param_string) if not t.startswith(prefix))


def with_neu_axis(param_string: str) -> str:
    """
    Mark a proj string as having reversed (north, east) axis order.

    Any existing axis parameter is dropped first, so applying this twice gives the
    same string as applying it once.

    Examples:
        >>> with_neu_axis("+proj=longlat +datum=WGS84")
        '+proj=longlat +datum=WGS84 +axis=neu'
        >>> with_neu_axis(with_neu_axis("+proj=longlat +datum=WGS84"))
        '+proj=longlat +datum=WGS84 +axis=neu'
    """
    return f"{strip_axis(param_string)} {NEU_AXIS_TOKEN}"


def _crs_orientation(crs: CRS) -> AxisOrientation:
    axes = crs.axis_info
    if len(axes) < 2:
        return AxisOrientation.UNKNOWN
    directions = (axes[0].direction.lower(), axes[1].direction.lower())
    if directions == ("east", "north"):
        return AxisOrientation.ENU
    if directions == ("north", "east"):
        return AxisOrientation.NEU
    return AxisOrientation.UNKNOWN


def build_crs(param_string: str) -> CRS:
    """
    Build a pyproj CRS from a definition string.

    Proj strings are built without their axis parameter: axis order is applied by
    the transformer, never by PROJ.

    Raises:
        CRSError: If pyproj cannot parse the definition
    """
    if is_proj_string(param_string):
        return CRS.from_proj4(strip_axis(param_string))
    return CRS.from_user_input(param_string)


def orientation_of(param_string: str) -> AxisOrientation:
    """
    Determine the axis orientation declared by a definition string.

    Proj strings declare it with '+axis=' and default to ENU like proj4 does. Any
    other definition (an authority code, WKT) is asked for the direction of its first
    two axes.
    """
    if is_proj_string(param_string):
        return AxisOrientation.from_token(axis_token(param_string))
    try:
        return _crs_orientation(CRS.from_user_input(param_string))
    except CRSError:
        return AxisOrientation.UNKNOWN


class ProjectionDefinition(NamedTuple):
    """
    One entry of the projection registry.

    Attributes:
        code: The CRS code the definition is registered under (e.g. 'EPSG:2154' or a local alias)
        param_string: The definition consumed by the transform engine, possibly with an '+axis=' override
        axis_orientation: The axis orientation the definition declares
    """

    code: str
    param_string: str
    axis_orientation: AxisOrientation

    @classmethod
    def from_param_string(cls, code: str, param_string: str) -> ProjectionDefinition:
        return cls(
            code=code,
            param_string=param_string,
            axis_orientation=orientation_of(param_string),
        )

    @property
    def is_reversed(self) -> bool:
        return self.axis_orientation == AxisOrientation.NEU


class Projection:
    """
    A projection object derived from a ProjectionDefinition.

    Projections are built and cached by the projection registry. A projection keeps
    the axis orientation of the definition it was built from, so it goes stale when
    that definition changes and the registry has not been rebuilt.

    Attributes:
        definition: The definition this projection was built from
        crs: The pyproj CRS in (east, north) order
        point_resolution_function: An optional override for point resolution computations
    """

    def __init__(self, definition: ProjectionDefinition):
        self.definition = definition
        self.crs = build_crs(definition.param_string)
        self.point_resolution_function: Optional[PointResolutionFunction] = None

    def __repr__(self):
        return (
            f"Projection(code={self.code}, "
            f"axis_orientation={self.axis_orientation.value}, units={self.units})"
        )

    @property
    def code(self) -> str:
        return self.definition.code

    @property
    def axis_orientation(self) -> AxisOrientation:
        return self.definition.axis_orientation

    @property
    def units(self) -> str:
        if self.crs.is_geographic:
            return "degrees"
        axes = self.crs.axis_info
        return axes[0].unit_name if axes else "unknown"

    @property
    def meters_per_unit(self) -> float:
        if self.crs.is_geographic:
            return METERS_PER_DEGREE
        axes = self.crs.axis_info
        return axes[0].unit_conversion_factor if axes else 1.0

    def to_xy(self, point: Point) -> Point:
        """Reorder a point given in this projection's axis order to (east, north)."""
        if self.axis_orientation == AxisOrientation.NEU:
            return (point[1], point[0])
        return (point[0], point[1])

    def from_xy(self, point: Point) -> Point:
        """Reorder an (east, north) point to this projection's axis order."""
        # swapping is its own inverse
        return self.to_xy(point)

    def extent_to_xy(self, extent: Extent) -> Extent:
        """Reorder an extent given in this projection's axis order to (minx, miny, maxx, maxy)."""
        if self.axis_orientation == AxisOrientation.NEU:
            return swap_extent(extent)
        return as_extent(extent)

    def extent_from_xy(self, extent: Extent) -> Extent:
        """Reorder a (minx, miny, maxx, maxy) extent to this projection's axis order."""
        return self.extent_to_xy(extent)
