from __future__ import annotations

from abc import ABCMeta, abstractmethod
from typing import List, Optional

from pyproj import Transformer

from mapaxis.constructs.projection import (
    Point,
    PointResolutionFunction,
    Projection,
    ProjectionDefinition,
)


class RegistryInterface(metaclass=ABCMeta):
    """
    Abstract base class defining the interface of a projection registry.

    A registry maps CRS codes to proj definitions and builds projection objects from
    them. The axis-order reconciler writes to a registry once at startup; the
    coordinate transformer and every later consumer only read from it.

    Subclasses must implement methods for:
    - Registering and looking up definitions
    - Building projection objects
    - Discarding and rebuilding every derived projection object
    """

    @abstractmethod
    def register(self, code: str, param_string: str) -> ProjectionDefinition:
        """
        Register a definition, replacing any prior definition for the same code.

        Projection objects already built for the code are not touched; call
        rebuild_all (or use commit) when the change must reach them.

        Args:
            code: The CRS code
            param_string: The proj definition

        Returns:
            The registered definition
        """

    @abstractmethod
    def lookup(self, code: str) -> Optional[ProjectionDefinition]:
        """
        Get the current definition of a code

        Args:
            code: The CRS code to look up

        Returns:
            The definition or None if the code is not registered
        """

    @abstractmethod
    def codes(self) -> List[str]:
        """
        Get every registered code

        Returns:
            The registered codes in registration order
        """

    @abstractmethod
    def get_projection(self, code: str) -> Projection:
        """
        Get the projection object built from a code's definition.

        Raises:
            UnknownCRS: If the code is not registered
        """

    @abstractmethod
    def transformer(self, source: str, destination: str) -> Transformer:
        """
        Get a transformer between two registered codes, working in (east, north) order.

        Raises:
            UnknownCRS: If either code is not registered
        """

    @abstractmethod
    def rebuild_all(self):
        """
        Discard every cached projection object and rebuild them from the current definitions.
        """

    @abstractmethod
    def set_point_resolution(self, code: str, func: PointResolutionFunction):
        """
        Force a custom point-resolution function on a code's projection.

        Args:
            code: The CRS code
            func: A function of (resolution, point) returning the point resolution
        """

    @abstractmethod
    def point_resolution(self, code: str, resolution: float, point: Point) -> float:
        """
        Get the resolution at a point, in projection units per pixel.

        Args:
            code: The CRS code
            resolution: The nominal resolution in projection units per pixel
            point: The point, in the projection's axis order
        """

    def commit(self, code: str, param_string: str) -> ProjectionDefinition:
        """
        Replace one definition and rebuild every derived projection object.

        Args:
            code: The CRS code
            param_string: The new proj definition

        Returns:
            The registered definition
        """
        definition = self.register(code, param_string)
        self.rebuild_all()
        return definition

    def is_registered(self, code: str) -> bool:
        return self.lookup(code) is not None

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and self.is_registered(code)
