from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

from mapaxis.constructs.config import ProjectConfig
from mapaxis.constructs.extent import Extent
from mapaxis.constructs.projection import Point
from mapaxis.constructs.reconciliation_input import ReconciliationInput
from mapaxis.projections.projection_registry import (
    ProjectionRegistry,
    identity_point_resolution,
)
from mapaxis.projections.registry_interface import RegistryInterface
from mapaxis.projections.transformer import CoordinateTransformer
from mapaxis.readers.wms_capabilities import WmsCapabilities
from mapaxis.reconcilers.axis_order import AxisOrderReconciler
from mapaxis.reconcilers.reconciler_interface import ReconcilerInterface
from mapaxis.reconcilers.reconciliation_result import Outcome, ReconciliationResult
from mapaxis.utils.crs import REFERENCE_CRS_CODE, REFERENCE_CRS_DEFINITION
from mapaxis.utils.exceptions import ParseError, TransformError

log = logging.getLogger(__name__)

CapabilitiesSource = Union[WmsCapabilities, Dict[str, Any], str, bytes, Path]
ConfigSource = Union[ProjectConfig, Dict[str, Any], str, bytes, Path]


def _read_capabilities(source: CapabilitiesSource) -> WmsCapabilities:
    if isinstance(source, WmsCapabilities):
        return source
    if isinstance(source, Path):
        return WmsCapabilities.from_file(source)
    if isinstance(source, dict):
        return WmsCapabilities.from_dict(source)
    if isinstance(source, (str, bytes)):
        return WmsCapabilities.from_xml(source)
    raise TypeError(f"cannot read capabilities from {type(source)}")


def _read_config(source: ConfigSource) -> ProjectConfig:
    if isinstance(source, ProjectConfig):
        return source
    if isinstance(source, Path):
        return ProjectConfig.from_file(source)
    if isinstance(source, dict):
        return ProjectConfig.from_dict(source)
    if isinstance(source, (str, bytes)):
        return ProjectConfig.from_json(source)
    raise TypeError(f"cannot read a project config from {type(source)}")


def load_capabilities_and_config(
    capabilities: CapabilitiesSource, config: ConfigSource
) -> ReconciliationInput:
    """
    First phase of startup: load the server capabilities and the project configuration.

    Paths must be given as pathlib.Path objects; a str is always read as the
    document itself.

    Args:
        capabilities: Parsed capabilities, a parsed mapping, an XML document or a Path to one
        config: A ProjectConfig, a parsed mapping, a json document or a Path to one

    Returns:
        The input of the reconciliation phase

    Raises:
        ParseError: If the capabilities document is malformed
        ConfigError: If the project configuration is malformed
    """
    return ReconciliationInput(
        capabilities=_read_capabilities(capabilities),
        config=_read_config(config),
    )


def register_project_projections(config: ProjectConfig, registry: RegistryInterface):
    """
    Register the definitions a project needs before its axis order is checked.

    The table of known definitions and the project CRS are only registered when
    their code is unknown, so definitions already in the registry win. The reference
    CRS is always (re)defined in (east, north) order.
    """
    for code, param_string in config.proj4_defs.items():
        if code and not registry.is_registered(code):
            registry.register(code, param_string)

    projection = config.projection
    if projection.is_configured and not registry.is_registered(projection.ref):
        registry.register(projection.ref, projection.proj4)

    registry.register(REFERENCE_CRS_CODE, REFERENCE_CRS_DEFINITION)
    registry.rebuild_all()


def reconcile(
    reconciliation_input: ReconciliationInput,
    registry: RegistryInterface,
    reconciler: Optional[ReconcilerInterface] = None,
) -> ReconciliationResult:
    """
    Second phase of startup: register the project's projections and reconcile their axis order.

    Must only be called with the result of load_capabilities_and_config, and before
    any coordinate is transformed with the registry.

    Args:
        reconciliation_input: The loaded capabilities and project configuration
        registry: The projection registry to populate and correct
        reconciler: The reconciler to run. Default is an AxisOrderReconciler.

    Returns:
        The reconciler's decision
    """
    register_project_projections(reconciliation_input.config, registry)
    reconciler = reconciler or AxisOrderReconciler()
    return reconciler.reconcile(reconciliation_input, registry)


class MapSession:
    """
    The projection state of one web-map session, from startup to teardown.

    A session owns its projection registry and the coordinate transformer reading
    from it. It is built with MapSession.start, which runs both startup phases; once
    started, the registry is only read.

    Args:
        config: The project configuration
        registry: The projection registry, already reconciled
        result: The reconciliation decision, if reconciliation ran
        disable_geodesic_correction: If True (default), point resolutions of the project projections are not adjusted for ellipsoidal distortion, so displayed scales stay rounded

    Examples:
        >>> session = MapSession.start(
        ...     capabilities=Path("capabilities.xml"),
        ...     config=Path("project_config.json"),
        ... )
        >>> session.transform((3.0, 46.5), "CRS:84", session.projection)
    """

    def __init__(
        self,
        config: ProjectConfig,
        registry: RegistryInterface,
        result: Optional[ReconciliationResult] = None,
        disable_geodesic_correction: bool = True,
    ):
        self.config = config
        self.registry = registry
        self.result = result
        self.transformer = CoordinateTransformer(registry)

        self._register_display_projections()
        if disable_geodesic_correction:
            for code in {self.projection, self.qgis_project_projection}:
                if not code:
                    continue
                try:
                    registry.set_point_resolution(code, identity_point_resolution)
                except TransformError as e:
                    log.warning("geodesic correction of %s is not disabled: %s", code, e)

    @classmethod
    def start(
        cls,
        capabilities: CapabilitiesSource,
        config: ConfigSource,
        registry: Optional[RegistryInterface] = None,
        reconciler: Optional[ReconcilerInterface] = None,
        disable_geodesic_correction: bool = True,
    ) -> MapSession:
        """
        Load the capabilities and configuration, reconcile the axis order and build a session.

        A malformed capabilities document does not stop startup: reconciliation is
        skipped and the registry keeps the configured definitions.

        Args:
            capabilities: The server capabilities, in any form load_capabilities_and_config accepts
            config: The project configuration, in any form load_capabilities_and_config accepts
            registry: The registry to populate. Default is a new, empty ProjectionRegistry.
            reconciler: The reconciler to run. Default is an AxisOrderReconciler.
            disable_geodesic_correction: See MapSession

        Returns:
            A started MapSession

        Raises:
            ConfigError: If the project configuration is malformed
        """
        registry = registry if registry is not None else ProjectionRegistry()
        project_config = _read_config(config)

        try:
            reconciliation_input = load_capabilities_and_config(capabilities, project_config)
        except ParseError as e:
            log.warning("could not read capabilities, axis order is not checked: %s", e)
            register_project_projections(project_config, registry)
            result = ReconciliationResult(
                Outcome.SKIPPED_NO_CAPABILITIES, code=project_config.projection.ref
            )
        else:
            result = reconcile(reconciliation_input, registry, reconciler)

        log.info("session started: %s", result.outcome.value)
        return cls(
            config=project_config,
            registry=registry,
            result=result,
            disable_geodesic_correction=disable_geodesic_correction,
        )

    def _register_display_projections(self):
        changed = False
        for projection in (self.config.projection, self.config.qgis_project_projection):
            if projection.is_configured and not self.registry.is_registered(projection.ref):
                self.registry.register(projection.ref, projection.proj4)
                changed = True
        if changed:
            self.registry.rebuild_all()

    @property
    def projection(self) -> str:
        """The code of the CRS the map is displayed in."""
        return self.config.projection.ref

    @property
    def qgis_project_projection(self) -> str:
        return self.config.qgis_project_projection.ref

    def transform(self, point: Sequence[float], source: str, destination: str) -> Point:
        """
        Transform a coordinate from source projection to destination projection.

        See CoordinateTransformer.transform_point.
        """
        return self.transformer.transform_point(point, source, destination)

    def transform_extent(
        self, extent: Sequence[float], source: str, destination: str
    ) -> Extent:
        """
        Transform an extent from source projection to destination projection.

        See CoordinateTransformer.transform_extent.
        """
        return self.transformer.transform_extent(extent, source, destination)

    def point_resolution(self, resolution: float, point: Point) -> float:
        return self.registry.point_resolution(self.projection, resolution, point)
