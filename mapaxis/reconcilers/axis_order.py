from __future__ import annotations

import logging
from typing import Sequence

from mapaxis.constructs.extent import BoundingBox, GeographicExtent
from mapaxis.constructs.projection import AxisOrientation, with_neu_axis
from mapaxis.constructs.reconciliation_input import ReconciliationInput
from mapaxis.projections.registry_interface import RegistryInterface
from mapaxis.projections.transformer import CoordinateTransformer
from mapaxis.reconcilers.reconciler_interface import ReconcilerInterface
from mapaxis.reconcilers.reconciliation_result import Outcome, ReconciliationResult
from mapaxis.utils.crs import REFERENCE_CRS_CODE
from mapaxis.utils.exceptions import TransformError, UnknownCRS
from mapaxis.utils.geo import extents_intersect

log = logging.getLogger(__name__)

# relative to the magnitude of the compared coordinates, with a floor of 1
DEFAULT_REL_TOLERANCE = 1e-9


def _closer(value: float, near: float, far: float, rel_tolerance: float) -> bool:
    """True if value is closer to near than to far by more than the tolerance."""
    scale = max(abs(value), abs(near), abs(far), 1.0)
    return abs(value - far) - abs(value - near) > rel_tolerance * scale


def swapped_order_matches(
    candidate: Sequence[float],
    declared: Sequence[float],
    rel_tolerance: float = DEFAULT_REL_TOLERANCE,
) -> bool:
    """
    Test whether a declared extent is closer to a candidate extent once its axes are swapped.

    Each of the four candidate values must be closer to the declared value of the
    other axis than to the declared value of its own axis:
    E0 to B1, E1 to B0, E2 to B3 and E3 to B2. Near-ties, within the tolerance, do
    not count as closer, so an extent that is nearly square in one axis fails this
    test rather than being misread as swapped.

    Args:
        candidate: The extent computed from the geographic extent, (E0, E1, E2, E3)
        declared: The extent advertised by the server, (B0, B1, B2, B3)
        rel_tolerance: The relative tolerance of each comparison

    Returns:
        True if all four comparisons favor the swapped order

    Examples:
        >>> swapped_order_matches((100, 6000, 1200, 7100), (6600, 700, 7200, 1200))
        True
        >>> swapped_order_matches((100, 6000, 1200, 7100), (700, 6600, 1200, 7200))
        False
    """
    e0, e1, e2, e3 = candidate
    b0, b1, b2, b3 = declared
    return (
        _closer(e0, b1, b0, rel_tolerance)
        and _closer(e1, b0, b1, rel_tolerance)
        and _closer(e2, b3, b2, rel_tolerance)
        and _closer(e3, b2, b3, rel_tolerance)
    )


class AxisOrderReconciler(ReconcilerInterface):
    """
    Detects a project CRS whose coordinates are served in (north, east) order and marks it as such.

    The CRS code alone does not reliably tell the axis order a server uses, so the
    reconciler infers it from the capabilities. The geographic extent, always in
    (longitude, latitude) order, is taken as ground truth and transformed into the
    project CRS with the current definition. If the bounding box the server
    advertises for the project CRS only lines up with that extent once its axes are
    swapped, the definition is rewritten with a '+axis=neu' override. Otherwise the
    bounding box is transformed back to the reference CRS: if it does not even
    intersect the geographic extent, the axis order is reversed as well.

    The registry is rewritten at most once, through a single commit.

    Args:
        reference_crs: The code of the geographic reference CRS, which must be registered. Default is CRS:84.
        rel_tolerance: The relative tolerance of the proximity comparisons

    Examples:
        >>> reconciler = AxisOrderReconciler()
        >>> result = reconciler.reconcile(ReconciliationInput(capabilities, config), registry)
        >>> result.outcome
        <Outcome.PATCHED_SWAPPED: 'patched_swapped'>
        >>> registry.lookup("EPSG:2154").param_string
        '+proj=lcc ... +type=crs +axis=neu'
    """

    def __init__(
        self,
        reference_crs: str = REFERENCE_CRS_CODE,
        rel_tolerance: float = DEFAULT_REL_TOLERANCE,
    ):
        self.reference_crs = reference_crs
        self.rel_tolerance = rel_tolerance

    def reconcile(
        self, reconciliation_input: ReconciliationInput, registry: RegistryInterface
    ) -> ReconciliationResult:
        projection = reconciliation_input.config.projection
        capabilities = reconciliation_input.capabilities
        return self.reconcile_projection(
            project_ref=projection.ref,
            project_param_string=projection.proj4,
            bounding_boxes=capabilities.bounding_boxes,
            geographic_extent=capabilities.geographic_extent,
            registry=registry,
        )

    def reconcile_projection(
        self,
        project_ref: str,
        project_param_string: str,
        bounding_boxes: Sequence[BoundingBox],
        geographic_extent: GeographicExtent,
        registry: RegistryInterface,
    ) -> ReconciliationResult:
        """
        Reconcile the axis order of one CRS against a list of bounding boxes.

        Only bounding boxes advertised for project_ref are examined, in order. A box
        whose transforms fail is skipped and the next one is tried; the first box that
        can be evaluated decides the outcome.

        Args:
            project_ref: The project CRS code; an empty code disables reconciliation
            project_param_string: The base definition of the project CRS, without axis override
            bounding_boxes: The bounding boxes advertised by the server
            geographic_extent: The authoritative extent in the reference CRS
            registry: The projection registry to check and, if needed, commit to

        Returns:
            A ReconciliationResult describing the decision. Nothing is raised for
            geometric mismatches or failed transforms.
        """
        if not project_ref:
            log.info("no project projection configured; skipping axis order check")
            return ReconciliationResult(Outcome.SKIPPED_NO_PROJECTION)

        matching = [b for b in bounding_boxes if b.crs == project_ref]
        if not matching:
            log.info(
                "capabilities advertise no bounding box for %s; skipping axis order check",
                project_ref,
            )
            return ReconciliationResult(Outcome.SKIPPED_NO_BOUNDING_BOX, code=project_ref)

        transformer = CoordinateTransformer(registry)

        for bbox in matching:
            definition = registry.lookup(project_ref)
            if definition is None:
                log.warning("%s is not registered; skipping bounding box %s", project_ref, bbox.extent)
                continue

            if definition.axis_orientation != AxisOrientation.ENU:
                log.info(
                    "%s axis orientation is %s; nothing to fix",
                    project_ref,
                    definition.axis_orientation.value,
                )
                return ReconciliationResult(
                    Outcome.ALREADY_REVERSED, code=project_ref, bounding_box=bbox
                )

            try:
                candidate = transformer.transform_extent(
                    geographic_extent.extent, self.reference_crs, project_ref
                )
            except (UnknownCRS, TransformError) as e:
                log.warning("skipping bounding box %s of %s: %s", bbox.extent, project_ref, e)
                continue

            log.debug(
                "%s geographic extent %s -> %s, advertised %s",
                project_ref,
                geographic_extent.extent,
                candidate,
                bbox.extent,
            )

            if swapped_order_matches(candidate, bbox.extent, self.rel_tolerance):
                return self._fix(
                    registry,
                    project_ref,
                    project_param_string or definition.param_string,
                    Outcome.PATCHED_SWAPPED,
                    bbox,
                    candidate,
                )

            try:
                geo_extent = transformer.transform_extent(
                    bbox.extent, project_ref, self.reference_crs
                )
            except (UnknownCRS, TransformError) as e:
                log.warning("skipping bounding box %s of %s: %s", bbox.extent, project_ref, e)
                continue

            if not extents_intersect(geo_extent, geographic_extent.extent):
                return self._fix(
                    registry,
                    project_ref,
                    project_param_string or definition.param_string,
                    Outcome.PATCHED_NO_INTERSECTION,
                    bbox,
                    candidate,
                )

            log.info("%s axis order agrees with the capabilities", project_ref)
            return ReconciliationResult(
                Outcome.ACCEPTED,
                code=project_ref,
                bounding_box=bbox,
                candidate_extent=candidate,
            )

        return ReconciliationResult(Outcome.SKIPPED_TRANSFORM_FAILED, code=project_ref)

    def _fix(
        self,
        registry: RegistryInterface,
        code: str,
        base_param_string: str,
        outcome: Outcome,
        bbox: BoundingBox,
        candidate,
    ) -> ReconciliationResult:
        param_string = with_neu_axis(base_param_string)
        registry.commit(code, param_string)
        log.info("%s axis order is reversed (%s); registered '%s'", code, outcome.value, param_string)
        return ReconciliationResult(
            outcome,
            code=code,
            bounding_box=bbox,
            candidate_extent=candidate,
            param_string=param_string,
        )
