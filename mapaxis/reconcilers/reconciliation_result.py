from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from mapaxis.constructs.extent import BoundingBox, Extent


class Outcome(Enum):
    """
    How an axis-order reconciliation ended.

    Values:
        SKIPPED_NO_PROJECTION: The project has no CRS configured
        SKIPPED_NO_CAPABILITIES: The capabilities document could not be read
        SKIPPED_NO_BOUNDING_BOX: No bounding box is advertised for the project CRS
        SKIPPED_TRANSFORM_FAILED: Every matching bounding box failed to transform
        ALREADY_REVERSED: The project CRS is not in (east, north) order, there is nothing to fix
        ACCEPTED: The current axis order agrees with the capabilities
        PATCHED_SWAPPED: The bounding box matched the geographic extent only with swapped axes
        PATCHED_NO_INTERSECTION: The bounding box, read in the current order, lies outside the geographic extent
    """

    SKIPPED_NO_PROJECTION = "skipped_no_projection"
    SKIPPED_NO_CAPABILITIES = "skipped_no_capabilities"
    SKIPPED_NO_BOUNDING_BOX = "skipped_no_bounding_box"
    SKIPPED_TRANSFORM_FAILED = "skipped_transform_failed"
    ALREADY_REVERSED = "already_reversed"
    ACCEPTED = "accepted"
    PATCHED_SWAPPED = "patched_swapped"
    PATCHED_NO_INTERSECTION = "patched_no_intersection"

    @property
    def patched(self) -> bool:
        return self in (Outcome.PATCHED_SWAPPED, Outcome.PATCHED_NO_INTERSECTION)


@dataclass
class ReconciliationResult:
    """
    The decision taken by a reconciler and the evidence it was based on.

    Attributes:
        outcome: How the reconciliation ended
        code: The project CRS code that was examined
        bounding_box: The bounding box the decision was based on, if any
        candidate_extent: The geographic extent transformed into the project CRS, if computed
        param_string: The definition committed to the registry, if patched
    """

    outcome: Outcome
    code: str = ""
    bounding_box: Optional[BoundingBox] = None
    candidate_extent: Optional[Extent] = None
    param_string: Optional[str] = None

    @property
    def patched(self) -> bool:
        return self.outcome.patched
