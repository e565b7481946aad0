from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import requests

from mapaxis.constructs.extent import BoundingBox, GeographicExtent
from mapaxis.utils.exceptions import ParseError
from mapaxis.utils.keys import (
    BOUNDING_BOX_ATTRIBUTES,
    BOUNDING_BOX_KEY,
    CAPABILITY_KEY,
    CRS_ATTRIBUTES,
    CRS_KEY,
    EXTENT_KEY,
    GEOGRAPHIC_BOUNDING_BOX_KEY,
    GEOGRAPHIC_BOUNDS_ELEMENTS,
    LATLON_BOUNDING_BOX_KEY,
    LAYER_KEY,
)

log = logging.getLogger(__name__)

DEFAULT_WMS_VERSION = "1.3.0"
DEFAULT_TIMEOUT = 30


def _local_name(tag: str) -> str:
    """Strip the namespace from an element tag."""
    return tag.rsplit("}", 1)[-1]


def _child(element: ET.Element, name: str) -> Optional[ET.Element]:
    for child in element:
        if _local_name(child.tag) == name:
            return child
    return None


def _children(element: ET.Element, name: str) -> List[ET.Element]:
    return [child for child in element if _local_name(child.tag) == name]


def _to_float(value: Any, what: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ParseError(f"{what} must be a number but found {value!r}") from e


def _parse_bounding_box(element: ET.Element) -> BoundingBox:
    crs = None
    for attribute in CRS_ATTRIBUTES:
        crs = element.get(attribute)
        if crs:
            break
    if not crs:
        raise ParseError("found a BoundingBox without a CRS")

    values = [
        _to_float(element.get(a), f"BoundingBox {crs} {a}")
        for a in BOUNDING_BOX_ATTRIBUTES
    ]
    return BoundingBox.from_values(crs, values)


def _parse_geographic_extent(layer: ET.Element) -> GeographicExtent:
    ex_bbox = _child(layer, GEOGRAPHIC_BOUNDING_BOX_KEY)
    if ex_bbox is not None:
        values = []
        for name in GEOGRAPHIC_BOUNDS_ELEMENTS:
            bound = _child(ex_bbox, name)
            if bound is None:
                raise ParseError(f"{GEOGRAPHIC_BOUNDING_BOX_KEY} has no {name}")
            values.append(_to_float((bound.text or "").strip(), name))
        return GeographicExtent(*values)

    # WMS 1.1.1 documents carry the geographic extent as attributes
    latlon_bbox = _child(layer, LATLON_BOUNDING_BOX_KEY)
    if latlon_bbox is not None:
        values = [
            _to_float(latlon_bbox.get(a), f"{LATLON_BOUNDING_BOX_KEY} {a}")
            for a in BOUNDING_BOX_ATTRIBUTES
        ]
        return GeographicExtent(*values)

    raise ParseError("root layer has no geographic bounding box")


class WmsCapabilities:
    """
    The parts of a WMS capabilities document used to reconcile axis order.

    Only the root layer is read: its bounding boxes, in the order the server lists
    them, and its geographic extent in the reference CRS.

    Args:
        bounding_boxes: The CRS-tagged bounding boxes of the root layer
        geographic_extent: The geographic extent of the root layer
        version: The WMS version of the document, if known
        layer_name: The name of the root layer, if any

    Examples:
        >>> from mapaxis.readers.wms_capabilities import WmsCapabilities
        >>>
        >>> # Parse a document fetched elsewhere
        >>> capabilities = WmsCapabilities.from_xml(xml_text)
        >>> capabilities.bounding_boxes_for("EPSG:2154")
        [BoundingBox(crs='EPSG:2154', extent=(700000.0, 6600000.0, 1200000.0, 7200000.0))]
        >>>
        >>> # Or ask the server directly
        >>> capabilities = WmsCapabilities.from_url("https://example.org/wms")
    """

    def __init__(
        self,
        bounding_boxes: Iterable[BoundingBox],
        geographic_extent: GeographicExtent,
        version: Optional[str] = None,
        layer_name: Optional[str] = None,
    ):
        self.bounding_boxes = list(bounding_boxes)
        self.geographic_extent = geographic_extent
        self.version = version
        self.layer_name = layer_name

    def __repr__(self):
        return (
            f"WmsCapabilities(version={self.version}, layer_name={self.layer_name}, "
            f"bounding_boxes={len(self.bounding_boxes)}, "
            f"geographic_extent={self.geographic_extent.extent})"
        )

    def bounding_boxes_for(self, crs: str) -> List[BoundingBox]:
        """
        Get the bounding boxes advertised for a CRS.

        Args:
            crs: The CRS code to filter on; codes are compared exactly

        Returns:
            The matching bounding boxes in document order
        """
        return [b for b in self.bounding_boxes if b.crs == crs]

    @classmethod
    def from_xml(cls, payload: Union[str, bytes]) -> WmsCapabilities:
        """
        Parse a WMS GetCapabilities response.

        Both namespaced WMS 1.3.0 documents and WMS 1.1.1 documents are accepted. For
        1.1.1 the CRS is read from the 'SRS' attribute and the geographic extent from
        LatLonBoundingBox.

        Args:
            payload: The XML document

        Returns:
            A new WmsCapabilities instance

        Raises:
            ParseError: If the payload is not XML or lacks the root layer, its bounding boxes or its geographic extent
        """
        try:
            root = ET.fromstring(payload)
        except ET.ParseError as e:
            raise ParseError("capabilities document is not valid xml") from e

        capability = _child(root, CAPABILITY_KEY)
        if capability is None:
            raise ParseError(f"capabilities document has no {CAPABILITY_KEY} element")

        layer = _child(capability, LAYER_KEY)
        if layer is None:
            raise ParseError(f"capabilities document has no root {LAYER_KEY}")

        bbox_elements = _children(layer, BOUNDING_BOX_KEY)
        if not bbox_elements:
            raise ParseError("root layer has no BoundingBox list")

        bounding_boxes = [_parse_bounding_box(e) for e in bbox_elements]
        geographic_extent = _parse_geographic_extent(layer)

        name = _child(layer, "Name")
        layer_name = name.text.strip() if name is not None and name.text else None

        capabilities = cls(
            bounding_boxes=bounding_boxes,
            geographic_extent=geographic_extent,
            version=root.get("version"),
            layer_name=layer_name,
        )
        log.debug("parsed %s", capabilities)
        return capabilities

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> WmsCapabilities:
        """
        Build capabilities from an already parsed document.

        The mapping follows the layout of the XML document, with each bounding box
        given as a mapping of 'crs' and 'extent':

            {
                "version": "1.3.0",
                "Capability": {
                    "Layer": {
                        "BoundingBox": [{"crs": "EPSG:2154", "extent": [...]}],
                        "EX_GeographicBoundingBox": [west, south, east, north],
                    }
                }
            }

        Raises:
            ParseError: If the root layer, its bounding boxes or its geographic extent are missing or malformed
        """
        capability = d.get(CAPABILITY_KEY) if isinstance(d, dict) else None
        if not isinstance(capability, dict):
            raise ParseError(f"capabilities have no {CAPABILITY_KEY} mapping")

        layer = capability.get(LAYER_KEY)
        if not isinstance(layer, dict):
            raise ParseError(f"capabilities have no root {LAYER_KEY}")

        raw_boxes = layer.get(BOUNDING_BOX_KEY)
        if not raw_boxes or not isinstance(raw_boxes, (list, tuple)):
            raise ParseError("root layer has no BoundingBox list")

        bounding_boxes = []
        for raw in raw_boxes:
            try:
                crs = raw[CRS_KEY]
                values = [_to_float(v, f"BoundingBox {crs} extent") for v in raw[EXTENT_KEY]]
                bounding_boxes.append(BoundingBox.from_values(crs, values))
            except (KeyError, TypeError, ValueError) as e:
                raise ParseError(f"malformed BoundingBox {raw!r}") from e

        raw_extent = layer.get(GEOGRAPHIC_BOUNDING_BOX_KEY)
        if not isinstance(raw_extent, (list, tuple)) or len(raw_extent) != 4:
            raise ParseError("root layer has no geographic bounding box")
        geographic_extent = GeographicExtent(
            *[_to_float(v, GEOGRAPHIC_BOUNDING_BOX_KEY) for v in raw_extent]
        )

        return cls(
            bounding_boxes=bounding_boxes,
            geographic_extent=geographic_extent,
            version=d.get("version"),
            layer_name=layer.get("Name"),
        )

    @classmethod
    def from_file(cls, file: Union[Path, str]) -> WmsCapabilities:
        filepath = Path(file)
        if not filepath.is_file():
            raise FileNotFoundError(file)
        return cls.from_xml(filepath.read_bytes())

    @classmethod
    def from_url(
        cls,
        url: str,
        version: str = DEFAULT_WMS_VERSION,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> WmsCapabilities:
        """
        Fetch and parse the capabilities of a WMS server.

        Args:
            url: The WMS service address
            version: The WMS version to request. Default is 1.3.0.
            timeout: Seconds to wait for the server. Default is 30.

        Returns:
            A new WmsCapabilities instance

        Raises:
            requests.HTTPError: If the server returns an error response
            ParseError: If the response is not a usable capabilities document
        """
        params = {"SERVICE": "WMS", "REQUEST": "GetCapabilities", "VERSION": version}
        log.info("fetching capabilities from %s", url)
        r = requests.get(url, params=params, timeout=timeout)

        if not r.status_code == requests.codes.ok:
            r.raise_for_status()

        return cls.from_xml(r.content)
