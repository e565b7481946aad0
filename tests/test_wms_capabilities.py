from unittest import TestCase
from unittest.mock import Mock, patch

import requests

from mapaxis.constructs.extent import BoundingBox, GeographicExtent
from mapaxis.readers.wms_capabilities import WmsCapabilities
from mapaxis.utils.exceptions import ParseError
from tests import get_test_dir

ASSETS = get_test_dir() / "test_assets"

MINIMAL = """<?xml version="1.0"?>
<WMS_Capabilities version="1.3.0">
  <Capability>
    <Layer>
      {geographic}
      {boxes}
    </Layer>
  </Capability>
</WMS_Capabilities>
"""
GEOGRAPHIC = """<EX_GeographicBoundingBox>
        <westBoundLongitude>-5</westBoundLongitude>
        <eastBoundLongitude>10</eastBoundLongitude>
        <southBoundLatitude>41</southBoundLatitude>
        <northBoundLatitude>51</northBoundLatitude>
      </EX_GeographicBoundingBox>"""
BOX = '<BoundingBox CRS="EPSG:2154" minx="700000" miny="6600000" maxx="1200000" maxy="7200000"/>'


class TestWmsCapabilities(TestCase):
    def test_from_file(self):
        capabilities = WmsCapabilities.from_file(ASSETS / "capabilities_lambert93.xml")

        self.assertEqual(capabilities.version, "1.3.0")
        self.assertEqual(capabilities.layer_name, "montpellier")
        self.assertEqual(capabilities.geographic_extent, GeographicExtent(-5, 41, 10, 51))
        self.assertEqual(
            [b.crs for b in capabilities.bounding_boxes],
            ["CRS:84", "EPSG:4326", "EPSG:3857", "EPSG:2154"],
        )
        self.assertEqual(
            capabilities.bounding_boxes_for("EPSG:2154"),
            [BoundingBox("EPSG:2154", (700000.0, 6600000.0, 1200000.0, 7200000.0))],
        )

    def test_values_are_kept_in_document_order(self):
        capabilities = WmsCapabilities.from_file(ASSETS / "capabilities_lambert93_swapped.xml")

        self.assertEqual(
            capabilities.bounding_boxes_for("EPSG:2154")[0].extent,
            (6600000.0, 700000.0, 7200000.0, 1200000.0),
        )
        self.assertEqual(
            capabilities.bounding_boxes_for("EPSG:4326")[0].extent, (41.0, -5.0, 51.0, 10.0)
        )

    def test_nested_layers_are_ignored(self):
        capabilities = WmsCapabilities.from_file(ASSETS / "capabilities_lambert93.xml")

        self.assertEqual(len(capabilities.bounding_boxes_for("EPSG:2154")), 1)

    def test_wms_111(self):
        capabilities = WmsCapabilities.from_file(ASSETS / "capabilities_wms111.xml")

        self.assertEqual(capabilities.version, "1.1.1")
        self.assertEqual(capabilities.geographic_extent.extent, (-5.0, 41.0, 10.0, 51.0))
        self.assertEqual(
            capabilities.bounding_boxes,
            [BoundingBox("EPSG:2154", (700000.0, 6600000.0, 1200000.0, 7200000.0))],
        )

    def test_not_xml(self):
        with self.assertRaises(ParseError):
            WmsCapabilities.from_xml("this is not a capabilities document")

    def test_missing_layer(self):
        with self.assertRaises(ParseError):
            WmsCapabilities.from_xml(
                '<WMS_Capabilities version="1.3.0"><Capability/></WMS_Capabilities>'
            )

    def test_missing_bounding_boxes(self):
        with self.assertRaises(ParseError):
            WmsCapabilities.from_xml(MINIMAL.format(geographic=GEOGRAPHIC, boxes=""))

    def test_missing_geographic_extent(self):
        with self.assertRaises(ParseError):
            WmsCapabilities.from_xml(MINIMAL.format(geographic="", boxes=BOX))

    def test_bounding_box_without_crs(self):
        with self.assertRaises(ParseError):
            WmsCapabilities.from_xml(
                MINIMAL.format(geographic=GEOGRAPHIC, boxes=BOX.replace('CRS="EPSG:2154" ', ""))
            )

    def test_non_numeric_values(self):
        with self.assertRaises(ParseError):
            WmsCapabilities.from_xml(
                MINIMAL.format(geographic=GEOGRAPHIC, boxes=BOX.replace('"700000"', '"west"'))
            )

    def test_from_dict(self):
        capabilities = WmsCapabilities.from_dict(
            {
                "version": "1.3.0",
                "Capability": {
                    "Layer": {
                        "Name": "montpellier",
                        "BoundingBox": [
                            {"crs": "CRS:84", "extent": [-5, 41, 10, 51]},
                            {"crs": "EPSG:2154", "extent": [700000, 6600000, 1200000, 7200000]},
                        ],
                        "EX_GeographicBoundingBox": [-5, 41, 10, 51],
                    }
                },
            }
        )

        self.assertEqual(capabilities.layer_name, "montpellier")
        self.assertEqual(len(capabilities.bounding_boxes), 2)
        self.assertEqual(capabilities.geographic_extent, GeographicExtent(-5, 41, 10, 51))

    def test_from_dict_malformed(self):
        with self.assertRaises(ParseError):
            WmsCapabilities.from_dict({"Capability": {}})
        with self.assertRaises(ParseError):
            WmsCapabilities.from_dict(
                {
                    "Capability": {
                        "Layer": {
                            "BoundingBox": [{"crs": "EPSG:2154", "extent": [1, 2, 3]}],
                            "EX_GeographicBoundingBox": [-5, 41, 10, 51],
                        }
                    }
                }
            )

    def test_from_dict_wrong_shapes(self):
        layer = {
            "BoundingBox": [{"crs": "EPSG:2154", "extent": [1, 2, 3, 4]}],
            "EX_GeographicBoundingBox": [-5, 41, 10, 51],
        }
        malformed = [
            {"Capability": ["x"]},
            {"Capability": {"Layer": ["x"]}},
            {"Capability": {"Layer": dict(layer, BoundingBox="EPSG:2154")}},
            {"Capability": {"Layer": dict(layer, BoundingBox=["EPSG:2154"])}},
            {"Capability": {"Layer": dict(layer, EX_GeographicBoundingBox=5)}},
            {"Capability": {"Layer": dict(layer, EX_GeographicBoundingBox="-5,41,10,51")}},
        ]
        for d in malformed:
            with self.subTest(d=d):
                with self.assertRaises(ParseError):
                    WmsCapabilities.from_dict(d)

    def test_from_file_missing(self):
        with self.assertRaises(FileNotFoundError):
            WmsCapabilities.from_file(ASSETS / "does_not_exist.xml")

    @patch("mapaxis.readers.wms_capabilities.requests.get")
    def test_from_url(self, get):
        get.return_value = Mock(
            status_code=requests.codes.ok,
            content=(ASSETS / "capabilities_lambert93.xml").read_bytes(),
        )

        capabilities = WmsCapabilities.from_url("https://example.org/wms")

        self.assertEqual(len(capabilities.bounding_boxes), 4)
        _, kwargs = get.call_args
        self.assertEqual(kwargs["params"]["REQUEST"], "GetCapabilities")
        self.assertEqual(kwargs["params"]["VERSION"], "1.3.0")

    @patch("mapaxis.readers.wms_capabilities.requests.get")
    def test_from_url_error(self, get):
        response = Mock(status_code=500)
        response.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
        get.return_value = response

        with self.assertRaises(requests.HTTPError):
            WmsCapabilities.from_url("https://example.org/wms")
