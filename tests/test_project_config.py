import json
from unittest import TestCase

from mapaxis.constructs.config import ProjectConfig, ProjectionConfig
from mapaxis.utils.exceptions import ConfigError
from tests import LAMBERT93, LAMBERT93_PROJ4, WEB_MERCATOR, get_test_dir


class TestProjectConfig(TestCase):
    def test_from_file(self):
        config = ProjectConfig.from_file(get_test_dir() / "test_assets" / "project_config.json")

        self.assertEqual(config.projection, ProjectionConfig(LAMBERT93, LAMBERT93_PROJ4))
        self.assertEqual(config.qgis_project_projection.ref, LAMBERT93)
        self.assertIn(WEB_MERCATOR, config.proj4_defs)

    def test_qgis_projection_defaults_to_projection(self):
        config = ProjectConfig.from_dict(
            {"options": {"projection": {"ref": LAMBERT93, "proj4": LAMBERT93_PROJ4}}}
        )

        self.assertEqual(config.qgis_project_projection, config.projection)
        self.assertEqual(config.proj4_defs, {})

    def test_empty_ref_is_not_configured(self):
        config = ProjectConfig.from_json(
            json.dumps({"options": {"projection": {"ref": "", "proj4": ""}}})
        )

        self.assertFalse(config.projection.is_configured)

    def test_missing_options(self):
        with self.assertRaises(ConfigError):
            ProjectConfig.from_dict({"layers": {}})

    def test_missing_projection(self):
        with self.assertRaises(ConfigError):
            ProjectConfig.from_dict({"options": {"bbox": []}})

    def test_malformed_projection(self):
        with self.assertRaises(ConfigError):
            ProjectConfig.from_dict({"options": {"projection": "EPSG:2154"}})

    def test_not_json(self):
        with self.assertRaises(ConfigError):
            ProjectConfig.from_json("{options")

    def test_from_file_missing(self):
        with self.assertRaises(FileNotFoundError):
            ProjectConfig.from_file(get_test_dir() / "test_assets" / "missing.json")
