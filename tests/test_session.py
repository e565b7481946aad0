from unittest import TestCase
from unittest.mock import Mock

from mapaxis.constructs.config import ProjectConfig, ProjectionConfig
from mapaxis.constructs.projection import AxisOrientation
from mapaxis.projections.projection_registry import ProjectionRegistry
from mapaxis.reconcilers.reconciler_interface import ReconcilerInterface
from mapaxis.reconcilers.reconciliation_result import Outcome, ReconciliationResult
from mapaxis.session import MapSession, load_capabilities_and_config, reconcile
from mapaxis.utils.crs import REFERENCE_CRS_CODE, REFERENCE_CRS_DEFINITION
from mapaxis.utils.exceptions import ParseError
from tests import LAMBERT93, LAMBERT93_PROJ4, WEB_MERCATOR, WEB_MERCATOR_PROJ4, get_test_dir

ASSETS = get_test_dir() / "test_assets"


class TestStartupPhases(TestCase):
    def test_load_capabilities_and_config(self):
        reconciliation_input = load_capabilities_and_config(
            ASSETS / "capabilities_lambert93.xml", ASSETS / "project_config.json"
        )

        self.assertEqual(reconciliation_input.config.projection.ref, LAMBERT93)
        self.assertEqual(len(reconciliation_input.capabilities.bounding_boxes), 4)

    def test_load_from_text(self):
        reconciliation_input = load_capabilities_and_config(
            (ASSETS / "capabilities_lambert93.xml").read_text(),
            (ASSETS / "project_config.json").read_text(),
        )

        self.assertEqual(reconciliation_input.capabilities.layer_name, "montpellier")

    def test_load_reads_str_as_a_document(self):
        with self.assertRaises(ParseError):
            load_capabilities_and_config(
                str(ASSETS / "capabilities_lambert93.xml"), ASSETS / "project_config.json"
            )

    def test_load_rejects_unknown_sources(self):
        with self.assertRaises(TypeError):
            load_capabilities_and_config(42, ASSETS / "project_config.json")

    def test_reconcile_registers_projections(self):
        registry = ProjectionRegistry({WEB_MERCATOR: "+proj=longlat +datum=WGS84 +no_defs"})
        reconciliation_input = load_capabilities_and_config(
            ASSETS / "capabilities_lambert93.xml", ASSETS / "project_config.json"
        )

        result = reconcile(reconciliation_input, registry)

        self.assertEqual(result.outcome, Outcome.ACCEPTED)
        self.assertEqual(registry.lookup(LAMBERT93).param_string, LAMBERT93_PROJ4)
        self.assertEqual(registry.lookup(REFERENCE_CRS_CODE).param_string, REFERENCE_CRS_DEFINITION)
        self.assertIn("EPSG:4326", registry)
        # known definitions are kept
        self.assertEqual(
            registry.lookup(WEB_MERCATOR).param_string, "+proj=longlat +datum=WGS84 +no_defs"
        )

    def test_reconcile_with_another_reconciler(self):
        reconciler = Mock(spec=ReconcilerInterface)
        reconciler.reconcile.return_value = ReconciliationResult(Outcome.ACCEPTED, LAMBERT93)
        registry = ProjectionRegistry()
        reconciliation_input = load_capabilities_and_config(
            ASSETS / "capabilities_lambert93.xml", ASSETS / "project_config.json"
        )

        result = reconcile(reconciliation_input, registry, reconciler)

        reconciler.reconcile.assert_called_once_with(reconciliation_input, registry)
        self.assertEqual(result.outcome, Outcome.ACCEPTED)


class TestMapSession(TestCase):
    def test_start_with_swapped_capabilities(self):
        session = MapSession.start(
            capabilities=ASSETS / "capabilities_lambert93_swapped.xml",
            config=ASSETS / "project_config.json",
        )

        self.assertEqual(session.result.outcome, Outcome.PATCHED_SWAPPED)
        self.assertEqual(
            session.registry.lookup(LAMBERT93).axis_orientation, AxisOrientation.NEU
        )

        north, east = session.transform((3.0, 46.5), REFERENCE_CRS_CODE, session.projection)
        self.assertAlmostEqual(north, 6600000.0, delta=1e-3)
        self.assertAlmostEqual(east, 700000.0, delta=1e-3)

    def test_start_with_direct_capabilities(self):
        session = MapSession.start(
            capabilities=ASSETS / "capabilities_lambert93.xml",
            config=ASSETS / "project_config.json",
        )

        self.assertEqual(session.result.outcome, Outcome.ACCEPTED)
        x, y = session.transform((3.0, 46.5), REFERENCE_CRS_CODE, session.projection)
        self.assertAlmostEqual(x, 700000.0, delta=1e-3)
        self.assertAlmostEqual(y, 6600000.0, delta=1e-3)

        minx, miny, maxx, maxy = session.transform_extent(
            (700000, 6600000, 1200000, 7200000), session.projection, REFERENCE_CRS_CODE
        )
        self.assertAlmostEqual(minx, 3.0, delta=0.5)
        self.assertLess(maxx, 11.0)

    def test_geodesic_correction_is_disabled(self):
        session = MapSession.start(
            capabilities=ASSETS / "capabilities_lambert93.xml",
            config=ASSETS / "project_config.json",
        )

        self.assertEqual(session.point_resolution(2.5, (700000.0, 6600000.0)), 2.5)

    def test_geodesic_correction_can_be_kept(self):
        session = MapSession.start(
            capabilities=ASSETS / "capabilities_lambert93.xml",
            config=ASSETS / "project_config.json",
            disable_geodesic_correction=False,
        )

        resolution = session.point_resolution(2.5, (700000.0, 6600000.0))
        self.assertNotEqual(resolution, 2.5)
        self.assertAlmostEqual(resolution, 2.5, delta=0.01)

    def test_malformed_capabilities_do_not_stop_startup(self):
        session = MapSession.start(
            capabilities="<WMS_Capabilities><Capability/></WMS_Capabilities>",
            config=ASSETS / "project_config.json",
        )

        self.assertEqual(session.result.outcome, Outcome.SKIPPED_NO_CAPABILITIES)
        self.assertEqual(session.registry.lookup(LAMBERT93).param_string, LAMBERT93_PROJ4)
        self.assertIn(REFERENCE_CRS_CODE, session.registry)

    def test_separate_qgis_projection_is_registered(self):
        config = ProjectConfig(
            projection=ProjectionConfig(WEB_MERCATOR, WEB_MERCATOR_PROJ4),
            qgis_project_projection=ProjectionConfig(LAMBERT93, LAMBERT93_PROJ4),
        )

        session = MapSession.start(ASSETS / "capabilities_lambert93.xml", config)

        self.assertEqual(session.result.outcome, Outcome.ACCEPTED)
        self.assertEqual(session.result.code, WEB_MERCATOR)
        self.assertEqual(session.qgis_project_projection, LAMBERT93)
        self.assertIn(LAMBERT93, session.registry)
        self.assertEqual(
            session.registry.point_resolution(LAMBERT93, 2.5, (700000.0, 6600000.0)), 2.5
        )

    def test_malformed_capabilities_mapping_does_not_stop_startup(self):
        session = MapSession.start(
            capabilities={"Capability": ["x"]},
            config=ASSETS / "project_config.json",
        )

        self.assertEqual(session.result.outcome, Outcome.SKIPPED_NO_CAPABILITIES)
        self.assertIn(LAMBERT93, session.registry)

    def test_unparsable_project_definition_does_not_stop_startup(self):
        config = ProjectConfig(ProjectionConfig(LAMBERT93, "+proj=doesnotexist +type=crs"))

        with self.assertLogs("mapaxis.session", level="WARNING"):
            session = MapSession.start(ASSETS / "capabilities_lambert93.xml", config)

        self.assertEqual(session.result.outcome, Outcome.SKIPPED_TRANSFORM_FAILED)
        self.assertEqual(
            session.registry.lookup(LAMBERT93).param_string, "+proj=doesnotexist +type=crs"
        )
