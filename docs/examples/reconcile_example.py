"""
# Axis Order Example

An example of checking the axis order of a project's CRS against the capabilities of a WMS server
"""


def main():
    from pathlib import Path

    """
    First, we load the server capabilities and the project configuration.
    The repository ships a sample of each in the test assets, for a project displayed in Lambert-93 (EPSG:2154).

    In this capabilities document the server advertises its EPSG:2154 bounding box in (north, east) order,
    which is what a WMS 1.3.0 server does when it follows the EPSG axis definition of the CRS:
    """

    assets = Path("tests/test_assets")

    from mapaxis import load_capabilities_and_config

    reconciliation_input = load_capabilities_and_config(
        capabilities=assets / "capabilities_lambert93_swapped.xml",
        config=assets / "project_config.json",
    )

    print(reconciliation_input.capabilities.bounding_boxes_for("EPSG:2154"))

    """
    The capabilities can also be fetched straight from a server with `WmsCapabilities.from_url`,
    and both inputs can be passed as an already parsed mapping or as raw text.

    Next, we build a projection registry and run the reconciliation.
    The registry starts empty; `reconcile` registers the project definitions it needs before checking the axis order:
    """

    from mapaxis import reconcile
    from mapaxis.projections.projection_registry import ProjectionRegistry

    registry = ProjectionRegistry()

    result = reconcile(reconciliation_input, registry)

    print(result.outcome)
    print(registry.lookup("EPSG:2154").param_string)

    """
    The server's numbers fit the geographic extent only when read with the axes swapped,
    so the EPSG:2154 definition is now registered with `+axis=neu`.
    Running the reconciliation again leaves the registry as it is, since the definition is already reversed:
    """

    print(reconcile(reconciliation_input, registry).outcome)

    """
    In an application you'll usually do both phases at once with a `MapSession`,
    which also owns a coordinate transformer reading from the corrected registry:
    """

    from mapaxis import MapSession

    session = MapSession.start(
        capabilities=assets / "capabilities_lambert93_swapped.xml",
        config=assets / "project_config.json",
    )

    north, east = session.transform((3.0, 46.5), "CRS:84", session.projection)

    print(north, east)

    """
    Coordinates in the project CRS now come back as (north, east), matching what the server expects.

    Lastly, extents are transformed with their edges densified, so the result covers the whole area:
    """

    extent = session.transform_extent(
        (-5.0, 41.0, 10.0, 51.0), "CRS:84", session.projection
    )

    print(extent)


if __name__ == "__main__":
    main()
