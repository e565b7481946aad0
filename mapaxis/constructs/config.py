from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, NamedTuple, Optional, Union

from mapaxis.utils.exceptions import ConfigError
from mapaxis.utils.keys import (
    OPTIONS_KEY,
    PROJ4_DEFS_KEY,
    PROJ4_KEY,
    PROJECTION_KEY,
    QGIS_PROJECTION_KEY,
    REF_KEY,
)


class ProjectionConfig(NamedTuple):
    """
    A CRS code and its base proj definition as declared by a project.

    Attributes:
        ref: The CRS code (e.g. 'EPSG:2154'); an empty string means the project has no CRS configured
        proj4: The base proj definition, without any axis override
    """

    ref: str
    proj4: str

    @property
    def is_configured(self) -> bool:
        return self.ref != ""

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> ProjectionConfig:
        if not isinstance(d, dict):
            raise ConfigError(f"projection config must be a mapping but found {d!r}")
        return cls(ref=str(d.get(REF_KEY) or ""), proj4=str(d.get(PROJ4_KEY) or ""))


class ProjectConfig:
    """
    The part of a web-map project configuration that concerns projections.

    A project declares the CRS its map is displayed in, the CRS of its QGIS project
    (usually the same) and can carry a table of extra proj definitions known to the
    application.

    Args:
        projection: The CRS the map is displayed in
        qgis_project_projection: The CRS of the QGIS project. Defaults to projection.
        proj4_defs: Extra definitions keyed by CRS code

    Examples:
        >>> config = ProjectConfig.from_file("tests/test_assets/project_config.json")
        >>> config.projection.ref
        'EPSG:2154'
    """

    def __init__(
        self,
        projection: ProjectionConfig,
        qgis_project_projection: Optional[ProjectionConfig] = None,
        proj4_defs: Optional[Dict[str, str]] = None,
    ):
        self.projection = projection
        self.qgis_project_projection = qgis_project_projection or projection
        self.proj4_defs = dict(proj4_defs or {})

    def __repr__(self):
        return (
            f"ProjectConfig(projection={self.projection.ref!r}, "
            f"qgis_project_projection={self.qgis_project_projection.ref!r}, "
            f"proj4_defs={len(self.proj4_defs)})"
        )

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> ProjectConfig:
        """
        Build a project config from a parsed project configuration.

        The projection entries are read from the 'options' section, using the same
        keys as the web-map configuration: 'projection' and 'qgisProjectProjection',
        each with 'ref' and 'proj4'. Extra definitions are read from a top level
        'proj4Defs' mapping.

        Args:
            d: The parsed configuration

        Returns:
            A new ProjectConfig

        Raises:
            ConfigError: If the 'options' section or its 'projection' entry is missing
        """
        options = d.get(OPTIONS_KEY)
        if not isinstance(options, dict):
            raise ConfigError(f"project config has no '{OPTIONS_KEY}' section")
        if PROJECTION_KEY not in options:
            raise ConfigError(
                f"project config has no '{OPTIONS_KEY}.{PROJECTION_KEY}' entry"
            )

        projection = ProjectionConfig.from_dict(options[PROJECTION_KEY])

        qgis_projection = None
        if options.get(QGIS_PROJECTION_KEY):
            qgis_projection = ProjectionConfig.from_dict(options[QGIS_PROJECTION_KEY])

        proj4_defs = d.get(PROJ4_DEFS_KEY) or {}
        if not isinstance(proj4_defs, dict):
            raise ConfigError(f"'{PROJ4_DEFS_KEY}' must be a mapping of code to definition")

        return cls(
            projection=projection,
            qgis_project_projection=qgis_projection,
            proj4_defs={str(k): str(v) for k, v in proj4_defs.items()},
        )

    @classmethod
    def from_json(cls, s: Union[str, bytes]) -> ProjectConfig:
        try:
            d = json.loads(s)
        except json.JSONDecodeError as e:
            raise ConfigError("project config is not valid json") from e
        if not isinstance(d, dict):
            raise ConfigError("project config must be a json object")
        return cls.from_dict(d)

    @classmethod
    def from_file(cls, file: Union[Path, str]) -> ProjectConfig:
        filepath = Path(file)
        if not filepath.is_file():
            raise FileNotFoundError(file)
        return cls.from_json(filepath.read_text(encoding="utf-8"))
