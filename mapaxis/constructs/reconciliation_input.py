from typing import NamedTuple

from mapaxis.constructs.config import ProjectConfig
from mapaxis.readers.wms_capabilities import WmsCapabilities


class ReconciliationInput(NamedTuple):
    """
    Everything a reconciler needs, produced by the loading phase of startup.

    Attributes:
        capabilities: The parsed capabilities of the map server
        config: The project configuration
    """

    capabilities: WmsCapabilities
    config: ProjectConfig
