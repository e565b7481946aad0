"""Standard key names used when reading capabilities documents and project configs.

These constants define the element, attribute and dictionary keys mapaxis reads.
Using consistent keys keeps the XML reader and the dictionary reader in step.
"""

CAPABILITY_KEY = "Capability"
LAYER_KEY = "Layer"
BOUNDING_BOX_KEY = "BoundingBox"
GEOGRAPHIC_BOUNDING_BOX_KEY = "EX_GeographicBoundingBox"
LATLON_BOUNDING_BOX_KEY = "LatLonBoundingBox"

# Attribute carrying the CRS code of a bounding box (1.3.0 and 1.1.1)
CRS_ATTRIBUTES = ("CRS", "SRS")
BOUNDING_BOX_ATTRIBUTES = ("minx", "miny", "maxx", "maxy")
GEOGRAPHIC_BOUNDS_ELEMENTS = (
    "westBoundLongitude",
    "southBoundLatitude",
    "eastBoundLongitude",
    "northBoundLatitude",
)

# Parsed-mapping keys for bounding boxes
CRS_KEY = "crs"
EXTENT_KEY = "extent"

# Project config keys
OPTIONS_KEY = "options"
PROJECTION_KEY = "projection"
QGIS_PROJECTION_KEY = "qgisProjectProjection"
REF_KEY = "ref"
PROJ4_KEY = "proj4"
PROJ4_DEFS_KEY = "proj4Defs"
