"""Coordinate Reference System (CRS) constants used throughout mapaxis.

This module defines the reference CRS used as ground truth during axis-order
reconciliation:
- REFERENCE_CRS: CRS:84, WGS84 geographic coordinates in (longitude, latitude) order
- LATLON_CRS: EPSG:4326, used to measure geodesic point resolution
"""

from pyproj import CRS

# Same datum as EPSG:4326 but with east-north (ENU) axis orientation
# About axis orientation: https://proj.org/en/9.3/usage/projections.html#axis-orientation
REFERENCE_CRS_CODE = "CRS:84"
REFERENCE_CRS_DEFINITION = "+proj=longlat +datum=WGS84 +no_defs +type=crs"

# WGS84 latitude/longitude coordinate system (EPSG:4326)
LATLON_CRS = CRS(4326)

# Axis override token appended to a definition whose axis order is reversed
AXIS_KEY = "axis"
NEU_AXIS_TOKEN = "+axis=neu"
