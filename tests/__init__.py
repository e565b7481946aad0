from pathlib import Path


def get_test_dir() -> Path:
    return Path(__file__).parent


LAMBERT93 = "EPSG:2154"
LAMBERT93_PROJ4 = (
    "+proj=lcc +lat_0=46.5 +lon_0=3 +lat_1=49 +lat_2=44 +x_0=700000 +y_0=6600000 "
    "+ellps=GRS80 +towgs84=0,0,0,0,0,0,0 +units=m +no_defs +type=crs"
)
WEB_MERCATOR = "EPSG:3857"
WEB_MERCATOR_PROJ4 = (
    "+proj=merc +a=6378137 +b=6378137 +lat_ts=0 +lon_0=0 +x_0=0 +y_0=0 +k=1 "
    "+units=m +nadgrids=@null +wktext +no_defs +type=crs"
)
