"""Constants for input locations, thresholds and projections."""

DEFAULT_SST_DIR = "data/sst"
DEFAULT_DEPTH_PATH = "data/depth.tif"
DEFAULT_REGIONS_PATH = "data/wc_regions_clean.shp"
DEFAULT_REGION_LABEL_FIELD = "rgn"
DEFAULT_OUTPUT_DIR = "output"

DEFAULT_START_YEAR = 2008
DEFAULT_END_YEAR = 2012

SST_FILE_TEMPLATE = "average_annual_sst_{year}.tif"

# Temperature in Celsius, depth in meters (negative below sea level).
DEFAULT_TEMP_LOW = 14.8
DEFAULT_TEMP_HIGH = 22.3
DEFAULT_DEPTH_LOW = -150.0
DEFAULT_DEPTH_HIGH = 0.0

KELVIN_OFFSET = 273.15
# float32 Kelvin near 300 K is stored to about 3e-5; round Celsius below that.
CELSIUS_DECIMALS = 4

# UTM zone 10N covers the US West Coast EEZ.
DEFAULT_AREA_CRS = "EPSG:32610"
MAP_CRS = "EPSG:4326"
# Leaflet draws image overlays in Web Mercator.
WEB_MERCATOR_CRS = "EPSG:3857"

SUITABILITY_MAP_FILENAME = "suitability_map.html"
SUITABILITY_REPORT_FILENAME = "suitability_report.html"

SUITABLE_COLOR_RGBA: tuple[int, int, int, int] = (214, 39, 40, 200)
