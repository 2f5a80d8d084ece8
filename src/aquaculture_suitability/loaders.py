"""Loading of temperature, depth and region inputs from local files."""

from pathlib import Path

import geopandas as gpd
import numpy as np
import rasterio
from dagster import get_dagster_logger
from pyogrio.errors import DataLayerError, DataSourceError
from rasterio.errors import RasterioIOError

from aquaculture_suitability.config.constants import SST_FILE_TEMPLATE
from aquaculture_suitability.errors import InputDataError
from aquaculture_suitability.geospatial.vector_ops import validate_regions
from aquaculture_suitability.models.models import Grid

logger = get_dagster_logger(__name__)


def sst_file_path(sst_dir: str | Path, year: int) -> Path:
    """Build the path of a yearly sea-surface temperature file.

    :param sst_dir: Directory holding the yearly files
    :param year: Year
    :returns: File path
    """
    return Path(sst_dir) / SST_FILE_TEMPLATE.format(year=year)


def _read_single_band(path: Path, input_name: str) -> Grid:
    """Read the first band of a raster, turning nodata cells into NaN.

    :param path: Raster path
    :param input_name: Input name used in error messages
    :returns: 2-D Grid
    """
    if not path.exists():
        raise InputDataError(input_name, f"file not found: {path}")
    try:
        with rasterio.open(path) as src:
            data = src.read(1, masked=True).astype("float32").filled(np.nan)
            transform = src.transform
            crs = src.crs
    except RasterioIOError as e:
        raise InputDataError(input_name, f"cannot read {path}: {e}") from e

    if crs is None:
        raise InputDataError(input_name, f"{path} has no CRS")
    return Grid(data=data, transform=transform, crs=crs)


def load_temperature_series(sst_dir: str | Path, start_year: int, end_year: int) -> Grid:
    """Load yearly sea-surface temperature files into one multi-band grid.

    Every year in ``[start_year, end_year]`` must be present and all files
    must share CRS, transform and shape.

    :param sst_dir: Directory holding ``average_annual_sst_<year>.tif`` files
    :param start_year: First year, inclusive
    :param end_year: Last year, inclusive
    :returns: 3-D Grid (years, rows, cols) in Kelvin
    """
    if start_year > end_year:
        raise InputDataError("sst", f"start year {start_year} is after end year {end_year}")

    bands: list[Grid] = []
    for year in range(start_year, end_year + 1):
        path = sst_file_path(sst_dir, year)
        band = _read_single_band(path, f"sst {year}")
        if bands:
            first = bands[0]
            if band.crs != first.crs or band.transform != first.transform or band.shape != first.shape:
                raise InputDataError(
                    f"sst {year}",
                    f"{path.name} does not share CRS, transform and shape with {start_year}",
                )
        logger.debug(f"Loaded {path.name} with shape {band.shape}")
        bands.append(band)

    stacked = np.stack([band.data for band in bands]).astype("float32")
    logger.info(f"Loaded {len(bands)} SST bands for {start_year}-{end_year}")
    return Grid(data=stacked, transform=bands[0].transform, crs=bands[0].crs)


def load_depth_grid(path: str | Path) -> Grid:
    """Load the bathymetry raster.

    :param path: Raster path
    :returns: 2-D Grid in meters
    """
    grid = _read_single_band(Path(path), "depth")
    logger.info(f"Loaded depth grid {Path(path).name} with shape {grid.shape} in {grid.crs}")
    return grid


def load_regions(path: str | Path, label_field: str) -> gpd.GeoDataFrame:
    """Load region boundary polygons.

    :param path: Vector file path
    :param label_field: Name of the label column
    :returns: GeoDataFrame of regions
    """
    path = Path(path)
    if not path.exists():
        raise InputDataError("regions", f"file not found: {path}")
    try:
        regions = gpd.read_file(path)
    except (DataSourceError, DataLayerError, OSError, ValueError) as e:
        raise InputDataError("regions", f"cannot read {path}: {e}") from e

    validate_regions(regions, label_field)
    logger.info(f"Loaded {len(regions)} regions from {path.name} in {regions.crs}")
    return regions
