from collections.abc import Callable
from pathlib import Path
from typing import Any

import geopandas as gpd
import numpy as np
import pytest
import rasterio
from affine import Affine
from numpy.typing import NDArray
from rasterio.crs import CRS
from shapely.geometry import box

from aquaculture_suitability.config.constants import KELVIN_OFFSET
from aquaculture_suitability.models.models import Grid

# 4x4 grid of 0.1 degree cells off the Northern California coast.
WEST, NORTH, CELL = -124.0, 40.0, 0.1
EXTENT = box(WEST, NORTH - 4 * CELL, WEST + 4 * CELL, NORTH)


def geographic_transform() -> Affine:
    return Affine.translation(WEST, NORTH) * Affine.scale(CELL, -CELL)


def write_geotiff(
    path: Path,
    data: NDArray[Any],
    crs: str | None = "EPSG:4326",
    transform: Affine | None = None,
    nodata: float | None = None,
) -> Path:
    """
    Helper function to write a single-band GeoTIFF file for testing.

    Args:
      path: Path to write the GeoTIFF
      data: NumPy array with raster data
      crs: Coordinate reference system, None for an ungeoreferenced file
      transform: Affine transform (defaults to the 4x4 test grid)
      nodata: Optional nodata value
    """
    height, width = data.shape
    with rasterio.open(
        path,
        "w",
        driver="GTiff",
        height=height,
        width=width,
        count=1,
        dtype=data.dtype,
        crs=crs,
        transform=transform or geographic_transform(),
        nodata=nodata,
    ) as dst:
        dst.write(data, 1)
    return path


@pytest.fixture
def make_temperature() -> Callable[..., Grid]:
    """Build a temperature series in Kelvin from Celsius values, one band per year."""

    def _make(celsius: float | NDArray[Any], years: int = 3) -> Grid:
        values = np.broadcast_to(np.asarray(celsius, dtype="float32"), (4, 4)) + KELVIN_OFFSET
        data = np.stack([values] * years).astype("float32")
        return Grid(data=data, transform=geographic_transform(), crs=CRS.from_epsg(4326))

    return _make


@pytest.fixture
def make_depth() -> Callable[..., Grid]:
    def _make(meters: float | NDArray[Any]) -> Grid:
        data = np.broadcast_to(np.asarray(meters, dtype="float32"), (4, 4)).copy()
        return Grid(data=data, transform=geographic_transform(), crs=CRS.from_epsg(4326))

    return _make


@pytest.fixture
def regions() -> gpd.GeoDataFrame:
    return gpd.GeoDataFrame({"rgn": ["Northern California"]}, geometry=[EXTENT], crs="EPSG:4326")
