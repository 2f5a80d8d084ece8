"""Raster operations for reprojection, alignment and reclassification."""

import math
from typing import Any

import numpy as np
import rasterio.warp
from numpy.typing import NDArray
from rasterio.crs import CRS
from rasterio.enums import Resampling
from rasterio.features import rasterize
from rasterio.windows import Window, from_bounds, transform as window_transform

from aquaculture_suitability.config.constants import CELSIUS_DECIMALS, KELVIN_OFFSET
from aquaculture_suitability.models.models import AlignmentCheck, Grid


def _as_crs(crs: Any) -> CRS:
    return crs if isinstance(crs, CRS) else CRS.from_user_input(crs)


def same_crs(left: Any, right: Any) -> bool:
    """Check whether two CRS definitions describe the same reference system.

    :param left: CRS object or user input (EPSG string, WKT)
    :param right: CRS object or user input
    :returns: True if equivalent
    """
    if left is None or right is None:
        return False
    left, right = _as_crs(left), _as_crs(right)
    if left == right:
        return True
    return left.to_epsg() is not None and left.to_epsg() == right.to_epsg()


def reproject_grid(
    grid: Grid,
    dst_crs: Any,
    resampling: Resampling = Resampling.bilinear,
) -> Grid:
    """Reproject grid onto the default output grid of another CRS.

    A grid already in ``dst_crs`` is returned unchanged.

    :param grid: Source grid, 2-D or 3-D
    :param dst_crs: Target CRS
    :param resampling: Resampling method
    :returns: Reprojected grid
    """
    if same_crs(grid.crs, dst_crs):
        return grid

    dst_crs = _as_crs(dst_crs)
    dst_transform, dst_width, dst_height = rasterio.warp.calculate_default_transform(
        grid.crs, dst_crs, grid.width, grid.height, *grid.bounds
    )
    dst_shape = (*grid.data.shape[:-2], dst_height, dst_width)
    dst_data = np.full(dst_shape, np.nan, dtype="float32")
    rasterio.warp.reproject(
        source=grid.data.astype("float32"),
        destination=dst_data,
        src_transform=grid.transform,
        src_crs=grid.crs,
        dst_transform=dst_transform,
        dst_crs=dst_crs,
        src_nodata=np.nan,
        dst_nodata=np.nan,
        resampling=resampling,
    )
    return Grid(data=dst_data, transform=dst_transform, crs=dst_crs)


def band_mean(series: Grid) -> Grid:
    """Average a multi-band grid per cell, ignoring missing values.

    Cells missing in every band stay NaN. The mean is accumulated in float64.

    :param series: 3-D grid (bands, rows, cols) or 2-D grid
    :returns: 2-D float64 grid of means
    """
    data = series.data.astype("float64")
    if data.ndim == 2:
        return series.with_data(data)

    valid = ~np.isnan(data)
    counts = valid.sum(axis=0)
    totals = np.where(valid, data, 0.0).sum(axis=0)
    mean = np.full(counts.shape, np.nan, dtype="float64")
    np.divide(totals, counts, out=mean, where=counts > 0)
    return Grid(data=mean, transform=series.transform, crs=series.crs)


def kelvin_to_celsius(grid: Grid) -> Grid:
    """Convert Kelvin to Celsius in float64, rounded to ``CELSIUS_DECIMALS``.

    Rounding removes the float32 storage error of the Kelvin input, so
    295.45 K becomes exactly 22.3 and 287.95 K exactly 14.8 before they are
    compared against thresholds.

    :param grid: Grid in Kelvin
    :returns: float64 grid in Celsius, NaN kept
    """
    return grid.with_data(np.round(grid.data.astype("float64") - KELVIN_OFFSET, CELSIUS_DECIMALS))


def crop_to_bounds(grid: Grid, bounds: tuple[float, float, float, float]) -> Grid:
    """Crop grid to the cells covering the given bounds.

    The window is rounded outward so partially covered cells are kept, and
    clipped to the grid itself.

    :param grid: 2-D grid
    :param bounds: (west, south, east, north) in the grid CRS
    :returns: Cropped grid
    """
    window = from_bounds(*bounds, transform=grid.transform)
    col_start = max(math.floor(window.col_off), 0)
    row_start = max(math.floor(window.row_off), 0)
    col_stop = min(math.ceil(window.col_off + window.width), grid.width)
    row_stop = min(math.ceil(window.row_off + window.height), grid.height)
    if col_stop <= col_start or row_stop <= row_start:
        raise ValueError(f"Bounds {bounds} do not overlap grid extent {grid.bounds}")

    cropped = Window(col_start, row_start, col_stop - col_start, row_stop - row_start)
    data = grid.data[..., row_start:row_stop, col_start:col_stop]
    transform = window_transform(cropped, grid.transform)
    return Grid(data=data, transform=transform, crs=grid.crs)


def resample_to_match(
    source: Grid,
    target: Grid,
    resampling: Resampling = Resampling.nearest,
) -> Grid:
    """Resample source grid onto the target grid's cells.

    :param source: 2-D grid to resample
    :param target: Grid providing CRS, transform and shape
    :param resampling: Resampling method
    :returns: Grid aligned with target
    """
    dst_data = np.full(target.shape, np.nan, dtype="float32")
    rasterio.warp.reproject(
        source=source.data.astype("float32"),
        destination=dst_data,
        src_transform=source.transform,
        src_crs=source.crs,
        dst_transform=target.transform,
        dst_crs=target.crs,
        src_nodata=np.nan,
        dst_nodata=np.nan,
        resampling=resampling,
    )
    return Grid(data=dst_data, transform=target.transform, crs=target.crs)


def check_alignment(grid: Grid, reference: Grid, tolerance: float = 1e-9) -> AlignmentCheck:
    """Compare CRS, extent, resolution and shape of two grids.

    :param grid: Grid under test
    :param reference: Reference grid
    :param tolerance: Absolute tolerance for coordinates
    :returns: AlignmentCheck with the first mismatch found
    """
    if not same_crs(grid.crs, reference.crs):
        return AlignmentCheck(ok=False, reason=f"CRS mismatch: {grid.crs} != {reference.crs}")
    if grid.shape != reference.shape:
        return AlignmentCheck(ok=False, reason=f"Shape mismatch: {grid.shape} != {reference.shape}")
    if not np.allclose(grid.resolution, reference.resolution, rtol=0, atol=tolerance):
        return AlignmentCheck(
            ok=False, reason=f"Resolution mismatch: {grid.resolution} != {reference.resolution}"
        )
    if not np.allclose(grid.bounds, reference.bounds, rtol=0, atol=tolerance):
        return AlignmentCheck(ok=False, reason=f"Extent mismatch: {grid.bounds} != {reference.bounds}")
    return AlignmentCheck(ok=True)


def reclassify_range(data: NDArray[np.floating], low: float, high: float) -> NDArray[np.floating]:
    """Map values to 1 inside ``(low, high]`` and 0 elsewhere.

    NaN cells stay NaN.

    :param data: Input array
    :param low: Exclusive lower bound
    :param high: Inclusive upper bound
    :returns: float32 array of 0, 1 and NaN
    """
    # Bounds take the data dtype so a float32 cell equal to a bound stays on the bound.
    dtype = data.dtype if np.issubdtype(data.dtype, np.floating) else np.dtype("float64")
    low_bound, high_bound = np.array([low, high], dtype=dtype)
    classified = ((data > low_bound) & (data <= high_bound)).astype("float32")
    classified[np.isnan(data)] = np.nan
    return classified


def combine_masks(first: NDArray[np.floating], second: NDArray[np.floating]) -> NDArray[np.floating]:
    """Logical AND of two 0/1 masks by multiplication; NaN propagates."""
    if first.shape != second.shape:
        raise ValueError(f"Cannot combine masks of shapes {first.shape} and {second.shape}")
    return (first * second).astype("float32")


def rasterize_regions(
    geometries: list[Any],
    codes: list[int],
    target: Grid,
) -> NDArray[np.int32]:
    """Burn region codes onto the target grid by cell-centre containment.

    :param geometries: Shapely geometries in the target CRS
    :param codes: Positive code per geometry
    :param target: Grid providing transform and shape
    :returns: int32 array, 0 where no region covers the cell
    """
    shapes = [(geom, code) for geom, code in zip(geometries, codes) if geom is not None and not geom.is_empty]
    if not shapes:
        return np.zeros(target.shape, dtype="int32")
    return rasterize(
        shapes,
        out_shape=target.shape,
        transform=target.transform,
        fill=0,
        all_touched=False,
        dtype="int32",
    )


def cell_area_m2(grid: Grid, area_crs: Any) -> float:
    """Area of one cell after projecting the grid into a metric CRS.

    Assumes cell size is uniform over the grid extent.

    :param grid: Grid to measure
    :param area_crs: Projected CRS with meter units
    :returns: Cell area in square meters
    """
    area_crs = _as_crs(area_crs)
    if not area_crs.is_projected:
        raise ValueError(f"Area CRS {area_crs} is not a projected CRS")
    if same_crs(grid.crs, area_crs):
        transform = grid.transform
    else:
        transform, _, _ = rasterio.warp.calculate_default_transform(
            grid.crs, area_crs, grid.width, grid.height, *grid.bounds
        )
    return float(abs(transform.a * transform.e))
