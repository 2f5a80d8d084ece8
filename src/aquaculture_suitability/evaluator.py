"""Suitability evaluation: reclassify and overlay temperature and depth by region."""

from typing import Any

import geopandas as gpd
import numpy as np
from dagster import get_dagster_logger
from rasterio.enums import Resampling

from aquaculture_suitability.config.constants import DEFAULT_AREA_CRS, DEFAULT_REGION_LABEL_FIELD
from aquaculture_suitability.errors import AlignmentError, InputDataError
from aquaculture_suitability.geospatial.raster_ops import (
    band_mean,
    cell_area_m2,
    check_alignment,
    combine_masks,
    crop_to_bounds,
    kelvin_to_celsius,
    rasterize_regions,
    reclassify_range,
    reproject_grid,
    resample_to_match,
    same_crs,
)
from aquaculture_suitability.geospatial.vector_ops import region_label_codes, validate_regions
from aquaculture_suitability.models.models import Grid, RegionSuitability, SuitabilityResult, Thresholds
from aquaculture_suitability.report import build_overlay_map

logger = get_dagster_logger(__name__)


def _normalize_crs(grid: Grid, reference_crs: Any, input_name: str, resampling: Resampling) -> Grid:
    """Reproject grid to the reference CRS unless it already matches.

    :param grid: Input grid
    :param reference_crs: CRS of the region polygons
    :param input_name: Input name used in logs and errors
    :param resampling: Resampling method
    :returns: Grid in reference CRS
    """
    if grid.crs is None:
        raise InputDataError(input_name, "grid has no CRS")
    if same_crs(grid.crs, reference_crs):
        return grid
    logger.info(f"Reprojecting {input_name} from {grid.crs} to {reference_crs}")
    return reproject_grid(grid, reference_crs, resampling=resampling)


def _align_depth(depth: Grid, temperature: Grid) -> Grid:
    """Crop depth to the temperature extent and resample it onto the temperature cells.

    :param depth: Depth grid in the reference CRS
    :param temperature: Mean temperature grid in the reference CRS
    :returns: Depth grid on the temperature grid
    """
    try:
        cropped = crop_to_bounds(depth, temperature.bounds)
    except ValueError as e:
        raise AlignmentError(f"Depth grid does not overlap temperature grid: {e}") from e
    return resample_to_match(cropped, temperature, resampling=Resampling.nearest)


def _summarize_regions(
    combined: Grid,
    region_codes: np.ndarray,
    labels: list[str],
    cell_area: float,
) -> tuple[np.ndarray, list[RegionSuitability]]:
    """Mask the combined grid to regions and count suitable cells per label.

    :param combined: Combined grid with 0, 1 and NaN
    :param region_codes: Region code per cell, 0 outside regions
    :param labels: Region label for each code (code - 1)
    :param cell_area: Area of one cell in square meters
    :returns: Tuple of (binary uint8 array, summary rows)
    """
    nodata = np.isnan(combined.data)
    inside = region_codes > 0
    suitable = (inside & ~nodata & (combined.data == 1)).astype("uint8")

    code_count = len(labels) + 1
    suitable_per_code = np.bincount(region_codes[suitable == 1], minlength=code_count)
    nodata_per_code = np.bincount(region_codes[inside & nodata], minlength=code_count)

    rows = []
    for code, label in enumerate(labels, start=1):
        count = int(suitable_per_code[code])
        rows.append(
            RegionSuitability(
                label=label,
                suitable_cell_count=count,
                suitable_area_m2=count * cell_area,
                nodata_cell_count=int(nodata_per_code[code]),
            )
        )
    return suitable, rows


def evaluate(
    temperature_series: Grid,
    depth_grid: Grid,
    regions: gpd.GeoDataFrame,
    temp_low: float,
    temp_high: float,
    depth_low: float,
    depth_high: float,
    *,
    label_field: str = DEFAULT_REGION_LABEL_FIELD,
    area_crs: Any = DEFAULT_AREA_CRS,
    build_map: bool = True,
) -> SuitabilityResult:
    """Evaluate where both temperature and depth are suitable, per region.

    Rasters are reprojected to the regions CRS, the temperature series is
    averaged and converted to Celsius, depth is resampled onto the temperature
    grid, both are reclassified with ``low < value <= high`` and multiplied.
    The product is masked to the regions and suitable cells are counted and
    converted to area using the cell size in ``area_crs``.

    :param temperature_series: Multi-band grid of yearly temperatures in Kelvin
    :param depth_grid: Single-band depth grid in meters
    :param regions: Region polygons with a label column
    :param temp_low: Lower temperature bound in Celsius (exclusive)
    :param temp_high: Upper temperature bound in Celsius (inclusive)
    :param depth_low: Lower depth bound in meters (exclusive)
    :param depth_high: Upper depth bound in meters (inclusive)
    :param label_field: Region label column
    :param area_crs: Projected CRS used to measure cell area
    :param build_map: Whether to build the folium overlay map
    :returns: SuitabilityResult
    """
    thresholds = Thresholds(temp_low=temp_low, temp_high=temp_high, depth_low=depth_low, depth_high=depth_high)
    validate_regions(regions, label_field)
    reference_crs = regions.crs

    temperature = _normalize_crs(temperature_series, reference_crs, "temperature", Resampling.bilinear)
    depth = _normalize_crs(depth_grid, reference_crs, "depth", Resampling.nearest)

    temperature_c = kelvin_to_celsius(band_mean(temperature))
    if np.isnan(temperature_c.data).all():
        logger.warning("Temperature series has no data in any cell; every cell will be reported as no data")

    depth_aligned = _align_depth(depth, temperature_c)
    # Resampling should land on the temperature grid; anything else is a resampler fault.
    alignment = check_alignment(depth_aligned, temperature_c)
    if not alignment.ok:
        raise AlignmentError(f"Depth grid is not aligned with temperature grid: {alignment.reason}")
    logger.info(f"Depth aligned with temperature grid {temperature_c.shape} in {temperature_c.crs}")

    temperature_suitable = temperature_c.with_data(
        reclassify_range(temperature_c.data, thresholds.temp_low, thresholds.temp_high)
    )
    depth_suitable = depth_aligned.with_data(
        reclassify_range(depth_aligned.data, thresholds.depth_low, thresholds.depth_high)
    )
    combined = temperature_c.with_data(combine_masks(temperature_suitable.data, depth_suitable.data))

    labels, codes = region_label_codes(regions, label_field)
    region_codes = rasterize_regions(list(regions.geometry), codes, temperature_c)
    cell_area = cell_area_m2(temperature_c, area_crs)
    suitable, summary = _summarize_regions(combined, region_codes, labels, cell_area)

    nodata_cells = sum(row.nodata_cell_count for row in summary)
    if nodata_cells:
        logger.warning(f"{nodata_cells} cells inside regions have no temperature or depth data")
    logger.info(
        f"{int(suitable.sum())} suitable cells across {len(labels)} regions, "
        f"cell area {cell_area:.1f} m2 in {area_crs}"
    )

    suitability = temperature_c.with_data(suitable)
    overlay_map = build_overlay_map(suitability, regions, label_field=label_field) if build_map else None

    return SuitabilityResult(
        suitability=suitability,
        region_summary=summary,
        cell_area_m2=cell_area,
        alignment=alignment,
        thresholds=thresholds,
        temperature_c=temperature_c,
        depth=depth_aligned,
        temperature_suitable=temperature_suitable,
        depth_suitable=depth_suitable,
        combined=combined,
        region_codes=temperature_c.with_data(region_codes),
        overlay_map=overlay_map,
    )
