"""Dagster assets for the aquaculture suitability pipeline."""

from typing import Any

import geopandas as gpd
from dagster import AssetExecutionContext, Output, asset

from aquaculture_suitability.config.constants import SUITABILITY_MAP_FILENAME, SUITABILITY_REPORT_FILENAME
from aquaculture_suitability.connectors.settings import SettingsResource
from aquaculture_suitability.evaluator import evaluate
from aquaculture_suitability.loaders import load_depth_grid, load_regions, load_temperature_series
from aquaculture_suitability.models.models import Grid, SuitabilityResult
from aquaculture_suitability.report import (
    render_summary_text,
    summary_table,
    write_map_html,
    write_summary_html,
)


def _grid_metadata(grid: Grid) -> dict[str, Any]:
    """Describe a grid for asset metadata.

    :param grid: Grid
    :returns: Metadata dictionary
    """
    return {
        "crs": str(grid.crs),
        "bands": grid.band_count,
        "rows": grid.height,
        "cols": grid.width,
        "resolution": f"{grid.resolution[0]:.6g} x {grid.resolution[1]:.6g}",
    }


@asset
def sst_series(context: AssetExecutionContext, settings: SettingsResource) -> Output[Grid]:
    """Load yearly mean sea-surface temperature rasters as one multi-band grid.

    :param context: Dagster context
    :param settings: Settings resource
    :returns: Output with the temperature series in Kelvin
    """
    grid = load_temperature_series(settings.sst_dir, settings.start_year, settings.end_year)
    context.log.info(f"Loaded SST for {settings.start_year}-{settings.end_year} from {settings.sst_dir}")
    return Output(grid, metadata={**_grid_metadata(grid), "years": f"{settings.start_year}-{settings.end_year}"})


@asset
def depth_grid(context: AssetExecutionContext, settings: SettingsResource) -> Output[Grid]:
    """Load the bathymetry raster.

    :param context: Dagster context
    :param settings: Settings resource
    :returns: Output with the depth grid in meters
    """
    grid = load_depth_grid(settings.depth_path)
    context.log.info(f"Loaded depth from {settings.depth_path}")
    return Output(grid, metadata=_grid_metadata(grid))


@asset
def regions(context: AssetExecutionContext, settings: SettingsResource) -> Output[gpd.GeoDataFrame]:
    """Load region boundary polygons.

    :param context: Dagster context
    :param settings: Settings resource
    :returns: Output with the regions GeoDataFrame
    """
    gdf = load_regions(settings.regions_path, settings.region_label_field)
    context.log.info(f"Loaded {len(gdf)} regions from {settings.regions_path}")
    return Output(
        gdf,
        metadata={
            "crs": str(gdf.crs),
            "region_count": len(gdf),
            "labels": ", ".join(gdf[settings.region_label_field].astype(str)),
        },
    )


@asset
def suitability(
    context: AssetExecutionContext,
    settings: SettingsResource,
    sst_series: Grid,
    depth_grid: Grid,
    regions: gpd.GeoDataFrame,
) -> Output[SuitabilityResult]:
    """Evaluate suitable cells and area per region.

    :param context: Dagster context
    :param settings: Settings resource
    :param sst_series: Temperature series in Kelvin
    :param depth_grid: Depth grid in meters
    :param regions: Region polygons
    :returns: Output with the suitability result
    """
    thresholds = settings.thresholds()
    context.log.info(
        f"Evaluating suitability for temperature ({thresholds.temp_low}, {thresholds.temp_high}] C "
        f"and depth ({thresholds.depth_low}, {thresholds.depth_high}] m"
    )
    result = evaluate(
        sst_series,
        depth_grid,
        regions,
        thresholds.temp_low,
        thresholds.temp_high,
        thresholds.depth_low,
        thresholds.depth_high,
        label_field=settings.region_label_field,
        area_crs=settings.area_crs,
    )
    return Output(
        result,
        metadata={
            **_grid_metadata(result.suitability),
            "cell_area_m2": result.cell_area_m2,
            "total_suitable_cells": result.total_suitable_cells,
            "total_suitable_area_km2": result.total_suitable_area_m2 / 1e6,
        },
    )


@asset
def suitability_report(
    context: AssetExecutionContext, settings: SettingsResource, suitability: SuitabilityResult
) -> Output[str]:
    """Render the per-region summary table.

    :param context: Dagster context
    :param settings: Settings resource
    :param suitability: Suitability result
    :returns: Output with the path of the HTML report
    """
    df = summary_table(suitability.region_summary)
    context.log.info(f"Suitable area by region:\n{render_summary_text(df)}")
    path = write_summary_html(df, settings.output_path(SUITABILITY_REPORT_FILENAME))
    return Output(str(path), metadata={"path": str(path), "regions": len(df)})


@asset
def suitability_map(
    context: AssetExecutionContext, settings: SettingsResource, suitability: SuitabilityResult
) -> Output[str]:
    """Save the interactive suitability overlay map.

    :param context: Dagster context
    :param settings: Settings resource
    :param suitability: Suitability result
    :returns: Output with the path of the HTML map
    """
    if suitability.overlay_map is None:
        raise ValueError("Suitability result has no overlay map")
    path = write_map_html(suitability.overlay_map, settings.output_path(SUITABILITY_MAP_FILENAME))
    context.log.info(f"Saved suitability map to {path}")
    return Output(str(path), metadata={"path": str(path)})
