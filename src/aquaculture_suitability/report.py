"""Rendering of the suitability overlay map and the per-region summary table."""

from pathlib import Path
from typing import Any

import folium
import geopandas as gpd
import numpy as np
import pandas as pd
from numpy.typing import NDArray
from rasterio.enums import Resampling
from rasterio.warp import transform_bounds

from aquaculture_suitability.config.constants import MAP_CRS, SUITABLE_COLOR_RGBA, WEB_MERCATOR_CRS
from aquaculture_suitability.geospatial.raster_ops import reproject_grid
from aquaculture_suitability.geospatial.vector_ops import regions_geojson
from aquaculture_suitability.models.models import Grid, RegionSuitability

SUMMARY_COLUMNS = ["region", "suitable_cells", "suitable_area_m2", "suitable_area_km2", "nodata_cells"]


def suitability_rgba(data: NDArray[Any]) -> NDArray[np.uint8]:
    """Colour suitable cells and leave every other cell transparent.

    :param data: 2-D array of 0/1 values (NaN allowed)
    :returns: uint8 array of shape (rows, cols, 4)
    """
    rgba = np.zeros((*data.shape, 4), dtype="uint8")
    rgba[np.nan_to_num(data, nan=0.0) == 1] = SUITABLE_COLOR_RGBA
    return rgba


def overlay_image(suitability: Grid) -> tuple[NDArray[np.uint8], list[list[float]]]:
    """Render the suitability grid as an image Leaflet can place without drift.

    Leaflet stretches image overlays linearly in Web Mercator, so the grid is
    reprojected there (nearest neighbour, cells stay 0/1) and its corners are
    returned in latitude/longitude.

    :param suitability: Binary suitability grid
    :returns: RGBA image and [[south, west], [north, east]] bounds
    """
    overlay = reproject_grid(
        suitability.with_data(suitability.data.astype("float32")), WEB_MERCATOR_CRS, Resampling.nearest
    )
    west, south, east, north = transform_bounds(overlay.crs, MAP_CRS, *overlay.bounds)
    return suitability_rgba(overlay.data), [[south, west], [north, east]]


def build_overlay_map(
    suitability: Grid,
    regions: gpd.GeoDataFrame,
    label_field: str,
    zoom_start: int = 6,
) -> folium.Map:
    """Build an interactive map with suitable cells over a base map.

    :param suitability: Binary suitability grid
    :param regions: Region polygons
    :param label_field: Region label column shown as tooltip
    :param zoom_start: Initial zoom level
    :returns: folium Map
    """
    image, bounds = overlay_image(suitability)
    (south, west), (north, east) = bounds

    m = folium.Map(location=[(south + north) / 2, (west + east) / 2], zoom_start=zoom_start, tiles="CartoDB Positron")
    folium.raster_layers.ImageOverlay(
        image=image,
        bounds=bounds,
        name="Suitable cells",
        interactive=False,
    ).add_to(m)

    outlines = gpd.GeoDataFrame(
        {label_field: regions[label_field].astype(str)}, geometry=regions.geometry.values, crs=regions.crs
    )
    folium.GeoJson(
        regions_geojson(outlines, MAP_CRS),
        name="Regions",
        style_function=lambda _: {"color": "#1f77b4", "weight": 1, "fillOpacity": 0.0},
        tooltip=folium.GeoJsonTooltip(fields=[label_field]),
    ).add_to(m)
    folium.LayerControl().add_to(m)
    return m


def summary_table(rows: list[RegionSuitability]) -> pd.DataFrame:
    """Tabulate suitable cells and area per region.

    :param rows: Summary rows
    :returns: DataFrame with one row per region
    """
    df = pd.DataFrame(
        [
            {
                "region": row.label,
                "suitable_cells": row.suitable_cell_count,
                "suitable_area_m2": row.suitable_area_m2,
                "suitable_area_km2": row.suitable_area_m2 / 1e6,
                "nodata_cells": row.nodata_cell_count,
            }
            for row in rows
        ],
        columns=SUMMARY_COLUMNS,
    )
    return df


def render_summary_text(df: pd.DataFrame) -> str:
    return df.to_string(index=False, float_format=lambda v: f"{v:,.2f}")


def write_summary_html(df: pd.DataFrame, path: str | Path) -> Path:
    """Write the summary table as an HTML page.

    :param df: Summary table
    :param path: Output path
    :returns: Written path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(df.to_html(index=False, float_format=lambda v: f"{v:,.2f}"), encoding="utf-8")
    return path


def write_map_html(m: folium.Map, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    m.save(str(path))
    return path
