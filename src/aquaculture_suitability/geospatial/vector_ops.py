"""Vector operations on region boundary polygons."""

from typing import Any

import geopandas as gpd
import pandas as pd

from aquaculture_suitability.errors import InputDataError


def validate_regions(regions: gpd.GeoDataFrame, label_field: str) -> None:
    """Check regions carry a CRS, the label column and at least one labelled polygon.

    :param regions: Region polygons
    :param label_field: Name of the label column
    :raises InputDataError: If any check fails
    """
    if regions.crs is None:
        raise InputDataError("regions", "region polygons have no CRS")
    if label_field not in regions.columns:
        raise InputDataError(
            "regions", f"label field '{label_field}' not found. Available: {list(regions.columns)}"
        )
    labels = regions[label_field]
    if labels.isna().any() or (labels.astype(str).str.strip() == "").any():
        raise InputDataError("regions", f"label field '{label_field}' has empty values")
    if regions.empty or regions.geometry.is_empty.all():
        raise InputDataError("regions", "no region polygons found")


def region_label_codes(regions: gpd.GeoDataFrame, label_field: str) -> tuple[list[str], list[int]]:
    """Assign a positive integer code to each distinct region label.

    Rows sharing a label share a code. Labels keep their first-seen order.

    :param regions: Region polygons
    :param label_field: Name of the label column
    :returns: Tuple of (labels indexed by code - 1, code per row)
    """
    codes, uniques = pd.factorize(regions[label_field].astype(str), sort=False)
    return [str(label) for label in uniques], [int(code) + 1 for code in codes]


def regions_geojson(regions: gpd.GeoDataFrame, crs: Any) -> dict[str, Any]:
    """Return regions as a GeoJSON mapping in the given CRS.

    :param regions: Region polygons
    :param crs: Output CRS
    :returns: GeoJSON FeatureCollection
    """
    return regions.to_crs(crs).__geo_interface__  # type: ignore[no-any-return]
