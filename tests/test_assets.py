from pathlib import Path

import geopandas as gpd
import numpy as np
import pytest
from dagster import materialize_to_memory

from aquaculture_suitability import assets
from aquaculture_suitability.connectors.settings import SettingsResource
from aquaculture_suitability.loaders import load_depth_grid, sst_file_path
from aquaculture_suitability.models.models import SuitabilityResult
from conftest import EXTENT, write_geotiff

ALL_ASSETS = [
    assets.sst_series,
    assets.depth_grid,
    assets.regions,
    assets.suitability,
    assets.suitability_report,
    assets.suitability_map,
]


@pytest.fixture
def settings(tmp_path: Path) -> SettingsResource:
    """
    Write a small input dataset to disk and point settings at it.
    """
    sst_dir = tmp_path / "sst"
    sst_dir.mkdir()
    for year in (2008, 2009):
        write_geotiff(sst_file_path(sst_dir, year), np.full((4, 4), 291.15, dtype="float32"))
    depth_path = write_geotiff(tmp_path / "depth.tif", np.full((4, 4), -75.0, dtype="float32"))
    regions_path = tmp_path / "regions.geojson"
    gpd.GeoDataFrame({"rgn": ["Northern California"]}, geometry=[EXTENT], crs="EPSG:4326").to_file(
        regions_path, driver="GeoJSON"
    )
    return SettingsResource(
        sst_dir=str(sst_dir),
        depth_path=str(depth_path),
        regions_path=str(regions_path),
        start_year=2008,
        end_year=2009,
        output_dir=str(tmp_path / "output"),
    )


def test_grid_metadata(settings: SettingsResource) -> None:
    metadata = assets._grid_metadata(load_depth_grid(settings.depth_path))

    assert metadata["bands"] == 1
    assert (metadata["rows"], metadata["cols"]) == (4, 4)
    assert "4326" in metadata["crs"]


def test_materialize_pipeline(settings: SettingsResource, tmp_path: Path) -> None:
    """
    Test that the asset graph runs end to end and writes both outputs.

    Verifies:
    - The suitability asset holds a result with 16 suitable cells
    - The report and map files are written to the output directory
    """
    result = materialize_to_memory(ALL_ASSETS, resources={"settings": settings})
    assert result.success

    suitability = result.output_for_node("suitability")
    assert isinstance(suitability, SuitabilityResult)
    assert suitability.region_summary[0].suitable_cell_count == 16

    report_path = Path(result.output_for_node("suitability_report"))
    map_path = Path(result.output_for_node("suitability_map"))
    assert report_path == tmp_path / "output" / "suitability_report.html"
    assert report_path.exists()
    assert map_path.exists()


def test_materialize_fails_on_missing_input(settings: SettingsResource) -> None:
    broken = SettingsResource(
        sst_dir=settings.sst_dir,
        depth_path="/nonexistent/depth.tif",
        regions_path=settings.regions_path,
        start_year=2008,
        end_year=2009,
        output_dir=settings.output_dir,
    )

    result = materialize_to_memory(ALL_ASSETS, resources={"settings": broken}, raise_on_error=False)

    assert not result.success


def test_definitions_load() -> None:
    from aquaculture_suitability.definitions import defs

    job = defs.get_job_def("suitability_job")
    assert job.name == "suitability_job"
