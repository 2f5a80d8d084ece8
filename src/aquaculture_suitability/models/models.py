"""Data models for the suitability analysis."""

from typing import Any

import numpy as np
from pydantic import BaseModel, Field as PydanticField, model_validator
from rasterio.transform import array_bounds


class Grid(BaseModel):
    """Georeferenced raster held in memory.

    :param data: Cell values, 2-D for a single band or 3-D (bands, rows, cols)
    :param transform: Affine transform of the top-left cell
    :param crs: Coordinate reference system
    """

    data: Any = PydanticField(..., description="numpy array of cell values, NaN for missing cells")
    transform: Any = PydanticField(..., description="Affine transform")
    crs: Any = PydanticField(..., description="rasterio CRS")

    @property
    def height(self) -> int:
        return int(self.data.shape[-2])

    @property
    def width(self) -> int:
        return int(self.data.shape[-1])

    @property
    def shape(self) -> tuple[int, int]:
        return self.height, self.width

    @property
    def band_count(self) -> int:
        return 1 if self.data.ndim == 2 else int(self.data.shape[0])

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """Return (west, south, east, north) of the grid."""
        return array_bounds(self.height, self.width, self.transform)  # type: ignore[no-any-return]

    @property
    def resolution(self) -> tuple[float, float]:
        return abs(self.transform.a), abs(self.transform.e)

    def with_data(self, data: Any) -> "Grid":
        """Return a grid on the same georeference holding new values.

        :param data: Array with the same rows and columns
        :returns: New Grid
        """
        if data.shape[-2:] != self.shape:
            raise ValueError(f"Array shape {data.shape} does not match grid shape {self.shape}")
        return Grid(data=data, transform=self.transform, crs=self.crs)


class Thresholds(BaseModel):
    """Reclassification ranges for both criteria.

    A cell is suitable when ``low < value <= high``.

    :param temp_low: Lower temperature bound in Celsius (exclusive)
    :param temp_high: Upper temperature bound in Celsius (inclusive)
    :param depth_low: Lower depth bound in meters (exclusive)
    :param depth_high: Upper depth bound in meters (inclusive)
    """

    temp_low: float = PydanticField(..., description="Lower temperature bound, Celsius")
    temp_high: float = PydanticField(..., description="Upper temperature bound, Celsius")
    depth_low: float = PydanticField(..., description="Lower depth bound, meters")
    depth_high: float = PydanticField(..., description="Upper depth bound, meters")

    @model_validator(mode="after")
    def _check_ranges(self) -> "Thresholds":
        if self.temp_low >= self.temp_high:
            raise ValueError(f"temp_low ({self.temp_low}) must be lower than temp_high ({self.temp_high})")
        if self.depth_low >= self.depth_high:
            raise ValueError(f"depth_low ({self.depth_low}) must be lower than depth_high ({self.depth_high})")
        return self


class AlignmentCheck(BaseModel):
    """Outcome of comparing two grids cell for cell.

    :param ok: True when CRS, extent, resolution and shape all match
    :param reason: Description of the first mismatch found
    """

    ok: bool = PydanticField(..., description="Whether the grids are aligned")
    reason: str | None = PydanticField(default=None, description="Mismatch description")


class RegionSuitability(BaseModel):
    """Suitable area inside one region.

    :param label: Region label
    :param suitable_cell_count: Number of suitable cells
    :param suitable_area_m2: Suitable area in square meters
    :param nodata_cell_count: Cells inside the region with no temperature or depth data
    """

    label: str = PydanticField(..., description="Region label")
    suitable_cell_count: int = PydanticField(..., description="Number of suitable cells")
    suitable_area_m2: float = PydanticField(..., description="Suitable area in square meters")
    nodata_cell_count: int = PydanticField(default=0, description="Cells without input data")


class SuitabilityResult(BaseModel):
    """Everything produced by one evaluation run."""

    suitability: Grid = PydanticField(..., description="Binary uint8 suitability grid masked to regions")
    region_summary: list[RegionSuitability] = PydanticField(..., description="One row per region label")
    cell_area_m2: float = PydanticField(..., description="Area of one cell in the metric projection")
    alignment: AlignmentCheck = PydanticField(..., description="Depth vs temperature alignment check")
    thresholds: Thresholds = PydanticField(..., description="Thresholds used")

    temperature_c: Grid = PydanticField(..., description="Mean temperature in Celsius")
    depth: Grid = PydanticField(..., description="Depth resampled onto the temperature grid")
    temperature_suitable: Grid = PydanticField(..., description="Reclassified temperature, NaN for no data")
    depth_suitable: Grid = PydanticField(..., description="Reclassified depth, NaN for no data")
    combined: Grid = PydanticField(..., description="Product of both reclassified grids, NaN for no data")
    region_codes: Grid = PydanticField(..., description="Rasterized region codes, 0 outside regions")

    overlay_map: Any = PydanticField(default=None, description="folium Map with the suitability overlay")

    @property
    def total_suitable_cells(self) -> int:
        return int(np.count_nonzero(self.suitability.data))

    @property
    def total_suitable_area_m2(self) -> float:
        return sum(row.suitable_area_m2 for row in self.region_summary)

    def working_grids(self) -> dict[str, Grid]:
        """Return every intermediate grid by name."""
        return {
            "temperature_c": self.temperature_c,
            "depth": self.depth,
            "temperature_suitable": self.temperature_suitable,
            "depth_suitable": self.depth_suitable,
            "combined": self.combined,
            "region_codes": self.region_codes,
            "suitability": self.suitability,
        }

    def as_tuple(self) -> tuple[Grid, list[RegionSuitability], Any]:
        """Return (suitability grid, region summary, overlay map)."""
        return self.suitability, self.region_summary, self.overlay_map
