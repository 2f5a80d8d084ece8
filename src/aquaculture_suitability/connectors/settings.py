"""Settings resource for managing configuration from environment variables."""

import os
from pathlib import Path
from typing import Any, get_type_hints

from dagster import ConfigurableResource

from aquaculture_suitability.config.constants import (
    DEFAULT_AREA_CRS,
    DEFAULT_DEPTH_HIGH,
    DEFAULT_DEPTH_LOW,
    DEFAULT_DEPTH_PATH,
    DEFAULT_END_YEAR,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_REGION_LABEL_FIELD,
    DEFAULT_REGIONS_PATH,
    DEFAULT_SST_DIR,
    DEFAULT_START_YEAR,
    DEFAULT_TEMP_HIGH,
    DEFAULT_TEMP_LOW,
)
from aquaculture_suitability.models.models import Thresholds


class SettingsResource(ConfigurableResource[Any]):
    """Input locations, thresholds and output directory for a suitability run."""

    sst_dir: str = DEFAULT_SST_DIR
    depth_path: str = DEFAULT_DEPTH_PATH
    regions_path: str = DEFAULT_REGIONS_PATH
    region_label_field: str = DEFAULT_REGION_LABEL_FIELD
    start_year: int = DEFAULT_START_YEAR
    end_year: int = DEFAULT_END_YEAR
    temp_low: float = DEFAULT_TEMP_LOW
    temp_high: float = DEFAULT_TEMP_HIGH
    depth_low: float = DEFAULT_DEPTH_LOW
    depth_high: float = DEFAULT_DEPTH_HIGH
    area_crs: str = DEFAULT_AREA_CRS
    output_dir: str = DEFAULT_OUTPUT_DIR

    @staticmethod
    def create(swallow_errors: bool = False) -> "SettingsResource":
        """Create SettingsResource from environment variables.

        Each field is read from its upper-cased name; unset variables keep the default.

        :param swallow_errors: If True, ignore validation errors
        :returns: SettingsResource instance
        """
        env_values: dict[str, Any] = {}
        for attr_name, attr_type in get_type_hints(SettingsResource).items():
            raw = os.environ.get(attr_name.upper())
            if raw is None or raw.strip() == "":
                continue
            try:
                if attr_type is int:
                    env_values[attr_name] = int(raw)
                elif attr_type is float:
                    env_values[attr_name] = float(raw)
                else:
                    env_values[attr_name] = raw
            except ValueError:
                if not swallow_errors:
                    raise ValueError(f"Invalid value for {attr_name.upper()}: {raw!r}") from None

        settings = SettingsResource(**env_values)
        try:
            settings.validate_settings()
        except ValueError:
            if not swallow_errors:
                raise
        return settings

    def thresholds(self) -> Thresholds:
        """Get validated reclassification thresholds.

        :returns: Thresholds
        """
        return Thresholds(
            temp_low=self.temp_low,
            temp_high=self.temp_high,
            depth_low=self.depth_low,
            depth_high=self.depth_high,
        )

    def output_path(self, filename: str) -> Path:
        """Resolve a file name inside the output directory, creating it if missing."""
        output_dir = Path(self.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        return output_dir / filename

    def validate_settings(self) -> None:
        """Validate year range and threshold ranges."""
        if self.start_year > self.end_year:
            raise ValueError(f"START_YEAR ({self.start_year}) must not be after END_YEAR ({self.end_year})")
        self.thresholds()
