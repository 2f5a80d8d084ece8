"""Dagster definitions for the aquaculture suitability pipeline."""

from dagster import Definitions, load_assets_from_modules, mem_io_manager

from aquaculture_suitability import assets  # noqa: TID252
from aquaculture_suitability.connectors.settings import SettingsResource
from aquaculture_suitability.triggers.jobs import suitability_job

all_assets = load_assets_from_modules([assets])

settings = SettingsResource.create(swallow_errors=True)

defs = Definitions(
    assets=all_assets,
    jobs=[suitability_job],
    resources={
        "settings": settings,
        "io_manager": mem_io_manager,
    },
)
