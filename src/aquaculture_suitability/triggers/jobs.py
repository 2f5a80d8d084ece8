"""Dagster job definitions for asset materialization."""

from dagster import AssetSelection, define_asset_job, in_process_executor

suitability_job = define_asset_job(
    name="suitability_job",
    selection=AssetSelection.all(),
    executor_def=in_process_executor,
)
