"""Scenario orchestration."""

from mpp_pipeline.pipeline.runner import (
    STATUS_FAILED,
    STATUS_OK,
    ScenarioOutcome,
    ScenarioRunner,
    invocation_dir,
    scenario_thresholds,
)

__all__ = [
    "STATUS_FAILED",
    "STATUS_OK",
    "ScenarioOutcome",
    "ScenarioRunner",
    "invocation_dir",
    "scenario_thresholds",
]
