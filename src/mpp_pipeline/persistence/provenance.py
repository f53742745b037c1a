"""Provenance tracking for scenario runs."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


class ProvenanceTracker:
    """
    Tracks provenance metadata for one scenario run.

    Records package version, config hash, the scenario and threshold, and
    the processing steps with the files each produced.
    """

    def __init__(self, pipeline_version: str, config: "PipelineConfig", scenario: str):
        """
        Initialize provenance tracker.

        Args:
            pipeline_version: Package version string (e.g., "0.1.0")
            config: PipelineConfig instance
            scenario: Name of the scenario being run
        """
        self.pipeline_version = pipeline_version
        self.config_hash = config.config_hash()
        self.scenario = scenario
        self.processing_steps = []
        self.outputs: list[str] = []
        self.created_at = datetime.now(timezone.utc)

    def record_step(self, step_name: str, details: Optional[dict] = None) -> None:
        """
        Record a processing step.

        Args:
            step_name: Name of the processing step
            details: Optional dictionary of additional details
        """
        step = {
            "step_name": step_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if details:
            step["details"] = details
        self.processing_steps.append(step)

    def record_output(self, path: Path) -> None:
        self.outputs.append(Path(path).name)

    def get_steps(self) -> list[dict]:
        return self.processing_steps

    def create_metadata(self) -> dict:
        """
        Create full provenance metadata dictionary.

        Returns:
            Dictionary with all provenance information
        """
        return {
            "pipeline_version": self.pipeline_version,
            "config_hash": self.config_hash,
            "scenario": self.scenario,
            "created_at": self.created_at.isoformat(),
            "processing_steps": self.processing_steps,
            "output_files": self.outputs,
        }

    def save_sidecar(self, output_dir: Path) -> Path:
        """
        Save provenance metadata as provenance.json in the run's output folder.

        Args:
            output_dir: Folder holding the run's outputs

        Returns:
            Path to the sidecar
        """
        sidecar_path = Path(output_dir) / "provenance.json"
        sidecar_path.parent.mkdir(parents=True, exist_ok=True)

        with open(sidecar_path, "w") as f:
            json.dump(self.create_metadata(), f, indent=2, default=str)
        return sidecar_path

    @staticmethod
    def load_sidecar(sidecar_path: Path) -> dict:
        with open(sidecar_path) as f:
            return json.load(f)

    @classmethod
    def from_config(
        cls,
        config: "PipelineConfig",
        scenario: str,
        version: Optional[str] = None,
    ) -> "ProvenanceTracker":
        """
        Create ProvenanceTracker from a PipelineConfig.

        Args:
            config: PipelineConfig instance
            scenario: Scenario name
            version: Package version. If None, uses mpp_pipeline.__version__

        Returns:
            ProvenanceTracker instance
        """
        if version is None:
            from mpp_pipeline import __version__
            version = __version__

        return cls(version, config, scenario)
