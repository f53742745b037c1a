"""Pydantic models for pipeline configuration."""

import hashlib
import json
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator


class MethodInput(BaseModel):
    """A classification method and the table of Pr scores it produced."""

    name: str = Field(..., min_length=1, description="Method name used in tables and legends")
    predictions: Path = Field(..., description="Pr score table (tsv, optionally gz/zip)")


class ProfileInput(BaseModel):
    """A feature representation (phyletic profiles) of the gene families."""

    name: str = Field(..., min_length=1, description="Representation name, e.g. MPP or PP")
    profiles: Path = Field(..., description="Profile table: identifier column then numeric features")


class ClassifierStatistics(BaseModel):
    """Per-label AUPRC statistics of one classifier."""

    name: str = Field(..., min_length=1)
    statistics: Path = Field(..., description="label, AUPRC, number of predictions at Pr>=50%")
    color: str = Field(default="grey", description="Box colour in the AUPRC plot")


class ThresholdedScenario(BaseModel):
    """Scenario evaluated once per Pr threshold."""

    thresholds: list[float] = Field(default=[0.5, 0.7, 0.9])

    @field_validator("thresholds")
    @classmethod
    def check_thresholds(cls, v: list[float]) -> list[float]:
        if not v:
            raise ValueError("At least one threshold is required")
        for value in v:
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Thresholds must lie in [0, 1], got {value}")
        return v


class FamilyBreakdown(BaseModel):
    """Gene family view restricted to labels both methods predict."""

    colors: list[str] = Field(
        default=["yellow", "blue"],
        min_length=2,
        max_length=2,
        description="Colour names for the first and second method",
    )


class FunctionComplementarityScenario(ThresholdedScenario):
    """Two methods compared on the GO functions they predict correctly."""

    kind: Literal["function_complementarity"] = "function_complementarity"
    name: str
    first: MethodInput
    second: MethodInput
    known_labels: Path
    ontology: Path | None = None
    colors: list[str] = Field(
        default=["red", "green", "blue"],
        min_length=3,
        max_length=3,
        description="Colours for first-only, overlap and second-only functions",
    )
    family_breakdown: FamilyBreakdown | None = None


class FamilyComplementarityScenario(ThresholdedScenario):
    """Two methods compared on the gene families they annotate correctly."""

    kind: Literal["family_complementarity"] = "family_complementarity"
    name: str
    first: MethodInput
    second: MethodInput
    known_labels: Path
    ontology: Path | None = None
    label_allowlist: Path | None = None
    colors: list[str] = Field(default=["yellow", "blue"], min_length=2, max_length=2)


class MultiMethodScenario(ThresholdedScenario):
    """Any number of methods compared on correctly predicted functions."""

    kind: Literal["multi_method"] = "multi_method"
    name: str
    methods: list[MethodInput] = Field(..., min_length=1)
    known_labels: Path
    ontology: Path | None = None

    @field_validator("methods")
    @classmethod
    def unique_method_names(cls, v: list[MethodInput]) -> list[MethodInput]:
        names = [m.name for m in v]
        if len(set(names)) != len(names):
            raise ValueError(f"Method names must be unique, got {names}")
        return v


class CoevolutionScenario(BaseModel):
    """Similarity network of gene families from two profile representations."""

    kind: Literal["coevolution_network"] = "coevolution_network"
    name: str
    first: ProfileInput
    second: ProfileInput
    known_labels: Path
    first_label: int = Field(..., description="Label the first representation predicts better")
    second_label: int = Field(..., description="Label the second representation predicts better")
    threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    precision: int = Field(default=4, ge=0, le=10)
    feature_selection: bool = True
    correlations: Path | None = Field(
        default=None,
        description="Precomputed correlation table; skips selection and correlation steps",
    )


class AuprcScenario(BaseModel):
    """Distribution of label-level AUPRCs by label generality."""

    kind: Literal["auprc_distribution"] = "auprc_distribution"
    name: str
    classifiers: list[ClassifierStatistics] = Field(..., min_length=1)
    ontology: Path
    label_frequencies: Path


ScenarioConfig = Annotated[
    Union[
        FunctionComplementarityScenario,
        FamilyComplementarityScenario,
        MultiMethodScenario,
        CoevolutionScenario,
        AuprcScenario,
    ],
    Field(discriminator="kind"),
]


class PipelineConfig(BaseModel):
    """Main pipeline configuration."""

    data_dir: Path = Field(
        ...,
        description="Directory that relative input paths resolve against",
    )
    output_dir: Path = Field(
        ...,
        description="Root directory for scenario outputs",
    )
    scenarios: list[ScenarioConfig] = Field(
        default_factory=list,
        description="Named analyses that can be selected on the command line",
    )

    @field_validator("output_dir")
    @classmethod
    def create_directory(cls, v: Path) -> Path:
        """Create directory if it doesn't exist."""
        v.mkdir(parents=True, exist_ok=True)
        return v

    @field_validator("scenarios")
    @classmethod
    def unique_scenario_names(cls, v: list) -> list:
        names = [s.name for s in v]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate scenario names: {duplicates}")
        return v

    def resolve(self, path: Path) -> Path:
        """Resolve an input path against data_dir unless it is absolute."""
        path = Path(path)
        return path if path.is_absolute() else self.data_dir / path

    def get_scenario(self, name: str):
        """Look up a scenario by name.

        Raises:
            KeyError: If no scenario has that name
        """
        for scenario in self.scenarios:
            if scenario.name == name:
                return scenario
        raise KeyError(f"Unknown scenario: {name}")

    def config_hash(self) -> str:
        """
        Compute SHA-256 hash of the configuration.

        Returns a deterministic hash based on all config values,
        useful for tying output files to the configuration that made them.
        """
        config_dict = self.model_dump(mode="python")
        config_json = json.dumps(
            config_dict,
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(config_json.encode()).hexdigest()
