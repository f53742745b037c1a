from .loader import load_config, load_config_with_overrides
from .schema import (
    AuprcScenario,
    CoevolutionScenario,
    FamilyComplementarityScenario,
    FunctionComplementarityScenario,
    MethodInput,
    MultiMethodScenario,
    PipelineConfig,
    ProfileInput,
)

__all__ = [
    "load_config",
    "load_config_with_overrides",
    "PipelineConfig",
    "MethodInput",
    "ProfileInput",
    "FunctionComplementarityScenario",
    "FamilyComplementarityScenario",
    "MultiMethodScenario",
    "CoevolutionScenario",
    "AuprcScenario",
]
