"""Integration tests for the scenario runner on synthetic inputs."""

import json

import pytest

from mpp_pipeline.config.loader import load_config
from mpp_pipeline.errors import ExternalToolError
from mpp_pipeline.pipeline import ScenarioRunner, invocation_dir


@pytest.fixture
def config(config_path):
    return load_config(config_path)


class FailingRenderer:
    def render(self, data, spec):
        raise ExternalToolError("matplotlib", "no display")


class KeepAllFeatures:
    def select(self, features, target):
        return list(features.columns)


def test_function_complementarity_outputs(config):
    outcomes = ScenarioRunner(config).run(["fig1"])

    assert [o.threshold for o in outcomes] == [0.5, 0.8]
    assert all(o.ok for o in outcomes)

    out = config.output_dir / "fig1" / "PR-0.5"
    counts = (out / "Number_of_times_a_classifier_predicted_a_function.txt").read_text().splitlines()
    # label 5: first only for COG0001, both for COG0002
    assert counts[0] == "Function\tMPP-H\tMPP-H+PP\tPP"
    assert counts[1] == "5\t1\t1\t0"
    assert counts[2] == "6\t0\t0\t1"
    assert counts[3] == "7\t0\t1\t0"

    stats = (out / "Graph_statistics+Legend.txt").read_text()
    assert stats.startswith("# functions: 3")
    assert (out / "Histogram.png").exists()
    assert (out / "Functions_predicted_by_PP.txt").read_text() == "6\n"
    assert (out / "families" / "Number_of_predicted_functions.txt").exists()
    assert (out / "families" / "Venn_diagram.png").exists()


def test_threshold_changes_partition(config):
    ScenarioRunner(config).run(["fig1"])

    counts = (config.output_dir / "fig1" / "PR-0.8" / "Number_of_times_a_classifier_predicted_a_function.txt")
    lines = counts.read_text().splitlines()
    # at 0.8 only MPP-H predicts label 5 for COG0001 and COG0002
    assert "5\t2\t0\t0" in lines


def test_family_complementarity_with_allowlist(config):
    outcomes = ScenarioRunner(config).run(["fig2"])

    assert outcomes[0].ok
    lines = (config.output_dir / "fig2" / "PR-0.5" / "Number_of_predicted_functions.txt").read_text().splitlines()
    assert lines[0] == "Gene family\tMPP-I\tMPP-I+PP\tPP"
    assert lines[1:] == ["COG0001\t1\t0\t0", "COG0002\t0\t1\t0", "COG0003\t0\t1\t0"]


def test_multi_method_outputs(config):
    outcomes = ScenarioRunner(config).run(["fig3"])

    assert outcomes[0].ok
    out = config.output_dir / "fig3" / "PR-0.5"
    assert (out / "Number_of_correct_predictions.txt").read_text().splitlines()[0] == "Function\tA\tB"
    assert (out / "Graph_statistics.txt").exists()
    assert (out / "Graph.png").exists()


def test_coevolution_from_correlation_table(config):
    outcomes = ScenarioRunner(config).run(["network_table"])

    assert outcomes[0].ok
    out = config.output_dir / "network_table" / "PCC-0.5"
    assert (out / "Network.gexf").exists()
    stats = (out / "Graph_statistics+Legend.txt").read_text()
    assert stats.startswith("3 gene families have similar profiles in MPP and/or PP")


def test_coevolution_from_profiles(config):
    outcomes = ScenarioRunner(config).run(["network_profiles"])

    assert outcomes[0].ok
    base = config.output_dir / "network_profiles"
    lines = (base / "Correlations.txt").read_text().splitlines()
    assert lines[0] == "Gene family pair\tMPP\tPP"
    # 4 annotated families -> 6 pairs
    assert len(lines) == 7
    assert (base / "PCC-0.5" / "Network.gexf").exists()


def test_coevolution_feature_selection_writes_reduced_profiles(config):
    scenario = config.get_scenario("network_profiles")
    scenario.feature_selection = True

    outcomes = ScenarioRunner(config, selector=KeepAllFeatures()).run(["network_profiles"])

    assert outcomes[0].ok
    base = config.output_dir / "network_profiles"
    assert (base / "MPP-selected.csv").read_text().splitlines()[0] == "OG,f1,f2,f3,f4"


def test_auprc_outputs(config):
    outcomes = ScenarioRunner(config).run(["auprc"])

    assert outcomes[0].ok
    assert outcomes[0].threshold is None
    out = config.output_dir / "auprc"
    lines = (out / "AUPRCs_data.txt").read_text().splitlines()
    assert lines[0] == "Function\tA-S\tB-S\tA-M\tB-M\tA-G\tB-G"
    # label 7 has no predictions and is left out
    assert [line.split("\t")[0] for line in lines[1:]] == ["5", "6"]
    assert (out / "BoxPlot.png").exists()


def test_failing_scenario_does_not_affect_siblings(config):
    outcomes = ScenarioRunner(config).run(["broken", "fig3"])

    broken = [o for o in outcomes if o.scenario == "broken"]
    assert [o.status for o in broken] == ["failed", "failed"]
    assert "missing.pr.txt" in broken[0].error

    fig3 = [o for o in outcomes if o.scenario == "fig3"]
    assert fig3[0].ok


def test_render_failure_keeps_tables(config):
    outcomes = ScenarioRunner(config, renderer=FailingRenderer()).run(["fig3"])

    assert outcomes[0].status == "failed"
    assert "no display" in outcomes[0].error

    out = invocation_dir(config, config.get_scenario("fig3"), 0.5)
    assert (out / "Number_of_correct_predictions.txt").exists()
    sidecar = json.loads((out / "provenance.json").read_text())
    assert sidecar["processing_steps"][-1]["step_name"] == "failed"
    assert "Number_of_correct_predictions.txt" in sidecar["output_files"]


def test_unknown_scenario_name(config):
    with pytest.raises(KeyError):
        ScenarioRunner(config).run(["nope"])


def test_provenance_sidecar_per_invocation(config):
    ScenarioRunner(config).run(["fig1"])

    for threshold in (0.5, 0.8):
        sidecar = config.output_dir / "fig1" / f"PR-{threshold}" / "provenance.json"
        metadata = json.loads(sidecar.read_text())
        assert metadata["scenario"] == "fig1"
        assert metadata["config_hash"] == config.config_hash()
