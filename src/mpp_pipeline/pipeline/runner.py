"""Scenario runner: loads inputs once per scenario, then runs each threshold.

Every scenario x threshold invocation writes into its own folder and fails
on its own; a failure is logged and recorded as an outcome while sibling
invocations continue.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import structlog

from mpp_pipeline.annotations import (
    all_labels,
    load_known_labels,
    load_label_allowlist,
    load_label_frequencies,
    load_prokaryotic_labels,
    load_score_table,
    og_to_int,
    threshold_predictions,
)
from mpp_pipeline.auprc import build_auprc_table, load_auprc_statistics
from mpp_pipeline.config.schema import (
    AuprcScenario,
    CoevolutionScenario,
    FamilyComplementarityScenario,
    FunctionComplementarityScenario,
    MultiMethodScenario,
    PipelineConfig,
)
from mpp_pipeline.network import (
    CorrelationTable,
    FeatureSelector,
    RandomForestSelector,
    categorize_nodes,
    compose_network,
    compute_layer_correlations,
    load_correlation_table,
    load_profiles,
    profile_items,
    reduce_profiles,
    select_annotated_items,
    write_correlation_table,
)
from mpp_pipeline.output import (
    ChartKind,
    ChartRenderer,
    ChartSpec,
    format_auprc_statistics,
    format_family_statistics,
    format_multi_method_statistics,
    format_network_statistics,
    format_two_method_statistics,
    write_auprc_table,
    write_family_counts,
    write_gexf,
    write_label_counts,
    write_label_lists,
    write_text,
)
from mpp_pipeline.partition import (
    LabelBucket,
    count_family_complementarity,
    partition_labels,
    partition_two_methods,
)
from mpp_pipeline.persistence import ProvenanceTracker

logger = structlog.get_logger(__name__)

STATUS_OK = "ok"
STATUS_FAILED = "failed"

STATISTICS_FILE = "Graph_statistics+Legend.txt"


@dataclass
class ScenarioOutcome:
    """Result of one scenario x threshold invocation."""

    scenario: str
    threshold: Optional[float]
    output_dir: Path
    status: str
    error: Optional[str] = None
    outputs: list[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK


def invocation_dir(config: PipelineConfig, scenario, threshold: Optional[float]) -> Path:
    """Output folder of one invocation, e.g. ``<output_dir>/<name>/PR-0.5``."""
    base = config.output_dir / scenario.name
    if threshold is None:
        return base
    prefix = "PCC" if isinstance(scenario, CoevolutionScenario) else "PR"
    return base / f"{prefix}-{threshold}"


def scenario_thresholds(scenario) -> list[Optional[float]]:
    if isinstance(scenario, CoevolutionScenario):
        return [scenario.threshold]
    if isinstance(scenario, AuprcScenario):
        return [None]
    return list(scenario.thresholds)


class ScenarioRunner:
    """
    Runs configured scenarios.

    Args:
        config: Validated pipeline configuration
        renderer: Chart renderer (default: ChartRenderer)
        selector: Feature selector for coevolution networks
            (default: RandomForestSelector)
    """

    def __init__(
        self,
        config: PipelineConfig,
        renderer: Optional[ChartRenderer] = None,
        selector: Optional[FeatureSelector] = None,
    ):
        self.config = config
        self.renderer = renderer or ChartRenderer()
        self.selector = selector or RandomForestSelector()
        self._handlers = {
            "function_complementarity": (self._prepare_two_methods, self._run_function_complementarity),
            "family_complementarity": (self._prepare_family_complementarity, self._run_family_complementarity),
            "multi_method": (self._prepare_multi_method, self._run_multi_method),
            "coevolution_network": (self._prepare_coevolution, self._run_coevolution),
            "auprc_distribution": (self._prepare_auprc, self._run_auprc),
        }

    def run(self, names: Optional[list[str]] = None) -> list[ScenarioOutcome]:
        """
        Run the named scenarios, or all of them.

        Raises:
            KeyError: If a name matches no scenario
        """
        if names:
            scenarios = [self.config.get_scenario(name) for name in names]
        else:
            scenarios = list(self.config.scenarios)

        outcomes: list[ScenarioOutcome] = []
        for scenario in scenarios:
            outcomes.extend(self.run_scenario(scenario))
        return outcomes

    def run_scenario(self, scenario) -> list[ScenarioOutcome]:
        prepare, execute = self._handlers[scenario.kind]
        thresholds = scenario_thresholds(scenario)
        log = logger.bind(scenario=scenario.name, kind=scenario.kind)

        try:
            inputs = prepare(scenario)
        except Exception as e:
            log.error("scenario_inputs_failed", error=str(e), exc_info=True)
            return [
                ScenarioOutcome(
                    scenario=scenario.name,
                    threshold=t,
                    output_dir=invocation_dir(self.config, scenario, t),
                    status=STATUS_FAILED,
                    error=str(e),
                )
                for t in thresholds
            ]

        outcomes = []
        for threshold in thresholds:
            output_dir = invocation_dir(self.config, scenario, threshold)
            output_dir.mkdir(parents=True, exist_ok=True)
            provenance = ProvenanceTracker.from_config(self.config, scenario.name)
            provenance.record_step("load_inputs", {"kind": scenario.kind})
            outcome = ScenarioOutcome(
                scenario=scenario.name,
                threshold=threshold,
                output_dir=output_dir,
                status=STATUS_OK,
            )

            try:
                execute(scenario, inputs, threshold, output_dir, outcome, provenance)
            except Exception as e:
                outcome.status = STATUS_FAILED
                outcome.error = str(e)
                provenance.record_step("failed", {"error": str(e)})
                log.error("scenario_invocation_failed", threshold=threshold, error=str(e), exc_info=True)
            else:
                log.info("scenario_invocation_complete", threshold=threshold, outputs=len(outcome.outputs))

            for path in outcome.outputs:
                provenance.record_output(path)
            provenance.save_sidecar(output_dir)
            outcomes.append(outcome)

        return outcomes

    def _render(self, data: Any, spec: ChartSpec, outcome: ScenarioOutcome) -> None:
        outcome.outputs.append(self.renderer.render(data, spec))

    def _labels(self, known: dict[int, set[int]], ontology: Optional[Path]) -> set[int]:
        labels = all_labels(known)
        if ontology is not None:
            labels = load_prokaryotic_labels(self.config.resolve(ontology), labels)
        return labels

    # Two methods, function view

    def _prepare_two_methods(self, scenario) -> dict:
        known = load_known_labels(self.config.resolve(scenario.known_labels))
        labels = self._labels(known, scenario.ontology)
        return {
            "known": known,
            "first": load_score_table(self.config.resolve(scenario.first.predictions), labels=labels),
            "second": load_score_table(self.config.resolve(scenario.second.predictions), labels=labels),
        }

    def _run_function_complementarity(
        self,
        scenario: FunctionComplementarityScenario,
        inputs: dict,
        threshold: float,
        output_dir: Path,
        outcome: ScenarioOutcome,
        provenance: ProvenanceTracker,
    ) -> None:
        first = threshold_predictions(inputs["first"], threshold)
        second = threshold_predictions(inputs["second"], threshold)
        partition = partition_two_methods(
            scenario.first.name, first, scenario.second.name, second, inputs["known"]
        )
        provenance.record_step("partition_two_methods", {
            "threshold": threshold,
            "bucket_sizes": {b.value: n for b, n in partition.bucket_sizes().items()},
        })

        outcome.outputs.append(write_label_counts(
            partition, output_dir / "Number_of_times_a_classifier_predicted_a_function.txt"
        ))
        outcome.outputs.extend(write_label_lists(partition, output_dir).values())
        outcome.outputs.append(write_text(
            format_two_method_statistics(partition, scenario.colors), output_dir / STATISTICS_FILE
        ))

        families = None
        families_dir = output_dir / "families"
        if scenario.family_breakdown is not None:
            families = count_family_complementarity(
                scenario.first.name, first, scenario.second.name, second, inputs["known"],
                allowed_labels=set(partition.labels_in(LabelBucket.BOTH)),
            )
            provenance.record_step("count_family_complementarity", {"total": families.total})
            outcome.outputs.append(write_family_counts(families, families_dir / "Number_of_predicted_functions.txt"))
            outcome.outputs.append(write_text(
                format_family_statistics(families, scenario.family_breakdown.colors),
                families_dir / STATISTICS_FILE,
            ))

        sizes = partition.bucket_sizes()
        self._render(
            {
                partition.first: sizes[LabelBucket.FIRST],
                partition.overlap_name: sizes[LabelBucket.BOTH],
                partition.second: sizes[LabelBucket.SECOND],
            },
            ChartSpec(
                kind=ChartKind.STACKED_BAR,
                output_path=output_dir / "Histogram.png",
                colors=list(scenario.colors),
                title=f"Pr ≥ {threshold}",
                xlabel="# GO functions",
            ),
            outcome,
        )
        if families is not None:
            self._render(
                _overlap_data(families),
                ChartSpec(
                    kind=ChartKind.OVERLAP,
                    output_path=families_dir / "Venn_diagram.png",
                    colors=list(scenario.family_breakdown.colors),
                ),
                outcome,
            )

    # Two methods, gene family view

    def _prepare_family_complementarity(self, scenario: FamilyComplementarityScenario) -> dict:
        inputs = self._prepare_two_methods(scenario)
        inputs["allowed"] = None
        if scenario.label_allowlist is not None:
            inputs["allowed"] = load_label_allowlist(self.config.resolve(scenario.label_allowlist))
        return inputs

    def _run_family_complementarity(
        self,
        scenario: FamilyComplementarityScenario,
        inputs: dict,
        threshold: float,
        output_dir: Path,
        outcome: ScenarioOutcome,
        provenance: ProvenanceTracker,
    ) -> None:
        families = count_family_complementarity(
            scenario.first.name,
            threshold_predictions(inputs["first"], threshold),
            scenario.second.name,
            threshold_predictions(inputs["second"], threshold),
            inputs["known"],
            allowed_labels=inputs["allowed"],
        )
        provenance.record_step("count_family_complementarity", {
            "threshold": threshold,
            "families_with_predictions": families.families_with_predictions,
            "total": families.total,
        })

        outcome.outputs.append(write_family_counts(families, output_dir / "Number_of_predicted_functions.txt"))
        outcome.outputs.append(write_text(
            format_family_statistics(families, scenario.colors), output_dir / STATISTICS_FILE
        ))
        self._render(
            _overlap_data(families),
            ChartSpec(kind=ChartKind.OVERLAP, output_path=output_dir / "Venn_diagram.png", colors=list(scenario.colors)),
            outcome,
        )

    # N methods

    def _prepare_multi_method(self, scenario: MultiMethodScenario) -> dict:
        known = load_known_labels(self.config.resolve(scenario.known_labels))
        labels = self._labels(known, scenario.ontology)
        tables = {
            method.name: load_score_table(self.config.resolve(method.predictions), labels=labels)
            for method in scenario.methods
        }
        return {"known": known, "tables": tables}

    def _run_multi_method(
        self,
        scenario: MultiMethodScenario,
        inputs: dict,
        threshold: float,
        output_dir: Path,
        outcome: ScenarioOutcome,
        provenance: ProvenanceTracker,
    ) -> None:
        predictions = {
            name: threshold_predictions(table, threshold) for name, table in inputs["tables"].items()
        }
        partition = partition_labels(predictions, inputs["known"])
        provenance.record_step("partition_labels", {
            "threshold": threshold,
            "distribution": partition.method_count_distribution(),
        })

        outcome.outputs.append(write_label_counts(partition, output_dir / "Number_of_correct_predictions.txt"))
        outcome.outputs.append(write_text(
            format_multi_method_statistics(partition), output_dir / "Graph_statistics.txt"
        ))
        self._render(
            partition.method_count_distribution(),
            ChartSpec(
                kind=ChartKind.METHOD_COUNTS,
                output_path=output_dir / "Graph.png",
                xlabel="# methods",
                ylabel="# GO functions",
            ),
            outcome,
        )

    # Coevolution network

    def _prepare_coevolution(self, scenario: CoevolutionScenario) -> dict:
        known = load_known_labels(self.config.resolve(scenario.known_labels))
        first_items, second_items = select_annotated_items(known, scenario.first_label, scenario.second_label)
        out_dir = self.config.output_dir / scenario.name

        if scenario.correlations is not None:
            table = load_correlation_table(self.config.resolve(scenario.correlations))
            names: set[str] = set()
            for pair in list(table.first) + list(table.second):
                names.update(pair)
        else:
            first_profiles = load_profiles(self.config.resolve(scenario.first.profiles))
            second_profiles = load_profiles(self.config.resolve(scenario.second.profiles))

            if scenario.feature_selection:
                first_profiles = self._select_features(first_profiles, first_items)
                second_profiles = self._select_features(second_profiles, second_items)
                out_dir.mkdir(parents=True, exist_ok=True)
                first_profiles.write_csv(out_dir / f"{scenario.first.name}-selected.csv")
                second_profiles.write_csv(out_dir / f"{scenario.second.name}-selected.csv")

            annotated = first_items | second_items
            names = {
                name for name, item in profile_items(first_profiles).items() if item in annotated
            } & {
                name for name, item in profile_items(second_profiles).items() if item in annotated
            }
            table = CorrelationTable(
                first_name=scenario.first.name,
                second_name=scenario.second.name,
                first=compute_layer_correlations(first_profiles, names, scenario.precision),
                second=compute_layer_correlations(second_profiles, names, scenario.precision),
            )
            write_correlation_table(out_dir / "Correlations.txt", table)

        categories = categorize_nodes(
            {name for name in names if og_to_int(name) in first_items},
            {name for name in names if og_to_int(name) in second_items},
        )
        return {"table": table, "categories": categories}

    def _select_features(self, profiles, annotated: set[int]):
        items = profile_items(profiles)
        id_column = profiles.columns[0]
        target = [items[name] in annotated for name in profiles[id_column].to_list()]
        return reduce_profiles(profiles, target, self.selector)

    def _run_coevolution(
        self,
        scenario: CoevolutionScenario,
        inputs: dict,
        threshold: float,
        output_dir: Path,
        outcome: ScenarioOutcome,
        provenance: ProvenanceTracker,
    ) -> None:
        table: CorrelationTable = inputs["table"]
        network = compose_network(
            table.first,
            table.second,
            inputs["categories"],
            threshold,
            precision=scenario.precision,
            first_name=table.first_name,
            second_name=table.second_name,
        )
        provenance.record_step("compose_network", {
            "threshold": threshold,
            "nodes": len(network.nodes),
            "edges": network.edge_count,
        })

        outcome.outputs.append(write_gexf(network, output_dir / "Network.gexf"))
        outcome.outputs.append(write_text(
            format_network_statistics(network, scenario.first_label, scenario.second_label),
            output_dir / STATISTICS_FILE,
        ))
        for name, layer in ((table.first_name, table.first), (table.second_name, table.second)):
            self._render(
                list(layer.values()),
                ChartSpec(
                    kind=ChartKind.HISTOGRAM,
                    output_path=output_dir / f"Histogram_{name}.png",
                    xlabel="Pearson correlation coefficient",
                    ylabel="# gene family pairs",
                ),
                outcome,
            )

    # AUPRC distribution

    def _prepare_auprc(self, scenario: AuprcScenario) -> dict:
        stats = load_auprc_statistics(
            [self.config.resolve(c.statistics) for c in scenario.classifiers],
            [c.name for c in scenario.classifiers],
        )
        labels: set[int] = set()
        for s in stats:
            labels.update(s.auprc)
        return {
            "stats": stats,
            "frequencies": load_label_frequencies(self.config.resolve(scenario.label_frequencies)),
            "prokaryotic": load_prokaryotic_labels(self.config.resolve(scenario.ontology), labels),
        }

    def _run_auprc(
        self,
        scenario: AuprcScenario,
        inputs: dict,
        threshold: None,
        output_dir: Path,
        outcome: ScenarioOutcome,
        provenance: ProvenanceTracker,
    ) -> None:
        table = build_auprc_table(inputs["stats"], inputs["frequencies"], inputs["prokaryotic"])
        provenance.record_step("build_auprc_table", {"functions": table.height})

        outcome.outputs.append(write_auprc_table(table, output_dir / "AUPRCs_data.txt"))
        outcome.outputs.append(write_text(format_auprc_statistics(table.height), output_dir / STATISTICS_FILE))
        self._render(
            table,
            ChartSpec(
                kind=ChartKind.BOXPLOT,
                output_path=output_dir / "BoxPlot.png",
                colors=[c.color for c in scenario.classifiers],
                ylabel="AUPRC",
            ),
            outcome,
        )


def _overlap_data(families) -> dict[str, int]:
    return {
        families.first: families.first_only_total,
        f"{families.first}+{families.second}": families.overlap_total,
        families.second: families.second_only_total,
    }
