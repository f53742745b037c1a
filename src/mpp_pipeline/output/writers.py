"""Tab-separated tables written for every scenario run."""

from datetime import datetime, timezone
from pathlib import Path

import polars as pl
import yaml

from mpp_pipeline.annotations.ids import og_to_str
from mpp_pipeline.partition import (
    FamilyComplementarity,
    LabelBucket,
    LabelPartition,
    TwoMethodPartition,
)


def _write_tsv(df: pl.DataFrame, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.write_csv(path, separator="\t", include_header=True, null_value="NA")
    return path


def write_label_counts(partition: LabelPartition | TwoMethodPartition, path: Path) -> Path:
    """
    Write how many gene families each method annotated correctly, per label.

    For a two-method partition the columns are the first-only, joint and
    second-only counts (named ``first``, ``first+second``, ``second``); for
    any other partition one column per method.

    Args:
        partition: Result of partition_two_methods or partition_labels
        path: Output TSV

    Returns:
        Path to the written file
    """
    labels = partition.labels()
    data: dict[str, list[int]] = {"Function": labels}

    if isinstance(partition, TwoMethodPartition):
        buckets = [LabelBucket.FIRST, LabelBucket.BOTH, LabelBucket.SECOND]
        for name, bucket in zip(partition.column_names(), buckets):
            data[name] = [partition.counts[label][bucket] for label in labels]
    else:
        for method in partition.methods:
            data[method] = [partition.counts[label][method] for label in labels]

    schema = {column: pl.Int64 for column in data}
    return _write_tsv(pl.DataFrame(data, schema=schema), path)


def write_family_counts(result: FamilyComplementarity, path: Path) -> Path:
    """Write per-family correct prediction counts, families with none left out."""
    rows = result.reported_rows()
    df = pl.DataFrame(
        {
            "Gene family": [og_to_str(row.item) for row in rows],
            result.first: [row.first_only for row in rows],
            f"{result.first}+{result.second}": [row.overlap for row in rows],
            result.second: [row.second_only for row in rows],
        },
        schema={
            "Gene family": pl.Utf8,
            result.first: pl.Int64,
            f"{result.first}+{result.second}": pl.Int64,
            result.second: pl.Int64,
        },
    )
    return _write_tsv(df, path)


def label_list_filename(partition: TwoMethodPartition, bucket: LabelBucket) -> str:
    if bucket == LabelBucket.FIRST:
        return f"Functions_predicted_by_{partition.first}.txt"
    if bucket == LabelBucket.SECOND:
        return f"Functions_predicted_by_{partition.second}.txt"
    return f"Functions_predicted_by_{partition.first}_and_{partition.second}.txt"


def write_label_lists(partition: TwoMethodPartition, output_dir: Path) -> dict[LabelBucket, Path]:
    """Write one file per bucket listing its labels, one per line, ascending."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = {}
    for bucket in LabelBucket:
        path = output_dir / label_list_filename(partition, bucket)
        path.write_text("".join(f"{label}\n" for label in partition.labels_in(bucket)))
        paths[bucket] = path
    return paths


def write_auprc_table(table: pl.DataFrame, path: Path) -> Path:
    """Write the AUPRC-by-generality table; missing cells become ``NA``."""
    return _write_tsv(table, path)


def write_text(text: str, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


def write_run_summary(outcomes: list, path: Path) -> Path:
    """
    Write a YAML summary of scenario invocations.

    Args:
        outcomes: ScenarioOutcome records from the runner
        path: Output YAML file

    Returns:
        Path to the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    summary = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "statistics": {
            "invocations": len(outcomes),
            "succeeded": sum(1 for o in outcomes if o.ok),
            "failed": sum(1 for o in outcomes if not o.ok),
        },
        "invocations": [
            {
                "scenario": o.scenario,
                "threshold": o.threshold,
                "status": o.status,
                "output_dir": str(o.output_dir),
                "error": o.error,
                "output_files": [Path(p).name for p in o.outputs],
            }
            for o in outcomes
        ],
    }

    with open(path, "w") as f:
        yaml.dump(summary, f, default_flow_style=False, sort_keys=False)
    return path
