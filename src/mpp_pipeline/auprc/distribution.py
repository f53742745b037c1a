"""Distribution of per-function AUPRCs by level of function generality.

Generality is the information content of a GO function, IC = -log2(f), where
f is the function's annotation frequency. High IC means a specific function.
"""

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import polars as pl
import structlog

from mpp_pipeline.annotations.files import read_table, record_at
from mpp_pipeline.errors import MalformedRecordError, ReferentialIntegrityError
from mpp_pipeline.stats import round_half_up

logger = structlog.get_logger(__name__)

# Specific, medium, general; also the column group order of the table
GENERALITY_LEVELS = ("S", "M", "G")

SPECIFIC_IC = 8.0
MEDIUM_IC = 4.0

GENERALITY_LEGEND = [
    f"S - specific GO functions with IC>{SPECIFIC_IC:g}",
    f"M - medium specific GO functions with {MEDIUM_IC:g}<=IC<={SPECIFIC_IC:g}",
    f"G - general GO functions with IC<{MEDIUM_IC:g}",
]


@dataclass
class AuprcStatistics:
    """Per-function AUPRC of one classifier and its number of predictions."""

    classifier: str
    auprc: dict[int, float] = field(default_factory=dict)
    predictions: dict[int, int] = field(default_factory=dict)


def information_content(frequency: float) -> float:
    return -math.log2(frequency)


def categorize_generality(frequency: float) -> str:
    """S when IC > 8, M when 4 <= IC <= 8, G otherwise."""
    ic = information_content(frequency)
    if ic > SPECIFIC_IC:
        return "S"
    if ic >= MEDIUM_IC:
        return "M"
    return "G"


def _load_one(path: Path, classifier: str) -> AuprcStatistics:
    raw = read_table(path, has_header=False, comment_prefix="#")
    if raw.width == 0:
        return AuprcStatistics(classifier=classifier)
    if raw.width < 3:
        raise MalformedRecordError(path, 1, record_at(raw, 0), f"expected 3 fields, got {raw.width}")

    label_column, auprc_column, predictions_column = raw.columns[:3]
    frame = raw.with_row_index("row", offset=1).with_columns(
        pl.col(label_column).str.strip_chars().cast(pl.Int64, strict=False).alias("label"),
        pl.col(auprc_column).str.strip_chars().cast(pl.Float64, strict=False).alias("auprc"),
        pl.col(predictions_column).str.strip_chars().cast(pl.Int64, strict=False).alias("predictions"),
    )

    invalid = frame.filter(
        pl.any_horizontal(pl.col("label", "auprc", "predictions").is_null())
        | ~pl.col("auprc").is_between(0.0, 1.0)
    )
    if not invalid.is_empty():
        first = invalid.row(0, named=True)
        if first["auprc"] is not None and first["label"] is not None and first["predictions"] is not None:
            reason = f"AUPRC {first['auprc']} outside [0, 1]"
        else:
            reason = "expected an integer label, an AUPRC and a prediction count"
        raise MalformedRecordError(path, first["row"], record_at(raw, first["row"] - 1), reason)

    return AuprcStatistics(
        classifier=classifier,
        auprc=dict(zip(frame["label"].to_list(), frame["auprc"].to_list())),
        predictions=dict(zip(frame["label"].to_list(), frame["predictions"].to_list())),
    )


def load_auprc_statistics(
    paths: Sequence[Path | str],
    names: Sequence[str],
) -> list[AuprcStatistics]:
    """
    Load one ``label\\tAUPRC\\tpredictions`` file per classifier.

    The third field counts gene families for which the classifier predicted
    the function. Lines starting with ``#`` are skipped.

    Raises:
        ValueError: If paths and names differ in length
        MalformedRecordError: On a short row or a bad value
    """
    if len(paths) != len(names):
        raise ValueError(f"{len(paths)} statistics files for {len(names)} classifiers")

    loaded = [_load_one(Path(p), name) for p, name in zip(paths, names)]
    logger.info(
        "load_auprc_statistics_complete",
        classifiers=list(names),
        functions=len(set().union(*(s.auprc for s in loaded))) if loaded else 0,
    )
    return loaded


def learnable_labels(stats: Sequence[AuprcStatistics], prokaryotic: set[int]) -> list[int]:
    """Prokaryotic functions predicted at least once by some classifier, ascending."""
    labels: set[int] = set()
    for s in stats:
        labels.update(s.auprc)
    return sorted(
        label for label in labels & prokaryotic
        if sum(s.predictions.get(label, 0) for s in stats) > 0
    )


def build_auprc_table(
    stats: Sequence[AuprcStatistics],
    frequencies: Mapping[int, float],
    prokaryotic: set[int],
    precision: int = 4,
) -> pl.DataFrame:
    """
    Lay out AUPRCs by classifier and generality level.

    Columns are ``Function`` then ``<classifier>-<level>`` for every level in
    S, M, G order and every classifier in input order. Each function fills
    the columns of its own level only; other cells are null.

    Raises:
        ReferentialIntegrityError: If a kept function has no frequency
    """
    classifiers = [s.classifier for s in stats]
    columns = [f"{c}-{level}" for level in GENERALITY_LEVELS for c in classifiers]
    labels = learnable_labels(stats, prokaryotic)

    data: dict[str, list] = {"Function": labels}
    data.update({column: [None] * len(labels) for column in columns})

    for row, label in enumerate(labels):
        if label not in frequencies:
            raise ReferentialIntegrityError(label, "label frequencies", "AUPRC statistics")
        level = categorize_generality(frequencies[label])
        for s in stats:
            if label in s.auprc:
                data[f"{s.classifier}-{level}"][row] = round_half_up(s.auprc[label], precision)

    schema = {"Function": pl.Int64, **{column: pl.Float64 for column in columns}}
    table = pl.DataFrame(data, schema=schema)

    logger.info("build_auprc_table_complete", functions=table.height, columns=len(columns))
    return table
