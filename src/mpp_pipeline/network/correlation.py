"""Pairwise correlation layers over gene family feature profiles."""

from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
import polars as pl
import structlog

from mpp_pipeline.annotations.files import read_table, record_at
from mpp_pipeline.annotations.ids import og_to_int
from mpp_pipeline.errors import MalformedRecordError
from mpp_pipeline.network.models import Pair, canonical_pair
from mpp_pipeline.stats import round_half_up

logger = structlog.get_logger(__name__)

PAIR_COLUMN = "Gene family pair"
PAIR_SEPARATOR = "-"
MISSING_WEIGHT = "NA"


@dataclass
class CorrelationTable:
    """Two correlation layers over the same gene family pairs."""

    first_name: str
    second_name: str
    first: dict[Pair, float] = field(default_factory=dict)
    second: dict[Pair, float] = field(default_factory=dict)


def load_profiles(path: Path | str) -> pl.DataFrame:
    """
    Load feature profiles of gene families.

    The first column holds the family name, every other column a numeric
    feature. Files ending in .tsv or .txt are tab separated, others comma
    separated.

    Raises:
        MalformedRecordError: On a non-numeric feature column, a bad family
            name or a duplicated family
    """
    path = Path(path)
    separator = "\t" if path.suffix in (".tsv", ".txt") else ","
    df = pl.read_csv(path, separator=separator, null_values=[MISSING_WEIGHT])

    if df.width < 2:
        raise MalformedRecordError(path, 1, ",".join(df.columns), "expected an id column and features")

    id_column = df.columns[0]
    for column in df.columns[1:]:
        if not df[column].dtype.is_numeric():
            raise MalformedRecordError(path, 1, column, f"feature column {column!r} is not numeric")

    seen: set[str] = set()
    for row_number, name in enumerate(df[id_column].cast(pl.Utf8).to_list(), start=2):
        try:
            og_to_int(name)
        except ValueError:
            raise MalformedRecordError(path, row_number, name, f"bad gene family {name!r}") from None
        if name in seen:
            raise MalformedRecordError(path, row_number, name, f"duplicate gene family {name!r}")
        seen.add(name)

    df = df.with_columns(pl.col(id_column).cast(pl.Utf8), pl.col(df.columns[1:]).fill_null(0.0))
    logger.info("load_profiles_complete", path=str(path), families=df.height, features=df.width - 1)
    return df


def profile_items(profiles: pl.DataFrame) -> dict[str, int]:
    """Map each profile's family name to its integer id."""
    return {name: og_to_int(name) for name in profiles[profiles.columns[0]].to_list()}


def compute_layer_correlations(
    profiles: pl.DataFrame,
    items: set[str] | None = None,
    precision: int = 4,
) -> dict[Pair, float]:
    """
    Absolute Pearson correlation for every unordered pair of gene families.

    Args:
        profiles: Frame from load_profiles
        items: Restrict to these family names (None uses all rows)
        precision: Decimal places of the weights

    Returns:
        Canonical pair -> |r|; constant profiles give 0.0
    """
    id_column = profiles.columns[0]
    if items is not None:
        profiles = profiles.filter(pl.col(id_column).is_in(sorted(items)))
    profiles = profiles.sort(id_column)

    names = profiles[id_column].to_list()
    if len(names) < 2:
        return {}

    matrix = profiles.select(profiles.columns[1:]).to_numpy().astype(float)
    with np.errstate(invalid="ignore", divide="ignore"):
        r = np.corrcoef(matrix)
    r = np.nan_to_num(r, nan=0.0)

    layer: dict[Pair, float] = {}
    for i in range(len(names)):
        for j in range(i + 1, len(names)):
            layer[canonical_pair(names[i], names[j])] = round_half_up(abs(float(r[i, j])), precision)

    logger.info("compute_layer_correlations_complete", families=len(names), pairs=len(layer))
    return layer


def write_correlation_table(path: Path | str, table: CorrelationTable) -> Path:
    """Write both layers as ``<a>-<b>\\t<w_first>\\t<w_second>`` rows, pairs ascending."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    pairs = sorted(set(table.first) | set(table.second))
    df = pl.DataFrame(
        {
            PAIR_COLUMN: [f"{a}{PAIR_SEPARATOR}{b}" for a, b in pairs],
            table.first_name: [table.first.get(p) for p in pairs],
            table.second_name: [table.second.get(p) for p in pairs],
        },
        schema={PAIR_COLUMN: pl.Utf8, table.first_name: pl.Float64, table.second_name: pl.Float64},
    )
    df.write_csv(path, separator="\t", include_header=True, null_value=MISSING_WEIGHT)
    return path


def _weight_expr(column: str) -> pl.Expr:
    token = pl.col(column).str.strip_chars()
    return pl.when(token == MISSING_WEIGHT).then(None).otherwise(token)


def load_correlation_table(path: Path | str) -> CorrelationTable:
    """
    Load a precomputed correlation table.

    Layout: header ``Gene family pair\\t<first>\\t<second>``, then rows
    ``<a>-<b>\\t<w_first>\\t<w_second>``. ``NA`` weights are left out.

    Raises:
        MalformedRecordError: On a bad header, pair or weight, or a pair
            listed twice (also when its earlier row held only NA weights)
    """
    path = Path(path)
    raw = read_table(path)

    if raw.width == 0:
        raise MalformedRecordError(path, 1, "", "empty correlation table")
    header = "\t".join(raw.columns)
    if raw.width != 3:
        raise MalformedRecordError(path, 1, header, f"expected 3 fields, got {raw.width}")
    if raw.columns[0] != PAIR_COLUMN:
        raise MalformedRecordError(path, 1, header, f"expected header starting with {PAIR_COLUMN!r}")

    table = CorrelationTable(first_name=raw.columns[1].strip(), second_name=raw.columns[2].strip())

    ends = pl.col("pair").str.splitn(PAIR_SEPARATOR, 2)
    frame = (
        raw.rename(dict(zip(raw.columns, ["pair", "first_token", "second_token"])))
        .with_row_index("row", offset=2)
        .with_columns(
            ends.struct.field("field_0").str.strip_chars().alias("a"),
            ends.struct.field("field_1").str.strip_chars().alias("b"),
            _weight_expr("first_token").alias("first_token"),
            _weight_expr("second_token").alias("second_token"),
        )
        .with_columns(
            pl.when(pl.col("a") <= pl.col("b")).then(pl.col("a")).otherwise(pl.col("b")).alias("lo"),
            pl.when(pl.col("a") <= pl.col("b")).then(pl.col("b")).otherwise(pl.col("a")).alias("hi"),
            pl.col("first_token").cast(pl.Float64, strict=False).alias("first"),
            pl.col("second_token").cast(pl.Float64, strict=False).alias("second"),
        )
        .with_columns(pl.concat_str(["lo", "hi"], separator="\t").alias("key"))
    )

    problem = (
        pl.when(pl.col("b").is_null())
        .then(pl.lit(f"missing {PAIR_SEPARATOR!r} in pair"))
        .when(pl.col("a") == pl.col("b"))
        .then(pl.lit("self pair"))
        .when(~pl.col("key").is_first_distinct())
        .then(pl.lit("duplicate pair ") + pl.col("pair"))
    )
    for layer in ("first", "second"):
        token = pl.col(f"{layer}_token")
        problem = (
            problem.when(token.is_not_null() & pl.col(layer).is_null())
            .then(pl.lit("bad weight ") + token)
            .when(~pl.col(layer).is_between(0.0, 1.0))
            .then(pl.lit("weight ") + pl.col(layer).cast(pl.Utf8) + pl.lit(" outside [0, 1]"))
        )
    frame = frame.with_columns(problem.otherwise(None).alias("problem"))

    invalid = frame.filter(pl.col("problem").is_not_null())
    if not invalid.is_empty():
        first = invalid.row(0, named=True)
        raise MalformedRecordError(path, first["row"], record_at(raw, first["row"] - 2), first["problem"])

    for lo, hi, first_weight, second_weight in frame.select("lo", "hi", "first", "second").iter_rows():
        if first_weight is not None:
            table.first[(lo, hi)] = first_weight
        if second_weight is not None:
            table.second[(lo, hi)] = second_weight

    logger.info(
        "load_correlation_table_complete",
        path=str(path),
        first_pairs=len(table.first),
        second_pairs=len(table.second),
    )
    return table
