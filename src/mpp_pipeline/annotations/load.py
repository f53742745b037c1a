"""Load known functions, Pr score tables and GO subsets."""

from dataclasses import dataclass
from pathlib import Path

import polars as pl
import structlog

from mpp_pipeline.annotations.files import MISSING_VALUE, is_arff, open_text, read_table, record_at
from mpp_pipeline.annotations.ids import og_to_int, og_to_int_expr
from mpp_pipeline.errors import MalformedRecordError

logger = structlog.get_logger(__name__)

# Subset tag of GO terms applicable to prokaryotes
PROKARYOTIC_SUBSET = "gosubset_prok"


@dataclass(frozen=True)
class ScoreTable:
    """Pr scores assigned by one method.

    Attributes:
        path: Source file
        items: Every gene family listed in the table, in file order
        labels: Labels kept from the header, ascending
        scores: Long frame with item (Int64), label (Int64), score (Float64);
            missing scores are absent
    """

    path: Path
    items: list[int]
    labels: list[int]
    scores: pl.DataFrame


def _parse_int(token: str, path: Path, line_number: int, line: str, what: str) -> int:
    try:
        return int(token)
    except ValueError:
        raise MalformedRecordError(path, line_number, line, f"bad {what} {token!r}") from None


def _parse_og(token: str, path: Path, line_number: int, line: str) -> int:
    try:
        return og_to_int(token)
    except ValueError:
        raise MalformedRecordError(path, line_number, line, f"bad gene family {token!r}") from None


def load_known_labels(path: Path | str) -> dict[int, set[int]]:
    """
    Load known functions assigned to gene families (e.g. from Uniprot-GOA).

    Two layouts are accepted:
    - tab separated: ``<family int>\\t<label>@<label>@...``
    - ARFF (.arff, .arff.zip, .arff.gz): data rows whose first field is the
      family name and whose last field is the ``@``-joined label list

    Lines starting with ``@`` or ``#`` and empty lines are skipped. Families
    with id 0 or without labels are dropped.

    Args:
        path: Known functions file

    Returns:
        Mapping of gene family id to its set of known labels

    Raises:
        MalformedRecordError: If a row lacks a delimiter or holds a bad token
    """
    path = Path(path)
    arff = is_arff(path)
    known: dict[int, set[int]] = {}

    with open_text(path) as f:
        for line_number, raw in enumerate(f, start=1):
            line = raw.rstrip("\n")
            if not line or line.startswith("@") or line.startswith("#"):
                continue

            delimiter = "," if arff else "\t"
            if delimiter not in line:
                raise MalformedRecordError(path, line_number, line, f"missing {delimiter!r} delimiter")

            if arff:
                item = _parse_og(line[: line.index(",")], path, line_number, line)
                labels_str = line[line.rindex(",") + 1 :].strip()
            else:
                item = _parse_int(line[: line.index("\t")], path, line_number, line, "gene family")
                labels_str = line[line.index("\t") + 1 :].strip()

            labels = {
                _parse_int(part, path, line_number, line, "label")
                for part in labels_str.split("@")
                if part
            }

            if item != 0 and labels:
                known[item] = labels

    logger.info(
        "load_known_labels_complete",
        path=str(path),
        families=len(known),
        labels=len(set().union(*known.values())) if known else 0,
    )
    return known


def load_score_table(
    path: Path | str,
    labels: set[int] | None = None,
    items: set[int] | None = None,
) -> ScoreTable:
    """
    Load a table of Pr scores produced by a classification model.

    Layout: header ``OG\\t<label>\\t<label>...``, then one row per gene family
    ``<family name>\\t<score|NA>...``. Scores must lie in [0, 1].

    Args:
        path: Score table (optionally .gz/.zip)
        labels: Keep only these labels (None keeps all)
        items: Keep only these gene families (None keeps all)

    Returns:
        ScoreTable with scores in long format

    Raises:
        MalformedRecordError: On a missing header, a row with too many
            fields, a bad identifier or a bad score
    """
    path = Path(path)
    raw = read_table(path)
    if raw.width == 0:
        raise MalformedRecordError(path, 1, "", "empty score table")

    header = "\t".join(raw.columns)
    id_column = raw.columns[0]
    if not id_column.startswith("OG"):
        raise MalformedRecordError(path, 1, header, "expected header starting with 'OG'")
    label_columns = {c: str(_parse_int(c.strip(), path, 1, header, "label")) for c in raw.columns[1:]}

    # rows are numbered as file lines, the header being line 1
    frame = (
        raw.rename(label_columns)
        .with_row_index("row", offset=2)
        .with_columns(og_to_int_expr(id_column).alias("item"))
    )
    bad = frame.filter(pl.col("item").is_null())
    if not bad.is_empty():
        row = bad["row"][0]
        raise MalformedRecordError(path, row, record_at(raw, row - 2), f"bad gene family {bad[id_column][0]!r}")

    if items is not None:
        frame = frame.filter(pl.col("item").is_in(sorted(items)))

    header_labels = sorted({int(c) for c in label_columns.values()})
    kept_labels = header_labels if labels is None else [label for label in header_labels if label in labels]
    kept_columns = [c for c in label_columns.values() if int(c) in kept_labels]

    scores = pl.DataFrame(
        schema={"row": pl.UInt32, "item": pl.Int64, "label": pl.Int64, "token": pl.String, "score": pl.Float64}
    )
    if kept_columns:
        scores = (
            frame.unpivot(on=kept_columns, index=["row", "item"], variable_name="label", value_name="token")
            .with_columns(pl.col("token").str.strip_chars())
            .filter(pl.col("token").is_not_null() & (pl.col("token") != MISSING_VALUE))
            .with_columns(
                pl.col("label").cast(pl.Int64),
                pl.col("token").cast(pl.Float64, strict=False).alias("score"),
            )
            .sort("row", "label")
        )

    invalid = scores.filter(pl.col("score").is_null() | ~pl.col("score").is_between(0.0, 1.0))
    if not invalid.is_empty():
        first = invalid.row(0, named=True)
        if first["score"] is None:
            reason = f"bad score {first['token']!r}"
        else:
            reason = f"score {first['score']} outside [0, 1]"
        raise MalformedRecordError(path, first["row"], record_at(raw, first["row"] - 2), reason)

    scores = scores.select("item", "label", "score")
    table_items = frame["item"].to_list()

    logger.info(
        "load_score_table_complete",
        path=str(path),
        families=len(table_items),
        labels=len(kept_labels),
        scores=scores.height,
    )
    return ScoreTable(path=path, items=table_items, labels=kept_labels, scores=scores)


def load_prokaryotic_labels(ontology_path: Path | str, labels: set[int]) -> set[int]:
    """
    Keep the labels that belong to the prokaryotic GO subset.

    Scans a Gene Ontology dump in OBO-XML format for ``<id>GO:...</id>``
    entries followed by ``<subset>gosubset_prok</subset>``.

    Args:
        ontology_path: GO dump (.obo-xml, optionally .gz)
        labels: Candidate labels

    Returns:
        Subset of labels tagged as applicable to prokaryotes
    """
    ontology_path = Path(ontology_path)
    prokaryotic: set[int] = set()
    term: int | None = None

    with open_text(ontology_path) as f:
        for line_number, raw in enumerate(f, start=1):
            line = raw.strip()
            if line.startswith("<id>GO:"):
                token = line[line.index(":") + 1 : line.rindex("<")]
                term = _parse_int(token, ontology_path, line_number, line, "GO id")
            elif line.startswith("<subset>") and term is not None:
                subset = line[line.index(">") + 1 : line.rindex("<")].strip().lower()
                if subset == PROKARYOTIC_SUBSET and term in labels:
                    prokaryotic.add(term)

    logger.info(
        "load_prokaryotic_labels_complete",
        candidates=len(labels),
        prokaryotic=len(prokaryotic),
    )
    return prokaryotic


def load_label_allowlist(path: Path | str) -> set[int]:
    """Load a list of labels, one integer per line."""
    path = Path(path)
    allowed: set[int] = set()
    with open_text(path) as f:
        for line_number, raw in enumerate(f, start=1):
            line = raw.strip()
            if line:
                allowed.add(_parse_int(line, path, line_number, line, "label"))
    return allowed


def load_label_frequencies(path: Path | str) -> dict[int, float]:
    """Load label frequencies (``label\\tfrequency``, ``#`` comments skipped).

    Raises:
        MalformedRecordError: On a row without a frequency, a bad label or a
            frequency outside (0, 1]; rows are counted without comment lines
    """
    path = Path(path)
    raw = read_table(path, has_header=False, comment_prefix="#")
    if raw.width == 0:
        return {}
    if raw.width < 2:
        raise MalformedRecordError(path, 1, record_at(raw, 0), "missing tab delimiter")

    label_column, frequency_column = raw.columns[:2]
    frame = raw.with_row_index("row", offset=1).with_columns(
        pl.col(label_column).str.strip_chars().cast(pl.Int64, strict=False).alias("label"),
        pl.col(frequency_column).str.strip_chars().cast(pl.Float64, strict=False).alias("frequency"),
    )

    invalid = frame.filter(
        pl.col("label").is_null()
        | pl.col("frequency").is_null()
        | ~((pl.col("frequency") > 0.0) & (pl.col("frequency") <= 1.0))
    )
    if not invalid.is_empty():
        row = invalid["row"][0]
        raise MalformedRecordError(
            path, row, record_at(raw, row - 1), "expected an integer label and a frequency in (0, 1]"
        )

    return dict(zip(frame["label"].to_list(), frame["frequency"].to_list()))
