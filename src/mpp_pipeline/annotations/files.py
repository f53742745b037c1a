"""Reading of plain, gzip and zip compressed text inputs."""

import gzip
import io
import zipfile
from pathlib import Path

import polars as pl

from mpp_pipeline.errors import MalformedRecordError

# Marker for a missing value in tabular inputs
MISSING_VALUE = "NA"


def read_bytes(path: Path | str) -> bytes:
    """Return the decompressed content of a file.

    ``.gz`` files are gunzipped. For ``.zip`` archives only the first member
    is read. Everything else is read as is.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If a zip archive is empty
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    if path.name.endswith(".gz"):
        with gzip.open(path, "rb") as f:
            return f.read()

    if path.name.endswith(".zip"):
        with zipfile.ZipFile(path) as zf:
            members = zf.namelist()
            if not members:
                raise ValueError(f"Empty zip archive: {path}")
            return zf.read(members[0])

    return path.read_bytes()


def _decode(path: Path, data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        line_start = data.rfind(b"\n", 0, e.start) + 1
        line_end = data.find(b"\n", e.start)
        record = data[line_start : line_end if line_end != -1 else len(data)]
        raise MalformedRecordError(
            path,
            data.count(b"\n", 0, e.start) + 1,
            record.decode("utf-8", errors="replace"),
            f"not valid UTF-8 ({e.reason})",
        ) from None


def open_text(path: Path | str) -> io.StringIO:
    """Open a possibly compressed file as a text stream (UTF-8).

    Raises:
        FileNotFoundError: If the file doesn't exist
        MalformedRecordError: If the content is not valid UTF-8
    """
    path = Path(path)
    return io.StringIO(_decode(path, read_bytes(path)))


def read_table(
    path: Path | str,
    has_header: bool = True,
    comment_prefix: str | None = None,
) -> pl.DataFrame:
    """
    Read a possibly compressed tab separated table with polars.

    Every column is read as text and ``NA`` cells become null, so callers
    cast and validate the columns themselves. An input without any rows or
    header gives a frame without columns.

    Args:
        path: Table file (optionally .gz/.zip)
        has_header: Whether the first line names the columns
        comment_prefix: Skip lines starting with this prefix

    Raises:
        FileNotFoundError: If the file doesn't exist
        MalformedRecordError: If the content is not valid UTF-8 or polars
            rejects the layout (e.g. a row with more fields than the header)
    """
    path = Path(path)
    data = read_bytes(path)
    _decode(path, data)

    try:
        return pl.read_csv(
            io.BytesIO(data),
            separator="\t",
            has_header=has_header,
            comment_prefix=comment_prefix,
            quote_char=None,
            null_values=[MISSING_VALUE],
            infer_schema=False,
        )
    except pl.exceptions.NoDataError:
        return pl.DataFrame()
    except pl.exceptions.PolarsError as e:
        raise MalformedRecordError(path, None, "", str(e)) from None


def record_at(frame: pl.DataFrame, index: int) -> str:
    """Rebuild the tab separated text of one row of a frame from read_table."""
    return "\t".join(MISSING_VALUE if v is None else str(v) for v in frame.row(index))


def is_arff(path: Path | str) -> bool:
    name = Path(path).name
    return name.endswith(".arff") or name.endswith(".arff.zip") or name.endswith(".arff.gz")
