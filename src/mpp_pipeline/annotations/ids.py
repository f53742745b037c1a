"""Gene family identifier conversion.

Gene families are handled as signed integers. The sign keeps the eggNOG
family type: NOG families are negative, COG families positive.
"""

import re

import polars as pl

_OG_PATTERN = re.compile(r"([a-z]+)([0-9]+)")


def og_to_int(og: str) -> int:
    """Convert a family name such as ``COG0001`` or ``NOG12345`` to its integer id.

    Raises:
        ValueError: If the text holds no letters-then-digits token
    """
    match = _OG_PATTERN.search(og.strip().lower())
    if match is None:
        raise ValueError(f"Not a gene family identifier: {og!r}")
    og_type, og_id = match.group(1), int(match.group(2))
    return -og_id if og_type == "nog" else og_id


def og_to_str(og: int) -> str:
    """Inverse of og_to_int for the two family types."""
    if og < 0:
        return f"NOG{-og}"
    return f"COG{og:04d}"


def og_to_int_expr(column: str) -> pl.Expr:
    """Column-wise og_to_int; null where the text holds no identifier."""
    parts = pl.col(column).str.to_lowercase().str.extract_groups(_OG_PATTERN.pattern)
    og_id = parts.struct.field("2").cast(pl.Int64, strict=False)
    return pl.when(parts.struct.field("1") == "nog").then(-og_id).otherwise(og_id)
