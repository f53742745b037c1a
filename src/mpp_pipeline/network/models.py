"""Types shared by the correlation network modules."""

from enum import Enum

# Unordered pair of gene families, stored with the smaller name first
Pair = tuple[str, str]


class Layer(str, Enum):
    """Source of an edge: one of the two representations, or both."""

    FIRST = "first"
    SECOND = "second"
    MERGED = "merged"


class NodeCategory(str, Enum):
    """Which representation's characteristic function annotates a gene family."""

    FIRST = "first"
    SECOND = "second"
    BOTH = "both"
    UNTAGGED = "untagged"


def canonical_pair(a: str, b: str) -> Pair:
    """Order a pair of distinct gene families.

    Raises:
        ValueError: If both ends are the same family
    """
    if a == b:
        raise ValueError(f"Self pair is not an edge: {a!r}")
    return (a, b) if a < b else (b, a)
