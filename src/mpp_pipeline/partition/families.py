"""Gene family-centric complementarity of two methods."""

from collections.abc import Mapping
from dataclasses import dataclass

import structlog

from mpp_pipeline.stats import percentage

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FamilyCounts:
    """Correct predictions for one gene family, split by method."""

    item: int
    first_only: int
    overlap: int
    second_only: int

    @property
    def total(self) -> int:
        return self.first_only + self.overlap + self.second_only


@dataclass
class FamilyComplementarity:
    """Per-family counts for two methods plus their totals.

    Attributes:
        first: Name of the first method
        second: Name of the second method
        rows: Counts for every gene family in either prediction domain,
            ascending by family id
    """

    first: str
    second: str
    rows: list[FamilyCounts]

    def reported_rows(self) -> list[FamilyCounts]:
        """Families that received at least one correct prediction."""
        return [row for row in self.rows if row.total > 0]

    @property
    def families_with_predictions(self) -> int:
        return len(self.reported_rows())

    @property
    def first_only_total(self) -> int:
        return sum(row.first_only for row in self.rows)

    @property
    def overlap_total(self) -> int:
        return sum(row.overlap for row in self.rows)

    @property
    def second_only_total(self) -> int:
        return sum(row.second_only for row in self.rows)

    @property
    def total(self) -> int:
        return self.first_only_total + self.overlap_total + self.second_only_total

    def percentages(self) -> dict[str, float]:
        """Shares of first-only, overlap and second-only predictions (0 when empty)."""
        return {
            "first_only": percentage(self.first_only_total, self.total),
            "overlap": percentage(self.overlap_total, self.total),
            "second_only": percentage(self.second_only_total, self.total),
        }


def count_family_complementarity(
    first_name: str,
    first: Mapping[int, set[int]],
    second_name: str,
    second: Mapping[int, set[int]],
    known: Mapping[int, set[int]],
    allowed_labels: set[int] | None = None,
) -> FamilyComplementarity:
    """
    Count, per gene family, labels correctly assigned by one or both methods.

    For each family: first_correct = predicted_first & known and
    second_correct = predicted_second & known; the overlap is their
    intersection and the exclusive counts their differences.

    Args:
        first_name: Name of the first method
        first: gene family -> labels predicted by the first method
        second_name: Name of the second method
        second: gene family -> labels predicted by the second method
        known: gene family -> known labels
        allowed_labels: Restrict known and predicted labels to this set
            before counting (None considers all labels)

    Returns:
        FamilyComplementarity with one row per family in either domain
    """
    if first_name == second_name:
        raise ValueError(f"Methods must have distinct names, got {first_name!r} twice")

    rows: list[FamilyCounts] = []

    for item in sorted(set(first) | set(second)):
        known_labels = known.get(item, set())
        predicted_first = first.get(item, set())
        predicted_second = second.get(item, set())

        if allowed_labels is not None:
            known_labels = known_labels & allowed_labels
            predicted_first = predicted_first & allowed_labels
            predicted_second = predicted_second & allowed_labels

        first_correct = predicted_first & known_labels
        second_correct = predicted_second & known_labels

        rows.append(
            FamilyCounts(
                item=item,
                first_only=len(first_correct - second_correct),
                overlap=len(first_correct & second_correct),
                second_only=len(second_correct - first_correct),
            )
        )

    result = FamilyComplementarity(first=first_name, second=second_name, rows=rows)
    logger.info(
        "count_family_complementarity_complete",
        first=first_name,
        second=second_name,
        families=len(rows),
        families_with_predictions=result.families_with_predictions,
        first_only=result.first_only_total,
        overlap=result.overlap_total,
        second_only=result.second_only_total,
        restricted=allowed_labels is not None,
    )
    return result
