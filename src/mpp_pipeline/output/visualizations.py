"""Chart rendering for scenario outputs."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import matplotlib
import polars as pl

# Use Agg backend (non-interactive, safe for headless/CLI use)
matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import seaborn as sns  # noqa: E402
from matplotlib_venn import venn2  # noqa: E402

from mpp_pipeline.errors import ExternalToolError  # noqa: E402

logger = logging.getLogger(__name__)


class ChartKind(str, Enum):
    STACKED_BAR = "stacked_bar"
    OVERLAP = "overlap"
    METHOD_COUNTS = "method_counts"
    HISTOGRAM = "histogram"
    BOXPLOT = "boxplot"


@dataclass
class ChartSpec:
    """What to draw and where.

    Attributes:
        kind: Chart type
        output_path: Image file to write (format from the suffix)
        colors: Segment, set or group colours, in data order
        title: Optional title
        xlabel: Optional x axis label
        ylabel: Optional y axis label
    """

    kind: ChartKind
    output_path: Path
    colors: list[str] = field(default_factory=list)
    title: str = ""
    xlabel: str = ""
    ylabel: str = ""


def _stacked_bar(ax, data: dict[str, int], spec: ChartSpec) -> None:
    # data: segment name -> size, drawn left to right
    left = 0
    colors = spec.colors or sns.color_palette("Set2", len(data))
    for (name, size), color in zip(data.items(), colors):
        ax.barh([0], [size], left=left, color=color, label=name)
        if size:
            ax.text(left + size / 2, 0, str(size), ha="center", va="center")
        left += size
    ax.set_yticks([])
    ax.legend(loc="upper center", bbox_to_anchor=(0.5, -0.3), ncol=len(data), frameon=False)


def _overlap(ax, data: dict[str, int], spec: ChartSpec) -> None:
    # data: first-only, overlap, second-only sizes in that order
    (first_name, first_only), (_, overlap), (second_name, second_only) = data.items()
    colors = spec.colors or ["#f1c40f", "#3498db"]

    venn2(
        subsets=(first_only, second_only, overlap),
        set_labels=(first_name, second_name),
        set_colors=(colors[0], colors[1]),
        alpha=0.5,
        ax=ax,
    )


def _method_counts(ax, data: dict[int, int], spec: ChartSpec) -> None:
    labels = [str(n) for n in data]
    values = list(data.values())
    sns.barplot(x=labels, y=values, color=(spec.colors or ["#7f8c8d"])[0], ax=ax)


def _histogram(ax, data: list[float], spec: ChartSpec) -> None:
    counts, _, patches = ax.hist(data, bins=10, range=(0.0, 1.0), color=(spec.colors or ["#95a5a6"])[0])
    for count, patch in zip(counts, patches):
        if count:
            ax.text(
                patch.get_x() + patch.get_width() / 2, count, str(int(count)),
                ha="center", va="bottom", fontsize=7,
            )


def _boxplot(ax, data: pl.DataFrame, spec: ChartSpec) -> None:
    # data: first column is the row key, others are value groups
    columns = data.columns[1:]
    long = (
        data.unpivot(index=data.columns[0], on=columns, variable_name="group", value_name="value")
        .drop_nulls("value")
        .to_pandas()
    )
    palette = None
    if spec.colors:
        palette = {c: spec.colors[i % len(spec.colors)] for i, c in enumerate(columns)}
    sns.boxplot(data=long, x="group", y="value", hue="group", order=columns, palette=palette, notch=True, ax=ax)
    plt.setp(ax.get_xticklabels(), rotation=90)


_DRAW = {
    ChartKind.STACKED_BAR: _stacked_bar,
    ChartKind.OVERLAP: _overlap,
    ChartKind.METHOD_COUNTS: _method_counts,
    ChartKind.HISTOGRAM: _histogram,
    ChartKind.BOXPLOT: _boxplot,
}

_FIGSIZE = {
    ChartKind.STACKED_BAR: (10, 2.5),
    ChartKind.OVERLAP: (8, 8),
}


class ChartRenderer:
    """Renders charts with matplotlib and seaborn.

    Any drawing or saving failure is raised as ExternalToolError; tables
    written before rendering are unaffected.
    """

    tool = "matplotlib"

    def __init__(self, dpi: int = 300):
        self.dpi = dpi

    def render(self, data: Any, spec: ChartSpec) -> Path:
        output_path = Path(spec.output_path)
        sns.set_theme(style="whitegrid", context="paper")
        fig, ax = plt.subplots(figsize=_FIGSIZE.get(spec.kind, (10, 6)))
        try:
            _DRAW[spec.kind](ax, data, spec)
            if spec.title:
                ax.set_title(spec.title)
            if spec.xlabel:
                ax.set_xlabel(spec.xlabel)
            if spec.ylabel:
                ax.set_ylabel(spec.ylabel)

            output_path.parent.mkdir(parents=True, exist_ok=True)
            fig.savefig(output_path, dpi=self.dpi, bbox_inches="tight")
        except Exception as e:
            raise ExternalToolError(self.tool, f"{spec.kind.value} chart: {e}") from e
        finally:
            # Close figure to prevent memory leak
            plt.close(fig)

        logger.info(f"Saved {spec.kind.value} chart to {output_path}")
        return output_path
