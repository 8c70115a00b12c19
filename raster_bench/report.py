"""
Console table output for benchmark results.

Rows are fixed-width and bordered; baseline deltas are colored with rich
(green for improvements, red for regressions and errors, dim for noise).
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence

from rich.console import Console
from rich.text import Text

from raster_bench.baseline import (
    BaselineEntry,
    DeltaKind,
    ZeroBaselineError,
    baseline_delta,
    classify_delta,
)

TEST_WIDTH = 20
COMP_WIDTH = 11
STYLE_WIDTH = 13
CELL_WIDTH = 9
CELL_WIDTH_WITH_BASELINE = 18

DELTA_STYLES = {
    DeltaKind.IMPROVEMENT: "green",
    DeltaKind.REGRESSION: "red",
    DeltaKind.NOISE: "bright_black",
}
ERROR_STYLE = "red"


def format_cpms(value: float) -> str:
    """Format a throughput value with precision that shrinks as it grows."""
    if value <= 0.1:
        return f"{value:.4f}"
    if value <= 1.0:
        return f"{value:.3f}"
    if value < 10.0:
        return f"{value:.2f}"
    if value < 100.0:
        return f"{value:.1f}"
    return f"{value:.0f}"


def truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit]


@dataclass
class CellData:
    """One displayed measurement plus its optional baseline comparison."""
    raw: float
    formatted: str
    baseline: Optional[BaselineEntry] = None


def format_cell(cell: CellData) -> Text:
    """Render a cell as ``value`` or ``value +x.y%`` / ``value (error)``."""
    text = Text(cell.formatted)
    if cell.baseline is None:
        return text

    if cell.baseline.is_error:
        text.append(" ")
        text.append(f"({cell.baseline.error})", style=ERROR_STYLE)
        return text

    try:
        delta = baseline_delta(cell.raw, cell.baseline.value)
    except ZeroBaselineError as e:
        text.append(" ")
        text.append(f"({e})", style=ERROR_STYLE)
        return text

    text.append(" ")
    text.append(f"{delta:+.1f}%", style=DELTA_STYLES[classify_delta(delta)])
    return text


def _pad(text: Text, width: int) -> Text:
    padded = text.copy()
    if padded.cell_len < width:
        padded.pad_right(width - padded.cell_len)
    return padded


class TableWriter:
    """
    Writer for the fixed-width results table.

    Args:
        size_labels: Column labels, one per ladder size (e.g. "8x8").
        with_baseline: Widen value columns to leave room for deltas.
        console: Console to print to; defaults to stdout.
    """

    def __init__(self, size_labels: Sequence[str], with_baseline: bool = False,
                 console: Optional[Console] = None):
        self.size_labels = list(size_labels)
        self.cell_width = CELL_WIDTH_WITH_BASELINE if with_baseline else CELL_WIDTH
        self.console = console or Console(highlight=False)

    @property
    def border(self) -> str:
        parts = ["-" * TEST_WIDTH, "-" * (COMP_WIDTH + 2), "-" * (STYLE_WIDTH + 2)]
        parts.extend("-" * (self.cell_width + 1) for _ in self.size_labels)
        return "+" + "+".join(parts) + "+"

    def render_row(self, first: str, comp: str, style: str, cells: Sequence[Text]) -> Text:
        row = Text("|")
        row.append(truncate(first, TEST_WIDTH).ljust(TEST_WIDTH))
        row.append(f"| {truncate(comp, COMP_WIDTH):<{COMP_WIDTH}} ")
        row.append(f"| {truncate(style, STYLE_WIDTH):<{STYLE_WIDTH}} |")
        for index, cell in enumerate(cells):
            if index:
                row.append("|")
            row.append(" ")
            row.append_text(_pad(cell, self.cell_width))
        row.append("|")
        return row

    def _print(self, renderable) -> None:
        self.console.print(renderable, soft_wrap=True)

    def print_border(self) -> None:
        self._print(Text(self.border))

    def print_header(self, backend_name: str, comp: str, style: str) -> None:
        self.print_border()
        self._print(self.render_row(backend_name, comp, style, [Text(label) for label in self.size_labels]))
        self.print_border()

    def print_row(self, test: str, comp: str, style: str, cells: Sequence[CellData]) -> None:
        columns: List[Text] = [format_cell(cell) for cell in cells]
        while len(columns) < len(self.size_labels):
            columns.append(Text("-"))
        self._print(self.render_row(test, comp, style, columns))

    def print_note(self, message: str) -> None:
        self._print(Text(message, style="yellow"))
