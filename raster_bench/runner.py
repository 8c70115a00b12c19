"""
Benchmark orchestration.

Drives every backend through the (comp op x style x test x size) matrix,
prints one table per backend and compositing/style pair, and hands the
accumulated records to the result writer.
"""
import logging
import re
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from PIL import Image
from rich.console import Console

from raster_bench.backend import Backend, BenchAssets, BenchParams
from raster_bench.baseline import Baseline, BaselineSum
from raster_bench.calibration import compute_cpms, run_single_test
from raster_bench.catalog import CompOpInfo, StyleKind
from raster_bench.config import BenchmarkConfig
from raster_bench.pillow_backend import create_backends
from raster_bench.report import CellData, TableWriter, format_cpms
from raster_bench.results import JsonRecord, JsonWriter
from raster_bench.sprites import Sprites

logger = logging.getLogger("raster_bench.runner")

STROKE_WIDTH = 2.0

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9./-]")


def sanitize(path: str) -> str:
    """Replace every character other than ASCII alphanumerics, '.', '/' and '-' with '_'."""
    return _UNSAFE_CHARS.sub("_", path)


def save_surface(surface: Image.Image, path: Path) -> Path:
    """
    Write a surface as PNG.

    Raises:
        RuntimeError: If the image cannot be written.
    """
    try:
        surface.save(path, "PNG")
    except OSError as e:
        raise RuntimeError(f"Failed to write image {path}: {e}") from e
    logger.debug(f"Saved image {path}")
    return path


class BenchRunner:
    """
    Orchestrator for a full benchmark invocation.

    Args:
        config: Validated configuration.
        backend_factory: Creates the backends for the configured thread counts;
                         defaults to the Pillow backends.
        console: Console used for the results table.
    """

    def __init__(self, config: BenchmarkConfig,
                 backend_factory: Optional[Callable[[int, int, Sequence[int]], List[Backend]]] = None,
                 console: Optional[Console] = None):
        self.config = config
        self.backend_factory = backend_factory or create_backends
        self.json = JsonWriter(config.width, config.height, config.quantity, config.min_runs, config.sizes)
        # Fail fast on a bad baseline, before any measurement runs
        self.baseline: Optional[Baseline] = Baseline.load(config.baseline) if config.baseline else None
        self.table = TableWriter(config.size_labels, with_baseline=self.baseline is not None, console=console)
        self.assets = BenchAssets(sprites=Sprites.load())

    def run(self) -> Path:
        """Run every backend and write the result file."""
        if self.config.preview or self.config.save_images:
            try:
                self.config.image_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise RuntimeError(f"Failed to create image directory {self.config.image_dir}: {e}") from e

        backends = self.backend_factory(self.config.width, self.config.height, self.config.threads)
        try:
            for backend in backends:
                self.run_backend(backend)
        finally:
            for backend in backends:
                backend.close()
        return self.json.write(self.config.json_path)

    def run_backend(self, backend: Backend) -> List[JsonRecord]:
        """Measure all configured pairs for one backend and record its run."""
        logger.info(f"Running backend {backend.name}")
        records: List[JsonRecord] = []
        for comp_op in self.config.comp_ops:
            for style in self.config.styles:
                if not backend.supports_comp_op(comp_op) or not backend.supports_style(style):
                    message = f"{backend.name}: skipping unsupported combination {comp_op.name}/{style.label}"
                    logger.warning(message)
                    self.table.print_note(message)
                    continue
                records.extend(self.run_pair(backend, comp_op, style))

        self.json.push_run(backend.name, backend.version, records)
        return records

    def run_pair(self, backend: Backend, comp_op: CompOpInfo, style: StyleKind) -> List[JsonRecord]:
        """Run every selected test for one (comp op, style) pair and print its table."""
        config = self.config
        params = BenchParams(
            screen_size=(config.width, config.height),
            comp_op=comp_op,
            style=style,
            shape_size=config.sizes[0],
            quantity=config.quantity,
            stroke_width=STROKE_WIDTH,
        )
        records: List[JsonRecord] = []
        totals = [0.0] * len(config.sizes)
        baseline_totals = [BaselineSum() for _ in config.sizes] if self.baseline else None

        self.table.print_header(backend.name, comp_op.name, style.label)

        for test in config.tests:
            params.test = test
            formatted_values: List[str] = []
            cells: List[CellData] = []
            overview = self._create_overview()

            for index, size in enumerate(config.sizes):
                params.shape_size = size
                duration, used_quantity = run_single_test(
                    backend, self.assets, params, config.quantity, config.min_runs)
                cpms = compute_cpms(used_quantity, duration)
                totals[index] += cpms
                formatted = format_cpms(cpms)

                entry = None
                if self.baseline is not None:
                    entry = self.baseline.entry(backend.name, test.label, size, comp_op.name, style.label)
                    baseline_totals[index].push(entry)

                if overview is not None:
                    overview.paste(backend.surface(), (1 + index * (config.width + 1), 1))
                if config.save_images and index + 2 >= len(config.sizes):
                    suffix = chr(ord('A') + index)
                    name = f"{test.label}-{comp_op.name}-{style.label}-{suffix}-{backend.name}.png"
                    save_surface(backend.surface(), config.image_dir / sanitize(name))

                formatted_values.append(formatted)
                cells.append(CellData(cpms, formatted, entry))

            if overview is not None:
                name = f"{test.label}-{comp_op.name}-{style.label}-{backend.name}.png"
                save_surface(overview, config.image_dir / sanitize(name))

            self.table.print_row(test.label, comp_op.name, style.label, cells)
            records.append(JsonRecord(test.label, comp_op.name, style.label, formatted_values))

        total_cells = []
        for index, value in enumerate(totals):
            entry = baseline_totals[index].finish() if baseline_totals is not None else None
            total_cells.append(CellData(value, format_cpms(value), entry))
        self.table.print_row("Total", comp_op.name, style.label, total_cells)
        self.table.print_border()
        return records

    def _create_overview(self) -> Optional[Image.Image]:
        """Black canvas holding one surface per size side by side, with 1px gutters."""
        if not self.config.preview:
            return None
        width = 1 + (self.config.width + 1) * len(self.config.sizes)
        height = self.config.height + 2
        return Image.new("RGB", (width, height), (0, 0, 0))


def run_benchmark(config: BenchmarkConfig, console: Optional[Console] = None) -> Path:
    """Convenience wrapper: run the Pillow backends for ``config``."""
    return BenchRunner(config, console=console).run()
