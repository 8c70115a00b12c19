"""
Raster Bench - throughput benchmarks for 2D rendering backends.

Usage:
    python -m raster_bench.run --help
"""
__version__ = "0.1.0"

from raster_bench.backend import Backend, BackendRun, BenchAssets, BenchParams
from raster_bench.baseline import (
    Baseline,
    BaselineEntry,
    BaselineError,
    BaselineSum,
    DeltaKind,
    MissingBaselineValue,
    baseline_delta,
    classify_delta,
)
from raster_bench.calibration import compute_cpms, run_single_test
from raster_bench.catalog import (
    BENCH_SHAPE_SIZES,
    COMP_OPS,
    CompOpInfo,
    StyleKind,
    TestKind,
    find_comp_op,
    find_style,
    find_test,
)
from raster_bench.config import BenchmarkConfig, ConfigurationError, parse_toggle_list
from raster_bench.pillow_backend import PillowBackend, create_backends
from raster_bench.random_stream import BenchRandom
from raster_bench.report import format_cpms
from raster_bench.results import JsonRecord, JsonWriter
from raster_bench.runner import BenchRunner, run_benchmark
