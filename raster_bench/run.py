"""
Command-line interface for running the raster benchmarks.

Example:
    python -m raster_bench.run --threads 0,4 --tests FillRectA,FillRectU --baseline old.json
"""
import argparse
import logging
import sys
import traceback
from typing import List, Optional

from raster_bench.baseline import BaselineError
from raster_bench.catalog import BENCH_SHAPE_SIZES
from raster_bench.config import (
    DEFAULT_HEIGHT,
    DEFAULT_JSON_PATH,
    DEFAULT_MIN_RUNS,
    DEFAULT_THREADS,
    DEFAULT_WIDTH,
    PRESETS,
    BenchmarkConfig,
    ConfigurationError,
)
from raster_bench.runner import BenchRunner

logger = logging.getLogger("raster_bench.run")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2
EXIT_INTERRUPTED = 130


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Raster rendering throughput benchmark",
        epilog="Example: python -m raster_bench.run --tests=-FillWorld --threads 0,4",
    )

    # Canvas and workload
    parser.add_argument("--width", type=int, default=DEFAULT_WIDTH, help="Canvas width")
    parser.add_argument("--height", type=int, default=DEFAULT_HEIGHT, help="Canvas height")
    parser.add_argument("--quantity", type=int, default=0,
                        help="Calls per test (0 = auto)")
    parser.add_argument("--size-count", type=int, default=len(BENCH_SHAPE_SIZES),
                        help=f"Number of sizes from the default ladder (1..{len(BENCH_SHAPE_SIZES)})")
    parser.add_argument("--sizes", default=None,
                        help="Explicit comma-separated list of sizes to use")
    parser.add_argument("--min-runs", type=int, default=DEFAULT_MIN_RUNS,
                        help="Minimum runs per benchmark (best result is used)")
    parser.add_argument("--preset", choices=sorted(PRESETS),
                        help="Use preset size count and run count (overrides --size-count/--min-runs)")

    # Selection
    parser.add_argument("--tests", default=None,
                        help="Test filter (comma separated; use --tests=-name to exclude)")
    parser.add_argument("--comp-ops", default=None,
                        help="Compositing operation filter (default: SrcOver)")
    parser.add_argument("--styles", default=None,
                        help="Style filter (default: Solid)")
    parser.add_argument("--threads", default=DEFAULT_THREADS,
                        help="Comma-separated thread counts, 0 = single-threaded")

    # Output
    parser.add_argument("--baseline", default=None,
                        help="Compare results against an existing JSON result file")
    parser.add_argument("--preview", action="store_true",
                        help="Reduced quantity run that saves one overview image per test")
    parser.add_argument("--save-images", action="store_true",
                        help="Save final surfaces for the two largest sizes")
    parser.add_argument("--json-out", default=DEFAULT_JSON_PATH, help="Output JSON path")

    parser.add_argument("--verbose", action="store_true",
                        help="Enable verbose output")

    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the benchmark."""
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = BenchmarkConfig.from_args(args)
        if args.verbose:
            print("Starting benchmark with the following settings:")
            for arg, value in vars(args).items():
                print(f"  {arg}: {value}")
            print()

        runner = BenchRunner(config)
        json_path = runner.run()
        print(f"\nResults saved to {json_path}")
        return EXIT_OK

    except (ConfigurationError, BaselineError) as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            traceback.print_exc()
        return EXIT_CONFIG
    except KeyboardInterrupt:
        print("\nBenchmark interrupted.")
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.error(f"Error running benchmark: {e}")
        if args.verbose:
            traceback.print_exc()
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
