"""
Typed benchmark configuration.

Everything the command line supplies is validated here, eagerly and
completely, before any timing begins.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, TypeVar

from raster_bench.catalog import (
    ALL_STYLES,
    ALL_TESTS,
    BENCH_SHAPE_SIZES,
    COMP_OPS,
    DEFAULT_COMP_OP,
    DEFAULT_STYLE,
    CompOpInfo,
    StyleKind,
    TestKind,
)

logger = logging.getLogger("raster_bench.config")

T = TypeVar("T")

DEFAULT_WIDTH = 512
DEFAULT_HEIGHT = 600
DEFAULT_MIN_RUNS = 10
DEFAULT_THREADS = "0,2,4,8"
DEFAULT_JSON_PATH = "results.json"
PREVIEW_QUANTITY = 10

# Standard benchmark presets
PRESETS = {
    "quick": {"size_count": 3, "min_runs": 3},
    "standard": {"size_count": 6, "min_runs": 10},
    "full": {"size_count": 6, "min_runs": 50},
}


class ConfigurationError(ValueError):
    """Invalid benchmark configuration."""


def parse_sizes(size_list: str) -> List[int]:
    """
    Parse a comma-separated list of shape sizes.

    Args:
        size_list: Sizes such as "8,16,32"; empty entries are ignored.

    Returns:
        List of positive sizes in the given order.
    """
    sizes = []
    for part in size_list.split(','):
        token = part.strip()
        if not token:
            continue
        try:
            value = int(token)
        except ValueError as e:
            raise ConfigurationError(f"Invalid size '{token}'") from e
        if value <= 0:
            raise ConfigurationError(f"Invalid size '{token}'")
        sizes.append(value)
    if not sizes:
        raise ConfigurationError("No sizes provided")
    return sizes


def parse_threads(thread_list: str) -> List[int]:
    """Parse thread counts, sorted and de-duplicated; empty means single-threaded."""
    threads = set()
    for part in thread_list.split(','):
        token = part.strip()
        if not token:
            continue
        try:
            value = int(token)
        except ValueError as e:
            raise ConfigurationError(f"Invalid thread count '{token}'") from e
        if value < 0:
            raise ConfigurationError(f"Invalid thread count '{token}'")
        threads.add(value)
    return sorted(threads) or [0]


def parse_toggle_list(toggle_list: Optional[str], items: Sequence[Tuple[str, T]],
                      default_items: Sequence[T]) -> List[T]:
    """
    Resolve an include/exclude filter against a catalog.

    ``"A,B"`` selects exactly A and B, ``"-A"`` selects the defaults without A.
    Names are matched case-insensitively and results keep catalog order.

    Args:
        toggle_list: Comma-separated filter, or None for the defaults.
        items: Catalog as (label, value) pairs.
        default_items: Selection used when no filter (or a subtractive one) is given.

    Returns:
        Selected values.

    Raises:
        ConfigurationError: On unknown names or mixed additive/subtractive entries.
    """
    if toggle_list is None:
        return list(default_items)

    include_mode = None
    selected = set()
    for raw in toggle_list.split(','):
        token = raw.strip()
        if not token:
            continue
        if token.startswith('-'):
            mode, name = False, token[1:].strip()
        else:
            mode, name = True, token
        if include_mode is None:
            include_mode = mode
        elif include_mode != mode:
            raise ConfigurationError("Cannot mix additive and subtractive entries")

        for label, value in items:
            if label.lower() == name.lower():
                selected.add(value)
                break
        else:
            raise ConfigurationError(f"Unknown entry '{name}'")

    if include_mode is None or include_mode:
        return [value for _, value in items if value in selected]
    return [value for value in default_items if value not in selected]


@dataclass
class BenchmarkConfig:
    """Validated settings for one benchmark invocation."""
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    quantity: int = 0
    min_runs: int = DEFAULT_MIN_RUNS
    sizes: List[int] = field(default_factory=lambda: list(BENCH_SHAPE_SIZES))
    tests: List[TestKind] = field(default_factory=lambda: list(ALL_TESTS))
    comp_ops: List[CompOpInfo] = field(default_factory=lambda: [DEFAULT_COMP_OP])
    styles: List[StyleKind] = field(default_factory=lambda: [DEFAULT_STYLE])
    threads: List[int] = field(default_factory=lambda: [0])
    preview: bool = False
    save_images: bool = False
    baseline: Optional[Path] = None
    json_path: Path = Path(DEFAULT_JSON_PATH)
    image_dir: Path = Path("images")

    @property
    def size_labels(self) -> List[str]:
        return [f"{size}x{size}" for size in self.sizes]

    @classmethod
    def from_args(cls, args) -> "BenchmarkConfig":
        """
        Build a configuration from parsed command-line arguments.

        Raises:
            ConfigurationError: If any setting is invalid.
        """
        if args.width <= 0 or args.height <= 0:
            raise ConfigurationError(f"Invalid canvas size {args.width}x{args.height}")
        if args.quantity < 0:
            raise ConfigurationError(f"Invalid quantity {args.quantity}")

        size_count = args.size_count
        min_runs = args.min_runs
        if args.preset:
            if args.preset not in PRESETS:
                raise ConfigurationError(f"Unknown preset '{args.preset}'")
            preset = PRESETS[args.preset]
            size_count = preset["size_count"]
            min_runs = preset["min_runs"]

        if args.sizes:
            sizes = parse_sizes(args.sizes)
        else:
            if not 1 <= size_count <= len(BENCH_SHAPE_SIZES):
                raise ConfigurationError(
                    f"Size count must be between 1 and {len(BENCH_SHAPE_SIZES)}, got {size_count}")
            sizes = list(BENCH_SHAPE_SIZES[:size_count])

        tests = parse_toggle_list(args.tests, [(test.label, test) for test in ALL_TESTS], ALL_TESTS)
        if not tests:
            raise ConfigurationError("Test filter selects no tests")

        comp_ops = [DEFAULT_COMP_OP]
        if args.comp_ops is not None:
            executable = [info for info in COMP_OPS if info.executable]
            comp_ops = parse_toggle_list(args.comp_ops, [(info.name, info) for info in COMP_OPS], executable)
            for info in comp_ops:
                if not info.executable:
                    raise ConfigurationError(f"Unsupported compositing operation '{info.name}'")
            if not comp_ops:
                raise ConfigurationError("Compositing filter selects no operations")

        styles = [DEFAULT_STYLE]
        if args.styles is not None:
            styles = parse_toggle_list(args.styles, [(style.label, style) for style in ALL_STYLES], ALL_STYLES)
            if not styles:
                raise ConfigurationError("Style filter selects no styles")

        quantity = PREVIEW_QUANTITY if args.preview else args.quantity

        config = cls(
            width=args.width,
            height=args.height,
            quantity=quantity,
            min_runs=max(min_runs, 1),
            sizes=sizes,
            tests=tests,
            comp_ops=comp_ops,
            styles=styles,
            threads=parse_threads(args.threads),
            preview=args.preview,
            save_images=args.save_images,
            baseline=Path(args.baseline) if args.baseline else None,
            json_path=Path(args.json_out),
        )
        logger.debug(f"Configuration: {config}")
        return config
