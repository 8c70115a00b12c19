"""
Rendering backend interface with proper separation between the harness and
the renderer being measured.

The harness only ever talks to a backend through ``name``, ``run`` and
``surface``; everything about how pixels are produced stays behind this
interface.
"""
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image

from raster_bench.catalog import (
    CompOpInfo,
    DEFAULT_COMP_OP,
    DEFAULT_STYLE,
    StyleKind,
    TestKind,
)
from raster_bench.sprites import Sprites


@dataclass
class BenchParams:
    """
    Parameters for one batch of drawing operations.

    A single instance is created per backend run and mutated in place by the
    orchestrator as it walks the test and size loops.
    """
    screen_size: Tuple[int, int]
    test: TestKind = TestKind.FILL_RECT_A
    comp_op: CompOpInfo = DEFAULT_COMP_OP
    style: StyleKind = DEFAULT_STYLE
    shape_size: int = 8
    quantity: int = 0
    stroke_width: float = 2.0


@dataclass(frozen=True)
class BackendRun:
    """Outcome of a single ``Backend.run`` call."""
    duration_us: int


@dataclass
class BenchAssets:
    """Shared read-mostly inputs handed to every backend run."""
    sprites: Optional[Sprites] = None


class Backend(ABC):
    """
    Abstract base class for every renderable benchmark target.

    Implementations must rewind their workload streams at the start of each
    ``run`` so that batches of the same quantity replay an identical sequence
    of drawing operations, however many calibration attempts came before.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Stable, unique identifier used as table label and baseline key."""
        pass

    def supports_style(self, style: StyleKind) -> bool:
        """Whether this backend can paint with ``style``."""
        return True

    def supports_comp_op(self, comp_op: CompOpInfo) -> bool:
        return comp_op.executable

    @property
    def version(self) -> Optional[str]:
        """Version of the underlying renderer, if known."""
        return None

    @abstractmethod
    def run(self, assets: BenchAssets, params: BenchParams) -> BackendRun:
        """
        Execute ``params.quantity`` drawing operations of kind ``params.test``.

        Args:
            assets: Shared assets (sprites) for pattern styles.
            params: Batch description.

        Returns:
            Wall-clock duration of the whole batch.
        """
        pass

    @abstractmethod
    def surface(self) -> Image.Image:
        """Read-only view of the most recent render output."""
        pass

    def close(self) -> None:
        """Release worker threads or other resources held by the backend."""
        pass


class TimerGuard:
    """Monotonic stopwatch with microsecond resolution."""

    def __init__(self):
        self._start = time.perf_counter_ns()

    @classmethod
    def start(cls) -> "TimerGuard":
        return cls()

    def elapsed_us(self) -> int:
        return (time.perf_counter_ns() - self._start) // 1000
