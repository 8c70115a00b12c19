"""
Comparison of current measurements against a previously recorded result file.

A baseline is indexed once by (backend, test, size, comp op, style) and is
read-only afterwards. Missing entries never abort a run; they surface as
per-cell error annotations instead.
"""
import json
import logging
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from raster_bench.catalog import DEFAULT_COMP_OP, DEFAULT_STYLE

logger = logging.getLogger("raster_bench.baseline")

MISSING_VALUE = "missing baseline value"
ZERO_BASELINE = "baseline 0"

# Deltas at or beyond this many percent are reported as real changes
DELTA_THRESHOLD = 3.0


class BaselineError(RuntimeError):
    """The baseline file could not be read or is malformed."""


class MissingBaselineValue(LookupError):
    """The baseline has no entry for the requested cell."""


class ZeroBaselineError(ArithmeticError):
    """The baseline value is zero, so no percentage delta exists."""


class DeltaKind(Enum):
    IMPROVEMENT = "improvement"
    REGRESSION = "regression"
    NOISE = "noise"


@dataclass(frozen=True)
class BaselineEntry:
    """Either a baseline value or the reason there is none."""
    value: Optional[float] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, value: float) -> "BaselineEntry":
        return cls(value=value)

    @classmethod
    def failed(cls, error: str) -> "BaselineEntry":
        return cls(error=error)

    @property
    def is_error(self) -> bool:
        return self.error is not None


class BaselineSum:
    """
    Accumulator for the baseline side of the "Total" row.

    Errors are sticky: once one is recorded, later values are ignored and the
    aggregate finishes as that first error.
    """

    def __init__(self):
        self.total = 0.0
        self.has_value = False
        self.error: Optional[str] = None

    def push(self, entry: BaselineEntry) -> None:
        if self.error is not None:
            return
        if entry.is_error:
            self.error = entry.error
        else:
            self.total += entry.value
            self.has_value = True

    def finish(self) -> BaselineEntry:
        if self.error is not None:
            return BaselineEntry.failed(self.error)
        if self.has_value:
            return BaselineEntry.ok(self.total)
        return BaselineEntry.failed(MISSING_VALUE)


def baseline_delta(value: float, baseline: float) -> float:
    """
    Percentage change of ``value`` relative to ``baseline``.

    Raises:
        ZeroBaselineError: If the baseline is (numerically) zero.
    """
    if abs(baseline) <= sys.float_info.epsilon:
        raise ZeroBaselineError(ZERO_BASELINE)
    return (value - baseline) / baseline * 100.0


def classify_delta(delta: float) -> DeltaKind:
    """Classify a percentage delta; the +/-3% boundaries are inclusive."""
    if delta >= DELTA_THRESHOLD:
        return DeltaKind.IMPROVEMENT
    if delta <= -DELTA_THRESHOLD:
        return DeltaKind.REGRESSION
    return DeltaKind.NOISE


def parse_size_label(label: str) -> int:
    """Parse a ladder label such as ``"64x64"`` (or plain ``"64"``) into its size."""
    head = str(label).split('x')[0].strip()
    try:
        return int(head)
    except ValueError as e:
        raise BaselineError(f"Invalid baseline size '{label}'") from e


BaselineKey = Tuple[str, str, int, str, str]


class Baseline:
    """Read-only index of a previously written result document."""

    def __init__(self, entries: Dict[BaselineKey, float], path: Optional[Path] = None):
        self.entries = entries
        self.path = path

    def __len__(self) -> int:
        return len(self.entries)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Baseline":
        """
        Load and index a baseline result file.

        Args:
            path: Path of a JSON document written by the result sink.

        Returns:
            The indexed baseline.

        Raises:
            BaselineError: If the file is missing, unreadable or malformed.
        """
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                root = json.load(f)
        except OSError as e:
            raise BaselineError(f"Failed to read baseline {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise BaselineError(f"Failed to parse baseline {path}: {e}") from e

        try:
            baseline = cls.from_document(root, path)
        except (KeyError, TypeError, AttributeError) as e:
            raise BaselineError(f"Malformed baseline {path}: {e!r}") from e

        logger.info(f"Loaded baseline {path} with {len(baseline)} entries")
        return baseline

    @classmethod
    def from_document(cls, root: dict, path: Optional[Path] = None) -> "Baseline":
        """Index an already parsed result document."""
        sizes = [parse_size_label(label) for label in root["options"]["sizes"]]

        entries: Dict[BaselineKey, float] = {}
        for run in root["runs"]:
            name = run["name"]
            for record in run.get("records", []):
                test = record["test"]
                comp_op = record.get("compOp", DEFAULT_COMP_OP.name)
                style = record.get("style", DEFAULT_STYLE.label)
                for size, value_str in zip(sizes, record["rcpms"]):
                    try:
                        value = float(value_str)
                    except (TypeError, ValueError):
                        logger.debug(f"Skipping unparseable baseline value {value_str!r} "
                                     f"for {name}/{test}/{size}")
                        continue
                    entries[(name, test, size, comp_op, style)] = value
        return cls(entries, path)

    def lookup(self, backend: str, test: str, size: int,
               comp_op: str = DEFAULT_COMP_OP.name, style: str = DEFAULT_STYLE.label) -> float:
        """
        Previously recorded throughput for a cell.

        Raises:
            MissingBaselineValue: If the baseline has no matching entry.
        """
        try:
            return self.entries[(backend, test, size, comp_op, style)]
        except KeyError:
            raise MissingBaselineValue(MISSING_VALUE) from None

    def entry(self, backend: str, test: str, size: int,
              comp_op: str = DEFAULT_COMP_OP.name, style: str = DEFAULT_STYLE.label) -> BaselineEntry:
        """Like ``lookup`` but folds a missing value into a ``BaselineEntry``."""
        try:
            return BaselineEntry.ok(self.lookup(backend, test, size, comp_op, style))
        except MissingBaselineValue as e:
            return BaselineEntry.failed(str(e))
