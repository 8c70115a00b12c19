"""
Machine-readable result document.

Collects environment, CPU and screen metadata together with every backend's
records and writes them as one JSON file that can later serve as a baseline.
"""
import json
import logging
import platform
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import psutil

logger = logging.getLogger("raster_bench.results")

SURFACE_FORMAT = "rgb24"


@dataclass(frozen=True)
class JsonRecord:
    """Formatted throughput values of one test, aligned with the size ladder."""
    test_name: str
    comp_op: str
    style: str
    rcpms: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "test": self.test_name,
            "compOp": self.comp_op,
            "style": self.style,
            "rcpms": list(self.rcpms),
        }


def os_name() -> str:
    if sys.platform == "darwin":
        return "osx"
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform in ("win32", "cygwin"):
        return "windows"
    return "unknown"


def arch_name() -> str:
    machine = platform.machine().lower()
    if machine in ("x86_64", "amd64"):
        return "x86_64"
    if machine in ("i386", "i686", "x86"):
        return "x86"
    if machine in ("arm64", "aarch64"):
        return "aarch64"
    if machine.startswith("arm"):
        return "aarch32"
    return "unknown"


def cpu_info() -> Dict[str, Any]:
    """CPU description; vendor and brand fall back to "unknown"."""
    brand = platform.processor() or "unknown"
    return {
        "arch": arch_name(),
        "vendor": "unknown",
        "brand": brand,
        "physicalCores": psutil.cpu_count(logical=False) or 0,
        "logicalCores": psutil.cpu_count(logical=True) or 0,
    }


class JsonWriter:
    """Accumulates per-backend runs and writes the final result document."""

    def __init__(self, screen_w: int, screen_h: int, quantity: int, repeat: int, sizes: Sequence[int]):
        self.screen_w = screen_w
        self.screen_h = screen_h
        self.quantity = quantity
        self.repeat = repeat
        self.sizes = list(sizes)
        self.runs: List[Dict[str, Any]] = []

    def push_run(self, name: str, version: Optional[str], records: List[JsonRecord]) -> None:
        run: Dict[str, Any] = {"name": name}
        if version is not None:
            run["version"] = version
        run["records"] = [record.to_dict() for record in records]
        self.runs.append(run)

    def document(self) -> Dict[str, Any]:
        return {
            "environment": {"os": os_name()},
            "cpu": cpu_info(),
            "screen": {
                "width": self.screen_w,
                "height": self.screen_h,
                "format": SURFACE_FORMAT,
            },
            "options": {
                "quantity": self.quantity,
                "sizes": [f"{size}x{size}" for size in self.sizes],
                "repeat": self.repeat,
            },
            "runs": self.runs,
        }

    def write(self, path: Union[str, Path]) -> Path:
        """
        Serialize the document to ``path``.

        Raises:
            RuntimeError: If the file cannot be written.
        """
        path = Path(path)
        try:
            if path.parent != Path(""):
                path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(self.document(), f, indent=2)
        except OSError as e:
            raise RuntimeError(f"Failed to write results to {path}: {e}") from e
        logger.info(f"Results written to {path}")
        return path
