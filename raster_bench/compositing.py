"""
Pixel compositing and gradient paints on numpy arrays.

The benchmark surface is opaque RGB, so every operator here assumes a
destination alpha of 1. Colors are float64 in [0, 1]; a source carries its own
alpha, and shape coverage is applied last as a linear interpolation between
the destination and the composited result.
"""
import math
from dataclasses import dataclass
from typing import Callable, Dict, Sequence, Tuple, Union

import numpy as np

Color = Tuple[int, int, int, int]
Point = Tuple[float, float]

Compositor = Callable[[np.ndarray, np.ndarray, np.ndarray], np.ndarray]


def _hard_light(s: np.ndarray, d: np.ndarray) -> np.ndarray:
    return np.where(s <= 0.5, 2.0 * s * d, 1.0 - 2.0 * (1.0 - s) * (1.0 - d))


def _soft_light(s: np.ndarray, d: np.ndarray) -> np.ndarray:
    dd = np.where(d <= 0.25, ((16.0 * d - 12.0) * d + 4.0) * d, np.sqrt(d))
    return np.where(s <= 0.5,
                    d - (1.0 - 2.0 * s) * d * (1.0 - d),
                    d + (2.0 * s - 1.0) * (dd - d))


def _color_dodge(s: np.ndarray, d: np.ndarray) -> np.ndarray:
    with np.errstate(divide="ignore", invalid="ignore"):
        dodged = np.minimum(1.0, d / (1.0 - s))
    return np.where(d <= 0.0, 0.0, np.where(s >= 1.0, 1.0, dodged))


def _color_burn(s: np.ndarray, d: np.ndarray) -> np.ndarray:
    with np.errstate(divide="ignore", invalid="ignore"):
        burned = 1.0 - np.minimum(1.0, (1.0 - d) / s)
    return np.where(d >= 1.0, 1.0, np.where(s <= 0.0, 0.0, burned))


def _separable(blend: Callable[[np.ndarray, np.ndarray], np.ndarray]) -> Compositor:
    """Wrap a separable blend function B(s, d) into a compositor over an opaque destination."""
    def compose(s, sa, d):
        return d * (1.0 - sa) + sa * blend(s, d)
    return compose


# Porter-Duff operators reduced for Da = 1, plus the separable blend modes
COMPOSITORS: Dict[str, Compositor] = {
    "src-over": lambda s, sa, d: s * sa + d * (1.0 - sa),
    "copy": lambda s, sa, d: s,
    "src-in": lambda s, sa, d: s * sa,
    "src-out": lambda s, sa, d: np.zeros_like(d),
    "src-atop": lambda s, sa, d: s * sa + d * (1.0 - sa),
    "dest-over": lambda s, sa, d: d,
    "dest": lambda s, sa, d: d,
    "dest-in": lambda s, sa, d: d * sa,
    "dest-out": lambda s, sa, d: d * (1.0 - sa),
    "dest-atop": lambda s, sa, d: d * sa,
    "xor": lambda s, sa, d: d * (1.0 - sa),
    "clear": lambda s, sa, d: np.zeros_like(d),
    "plus": lambda s, sa, d: s * sa + d,
    "multiply": _separable(lambda s, d: s * d),
    "screen": _separable(lambda s, d: s + d - s * d),
    "overlay": _separable(lambda s, d: _hard_light(d, s)),
    "darken": _separable(np.minimum),
    "lighten": _separable(np.maximum),
    "color-dodge": _separable(_color_dodge),
    "color-burn": _separable(_color_burn),
    "hard-light": _separable(_hard_light),
    "soft-light": _separable(_soft_light),
    "difference": _separable(lambda s, d: np.abs(s - d)),
    "exclusion": _separable(lambda s, d: s + d - 2.0 * s * d),
}


def composite_pixels(mode: str, source: np.ndarray, source_alpha: Union[float, np.ndarray],
                     destination: np.ndarray, coverage: np.ndarray) -> np.ndarray:
    """
    Composite a source over an opaque destination region.

    Args:
        mode: Key of ``COMPOSITORS``.
        source: Source colors in [0, 1], broadcastable to the destination shape.
        source_alpha: Scalar or (h, w) alpha in [0, 1].
        destination: (h, w, 3) uint8 destination pixels.
        coverage: (h, w) uint8 shape coverage.

    Returns:
        (h, w, 3) uint8 composited pixels.
    """
    d = destination.astype(np.float64) / 255.0
    s = np.broadcast_to(source, d.shape)
    sa = np.broadcast_to(np.asarray(source_alpha, dtype=np.float64), d.shape[:2])[..., None]
    result = np.clip(COMPOSITORS[mode](s, sa, d), 0.0, 1.0)
    m = coverage.astype(np.float64)[..., None] / 255.0
    out = d + (result - d) * m
    return np.rint(out * 255.0).astype(np.uint8)


@dataclass
class GradientPaint:
    """
    A gradient brush in surface coordinates.

    ``kind`` is "linear" (``start`` to ``end``), "radial" (centered on
    ``start`` with ``radius``) or "conic" (sweeping once around ``start``).
    ``extend`` is "pad", "repeat" or "reflect".
    """
    kind: str
    extend: str
    start: Point
    end: Point
    radius: float
    stops: Sequence[Tuple[float, Color]]

    def _parameter(self, px: np.ndarray, py: np.ndarray) -> np.ndarray:
        sx, sy = self.start
        if self.kind == "linear":
            dx = self.end[0] - sx
            dy = self.end[1] - sy
            return ((px - sx) * dx + (py - sy) * dy) / (dx * dx + dy * dy)
        if self.kind == "radial":
            return np.hypot(px - sx, py - sy) / self.radius
        angle = np.arctan2(py - sy, px - sx) / (2.0 * math.pi)
        return angle - np.floor(angle)

    def _extend(self, t: np.ndarray) -> np.ndarray:
        if self.extend == "repeat":
            return t - np.floor(t)
        if self.extend == "reflect":
            u = t - 2.0 * np.floor(t / 2.0)
            return 1.0 - np.abs(u - 1.0)
        return np.clip(t, 0.0, 1.0)

    def render(self, x0: int, y0: int, width: int, height: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        Evaluate the gradient over a pixel region.

        Pixels are sampled at their centers in surface coordinates, so any
        sub-region evaluates to the same values as the full surface would.

        Returns:
            Tuple of (h, w, 3) colors and (h, w) alpha, both in [0, 1].
        """
        py, px = np.mgrid[0:height, 0:width].astype(np.float64)
        t = self._extend(self._parameter(px + (x0 + 0.5), py + (y0 + 0.5)))

        offsets = np.array([offset for offset, _ in self.stops], dtype=np.float64)
        colors = np.array([color for _, color in self.stops], dtype=np.float64) / 255.0
        channels = [np.interp(t, offsets, colors[:, i]) for i in range(4)]
        return np.stack(channels[:3], axis=-1), channels[3]
