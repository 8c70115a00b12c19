"""
Sprite images for the pattern styles.

The four source sprites are generated procedurally; scaled copies are cached
per requested size and resampling filter.
"""
import threading
from typing import Dict, List, Optional, Tuple

import numpy as np
from PIL import Image

SPRITE_COUNT = 4
SPRITE_SIZE = 128


def _gradient_sprite(variant: int, size: int = SPRITE_SIZE) -> Image.Image:
    """Create one RGB sprite with a smooth, variant-specific pattern."""
    img_array = np.zeros((size, size, 3), dtype=np.uint8)
    y, x = np.mgrid[0:size, 0:size].astype(np.float64)
    phase = variant * 0.75
    if variant == 0:
        # Diagonal sine bands
        img_array[..., 0] = np.sin(x / size * 3.14 + phase) * 127 + 128
        img_array[..., 1] = np.sin(y / size * 3.14) * 127 + 128
        img_array[..., 2] = np.sin((x + y) / (2 * size) * 3.14) * 127 + 128
    elif variant == 1:
        # Concentric rings
        radius = np.hypot(x - size / 2, y - size / 2)
        img_array[..., 0] = np.cos(radius / 6.0) * 127 + 128
        img_array[..., 1] = np.sin(radius / 9.0 + phase) * 127 + 128
        img_array[..., 2] = 255 - radius / radius.max() * 255
    elif variant == 2:
        # Checkerboard with a vertical gradient
        checker = ((x // 16 + y // 16) % 2) * 160
        img_array[..., 0] = checker + 40
        img_array[..., 1] = y / size * 255
        img_array[..., 2] = 200 - checker
    else:
        # Angular sweep
        angle = np.arctan2(y - size / 2, x - size / 2)
        img_array[..., 0] = np.sin(angle * 3 + phase) * 127 + 128
        img_array[..., 1] = np.cos(angle * 2) * 127 + 128
        img_array[..., 2] = x / size * 255
    return Image.fromarray(img_array)


class Sprites:
    """
    Provider of the pattern sprites and their scaled variants.

    Scaled variants are created lazily, all four at once, and cached by
    ``(size, resample)``. The cache is guarded by a lock because band workers
    of a multi-threaded backend may ask for sprites concurrently.
    """

    def __init__(self, originals: Optional[List[Image.Image]] = None):
        self.originals = originals or [_gradient_sprite(i) for i in range(SPRITE_COUNT)]
        self._scaled: Dict[Tuple[int, int], List[Image.Image]] = {}
        self._lock = threading.Lock()

    @classmethod
    def load(cls) -> "Sprites":
        return cls()

    def __len__(self) -> int:
        return len(self.originals)

    def sprite(self, index: int, size: int, resample: int = Image.Resampling.NEAREST) -> Image.Image:
        """
        Get sprite ``index`` scaled to ``size`` x ``size``.

        Args:
            index: Sprite index, wrapped to the available sprites.
            size: Target edge length; 0 returns the unscaled original.
            resample: Pillow resampling filter used for the scaled copy.

        Returns:
            The (shared, not to be modified) sprite image.
        """
        index %= len(self.originals)
        if size == 0:
            return self.originals[index]

        key = (size, int(resample))
        with self._lock:
            entry = self._scaled.get(key)
            if entry is None:
                entry = [original.resize((size, size), resample) for original in self.originals]
                self._scaled[key] = entry
            return entry[index]

    def cached_sizes(self) -> List[Tuple[int, int]]:
        with self._lock:
            return sorted(self._scaled)
