"""
Pillow rendering backend.

Draws the benchmark workloads with ``PIL.ImageDraw`` into an RGB surface.
Multi-threaded configurations split the surface into horizontal bands that
are rasterized concurrently by a thread pool and pasted back afterwards.
"""
import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
import PIL
from PIL import Image, ImageDraw

from raster_bench.backend import Backend, BackendRun, BenchAssets, BenchParams, TimerGuard
from raster_bench.catalog import CompOpInfo, RenderOp, StyleKind, TestKind
from raster_bench.compositing import COMPOSITORS, GradientPaint, composite_pixels
from raster_bench.random_stream import COLOR_SEED, COORD_SEED, EXTRA_SEED, BenchRandom
from raster_bench import shapes

logger = logging.getLogger("raster_bench.pillow_backend")

Point = Tuple[float, float]
Color = Tuple[int, int, int, int]

ROTATION_STEP = 0.01
ROUND_SEGMENTS = 4

# Extra rows drawn above and below each band, beyond the stroke width
BAND_MARGIN = 2

# Solid-color compositing modes drawn directly with ImageDraw
_DIRECT_MODES = frozenset({"src-over", "copy", "clear"})

_GRADIENT_STYLES = {
    StyleKind.LINEAR_PAD: ("linear", "pad"),
    StyleKind.LINEAR_REPEAT: ("linear", "repeat"),
    StyleKind.LINEAR_REFLECT: ("linear", "reflect"),
    StyleKind.RADIAL_PAD: ("radial", "pad"),
    StyleKind.RADIAL_REPEAT: ("radial", "repeat"),
    StyleKind.RADIAL_REFLECT: ("radial", "reflect"),
    StyleKind.CONIC: ("conic", "pad"),
}

_CONIC_OFFSETS = (0.0, 0.33, 0.66, 1.0)
_GRADIENT_OFFSETS = (0.0, 0.5, 1.0)

_RECT_TESTS = {
    TestKind.FILL_RECT_A: "aligned",
    TestKind.STROKE_RECT_A: "aligned",
    TestKind.FILL_RECT_U: "floating",
    TestKind.STROKE_RECT_U: "floating",
    TestKind.FILL_RECT_ROT: "rotated",
    TestKind.STROKE_RECT_ROT: "rotated",
}

_ROUND_TESTS = {
    TestKind.FILL_ROUND_U: False,
    TestKind.STROKE_ROUND_U: False,
    TestKind.FILL_ROUND_ROT: True,
    TestKind.STROKE_ROUND_ROT: True,
}


@dataclass
class DrawCommand:
    """
    One fully resolved drawing operation.

    Exactly one of ``box`` (axis-aligned rectangle, optionally rounded with
    ``radius``) or ``polygons`` describes the geometry. The paint is
    ``gradient`` when set, the sprite at ``sprite_index`` for pattern styles,
    and ``color`` otherwise.
    """
    color: Color
    rect_origin: Point
    box: Optional[Tuple[int, int, int, int]] = None
    radius: float = 0.0
    polygons: Optional[List[List[Point]]] = None
    sprite_index: int = 0
    gradient: Optional[GradientPaint] = None

    def bounds(self) -> Tuple[float, float, float, float]:
        if self.box is not None:
            return self.box
        xs = [x for polygon in self.polygons for x, _ in polygon]
        ys = [y for polygon in self.polygons for _, y in polygon]
        return min(xs), min(ys), max(xs), max(ys)


def rotate_about(points: Sequence[Point], center: Point, angle: float) -> List[Point]:
    """Rotate points around ``center`` by ``angle`` radians."""
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    cx, cy = center
    return [
        (cx + (x - cx) * cos_a - (y - cy) * sin_a,
         cy + (x - cx) * sin_a + (y - cy) * cos_a)
        for x, y in points
    ]


def rect_points(x: float, y: float, size: float) -> List[Point]:
    return [(x, y), (x + size, y), (x + size, y + size), (x, y + size)]


def rounded_rect_points(x: float, y: float, size: float, radius: float) -> List[Point]:
    """Polygon approximation of a rounded square."""
    r = min(radius, size / 2.0)
    corners = (
        (x + size - r, y + r, -math.pi / 2),
        (x + size - r, y + size - r, 0.0),
        (x + r, y + size - r, math.pi / 2),
        (x + r, y + r, math.pi),
    )
    points = []
    for cx, cy, start in corners:
        for step in range(ROUND_SEGMENTS + 1):
            angle = start + (math.pi / 2) * step / ROUND_SEGMENTS
            points.append((cx + r * math.cos(angle), cy + r * math.sin(angle)))
    return points


def unpack_color(word: int) -> Color:
    """Split a 0xAARRGGBB word into an (r, g, b, a) tuple."""
    return ((word >> 16) & 0xFF, (word >> 8) & 0xFF, word & 0xFF, (word >> 24) & 0xFF)


def snap(value: float) -> int:
    """Round half up to a whole pixel."""
    return math.floor(value + 0.5)


class PillowBackend(Backend):
    """
    Benchmark backend rendering through Pillow.

    ``threads == 0`` renders on the calling thread; any other value splits the
    surface into that many horizontal bands rendered by a thread pool.

    Geometry is snapped to whole pixels before it reaches Pillow, so drawing a
    band is an exact integer translation of drawing the full surface. Each
    band is also rendered with a few extra rows on both sides, which absorb
    Pillow's clipping at the band edges and are discarded on paste.
    """

    def __init__(self, width: int, height: int, threads: int = 0):
        self.threads = threads
        self._name = "Pillow ST" if threads == 0 else f"Pillow {threads}T"
        self.width = width
        self.height = height
        self._surface = Image.new("RGB", (width, height))
        self.coord_rng = BenchRandom(COORD_SEED)
        self.color_rng = BenchRandom(COLOR_SEED)
        self.extra_rng = BenchRandom(EXTRA_SEED)
        self.sprite_cursor = 0
        self._executor = ThreadPoolExecutor(max_workers=threads, thread_name_prefix="PillowBand") if threads else None

    @property
    def name(self) -> str:
        return self._name

    @property
    def version(self) -> Optional[str]:
        return PIL.__version__

    def supports_comp_op(self, comp_op: CompOpInfo) -> bool:
        return comp_op.mode in COMPOSITORS

    def surface(self) -> Image.Image:
        return self._surface

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def reset_state(self) -> None:
        """Rewind all workload streams to their seeded start."""
        self.coord_rng.rewind()
        self.color_rng.rewind()
        self.extra_rng.rewind()
        self.sprite_cursor = 0

    def run(self, assets: BenchAssets, params: BenchParams) -> BackendRun:
        self.reset_state()
        self._ensure_surface(*params.screen_size)
        if self._executor is None:
            self._surface.paste((0, 0, 0), (0, 0, self.width, self.height))
            bands = []
        else:
            bands = self._make_bands(max(1, round(params.stroke_width)) + BAND_MARGIN)

        timer = TimerGuard.start()
        commands = self.build_commands(params)
        if self._executor is None:
            self._render(self._surface, 0, commands, assets, params)
        else:
            list(self._executor.map(
                lambda band: self._render(band[3], band[2], commands, assets, params),
                bands,
            ))
            for top, bottom, padded_top, image in bands:
                visible = image.crop((0, top - padded_top, self.width, bottom - padded_top))
                self._surface.paste(visible, (0, top))
        return BackendRun(duration_us=timer.elapsed_us())

    def _ensure_surface(self, width: int, height: int) -> None:
        if (width, height) != (self.width, self.height):
            logger.debug(f"{self.name}: resizing surface to {width}x{height}")
            self.width = width
            self.height = height
            self._surface = Image.new("RGB", (width, height))

    def _make_bands(self, padding: int) -> List[Tuple[int, int, int, Image.Image]]:
        """
        Split the surface into horizontal bands.

        Returns:
            One (top, bottom, padded_top, image) tuple per band. The image
            covers the band plus ``padding`` rows on each side, clamped to the
            surface.
        """
        band_height = max(1, math.ceil(self.height / self.threads))
        bands = []
        for top in range(0, self.height, band_height):
            bottom = min(top + band_height, self.height)
            padded_top = max(0, top - padding)
            padded_bottom = min(self.height, bottom + padding)
            image = Image.new("RGB", (self.width, padded_bottom - padded_top))
            bands.append((top, bottom, padded_top, image))
        return bands

    # -- Workload generation -------------------------------------------------

    def _next_sprite_index(self) -> int:
        index = self.sprite_cursor
        self.sprite_cursor = (self.sprite_cursor + 1) % 4
        return index

    def _next_color(self) -> Color:
        return unpack_color(self.color_rng.next_color_word())

    def _gradient(self, style: StyleKind, origin: Point, size: float) -> GradientPaint:
        kind, extend = _GRADIENT_STYLES[style]
        x, y = origin
        center = (x + size * 0.5, y + size * 0.5)
        offsets = _CONIC_OFFSETS if kind == "conic" else _GRADIENT_OFFSETS
        stops = [(offset, self._next_color()) for offset in offsets]
        if kind == "linear":
            return GradientPaint(kind, extend, (x + size * 0.2, y + size * 0.2),
                                 (x + size * 0.8, y + size * 0.8), 0.0, stops)
        return GradientPaint(kind, extend, center, center, max(size * 0.5, 0.5), stops)

    def _command(self, params: BenchParams, origin: Point, **geometry) -> DrawCommand:
        """Attach the next paint for ``params.style`` to a piece of geometry."""
        style = params.style
        if style.is_pattern:
            return DrawCommand((255, 255, 255, 255), origin, sprite_index=self._next_sprite_index(), **geometry)
        if style in _GRADIENT_STYLES:
            gradient = self._gradient(style, origin, params.shape_size)
            return DrawCommand((255, 255, 255, 255), origin, gradient=gradient, **geometry)
        return DrawCommand(self._next_color(), origin, **geometry)

    def build_commands(self, params: BenchParams) -> List[DrawCommand]:
        """
        Resolve ``params.quantity`` drawing operations from the workload streams.

        Generation always runs on the calling thread, before any rasterizing,
        so every thread configuration draws the same sequence.
        """
        test = params.test
        size = params.shape_size
        span_x = max(self.width - size, 0)
        span_y = max(self.height - size, 0)
        center = (self.width / 2.0, self.height / 2.0)
        commands = []
        angle = 0.0

        if test in _RECT_TESTS:
            variant = _RECT_TESTS[test]
            for _ in range(params.quantity):
                if variant == "aligned":
                    x = self.coord_rng.next_int(0, max(span_x, 1))
                    y = self.coord_rng.next_int(0, max(span_y, 1))
                else:
                    x = self.coord_rng.next_float(0.0, span_x)
                    y = self.coord_rng.next_float(0.0, span_y)
                if variant == "rotated":
                    polygon = rotate_about(rect_points(x, y, size), center, angle)
                    commands.append(self._command(params, (x, y), polygons=[polygon]))
                    angle += ROTATION_STEP
                else:
                    box = (round(x), round(y), round(x + size) - 1, round(y + size) - 1)
                    commands.append(self._command(params, (x, y), box=box))

        elif test in _ROUND_TESTS:
            rotate = _ROUND_TESTS[test]
            for _ in range(params.quantity):
                x = self.coord_rng.next_float(0.0, span_x)
                y = self.coord_rng.next_float(0.0, span_y)
                radius = self.extra_rng.next_float(4.0, 40.0)
                if rotate:
                    polygon = rotate_about(rounded_rect_points(x, y, size, radius), center, angle)
                    commands.append(self._command(params, (x, y), polygons=[polygon]))
                else:
                    box = (round(x), round(y), round(x + size) - 1, round(y + size) - 1)
                    commands.append(self._command(params, (x, y), box=box, radius=radius))
                angle += ROTATION_STEP

        elif test.polygon_complexity is not None:
            complexity = test.polygon_complexity
            for _ in range(params.quantity):
                base_x = self.coord_rng.next_float(0.0, span_x)
                base_y = self.coord_rng.next_float(0.0, span_y)
                polygon = [
                    (self.coord_rng.next_float(base_x, base_x + size),
                     self.coord_rng.next_float(base_y, base_y + size))
                    for _ in range(complexity)
                ]
                commands.append(self._command(params, (base_x, base_y), polygons=[polygon]))

        elif test.shape is not None:
            outline = shapes.scaled_polygons(test.shape, size)
            for _ in range(params.quantity):
                base_x = self.coord_rng.next_float(0.0, span_x)
                base_y = self.coord_rng.next_float(0.0, span_y)
                polygons = [[(px + base_x, py + base_y) for px, py in polygon] for polygon in outline]
                commands.append(self._command(params, (base_x, base_y), polygons=polygons))

        else:
            raise ValueError(f"Unsupported test: {test}")

        return commands

    # -- Rasterizing ---------------------------------------------------------

    def _render(self, target: Image.Image, offset_y: int, commands: List[DrawCommand],
                assets: BenchAssets, params: BenchParams) -> None:
        """Draw all commands into ``target``, whose top row is ``offset_y`` on the surface."""
        stroke = params.test.render_op is RenderOp.STROKE
        width = max(1, round(params.stroke_width))
        mode = params.comp_op.mode

        if params.style is StyleKind.SOLID and mode in _DIRECT_MODES:
            if mode == "src-over":
                draw = ImageDraw.Draw(target, "RGBA")
            else:
                draw = ImageDraw.Draw(target)
            for command in commands:
                if mode == "src-over":
                    ink = command.color
                elif mode == "copy":
                    ink = command.color[:3]
                else:
                    ink = (0, 0, 0)
                self._draw_geometry(draw, command, 0, offset_y, ink, stroke, width)
            return

        for command in commands:
            self._composite(target, offset_y, command, assets, params, stroke, width)

    @staticmethod
    def _draw_geometry(draw: ImageDraw.ImageDraw, command: DrawCommand, dx: int, dy: int,
                       ink, stroke: bool, width: int) -> None:
        """Draw a command's geometry translated by (-dx, -dy) whole pixels."""
        if command.box is not None:
            x0, y0, x1, y1 = command.box
            box = (x0 - dx, y0 - dy, x1 - dx, y1 - dy)
            if command.radius > 0:
                if stroke:
                    draw.rounded_rectangle(box, radius=round(command.radius), outline=ink, width=width)
                else:
                    draw.rounded_rectangle(box, radius=round(command.radius), fill=ink)
            elif stroke:
                draw.rectangle(box, outline=ink, width=width)
            else:
                draw.rectangle(box, fill=ink)
            return

        for polygon in command.polygons:
            local = [(snap(x) - dx, snap(y) - dy) for x, y in polygon]
            if stroke:
                draw.line(local + [local[0]], fill=ink, width=width, joint="curve")
            else:
                draw.polygon(local, fill=ink)

    def _composite(self, target: Image.Image, offset_y: int, command: DrawCommand, assets: BenchAssets,
                   params: BenchParams, stroke: bool, width: int) -> None:
        """Draw one command through a coverage mask with the numpy compositors."""
        pad = width + 1 if stroke else 1
        bx0, by0, bx1, by1 = command.bounds()
        x0 = max(0, math.floor(bx0) - pad)
        x1 = min(target.width, math.ceil(bx1) + pad)
        y0 = max(offset_y, math.floor(by0) - pad)
        y1 = min(offset_y + target.height, math.ceil(by1) + pad)
        if x1 <= x0 or y1 <= y0:
            return

        size = (x1 - x0, y1 - y0)
        mask = Image.new("L", size, 0)
        self._draw_geometry(ImageDraw.Draw(mask), command, x0, y0, 255, stroke, width)

        if params.style.is_pattern:
            source = np.asarray(self._pattern_tile(assets, params, command, x0, y0, size), dtype=np.float64) / 255.0
            alpha = 1.0
        elif command.gradient is not None:
            source, alpha = command.gradient.render(x0, y0, *size)
        else:
            source = np.asarray(command.color[:3], dtype=np.float64) / 255.0
            alpha = command.color[3] / 255.0

        box = (x0, y0 - offset_y, x1, y1 - offset_y)
        region = np.asarray(target.crop(box))
        blended = composite_pixels(params.comp_op.mode, source, alpha, region, np.asarray(mask))
        target.paste(Image.fromarray(blended), box[:2])

    def _pattern_tile(self, assets: BenchAssets, params: BenchParams, command: DrawCommand,
                      x0: int, y0: int, size: Tuple[int, int]) -> np.ndarray:
        """Repeat the command's sprite over a region, anchored at the shape origin."""
        if assets.sprites is None:
            raise RuntimeError("Pattern styles require sprites in the benchmark assets")
        resample = (Image.Resampling.NEAREST if params.style is StyleKind.PATTERN_NEAREST
                    else Image.Resampling.BILINEAR)
        tile_size = max(1, params.shape_size)
        sprite = np.asarray(assets.sprites.sprite(command.sprite_index, tile_size, resample))

        width, height = size
        offset_x = int(x0 - math.floor(command.rect_origin[0])) % tile_size
        offset_y = int(y0 - math.floor(command.rect_origin[1])) % tile_size
        reps_y = math.ceil((height + offset_y) / tile_size)
        reps_x = math.ceil((width + offset_x) / tile_size)
        return np.tile(sprite, (reps_y, reps_x, 1))[offset_y:offset_y + height, offset_x:offset_x + width]


def create_backends(width: int, height: int, thread_counts: Sequence[int]) -> List[PillowBackend]:
    """Create one backend per thread configuration, in the given order."""
    return [PillowBackend(width, height, count) for count in thread_counts]
