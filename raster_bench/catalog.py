"""
Static catalogs for the raster benchmark: test kinds, fill styles,
compositing operations and the default shape-size ladder.

All tables here are immutable and indexed by small enumerations.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class ShapeKind(Enum):
    """Outline shapes used by the Fill*/Stroke* shape tests."""
    BUTTERFLY = "Butterfly"
    FISH = "Fish"
    DRAGON = "Dragon"
    WORLD = "World"


class RenderOp(Enum):
    """How a test paints its geometry."""
    FILL_NON_ZERO = "FillNonZero"
    FILL_EVEN_ODD = "FillEvenOdd"
    STROKE = "Stroke"


class TestKind(Enum):
    """
    Every drawing operation the benchmark can measure.

    The enum value is the name used in tables, result files and filters.
    """
    __test__ = False  # keep pytest from collecting the enum

    FILL_RECT_A = "FillRectA"
    FILL_RECT_U = "FillRectU"
    FILL_RECT_ROT = "FillRectRot"
    FILL_ROUND_U = "FillRoundU"
    FILL_ROUND_ROT = "FillRoundRot"
    FILL_TRIANGLE = "FillTriangle"
    FILL_POLY_NZ_10 = "FillPolyNZi10"
    FILL_POLY_EO_10 = "FillPolyEOi10"
    FILL_POLY_NZ_20 = "FillPolyNZi20"
    FILL_POLY_EO_20 = "FillPolyEOi20"
    FILL_POLY_NZ_40 = "FillPolyNZi40"
    FILL_POLY_EO_40 = "FillPolyEOi40"
    FILL_BUTTERFLY = "FillButterfly"
    FILL_FISH = "FillFish"
    FILL_DRAGON = "FillDragon"
    FILL_WORLD = "FillWorld"
    STROKE_RECT_A = "StrokeRectA"
    STROKE_RECT_U = "StrokeRectU"
    STROKE_RECT_ROT = "StrokeRectRot"
    STROKE_ROUND_U = "StrokeRoundU"
    STROKE_ROUND_ROT = "StrokeRoundRot"
    STROKE_TRIANGLE = "StrokeTriangle"
    STROKE_POLY_10 = "StrokePoly10"
    STROKE_POLY_20 = "StrokePoly20"
    STROKE_POLY_40 = "StrokePoly40"
    STROKE_BUTTERFLY = "StrokeButterfly"
    STROKE_FISH = "StrokeFish"
    STROKE_DRAGON = "StrokeDragon"
    STROKE_WORLD = "StrokeWorld"

    @property
    def label(self) -> str:
        return self.value

    @property
    def render_op(self) -> RenderOp:
        if self in _EVEN_ODD_TESTS:
            return RenderOp.FILL_EVEN_ODD
        if self.value.startswith("Fill"):
            return RenderOp.FILL_NON_ZERO
        return RenderOp.STROKE

    @property
    def polygon_complexity(self) -> Optional[int]:
        """Vertex count for the polygon tests, None for everything else."""
        return _POLYGON_COMPLEXITY.get(self)

    @property
    def shape(self) -> Optional[ShapeKind]:
        return _TEST_SHAPES.get(self)

    def __str__(self) -> str:
        return self.value


_EVEN_ODD_TESTS = frozenset({
    TestKind.FILL_POLY_EO_10,
    TestKind.FILL_POLY_EO_20,
    TestKind.FILL_POLY_EO_40,
})

_POLYGON_COMPLEXITY = {
    TestKind.FILL_TRIANGLE: 3,
    TestKind.STROKE_TRIANGLE: 3,
    TestKind.FILL_POLY_NZ_10: 10,
    TestKind.FILL_POLY_EO_10: 10,
    TestKind.STROKE_POLY_10: 10,
    TestKind.FILL_POLY_NZ_20: 20,
    TestKind.FILL_POLY_EO_20: 20,
    TestKind.STROKE_POLY_20: 20,
    TestKind.FILL_POLY_NZ_40: 40,
    TestKind.FILL_POLY_EO_40: 40,
    TestKind.STROKE_POLY_40: 40,
}

_TEST_SHAPES = {
    TestKind.FILL_BUTTERFLY: ShapeKind.BUTTERFLY,
    TestKind.STROKE_BUTTERFLY: ShapeKind.BUTTERFLY,
    TestKind.FILL_FISH: ShapeKind.FISH,
    TestKind.STROKE_FISH: ShapeKind.FISH,
    TestKind.FILL_DRAGON: ShapeKind.DRAGON,
    TestKind.STROKE_DRAGON: ShapeKind.DRAGON,
    TestKind.FILL_WORLD: ShapeKind.WORLD,
    TestKind.STROKE_WORLD: ShapeKind.WORLD,
}

ALL_TESTS: Tuple[TestKind, ...] = tuple(TestKind)


class StyleKind(Enum):
    """Paint styles applied to each drawn shape."""
    SOLID = "Solid"
    LINEAR_PAD = "Linear@Pad"
    LINEAR_REPEAT = "Linear@Repeat"
    LINEAR_REFLECT = "Linear@Reflect"
    RADIAL_PAD = "Radial@Pad"
    RADIAL_REPEAT = "Radial@Repeat"
    RADIAL_REFLECT = "Radial@Reflect"
    CONIC = "Conic"
    PATTERN_NEAREST = "Pattern_NN"
    PATTERN_BILINEAR = "Pattern_BI"

    @property
    def label(self) -> str:
        return self.value

    @property
    def is_pattern(self) -> bool:
        return self in (StyleKind.PATTERN_NEAREST, StyleKind.PATTERN_BILINEAR)

    def __str__(self) -> str:
        return self.value


ALL_STYLES: Tuple[StyleKind, ...] = tuple(StyleKind)


@dataclass(frozen=True)
class CompOpInfo:
    """
    A compositing operation as listed in result files.

    Attributes:
        name: Display name ("SrcOver", "Multiply", ...).
        mode: Blend mode identifier understood by backends, or None when the
              operation has no executable blend mode at all.
    """
    name: str
    mode: Optional[str]

    @property
    def executable(self) -> bool:
        return self.mode is not None


COMP_OPS: Tuple[CompOpInfo, ...] = (
    CompOpInfo("SrcOver", "src-over"),
    CompOpInfo("SrcCopy", "copy"),
    CompOpInfo("SrcIn", "src-in"),
    CompOpInfo("SrcOut", "src-out"),
    CompOpInfo("SrcAtop", "src-atop"),
    CompOpInfo("DstOver", "dest-over"),
    CompOpInfo("DstCopy", "dest"),
    CompOpInfo("DstIn", "dest-in"),
    CompOpInfo("DstOut", "dest-out"),
    CompOpInfo("DstAtop", "dest-atop"),
    CompOpInfo("Xor", "xor"),
    CompOpInfo("Clear", "clear"),
    CompOpInfo("Plus", "plus"),
    CompOpInfo("Minus", None),
    CompOpInfo("Modulate", "multiply"),
    CompOpInfo("Multiply", "multiply"),
    CompOpInfo("Screen", "screen"),
    CompOpInfo("Overlay", "overlay"),
    CompOpInfo("Darken", "darken"),
    CompOpInfo("Lighten", "lighten"),
    CompOpInfo("ColorDodge", "color-dodge"),
    CompOpInfo("ColorBurn", "color-burn"),
    CompOpInfo("LinearBurn", None),
    CompOpInfo("LinearLight", None),
    CompOpInfo("PinLight", None),
    CompOpInfo("HardLight", "hard-light"),
    CompOpInfo("SoftLight", "soft-light"),
    CompOpInfo("Difference", "difference"),
    CompOpInfo("Exclusion", "exclusion"),
)

DEFAULT_COMP_OP = COMP_OPS[0]
DEFAULT_STYLE = StyleKind.SOLID

BENCH_SHAPE_SIZES: Tuple[int, ...] = (8, 16, 32, 64, 128, 256)


def find_test(name: str) -> Optional[TestKind]:
    """Look up a test by name, ignoring case."""
    wanted = name.lower()
    for test in ALL_TESTS:
        if test.value.lower() == wanted:
            return test
    return None


def find_comp_op(name: str) -> Optional[CompOpInfo]:
    """Look up a compositing operation by name, ignoring case."""
    wanted = name.lower()
    for info in COMP_OPS:
        if info.name.lower() == wanted:
            return info
    return None


def find_style(name: str) -> Optional[StyleKind]:
    wanted = name.lower()
    for style in ALL_STYLES:
        if style.value.lower() == wanted:
            return style
    return None
