"""
Test suite for the Pillow rendering backend, sprites and shapes
"""
import numpy as np
import pytest
from PIL import Image

from raster_bench.backend import BenchAssets, BenchParams
from raster_bench.catalog import ALL_STYLES, ALL_TESTS, COMP_OPS, ShapeKind, StyleKind, TestKind, find_comp_op
from raster_bench.pillow_backend import PillowBackend, create_backends, unpack_color
from raster_bench.shapes import scaled_polygons
from raster_bench.sprites import SPRITE_COUNT, Sprites

WIDTH = 96
HEIGHT = 64
GRADIENT_STYLES = [style for style in ALL_STYLES if style is not StyleKind.SOLID and not style.is_pattern]


def surface_array(backend: PillowBackend) -> np.ndarray:
    return np.asarray(backend.surface()).copy()


@pytest.fixture(scope="module")
def sprites():
    return Sprites.load()


class TestPillowBackend:
    @pytest.fixture(autouse=True)
    def setup_backend(self, sprites):
        """Single-threaded backend on a small canvas"""
        self.backend = PillowBackend(WIDTH, HEIGHT)
        self.assets = BenchAssets(sprites=sprites)
        self.params = BenchParams(screen_size=(WIDTH, HEIGHT), shape_size=16, quantity=20)
        yield
        self.backend.close()

    def test_names(self):
        """Backends are named after their thread count"""
        backends = create_backends(WIDTH, HEIGHT, [0, 4])
        try:
            assert [backend.name for backend in backends] == ["Pillow ST", "Pillow 4T"]
            assert backends[0].version
        finally:
            for backend in backends:
                backend.close()

    @pytest.mark.parametrize("test", ALL_TESTS, ids=lambda test: test.label)
    def test_every_test_draws_something(self, test):
        """Each test produces visible pixels and a non-negative duration"""
        self.params.test = test
        result = self.backend.run(self.assets, self.params)
        assert result.duration_us >= 0
        assert surface_array(self.backend).any()

    def test_runs_are_deterministic(self):
        """Repeated runs replay the same workload"""
        self.params.test = TestKind.FILL_POLY_NZ_10
        self.backend.run(self.assets, self.params)
        first = surface_array(self.backend)
        self.backend.run(self.assets, self.params)
        assert np.array_equal(first, surface_array(self.backend))

    def test_surface_is_cleared_between_runs(self):
        """A run with zero operations leaves a black surface"""
        self.backend.run(self.assets, self.params)
        self.params.quantity = 0
        self.backend.run(self.assets, self.params)
        assert not surface_array(self.backend).any()

    def test_copy_draws_opaque_colors(self):
        """SrcCopy ignores source alpha"""
        self.params.comp_op = find_comp_op("SrcCopy")
        self.params.quantity = 1
        self.backend.run(self.assets, self.params)
        self.backend.reset_state()
        command = self.backend.build_commands(self.params)[0]
        x0, y0, _, _ = command.box
        assert tuple(surface_array(self.backend)[y0 + 1, x0 + 1]) == command.color[:3]

    def test_clear_leaves_black(self):
        """Clear paints nothing but black"""
        self.params.comp_op = find_comp_op("Clear")
        self.backend.run(self.assets, self.params)
        assert not surface_array(self.backend).any()

    def test_blend_mode(self):
        """Separable blend modes composite through a mask"""
        self.params.comp_op = find_comp_op("Screen")
        self.backend.run(self.assets, self.params)
        assert surface_array(self.backend).any()

    @pytest.mark.parametrize("style", [StyleKind.PATTERN_NEAREST, StyleKind.PATTERN_BILINEAR])
    def test_pattern_styles(self, style):
        """Pattern styles fill shapes with scaled sprites"""
        self.params.style = style
        self.params.test = TestKind.FILL_ROUND_ROT
        self.backend.run(self.assets, self.params)
        assert surface_array(self.backend).any()

    def test_pattern_without_sprites_fails(self):
        """Pattern styles cannot run without sprite assets"""
        self.params.style = StyleKind.PATTERN_NEAREST
        with pytest.raises(RuntimeError):
            self.backend.run(BenchAssets(), self.params)

    def test_supported_styles_and_comp_ops(self):
        """Every style and every operation with a blend mode is supported"""
        assert all(self.backend.supports_style(style) for style in ALL_STYLES)
        for info in COMP_OPS:
            assert self.backend.supports_comp_op(info) == info.executable
        assert not self.backend.supports_comp_op(find_comp_op("Minus"))

    @pytest.mark.parametrize("info", [info for info in COMP_OPS if info.executable], ids=lambda info: info.name)
    def test_every_comp_op_runs(self, info):
        """Each executable operation runs through the compositor"""
        self.params.comp_op = info
        self.params.test = TestKind.FILL_ROUND_U
        result = self.backend.run(self.assets, self.params)
        assert result.duration_us >= 0
        assert self.backend.surface().size == (WIDTH, HEIGHT)

    @pytest.mark.parametrize("name", ["SrcIn", "SrcAtop", "Plus", "Lighten", "Difference", "Exclusion"])
    def test_comp_ops_reveal_source(self, name):
        """Operations that keep the source paint it over the black surface"""
        self.params.comp_op = find_comp_op(name)
        self.backend.run(self.assets, self.params)
        assert surface_array(self.backend).any()

    @pytest.mark.parametrize("name", ["SrcOut", "DstOver", "DstCopy", "DstIn", "DstOut", "DstAtop", "Xor"])
    def test_comp_ops_keep_black_destination(self, name):
        """Operations that drop the source leave an opaque black surface black"""
        self.params.comp_op = find_comp_op(name)
        self.backend.run(self.assets, self.params)
        assert not surface_array(self.backend).any()

    @pytest.mark.parametrize("style", GRADIENT_STYLES, ids=lambda style: style.label)
    def test_gradient_styles(self, style):
        """Gradient styles paint every shape with varying colors"""
        self.params.style = style
        self.params.shape_size = 32
        self.params.quantity = 1
        self.backend.run(self.assets, self.params)
        self.backend.reset_state()
        command = self.backend.build_commands(self.params)[0]
        x0, y0, x1, y1 = command.box
        inside = surface_array(self.backend)[y0:y1 + 1, x0:x1 + 1].reshape(-1, 3)
        assert command.gradient is not None
        assert len(np.unique(inside, axis=0)) > 1

    def test_gradient_stops_come_from_color_stream(self):
        """Linear and radial gradients take three stops, conic four"""
        self.params.quantity = 1
        self.params.style = StyleKind.LINEAR_REFLECT
        linear = self.backend.build_commands(self.params)[0].gradient
        self.params.style = StyleKind.CONIC
        conic = self.backend.build_commands(self.params)[0].gradient
        assert (linear.kind, linear.extend) == ("linear", "reflect")
        assert [offset for offset, _ in linear.stops] == [0.0, 0.5, 1.0]
        assert (conic.kind, conic.extend) == ("conic", "pad")
        assert len(conic.stops) == 4

    def test_surface_follows_screen_size(self):
        """The surface is recreated when the requested size changes"""
        self.params.screen_size = (40, 30)
        self.backend.run(self.assets, self.params)
        assert self.backend.surface().size == (40, 30)

    def test_shape_larger_than_canvas(self):
        """Shapes larger than the canvas are drawn at the origin range"""
        self.params.shape_size = 256
        self.params.test = TestKind.FILL_RECT_A
        self.backend.run(self.assets, self.params)
        assert surface_array(self.backend).any()


class TestThreadedBands:
    @pytest.mark.parametrize("threads", [1, 3, 8])
    def test_threaded_matches_workload(self, threads, sprites):
        """Band rendering draws the same commands as the single-threaded path"""
        params = BenchParams(screen_size=(WIDTH, HEIGHT), test=TestKind.FILL_RECT_U,
                             comp_op=find_comp_op("SrcCopy"), shape_size=16, quantity=30)
        assets = BenchAssets(sprites=sprites)
        single = PillowBackend(WIDTH, HEIGHT)
        threaded = PillowBackend(WIDTH, HEIGHT, threads)
        try:
            assert single.build_commands(params) == threaded.build_commands(params)
            single.run(assets, params)
            threaded.run(assets, params)
            assert np.array_equal(surface_array(single), surface_array(threaded))
        finally:
            single.close()
            threaded.close()

    @pytest.mark.parametrize("test", [
        TestKind.FILL_RECT_ROT,
        TestKind.STROKE_RECT_A,
        TestKind.FILL_ROUND_U,
        TestKind.STROKE_ROUND_ROT,
        TestKind.FILL_TRIANGLE,
        TestKind.FILL_POLY_NZ_10,
        TestKind.STROKE_POLY_10,
        TestKind.FILL_WORLD,
    ], ids=lambda test: test.label)
    @pytest.mark.parametrize("comp_op, style", [
        ("SrcOver", StyleKind.SOLID),
        ("SrcOver", StyleKind.PATTERN_BILINEAR),
        ("Multiply", StyleKind.SOLID),
        ("SrcOver", StyleKind.LINEAR_REFLECT),
        ("Xor", StyleKind.CONIC),
    ])
    def test_threaded_bands_have_no_seams(self, test, comp_op, style, sprites):
        """Shapes crossing band edges render exactly as on one thread"""
        params = BenchParams(screen_size=(WIDTH, HEIGHT), test=test, comp_op=find_comp_op(comp_op),
                             style=style, shape_size=24, quantity=30)
        assets = BenchAssets(sprites=sprites)
        single = PillowBackend(WIDTH, HEIGHT)
        threaded = PillowBackend(WIDTH, HEIGHT, 3)
        try:
            single.run(assets, params)
            threaded.run(assets, params)
            assert np.array_equal(surface_array(single), surface_array(threaded))
        finally:
            single.close()
            threaded.close()

    def test_close_is_idempotent(self):
        """Closing twice is harmless"""
        backend = PillowBackend(WIDTH, HEIGHT, 2)
        backend.close()
        backend.close()


class TestHelpers:
    def test_unpack_color(self):
        """Color words are 0xAARRGGBB"""
        assert unpack_color(0x80FF1020) == (0xFF, 0x10, 0x20, 0x80)

    @pytest.mark.parametrize("kind", list(ShapeKind))
    def test_scaled_shapes_fit_their_size(self, kind):
        """Shape outlines scale to the requested box"""
        polygons = scaled_polygons(kind, 64)
        points = [point for polygon in polygons for point in polygon]
        assert len(points) >= 3
        assert all(0.0 <= x <= 64.0 and 0.0 <= y <= 64.0 for x, y in points)


class TestSprites:
    def test_originals(self, sprites):
        """Four RGB source sprites are generated"""
        assert len(sprites) == SPRITE_COUNT
        assert all(sprite.mode == "RGB" for sprite in sprites.originals)

    def test_scaled_sprites_are_cached(self):
        """Scaled copies are created once per size and filter"""
        sprites = Sprites.load()
        first = sprites.sprite(1, 16)
        assert first.size == (16, 16)
        assert sprites.sprite(5, 16) is first
        sprites.sprite(0, 16, Image.Resampling.BILINEAR)
        assert len(sprites.cached_sizes()) == 2

    def test_size_zero_returns_original(self, sprites):
        """Size 0 means the unscaled sprite"""
        assert sprites.sprite(2, 0) is sprites.originals[2]
