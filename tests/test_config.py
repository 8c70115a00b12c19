"""
Test suite for command-line parsing and configuration validation
"""
from pathlib import Path

import pytest

from raster_bench.catalog import (
    ALL_STYLES,
    ALL_TESTS,
    BENCH_SHAPE_SIZES,
    COMP_OPS,
    DEFAULT_COMP_OP,
    StyleKind,
    TestKind,
    find_comp_op,
    find_style,
    find_test,
)
from raster_bench.config import (
    PREVIEW_QUANTITY,
    BenchmarkConfig,
    ConfigurationError,
    parse_sizes,
    parse_threads,
    parse_toggle_list,
)
from raster_bench.run import parse_args


def build_config(*argv: str) -> BenchmarkConfig:
    return BenchmarkConfig.from_args(parse_args(list(argv)))


class TestDefaults:
    def test_default_configuration(self):
        """No flags yields the full test list on the default ladder"""
        config = build_config()
        assert config.width == 512
        assert config.height == 600
        assert config.quantity == 0
        assert config.min_runs == 10
        assert config.sizes == list(BENCH_SHAPE_SIZES)
        assert config.tests == list(ALL_TESTS)
        assert config.comp_ops == [DEFAULT_COMP_OP]
        assert config.styles == [StyleKind.SOLID]
        assert config.threads == [0, 2, 4, 8]
        assert config.baseline is None
        assert config.json_path == Path("results.json")

    def test_size_labels(self):
        """Column labels are derived from the selected sizes"""
        config = build_config("--size-count", "2")
        assert config.size_labels == ["8x8", "16x16"]


class TestToggleLists:
    def test_additive_filter(self):
        """An additive filter selects exactly the named tests"""
        config = build_config("--tests", "FillRectU,FillRectA")
        assert config.tests == [TestKind.FILL_RECT_A, TestKind.FILL_RECT_U]

    def test_subtractive_filter(self):
        """A subtractive filter removes from the full list"""
        config = build_config("--tests=-FillRectA")
        assert len(config.tests) == len(ALL_TESTS) - 1
        assert TestKind.FILL_RECT_A not in config.tests

    def test_names_are_case_insensitive(self):
        """Filter names ignore case"""
        config = build_config("--tests", "fillrecta")
        assert config.tests == [TestKind.FILL_RECT_A]

    def test_mixed_filter_is_rejected(self):
        """Additive and subtractive entries cannot be combined"""
        with pytest.raises(ConfigurationError):
            build_config("--tests", "FillRectA,-FillRectU")

    def test_unknown_name_is_rejected(self):
        """Unknown filter entries are configuration errors"""
        with pytest.raises(ConfigurationError):
            build_config("--tests", "FillCircle")

    def test_empty_selection_is_rejected(self):
        """Removing every test leaves nothing to run"""
        everything = ",".join(f"-{test.label}" for test in ALL_TESTS)
        with pytest.raises(ConfigurationError):
            build_config(f"--tests={everything}")

    def test_empty_entries_are_ignored(self):
        """Blank entries between commas are skipped"""
        items = [("a", 1), ("b", 2), ("c", 3)]
        assert parse_toggle_list("a,,c,", items, [1, 2, 3]) == [1, 3]
        assert parse_toggle_list(None, items, [2]) == [2]

    def test_style_filter(self):
        """Styles use the same filter syntax"""
        config = build_config("--styles", "Pattern_NN,Solid")
        assert config.styles == [StyleKind.SOLID, StyleKind.PATTERN_NEAREST]

        config = build_config("--styles=-Conic")
        assert len(config.styles) == len(ALL_STYLES) - 1


class TestCompOps:
    def test_explicit_comp_ops(self):
        """Named compositing operations are selected in catalog order"""
        config = build_config("--comp-ops", "Multiply,SrcCopy")
        assert [info.name for info in config.comp_ops] == ["SrcCopy", "Multiply"]

    def test_non_executable_comp_op_is_rejected(self):
        """Operations without a blend mode cannot be requested"""
        with pytest.raises(ConfigurationError, match="Unsupported compositing operation"):
            build_config("--comp-ops", "Minus")

    def test_subtractive_comp_ops_skip_non_executable(self):
        """Subtracting from the defaults only yields runnable operations"""
        config = build_config("--comp-ops=-SrcOver")
        assert find_comp_op("SrcOver") not in config.comp_ops
        assert all(info.executable for info in config.comp_ops)
        assert len(config.comp_ops) == sum(1 for info in COMP_OPS if info.executable) - 1


class TestSizesAndRuns:
    def test_explicit_sizes(self):
        """--sizes overrides the ladder and keeps the given order"""
        config = build_config("--sizes", "64, 8,100")
        assert config.sizes == [64, 8, 100]

    @pytest.mark.parametrize("size_list", ["", "8,abc", "0", "-4"])
    def test_invalid_sizes(self, size_list):
        """Non-positive or non-numeric sizes are rejected"""
        with pytest.raises(ConfigurationError):
            parse_sizes(size_list)

    @pytest.mark.parametrize("count", ["0", "7"])
    def test_size_count_out_of_range(self, count):
        """The size count must fit the default ladder"""
        with pytest.raises(ConfigurationError):
            build_config("--size-count", count)

    def test_quick_preset(self):
        """Presets override size count and run count"""
        config = build_config("--preset", "quick", "--min-runs", "99")
        assert config.sizes == [8, 16, 32]
        assert config.min_runs == 3

    def test_full_preset(self):
        config = build_config("--preset", "full")
        assert config.sizes == list(BENCH_SHAPE_SIZES)
        assert config.min_runs == 50

    def test_min_runs_clamped(self):
        """A zero run count still runs once"""
        assert build_config("--min-runs", "0").min_runs == 1

    def test_preview_forces_small_quantity(self):
        """Preview mode uses a small fixed quantity"""
        config = build_config("--preview", "--quantity", "5000")
        assert config.preview
        assert config.quantity == PREVIEW_QUANTITY

    @pytest.mark.parametrize("argv", [
        ("--width", "0"),
        ("--height", "-1"),
        ("--quantity", "-5"),
    ])
    def test_invalid_canvas_and_quantity(self, argv):
        """Canvas dimensions must be positive and quantity non-negative"""
        with pytest.raises(ConfigurationError):
            build_config(*argv)


class TestThreads:
    def test_threads_sorted_and_deduplicated(self):
        """Thread counts are normalized"""
        assert parse_threads("4,0,4") == [0, 4]
        assert build_config("--threads", "8,2").threads == [2, 8]

    def test_empty_threads_default_to_single(self):
        """An empty list means single-threaded only"""
        assert parse_threads("") == [0]

    @pytest.mark.parametrize("thread_list", ["two", "-1"])
    def test_invalid_threads(self, thread_list):
        """Thread counts must be non-negative integers"""
        with pytest.raises(ConfigurationError):
            parse_threads(thread_list)


class TestCatalogLookups:
    def test_lookups_ignore_case(self):
        """Catalog lookups match names case-insensitively"""
        assert find_test("strokeworld") is TestKind.STROKE_WORLD
        assert find_style("PATTERN_bi") is StyleKind.PATTERN_BILINEAR
        assert find_comp_op("multiply").name == "Multiply"

    def test_unknown_names(self):
        """Unknown names yield None"""
        assert find_test("FillCircle") is None
        assert find_style("Sweep") is None
        assert find_comp_op("Dissolve") is None
