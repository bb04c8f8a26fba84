"""Tests for the L-system outline families."""

import logging

import numpy as np
import pytest

from fractal_generators.config import GenerationConfig, set_config
from fractal_generators.core.output import Outline, OutputKind
from fractal_generators.core.parameters import RecursiveParameters
from fractal_generators.generators.lsystem import (
    DragonCurveGenerator, HilbertCurveGenerator, KochSnowflakeGenerator, LevyCCurveGenerator,
    LSystem, LSystemGenerator, SierpinskiArrowheadGenerator, center_segments,
)

FAMILIES = [
    KochSnowflakeGenerator,
    SierpinskiArrowheadGenerator,
    DragonCurveGenerator,
    LevyCCurveGenerator,
    HilbertCurveGenerator,
]


class TestLSystem:
    """Tests for rewriting and turtle interpretation."""

    def test_expand_one_round(self):
        system = KochSnowflakeGenerator.system
        assert system.expand(0) == "F--F--F"
        assert system.expand(1) == "F+F--F+F--F+F--F+F--F+F--F+F"

    def test_symbols_without_rule_are_copied(self):
        system = LSystem("AB", {"A": "AB"}, 90.0)
        assert system.expand(2) == "ABBB"

    def test_expand_reports_every_round(self):
        rounds = []
        KochSnowflakeGenerator.system.expand(3, on_round=rounds.append)
        assert rounds == [1, 2, 3]

    def test_multi_symbol_rule_key_rejected(self):
        with pytest.raises(ValueError):
            LSystem("F", {"FF": "F"}, 90.0)

    def test_left_turn_is_counterclockwise_on_screen(self):
        """With y growing downward, a left turn from heading right points up."""
        system = LSystem("F+F", {}, 90.0)
        segments = system.interpret("F+F", 1.0)

        assert segments.shape == (2, 4)
        assert np.allclose(segments[0], (0.0, 0.0, 1.0, 0.0))
        assert np.allclose(segments[1], (1.0, 0.0, 1.0, -1.0))

    def test_right_turn(self):
        system = LSystem("F-F", {}, 90.0)
        segments = system.interpret("F-F", 2.0)
        assert np.allclose(segments[1], (2.0, 0.0, 2.0, 2.0))

    def test_unknown_symbols_are_ignored(self):
        system = LSystem("F", {}, 60.0)
        assert system.interpret("XFYZ", 1.0).shape == (1, 4)

    def test_center_segments(self):
        segments = np.array([[0.0, 0.0, 10.0, 4.0]])
        centered = center_segments(segments, 100, 50)
        assert np.allclose(centered, [[45.0, 23.0, 55.0, 27.0]])


class TestLSystemGenerators:
    """Segment counts and placement of the built-in families."""

    def test_koch_depth_zero_has_three_segments(self):
        outline = KochSnowflakeGenerator().generate(RecursiveParameters(depth=0))
        assert isinstance(outline, Outline)
        assert outline.kind is OutputKind.OUTLINE
        assert outline.segment_count == 3

    @pytest.mark.parametrize("generator_cls", FAMILIES)
    @pytest.mark.parametrize("depth", [0, 1, 2, 3, 5])
    def test_segment_count_matches_closed_form(self, generator_cls, depth):
        generator = generator_cls()
        outline = generator.generate(RecursiveParameters(depth=depth, width=300, height=300))
        assert outline.segment_count == generator.closed_form_segment_count(depth)

    @pytest.mark.parametrize("generator_cls", FAMILIES)
    def test_draw_count_agrees_with_closed_form(self, generator_cls):
        generator = generator_cls()
        for depth in range(7):
            assert generator.system.draw_count(depth) == generator.closed_form_segment_count(depth)

    def test_closed_forms(self):
        assert KochSnowflakeGenerator().closed_form_segment_count(3) == 3 * 4 ** 3
        assert SierpinskiArrowheadGenerator().closed_form_segment_count(4) == 81
        assert DragonCurveGenerator().closed_form_segment_count(10) == 1024
        assert LevyCCurveGenerator().closed_form_segment_count(6) == 64
        assert HilbertCurveGenerator().closed_form_segment_count(3) == 63

    @pytest.mark.parametrize("generator_cls", FAMILIES)
    def test_outline_is_centred_and_in_frame(self, generator_cls):
        params = RecursiveParameters(depth=5, width=400, height=300)
        outline = generator_cls().generate(params)
        xmin, xmax, ymin, ymax = outline.bounds()

        assert (xmin + xmax) / 2 == pytest.approx(200.0)
        assert (ymin + ymax) / 2 == pytest.approx(150.0)
        assert xmin >= 0 and xmax <= 400
        assert ymin >= 0 and ymax <= 300

    @pytest.mark.parametrize("depth", [1, 3, 5])
    def test_hilbert_visits_every_grid_cell_once(self, depth):
        system = HilbertCurveGenerator.system
        segments = system.interpret(system.expand(depth), 1.0)
        vertices = np.vstack([segments[:, :2], segments[-1:, 2:]])
        cells = np.round(vertices).astype(np.int64)

        assert np.allclose(vertices, cells)
        assert len({tuple(cell) for cell in cells.tolist()}) == 4 ** depth
        assert np.ptp(cells[:, 0]) == 2 ** depth - 1
        assert np.ptp(cells[:, 1]) == 2 ** depth - 1

    @pytest.mark.parametrize("depth", [3, 7])
    def test_hilbert_stays_in_frame(self, depth):
        xmin, xmax, ymin, ymax = HilbertCurveGenerator().generate(
            RecursiveParameters(depth=depth, width=400, height=300)).bounds()
        assert xmin >= 0 and xmax <= 400
        assert ymin >= 0 and ymax <= 300

    def test_hilbert_depth_zero_is_empty(self):
        outline = HilbertCurveGenerator().generate(RecursiveParameters(depth=0))
        assert outline.segment_count == 0
        assert outline.bounds() == (0.0, 0.0, 0.0, 0.0)

    def test_segments_connect(self):
        """The turtle never lifts its pen: each segment starts where the last ended."""
        coords = DragonCurveGenerator().generate(RecursiveParameters(depth=6)).to_array()
        assert np.allclose(coords[1:, :2], coords[:-1, 2:])

    def test_deep_request_is_clamped(self, caplog):
        set_config(GenerationConfig(max_outline_segments=1000))
        generator = KochSnowflakeGenerator()

        with caplog.at_level(logging.WARNING):
            outline = generator.generate(RecursiveParameters(depth=6))

        assert outline.segment_count == 3 * 4 ** 4
        assert generator.max_depth() == 4
        assert "clamped" in caplog.text

    def test_default_cap_bounds_output(self):
        generator = DragonCurveGenerator()
        assert generator.closed_form_segment_count(generator.max_depth()) <= 300_000
        assert generator.closed_form_segment_count(generator.max_depth() + 1) > 300_000

    def test_custom_system(self):
        system = LSystem("F", {"F": "F+F-F"}, 90.0, step_ratio=1.0 / 3.0)
        generator = LSystemGenerator(system)
        outline = generator.generate(RecursiveParameters(depth=3, width=100, height=100))
        assert outline.segment_count == 27

    def test_generator_requires_system(self):
        with pytest.raises(ValueError):
            LSystemGenerator()

    def test_async_reports_rounds(self):
        progress = []
        future = KochSnowflakeGenerator().generate_async(
            RecursiveParameters(depth=3), on_progress=progress.append)
        outline = future.result(timeout=30)

        assert outline.segment_count == 192
        assert progress == pytest.approx([0.3, 0.6, 0.9, 1.0])
