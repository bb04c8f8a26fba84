"""Tests for the direct-recursion outline families."""

import math

import pytest

from fractal_generators.core.output import OutputKind
from fractal_generators.core.parameters import RecursiveParameters, TreeParameters
from fractal_generators.generators.lsystem import KochSnowflakeGenerator
from fractal_generators.generators.recursive import (
    BranchingTreeGenerator, Pose, PythagoreanTreeGenerator, RecursiveKochSnowflakeGenerator,
)


class TestPose:
    """Tests for the turtle pose."""

    def test_advance_along_heading(self):
        pose = Pose(1.0, 2.0, math.pi / 2, 3.0, 1.0, 0)
        x, y = pose.advance()
        assert x == pytest.approx(1.0)
        assert y == pytest.approx(5.0)

    def test_advance_custom_distance(self):
        x, y = Pose(0.0, 0.0, 0.0, 3.0, 1.0, 0).advance(0.5)
        assert (x, y) == (0.5, 0.0)


class TestRecursiveKochSnowflake:
    """Tests for the subdividing Koch snowflake."""

    @pytest.mark.parametrize("depth", [0, 1, 2, 4])
    def test_segment_count(self, depth):
        outline = RecursiveKochSnowflakeGenerator().generate(RecursiveParameters(depth=depth))
        assert outline.kind is OutputKind.OUTLINE
        assert outline.segment_count == 3 * 4 ** depth

    def test_matches_lsystem_count(self):
        params = RecursiveParameters(depth=3)
        recursive = RecursiveKochSnowflakeGenerator().generate(params)
        lsystem = KochSnowflakeGenerator().generate(params)
        assert recursive.segment_count == lsystem.segment_count

    def test_depth_zero_is_closed_triangle(self):
        outline = RecursiveKochSnowflakeGenerator().generate(
            RecursiveParameters(depth=0, width=300, height=300))
        first, _, last = outline.segments
        assert first.start[0] == pytest.approx(last.end[0])
        assert first.start[1] == pytest.approx(last.end[1])
        for segment in outline.segments:
            assert segment.length == pytest.approx(240.0)

    def test_bumps_point_outward(self):
        """Raised bumps push the outline below the triangle's base."""
        params = RecursiveParameters(depth=1, width=300, height=300)
        base_y = 150 + 240 * math.sqrt(3) / 6
        _, _, _, ymax = RecursiveKochSnowflakeGenerator().generate(params).bounds()
        assert ymax > base_y + 1

    def test_in_frame(self):
        params = RecursiveParameters(depth=4, width=320, height=240)
        xmin, xmax, ymin, ymax = RecursiveKochSnowflakeGenerator().generate(params).bounds()
        assert xmin >= 0 and xmax <= 320
        assert ymin >= 0 and ymax <= 240


class TestPythagoreanTree:
    """Tests for the Pythagorean tree."""

    @pytest.mark.parametrize("depth", [0, 1, 3, 6])
    def test_segment_count(self, depth):
        generator = PythagoreanTreeGenerator()
        params = TreeParameters(depth=depth, branch_angle=math.pi / 4)
        assert generator.generate(params).segment_count == 4 * (2 ** depth - 1)

    def test_default_parameters(self):
        params = PythagoreanTreeGenerator().default_parameters()
        assert params.branch_angle == pytest.approx(math.pi / 4)

    def test_root_square(self):
        params = TreeParameters(depth=1, width=200, height=200, branch_angle=math.pi / 4)
        outline = PythagoreanTreeGenerator().generate(params)
        for segment in outline.segments:
            assert segment.length == pytest.approx(30.0)
        xmin, xmax, ymin, ymax = outline.bounds()
        assert (xmin, xmax) == pytest.approx((85.0, 115.0))
        assert (ymin, ymax) == pytest.approx((160.0, 190.0))

    def test_child_squares_shrink(self):
        params = TreeParameters(depth=2, branch_angle=math.pi / 4)
        segments = PythagoreanTreeGenerator().generate(params).segments
        root = segments[0].length
        assert segments[4].length == pytest.approx(root * math.cos(math.pi / 4))
        assert segments[8].length == pytest.approx(root * math.sin(math.pi / 4))


class TestBranchingTree:
    """Tests for the binary branching tree."""

    @pytest.mark.parametrize("depth", [0, 1, 4, 8])
    def test_segment_count(self, depth):
        outline = BranchingTreeGenerator().generate(TreeParameters(depth=depth))
        assert outline.segment_count == 2 ** depth - 1

    def test_trunk_grows_from_bottom_centre(self):
        params = TreeParameters(depth=3, width=400, height=500)
        trunk = BranchingTreeGenerator().generate(params).segments[0]
        assert trunk.start == pytest.approx((200.0, 500.0))
        assert trunk.end == pytest.approx((200.0, 350.0))
        assert trunk.width == 3.0

    def test_children_shrink_and_taper(self):
        params = TreeParameters(depth=2)
        trunk, left, right = BranchingTreeGenerator().generate(params).segments
        assert left.length == pytest.approx(trunk.length * 0.7)
        assert right.width == pytest.approx(trunk.width * 0.8)
        assert left.start == pytest.approx(trunk.end)

    def test_without_jitter_is_symmetric(self):
        params = TreeParameters(depth=2, width=300, height=300)
        _, left, right = BranchingTreeGenerator().generate(params).segments
        assert left.end[0] - 150 == pytest.approx(150 - right.end[0])

    def test_seeded_jitter_is_reproducible(self):
        generator = BranchingTreeGenerator()
        params = TreeParameters(depth=7, jitter=0.3, seed=1234)
        assert generator.generate(params) == generator.generate(params)

    def test_jitter_depends_on_seed(self):
        generator = BranchingTreeGenerator()
        first = generator.generate(TreeParameters(depth=6, jitter=0.3, seed=1))
        second = generator.generate(TreeParameters(depth=6, jitter=0.3, seed=2))
        assert first.segment_count == second.segment_count
        assert first != second
