"""
Direct geometric recursion outline fractals.

Each family draws from a ``Pose``: a position, a heading in radians (screen
coordinates, y growing downward), a length, a stroke width and the remaining
depth. Drawing functions append segments and recurse on child poses; the
recursion is bounded by depth alone.
"""

import math
import logging
from typing import List, NamedTuple, Optional

import numpy as np

from ..acceleration.executor import ProgressReporter
from ..core.output import LineSegment, Outline
from ..core.parameters import RecursiveParameters, TreeParameters
from ..core.protocols import OutlineGenerator

logger = logging.getLogger(__name__)


class Pose(NamedTuple):
    """Turtle state for one recursive call."""

    x: float
    y: float
    heading: float
    length: float
    width: float
    depth: int

    def advance(self, distance: Optional[float] = None):
        """Point ``distance`` (default ``length``) ahead along the heading."""
        distance = self.length if distance is None else distance
        return (self.x + distance * math.cos(self.heading),
                self.y + distance * math.sin(self.heading))


class RecursiveKochSnowflakeGenerator(OutlineGenerator):
    """
    Koch snowflake drawn by subdividing segments.

    The three sides of an equilateral triangle, apex up and centred on the
    output, are each replaced by four segments a third as long with the middle
    pair raised outward, down to the requested depth. The segment count
    matches the L-system rendition.
    """

    name = "Recursive Koch Snowflake"
    description = "Koch snowflake by recursive segment subdivision"

    def closed_form_segment_count(self, depth: int) -> int:
        return 3 * 4 ** depth

    def _run(self, parameters: RecursiveParameters, reporter: ProgressReporter) -> Outline:
        depth = self._effective_depth(parameters.depth)
        side = min(parameters.width, parameters.height) * 0.8

        # Apex sits one circumradius above the centre, so the finished
        # snowflake is centred vertically
        cx, cy = parameters.width / 2, parameters.height / 2
        pose = Pose(cx, cy - side / math.sqrt(3), math.radians(120), side, 1.0, depth)

        segments: List[LineSegment] = []
        for edge in range(3):
            end = self._koch_edge(pose, segments)
            pose = pose._replace(x=end[0], y=end[1], heading=pose.heading - math.radians(120))
            reporter.report((edge + 1) / 3)

        return Outline(tuple(segments))

    def _koch_edge(self, pose: Pose, segments: List[LineSegment]):
        """Draw one Koch edge and return where it ends."""
        if pose.depth <= 0:
            end = pose.advance()
            segments.append(LineSegment((pose.x, pose.y), end, pose.width))
            return end

        third = pose.length / 3
        turn = math.radians(60)
        x, y = pose.x, pose.y
        # Outward is to the right of travel for this winding
        for offset in (0.0, turn, -turn, 0.0):
            child = Pose(x, y, pose.heading + offset, third, pose.width, pose.depth - 1)
            x, y = self._koch_edge(child, segments)
        return x, y


class PythagoreanTreeGenerator(OutlineGenerator):
    """
    Pythagorean tree.

    Every square carries a right triangle on its top edge whose legs are the
    bases of two smaller squares. ``branch_angle`` is the angle of the left
    leg; the square sizes follow from it, so ``length_shrink`` is unused.
    """

    name = "Pythagorean Tree"
    description = "Pythagorean tree: squares stacked on the legs of right triangles"
    parameters_type = TreeParameters

    def default_parameters(self) -> TreeParameters:
        return TreeParameters(depth=8, branch_angle=math.pi / 4, length_shrink=math.sqrt(0.5))

    def closed_form_segment_count(self, depth: int) -> int:
        return 4 * (2 ** depth - 1)

    def _run(self, parameters: TreeParameters, reporter: ProgressReporter) -> Outline:
        depth = self._effective_depth(parameters.depth)
        size = 0.15 * min(parameters.width, parameters.height)
        base_y = parameters.height * 0.95

        segments: List[LineSegment] = []
        root = Pose(parameters.width / 2 - size / 2, base_y, 0.0, size, 1.0, depth)
        self._square(root, parameters.branch_angle, segments)
        return Outline(tuple(segments))

    def _square(self, pose: Pose, alpha: float, segments: List[LineSegment]) -> None:
        if pose.depth <= 0:
            return

        s = pose.length
        up = (math.sin(pose.heading) * s, -math.cos(pose.heading) * s)
        p0 = (pose.x, pose.y)
        p1 = pose.advance()
        p2 = (p1[0] + up[0], p1[1] + up[1])
        p3 = (p0[0] + up[0], p0[1] + up[1])
        for start, end in ((p0, p1), (p1, p2), (p2, p3), (p3, p0)):
            segments.append(LineSegment(start, end, pose.width))

        left = Pose(p3[0], p3[1], pose.heading - alpha, s * math.cos(alpha),
                    pose.width, pose.depth - 1)
        self._square(left, alpha, segments)

        apex = left.advance()
        right = Pose(apex[0], apex[1], pose.heading + math.pi / 2 - alpha, s * math.sin(alpha),
                     pose.width, pose.depth - 1)
        self._square(right, alpha, segments)


class BranchingTreeGenerator(OutlineGenerator):
    """
    Binary branching tree grown from the bottom centre.

    Each branch spawns two children turned by plus and minus ``branch_angle``,
    shrunk by ``length_shrink`` and thinned by ``width_shrink``. A non-zero
    ``jitter`` perturbs every child angle with a draw from a generator seeded
    by ``seed``.
    """

    name = "Branching Tree"
    description = "Recursive binary tree with shrinking, tapering branches"
    parameters_type = TreeParameters

    def closed_form_segment_count(self, depth: int) -> int:
        return 2 ** depth - 1

    def _run(self, parameters: TreeParameters, reporter: ProgressReporter) -> Outline:
        depth = self._effective_depth(parameters.depth)
        rng = np.random.default_rng(parameters.seed) if parameters.jitter > 0 else None

        trunk = Pose(parameters.width / 2, float(parameters.height), -math.pi / 2,
                     parameters.height * 0.3, 3.0, depth)
        segments: List[LineSegment] = []
        self._branch(trunk, parameters, rng, segments)
        return Outline(tuple(segments))

    def _branch(self, pose: Pose, parameters: TreeParameters,
                rng: Optional[np.random.Generator], segments: List[LineSegment]) -> None:
        if pose.depth <= 0:
            return

        end = pose.advance()
        segments.append(LineSegment((pose.x, pose.y), end, pose.width))

        for direction in (1.0, -1.0):
            angle = pose.heading + direction * parameters.branch_angle
            if rng is not None:
                angle += rng.uniform(-parameters.jitter, parameters.jitter)
            child = Pose(end[0], end[1], angle,
                         pose.length * parameters.length_shrink,
                         pose.width * parameters.width_shrink,
                         pose.depth - 1)
            self._branch(child, parameters, rng, segments)
