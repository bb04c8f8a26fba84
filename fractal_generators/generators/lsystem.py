"""
String-rewriting (Lindenmayer system) outline fractals.

An L-system rewrites every symbol of its axiom in parallel for a number of
rounds, then the resulting program drives a turtle: draw symbols move forward
and emit a segment, ``+`` turns left by the system angle and ``-`` turns
right. Turtle coordinates are screen coordinates with y growing downward, so a
left turn is counterclockwise on screen and decreases the heading.

The step length shrinks geometrically with depth and the finished drawing is
centred on the output, which keeps it in frame at any depth.
"""

import math
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional

import numpy as np

from ..acceleration.executor import ProgressReporter
from ..core.output import Outline
from ..core.parameters import RecursiveParameters
from ..core.protocols import OutlineGenerator

logger = logging.getLogger(__name__)

# Share of progress spent rewriting; interpretation takes the rest
REWRITE_PROGRESS = 0.9


def _fraction_of_size(fraction: float) -> Callable[[int, int], float]:
    return lambda width, height: fraction * min(width, height)


@dataclass(frozen=True)
class LSystem:
    """
    Rewriting rules plus turtle geometry.

    Attributes:
        axiom: Starting string
        rules: Single-symbol productions; symbols without a rule are copied
        angle: Turn angle in degrees
        draw_symbols: Symbols that move forward and emit a segment
        step_ratio: Step shrink per rewrite round
        base_length: Step length at depth 0 for a given (width, height)
        heading: Initial heading in degrees, 0 pointing right
    """

    axiom: str
    rules: Mapping[str, str]
    angle: float
    draw_symbols: str = "F"
    step_ratio: float = 0.5
    base_length: Callable[[int, int], float] = field(default=_fraction_of_size(0.8))
    heading: float = 0.0

    def __post_init__(self):
        for symbol in self.rules:
            if len(symbol) != 1:
                raise ValueError(f"Rule keys must be single symbols, got {symbol!r}")
        object.__setattr__(self, 'rules', dict(self.rules))

    def expand(self, depth: int, on_round: Optional[Callable[[int], None]] = None) -> str:
        """
        Apply the rules to every symbol for exactly ``depth`` rounds.

        Args:
            depth: Number of rewrite rounds
            on_round: Called with the round number after each round

        Returns:
            The rewritten program
        """
        table = str.maketrans(self.rules)
        program = self.axiom
        for round_number in range(1, depth + 1):
            program = program.translate(table)
            if on_round is not None:
                on_round(round_number)
        return program

    def draw_count(self, depth: int) -> int:
        """Number of draw symbols after ``depth`` rounds, without expanding."""
        counts = Counter(self.axiom)
        for _ in range(depth):
            rewritten: Counter = Counter()
            for symbol, count in counts.items():
                for produced, n in Counter(self.rules.get(symbol, symbol)).items():
                    rewritten[produced] += n * count
            counts = rewritten
        return sum(counts[s] for s in self.draw_symbols)

    def step_length(self, width: int, height: int, depth: int) -> float:
        """Turtle step for the given output size and depth."""
        return self.base_length(width, height) * self.step_ratio ** depth

    def interpret(self, program: str, step: float, x: float = 0.0, y: float = 0.0,
                  heading: Optional[float] = None) -> np.ndarray:
        """
        Run a program as turtle commands.

        Args:
            program: Rewritten string
            step: Distance moved per draw symbol
            x, y: Start position
            heading: Start heading in degrees, defaults to the system heading

        Returns:
            (N, 4) array of segment endpoints x0, y0, x1, y1 in drawing order
        """
        heading = self.heading if heading is None else heading
        draw = set(self.draw_symbols)
        segments = np.empty((sum(program.count(s) for s in draw), 4), dtype=np.float64)

        n = 0
        for symbol in program:
            if symbol in draw:
                theta = math.radians(heading)
                nx = x + step * math.cos(theta)
                ny = y + step * math.sin(theta)
                segments[n] = (x, y, nx, ny)
                x, y = nx, ny
                n += 1
            elif symbol == '+':
                heading -= self.angle
            elif symbol == '-':
                heading += self.angle

        return segments


def center_segments(segments: np.ndarray, width: int, height: int) -> np.ndarray:
    """Translate segments so their bounding box is centred on the output."""
    if segments.size == 0:
        return segments
    xs = segments[:, [0, 2]]
    ys = segments[:, [1, 3]]
    dx = width / 2.0 - (xs.min() + xs.max()) / 2.0
    dy = height / 2.0 - (ys.min() + ys.max()) / 2.0
    return segments + np.array([dx, dy, dx, dy])


class LSystemGenerator(OutlineGenerator):
    """Outline generator driven by an L-system."""

    name = "L-system"
    system: LSystem

    def __init__(self, system: Optional[LSystem] = None):
        """
        Initialize L-system generator.

        Args:
            system: Custom system; families supply their own
        """
        if system is not None:
            self.system = system
        if getattr(self, 'system', None) is None:
            raise ValueError("An LSystem is required")

    def closed_form_segment_count(self, depth: int) -> int:
        return self.system.draw_count(depth)

    def _run(self, parameters: RecursiveParameters, reporter: ProgressReporter) -> Outline:
        depth = self._effective_depth(parameters.depth)

        program = self.system.expand(
            depth, on_round=lambda r: reporter.report(REWRITE_PROGRESS * r / depth)
        )
        step = self.system.step_length(parameters.width, parameters.height, depth)
        segments = self.system.interpret(program, step)
        logger.debug(f"{self.name} depth {depth}: {len(program)} symbols, {len(segments)} segments")

        return Outline.from_array(center_segments(segments, parameters.width, parameters.height))


class KochSnowflakeGenerator(LSystemGenerator):
    """Koch snowflake as an L-system."""

    name = "Koch Snowflake"
    description = "Koch snowflake: each edge F becomes F+F--F+F, turning 60 degrees"
    system = LSystem(
        axiom="F--F--F",
        rules={'F': "F+F--F+F"},
        angle=60.0,
        step_ratio=1.0 / 3.0,
        base_length=_fraction_of_size(0.8),
    )

    def closed_form_segment_count(self, depth: int) -> int:
        return 3 * 4 ** depth


class SierpinskiArrowheadGenerator(LSystemGenerator):
    """Sierpinski arrowhead curve."""

    name = "Sierpinski Arrowhead"
    description = "Sierpinski arrowhead curve: X -> YF+XF+Y, Y -> XF-YF-X at 60 degrees"
    system = LSystem(
        axiom="XF",
        rules={'X': "YF+XF+Y", 'Y': "XF-YF-X"},
        angle=60.0,
        step_ratio=0.5,
        base_length=_fraction_of_size(0.8),
    )

    def closed_form_segment_count(self, depth: int) -> int:
        return 3 ** depth


class DragonCurveGenerator(LSystemGenerator):
    """Heighway dragon curve."""

    name = "Dragon Curve"
    description = "Heighway dragon: X -> X+YF+, Y -> -FX-Y at 90 degrees"
    system = LSystem(
        axiom="FX",
        rules={'X': "X+YF+", 'Y': "-FX-Y"},
        angle=90.0,
        step_ratio=1.0 / math.sqrt(2.0),
        base_length=_fraction_of_size(0.55),
    )

    def closed_form_segment_count(self, depth: int) -> int:
        return 2 ** depth


class LevyCCurveGenerator(LSystemGenerator):
    """Lévy C curve."""

    name = "Levy C Curve"
    description = "Levy C curve: F -> +F--F+ at 45 degrees"
    system = LSystem(
        axiom="F",
        rules={'F': "+F--F+"},
        angle=45.0,
        step_ratio=1.0 / math.sqrt(2.0),
        base_length=_fraction_of_size(0.5),
    )

    def closed_form_segment_count(self, depth: int) -> int:
        return 2 ** depth


class HilbertCurveGenerator(LSystemGenerator):
    """Hilbert space-filling curve."""

    name = "Hilbert Curve"
    description = "Hilbert curve: A -> +BF-AFA-FB+, B -> -AF+BFB+FA- at 90 degrees"
    system = LSystem(
        axiom="A",
        rules={'A': "+BF-AFA-FB+", 'B': "-AF+BFB+FA-"},
        angle=90.0,
        step_ratio=0.5,
        base_length=_fraction_of_size(0.8),
    )

    def closed_form_segment_count(self, depth: int) -> int:
        return 4 ** depth - 1
