"""
Dynamical-system point-cloud fractals.

A fixed recurrence is run from an initial state for a requested number of
steps: continuous systems by explicit Euler integration, discrete maps by
applying the map once per sample, and iterated function systems by the chaos
game. States are projected to pixel coordinates and points that fall outside
the output are dropped rather than clamped.
"""

import time
import logging
from abc import abstractmethod
from typing import ClassVar, Dict, Sequence, Tuple

import numpy as np

from ..acceleration import numba_backend
from ..acceleration.executor import ProgressReporter
from ..core.output import PointCloud
from ..core.parameters import (
    SIERPINSKI_TRIANGLE, AttractorParameters, FractalParameters, IFSParameters, IFSTransform,
    MapParameters,
)
from ..core.protocols import PointCloudGenerator

logger = logging.getLogger(__name__)

WARMUP_PROGRESS = 0.1
ITERATION_PROGRESS = 0.8

# Smallest extent used when fitting a degenerate box to the output
SPAN_EPSILON = 1e-12

# Expansion rounds and point budget for IFS attractor bounds
BOUNDS_MAX_ROUNDS = 12
BOUNDS_MAX_POINTS = 20_000


class DynamicalSystemGenerator(PointCloudGenerator):
    """Abstract base class for orbit-based point generators."""

    # States discarded before recording
    warmup: ClassVar[int] = 0

    # Whether consecutive points are consecutive states
    ordered: ClassVar[bool] = True

    default_constants: ClassVar[Dict[str, float]] = {}

    def constants(self, parameters) -> Dict[str, float]:
        """Family constants with the caller's overrides applied."""
        merged = dict(self.default_constants)
        merged.update(getattr(parameters, 'constants', {}) or {})
        return merged

    @staticmethod
    def project(u: np.ndarray, v: np.ndarray, scale: float,
                offset: Tuple[float, float], width: int, height: int) -> np.ndarray:
        """
        Map projected state coordinates to pixels and drop what falls outside.

        Args:
            u, v: Horizontal and vertical state coordinates
            scale: Pixels per state unit
            offset: Pixel position of the state origin
            width, height: Output size

        Returns:
            (N, 2) array of points inside [0, width) x [0, height)
        """
        px = u * scale + offset[0]
        py = v * scale + offset[1]
        inside = (px >= 0) & (px < width) & (py >= 0) & (py < height)
        return np.column_stack((px[inside], py[inside]))

    @abstractmethod
    def _orbit(self, parameters: FractalParameters, reporter: ProgressReporter) -> np.ndarray:
        """Compute recorded states after warm-up."""

    @abstractmethod
    def _to_pixels(self, states: np.ndarray, parameters: FractalParameters) -> np.ndarray:
        """Project recorded states to in-bounds pixel coordinates."""

    def _run(self, parameters: FractalParameters, reporter: ProgressReporter) -> PointCloud:
        start_time = time.time()
        states = self._orbit(parameters, reporter)
        reporter.report(ITERATION_PROGRESS)
        logger.debug(f"{self.name}: {len(states)} states in {time.time() - start_time:.3f}s")

        if len(states) == 0:
            return PointCloud(np.empty((0, 2)), ordered=self.ordered)
        return PointCloud(self._to_pixels(states, parameters), ordered=self.ordered)


class ContinuousAttractorGenerator(DynamicalSystemGenerator):
    """Three-dimensional ODE integrated with fixed Euler steps."""

    parameters_type = AttractorParameters
    warmup = 100

    @abstractmethod
    def _trajectory(self, state: Tuple[float, float, float], steps: int, dt: float,
                    constants: Dict[str, float]) -> np.ndarray:
        """Integrate ``steps`` Euler steps, returning a (steps, 3) array."""

    @abstractmethod
    def projection(self, states: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Project (N, 3) states to the (u, v) drawing plane."""

    def _orbit(self, parameters: AttractorParameters, reporter: ProgressReporter) -> np.ndarray:
        constants = self.constants(parameters)
        state = parameters.initial_conditions
        if self.warmup:
            state = tuple(self._trajectory(state, self.warmup, parameters.dt, constants)[-1])
        reporter.report(WARMUP_PROGRESS)
        return self._trajectory(state, parameters.iterations, parameters.dt, constants)

    def _to_pixels(self, states, parameters):
        u, v = self.projection(states)
        offset = (parameters.width / 2, parameters.height / 2)
        return self.project(u, v, parameters.scale, offset, parameters.width, parameters.height)


class LorenzAttractorGenerator(ContinuousAttractorGenerator):
    """Lorenz system, drawn in the x-z plane."""

    name = "Lorenz Attractor"
    description = "Lorenz attractor: dx = s(y - x), dy = x(r - z) - y, dz = xy - bz"
    default_constants = {'sigma': 10.0, 'rho': 28.0, 'beta': 8.0 / 3.0}

    def _trajectory(self, state, steps, dt, constants):
        x, y, z = state
        return numba_backend.lorenz_trajectory(
            float(x), float(y), float(z), int(steps), float(dt),
            constants['sigma'], constants['rho'], constants['beta']
        )

    def projection(self, states):
        # z is centred on the butterfly's middle and flipped so it grows upward
        return states[:, 0], -(states[:, 2] - 25.0)


class RosslerAttractorGenerator(ContinuousAttractorGenerator):
    """Rössler system, drawn in the x-y plane."""

    name = "Rossler Attractor"
    description = "Rossler attractor: dx = -y - z, dy = x + ay, dz = b + z(x - c)"
    default_constants = {'a': 0.2, 'b': 0.2, 'c': 5.7}

    def default_parameters(self) -> AttractorParameters:
        return AttractorParameters(scale=30.0)

    def _trajectory(self, state, steps, dt, constants):
        x, y, z = state
        return numba_backend.rossler_trajectory(
            float(x), float(y), float(z), int(steps), float(dt),
            constants['a'], constants['b'], constants['c']
        )

    def projection(self, states):
        return states[:, 0], states[:, 1]


class DiscreteMapGenerator(DynamicalSystemGenerator):
    """Two-dimensional map applied once per sample."""

    parameters_type = MapParameters

    # Map coordinates drawn at the output centre
    center: ClassVar[Tuple[float, float]] = (0.0, 0.0)

    @abstractmethod
    def _iterate(self, state: Tuple[float, float], steps: int,
                 constants: Dict[str, float]) -> np.ndarray:
        """Apply the map ``steps`` times, returning a (steps, 2) array."""

    def default_scale(self, width: int, height: int) -> float:
        """Pixels per map unit when the caller gives no scale."""
        return min(width, height) / 4

    def _orbit(self, parameters: MapParameters, reporter: ProgressReporter) -> np.ndarray:
        constants = self.constants(parameters)
        state = parameters.initial
        if self.warmup:
            state = tuple(self._iterate(state, self.warmup, constants)[-1])
        reporter.report(WARMUP_PROGRESS)
        return self._iterate(state, parameters.iterations, constants)

    def _to_pixels(self, states, parameters):
        scale = parameters.scale or self.default_scale(parameters.width, parameters.height)
        # Map y grows upward
        u = states[:, 0] - self.center[0]
        v = -(states[:, 1] - self.center[1])
        offset = (parameters.width / 2, parameters.height / 2)
        return self.project(u, v, scale, offset, parameters.width, parameters.height)


class HenonMapGenerator(DiscreteMapGenerator):
    """Hénon map."""

    name = "Henon Map"
    description = "Henon map: x' = 1 - ax^2 + y, y' = bx"
    default_constants = {'a': 1.4, 'b': 0.3}
    warmup = 100

    def default_scale(self, width, height):
        return 200.0

    def _iterate(self, state, steps, constants):
        x, y = state
        return numba_backend.henon_orbit(float(x), float(y), int(steps),
                                         constants['a'], constants['b'])


class GingerbreadmanMapGenerator(DiscreteMapGenerator):
    """Gingerbreadman map, a piecewise-linear chaotic map."""

    name = "Gingerbreadman Map"
    description = "Gingerbreadman map: x' = 1 - y + |x|, y' = x"
    center = (2.25, 2.25)

    def default_parameters(self) -> MapParameters:
        return MapParameters(initial=(-0.1, 0.0))

    def default_scale(self, width, height):
        return min(width, height) / 12

    def _iterate(self, state, steps, constants):
        x, y = state
        return numba_backend.gingerbreadman_orbit(float(x), float(y), int(steps))


class CliffordAttractorGenerator(DiscreteMapGenerator):
    """Clifford attractor."""

    name = "Clifford Attractor"
    description = "Clifford attractor: x' = sin(ay) + c cos(ax), y' = sin(bx) + d cos(by)"
    default_constants = {'a': -1.4, 'b': 1.6, 'c': 1.0, 'd': 0.7}

    def _iterate(self, state, steps, constants):
        x, y = state
        return numba_backend.clifford_orbit(
            float(x), float(y), int(steps),
            constants['a'], constants['b'], constants['c'], constants['d']
        )


class DeJongAttractorGenerator(DiscreteMapGenerator):
    """Peter de Jong attractor."""

    name = "De Jong Attractor"
    description = "De Jong attractor: x' = sin(ay) - cos(bx), y' = sin(cx) - cos(dy)"
    default_constants = {'a': 2.01, 'b': -2.53, 'c': 1.61, 'd': -0.33}

    def _iterate(self, state, steps, constants):
        x, y = state
        return numba_backend.de_jong_orbit(
            float(x), float(y), int(steps),
            constants['a'], constants['b'], constants['c'], constants['d']
        )


def attractor_bounds(transforms: Sequence[IFSTransform],
                     max_points: int = BOUNDS_MAX_POINTS) -> Tuple[float, float, float, float]:
    """
    Bounding box of an IFS attractor as (xmin, xmax, ymin, ymax).

    The fixed point of every transform lies on the attractor, and so does the
    image of any attractor point under any transform. Those images are
    expanded breadth first until the next round would exceed ``max_points``.
    Transforms that are never chosen (zero probability) are ignored. The box
    depends on the transforms alone, never on a random sample.

    Args:
        transforms: Affine maps of the system
        max_points: Largest number of points in one expansion round

    Returns:
        Tuple of (xmin, xmax, ymin, ymax) in state coordinates
    """
    active = [t for t in transforms if t.probability > 0]
    matrices = np.array([t.matrix for t in active], dtype=np.float64)
    translations = np.array([t.translation for t in active], dtype=np.float64)

    fixed_points = []
    for matrix, translation in zip(matrices, translations):
        try:
            fixed_points.append(np.linalg.solve(np.eye(2) - matrix, translation))
        except np.linalg.LinAlgError:
            logger.debug("Skipping transform without a unique fixed point")
    points = np.array(fixed_points) if fixed_points else np.zeros((1, 2))

    found = [points]
    for _ in range(BOUNDS_MAX_ROUNDS):
        if len(points) * len(active) > max_points:
            break
        points = (np.einsum('kij,nj->kni', matrices, points)
                  + translations[:, np.newaxis, :]).reshape(-1, 2)
        found.append(points)

    found = np.vstack(found)
    lo = found.min(axis=0)
    hi = found.max(axis=0)
    return float(lo[0]), float(hi[0]), float(lo[1]), float(hi[1])


class ChaosGameGenerator(DynamicalSystemGenerator):
    """
    Chaos game over an iterated function system.

    At every step one affine transform is picked at random with its
    normalized probability and applied to the current point. The attractor's
    bounding box, derived from the transforms, is fitted into the output with
    a small margin; samples that land outside the output are dropped. The
    cloud is unordered.
    """

    name = "Chaos Game"
    description = "Iterated function system rendered by the chaos game (Barnsley fern)"
    parameters_type = IFSParameters
    warmup = 20
    ordered = False

    # Fraction of each dimension left empty on both sides
    margin: ClassVar[float] = 0.05

    def _orbit(self, parameters: IFSParameters, reporter: ProgressReporter) -> np.ndarray:
        transforms = parameters.transforms
        probabilities = np.array([t.probability for t in transforms], dtype=np.float64)
        probabilities /= max(probabilities.sum(), SPAN_EPSILON)

        matrices = np.array([t.matrix for t in transforms], dtype=np.float64)
        translations = np.array([t.translation for t in transforms], dtype=np.float64)

        rng = np.random.default_rng(parameters.seed)
        choices = rng.choice(len(transforms), size=self.warmup + parameters.iterations,
                             p=probabilities).astype(np.int64)
        reporter.report(WARMUP_PROGRESS)

        states = numba_backend.chaos_game_orbit(0.0, 0.0, choices, matrices, translations)
        return states[self.warmup:]

    def _to_pixels(self, states, parameters):
        width, height = parameters.width, parameters.height
        xmin, xmax, ymin, ymax = attractor_bounds(parameters.transforms)
        usable = 1.0 - 2.0 * self.margin
        scale = min(width * usable / max(xmax - xmin, SPAN_EPSILON),
                    height * usable / max(ymax - ymin, SPAN_EPSILON))

        u = states[:, 0] - (xmin + xmax) / 2
        v = -(states[:, 1] - (ymin + ymax) / 2)
        return self.project(u, v, scale, (width / 2, height / 2), width, height)


class SierpinskiChaosGameGenerator(ChaosGameGenerator):
    """Chaos game preset drawing the Sierpinski triangle."""

    name = "Sierpinski Chaos Game"
    description = "Sierpinski triangle rendered by the chaos game"

    def default_parameters(self) -> IFSParameters:
        return IFSParameters(transforms=SIERPINSKI_TRIANGLE)
