"""
Fractal parameter definitions and validation.

Every fractal family is configured by an immutable parameter value. Parameters
validate themselves on construction so that generators can trust what they
receive; clamping (for example of recursion depth) happens inside generators.
"""

import math
import numbers
from dataclasses import dataclass, field, replace
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Union

RGB = Tuple[float, float, float]
Constants = Tuple[Tuple[str, float], ...]


def _integer(value: Any, name: str) -> int:
    """Accept any integral number except bool, returned as a plain int."""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ValueError(f"{name} must be an integer")
    return int(value)


def _constant_items(constants: Any) -> Constants:
    """Normalize a mapping or iterable of pairs to sorted (name, value) pairs."""
    items = constants.items() if isinstance(constants, Mapping) else constants
    return tuple(sorted((str(k), float(v)) for k, v in items))


@dataclass(frozen=True)
class ComplexRect:
    """Rectangular window in the complex plane given by two opposite corners."""

    top_left: complex
    bottom_right: complex

    def __post_init__(self):
        object.__setattr__(self, 'top_left', complex(self.top_left))
        object.__setattr__(self, 'bottom_right', complex(self.bottom_right))
        self.validate()

    def validate(self) -> None:
        """Reject zero-area and non-finite windows."""
        for corner in (self.top_left, self.bottom_right):
            if not (math.isfinite(corner.real) and math.isfinite(corner.imag)):
                raise ValueError("Window corners must be finite")
        if self.top_left.real == self.bottom_right.real:
            raise ValueError("Invalid window: zero width in the real axis")
        if self.top_left.imag == self.bottom_right.imag:
            raise ValueError("Invalid window: zero height in the imaginary axis")

    @property
    def real_span(self) -> float:
        return self.bottom_right.real - self.top_left.real

    @property
    def imag_span(self) -> float:
        return self.bottom_right.imag - self.top_left.imag

    @classmethod
    def from_bounds(cls, xmin: float, xmax: float, ymin: float, ymax: float) -> 'ComplexRect':
        """Build a window from (xmin, xmax, ymin, ymax) with the top edge at ymax."""
        return cls(complex(xmin, ymax), complex(xmax, ymin))


@dataclass(frozen=True)
class FractalParameters:
    """Base class for fractal parameters with validation."""

    iterations: int = 1000
    width: int = 600
    height: int = 600

    _min_iterations: ClassVar[int] = 1

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Validate parameter values."""
        object.__setattr__(self, 'iterations', _integer(self.iterations, 'iterations'))
        if self.iterations < self._min_iterations:
            raise ValueError(f"iterations must be >= {self._min_iterations}")
        for name in ('width', 'height'):
            value = _integer(getattr(self, name), name)
            object.__setattr__(self, name, value)
            if value <= 0:
                raise ValueError("Width and height must be positive")

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def with_size(self, width: int, height: int) -> 'FractalParameters':
        """Return a copy of these parameters with a different output size."""
        return replace(self, width=width, height=height)

    def to_dict(self) -> Dict[str, Any]:
        """Convert parameters to dictionary."""
        return {k: v for k, v in self.__dict__.items() if not k.startswith('_')}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FractalParameters':
        """Create parameters from dictionary."""
        return cls(**data)


def _default_view() -> ComplexRect:
    return ComplexRect(complex(-2.1, 1.5), complex(1.0, -1.5))


def _square_view() -> ComplexRect:
    return ComplexRect(complex(-2.0, 2.0), complex(2.0, -2.0))


@dataclass(frozen=True)
class ComplexPlaneParameters(FractalParameters):
    """Parameters for escape-time fractals over a complex-plane window."""

    view_rect: ComplexRect = field(default_factory=_default_view)
    palette: Optional[Union[str, Tuple[RGB, ...]]] = None

    def validate(self) -> None:
        super().validate()
        if not isinstance(self.view_rect, ComplexRect):
            raise ValueError("view_rect must be a ComplexRect")
        if isinstance(self.palette, str):
            from ..rendering.coloring import get_palette
            get_palette(self.palette)
            object.__setattr__(self, 'palette', self.palette.lower())
        elif self.palette is not None:
            palette = tuple(tuple(float(c) for c in color) for color in self.palette)
            if not palette:
                raise ValueError("palette must contain at least one color")
            for color in palette:
                if len(color) != 3 or not all(0.0 <= c <= 1.0 for c in color):
                    raise ValueError("palette colors must be RGB triples in [0, 1]")
            object.__setattr__(self, 'palette', palette)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ComplexPlaneParameters':
        data = dict(data)
        view = data.get('view_rect')
        if isinstance(view, Mapping):
            data['view_rect'] = ComplexRect(**view)
        elif isinstance(view, (tuple, list)) and len(view) == 2:
            data['view_rect'] = ComplexRect(*view)
        return cls(**data)


@dataclass(frozen=True)
class JuliaParameters(ComplexPlaneParameters):
    """Parameters for Julia set generation."""

    view_rect: ComplexRect = field(default_factory=_square_view)
    c: complex = complex(-0.7, 0.27015)

    def validate(self) -> None:
        """Validate Julia parameters."""
        super().validate()
        if not isinstance(self.c, (int, float, complex)):
            raise ValueError("c must be numeric")
        object.__setattr__(self, 'c', complex(self.c))


@dataclass(frozen=True)
class MultibrotParameters(ComplexPlaneParameters):
    """Parameters for Multibrot fractal."""

    view_rect: ComplexRect = field(default_factory=_square_view)
    power: float = 3.0

    def validate(self) -> None:
        """Validate Multibrot parameters."""
        super().validate()
        if not isinstance(self.power, (int, float)):
            raise ValueError("power must be numeric")
        if self.power == 0:
            raise ValueError("power cannot be zero")


@dataclass(frozen=True)
class NewtonParameters(ComplexPlaneParameters):
    """Parameters for the Newton root-finding fractal of z^3 - 1."""

    iterations: int = 100
    view_rect: ComplexRect = field(default_factory=_square_view)
    tolerance: float = 1e-6

    def validate(self) -> None:
        super().validate()
        if not self.tolerance > 0:
            raise ValueError("tolerance must be positive")


@dataclass(frozen=True)
class RecursiveParameters(FractalParameters):
    """Parameters for recursive and string-rewriting outline fractals."""

    depth: int = 6

    def validate(self) -> None:
        super().validate()
        object.__setattr__(self, 'depth', _integer(self.depth, 'depth'))
        if self.depth < 0:
            raise ValueError("depth must be non-negative")


@dataclass(frozen=True)
class TreeParameters(RecursiveParameters):
    """
    Parameters for branching trees.

    ``jitter`` perturbs every branch angle by a uniform amount in
    [-jitter, jitter] radians; a non-zero jitter makes the output depend on
    ``seed`` (fresh entropy when the seed is None).
    """

    depth: int = 8
    branch_angle: float = math.pi / 6
    length_shrink: float = 0.7
    width_shrink: float = 0.8
    jitter: float = 0.0
    seed: Optional[int] = None

    def validate(self) -> None:
        super().validate()
        for name in ('length_shrink', 'width_shrink'):
            value = getattr(self, name)
            if not 0.0 < value < 1.0:
                raise ValueError(f"{name} must be between 0 and 1")
        if self.jitter < 0:
            raise ValueError("jitter must be non-negative")


@dataclass(frozen=True)
class AttractorParameters(FractalParameters):
    """Parameters for continuous attractors integrated with Euler steps."""

    iterations: int = 10000
    dt: float = 0.01
    initial_conditions: Tuple[float, float, float] = (0.1, 0.0, 0.0)
    scale: float = 15.0
    constants: Constants = ()

    _min_iterations: ClassVar[int] = 0

    def validate(self) -> None:
        super().validate()
        if not self.dt > 0:
            raise ValueError("dt must be positive")
        if not self.scale > 0:
            raise ValueError("scale must be positive")
        initial = tuple(float(v) for v in self.initial_conditions)
        if len(initial) != 3:
            raise ValueError("initial_conditions must hold three values")
        object.__setattr__(self, 'initial_conditions', initial)
        object.__setattr__(self, 'constants', _constant_items(self.constants))


@dataclass(frozen=True)
class MapParameters(FractalParameters):
    """
    Parameters for discrete two-dimensional maps.

    ``scale`` of None lets the family pick its own pixel scale.
    """

    iterations: int = 100_000
    initial: Tuple[float, float] = (0.1, 0.1)
    scale: Optional[float] = None
    constants: Constants = ()

    _min_iterations: ClassVar[int] = 0

    def validate(self) -> None:
        super().validate()
        if self.scale is not None and not self.scale > 0:
            raise ValueError("scale must be positive")
        initial = tuple(float(v) for v in self.initial)
        if len(initial) != 2:
            raise ValueError("initial must hold two values")
        object.__setattr__(self, 'initial', initial)
        object.__setattr__(self, 'constants', _constant_items(self.constants))


@dataclass(frozen=True)
class IFSTransform:
    """Affine map of an iterated function system, chosen with ``probability``."""

    probability: float
    matrix: Tuple[Tuple[float, float], Tuple[float, float]]
    translation: Tuple[float, float]

    def __post_init__(self):
        matrix = tuple(tuple(float(v) for v in row) for row in self.matrix)
        translation = tuple(float(v) for v in self.translation)
        if len(matrix) != 2 or any(len(row) != 2 for row in matrix):
            raise ValueError("matrix must be 2x2")
        if len(translation) != 2:
            raise ValueError("translation must hold two values")
        if self.probability < 0:
            raise ValueError("probability must be non-negative")
        object.__setattr__(self, 'matrix', matrix)
        object.__setattr__(self, 'translation', translation)


BARNSLEY_FERN = (
    IFSTransform(0.01, ((0.0, 0.0), (0.0, 0.16)), (0.0, 0.0)),
    IFSTransform(0.85, ((0.85, 0.04), (-0.04, 0.85)), (0.0, 1.6)),
    IFSTransform(0.07, ((0.2, -0.26), (0.23, 0.22)), (0.0, 1.6)),
    IFSTransform(0.07, ((-0.15, 0.28), (0.26, 0.24)), (0.0, 0.44)),
)

SIERPINSKI_TRIANGLE = (
    IFSTransform(0.33, ((0.5, 0.0), (0.0, 0.5)), (0.0, 0.0)),
    IFSTransform(0.33, ((0.5, 0.0), (0.0, 0.5)), (0.5, 0.0)),
    IFSTransform(0.34, ((0.5, 0.0), (0.0, 0.5)), (0.25, 0.433)),
)


@dataclass(frozen=True)
class IFSParameters(FractalParameters):
    """Parameters for chaos-game rendering of an iterated function system."""

    iterations: int = 50_000
    width: int = 500
    transforms: Tuple[IFSTransform, ...] = BARNSLEY_FERN
    seed: Optional[int] = None

    _min_iterations: ClassVar[int] = 0

    def validate(self) -> None:
        super().validate()
        transforms = tuple(self.transforms)
        if not transforms:
            raise ValueError("at least one transform is required")
        if not all(isinstance(t, IFSTransform) for t in transforms):
            raise ValueError("transforms must be IFSTransform instances")
        if sum(t.probability for t in transforms) <= 0:
            raise ValueError("transform probabilities must sum to a positive value")
        object.__setattr__(self, 'transforms', transforms)
