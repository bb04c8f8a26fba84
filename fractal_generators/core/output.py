"""
Generation output types.

A generator produces exactly one of three output shapes. Each shape carries
its ``kind`` tag so a display layer can pick a drawing strategy without
knowing which algorithm produced it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, NamedTuple, Optional, Tuple

import numpy as np

Point = Tuple[float, float]


class OutputKind(Enum):
    """Shape of a generator's output."""

    RASTER = 'raster'
    OUTLINE = 'outline'
    POINT_CLOUD = 'point_cloud'


class FractalOutput:
    """Base class for the tagged output variant."""

    kind: OutputKind


class Raster(FractalOutput):
    """Width x height grid of RGBA samples, 8 bits per channel."""

    kind = OutputKind.RASTER

    def __init__(self, pixels: np.ndarray):
        """
        Initialize raster output.

        Args:
            pixels: uint8 array of shape (height, width, 4) in RGBA order
        """
        pixels = np.asarray(pixels)
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Raster pixels must have shape (height, width, 4), got {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise ValueError("Raster pixels must be uint8")
        self.pixels = pixels

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def __eq__(self, other):
        if not isinstance(other, Raster):
            return NotImplemented
        return np.array_equal(self.pixels, other.pixels)

    __hash__ = None

    def __repr__(self):
        return f"Raster({self.width}x{self.height})"


class LineSegment(NamedTuple):
    """Straight segment of an outline; ``width`` is the suggested stroke width."""

    start: Point
    end: Point
    width: float = 1.0

    @property
    def length(self) -> float:
        return float(np.hypot(self.end[0] - self.start[0], self.end[1] - self.start[1]))


@dataclass(frozen=True)
class Outline(FractalOutput):
    """Ordered sequence of line segments in pixel coordinates."""

    segments: Tuple[LineSegment, ...] = ()

    kind = OutputKind.OUTLINE

    def __post_init__(self):
        object.__setattr__(self, 'segments', tuple(self.segments))

    @classmethod
    def from_array(cls, coords: np.ndarray, widths: Optional[Iterable[float]] = None) -> 'Outline':
        """Build an outline from an (N, 4) array of x0, y0, x1, y1 rows."""
        coords = np.asarray(coords, dtype=np.float64).reshape(-1, 4)
        if widths is None:
            widths = [1.0] * len(coords)
        return cls(tuple(
            LineSegment((x0, y0), (x1, y1), float(w))
            for (x0, y0, x1, y1), w in zip(coords.tolist(), widths)
        ))

    @property
    def segment_count(self) -> int:
        return len(self.segments)

    def __len__(self):
        return len(self.segments)

    def to_array(self) -> np.ndarray:
        """Segment endpoints as an (N, 4) float array."""
        if not self.segments:
            return np.empty((0, 4), dtype=np.float64)
        return np.array([(*s.start, *s.end) for s in self.segments], dtype=np.float64)

    def bounds(self) -> Tuple[float, float, float, float]:
        """Get (xmin, xmax, ymin, ymax) of all segment endpoints."""
        coords = self.to_array()
        if coords.size == 0:
            return (0.0, 0.0, 0.0, 0.0)
        xs = coords[:, [0, 2]]
        ys = coords[:, [1, 3]]
        return (float(xs.min()), float(xs.max()), float(ys.min()), float(ys.max()))


class PointCloud(FractalOutput):
    """
    Sequence of 2D pixel coordinates.

    ``ordered`` is True for trajectories, where consecutive points are
    consecutive states, and False for sampled sets such as chaos-game output.
    """

    kind = OutputKind.POINT_CLOUD

    def __init__(self, points: np.ndarray, ordered: bool = True):
        points = np.asarray(points, dtype=np.float64)
        if points.size == 0:
            points = np.empty((0, 2), dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != 2:
            raise ValueError(f"PointCloud points must have shape (N, 2), got {points.shape}")
        self.points = points
        self.ordered = ordered

    def __len__(self):
        return self.points.shape[0]

    def __eq__(self, other):
        if not isinstance(other, PointCloud):
            return NotImplemented
        return self.ordered == other.ordered and np.array_equal(self.points, other.points)

    __hash__ = None

    def __repr__(self):
        return f"PointCloud({len(self)} points, ordered={self.ordered})"
