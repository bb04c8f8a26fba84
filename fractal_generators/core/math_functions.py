"""
Core mathematical helpers for fractal generation.

This module maps output pixels onto a complex-plane window and holds the
per-sample iteration results that escape-time engines hand to coloring.
"""

import numpy as np
from typing import List, Optional, Tuple
import logging

from .parameters import ComplexRect

logger = logging.getLogger(__name__)


class ComplexPlane:
    """Represents a complex plane window with pixel coordinate mapping."""

    def __init__(self, view_rect: ComplexRect, width: int, height: int):
        """
        Initialize complex plane window and resolution.

        Pixel (x, y) maps to ``top_left + (x / width) * real_span`` on the real
        axis and ``top_left.imag + (y / height) * imag_span`` on the imaginary
        axis, so pixel (0, 0) is exactly the first corner.

        Args:
            view_rect: Window corners
            width, height: Image resolution in pixels
        """
        if width <= 0 or height <= 0:
            raise ValueError("Width and height must be positive")

        self.view_rect = view_rect
        self.width = width
        self.height = height

    def create_coordinate_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Create the real coordinate of every column and the imaginary
        coordinate of every row.

        Returns:
            Tuple of (real_coords, imag_coords) 1D float64 arrays
        """
        tl = self.view_rect.top_left
        x = tl.real + (np.arange(self.width, dtype=np.float64) / self.width) * self.view_rect.real_span
        y = tl.imag + (np.arange(self.height, dtype=np.float64) / self.height) * self.view_rect.imag_span
        return x, y


class IterationResult:
    """Container for escape-time iteration results."""

    def __init__(self, iterations: np.ndarray, roots: Optional[np.ndarray] = None):
        """
        Initialize iteration result.

        Args:
            iterations: Array of iteration counts; the budget marks samples
                that never escaped (or never converged)
            roots: Index of the root each sample converged to, -1 for none
        """
        self.iterations = iterations
        self.roots = roots
        self.shape = iterations.shape

    @classmethod
    def stack(cls, bands: List['IterationResult']) -> 'IterationResult':
        """Join row bands computed separately into one result."""
        iterations = np.concatenate([b.iterations for b in bands], axis=0)
        roots = None
        if bands and bands[0].roots is not None:
            roots = np.concatenate([b.roots for b in bands], axis=0)
        return cls(iterations, roots)


def row_bands(height: int, bands: int) -> List[Tuple[int, int]]:
    """
    Split ``height`` rows into at most ``bands`` contiguous non-empty ranges.

    Args:
        height: Total number of rows
        bands: Requested number of bands

    Returns:
        List of (start, stop) row ranges covering every row once
    """
    bands = max(1, min(bands, height))
    edges = np.linspace(0, height, bands + 1).round().astype(int)
    return [(int(a), int(b)) for a, b in zip(edges[:-1], edges[1:]) if b > a]
