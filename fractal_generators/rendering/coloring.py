"""
Coloring of escape-time iteration results.

Iteration counts become RGBA samples: a hue cycle over the iteration budget by
default, or an explicit palette indexed by count. Samples that used the whole
budget are painted with the black sentinel.
"""

import numpy as np
from typing import List, Optional, Sequence, Tuple
from dataclasses import dataclass
import logging

import matplotlib
from matplotlib.colors import hsv_to_rgb

from ..core.math_functions import IterationResult

logger = logging.getLogger(__name__)

# Color of samples that never escaped or never converged
INSIDE_RGBA = (0, 0, 0, 255)


@dataclass
class ColorRGB:
    """RGB color representation with float components in [0, 1]."""

    r: float
    g: float
    b: float

    def __post_init__(self):
        """Clamp values to valid range."""
        self.r = max(0.0, min(1.0, float(self.r)))
        self.g = max(0.0, min(1.0, float(self.g)))
        self.b = max(0.0, min(1.0, float(self.b)))

    def to_tuple(self) -> Tuple[float, float, float]:
        """Convert to tuple."""
        return (self.r, self.g, self.b)


class Palette:
    """Discrete color palette cycled by iteration count."""

    def __init__(self, colors: Sequence, name: str = "Custom"):
        """
        Initialize palette.

        Args:
            colors: ColorRGB instances or RGB triples in [0, 1]
            name: Palette name
        """
        if not colors:
            raise ValueError("Palette must contain at least one color")

        self.name = name
        self.colors: List[ColorRGB] = [
            c if isinstance(c, ColorRGB) else ColorRGB(*c) for c in colors
        ]
        self._array = np.array([c.to_tuple() for c in self.colors], dtype=np.float64)

    def __len__(self):
        return len(self.colors)

    def cycle(self, counts: np.ndarray) -> np.ndarray:
        """
        Look up ``palette[count % len]`` for every count.

        Args:
            counts: Integer array of iteration counts

        Returns:
            Float RGB array of shape counts.shape + (3,)
        """
        return self._array[np.asarray(counts) % len(self.colors)]

    @classmethod
    def from_matplotlib(cls, cmap_name: str, n_samples: int = 32) -> 'Palette':
        """Create palette from matplotlib colormap."""
        cmap = matplotlib.colormaps[cmap_name]
        t_values = np.linspace(0, 1, n_samples)
        colors = [ColorRGB(*cmap(t)[:3]) for t in t_values]
        return cls(colors, name=f"From_{cmap_name}")


def hue_from_counts(counts: np.ndarray, max_iter: int) -> np.ndarray:
    """Hue of every sample: count / budget wrapped into [0, 1)."""
    hue = np.asarray(counts, dtype=np.float64) / max_iter
    return np.mod(hue, 1.0)


def _to_rgba(rgb: np.ndarray, inside: np.ndarray) -> np.ndarray:
    rgba = np.empty(rgb.shape[:-1] + (4,), dtype=np.uint8)
    rgba[..., :3] = np.clip(np.round(rgb * 255.0), 0, 255).astype(np.uint8)
    rgba[..., 3] = 255
    rgba[inside] = INSIDE_RGBA
    return rgba


def escape_time_rgba(counts: np.ndarray, max_iter: int,
                     palette: Optional[Palette] = None) -> np.ndarray:
    """
    Color escape-time counts.

    Args:
        counts: (height, width) iteration counts, ``max_iter`` for inside samples
        max_iter: Iteration budget
        palette: Optional palette cycled by count instead of the hue wheel

    Returns:
        uint8 RGBA array of shape (height, width, 4)
    """
    counts = np.asarray(counts)
    inside = counts >= max_iter

    if palette is not None:
        rgb = palette.cycle(counts)
    else:
        hsv = np.ones(counts.shape + (3,), dtype=np.float64)
        hsv[..., 0] = hue_from_counts(counts, max_iter)
        rgb = hsv_to_rgb(hsv)

    return _to_rgba(rgb, inside)


def root_basin_rgba(counts: np.ndarray, roots: np.ndarray, max_iter: int) -> np.ndarray:
    """
    Color Newton basins: hue by root, brightness falling with iteration count.

    Args:
        counts: Iterations until convergence, ``max_iter`` when none
        roots: Index of the root reached, -1 when none
        max_iter: Iteration budget

    Returns:
        uint8 RGBA array of shape (height, width, 4)
    """
    counts = np.asarray(counts)
    roots = np.asarray(roots)
    inside = (roots < 0) | (counts >= max_iter)

    hsv = np.ones(counts.shape + (3,), dtype=np.float64)
    hsv[..., 0] = np.where(roots >= 0, roots / 3.0, 0.0)
    hsv[..., 2] = 1.0 - np.clip(counts / max_iter, 0.0, 1.0)
    return _to_rgba(hsv_to_rgb(hsv), inside)


def colorize(result: IterationResult, max_iter: int,
             palette: Optional[Palette] = None) -> np.ndarray:
    """Color an iteration result, using root basins when roots are present."""
    if result.roots is not None:
        return root_basin_rgba(result.iterations, result.roots, max_iter)
    return escape_time_rgba(result.iterations, max_iter, palette)


def get_builtin_palettes() -> dict:
    """Get named palettes for use with escape-time families."""
    return {
        'fire': Palette([(0.0, 0.0, 0.0), (0.5, 0.0, 0.0), (1.0, 0.0, 0.0),
                         (1.0, 0.5, 0.0), (1.0, 1.0, 0.0), (1.0, 1.0, 1.0)], name="Fire"),
        'ocean': Palette([(0.0, 0.0, 0.2), (0.0, 0.2, 0.5), (0.0, 0.5, 0.8),
                          (0.2, 0.8, 1.0), (0.8, 1.0, 1.0)], name="Ocean"),
        'grayscale': Palette([(0.0, 0.0, 0.0), (1.0, 1.0, 1.0)], name="Grayscale"),
        'viridis': Palette.from_matplotlib('viridis'),
    }


def get_palette(name: str) -> Palette:
    """Look up a built-in palette by case-insensitive name."""
    palettes = get_builtin_palettes()
    try:
        return palettes[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown palette {name!r}; available: {', '.join(sorted(palettes))}") from None
