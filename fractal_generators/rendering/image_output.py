"""
Conversion of generator output into in-memory images.

This is the display handoff: a raster is wrapped as-is, outlines are stroked
with ``ImageDraw.line`` and point clouds are plotted as single pixels. Nothing
is written to disk.
"""

import numpy as np
from typing import Callable, Dict, Optional, Tuple
import logging

from PIL import Image, ImageDraw

from ..core.output import FractalOutput, Outline, OutputKind, PointCloud, Raster

logger = logging.getLogger(__name__)

RGBA = Tuple[int, int, int, int]


class ImageConverter:
    """Draw any generator output onto a Pillow image."""

    def __init__(self, background: RGBA = (0, 0, 0, 255),
                 foreground: RGBA = (255, 255, 255, 255)):
        """
        Initialize image converter.

        Args:
            background: Fill color for outline and point images
            foreground: Stroke and plot color
        """
        self.background = background
        self.foreground = foreground

        self.converters: Dict[OutputKind, Callable[..., Image.Image]] = {
            OutputKind.RASTER: self.raster_to_image,
            OutputKind.OUTLINE: self.outline_to_image,
            OutputKind.POINT_CLOUD: self.points_to_image,
        }

    def to_image(self, output: FractalOutput, size: Optional[Tuple[int, int]] = None) -> Image.Image:
        """
        Convert output of any kind, dispatching on ``output.kind``.

        Args:
            output: Generator output
            size: Canvas (width, height) for outlines and points; rasters
                always keep their own size

        Returns:
            RGBA image
        """
        converter = self.converters.get(output.kind)
        if converter is None:
            raise ValueError(f"Unsupported output kind: {output.kind}")
        if output.kind is OutputKind.RASTER:
            return converter(output)
        return converter(output, size)

    def raster_to_image(self, raster: Raster) -> Image.Image:
        """Wrap raster pixels as an RGBA image."""
        return Image.fromarray(raster.pixels)

    def outline_to_image(self, outline: Outline, size: Optional[Tuple[int, int]] = None) -> Image.Image:
        """Stroke every segment in order onto a fresh canvas."""
        size = size or self._fit_size(outline.to_array().reshape(-1, 2))
        image = Image.new('RGBA', size, self.background)
        draw = ImageDraw.Draw(image)
        for segment in outline.segments:
            draw.line([segment.start, segment.end], fill=self.foreground,
                      width=max(1, int(round(segment.width))))
        logger.debug(f"Drew {outline.segment_count} segments on {size[0]}x{size[1]} canvas")
        return image

    def points_to_image(self, cloud: PointCloud, size: Optional[Tuple[int, int]] = None) -> Image.Image:
        """Plot every point as one pixel."""
        size = size or self._fit_size(cloud.points)
        pixels = np.zeros((size[1], size[0], 4), dtype=np.uint8)
        pixels[...] = self.background

        if len(cloud):
            cols = cloud.points[:, 0].astype(np.int64)
            rows = cloud.points[:, 1].astype(np.int64)
            visible = (cols >= 0) & (cols < size[0]) & (rows >= 0) & (rows < size[1])
            pixels[rows[visible], cols[visible]] = self.foreground

        return Image.fromarray(pixels)

    @staticmethod
    def _fit_size(coords: np.ndarray) -> Tuple[int, int]:
        """Smallest canvas holding every coordinate."""
        if coords.size == 0:
            return (1, 1)
        width = max(1, int(np.ceil(coords[:, 0].max())) + 1)
        height = max(1, int(np.ceil(coords[:, 1].max())) + 1)
        return (width, height)


def to_image(output: FractalOutput, size: Optional[Tuple[int, int]] = None) -> Image.Image:
    """Convert generator output to an RGBA image with default colors."""
    return ImageConverter().to_image(output, size)
