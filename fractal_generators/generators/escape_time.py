"""
Escape-time fractal families.

Every output pixel is mapped onto a complex-plane window and iterated with a
family-specific recurrence until it escapes the radius-2 disc or the
iteration budget runs out. Counts are computed in row bands so progress can
be reported between bands, then colored into an RGBA raster.
"""

import logging
from abc import abstractmethod
from typing import Optional

import numpy as np

from ..acceleration.executor import ProgressReporter
from ..acceleration.numba_backend import get_numba_accelerator
from ..config import get_config
from ..core.math_functions import ComplexPlane, IterationResult, row_bands
from ..core.output import Raster
from ..core.parameters import (
    ComplexPlaneParameters, JuliaParameters, MultibrotParameters, NewtonParameters,
)
from ..core.protocols import ProgressiveGenerator, RasterGenerator
from ..rendering.coloring import Palette, colorize, get_palette

logger = logging.getLogger(__name__)

# Share of progress spent iterating; coloring takes the rest
ITERATION_PROGRESS = 0.9


class EscapeTimeGenerator(ProgressiveGenerator, RasterGenerator):
    """Abstract base class for escape-time fractals."""

    parameters_type = ComplexPlaneParameters

    @abstractmethod
    def _iterate(self, real: np.ndarray, imag: np.ndarray,
                 parameters: ComplexPlaneParameters) -> IterationResult:
        """
        Iterate a block of samples.

        Args:
            real: Real coordinate of every column
            imag: Imaginary coordinate of every row in the block
            parameters: Family parameters

        Returns:
            IterationResult of shape (len(imag), len(real))
        """

    def compute_field(self, parameters: Optional[ComplexPlaneParameters] = None,
                      reporter: Optional[ProgressReporter] = None) -> IterationResult:
        """
        Compute iteration counts for every pixel.

        Args:
            parameters: Family parameters; None means ``default_parameters()``
            reporter: Receives progress after each row band

        Returns:
            IterationResult of shape (height, width)
        """
        parameters = self._resolve(parameters)
        reporter = reporter or ProgressReporter()

        plane = ComplexPlane(parameters.view_rect, parameters.width, parameters.height)
        real, imag = plane.create_coordinate_arrays()

        bands = row_bands(parameters.height, get_config().raster_bands)
        results = []
        for index, (start, stop) in enumerate(bands, 1):
            results.append(self._iterate(real, imag[start:stop], parameters))
            reporter.report(ITERATION_PROGRESS * index / len(bands))

        return IterationResult.stack(results)

    def compute_counts(self, parameters: Optional[ComplexPlaneParameters] = None) -> np.ndarray:
        """Iteration count of every pixel; the budget marks inside samples."""
        return self.compute_field(parameters).iterations

    def colorize(self, result: IterationResult, parameters: ComplexPlaneParameters) -> np.ndarray:
        """Turn iteration results into RGBA pixels."""
        if isinstance(parameters.palette, str):
            palette = get_palette(parameters.palette)
        else:
            palette = Palette(parameters.palette) if parameters.palette else None
        return colorize(result, parameters.iterations, palette)

    def _run(self, parameters: ComplexPlaneParameters, reporter: ProgressReporter) -> Raster:
        result = self.compute_field(parameters, reporter)
        return Raster(self.colorize(result, parameters))


class MandelbrotGenerator(EscapeTimeGenerator):
    """Mandelbrot set: z = z^2 + c from z = 0."""

    name = "Mandelbrot"
    description = "Mandelbrot set: z_{n+1} = z_n^2 + c, where c is the pixel coordinate and z_0 = 0"

    def _iterate(self, real, imag, parameters):
        return get_numba_accelerator().mandelbrot_iteration(real, imag, parameters.iterations)


class JuliaSetGenerator(EscapeTimeGenerator):
    """Julia set: z = z^2 + c with the pixel as the starting z."""

    name = "Julia"
    description = "Julia set: z_{n+1} = z_n^2 + c, where z_0 is the pixel coordinate and c is fixed"
    parameters_type = JuliaParameters

    def _iterate(self, real, imag, parameters):
        return get_numba_accelerator().julia_iteration(real, imag, parameters.c, parameters.iterations)


class TricornGenerator(EscapeTimeGenerator):
    """Tricorn (Mandelbar): z = conj(z)^2 + c."""

    name = "Tricorn"
    description = "Tricorn: z_{n+1} = conj(z_n)^2 + c"

    def _iterate(self, real, imag, parameters):
        return get_numba_accelerator().tricorn_iteration(real, imag, parameters.iterations)


class BurningShipGenerator(EscapeTimeGenerator):
    """Burning Ship: z = (|Re z| + i|Im z|)^2 + c."""

    name = "Burning Ship"
    description = "Burning Ship: z_{n+1} = (|Re(z_n)| + i|Im(z_n)|)^2 + c"

    def _iterate(self, real, imag, parameters):
        return get_numba_accelerator().burning_ship_iteration(real, imag, parameters.iterations)


class MultibrotGenerator(EscapeTimeGenerator):
    """Multibrot set: z = z^p + c."""

    name = "Multibrot"
    description = "Multibrot: z_{n+1} = z_n^p + c for a real power p"
    parameters_type = MultibrotParameters

    def _iterate(self, real, imag, parameters):
        return get_numba_accelerator().multibrot_iteration(
            real, imag, parameters.power, parameters.iterations
        )


class NewtonFractalGenerator(EscapeTimeGenerator):
    """
    Newton fractal of f(z) = z^3 - 1.

    Each pixel runs Newton's method until it lands within the tolerance of a
    cube root of unity. The hue names the root reached and the brightness
    falls with the number of steps taken; samples that never converge are
    black.
    """

    name = "Newton"
    description = "Newton fractal: basins of z^3 - 1 under z_{n+1} = z_n - f(z_n)/f'(z_n)"
    parameters_type = NewtonParameters

    def _iterate(self, real, imag, parameters):
        return get_numba_accelerator().newton_iteration(
            real, imag, parameters.iterations, parameters.tolerance
        )
