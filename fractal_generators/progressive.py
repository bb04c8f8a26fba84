"""
Progressive rendering of raster generators.

A progressive render draws the same window several times at rising
resolution so that a display can show a coarse preview quickly. Stages run one
after another; the next stage starts only after the stage callback returns.
"""

import time
import logging
from concurrent.futures import Future
from typing import Callable, List, Optional, Sequence, Tuple

from .acceleration.executor import ProgressReporter, submit_generation
from .config import get_config, validate_stages
from .core.output import Raster
from .core.parameters import FractalParameters
from .core.protocols import RasterGenerator, StageCallback

logger = logging.getLogger(__name__)


def stage_size(width: int, height: int, fraction: float) -> Tuple[int, int]:
    """Output size of one stage: each side scaled by ``fraction``, at least 1."""
    return max(1, round(width * fraction)), max(1, round(height * fraction))


class ProgressiveRenderer:
    """Render a raster generator in stages of increasing size."""

    def __init__(self, generator: RasterGenerator, stages: Optional[Sequence[float]] = None):
        """
        Initialize progressive renderer.

        Args:
            generator: Raster generator to drive
            stages: Strictly increasing size fractions in (0, 1] ending at 1.0;
                defaults to the configured schedule
        """
        stages = tuple(float(s) for s in (stages if stages is not None
                                          else get_config().progressive_stages))
        validate_stages(stages)
        self.generator = generator
        self.stages = stages

    def plan(self, parameters: FractalParameters) -> List[Tuple[float, FractalParameters]]:
        """
        Parameters of every stage.

        The last stage always carries the caller's exact parameters.
        """
        plan = []
        for fraction in self.stages[:-1]:
            width, height = stage_size(parameters.width, parameters.height, fraction)
            plan.append((fraction, parameters.with_size(width, height)))
        plan.append((self.stages[-1], parameters))
        return plan

    def _render(self, parameters: FractalParameters, on_stage: Optional[StageCallback],
                reporter: Optional[ProgressReporter] = None) -> Raster:
        raster = None
        for fraction, stage_parameters in self.plan(parameters):
            start_time = time.time()
            raster = self.generator.generate_raster(stage_parameters)
            logger.debug(f"{self.generator.name} stage {fraction:.2f} "
                         f"({raster.width}x{raster.height}) in {time.time() - start_time:.3f}s")
            if on_stage is not None:
                on_stage(raster, fraction)
            if reporter is not None:
                reporter.report(fraction)
        return raster

    def render(self, parameters: Optional[FractalParameters] = None,
               on_stage: Optional[StageCallback] = None) -> Raster:
        """
        Render every stage on the calling thread.

        Args:
            parameters: Generator parameters; None means its defaults
            on_stage: Called with (raster, progress) after each stage

        Returns:
            Final raster, equal to ``generator.generate(parameters)``
        """
        return self._render(self.generator._resolve(parameters), on_stage)

    def render_async(self, parameters: Optional[FractalParameters] = None,
                     on_stage: Optional[StageCallback] = None,
                     on_complete: Optional[Callable[[Raster], None]] = None) -> Future:
        """
        Render every stage on the shared worker pool.

        An exception raised by ``on_stage`` ends the render and is stored on
        the returned future.
        """
        parameters = self.generator._resolve(parameters)
        return submit_generation(
            lambda reporter: self._render(parameters, on_stage, reporter),
            on_complete=on_complete, label=f"{self.generator.name} progressive"
        )
