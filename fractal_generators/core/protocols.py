"""
Generator contract shared by every fractal family.

A generator is a stateless computation object: it turns a parameter value into
exactly one kind of output. Families subclass one of the three kind-specific
bases below and implement ``_run``; synchronous, asynchronous and progressive
generation all go through that single hook.
"""

import time
import logging
from abc import ABC, abstractmethod
from concurrent.futures import Future
from typing import Callable, ClassVar, Optional, Sequence, Type

from .output import FractalOutput, Outline, OutputKind, PointCloud, Raster
from .parameters import FractalParameters, RecursiveParameters
from ..acceleration.executor import ProgressCallback, ProgressReporter, submit_generation
from ..config import get_config

logger = logging.getLogger(__name__)

StageCallback = Callable[[Raster, float], None]


class FractalGenerator(ABC):
    """Abstract base class for fractal generators."""

    output_kind: ClassVar[OutputKind]
    parameters_type: ClassVar[Type[FractalParameters]] = FractalParameters

    name: ClassVar[str] = "Fractal"
    description: ClassVar[str] = ""

    def default_parameters(self) -> FractalParameters:
        """Get the parameters used when a caller passes none."""
        return self.parameters_type()

    def _resolve(self, parameters: Optional[FractalParameters]) -> FractalParameters:
        if parameters is None:
            return self.default_parameters()
        if not isinstance(parameters, self.parameters_type):
            raise TypeError(
                f"{self.name} expects {self.parameters_type.__name__}, "
                f"got {type(parameters).__name__}"
            )
        return parameters

    @abstractmethod
    def _run(self, parameters: FractalParameters, reporter: ProgressReporter) -> FractalOutput:
        """
        Compute the output for resolved parameters.

        Args:
            parameters: Validated parameters of ``parameters_type``
            reporter: Receives progress at stage boundaries

        Returns:
            Output of ``output_kind``
        """

    def _execute(self, parameters: FractalParameters, reporter: ProgressReporter) -> FractalOutput:
        start_time = time.time()
        output = self._run(parameters, reporter)
        reporter.report(1.0)
        logger.debug(f"{self.name} {parameters.width}x{parameters.height} generated "
                     f"in {time.time() - start_time:.3f}s")
        return output

    @abstractmethod
    def generate(self, parameters: Optional[FractalParameters] = None) -> FractalOutput:
        """
        Generate the fractal on the calling thread.

        Args:
            parameters: Family parameters; None means ``default_parameters()``

        Returns:
            Output of this generator's kind
        """

    def generate_async(self, parameters: Optional[FractalParameters] = None,
                       on_progress: Optional[ProgressCallback] = None,
                       on_complete: Optional[Callable[[FractalOutput], None]] = None) -> Future:
        """
        Generate the fractal on the shared worker pool.

        ``on_progress`` receives non-decreasing values in [0, 1].
        ``on_complete`` fires exactly once, after the last progress call, with
        the value ``generate`` would return for the same parameters.

        Returns:
            Future resolving to the output
        """
        parameters = self._resolve(parameters)
        return submit_generation(
            lambda reporter: self._execute(parameters, reporter),
            on_progress, on_complete, label=self.name
        )

    def __repr__(self):
        return f"{type(self).__name__}()"


class RasterGenerator(FractalGenerator):
    """Generator whose output is an RGBA raster."""

    output_kind = OutputKind.RASTER

    def generate_raster(self, parameters: Optional[FractalParameters] = None) -> Raster:
        """Generate the fractal as a raster of the requested size."""
        return self._execute(self._resolve(parameters), ProgressReporter())

    def generate(self, parameters: Optional[FractalParameters] = None) -> Raster:
        return self.generate_raster(parameters)


class OutlineGenerator(FractalGenerator):
    """Generator whose output is an ordered sequence of line segments."""

    output_kind = OutputKind.OUTLINE
    parameters_type = RecursiveParameters

    def generate_outline(self, parameters: Optional[FractalParameters] = None) -> Outline:
        """Generate the fractal as line segments in pixel coordinates."""
        return self._execute(self._resolve(parameters), ProgressReporter())

    def generate(self, parameters: Optional[FractalParameters] = None) -> Outline:
        return self.generate_outline(parameters)

    @abstractmethod
    def closed_form_segment_count(self, depth: int) -> int:
        """Number of segments emitted at ``depth``."""

    def max_depth(self, ceiling: int = 64) -> int:
        """Largest depth up to ``ceiling`` whose segment count fits the configured cap."""
        limit = get_config().max_outline_segments
        depth = 0
        while depth < ceiling and self.closed_form_segment_count(depth + 1) <= limit:
            depth += 1
        return depth

    def _effective_depth(self, depth: int) -> int:
        """Clamp a requested depth so the outline stays within the segment cap."""
        limit = get_config().max_outline_segments
        if self.closed_form_segment_count(depth) <= limit:
            return depth
        clamped = self.max_depth(ceiling=depth)
        logger.warning(f"{self.name}: depth {depth} exceeds the {limit} segment cap, "
                       f"clamped to {clamped}")
        return clamped


class PointCloudGenerator(FractalGenerator):
    """Generator whose output is a cloud of 2D points."""

    output_kind = OutputKind.POINT_CLOUD

    def generate_points(self, parameters: Optional[FractalParameters] = None) -> PointCloud:
        """Generate the fractal as points in pixel coordinates."""
        return self._execute(self._resolve(parameters), ProgressReporter())

    def generate(self, parameters: Optional[FractalParameters] = None) -> PointCloud:
        return self.generate_points(parameters)


class ProgressiveGenerator:
    """
    Mixin for raster generators that can render coarse previews first.

    Each stage is a complete raster of the same window at a larger size; the
    last stage uses the caller's exact parameters.
    """

    def generate_progressive(self, parameters: Optional[FractalParameters] = None,
                             on_stage: Optional[StageCallback] = None,
                             stages: Optional[Sequence[float]] = None) -> Raster:
        """
        Render successive stages on the calling thread.

        Args:
            parameters: Family parameters; None means ``default_parameters()``
            on_stage: Called with (raster, progress) after each stage
            stages: Size fractions, defaults to the configured schedule

        Returns:
            The final raster, equal to ``generate(parameters)``
        """
        from ..progressive import ProgressiveRenderer
        return ProgressiveRenderer(self, stages).render(parameters, on_stage)

    def generate_progressive_async(self, parameters: Optional[FractalParameters] = None,
                                   on_stage: Optional[StageCallback] = None,
                                   on_complete: Optional[Callable[[Raster], None]] = None,
                                   stages: Optional[Sequence[float]] = None) -> Future:
        """Render successive stages on the shared worker pool."""
        from ..progressive import ProgressiveRenderer
        return ProgressiveRenderer(self, stages).render_async(parameters, on_stage, on_complete)
