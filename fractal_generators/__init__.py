"""
Fractal generation library.

This library turns parameter values into fractal output of three kinds:
RGBA rasters for escape-time sets, line-segment outlines for recursive and
L-system curves, and point clouds for strange attractors and chaos games.

Key Features:
- Escape-time families (Mandelbrot, Julia, Tricorn, Burning Ship, Multibrot, Newton)
- L-system and recursive outline families with depth-bounded output size
- Attractor, discrete map and chaos-game point families
- Numba-compiled kernels that release the GIL
- Asynchronous generation on a shared worker pool with progress callbacks
- Progressive rendering of rasters at rising resolution

Example usage:
    >>> from fractal_generators import MandelbrotGenerator, ComplexPlaneParameters
    >>> generator = MandelbrotGenerator()
    >>> raster = generator.generate(ComplexPlaneParameters(width=320, height=240))
    >>> raster.size
    (320, 240)
"""

__version__ = "1.0.0"
__author__ = "Fractal Generators Team"

from fractal_generators.config import GenerationConfig, get_config, set_config
from fractal_generators.core.output import (
    FractalOutput, LineSegment, Outline, OutputKind, PointCloud, Raster,
)
from fractal_generators.core.parameters import (
    BARNSLEY_FERN, SIERPINSKI_TRIANGLE, AttractorParameters, ComplexPlaneParameters,
    ComplexRect, FractalParameters, IFSParameters, IFSTransform, JuliaParameters,
    MapParameters, MultibrotParameters, NewtonParameters, RecursiveParameters, TreeParameters,
)
from fractal_generators.core.protocols import (
    FractalGenerator, OutlineGenerator, PointCloudGenerator, ProgressiveGenerator,
    RasterGenerator,
)
from fractal_generators.generators.escape_time import (
    BurningShipGenerator, JuliaSetGenerator, MandelbrotGenerator, MultibrotGenerator,
    NewtonFractalGenerator, TricornGenerator,
)
from fractal_generators.generators.lsystem import (
    DragonCurveGenerator, HilbertCurveGenerator, KochSnowflakeGenerator, LevyCCurveGenerator,
    LSystem, LSystemGenerator, SierpinskiArrowheadGenerator,
)
from fractal_generators.generators.recursive import (
    BranchingTreeGenerator, PythagoreanTreeGenerator, RecursiveKochSnowflakeGenerator,
)
from fractal_generators.generators.attractors import (
    ChaosGameGenerator, CliffordAttractorGenerator, DeJongAttractorGenerator,
    GingerbreadmanMapGenerator, HenonMapGenerator, LorenzAttractorGenerator,
    RosslerAttractorGenerator, SierpinskiChaosGameGenerator,
)
from fractal_generators.progressive import ProgressiveRenderer
from fractal_generators.catalog import GeneratorCatalog, JULIA_PRESETS, default_catalog
from fractal_generators.acceleration.executor import get_executor, shutdown_executor
from fractal_generators.rendering.coloring import Palette
from fractal_generators.rendering.image_output import ImageConverter, to_image

__all__ = [
    "GenerationConfig",
    "get_config",
    "set_config",
    "FractalOutput",
    "OutputKind",
    "Raster",
    "Outline",
    "LineSegment",
    "PointCloud",
    "ComplexRect",
    "FractalParameters",
    "ComplexPlaneParameters",
    "JuliaParameters",
    "MultibrotParameters",
    "NewtonParameters",
    "RecursiveParameters",
    "TreeParameters",
    "AttractorParameters",
    "MapParameters",
    "IFSTransform",
    "IFSParameters",
    "BARNSLEY_FERN",
    "SIERPINSKI_TRIANGLE",
    "FractalGenerator",
    "RasterGenerator",
    "OutlineGenerator",
    "PointCloudGenerator",
    "ProgressiveGenerator",
    "MandelbrotGenerator",
    "JuliaSetGenerator",
    "TricornGenerator",
    "BurningShipGenerator",
    "MultibrotGenerator",
    "NewtonFractalGenerator",
    "LSystem",
    "LSystemGenerator",
    "KochSnowflakeGenerator",
    "SierpinskiArrowheadGenerator",
    "DragonCurveGenerator",
    "LevyCCurveGenerator",
    "HilbertCurveGenerator",
    "RecursiveKochSnowflakeGenerator",
    "PythagoreanTreeGenerator",
    "BranchingTreeGenerator",
    "LorenzAttractorGenerator",
    "RosslerAttractorGenerator",
    "HenonMapGenerator",
    "GingerbreadmanMapGenerator",
    "CliffordAttractorGenerator",
    "DeJongAttractorGenerator",
    "ChaosGameGenerator",
    "SierpinskiChaosGameGenerator",
    "ProgressiveRenderer",
    "GeneratorCatalog",
    "default_catalog",
    "JULIA_PRESETS",
    "get_executor",
    "shutdown_executor",
    "Palette",
    "ImageConverter",
    "to_image",
]
