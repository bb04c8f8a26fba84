"""
Name-based lookup of generators.

A ``GeneratorCatalog`` maps names to factories that build generators. Each
catalog is an independent instance; ``default_catalog()`` returns a fresh one
holding every built-in family.
"""

import logging
from typing import Callable, Dict, List

from .core.parameters import JuliaParameters
from .core.protocols import FractalGenerator
from .generators.attractors import (
    ChaosGameGenerator, CliffordAttractorGenerator, DeJongAttractorGenerator,
    GingerbreadmanMapGenerator, HenonMapGenerator, LorenzAttractorGenerator,
    RosslerAttractorGenerator, SierpinskiChaosGameGenerator,
)
from .generators.escape_time import (
    BurningShipGenerator, JuliaSetGenerator, MandelbrotGenerator, MultibrotGenerator,
    NewtonFractalGenerator, TricornGenerator,
)
from .generators.lsystem import (
    DragonCurveGenerator, HilbertCurveGenerator, KochSnowflakeGenerator,
    LevyCCurveGenerator, SierpinskiArrowheadGenerator,
)
from .generators.recursive import (
    BranchingTreeGenerator, PythagoreanTreeGenerator, RecursiveKochSnowflakeGenerator,
)

logger = logging.getLogger(__name__)

GeneratorFactory = Callable[[], FractalGenerator]


class GeneratorCatalog:
    """Registry of generator factories keyed by name."""

    def __init__(self):
        self._factories: Dict[str, GeneratorFactory] = {}

    def register(self, name: str, factory: GeneratorFactory) -> None:
        """
        Register a generator factory.

        Args:
            name: Unique identifier, matched case-insensitively
            factory: Callable returning a generator, usually the class itself
        """
        if not callable(factory):
            raise ValueError("Generator factory must be callable")
        self._factories[name.lower()] = factory
        logger.info(f"Registered generator: {name}")

    def create(self, name: str) -> FractalGenerator:
        """
        Build a generator by name.

        Args:
            name: Generator identifier

        Returns:
            New generator instance
        """
        factory = self._factories.get(name.lower())
        if factory is None:
            available = ', '.join(self._factories)
            raise ValueError(f"Unknown generator '{name}'. Available: {available}")
        return factory()

    def names(self) -> List[str]:
        """Registered names in registration order."""
        return list(self._factories)

    def describe(self) -> Dict[str, str]:
        """Get a dictionary of available generators and their descriptions."""
        return {name: self.create(name).description for name in self._factories}

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._factories

    def __len__(self):
        return len(self._factories)


def default_catalog() -> GeneratorCatalog:
    """Build a catalog holding every built-in generator."""
    catalog = GeneratorCatalog()
    for name, factory in (
        ('mandelbrot', MandelbrotGenerator),
        ('julia', JuliaSetGenerator),
        ('tricorn', TricornGenerator),
        ('burning_ship', BurningShipGenerator),
        ('multibrot', MultibrotGenerator),
        ('newton', NewtonFractalGenerator),
        ('koch_snowflake', KochSnowflakeGenerator),
        ('sierpinski_arrowhead', SierpinskiArrowheadGenerator),
        ('dragon_curve', DragonCurveGenerator),
        ('levy_c_curve', LevyCCurveGenerator),
        ('hilbert_curve', HilbertCurveGenerator),
        ('recursive_koch_snowflake', RecursiveKochSnowflakeGenerator),
        ('pythagorean_tree', PythagoreanTreeGenerator),
        ('branching_tree', BranchingTreeGenerator),
        ('lorenz', LorenzAttractorGenerator),
        ('rossler', RosslerAttractorGenerator),
        ('henon', HenonMapGenerator),
        ('gingerbreadman', GingerbreadmanMapGenerator),
        ('clifford', CliffordAttractorGenerator),
        ('de_jong', DeJongAttractorGenerator),
        ('chaos_game', ChaosGameGenerator),
        ('sierpinski_chaos_game', SierpinskiChaosGameGenerator),
    ):
        catalog.register(name, factory)
    return catalog


# Predefined interesting Julia set constants
JULIA_PRESETS = {
    'classic': JuliaParameters(c=complex(-0.7, 0.27015)),
    'dragon': JuliaParameters(c=complex(-0.75, 0.1)),
    'spiral': JuliaParameters(c=complex(-0.4, 0.6)),
    'dendrite': JuliaParameters(c=complex(-0.235125, 0.827215)),
    'lightning': JuliaParameters(c=complex(-0.8, 0.156)),
    'rabbit': JuliaParameters(c=complex(-0.123, 0.745)),
    'airplane': JuliaParameters(c=complex(-1.25, 0.0)),
    'san_marco': JuliaParameters(c=complex(-0.75, 0.0)),
    'siegel_disk': JuliaParameters(c=complex(-0.391, -0.587)),
}
