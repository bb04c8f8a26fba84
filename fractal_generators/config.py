"""
Framework configuration.

Holds the settings that shape how generations are executed rather than what
they compute: worker pool size, progressive stage schedule, progress
granularity and the outline size cap.
"""

import os
import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

ENV_PREFIX = 'FRACTAL_'


@dataclass
class GenerationConfig:
    """Configuration for fractal generation."""

    # Worker pool used by async and progressive generation (None = CPU based)
    max_workers: Optional[int] = None

    # Fractions of the requested size rendered by progressive generation
    progressive_stages: Tuple[float, ...] = (0.25, 0.5, 0.75, 1.0)

    # Number of row bands an escape-time raster reports progress over
    raster_bands: int = 8

    # Upper bound on segments an outline generator may emit
    max_outline_segments: int = 300_000

    def validate(self):
        """Validate configuration parameters."""
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")

        validate_stages(self.progressive_stages)

        if self.raster_bands < 1:
            raise ValueError("raster_bands must be >= 1")

        if self.max_outline_segments < 1:
            raise ValueError("max_outline_segments must be >= 1")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GenerationConfig':
        """Create configuration from dictionary."""
        data = dict(data)
        if 'progressive_stages' in data:
            data['progressive_stages'] = tuple(float(s) for s in data['progressive_stages'])
        config = cls(**data)
        config.validate()
        return config

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> 'GenerationConfig':
        """
        Create configuration from ``FRACTAL_*`` environment variables.

        Recognized variables: FRACTAL_MAX_WORKERS, FRACTAL_PROGRESSIVE_STAGES
        (comma separated), FRACTAL_RASTER_BANDS and FRACTAL_MAX_OUTLINE_SEGMENTS.
        """
        environ = os.environ if environ is None else environ
        data: Dict[str, Any] = {}

        workers = environ.get(ENV_PREFIX + 'MAX_WORKERS')
        if workers:
            data['max_workers'] = int(workers)

        stages = environ.get(ENV_PREFIX + 'PROGRESSIVE_STAGES')
        if stages:
            data['progressive_stages'] = tuple(float(s) for s in stages.split(',') if s.strip())

        bands = environ.get(ENV_PREFIX + 'RASTER_BANDS')
        if bands:
            data['raster_bands'] = int(bands)

        segments = environ.get(ENV_PREFIX + 'MAX_OUTLINE_SEGMENTS')
        if segments:
            data['max_outline_segments'] = int(segments)

        if data:
            logger.debug(f"Configuration overrides from environment: {data}")
        return cls.from_dict(data)


def validate_stages(stages: Tuple[float, ...]) -> None:
    """Check that progressive stages strictly increase within (0, 1] and end at 1."""
    if not stages:
        raise ValueError("progressive_stages must not be empty")
    previous = 0.0
    for stage in stages:
        if not previous < stage <= 1.0:
            raise ValueError("progressive_stages must strictly increase within (0, 1]")
        previous = stage
    if stages[-1] != 1.0:
        raise ValueError("progressive_stages must end at 1.0")


_active_config: Optional[GenerationConfig] = None


def get_config() -> GenerationConfig:
    """Get the active configuration, loading it from the environment on first use."""
    global _active_config
    if _active_config is None:
        _active_config = GenerationConfig.from_env()
    return _active_config


def set_config(config: Optional[GenerationConfig]) -> None:
    """Replace the active configuration; None reloads it from the environment lazily."""
    global _active_config
    if config is not None:
        config.validate()
    _active_config = config
