"""Tests for progressive raster rendering."""

import threading

import pytest

from fractal_generators.config import GenerationConfig, set_config
from fractal_generators.core.parameters import ComplexPlaneParameters, JuliaParameters
from fractal_generators.generators.escape_time import JuliaSetGenerator, MandelbrotGenerator
from fractal_generators.progressive import ProgressiveRenderer, stage_size


class TestStagePlan:
    """Tests for stage sizes and validation."""

    def test_stage_size_scales_both_sides(self):
        assert stage_size(40, 20, 0.25) == (10, 5)
        assert stage_size(40, 20, 1.0) == (40, 20)

    def test_stage_size_never_below_one(self):
        assert stage_size(3, 3, 0.1) == (1, 1)

    @pytest.mark.parametrize("stages", [
        (0.5, 0.25, 1.0),
        (0.25, 0.5),
        (0.0, 1.0),
        (0.5, 0.5, 1.0),
        (),
    ])
    def test_invalid_stages_rejected(self, stages):
        with pytest.raises(ValueError):
            ProgressiveRenderer(MandelbrotGenerator(), stages)

    def test_last_stage_uses_exact_parameters(self):
        params = JuliaParameters(iterations=20, width=33, height=17)
        plan = ProgressiveRenderer(JuliaSetGenerator()).plan(params)
        assert [f for f, _ in plan] == [0.25, 0.5, 0.75, 1.0]
        assert plan[-1][1] is params
        assert plan[0][1].size == (8, 4)
        assert all(p.c == params.c for _, p in plan)

    def test_configured_stages_are_default(self):
        set_config(GenerationConfig(progressive_stages=(0.5, 1.0)))
        assert ProgressiveRenderer(MandelbrotGenerator()).stages == (0.5, 1.0)


class TestProgressiveGeneration:
    """Tests for the staged generation itself."""

    def test_final_stage_equals_generate(self):
        generator = MandelbrotGenerator()
        params = ComplexPlaneParameters(iterations=40, width=40, height=40)
        stages = []

        final = generator.generate_progressive(params, lambda raster, p: stages.append((raster, p)))

        assert [p for _, p in stages] == [0.25, 0.5, 0.75, 1.0]
        assert [r.size for r, _ in stages] == [(10, 10), (20, 20), (30, 30), (40, 40)]
        assert stages[-1][0] == generator.generate(params)
        assert final == generator.generate(params)

    def test_progress_strictly_increases(self):
        progress = []
        MandelbrotGenerator().generate_progressive(
            ComplexPlaneParameters(iterations=20, width=16, height=12),
            lambda raster, p: progress.append(p),
            stages=(0.1, 0.3, 0.6, 1.0))
        assert progress == [0.1, 0.3, 0.6, 1.0]
        assert all(a < b for a, b in zip(progress, progress[1:]))

    def test_stage_waits_for_callback(self):
        """A stage starts only after the previous callback has returned."""
        active = []
        overlaps = []

        def on_stage(raster, progress):
            if active:
                overlaps.append(progress)
            active.append(progress)
            active.pop()

        MandelbrotGenerator().generate_progressive(
            ComplexPlaneParameters(iterations=10, width=8, height=8), on_stage)
        assert overlaps == []

    def test_async_delivers_stages_then_completion(self):
        generator = MandelbrotGenerator()
        params = ComplexPlaneParameters(iterations=30, width=24, height=24)
        events = []
        done = threading.Event()

        def on_complete(raster):
            events.append(('complete', raster))
            done.set()

        future = generator.generate_progressive_async(
            params, lambda raster, p: events.append(('stage', p)), on_complete)
        result = future.result(timeout=60)

        assert done.wait(timeout=5)
        assert [e for e in events if e[0] == 'stage'] == [
            ('stage', 0.25), ('stage', 0.5), ('stage', 0.75), ('stage', 1.0)]
        assert events[-1][0] == 'complete'
        assert result == generator.generate(params)

    def test_failing_stage_callback_reaches_future(self):
        def on_stage(raster, progress):
            raise RuntimeError("display gone")

        completed = []
        future = MandelbrotGenerator().generate_progressive_async(
            ComplexPlaneParameters(iterations=10, width=8, height=8), on_stage, completed.append)

        with pytest.raises(RuntimeError, match="display gone"):
            future.result(timeout=60)
        assert completed == []
