"""Tests for the dynamical-system point-cloud families."""

import numpy as np
import pytest

from fractal_generators.core.output import OutputKind, PointCloud
from fractal_generators.core.parameters import (
    BARNSLEY_FERN, SIERPINSKI_TRIANGLE, AttractorParameters, IFSParameters, IFSTransform,
    MapParameters,
)
from fractal_generators.generators.attractors import (
    ChaosGameGenerator, CliffordAttractorGenerator, DeJongAttractorGenerator,
    DynamicalSystemGenerator, GingerbreadmanMapGenerator, HenonMapGenerator,
    LorenzAttractorGenerator, RosslerAttractorGenerator, SierpinskiChaosGameGenerator,
    attractor_bounds,
)

ALL_FAMILIES = [
    LorenzAttractorGenerator,
    RosslerAttractorGenerator,
    HenonMapGenerator,
    GingerbreadmanMapGenerator,
    CliffordAttractorGenerator,
    DeJongAttractorGenerator,
    ChaosGameGenerator,
    SierpinskiChaosGameGenerator,
]


def small_parameters(generator, iterations, width=200, height=150):
    """Family defaults with a smaller run and output."""
    params = generator.default_parameters()
    return type(params).from_dict({**params.to_dict(), 'iterations': iterations,
                                   'width': width, 'height': height})


class TestPointCloudGenerators:
    """Behavior shared by every point family."""

    @pytest.mark.parametrize("generator_cls", ALL_FAMILIES)
    def test_points_in_bounds_and_bounded_count(self, generator_cls):
        generator = generator_cls()
        cloud = generator.generate(small_parameters(generator, 3000, width=400, height=300))

        assert isinstance(cloud, PointCloud)
        assert cloud.kind is OutputKind.POINT_CLOUD
        assert generator.output_kind is OutputKind.POINT_CLOUD
        assert 0 < len(cloud) <= 3000
        assert np.all(cloud.points[:, 0] >= 0) and np.all(cloud.points[:, 0] < 400)
        assert np.all(cloud.points[:, 1] >= 0) and np.all(cloud.points[:, 1] < 300)

    @pytest.mark.parametrize("generator_cls", ALL_FAMILIES)
    def test_zero_iterations_is_empty(self, generator_cls):
        generator = generator_cls()
        cloud = generator.generate(small_parameters(generator, 0))
        assert len(cloud) == 0
        assert cloud.points.shape == (0, 2)

    def test_gingerbreadman_zero_iterations(self):
        cloud = GingerbreadmanMapGenerator().generate(MapParameters(iterations=0))
        assert len(cloud) == 0

    @pytest.mark.parametrize("generator_cls", ALL_FAMILIES[:6])
    def test_deterministic_systems_repeat(self, generator_cls):
        generator = generator_cls()
        params = small_parameters(generator, 500)
        assert generator.generate(params) == generator.generate(params)

    def test_trajectories_are_ordered(self):
        assert LorenzAttractorGenerator().generate(small_parameters(LorenzAttractorGenerator(), 10)).ordered
        assert not ChaosGameGenerator().generate(IFSParameters(iterations=10, seed=1)).ordered

    def test_projection_drops_out_of_bounds(self):
        u = np.array([0.0, 10.0, -10.0, 0.5])
        v = np.array([0.0, 0.0, 0.0, 0.5])
        points = DynamicalSystemGenerator.project(u, v, 10.0, (50.0, 50.0), 100, 100)
        assert points.tolist() == [[50.0, 50.0], [55.0, 55.0]]

    def test_right_edge_is_excluded(self):
        points = DynamicalSystemGenerator.project(
            np.array([5.0]), np.array([0.0]), 10.0, (50.0, 50.0), 100, 100)
        assert len(points) == 0

    def test_progress_stages(self):
        progress = []
        future = LorenzAttractorGenerator().generate_async(
            small_parameters(LorenzAttractorGenerator(), 100), on_progress=progress.append)
        future.result(timeout=60)
        assert progress == pytest.approx([0.1, 0.8, 1.0])


class TestContinuousAttractors:
    """Tests for the Euler-integrated systems."""

    def test_lorenz_fills_centre_region(self):
        cloud = LorenzAttractorGenerator().generate(AttractorParameters(iterations=5000))
        xs, ys = cloud.points[:, 0], cloud.points[:, 1]
        assert xs.min() < 300 < xs.max()
        assert ys.min() < 300 < ys.max()

    def test_constants_override_defaults(self):
        generator = LorenzAttractorGenerator()
        default = generator.generate(AttractorParameters(iterations=500))
        changed = generator.generate(AttractorParameters(iterations=500, constants={'rho': 20.0}))
        assert default != changed

    def test_rossler_default_scale(self):
        assert RosslerAttractorGenerator().default_parameters().scale == 30.0

    def test_warmup_is_discarded(self):
        """The first recorded point is the state after warm-up plus one step."""
        generator = LorenzAttractorGenerator()
        params = AttractorParameters(iterations=1, scale=1.0, width=2000, height=2000)
        constants = generator.constants(params)
        expected = generator._trajectory(params.initial_conditions, 101, params.dt, constants)[-1]

        cloud = generator.generate(params)
        assert cloud.points[0, 0] == pytest.approx(expected[0] + 1000)
        assert cloud.points[0, 1] == pytest.approx(-(expected[2] - 25.0) + 1000)


class TestDiscreteMaps:
    """Tests for the closed-form maps."""

    def test_henon_fixed_scale(self):
        assert HenonMapGenerator().default_scale(600, 600) == 200.0

    def test_gingerbreadman_orbit(self):
        generator = GingerbreadmanMapGenerator()
        states = generator._iterate((0.5, 0.25), 2, {})
        assert states.tolist() == [[1.25, 0.5], [1.75, 1.25]]

    def test_explicit_scale(self):
        generator = CliffordAttractorGenerator()
        wide = generator.generate(MapParameters(iterations=2000, scale=150.0))
        narrow = generator.generate(MapParameters(iterations=2000, scale=20.0))
        span = lambda cloud: np.ptp(cloud.points[:, 0])
        assert span(wide) > span(narrow)

    def test_de_jong_constants(self):
        generator = DeJongAttractorGenerator()
        merged = generator.constants(MapParameters(constants={'a': 1.0}))
        assert merged == {'a': 1.0, 'b': -2.53, 'c': 1.61, 'd': -0.33}


class TestChaosGame:
    """Tests for the chaos game."""

    def test_seeded_output_is_reproducible(self):
        generator = ChaosGameGenerator()
        params = IFSParameters(iterations=2000, seed=42)
        assert generator.generate(params) == generator.generate(params)

    def test_different_seeds_differ(self):
        generator = ChaosGameGenerator()
        first = generator.generate(IFSParameters(iterations=2000, seed=1))
        second = generator.generate(IFSParameters(iterations=2000, seed=2))
        assert first != second

    def test_fitted_sample_keeps_every_point(self):
        cloud = ChaosGameGenerator().generate(IFSParameters(iterations=5000, seed=3))
        assert len(cloud) == 5000

    def test_fit_leaves_margin(self):
        cloud = ChaosGameGenerator().generate(
            IFSParameters(iterations=5000, width=400, height=400, seed=3))
        ys = cloud.points[:, 1]
        assert ys.min() >= 400 * 0.05 - 1.0
        assert ys.max() <= 400 * 0.95 + 1.0

    def test_framing_does_not_depend_on_sample(self):
        generator = ChaosGameGenerator()
        params = IFSParameters(width=400, height=400)
        alone = generator._to_pixels(np.array([[0.0, 5.0]]), params)
        with_others = generator._to_pixels(np.array([[0.0, 5.0], [2.0, 9.0], [-1.5, 1.0]]), params)
        assert with_others[0].tolist() == alone[0].tolist()

    def test_states_outside_frame_are_dropped(self):
        points = ChaosGameGenerator()._to_pixels(
            np.array([[0.0, 5.0], [100.0, 100.0]]), IFSParameters(width=400, height=400))
        assert len(points) == 1

    def test_sierpinski_bounds(self):
        bounds = attractor_bounds(SIERPINSKI_TRIANGLE)
        assert bounds == pytest.approx((0.0, 1.0, 0.0, 0.866))

    def test_fern_bounds_contain_stem_and_tip(self):
        xmin, xmax, ymin, ymax = attractor_bounds(BARNSLEY_FERN)
        assert ymin == pytest.approx(0.0, abs=1e-12)
        assert 9.9 < ymax < 10.1
        assert xmin < 0 < xmax

    def test_unused_transform_ignored_by_bounds(self):
        far = IFSTransform(0.0, ((0.5, 0.0), (0.0, 0.5)), (50.0, 50.0))
        assert attractor_bounds(SIERPINSKI_TRIANGLE + (far,)) == attractor_bounds(SIERPINSKI_TRIANGLE)

    def test_probabilities_are_normalized(self):
        scaled = tuple(type(t)(t.probability * 10, t.matrix, t.translation)
                       for t in SIERPINSKI_TRIANGLE)
        generator = ChaosGameGenerator()
        a = generator.generate(IFSParameters(iterations=1000, transforms=SIERPINSKI_TRIANGLE, seed=5))
        b = generator.generate(IFSParameters(iterations=1000, transforms=scaled, seed=5))
        assert np.allclose(a.points, b.points)

    def test_sierpinski_preset(self):
        params = SierpinskiChaosGameGenerator().default_parameters()
        assert params.transforms == SIERPINSKI_TRIANGLE
