"""Unit tests for the path tracing integrator.

Tests cover:
- Background gradient for escaping rays
- Depth limits: zero depth is black, segments never exceed max_depth
- Analytic single-bounce cases under a uniform sky
- Row rendering: gamma, orientation and determinism
"""

import math

import numpy as np
import pytest


def _upload(scene):
    from pathtracer.scene.intersection import upload_scene

    upload_scene(scene)


def _single(material, center=(0.0, 0.0, -1.0), radius=0.5):
    from pathtracer.scene.manager import Scene

    scene = Scene()
    scene.add_sphere(center, radius, material)
    return scene


class TestBackground:
    """Tests for rays that hit nothing."""

    def test_empty_scene_returns_gradient(self):
        from pathtracer.config import DEFAULT_BACKGROUND_BOTTOM, DEFAULT_BACKGROUND_TOP
        from pathtracer.core.integrator import trace_single_ray

        direction = (0.0, 0.6, -0.8)
        a = 0.5 * (0.6 + 1.0)
        expected = [
            (1.0 - a) * b + a * t for b, t in zip(DEFAULT_BACKGROUND_BOTTOM, DEFAULT_BACKGROUND_TOP)
        ]

        color = trace_single_ray((0.0, 0.0, 0.0), direction, max_depth=10)
        np.testing.assert_allclose(color, expected, atol=1e-5)

    def test_straight_up_and_down(self):
        from pathtracer.config import DEFAULT_BACKGROUND_BOTTOM, DEFAULT_BACKGROUND_TOP
        from pathtracer.core.integrator import trace_single_ray

        up = trace_single_ray((0.0, 0.0, 0.0), (0.0, 5.0, 0.0), max_depth=1)
        down = trace_single_ray((0.0, 0.0, 0.0), (0.0, -1.0, 0.0), max_depth=1)
        np.testing.assert_allclose(up, DEFAULT_BACKGROUND_TOP, atol=1e-5)
        np.testing.assert_allclose(down, DEFAULT_BACKGROUND_BOTTOM, atol=1e-5)

    def test_background_independent_of_depth(self):
        from pathtracer.core.integrator import trace_single_ray

        shallow = trace_single_ray((0.0, 0.0, 0.0), (0.3, 0.2, -1.0), max_depth=1)
        deep = trace_single_ray((0.0, 0.0, 0.0), (0.3, 0.2, -1.0), max_depth=50)
        np.testing.assert_allclose(shallow, deep, atol=1e-7)

    def test_custom_background(self):
        from pathtracer.core.integrator import setup_background, trace_single_ray

        setup_background((1.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        color = trace_single_ray((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), max_depth=5)
        np.testing.assert_allclose(color, (0.5, 0.0, 0.5), atol=1e-5)

    def test_reset_background(self):
        from pathtracer.config import DEFAULT_BACKGROUND_TOP
        from pathtracer.core.integrator import reset_background, setup_background, trace_single_ray

        setup_background((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
        reset_background()
        color = trace_single_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), max_depth=1)
        np.testing.assert_allclose(color, DEFAULT_BACKGROUND_TOP, atol=1e-5)


class TestDepthLimit:
    """Tests for max_depth handling."""

    def test_zero_depth_is_black(self):
        from pathtracer.core.integrator import trace_single_ray

        assert trace_single_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), max_depth=0) == (0.0, 0.0, 0.0)

    def test_negative_depth_is_black(self):
        from pathtracer.core.integrator import count_path_segments, trace_single_ray

        assert trace_single_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), max_depth=-3) == (0.0, 0.0, 0.0)
        assert count_path_segments((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), max_depth=-3) == 0

    def test_depth_one_hit_is_black(self):
        """With one segment, a ray that hits a surface has no segment left to escape."""
        from pathtracer.core.integrator import trace_single_ray
        from pathtracer.materials.base import Lambertian

        _upload(_single(Lambertian((0.9, 0.9, 0.9))))
        color = trace_single_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=1)
        assert color == (0.0, 0.0, 0.0)

    @pytest.mark.parametrize("max_depth", [1, 2, 5, 20])
    def test_segments_bounded(self, max_depth):
        """Inside a closed diffuse sphere the path never escapes and uses every segment."""
        from pathtracer.core.integrator import count_path_segments, trace_single_ray
        from pathtracer.materials.base import Lambertian

        _upload(_single(Lambertian((0.5, 0.5, 0.5)), center=(0.0, 0.0, 0.0), radius=5.0))
        for seed in range(5):
            segments = count_path_segments((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth, seed)
            assert segments == max_depth
        assert trace_single_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth) == (0.0, 0.0, 0.0)

    def test_escaping_path_stops_early(self):
        from pathtracer.core.integrator import count_path_segments

        assert count_path_segments((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), max_depth=50) == 1


class TestSurfaceInteraction:
    """Analytic cases under a uniform white sky."""

    @pytest.fixture(autouse=True)
    def uniform_sky(self):
        from pathtracer.core.integrator import setup_background

        setup_background((1.0, 1.0, 1.0), (1.0, 1.0, 1.0))

    def test_diffuse_convex_sphere_single_bounce(self):
        """A scattered ray leaves a convex sphere at once, so the color is the albedo."""
        from pathtracer.core.integrator import count_path_segments, trace_single_ray
        from pathtracer.materials.base import Lambertian

        _upload(_single(Lambertian((0.7, 0.3, 0.3))))
        for seed in range(10):
            color = trace_single_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=10, seed=seed)
            np.testing.assert_allclose(color, (0.7, 0.3, 0.3), atol=1e-5)
            assert count_path_segments((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 10, seed) == 2

    def test_mirror_sphere(self):
        from pathtracer.core.integrator import trace_single_ray
        from pathtracer.materials.base import Metal

        _upload(_single(Metal((0.8, 0.6, 0.2), 0.0)))
        color = trace_single_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=10)
        np.testing.assert_allclose(color, (0.8, 0.6, 0.2), atol=1e-5)

    def test_mirror_bounces_multiply(self):
        """Each mirror bounce multiplies in its albedo."""
        from pathtracer.core.integrator import trace_single_ray
        from pathtracer.materials.base import Metal
        from pathtracer.scene.manager import Scene

        scene = Scene()
        # Ground mirror whose top is at (0, -0.5, 0)
        scene.add_sphere((0.0, -100.5, 0.0), 100.0, Metal((0.5, 0.5, 0.5), 0.0))
        # Struck head-on after the first bounce, sending the ray straight back
        scene.add_sphere((1.5, 1.0, 0.0), 0.5, Metal((0.8, 0.8, 0.8), 0.0))
        _upload(scene)

        # ground -> small mirror -> ground -> sky
        color = trace_single_ray((-0.5, 0.0, 0.0), (1.0, -1.0, 0.0), max_depth=10)
        np.testing.assert_allclose(color, (0.2, 0.2, 0.2), atol=1e-4)

    def test_clear_glass_is_lossless(self):
        from pathtracer.core.integrator import trace_single_ray
        from pathtracer.materials.base import Dielectric

        _upload(_single(Dielectric(1.5)))
        for seed in range(10):
            color = trace_single_ray((0.0, 0.0, 0.0), (0.05, 0.02, -1.0), max_depth=50, seed=seed)
            np.testing.assert_allclose(color, (1.0, 1.0, 1.0), atol=1e-5)

    def test_nearest_material_wins(self):
        from pathtracer.core.integrator import trace_single_ray
        from pathtracer.materials.base import Lambertian
        from pathtracer.scene.manager import Scene

        scene = Scene()
        scene.add_sphere((0.0, 0.0, -5.0), 0.5, Lambertian((0.0, 1.0, 0.0)))
        scene.add_sphere((0.0, 0.0, -2.0), 0.5, Lambertian((1.0, 0.0, 0.0)))
        _upload(scene)

        color = trace_single_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=2)
        np.testing.assert_allclose(color, (1.0, 0.0, 0.0), atol=1e-5)


class TestRenderRows:
    """Tests for the row band kernel."""

    @pytest.fixture
    def pinhole(self):
        from pathtracer.camera.rays import setup_camera
        from pathtracer.camera.thin_lens import ThinLensCamera

        setup_camera(
            ThinLensCamera(
                lookfrom=(0.0, 0.0, 0.0),
                lookat=(0.0, 0.0, -1.0),
                vup=(0.0, 1.0, 0.0),
                vfov=90.0,
                aspect_ratio=1.0,
            )
        )

    def test_uniform_sky_gamma(self, pinhole):
        """A sky of 0.25 everywhere maps to sqrt(0.25) = 0.5 in every pixel."""
        from pathtracer.core.integrator import render_rows, setup_background

        setup_background((0.25, 0.25, 0.25), (0.25, 0.25, 0.25))
        rows = render_rows(0, 4, width=4, height=4, samples_per_pixel=2, max_depth=5)

        assert rows.shape == (4, 4, 3)
        assert rows.dtype == np.float32
        np.testing.assert_allclose(rows, 0.5, atol=1e-5)

    def test_bright_sky_is_clamped(self, pinhole):
        from pathtracer.core.integrator import render_rows, setup_background

        setup_background((4.0, 4.0, 4.0), (4.0, 4.0, 4.0))
        rows = render_rows(0, 2, width=2, height=2, samples_per_pixel=1, max_depth=5)
        np.testing.assert_allclose(rows, 1.0, atol=1e-6)

    def test_row_zero_is_top(self, pinhole):
        """The top row looks up into the sky, so it is closer to the top color."""
        from pathtracer.core.integrator import render_rows, setup_background

        setup_background((1.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        rows = render_rows(0, 8, width=8, height=8, samples_per_pixel=4, max_depth=5)

        assert rows[0, :, 2].mean() > rows[7, :, 2].mean()
        assert rows[0, :, 0].mean() < rows[7, :, 0].mean()

    def test_band_matches_full_render(self, pinhole, single_sphere_scene):
        from pathtracer.core.integrator import render_rows

        scene, _camera = single_sphere_scene
        _upload(scene)

        full = render_rows(0, 6, width=6, height=6, samples_per_pixel=4, max_depth=5, seed=3)
        band = render_rows(2, 5, width=6, height=6, samples_per_pixel=4, max_depth=5, seed=3)
        np.testing.assert_array_equal(band, full[2:5])

    def test_seed_changes_noise(self, pinhole, single_sphere_scene):
        from pathtracer.core.integrator import render_rows

        scene, _camera = single_sphere_scene
        _upload(scene)

        a = render_rows(0, 4, width=4, height=4, samples_per_pixel=2, max_depth=5, seed=1)
        b = render_rows(0, 4, width=4, height=4, samples_per_pixel=2, max_depth=5, seed=2)
        assert not np.array_equal(a, b)

    def test_sphere_visible_in_center(self, pinhole, single_sphere_scene):
        """The red sphere fills the middle of the frame."""
        from pathtracer.core.integrator import render_rows

        scene, _camera = single_sphere_scene
        _upload(scene)

        rows = render_rows(0, 8, width=8, height=8, samples_per_pixel=16, max_depth=10)
        center = rows[3:5, 3:5].mean(axis=(0, 1))
        assert center[0] > center[1]
        assert center[0] > center[2]
        assert not math.isnan(float(rows.sum()))
