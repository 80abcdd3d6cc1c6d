"""Integration tests for the end-to-end rendering pipeline.

This module tests the complete pipeline from scene creation through final
image output. It verifies that all components work together and that the
Monte Carlo estimate converges as the sample count grows.

Tests are kept fast (tiny images) while still exercising the full pipeline.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

from __future__ import annotations

import numpy as np
import pytest


def _render(scene, camera, width, height, spp, depth=10, seed=0):
    from pathtracer import api

    return api.render(scene, camera, width, height, samples_per_pixel=spp, max_depth=depth, seed=seed)


class TestPresetScenes:
    """End-to-end renders of the preset scenes."""

    @pytest.mark.parametrize("name", ["single", "three", "random"])
    def test_preset_renders_finite_pixels(self, name) -> None:
        from pathtracer.scene.presets import PRESETS

        scene, camera = PRESETS[name]()
        width = 12
        height = max(1, int(width / camera.aspect_ratio))
        image = _render(scene, camera, width, height, spp=2, depth=8)

        raw = image.raw
        assert np.all(np.isfinite(raw))
        assert raw.min() >= 0.0
        assert raw.max() <= 1.0
        # Something other than black was rendered
        assert raw.mean() > 0.05

    def test_render_to_png(self, tmp_path) -> None:
        from PIL import Image as PILImage

        from pathtracer.output.export import save_png
        from pathtracer.scene.presets import create_three_spheres_scene

        scene, camera = create_three_spheres_scene(aspect_ratio=2.0)
        image = _render(scene, camera, 16, 8, spp=2, depth=5)

        path = tmp_path / "three.png"
        save_png(image, path)
        with PILImage.open(path) as loaded:
            assert loaded.size == (16, 8)
            np.testing.assert_array_equal(np.array(loaded), image.to_uint8())

    def test_scene_dict_round_trip_renders_identically(self) -> None:
        from pathtracer.scene.manager import Scene
        from pathtracer.scene.presets import create_three_spheres_scene

        scene, camera = create_three_spheres_scene(aspect_ratio=1.0)
        restored = Scene.from_dict(scene.to_dict())

        a = _render(scene, camera, 6, 6, spp=3, seed=4)
        b = _render(restored, camera, 6, 6, spp=3, seed=4)
        np.testing.assert_array_equal(a.raw, b.raw)

    def test_depth_of_field_changes_image(self) -> None:
        from pathtracer.scene.presets import create_three_spheres_scene

        scene, pinhole = create_three_spheres_scene(aspect_ratio=1.0, aperture=0.0)
        _scene, lens = create_three_spheres_scene(aspect_ratio=1.0, aperture=1.0)

        sharp = _render(scene, pinhole, 8, 8, spp=4, seed=2)
        blurred = _render(scene, lens, 8, 8, spp=4, seed=2)
        assert not np.array_equal(sharp.raw, blurred.raw)


class TestConvergence:
    """Monte Carlo convergence of a diffuse sphere lit only by the sky."""

    def test_mean_converges_with_samples(self, single_sphere_scene) -> None:
        scene, camera = single_sphere_scene

        coarse = _render(scene, camera, 8, 8, spp=10, seed=1)
        fine = _render(scene, camera, 8, 8, spp=1000, seed=1)

        assert abs(coarse.raw.mean() - fine.raw.mean()) < 0.05

    def test_high_sample_renders_agree_across_seeds(self, single_sphere_scene) -> None:
        scene, camera = single_sphere_scene

        a = _render(scene, camera, 8, 8, spp=1000, seed=1)
        b = _render(scene, camera, 8, 8, spp=1000, seed=2)

        assert abs(a.raw.mean() - b.raw.mean()) < 0.01
        # Per channel as well
        np.testing.assert_allclose(
            a.raw.mean(axis=(0, 1)), b.raw.mean(axis=(0, 1)), atol=0.01
        )

    def test_noise_drops_with_samples(self, single_sphere_scene) -> None:
        from pathtracer.output.export import compute_rmse

        scene, camera = single_sphere_scene
        reference = _render(scene, camera, 8, 8, spp=1000, seed=7)
        noisy = _render(scene, camera, 8, 8, spp=4, seed=8)
        cleaner = _render(scene, camera, 8, 8, spp=256, seed=9)

        assert compute_rmse(cleaner, reference) < compute_rmse(noisy, reference)
