"""Unit tests for dielectric scattering.

Tests cover:
- The reflect-or-refract decision, including total internal reflection
- Refracted directions obey Snell's law
- Reflection frequency matches the Schlick reflectance
- Attenuation is white and every ray scatters
"""

import math

import taichi as ti


class TestWillReflect:
    """Tests for the reflect-or-refract decision."""

    def test_total_internal_reflection_always_reflects(self):
        from pathtracer.materials.dielectric import will_reflect

        result = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            # Leaving glass at 60 degrees: 1.5 * sin(60) > 1
            result[None] = will_reflect(0.5, 1.5, 0.999)

        test_kernel()
        assert result[None] == 1

    def test_normal_incidence_mostly_refracts(self):
        from pathtracer.materials.dielectric import will_reflect

        result = ti.field(dtype=ti.i32, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = will_reflect(1.0, 1.0 / 1.5, 0.5)
            # R0 is 0.04 for glass
            result[1] = will_reflect(1.0, 1.0 / 1.5, 0.01)

        test_kernel()
        assert result[0] == 0
        assert result[1] == 1


class TestScatterDielectric:
    """Tests for scatter_dielectric."""

    def test_always_scatters_with_white_attenuation(self):
        from pathtracer.core.rng import seed_stream
        from pathtracer.materials.dielectric import scatter_dielectric, vec3

        not_scattered = ti.field(dtype=ti.i32, shape=())
        min_atten = ti.field(dtype=ti.f32, shape=())
        max_len_err = ti.field(dtype=ti.f32, shape=())
        min_atten[None] = 10.0

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            for k in range(2000):
                state = seed_stream(ti.u32(3), ti.cast(k, ti.u32))
                front = k % 2
                d, a, ok, state = scatter_dielectric(1.5, vec3(0.3, -1.0, 0.1), normal, front, state)
                if ok != 1:
                    not_scattered[None] += 1
                ti.atomic_min(min_atten[None], a.min())
                ti.atomic_max(max_len_err[None], ti.abs(d.norm() - 1.0))

        test_kernel()
        assert not_scattered[None] == 0
        assert abs(min_atten[None] - 1.0) < 1e-6
        assert max_len_err[None] < 1e-4

    def test_refraction_obeys_snell(self):
        """Every refracted ray entering glass at 45 degrees bends to sin = sin45/1.5."""
        from pathtracer.core.rng import seed_stream
        from pathtracer.materials.dielectric import scatter_dielectric, vec3

        refracted = ti.field(dtype=ti.i32, shape=())
        max_err = ti.field(dtype=ti.f32, shape=())
        expected = math.sin(math.radians(45.0)) / 1.5

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            incident = vec3(1.0, -1.0, 0.0)
            for k in range(1000):
                state = seed_stream(ti.u32(5), ti.cast(k, ti.u32))
                d, _a, _ok, state = scatter_dielectric(1.5, incident, normal, 1, state)
                if d.y < 0.0:
                    refracted[None] += 1
                    ti.atomic_max(max_err[None], ti.abs(d.x - expected))

        test_kernel()
        assert refracted[None] > 800
        assert max_err[None] < 1e-4

    def test_reflection_rate_matches_schlick(self):
        from pathtracer.core.rng import seed_stream
        from pathtracer.materials.dielectric import scatter_dielectric, vec3

        reflected = ti.field(dtype=ti.i32, shape=())
        n = 20000
        cos_theta = 0.2
        sin_theta = math.sqrt(1.0 - cos_theta * cos_theta)
        ratio = 1.0 / 1.5
        r0 = ((1.0 - ratio) / (1.0 + ratio)) ** 2
        expected = r0 + (1.0 - r0) * (1.0 - cos_theta) ** 5

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            incident = vec3(sin_theta, -cos_theta, 0.0)
            for k in range(n):
                state = seed_stream(ti.u32(9), ti.cast(k, ti.u32))
                d, _a, _ok, state = scatter_dielectric(1.5, incident, normal, 1, state)
                if d.y > 0.0:
                    reflected[None] += 1

        test_kernel()
        assert abs(reflected[None] / n - expected) < 0.02

    def test_total_internal_reflection_from_inside(self):
        """Leaving glass at a steep angle never refracts."""
        from pathtracer.core.rng import seed_stream
        from pathtracer.materials.dielectric import scatter_dielectric, vec3

        escaped = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            # Normal faces the incoming ray, which travels outward through +y
            normal = vec3(0.0, -1.0, 0.0)
            incident = vec3(0.9, 0.3, 0.0)
            for k in range(1000):
                state = seed_stream(ti.u32(10), ti.cast(k, ti.u32))
                d, _a, _ok, state = scatter_dielectric(1.5, incident, normal, 0, state)
                if d.y > 0.0:
                    escaped[None] += 1

        test_kernel()
        assert escaped[None] == 0

    def test_matched_index_passes_straight_through(self):
        from pathtracer.core.rng import seed_stream
        from pathtracer.materials.dielectric import scatter_dielectric, vec3

        max_err = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            incident = vec3(0.6, -0.8, 0.0)
            for k in range(500):
                state = seed_stream(ti.u32(11), ti.cast(k, ti.u32))
                d, _a, _ok, state = scatter_dielectric(1.0, incident, normal, 1, state)
                # Schlick still reflects a tiny fraction at this angle
                if d.y < 0.0:
                    ti.atomic_max(max_err[None], (d - incident).norm())

        test_kernel()
        assert max_err[None] < 1e-4
