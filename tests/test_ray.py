"""Unit tests for ray and vector utilities.

Tests cover:
- Ray construction and evaluation
- Dot, length, normalization
- Linear interpolation and clamping
- Reflection
- Unit-length checks
- Random sampling in the unit ball
"""

import math

import taichi as ti


class TestRay:
    """Tests for the Ray dataclass."""

    def test_ray_at(self):
        """Test point evaluation along a ray."""
        from skytrace.core.ray import make_ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 2.0, 3.0), vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 2.5)

        test_kernel()
        p = result[None]
        assert abs(p[0] - 1.0) < 1e-6
        assert abs(p[1] - 2.0) < 1e-6
        assert abs(p[2] - 0.5) < 1e-6


class TestVectorMath:
    """Tests for basic vector operations."""

    def test_dot_and_length(self):
        from skytrace.core.ray import dot, length, length_squared, vec3

        results = ti.field(dtype=ti.f32, shape=3)

        @ti.kernel
        def test_kernel():
            v = vec3(3.0, 4.0, 0.0)
            results[0] = dot(v, vec3(1.0, 1.0, 1.0))
            results[1] = length(v)
            results[2] = length_squared(v)

        test_kernel()
        assert abs(results[0] - 7.0) < 1e-6
        assert abs(results[1] - 5.0) < 1e-6
        assert abs(results[2] - 25.0) < 1e-6

    def test_normalize_produces_unit_vector(self):
        from skytrace.core.ray import is_normalized, normalize, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())
        unit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            n = normalize(vec3(0.0, 3.0, 4.0))
            result[None] = n
            unit[None] = is_normalized(n)

        test_kernel()
        n = result[None]
        assert abs(n[1] - 0.6) < 1e-6
        assert abs(n[2] - 0.8) < 1e-6
        assert unit[None] == 1

    def test_is_normalized_rejects_long_vector(self):
        from skytrace.core.ray import is_normalized, vec3

        unit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            unit[None] = is_normalized(vec3(0.0, 0.0, 1.01))

        test_kernel()
        assert unit[None] == 0

    def test_lerp_endpoints_and_midpoint(self):
        from skytrace.core.ray import lerp, vec3

        results = ti.Vector.field(3, dtype=ti.f32, shape=3)

        @ti.kernel
        def test_kernel():
            a = vec3(1.0, 1.0, 1.0)
            b = vec3(0.5, 0.7, 1.0)
            results[0] = lerp(a, b, 0.0)
            results[1] = lerp(a, b, 1.0)
            results[2] = lerp(a, b, 0.5)

        test_kernel()
        assert list(results[0].to_numpy()) == [1.0, 1.0, 1.0]
        assert abs(results[1][1] - 0.7) < 1e-6
        assert abs(results[2][0] - 0.75) < 1e-6
        assert abs(results[2][1] - 0.85) < 1e-6

    def test_clamp_color(self):
        from skytrace.core.ray import clamp_color, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = clamp_color(vec3(-0.5, 0.25, 3.0), 0.0, 1.0)

        test_kernel()
        c = result[None]
        assert c[0] == 0.0
        assert abs(c[1] - 0.25) < 1e-6
        assert c[2] == 1.0


class TestReflect:
    """Tests for mirror reflection."""

    def test_reflect_head_on(self):
        from skytrace.core.ray import reflect, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(0.0, 0.0, -1.0), vec3(0.0, 0.0, 1.0))

        test_kernel()
        assert list(result[None].to_numpy()) == [0.0, 0.0, 1.0]

    def test_reflect_45_degrees(self):
        from skytrace.core.ray import reflect, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            inv_sqrt2 = 1.0 / ti.sqrt(2.0)
            result[None] = reflect(vec3(inv_sqrt2, -inv_sqrt2, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        d = result[None]
        inv_sqrt2 = 1.0 / math.sqrt(2.0)
        assert abs(d[0] - inv_sqrt2) < 1e-5
        assert abs(d[1] - inv_sqrt2) < 1e-5
        assert abs(d[2]) < 1e-6


class TestRandomSampling:
    """Tests for unit ball and unit vector sampling."""

    def test_random_in_unit_sphere_is_inside(self):
        from skytrace.core.ray import length_squared, random_in_unit_sphere
        from skytrace.core.rng import seed_pixel

        n = 2000
        lengths = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                rng = seed_pixel(ti.u32(11), ti.cast(i, ti.u32))
                p, rng = random_in_unit_sphere(rng)
                lengths[i] = length_squared(p)

        test_kernel()
        values = lengths.to_numpy()
        assert (values < 1.0).all()
        # Samples fill the ball rather than collapsing to the origin
        assert values.mean() > 0.4

    def test_random_unit_vector_is_unit_length(self):
        from skytrace.core.ray import random_unit_vector
        from skytrace.core.rng import seed_pixel

        n = 2000
        vectors = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                rng = seed_pixel(ti.u32(5), ti.cast(i, ti.u32))
                v, rng = random_unit_vector(rng)
                vectors[i] = v

        test_kernel()
        values = vectors.to_numpy()
        norms = (values**2).sum(axis=1) ** 0.5
        assert abs(norms - 1.0).max() < 1e-4
        # Uniform on the sphere: the mean direction is close to zero
        assert abs(values.mean(axis=0)).max() < 0.1

    def test_sampling_is_deterministic_for_a_state(self):
        from skytrace.core.ray import random_unit_vector

        results = ti.Vector.field(3, dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            a, _ = random_unit_vector(ti.u32(1234))
            b, _ = random_unit_vector(ti.u32(1234))
            results[0] = a
            results[1] = b

        test_kernel()
        assert list(results[0].to_numpy()) == list(results[1].to_numpy())
