"""Unit tests for the ray module.

Tests cover:
- Ray dataclass and ray_at function
- Vector utility functions (dot, cross, normalize, length, reflect, refract)
- Schlick reflectance and near-zero detection
"""

import math

import taichi as ti


class TestRayBasics:
    """Tests for Ray dataclass and basic operations."""

    def test_ray_at_origin(self):
        """Test ray_at returns origin when t=0."""
        from weekend_raytracer.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 2.0) < 1e-6
        assert abs(r[2] - 3.0) < 1e-6

    def test_ray_at_positive_t(self):
        """Test ray_at scales an unnormalized direction."""
        from weekend_raytracer.core.ray import ray_at, make_ray, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 0.0, 0.0), vec3(0.0, 2.0, 0.0))
            result[None] = ray_at(ray, 2.5)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 5.0) < 1e-6
        assert abs(r[2]) < 1e-6


class TestVectorUtilities:
    """Tests for vector helper functions."""

    def test_length_and_dot(self):
        from weekend_raytracer.core.ray import dot, length, length_squared, vec3

        result = ti.field(dtype=ti.f32, shape=3)

        @ti.kernel
        def test_kernel():
            v = vec3(3.0, 4.0, 0.0)
            result[0] = length(v)
            result[1] = length_squared(v)
            result[2] = dot(v, vec3(1.0, 1.0, 1.0))

        test_kernel()
        assert abs(result[0] - 5.0) < 1e-6
        assert abs(result[1] - 25.0) < 1e-6
        assert abs(result[2] - 7.0) < 1e-6

    def test_cross_product(self):
        """Test x cross y = z."""
        from weekend_raytracer.core.ray import cross, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = cross(vec3(1.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        assert abs(r[0]) < 1e-6
        assert abs(r[1]) < 1e-6
        assert abs(r[2] - 1.0) < 1e-6

    def test_normalize(self):
        from weekend_raytracer.core.ray import normalize, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = normalize(vec3(0.0, 0.0, -7.0))

        test_kernel()
        r = result[None]
        assert abs(r[2] + 1.0) < 1e-6

    def test_reflect(self):
        """A 45 degree ray bouncing off the floor keeps x and flips y."""
        from weekend_raytracer.core.ray import reflect, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 1.0) < 1e-6
        assert abs(r[2]) < 1e-6

    def test_refract_ratio_one_is_identity(self):
        """With equal indices the refracted ray continues straight."""
        from weekend_raytracer.core.ray import normalize, refract, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            d = normalize(vec3(0.3, -1.0, 0.2))
            result[None] = refract(d, vec3(0.0, 1.0, 0.0), 1.0)

        test_kernel()
        r = result[None]
        norm = math.sqrt(0.3**2 + 1.0 + 0.2**2)
        assert abs(r[0] - 0.3 / norm) < 1e-5
        assert abs(r[1] + 1.0 / norm) < 1e-5
        assert abs(r[2] - 0.2 / norm) < 1e-5

    def test_refract_obeys_snell(self):
        """sin(theta_t) = ratio * sin(theta_i) for air into glass."""
        from weekend_raytracer.core.ray import normalize, refract, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            d = normalize(vec3(1.0, -1.0, 0.0))
            result[None] = refract(d, vec3(0.0, 1.0, 0.0), 1.0 / 1.5)

        test_kernel()
        r = result[None]
        sin_i = math.sqrt(0.5)
        length = math.sqrt(r[0] ** 2 + r[1] ** 2 + r[2] ** 2)
        assert abs(length - 1.0) < 1e-5
        assert abs(r[0] - sin_i / 1.5) < 1e-5
        assert r[1] < 0.0

    def test_schlick_reflectance(self):
        """Normal incidence gives r0; grazing incidence gives 1."""
        from weekend_raytracer.core.ray import schlick_reflectance

        result = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = schlick_reflectance(1.0, 1.5)
            result[1] = schlick_reflectance(0.0, 1.5)

        test_kernel()
        assert abs(result[0] - 0.04) < 1e-6
        assert abs(result[1] - 1.0) < 1e-6

    def test_schlick_symmetric_in_ratio(self):
        from weekend_raytracer.core.ray import schlick_reflectance

        result = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = schlick_reflectance(0.6, 1.5)
            result[1] = schlick_reflectance(0.6, 1.0 / 1.5)

        test_kernel()
        assert abs(result[0] - result[1]) < 1e-6

    def test_near_zero(self):
        from weekend_raytracer.core.ray import near_zero, vec3

        result = ti.field(dtype=ti.i32, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = near_zero(vec3(1e-10, -1e-10, 0.0))
            result[1] = near_zero(vec3(1e-3, 0.0, 0.0))

        test_kernel()
        assert result[0] == 1
        assert result[1] == 0

    def test_lerp(self):
        from weekend_raytracer.core.ray import lerp, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = lerp(vec3(0.0, 0.0, 0.0), vec3(2.0, 4.0, 6.0), 0.25)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 0.5) < 1e-6
        assert abs(r[1] - 1.0) < 1e-6
        assert abs(r[2] - 1.5) < 1e-6
