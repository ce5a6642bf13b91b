"""Unit tests for the ray module.

Tests cover:
- Ray dataclass construction
- ray_at for zero, positive and negative t
- Non-normalized directions
"""

import taichi as ti


class TestRayBasics:
    """Tests for Ray dataclass and basic operations."""

    def test_ray_at_origin(self):
        """Test ray_at returns origin when t=0."""
        from mcray.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-12
        assert abs(r[1] - 2.0) < 1e-12
        assert abs(r[2] - 3.0) < 1e-12

    def test_ray_at_positive_t(self):
        """Test ray_at computes correct point along ray."""
        from mcray.core.ray import make_ray, ray_at, vec3

        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(1.0, 0.0, 0.0))
            result[None] = ray_at(ray, 5.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 5.0) < 1e-12
        assert abs(r[1]) < 1e-12
        assert abs(r[2]) < 1e-12

    def test_ray_at_negative_t(self):
        """Test ray_at handles negative t (behind origin)."""
        from mcray.core.ray import make_ray, ray_at, vec3

        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 1.0, 1.0), vec3(0.0, 1.0, 0.0))
            result[None] = ray_at(ray, -2.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-12
        assert abs(r[1] + 1.0) < 1e-12
        assert abs(r[2] - 1.0) < 1e-12

    def test_ray_at_scales_with_direction_length(self):
        """Direction is not normalized, so t is measured in its units."""
        from mcray.core.ray import make_ray, ray_at, vec3

        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -4.0))
            result[None] = ray_at(ray, 0.5)

        test_kernel()
        assert abs(result[None][2] + 2.0) < 1e-12

    def test_ray_fields_round_trip(self):
        """Test the origin and direction stored in a Ray are returned intact."""
        from mcray.core.ray import make_ray, vec3

        origin = ti.field(dtype=vec3, shape=())
        direction = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.1, 0.2, 0.3), vec3(-1.0, 2.0, -3.0))
            origin[None] = ray.origin
            direction[None] = ray.direction

        test_kernel()
        o = origin[None]
        d = direction[None]
        assert (o[0], o[1], o[2]) == (0.1, 0.2, 0.3)
        assert (d[0], d[1], d[2]) == (-1.0, 2.0, -3.0)
