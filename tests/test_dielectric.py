"""Unit tests for the dielectric material module.

Tests cover:
- Refraction ratio for entering and leaving rays
- Normal incidence: straight refraction and 4% Schlick reflectance
- Total internal reflection
- White attenuation
- Registry validation of the index of refraction
"""

import numpy as np
import pytest
import taichi as ti

NUM_SAMPLES = 5000


class TestDielectricHelpers:
    """Tests for refraction_ratio_for(), incidence_cosine() and cannot_refract()."""

    def test_refraction_ratio(self):
        from mcray.materials.dielectric import refraction_ratio_for

        result = ti.field(dtype=ti.f64, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = refraction_ratio_for(1.5, 1)
            result[1] = refraction_ratio_for(1.5, 0)

        test_kernel()
        assert result[0] == pytest.approx(1.0 / 1.5)
        assert result[1] == pytest.approx(1.5)

    def test_normal_incidence_reflectance(self):
        """Head-on glass reflects with Schlick probability 0.04 and can refract."""
        from mcray.core.vector import schlick_reflectance, vec3
        from mcray.materials.dielectric import (
            cannot_refract,
            incidence_cosine,
            refraction_ratio_for,
        )

        cosine = ti.field(dtype=ti.f64, shape=())
        reflect_prob = ti.field(dtype=ti.f64, shape=())
        tir = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            ratio = refraction_ratio_for(1.5, 1)
            cos_theta = incidence_cosine(vec3(0.0, 0.0, -1.0), vec3(0.0, 0.0, 1.0))
            cosine[None] = cos_theta
            reflect_prob[None] = schlick_reflectance(cos_theta, ratio)
            tir[None] = cannot_refract(ratio, cos_theta)

        test_kernel()
        assert cosine[None] == pytest.approx(1.0)
        assert reflect_prob[None] == pytest.approx(0.04)
        assert tir[None] == 0

    def test_incidence_cosine_is_capped(self):
        """Rounding never pushes the cosine above 1."""
        from mcray.core.vector import normalize, vec3
        from mcray.materials.dielectric import incidence_cosine

        result = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            d = normalize(vec3(1e-9, 1e-9, -3.0))
            result[None] = incidence_cosine(d, vec3(0.0, 0.0, 1.0))

        test_kernel()
        assert result[None] <= 1.0
        assert result[None] == pytest.approx(1.0)


class TestDielectricScatter:
    """Tests for scatter_dielectric()."""

    def test_normal_incidence_refracts_straight(self):
        """At normal incidence the ray passes straight through most of the time."""
        from mcray.core.ray import make_ray
        from mcray.core.vector import vec3
        from mcray.geometry.sphere import HitRecord
        from mcray.materials.dielectric import scatter_dielectric

        directions = ti.field(dtype=vec3, shape=NUM_SAMPLES)
        attenuations = ti.field(dtype=vec3, shape=NUM_SAMPLES)
        scattered = ti.field(dtype=ti.i32, shape=NUM_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(NUM_SAMPLES):
                ray = make_ray(vec3(0.0, 0.0, 5.0), vec3(0.0, 0.0, -2.0))
                rec = HitRecord(
                    hit=1,
                    t=2.0,
                    point=vec3(0.0, 0.0, 1.0),
                    normal=vec3(0.0, 0.0, 1.0),
                    front_face=1,
                    material_id=0,
                )
                direction, attenuation, did_scatter = scatter_dielectric(1.5, ray, rec)
                directions[i] = direction
                attenuations[i] = attenuation
                scattered[i] = did_scatter

        test_kernel()
        dirs = directions.to_numpy()
        refracted = np.all(np.isclose(dirs, [0.0, 0.0, -1.0]), axis=1)
        reflected = np.all(np.isclose(dirs, [0.0, 0.0, 1.0]), axis=1)

        # Every sample is one of the two and glass never absorbs
        assert np.all(refracted | reflected)
        assert np.all(scattered.to_numpy() == 1)
        np.testing.assert_allclose(attenuations.to_numpy(), 1.0)
        assert reflected.mean() == pytest.approx(0.04, abs=0.015)

    def test_total_internal_reflection(self):
        """Leaving glass at a steep angle always reflects."""
        from mcray.core.ray import make_ray
        from mcray.core.vector import normalize, vec3
        from mcray.geometry.sphere import HitRecord
        from mcray.materials.dielectric import (
            cannot_refract,
            incidence_cosine,
            refraction_ratio_for,
            scatter_dielectric,
        )

        directions = ti.field(dtype=vec3, shape=100)
        tir = ti.field(dtype=ti.i32, shape=())

        @ti.func
        def leaving_ray():
            # sin(theta) = 0.9, so 1.5 * 0.9 > 1
            incoming = vec3(0.9, -ti.sqrt(1.0 - 0.81), 0.0)
            return make_ray(vec3(0.0, 0.0, 0.0) - incoming, incoming)

        @ti.func
        def inside_record():
            # Hit from inside: normal faces back into the glass
            return HitRecord(
                hit=1,
                t=1.0,
                point=vec3(0.0, 0.0, 0.0),
                normal=vec3(0.0, 1.0, 0.0),
                front_face=0,
                material_id=0,
            )

        @ti.kernel
        def test_kernel():
            rec = inside_record()
            cos_theta = incidence_cosine(normalize(leaving_ray().direction), rec.normal)
            tir[None] = cannot_refract(refraction_ratio_for(1.5, rec.front_face), cos_theta)
            for i in range(100):
                direction, attenuation, did_scatter = scatter_dielectric(
                    1.5, leaving_ray(), inside_record()
                )
                directions[i] = direction

        test_kernel()
        assert tir[None] == 1
        expected = [0.9, np.sqrt(1.0 - 0.81), 0.0]
        np.testing.assert_allclose(directions.to_numpy(), [expected] * 100, atol=1e-12)

    def test_refracted_ray_bends_toward_normal(self):
        """Entering glass bends the ray toward the normal per Snell's law."""
        from mcray.core.ray import make_ray
        from mcray.core.vector import normalize, refract, vec3
        from mcray.materials.dielectric import refraction_ratio_for

        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(-1.0, 1.0, 0.0), vec3(1.0, -1.0, 0.0))
            ratio = refraction_ratio_for(1.5, 1)
            result[None] = refract(normalize(ray.direction), vec3(0.0, 1.0, 0.0), ratio)

        test_kernel()
        r = result[None]
        sin_out = abs(r[0]) / np.linalg.norm([r[0], r[1], r[2]])
        assert sin_out == pytest.approx(np.sin(np.pi / 4.0) / 1.5)


class TestDielectricRegistry:
    """Tests for the dielectric material registry."""

    def test_add_material(self):
        from mcray.materials.dielectric import (
            add_dielectric_material,
            dielectric_irs,
            get_dielectric_material_count,
        )

        assert add_dielectric_material() == 0
        assert add_dielectric_material(1.33) == 1
        assert get_dielectric_material_count() == 2
        assert dielectric_irs[0] == pytest.approx(1.5)
        assert dielectric_irs[1] == pytest.approx(1.33)

    @pytest.mark.parametrize("ir", [0.0, -1.5])
    def test_rejects_non_positive_ir(self, ir):
        from mcray.materials.dielectric import add_dielectric_material

        with pytest.raises(ValueError, match="must be positive"):
            add_dielectric_material(ir)

    def test_clear(self):
        from mcray.materials.dielectric import (
            add_dielectric_material,
            clear_dielectric_materials,
            get_dielectric_material_count,
        )

        add_dielectric_material(1.5)
        clear_dielectric_materials()
        assert get_dielectric_material_count() == 0
