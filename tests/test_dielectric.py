"""Unit tests for the dielectric material module.

Tests cover:
- Refraction at normal incidence and Snell's law at oblique angles
- Total internal reflection from the denser side
- Schlick reflectance at normal and grazing incidence
- Attenuation (always white) and scatter behavior
- Material registry and validation
"""

import math

import pytest
import taichi as ti


class TestRefraction:
    """Tests for refraction through a dielectric surface."""

    def test_head_on_ray_passes_straight_through(self):
        """Test a head-on ray continues undeviated when it refracts.

        At normal incidence Schlick gives R = 0.04 for glass, so most
        samples refract; every refracted sample keeps the incoming direction.
        """
        from pathtracer.core.vector import vec3
        from pathtracer.materials.dielectric import scatter_dielectric

        n_samples = 200
        directions = ti.Vector.field(3, dtype=ti.f32, shape=n_samples)

        @ti.kernel
        def test_kernel():
            for i in range(n_samples):
                d, _ = scatter_dielectric(
                    1.5, vec3(0.0, 0.0, -1.0), vec3(0.0, 0.0, 1.0), 1
                )
                directions[i] = d

        test_kernel()
        values = directions.to_numpy()
        refracted = values[values[:, 2] < 0.0]
        reflected = values[values[:, 2] > 0.0]
        assert len(refracted) + len(reflected) == n_samples
        assert len(refracted) > len(reflected)
        assert abs(refracted[:, 0]).max() < 1e-5
        assert abs(refracted[:, 1]).max() < 1e-5
        assert abs(refracted[:, 2] + 1.0).max() < 1e-5

    def test_refraction_snells_law(self):
        """Test the refracted direction obeys n1 sin(t1) = n2 sin(t2)."""
        from pathtracer.core.vector import normalize, refract, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            # 30 degrees from the normal, entering glass
            incident = normalize(vec3(0.5, -ti.sqrt(3.0) / 2.0, 0.0))
            result[None] = refract(incident, vec3(0.0, 1.0, 0.0), 1.0 / 1.5)

        test_kernel()
        r = result[None]
        sin_t = abs(r[0]) / math.sqrt(r[0] ** 2 + r[1] ** 2 + r[2] ** 2)
        assert sin_t == pytest.approx(0.5 / 1.5, abs=1e-5)
        assert r[1] < 0.0


class TestTotalInternalReflection:
    """Tests for total internal reflection."""

    def test_tir_beyond_critical_angle(self):
        """Test TIR from inside glass past the critical angle (41.8 degrees)."""
        from pathtracer.core.vector import normalize, vec3
        from pathtracer.materials.dielectric import will_reflect

        result = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            # 60 degrees from the normal, travelling inside the material
            incident = normalize(vec3(ti.sqrt(3.0) / 2.0, -0.5, 0.0))
            result[None] = will_reflect(1.5, incident, vec3(0.0, 1.0, 0.0), 0)

        test_kernel()
        assert result[None] == 1

    def test_no_tir_below_critical_angle(self):
        """Test no TIR from inside glass below the critical angle."""
        from pathtracer.core.vector import normalize, vec3
        from pathtracer.materials.dielectric import will_reflect

        result = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            incident = normalize(vec3(0.5, -ti.sqrt(3.0) / 2.0, 0.0))
            result[None] = will_reflect(1.5, incident, vec3(0.0, 1.0, 0.0), 0)

        test_kernel()
        assert result[None] == 0

    def test_no_tir_entering_denser_medium(self):
        """Test rays entering glass from air never totally reflect."""
        from pathtracer.core.vector import normalize, vec3
        from pathtracer.materials.dielectric import will_reflect

        result = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            incident = normalize(vec3(1.0, -0.01, 0.0))
            result[None] = will_reflect(1.5, incident, vec3(0.0, 1.0, 0.0), 1)

        test_kernel()
        assert result[None] == 0

    def test_tir_scatter_always_reflects(self):
        """Test scatter_dielectric reflects every sample under TIR."""
        from pathtracer.core.vector import normalize, vec3
        from pathtracer.materials.dielectric import scatter_dielectric

        n_samples = 100
        directions = ti.Vector.field(3, dtype=ti.f32, shape=n_samples)

        @ti.kernel
        def test_kernel():
            incident = normalize(vec3(ti.sqrt(3.0) / 2.0, -0.5, 0.0))
            for i in range(n_samples):
                d, _ = scatter_dielectric(1.5, incident, vec3(0.0, 1.0, 0.0), 0)
                directions[i] = d

        test_kernel()
        values = directions.to_numpy()
        assert abs(values[:, 0] - math.sqrt(3.0) / 2.0).max() < 1e-5
        assert abs(values[:, 1] - 0.5).max() < 1e-5


class TestFresnelReflectance:
    """Tests for Schlick reflectance at a dielectric surface."""

    def test_fresnel_normal_incidence(self):
        """Test reflectance at normal incidence is r0 = 0.04 for glass."""
        from pathtracer.core.vector import vec3
        from pathtracer.materials.dielectric import fresnel_reflectance

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = fresnel_reflectance(
                1.5, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0), 1
            )

        test_kernel()
        r0 = ((1.0 - 1.0 / 1.5) / (1.0 + 1.0 / 1.5)) ** 2
        assert abs(result[None] - r0) < 1e-6
        assert abs(result[None] - 0.04) < 1e-6

    def test_fresnel_grazing_angle(self):
        """Test reflectance approaches one at grazing incidence."""
        from pathtracer.core.vector import normalize, vec3
        from pathtracer.materials.dielectric import fresnel_reflectance

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            incident = normalize(vec3(1.0, -0.001, 0.0))
            result[None] = fresnel_reflectance(1.5, incident, vec3(0.0, 1.0, 0.0), 1)

        test_kernel()
        assert result[None] > 0.99

    def test_fresnel_increases_with_angle(self):
        """Test reflectance grows monotonically with the incidence angle."""
        from pathtracer.core.vector import vec3
        from pathtracer.materials.dielectric import fresnel_reflectance

        n_angles = 8
        values = ti.field(dtype=ti.f32, shape=n_angles)

        @ti.kernel
        def test_kernel():
            for i in range(n_angles):
                theta = (i / n_angles) * (math.pi / 2.0)
                incident = vec3(ti.sin(theta), -ti.cos(theta), 0.0)
                values[i] = fresnel_reflectance(1.5, incident, vec3(0.0, 1.0, 0.0), 1)

        test_kernel()
        r = values.to_numpy()
        assert all(r[i] <= r[i + 1] for i in range(n_angles - 1))
        assert r[-1] > r[0]

    def test_reflection_probability_matches_schlick(self):
        """Test the fraction of reflected samples matches the reflectance."""
        from pathtracer.core.vector import normalize, vec3
        from pathtracer.materials.dielectric import fresnel_reflectance, scatter_dielectric

        n_samples = 20000
        reflected = ti.field(dtype=ti.i32, shape=n_samples)
        expected = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            incident = normalize(vec3(1.0, -0.3, 0.0))
            expected[None] = fresnel_reflectance(1.5, incident, normal, 1)
            for i in range(n_samples):
                d, _ = scatter_dielectric(1.5, incident, normal, 1)
                reflected[i] = 0
                if d.y > 0.0:
                    reflected[i] = 1

        test_kernel()
        fraction = reflected.to_numpy().mean()
        assert fraction == pytest.approx(expected[None], abs=0.02)


class TestAttenuation:
    """Tests for dielectric attenuation."""

    def test_attenuation_is_white(self):
        """Test clear glass never absorbs."""
        from pathtracer.core.vector import vec3
        from pathtracer.materials.dielectric import scatter_dielectric

        n_samples = 50
        results = ti.Vector.field(3, dtype=ti.f32, shape=n_samples)

        @ti.kernel
        def test_kernel():
            for i in range(n_samples):
                _, attenuation = scatter_dielectric(
                    1.5, vec3(0.3, -1.0, 0.2), vec3(0.0, 1.0, 0.0), 1
                )
                results[i] = attenuation

        test_kernel()
        values = results.to_numpy()
        assert (abs(values - 1.0) < 1e-6).all()

    def test_scattered_direction_is_unit(self):
        """Test both reflected and refracted directions are unit length."""
        from pathtracer.core.vector import vec3
        from pathtracer.materials.dielectric import scatter_dielectric

        n_samples = 200
        lengths = ti.field(dtype=ti.f32, shape=n_samples)

        @ti.kernel
        def test_kernel():
            for i in range(n_samples):
                d, _ = scatter_dielectric(
                    1.5, vec3(2.0, -1.0, 0.5), vec3(0.0, 1.0, 0.0), 1
                )
                lengths[i] = d.norm()

        test_kernel()
        values = lengths.to_numpy()
        assert abs(values - 1.0).max() < 1e-4

    def test_ior_one_is_transparent(self):
        """Test an index of one neither bends nor reflects the ray."""
        from pathtracer.core.vector import normalize, vec3
        from pathtracer.materials.dielectric import scatter_dielectric

        n_samples = 50
        directions = ti.Vector.field(3, dtype=ti.f32, shape=n_samples)

        @ti.kernel
        def test_kernel():
            incident = normalize(vec3(0.28, -0.96, 0.0))
            for i in range(n_samples):
                d, _ = scatter_dielectric(1.0, incident, vec3(0.0, 1.0, 0.0), 1)
                directions[i] = d

        test_kernel()
        values = directions.to_numpy()
        assert abs(values[:, 0] - 0.28).max() < 1e-5
        assert abs(values[:, 1] + 0.96).max() < 1e-5


class TestMaterialRegistry:
    """Tests for dielectric material registry."""

    def test_add_and_get_material(self):
        """Test adding a dielectric and reading its index back."""
        from pathtracer.materials.dielectric import add_dielectric_material, get_dielectric_ior

        idx = add_dielectric_material(2.4)
        assert idx == 0

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            result[None] = get_dielectric_ior(mat_idx)

        test_kernel(idx)
        assert abs(result[None] - 2.4) < 1e-6

    def test_default_ior_is_glass(self):
        """Test the default index of refraction is 1.5."""
        from pathtracer.materials.dielectric import add_dielectric_material, get_dielectric_ior

        idx = add_dielectric_material()
        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            result[None] = get_dielectric_ior(mat_idx)

        test_kernel(idx)
        assert abs(result[None] - 1.5) < 1e-6

    def test_material_count(self):
        """Test material count tracking."""
        from pathtracer.materials.dielectric import (
            add_dielectric_material,
            clear_dielectric_materials,
            get_dielectric_material_count,
        )

        assert get_dielectric_material_count() == 0
        add_dielectric_material(1.33)
        add_dielectric_material(1.5)
        assert get_dielectric_material_count() == 2

        clear_dielectric_materials()
        assert get_dielectric_material_count() == 0

    @pytest.mark.parametrize("ior", [0.0, -1.5])
    def test_ior_must_be_positive(self, ior):
        """Test non-positive indices of refraction are rejected."""
        from pathtracer.materials.dielectric import add_dielectric_material

        with pytest.raises(ValueError, match="must be positive"):
            add_dielectric_material(ior)

    def test_ior_below_one_allowed(self):
        """Test indices below one are accepted for inverted interfaces."""
        from pathtracer.materials.dielectric import add_dielectric_material

        assert add_dielectric_material(0.75) == 0
