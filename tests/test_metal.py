"""Unit tests for the metal material module.

Tests cover:
- Perfect mirror reflection (fuzz = 0)
- Fuzzy reflection bounded by the fuzz radius
- Absorption when the fuzzed direction dips below the surface
- Attenuation equals albedo
- Material registry and validation
"""

import math

import pytest
import taichi as ti


class TestPerfectReflection:
    """Tests for perfect mirror reflection (fuzz = 0)."""

    def test_perfect_reflection_normal_incidence(self):
        """Test a ray hitting head-on reflects straight back."""
        from pathtracer.core.vector import vec3
        from pathtracer.materials.metal import scatter_metal

        direction = ti.Vector.field(3, dtype=ti.f32, shape=())
        did_scatter = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            d, _, s = scatter_metal(
                vec3(0.9, 0.9, 0.9), 0.0, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0)
            )
            direction[None] = d
            did_scatter[None] = s

        test_kernel()
        d = direction[None]
        assert abs(d[0]) < 1e-6
        assert abs(d[1] - 1.0) < 1e-6
        assert abs(d[2]) < 1e-6
        assert did_scatter[None] == 1

    def test_perfect_reflection_45_degrees(self):
        """Test reflection at 45 degrees flips the normal component."""
        from pathtracer.core.vector import vec3
        from pathtracer.materials.metal import scatter_metal

        direction = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            d, _, _ = scatter_metal(
                vec3(1.0, 1.0, 1.0), 0.0, vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0)
            )
            direction[None] = d

        test_kernel()
        d = direction[None]
        inv_sqrt2 = 1.0 / math.sqrt(2.0)
        assert abs(d[0] - inv_sqrt2) < 1e-5
        assert abs(d[1] - inv_sqrt2) < 1e-5
        assert abs(d[2]) < 1e-6

    def test_reflection_uses_unit_incident(self):
        """Test the mirror direction is unit length for any incident length."""
        from pathtracer.core.vector import vec3
        from pathtracer.materials.metal import scatter_metal

        length = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            d, _, _ = scatter_metal(
                vec3(1.0, 1.0, 1.0), 0.0, vec3(3.0, -4.0, 12.0), vec3(0.0, 1.0, 0.0)
            )
            length[None] = d.norm()

        test_kernel()
        assert abs(length[None] - 1.0) < 1e-5


class TestFuzzyReflection:
    """Tests for fuzzy reflection (fuzz > 0)."""

    def test_fuzzy_reflection_direction_varies(self):
        """Test fuzzed reflections differ between samples."""
        from pathtracer.core.vector import vec3
        from pathtracer.materials.metal import scatter_metal

        results = ti.Vector.field(3, dtype=ti.f32, shape=10)

        @ti.kernel
        def test_kernel():
            for i in range(10):
                d, _, _ = scatter_metal(
                    vec3(0.8, 0.8, 0.8), 0.5, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0)
                )
                results[i] = d

        test_kernel()
        values = results.to_numpy()
        distinct = {tuple(round(float(c), 4) for c in v) for v in values}
        assert len(distinct) > 1

    @pytest.mark.parametrize("fuzz", [0.1, 0.3, 1.0])
    def test_fuzzy_reflection_bounded_by_fuzz(self, fuzz):
        """Test the offset from the mirror direction never exceeds fuzz."""
        from pathtracer.core.vector import vec3
        from pathtracer.materials.metal import scatter_metal

        n_samples = 500
        offsets = ti.field(dtype=ti.f32, shape=n_samples)

        @ti.kernel
        def test_kernel(f: ti.f32):
            mirror = vec3(0.0, 1.0, 0.0)
            for i in range(n_samples):
                d, _, _ = scatter_metal(
                    vec3(0.8, 0.8, 0.8), f, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0)
                )
                offsets[i] = (d - mirror).norm()

        test_kernel(fuzz)
        assert offsets.to_numpy().max() <= fuzz + 1e-5


class TestRayAbsorption:
    """Tests for absorption of rays scattered below the surface."""

    def test_grazing_fuzzy_reflection_may_absorb(self):
        """Test a grazing ray with large fuzz is sometimes absorbed."""
        from pathtracer.core.vector import vec3
        from pathtracer.materials.metal import scatter_metal

        n_samples = 1000
        scattered = ti.field(dtype=ti.i32, shape=n_samples)
        dots = ti.field(dtype=ti.f32, shape=n_samples)

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            incident = vec3(1.0, -0.05, 0.0)
            for i in range(n_samples):
                d, _, s = scatter_metal(vec3(0.8, 0.8, 0.8), 1.0, incident, normal)
                scattered[i] = s
                dots[i] = d.dot(normal)

        test_kernel()
        flags = scattered.to_numpy()
        values = dots.to_numpy()
        assert 0 < flags.sum() < n_samples
        # The flag agrees with the side of the surface
        assert ((values > 0.0) == (flags == 1)).all()

    def test_mirror_never_absorbs(self):
        """Test a perfect mirror always scatters a front-side hit."""
        from pathtracer.core.vector import vec3
        from pathtracer.materials.metal import scatter_metal

        n_samples = 100
        scattered = ti.field(dtype=ti.i32, shape=n_samples)

        @ti.kernel
        def test_kernel():
            for i in range(n_samples):
                _, _, s = scatter_metal(
                    vec3(0.8, 0.8, 0.8), 0.0, vec3(1.0, -0.2, 0.3), vec3(0.0, 1.0, 0.0)
                )
                scattered[i] = s

        test_kernel()
        assert scattered.to_numpy().sum() == n_samples


class TestAttenuation:
    """Tests for metal attenuation."""

    def test_attenuation_equals_albedo(self):
        """Test the attenuation is the albedo unchanged."""
        from pathtracer.core.vector import vec3
        from pathtracer.materials.metal import scatter_metal

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            _, attenuation, _ = scatter_metal(
                vec3(0.8, 0.6, 0.2), 0.3, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0)
            )
            result[None] = attenuation

        test_kernel()
        r = result[None]
        assert abs(r[0] - 0.8) < 1e-6
        assert abs(r[1] - 0.6) < 1e-6
        assert abs(r[2] - 0.2) < 1e-6


class TestMaterialRegistry:
    """Tests for metal material registry."""

    def test_add_and_get_material(self):
        """Test adding a metal and reading albedo and fuzz back."""
        from pathtracer.materials.metal import (
            add_metal_material,
            get_metal_albedo,
            get_metal_fuzz,
        )

        idx = add_metal_material((0.8, 0.6, 0.2), fuzz=0.3)
        assert idx == 0

        albedo = ti.Vector.field(3, dtype=ti.f32, shape=())
        fuzz = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            albedo[None] = get_metal_albedo(mat_idx)
            fuzz[None] = get_metal_fuzz(mat_idx)

        test_kernel(idx)
        a = albedo[None]
        assert abs(a[0] - 0.8) < 1e-6
        assert abs(a[1] - 0.6) < 1e-6
        assert abs(a[2] - 0.2) < 1e-6
        assert abs(fuzz[None] - 0.3) < 1e-6

    def test_material_count(self):
        """Test material count tracking."""
        from pathtracer.materials.metal import (
            add_metal_material,
            clear_metal_materials,
            get_metal_material_count,
        )

        assert get_metal_material_count() == 0
        add_metal_material((0.5, 0.5, 0.5))
        add_metal_material((0.9, 0.9, 0.9), fuzz=1.0)
        assert get_metal_material_count() == 2

        clear_metal_materials()
        assert get_metal_material_count() == 0

    def test_default_fuzz_is_zero(self):
        """Test fuzz defaults to a perfect mirror."""
        from pathtracer.materials.metal import add_metal_material, get_metal_fuzz

        idx = add_metal_material((0.5, 0.5, 0.5))
        fuzz = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            fuzz[None] = get_metal_fuzz(mat_idx)

        test_kernel(idx)
        assert fuzz[None] == 0.0


class TestValidation:
    """Tests for metal parameter validation."""

    @pytest.mark.parametrize("albedo", [(-0.1, 0.5, 0.5), (0.5, 0.5, 1.5)])
    def test_albedo_validation(self, albedo):
        """Test albedo components outside [0, 1] are rejected."""
        from pathtracer.materials.metal import add_metal_material

        with pytest.raises(ValueError, match="Albedo component"):
            add_metal_material(albedo)

    @pytest.mark.parametrize("fuzz", [-0.01, 1.01, 5.0])
    def test_fuzz_validation(self, fuzz):
        """Test fuzz outside [0, 1] is rejected."""
        from pathtracer.materials.metal import add_metal_material, get_metal_material_count

        with pytest.raises(ValueError, match="Fuzz"):
            add_metal_material((0.5, 0.5, 0.5), fuzz=fuzz)
        assert get_metal_material_count() == 0

    def test_fuzz_boundary_values_valid(self):
        """Test fuzz of exactly 0 and 1 is accepted."""
        from pathtracer.materials.metal import add_metal_material

        assert add_metal_material((0.5, 0.5, 0.5), fuzz=0.0) == 0
        assert add_metal_material((0.5, 0.5, 0.5), fuzz=1.0) == 1
