"""Unit tests for the metal material.

Tests cover:
- Perfect mirror reflection with zero fuzz
- Absorption when fuzz pushes the direction below the surface
- Fuzz clamping
- Material registry storage
"""

import math

import numpy as np
import pytest
import taichi as ti


class TestMetalDirection:
    """Tests for the deterministic reflection direction."""

    def test_zero_fuzz_is_mirror(self):
        """Test that fuzz 0 gives the exact mirror direction of the unit incident ray."""
        from src.spheretrace.materials.metal import metal_direction, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())
        scattered = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            direction, did_scatter = metal_direction(
                vec3(2.0, -2.0, 0.0), vec3(0.0, 1.0, 0.0), 0.0, vec3(0.0, 0.0, 1.0)
            )
            result[None] = direction
            scattered[None] = did_scatter

        test_kernel()
        s = 1.0 / math.sqrt(2.0)
        np.testing.assert_allclose(result[None].to_numpy(), [s, s, 0.0], atol=1e-6)
        assert scattered[None] == 1

    def test_fuzz_below_surface_absorbs(self):
        """Test that a grazing reflection pushed into the surface is absorbed."""
        from src.spheretrace.materials.metal import metal_direction, vec3

        scattered = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            # Grazing incidence: the mirror direction is almost tangent
            direction, did_scatter = metal_direction(
                vec3(1.0, -0.01, 0.0), vec3(0.0, 1.0, 0.0), 1.0, vec3(0.0, -1.0, 0.0)
            )
            scattered[None] = did_scatter

        test_kernel()
        assert scattered[None] == 0

    def test_fuzz_perturbs_direction(self):
        """Test that the sample is added scaled by fuzz."""
        from src.spheretrace.materials.metal import metal_direction, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            direction, did_scatter = metal_direction(
                vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0), 0.5, vec3(1.0, 0.0, 0.0)
            )
            result[None] = direction

        test_kernel()
        np.testing.assert_allclose(result[None].to_numpy(), [0.5, 1.0, 0.0], atol=1e-6)


class TestScatterMetal:
    """Tests for the stochastic scatter function."""

    def test_mirror_with_random_stream(self):
        """Test that zero fuzz ignores the random sample entirely."""
        from src.spheretrace.core.sampler import seed_sample_state
        from src.spheretrace.materials.metal import scatter_metal, vec3

        n = 64
        dirs = ti.Vector.field(3, dtype=ti.f32, shape=n)
        atten = ti.Vector.field(3, dtype=ti.f32, shape=n)
        flags = ti.field(dtype=ti.i32, shape=n)

        @ti.kernel
        def test_kernel():
            for k in range(n):
                state = seed_sample_state(4, k, 0, 0)
                direction, attenuation, did_scatter, state = scatter_metal(
                    vec3(0.7, 0.6, 0.5), 0.0, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0), state
                )
                dirs[k] = direction
                atten[k] = attenuation
                flags[k] = did_scatter

        test_kernel()
        np.testing.assert_allclose(dirs.to_numpy(), np.tile([0.0, 1.0, 0.0], (n, 1)), atol=1e-6)
        np.testing.assert_allclose(atten.to_numpy(), np.tile([0.7, 0.6, 0.5], (n, 1)), atol=1e-6)
        assert np.all(flags.to_numpy() == 1)


class TestMetalRegistry:
    """Tests for the metal material registry."""

    @pytest.mark.parametrize("fuzz,expected", [(-0.5, 0.0), (0.3, 0.3), (2.0, 1.0)])
    def test_clamp_fuzz(self, fuzz, expected):
        """Test that fuzz is clamped into [0, 1]."""
        from src.spheretrace.materials.metal import clamp_fuzz

        assert clamp_fuzz(fuzz) == pytest.approx(expected)

    def test_add_and_read_back(self):
        """Test storing albedo and fuzz and reading them in a kernel."""
        from src.spheretrace.materials.metal import (
            add_metal_material,
            get_metal_albedo,
            get_metal_fuzz,
            get_metal_material_count,
        )

        add_metal_material((0.9, 0.9, 0.9))
        idx = add_metal_material((0.8, 0.6, 0.2), fuzz=5.0)
        assert idx == 1
        assert get_metal_material_count() == 2

        albedo = ti.field(dtype=ti.math.vec3, shape=())
        fuzz = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            albedo[None] = get_metal_albedo(1)
            fuzz[None] = get_metal_fuzz(1)

        test_kernel()
        np.testing.assert_allclose(albedo[None].to_numpy(), [0.8, 0.6, 0.2], atol=1e-6)
        assert fuzz[None] == pytest.approx(1.0)

    def test_albedo_out_of_range_raises(self):
        """Test that albedo components must lie in [0, 1]."""
        from src.spheretrace.materials.metal import add_metal_material

        with pytest.raises(ValueError):
            add_metal_material((0.5, 0.5, 1.01))
