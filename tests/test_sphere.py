"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside (front face)
- Ray missing sphere
- Ray starting inside sphere (back face)
- Interval bounds selecting the near or far root
- Negative and zero radius spheres
- Numerical stability on a very large sphere
"""

import math

import pytest
import taichi as ti


def _run_hit(origin, direction, center, radius, t_min=0.001, t_max=1e10):
    """Intersect one ray with one sphere and read the hit record back."""
    from src.spheretrace.geometry.sphere import Sphere, hit_sphere, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.field(dtype=ti.math.vec3, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f32, oy: ti.f32, oz: ti.f32,
        dx: ti.f32, dy: ti.f32, dz: ti.f32,
        cx: ti.f32, cy: ti.f32, cz: ti.f32,
        r: ti.f32, t_min: ti.f32, t_max: ti.f32,
    ):
        sphere = Sphere(center=vec3(cx, cy, cz), radius=r)
        record = hit_sphere(vec3(ox, oy, oz), vec3(dx, dy, dz), sphere, t_min, t_max)
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal
        front_face[None] = record.front_face

    test_kernel(*origin, *direction, *center, radius, t_min, t_max)
    return {
        "hit": hit[None],
        "t": t_val[None],
        "point": tuple(point[None].to_numpy().tolist()),
        "normal": tuple(normal[None].to_numpy().tolist()),
        "front_face": front_face[None],
    }


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_direct_hit_from_outside(self):
        """Test ray hitting sphere head-on from outside."""
        rec = _run_hit((0, 0, 5), (0, 0, -1), (0, 0, 0), 1.0)

        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(4.0, abs=1e-5)
        assert rec["point"][2] == pytest.approx(1.0, abs=1e-5)
        assert rec["normal"] == pytest.approx((0.0, 0.0, 1.0), abs=1e-5)
        assert rec["front_face"] == 1

    def test_unnormalized_direction_scales_t(self):
        """Test that t is measured in units of the direction length."""
        rec = _run_hit((0, 0, 5), (0, 0, -2), (0, 0, 0), 1.0)

        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(2.0, abs=1e-5)
        assert rec["point"][2] == pytest.approx(1.0, abs=1e-5)

    def test_miss(self):
        """Test ray passing beside the sphere."""
        rec = _run_hit((5, 0, 0), (0, 0, -1), (0, 0, 0), 1.0)
        assert rec["hit"] == 0

    def test_sphere_behind_ray(self):
        """Test that a sphere behind the origin is not hit."""
        rec = _run_hit((0, 0, 5), (0, 0, 1), (0, 0, 0), 1.0)
        assert rec["hit"] == 0

    def test_inside_hits_back_face(self):
        """Test ray starting at the center: far root, normal flipped inward."""
        rec = _run_hit((0, 0, 0), (0, 0, 1), (0, 0, 0), 1.0)

        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(1.0, abs=1e-5)
        assert rec["normal"] == pytest.approx((0.0, 0.0, -1.0), abs=1e-5)
        assert rec["front_face"] == 0

    def test_t_min_skips_near_root(self):
        """Test that the far root is used when the near one is below t_min."""
        rec = _run_hit((0, 0, 5), (0, 0, -1), (0, 0, 0), 1.0, t_min=4.5)

        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(6.0, abs=1e-4)
        assert rec["front_face"] == 0

    def test_t_max_excludes_both_roots(self):
        """Test that hits beyond t_max are ignored."""
        rec = _run_hit((0, 0, 5), (0, 0, -1), (0, 0, 0), 1.0, t_max=3.0)
        assert rec["hit"] == 0

    def test_normal_opposes_ray(self):
        """Test that the stored normal is unit length and faces against the ray."""
        cases = [
            ((0, 0, 5), (0, 0, -1), 1.0),
            ((0, 0, 0), (0, 1, 0), 1.0),
            ((3, 4, 5), (-3, -4, -5), 2.5),
        ]
        for origin, direction, radius in cases:
            rec = _run_hit(origin, direction, (0, 0, 0), radius)
            assert rec["hit"] == 1
            dot = sum(n * d for n, d in zip(rec["normal"], direction))
            assert dot < 0.0
            assert sum(n * n for n in rec["normal"]) == pytest.approx(1.0, abs=1e-5)


class TestNegativeRadius:
    """Tests for spheres with a negative radius."""

    def test_outside_ray_sees_back_face(self):
        """Test that the outward normal points inward for negative radii."""
        rec = _run_hit((0, 0, 5), (0, 0, -1), (0, 0, 0), -1.0)

        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(4.0, abs=1e-5)
        assert rec["front_face"] == 0
        # Stored normal still opposes the ray
        assert rec["normal"] == pytest.approx((0.0, 0.0, 1.0), abs=1e-5)

    def test_inside_ray_sees_front_face(self):
        """Test a ray leaving a negative-radius sphere hits its front face."""
        rec = _run_hit((0, 0, 0), (0, 0, 1), (0, 0, 0), -1.0)

        assert rec["hit"] == 1
        assert rec["front_face"] == 1
        assert rec["normal"] == pytest.approx((0.0, 0.0, -1.0), abs=1e-5)


class TestNumericalStability:
    """Tests for large spheres in single precision."""

    def test_ground_sphere_hit_point_on_surface(self):
        """Test a ray hitting a radius-1000 ground sphere lands near y = 0."""
        rec = _run_hit((0, 1, 0), (0, -1, 0), (0, -1000, 0), 1000.0)

        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(1.0, abs=1e-3)
        assert rec["point"][1] == pytest.approx(0.0, abs=1e-3)
        assert rec["normal"] == pytest.approx((0.0, 1.0, 0.0), abs=1e-4)

    def test_oblique_ray_on_ground_sphere(self):
        """Test that an oblique ray from a camera height hits the ground."""
        rec = _run_hit((13, 2, 3), (-13, -2, -3), (0, -1000, 0), 1000.0)

        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(1.0, abs=1e-2)
        assert rec["point"][1] == pytest.approx(0.0, abs=1e-2)


class TestZeroRadius:
    """Tests for degenerate spheres of radius zero."""

    def test_ray_through_center_misses(self):
        """Test that a ray through the center of a point sphere reports no hit."""
        rec = _run_hit((0, 0, 0), (0, 0, -1), (0, 0, -1), 0.0)

        assert rec["hit"] == 0
        assert all(math.isfinite(n) for n in rec["normal"])

    def test_offset_ray_misses(self):
        """Test that rays passing beside a point sphere miss."""
        rec = _run_hit((0, 0, 0), (0, 0.5, -1), (0, 0, -1), 0.0)
        assert rec["hit"] == 0
