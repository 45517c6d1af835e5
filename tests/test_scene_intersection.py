"""Unit tests for scene-level intersection.

Tests cover:
- Sphere storage (add, count, clear, capacity)
- Closest-hit selection independent of insertion order
- Material id propagation and miss records
"""

import pytest
import taichi as ti


def _query(origin, direction, t_min=0.001, t_max=1e10):
    """Run intersect_scene for a single ray and read the record back."""
    from src.spheretrace.scene.intersection import intersect_scene, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    material_id = ti.field(dtype=ti.i32, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f32, oy: ti.f32, oz: ti.f32,
        dx: ti.f32, dy: ti.f32, dz: ti.f32,
        t_min: ti.f32, t_max: ti.f32,
    ):
        rec = intersect_scene(vec3(ox, oy, oz), vec3(dx, dy, dz), t_min, t_max)
        hit[None] = rec.hit
        t_val[None] = rec.t
        material_id[None] = rec.material_id
        front_face[None] = rec.front_face

    test_kernel(*origin, *direction, t_min, t_max)
    return hit[None], t_val[None], material_id[None], front_face[None]


class TestSphereStorage:
    """Tests for adding and clearing spheres."""

    def test_add_sphere_returns_sequential_indices(self):
        """Test that spheres are stored in insertion order."""
        from src.spheretrace.scene.intersection import add_sphere, get_sphere_count, vec3

        assert add_sphere(vec3(0, 0, -1), 0.5, 0) == 0
        assert add_sphere(vec3(1, 0, -1), 0.5, 1) == 1
        assert get_sphere_count() == 2

    def test_clear_scene(self):
        """Test that clear_scene empties the aggregate."""
        from src.spheretrace.scene.intersection import (
            add_sphere,
            clear_scene,
            get_sphere_count,
            vec3,
        )

        add_sphere(vec3(0, 0, -1), 0.5, 0)
        clear_scene()
        assert get_sphere_count() == 0

    def test_capacity_exceeded_raises(self):
        """Test that adding past MAX_SPHERES raises RuntimeError."""
        from src.spheretrace.scene.intersection import (
            MAX_SPHERES,
            add_sphere,
            num_spheres,
            vec3,
        )

        num_spheres[None] = MAX_SPHERES
        with pytest.raises(RuntimeError, match="Maximum number of spheres"):
            add_sphere(vec3(0, 0, 0), 1.0, 0)


class TestIntersectScene:
    """Tests for the closest-hit query."""

    def test_empty_scene_misses(self):
        """Test that an empty scene reports a miss with material -1."""
        hit, _, material_id, _ = _query((0, 0, 0), (0, 0, -1))
        assert hit == 0
        assert material_id == -1

    def test_single_sphere_hit(self):
        """Test material id and distance for a single sphere."""
        from src.spheretrace.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0, 0, -3), 1.0, 7)
        hit, t, material_id, front_face = _query((0, 0, 0), (0, 0, -1))

        assert hit == 1
        assert t == pytest.approx(2.0, abs=1e-5)
        assert material_id == 7
        assert front_face == 1

    @pytest.mark.parametrize("near_first", [True, False])
    def test_overlapping_spheres_nearest_wins(self, near_first):
        """Test that the nearer sphere is reported in either insertion order."""
        from src.spheretrace.scene.intersection import add_sphere, vec3

        near = (vec3(0, 0, -2), 0.5, 1)
        far = (vec3(0, 0, -2.6), 0.5, 2)
        for sphere in (near, far) if near_first else (far, near):
            add_sphere(*sphere)

        hit, t, material_id, _ = _query((0, 0, 0), (0, 0, -1))
        assert hit == 1
        assert material_id == 1
        assert t == pytest.approx(1.5, abs=1e-5)

    def test_t_max_limits_query(self):
        """Test that spheres beyond t_max are not reported."""
        from src.spheretrace.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0, 0, -10), 1.0, 0)
        hit, _, _, _ = _query((0, 0, 0), (0, 0, -1), t_max=5.0)
        assert hit == 0

    def test_t_min_ignores_surface_at_origin(self):
        """Test that a ray leaving a surface does not re-hit it at t ~ 0."""
        from src.spheretrace.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0, 0, 0), 1.0, 3)
        # Start on the surface heading outward
        hit, _, _, _ = _query((0, 0, 1), (0, 0, 1))
        assert hit == 0

    def test_ray_inside_sphere_hits_back_face(self):
        """Test that a ray from inside reports the back face."""
        from src.spheretrace.scene.intersection import add_sphere, vec3

        add_sphere(vec3(0, 0, 0), 2.0, 4)
        hit, t, material_id, front_face = _query((0, 0, 0), (1, 0, 0))

        assert hit == 1
        assert t == pytest.approx(2.0, abs=1e-5)
        assert material_id == 4
        assert front_face == 0
