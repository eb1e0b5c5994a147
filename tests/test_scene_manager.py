"""Unit tests for the SceneManager.

Tests cover:
- Material registration (Lambertian, Metal, Dielectric)
- Material type tracking and lookup, host and kernel side
- Sphere addition with shared materials
- Validation and capacity errors
- Scene clearing and re-upload
"""

import pytest
import taichi as ti


@pytest.fixture
def fresh_scene():
    """Create a fresh SceneManager for each test."""
    from weekend_raytracer.scene.manager import SceneManager

    scene = SceneManager()
    yield scene
    scene.clear()


class TestMaterialRegistration:
    """Tests for material registration."""

    def test_ids_are_sequential_across_types(self, fresh_scene):
        assert fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5)) == 0
        assert fresh_scene.add_metal_material(albedo=(0.8, 0.8, 0.8), fuzz=0.1) == 1
        assert fresh_scene.add_dielectric_material(ior=1.5) == 2
        assert fresh_scene.get_material_count() == 3

    def test_material_validation_albedo(self, fresh_scene):
        with pytest.raises(ValueError):
            fresh_scene.add_lambertian_material(albedo=(1.5, 0.0, 0.0))

        with pytest.raises(ValueError):
            fresh_scene.add_metal_material(albedo=(-0.1, 0.5, 0.5))

    def test_material_validation_fuzz(self, fresh_scene):
        with pytest.raises(ValueError, match="Fuzz"):
            fresh_scene.add_metal_material(albedo=(0.8, 0.8, 0.8), fuzz=1.5)

        with pytest.raises(ValueError, match="Fuzz"):
            fresh_scene.add_metal_material(albedo=(0.8, 0.8, 0.8), fuzz=-0.1)

    def test_material_validation_ior(self, fresh_scene):
        with pytest.raises(ValueError):
            fresh_scene.add_dielectric_material(ior=0.0)

        with pytest.raises(ValueError):
            fresh_scene.add_dielectric_material(ior=-1.5)

    def test_ior_below_one_allowed(self, fresh_scene):
        """An air bubble inside water has a relative index below one."""
        material_id = fresh_scene.add_dielectric_material(ior=0.75)
        assert fresh_scene.get_material_info(material_id).params["ior"] == 0.75

    def test_failed_registration_does_not_consume_id(self, fresh_scene):
        with pytest.raises(ValueError):
            fresh_scene.add_lambertian_material(albedo=(2.0, 0.0, 0.0))
        assert fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5)) == 0


class TestMaterialTypeTracking:
    """Tests for material type tracking."""

    def test_get_material_type_python(self, fresh_scene):
        from weekend_raytracer.scene.manager import MaterialType

        fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        fresh_scene.add_metal_material(albedo=(0.8, 0.8, 0.8))
        fresh_scene.add_dielectric_material(ior=1.5)

        assert fresh_scene.get_material_type_python(0) == MaterialType.LAMBERTIAN
        assert fresh_scene.get_material_type_python(1) == MaterialType.METAL
        assert fresh_scene.get_material_type_python(2) == MaterialType.DIELECTRIC
        assert fresh_scene.get_material_type_python(99) is None

    def test_get_material_info(self, fresh_scene):
        from weekend_raytracer.scene.manager import MaterialType

        fresh_scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)

        info = fresh_scene.get_material_info(0)
        assert info is not None
        assert info.material_id == 0
        assert info.material_type == MaterialType.METAL
        assert info.type_index == 0
        assert info.params["albedo"] == (0.8, 0.6, 0.2)
        assert info.params["fuzz"] == 0.3
        assert fresh_scene.get_material_info(5) is None

    def test_kernel_side_lookup(self, fresh_scene):
        """Mixed registration order maps ids to the right type-local slots."""
        from weekend_raytracer.scene.manager import (
            MaterialType,
            get_material_type,
            get_material_type_index,
        )

        fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))  # id=0, lambertian[0]
        fresh_scene.add_metal_material(albedo=(0.8, 0.8, 0.8))  # id=1, metal[0]
        fresh_scene.add_lambertian_material(albedo=(0.2, 0.2, 0.8))  # id=2, lambertian[1]
        fresh_scene.add_dielectric_material(ior=1.5)  # id=3, dielectric[0]

        types = ti.field(dtype=ti.i32, shape=5)
        indices = ti.field(dtype=ti.i32, shape=5)

        @ti.kernel
        def test_kernel():
            for i in range(4):
                types[i] = get_material_type(i)
                indices[i] = get_material_type_index(i)
            types[4] = get_material_type(99)
            indices[4] = get_material_type_index(99)

        test_kernel()

        assert types[0] == int(MaterialType.LAMBERTIAN)
        assert types[1] == int(MaterialType.METAL)
        assert types[2] == int(MaterialType.LAMBERTIAN)
        assert types[3] == int(MaterialType.DIELECTRIC)
        assert types[4] == -1
        assert [indices[i] for i in range(5)] == [0, 0, 1, 0, -1]


class TestSphereAddition:
    """Tests for adding spheres with materials."""

    def test_spheres_share_material(self, fresh_scene):
        glass = fresh_scene.add_dielectric_material(ior=1.5)
        outer = fresh_scene.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
        inner = fresh_scene.add_sphere((-1.0, 0.0, -1.0), -0.45, glass)

        assert (outer, inner) == (0, 1)
        assert fresh_scene.get_sphere_count() == 2
        assert fresh_scene.get_material_count() == 1
        assert fresh_scene.spheres[1].radius == -0.45
        assert fresh_scene.spheres[1].material_id == glass

    def test_add_sphere_invalid_material(self, fresh_scene):
        with pytest.raises(ValueError, match="Invalid material_id"):
            fresh_scene.add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)

        fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        with pytest.raises(ValueError, match="Invalid material_id"):
            fresh_scene.add_sphere((0.0, 0.0, -1.0), 0.5, material_id=-1)

    def test_add_sphere_zero_radius(self, fresh_scene):
        material_id = fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        with pytest.raises(ValueError):
            fresh_scene.add_sphere((0.0, 0.0, -1.0), 0.0, material_id)
        assert fresh_scene.spheres == []

    def test_convenience_methods(self, fresh_scene):
        from weekend_raytracer.scene.manager import MaterialType

        _, lambertian_id = fresh_scene.add_lambertian_sphere((0, 0, -1), 0.5, (0.1, 0.2, 0.5))
        _, metal_id = fresh_scene.add_metal_sphere((1, 0, -1), 0.5, (0.8, 0.6, 0.2), 0.2)
        sphere_index, glass_id = fresh_scene.add_dielectric_sphere((-1, 0, -1), 0.5, 1.5)

        assert sphere_index == 2
        assert fresh_scene.get_material_type_python(lambertian_id) == MaterialType.LAMBERTIAN
        assert fresh_scene.get_material_type_python(metal_id) == MaterialType.METAL
        assert fresh_scene.get_material_type_python(glass_id) == MaterialType.DIELECTRIC

    def test_clear(self, fresh_scene):
        fresh_scene.add_lambertian_sphere((0, 0, -1), 0.5, (0.5, 0.5, 0.5))
        fresh_scene.clear()

        assert fresh_scene.get_sphere_count() == 0
        assert fresh_scene.get_material_count() == 0
        assert fresh_scene.materials == []
        assert fresh_scene.spheres == []

    def test_new_manager_resets_scene(self, fresh_scene):
        from weekend_raytracer.scene.manager import SceneManager

        fresh_scene.add_lambertian_sphere((0, 0, -1), 0.5, (0.5, 0.5, 0.5))
        other = SceneManager()
        assert other.get_sphere_count() == 0
        assert other.get_material_count() == 0

    def test_upload_restores_replaced_scene(self, fresh_scene):
        """upload() rewrites the fields after another manager wiped them."""
        from weekend_raytracer.scene.intersection import get_sphere_count
        from weekend_raytracer.scene.manager import (
            MaterialType,
            SceneManager,
            get_material_type,
            get_material_type_index,
        )

        fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        _, metal_id = fresh_scene.add_metal_sphere((1, 0, -1), 0.5, (0.8, 0.6, 0.2), 0.3)
        fresh_scene.add_lambertian_sphere((0, -100.5, -1), 100.0, (0.8, 0.8, 0.0))

        other = SceneManager()
        other.add_dielectric_sphere((0, 0, -1), 0.5, 1.5)
        fresh_scene.upload()

        assert get_sphere_count() == 2
        assert fresh_scene.get_material_count() == 3

        result = ti.field(dtype=ti.i32, shape=2)

        @ti.kernel
        def test_kernel(material_id: ti.i32):
            result[0] = get_material_type(material_id)
            result[1] = get_material_type_index(material_id)

        test_kernel(metal_id)
        assert result[0] == int(MaterialType.METAL)
        assert result[1] == 0

        test_kernel(2)
        assert result[0] == int(MaterialType.LAMBERTIAN)
        assert result[1] == 1


class TestCapacity:
    """Tests for capacity limits."""

    def test_capacity_methods(self, fresh_scene):
        from weekend_raytracer.materials.lambertian import MAX_LAMBERTIAN_MATERIALS

        assert fresh_scene.get_max_spheres() == 1024
        assert fresh_scene.get_max_materials() == 3 * MAX_LAMBERTIAN_MATERIALS

    def test_per_type_capacity(self, fresh_scene):
        from weekend_raytracer.materials.dielectric import MAX_DIELECTRIC_MATERIALS

        for _ in range(MAX_DIELECTRIC_MATERIALS):
            fresh_scene.add_dielectric_material(ior=1.5)
        with pytest.raises(RuntimeError, match="dielectric"):
            fresh_scene.add_dielectric_material(ior=1.5)
        # Other types are unaffected
        fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))


class TestIntegrationWithIntersection:
    """Tests that SceneManager works with intersection system."""

    def test_intersection_returns_correct_material_id(self, fresh_scene):
        from weekend_raytracer.core.ray import make_ray, vec3
        from weekend_raytracer.scene.intersection import intersect_scene

        mat0 = fresh_scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
        mat1 = fresh_scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.0)

        fresh_scene.add_sphere(center=(0.0, 0.0, -5.0), radius=0.5, material_id=mat1)
        fresh_scene.add_sphere(center=(0.0, 0.0, -3.0), radius=0.5, material_id=mat0)

        hit = ti.field(dtype=ti.i32, shape=())
        material_id = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0))
                rec = intersect_scene(ray, 0.001, 1000.0)
                hit[None] = rec.hit
                material_id[None] = rec.material_id

        test_kernel()

        assert hit[None] == 1
        assert material_id[None] == mat0
