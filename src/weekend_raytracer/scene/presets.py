"""Ready-made scenes with matching cameras.

Each factory resets the global scene, fills it, and returns the
SceneManager together with a ThinLensCamera configured for it:

- create_single_sphere_scene: one diffuse sphere in front of a pinhole
  camera, the smallest scene that shows shading against the sky.
- create_material_demo_scene: a ground sphere with diffuse, hollow glass
  and metal spheres side by side, viewed through a defocused lens.
- create_random_scene: a large field of small random spheres around three
  feature spheres.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from weekend_raytracer.scene.presets import create_random_scene
    >>> scene, camera = create_random_scene(aspect_ratio=3.0 / 2.0, seed=7)
"""

import math

import numpy as np

from weekend_raytracer.camera.thin_lens import ThinLensCamera
from weekend_raytracer.scene.manager import SceneManager

# Half-extent of the random sphere grid: centers span [-GRID, GRID) in x and z
RANDOM_SCENE_GRID = 11

# Random spheres closer than this to the large metal sphere are skipped
_FEATURE_CLEARANCE = 0.9


def create_single_sphere_scene(
    aspect_ratio: float = 16.0 / 9.0,
) -> tuple[SceneManager, ThinLensCamera]:
    """One gray diffuse sphere of radius 0.5 at (0, 0, -1).

    The pinhole camera sits at the origin looking down -z with a 90 degree
    vertical field of view, so the sphere appears as a disc in the center of
    the image surrounded by sky.
    """
    scene = SceneManager()
    scene.add_lambertian_sphere(center=(0.0, 0.0, -1.0), radius=0.5, albedo=(0.5, 0.5, 0.5))

    camera = ThinLensCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=aspect_ratio,
        aperture=0.0,
        focus_dist=1.0,
    )
    return scene, camera


def create_material_demo_scene(
    aspect_ratio: float = 16.0 / 9.0,
) -> tuple[SceneManager, ThinLensCamera]:
    """Diffuse, hollow glass and metal spheres resting on a large ground sphere.

    The left glass sphere is hollow: an outer sphere of radius 0.5 and an
    inner sphere of radius -0.45 share one dielectric material.
    """
    scene = SceneManager()

    ground = scene.add_lambertian_material(albedo=(0.8, 0.8, 0.0))
    center = scene.add_lambertian_material(albedo=(0.1, 0.2, 0.5))
    glass = scene.add_dielectric_material(ior=1.5)
    gold = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.0)

    scene.add_sphere((0.0, -100.5, -1.0), 100.0, ground)
    scene.add_sphere((0.0, 0.0, -1.0), 0.5, center)
    scene.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
    scene.add_sphere((-1.0, 0.0, -1.0), -0.45, glass)
    scene.add_sphere((1.0, 0.0, -1.0), 0.5, gold)

    lookfrom = (3.0, 3.0, 2.0)
    lookat = (0.0, 0.0, -1.0)
    camera = ThinLensCamera(
        lookfrom=lookfrom,
        lookat=lookat,
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=2.0,
        focus_dist=math.dist(lookfrom, lookat),
    )
    return scene, camera


def create_random_scene(
    aspect_ratio: float = 3.0 / 2.0,
    seed: int | None = None,
) -> tuple[SceneManager, ThinLensCamera]:
    """Random field of small spheres around three large feature spheres.

    Small spheres of radius 0.2 are placed on a jittered grid. Each picks a
    material at random: 80% diffuse, 15% metal, 5% glass. All glass spheres
    share one dielectric material.

    Args:
        aspect_ratio: Camera aspect ratio (width / height).
        seed: Seed for scene generation. The same seed yields the same scene.
    """
    rng = np.random.default_rng(seed)
    scene = SceneManager()

    ground = scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
    scene.add_sphere((0.0, -1000.0, 0.0), 1000.0, ground)

    glass = scene.add_dielectric_material(ior=1.5)
    feature_point = np.array([4.0, 0.2, 0.0])

    for a in range(-RANDOM_SCENE_GRID, RANDOM_SCENE_GRID):
        for b in range(-RANDOM_SCENE_GRID, RANDOM_SCENE_GRID):
            choose_mat = rng.random()
            center = np.array([a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random()])

            if np.linalg.norm(center - feature_point) <= _FEATURE_CLEARANCE:
                continue

            center_tuple = (float(center[0]), float(center[1]), float(center[2]))
            if choose_mat < 0.8:
                albedo = rng.random(3) * rng.random(3)
                scene.add_lambertian_sphere(center_tuple, 0.2, tuple(albedo.tolist()))
            elif choose_mat < 0.95:
                albedo = rng.uniform(0.5, 1.0, 3)
                fuzz = float(rng.uniform(0.0, 0.5))
                scene.add_metal_sphere(center_tuple, 0.2, tuple(albedo.tolist()), fuzz)
            else:
                scene.add_sphere(center_tuple, 0.2, glass)

    scene.add_sphere((0.0, 1.0, 0.0), 1.0, glass)
    scene.add_lambertian_sphere((-4.0, 1.0, 0.0), 1.0, albedo=(0.4, 0.2, 0.1))
    scene.add_metal_sphere((4.0, 1.0, 0.0), 1.0, albedo=(0.7, 0.6, 0.5), fuzz=0.0)

    camera = ThinLensCamera(
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0,
    )
    return scene, camera
