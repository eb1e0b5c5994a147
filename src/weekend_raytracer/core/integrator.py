"""Path tracing integrator for Monte Carlo light transport.

ray_color estimates the radiance arriving along a ray. Paths bounce off
spheres according to their materials until they escape to the sky, are
absorbed, or run out of bounces:

    - Escaped rays pick up the sky gradient, a blend from white at the
      horizon to light blue overhead.
    - Absorbed rays and rays that exhaust max_depth contribute black.
    - Every scatter multiplies the path throughput by the material's
      attenuation.

The loop is iterative with a running throughput product, which gives the
same estimate as the textbook recursion without a call stack.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from weekend_raytracer.core.integrator import trace_ray
    >>> from weekend_raytracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> color = trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), max_depth=10)
    >>> # Empty scene: straight up sees the zenith color (0.5, 0.7, 1.0)
"""

import taichi as ti
import taichi.math as tm

from weekend_raytracer.core.ray import Ray, lerp, make_ray
from weekend_raytracer.materials.dielectric import scatter_dielectric_by_id
from weekend_raytracer.materials.lambertian import scatter_lambertian_by_id
from weekend_raytracer.materials.metal import scatter_metal_by_id
from weekend_raytracer.scene.intersection import intersect_scene
from weekend_raytracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Default maximum ray bounces (path length)
DEFAULT_MAX_DEPTH = 50

# t_min and t_max for ray intersection; t_min keeps scattered rays from
# re-hitting the surface they left
T_MIN = 0.001
T_MAX = 1e10

# Sky gradient endpoints
SKY_HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = vec3(0.5, 0.7, 1.0)


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    worker: ti.i32,
):
    """Dispatch to the scatter function of a material's type.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). Unknown
        material ids absorb the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter = scatter_lambertian_by_id(
            type_index, normal, worker
        )

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal_by_id(
            type_index, incident_direction, normal, worker
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter = scatter_dielectric_by_id(
            type_index, incident_direction, normal, front_face, worker
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Background radiance for a ray that escapes the scene."""
    t = 0.5 * (tm.normalize(direction).y + 1.0)
    return lerp(SKY_HORIZON_COLOR, SKY_ZENITH_COLOR, t)


@ti.func
def ray_color(ray: Ray, max_depth: ti.i32, worker: ti.i32) -> vec3:
    """Estimate the radiance carried back along a ray.

    Args:
        ray: The primary ray.
        max_depth: Maximum number of surface interactions. A value of 0
            returns black without tracing.
        worker: Index of the generator stream used for scattering.

    Returns:
        The radiance estimate (RGB). Every component is >= 0.
    """
    origin = ray.origin
    direction = ray.direction

    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)

    # Active flag for path continuation (no break in ti.func loops)
    active = 1

    for _ in range(max_depth):
        if active == 1:
            rec = intersect_scene(make_ray(origin, direction), T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * sky_color(direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = _scatter_material(
                    rec.material_id, direction, rec.normal, rec.front_face, worker
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    origin = rec.point
                    direction = scattered_direction

    # Paths still active here ran out of bounces and stay black
    return color


# =============================================================================
# Single-Ray Kernel (debugging and tests)
# =============================================================================


_single_ray_color = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _trace_single_ray(
    origin: vec3,
    direction: vec3,
    max_depth: ti.i32,
    worker: ti.i32,
):
    # Keep the bounce loop nested so it runs serially
    ti.loop_config(serialize=True)
    for _ in range(1):
        _single_ray_color[None] = ray_color(make_ray(origin, direction), max_depth, worker)


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = DEFAULT_MAX_DEPTH,
    worker: int = 0,
) -> tuple[float, float, float]:
    """Estimate the radiance along one ray against the current scene.

    This is a Python-callable helper for testing and debugging. Rendering
    whole images goes through core.renderer.render.

    Args:
        origin: Ray origin as (x, y, z).
        direction: Ray direction as (x, y, z). Need not be normalized.
        max_depth: Maximum number of bounces.
        worker: Generator stream to sample from.

    Returns:
        Tuple of (R, G, B) radiance values.

    Raises:
        ValueError: If max_depth is negative.
    """
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")

    _trace_single_ray(vec3(*origin), vec3(*direction), max_depth, worker)
    color = _single_ray_color[None]
    return (float(color[0]), float(color[1]), float(color[2]))
