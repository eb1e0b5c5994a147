"""Core rendering module.

Components:
    ray: Ray data structure and vector utilities
    sampler: Per-worker random number streams
    image: Host-side RGB image buffer
    integrator: Iterative path tracing estimator (ray_color)
    renderer: Row-tiled parallel renderer

All per-ray computation runs in Taichi functions and kernels.
"""

from .image import Image
from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    lerp,
    make_ray,
    near_zero,
    normalize,
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)
from .sampler import (
    MAX_WORKERS,
    get_sampler_states,
    next_uint,
    random_float,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_range,
    seed_sampler,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from weekend_raytracer.core.integrator or .renderer when needed.

__all__ = [
    "Image",
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "lerp",
    "MAX_WORKERS",
    "seed_sampler",
    "get_sampler_states",
    "next_uint",
    "random_float",
    "random_range",
    "random_in_unit_sphere",
    "random_in_unit_disk",
]
