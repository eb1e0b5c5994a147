"""Taichi-based Monte Carlo path tracer for scenes made of spheres.

Rays are traced on the CPU with Taichi kernels. Images are rendered in
parallel row bands, one independent random stream per worker, and saved as
plain-text PPM.

Subpackages:
    core: Rays, sampling, the path integrator, images and the tile renderer
    geometry: Sphere primitive and ray-sphere intersection
    materials: Lambertian, metal and dielectric scattering
    scene: Sphere storage, the scene manager and ready-made scenes
    camera: Thin-lens camera with depth of field
    export: PPM image output

Taichi must be initialized (ti.init) before any subpackage is imported,
since the subpackages allocate Taichi fields at import time.
"""

__version__ = "0.1.0"
