"""Row-tiled parallel renderer.

The image rows are split into one contiguous band per worker:
partition_rows gives every worker height // num_threads rows, and the last
worker also takes the remainder. A single Taichi parallel-for over worker
indices runs on num_threads CPU threads. Each worker renders its band pixel by
pixel with its own generator stream, and the kernel launch returns only after
every worker has finished.

Workers write into a preallocated scratch buffer and count the rows they
complete. The caller's image is updated only after every worker reports its
full band; otherwise render raises RuntimeError and leaves the image as it
was.

Per pixel, samples_per_pixel jittered camera rays are averaged, then gamma
corrected with gamma 2 (square root) and clamped to [0, 0.999].

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, cpu_max_num_threads=8)
    >>> from weekend_raytracer.core.image import Image
    >>> from weekend_raytracer.core.renderer import render
    >>> from weekend_raytracer.scene.presets import create_material_demo_scene
    >>> scene, camera = create_material_demo_scene(aspect_ratio=16.0 / 9.0)
    >>> image = Image(400, 225)
    >>> render(image, scene, camera, samples_per_pixel=32, max_depth=50, num_threads=8)
"""

import logging
import time
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from weekend_raytracer.camera.thin_lens import ThinLensCamera, get_ray, setup_camera
from weekend_raytracer.core.image import Image
from weekend_raytracer.core.integrator import DEFAULT_MAX_DEPTH, ray_color
from weekend_raytracer.core.sampler import MAX_WORKERS, random_float, seed_sampler
from weekend_raytracer.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Render Defaults
# =============================================================================

DEFAULT_SAMPLES_PER_PIXEL = 100
DEFAULT_NUM_THREADS = 8

# Largest channel value written to an image
MAX_CHANNEL_VALUE = 0.999

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# =============================================================================
# Render Buffers
# =============================================================================

# Scratch image, indexed [y, x] with y = 0 the bottom row
_scratch = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Half-open row band [start, end) owned by each worker
_row_start = ti.field(dtype=ti.i32, shape=MAX_WORKERS)
_row_end = ti.field(dtype=ti.i32, shape=MAX_WORKERS)

# Rows completed by each worker during the last launch
_rows_done = ti.field(dtype=ti.i32, shape=MAX_WORKERS)


# =============================================================================
# Configuration
# =============================================================================


@dataclass
class RenderSettings:
    """Parameters of a render.

    Attributes:
        width: Image width in pixels (>= 2).
        height: Image height in pixels (>= 2).
        samples_per_pixel: Jittered camera rays averaged per pixel (>= 1).
        max_depth: Maximum bounces per path (>= 0).
        num_threads: Number of render workers, 1..MAX_WORKERS.
        seed: Base seed for the per-worker generators. None draws fresh
            entropy, so repeated renders differ.
    """

    width: int = 400
    height: int = 225
    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL
    max_depth: int = DEFAULT_MAX_DEPTH
    num_threads: int = DEFAULT_NUM_THREADS
    seed: int | None = None

    @classmethod
    def from_aspect_ratio(cls, width: int, aspect_ratio: float, **kwargs) -> "RenderSettings":
        """Derive the height from a width and an aspect ratio (width / height)."""
        if aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {aspect_ratio}")
        return cls(width=width, height=int(width / aspect_ratio), **kwargs)

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def validate(self) -> None:
        """Reject settings no render can run with.

        Raises:
            ValueError: Naming the first offending setting.
        """
        if self.width < 2 or self.height < 2:
            raise ValueError(
                f"Image must be at least 2x2 pixels, got {self.width}x{self.height}"
            )
        if self.width > MAX_IMAGE_WIDTH or self.height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({self.width}x{self.height}) exceed maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )
        if self.samples_per_pixel < 1:
            raise ValueError(
                f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if not 1 <= self.num_threads <= MAX_WORKERS:
            raise ValueError(
                f"num_threads must be between 1 and {MAX_WORKERS}, got {self.num_threads}"
            )
        if self.seed is not None and self.seed < 0:
            raise ValueError(f"seed must be non-negative, got {self.seed}")


def partition_rows(height: int, num_workers: int) -> list[tuple[int, int]]:
    """Split rows [0, height) into contiguous half-open bands, one per worker.

    Every worker gets height // num_workers rows; the last worker also takes
    the remainder. Bands are disjoint and cover every row exactly once.

    Raises:
        ValueError: If height is negative or num_workers is not positive.
    """
    if num_workers < 1:
        raise ValueError(f"num_workers must be positive, got {num_workers}")
    if height < 0:
        raise ValueError(f"height must be non-negative, got {height}")

    rows_per_worker = height // num_workers
    bands = []
    for worker in range(num_workers):
        start = worker * rows_per_worker
        end = height if worker == num_workers - 1 else start + rows_per_worker
        bands.append((start, end))
    return bands


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.func
def _render_pixel(
    x: ti.i32,
    y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    worker: ti.i32,
) -> vec3:
    """Average jittered samples for one pixel and map to display range."""
    color = vec3(0.0, 0.0, 0.0)

    for _ in range(samples_per_pixel):
        s = (ti.cast(x, ti.f32) + random_float(worker)) / ti.cast(width - 1, ti.f32)
        t = (ti.cast(y, ti.f32) + random_float(worker)) / ti.cast(height - 1, ti.f32)
        sample = ray_color(get_ray(s, t, worker), max_depth, worker)

        # Drop NaN/Inf samples instead of poisoning the average
        for c in ti.static(range(3)):
            if tm.isnan(sample[c]) or tm.isinf(sample[c]):
                sample[c] = 0.0

        color += sample

    color /= ti.cast(samples_per_pixel, ti.f32)

    # Gamma 2
    color = tm.sqrt(tm.max(color, 0.0))
    return tm.clamp(color, 0.0, MAX_CHANNEL_VALUE)


@ti.kernel
def _render_tiles(
    num_threads: ti.template(),
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
):
    """Render every worker's row band into the scratch buffer."""
    # One task per worker, pinned to num_threads CPU threads
    ti.loop_config(parallelize=num_threads, block_dim=1)
    for worker in range(num_threads):
        for y in range(_row_start[worker], _row_end[worker]):
            for x in range(width):
                _scratch[y, x] = _render_pixel(
                    x, y, width, height, samples_per_pixel, max_depth, worker
                )
            _rows_done[worker] += 1


@ti.kernel
def _copy_scratch(out: ti.types.ndarray(dtype=ti.f32, ndim=3), width: ti.i32, height: ti.i32):
    """Copy the rendered [0, height) x [0, width) region into out."""
    for y, x in ti.ndrange(height, width):
        for c in ti.static(range(3)):
            out[y, x, c] = _scratch[y, x][c]


# =============================================================================
# Public Rendering API
# =============================================================================


def render(
    image: Image,
    scene: SceneManager,
    camera: ThinLensCamera,
    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL,
    max_depth: int = DEFAULT_MAX_DEPTH,
    num_threads: int = DEFAULT_NUM_THREADS,
    seed: int | None = None,
) -> None:
    """Render the scene into image, blocking until every row is done.

    Args:
        image: Destination buffer. Overwritten in place on success.
        scene: The scene to render. Its records are uploaded into the scene
            fields first, so it need not be the most recently built manager.
            Must not be modified during the call.
        camera: Camera configuration. Its aspect ratio should match the
            image's for undistorted output.
        samples_per_pixel: Jittered camera rays averaged per pixel.
        max_depth: Maximum bounces per path.
        num_threads: Number of workers rendering row bands in parallel.
        seed: Base seed for reproducible output. None draws fresh entropy.

    Raises:
        ValueError: If any parameter or the camera is invalid. Raised before
            any work is done.
        RuntimeError: If a worker did not complete its rows. The image is
            left untouched.
    """
    settings = RenderSettings(
        width=image.width,
        height=image.height,
        samples_per_pixel=samples_per_pixel,
        max_depth=max_depth,
        num_threads=num_threads,
        seed=seed,
    )
    settings.validate()
    scene.upload()
    setup_camera(camera)
    seed_sampler(seed)

    bands = partition_rows(image.height, num_threads)
    expected_rows = np.zeros(MAX_WORKERS, dtype=np.int32)
    starts = np.zeros(MAX_WORKERS, dtype=np.int32)
    ends = np.zeros(MAX_WORKERS, dtype=np.int32)
    for worker, (start, end) in enumerate(bands):
        starts[worker] = start
        ends[worker] = end
        expected_rows[worker] = end - start
    _row_start.from_numpy(starts)
    _row_end.from_numpy(ends)
    _rows_done.fill(0)

    logger.debug("Row bands for %d workers: %s", num_threads, bands)
    logger.info(
        "Rendering %dx%d, %d spheres, %d spp, depth %d, %d threads",
        image.width,
        image.height,
        scene.get_sphere_count(),
        samples_per_pixel,
        max_depth,
        num_threads,
    )

    start_time = time.perf_counter()
    _render_tiles(num_threads, image.width, image.height, samples_per_pixel, max_depth)
    rows_done = _rows_done.to_numpy()
    elapsed = time.perf_counter() - start_time

    incomplete = np.nonzero(rows_done != expected_rows)[0]
    if incomplete.size > 0:
        worker = int(incomplete[0])
        raise RuntimeError(
            f"Render worker {worker} completed {rows_done[worker]} of "
            f"{expected_rows[worker]} rows"
        )

    _copy_scratch(image.pixels, image.width, image.height)
    logger.info("Render finished in %.2fs", elapsed)


def render_with_settings(
    scene: SceneManager,
    camera: ThinLensCamera,
    settings: RenderSettings,
) -> Image:
    """Allocate an image of the configured size and render into it."""
    settings.validate()
    image = Image(settings.width, settings.height)
    render(
        image,
        scene,
        camera,
        samples_per_pixel=settings.samples_per_pixel,
        max_depth=settings.max_depth,
        num_threads=settings.num_threads,
        seed=settings.seed,
    )
    return image
