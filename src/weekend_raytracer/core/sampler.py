"""Per-worker random number generation for Monte Carlo sampling.

Every render worker owns one 32-bit xorshift state stored in a Taichi field.
Sampling functions take the worker index explicitly and only ever read and
write that worker's slot, so concurrent workers never share mutable generator
state and a fixed seed reproduces each worker's stream exactly.

States are seeded from the host with ``numpy.random.SeedSequence``, which
yields statistically independent 32-bit words for each slot.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from weekend_raytracer.core.sampler import seed_sampler, random_float
    >>> seed_sampler(1234)
    >>> # Inside a kernel, worker 3 draws from its own stream:
    >>> # xi = random_float(3)
"""

import numpy as np
import taichi as ti

from weekend_raytracer.core.ray import length_squared, vec3

# Maximum number of independent generator streams (one per render worker)
MAX_WORKERS = 256

# Upper bound on rejection-sampling attempts; the acceptance rate is ~52% for
# the unit ball, so this is never reached in practice
MAX_REJECTION_ATTEMPTS = 64

# Replacement for a zero seed word (xorshift never leaves the zero state)
_ZERO_STATE_REPLACEMENT = 0x9E3779B9

_rng_states = ti.field(dtype=ti.u32, shape=MAX_WORKERS)


def seed_sampler(seed: int | None = None) -> None:
    """Seed every worker's generator stream.

    Args:
        seed: Base seed. The same seed always yields the same per-worker
            streams. None draws fresh entropy from the operating system.

    Raises:
        ValueError: If seed is negative.
    """
    if seed is not None and seed < 0:
        raise ValueError(f"Seed must be non-negative, got {seed}")

    states = np.random.SeedSequence(seed).generate_state(MAX_WORKERS, dtype=np.uint32)
    states[states == 0] = _ZERO_STATE_REPLACEMENT
    _rng_states.from_numpy(states)


def get_sampler_states() -> np.ndarray:
    """Get a copy of all generator states (for debugging and tests)."""
    return _rng_states.to_numpy()


@ti.func
def next_uint(worker: ti.i32) -> ti.u32:
    """Advance a worker's xorshift32 state and return the new value.

    Args:
        worker: Index of the generator stream to advance.

    Returns:
        A uniformly distributed non-zero 32-bit unsigned integer.
    """
    x = _rng_states[worker]
    x ^= x << ti.u32(13)
    x ^= x >> ti.u32(17)
    x ^= x << ti.u32(5)
    _rng_states[worker] = x
    return x


@ti.func
def random_float(worker: ti.i32) -> ti.f32:
    """Draw a uniform float in [0, 1) from a worker's stream.

    Uses the top 24 bits of the next state so the result is exactly
    representable in float32 and strictly below 1.
    """
    return ti.cast(next_uint(worker) >> ti.u32(8), ti.f32) * (1.0 / 16777216.0)


@ti.func
def random_range(worker: ti.i32, low: ti.f32, high: ti.f32) -> ti.f32:
    """Draw a uniform float in [low, high) from a worker's stream."""
    return low + (high - low) * random_float(worker)


@ti.func
def random_in_unit_sphere(worker: ti.i32) -> vec3:
    """Generate a random point strictly inside the unit ball.

    Uses rejection sampling: candidates in the enclosing cube with length >= 1
    are discarded.

    Args:
        worker: Index of the generator stream to draw from.

    Returns:
        A random point with length < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    # Taichi funcs cannot break out of loops, so keep drawing until found
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            candidate = vec3(
                random_range(worker, -1.0, 1.0),
                random_range(worker, -1.0, 1.0),
                random_range(worker, -1.0, 1.0),
            )
            if length_squared(candidate) < 1.0:
                p = candidate
                found = True
    return p


@ti.func
def random_in_unit_disk(worker: ti.i32) -> vec3:
    """Generate a random point inside the unit disk in the xy-plane.

    Used for lens sampling in the thin-lens camera.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            candidate = vec3(
                random_range(worker, -1.0, 1.0),
                random_range(worker, -1.0, 1.0),
                0.0,
            )
            if candidate.x * candidate.x + candidate.y * candidate.y < 1.0:
                p = candidate
                found = True
    return p
