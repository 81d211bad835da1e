"""Core rendering module.

Components:
    ray: Ray data structure and vector/color utilities
    rng: Seedable per-pixel random number generation
    integrator: Bounded-depth path tracing against the sky gradient
    renderer: Frame rendering, gamma correction and pixel packing
    worker: Background render thread and stale-frame filtering

All per-pixel work runs in Taichi kernels.
"""

from .ray import (
    Ray,
    clamp_color,
    dot,
    is_normalized,
    length,
    length_squared,
    lerp,
    make_ray,
    near_zero,
    normalize,
    random_in_unit_sphere,
    random_unit_vector,
    ray_at,
    reflect,
    vec3,
)
from .rng import next_float, pcg_hash, process_seed, resolve_seed, seed_pixel, set_process_seed

# Note: integrator, renderer and worker are NOT imported here because they
# pull in modules that declare Taichi fields. Import them directly once
# Taichi is initialized:
#   from skytrace.core.renderer import render

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "dot",
    "length",
    "length_squared",
    "normalize",
    "lerp",
    "clamp_color",
    "reflect",
    "near_zero",
    "is_normalized",
    "random_in_unit_sphere",
    "random_unit_vector",
    "pcg_hash",
    "seed_pixel",
    "next_float",
    "process_seed",
    "set_process_seed",
    "resolve_seed",
]
