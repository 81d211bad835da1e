"""Reflective (metal-like) material with optional roughness.

The mirror direction is

    R = I - 2(I . N)N

and a rough surface perturbs it by roughness * random_in_unit_sphere(). A
perturbed direction that points into the surface absorbs the ray.

Example:
    >>> # Inside a Taichi kernel:
    >>> # direction, did_scatter, rng = scatter_reflective(
    >>> #     roughness, incident_dir, normal, rng
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from skytrace.core.ray import random_in_unit_sphere, reflect

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_reflective(
    roughness: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    rng: ti.u32,
):
    """Compute the scattered direction for a reflective surface.

    The random offset is always drawn, so the RNG advances identically for
    every roughness; with roughness 0 it contributes nothing and the exact
    mirror direction is returned.

    Args:
        roughness: Surface roughness in [0, 1]. 0 = perfect mirror.
        incident_direction: The incoming unit ray direction.
        normal: The unit surface normal.
        rng: The caller's RNG state.

    Returns:
        A tuple (scattered_direction, did_scatter, rng) where:
        - scattered_direction: The unit reflected direction, or the zero
          vector when absorbed.
        - did_scatter: 1 if the ray left the surface, 0 if absorbed.
        - rng: The advanced RNG state.
    """
    reflected = reflect(incident_direction, normal)
    fuzz, state = random_in_unit_sphere(rng)
    perturbed = reflected + roughness * fuzz

    direction = vec3(0.0, 0.0, 0.0)
    did_scatter = 0
    if tm.dot(perturbed, normal) > 0.0:
        direction = tm.normalize(perturbed)
        did_scatter = 1

    return direction, did_scatter, state
