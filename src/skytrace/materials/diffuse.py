"""Diffuse (Lambertian-like) material.

A diffuse surface scatters in the direction

    normalize(normal + random_unit_vector())

which is the classic cosine-weighted approximation of Lambertian reflection:
offsetting a uniform unit vector by the normal concentrates samples around
the normal. The attenuation is the albedo and the ray is never absorbed.

Example:
    >>> # Inside a Taichi kernel:
    >>> # direction, rng = scatter_diffuse(normal, rng)
"""

import taichi as ti
import taichi.math as tm

from skytrace.core.ray import near_zero, random_unit_vector

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_diffuse(normal: vec3, rng: ti.u32):
    """Sample a scattered direction for a diffuse surface.

    When the random vector almost cancels the normal the sum cannot be
    normalized, and the normal itself is used instead.

    Args:
        normal: The unit surface normal at the hit point.
        rng: The caller's RNG state.

    Returns:
        A tuple (scattered_direction, rng) with a unit direction in the
        hemisphere around the normal.
    """
    offset, state = random_unit_vector(rng)
    scattered = normal + offset
    direction = normal
    if not near_zero(scattered):
        direction = tm.normalize(scattered)
    return direction, state
