"""Ray data structure and vector utilities for the sphere path tracer.

This module provides the Ray dataclass and the small set of vector and color
helpers used by the intersection, scattering and shading code. Everything
here is a Taichi function and runs inside kernels.

Random sampling helpers take the caller's RNG state explicitly and return the
advanced state alongside the sample (see ``skytrace.core.rng``), so no hidden
global random state is involved.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> # point = ray_at(ray, 5.0) inside a kernel
"""

import taichi as ti
import taichi.math as tm

from skytrace.core.rng import next_float

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Allowed deviation from unit length for direction vectors
UNIT_LENGTH_TOLERANCE = 1e-4

# Upper bound on rejection-sampling attempts
MAX_REJECTION_ATTEMPTS = 100


@ti.dataclass
class Ray:
    """A ray with an origin point and a unit direction.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3). Must be unit length
            before it is used for intersection or scattering.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point ray.origin + t * ray.direction."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def length(v: vec3) -> ti.f32:
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Squared Euclidean length, avoids the square root."""
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    return tm.normalize(v)


@ti.func
def lerp(a: vec3, b: vec3, t: ti.f32) -> vec3:
    """Linearly interpolate from a (t = 0) to b (t = 1)."""
    return a * (1.0 - t) + b * t


@ti.func
def clamp_color(color: vec3, lo: ti.f32, hi: ti.f32) -> vec3:
    """Clamp every channel of a color to [lo, hi]."""
    return tm.clamp(color, lo, hi)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (unit length).

    Returns:
        incident - 2 (incident . normal) normal
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Return 1 if all components of v are below 1e-8 in magnitude."""
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def is_normalized(v: vec3) -> ti.i32:
    """Return 1 if v is unit length within UNIT_LENGTH_TOLERANCE."""
    return ti.abs(tm.length(v) - 1.0) <= UNIT_LENGTH_TOLERANCE


# =============================================================================
# Random Sampling Utilities
# =============================================================================


@ti.func
def random_in_unit_sphere(rng: ti.u32):
    """Generate a random point inside the unit ball.

    Uses rejection sampling in the cube [-1, 1]^3. The loop is bounded by
    MAX_REJECTION_ATTEMPTS; the acceptance rate is about 52% so running out
    of attempts does not happen in practice, and the origin is returned if
    it does.

    Args:
        rng: The caller's RNG state.

    Returns:
        A tuple (point, rng) with length(point) < 1 and the advanced state.
    """
    state = rng
    p = vec3(0.0, 0.0, 0.0)
    found = False
    ti.loop_config(serialize=True)
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            x, state = next_float(state)
            y, state = next_float(state)
            z, state = next_float(state)
            candidate = vec3(x * 2.0 - 1.0, y * 2.0 - 1.0, z * 2.0 - 1.0)
            if length_squared(candidate) < 1.0:
                p = candidate
                found = True
    return p, state


@ti.func
def random_unit_vector(rng: ti.u32):
    """Generate a random unit vector by normalizing a point from the unit ball.

    A point that lands (almost) on the origin cannot be normalized; the +y
    axis is returned in that case.

    Args:
        rng: The caller's RNG state.

    Returns:
        A tuple (direction, rng).
    """
    p, state = random_in_unit_sphere(rng)
    result = vec3(0.0, 1.0, 0.0)
    if not near_zero(p):
        result = tm.normalize(p)
    return result, state
