"""Path integrator: follow one ray through the scene.

Light transport is modelled backward from the camera. A path starts with
white throughput; every surface it hits multiplies the throughput by the
material's attenuation, and a path that escapes the scene picks up the sky
gradient, the only light source.

The bounce loop is bounded by an explicit depth limit instead of recursion,
so stack use is constant regardless of the scene, and it stops as soon as
the path escapes or is absorbed. Scattered directions are checked for unit
length when Taichi runs with debug=True. A path that runs out of
bounces keeps its accumulated color, which loses some energy compared to an
unbounded trace.

Example:
    >>> # Inside a Taichi kernel, after upload_scene(scene):
    >>> # result = trace_path(origin, direction, rng, MAX_DEPTH)
    >>> # color, rng = result.color, result.rng_state
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from skytrace.core.ray import is_normalized, lerp
from skytrace.materials.material import scatter
from skytrace.scene.intersection import get_sphere_material, intersect_scene

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Maximum ray bounces (path length)
MAX_DEPTH = 100

# Sky gradient endpoints: straight up is white, straight down is sky blue
SKY_WHITE = vec3(1.0, 1.0, 1.0)
SKY_COLOR = vec3(0.5, 0.7, 1.0)


class PathStatus(IntEnum):
    """How a traced path ended."""

    ESCAPED = 0
    ABSORBED = 1
    EXHAUSTED = 2


@ti.dataclass
class PathResult:
    """Outcome of tracing one path.

    Attributes:
        color: The color carried back to the camera.
        bounces: Number of surface hits along the path.
        status: The PathStatus the path ended with.
        rng_state: The RNG state after the path, for the next sample.
    """

    color: vec3
    bounces: ti.i32
    status: ti.i32
    rng_state: ti.u32


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Background color seen along a unit direction.

    Blends from sky blue (pointing down) to white (pointing up) on the
    vertical component of the direction.
    """
    t = 0.5 * (direction.y + 1.0)
    return lerp(SKY_WHITE, SKY_COLOR, 1.0 - t)


@ti.func
def trace_path(
    origin: vec3,
    direction: vec3,
    rng: ti.u32,
    max_depth: ti.i32,
) -> PathResult:
    """Trace a single path from the camera through the scene.

    Args:
        origin: Origin of the primary ray.
        direction: Unit direction of the primary ray.
        rng: The caller's RNG state.
        max_depth: Maximum number of bounces.

    Returns:
        A PathResult with the path color and the advanced RNG state.
    """
    color = vec3(1.0, 1.0, 1.0)
    ray_origin = origin
    ray_direction = direction
    state = rng
    bounces = 0
    status = int(PathStatus.EXHAUSTED)

    # Serial so that break also works when this is the kernel's outermost loop
    ti.loop_config(serialize=True)
    for _ in range(max_depth):
        hit_record = intersect_scene(ray_origin, ray_direction)

        if hit_record.hit == 0:
            # Ray escaped
            color *= sky_color(ray_direction)
            status = int(PathStatus.ESCAPED)
            break

        bounces += 1
        material = get_sphere_material(hit_record.sphere_index)
        attenuation, scattered_direction, did_scatter, state = scatter(
            material, ray_direction, hit_record.normal, state
        )

        if did_scatter == 0:
            color = vec3(0.0, 0.0, 0.0)
            status = int(PathStatus.ABSORBED)
            break

        assert is_normalized(scattered_direction), "scattered direction is not unit length"
        color *= attenuation
        ray_origin = hit_record.point
        ray_direction = scattered_direction

    return PathResult(color=color, bounces=bounces, status=status, rng_state=state)


@ti.func
def shade_normal(origin: vec3, direction: vec3) -> vec3:
    """Debug shading: map the nearest hit's normal to a color.

    Each normal component in [-1, 1] maps to a channel in [0, 1]. Rays that
    miss every sphere get the sky color.
    """
    color = sky_color(direction)
    hit_record = intersect_scene(origin, direction)
    if hit_record.hit == 1:
        color = hit_record.normal / 2.0 + 0.5
    return color
