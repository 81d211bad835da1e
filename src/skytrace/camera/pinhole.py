"""Fixed pinhole camera for primary ray generation.

The camera sits at the world origin looking down -z with +y up. The image
plane lies at the focal length in front of it; its height is fixed at 2.0
world units and its width follows the aspect ratio of the frame:

    horizontal = (viewport_width, 0, 0)
    vertical = (0, viewport_height, 0)
    lower_left = origin - horizontal/2 - vertical/2 - (0, 0, focal_length)

Normalized image coordinates run from u = 0 (left) to u = 1 (right) and
from v = 0 (bottom) to v = 1 (top).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.camera.pinhole import Camera, setup_camera
    >>> setup_camera(Camera(), width=640, height=360)
    >>> # Use get_ray / primary_ray_jittered within a Taichi kernel
"""

from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from skytrace.core.ray import Ray, make_ray
from skytrace.core.rng import next_float

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Camera:
    """Configuration of the pinhole camera.

    Attributes:
        origin: Camera position in world space.
        viewport_height: Height of the image plane in world units.
        focal_length: Distance from the origin to the image plane along -z.
    """

    origin: tuple[float, float, float] = (0.0, 0.0, 0.0)
    viewport_height: float = 2.0
    focal_length: float = 1.0


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_camera(camera: Camera, width: int, height: int) -> None:
    """Compute the viewport geometry for a frame size.

    Args:
        camera: Camera configuration.
        width: Frame width in pixels (positive).
        height: Frame height in pixels (positive).
    """
    aspect_ratio = width / height
    viewport_width = aspect_ratio * camera.viewport_height

    origin = np.array(camera.origin, dtype=np.float32)
    horizontal = np.array([viewport_width, 0.0, 0.0], dtype=np.float32)
    vertical = np.array([0.0, camera.viewport_height, 0.0], dtype=np.float32)
    depth = np.array([0.0, 0.0, camera.focal_length], dtype=np.float32)

    lower_left = origin - horizontal / 2.0 - vertical / 2.0 - depth

    _camera_origin[None] = origin.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Generate the ray through normalized image coordinates (u, v).

    Args:
        u: Horizontal coordinate in [0, 1] (left to right).
        v: Vertical coordinate in [0, 1] (bottom to top).

    Returns:
        A Ray from the camera origin with a unit direction.
    """
    point_on_viewport = (
        _lower_left_corner[None] + u * _viewport_horizontal[None] + v * _viewport_vertical[None]
    )
    origin = _camera_origin[None]
    return make_ray(origin, tm.normalize(point_on_viewport - origin))


@ti.func
def primary_ray_jittered(
    x: ti.i32,
    y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    rng: ti.u32,
):
    """Generate a jittered primary ray for pixel (x, y).

    The jitter is uniform within the pixel footprint. Image rows count from
    the top (y = 0) while v counts from the bottom, so row y maps to
    v = (height - 1 - y + jitter) / (height - 1). Denominators are clamped to
    1 so that frames one pixel wide or high stay well defined.

    Args:
        x: Pixel column (0 = left).
        y: Pixel row (0 = top).
        width: Frame width in pixels.
        height: Frame height in pixels.
        rng: The pixel's RNG state.

    Returns:
        A tuple (origin, direction, rng) describing the ray.
    """
    jitter_u, state = next_float(rng)
    jitter_v, state = next_float(state)

    u_scale = ti.cast(ti.max(width - 1, 1), ti.f32)
    v_scale = ti.cast(ti.max(height - 1, 1), ti.f32)

    u = (ti.cast(x, ti.f32) + jitter_u) / u_scale
    v = (ti.cast(height - 1 - y, ti.f32) + jitter_v) / v_scale

    ray = get_ray(u, v)
    return ray.origin, ray.direction, state


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get the current camera state for debugging.

    Returns:
        Dictionary with origin, horizontal, vertical and lower_left.
    """
    origin_vec = _camera_origin[None]
    h_vec = _viewport_horizontal[None]
    vert_vec = _viewport_vertical[None]
    ll_vec = _lower_left_corner[None]

    return {
        "origin": (float(origin_vec[0]), float(origin_vec[1]), float(origin_vec[2])),
        "horizontal": (float(h_vec[0]), float(h_vec[1]), float(h_vec[2])),
        "vertical": (float(vert_vec[0]), float(vert_vec[1]), float(vert_vec[2])),
        "lower_left": (float(ll_vec[0]), float(ll_vec[1]), float(ll_vec[2])),
    }
