"""Frame renderer: one complete image per render request.

For every pixel the renderer casts ``samples_per_pixel`` jittered primary
rays through the path integrator, averages them, applies gamma 2 correction
(square root per channel), clamps to [0, 1], quantizes each channel with
``int(c * 255.99)`` and packs the result as ``R << 16 | G << 8 | B``.

The pixel loop is the outermost loop of a Taichi kernel, so pixels are
evaluated in parallel. Each pixel derives its own RNG state from the frame
seed and its linear index and writes one slot of the output array; the
scene and camera are read-only while the kernel runs. They are stored in
module-level Taichi fields, so concurrent calls to ``render`` from several
threads are serialized by a lock.

The output is a flat ``uint32`` numpy array of length width * height,
row-major with the top row first, freshly allocated per call.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.core.renderer import render
    >>> from skytrace.scene.presets import default_scene
    >>> pixels = render(320, 180, default_scene(), seed=7)
    >>> pixels.shape
    (57600,)
"""

import logging
import threading
import time
from dataclasses import dataclass
from enum import IntEnum

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from skytrace.camera.pinhole import Camera, primary_ray_jittered, setup_camera
from skytrace.core.integrator import MAX_DEPTH, shade_normal, trace_path
from skytrace.core.ray import clamp_color, is_normalized
from skytrace.core.rng import resolve_seed, seed_pixel
from skytrace.scene.description import Scene
from skytrace.scene.intersection import upload_scene

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# Jittered primary rays per pixel
SAMPLES_PER_PIXEL = 4

# Scale used to quantize a [0, 1] channel to 8 bits
QUANTIZE_SCALE = 255.99

# Scene and camera live in module-level fields; one render uses them at a time
_render_lock = threading.Lock()


class ShadingMode(IntEnum):
    """What a primary ray evaluates to."""

    PATH = 0
    NORMALS = 1


@dataclass(frozen=True)
class RenderSettings:
    """Per-render options.

    Attributes:
        samples_per_pixel: Jittered samples averaged per pixel.
        max_depth: Bounce limit of each path.
        seed: Frame seed. None uses the process-wide seed.
        shading: PATH for path tracing, NORMALS to visualize surface normals.
        camera: The camera model.
    """

    samples_per_pixel: int = SAMPLES_PER_PIXEL
    max_depth: int = MAX_DEPTH
    seed: int | None = None
    shading: ShadingMode = ShadingMode.PATH
    camera: Camera = Camera()

    def __post_init__(self) -> None:
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}")
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {self.max_depth}")
        if self.seed is not None and self.seed < 0:
            raise ValueError(f"Seed must be non-negative, got {self.seed}")


def validate_dimensions(width: int, height: int) -> None:
    """Reject frame sizes that cannot be rendered.

    Raises:
        ValueError: If width or height is less than 1.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Frame dimensions must be positive, got {width}x{height}")


# =============================================================================
# Display Conversion
# =============================================================================


@ti.func
def gamma_correct(color: vec3) -> vec3:
    """Apply gamma 2 correction and clamp to [0, 1]."""
    return clamp_color(tm.sqrt(tm.max(color, vec3(0.0, 0.0, 0.0))), 0.0, 1.0)


@ti.func
def quantize(channel: ti.f32) -> ti.u32:
    """Map a channel in [0, 1] to an integer in [0, 255]."""
    return ti.cast(channel * QUANTIZE_SCALE, ti.u32)


@ti.func
def pack_rgb(color: vec3) -> ti.u32:
    """Pack a display color in [0, 1] as R << 16 | G << 8 | B."""
    r = quantize(color.x)
    g = quantize(color.y)
    b = quantize(color.z)
    return (r << 16) | (g << 8) | b


def unpack_rgb(value: int) -> tuple[int, int, int]:
    """Split a packed pixel into its (R, G, B) bytes."""
    return (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF


# =============================================================================
# Rendering Kernel
# =============================================================================


@ti.kernel
def _render_frame(
    width: ti.i32,
    height: ti.i32,
    seed: ti.u32,
    samples: ti.i32,
    max_depth: ti.i32,
    shading: ti.i32,
    out: ti.types.ndarray(dtype=ti.u32, ndim=1),
):
    """Render every pixel of a frame into out[y * width + x]."""
    for y, x in ti.ndrange(height, width):
        index = y * width + x
        rng = seed_pixel(seed, ti.cast(index, ti.u32))
        color = vec3(0.0, 0.0, 0.0)

        for _ in range(samples):
            origin, direction, rng = primary_ray_jittered(x, y, width, height, rng)
            assert is_normalized(direction), "primary ray direction is not unit length"

            if shading == int(ShadingMode.NORMALS):
                color += shade_normal(origin, direction)
            else:
                result = trace_path(origin, direction, rng, max_depth)
                rng = result.rng_state
                color += result.color

        out[index] = pack_rgb(gamma_correct(color / ti.cast(samples, ti.f32)))


# =============================================================================
# Public Rendering API
# =============================================================================


def render(
    width: int,
    height: int,
    scene: Scene,
    *,
    seed: int | None = None,
    settings: RenderSettings | None = None,
) -> npt.NDArray[np.uint32]:
    """Render a scene into a packed 24-bit framebuffer.

    Two calls with the same seed, size, scene and settings produce identical
    buffers.

    Args:
        width: Frame width in pixels (at least 1).
        height: Frame height in pixels (at least 1).
        scene: The scene to render. It is uploaded to the device first.
        seed: Frame seed, overriding settings.seed. If both are None the
            process-wide seed is used.
        settings: Render options. Defaults to RenderSettings().

    Returns:
        A uint32 array of length width * height, row-major, top row first.

    Raises:
        ValueError: If the dimensions or the seed are invalid.
        RuntimeError: If the scene exceeds the device capacity.
    """
    validate_dimensions(width, height)
    if settings is None:
        settings = RenderSettings()
    frame_seed = resolve_seed(seed if seed is not None else settings.seed)

    pixels = np.zeros(width * height, dtype=np.uint32)

    with _render_lock:
        start_time = time.perf_counter()
        sphere_count = upload_scene(scene)
        setup_camera(settings.camera, width, height)
        _render_frame(
            width,
            height,
            frame_seed,
            settings.samples_per_pixel,
            settings.max_depth,
            int(settings.shading),
            pixels,
        )
        ti.sync()
        elapsed = time.perf_counter() - start_time

    logger.debug(
        "Rendered %dx%d frame (%d spheres, %d spp, seed %d) in %.3fs",
        width,
        height,
        sphere_count,
        settings.samples_per_pixel,
        frame_seed,
        elapsed,
    )
    return pixels
