"""Framebuffer conversion and image export.

A framebuffer is the renderer's flat uint32 array of packed pixels. These
helpers unpack it into an (H, W, 3) uint8 image, save it as PNG and compare
frames numerically.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from skytrace.core.renderer import render
    >>> from skytrace.preview.export import save_png
    >>> pixels = render(320, 180, scene, seed=1)
    >>> save_png(pixels, 320, 180, "spheres.png")
"""

from __future__ import annotations

from os import PathLike

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage


def framebuffer_to_rgb(
    pixels: npt.NDArray[np.uint32],
    width: int,
    height: int,
) -> npt.NDArray[np.uint8]:
    """Unpack a framebuffer into an RGB image.

    Args:
        pixels: Packed pixels of length width * height, top row first.
        width: Frame width in pixels.
        height: Frame height in pixels.

    Returns:
        Array of shape (height, width, 3) with dtype uint8.

    Raises:
        ValueError: If the buffer length does not match the dimensions.
    """
    pixels = np.asarray(pixels, dtype=np.uint32)
    if pixels.size != width * height:
        raise ValueError(
            f"Framebuffer has {pixels.size} pixels, expected {width}x{height} = {width * height}"
        )

    grid = pixels.reshape(height, width)
    rgb = np.empty((height, width, 3), dtype=np.uint8)
    rgb[..., 0] = (grid >> 16) & 0xFF
    rgb[..., 1] = (grid >> 8) & 0xFF
    rgb[..., 2] = grid & 0xFF
    return rgb


def save_png(
    pixels: npt.NDArray[np.uint32],
    width: int,
    height: int,
    filepath: str | PathLike[str],
) -> None:
    """Save a framebuffer as an 8-bit RGB PNG file.

    The renderer already applied gamma correction, so pixels are written
    unchanged.
    """
    rgb = framebuffer_to_rgb(pixels, width, height)
    pil_image = PILImage.fromarray(rgb, mode="RGB")
    pil_image.save(filepath)


def mean_pixel_value(pixels: npt.NDArray[np.uint32], width: int, height: int) -> float:
    """Mean channel value of a framebuffer, in [0, 255]."""
    return float(framebuffer_to_rgb(pixels, width, height).mean())


def compute_rmse(
    image_a: npt.NDArray[np.generic],
    image_b: npt.NDArray[np.generic],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
