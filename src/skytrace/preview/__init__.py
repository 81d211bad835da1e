"""Preview module: turning framebuffers into images.

Components:
    export: Unpacking packed pixels, PNG export via Pillow, image comparison

Example:
    >>> from skytrace.preview import save_png
    >>> save_png(pixels, width, height, "output.png")
"""

from skytrace.preview.export import (
    compute_rmse,
    framebuffer_to_rgb,
    mean_pixel_value,
    save_png,
)

__all__ = [
    "framebuffer_to_rgb",
    "save_png",
    "mean_pixel_value",
    "compute_rmse",
]
