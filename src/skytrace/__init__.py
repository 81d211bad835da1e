"""Stochastic sphere path tracer built on Taichi.

This package renders scenes of spheres into packed 24-bit framebuffers with:
- Path tracing with diffuse and reflective (optionally rough) materials
- A sky gradient as the only light source
- Jittered multi-sample anti-aliasing and gamma 2 correction
- Reproducible per-pixel random streams derived from one seed
- A background render worker for request/response rendering

Subpackages:
    core: Vector math, RNG, path integrator, frame renderer, render worker
    geometry: Sphere primitive and ray-sphere intersection
    materials: Diffuse and reflective scattering
    scene: Scene description, device upload and presets
    camera: Fixed pinhole camera
    preview: Framebuffer unpacking and PNG export
"""

__version__ = "0.1.0"
