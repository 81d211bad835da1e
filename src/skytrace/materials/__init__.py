"""Materials module: how a surface scatters an incoming ray.

Components:
    material: MaterialKind tag, device-side MaterialRecord and scatter dispatch
    diffuse: Diffuse scattering around the surface normal
    reflective: Mirror reflection perturbed by roughness

Randomness always comes from the RNG state passed in by the caller.
"""

from .diffuse import scatter_diffuse
from .material import MaterialKind, MaterialRecord, scatter
from .reflective import scatter_reflective

__all__ = [
    "MaterialKind",
    "MaterialRecord",
    "scatter",
    "scatter_diffuse",
    "scatter_reflective",
]
