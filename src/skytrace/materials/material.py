"""Material variant and scatter dispatch.

A material is a two-case tagged variant: Diffuse(albedo) or
Reflective(albedo, roughness). On the device it is stored as a
MaterialRecord whose ``kind`` field selects the case, and ``scatter`` is the
single place that dispatches on it.

Both cases attenuate by their albedo; only the scattered direction and the
absorption rule differ.
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from skytrace.materials.diffuse import scatter_diffuse
from skytrace.materials.reflective import scatter_reflective

# Type alias for 3D vectors
vec3 = tm.vec3


class MaterialKind(IntEnum):
    """Tag of the material variant."""

    DIFFUSE = 0
    REFLECTIVE = 1


@ti.dataclass
class MaterialRecord:
    """Device-side material.

    Attributes:
        kind: The MaterialKind tag.
        albedo: Reflectance color, channels in [0, 1].
        roughness: Reflective roughness in [0, 1]; unused for diffuse.
    """

    kind: ti.i32
    albedo: vec3
    roughness: ti.f32


@ti.func
def scatter(
    material: MaterialRecord,
    incident_direction: vec3,
    normal: vec3,
    rng: ti.u32,
):
    """Scatter a ray that hit a surface with the given material.

    Args:
        material: The material of the hit surface.
        incident_direction: The incoming unit ray direction.
        normal: The unit outward surface normal.
        rng: The caller's RNG state.

    Returns:
        A tuple (attenuation, scattered_direction, did_scatter, rng) where
        did_scatter is 0 when the ray was absorbed.
    """
    attenuation = material.albedo
    direction = vec3(0.0, 0.0, 0.0)
    did_scatter = 0
    state = rng

    if material.kind == int(MaterialKind.DIFFUSE):
        direction, state = scatter_diffuse(normal, state)
        did_scatter = 1

    elif material.kind == int(MaterialKind.REFLECTIVE):
        direction, did_scatter, state = scatter_reflective(
            material.roughness, incident_direction, normal, state
        )

    return attenuation, direction, did_scatter, state
