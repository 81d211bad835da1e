"""Device-side scene storage and nearest-hit queries.

The scene is uploaded into Taichi fields in Structure-of-Arrays layout before
each render, then scanned linearly by ``intersect_scene``. Scenes are small,
so the O(spheres) cost per bounce needs no acceleration structure.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.scene.description import Diffuse, Scene, Sphere
    >>> from skytrace.scene.intersection import upload_scene
    >>> upload_scene(Scene((Sphere((0, 0, -1), 0.5, Diffuse((0.8, 0.3, 0.3))),)))
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from skytrace.geometry.sphere import SphereShape, hit_sphere
from skytrace.materials.material import MaterialRecord
from skytrace.scene.description import Scene

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Upper bound for hit distances
T_MAX = 1e10


@ti.dataclass
class SceneHitRecord:
    """Record of the nearest ray-scene intersection.

    Attributes:
        hit: 1 if any sphere was hit, 0 on a miss.
        point: The intersection point. Only valid if hit == 1.
        normal: Unit outward surface normal. Only valid if hit == 1.
        distance: Distance along the ray. Only valid if hit == 1.
        sphere_index: Index of the hit sphere in scan order, -1 on a miss.
    """

    hit: ti.i32
    point: vec3
    normal: vec3
    distance: ti.f32
    sphere_index: ti.i32


# Sphere storage: Structure of Arrays layout
sphere_origins = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_kinds = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
sphere_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_roughnesses = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from device storage.

    Only the count is reset; stale entries are overwritten by the next upload.
    """
    num_spheres[None] = 0


def upload_scene(scene: Scene) -> int:
    """Copy a scene description into device storage, replacing the previous one.

    Args:
        scene: The scene to upload.

    Returns:
        The number of spheres uploaded.

    Raises:
        RuntimeError: If the scene has more than MAX_SPHERES spheres.
    """
    count = len(scene)
    if count > MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded: {count}")

    for idx, sphere in enumerate(scene):
        material = sphere.material
        sphere_origins[idx] = list(sphere.origin)
        sphere_radii[idx] = sphere.radius
        sphere_material_kinds[idx] = int(material.kind)
        sphere_albedos[idx] = list(material.albedo)
        sphere_roughnesses[idx] = material.roughness

    num_spheres[None] = count
    return count


def get_sphere_count() -> int:
    """Get the number of spheres in device storage."""
    return int(num_spheres[None])


@ti.func
def get_sphere_material(sphere_index: ti.i32) -> MaterialRecord:
    """Get the material of a stored sphere."""
    return MaterialRecord(
        kind=sphere_material_kinds[sphere_index],
        albedo=sphere_albedos[sphere_index],
        roughness=sphere_roughnesses[sphere_index],
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    return SceneHitRecord(
        hit=0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        distance=0.0,
        sphere_index=-1,
    )


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Find the nearest sphere hit by a ray.

    Tests every stored sphere in order and keeps a hit only if it is
    strictly closer than the best one so far, so on an exact tie the first
    sphere wins.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.

    Returns:
        A SceneHitRecord for the closest intersection, or a miss record.
    """
    closest = T_MAX
    result = _make_miss_record()

    # The scan carries the closest hit from one sphere to the next
    ti.loop_config(serialize=True)
    for i in range(num_spheres[None]):
        sphere = SphereShape(origin=sphere_origins[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere)
        if rec.hit == 1 and rec.distance < closest:
            closest = rec.distance
            result = SceneHitRecord(
                hit=1,
                point=rec.point,
                normal=rec.normal,
                distance=rec.distance,
                sphere_index=i,
            )

    return result
