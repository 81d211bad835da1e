"""Sphere primitive with ray-sphere intersection.

The intersection solves the quadratic

    |origin + t * direction - center|^2 = radius^2

in its textbook form a*t^2 + b*t + c = 0 with

    a = dot(direction, direction)
    b = 2 * dot(oc, direction)
    c = dot(oc, oc) - radius^2
    oc = origin - center

and keeps the smallest root greater than HIT_EPSILON. The epsilon rejects
the spurious self-intersection of a scattered ray with the surface it
starts on ("shadow acne").

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.geometry.sphere import SphereShape, hit_sphere
    >>> sphere = SphereShape(origin=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Minimum accepted hit distance along a ray
HIT_EPSILON = 1e-3


@ti.dataclass
class SphereShape:
    """Geometric part of a sphere.

    Attributes:
        origin: The center of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    origin: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: 1 if the ray intersected the sphere, 0 on a miss.
        point: The intersection point. Only valid if hit == 1.
        normal: Unit surface normal at the intersection point, pointing away
            from the sphere center. It is not flipped for rays that start
            inside the sphere. Only valid if hit == 1.
        distance: Distance along the ray, always > HIT_EPSILON.
            Only valid if hit == 1.
    """

    hit: ti.i32
    point: vec3
    normal: vec3
    distance: ti.f32


@ti.func
def make_miss_record() -> HitRecord:
    return HitRecord(hit=0, point=vec3(0.0), normal=vec3(0.0), distance=0.0)


@ti.func
def hit_sphere(ray_origin: vec3, ray_direction: vec3, sphere: SphereShape) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        sphere: The sphere to test against.

    Returns:
        A HitRecord for the nearest intersection further than HIT_EPSILON.
        Check the hit field to determine whether an intersection occurred.
    """
    oc = ray_origin - sphere.origin
    a = tm.dot(ray_direction, ray_direction)
    b = 2.0 * tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = b * b - 4.0 * a * c

    result = make_miss_record()

    # A tangent ray (discriminant == 0) counts as a miss
    if discriminant > 0.0:
        sqrt_d = ti.sqrt(discriminant)
        near = (-b - sqrt_d) / (2.0 * a)
        far = (-b + sqrt_d) / (2.0 * a)

        distance = -1.0
        if near > HIT_EPSILON:
            distance = near
        elif far > HIT_EPSILON:
            distance = far

        if distance > 0.0:
            point = ray_origin + ray_direction * distance
            result = HitRecord(
                hit=1,
                point=point,
                normal=tm.normalize(point - sphere.origin),
                distance=distance,
            )

    return result


@ti.func
def make_sphere(origin: vec3, radius: ti.f32) -> SphereShape:
    return SphereShape(origin=origin, radius=radius)
