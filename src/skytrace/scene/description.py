"""Scene description: spheres and their materials.

These are plain, immutable Python values. A Scene is an ordered sequence of
spheres; the order is the order in which the renderer scans them, so on an
exact distance tie the earlier sphere wins.

Scenes can be exported to and loaded from dictionaries for JSON storage:

    {
        "spheres": [
            {
                "origin": [0.0, 0.0, -1.0],
                "radius": 0.5,
                "material": {"type": "diffuse", "albedo": [0.8, 0.3, 0.3]}
            },
            {
                "origin": [1.0, 0.0, -1.0],
                "radius": 0.5,
                "material": {
                    "type": "reflective",
                    "albedo": [0.8, 0.6, 0.2],
                    "roughness": 0.3
                }
            }
        ]
    }

Example:
    >>> scene = Scene(
    ...     spheres=(
    ...         Sphere((0.0, 0.0, -1.0), 0.5, Diffuse((0.8, 0.3, 0.3))),
    ...         Sphere((0.0, -100.5, -1.0), 100.0, Diffuse((0.8, 0.8, 0.0))),
    ...     )
    ... )
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, Union

from skytrace.materials.material import MaterialKind

Color = tuple[float, float, float]
Point = tuple[float, float, float]


def _as_triple(value: Iterable[float], name: str) -> tuple[float, float, float]:
    components = tuple(float(c) for c in value)
    if len(components) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(components)}")
    return components  # type: ignore[return-value]


def _validate_albedo(albedo: Color) -> None:
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )


@dataclass(frozen=True)
class Diffuse:
    """Diffuse material.

    Attributes:
        albedo: Reflectance color as (R, G, B), each component in [0, 1].
    """

    albedo: Color

    kind = MaterialKind.DIFFUSE

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", _as_triple(self.albedo, "albedo"))
        _validate_albedo(self.albedo)

    @property
    def roughness(self) -> float:
        return 0.0

    def to_dict(self) -> dict[str, Any]:
        return {"type": "diffuse", "albedo": list(self.albedo)}


@dataclass(frozen=True)
class Reflective:
    """Reflective material.

    Attributes:
        albedo: Reflectance color as (R, G, B), each component in [0, 1].
        roughness: Perturbation of the mirror direction in [0, 1].
            0 = perfect mirror, 1 = maximum fuzz.
    """

    albedo: Color
    roughness: float = 0.0

    kind = MaterialKind.REFLECTIVE

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", _as_triple(self.albedo, "albedo"))
        object.__setattr__(self, "roughness", float(self.roughness))
        _validate_albedo(self.albedo)
        if self.roughness < 0.0 or self.roughness > 1.0:
            raise ValueError(
                f"Roughness = {self.roughness} is outside [0, 1]. "
                "Roughness must be between 0 (perfect mirror) and 1 (maximum fuzz)."
            )

    def to_dict(self) -> dict[str, Any]:
        return {"type": "reflective", "albedo": list(self.albedo), "roughness": self.roughness}


Material = Union[Diffuse, Reflective]


def material_from_dict(data: dict[str, Any]) -> Material:
    """Build a material from its dictionary form.

    Raises:
        ValueError: If the material type is unknown or a value is invalid.
    """
    mat_type = str(data.get("type", "")).lower()
    if mat_type == "diffuse":
        return Diffuse(data.get("albedo", (0.5, 0.5, 0.5)))
    if mat_type == "reflective":
        return Reflective(data.get("albedo", (0.8, 0.8, 0.8)), data.get("roughness", 0.0))
    raise ValueError(f"Unknown material type: {mat_type!r}")


@dataclass(frozen=True)
class Sphere:
    """A sphere in the scene.

    Attributes:
        origin: The center of the sphere as (x, y, z).
        radius: The radius of the sphere (positive).
        material: The surface material.
    """

    origin: Point
    radius: float
    material: Material

    def __post_init__(self) -> None:
        object.__setattr__(self, "origin", _as_triple(self.origin, "origin"))
        object.__setattr__(self, "radius", float(self.radius))
        if not self.radius > 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")
        if not isinstance(self.material, (Diffuse, Reflective)):
            raise ValueError(f"Unsupported material: {self.material!r}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "origin": list(self.origin),
            "radius": self.radius,
            "material": self.material.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Sphere:
        return cls(
            origin=data.get("origin", (0.0, 0.0, 0.0)),
            radius=data.get("radius", 1.0),
            material=material_from_dict(data.get("material", {"type": "diffuse"})),
        )


@dataclass(frozen=True)
class Scene:
    """An ordered, read-only collection of spheres.

    Attributes:
        spheres: The spheres in scan order.
    """

    spheres: tuple[Sphere, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "spheres", tuple(self.spheres))

    def __len__(self) -> int:
        return len(self.spheres)

    def __iter__(self) -> Iterator[Sphere]:
        return iter(self.spheres)

    def with_sphere(self, sphere: Sphere) -> Scene:
        """Return a new scene with sphere appended."""
        return Scene(self.spheres + (sphere,))

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        return {"spheres": [sphere.to_dict() for sphere in self.spheres]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Scene:
        """Load a scene from a dictionary with a 'spheres' key.

        Raises:
            ValueError: If the dictionary contains invalid data.
        """
        return cls(tuple(Sphere.from_dict(s) for s in data.get("spheres", [])))
