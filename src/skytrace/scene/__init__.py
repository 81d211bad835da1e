"""Scene module: scene description and device-side scene queries.

Components:
    description: Immutable spheres, materials and scenes (host side)
    intersection: Upload into Taichi fields and nearest-hit scan
    presets: Ready-made scenes

Note: intersection declares Taichi fields, so it is not imported here.
Import it directly once Taichi is initialized:
    from skytrace.scene.intersection import upload_scene
"""

from .description import Diffuse, Material, Reflective, Scene, Sphere, material_from_dict
from .presets import default_scene, showcase_scene

__all__ = [
    "Diffuse",
    "Reflective",
    "Material",
    "Sphere",
    "Scene",
    "material_from_dict",
    "default_scene",
    "showcase_scene",
]
