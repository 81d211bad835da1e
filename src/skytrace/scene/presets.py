"""Ready-made scenes."""

from skytrace.scene.description import Diffuse, Reflective, Scene, Sphere


def default_scene() -> Scene:
    """A red sphere resting on a large red ground sphere."""
    red = Diffuse((1.0, 0.0, 0.0))
    return Scene(
        (
            Sphere((0.0, 0.0, -1.0), 0.5, red),
            Sphere((0.0, -100.5, -1.0), 100.0, red),
        )
    )


def showcase_scene() -> Scene:
    """A diffuse sphere flanked by a polished and a brushed metal sphere."""
    return Scene(
        (
            Sphere((0.0, -100.5, -1.0), 100.0, Diffuse((0.8, 0.8, 0.0))),
            Sphere((0.0, 0.0, -1.0), 0.5, Diffuse((0.7, 0.3, 0.3))),
            Sphere((-1.0, 0.0, -1.0), 0.5, Reflective((0.8, 0.8, 0.8), 0.0)),
            Sphere((1.0, 0.0, -1.0), 0.5, Reflective((0.8, 0.6, 0.2), 0.3)),
        )
    )
