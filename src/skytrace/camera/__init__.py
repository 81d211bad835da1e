"""Camera module for primary ray generation.

Components:
    pinhole: Fixed pinhole camera at the origin looking down -z

Note: pinhole declares Taichi fields and is imported directly once Taichi
is initialized:
    from skytrace.camera.pinhole import Camera, setup_camera
"""
