"""Tests for the frame renderer.

This module tests:
- Display conversion (gamma, clamping, quantization, packing)
- Frame layout, size and dtype
- Reproducibility from a seed
- Known pixels of simple scenes
- Settings and dimension validation

Note: Imports are done inside test methods so that Taichi fields are
declared after the session fixture has initialized Taichi.
"""

import threading

import numpy as np
import pytest
import taichi as ti


def _pack(r, g, b):
    from skytrace.core.renderer import gamma_correct, pack_rgb

    result = ti.field(dtype=ti.u32, shape=())

    @ti.kernel
    def pack_kernel():
        result[None] = pack_rgb(gamma_correct(ti.math.vec3(r, g, b)))

    pack_kernel()
    return int(result[None])


class TestDisplayConversion:
    """Tests for gamma_correct, pack_rgb and unpack_rgb."""

    def test_white_packs_to_full_intensity(self):
        assert _pack(1.0, 1.0, 1.0) == 0xFFFFFF

    def test_black_packs_to_zero(self):
        assert _pack(0.0, 0.0, 0.0) == 0

    def test_out_of_range_values_are_clamped(self):
        assert _pack(2.0, -1.0, 0.0) == 0xFF0000

    def test_gamma_two(self):
        from skytrace.core.renderer import unpack_rgb

        # sqrt(0.25) = 0.5 -> int(0.5 * 255.99) = 127
        assert unpack_rgb(_pack(0.25, 0.0, 1.0)) == (127, 0, 255)

    def test_channel_order(self):
        from skytrace.core.renderer import unpack_rgb

        assert unpack_rgb(_pack(1.0, 0.0, 0.0)) == (255, 0, 0)
        assert unpack_rgb(_pack(0.0, 1.0, 0.0)) == (0, 255, 0)
        assert unpack_rgb(_pack(0.0, 0.0, 1.0)) == (0, 0, 255)

    def test_unpack(self):
        from skytrace.core.renderer import unpack_rgb

        assert unpack_rgb(0x123456) == (0x12, 0x34, 0x56)


class TestFrameLayout:
    """Tests for the output buffer."""

    def test_length_and_dtype(self):
        from skytrace.core.renderer import render
        from skytrace.scene.presets import default_scene

        pixels = render(7, 5, default_scene(), seed=1)
        assert pixels.shape == (35,)
        assert pixels.dtype == np.uint32
        # Only the low 24 bits are used
        assert (pixels >> 24 == 0).all()

    def test_single_pixel_frame(self):
        from skytrace.core.renderer import render
        from skytrace.scene.presets import default_scene

        pixels = render(1, 1, default_scene(), seed=1)
        assert pixels.shape == (1,)

    def test_one_row_and_one_column_frames(self):
        from skytrace.core.renderer import render
        from skytrace.scene.presets import default_scene

        assert render(9, 1, default_scene(), seed=1).shape == (9,)
        assert render(1, 9, default_scene(), seed=1).shape == (9,)

    def test_empty_scene_top_is_whiter_than_bottom(self):
        from skytrace.core.renderer import render, unpack_rgb
        from skytrace.scene.description import Scene

        width, height = 10, 20
        pixels = render(width, height, Scene(), seed=3)
        top_red = unpack_rgb(int(pixels[width // 2]))[0]
        bottom_red = unpack_rgb(int(pixels[(height - 1) * width + width // 2]))[0]
        assert top_red > bottom_red
        # The sky is always fully blue
        assert all(unpack_rgb(int(p))[2] == 255 for p in pixels)

    @pytest.mark.parametrize("width,height", [(0, 10), (10, 0), (-1, 5)])
    def test_invalid_dimensions_raise(self, width, height):
        from skytrace.core.renderer import render
        from skytrace.scene.presets import default_scene

        with pytest.raises(ValueError, match="dimensions"):
            render(width, height, default_scene(), seed=1)


class TestReproducibility:
    """Tests for seeding."""

    def test_same_seed_same_frame(self):
        from skytrace.core.renderer import render
        from skytrace.scene.presets import showcase_scene

        a = render(24, 16, showcase_scene(), seed=42)
        b = render(24, 16, showcase_scene(), seed=42)
        assert np.array_equal(a, b)

    def test_different_seeds_are_statistically_similar(self):
        from skytrace.core.renderer import render
        from skytrace.preview.export import mean_pixel_value
        from skytrace.scene.presets import default_scene

        width, height = 32, 24
        a = render(width, height, default_scene(), seed=1)
        b = render(width, height, default_scene(), seed=2)
        assert not np.array_equal(a, b)
        assert abs(mean_pixel_value(a, width, height) - mean_pixel_value(b, width, height)) < 5.0

    def test_process_seed_used_when_none_given(self, monkeypatch):
        from skytrace.core import rng
        from skytrace.core.renderer import render
        from skytrace.scene.presets import default_scene

        monkeypatch.setattr(rng, "_process_seed", None)
        rng.set_process_seed(99)
        a = render(8, 8, default_scene())
        b = render(8, 8, default_scene(), seed=99)
        assert np.array_equal(a, b)

    def test_explicit_seed_overrides_settings(self):
        from skytrace.core.renderer import RenderSettings, render
        from skytrace.scene.presets import default_scene

        a = render(8, 8, default_scene(), seed=5, settings=RenderSettings(seed=6))
        b = render(8, 8, default_scene(), seed=5)
        assert np.array_equal(a, b)


class TestKnownPixels:
    """Pixels whose value follows from the scene geometry."""

    def test_default_scene_center_is_red_and_corner_is_sky(self):
        from skytrace.core.renderer import render, unpack_rgb
        from skytrace.scene.presets import default_scene

        width = height = 9
        pixels = render(width, height, default_scene(), seed=7)
        r, g, b = unpack_rgb(int(pixels[4 * width + 4]))
        # Red albedo removes green and blue completely
        assert r > 0
        assert (g, b) == (0, 0)

        r, g, b = unpack_rgb(int(pixels[0]))
        assert b == 255
        assert g > 0

    def test_black_sphere_center_pixel_is_black(self):
        from skytrace.core.renderer import render
        from skytrace.scene.description import Diffuse, Scene, Sphere

        scene = Scene((Sphere((0.0, 0.0, -1.0), 0.5, Diffuse((0.0, 0.0, 0.0))),))
        width = height = 9
        pixels = render(width, height, scene, seed=7)
        assert pixels[4 * width + 4] == 0

    def test_normal_shading(self):
        from skytrace.core.renderer import RenderSettings, ShadingMode, render, unpack_rgb
        from skytrace.scene.description import Diffuse, Scene, Sphere

        scene = Scene((Sphere((0.0, 0.0, -1.0), 0.5, Diffuse((0.0, 0.0, 0.0))),))
        settings = RenderSettings(shading=ShadingMode.NORMALS)
        width = height = 9
        pixels = render(width, height, scene, seed=7, settings=settings)
        r, g, b = unpack_rgb(int(pixels[4 * width + 4]))
        # Normals near (0, 0, 1) map to about (0.5, 0.5, 1.0) before gamma
        assert 150 < r < 215
        assert 150 < g < 215
        assert b > 240


class TestRenderSettings:
    """Tests for RenderSettings validation."""

    def test_defaults(self):
        from skytrace.core.integrator import MAX_DEPTH
        from skytrace.core.renderer import SAMPLES_PER_PIXEL, RenderSettings, ShadingMode

        settings = RenderSettings()
        assert settings.samples_per_pixel == SAMPLES_PER_PIXEL
        assert settings.max_depth == MAX_DEPTH
        assert settings.seed is None
        assert settings.shading == ShadingMode.PATH

    @pytest.mark.parametrize(
        "kwargs",
        [{"samples_per_pixel": 0}, {"max_depth": 0}, {"seed": -1}],
    )
    def test_invalid_settings_raise(self, kwargs):
        from skytrace.core.renderer import RenderSettings

        with pytest.raises(ValueError):
            RenderSettings(**kwargs)


class TestConcurrentRenders:
    """Renders from several threads do not see each other's scene."""

    def test_parallel_renders_match_serial_renders(self):
        from skytrace.core.renderer import render
        from skytrace.scene.description import Diffuse, Scene, Sphere

        red_scene = Scene((Sphere((0.0, 0.0, -1.0), 0.5, Diffuse((1.0, 0.0, 0.0))),))
        empty_scene = Scene()
        width = height = 48

        red_reference = render(width, height, red_scene, seed=1)
        empty_reference = render(width, height, empty_scene, seed=1)
        assert not np.array_equal(red_reference, empty_reference)

        rounds = 5
        red_frames = []
        errors = []

        def render_red():
            try:
                for _ in range(rounds):
                    red_frames.append(render(width, height, red_scene, seed=1))
            except Exception as exc:
                errors.append(exc)

        thread = threading.Thread(target=render_red)
        thread.start()
        empty_frames = [render(width, height, empty_scene, seed=1) for _ in range(rounds)]
        thread.join(timeout=120.0)

        assert not thread.is_alive()
        assert errors == []
        assert len(red_frames) == rounds
        assert all(np.array_equal(frame, red_reference) for frame in red_frames)
        assert all(np.array_equal(frame, empty_reference) for frame in empty_frames)
