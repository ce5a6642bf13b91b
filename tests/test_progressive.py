"""Tests for the progressive renderer.

This module tests:
- RenderSettings defaults and validation
- ProgressiveRenderer initialization and setup
- Progressive sample accumulation and batch rendering
- Progress callbacks and generators
- Reset functionality
- Image output as PPM and PNG

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

import io

import numpy as np
import pytest
from PIL import Image


def _setup_simple_scene():
    """Set up one gray sphere in front of a pinhole camera."""
    from mcray.camera.thin_lens import ThinLensCamera, setup_camera
    from mcray.scene.manager import SceneManager

    scene = SceneManager()
    mat_id = scene.add_lambertian_material((0.5, 0.5, 0.5))
    scene.add_sphere((0, 0, -2), 1.0, mat_id)

    camera = ThinLensCamera(
        look_from=(0, 0, 0),
        look_at=(0, 0, -1),
        view_up=(0, 1, 0),
        vfov=90.0,
        aspect_ratio=1.0,
        aperture=0.0,
        focus_dist=1.0,
    )
    setup_camera(camera)
    return scene


class TestRenderSettings:
    """Test RenderSettings defaults and validation."""

    def test_defaults(self):
        from mcray.core.progressive import RenderSettings

        settings = RenderSettings()
        assert settings.image_width == 400
        assert settings.image_height == 225
        assert settings.samples_per_pixel == 100
        assert settings.max_depth == 50
        settings.validate()

    def test_height_is_truncated(self):
        from mcray.core.progressive import RenderSettings

        settings = RenderSettings(image_width=100, aspect_ratio=3.0)
        assert settings.image_height == 33

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"aspect_ratio": 0.0}, "aspect_ratio"),
            ({"image_width": 1}, "image_width"),
            ({"image_width": 2048}, "image_width"),
            ({"image_width": 10, "aspect_ratio": 8.0}, "image_height"),
            ({"samples_per_pixel": 0}, "samples_per_pixel"),
            ({"max_depth": -1}, "max_depth"),
        ],
    )
    def test_invalid_settings(self, overrides, message):
        from mcray.core.progressive import RenderSettings

        with pytest.raises(ValueError, match=message):
            RenderSettings(**overrides).validate()


class TestProgressiveRendererInit:
    """Test ProgressiveRenderer initialization."""

    def test_init_creates_render_target(self):
        from mcray.core.integrator import get_image_dimensions
        from mcray.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(128, 96)

        assert renderer.width == 128
        assert renderer.height == 96
        assert renderer.sample_count == 0
        assert get_image_dimensions() == (128, 96)

    def test_init_rejects_oversized_dimensions(self):
        from mcray.core.progressive import ProgressiveRenderer

        with pytest.raises(ValueError, match="exceed maximum"):
            ProgressiveRenderer(4096, 100)

    def test_init_rejects_negative_depth(self):
        from mcray.core.progressive import ProgressiveRenderer

        with pytest.raises(ValueError, match="max_depth"):
            ProgressiveRenderer(16, 16, max_depth=-1)

    def test_from_settings(self):
        from mcray.core.progressive import ProgressiveRenderer, RenderSettings

        renderer = ProgressiveRenderer.from_settings(
            RenderSettings(image_width=32, aspect_ratio=2.0, max_depth=7)
        )
        assert (renderer.width, renderer.height) == (32, 16)
        assert renderer.max_depth == 7

    def test_from_settings_validates(self):
        from mcray.core.progressive import ProgressiveRenderer, RenderSettings

        with pytest.raises(ValueError, match="samples_per_pixel"):
            ProgressiveRenderer.from_settings(RenderSettings(samples_per_pixel=0))


class TestProgressiveRendererRender:
    """Test render functionality."""

    def test_render_accumulates_samples(self):
        from mcray.core.progressive import ProgressiveRenderer

        _setup_simple_scene()

        renderer = ProgressiveRenderer(16, 16)
        renderer.render(5)
        assert renderer.sample_count == 5

        renderer.render(10)
        assert renderer.sample_count == 15

    @pytest.mark.parametrize("num_samples", [0, -10])
    def test_render_non_positive_samples_does_nothing(self, num_samples):
        from mcray.core.progressive import ProgressiveRenderer

        _setup_simple_scene()

        renderer = ProgressiveRenderer(16, 16)
        renderer.render(3)
        renderer.render(num_samples)
        assert renderer.sample_count == 3

    def test_render_with_batch_size(self):
        from mcray.core.progressive import ProgressiveRenderer

        _setup_simple_scene()

        renderer = ProgressiveRenderer(16, 16)
        # 10 samples = 3 + 3 + 3 + 1
        renderer.render(10, batch_size=3)
        assert renderer.sample_count == 10

    def test_render_rejects_zero_batch_size(self):
        from mcray.core.progressive import ProgressiveRenderer

        _setup_simple_scene()

        renderer = ProgressiveRenderer(16, 16)
        with pytest.raises(ValueError, match="batch_size"):
            renderer.render(4, batch_size=0)

    def test_reset_clears_samples(self):
        from mcray.core.progressive import ProgressiveRenderer

        _setup_simple_scene()

        renderer = ProgressiveRenderer(16, 16)
        renderer.render(4)
        renderer.reset()

        assert renderer.sample_count == 0
        assert np.all(renderer.get_accumulated_image() == 0.0)


class TestProgressiveRendererCallbacks:
    """Test progress callback functionality."""

    def test_callback_receives_progress(self):
        from mcray.core.progressive import ProgressiveRenderer

        _setup_simple_scene()

        renderer = ProgressiveRenderer(16, 16)
        progress_values = []

        def callback(current, target):
            progress_values.append((current, target))

        renderer.render(10, batch_size=4, callback=callback)

        assert progress_values == [(4, 10), (8, 10), (10, 10)]

    def test_callback_with_existing_samples(self):
        from mcray.core.progressive import ProgressiveRenderer

        _setup_simple_scene()

        renderer = ProgressiveRenderer(16, 16)
        renderer.render(5)

        progress_values = []
        renderer.render(2, callback=lambda current, target: progress_values.append((current, target)))

        assert progress_values == [(6, 7), (7, 7)]


class TestProgressiveRendererGenerator:
    """Test the render_progressive() generator."""

    def test_yields_progress(self):
        from mcray.core.progressive import ProgressiveRenderer

        _setup_simple_scene()

        renderer = ProgressiveRenderer(16, 16)
        progress = list(renderer.render_progressive(6, batch_size=2))

        assert progress == [(2, 6), (4, 6), (6, 6)]

    def test_zero_samples_yields_nothing(self):
        from mcray.core.progressive import ProgressiveRenderer

        _setup_simple_scene()

        renderer = ProgressiveRenderer(16, 16)
        assert list(renderer.render_progressive(0)) == []

    def test_interruptible(self):
        """Stopping the generator early keeps the samples already rendered."""
        from mcray.core.progressive import ProgressiveRenderer

        _setup_simple_scene()

        renderer = ProgressiveRenderer(16, 16)
        for current, _target in renderer.render_progressive(100, batch_size=1):
            if current == 3:
                break

        assert renderer.sample_count == 3


class TestProgressiveRendererImageOutput:
    """Test image output."""

    def test_output_before_render_raises(self):
        from mcray.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(8, 8)
        with pytest.raises(RuntimeError, match="No samples rendered"):
            renderer.get_image_uint8()
        with pytest.raises(RuntimeError, match="No samples rendered"):
            renderer.write_ppm(io.StringIO())

    def test_get_image_uint8(self):
        from mcray.core.progressive import ProgressiveRenderer

        _setup_simple_scene()

        renderer = ProgressiveRenderer(16, 8)
        renderer.render(2)
        image = renderer.get_image_uint8()

        assert image.shape == (8, 16, 3)
        assert image.dtype == np.uint8

    def test_write_ppm(self):
        from mcray.core.progressive import ProgressiveRenderer

        _setup_simple_scene()

        renderer = ProgressiveRenderer(4, 3)
        renderer.render(2)
        stream = io.StringIO()
        renderer.write_ppm(stream)

        lines = stream.getvalue().splitlines()
        assert lines[:3] == ["P3", "4 3", "255"]
        assert len(lines) == 3 + 4 * 3

    def test_save_ppm_and_png(self, tmp_path):
        from mcray.core.progressive import ProgressiveRenderer

        _setup_simple_scene()

        renderer = ProgressiveRenderer(8, 6)
        renderer.render(2)

        ppm_path = tmp_path / "out.ppm"
        png_path = tmp_path / "out.png"
        renderer.save_ppm(ppm_path)
        renderer.save_png(png_path)

        assert ppm_path.read_text().startswith("P3\n8 6\n255\n")
        with Image.open(png_path) as img:
            assert img.size == (8, 6)
            assert img.mode == "RGB"
            np.testing.assert_array_equal(np.asarray(img), renderer.get_image_uint8())

    def test_no_nan_or_inf(self):
        from mcray.core.progressive import ProgressiveRenderer

        _setup_simple_scene()

        renderer = ProgressiveRenderer(16, 16)
        renderer.render(4)
        image = renderer.get_accumulated_image()

        assert np.all(np.isfinite(image))
        assert np.all(image >= 0.0)

    def test_repr_shows_state(self):
        from mcray.core.progressive import ProgressiveRenderer

        _setup_simple_scene()

        renderer = ProgressiveRenderer(16, 8)
        renderer.render(2)
        assert repr(renderer) == "ProgressiveRenderer(width=16, height=8, samples=2)"
