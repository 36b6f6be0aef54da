"""Tests for the preview module.

This module tests the preview/display and preview/export functionality including:
- Tone mapping functions (Reinhard, exposure)
- Gamma correction
- PNG export of the accumulated image
- RMSE computation

Note: Tests avoid displaying actual windows by not calling show_preview
in automated tests. The processing functions are tested directly.
"""

import numpy as np
import pytest
from PIL import Image as PILImage


class TestToneMapping:
    """Test Reinhard and exposure tone mapping."""

    def test_reinhard_formula(self):
        """Test that Reinhard computes L / (1 + L)."""
        from spherefield.preview.display import tone_map_reinhard

        image = np.full((4, 4, 3), 10.0, dtype=np.float32)
        assert np.allclose(tone_map_reinhard(image), 10.0 / 11.0, atol=1e-5)

    def test_reinhard_clamps_negative(self):
        from spherefield.preview.display import tone_map_reinhard

        image = np.full((4, 4, 3), -1.0, dtype=np.float32)
        assert np.allclose(tone_map_reinhard(image), 0.0)

    def test_exposure_formula(self):
        """Test that exposure computes 1 - exp(-c * exposure)."""
        from spherefield.preview.display import tone_map_exposure

        image = np.full((4, 4, 3), 0.5, dtype=np.float32)
        assert np.allclose(tone_map_exposure(image, 2.0), 1.0 - np.exp(-1.0), atol=1e-5)

    def test_exposure_higher_value_brighter(self):
        from spherefield.preview.display import tone_map_exposure

        image = np.full((4, 4, 3), 0.5, dtype=np.float32)
        assert np.all(tone_map_exposure(image, 2.0) > tone_map_exposure(image, 1.0))


class TestApplyGamma:
    """Test gamma correction."""

    def test_gamma_1_no_change(self):
        from spherefield.preview.display import apply_gamma

        image = np.random.default_rng(0).random((4, 4, 3)).astype(np.float32)
        assert np.array_equal(apply_gamma(image, 1.0), image)

    def test_gamma_brightens_midtones(self):
        from spherefield.preview.display import apply_gamma

        image = np.full((4, 4, 3), 0.5, dtype=np.float32)
        assert np.allclose(apply_gamma(image, 2.2), 0.5 ** (1.0 / 2.2), atol=1e-5)

    def test_gamma_preserves_black_and_white(self):
        from spherefield.preview.display import apply_gamma

        image = np.array([[[0.0, 1.0, 0.0]]], dtype=np.float32)
        assert np.allclose(apply_gamma(image, 2.2), image)


class TestProcessImageForDisplay:
    """Test the combined display pipeline."""

    def test_output_always_valid(self):
        from spherefield.preview.display import process_image_for_display

        image = np.array([[[-1.0, 0.5, 100.0]]], dtype=np.float32)
        for tone_map in ("none", "reinhard", "exposure"):
            result = process_image_for_display(image, tone_map=tone_map)
            assert result.dtype == np.float32
            assert np.all(result >= 0.0)
            assert np.all(result <= 1.0)

    def test_invalid_tone_map_raises(self):
        from spherefield.preview.display import process_image_for_display

        with pytest.raises(ValueError, match="Unknown tone mapping"):
            process_image_for_display(np.zeros((2, 2, 3), dtype=np.float32), tone_map="filmic")


class TestExport:
    """Test 8-bit conversion and PNG export."""

    def test_image_to_uint8(self):
        from spherefield.preview.export import image_to_uint8

        image = np.array([[[0.0, 1.0, 5.0]]], dtype=np.float32)
        result = image_to_uint8(image, gamma=1.0)

        assert result.dtype == np.uint8
        assert result.tolist() == [[[0, 255, 255]]]

    def test_save_png_from_array(self, tmp_path):
        from spherefield.preview.export import save_png_from_array

        path = tmp_path / "array.png"
        save_png_from_array(np.full((6, 10, 3), 0.5, dtype=np.float32), path)

        with PILImage.open(path) as img:
            assert img.size == (10, 6)
            assert img.mode == "RGB"

    def test_save_png_from_orchestrator(self, tmp_path, small_skybox):
        from spherefield.config import RenderConfig
        from spherefield.core.orchestrator import RenderOrchestrator
        from spherefield.preview.export import save_png

        orchestrator = RenderOrchestrator(
            RenderConfig(spheres_max=10, seed=3), skybox=small_skybox
        )
        orchestrator.on_enable()
        orchestrator.on_tick(24, 16)

        path = tmp_path / "spheres.png"
        save_png(orchestrator, path, tone_map="reinhard")
        orchestrator.on_disable()

        with PILImage.open(path) as img:
            assert img.size == (24, 16)

    def test_rmse(self):
        from spherefield.preview.export import compute_rmse

        a = np.zeros((4, 4, 3), dtype=np.float32)
        b = np.full((4, 4, 3), 0.5, dtype=np.float32)

        assert compute_rmse(a, a) == 0.0
        assert compute_rmse(a, b) == pytest.approx(0.5)
        with pytest.raises(ValueError, match="shapes must match"):
            compute_rmse(a, np.zeros((2, 2, 3)))


class TestModuleExports:
    """Test the preview package interface."""

    def test_exports(self):
        import spherefield.preview as preview

        for name in ("InteractivePreview", "save_png", "show_preview", "compute_rmse"):
            assert name in preview.__all__
            assert hasattr(preview, name)

    def test_update_image_rejects_wrong_shape(self):
        from spherefield.preview.interactive import InteractivePreview

        preview = InteractivePreview(8, 4)
        with pytest.raises(ValueError, match="doesn't match"):
            preview.update_image(np.zeros((8, 4, 3), dtype=np.float32))
