"""Tests for device-side scene storage and the skybox texture."""

import numpy as np
import pytest


def _spheres():
    from spherefield.scene.sphere import SphereData

    return [
        SphereData.create((0.0, 1.0, 0.0), 1.0, (0.8, 0.1, 0.1), (0.04,) * 3, 0.3),
        SphereData.create((5.0, 2.0, -3.0), 2.0, (0.0, 0.0, 0.0), (0.9, 0.9, 0.2), 0.1),
    ]


class TestSceneBuffer:
    """Test uploading and releasing sphere buffers."""

    def test_upload_matches_records(self):
        from spherefield.scene.buffer import SceneBuffer

        spheres = _spheres()
        buffer = SceneBuffer.from_spheres(spheres)

        assert buffer.count == 2
        assert len(buffer) == 2
        assert np.allclose(buffer.positions.to_numpy()[1], (5.0, 2.0, -3.0))
        assert buffer.radii.to_numpy()[0] == pytest.approx(1.0)
        assert np.allclose(buffer.speculars.to_numpy()[1], (0.9, 0.9, 0.2))
        assert buffer.roughness.to_numpy()[1] == pytest.approx(0.1)
        assert buffer.spheres() == spheres
        buffer.release()

    def test_packed_copy_is_read_only(self):
        from spherefield.scene.buffer import SceneBuffer

        buffer = SceneBuffer.from_spheres(_spheres())
        with pytest.raises(ValueError):
            buffer.packed["radius"][0] = 3.0
        buffer.release()

    def test_empty_scene(self):
        """Test that an empty scene allocates but reports no spheres."""
        from spherefield.scene.buffer import SceneBuffer

        buffer = SceneBuffer.from_spheres([])

        assert buffer.count == 0
        assert buffer.spheres() == []
        assert not buffer.released
        buffer.release()

    def test_release_is_idempotent(self):
        from spherefield.scene.buffer import SceneBuffer

        buffer = SceneBuffer.from_spheres(_spheres())
        buffer.release()
        buffer.release()

        assert buffer.released
        assert "released=True" in repr(buffer)


class TestSkybox:
    """Test skybox texture construction."""

    def test_orientation(self):
        """Test that the top image row lands at the highest v index."""
        from spherefield.scene.skybox import Skybox

        image = np.zeros((4, 8, 3), dtype=np.float32)
        image[0, :, 0] = 1.0
        sky = Skybox(image)

        assert (sky.width, sky.height) == (8, 4)
        texture = sky.texture.to_numpy()
        assert np.all(texture[:, 3, 0] == 1.0)
        assert np.all(texture[:, 0, 0] == 0.0)

    def test_rejects_non_rgb(self):
        from spherefield.scene.skybox import Skybox

        with pytest.raises(ValueError, match="shape"):
            Skybox(np.zeros((4, 8), dtype=np.float32))

    def test_gradient_is_brighter_above(self):
        from spherefield.scene.skybox import HORIZON_COLOR, ZENITH_COLOR, Skybox

        sky = Skybox.gradient(16, 9)
        texture = sky.texture.to_numpy()

        assert np.allclose(texture[0, 8], ZENITH_COLOR, atol=1e-3)
        assert np.allclose(texture[0, 4], HORIZON_COLOR, atol=1e-3)

    def test_from_image_linearizes(self, tmp_path):
        from PIL import Image as PILImage

        from spherefield.scene.skybox import Skybox

        path = tmp_path / "sky.png"
        pixels = np.full((2, 4, 3), 128, dtype=np.uint8)
        PILImage.fromarray(pixels).save(path)

        sky = Skybox.from_image(path)
        expected = (128.0 / 255.0) ** 2.2
        assert np.allclose(sky.texture.to_numpy(), expected, atol=1e-5)
