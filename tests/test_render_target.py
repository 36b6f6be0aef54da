"""Tests for render targets and the blend compositor."""

import numpy as np
import pytest


class TestRenderTarget:
    """Test allocation, resizing and readback."""

    def test_unallocated_field_raises(self):
        from spherefield.core.errors import ResourceError
        from spherefield.core.target import RenderTarget

        target = RenderTarget("test")
        assert not target.allocated
        with pytest.raises(ResourceError, match="not allocated"):
            _ = target.field

    def test_ensure_reports_reallocation(self):
        from spherefield.core.target import RenderTarget

        target = RenderTarget()
        assert target.ensure(16, 8)
        assert not target.ensure(16, 8)
        assert target.ensure(8, 8)
        assert (target.width, target.height) == (8, 8)
        target.release()

    def test_new_target_is_zero(self):
        from spherefield.core.target import RenderTarget

        target = RenderTarget()
        target.ensure(4, 3)
        image = target.to_numpy()

        assert image.shape == (3, 4, 3)
        assert np.all(image == 0.0)
        target.release()

    @pytest.mark.parametrize("width,height", [(0, 8), (8, -1), (9000, 8)])
    def test_invalid_dimensions(self, width, height):
        from spherefield.core.errors import ResourceError
        from spherefield.core.target import RenderTarget

        with pytest.raises(ResourceError):
            RenderTarget().ensure(width, height)

    def test_to_numpy_orientation(self):
        """Test that field row height-1 becomes the top image row."""
        from spherefield.core.target import RenderTarget

        target = RenderTarget()
        target.ensure(4, 2)
        target.field[1, 1] = (1.0, 0.5, 0.25, 1.0)

        image = target.to_numpy()
        assert np.allclose(image[0, 1], (1.0, 0.5, 0.25))
        assert np.all(image[1] == 0.0)
        target.release()

    def test_release(self):
        from spherefield.core.target import RenderTarget

        target = RenderTarget()
        target.ensure(4, 4)
        target.release()
        target.release()

        assert not target.allocated
        assert (target.width, target.height) == (0, 0)


class TestBlendCompositor:
    """Test the blend pass."""

    def _targets(self, source_value, destination_value, size=(4, 4)):
        from spherefield.core.target import RenderTarget

        source = RenderTarget("source")
        destination = RenderTarget("destination")
        source.ensure(*size)
        destination.ensure(*size)
        source.field.fill(source_value)
        destination.field.fill(destination_value)
        return source, destination

    def test_full_weight_replaces(self):
        from spherefield.core.compositor import BlendCompositor

        source, destination = self._targets(0.75, 0.2)
        BlendCompositor().composite(source, destination, 1.0)

        assert np.allclose(destination.to_numpy(), 0.75)

    def test_partial_weight_interpolates(self):
        from spherefield.core.compositor import BlendCompositor

        source, destination = self._targets(1.0, 0.0)
        BlendCompositor().composite(source, destination, 0.25)

        assert np.allclose(destination.to_numpy(), 0.25)

    def test_running_average(self):
        """Test that weights 1/(k+1) produce the mean of all samples."""
        from spherefield.core.accumulation import blend_weight
        from spherefield.core.compositor import BlendCompositor

        source, destination = self._targets(0.0, 5.0)
        compositor = BlendCompositor()
        values = [1.0, 2.0, 6.0, 3.0]
        for k, value in enumerate(values):
            source.field.fill(value)
            compositor.composite(source, destination, blend_weight(k))

        assert np.allclose(destination.to_numpy(), np.mean(values), atol=1e-5)

    def test_size_mismatch(self):
        from spherefield.core.compositor import BlendCompositor
        from spherefield.core.errors import CompositeError
        from spherefield.core.target import RenderTarget

        source = RenderTarget()
        destination = RenderTarget()
        source.ensure(4, 4)
        destination.ensure(8, 4)

        with pytest.raises(CompositeError, match="Cannot composite"):
            BlendCompositor().composite(source, destination, 1.0)

    def test_weight_out_of_range(self):
        from spherefield.core.compositor import BlendCompositor
        from spherefield.core.errors import CompositeError, DispatchError

        source, destination = self._targets(1.0, 0.0)
        with pytest.raises(CompositeError):
            BlendCompositor().composite(source, destination, 1.5)
        assert issubclass(CompositeError, DispatchError)
