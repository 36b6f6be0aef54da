"""Tests for the progressive accumulation state machine.

This module tests:
- Blend weight sequence 1, 1/2, 1/3, ...
- Saturation at max_samples and the frozen blend input
- Reset from any state
- Bypass when progressive sampling is disabled
"""

import pytest


class TestBlendWeight:
    """Test the blend weight formula."""

    @pytest.mark.parametrize("sample,expected", [(0, 1.0), (1, 0.5), (3, 0.25), (9, 0.1)])
    def test_weight_is_reciprocal(self, sample, expected):
        from spherefield.core.accumulation import blend_weight

        assert blend_weight(sample) == pytest.approx(expected)

    def test_sentinel_weight_is_negligible(self):
        from spherefield.core.accumulation import SATURATED_SAMPLE, blend_weight

        assert SATURATED_SAMPLE == 2**32 - 1
        assert 0.0 < blend_weight(SATURATED_SAMPLE) < 1e-9


class TestAccumulationController:
    """Test the controller state transitions."""

    def test_initial_state(self):
        from spherefield.core.accumulation import AccumulationController, AccumulationState

        controller = AccumulationController(max_samples=8)

        assert controller.state is AccumulationState.ACCUMULATING
        assert controller.sample_count == 0
        assert controller.blend_weight == 1.0

    def test_weights_follow_running_average(self):
        """Test that successive frames get weights 1, 1/2, 1/3, 1/4."""
        from spherefield.core.accumulation import AccumulationController

        controller = AccumulationController(max_samples=8)
        weights = []
        for _ in range(4):
            weights.append(controller.blend_weight)
            controller.advance()

        assert weights == pytest.approx([1.0, 1.0 / 2.0, 1.0 / 3.0, 1.0 / 4.0])
        assert controller.sample_count == 4

    def test_saturates_after_max_samples(self):
        """Test that the count pins at max_samples and the sentinel takes over."""
        from spherefield.core.accumulation import (
            SATURATED_SAMPLE,
            AccumulationController,
            AccumulationState,
        )

        controller = AccumulationController(max_samples=3)
        for _ in range(3):
            controller.advance()

        assert controller.sample_count == 3
        assert controller.state is AccumulationState.ACCUMULATING
        assert controller.blend_sample == 3

        controller.advance()
        assert controller.state is AccumulationState.SATURATED
        assert controller.is_saturated
        assert controller.sample_count == 3
        assert controller.blend_sample == SATURATED_SAMPLE

        for _ in range(10):
            controller.advance()
        assert controller.sample_count == 3
        assert controller.is_saturated

    def test_zero_max_samples_saturates_immediately(self):
        from spherefield.core.accumulation import AccumulationController

        controller = AccumulationController(max_samples=0)
        assert controller.blend_weight == 1.0

        controller.advance()
        assert controller.is_saturated
        assert controller.sample_count == 0

    def test_reset_from_saturated(self):
        from spherefield.core.accumulation import AccumulationController, AccumulationState

        controller = AccumulationController(max_samples=1)
        controller.advance()
        controller.advance()
        assert controller.is_saturated

        controller.reset()
        assert controller.state is AccumulationState.ACCUMULATING
        assert controller.sample_count == 0
        assert controller.blend_weight == 1.0

    def test_disabled_always_replaces(self):
        """Test that a disabled controller never advances and always uses weight 1."""
        from spherefield.core.accumulation import AccumulationController

        controller = AccumulationController(max_samples=8, enabled=False)
        for _ in range(5):
            assert controller.blend_weight == 1.0
            controller.advance()
        assert controller.sample_count == 0

    def test_disabling_mid_accumulation_uses_full_weight(self):
        from spherefield.core.accumulation import AccumulationController

        controller = AccumulationController(max_samples=8)
        controller.advance()
        controller.advance()

        controller.enabled = False
        assert controller.sample_count == 2
        assert controller.blend_weight == 1.0

    @pytest.mark.parametrize("max_samples", [-1, 2**32 - 1])
    def test_invalid_max_samples(self, max_samples):
        from spherefield.core.accumulation import AccumulationController

        with pytest.raises(ValueError, match="max_samples"):
            AccumulationController(max_samples=max_samples)
