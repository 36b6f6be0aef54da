"""Progressive accumulation state machine.

The controller counts how many samples have been blended into the display
image since the last invalidation. The count is the single source of truth
for the blend weight: the k-th sample is blended with weight 1 / (k + 1),
so the display converges to the temporal average of all samples.

States:
    ACCUMULATING: count below or equal to max_samples, advancing each frame.
    SATURATED: the count reached max_samples and another frame was blended.
        The count is pinned and the blend input switches to the uint32
        sentinel, which freezes the image. Only reset() leaves this state.

When progressive sampling is disabled the controller is bypassed: advance()
does nothing and every frame blends with weight 1.

Example:
    >>> from spherefield.core.accumulation import AccumulationController
    >>> controller = AccumulationController(max_samples=2)
    >>> controller.blend_weight
    1.0
    >>> controller.advance()
    >>> controller.blend_weight
    0.5
"""

import logging
from enum import Enum

logger = logging.getLogger(__name__)

# Blend input once saturated: the largest uint32 value
SATURATED_SAMPLE = 2**32 - 1


class AccumulationState(Enum):
    """Phase of progressive accumulation."""

    ACCUMULATING = "accumulating"
    SATURATED = "saturated"


def blend_weight(sample: int) -> float:
    """Weight of a new sample when blended over the accumulated image.

    Args:
        sample: Zero-based index of the sample being blended.

    Returns:
        1 / (sample + 1). The first sample fully replaces the history.
    """
    return 1.0 / (sample + 1.0)


class AccumulationController:
    """Tracks the accumulated sample count and its invalidation.

    Attributes:
        max_samples: Sample count at which accumulation saturates.
        enabled: Whether progressive sampling is active.
    """

    def __init__(self, max_samples: int, enabled: bool = True) -> None:
        """Initialize the controller in ACCUMULATING with a count of 0.

        Args:
            max_samples: Non-negative sample count at which to saturate.
            enabled: Whether progressive sampling is active.

        Raises:
            ValueError: If max_samples is negative or not below the sentinel.
        """
        self.max_samples = max_samples
        self.enabled = enabled
        self._count = 0
        self._state = AccumulationState.ACCUMULATING

    @property
    def max_samples(self) -> int:
        return self._max_samples

    @max_samples.setter
    def max_samples(self, value: int) -> None:
        if not 0 <= value < SATURATED_SAMPLE:
            raise ValueError(f"max_samples must be in [0, {SATURATED_SAMPLE}), got {value}")
        self._max_samples = value

    @property
    def state(self) -> AccumulationState:
        """Current accumulation phase."""
        return self._state

    @property
    def sample_count(self) -> int:
        """Number of samples accumulated since the last reset, capped at max_samples."""
        return self._count

    @property
    def is_saturated(self) -> bool:
        return self._state is AccumulationState.SATURATED

    @property
    def blend_sample(self) -> int:
        """Sample index fed to the blend pass.

        Equal to the count while accumulating and SATURATED_SAMPLE once saturated.
        """
        if self._state is AccumulationState.SATURATED:
            return SATURATED_SAMPLE
        return self._count

    @property
    def blend_weight(self) -> float:
        """Weight for compositing the current frame. Always 1 when disabled."""
        if not self.enabled:
            return 1.0
        return blend_weight(self.blend_sample)

    def reset(self) -> None:
        """Discard the accumulated history and restart from sample 0."""
        if self._count or self._state is not AccumulationState.ACCUMULATING:
            logger.debug("Accumulation reset after %d samples", self._count)
        self._count = 0
        self._state = AccumulationState.ACCUMULATING

    def advance(self) -> None:
        """Record that one more sample was blended.

        Increments the count below max_samples. Once the count equals
        max_samples, the controller moves to SATURATED and stays there until
        reset(). Does nothing when progressive sampling is disabled.
        """
        if not self.enabled:
            return

        if self._state is AccumulationState.SATURATED:
            return

        if self._count < self._max_samples:
            self._count += 1
        else:
            self._state = AccumulationState.SATURATED
            logger.debug("Accumulation saturated at %d samples", self._count)

    def __repr__(self) -> str:
        return (
            f"AccumulationController(state={self._state.value}, "
            f"samples={self._count}/{self._max_samples}, enabled={self.enabled})"
        )
