"""Core rendering module.

Components:
    accumulation: Progressive accumulation state machine and blend weights
    errors: Frame-level render exceptions
    interfaces: Protocols for the kernel, render targets, compositor and
        invalidation sources
    invalidation: Change flags polled once per tick
    kernel: Taichi ray tracing kernel over the sphere field
    target: Resizable float render targets
    compositor: Blend pass folding each frame into the display target
    frame: Per-frame kernel parameters
    orchestrator: Per-frame driver tying everything together

All compute-intensive operations use Taichi kernels for GPU acceleration.
"""

from .accumulation import (
    SATURATED_SAMPLE,
    AccumulationController,
    AccumulationState,
    blend_weight,
)
from .compositor import BlendCompositor
from .errors import CompositeError, DispatchError, RenderError, ResourceError
from .invalidation import ChangeFlag
from .kernel import KERNEL_TRACE, TILE_SIZE, RayTracingKernel
from .target import MAX_TARGET_SIZE, RenderTarget

# Note: frame and orchestrator are NOT imported here to avoid circular imports
# with the scene package. Import them directly:
#   from spherefield.core.orchestrator import RenderOrchestrator

__all__ = [
    "AccumulationController",
    "AccumulationState",
    "SATURATED_SAMPLE",
    "blend_weight",
    "RenderError",
    "ResourceError",
    "DispatchError",
    "CompositeError",
    "ChangeFlag",
    "RayTracingKernel",
    "KERNEL_TRACE",
    "TILE_SIZE",
    "RenderTarget",
    "MAX_TARGET_SIZE",
    "BlendCompositor",
]
