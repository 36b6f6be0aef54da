"""Render-time exceptions.

A RenderError is fatal to the current frame only. The orchestrator logs it,
skips compositing, and retries the whole frame on the next tick.
"""


class RenderError(RuntimeError):
    """Base class for errors that abort a single frame."""


class ResourceError(RenderError):
    """A render target or scene buffer could not be allocated."""


class DispatchError(RenderError):
    """The kernel dispatch failed or was invoked in an invalid state."""


class CompositeError(DispatchError):
    """Blending the kernel output into the display target failed."""
