"""Collaborator interfaces consumed by the render orchestrator.

The orchestrator only depends on these protocols. The default Taichi
implementations live in kernel.py, target.py, compositor.py and
invalidation.py; hosts and tests can substitute their own.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from spherefield.core.frame import FrameParameters
    from spherefield.scene.skybox import Skybox


class RenderTargetProvider(Protocol):
    """Off-screen floating-point image with random-write access."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    @property
    def field(self) -> Any: ...

    def ensure(self, width: int, height: int) -> bool:
        """Reallocate if the size differs. Returns True when reallocated."""
        ...

    def release(self) -> None: ...

    def to_numpy(self) -> Any:
        """RGB image of shape (height, width, 3) with a top-left origin."""
        ...


class KernelDispatcher(Protocol):
    """Binds frame state and launches the trace kernel over a thread-group grid."""

    def bind(self, target: RenderTargetProvider, skybox: Skybox, params: FrameParameters) -> None:
        ...

    def dispatch(self, kernel_id: int, groups_x: int, groups_y: int, groups_z: int) -> None:
        ...


class Compositor(Protocol):
    """Blends the kernel's raw output into the display target."""

    def composite(
        self,
        source: RenderTargetProvider,
        destination: RenderTargetProvider,
        weight: float,
    ) -> None:
        ...


class InvalidationSource(Protocol):
    """A signal that reports a change once, then clears itself."""

    def consume(self) -> bool:
        """Return whether a change happened since the last call, and clear it."""
        ...
