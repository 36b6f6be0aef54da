"""Per-frame driver for progressive ray tracing of the sphere field.

The RenderOrchestrator owns every piece of mutable render state: the scene
buffer, the raw and accumulated render targets, and the accumulation
controller. A host (window loop, offline renderer, test) calls its lifecycle
methods:

- on_enable(): reset accumulation and generate the scene
- on_tick(width, height): render one frame
- on_config_changed(config): apply edited parameters
- on_disable(): release device resources

Each tick runs a fixed protocol:

1. Poll the invalidation sources (camera, light, configuration, extras)
   and reset the accumulation if any fired
2. Ensure the render targets match the output size; a resize also resets
3. Build the frame parameters and bind them to the kernel
4. Dispatch the kernel over TILE_SIZE x TILE_SIZE thread groups
5. Composite the raw output into the display target with the blend weight
6. Advance the accumulation

A RenderError in steps 2-5 skips the rest of the frame without advancing
the accumulation, so the next tick retries the whole sequence. A reset made
in step 1 stands even when the frame is skipped.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from spherefield.config import RenderConfig
    >>> from spherefield.core.orchestrator import RenderOrchestrator
    >>>
    >>> orchestrator = RenderOrchestrator(RenderConfig(seed=1))
    >>> orchestrator.on_enable()
    >>> for _ in range(64):
    ...     orchestrator.on_tick(640, 360)
    >>> image = orchestrator.display_image()
"""

from __future__ import annotations

import copy
import logging
import math

import numpy as np
import numpy.typing as npt

from spherefield.camera.pinhole import PinholeCamera
from spherefield.config import RenderConfig
from spherefield.core.accumulation import AccumulationController
from spherefield.core.compositor import BlendCompositor
from spherefield.core.errors import RenderError
from spherefield.core.frame import FrameParameterBuilder
from spherefield.core.interfaces import (
    Compositor,
    InvalidationSource,
    KernelDispatcher,
    RenderTargetProvider,
)
from spherefield.core.invalidation import ChangeFlag
from spherefield.core.kernel import KERNEL_TRACE, TILE_SIZE, RayTracingKernel
from spherefield.core.target import RenderTarget
from spherefield.scene.buffer import SceneBuffer
from spherefield.scene.generator import generate_scene
from spherefield.scene.light import DirectionalLight
from spherefield.scene.skybox import Skybox

logger = logging.getLogger(__name__)


def thread_groups(width: int, height: int, tile_size: int = TILE_SIZE) -> tuple[int, int, int]:
    """Number of thread groups covering a width x height target.

    Rounds each dimension up to the next whole tile.
    """
    return math.ceil(width / tile_size), math.ceil(height / tile_size), 1


class RenderOrchestrator:
    """Drives scene generation, kernel dispatch and progressive blending.

    Attributes:
        config: Current configuration surface.
        camera: Current camera. Use set_camera() to move it.
        light: Current directional light. Use set_light() to change it.
        accumulation: The accumulation state machine.
    """

    def __init__(
        self,
        config: RenderConfig | None = None,
        *,
        camera: PinholeCamera | None = None,
        light: DirectionalLight | None = None,
        skybox: Skybox | None = None,
        kernel: KernelDispatcher | None = None,
        compositor: Compositor | None = None,
        output_target: RenderTargetProvider | None = None,
        display_target: RenderTargetProvider | None = None,
    ) -> None:
        """Create an orchestrator with no scene and unallocated targets.

        Resources are created lazily: the scene on on_enable(), the targets
        on the first tick, and the skybox on first use if none is given.

        Args:
            config: Configuration surface. Defaults to RenderConfig().
            camera: Initial camera. Defaults to PinholeCamera().
            light: Initial light. Defaults to DirectionalLight().
            skybox: Environment map. Defaults to config.skybox_path or a gradient.
            kernel: Kernel dispatcher. Defaults to RayTracingKernel().
            compositor: Blend pass. Defaults to BlendCompositor().
            output_target: Raw kernel output target.
            display_target: Accumulated display target.
        """
        self.config = copy.deepcopy(config) if config is not None else RenderConfig()
        self.camera = camera if camera is not None else PinholeCamera()
        self.light = light if light is not None else DirectionalLight()

        self.accumulation = AccumulationController(
            self.config.max_samples, enabled=self.config.progressive_sampling
        )

        self._skybox = skybox
        self._kernel: KernelDispatcher = kernel if kernel is not None else RayTracingKernel()
        self._compositor: Compositor = compositor if compositor is not None else BlendCompositor()
        self._output: RenderTargetProvider = (
            output_target if output_target is not None else RenderTarget("output")
        )
        self._display: RenderTargetProvider = (
            display_target if display_target is not None else RenderTarget("display")
        )

        self._scene_rng, jitter_rng = self._make_rngs(self.config.seed)
        self._builder = FrameParameterBuilder(jitter_rng)
        self._scene: SceneBuffer | None = None
        self._enabled = False
        self._frame_index = 0

        self._camera_moved = ChangeFlag("camera")
        self._light_moved = ChangeFlag("light")
        self._config_edited = ChangeFlag("config")
        self._extra_sources: list[InvalidationSource] = []

    @staticmethod
    def _make_rngs(seed: int | None) -> tuple[np.random.Generator, np.random.Generator]:
        scene_seq, jitter_seq = np.random.SeedSequence(seed).spawn(2)
        return np.random.default_rng(scene_seq), np.random.default_rng(jitter_seq)

    # =========================================================================
    # State
    # =========================================================================

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def scene(self) -> SceneBuffer | None:
        """The current scene buffer, or None before on_enable()."""
        return self._scene

    @property
    def sample_count(self) -> int:
        return self.accumulation.sample_count

    @property
    def frame_index(self) -> int:
        """Number of frames rendered successfully since construction."""
        return self._frame_index

    @property
    def output_target(self) -> RenderTargetProvider:
        return self._output

    @property
    def display_target(self) -> RenderTargetProvider:
        return self._display

    @property
    def skybox(self) -> Skybox:
        """The environment map, loaded on first access."""
        if self._skybox is None:
            if self.config.skybox_path is not None:
                self._skybox = Skybox.from_image(self.config.skybox_path)
            else:
                self._skybox = Skybox.gradient()
        return self._skybox

    # =========================================================================
    # Invalidation Sources
    # =========================================================================

    def set_camera(self, camera: PinholeCamera) -> None:
        """Move the camera. Invalidates the accumulation on the next tick if it changed."""
        if camera != self.camera:
            self.camera = camera
            self._camera_moved.mark()

    def set_light(self, light: DirectionalLight) -> None:
        """Change the light. Invalidates the accumulation on the next tick if it changed."""
        if light != self.light:
            self.light = light
            self._light_moved.mark()

    def add_invalidation_source(self, source: InvalidationSource) -> None:
        """Register an extra source polled at the start of every tick."""
        self._extra_sources.append(source)

    def _poll_invalidation(self) -> bool:
        # Every source is consumed each tick, even once one has fired
        sources = [self._camera_moved, self._light_moved, self._config_edited]
        sources.extend(self._extra_sources)
        fired = [source.consume() for source in sources]
        return any(fired)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def on_enable(self) -> None:
        """Reset the accumulation and generate a fresh scene."""
        self.accumulation.reset()
        self.reseed()
        self._enabled = True

    def on_disable(self) -> None:
        """Release the scene buffer and render targets."""
        self._enabled = False
        self.release()

    def on_config_changed(self, config: RenderConfig | None = None) -> None:
        """Apply an edited configuration.

        Always invalidates the accumulated image. The scene is regenerated
        when a generation field changed and the orchestrator is enabled.

        Args:
            config: The new configuration, or None if self.config was edited
                in place and only the invalidation is needed.
        """
        previous_key = self.config.generation_key()
        previous_seed = self.config.seed
        if config is not None:
            self.config = copy.deepcopy(config)

        self.accumulation.enabled = self.config.progressive_sampling
        self.accumulation.max_samples = self.config.max_samples
        self.accumulation.reset()
        self._config_edited.mark()

        if self.config.seed != previous_seed:
            self._scene_rng, jitter_rng = self._make_rngs(self.config.seed)
            self._builder = FrameParameterBuilder(jitter_rng)

        if self._enabled and self.config.generation_key() != previous_key:
            self.reseed()

    def reseed(self) -> SceneBuffer:
        """Generate and upload a new scene, replacing the current one.

        The new buffer is fully uploaded before the old one is released, and
        the accumulation is reset.

        Returns:
            The new scene buffer.
        """
        spheres = generate_scene(self.config, self._scene_rng)
        scene = SceneBuffer.from_spheres(spheres)

        if self._scene is not None:
            self._scene.release()
        self._scene = scene
        self.accumulation.reset()
        return scene

    def release(self) -> None:
        """Free the scene buffer and both render targets."""
        if self._scene is not None:
            self._scene.release()
            self._scene = None
        self._output.release()
        self._display.release()

    # =========================================================================
    # Frame
    # =========================================================================

    def on_tick(self, width: int, height: int) -> bool:
        """Render one frame at the given output size.

        Args:
            width: Output width in pixels.
            height: Output height in pixels.

        Returns:
            True if the frame was composited, False if it was skipped.

        Raises:
            RuntimeError: If called before on_enable().
        """
        if not self._enabled or self._scene is None:
            raise RuntimeError("RenderOrchestrator is not enabled. Call on_enable() first.")

        if self._poll_invalidation():
            self.accumulation.reset()

        try:
            resized = self._output.ensure(width, height)
            resized = self._display.ensure(width, height) or resized
        except RenderError as e:
            logger.warning("Skipping frame: render target unavailable (%s)", e)
            return False

        if resized:
            self.accumulation.reset()

        params = self._builder.build(self.camera, self.light, self._scene, width / height)
        groups_x, groups_y, groups_z = thread_groups(width, height)

        try:
            self._kernel.bind(self._output, self.skybox, params)
            self._kernel.dispatch(KERNEL_TRACE, groups_x, groups_y, groups_z)
            self._compositor.composite(self._output, self._display, self.accumulation.blend_weight)
        except RenderError as e:
            logger.warning("Skipping frame %d: %s", self._frame_index, e)
            return False

        self.accumulation.advance()
        self._frame_index += 1
        return True

    def display_image(self) -> npt.NDArray[np.float32]:
        """Get the accumulated display image.

        Returns:
            Linear RGB array of shape (height, width, 3), top-left origin.
        """
        return self._display.to_numpy()

    def __repr__(self) -> str:
        scene_count = self._scene.count if self._scene is not None else 0
        return (
            f"RenderOrchestrator(enabled={self._enabled}, spheres={scene_count}, "
            f"{self.accumulation!r})"
        )
