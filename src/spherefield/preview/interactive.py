"""Interactive preview window using Taichi GGUI.

InteractivePreview is a thin host around RenderOrchestrator: it owns the
window, calls the orchestrator's lifecycle methods, and maps user input to
invalidation sources.

Controls:
    - A / D: orbit the camera around the scene center
    - W / S: raise or lower the camera
    - Light panel: light direction and intensity sliders
    - Scene panel: generation and sampling sliders, reseed and export buttons

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from spherefield.preview.interactive import InteractivePreview
    >>>
    >>> preview = InteractivePreview(960, 540)
    >>> preview.run()
"""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from datetime import datetime

import numpy as np
import taichi as ti

from spherefield.camera.pinhole import orbit
from spherefield.config import RenderConfig
from spherefield.core.orchestrator import RenderOrchestrator
from spherefield.scene.light import DirectionalLight

logger = logging.getLogger(__name__)

# Camera motion per frame while a key is held
ORBIT_DEGREES_PER_FRAME = 1.5
HEIGHT_PER_FRAME = 2.0


class InteractivePreview:
    """Window that renders the sphere field progressively until closed.

    Attributes:
        width: Window width in pixels.
        height: Window height in pixels.
        orchestrator: The orchestrator driven by this window.
        display_image: Taichi field holding the gamma-encoded frame.
    """

    def __init__(
        self,
        width: int,
        height: int,
        config: RenderConfig | None = None,
        *,
        title: str = "Sphere Field - Progressive Ray Tracing",
    ) -> None:
        """Create the preview. The window itself opens on run().

        Args:
            width: Window width in pixels.
            height: Window height in pixels.
            config: Initial render configuration.
            title: Window title.
        """
        self.width = width
        self.height = height
        self._title = title
        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None

        self.orchestrator = RenderOrchestrator(config)
        self.display_image: ti.MatrixField = ti.Vector.field(
            3, dtype=ti.f32, shape=(width, height)
        )

    def _initialize_window(self) -> None:
        if self._window is not None:
            return
        self._window = ti.ui.Window(
            name=self._title,
            res=(self.width, self.height),
            vsync=True,
        )
        self._canvas = self._window.get_canvas()

    @property
    def window(self) -> ti.ui.Window:
        """Get the Taichi GGUI window, initializing if needed."""
        if self._window is None:
            self._initialize_window()
        assert self._window is not None
        return self._window

    @property
    def canvas(self) -> ti.ui.Canvas:
        """Get the canvas for rendering."""
        if self._canvas is None:
            self._initialize_window()
        assert self._canvas is not None
        return self._canvas

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering."""
        if os.name == "nt":
            return True
        if os.uname().sysname == "Darwin":
            return not (os.environ.get("SSH_CONNECTION") and not os.environ.get("DISPLAY"))
        return bool(os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY"))

    def update_image(self, image: np.ndarray) -> None:
        """Copy a (height, width, 3) top-left-origin image into the display field.

        Raises:
            ValueError: If image shape doesn't match (height, width, 3).
        """
        expected_shape = (self.height, self.width, 3)
        if image.shape != expected_shape:
            raise ValueError(
                f"Image shape {image.shape} doesn't match expected {expected_shape}"
            )
        image_transposed = np.ascontiguousarray(
            np.transpose(np.flipud(image), (1, 0, 2)), dtype=np.float32
        )
        self.display_image.from_numpy(image_transposed)

    def handle_input(self) -> None:
        """Move the camera while orbit keys are held."""
        yaw = 0.0
        height = 0.0
        if self.window.is_pressed("a"):
            yaw -= ORBIT_DEGREES_PER_FRAME
        if self.window.is_pressed("d"):
            yaw += ORBIT_DEGREES_PER_FRAME
        if self.window.is_pressed("w"):
            height += HEIGHT_PER_FRAME
        if self.window.is_pressed("s"):
            height -= HEIGHT_PER_FRAME

        if yaw or height:
            self.orchestrator.set_camera(orbit(self.orchestrator.camera, yaw, height))

    def _draw_light_panel(self) -> None:
        light = self.orchestrator.light
        x, y, z = light.normalized_direction()
        with self.window.GUI.sub_window("Light", 0.02, 0.02, 0.28, 0.2) as gui:
            new_x = gui.slider_float("Direction X", x, minimum=-1.0, maximum=1.0)
            new_z = gui.slider_float("Direction Z", z, minimum=-1.0, maximum=1.0)
            new_intensity = gui.slider_float(
                "Intensity", light.intensity, minimum=0.0, maximum=4.0
            )

        changed = (
            abs(new_x - x) > 1e-6
            or abs(new_z - z) > 1e-6
            or abs(new_intensity - light.intensity) > 1e-6
        )
        if changed:
            # Store the normalized direction so the sliders read back what they wrote
            direction = DirectionalLight(direction=(new_x, y, new_z)).normalized_direction()
            self.orchestrator.set_light(
                DirectionalLight(direction=direction, intensity=new_intensity)
            )

    def _draw_scene_panel(self) -> None:
        config = self.orchestrator.config
        with self.window.GUI.sub_window("Scene", 0.02, 0.24, 0.28, 0.36) as gui:
            spheres_max = gui.slider_int("Spheres", config.spheres_max, 0, 500)
            placement = gui.slider_float(
                "Placement radius", config.sphere_placement_radius, minimum=0.0, maximum=300.0
            )
            min_radius = gui.slider_float(
                "Min radius", config.sphere_radius[0], minimum=0.5, maximum=20.0
            )
            max_radius = gui.slider_float(
                "Max radius", config.sphere_radius[1], minimum=0.5, maximum=20.0
            )
            progressive = gui.checkbox("Progressive sampling", config.progressive_sampling)
            reseed = gui.button("Reseed")
            export = gui.button("Export PNG")
            gui.text(f"Spheres: {self.orchestrator.scene.count if self.orchestrator.scene else 0}")
            gui.text(f"Samples: {self.orchestrator.sample_count}")

        edited = replace(
            config,
            spheres_max=spheres_max,
            sphere_placement_radius=placement,
            sphere_radius=(min_radius, max_radius),
            progressive_sampling=progressive,
        )
        if edited != config:
            self.orchestrator.on_config_changed(edited)
        if reseed:
            scene = self.orchestrator.reseed()
            logger.info("Reseeded scene with %d spheres", scene.count)
        if export:
            self._export_png()

    def _export_png(self) -> None:
        from spherefield.preview.export import save_png

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        save_png(self.orchestrator, f"spheres_{timestamp}.png", gamma=2.2)

    def run(self) -> None:
        """Render until the window is closed, then release GPU resources."""
        from spherefield.preview.display import process_image_for_display

        self._initialize_window()
        self.orchestrator.on_enable()
        try:
            while self.window.running:
                self.handle_input()
                if self.orchestrator.on_tick(self.width, self.height):
                    image = process_image_for_display(self.orchestrator.display_image())
                    self.update_image(image)

                self._draw_light_panel()
                self._draw_scene_panel()
                self.canvas.set_image(self.display_image)
                self.window.show()
        finally:
            self.orchestrator.on_disable()
