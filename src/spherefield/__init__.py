"""Progressive GPU ray tracing of a procedurally generated sphere field.

This package drives a Taichi ray-tracing kernel over a field of randomly
placed, non-overlapping spheres and accumulates the noisy per-frame samples
into a converging image.

Subpackages:
    core: Accumulation state machine, frame parameters, render orchestration,
        and the default Taichi kernel, render target and compositor
    scene: Sphere records, scene generation, device scene buffers, skybox
    camera: Pinhole camera transforms
    preview: Tone mapping, PNG export, and the interactive GGUI host
"""

__version__ = "0.1.0"
