"""Taichi ray tracing kernel for the sphere field.

The kernel traces one jittered primary ray per pixel through a ground plane
at y = 0 and the spheres of a SceneBuffer. At each hit it adds diffuse
lighting from the directional light (with a hard shadow ray), then follows
the specular reflection, attenuating the path energy by the surface's
specular color. Roughness perturbs the reflection direction, so rough
surfaces converge to glossy reflections under progressive accumulation.
Rays that escape sample the equirectangular skybox.

Work is laid out as a grid of TILE_SIZE x TILE_SIZE thread groups; threads
that fall outside the target are skipped.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> kernel = RayTracingKernel()
    >>> kernel.bind(target, skybox, params)
    >>> kernel.dispatch(KERNEL_TRACE, groups_x, groups_y, 1)
"""

import logging
from typing import TYPE_CHECKING

import taichi as ti
import taichi.math as tm

from spherefield.core.errors import DispatchError

if TYPE_CHECKING:
    from spherefield.core.frame import FrameParameters
    from spherefield.core.target import RenderTarget
    from spherefield.scene.skybox import Skybox

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# Identifier of the trace kernel accepted by dispatch()
KERNEL_TRACE = 0

# Thread-group edge length in pixels
TILE_SIZE = 8

# Maximum number of specular bounces per path
MAX_BOUNCES = 8

# Ray offset to avoid self-intersection
RAY_EPSILON = 1e-3

# Ray intersection range
T_MAX = 1e10

# Surface of the ground plane
GROUND_ALBEDO = vec3(0.8, 0.8, 0.8)
GROUND_SPECULAR = vec3(0.04, 0.04, 0.04)
GROUND_ROUGHNESS = 0.2

# Paths whose energy drops below this are terminated
MIN_ENERGY = 1e-3


@ti.dataclass
class SurfaceHit:
    """Closest intersection of a ray with the scene.

    Attributes:
        hit: 1 if the ray hit the ground or a sphere, 0 otherwise.
        t: Distance along the ray.
        point: World-space hit position.
        normal: Outward unit normal at the hit.
        albedo: Diffuse color of the surface.
        specular: Specular color of the surface.
        roughness: Roughness of the surface.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    albedo: vec3
    specular: vec3
    roughness: ti.f32


@ti.func
def _random_in_unit_sphere() -> vec3:
    """Generate a random point inside the unit sphere by rejection sampling."""
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(100):
        if not found:
            p = vec3(
                ti.random(ti.f32) * 2.0 - 1.0,
                ti.random(ti.f32) * 2.0 - 1.0,
                ti.random(ti.f32) * 2.0 - 1.0,
            )
            if tm.dot(p, p) < 1.0:
                found = True
    return p


@ti.func
def _hit_sphere(origin: vec3, direction: vec3, center: vec3, radius: ti.f32) -> ti.f32:
    """Nearest positive hit distance of a unit-direction ray with a sphere.

    Uses the half-b form of the quadratic. Returns T_MAX on a miss.
    """
    oc = origin - center
    h = tm.dot(direction, oc)
    c = tm.dot(oc, oc) - radius * radius
    discriminant = h * h - c

    result = T_MAX
    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t = -h - sqrt_d
        if t <= 0.0:
            t = -h + sqrt_d
        if t > 0.0:
            result = t
    return result


@ti.func
def _intersect(
    origin: vec3,
    direction: vec3,
    positions: ti.template(),
    radii: ti.template(),
    albedos: ti.template(),
    speculars: ti.template(),
    roughness: ti.template(),
    count: ti.i32,
) -> SurfaceHit:
    """Find the closest hit against the ground plane and every sphere."""
    best = SurfaceHit(
        hit=0,
        t=T_MAX,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 1.0, 0.0),
        albedo=vec3(0.0, 0.0, 0.0),
        specular=vec3(0.0, 0.0, 0.0),
        roughness=0.0,
    )

    # Ground plane at y = 0, seen from either side
    if ti.abs(direction.y) > 1e-8:
        t = -origin.y / direction.y
        if 0.0 < t < best.t:
            best.hit = 1
            best.t = t
            best.point = origin + t * direction
            best.normal = vec3(0.0, 1.0, 0.0)
            best.albedo = GROUND_ALBEDO
            best.specular = GROUND_SPECULAR
            best.roughness = GROUND_ROUGHNESS

    for k in range(count):
        t = _hit_sphere(origin, direction, positions[k], radii[k])
        if t < best.t:
            best.hit = 1
            best.t = t
            best.point = origin + t * direction
            best.normal = tm.normalize(best.point - positions[k])
            best.albedo = albedos[k]
            best.specular = speculars[k]
            best.roughness = roughness[k]

    return best


@ti.func
def _sample_skybox(sky: ti.template(), direction: vec3) -> vec3:
    """Nearest-texel lookup of an equirectangular map."""
    width = sky.shape[0]
    height = sky.shape[1]
    u = 0.5 + ti.atan2(direction.x, -direction.z) / (2.0 * tm.pi)
    v = 1.0 - ti.acos(tm.clamp(direction.y, -1.0, 1.0)) / tm.pi
    i = tm.clamp(ti.cast(u * width, ti.i32), 0, width - 1)
    j = tm.clamp(ti.cast(v * height, ti.i32), 0, height - 1)
    return sky[i, j]


@ti.kernel
def _trace_kernel(
    target: ti.template(),
    sky: ti.template(),
    positions: ti.template(),
    radii: ti.template(),
    albedos: ti.template(),
    speculars: ti.template(),
    roughness: ti.template(),
    count: ti.i32,
    camera_to_world: ti.template(),
    inverse_projection: ti.template(),
    pixel_offset: ti.template(),
    light: ti.template(),
    width: ti.i32,
    height: ti.i32,
    threads_x: ti.i32,
    threads_y: ti.i32,
):
    ti.loop_config(block_dim=TILE_SIZE * TILE_SIZE)
    for i, j in ti.ndrange(threads_x, threads_y):
        if i < width and j < height:
            offset = pixel_offset[None]
            u = (ti.cast(i, ti.f32) + offset.x) / width * 2.0 - 1.0
            v = (ti.cast(j, ti.f32) + offset.y) / height * 2.0 - 1.0

            to_world = camera_to_world[None]
            origin4 = to_world @ tm.vec4(0.0, 0.0, 0.0, 1.0)
            view4 = inverse_projection[None] @ tm.vec4(u, v, 0.0, 1.0)
            world4 = to_world @ tm.vec4(view4.x, view4.y, view4.z, 0.0)

            origin = vec3(origin4.x, origin4.y, origin4.z)
            direction = tm.normalize(vec3(world4.x, world4.y, world4.z))

            light_vec = light[None]
            light_dir = vec3(light_vec.x, light_vec.y, light_vec.z)
            light_intensity = light_vec.w

            energy = vec3(1.0, 1.0, 1.0)
            radiance = vec3(0.0, 0.0, 0.0)
            active = 1

            for _ in range(MAX_BOUNCES):
                if active == 1:
                    hit = _intersect(
                        origin, direction, positions, radii, albedos, speculars, roughness, count
                    )
                    if hit.hit == 0:
                        radiance += energy * _sample_skybox(sky, direction)
                        active = 0
                    else:
                        shadow_origin = hit.point + hit.normal * RAY_EPSILON
                        shadow = _intersect(
                            shadow_origin,
                            -light_dir,
                            positions,
                            radii,
                            albedos,
                            speculars,
                            roughness,
                            count,
                        )
                        if shadow.hit == 0:
                            diffuse = tm.clamp(-tm.dot(hit.normal, light_dir), 0.0, 1.0)
                            radiance += energy * diffuse * light_intensity * hit.albedo

                        reflected = tm.reflect(direction, hit.normal)
                        reflected = tm.normalize(
                            reflected + hit.roughness * _random_in_unit_sphere()
                        )
                        energy *= hit.specular

                        if tm.dot(reflected, hit.normal) <= 0.0 or tm.max(
                            energy.x, tm.max(energy.y, energy.z)
                        ) < MIN_ENERGY:
                            active = 0
                        else:
                            origin = shadow_origin
                            direction = reflected

            # Replace NaN/Inf from degenerate geometry with black
            for c in ti.static(range(3)):
                if tm.isnan(radiance[c]) or tm.isinf(radiance[c]):
                    radiance[c] = 0.0

            target[i, j] = tm.vec4(radiance.x, radiance.y, radiance.z, 1.0)


class RayTracingKernel:
    """Host-side handle for the trace kernel.

    Mirrors a compute-shader API: uniforms and resources are bound first,
    then dispatch() launches the kernel over a grid of thread groups.
    """

    def __init__(self) -> None:
        self._camera_to_world = ti.Matrix.field(4, 4, dtype=ti.f32, shape=())
        self._inverse_projection = ti.Matrix.field(4, 4, dtype=ti.f32, shape=())
        self._pixel_offset = ti.Vector.field(2, dtype=ti.f32, shape=())
        self._light = ti.Vector.field(4, dtype=ti.f32, shape=())
        self._target: "RenderTarget | None" = None
        self._skybox: "Skybox | None" = None
        self._params: "FrameParameters | None" = None

    def bind(self, target: "RenderTarget", skybox: "Skybox", params: "FrameParameters") -> None:
        """Bind the output target, skybox and frame uniforms.

        Args:
            target: Render target the kernel writes into.
            skybox: Environment sampled by escaping rays.
            params: Camera, jitter, light and scene for this frame.
        """
        self._camera_to_world[None] = params.camera_to_world.tolist()
        self._inverse_projection[None] = params.inverse_projection.tolist()
        self._pixel_offset[None] = list(params.pixel_offset)
        self._light[None] = list(params.light)
        self._target = target
        self._skybox = skybox
        self._params = params

    def dispatch(self, kernel_id: int, groups_x: int, groups_y: int, groups_z: int = 1) -> None:
        """Launch a kernel over groups_x x groups_y x groups_z thread groups.

        Args:
            kernel_id: Kernel to launch. Only KERNEL_TRACE is available.
            groups_x: Number of TILE_SIZE-wide groups along x.
            groups_y: Number of TILE_SIZE-high groups along y.
            groups_z: Number of groups along z (must be 1 for 2D images).

        Raises:
            DispatchError: If the kernel id or grid is invalid, nothing is
                bound, the scene buffer was released, or the launch fails.
        """
        if kernel_id != KERNEL_TRACE:
            raise DispatchError(f"Unknown kernel id {kernel_id}")
        if groups_x < 0 or groups_y < 0 or groups_z != 1:
            raise DispatchError(f"Invalid thread-group grid ({groups_x}, {groups_y}, {groups_z})")
        if self._target is None or self._skybox is None or self._params is None:
            raise DispatchError("Kernel dispatched before bind()")

        scene = self._params.scene
        if scene.released:
            raise DispatchError("Bound scene buffer has been released")

        target = self._target
        try:
            _trace_kernel(
                target.field,
                self._skybox.texture,
                scene.positions,
                scene.radii,
                scene.albedos,
                scene.speculars,
                scene.roughness,
                scene.count,
                self._camera_to_world,
                self._inverse_projection,
                self._pixel_offset,
                self._light,
                target.width,
                target.height,
                groups_x * TILE_SIZE,
                groups_y * TILE_SIZE,
            )
        except RuntimeError as e:
            raise DispatchError(f"Trace kernel failed: {e}") from e
