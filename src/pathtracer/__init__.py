"""Monte Carlo path tracer for scenes of spheres, written with Taichi.

This package renders spheres with diffuse, metal, dielectric and emissive
materials through a thin-lens camera, in double precision on any Taichi
backend.

Subpackages:
    core: Vector algebra, rays, random streams, the integrator and settings
    geometry: Sphere primitive and ray-sphere intersection
    materials: The material sum type and per-material scattering
    scene: Sphere storage, closest-hit queries, scene manager and presets
    camera: Thin-lens camera with depth of field
    preview: Gamma correction, quantization and PPM/PNG output

Taichi must be initialized (``ti.init(default_fp=ti.f64)``) before importing
any module that declares Taichi fields: core.rng, core.integrator,
core.progressive, scene.world, scene.manager, scene.presets and
camera.thin_lens.
"""

__version__ = "0.1.0"
