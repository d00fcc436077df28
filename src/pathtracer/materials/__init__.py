"""Materials module.

Components:
    material: The closed material sum type and scatter dispatch
    scatter: ScatterResult (reflect, absorb or emit)
    diffuse: Lambertian reflection
    metal: Mirror reflection with fuzz
    dielectric: Reflection and refraction with Schlick's approximation
    light: Emission

The per-material modules draw from the random streams in core.rng, so import
them directly after ti.init().
"""
