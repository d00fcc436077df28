"""Scene module.

Components:
    world: Sphere storage and closest-hit queries
    manager: SceneManager with dict and JSON serialization
    presets: Ready-made scenes with matching cameras

All three declare or write Taichi fields; import them directly after
ti.init().
"""
