"""Preset scenes.

Each preset clears the sphere storage, builds its scene and returns it
together with a camera framed for it:

    - two_spheres: a grey diffuse sphere resting on a large diffuse ground
      sphere, viewed by a pinhole camera at the origin.
    - showcase: one sphere of every material kind on a ground sphere.
    - random_spheres: a ground sphere covered in small spheres of random
      material, with three large feature spheres and depth of field.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.camera.thin_lens import setup_camera
    >>> from pathtracer.scene.presets import create_preset
    >>> scene, camera = create_preset("showcase", aspect_ratio=16 / 9)
    >>> setup_camera(camera)
"""

import math
from collections.abc import Callable

import numpy as np

from pathtracer.camera.thin_lens import ThinLensCamera
from pathtracer.materials.material import Dielectric, Diffuse, Light, Metal
from pathtracer.scene.manager import SceneManager

PresetFactory = Callable[..., tuple[SceneManager, ThinLensCamera]]

GROUND_ALBEDO = (0.5, 0.5, 0.5)


def two_spheres(aspect_ratio: float = 16.0 / 9.0) -> tuple[SceneManager, ThinLensCamera]:
    """Create a diffuse sphere on a diffuse ground sphere.

    Args:
        aspect_ratio: Image width divided by height.

    Returns:
        Tuple of (scene, camera).
    """
    scene = SceneManager()
    scene.add_sphere((0.0, 0.0, -1.0), 0.5, Diffuse(albedo=(0.5, 0.5, 0.5)))
    scene.add_sphere((0.0, -100.5, -1.0), 100.0, Diffuse(albedo=GROUND_ALBEDO))

    # Viewport 2 units tall, 1 unit in front of the origin
    camera = ThinLensCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=aspect_ratio,
        aperture=0.0,
        focus_distance=1.0,
    )
    return scene, camera


def showcase(aspect_ratio: float = 16.0 / 9.0) -> tuple[SceneManager, ThinLensCamera]:
    """Create a row of diffuse, glass and metal spheres lit by a small light.

    The glass sphere holds a smaller air-filled sphere so it renders as a
    hollow bubble.

    Args:
        aspect_ratio: Image width divided by height.

    Returns:
        Tuple of (scene, camera).
    """
    scene = SceneManager()
    scene.add_sphere((0.0, -100.5, -1.0), 100.0, Diffuse(albedo=(0.8, 0.8, 0.0)))
    scene.add_sphere((0.0, 0.0, -1.0), 0.5, Diffuse(albedo=(0.1, 0.2, 0.5)))
    scene.add_sphere((-1.0, 0.0, -1.0), 0.5, Dielectric(refractive_index=1.5))
    # Air bubble: glass-to-air ratio inside the outer shell
    scene.add_sphere((-1.0, 0.0, -1.0), 0.4, Dielectric(refractive_index=1.0 / 1.5))
    scene.add_sphere((1.0, 0.0, -1.0), 0.5, Metal(albedo=(0.8, 0.6, 0.2), fuzz=0.1))
    scene.add_sphere((0.0, 1.2, -1.5), 0.3, Light(color=(4.0, 4.0, 4.0)))

    camera = ThinLensCamera.focused_on_lookat(
        lookfrom=(-2.0, 2.0, 1.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=30.0,
        aspect_ratio=aspect_ratio,
        aperture=0.0,
    )
    return scene, camera


def random_spheres(
    seed: int = 0, aspect_ratio: float = 16.0 / 9.0
) -> tuple[SceneManager, ThinLensCamera]:
    """Create a ground covered in small random spheres.

    Small spheres sit on a 22 x 22 grid with jittered positions. Each picks
    a material at random: 80% diffuse, 15% metal, 5% glass. Spheres too close
    to the large metal feature sphere are skipped.

    Args:
        seed: Seed for the scene layout; equal seeds give equal scenes.
        aspect_ratio: Image width divided by height.

    Returns:
        Tuple of (scene, camera).
    """
    rng = np.random.default_rng(seed)

    scene = SceneManager()
    scene.add_sphere((0.0, -1000.0, 0.0), 1000.0, Diffuse(albedo=GROUND_ALBEDO))

    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat = rng.random()
            center = (a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random())

            if math.dist(center, (4.0, 0.2, 0.0)) <= 0.9:
                continue

            if choose_mat < 0.8:
                albedo = rng.random(3) * rng.random(3)
                scene.add_sphere(center, 0.2, Diffuse(albedo=tuple(albedo.tolist())))
            elif choose_mat < 0.95:
                albedo = rng.uniform(0.5, 1.0, 3)
                fuzz = float(rng.uniform(0.0, 0.5))
                scene.add_sphere(center, 0.2, Metal(albedo=tuple(albedo.tolist()), fuzz=fuzz))
            else:
                scene.add_sphere(center, 0.2, Dielectric(refractive_index=1.5))

    scene.add_sphere((0.0, 1.0, 0.0), 1.0, Dielectric(refractive_index=1.5))
    scene.add_sphere((-4.0, 1.0, 0.0), 1.0, Diffuse(albedo=(0.4, 0.2, 0.1)))
    scene.add_sphere((4.0, 1.0, 0.0), 1.0, Metal(albedo=(0.7, 0.6, 0.5), fuzz=0.0))

    camera = ThinLensCamera(
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_distance=10.0,
    )
    return scene, camera


PRESETS: dict[str, PresetFactory] = {
    "two_spheres": two_spheres,
    "showcase": showcase,
    "random_spheres": random_spheres,
}


def create_preset(
    name: str, aspect_ratio: float = 16.0 / 9.0, seed: int = 0
) -> tuple[SceneManager, ThinLensCamera]:
    """Create a preset scene by name.

    Args:
        name: One of the keys of PRESETS.
        aspect_ratio: Image width divided by height.
        seed: Layout seed, used by random_spheres only.

    Returns:
        Tuple of (scene, camera).

    Raises:
        ValueError: If the name is unknown.
    """
    if name not in PRESETS:
        raise ValueError(f"Unknown preset {name!r}; choose from {sorted(PRESETS)}")
    if name == "random_spheres":
        return random_spheres(seed=seed, aspect_ratio=aspect_ratio)
    return PRESETS[name](aspect_ratio=aspect_ratio)
