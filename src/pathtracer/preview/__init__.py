"""Preview module for image output.

Components:
    export: Gamma correction, quantization, PPM and PNG writers

Example:
    >>> from pathtracer.preview import write_ppm
    >>> write_ppm(renderer.get_image_numpy(), "output.ppm")
"""

from pathtracer.preview.export import (
    gamma_correct,
    image_to_uint8,
    quantize,
    save_image,
    save_png,
    write_ppm,
)

__all__ = [
    "gamma_correct",
    "quantize",
    "image_to_uint8",
    "write_ppm",
    "save_png",
    "save_image",
]
