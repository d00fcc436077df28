"""Image export utilities for rendered images.

The output stage turns the averaged linear image into 8-bit pixels:

    1. Gamma correction with gamma 2 (square root of each channel).
    2. Quantization: floor(256 * clamp(value, 0, 0.999)), giving 0..255.

Supported formats:
    - PPM (plain-text P3, one pixel triple per line)
    - PNG (8-bit via Pillow)

Example:
    >>> from pathtracer.preview.export import save_png, write_ppm
    >>> image = renderer.get_image_numpy()
    >>> write_ppm(image, "output.ppm")
    >>> save_png(image, "output.png")
"""

from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

# Largest value kept before quantization; maps to 255
QUANTIZE_CLAMP_MAX = 0.999


def _check_image(image: npt.NDArray[np.floating]) -> None:
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {image.shape}")


def gamma_correct(image: npt.NDArray[np.floating]) -> npt.NDArray[np.float64]:
    """Apply gamma-2 correction (square root per channel).

    Negative values are clamped to 0 first.
    """
    return np.sqrt(np.maximum(np.asarray(image, dtype=np.float64), 0.0))


def quantize(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Quantize display values to 8 bits.

    Each channel becomes floor(256 * clamp(value, 0, 0.999)).
    """
    clamped = np.clip(np.asarray(image, dtype=np.float64), 0.0, QUANTIZE_CLAMP_MAX)
    return np.floor(256.0 * clamped).astype(np.uint8)


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a linear image to gamma-corrected uint8 pixels.

    Args:
        image: Linear image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.

    Raises:
        ValueError: If the image does not have shape (H, W, 3).
    """
    _check_image(image)
    return quantize(gamma_correct(image))


def write_ppm(image: npt.NDArray[np.floating], target: str | Path | TextIO) -> None:
    """Write a linear image as a plain-text PPM (P3).

    The header holds the width, height and max value 255; pixels follow one
    "R G B" triple per line, rows top to bottom.

    Args:
        image: Linear image array of shape (H, W, 3), top row first.
        target: Output file path or an open text stream.

    Raises:
        ValueError: If the image does not have shape (H, W, 3).
    """
    pixels = image_to_uint8(image)
    height, width, _ = pixels.shape

    lines = [f"P3\n{width} {height}\n255"]
    lines.extend(f"{r} {g} {b}" for r, g, b in pixels.reshape(-1, 3).tolist())
    text = "\n".join(lines) + "\n"

    if isinstance(target, (str, Path)):
        Path(target).write_text(text)
    else:
        target.write(text)


def save_png(image: npt.NDArray[np.floating], filepath: str | Path) -> None:
    """Save a linear image as an 8-bit PNG.

    Args:
        image: Linear image array of shape (H, W, 3), top row first.
        filepath: Output file path (should end in .png).
    """
    image_uint8 = image_to_uint8(image)

    # Save using Pillow
    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)


def save_image(image: npt.NDArray[np.floating], filepath: str | Path) -> None:
    """Save an image, choosing PPM or PNG from the file suffix.

    Raises:
        ValueError: If the suffix is neither .ppm nor .png.
    """
    suffix = Path(filepath).suffix.lower()
    if suffix == ".ppm":
        write_ppm(image, filepath)
    elif suffix == ".png":
        save_png(image, filepath)
    else:
        raise ValueError(f"Unsupported output format {suffix!r}; use .ppm or .png")
