"""Command-line renderer.

Renders a preset scene or a JSON scene file and writes a PPM or PNG image.

Usage:
    python -m pathtracer [options]

Options:
    --width WIDTH           Image width in pixels (default: 400)
    --aspect-ratio RATIO    Width divided by height (default: 16/9)
    --samples SAMPLES       Samples per pixel (default: 100)
    --max-depth DEPTH       Depth budget per path (default: 50)
    --seed SEED             Random seed (default: 0)
    --scene NAME            Preset scene (default: two_spheres)
    --scene-file PATH       JSON scene file; overrides --scene
    --background R G B      Flat background radiance
    --sky-gradient          Use the sky gradient background
    --output OUTPUT         Output file, .ppm or .png (default: render.ppm)
    --batch-size SIZE       Samples per progress update (default: 10)
    --arch ARCH             Taichi backend (default: cpu)
    --threads N             CPU threads for the Taichi CPU backend
    -v, --verbose           Debug logging
    -q, --quiet             Only log warnings and errors

Example:
    python -m pathtracer --scene random_spheres --width 600 --samples 50 --output cover.png
"""

import argparse
import logging
import sys
import time
from collections.abc import Sequence
from pathlib import Path

import taichi as ti

from pathtracer.core.settings import DEFAULT_BACKGROUND, MAX_DEPTH, RenderSettings

logger = logging.getLogger(__name__)

PRESET_NAMES = ("two_spheres", "showcase", "random_spheres")


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="pathtracer",
        description="Render a scene of spheres with a Monte Carlo path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=16.0 / 9.0,
        help="Width divided by height (default: 16/9)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Number of samples per pixel (default: 100)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=MAX_DEPTH,
        help=f"Depth budget per path (default: {MAX_DEPTH})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed for sampling and random scenes (default: 0)",
    )
    parser.add_argument(
        "--scene",
        choices=PRESET_NAMES,
        default="two_spheres",
        help="Preset scene (default: two_spheres)",
    )
    parser.add_argument(
        "--scene-file",
        type=str,
        default=None,
        help="JSON scene file; overrides --scene",
    )
    parser.add_argument(
        "--background",
        type=float,
        nargs=3,
        metavar=("R", "G", "B"),
        default=list(DEFAULT_BACKGROUND),
        help="Flat background radiance (default: %(default)s)",
    )
    parser.add_argument(
        "--sky-gradient",
        action="store_true",
        help="Use a white-to-blue sky gradient instead of the flat background",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="render.ppm",
        help="Output file path, .ppm or .png (default: render.ppm)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=10,
        help="Samples per progress update (default: 10)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu", "cuda", "vulkan", "metal"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=None,
        help="CPU threads for the Taichi CPU backend",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument(
        "-q", "--quiet", action="store_true", help="Only log warnings and errors"
    )
    return parser


def settings_from_args(args: argparse.Namespace) -> RenderSettings:
    """Map parsed arguments onto RenderSettings."""
    return RenderSettings(
        width=args.width,
        aspect_ratio=args.aspect_ratio,
        samples_per_pixel=args.samples,
        max_depth=args.max_depth,
        seed=args.seed,
        background=tuple(args.background),
        sky_gradient=args.sky_gradient,
        arch=args.arch,
        threads=args.threads,
    )


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure root logging for command-line use."""
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def initialize_taichi(settings: RenderSettings) -> None:
    """Initialize Taichi in double precision on the requested backend.

    Must run before any module that declares Taichi fields is imported.
    """
    arch = getattr(ti, settings.arch)
    kwargs = {}
    if settings.threads is not None:
        kwargs["cpu_max_num_threads"] = settings.threads
    ti.init(arch=arch, default_fp=ti.f64, **kwargs)
    logger.debug("Taichi initialized on %s", settings.arch)


def render(
    settings: RenderSettings,
    scene_name: str = "two_spheres",
    scene_file: str | None = None,
    output_path: str = "render.ppm",
    batch_size: int = 10,
) -> Path:
    """Render a scene and save it to a file.

    Taichi must already be initialized.

    Args:
        settings: Render settings.
        scene_name: Preset scene name, used when scene_file is None.
        scene_file: Optional JSON scene file. It must contain a camera.
        output_path: Output file path (.ppm or .png).
        batch_size: Samples to render between progress updates.

    Returns:
        Path to the saved image file.

    Raises:
        ValueError: If the settings, scene or output format are invalid.
    """
    # Lazy imports: these modules declare Taichi fields
    from pathtracer.camera.thin_lens import setup_camera
    from pathtracer.core.integrator import set_background, use_sky_gradient
    from pathtracer.core.progressive import ProgressiveRenderer
    from pathtracer.preview.export import save_image
    from pathtracer.scene.manager import SceneManager
    from pathtracer.scene.presets import create_preset

    settings.validate()

    if scene_file is not None:
        scene = SceneManager.load_json(scene_file)
        if scene.camera is None:
            raise ValueError(f"Scene file {scene_file} has no camera")
        camera = scene.camera
        camera.aspect_ratio = settings.aspect_ratio
    else:
        scene, camera = create_preset(
            scene_name, aspect_ratio=settings.aspect_ratio, seed=settings.seed
        )
    logger.info("Scene: %d spheres", scene.get_sphere_count())

    setup_camera(camera)
    if settings.sky_gradient:
        use_sky_gradient()
    else:
        set_background(settings.background)

    renderer = ProgressiveRenderer(
        settings.width, settings.height, max_depth=settings.max_depth, seed=settings.seed
    )
    logger.info(
        "Rendering %dx%d, %d samples per pixel, depth %d",
        settings.width,
        settings.height,
        settings.samples_per_pixel,
        settings.max_depth,
    )

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        elapsed = time.time() - start_time
        samples_per_sec = current / elapsed if elapsed > 0 else 0.0
        logger.info("Progress: %d/%d samples (%.1f spp/s)", current, target, samples_per_sec)

    renderer.render(
        num_samples=settings.samples_per_pixel,
        batch_size=batch_size,
        callback=progress_callback,
    )

    output_file = Path(output_path)
    save_image(renderer.get_image_numpy(), output_file)

    logger.info("Saved to %s (%.2fs)", output_file.absolute(), time.time() - start_time)
    return output_file


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, 1 for an invalid configuration or scene).
    """
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet)
    settings = settings_from_args(args)

    try:
        settings.validate()
        initialize_taichi(settings)
        render(
            settings,
            scene_name=args.scene,
            scene_file=args.scene_file,
            output_path=args.output,
            batch_size=args.batch_size,
        )
    except (ValueError, TypeError, RuntimeError, OSError) as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
