"""Command-line entry point: image → sine-wave art.

Runs the full pipeline:
    1. Validate config (defaults ← --config YAML ← flags)
    2. Load source image as grayscale
    3. Rescale by --scale percent
    4. Grid the image and draw one brightness-modulated trace per row
    5. Write the output image atomically
    6. Optionally write a provenance manifest next to it

Refactored architecture:
    - sinewave_main(input_path, output_path, config) → dict
        * Callable function (used by tests and other Python callers)
        * Returns: {output_path, width, height, manifest_path}
    - main(argv) → exit code, wired to the ``sinewave`` console script

CLI:
    sinewave portrait.jpg
    sinewave portrait.jpg -o out.png -c 80 -r 60 --thickness 3
    sinewave portrait.jpg --scale 200 --threshold 220 --manifest
    python -m sinewave_art portrait.jpg --config configs/sinewave.v1.yaml

Output:
    <input-dir>/<input-stem>_sine.jpg          (unless -o is given)
    <output-dir>/<output-stem>_manifest.yaml   (with --manifest)

Exit codes:
    0: Output written
    1: Invalid config, unreadable input or unwritable output
    2: Bad command-line usage (argparse)
"""

import argparse
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from . import __version__
from .data_pipeline.loader import load_source_image, scale_image
from .renderer.plotter import render
from .utils import fs, hashing, validators
from .utils.errors import SineWaveError
from .utils.logging_config import pop_context, push_context, setup_logging

logger = logging.getLogger(__name__)

MANIFEST_SCHEMA = "sinewave_manifest.v1"


def default_output_path(input_path: Union[str, Path]) -> Path:
    """<input-stem>_sine.jpg in the input's directory."""
    input_path = Path(input_path)
    return input_path.with_name(f"{input_path.stem}_sine.jpg")


def manifest_path_for(output_path: Union[str, Path]) -> Path:
    output_path = Path(output_path)
    return output_path.with_name(f"{output_path.stem}_manifest.yaml")


def sinewave_main(
    input_path: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    config: Optional[validators.RenderConfig] = None,
    write_manifest: bool = False,
) -> Dict[str, Any]:
    """Render one image file to a sine-wave art file.

    Parameters
    ----------
    input_path : Union[str, Path]
        Source image (any Pillow-readable format)
    output_path : Union[str, Path], optional
        Target image; defaults to <input-stem>_sine.jpg beside the input
    config : RenderConfig, optional
        Validated render parameters; defaults to RenderConfig()
    write_manifest : bool
        Also write <output-stem>_manifest.yaml, default False

    Returns
    -------
    Dict[str, Any]
        Results dict with:
            - output_path: Path
            - width, height: int (output image size)
            - manifest_path: Optional[Path]

    Raises
    ------
    ImageLoadError, InvalidConfig, InvalidGrid, ImageWriteError
        Nothing is written at output_path when any of these is raised
    SineWaveError
        If the manifest cannot be written; the output image is removed
    """
    input_path = Path(input_path)
    output_path = Path(output_path) if output_path is not None else default_output_path(input_path)
    config = config or validators.RenderConfig()

    t0 = time.perf_counter()

    source = load_source_image(input_path)
    scaled = scale_image(source, config.scale_percent)
    logger.info(
        "Loaded %s: %dx%d → %dx%d (scale %d%%)",
        input_path.name, source.shape[1], source.shape[0],
        scaled.shape[1], scaled.shape[0], config.scale_percent,
    )

    canvas = render(scaled, config)
    height, width = canvas.shape
    logger.info(
        "Rendered %d rows x %d cycles on %dx%d canvas",
        config.rows, config.cols, width, height,
    )

    fs.atomic_save_image(canvas.pixels, output_path)
    logger.info("Wrote %s (%.2fs)", output_path, time.perf_counter() - t0)

    manifest_path = None
    if write_manifest:
        manifest_path = manifest_path_for(output_path)
        manifest = {
            'schema': MANIFEST_SCHEMA,
            'version': __version__,
            'input': {
                'path': str(input_path),
                'sha256': hashing.sha256_file(input_path),
                'width': int(source.shape[1]),
                'height': int(source.shape[0]),
            },
            'scaled': {
                'width': int(scaled.shape[1]),
                'height': int(scaled.shape[0]),
            },
            'output': {
                'path': str(output_path),
                'width': int(width),
                'height': int(height),
                'canvas_sha256': hashing.sha256_array(canvas.pixels),
            },
            'config': config.model_dump(by_alias=True),
        }
        try:
            fs.atomic_yaml_dump(manifest, manifest_path)
        except OSError as e:
            # An image without its requested manifest counts as a failed run
            output_path.unlink()
            raise SineWaveError(f"Failed to write manifest {manifest_path}: {e}") from e
        logger.info("Wrote manifest %s", manifest_path)

    return {
        'output_path': output_path,
        'width': int(width),
        'height': int(height),
        'manifest_path': manifest_path,
    }


def build_parser() -> argparse.ArgumentParser:
    defaults = validators.RenderConfig()

    parser = argparse.ArgumentParser(
        prog="sinewave",
        description="Plot an image as rows of sine waves whose amplitude follows local darkness.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("input", type=Path, help="Source image")
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Output image path (default: <INPUT-STEM>_sine.jpg)",
    )
    parser.add_argument(
        "--version",
        "-V",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    grid = parser.add_argument_group("Grid")
    grid.add_argument(
        "--cols",
        "-c",
        type=int,
        help=f"Number of sine oscillations per row (default: {defaults.cols})",
    )
    grid.add_argument(
        "--rows",
        "-r",
        type=int,
        help=f"Number of rows of sine waves (default: {defaults.rows})",
    )
    grid.add_argument(
        "--scale",
        "-s",
        type=int,
        dest="scale_percent",
        help=f"Percentage scaling of image resolution (default: {defaults.scale_percent})",
    )

    stroke = parser.add_argument_group("Stroke")
    stroke.add_argument(
        "--thickness",
        type=int,
        dest="thickness_px",
        help=f"Thickness of line in pixels (default: {defaults.thickness_px})",
    )
    stroke.add_argument(
        "--threshold",
        type=int,
        dest="white_threshold",
        help=f"White value clamp, 0-255 (default: {defaults.white_threshold})",
    )
    stroke.add_argument(
        "--min-amplitude",
        type=float,
        help=f"Floor amplitude as a fraction of the maximum (default: {defaults.min_amplitude})",
    )
    stroke.add_argument(
        "--envelope",
        choices=["cosine", "linear", "pchip"],
        help=f"Amplitude interpolation between cells (default: {defaults.envelope})",
    )
    stroke.add_argument(
        "--samples-per-px",
        type=int,
        help=f"Curve samples per pixel (default: {defaults.samples_per_px})",
    )
    stroke.add_argument(
        "--margin",
        type=int,
        dest="margin_percent",
        help=f"White border around the drawing, percent (default: {defaults.margin_percent})",
    )
    stroke.add_argument(
        "--antialias",
        action="store_true",
        default=None,
        help="Draw anti-aliased lines",
    )

    run = parser.add_argument_group("Run")
    run.add_argument(
        "--config",
        type=Path,
        help="YAML render config (sinewave.v1); flags override its values",
    )
    run.add_argument(
        "--manifest",
        action="store_true",
        help="Write <OUTPUT-STEM>_manifest.yaml with hashes and effective config",
    )
    run.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    run.add_argument("--log-file", help="Also log to this file")
    run.add_argument(
        "--json-logs",
        action="store_true",
        help="Write the log file as JSON lines",
    )

    return parser


CONFIG_FLAGS = (
    'cols',
    'rows',
    'scale_percent',
    'thickness_px',
    'white_threshold',
    'min_amplitude',
    'envelope',
    'samples_per_px',
    'margin_percent',
    'antialias',
)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(
        args.log_level,
        args.log_file,
        json=args.json_logs,
        quiet_libs=["PIL"],
        context={"app": "sinewave"},
    )
    push_context(input=args.input.name)

    try:
        config = validators.build_render_config(
            args.config,
            overrides={name: getattr(args, name) for name in CONFIG_FLAGS},
        )
        logger.debug("Effective config: %s", config.model_dump())

        sinewave_main(
            args.input,
            args.output,
            config=config,
            write_manifest=args.manifest,
        )
    except SineWaveError as e:
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130
    finally:
        pop_context(keys=["input"])

    return 0
