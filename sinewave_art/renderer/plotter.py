"""Core renderer: grid → one trace per row → canvas.

render(image, config) is a pure function of its inputs: the same image
and config always produce the same pixels.

Rows are drawn in order top to bottom. Each row only depends on its own
grid row, so the loop has no shared state besides the canvas.

Stroke width is capped at half the nominal band height (at least 1 px)
so neighbouring traces stay apart on dense grids.
"""

import logging

import numpy as np

from ..utils.errors import InvalidGrid
from ..utils.validators import RenderConfig
from .canvas import Canvas
from .curves import RowCurve
from .grid import Grid, map_grid

logger = logging.getLogger(__name__)


def effective_thickness(thickness_px: int, row_height: int) -> int:
    """Stroke width actually drawn for bands of ``row_height`` px."""
    return min(thickness_px, max(1, row_height // 2))


def render_grid(grid: Grid, canvas: Canvas, config: RenderConfig) -> None:
    """Draw one brightness-modulated trace per grid row onto the canvas.

    Parameters
    ----------
    grid : Grid
        Cell brightness; its width/height must match the canvas drawing area
    canvas : Canvas
        Target, modified in place
    config : RenderConfig
        Stroke, threshold and envelope settings

    Raises
    ------
    InvalidGrid
        If the grid is empty or sized differently from the canvas
    """
    if grid is None or grid.brightness.size == 0:
        raise InvalidGrid("Cannot render an empty grid")
    if (grid.height, grid.width) != (canvas.inner_height, canvas.inner_width):
        raise InvalidGrid(
            f"Grid covers {grid.width}x{grid.height} px but canvas drawing area "
            f"is {canvas.inner_width}x{canvas.inner_height}"
        )

    thickness = effective_thickness(config.thickness_px, grid.nominal_row_height())
    if thickness < config.thickness_px:
        logger.warning(
            "Thickness %dpx does not fit %dpx row bands; drawing %dpx lines "
            "(lower --rows or raise --scale to keep the requested width)",
            config.thickness_px, grid.nominal_row_height(), thickness,
        )

    for row in range(grid.rows):
        curve = RowCurve.from_grid(
            grid,
            row,
            white_threshold=config.white_threshold,
            min_amplitude=config.min_amplitude,
            envelope_mode=config.envelope,
        )
        canvas.draw_polyline(
            curve.sample(config.samples_per_px),
            thickness=thickness,
            antialias=config.antialias,
        )

    logger.debug(
        "Drew %d traces x %d cycles (thickness=%dpx, envelope=%s)",
        grid.rows, grid.cols, thickness, config.envelope,
    )


def render(image: np.ndarray, config: RenderConfig) -> Canvas:
    """Render an already-scaled grayscale image as sine-wave art.

    Parameters
    ----------
    image : np.ndarray
        Grayscale image, shape (H, W), dtype uint8
    config : RenderConfig

    Returns
    -------
    Canvas
        Drawing area H x W (plus margin_percent border)
    """
    grid = map_grid(image, config.rows, config.cols)
    canvas = Canvas(image.shape[0], image.shape[1], config.margin_percent)
    render_grid(grid, canvas, config)
    return canvas
