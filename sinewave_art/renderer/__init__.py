"""Sine-wave renderer.

Modules:
    - grid: rows × cols partition and mean cell brightness
    - curves: brightness → amplitude, amplitude envelope, per-row trace
    - canvas: white uint8 buffer, thick sub-pixel polyline drawing
    - plotter: render(image, config) tying the above together

All coordinates are pixels of the scaled source image, image frame
(top-left origin, +Y down).
"""

from .canvas import Canvas
from .grid import Grid, map_grid
from .plotter import render, render_grid

__all__ = ['Canvas', 'Grid', 'map_grid', 'render', 'render_grid']
