"""Grid mapping: partition the image into rows × cols cells.

Each axis is split into n equal bands of ``length // n`` pixels; the
remainder goes to the last band. A cell's brightness is the arithmetic
mean of every pixel inside it, so values always stay within [0, 255].
"""

from dataclasses import dataclass
from typing import NamedTuple, Tuple

import numpy as np

from ..utils.errors import InvalidConfig, InvalidGrid


class Cell(NamedTuple):
    """One grid cell: mean brightness and half-open bounds (x0, y0, x1, y1)."""
    avg_brightness: float
    bounds: Tuple[int, int, int, int]


@dataclass(frozen=True, eq=False)
class Grid:
    """Cell brightness matrix plus the pixel band edges it was computed on.

    Attributes
    ----------
    brightness : np.ndarray
        Mean brightness, shape (rows, cols), float64
    row_edges : np.ndarray
        Band edges along y, shape (rows + 1,), int
    col_edges : np.ndarray
        Band edges along x, shape (cols + 1,), int
    """
    brightness: np.ndarray
    row_edges: np.ndarray
    col_edges: np.ndarray

    def __post_init__(self):
        if self.brightness.ndim != 2 or self.brightness.size == 0:
            raise InvalidGrid(f"Grid must be a non-empty 2-D matrix, got shape {self.brightness.shape}")
        rows, cols = self.brightness.shape
        if self.row_edges.shape != (rows + 1,) or self.col_edges.shape != (cols + 1,):
            raise InvalidGrid(
                f"Band edges {self.row_edges.shape}/{self.col_edges.shape} "
                f"do not match a {rows}x{cols} grid"
            )
        if np.any(np.diff(self.row_edges) <= 0) or np.any(np.diff(self.col_edges) <= 0):
            raise InvalidGrid("Band edges must be strictly increasing")

    @property
    def rows(self) -> int:
        return self.brightness.shape[0]

    @property
    def cols(self) -> int:
        return self.brightness.shape[1]

    @property
    def width(self) -> int:
        return int(self.col_edges[-1])

    @property
    def height(self) -> int:
        return int(self.row_edges[-1])

    def col_centers(self) -> np.ndarray:
        """Horizontal cell centers in pixels, shape (cols,)."""
        return (self.col_edges[:-1] + self.col_edges[1:]) / 2.0

    def row_center(self, row: int) -> float:
        return (self.row_edges[row] + self.row_edges[row + 1]) / 2.0

    def nominal_row_height(self) -> int:
        """Band height before the remainder is added to the last row."""
        return int(self.row_edges[1] - self.row_edges[0])

    def cell(self, row: int, col: int) -> Cell:
        bounds = (
            int(self.col_edges[col]),
            int(self.row_edges[row]),
            int(self.col_edges[col + 1]),
            int(self.row_edges[row + 1]),
        )
        return Cell(float(self.brightness[row, col]), bounds)


def band_edges(length: int, n: int) -> np.ndarray:
    """Split [0, length) into n bands; the last band absorbs the remainder.

    >>> band_edges(10, 3).tolist()
    [0, 3, 6, 10]
    """
    if n < 1:
        raise InvalidConfig(f"Band count must be >= 1, got {n}")
    if n > length:
        raise InvalidConfig(f"Cannot split {length} px into {n} bands")
    size = length // n
    edges = np.arange(n + 1, dtype=np.int64) * size
    edges[-1] = length
    return edges


def map_grid(image: np.ndarray, rows: int, cols: int) -> Grid:
    """Average pixel brightness over a rows × cols partition of the image.

    Parameters
    ----------
    image : np.ndarray
        Grayscale image, shape (H, W)
    rows : int
        Number of horizontal bands (≥ 1, ≤ H)
    cols : int
        Number of vertical bands (≥ 1, ≤ W)

    Returns
    -------
    Grid

    Raises
    ------
    InvalidConfig
        If rows/cols are non-positive or exceed the image size
    """
    if rows < 1 or cols < 1:
        raise InvalidConfig(f"rows and cols must be >= 1, got rows={rows}, cols={cols}")
    if image.ndim != 2:
        raise InvalidConfig(f"Expected a 2-D grayscale image, got shape {image.shape}")

    height, width = image.shape
    if rows > height or cols > width:
        raise InvalidConfig(
            f"Grid {rows}x{cols} (rows x cols) is finer than the {height}x{width} image; "
            f"lower --rows/--cols or raise --scale"
        )

    row_edges = band_edges(height, rows)
    col_edges = band_edges(width, cols)

    pixels = image.astype(np.float64)
    sums = np.add.reduceat(pixels, row_edges[:-1], axis=0)
    sums = np.add.reduceat(sums, col_edges[:-1], axis=1)
    counts = np.outer(np.diff(row_edges), np.diff(col_edges))

    return Grid(brightness=sums / counts, row_edges=row_edges, col_edges=col_edges)
