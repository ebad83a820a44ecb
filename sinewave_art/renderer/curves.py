"""Brightness-modulated sine traces.

One continuous function per grid row:

    y(x) = center_y - envelope(x) * sin(2π * u(x))

u(x) maps each column band linearly onto one unit of phase, so u is c at
the left edge of cell c and c + 1 at its right edge.

Properties:
    - Exactly ``cols`` full periods span the image width, one per cell,
      including a wider last cell that carries the remainder pixels
    - u is continuous and increasing, so the trace is continuous across
      cell boundaries by construction
    - envelope(x) interpolates per-cell amplitudes anchored at cell
      centers and is held constant beyond the first/last center
    - Darker cells give larger amplitude; every amplitude is at least
      ``min_amplitude * max_amplitude`` (> 0), so white areas still wave

Image frame: origin top-left, +Y down. The minus sign makes each period
start upward on screen.
"""

from dataclasses import dataclass

import numpy as np
from scipy.interpolate import PchipInterpolator

from .grid import Grid

# A trace fills 90% of its band height: 0.45 above and below center
MAX_AMPLITUDE_FILL = 0.45


def max_amplitude_for(row_height: float) -> float:
    """Peak displacement allowed for a band of the given height (px)."""
    return MAX_AMPLITUDE_FILL * row_height


def amplitude_for_brightness(
    brightness,
    max_amplitude: float,
    white_threshold: float = 255,
    min_amplitude: float = 0.1
) -> np.ndarray:
    """Map cell brightness to trace amplitude.

    Parameters
    ----------
    brightness : array_like
        Mean brightness in [0, 255]; values outside are clipped
    max_amplitude : float
        Amplitude of a pure-black cell (px), must be > 0
    white_threshold : float
        Brightness values above this are clamped to it
    min_amplitude : float
        Floor amplitude as a fraction of max_amplitude, in (0, 1]

    Returns
    -------
    np.ndarray
        Amplitudes (px), same shape as brightness, all > 0

    Notes
    -----
    A = floor + (max - floor) * (1 - min(b, threshold) / 255)

    Non-increasing in b; constant for b >= white_threshold.
    """
    b = np.clip(np.asarray(brightness, dtype=np.float64), 0.0, 255.0)
    b = np.minimum(b, float(white_threshold))
    floor = min_amplitude * max_amplitude
    return floor + (max_amplitude - floor) * (1.0 - b / 255.0)


def amplitude_envelope(
    xs: np.ndarray,
    centers: np.ndarray,
    amplitudes: np.ndarray,
    mode: str = "cosine"
) -> np.ndarray:
    """Interpolate cell amplitudes at arbitrary x positions.

    Parameters
    ----------
    xs : np.ndarray
        Query positions (px)
    centers : np.ndarray
        Anchor x positions, strictly increasing, shape (N,)
    amplitudes : np.ndarray
        Amplitude at each anchor, shape (N,)
    mode : str
        "cosine" (smooth ease between neighbours), "linear", or "pchip"
        (monotone cubic, SciPy)

    Returns
    -------
    np.ndarray
        Envelope values, same shape as xs

    Notes
    -----
    All modes stay between the two neighbouring anchor values, so the
    envelope never dips below the smallest cell amplitude.
    """
    xs = np.asarray(xs, dtype=np.float64)
    centers = np.asarray(centers, dtype=np.float64)
    amplitudes = np.asarray(amplitudes, dtype=np.float64)

    if len(centers) == 1:
        return np.full_like(xs, amplitudes[0])

    if mode == "linear":
        return np.interp(xs, centers, amplitudes)

    if mode == "pchip":
        clamped = np.clip(xs, centers[0], centers[-1])
        return PchipInterpolator(centers, amplitudes)(clamped)

    if mode == "cosine":
        idx = np.clip(np.searchsorted(centers, xs, side='right') - 1, 0, len(centers) - 2)
        x0 = centers[idx]
        x1 = centers[idx + 1]
        t = np.clip((xs - x0) / (x1 - x0), 0.0, 1.0)
        w = (1.0 - np.cos(np.pi * t)) / 2.0
        return amplitudes[idx] * (1.0 - w) + amplitudes[idx + 1] * w

    raise ValueError(f"Unknown envelope mode: {mode}. Use 'cosine', 'linear' or 'pchip'.")


@dataclass(frozen=True, eq=False)
class RowCurve:
    """The trace of one grid row.

    Attributes
    ----------
    center_y : float
        Vertical center of the row band (px)
    edges : np.ndarray
        Column band edges (px), shape (cols + 1,); the trace spans
        [edges[0], edges[-1]] with one period per band
    centers : np.ndarray
        Cell x-centers (px), shape (cols,)
    amplitudes : np.ndarray
        Per-cell amplitude (px), shape (cols,)
    envelope_mode : str
        See amplitude_envelope()
    """
    center_y: float
    edges: np.ndarray
    centers: np.ndarray
    amplitudes: np.ndarray
    envelope_mode: str = "cosine"

    @classmethod
    def from_grid(
        cls,
        grid: Grid,
        row: int,
        white_threshold: float = 255,
        min_amplitude: float = 0.1,
        envelope_mode: str = "cosine"
    ) -> 'RowCurve':
        """Build the trace for one row of a grid.

        Max amplitude derives from the nominal band height, so every row
        (including a taller remainder row) shares the same scale.
        """
        amax = max_amplitude_for(grid.nominal_row_height())
        amplitudes = amplitude_for_brightness(
            grid.brightness[row], amax, white_threshold, min_amplitude
        )
        return cls(
            center_y=grid.row_center(row),
            edges=grid.col_edges.astype(np.float64),
            centers=grid.col_centers(),
            amplitudes=amplitudes,
            envelope_mode=envelope_mode,
        )

    @property
    def width(self) -> float:
        return float(self.edges[-1])

    @property
    def cycles(self) -> int:
        return len(self.edges) - 1

    def envelope(self, xs: np.ndarray) -> np.ndarray:
        return amplitude_envelope(xs, self.centers, self.amplitudes, self.envelope_mode)

    def phase(self, xs: np.ndarray) -> np.ndarray:
        """Phase in radians; 2π * c at the left edge of column cell c."""
        cell_pos = np.interp(xs, self.edges, np.arange(len(self.edges), dtype=np.float64))
        return 2.0 * np.pi * cell_pos

    def offset(self, xs: np.ndarray) -> np.ndarray:
        """Signed displacement from center_y (positive = upward on screen)."""
        return self.envelope(xs) * np.sin(self.phase(xs))

    def __call__(self, xs: np.ndarray) -> np.ndarray:
        """Absolute y (image frame) of the trace at xs."""
        return self.center_y - self.offset(xs)

    def sample(self, samples_per_px: int = 4) -> np.ndarray:
        """Sample the trace densely along x.

        Returns
        -------
        np.ndarray
            Points (x, y), shape (N, 2), float64, x from 0 to width inclusive
        """
        n = int(np.ceil(self.width * samples_per_px)) + 1
        xs = np.linspace(0.0, self.width, n)
        return np.stack([xs, self(xs)], axis=1)
