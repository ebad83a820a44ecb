"""Output canvas and thick-polyline rasterization.

The canvas is a grayscale uint8 buffer initialized to white. Traces are
drawn black with OpenCV at sub-pixel precision (``shift`` bits), so
sampled curve points are not snapped to the pixel grid before stroking.

Thick segments are stroked perpendicular to their direction with round
joins, so steep parts of a trace are as thick as flat parts.

An optional margin centers the drawing area inside a larger canvas:
    full = inner * (100 + margin_percent) // 100
"""

from typing import Tuple

import cv2
import numpy as np

BACKGROUND = 255
FOREGROUND = 0

# Fixed-point fractional bits for cv2 drawing (1/16 px)
SUBPIXEL_SHIFT = 4


class Canvas:
    """White grayscale canvas with an inner drawing area.

    Parameters
    ----------
    inner_height, inner_width : int
        Drawing area in pixels (scaled source resolution)
    margin_percent : int
        Extra border as a percentage of each dimension, default 0
    """

    def __init__(self, inner_height: int, inner_width: int, margin_percent: int = 0):
        if inner_height < 1 or inner_width < 1:
            raise ValueError(f"Canvas must be at least 1x1, got {inner_width}x{inner_height}")
        if margin_percent < 0:
            raise ValueError(f"margin_percent must be >= 0, got {margin_percent}")

        self.inner_height = inner_height
        self.inner_width = inner_width
        self.full_height = inner_height * (100 + margin_percent) // 100
        self.full_width = inner_width * (100 + margin_percent) // 100
        self.offset_y = (self.full_height - inner_height) // 2
        self.offset_x = (self.full_width - inner_width) // 2
        self.pixels = np.full((self.full_height, self.full_width), BACKGROUND, dtype=np.uint8)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.pixels.shape

    def inner(self) -> np.ndarray:
        """View of the drawing area (no margin)."""
        return self.pixels[
            self.offset_y:self.offset_y + self.inner_height,
            self.offset_x:self.offset_x + self.inner_width,
        ]

    def draw_polyline(
        self,
        points: np.ndarray,
        thickness: int,
        antialias: bool = False,
        value: int = FOREGROUND
    ) -> None:
        """Stroke a connected polyline given in drawing-area coordinates.

        Parameters
        ----------
        points : np.ndarray
            (N, 2) float (x, y), N ≥ 2
        thickness : int
            Stroke width (px), ≥ 1
        antialias : bool
            Use cv2.LINE_AA instead of 8-connected lines
        value : int
            Ink value, default black
        """
        points = np.asarray(points, dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != 2 or len(points) < 2:
            raise ValueError(f"Expected (N>=2, 2) points, got shape {points.shape}")

        shifted = points + np.array([self.offset_x, self.offset_y], dtype=np.float64)
        pts_fixed = np.round(shifted * (1 << SUBPIXEL_SHIFT)).astype(np.int32)

        line_type = cv2.LINE_AA if antialias else cv2.LINE_8
        cv2.polylines(
            self.pixels,
            [pts_fixed.reshape(-1, 1, 2)],
            False,
            int(value),
            int(thickness),
            line_type,
            SUBPIXEL_SHIFT,
        )
