"""Source image decoding and resolution scaling.

Pipeline position:
    load_source_image → scale_image → renderer.grid.map_grid

All images leaving this module are 2-D grayscale numpy arrays, dtype
uint8, shape (H, W), brightness in [0, 255]. EXIF orientation is applied
so phone photos come out upright. 16-bit grayscale sources are rescaled to
8 bits (high byte) rather than clipped.

Scaling happens before gridding so cell boundaries are computed against
the scaled resolution.
"""

import logging
from pathlib import Path
from typing import Tuple, Union

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from ..utils.errors import ImageLoadError, InvalidConfig

logger = logging.getLogger(__name__)

# Pillow modes holding unsigned 16-bit samples
WIDE_GRAY_MODES = ('I', 'I;16', 'I;16L', 'I;16B', 'I;16N')


def _to_luma8(im: Image.Image) -> Image.Image:
    """Convert any Pillow image to 8-bit grayscale ('L').

    Pillow's own convert('L') clamps 16/32-bit integer samples to 255
    instead of scaling them, so wide grayscale is shifted down first.
    """
    if im.mode in WIDE_GRAY_MODES:
        wide = np.clip(np.asarray(im, dtype=np.int64), 0, 65535)
        return Image.fromarray((wide >> 8).astype(np.uint8))
    return im.convert('L')


def load_source_image(path: Union[str, Path]) -> np.ndarray:
    """Decode an image file into grayscale brightness values.

    Parameters
    ----------
    path : Union[str, Path]
        Any raster format Pillow can read

    Returns
    -------
    img : np.ndarray
        Grayscale image, shape (H, W), dtype uint8

    Raises
    ------
    ImageLoadError
        If the file is missing, not an image, or fails to decode
    """
    path = Path(path)
    if not path.is_file():
        raise ImageLoadError(f"Image not found: {path}")

    try:
        with Image.open(path) as im:
            im.load()
            im = ImageOps.exif_transpose(im)
            gray = _to_luma8(im)
    except UnidentifiedImageError as e:
        raise ImageLoadError(f"Unsupported or corrupt image: {path}") from e
    except Image.DecompressionBombError as e:
        raise ImageLoadError(f"Image too large to decode safely: {path} ({e})") from e
    except (OSError, ValueError) as e:
        raise ImageLoadError(f"Failed to decode image {path}: {e}") from e

    img = np.array(gray, dtype=np.uint8)
    if img.size == 0:
        raise ImageLoadError(f"Image has no pixels: {path}")

    logger.debug("Loaded %s (%dx%d)", path.name, img.shape[1], img.shape[0])
    return img


def scaled_size(width: int, height: int, scale_percent: int) -> Tuple[int, int]:
    """Return (width, height) after percentage scaling, each at least 1 px."""
    if scale_percent < 1:
        raise InvalidConfig(f"scale_percent must be >= 1, got {scale_percent}")
    new_w = max(1, int(round(width * scale_percent / 100.0)))
    new_h = max(1, int(round(height * scale_percent / 100.0)))
    return new_w, new_h


def scale_image(img: np.ndarray, scale_percent: int) -> np.ndarray:
    """Resample a grayscale image by scale_percent/100 in both dimensions.

    Parameters
    ----------
    img : np.ndarray
        Grayscale image, shape (H, W), dtype uint8
    scale_percent : int
        Percentage; 100 returns the input unchanged

    Returns
    -------
    np.ndarray
        Resampled image, dtype uint8 (bilinear interpolation)
    """
    if scale_percent == 100:
        return img

    h, w = img.shape[:2]
    new_w, new_h = scaled_size(w, h, scale_percent)
    resized = Image.fromarray(img).resize((new_w, new_h), Image.Resampling.BILINEAR)

    logger.debug("Scaled %dx%d → %dx%d (%d%%)", w, h, new_w, new_h, scale_percent)
    return np.array(resized, dtype=np.uint8)
