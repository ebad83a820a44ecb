"""Atomic filesystem operations for image and YAML output.

Provides:
    - Atomic writes: tmp file → fsync → rename (no half-written outputs)
    - Atomic image save through Pillow, format inferred from extension
    - YAML load/dump for configs and run manifests
    - Directory creation with exist_ok semantics

A failed run leaves either the previous file or nothing at the target
path, never a truncated image.

Usage:
    from sinewave_art.utils import fs
    fs.atomic_save_image(canvas.pixels, "portrait_sine.jpg")
    fs.atomic_yaml_dump(manifest, "portrait_sine_manifest.yaml")
"""

import os
from pathlib import Path
from typing import Any, Dict, Union

import numpy as np
import yaml
from PIL import Image

from .errors import ImageWriteError


def ensure_dir(p: Union[str, Path]) -> Path:
    """Create directory if it doesn't exist, return Path object.

    Parameters
    ----------
    p : Union[str, Path]
        Directory path

    Returns
    -------
    Path
        Path object (guaranteed to exist)
    """
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


def atomic_write_bytes(
    path: Union[str, Path],
    data: bytes,
    tmp_suffix: str = ".tmp"
) -> None:
    """Write bytes to file atomically (tmp → fsync → rename).

    Parameters
    ----------
    path : Union[str, Path]
        Target file path
    data : bytes
        Data to write
    tmp_suffix : str
        Temporary file suffix, default ".tmp"

    Raises
    ------
    OSError
        If the directory cannot be created or the write fails
    """
    path = Path(path)
    ensure_dir(path.parent)

    tmp_path = path.with_suffix(path.suffix + tmp_suffix)

    try:
        with open(tmp_path, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        tmp_path.replace(path)
    except OSError:
        if tmp_path.exists():
            tmp_path.unlink()
        raise


def atomic_save_image(
    img: np.ndarray,
    path: Union[str, Path]
) -> Path:
    """Save image atomically via Pillow.

    Parameters
    ----------
    img : np.ndarray
        (H, W) grayscale or (H, W, 3) RGB; non-uint8 input is clipped to
        [0, 255] and cast
    path : Union[str, Path]
        Target file path (extension selects the format)

    Returns
    -------
    Path
        The written path

    Raises
    ------
    ImageWriteError
        Unsupported extension, unwritable directory or encoder failure.
        No file is left behind at ``path`` in that case.
    """
    path = Path(path)

    if img.dtype != np.uint8:
        img = np.clip(img, 0, 255).astype(np.uint8)

    if img.ndim == 3 and img.shape[2] == 1:
        img = img.squeeze(2)

    pil_img = Image.fromarray(img)

    # Keep the real extension last so Pillow still infers the format
    tmp_path = path.with_name(path.stem + ".tmp" + path.suffix)
    try:
        ensure_dir(path.parent)
        pil_img.save(tmp_path)
        tmp_path.replace(path)
    except (OSError, ValueError, KeyError) as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise ImageWriteError(f"Failed to save image {path}: {e}") from e

    return path


def atomic_yaml_dump(obj: Any, path: Union[str, Path]) -> None:
    """Save object as YAML atomically.

    Parameters
    ----------
    obj : Any
        Python object (dict, list, primitives)
    path : Union[str, Path]
        Target YAML file path

    Notes
    -----
    Uses PyYAML safe_dump; key order is preserved.
    """
    yaml_str = yaml.safe_dump(
        obj,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True
    )
    atomic_write_bytes(path, yaml_str.encode('utf-8'))


def load_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    """Load YAML file safely.

    Parameters
    ----------
    path : Union[str, Path]
        YAML file path

    Returns
    -------
    Dict[str, Any]
        Parsed YAML content; an empty file yields {}

    Raises
    ------
    FileNotFoundError
        If file doesn't exist
    yaml.YAMLError
        If YAML parsing fails
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Failed to parse YAML file {path}: {e}") from e

    return data if data is not None else {}
