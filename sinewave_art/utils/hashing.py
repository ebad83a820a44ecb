"""SHA-256 hashing for run provenance.

Provides:
    - sha256_file(): Hash file contents (source image)
    - sha256_array(): Hash array values (rendered canvas)

The canvas hash is taken on raw pixels before encoding, so two runs can
be compared even when the output codec is lossy.

Usage:
    from sinewave_art.utils import hashing
    digest = hashing.sha256_file("portrait.jpg")

Note: Module named `hashing.py` to avoid shadowing builtin `hash()`.
"""

import hashlib
from pathlib import Path
from typing import Union

import numpy as np


def sha256_file(path: Union[str, Path], chunk_size: int = 1 << 20) -> str:
    """Compute SHA-256 hash of file contents.

    Parameters
    ----------
    path : Union[str, Path]
        File path
    chunk_size : int
        Read chunk size in bytes, default 1 MB

    Returns
    -------
    str
        SHA-256 hex digest (64 characters)

    Raises
    ------
    FileNotFoundError
        If file doesn't exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    sha256 = hashlib.sha256()

    with open(path, 'rb') as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break
            sha256.update(chunk)

    return sha256.hexdigest()


def sha256_array(arr: np.ndarray) -> str:
    """Compute SHA-256 hash of array values.

    Shape and dtype are mixed into the digest, so a (2, 8) and a (4, 4)
    array with the same bytes hash differently.

    Parameters
    ----------
    arr : np.ndarray
        Any numeric array

    Returns
    -------
    str
        SHA-256 hex digest (64 characters)
    """
    arr = np.ascontiguousarray(arr)
    sha256 = hashlib.sha256()
    sha256.update(str(arr.dtype).encode('utf-8'))
    sha256.update(str(arr.shape).encode('utf-8'))
    sha256.update(arr.tobytes())
    return sha256.hexdigest()
