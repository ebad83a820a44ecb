"""Exception hierarchy for the sine-wave pipeline.

Every failure is fatal: the CLI logs the message and exits nonzero.
Each class also derives from the builtin the caller would otherwise
expect (``ValueError`` for bad parameters, ``OSError`` for I/O), so
generic handlers keep working.

Usage:
    from sinewave_art.utils.errors import InvalidConfig
    raise InvalidConfig(f"rows must be >= 1, got {rows}")
"""


class SineWaveError(Exception):
    """Base class for all pipeline errors."""

    pass


class InvalidConfig(SineWaveError, ValueError):
    """Render configuration failed validation."""

    pass


class InvalidGrid(SineWaveError, ValueError):
    """Grid handed to the renderer is empty or malformed."""

    pass


class ImageLoadError(SineWaveError, OSError):
    """Source image is missing, unreadable or corrupt."""

    pass


class ImageWriteError(SineWaveError, OSError):
    """Output image could not be encoded or written."""

    pass
