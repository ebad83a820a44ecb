"""Cross-cutting utilities (lowest dependency layer).

This package provides shared primitives for:
    - Config validation (validators)
    - Error types (errors)
    - Atomic I/O (fs)
    - Hashing for provenance (hashing)
    - Unified logging (logging_config)

No module in utils/ may import from upper layers (data_pipeline, renderer, cli).

Convenience imports:
    from sinewave_art.utils import fs, validators
    from sinewave_art.utils.logging_config import setup_logging, get_logger
"""

from . import errors
from . import fs
from . import hashing
from . import logging_config
from . import validators

from .logging_config import get_logger, push_context, setup_logging

__all__ = [
    # Modules
    'errors',
    'fs',
    'hashing',
    'logging_config',
    'validators',
    # Direct exports
    'setup_logging',
    'get_logger',
    'push_context',
]
