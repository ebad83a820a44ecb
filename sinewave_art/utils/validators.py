"""Render configuration schema and loading.

Centralized validation of the render parameters using pydantic:
    - RenderConfig (sinewave.v1): grid size, scaling, stroke and envelope

Configuration is layered once at startup and never mutated afterwards:
    model defaults ← YAML file (optional) ← CLI overrides

Every failure surfaces as InvalidConfig with the offending field, value
and (when loading from disk) file path.

Units:
    - Geometry: pixels (px) of the scaled image
    - Brightness: 8-bit grayscale [0, 255]
    - min_amplitude: fraction of the per-row maximum amplitude

Usage:
    from sinewave_art.utils import validators

    cfg = validators.load_render_config("configs/sinewave.v1.yaml")
    cfg = validators.build_render_config(overrides={"rows": 80, "cols": 60})
"""

from pathlib import Path
from typing import Any, Dict, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from . import fs
from .errors import InvalidConfig

SCHEMA_VERSION = "sinewave.v1"

EnvelopeMode = Literal["cosine", "linear", "pchip"]


# ============================================================================
# RENDER SCHEMA V1
# ============================================================================

class RenderConfig(BaseModel):
    """Sine-wave render parameters (sinewave.v1 schema).

    ``cols`` is the number of full oscillations drawn across the image
    width on every trace; ``rows`` is the number of traces.
    """
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    schema_version: str = Field(SCHEMA_VERSION, alias="schema", description="Schema version")
    cols: int = Field(50, ge=1, description="Oscillations per row (grid columns)")
    rows: int = Field(50, ge=1, description="Number of sine-wave rows (grid rows)")
    scale_percent: int = Field(100, ge=1, description="Resolution scaling applied before gridding (%)")
    thickness_px: int = Field(6, ge=1, description="Line thickness (px)")
    white_threshold: int = Field(255, ge=0, le=255, description="Brightness clamp; brighter cells draw the floor amplitude")
    min_amplitude: float = Field(0.1, gt=0.0, le=1.0, description="Floor amplitude as a fraction of the row maximum")
    envelope: EnvelopeMode = Field("cosine", description="Amplitude interpolation between cell centers")
    samples_per_px: int = Field(4, ge=1, le=64, description="Curve samples per pixel along x")
    margin_percent: int = Field(0, ge=0, le=100, description="White border added around the drawing (%)")
    antialias: bool = Field(False, description="Draw anti-aliased lines")

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != SCHEMA_VERSION:
            raise ValueError(f"Expected schema '{SCHEMA_VERSION}', got '{v}'")
        return v


def _format_validation_error(e: ValidationError) -> str:
    """Flatten pydantic errors into 'field: message' pairs."""
    parts = []
    for err in e.errors():
        loc = '.'.join(str(p) for p in err.get('loc', ())) or '<root>'
        parts.append(f"{loc}: {err.get('msg')} (got {err.get('input')!r})")
    return '; '.join(parts)


# ============================================================================
# PUBLIC API
# ============================================================================

def validate_render_config(data: Dict[str, Any], source: str = "<arguments>") -> RenderConfig:
    """Validate a plain dict into a RenderConfig.

    Parameters
    ----------
    data : Dict[str, Any]
        Field values keyed by field name (or "schema")
    source : str
        Where the values came from, used in the error message

    Returns
    -------
    RenderConfig

    Raises
    ------
    InvalidConfig
        If a value violates its field constraint or unknown keys are present
    """
    try:
        return RenderConfig(**data)
    except ValidationError as e:
        raise InvalidConfig(
            f"Render config validation failed at {source}: {_format_validation_error(e)}"
        ) from e


def load_render_config(path: Union[str, Path]) -> RenderConfig:
    """Load and validate render config from YAML.

    Parameters
    ----------
    path : Union[str, Path]
        Path to sinewave.v1.yaml file

    Returns
    -------
    RenderConfig
        Validated render configuration

    Raises
    ------
    InvalidConfig
        If the file is missing, unparsable or fails validation
    """
    return validate_render_config(_read_config_file(path), source=str(path))


def build_render_config(
    path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None
) -> RenderConfig:
    """Layer defaults, an optional YAML file and explicit overrides.

    Parameters
    ----------
    path : Union[str, Path], optional
        YAML config file; None uses model defaults only
    overrides : Dict[str, Any], optional
        Field values that win over the file; None values are ignored so
        unset CLI flags fall through

    Returns
    -------
    RenderConfig

    Raises
    ------
    InvalidConfig
        If the merged values fail validation
    """
    data: Dict[str, Any] = _read_config_file(path) if path is not None else {}
    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value

    source = f"{path} + arguments" if path is not None else "<arguments>"
    return validate_render_config(data, source=source)


def _read_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    path = Path(path)
    try:
        data = fs.load_yaml(path)
    except FileNotFoundError as e:
        raise InvalidConfig(f"Render config not found: {path}") from e
    except yaml.YAMLError as e:
        raise InvalidConfig(str(e)) from e

    if not isinstance(data, dict):
        raise InvalidConfig(
            f"Render config at {path} must be a mapping, got {type(data).__name__}"
        )
    return data
