"""Test render config schema and layering.

Tests for sinewave_art.utils.validators:
    - Defaults match the CLI defaults (50/50/100/6/255)
    - Invariants: rows, cols, thickness >= 1; threshold in [0, 255]
    - Unknown keys and wrong schema are rejected
    - YAML file loading and CLI override layering
    - Every failure surfaces as InvalidConfig

Run:
    pytest tests/test_schemas.py -v
"""

from pathlib import Path

import pytest
import yaml

from sinewave_art.utils import validators
from sinewave_art.utils.errors import InvalidConfig


def _write_yaml(path: Path, data) -> Path:
    path.write_text(yaml.safe_dump(data), encoding='utf-8')
    return path


def test_defaults():
    cfg = validators.RenderConfig()
    assert cfg.cols == 50
    assert cfg.rows == 50
    assert cfg.scale_percent == 100
    assert cfg.thickness_px == 6
    assert cfg.white_threshold == 255
    assert cfg.envelope == "cosine"
    assert cfg.margin_percent == 0
    assert cfg.antialias is False


def test_config_is_frozen():
    cfg = validators.RenderConfig()
    with pytest.raises(Exception):
        cfg.rows = 10


@pytest.mark.parametrize("field,value", [
    ("rows", 0),
    ("cols", 0),
    ("rows", -3),
    ("thickness_px", 0),
    ("white_threshold", -1),
    ("white_threshold", 256),
    ("scale_percent", 0),
    ("min_amplitude", 0.0),
    ("min_amplitude", 1.5),
    ("envelope", "cubic"),
])
def test_invalid_values_raise_invalid_config(field, value):
    with pytest.raises(InvalidConfig) as excinfo:
        validators.validate_render_config({field: value})
    assert field in str(excinfo.value)


def test_invalid_config_is_value_error():
    """Generic ValueError handlers still catch config errors."""
    with pytest.raises(ValueError):
        validators.validate_render_config({"rows": 0})


def test_threshold_bounds_inclusive():
    assert validators.validate_render_config({"white_threshold": 0}).white_threshold == 0
    assert validators.validate_render_config({"white_threshold": 255}).white_threshold == 255


def test_unknown_key_rejected():
    with pytest.raises(InvalidConfig):
        validators.validate_render_config({"colums": 10})


def test_wrong_schema_rejected():
    with pytest.raises(InvalidConfig):
        validators.validate_render_config({"schema": "sinewave.v0"})


def test_load_render_config(tmp_path):
    path = _write_yaml(tmp_path / "cfg.yaml", {
        "schema": "sinewave.v1",
        "rows": 12,
        "cols": 30,
        "envelope": "pchip",
    })
    cfg = validators.load_render_config(path)
    assert (cfg.rows, cfg.cols, cfg.envelope) == (12, 30, "pchip")
    assert cfg.thickness_px == 6


def test_load_render_config_missing(tmp_path):
    with pytest.raises(InvalidConfig, match="not found"):
        validators.load_render_config(tmp_path / "nope.yaml")


def test_load_render_config_not_a_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding='utf-8')
    with pytest.raises(InvalidConfig, match="mapping"):
        validators.load_render_config(path)


def test_load_render_config_bad_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("rows: [1, 2\n", encoding='utf-8')
    with pytest.raises(InvalidConfig):
        validators.load_render_config(path)


def test_build_render_config_overrides_win(tmp_path):
    path = _write_yaml(tmp_path / "cfg.yaml", {"rows": 12, "cols": 30})
    cfg = validators.build_render_config(path, overrides={"rows": 7, "cols": None})
    assert cfg.rows == 7
    assert cfg.cols == 30


def test_build_render_config_without_file():
    cfg = validators.build_render_config(overrides={"thickness_px": 2})
    assert cfg.thickness_px == 2
    assert cfg.rows == 50


def test_build_render_config_invalid_override(tmp_path):
    path = _write_yaml(tmp_path / "cfg.yaml", {"rows": 12})
    with pytest.raises(InvalidConfig, match="cfg.yaml"):
        validators.build_render_config(path, overrides={"cols": 0})


def test_shipped_example_config_is_valid():
    path = Path(__file__).resolve().parents[1] / "configs" / "sinewave.v1.yaml"
    cfg = validators.load_render_config(path)
    assert cfg == validators.RenderConfig()
