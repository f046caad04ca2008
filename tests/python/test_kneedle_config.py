from pathlib import Path

import pytest
import yaml

from kneedle import Curvature, CurveDirection
from kneedle_config import CONFIG_PATH, KneedleConfig, load_config


def _write(tmp_path: Path, data) -> Path:
    path = tmp_path / "kneedle.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


def test_default_config_loads():
    cfg = load_config()
    raw = yaml.safe_load(CONFIG_PATH.read_text())
    assert cfg.direction is CurveDirection.parse(raw["direction"])
    assert cfg.concavity is Curvature.parse(raw["concavity"])
    assert cfg.sensitivity == pytest.approx(raw["sensitivity"])
    assert cfg.force_linear_interpolation is raw["force_linear_interpolation"]


def test_optional_fields_fall_back(tmp_path: Path):
    path = _write(
        tmp_path,
        {"version": 1, "direction": "decreasing", "concavity": "negative", "sensitivity": 2},
    )
    cfg = load_config(path)
    assert cfg.direction is CurveDirection.DECREASING
    assert cfg.concavity is Curvature.CLOCKWISE
    assert cfg.sensitivity == 2.0
    assert cfg.force_linear_interpolation is False
    assert (cfg.x_column, cfg.y_column) == (KneedleConfig.x_column, KneedleConfig.y_column)


def test_negative_sensitivity_rejected(tmp_path: Path):
    path = _write(
        tmp_path,
        {"version": 1, "direction": "increasing", "concavity": "clockwise", "sensitivity": -1},
    )
    with pytest.raises(ValueError, match="sensitivity"):
        load_config(path)


def test_unknown_key_rejected(tmp_path: Path):
    path = _write(
        tmp_path,
        {
            "version": 1,
            "direction": "increasing",
            "concavity": "clockwise",
            "sensitivity": 1,
            "smoothing": 3,
        },
    )
    with pytest.raises(ValueError):
        load_config(path)


def test_non_mapping_rejected(tmp_path: Path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ValueError, match="mapping"):
        load_config(path)
