import json
from pathlib import Path

import numpy as np

import analysis.sensitivity as sensitivity
from analysis.sensitivity import analyze_sensitivity


X = np.arange(100, dtype=float)
Y = 1.05 ** X


def test_sweep_stable_knee(tmp_path: Path) -> None:
    out = tmp_path / "sens.json"
    res = analyze_sensitivity(X, Y, "increasing", "positive", [0.5, 1.0, 2.0], out)
    assert res["knees"] == {"0.5": 67.0, "1.0": 67.0, "2.0": 67.0}
    assert res["found"] == 3
    assert res["robustness"] == 1.0
    assert res["change_points"] == []
    assert res["concavity"] == "counterclockwise"
    assert json.loads(out.read_text()) == res


def test_sweep_flat_curve_finds_nothing() -> None:
    res = analyze_sensitivity(X, np.ones_like(X), "increasing", "clockwise", [1.0, 2.0])
    assert res["found"] == 0
    assert res["knees"] == {"1.0": None, "2.0": None}


def test_change_points_detected(monkeypatch) -> None:
    def fake_knee(x, y, direction, concavity, sensitivity=1.0, force_linear_interpolation=False):
        return 4.0 if sensitivity < 2.0 else None

    monkeypatch.setattr(sensitivity, "calculate_knee_point", fake_knee)
    res = analyze_sensitivity(X, Y, "increasing", "positive", [1.0, 1.5, 2.0, 3.0])
    assert res["change_points"] == [{"value": 2.0, "from": 4.0, "to": None}]
    assert res["robustness"] == 0.5
    assert res["found"] == 2
