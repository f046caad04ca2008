from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Sequence

from curve_io import write_result
from kneedle import Curvature, CurveDirection, calculate_knee_point


@dataclass
class SensitivityRun:
    value: float
    knee: float | None


def analyze_sensitivity(
    x: Sequence[float],
    y: Sequence[float],
    direction: CurveDirection | str,
    concavity: Curvature | str,
    grid: List[float],
    out_json: Path | None = None,
    force_linear_interpolation: bool = False,
) -> Dict[str, Any]:
    """Analyse how the detected knee depends on the sensitivity ``S``.

    The knee is computed for every value of ``grid`` in the given order.
    ``robustness`` is the share of runs agreeing with the most common result
    and ``change_points`` lists grid values whose knee differs from the
    preceding run.
    """

    runs: List[SensitivityRun] = []
    for val in grid:
        knee = calculate_knee_point(
            x,
            y,
            direction,
            concavity,
            sensitivity=float(val),
            force_linear_interpolation=force_linear_interpolation,
        )
        runs.append(SensitivityRun(value=float(val), knee=knee))

    knees = {str(r.value): r.knee for r in runs}

    if runs:
        cnt = Counter(r.knee for r in runs)
        _, mode_count = cnt.most_common(1)[0]
        robustness = mode_count / len(runs)
    else:
        robustness = 0.0

    change_points: List[Dict[str, Any]] = []
    for prev, curr in zip(runs, runs[1:]):
        if prev.knee != curr.knee:
            change_points.append(
                {
                    "value": curr.value,
                    "from": prev.knee,
                    "to": curr.knee,
                }
            )

    result = {
        "direction": CurveDirection.parse(direction).value,
        "concavity": Curvature.parse(concavity).value,
        "grid": [float(v) for v in grid],
        "knees": knees,
        "found": sum(r.knee is not None for r in runs),
        "robustness": robustness,
        "change_points": change_points,
    }
    if out_json is not None:
        write_result(result, out_json)
    return result


__all__ = ["SensitivityRun", "analyze_sensitivity"]
