"""Knee point detection with the Kneedle algorithm.

Reference: V. Satopää, J. Albrecht, D. Irwin and B. Raghavan, "Finding a
'Kneedle' in a Haystack: Detecting Knee Points in System Behavior", ICDCS
Workshops 2011.

The curve is resampled onto evenly spaced x positions, both axes are min–max
normalised and combined into a difference curve whose local maxima are knee
candidates.  Each maximum gets a threshold ``y_diff[max] - S * mean(dx)``; a
maximum is accepted as the knee once the difference curve falls below its
threshold before the next maximum is reached.

Rejected input never raises.  :func:`calculate_knee_point` returns ``None``
when the input is unusable or when no knee can be identified, e.g. because
the curve is a straight line or ``direction``/``concavity`` do not match the
shape of the curve.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from interpolation import resample

_log = logging.getLogger(__name__)


class CurveDirection(Enum):
    """Whether ``y`` grows or shrinks with ``x``."""

    INCREASING = "increasing"
    DECREASING = "decreasing"

    @classmethod
    def parse(cls, value: "CurveDirection | str") -> "CurveDirection":
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(f"unknown curve direction: {value!r}") from None


class Curvature(Enum):
    """Rotation of the tangent along the curve."""

    COUNTERCLOCKWISE = "counterclockwise"
    CLOCKWISE = "clockwise"
    POSITIVE = "counterclockwise"
    NEGATIVE = "clockwise"

    @classmethod
    def parse(cls, value: "Curvature | str") -> "Curvature":
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(f"unknown curvature: {value!r}") from None


@dataclass
class KneeTrace:
    """Intermediate arrays of a single knee detection run.

    ``thresholds`` holds the values at the end of the scan, i.e. including
    any reset to zero after a rising local minimum.  ``knee_index`` indexes
    the original ``x`` sequence.
    """

    x_spaced: np.ndarray
    y_spaced: np.ndarray
    x_norm: np.ndarray
    y_norm: np.ndarray
    y_diff: np.ndarray
    maxima: List[int] = field(default_factory=list)
    minima: List[int] = field(default_factory=list)
    thresholds: List[float] = field(default_factory=list)
    knee_index: Optional[int] = None
    knee: Optional[float] = None


def min_max_normalize(values: Sequence[float]) -> np.ndarray:
    """Scale ``values`` to ``[0, 1]``.

    A constant sequence has no span; the result is then NaN throughout
    rather than an exception.
    """

    arr = np.asarray(values, dtype=float)
    lo = arr.min()
    hi = arr.max()
    with np.errstate(divide="ignore", invalid="ignore"):
        return (arr - lo) / (hi - lo)


def _decreasing(x_norm: np.ndarray, y_norm: np.ndarray) -> np.ndarray:
    return x_norm + y_norm


def _decreasing_ccw(x_norm: np.ndarray, y_norm: np.ndarray) -> np.ndarray:
    return 1.0 - (x_norm + y_norm)


def _increasing(x_norm: np.ndarray, y_norm: np.ndarray) -> np.ndarray:
    return y_norm - x_norm


def _increasing_ccw(x_norm: np.ndarray, y_norm: np.ndarray) -> np.ndarray:
    return np.abs(y_norm - x_norm)


_DIFF_FORMULAS = {
    (CurveDirection.DECREASING, Curvature.CLOCKWISE): _decreasing,
    (CurveDirection.DECREASING, Curvature.COUNTERCLOCKWISE): _decreasing_ccw,
    (CurveDirection.INCREASING, Curvature.CLOCKWISE): _increasing,
    (CurveDirection.INCREASING, Curvature.COUNTERCLOCKWISE): _increasing_ccw,
}


def difference_formula(
    direction: CurveDirection, concavity: Curvature
) -> Callable[[np.ndarray, np.ndarray], np.ndarray]:
    """Return the function combining ``x_norm`` and ``y_norm`` into ``y_diff``."""
    return _DIFF_FORMULAS[(CurveDirection.parse(direction), Curvature.parse(concavity))]


def difference_curve(
    x_norm: np.ndarray,
    y_norm: np.ndarray,
    direction: CurveDirection,
    concavity: Curvature,
) -> np.ndarray:
    """Return the difference curve whose local maxima are knee candidates."""
    formula = difference_formula(direction, concavity)
    return formula(np.asarray(x_norm, dtype=float), np.asarray(y_norm, dtype=float))


def find_local_extrema(values: Sequence[float], want_maxima: bool) -> List[int]:
    """Return indices of strict local maxima (or minima) of ``values``.

    Neighbour indices are clamped to the array bounds, so an endpoint is
    compared against itself on its open side and never qualifies.
    """

    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return []
    prev = np.concatenate((arr[:1], arr[:-1]))
    nxt = np.concatenate((arr[1:], arr[-1:]))
    if want_maxima:
        mask = (arr > prev) & (arr > nxt)
    else:
        mask = (arr < prev) & (arr < nxt)
    return [int(i) for i in np.flatnonzero(mask)]


def thresholds(
    ymx: Sequence[float], x_norm: Sequence[float], sensitivity: float
) -> List[float]:
    """Return the decay threshold of each local maximum."""

    diff_sum = 0.0
    for prev, cur in zip(x_norm, x_norm[1:]):
        diff_sum += float(cur) - float(prev)
    diff_mean = diff_sum / (len(x_norm) - 1)
    return [float(v) - sensitivity * diff_mean for v in ymx]


def _rises_after_minimum(y_diff: np.ndarray, idx: int, minima: set) -> bool:
    return idx in minima and idx < len(y_diff) - 1 and y_diff[idx + 1] > y_diff[idx]


def _scan(
    y_diff: np.ndarray, maxima: List[int], minima: List[int], tmx: List[float]
) -> Optional[int]:
    """Walk the difference curve and return the index of the accepted maximum.

    ``tmx`` is updated in place when a threshold is reset.  Every index that
    satisfies the current threshold records its maximum, so the last
    satisfying maximum of the scan is returned.
    """

    n = len(y_diff)
    minima_set = set(minima)
    cur = 0
    knee_idx: Optional[int] = None
    i = maxima[0] + 1
    while i < n:
        if cur < len(maxima) - 1 and i == maxima[cur + 1]:
            cur += 1
            i += 2
            continue

        # The curve climbs again past this minimum.
        if _rises_after_minimum(y_diff, i, minima_set):
            tmx[cur] = 0.0

        if y_diff[i] < tmx[cur] or tmx[cur] < 0:
            knee_idx = maxima[cur]
        i += 1
    return knee_idx


def _validate(x, y) -> Optional[Tuple[np.ndarray, np.ndarray]]:
    if x is None or y is None:
        return None
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    if xs.ndim != 1 or ys.ndim != 1:
        _log.warning("only one-dimensional curves are supported")
        return None
    if len(xs) != len(ys) or len(xs) < 2:
        return None
    if not (np.all(np.isfinite(xs)) and np.all(np.isfinite(ys))):
        _log.warning("curve contains non-finite values; no knee reported")
        return None
    if np.any(np.diff(xs) <= 0):
        _log.warning("x must be strictly ascending; no knee reported")
        return None
    return xs, ys


def knee_trace(
    x: Sequence[float],
    y: Sequence[float],
    direction: CurveDirection | str,
    concavity: Curvature | str,
    sensitivity: float = 1.0,
    force_linear_interpolation: bool = False,
) -> Optional[KneeTrace]:
    """Run the detector and return every intermediate array.

    Returns ``None`` for rejected input.  A curve without a knee still
    produces a trace with ``knee`` set to ``None``.
    """

    checked = _validate(x, y)
    if checked is None:
        return None
    xs, ys = checked

    x_spaced, y_spaced = resample(xs, ys, force_linear=force_linear_interpolation)
    x_norm = min_max_normalize(x_spaced)
    y_norm = min_max_normalize(y_spaced)
    if not np.all(np.isfinite(y_norm)):
        _log.warning("resampled curve is constant; no knee reported")
    y_diff = difference_curve(x_norm, y_norm, direction, concavity)

    trace = KneeTrace(
        x_spaced=x_spaced,
        y_spaced=y_spaced,
        x_norm=x_norm,
        y_norm=y_norm,
        y_diff=y_diff,
    )
    trace.maxima = find_local_extrema(y_diff, True)
    if not trace.maxima:
        _log.debug("difference curve has no local maxima")
        return trace
    trace.minima = find_local_extrema(y_diff, False)
    trace.thresholds = thresholds([y_diff[i] for i in trace.maxima], x_norm, sensitivity)
    _log.debug(
        "%d local maxima, %d local minima", len(trace.maxima), len(trace.minima)
    )

    knee_idx = _scan(y_diff, trace.maxima, trace.minima, trace.thresholds)
    if knee_idx is not None:
        trace.knee_index = knee_idx
        trace.knee = float(xs[knee_idx])
    return trace


def calculate_knee_point(
    x: Sequence[float],
    y: Sequence[float],
    direction: CurveDirection | str,
    concavity: Curvature | str,
    sensitivity: float = 1.0,
    force_linear_interpolation: bool = False,
) -> Optional[float]:
    """Return the x value of the knee point or ``None``.

    Parameters
    ----------
    x : sequence of float
        Sample positions, strictly ascending.
    y : sequence of float
        Sample values, same length as ``x``.
    direction : CurveDirection or str
        Whether the curve is increasing or decreasing.
    concavity : Curvature or str
        Whether the tangent rotates counterclockwise (positive curvature) or
        clockwise (negative curvature).
    sensitivity : float, optional
        Threshold scale ``S``.  Larger values demand a deeper drop after a
        maximum before it is accepted.  Defaults to ``1`` as in the paper.
    force_linear_interpolation : bool, optional
        Resample with linear interpolation instead of the Akima spline.

    Returns
    -------
    float or None
        One of the values of ``x``, or ``None`` when no knee is found.
    """

    trace = knee_trace(
        x,
        y,
        direction,
        concavity,
        sensitivity=sensitivity,
        force_linear_interpolation=force_linear_interpolation,
    )
    if trace is None:
        return None
    return trace.knee


__all__ = [
    "CurveDirection",
    "Curvature",
    "KneeTrace",
    "calculate_knee_point",
    "difference_curve",
    "difference_formula",
    "find_local_extrema",
    "knee_trace",
    "min_max_normalize",
    "thresholds",
]
