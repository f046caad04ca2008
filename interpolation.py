"""Curve interpolation and uniform resampling.

The knee detector works on evenly spaced samples.  :func:`resample` maps an
arbitrary, x-sorted curve onto ``len(x)`` equidistant points spanning
``[min(x), max(x)]``.  Long curves are interpolated with an Akima spline which
is robust against the overshoot of ordinary cubic splines; short curves, or
callers that request it explicitly, use piecewise linear interpolation.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence, Tuple

import numpy as np
from scipy.interpolate import Akima1DInterpolator

# Smallest number of samples for which the spline is used.
SPLINE_MIN_POINTS = 6

_log = logging.getLogger(__name__)


def interpolate(
    x: Sequence[float], y: Sequence[float], force_linear: bool = False
) -> Callable[[np.ndarray], np.ndarray]:
    """Return an interpolant of the ``(x, y)`` samples.

    Parameters
    ----------
    x : sequence of float
        Strictly ascending sample positions.
    y : sequence of float
        Sample values, same length as ``x``.
    force_linear : bool, optional
        Use piecewise linear interpolation even when enough points are
        available for the spline.

    Returns
    -------
    callable
        Function evaluating the interpolant at an array of positions.
    """

    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    if len(xs) >= SPLINE_MIN_POINTS and not force_linear:
        _log.debug("interpolating %d points with Akima spline", len(xs))
        spline = Akima1DInterpolator(xs, ys)

        def _spline(pts: np.ndarray) -> np.ndarray:
            return np.asarray(spline(np.asarray(pts, dtype=float)), dtype=float)

        return _spline

    _log.debug("interpolating %d points linearly", len(xs))

    def _linear(pts: np.ndarray) -> np.ndarray:
        return np.interp(np.asarray(pts, dtype=float), xs, ys)

    return _linear


def resample(
    x: Sequence[float], y: Sequence[float], force_linear: bool = False
) -> Tuple[np.ndarray, np.ndarray]:
    """Resample the curve onto ``len(x)`` evenly spaced positions."""

    xs = np.asarray(x, dtype=float)
    x_spaced = np.linspace(xs.min(), xs.max(), len(xs))
    y_spaced = interpolate(xs, y, force_linear=force_linear)(x_spaced)
    return x_spaced, y_spaced


__all__ = ["SPLINE_MIN_POINTS", "interpolate", "resample"]
