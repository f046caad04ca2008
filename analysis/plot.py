"""Diagnostic figure for a knee detection run."""

from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from kneedle import KneeTrace  # noqa: E402


def plot_knee(trace: KneeTrace, out_path: Path, title: str | None = None) -> Path:
    """Plot the normalised curve, the difference curve and the knee.

    Local maxima of the difference curve are marked together with their
    thresholds.  The knee, when present, is drawn as a vertical line at its
    normalised position.
    """

    fig, ax = plt.subplots()
    ax.plot(trace.x_norm, trace.y_norm, label="normalised curve")
    ax.plot(trace.x_norm, trace.y_diff, color="tab:red", label="difference curve")
    if trace.maxima:
        ax.scatter(
            trace.x_norm[trace.maxima],
            trace.y_diff[trace.maxima],
            color="tab:red",
            marker="^",
            label="local maxima",
        )
        for idx, thr in zip(trace.maxima, trace.thresholds):
            ax.hlines(thr, trace.x_norm[idx], 1.0, colors="grey", linestyles="dotted")
    if trace.knee_index is not None:
        ax.axvline(
            trace.x_norm[trace.knee_index],
            color="black",
            linestyle="--",
            label=f"knee x={trace.knee:g}",
        )
    ax.set_xlabel("x (normalised)")
    ax.set_ylabel("y (normalised)")
    ax.set_title(title or "Kneedle")
    ax.legend()
    fig.tight_layout()

    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, dpi=150)
    plt.close(fig)
    return out_path


__all__ = ["plot_knee"]
