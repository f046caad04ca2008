#!/usr/bin/env python3
"""Command line entry point for knee point detection.

Curves are read from CSV files with one column for ``x`` and one for ``y``.
Unless given on the command line, detector parameters come from
``configs/kneedle.yaml`` (or the file passed with ``--config``).

The last line written to standard output is always the result: the knee x
value, ``none`` when no knee was found, or a comma separated index list for
``extrema``.
"""

from __future__ import annotations

import argparse
import logging
import subprocess
import sys
from pathlib import Path

from curve_io import load_curve, write_result
from kneedle import Curvature, CurveDirection, find_local_extrema, knee_trace
from kneedle_config import CONFIG_PATH, load_config


def _git_hash() -> str:
    """Return the current Git commit hash or ``unknown`` if unavailable."""
    try:
        return (
            subprocess.check_output(["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL)
            .decode()
            .strip()
        )
    except Exception:
        return "unknown"


def _add_curve_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--from", dest="from_csv", type=Path, required=True)
    p.add_argument("--x-column", type=str, default=None)
    p.add_argument("--y-column", type=str, default=None)


def _add_detector_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--direction", type=str, default=None, choices=["increasing", "decreasing"]
    )
    p.add_argument(
        "--concavity",
        type=str,
        default=None,
        choices=["counterclockwise", "clockwise", "positive", "negative"],
    )
    p.add_argument("--sensitivity", type=float, default=None)
    p.add_argument(
        "--linear",
        action="store_true",
        default=None,
        help="Force linear interpolation instead of the Akima spline",
    )


def _format_knee(knee: float | None) -> str:
    return "none" if knee is None else f"{knee:g}"


def main(argv: list[str] | None = None) -> None:
    repo_path = Path(__file__).resolve().parent
    version_base = (repo_path / "VERSION").read_text().strip()

    parser = argparse.ArgumentParser(description="Kneedle knee point detector")
    parser.add_argument(
        "--version",
        action="version",
        version=f"{_git_hash()} {version_base}",
    )
    parser.add_argument("--config", type=Path, default=CONFIG_PATH)
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    sub = parser.add_subparsers(dest="command")

    detect_parser = sub.add_parser("detect", help="Find the knee of a curve")
    _add_curve_args(detect_parser)
    _add_detector_args(detect_parser)
    detect_parser.add_argument("--out", type=Path, default=None)
    detect_parser.add_argument("--plot", type=Path, default=None)

    extrema_parser = sub.add_parser("extrema", help="List local extrema of y")
    _add_curve_args(extrema_parser)
    extrema_parser.add_argument("--minima", action="store_true")

    sens_parser = sub.add_parser(
        "sensitivity", help="Sweep the detector sensitivity"
    )
    _add_curve_args(sens_parser)
    _add_detector_args(sens_parser)
    sens_parser.add_argument("--grid", type=str, required=True)
    sens_parser.add_argument("--out", type=Path, required=True)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    if args.command is None:
        parser.error("subcommand required")

    try:
        cfg = load_config(args.config)
    except (OSError, ValueError) as exc:
        parser.error(f"invalid config {args.config}: {exc}")

    x_column = args.x_column or cfg.x_column
    y_column = args.y_column or cfg.y_column
    try:
        x, y = load_curve(args.from_csv, x_column, y_column)
    except (OSError, ValueError) as exc:
        parser.error(str(exc))

    if args.command == "extrema":
        idxs = find_local_extrema(y, not args.minima)
        print(",".join(str(i) for i in idxs))
        return

    direction = CurveDirection.parse(args.direction or cfg.direction)
    concavity = Curvature.parse(args.concavity or cfg.concavity)
    sensitivity = cfg.sensitivity if args.sensitivity is None else args.sensitivity
    linear = cfg.force_linear_interpolation if args.linear is None else args.linear

    if args.command == "sensitivity":
        from analysis.sensitivity import analyze_sensitivity

        try:
            grid_vals = [float(v) for v in args.grid.split(",") if v.strip()]
        except ValueError:
            parser.error("--grid must be comma separated floats")
        result = analyze_sensitivity(
            x,
            y,
            direction,
            concavity,
            grid_vals,
            args.out,
            force_linear_interpolation=linear,
        )
        print(f"robustness {result['robustness']:.3f}")
        return

    trace = knee_trace(
        x,
        y,
        direction,
        concavity,
        sensitivity=sensitivity,
        force_linear_interpolation=linear,
    )
    knee = trace.knee if trace is not None else None

    if args.out is not None:
        write_result(
            {
                "source": str(args.from_csv),
                "direction": direction.value,
                "concavity": concavity.value,
                "sensitivity": sensitivity,
                "force_linear_interpolation": linear,
                "knee": knee,
                "knee_index": trace.knee_index if trace is not None else None,
                "maxima": trace.maxima if trace is not None else [],
                "minima": trace.minima if trace is not None else [],
                "thresholds": trace.thresholds if trace is not None else [],
            },
            args.out,
        )

    if args.plot is not None:
        if trace is None:
            print("curve rejected; skipping plot", file=sys.stderr)
        else:
            from analysis.plot import plot_knee

            plot_knee(trace, args.plot, title=args.from_csv.name)

    print(_format_knee(knee))


if __name__ == "__main__":
    main()
