"""Loading sample curves from CSV and writing knee reports."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Tuple

import numpy as np
import pandas as pd


def load_curve(
    csv_path: str | Path, x_column: str = "x", y_column: str = "y"
) -> Tuple[np.ndarray, np.ndarray]:
    """Return the ``(x, y)`` samples stored in ``csv_path``.

    Rows are sorted by ``x_column``.  Missing columns and non-numeric
    entries raise :class:`ValueError`.
    """

    df = pd.read_csv(csv_path)
    missing = {x_column, y_column} - set(df.columns)
    if missing:
        raise ValueError(
            f"CSV columns missing: {sorted(missing)}; found {sorted(df.columns)}"
        )

    df = df[[x_column, y_column]].copy()
    for col in (x_column, y_column):
        try:
            df[col] = pd.to_numeric(df[col], errors="raise")
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{col}: non-numeric value ({exc})") from exc

    df = df.sort_values(x_column, kind="mergesort")
    return (
        df[x_column].to_numpy(dtype=float),
        df[y_column].to_numpy(dtype=float),
    )


def write_result(result: Mapping[str, Any], out_json: Path) -> None:
    """Write ``result`` to ``out_json`` as indented JSON."""
    out_json.parent.mkdir(parents=True, exist_ok=True)
    out_json.write_text(json.dumps(result, indent=2))


__all__ = ["load_curve", "write_result"]
