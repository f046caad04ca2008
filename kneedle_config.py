"""Detector defaults loaded from ``configs/kneedle.yaml``.

The YAML file is validated against ``schemas/kneedle_config.schema.json``
before use so that the command line tools and the analysis helpers share a
single, checked set of defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path

import jsonschema
from jsonschema import ValidationError
import yaml

from kneedle import Curvature, CurveDirection

REPO_ROOT = Path(__file__).resolve().parent
CONFIG_PATH = REPO_ROOT / "configs" / "kneedle.yaml"
SCHEMA_PATH = REPO_ROOT / "schemas" / "kneedle_config.schema.json"


@dataclass(frozen=True)
class KneedleConfig:
    """Default detector parameters.

    Parameters
    ----------
    direction : CurveDirection
        Direction assumed for curves unless overridden.
    concavity : Curvature
        Tangent rotation assumed for curves unless overridden.
    sensitivity : float
        Threshold scale ``S``.
    force_linear_interpolation : bool
        Resample linearly instead of with the Akima spline.
    x_column, y_column : str
        CSV columns holding the curve samples.
    """

    direction: CurveDirection = CurveDirection.INCREASING
    concavity: Curvature = Curvature.COUNTERCLOCKWISE
    sensitivity: float = 1.0
    force_linear_interpolation: bool = False
    x_column: str = "x"
    y_column: str = "y"
    version: int = 1


def _load_schema(path: Path) -> dict:
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def load_config(path: Path = CONFIG_PATH, schema_path: Path = SCHEMA_PATH) -> KneedleConfig:
    """Load and validate detector defaults from ``path``."""

    raw = yaml.safe_load(Path(path).read_text())
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: expected a mapping of detector defaults")

    validator = jsonschema.Draft202012Validator(_load_schema(schema_path))
    try:
        validator.validate(raw)
    except ValidationError as exc:
        field = "/".join(str(p) for p in exc.path) or "<root>"
        raise ValueError(f"{field}: {exc.message}") from exc

    defaults = KneedleConfig()
    return KneedleConfig(
        direction=CurveDirection.parse(raw["direction"]),
        concavity=Curvature.parse(raw["concavity"]),
        sensitivity=float(raw["sensitivity"]),
        force_linear_interpolation=bool(
            raw.get("force_linear_interpolation", defaults.force_linear_interpolation)
        ),
        x_column=raw.get("x_column", defaults.x_column),
        y_column=raw.get("y_column", defaults.y_column),
        version=int(raw["version"]),
    )


__all__ = ["CONFIG_PATH", "SCHEMA_PATH", "KneedleConfig", "load_config"]
