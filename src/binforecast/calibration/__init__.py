"""Probability calibration module.

Provides:
- Platt scaling fit on a train split with holdout validation
- Platt scaling artifact serialization
"""

from binforecast.calibration.artifact import (
    dumps_platt_scaling,
    load_platt_scaling,
    loads_platt_scaling,
    save_platt_scaling,
)
from binforecast.calibration.platt import (
    CalibrationResult,
    InsufficientDataError,
    PlattConfig,
    PlattMetadata,
    PlattScaling,
    calibrate,
    calibrate_probabilities,
    fit_platt_scaling,
)

__all__ = [  # noqa: RUF022 - grouped by category for maintainability
    # Platt
    "CalibrationResult",
    "InsufficientDataError",
    "PlattConfig",
    "PlattMetadata",
    "PlattScaling",
    "calibrate",
    "calibrate_probabilities",
    "fit_platt_scaling",
    # Artifact
    "dumps_platt_scaling",
    "load_platt_scaling",
    "loads_platt_scaling",
    "save_platt_scaling",
]
