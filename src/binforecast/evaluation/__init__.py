"""Calibration evaluation module.

Provides:
- Brier score, log loss, accuracy and Wilson intervals
- Reliability diagrams with drift flagging
- Murphy decomposition of the Brier score
- Evaluation reports for saved model artifacts
"""

from binforecast.evaluation.metrics import accuracy, brier_score, log_loss, wilson_interval
from binforecast.evaluation.reliability import (
    Decomposition,
    EvalConfig,
    EvalResult,
    ReliabilityBin,
    decompose_brier,
    evaluate,
    reliability_diagram,
    validate_calibration,
)
from binforecast.evaluation.report import (
    build_eval_report,
    render_reliability_svg,
    save_eval_report,
)

__all__ = [  # noqa: RUF022 - grouped by category for maintainability
    # Metrics
    "accuracy",
    "brier_score",
    "log_loss",
    "wilson_interval",
    # Reliability
    "Decomposition",
    "EvalConfig",
    "EvalResult",
    "ReliabilityBin",
    "decompose_brier",
    "evaluate",
    "reliability_diagram",
    "validate_calibration",
    # Report
    "build_eval_report",
    "render_reliability_svg",
    "save_eval_report",
]
