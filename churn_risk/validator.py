"""
Calibration validation: observed churn per predicted risk segment.

The backtest checks whether the rule agrees with the recency-derived churn
label. A well calibrated rule shows churn rates that rise from Low Risk to
High Risk.
"""

from typing import Optional

import numpy as np
import pandas as pd
from sklearn.metrics import (
    accuracy_score,
    precision_score,
    recall_score,
    f1_score,
    roc_auc_score,
)

from .config import ScoringConfig, DEFAULT_CONFIG
from .schemas import build_validation_report_schema


def half_up_percent(part: pd.Series, whole: pd.Series) -> pd.Series:
    """
    100 * part / whole rounded to two decimals, ties away from zero.

    Works on the integer counts, so a tie such as 97 of 800 (12.125) rounds
    to 12.13 the way a decimal ROUND does. Null where whole is zero.
    """
    safe = whole.clip(lower=1)
    hundredths = (20000 * part + safe) // (2 * safe)
    return (hundredths / 100.0).where(whole > 0)


def validate_calibration(
    scored: pd.DataFrame,
    config: Optional[ScoringConfig] = None,
) -> pd.DataFrame:
    """
    Report customers, churned customers and churn rate per segment.

    Every configured segment gets a row, ordered by segment name. An empty
    segment reports zero customers and a null churn_rate instead of dividing
    by zero.

    Args:
        scored: DataFrame with risk_segment and churn_flag columns
        config: ScoringConfig instance. Uses DEFAULT_CONFIG if None.

    Returns:
        DataFrame with columns risk_segment, customers, churned, churn_rate
    """
    config = config or DEFAULT_CONFIG
    missing = {"risk_segment", "churn_flag"} - set(scored.columns)
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    segments = sorted(config.segment_names)
    counts = (
        scored.groupby("risk_segment")["churn_flag"]
        .agg(customers="count", churned="sum")
        .reindex(segments, fill_value=0)
    )

    customers = counts["customers"].astype(int)
    churned = counts["churned"].astype(int)
    rate = half_up_percent(churned, customers)

    report = pd.DataFrame({
        "risk_segment": segments,
        "customers": customers.to_numpy(),
        "churned": churned.to_numpy(),
        "churn_rate": rate.to_numpy(dtype=float),
    })
    return build_validation_report_schema(segments).validate(report)


def calibration_metrics(
    scored: pd.DataFrame,
    config: Optional[ScoringConfig] = None,
    positive_segment: Optional[str] = None,
) -> dict:
    """
    Classification metrics treating the top segment as a churn prediction.

    Args:
        scored: DataFrame with risk_score, risk_segment and churn_flag
        config: ScoringConfig instance. Uses DEFAULT_CONFIG if None.
        positive_segment: Segment counted as "predicted churn"
            (default: the highest-risk segment)

    Returns:
        Dictionary with accuracy, precision, recall, f1, auc_roc,
        churn rate per segment and a monotonicity flag
    """
    config = config or DEFAULT_CONFIG
    positive_segment = positive_segment or config.segment_names[-1]
    report = validate_calibration(scored, config).set_index("risk_segment")

    # Churn rates in risk order, skipping empty segments
    ordered_rates = [
        report.loc[segment, "churn_rate"]
        for segment in config.segment_names
        if report.loc[segment, "customers"] > 0
    ]
    is_monotonic = bool(np.all(np.diff(ordered_rates) >= 0)) if ordered_rates else True

    metrics = {
        "customers": int(len(scored)),
        "churned": int(scored["churn_flag"].sum()) if len(scored) else 0,
        "churn_rate_by_segment": {
            segment: (None if pd.isna(rate) else float(rate))
            for segment, rate in report["churn_rate"].items()
        },
        "is_monotonic": is_monotonic,
    }
    if len(scored) == 0:
        metrics.update(
            accuracy=None, precision=None, recall=None, f1=None, auc_roc=None
        )
        return metrics

    y_true = scored["churn_flag"].astype(int)
    y_pred = (scored["risk_segment"] == positive_segment).astype(int)

    metrics.update({
        "accuracy": float(accuracy_score(y_true, y_pred)),
        "precision": float(precision_score(y_true, y_pred, zero_division=0)),
        "recall": float(recall_score(y_true, y_pred, zero_division=0)),
        "f1": float(f1_score(y_true, y_pred, zero_division=0)),
        "auc_roc": float(roc_auc_score(y_true, scored["risk_score"]))
        if y_true.nunique() > 1
        else None,
    })
    return metrics
