"""Churn labeling: recency of the last transaction vs. the snapshot date."""

from typing import Optional

import numpy as np
import pandas as pd

from .config import ScoringConfig, DEFAULT_CONFIG


def to_as_of(as_of_date) -> pd.Timestamp:
    """Normalize a date, datetime, ISO string or Timestamp to midnight."""
    if as_of_date is None:
        raise ValueError("as_of_date is required")
    return pd.Timestamp(as_of_date).normalize()


def label_churn(
    summary: pd.DataFrame,
    as_of_date,
    config: Optional[ScoringConfig] = None,
) -> pd.DataFrame:
    """
    Attach churn_flag to each customer summary row.

    A customer is churned when more than ``config.churn_window_days`` days
    separate the as-of date from their last transaction. Customers who never
    transacted follow ``config.never_transacted_churned``.

    Args:
        summary: CustomerSummary with a last_txn_date column
        as_of_date: Snapshot reference date
        config: ScoringConfig instance. Uses DEFAULT_CONFIG if None.

    Returns:
        Copy of summary with days_since_last_txn and churn_flag added
    """
    config = config or DEFAULT_CONFIG
    if "last_txn_date" not in summary.columns:
        raise ValueError("Missing required columns: {'last_txn_date'}")

    as_of = to_as_of(as_of_date)
    result = summary.copy()

    last_txn = pd.to_datetime(result["last_txn_date"]).dt.normalize()
    days_since = (as_of - last_txn).dt.days
    never_transacted = days_since.isna()

    result["days_since_last_txn"] = days_since.astype("Int64")
    result["churn_flag"] = np.where(
        never_transacted,
        int(config.never_transacted_churned),
        (days_since > config.churn_window_days).astype(int),
    ).astype(int)

    return result
