"""Risk segmentation: integer risk score -> ordinal segment label."""

from typing import Optional

import numpy as np
import pandas as pd

from .config import ScoringConfig, DEFAULT_CONFIG


def assign_segment(score: int, config: Optional[ScoringConfig] = None) -> str:
    """
    Map one risk score to its segment.

    Defaults: >= 6 "High Risk", 3-5 "Medium Risk", otherwise "Low Risk".
    """
    config = config or DEFAULT_CONFIG
    return config.get_risk_segment(score)


def segment_scores(
    scores: pd.Series,
    config: Optional[ScoringConfig] = None,
) -> pd.Series:
    """Vectorized segment assignment for a Series of risk scores."""
    config = config or DEFAULT_CONFIG

    # Build conditions from thresholds (first match wins)
    conditions = []
    choices = []
    for min_score, segment in config.segment_thresholds:
        conditions.append(scores >= min_score)
        choices.append(segment)

    return pd.Series(
        np.select(conditions, choices, default=config.segment_default),
        index=scores.index,
        dtype=object,
    )
