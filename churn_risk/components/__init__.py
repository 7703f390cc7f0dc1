"""Scoring components for churn risk rules."""

from .base import BaseScorer
from .percentile_rule import PercentileRuleScorer

__all__ = [
    "BaseScorer",
    "PercentileRuleScorer",
]
