"""Percentile threshold rule component."""

import operator

import pandas as pd

from .base import BaseScorer


COMPARISONS = {
    "<": operator.lt,
    ">": operator.gt,
}


class PercentileRuleScorer(BaseScorer):
    """
    Award fixed points when a percentile rank falls in the risky zone.

    Cutpoints are exclusive: a rank of exactly 25 earns nothing on a
    "< 25" rule.

    Points (defaults):
    - activity:    pct_active_months < 25  -> 2
    - diversity:   pct_category_count < 25 -> 2
    - utilization: pct_utilization > 75    -> 2
      (descending rank by default, so this is the lowest utilizers)
    - spend:       pct_total_spend < 25    -> 1
    - credit:      pct_credit_score < 25   -> 1
    - ticket:      pct_avg_spend < 25      -> 1
    """

    def flag(self, ranks: pd.Series) -> pd.Series:
        compare = COMPARISONS[self.rule.operator]
        return compare(ranks, self.rule.threshold)
