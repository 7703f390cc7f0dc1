"""
Scoring configuration for the churn risk pipeline.

All rule thresholds, weights, segment cutpoints and ranking policies are
defined here for easy tuning.

Rule summary (points awarded when a customer sits in a risky percentile):
- Low activity (distinct active months): 2
- Low category diversity: 2
- High credit utilization: 2
- Low total spend: 1
- Low credit score: 1
- Low average ticket size: 1
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class RiskRule:
    """
    A single percentile threshold rule.

    Attributes:
        name: Component name (used for the "<name>_points" column)
        column: Percentile column the rule reads
        operator: "<" (risky when below threshold) or ">" (risky when above)
        threshold: Percentile cutpoint (exclusive)
        points: Points awarded when the condition holds
    """

    name: str
    column: str
    operator: str
    threshold: int
    points: int

    def __post_init__(self):
        if self.operator not in ("<", ">"):
            raise ValueError(
                f"Rule {self.name!r}: operator must be '<' or '>', got {self.operator!r}"
            )


@dataclass(frozen=True)
class MetricSpec:
    """Which summary metric feeds a percentile column, and in which direction."""

    metric: str
    column: str
    ascending: bool = True


@dataclass
class ScoringConfig:
    """
    Configuration for every stage of the scoring pipeline.

    Total max score: 9 points
    - Activity: 0-2
    - Diversity: 0-2
    - Utilization: 0-2
    - Spend: 0-1
    - Credit: 0-1
    - Ticket: 0-1
    """

    # === Churn label ===
    # Inactive for strictly more than this many days => churned
    churn_window_days: int = 90
    # Policy for customers that never transacted (no last_txn_date)
    never_transacted_churned: bool = True

    # === Percentile ranking ===
    n_buckets: int = 100
    # Reserved rank for customers whose metric is null. 50 sits between
    # every default cutpoint, so a missing value never earns points.
    null_percentile: int = 50
    # Credit utilization ranks descending: the highest ratio lands in bucket 1
    percentile_metrics: List[MetricSpec] = field(default_factory=lambda: [
        MetricSpec("active_months", "pct_active_months"),
        MetricSpec("category_count", "pct_category_count"),
        MetricSpec("credit_util_ratio", "pct_utilization", ascending=False),
        MetricSpec("total_spend", "pct_total_spend"),
        MetricSpec("credit_score", "pct_credit_score"),
        MetricSpec("avg_spend_per_txn", "pct_avg_spend"),
    ])

    # === Risk rules (evaluated independently and summed) ===
    risk_rules: List[RiskRule] = field(default_factory=lambda: [
        RiskRule("activity", "pct_active_months", "<", 25, 2),
        RiskRule("diversity", "pct_category_count", "<", 25, 2),
        # With the descending utilization rank "> 75" flags the lowest
        # utilizers (ratio near 0), not the maxed-out ones. Rank ascending to
        # flag heavy utilizers instead.
        RiskRule("utilization", "pct_utilization", ">", 75, 2),
        RiskRule("spend", "pct_total_spend", "<", 25, 1),
        RiskRule("credit", "pct_credit_score", "<", 25, 1),
        RiskRule("ticket", "pct_avg_spend", "<", 25, 1),
    ])

    # === Risk segmentation ===
    # (min_score, segment), first match wins; inclusive lower bounds
    segment_thresholds: List[Tuple[int, str]] = field(default_factory=lambda: [
        (6, "High Risk"),
        (3, "Medium Risk"),
    ])
    segment_default: str = "Low Risk"

    # === Metadata ===
    version: str = "1.0.0"

    def __post_init__(self):
        if not 1 <= self.null_percentile <= self.n_buckets:
            raise ValueError(
                f"null_percentile must be within 1..{self.n_buckets}, "
                f"got {self.null_percentile}"
            )
        if self.churn_window_days < 0:
            raise ValueError("churn_window_days must be non-negative")

    @property
    def max_score(self) -> int:
        """Upper bound of the risk score (sum of all rule weights)."""
        return sum(rule.points for rule in self.risk_rules)

    @property
    def percentile_columns(self) -> List[str]:
        return [spec.column for spec in self.percentile_metrics]

    @property
    def segment_names(self) -> List[str]:
        """All segment labels, lowest risk first."""
        ordered = sorted(self.segment_thresholds)
        return [self.segment_default] + [name for _, name in ordered]

    def get_risk_segment(self, score: int) -> str:
        """Map numeric score to risk segment."""
        for min_score, segment in self.segment_thresholds:
            if score >= min_score:
                return segment
        return self.segment_default

    def to_dict(self) -> Dict[str, object]:
        """Flatten the config for run logs."""
        return {
            "churn_window_days": self.churn_window_days,
            "never_transacted_churned": self.never_transacted_churned,
            "n_buckets": self.n_buckets,
            "null_percentile": self.null_percentile,
            "risk_rules": [
                f"{r.column} {r.operator} {r.threshold} -> {r.points}"
                for r in self.risk_rules
            ],
            "segment_thresholds": [list(t) for t in self.segment_thresholds],
            "segment_default": self.segment_default,
            "version": self.version,
        }


# Default configuration instance
DEFAULT_CONFIG = ScoringConfig()
