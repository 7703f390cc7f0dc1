"""
Main RiskScorer class - orchestrates the percentile rule components.

Usage:
    from churn_risk import RiskScorer, ScoringConfig

    # With default config
    scorer = RiskScorer()
    result = scorer.score(percentiles_df)

    # Access results
    print(result.df[["customer_id", "risk_score", "risk_segment"]])
    print(result.summary())
"""

from dataclasses import dataclass
from typing import Optional

import pandas as pd

from .config import ScoringConfig, DEFAULT_CONFIG
from .components import BaseScorer, PercentileRuleScorer
from .schemas import build_scoring_output_schema
from .segmenter import segment_scores


@dataclass
class ScoringResult:
    """
    Container for scoring results with component breakdown.

    Attributes:
        df: Input DataFrame with component scores, risk_score and risk_segment
        component_columns: List of component score column names
        segment_order: Segment labels, lowest risk first
    """

    df: pd.DataFrame
    component_columns: list[str]
    segment_order: list[str]

    def get_high_risk(self, min_segment: str = "High Risk") -> pd.DataFrame:
        """
        Get customers at or above a risk segment.

        Args:
            min_segment: Minimum segment ("Low Risk", "Medium Risk", "High Risk")

        Returns:
            DataFrame filtered to customers at or above the segment
        """
        min_idx = self.segment_order.index(min_segment)
        valid_segments = self.segment_order[min_idx:]
        return self.df[self.df["risk_segment"].isin(valid_segments)]

    def summary(self) -> pd.DataFrame:
        """
        Customer counts and average score per segment.

        Returns:
            DataFrame indexed by segment, lowest risk first
        """
        return (
            self.df.groupby("risk_segment")
            .agg(
                count=("risk_score", "count"),
                avg_score=("risk_score", "mean"),
            )
            .reindex(self.segment_order)
            .fillna({"count": 0})
            .astype({"count": int})
            .round(1)
        )

    def component_breakdown(self) -> pd.DataFrame:
        """
        Show average contribution of each component.

        Returns:
            DataFrame with component statistics
        """
        stats = {}
        for col in self.component_columns:
            component_name = col[: -len("_points")]
            stats[component_name] = {
                "mean": self.df[col].mean(),
                "max": self.df[col].max(),
                "min": self.df[col].min(),
                "hit_rate": (self.df[col] > 0).mean(),
            }
        return pd.DataFrame(stats).T.round(2)


class RiskScorer:
    """
    Vectorized churn risk scoring engine.

    Evaluates every configured percentile rule independently, sums the
    points into risk_score and maps the total onto a risk segment. The
    score depends on nothing but the percentile columns.
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        """
        Initialize scorer with configuration.

        Args:
            config: ScoringConfig instance. Uses DEFAULT_CONFIG if None.
        """
        self.config = config or DEFAULT_CONFIG
        self._init_components()
        self.output_schema = build_scoring_output_schema(
            self.config.segment_names, self.config.max_score
        )

    def _init_components(self) -> None:
        """Initialize one component per rule."""
        self.components: dict[str, BaseScorer] = {
            rule.name: PercentileRuleScorer(self.config, rule)
            for rule in self.config.risk_rules
        }

    @property
    def required_columns(self) -> list[str]:
        columns = []
        for component in self.components.values():
            columns.extend(c for c in component.required_columns if c not in columns)
        return columns

    def validate_input(self, df: pd.DataFrame) -> None:
        """
        Validate required columns exist.

        Raises:
            ValueError: If required columns are missing
        """
        missing = set(self.required_columns) - set(df.columns)
        if missing:
            raise ValueError(f"Missing required columns: {missing}")

    def score(self, df: pd.DataFrame) -> ScoringResult:
        """
        Calculate churn risk scores for all customers.

        Args:
            df: DataFrame with the percentile columns

        Returns:
            ScoringResult with scores and component breakdown

        Example:
            >>> scorer = RiskScorer()
            >>> result = scorer.score(percentiles)
            >>> high_risk = result.get_high_risk("High Risk")
        """
        self.validate_input(df)
        result = df.copy()

        # Calculate all component scores (vectorized)
        component_cols = []
        for name, component in self.components.items():
            col_name = f"{name}_points"
            result[col_name] = component.score(result)
            component_cols.append(col_name)

        # Sum all components for total score
        result["risk_score"] = result[component_cols].sum(axis=1).astype(int)
        result["risk_segment"] = segment_scores(result["risk_score"], self.config)

        result = self.output_schema.validate(result)
        return ScoringResult(
            df=result,
            component_columns=component_cols,
            segment_order=self.config.segment_names,
        )

    def score_single(self, ranks: dict) -> dict:
        """
        Score a single customer from its percentile ranks.

        Args:
            ranks: Dictionary with the percentile columns

        Returns:
            Dictionary with score, segment and component points
        """
        result = self.score(pd.DataFrame([ranks]))
        row = result.df.iloc[0]
        return {
            "risk_score": int(row["risk_score"]),
            "risk_segment": row["risk_segment"],
            "components": {
                col[: -len("_points")]: int(row[col])
                for col in result.component_columns
            },
        }
