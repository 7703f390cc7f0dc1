"""
End-to-end scoring pipeline over one snapshot.

Stages run strictly forward, each a pure function over the previous stage's
full output:

    summary -> labeled -> percentiles -> scores/segments -> validation

Usage:
    from churn_risk import ChurnRiskPipeline

    pipeline = ChurnRiskPipeline()
    result = pipeline.run(customers, cards, transactions, as_of_date="2025-06-30")
    print(result.validation)
"""

from dataclasses import dataclass
from typing import Optional

import pandas as pd

from .aggregator import build_customer_summary
from .config import ScoringConfig, DEFAULT_CONFIG
from .labeler import label_churn, to_as_of
from .ranker import rank_population
from .scorer import RiskScorer, ScoringResult
from .validator import validate_calibration


@dataclass(frozen=True)
class PipelineResult:
    """
    Named, immutable outputs of every pipeline stage.

    Attributes:
        as_of_date: Snapshot reference date
        summary: CustomerSummary (one row per customer)
        labeled: Summary with churn_flag
        percentiles: Labeled summary with pct_* ranks
        scores: ScoringResult with risk_score and risk_segment
        validation: Churn rate per segment
        dropped_cards: Orphan card rows removed during aggregation
        dropped_transactions: Orphan transaction rows removed during aggregation
    """

    as_of_date: pd.Timestamp
    summary: pd.DataFrame
    labeled: pd.DataFrame
    percentiles: pd.DataFrame
    scores: ScoringResult
    validation: pd.DataFrame
    dropped_cards: int = 0
    dropped_transactions: int = 0

    @property
    def dropped_rows(self) -> int:
        return self.dropped_cards + self.dropped_transactions

    def percentile_table(self) -> pd.DataFrame:
        """customer_id plus the percentile columns."""
        pct_cols = [c for c in self.percentiles.columns if c.startswith("pct_")]
        return self.percentiles[["customer_id"] + pct_cols]

    def scored_customers(self) -> pd.DataFrame:
        """Per-customer ranks, score, segment and observed churn flag."""
        pct_cols = [c for c in self.percentiles.columns if c.startswith("pct_")]
        columns = (
            ["customer_id"]
            + pct_cols
            + self.scores.component_columns
            + ["risk_score", "risk_segment", "churn_flag"]
        )
        return self.scores.df[columns]


class ChurnRiskPipeline:
    """Runs aggregation, labeling, ranking, scoring and validation."""

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.scorer = RiskScorer(self.config)

    def run(
        self,
        customers: pd.DataFrame,
        cards: pd.DataFrame,
        transactions: pd.DataFrame,
        as_of_date,
    ) -> PipelineResult:
        """
        Score one snapshot from raw tables.

        Args:
            customers: Customer rows
            cards: Card rows
            transactions: Transaction rows
            as_of_date: Snapshot reference date driving the churn label

        Returns:
            PipelineResult with every stage output
        """
        as_of = to_as_of(as_of_date)
        aggregation = build_customer_summary(customers, cards, transactions)
        return self.run_from_summary(
            aggregation.df,
            as_of,
            dropped_cards=aggregation.dropped_cards,
            dropped_transactions=aggregation.dropped_transactions,
        )

    def run_from_summary(
        self,
        summary: pd.DataFrame,
        as_of_date,
        dropped_cards: int = 0,
        dropped_transactions: int = 0,
    ) -> PipelineResult:
        """Run every stage after aggregation on a prebuilt CustomerSummary."""
        as_of = to_as_of(as_of_date)
        labeled = label_churn(summary, as_of, self.config)
        percentiles = rank_population(labeled, self.config)
        scores = self.scorer.score(percentiles)
        validation = validate_calibration(scores.df, self.config)

        return PipelineResult(
            as_of_date=as_of,
            summary=summary,
            labeled=labeled,
            percentiles=percentiles,
            scores=scores,
            validation=validation,
            dropped_cards=dropped_cards,
            dropped_transactions=dropped_transactions,
        )
