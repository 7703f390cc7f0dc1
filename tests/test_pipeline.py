"""
Integration tests for the end-to-end scoring pipeline.
"""

import dataclasses

import numpy as np
import pandas as pd
import pytest

from churn_risk import ChurnRiskPipeline, ScoringConfig
from churn_risk.config import MetricSpec

from conftest import AS_OF, PCT_COLUMNS


def two_hundred_customers() -> pd.DataFrame:
    """
    Summary for a 200-customer population where customer 1 sits at
    known percentiles: active_months and category_count lowest,
    total_spend at 10, credit_score at 15, avg_spend at 30, and the
    highest utilization ratio.
    """
    others = np.arange(2, 201)
    summary = pd.DataFrame({
        "customer_id": np.concatenate([[1], others]),
        "active_months": np.concatenate([[1], 2 + others % 12]),
        "txn_count": 10,
        "total_spend": np.concatenate([[1950.0], 100.0 * others]),
        "avg_spend_per_txn": np.concatenate([[59.5], others.astype(float)]),
        "category_count": np.concatenate([[1], 2 + others % 8]),
        "last_txn_date": pd.Timestamp("2025-06-01"),
        "credit_score": np.concatenate([[329.5], 300.0 + others]),
        "credit_util_ratio": np.concatenate([[0.95], others / 1000.0]),
    })
    return summary


class TestPipeline:
    """Stage outputs and invariants across the whole run."""

    def test_cardinality_preserved(self, sample_snapshot):
        customers = sample_snapshot[0]
        result = ChurnRiskPipeline().run(*sample_snapshot, as_of_date=AS_OF)

        for frame in [result.summary, result.labeled, result.percentiles, result.scores.df]:
            assert len(frame) == len(customers)
            assert frame["customer_id"].is_unique

    def test_idempotent(self, sample_snapshot):
        pipeline = ChurnRiskPipeline()
        first = pipeline.run(*sample_snapshot, as_of_date=AS_OF)
        second = pipeline.run(*sample_snapshot, as_of_date=AS_OF)

        pd.testing.assert_frame_equal(first.scored_customers(), second.scored_customers())
        pd.testing.assert_frame_equal(first.validation, second.validation)

    def test_as_of_normalized(self, small_snapshot):
        result = ChurnRiskPipeline().run(*small_snapshot, as_of_date="2025-06-30 13:00")

        assert result.as_of_date == pd.Timestamp(AS_OF)

    def test_dropped_rows_reported(self, small_snapshot):
        result = ChurnRiskPipeline().run(*small_snapshot, as_of_date=AS_OF)

        assert result.dropped_cards == 1
        assert result.dropped_transactions == 1
        assert result.dropped_rows == 2

    def test_scored_customers_columns(self, small_snapshot):
        result = ChurnRiskPipeline().run(*small_snapshot, as_of_date=AS_OF)
        scored = result.scored_customers()

        assert list(scored.columns[: 1 + len(PCT_COLUMNS)]) == ["customer_id"] + PCT_COLUMNS
        assert list(scored.columns[-3:]) == ["risk_score", "risk_segment", "churn_flag"]

    def test_raw_metrics_survive_scoring(self, small_snapshot):
        """Component columns never overwrite summary metrics."""
        result = ChurnRiskPipeline().run(*small_snapshot, as_of_date=AS_OF)
        scored = result.scores.df.set_index("customer_id")

        assert scored.loc[1, "credit_score"] == 700
        assert "credit_points" in scored.columns

    def test_percentile_table(self, small_snapshot):
        result = ChurnRiskPipeline().run(*small_snapshot, as_of_date=AS_OF)

        assert list(result.percentile_table().columns) == ["customer_id"] + PCT_COLUMNS

    def test_validation_consistent_with_scores(self, sample_snapshot):
        result = ChurnRiskPipeline().run(*sample_snapshot, as_of_date=AS_OF)
        scored = result.scores.df
        report = result.validation.set_index("risk_segment")

        for segment, group in scored.groupby("risk_segment"):
            assert report.loc[segment, "customers"] == len(group)
            assert report.loc[segment, "churned"] == group["churn_flag"].sum()

    def test_result_is_frozen(self, small_snapshot):
        result = ChurnRiskPipeline().run(*small_snapshot, as_of_date=AS_OF)

        with pytest.raises(dataclasses.FrozenInstanceError):
            result.as_of_date = pd.Timestamp("2020-01-01")


class TestKnownPopulation:
    """A hand-placed customer in a 200-customer population."""

    def test_percentiles(self):
        result = ChurnRiskPipeline().run_from_summary(two_hundred_customers(), AS_OF)
        row = result.percentiles.set_index("customer_id").loc[1]

        assert row["pct_active_months"] == 1
        assert row["pct_category_count"] == 1
        assert row["pct_total_spend"] == 10
        assert row["pct_credit_score"] == 15
        assert row["pct_avg_spend"] == 30
        # Highest ratio sorts first when utilization ranks descending
        assert row["pct_utilization"] == 1

    def test_default_score(self):
        result = ChurnRiskPipeline().run_from_summary(two_hundred_customers(), AS_OF)
        row = result.scores.df.set_index("customer_id").loc[1]

        # 2 + 2 + 0 + 1 + 1 + 0
        assert row["risk_score"] == 6
        assert row["risk_segment"] == "High Risk"

    def test_default_utilization_points_go_to_low_ratios(self):
        result = ChurnRiskPipeline().run_from_summary(two_hundred_customers(), AS_OF)
        scored = result.scores.df
        known = scored[scored["credit_util_ratio"].notna()]
        flagged = known[known["utilization_points"] == 2]
        unflagged = known[known["utilization_points"] == 0]

        assert known.loc[known["credit_util_ratio"].idxmin(), "utilization_points"] == 2
        assert flagged["credit_util_ratio"].max() <= unflagged["credit_util_ratio"].min()

    def test_ascending_utilization_scores_high_ratio(self):
        config = ScoringConfig()
        config.percentile_metrics = [
            MetricSpec(spec.metric, spec.column, ascending=True)
            for spec in config.percentile_metrics
        ]
        result = ChurnRiskPipeline(config).run_from_summary(two_hundred_customers(), AS_OF)
        row = result.scores.df.set_index("customer_id").loc[1]

        assert row["pct_utilization"] == 100
        # 2 + 2 + 2 + 1 + 1 + 0
        assert row["risk_score"] == 8
        assert row["risk_segment"] == "High Risk"


class TestEdgePopulations:
    """Degenerate snapshots."""

    def test_empty_population(self):
        customers = pd.DataFrame(columns=["customer_id"])
        cards = pd.DataFrame(columns=["customer_id", "credit_limit",
                                      "current_balance", "credit_score"])
        transactions = pd.DataFrame(columns=[
            "transaction_id", "customer_id", "transaction_date",
            "amount", "merchant_category",
        ])
        result = ChurnRiskPipeline().run(customers, cards, transactions, AS_OF)

        assert len(result.scores.df) == 0
        assert len(result.validation) == 3
        assert result.validation["churn_rate"].isna().all()

    def test_single_customer(self, small_snapshot):
        customers, cards, transactions = small_snapshot
        result = ChurnRiskPipeline().run(
            customers[customers["customer_id"] == 1], cards, transactions, AS_OF
        )

        assert len(result.scores.df) == 1
        assert result.percentiles[PCT_COLUMNS].iloc[0].between(1, 100).all()

    def test_small_snapshot_scores(self, small_snapshot):
        result = ChurnRiskPipeline().run(*small_snapshot, as_of_date=AS_OF)
        scored = result.scores.df

        assert scored["risk_score"].between(0, 9).all()
        assert result.validation["customers"].sum() == 5

    def test_custom_window_changes_labels_only(self, small_snapshot):
        default = ChurnRiskPipeline().run(*small_snapshot, as_of_date=AS_OF)
        wide = ChurnRiskPipeline(ScoringConfig(churn_window_days=180)).run(
            *small_snapshot, as_of_date=AS_OF
        )

        pd.testing.assert_series_equal(
            default.scores.df["risk_score"], wide.scores.df["risk_score"]
        )
        assert wide.labeled["churn_flag"].sum() < default.labeled["churn_flag"].sum()
