"""
Unit tests for churn labeling.
"""

from datetime import date, datetime

import pandas as pd
import pytest

from churn_risk.aggregator import build_customer_summary
from churn_risk.config import ScoringConfig
from churn_risk.labeler import label_churn, to_as_of

from conftest import AS_OF


def flags(labeled):
    return labeled.set_index("customer_id")["churn_flag"].to_dict()


class TestChurnWindow:
    """Strictly more than 90 days inactive => churned."""

    def test_known_flags(self, small_snapshot):
        summary = build_customer_summary(*small_snapshot).df
        labeled = label_churn(summary, AS_OF)

        assert flags(labeled) == {1: 0, 2: 1, 3: 1, 4: 0, 5: 1}

    def test_exactly_90_days_is_not_churned(self, small_snapshot):
        summary = build_customer_summary(*small_snapshot).df
        labeled = label_churn(summary, AS_OF).set_index("customer_id")

        assert labeled.loc[4, "days_since_last_txn"] == 90
        assert labeled.loc[4, "churn_flag"] == 0

    def test_91_days_is_churned(self, small_snapshot):
        summary = build_customer_summary(*small_snapshot).df
        labeled = label_churn(summary, AS_OF).set_index("customer_id")

        assert labeled.loc[5, "days_since_last_txn"] == 91
        assert labeled.loc[5, "churn_flag"] == 1

    def test_custom_window(self, small_snapshot):
        summary = build_customer_summary(*small_snapshot).df
        config = ScoringConfig(churn_window_days=180)
        labeled = label_churn(summary, AS_OF, config)

        assert flags(labeled) == {1: 0, 2: 0, 3: 1, 4: 0, 5: 0}


class TestNeverTransacted:
    """Never-transacted customers follow the configured policy."""

    def test_default_policy_churned(self, small_snapshot):
        summary = build_customer_summary(*small_snapshot).df
        labeled = label_churn(summary, AS_OF).set_index("customer_id")

        assert pd.isna(labeled.loc[3, "days_since_last_txn"])
        assert labeled.loc[3, "churn_flag"] == 1

    def test_policy_not_churned(self, small_snapshot):
        summary = build_customer_summary(*small_snapshot).df
        config = ScoringConfig(never_transacted_churned=False)
        labeled = label_churn(summary, AS_OF, config).set_index("customer_id")

        assert labeled.loc[3, "churn_flag"] == 0
        # Other customers are unaffected by the policy
        assert labeled.loc[2, "churn_flag"] == 1


class TestAsOfDate:
    """as_of_date accepts the usual date representations."""

    @pytest.mark.parametrize("value", [
        "2025-06-30",
        date(2025, 6, 30),
        datetime(2025, 6, 30, 17, 45),
        pd.Timestamp("2025-06-30 08:00"),
    ])
    def test_normalized_to_midnight(self, value):
        assert to_as_of(value) == pd.Timestamp("2025-06-30")

    def test_none_raises(self):
        with pytest.raises(ValueError):
            to_as_of(None)

    def test_input_not_mutated(self, small_snapshot):
        summary = build_customer_summary(*small_snapshot).df
        before = summary.copy()
        label_churn(summary, AS_OF)

        pd.testing.assert_frame_equal(summary, before)

    def test_missing_column_raises(self):
        with pytest.raises(ValueError, match="last_txn_date"):
            label_churn(pd.DataFrame({"customer_id": [1]}), AS_OF)

    def test_flags_are_binary(self, sample_snapshot):
        summary = build_customer_summary(*sample_snapshot).df
        labeled = label_churn(summary, AS_OF)

        assert set(labeled["churn_flag"].unique()) <= {0, 1}
