"""
Pytest fixtures for churn risk pipeline tests.
"""

import pandas as pd
import pandera as pa
import pytest

# Add project root to path
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from churn_risk.config import ScoringConfig
from churn_risk.data import generate_sample_snapshot
from churn_risk.scorer import RiskScorer


AS_OF = "2025-06-30"

PCT_COLUMNS = [
    "pct_active_months",
    "pct_category_count",
    "pct_utilization",
    "pct_total_spend",
    "pct_credit_score",
    "pct_avg_spend",
]

# Eager validation raises SchemaError, newer pandera may report coercion
# failures as SchemaErrors
SCHEMA_ERRORS = (pa.errors.SchemaError, pa.errors.SchemaErrors)


def ranks(**overrides) -> dict:
    """Six neutral percentile ranks (50) with overrides."""
    row = {col: 50 for col in PCT_COLUMNS}
    row.update(overrides)
    return row


@pytest.fixture
def default_config():
    """Default scoring configuration."""
    return ScoringConfig()


@pytest.fixture
def scorer(default_config):
    """RiskScorer with default config."""
    return RiskScorer(default_config)


@pytest.fixture
def sample_snapshot():
    """300 synthetic customers with realistic distributions."""
    return generate_sample_snapshot(n_customers=300, as_of_date=AS_OF, seed=42)


@pytest.fixture
def small_snapshot():
    """
    Hand-built snapshot with known aggregates.

    Customer 1: active, two categories, one card at 50% utilization
    Customer 2: two January transactions a year apart, two cards (one with
                a zero limit), last seen 171 days ago
    Customer 3: never transacted, single zero-limit card
    Customer 4: last seen exactly 90 days ago, no card
    Customer 5: last seen 91 days ago, no card
    Customer 99 appears only in cards/transactions (orphan rows)
    """
    customers = pd.DataFrame({
        "customer_id": [1, 2, 3, 4, 5],
        "name": ["Asha", "Ben", "Chen", "Dara", "Eli"],
        "gender": ["Female", "Male", "Male", "Female", "Male"],
        "city": ["Pune", "Delhi", "Pune", "Chennai", "Mumbai"],
        "age": [34, 51, 28, 45, 39],
        "income": [60000, 120000, 45000, 80000, 52000],
        "signup_date": pd.to_datetime(
            ["2022-01-05", "2021-06-10", "2023-03-01", "2022-09-15", "2020-11-20"]
        ),
    })
    cards = pd.DataFrame({
        "customer_id": [1, 2, 2, 3, 99],
        "card_type": ["Gold", "Platinum", "Classic", "Classic", "Gold"],
        "credit_limit": [1000, 2000, 0, 0, 5000],
        "current_balance": [500.0, 1800.0, 100.0, 50.0, 10.0],
        "credit_score": [700, 650, 720, 600, 800],
    })
    transactions = pd.DataFrame({
        "transaction_id": [1, 2, 3, 4, 5, 6, 7, 8],
        "customer_id": [1, 1, 1, 2, 2, 4, 5, 99],
        "transaction_date": pd.to_datetime([
            "2025-06-01", "2025-06-15", "2025-05-20",
            "2025-01-10", "2024-01-10",
            "2025-04-01",
            "2025-03-31",
            "2025-06-20",
        ]),
        "amount": [100.0, 50.0, 30.0, 500.0, 300.0, 40.0, 40.0, 999.0],
        "merchant_category": [
            "Grocery", "Dining", "Grocery", "Travel", "Travel",
            "Fuel", "Fuel", "Dining",
        ],
        "channel": [
            "Online", "Offline", "Online", "Online", "Offline",
            "Offline", "Online", "Online",
        ],
    })
    return customers, cards, transactions


@pytest.fixture
def rank_rows():
    """Boundary cases for the rule table, keyed by name."""
    return pd.DataFrame([
        # Every risky zone hit
        {"name": "ALL_RISKY", **ranks(
            pct_active_months=1, pct_category_count=1, pct_utilization=100,
            pct_total_spend=1, pct_credit_score=1, pct_avg_spend=1,
        )},
        # Neutral middle of the population
        {"name": "ALL_50", **ranks()},
        # Exactly on the cutpoints: no rule fires
        {"name": "ON_CUTPOINTS", **ranks(
            pct_active_months=25, pct_category_count=25, pct_utilization=75,
            pct_total_spend=25, pct_credit_score=25, pct_avg_spend=25,
        )},
        # One step inside every cutpoint
        {"name": "INSIDE_CUTPOINTS", **ranks(
            pct_active_months=24, pct_category_count=24, pct_utilization=76,
            pct_total_spend=24, pct_credit_score=24, pct_avg_spend=24,
        )},
    ])
