"""
Data schema definitions for the churn risk pipeline.

Uses Pandera for runtime validation of the raw snapshot tables and of the
derived stage outputs, so malformed input aborts the run at the boundary
instead of surfacing as a confusing error deep inside ranking.
"""

from pandera import Column, Check, DataFrameSchema


CHANNELS = ["Online", "Offline"]
SEGMENTS = ["Low Risk", "Medium Risk", "High Risk"]


# === Raw snapshot tables ===

CUSTOMER_SCHEMA = DataFrameSchema(
    {
        "customer_id": Column(
            int,
            nullable=False,
            unique=True,
            description="Unique customer identifier"
        ),
        "name": Column(str, nullable=True, required=False),
        "gender": Column(str, nullable=True, required=False),
        "city": Column(str, nullable=True, required=False),
        "age": Column(
            "Int64",
            nullable=True,
            required=False,
            checks=Check.in_range(0, 130),
        ),
        "income": Column(
            float,
            nullable=True,
            required=False,
            checks=Check.greater_than_or_equal_to(0),
        ),
        "signup_date": Column("datetime64[ns]", nullable=True, required=False),
    },
    strict=False,
    coerce=True,
    description="One row per customer (reference entity)"
)


CARD_SCHEMA = DataFrameSchema(
    {
        "customer_id": Column(int, nullable=False),
        "card_type": Column(str, nullable=True, required=False),
        "credit_limit": Column(
            float,
            nullable=True,  # Zero or null limit => undefined utilization
            checks=Check.greater_than_or_equal_to(0),
            description="Card credit limit"
        ),
        "current_balance": Column(
            float,
            nullable=True,
            description="Outstanding balance"
        ),
        "credit_score": Column(
            float,
            nullable=True,
            checks=Check.greater_than_or_equal_to(0),
            description="Bureau credit score of the card holder"
        ),
    },
    strict=False,
    coerce=True,
    description="Zero or more cards per customer"
)


TRANSACTION_SCHEMA = DataFrameSchema(
    {
        "transaction_id": Column(int, nullable=False, unique=True),
        "customer_id": Column(int, nullable=False),
        "transaction_date": Column(
            "datetime64[ns]",
            nullable=False,
            description="Date of the transaction"
        ),
        "amount": Column(float, nullable=False),
        "merchant_category": Column(str, nullable=True),
        "channel": Column(
            str,
            nullable=True,
            required=False,
            checks=Check.isin(CHANNELS),
        ),
    },
    strict=False,
    coerce=True,
    description="Append-only transaction log"
)


# === Derived stage outputs ===

SUMMARY_SCHEMA = DataFrameSchema(
    {
        "customer_id": Column(int, nullable=False, unique=True),
        "active_months": Column(int, checks=Check.greater_than_or_equal_to(0)),
        "txn_count": Column(int, checks=Check.greater_than_or_equal_to(0)),
        "total_spend": Column(float, nullable=False),
        "avg_spend_per_txn": Column(float, nullable=True),
        "category_count": Column(int, checks=Check.greater_than_or_equal_to(0)),
        "last_txn_date": Column("datetime64[ns]", nullable=True),
        "credit_score": Column(float, nullable=True),
        "credit_util_ratio": Column(float, nullable=True),
    },
    strict=False,
    coerce=True,
    description="One row per customer, aggregated from cards and transactions"
)


def build_percentile_schema(columns, n_buckets: int = 100) -> DataFrameSchema:
    """Schema for the ranker output: every rank is an integer in 1..n_buckets."""
    return DataFrameSchema(
        {
            column: Column(int, nullable=False, checks=Check.in_range(1, n_buckets))
            for column in columns
        },
        strict=False,
        description="Population-relative percentile ranks"
    )


def build_scoring_output_schema(segments, max_score: int) -> DataFrameSchema:
    """Schema for scorer output, bounded by the configured rules and segments."""
    return DataFrameSchema(
        {
            "risk_score": Column(
                int,
                nullable=False,
                checks=[
                    Check.greater_than_or_equal_to(0),
                    Check.less_than_or_equal_to(max_score),
                ]
            ),
            "risk_segment": Column(
                str,
                nullable=False,
                checks=Check.isin(list(segments))
            ),
        },
        strict=False,  # Allow component columns
        coerce=True,
        description="Schema for churn risk scoring output data"
    )


def build_validation_report_schema(segments) -> DataFrameSchema:
    """Schema for the per-segment calibration report."""
    return DataFrameSchema(
        {
            "risk_segment": Column(
                str, checks=Check.isin(list(segments)), unique=True
            ),
            "customers": Column(int, checks=Check.greater_than_or_equal_to(0)),
            "churned": Column(int, checks=Check.greater_than_or_equal_to(0)),
            "churn_rate": Column(
                float,
                nullable=True,  # Empty segment => no observed rate
                checks=Check.in_range(0.0, 100.0),
            ),
        },
        strict=True,
        coerce=True,
        description="Observed churn rate per risk segment"
    )


# Schemas for the default configuration
PERCENTILE_SCHEMA = build_percentile_schema([
    "pct_active_months",
    "pct_category_count",
    "pct_utilization",
    "pct_total_spend",
    "pct_credit_score",
    "pct_avg_spend",
])
SCORING_OUTPUT_SCHEMA = build_scoring_output_schema(SEGMENTS, max_score=9)
VALIDATION_REPORT_SCHEMA = build_validation_report_schema(SEGMENTS)
