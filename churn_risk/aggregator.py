"""
Feature aggregation: raw customers, cards and transactions -> one
CustomerSummary row per customer.

Transactions and cards are aggregated separately and then left-joined onto
the customer table, so a customer with several cards does not multiply its
transaction counts and sums.
"""

from dataclasses import dataclass

import pandas as pd

from .schemas import (
    CARD_SCHEMA,
    CUSTOMER_SCHEMA,
    SUMMARY_SCHEMA,
    TRANSACTION_SCHEMA,
)


# Demographics carried through to the summary when present
PASSTHROUGH_COLUMNS = ["gender", "city", "age", "income"]

SUMMARY_COLUMNS = [
    "customer_id",
    "active_months",
    "txn_count",
    "total_spend",
    "avg_spend_per_txn",
    "category_count",
    "last_txn_date",
    "credit_score",
    "credit_util_ratio",
]

# Count/sum fields default to zero for customers without transactions;
# ratio and date fields stay null.
ZERO_FILL_COLUMNS = ["active_months", "txn_count", "category_count"]


@dataclass
class AggregationResult:
    """
    Container for the customer summary plus data-quality counters.

    Attributes:
        df: One row per customer_id
        dropped_cards: Card rows whose customer_id is not a known customer
        dropped_transactions: Transaction rows whose customer_id is unknown
    """

    df: pd.DataFrame
    dropped_cards: int = 0
    dropped_transactions: int = 0

    @property
    def dropped_rows(self) -> int:
        return self.dropped_cards + self.dropped_transactions


def _drop_orphans(df: pd.DataFrame, customer_ids: pd.Series) -> tuple[pd.DataFrame, int]:
    """Remove rows referencing a customer_id absent from the customer table."""
    known = df["customer_id"].isin(customer_ids)
    return df[known], int((~known).sum())


def credit_utilization(cards: pd.DataFrame) -> pd.Series:
    """
    Per-card utilization: current_balance / credit_limit.

    A zero or missing credit limit yields null rather than a division error.
    """
    limit = cards["credit_limit"].where(cards["credit_limit"] != 0)
    return cards["current_balance"] / limit


def aggregate_transactions(transactions: pd.DataFrame) -> pd.DataFrame:
    """Roll transactions up to activity, spend and diversity per customer."""
    dates = transactions["transaction_date"]
    txns = transactions.assign(
        # Distinct calendar months, not the elapsed span
        txn_month=dates.dt.year * 12 + dates.dt.month,
    )
    return txns.groupby("customer_id").agg(
        active_months=("txn_month", "nunique"),
        txn_count=("transaction_id", "count"),
        total_spend=("amount", "sum"),
        avg_spend_per_txn=("amount", "mean"),
        category_count=("merchant_category", "nunique"),
        last_txn_date=("transaction_date", "max"),
    )


def aggregate_cards(cards: pd.DataFrame) -> pd.DataFrame:
    """
    Roll cards up to one credit profile per customer.

    With several cards the worst case wins: the maximum credit score and the
    maximum utilization ratio observed among them.
    """
    cards = cards.assign(credit_util_ratio=credit_utilization(cards))
    return cards.groupby("customer_id").agg(
        credit_score=("credit_score", "max"),
        credit_util_ratio=("credit_util_ratio", "max"),
    )


def build_customer_summary(
    customers: pd.DataFrame,
    cards: pd.DataFrame,
    transactions: pd.DataFrame,
) -> AggregationResult:
    """
    Build the CustomerSummary table from a raw snapshot.

    Args:
        customers: Customer rows (customer_id unique)
        cards: Card rows (0..N per customer)
        transactions: Transaction rows

    Returns:
        AggregationResult with exactly one summary row per customer

    Raises:
        pandera.errors.SchemaError: If any raw table is malformed
    """
    customers = CUSTOMER_SCHEMA.validate(customers)
    cards = CARD_SCHEMA.validate(cards)
    transactions = TRANSACTION_SCHEMA.validate(transactions)

    cards, dropped_cards = _drop_orphans(cards, customers["customer_id"])
    transactions, dropped_txns = _drop_orphans(
        transactions, customers["customer_id"]
    )

    base_columns = ["customer_id"] + [
        col for col in PASSTHROUGH_COLUMNS if col in customers.columns
    ]
    summary = (
        customers[base_columns]
        .sort_values("customer_id", kind="mergesort")
        .merge(aggregate_transactions(transactions), on="customer_id", how="left")
        .merge(aggregate_cards(cards), on="customer_id", how="left")
        .reset_index(drop=True)
    )

    for col in ZERO_FILL_COLUMNS:
        summary[col] = summary[col].fillna(0).astype(int)
    summary["total_spend"] = summary["total_spend"].fillna(0.0).astype(float)
    for col in ["avg_spend_per_txn", "credit_score", "credit_util_ratio"]:
        summary[col] = summary[col].astype(float)
    summary["last_txn_date"] = pd.to_datetime(summary["last_txn_date"])

    summary = SUMMARY_SCHEMA.validate(summary[base_columns + SUMMARY_COLUMNS[1:]])

    return AggregationResult(
        df=summary,
        dropped_cards=dropped_cards,
        dropped_transactions=dropped_txns,
    )
