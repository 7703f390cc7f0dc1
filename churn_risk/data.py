"""
Snapshot loading and synthetic sample data.

A snapshot is the three raw tables (customers, cards, transactions) as of
one reference date.
"""

from pathlib import Path
from typing import Tuple

import numpy as np
import pandas as pd

from .labeler import to_as_of


Snapshot = Tuple[pd.DataFrame, pd.DataFrame, pd.DataFrame]

MERCHANT_CATEGORIES = [
    "Grocery", "Dining", "Travel", "Fuel", "Electronics",
    "Apparel", "Health", "Entertainment",
]
CITIES = ["Mumbai", "Delhi", "Bengaluru", "Chennai", "Pune", "Kolkata"]
CARD_TYPES = ["Classic", "Gold", "Platinum"]


def load_snapshot(
    data_dir: Path | str,
    customers_file: str = "customers.csv",
    cards_file: str = "cards.csv",
    transactions_file: str = "transactions.csv",
) -> Snapshot:
    """
    Read the three raw tables from CSV files.

    Raises:
        FileNotFoundError: If any of the files is missing
    """
    data_dir = Path(data_dir)
    paths = {
        "customers": data_dir / customers_file,
        "cards": data_dir / cards_file,
        "transactions": data_dir / transactions_file,
    }
    for name, path in paths.items():
        if not path.exists():
            raise FileNotFoundError(f"{name} table not found at {path}")

    customers = pd.read_csv(paths["customers"], parse_dates=["signup_date"])
    cards = pd.read_csv(paths["cards"])
    transactions = pd.read_csv(paths["transactions"], parse_dates=["transaction_date"])
    return customers, cards, transactions


def save_snapshot(snapshot: Snapshot, data_dir: Path | str) -> Path:
    """Write a snapshot as customers.csv, cards.csv and transactions.csv."""
    data_dir = Path(data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    customers, cards, transactions = snapshot
    customers.to_csv(data_dir / "customers.csv", index=False)
    cards.to_csv(data_dir / "cards.csv", index=False)
    transactions.to_csv(data_dir / "transactions.csv", index=False)
    return data_dir


def generate_sample_snapshot(
    n_customers: int = 500,
    as_of_date="2025-06-30",
    seed: int = 42,
) -> Snapshot:
    """
    Generate a realistic synthetic snapshot for testing.

    Shape of the data:
    - ~8% of customers never transact
    - ~30% of active customers go dormant (last activity 91-365 days ago,
      with fewer transactions)
    - ~12% of customers hold no card, ~10% of cardholders hold two
    - ~3% of cards carry a zero credit limit
    """
    np.random.seed(seed)
    as_of = to_as_of(as_of_date)
    ids = np.arange(1, n_customers + 1)

    customers = pd.DataFrame({
        "customer_id": ids,
        "name": [f"Customer {i:05d}" for i in ids],
        "gender": np.random.choice(["Male", "Female"], size=n_customers),
        "city": np.random.choice(CITIES, size=n_customers),
        "age": np.random.randint(21, 71, size=n_customers),
        "income": np.random.randint(20, 200, size=n_customers) * 1000,
        "signup_date": as_of - pd.to_timedelta(
            np.random.randint(400, 2000, size=n_customers), unit="D"
        ),
    })

    # Cards: most customers hold one, some two, some none
    holders = ids[np.random.random(n_customers) >= 0.12]
    second = holders[np.random.random(len(holders)) < 0.10]
    card_owners = np.concatenate([holders, second])
    n_cards = len(card_owners)
    credit_limit = np.random.choice([50_000, 100_000, 200_000, 500_000], size=n_cards)
    credit_limit = np.where(np.random.random(n_cards) < 0.03, 0, credit_limit)
    cards = pd.DataFrame({
        "customer_id": card_owners,
        "card_type": np.random.choice(CARD_TYPES, size=n_cards),
        "credit_limit": credit_limit,
        "current_balance": (
            np.maximum(credit_limit, 10_000) * np.random.uniform(0, 1.1, size=n_cards)
        ).round(2),
        "credit_score": np.random.randint(450, 851, size=n_cards),
    }).sort_values("customer_id", kind="mergesort").reset_index(drop=True)

    # Transactions: per-customer activity window ending at last activity
    frames = []
    for customer_id in ids:
        if np.random.random() < 0.08:
            continue  # never transacted
        dormant = np.random.random() < 0.30
        last_gap = np.random.randint(91, 366) if dormant else np.random.randint(0, 60)
        span = np.random.randint(30, 540)
        n_txns = np.random.poisson(8 if dormant else 20) + 1
        offsets = last_gap + np.random.randint(0, span + 1, size=n_txns)
        offsets[0] = last_gap
        frames.append(pd.DataFrame({
            "customer_id": customer_id,
            "transaction_date": as_of - pd.to_timedelta(offsets, unit="D"),
            "amount": np.random.lognormal(mean=7.0, sigma=1.0, size=n_txns).round(2),
            "merchant_category": np.random.choice(
                MERCHANT_CATEGORIES[: np.random.randint(1, len(MERCHANT_CATEGORIES) + 1)],
                size=n_txns,
            ),
            "channel": np.random.choice(["Online", "Offline"], size=n_txns),
        }))

    columns = [
        "transaction_id", "customer_id", "transaction_date",
        "amount", "merchant_category", "channel",
    ]
    if frames:
        transactions = pd.concat(frames, ignore_index=True)
        transactions = transactions.sort_values(
            ["transaction_date", "customer_id"], kind="mergesort"
        ).reset_index(drop=True)
        transactions.insert(0, "transaction_id", np.arange(1, len(transactions) + 1))
    else:
        transactions = pd.DataFrame(columns=columns)

    return customers, cards, transactions[columns]
