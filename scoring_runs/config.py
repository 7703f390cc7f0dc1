"""
Run configuration for the churn risk scoring pipeline.

Defines the RunConfig dataclass for YAML-driven batch runs.
"""

from dataclasses import dataclass, asdict
from datetime import date
from pathlib import Path
from typing import Optional

import yaml

from churn_risk.config import ScoringConfig


@dataclass
class RunConfig:
    """
    Configuration for a single scoring run over one snapshot.

    Load from YAML:
        config = RunConfig.from_yaml("configs/sample.yaml")

    Create programmatically:
        config = RunConfig(
            name="june_refresh",
            as_of_date="2025-06-30",
            data_dir="data/2025-06-30",
        )
    """

    # Metadata
    name: str
    description: str = ""

    # Snapshot reference date (ISO string); None => today
    as_of_date: Optional[str] = None

    # Snapshot location (relative to scoring_runs/ or absolute)
    data_dir: str = "data"
    customers_file: str = "customers.csv"
    cards_file: str = "cards.csv"
    transactions_file: str = "transactions.csv"

    # Synthetic snapshot instead of CSVs (number of customers)
    sample_customers: Optional[int] = None
    sample_seed: int = 42

    # Scoring policies
    churn_window_days: int = 90
    never_transacted_churned: bool = True
    null_percentile: int = 50

    # Pass/fail criteria for the calibration backtest
    min_high_risk_churn_rate: Optional[float] = None
    require_monotonic: bool = False

    @classmethod
    def from_yaml(cls, path: Path | str) -> "RunConfig":
        """Load configuration from YAML file."""
        path = Path(path)
        with open(path) as f:
            data = yaml.safe_load(f)
        if isinstance(data.get("as_of_date"), date):
            data["as_of_date"] = data["as_of_date"].isoformat()
        return cls(**data)

    def to_yaml(self, path: Path | str) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(asdict(self), f, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    def resolve_as_of(self) -> str:
        """Snapshot date for this run, defaulting to today."""
        return self.as_of_date or date.today().isoformat()

    def to_scoring_config(self) -> ScoringConfig:
        """Build the pipeline configuration for this run."""
        return ScoringConfig(
            churn_window_days=self.churn_window_days,
            never_transacted_churned=self.never_transacted_churned,
            null_percentile=self.null_percentile,
        )
