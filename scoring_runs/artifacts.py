"""
Artifact management for churn risk scoring runs.

Writes the derived tables of every run plus calibration plots.
"""

from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns

if TYPE_CHECKING:
    from .runner import RunResult


class ArtifactManager:
    """Manages saving run artifacts."""

    def __init__(self, artifacts_dir: Path):
        """
        Initialize artifact manager.

        Args:
            artifacts_dir: Base directory for artifacts
        """
        self.artifacts_dir = artifacts_dir
        self.artifacts_dir.mkdir(parents=True, exist_ok=True)

    def save_artifacts(self, result: "RunResult") -> Path:
        """
        Save the derived tables and plots for a run.

        Each run writes into its own directory; re-running replaces nothing
        from other runs.

        Args:
            result: RunResult from runner

        Returns:
            Path to run artifacts directory
        """
        run_dir = self.artifacts_dir / result.run_id
        run_dir.mkdir(exist_ok=True)
        pipeline = result.pipeline

        # Save config
        result.config.to_yaml(run_dir / "config.yaml")

        # Save derived tables
        pipeline.summary.to_csv(run_dir / "customer_summary.csv", index=False)
        pipeline.percentile_table().to_csv(run_dir / "percentile_scores.csv", index=False)
        pipeline.scored_customers().to_csv(run_dir / "risk_scores.csv", index=False)
        pipeline.validation.to_csv(run_dir / "validation.csv", index=False)

        # Generate plots
        if len(pipeline.summary) > 0:
            self._plot_churn_by_segment(pipeline.validation, run_dir)
            self._plot_score_distribution(pipeline.scored_customers(), run_dir)

        return run_dir

    def _plot_churn_by_segment(
        self,
        validation: pd.DataFrame,
        output_dir: Path,
    ) -> None:
        """Bar chart of observed churn rate per risk segment."""
        fig, ax = plt.subplots(figsize=(8, 6))
        sns.barplot(
            data=validation.fillna({"churn_rate": 0.0}),
            x="risk_segment",
            y="churn_rate",
            color="steelblue",
            ax=ax,
        )
        for i, row in enumerate(validation.itertuples()):
            ax.annotate(
                f"n={row.customers}",
                (i, 0),
                ha="center",
                va="bottom",
                fontsize=9,
            )
        ax.set_xlabel("Risk segment")
        ax.set_ylabel("Churn rate (%)")
        ax.set_title("Observed Churn Rate by Risk Segment")
        ax.set_ylim(0, 100)
        plt.tight_layout()
        plt.savefig(output_dir / "churn_rate_by_segment.png", dpi=150)
        plt.close()

    def _plot_score_distribution(
        self,
        scored: pd.DataFrame,
        output_dir: Path,
    ) -> None:
        """Histogram of risk scores split by observed churn."""
        fig, ax = plt.subplots(figsize=(10, 6))
        sns.histplot(
            data=scored,
            x="risk_score",
            hue="churn_flag",
            multiple="dodge",
            discrete=True,
            ax=ax,
        )
        ax.set_xlabel("Risk score")
        ax.set_ylabel("Customers")
        ax.set_title("Risk Score Distribution by Observed Churn")
        ax.grid(True, alpha=0.3)

        plt.tight_layout()
        plt.savefig(output_dir / "score_distribution.png", dpi=150)
        plt.close()

    def load_run(self, run_id: str) -> dict | None:
        """
        Load artifacts for a specific run.

        Args:
            run_id: Run ID to load

        Returns:
            Dictionary with loaded artifacts, or None if not found
        """
        run_dir = self.artifacts_dir / run_id
        if not run_dir.exists():
            return None

        from .config import RunConfig

        return {
            "config": RunConfig.from_yaml(run_dir / "config.yaml"),
            "customer_summary": pd.read_csv(run_dir / "customer_summary.csv"),
            "percentile_scores": pd.read_csv(run_dir / "percentile_scores.csv"),
            "risk_scores": pd.read_csv(run_dir / "risk_scores.csv"),
            "validation": pd.read_csv(run_dir / "validation.csv"),
        }
