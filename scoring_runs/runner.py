"""
Run orchestration for the churn risk pipeline.

Single entry point for scoring a snapshot end to end: load, score,
validate, log and write artifacts.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional
import uuid

import pandas as pd

from churn_risk.data import generate_sample_snapshot, load_snapshot
from churn_risk.pipeline import ChurnRiskPipeline, PipelineResult
from churn_risk.validator import calibration_metrics

from .config import RunConfig
from .logger import RunLogger
from .artifacts import ArtifactManager


@dataclass
class RunResult:
    """Container for run results."""

    run_id: str
    config: RunConfig
    pipeline: PipelineResult
    metrics: dict
    passed: bool
    timestamp: datetime
    duration_seconds: float
    artifacts_path: Optional[Path] = None

    def summary(self) -> str:
        """Human-readable summary."""
        status = "PASS" if self.passed else "FAIL"
        lines = [
            f"[{self.run_id}] {self.config.name} - {status}",
            f"  As of:     {self.pipeline.as_of_date.date().isoformat()}",
            f"  Customers: {len(self.pipeline.summary)}"
            f" (dropped rows: {self.pipeline.dropped_rows})",
        ]
        for row in self.pipeline.validation.itertuples(index=False):
            rate = "n/a" if pd.isna(row.churn_rate) else f"{row.churn_rate:.2f}%"
            lines.append(
                f"  {row.risk_segment:<12} {row.customers:>6} customers, "
                f"{row.churned:>6} churned, churn rate {rate}"
            )
        auc = self.metrics.get("auc_roc")
        if auc is not None:
            lines.append(f"  AUC:       {auc:.3f}")
        return "\n".join(lines)


class PipelineRunner:
    """
    Single entry point for scoring runs.

    Usage:
        runner = PipelineRunner()

        # From YAML config
        result = runner.run_from_yaml("configs/sample.yaml")

        # From RunConfig object
        config = RunConfig(name="custom", as_of_date="2025-06-30", ...)
        result = runner.run(config)

        # Batch run
        results = runner.run_batch(["configs/a.yaml", "configs/b.yaml"])
    """

    def __init__(
        self,
        base_path: Optional[Path] = None,
        logs_dir: str = "logs",
        artifacts_dir: str = "artifacts",
    ):
        """
        Initialize runner.

        Args:
            base_path: Base path for runs (default: this file's parent)
            logs_dir: Subdirectory for logs
            artifacts_dir: Subdirectory for artifacts
        """
        self.base_path = Path(base_path) if base_path else Path(__file__).parent
        self.logs_dir = self.base_path / logs_dir
        self.artifacts_dir = self.base_path / artifacts_dir

        self.logger = RunLogger(self.logs_dir)
        self.artifact_manager = ArtifactManager(self.artifacts_dir)

    def generate_run_id(self) -> str:
        """Generate unique run ID: run_YYYYMMDD_XXXX"""
        date_str = datetime.now().strftime("%Y%m%d")
        short_uuid = uuid.uuid4().hex[:4]
        return f"run_{date_str}_{short_uuid}"

    def load_data(self, config: RunConfig):
        """Load the raw snapshot named by the config."""
        if config.sample_customers is not None:
            return generate_sample_snapshot(
                n_customers=config.sample_customers,
                as_of_date=config.resolve_as_of(),
                seed=config.sample_seed,
            )

        data_dir = Path(config.data_dir)
        if not data_dir.is_absolute():
            data_dir = self.base_path / data_dir
        return load_snapshot(
            data_dir,
            customers_file=config.customers_file,
            cards_file=config.cards_file,
            transactions_file=config.transactions_file,
        )

    def run(self, config: RunConfig) -> RunResult:
        """
        Run the pipeline for a single config.

        Args:
            config: RunConfig to run

        Returns:
            RunResult with stage outputs, metrics and pass/fail status
        """
        run_id = self.generate_run_id()
        start_time = datetime.now()

        try:
            customers, cards, transactions = self.load_data(config)

            scoring_config = config.to_scoring_config()
            pipeline = ChurnRiskPipeline(scoring_config)
            output = pipeline.run(
                customers, cards, transactions, as_of_date=config.resolve_as_of()
            )

            metrics = calibration_metrics(output.scores.df, scoring_config)
            metrics["dropped_cards"] = output.dropped_cards
            metrics["dropped_transactions"] = output.dropped_transactions

            passed = self._evaluate_pass_fail(metrics, config)
            duration = (datetime.now() - start_time).total_seconds()

            result = RunResult(
                run_id=run_id,
                config=config,
                pipeline=output,
                metrics=metrics,
                passed=passed,
                timestamp=start_time,
                duration_seconds=duration,
            )

            # Always log and write the derived tables
            self.logger.log_run(result)
            result.artifacts_path = self.artifact_manager.save_artifacts(result)

            return result

        except Exception as e:
            # Log failure
            self.logger.log_failure(run_id, config, e)
            raise

    def run_from_yaml(self, config_path: str | Path) -> RunResult:
        """
        Load config from YAML and run.

        Args:
            config_path: Path to YAML config (relative to base_path or absolute)

        Returns:
            RunResult
        """
        path = Path(config_path)
        if not path.is_absolute():
            path = self.base_path / path
        config = RunConfig.from_yaml(path)
        return self.run(config)

    def run_batch(
        self,
        config_paths: list[str | Path],
        stop_on_failure: bool = False,
    ) -> list[RunResult]:
        """
        Run multiple configs in sequence.

        Args:
            config_paths: List of paths to YAML configs
            stop_on_failure: Whether to stop if a run errors

        Returns:
            List of RunResults
        """
        results = []
        for path in config_paths:
            try:
                result = self.run_from_yaml(path)
                results.append(result)
                print(result.summary())
                print()
            except Exception as e:
                print(f"ERROR: {path} - {e}")
                if stop_on_failure:
                    raise
        return results

    def list_runs(self, as_of_date: Optional[str] = None) -> pd.DataFrame:
        """
        Get summary of past runs, optionally for one snapshot date.

        Returns:
            DataFrame with run history
        """
        return self.logger.get_summary_dataframe(as_of_date=as_of_date)

    def _evaluate_pass_fail(self, metrics: dict, config: RunConfig) -> bool:
        """Evaluate the calibration backtest against the run criteria."""
        if config.require_monotonic and not metrics["is_monotonic"]:
            return False

        if config.min_high_risk_churn_rate is not None:
            rates = metrics["churn_rate_by_segment"]
            high_rate = rates.get(config.to_scoring_config().segment_names[-1])
            if high_rate is None or high_rate < config.min_high_risk_churn_rate:
                return False

        return True
