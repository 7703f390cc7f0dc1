"""
Run logging for the churn risk pipeline.

Every run leaves one JSON record under logs/: the snapshot date, the
rows dropped while joining, the per-segment calibration report and the
backtest metrics. Errored runs keep the snapshot date and the error so a
failed month still shows up in the history.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import pandas as pd

if TYPE_CHECKING:
    from .runner import RunResult
    from .config import RunConfig


def _segment_key(segment: str) -> str:
    """'High Risk' -> 'high'"""
    return segment.split()[0].lower()


class RunLogger:
    """JSON run records plus the tabular views built from them."""

    def __init__(self, logs_dir: Path):
        self.logs_dir = logs_dir
        self.logs_dir.mkdir(parents=True, exist_ok=True)

    def _write(self, run_id: str, record: dict) -> Path:
        log_path = self.logs_dir / f"{run_id}.json"
        with open(log_path, "w") as f:
            json.dump(record, f, indent=2, default=str)
        return log_path

    def log_run(self, result: "RunResult") -> Path:
        """
        Record a completed run.

        Args:
            result: RunResult from runner

        Returns:
            Path to log file
        """
        pipeline = result.pipeline
        validation = [
            {k: (None if pd.isna(v) else v) for k, v in row.items()}
            for row in pipeline.validation.to_dict(orient="records")
        ]
        record = {
            "run_id": result.run_id,
            "timestamp": result.timestamp.isoformat(),
            "duration_seconds": result.duration_seconds,
            "as_of_date": pipeline.as_of_date.date().isoformat(),
            "config": result.config.to_dict(),
            "data_quality": {
                "customers": int(len(pipeline.summary)),
                "dropped_cards": pipeline.dropped_cards,
                "dropped_transactions": pipeline.dropped_transactions,
            },
            "results": {
                "validation": validation,
                "metrics": result.metrics,
            },
            "passed": result.passed,
            "status": "PASS" if result.passed else "FAIL",
        }
        return self._write(result.run_id, record)

    def log_failure(
        self,
        run_id: str,
        config: "RunConfig",
        error: Exception,
    ) -> Path:
        """
        Record a run that raised before producing scores.

        Args:
            run_id: Unique run ID
            config: RunConfig used
            error: Exception raised by the run

        Returns:
            Path to log file
        """
        record = {
            "run_id": run_id,
            "timestamp": datetime.now().isoformat(),
            "as_of_date": config.resolve_as_of(),
            "config": {
                "name": config.name,
                "description": config.description,
                "data_dir": config.data_dir,
                "sample_customers": config.sample_customers,
            },
            "status": "ERROR",
            "error_type": type(error).__name__,
            "error": str(error),
        }
        return self._write(run_id, record)

    def load_logs(
        self,
        as_of_date: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[dict]:
        """
        Load run records, oldest file first.

        Args:
            as_of_date: Only runs scoring this snapshot date (YYYY-MM-DD)
            status: Only runs with this status (PASS, FAIL or ERROR)
        """
        logs = []
        for log_file in sorted(self.logs_dir.glob("run_*.json")):
            with open(log_file) as f:
                log = json.load(f)
            if as_of_date is not None and log.get("as_of_date") != as_of_date:
                continue
            if status is not None and log.get("status") != status:
                continue
            logs.append(log)
        return logs

    def get_summary_dataframe(self, as_of_date: Optional[str] = None) -> pd.DataFrame:
        """
        One row per run, newest first.

        Completed runs carry population size, dropped join rows, the churn
        rate of each segment (churn_rate_high, churn_rate_medium, ...),
        monotonicity and AUC. Errored runs carry the error message instead.
        """
        logs = self.load_logs(as_of_date=as_of_date)
        if not logs:
            return pd.DataFrame()

        rows = []
        for log in logs:
            row = {
                "run_id": log["run_id"],
                "name": log["config"]["name"],
                "timestamp": log["timestamp"],
                "as_of_date": log.get("as_of_date"),
                "status": log["status"],
            }
            if log["status"] == "ERROR":
                row["error"] = f"{log.get('error_type', 'Error')}: {log.get('error')}"
            else:
                row.update(log["data_quality"])
                for entry in log["results"]["validation"]:
                    row[f"churn_rate_{_segment_key(entry['risk_segment'])}"] = entry["churn_rate"]
                metrics = log["results"]["metrics"]
                row["is_monotonic"] = metrics.get("is_monotonic")
                row["auc_roc"] = metrics.get("auc_roc")
            rows.append(row)

        return pd.DataFrame(rows).sort_values("timestamp", ascending=False)

    def get_validation_history(self, segment: Optional[str] = None) -> pd.DataFrame:
        """
        Calibration reports of all completed runs stacked in long form.

        Columns: run_id, as_of_date, risk_segment, customers, churned,
        churn_rate. Ordered by snapshot date, then segment.

        Args:
            segment: Only rows for this risk segment
        """
        rows = [
            {"run_id": log["run_id"], "as_of_date": log["as_of_date"], **entry}
            for log in self.load_logs()
            if log["status"] != "ERROR"
            for entry in log["results"]["validation"]
            if segment is None or entry["risk_segment"] == segment
        ]
        columns = [
            "run_id", "as_of_date", "risk_segment", "customers", "churned", "churn_rate",
        ]
        history = pd.DataFrame(rows, columns=columns)
        return history.sort_values(["as_of_date", "risk_segment"], ignore_index=True)
