"""
Batch scoring runs for the churn risk pipeline.

Usage:
    from scoring_runs import PipelineRunner, RunConfig

    # Run from YAML
    runner = PipelineRunner()
    result = runner.run_from_yaml("configs/sample.yaml")
    print(result.summary())

    # Run programmatically
    config = RunConfig(
        name="june_refresh",
        as_of_date="2025-06-30",
        data_dir="data/2025-06-30",
    )
    result = runner.run(config)

CLI:
    python -m scoring_runs.run configs/default.yaml
    python -m scoring_runs.run --list
"""

from .config import RunConfig
from .runner import PipelineRunner, RunResult
from .logger import RunLogger
from .artifacts import ArtifactManager

__all__ = [
    "RunConfig",
    "PipelineRunner",
    "RunResult",
    "RunLogger",
    "ArtifactManager",
]
