#!/usr/bin/env python3
"""
CLI entry point for scoring runs.

Usage:
    # Score the snapshot described by a config
    python -m scoring_runs.run configs/default.yaml

    # Override the snapshot date
    python -m scoring_runs.run configs/default.yaml --as-of 2025-06-30

    # Score a synthetic snapshot of 5,000 customers
    python -m scoring_runs.run configs/sample.yaml --sample 5000

    # List all past runs, or only those for one snapshot date
    python -m scoring_runs.run --list
    python -m scoring_runs.run --list --as-of 2025-06-30
"""

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from .config import RunConfig
from .runner import PipelineRunner, RunResult

RUNS_DIR = Path(__file__).parent


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Churn risk scoring pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m scoring_runs.run configs/default.yaml
  python -m scoring_runs.run configs/default.yaml --as-of 2025-06-30
  python -m scoring_runs.run configs/sample.yaml --sample 5000
  python -m scoring_runs.run --list
  python -m scoring_runs.run --list --as-of 2025-06-30
        """,
    )
    parser.add_argument("configs", nargs="*", help="Run config YAML file(s)")
    parser.add_argument(
        "--as-of",
        dest="as_of",
        help="Snapshot date (YYYY-MM-DD), overrides the config or filters --list",
    )
    parser.add_argument(
        "--sample",
        type=int,
        metavar="N",
        help="Score a synthetic snapshot of N customers instead of CSVs",
    )
    parser.add_argument("--list", action="store_true", help="List past runs and exit")
    parser.add_argument(
        "--stop-on-failure",
        action="store_true",
        help="Abort on the first config that cannot be found or errors",
    )
    parser.add_argument(
        "--base-path",
        type=Path,
        help="Directory holding data/, logs/ and artifacts/ (default: scoring_runs/)",
    )
    return parser


def resolve_config_path(config_path: str) -> Path:
    """Use the path as given if it exists, else look under scoring_runs/."""
    path = Path(config_path)
    if path.is_absolute() or path.exists():
        return path
    return RUNS_DIR / path


def apply_overrides(config: RunConfig, args: argparse.Namespace) -> RunConfig:
    if args.as_of:
        config = replace(config, as_of_date=args.as_of)
    if args.sample:
        config = replace(config, sample_customers=args.sample)
    return config


def print_batch_summary(results: list[RunResult]) -> None:
    """One line per run: status, population and High Risk churn rate."""
    passed = sum(1 for r in results if r.passed)
    print(f"\n{'=' * 60}")
    print(f"BATCH SUMMARY: {len(results)} runs, {passed} passed")
    print("=" * 60)
    for r in results:
        status = "PASS" if r.passed else "FAIL"
        high = r.metrics["churn_rate_by_segment"].get("High Risk")
        high_text = "n/a" if high is None else f"{high:.2f}%"
        print(
            f"  [{status}] {r.config.name}: {r.metrics['customers']} customers, "
            f"High Risk churn {high_text}"
        )


def main():
    parser = build_parser()
    args = parser.parse_args()
    runner = PipelineRunner(base_path=args.base_path)

    if args.list:
        runs = runner.list_runs(as_of_date=args.as_of)
        print("No runs found." if runs.empty else runs.to_string(index=False))
        return 0

    if not args.configs:
        parser.print_help()
        return 1

    results = []
    for config_path in args.configs:
        path = resolve_config_path(config_path)
        if not path.exists():
            print(f"Config not found: {config_path}")
            if args.stop_on_failure:
                return 1
            continue

        print(f"\n--- {path.name} ---")
        try:
            config = apply_overrides(RunConfig.from_yaml(path), args)
            result = runner.run(config)
        except Exception as e:
            print(f"ERROR: {e}")
            if args.stop_on_failure:
                return 1
            continue

        results.append(result)
        print(result.summary())
        if result.pipeline.dropped_rows:
            print(
                f"  WARNING: dropped {result.pipeline.dropped_cards} card and "
                f"{result.pipeline.dropped_transactions} transaction rows "
                "with unknown customer_id"
            )
        print(f"  Artifacts: {result.artifacts_path}")

    if len(results) > 1:
        print_batch_summary(results)

    return 0


if __name__ == "__main__":
    sys.exit(main())
