"""
Churn Risk Scoring Package

A rule-based, population-relative churn risk scoring pipeline with a
calibration backtest against observed inactivity.
"""

from .config import ScoringConfig, RiskRule, MetricSpec
from .aggregator import build_customer_summary, AggregationResult
from .labeler import label_churn
from .ranker import rank_population, percentile_rank, ntile
from .scorer import RiskScorer, ScoringResult
from .segmenter import assign_segment, segment_scores
from .validator import validate_calibration, calibration_metrics
from .pipeline import ChurnRiskPipeline, PipelineResult
from .data import generate_sample_snapshot, load_snapshot, save_snapshot

__all__ = [
    "ScoringConfig",
    "RiskRule",
    "MetricSpec",
    "build_customer_summary",
    "AggregationResult",
    "label_churn",
    "rank_population",
    "percentile_rank",
    "ntile",
    "RiskScorer",
    "ScoringResult",
    "assign_segment",
    "segment_scores",
    "validate_calibration",
    "calibration_metrics",
    "ChurnRiskPipeline",
    "PipelineResult",
    "generate_sample_snapshot",
    "load_snapshot",
    "save_snapshot",
]
__version__ = "1.0.0"
