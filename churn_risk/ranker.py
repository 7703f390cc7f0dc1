"""
Population-relative percentile ranking.

Every customer gets an integer rank 1..n_buckets for each monitored metric,
computed against the whole snapshot population. Bucketing matches SQL
``NTILE(n)``: with N rows, the first ``N % n`` buckets hold one extra row,
and with N < n only buckets 1..N are used.

Ranking is a global operation (it needs the full sorted population), so it
is exposed as a single ``rank_population`` call over the entire frame rather
than as per-row logic.
"""

from typing import Optional

import numpy as np
import pandas as pd

from .config import ScoringConfig, DEFAULT_CONFIG
from .schemas import build_percentile_schema


def ntile(positions: np.ndarray, population_size: int, n_buckets: int = 100) -> np.ndarray:
    """
    Bucket index (1-based) for 0-based sort positions in a population.

    Args:
        positions: 0-based positions in sort order
        population_size: Total rows being bucketed (the denominator)
        n_buckets: Number of buckets

    Returns:
        Integer array of bucket indices in 1..min(n_buckets, population_size)
    """
    positions = np.asarray(positions, dtype=np.int64)
    base, remainder = divmod(population_size, n_buckets)
    large_rows = remainder * (base + 1)  # rows covered by the bigger buckets

    head = positions // (base + 1) + 1
    if base == 0:
        return head
    tail = remainder + (positions - large_rows) // base + 1
    return np.where(positions < large_rows, head, tail)


def percentile_rank(
    values: pd.Series,
    ascending: bool = True,
    n_buckets: int = 100,
    null_percentile: int = 50,
) -> pd.Series:
    """
    Rank one metric across the population.

    Null values are kept in the population (the denominator is always
    ``len(values)``) but are not sorted: non-null values occupy the leading
    positions and nulls receive ``null_percentile``. Ties keep input order.

    Args:
        values: Metric values, one per customer
        ascending: Sort direction; bucket 1 is the first value in sort order
        n_buckets: Number of buckets
        null_percentile: Reserved rank for null values

    Returns:
        Integer Series aligned with ``values``
    """
    ranks = np.full(len(values), null_percentile, dtype=np.int64)
    present = values.notna().to_numpy()

    if present.any():
        observed = values[present].to_numpy(dtype=float)
        order = np.argsort(observed if ascending else -observed, kind="stable")
        buckets = np.empty(len(observed), dtype=np.int64)
        buckets[order] = ntile(np.arange(len(observed)), len(values), n_buckets)
        ranks[present] = buckets

    return pd.Series(ranks, index=values.index, dtype=int)


def rank_population(
    df: pd.DataFrame,
    config: Optional[ScoringConfig] = None,
) -> pd.DataFrame:
    """
    Add one percentile column per configured metric.

    Args:
        df: Labeled CustomerSummary for the whole population
        config: ScoringConfig instance. Uses DEFAULT_CONFIG if None.

    Returns:
        Copy of df with pct_* columns added

    Raises:
        ValueError: If a configured metric column is missing
    """
    config = config or DEFAULT_CONFIG
    missing = {spec.metric for spec in config.percentile_metrics} - set(df.columns)
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    result = df.copy()
    for spec in config.percentile_metrics:
        result[spec.column] = percentile_rank(
            result[spec.metric],
            ascending=spec.ascending,
            n_buckets=config.n_buckets,
            null_percentile=config.null_percentile,
        )

    schema = build_percentile_schema(config.percentile_columns, config.n_buckets)
    return schema.validate(result)
