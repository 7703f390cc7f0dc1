"""Base class for risk rule components."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    from ..config import RiskRule, ScoringConfig


class BaseScorer(ABC):
    """
    Abstract base class for rule components.

    A component reads one percentile column, decides which rows sit in the
    risky zone and awards the rule's points to exactly those rows. Subclasses
    only decide the zone; point bookkeeping lives here.
    """

    def __init__(self, config: "ScoringConfig", rule: "RiskRule"):
        """
        Initialize component for one rule.

        Args:
            config: ScoringConfig the rule belongs to
            rule: RiskRule with column, threshold and points
        """
        self.config = config
        self.rule = rule
        self.name = rule.name

    @abstractmethod
    def flag(self, ranks: pd.Series) -> pd.Series:
        """
        Boolean mask of rows in the risky zone.

        Must be vectorized over the whole column.
        """

    @property
    def required_columns(self) -> list[str]:
        return [self.rule.column]

    @property
    def max_points(self) -> int:
        """Largest value this component can contribute."""
        return self.rule.points

    def validate(self, df: pd.DataFrame) -> None:
        """Validate required columns exist."""
        missing = set(self.required_columns) - set(df.columns)
        if missing:
            raise ValueError(
                f"{self.__class__.__name__} requires columns: {missing}"
            )

    def score(self, df: pd.DataFrame) -> pd.Series:
        """Rule points for every row (0 outside the risky zone)."""
        self.validate(df)
        risky = self.flag(df[self.rule.column])
        return pd.Series(
            np.where(risky, self.rule.points, 0),
            index=df.index,
            dtype=int,
        )
