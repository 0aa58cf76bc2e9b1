"""Common data models used across the regime analysis."""

from dataclasses import dataclass, field, replace
import math
import numpy as np
import pandas as pd
from typing import Dict, List, Optional, Tuple

from .errors import RegimeAnalysisError


@dataclass(frozen=True, eq=False)
class Window:
    """Contiguous train slice followed immediately by its test slice"""
    index: int
    start: int
    size: int
    step: int
    train: pd.DataFrame = field(repr=False)
    test: pd.DataFrame = field(repr=False)
    volatility: Optional[float] = None  # Train-slice return dispersion (adaptive mode)

    @property
    def train_range(self) -> Tuple[int, int]:
        return self.start, self.start + self.size

    @property
    def test_range(self) -> Tuple[int, int]:
        return self.start + self.size, self.start + self.size + self.step


@dataclass
class WindowState:
    """Mutable adaptive-window state, owned by one scheduler"""
    size: float
    reference_volatility: float
    start: int = 0


@dataclass(frozen=True)
class RankDecision:
    """Cointegration rank chosen for one window"""
    rank: int
    corrected_statistics: Tuple[float, ...] = ()
    critical_values: Tuple[float, ...] = ()
    correction_factors: Tuple[float, ...] = ()

    @property
    def is_cointegrated(self) -> bool:
        return self.rank > 0


@dataclass(frozen=True, eq=False)
class WindowOutcome:
    """What happened to a single window"""
    window: Window
    decision: Optional[RankDecision]
    mse: Optional[float] = None
    skipped_reason: Optional[str] = None

    @property
    def rank(self) -> int:
        """Detected rank, or 0 when detection failed or the window was skipped"""
        if self.decision is None or self.skipped_reason is not None:
            return 0
        return self.decision.rank

    @property
    def processed(self) -> bool:
        return self.mse is not None


@dataclass(frozen=True)
class RunAccumulator:
    """Running totals over rank>0 windows, folded one window at a time"""
    processed_count: int = 0
    rank_changes: int = 0
    previous_rank: Optional[int] = None
    errors: Tuple[float, ...] = ()
    total_error: float = 0.0

    def record(self, rank: int, mse: float) -> 'RunAccumulator':
        """Return the accumulator with one more rank>0 window added"""
        changed = self.previous_rank is not None and rank != self.previous_rank
        return replace(
            self,
            processed_count=self.processed_count + 1,
            rank_changes=self.rank_changes + (1 if changed else 0),
            previous_rank=rank,
            errors=self.errors + (mse,),
            total_error=self.total_error + mse
        )


@dataclass(frozen=True)
class RegimeMetrics:
    """Final regime stability metrics for one run"""
    regime_stability_index: float
    rank_instability: float
    normalized_mse: float

    @classmethod
    def insufficient_data(cls) -> 'RegimeMetrics':
        return cls(math.nan, math.nan, math.nan)

    @classmethod
    def no_valid_windows(cls) -> 'RegimeMetrics':
        return cls(0.0, 0.0, 0.0)

    def as_dict(self) -> Dict[str, float]:
        return {
            'regime_stability_index': self.regime_stability_index,
            'rank_instability': self.rank_instability,
            'normalized_mse': self.normalized_mse
        }


@dataclass
class AnalysisReport:
    """Metrics plus the per-window trail that produced them"""
    metrics: RegimeMetrics
    outcomes: List[WindowOutcome] = field(default_factory=list)
    accumulator: RunAccumulator = field(default_factory=RunAccumulator)
    issues: List[RegimeAnalysisError] = field(default_factory=list)
    error_volatility: Optional[float] = None

    @property
    def windows_attempted(self) -> int:
        return len(self.outcomes)

    @property
    def ranks(self) -> List[int]:
        return [outcome.rank for outcome in self.outcomes]

    @property
    def errors(self) -> np.ndarray:
        return np.asarray(self.accumulator.errors, dtype=float)

    def to_dataframe(self) -> pd.DataFrame:
        """One row per scheduled window"""
        rows = []
        for outcome in self.outcomes:
            window = outcome.window
            rows.append({
                'window': window.index,
                'start': window.start,
                'size': window.size,
                'volatility': window.volatility,
                'rank': outcome.rank,
                'mse': outcome.mse,
                'skipped_reason': outcome.skipped_reason
            })
        return pd.DataFrame(
            rows,
            columns=['window', 'start', 'size', 'volatility', 'rank', 'mse', 'skipped_reason']
        )
