"""Regime stability metrics from per-window ranks and forecast errors"""

import logging
import warnings
import numpy as np
from typing import List, Optional

from .errors import DegenerateVolatilityError, RegimeAnalysisWarning
from .models import RegimeMetrics, RunAccumulator

logger = logging.getLogger(__name__)


class MetricsAggregator:
    """Folds window results into a RunAccumulator and finalizes the metrics"""

    def __init__(self, rank_weight: float = 0.7, error_weight: float = 0.3):
        self.rank_weight = rank_weight
        self.error_weight = error_weight
        self.issues: List[DegenerateVolatilityError] = []
        self.last_error_volatility: Optional[float] = None

    def start(self) -> RunAccumulator:
        """Fresh accumulator; also clears what the previous run reported"""
        self.issues = []
        self.last_error_volatility = None
        return RunAccumulator()

    def update(self, acc: RunAccumulator, rank: int,
               mse: Optional[float]) -> RunAccumulator:
        """Rank 0 windows leave the accumulator untouched"""
        if rank <= 0:
            return acc
        if mse is None:
            raise ValueError(f"Rank {rank} window needs a forecast error")
        return acc.record(rank, mse)

    def error_volatility(self, acc: RunAccumulator) -> float:
        """
        Coefficient of variation of the forecast errors: sample standard
        deviation over the mean. A single error has zero deviation.

        All errors are squared-error means and therefore non-negative, so a
        zero mean means every error is zero; that case reports 0.0 and is
        recorded as a DegenerateVolatilityError.
        """
        errors = np.asarray(acc.errors, dtype=float)
        if len(errors) == 0:
            return 0.0

        mean_error = float(np.mean(errors))
        if mean_error == 0:
            issue = DegenerateVolatilityError(
                f"Mean forecast error is zero over {len(errors)} windows, "
                f"error volatility set to 0"
            )
            self.issues.append(issue)
            logger.warning(str(issue))
            warnings.warn(str(issue), RegimeAnalysisWarning, stacklevel=2)
            return 0.0

        std_error = float(np.std(errors, ddof=1)) if len(errors) > 1 else 0.0
        return std_error / mean_error

    def finalize(self, acc: RunAccumulator) -> RegimeMetrics:
        """Metrics for a completed run; all zeros when no window had rank>0"""
        if acc.processed_count == 0:
            return RegimeMetrics.no_valid_windows()

        rank_instability = acc.rank_changes / acc.processed_count
        normalized_mse = acc.total_error / acc.processed_count
        error_volatility = self.error_volatility(acc)
        self.last_error_volatility = error_volatility
        regime_stability_index = (
            self.rank_weight * rank_instability + self.error_weight * error_volatility
        )

        logger.info(
            f"Regime metrics over {acc.processed_count} windows: "
            f"stability index {regime_stability_index:.4f}, "
            f"rank instability {rank_instability:.4f}, "
            f"normalized MSE {normalized_mse:.6f}, "
            f"error volatility {error_volatility:.4f}"
        )

        return RegimeMetrics(
            regime_stability_index=regime_stability_index,
            rank_instability=rank_instability,
            normalized_mse=normalized_mse
        )

    @classmethod
    def from_config(cls, config) -> 'MetricsAggregator':
        return cls(rank_weight=config.rank_weight, error_weight=config.error_weight)
