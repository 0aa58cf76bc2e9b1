"""Cointegration rank from finite-sample corrected Johansen statistics"""

import logging
import numpy as np
import pandas as pd
from typing import Any, Callable, Dict, Optional

from econometrics.johansen import (
    CointegrationTestResult,
    cointegration_test,
    bartlett_correction_factor,
    reinsel_ahn_correction_factor,
)
from .errors import ComputationError
from .models import RankDecision

logger = logging.getLogger(__name__)

CorrectionFn = Callable[[Dict[str, Any], int, pd.DataFrame], float]

CORRECTION_FUNCTIONS: Dict[str, CorrectionFn] = {
    'bartlett': bartlett_correction_factor,
    'reinsel_ahn': reinsel_ahn_correction_factor,
}


class RankDetector:
    """Determines the cointegration rank of a training slice"""

    def __init__(self,
                 lag_order: int = 4,
                 det_order: int = 0,
                 significance: float = 0.05,
                 correction: Optional[CorrectionFn] = None,
                 test: Callable[..., CointegrationTestResult] = cointegration_test):
        """
        Initialize detector

        Args:
            lag_order: Lagged differences passed to the cointegration test
            det_order: Deterministic term assumption of the test
            significance: Level of the critical values compared against
            correction: Finite-sample correction factor function, unit factors if None
            test: Cointegration test returning a CointegrationTestResult
        """
        self.lag_order = lag_order
        self.det_order = det_order
        self.significance = significance
        self.correction = correction or bartlett_correction_factor
        self.test = test
        self.logger = logging.getLogger('regime.rank_detector')

    def correction_factors(self, result: CointegrationTestResult,
                           train: pd.DataFrame) -> np.ndarray:
        """One factor per tested rank; rank 0 is fixed at 1"""
        factors = []
        for rank in result.tested_ranks:
            if rank == 0:
                factors.append(1.0)
                continue
            try:
                factor = float(self.correction(result.fit_artifacts, rank, train))
            except (ValueError, ZeroDivisionError, KeyError) as e:
                raise ComputationError(f"Correction factor for rank {rank} failed: {str(e)}") from e
            if not np.isfinite(factor) or factor <= 0:
                raise ComputationError(f"Invalid correction factor {factor} for rank {rank}")
            factors.append(factor)
        return np.asarray(factors, dtype=float)

    def detect(self, train: pd.DataFrame) -> RankDecision:
        """
        Rank = number of tested ranks whose corrected statistic strictly
        exceeds its critical value. Every tested rank counts, the test does
        not stop at the first failure.
        """
        try:
            result = self.test(
                train,
                lag_order=self.lag_order,
                det_order=self.det_order,
                significance=self.significance
            )
        except (np.linalg.LinAlgError, ValueError, FloatingPointError) as e:
            raise ComputationError(f"Cointegration test failed: {str(e)}") from e

        statistics = np.asarray(result.raw_statistics, dtype=float)
        critical_values = np.asarray(result.critical_values, dtype=float)

        if len(statistics) != len(result.tested_ranks) or len(critical_values) != len(statistics):
            raise ComputationError(
                f"Cointegration test returned {len(statistics)} statistics and "
                f"{len(critical_values)} critical values for {len(result.tested_ranks)} ranks"
            )
        if not np.all(np.isfinite(statistics)):
            raise ComputationError("Cointegration test produced non-finite statistics")

        factors = self.correction_factors(result, train)
        corrected = statistics / factors
        rank = int(np.sum(corrected > critical_values))

        self.logger.debug(
            f"Trace statistics {np.round(corrected, 3).tolist()} vs "
            f"critical values {np.round(critical_values, 3).tolist()} -> rank {rank}"
        )

        return RankDecision(
            rank=rank,
            corrected_statistics=tuple(corrected.tolist()),
            critical_values=tuple(critical_values.tolist()),
            correction_factors=tuple(factors.tolist())
        )

    @classmethod
    def from_config(cls, config) -> 'RankDetector':
        return cls(
            lag_order=config.coint_lag_order,
            det_order=config.det_order,
            significance=config.significance,
            correction=CORRECTION_FUNCTIONS[config.correction]
        )
