"""Johansen cointegration test and finite-sample corrections"""

import logging
import numpy as np
import pandas as pd
from dataclasses import dataclass
from typing import Any, Dict, Tuple
from statsmodels.tsa.vector_ar.vecm import coint_johansen

logger = logging.getLogger(__name__)

# Column of coint_johansen's critical value tables (90%, 95%, 99%)
CRITICAL_VALUE_COLUMNS = {0.10: 0, 0.05: 1, 0.01: 2}


@dataclass(frozen=True)
class CointegrationTestResult:
    """Trace test output for ranks 0..k-1"""
    tested_ranks: Tuple[int, ...]
    raw_statistics: np.ndarray
    critical_values: np.ndarray
    fit_artifacts: Dict[str, Any]


def cointegration_test(train: pd.DataFrame,
                       lag_order: int = 4,
                       det_order: int = 0,
                       significance: float = 0.05) -> CointegrationTestResult:
    """
    Run the Johansen trace test on a training slice.

    Args:
        train: Price levels (rows = time, columns = assets)
        lag_order: Number of lagged differences in the test VAR
        det_order: -1 no deterministic terms, 0 constant, 1 linear trend
        significance: Level of the critical values (0.10, 0.05 or 0.01)

    Returns:
        CointegrationTestResult with one statistic and critical value per tested rank
    """
    if significance not in CRITICAL_VALUE_COLUMNS:
        raise ValueError(
            f"Unsupported significance {significance}, "
            f"expected one of {sorted(CRITICAL_VALUE_COLUMNS)}"
        )

    values = np.asarray(train, dtype=float)
    result = coint_johansen(values, det_order=det_order, k_ar_diff=lag_order)

    n_assets = values.shape[1]
    column = CRITICAL_VALUE_COLUMNS[significance]

    fit_artifacts = {
        'eigenvalues': np.asarray(result.eig),
        'eigenvectors': np.asarray(result.evec),
        'max_eigen_statistics': np.asarray(result.lr2),
        'n_obs': len(values),
        'n_effective': len(values) - lag_order - 1,
        'n_assets': n_assets,
        'lag_order': lag_order,
        'det_order': det_order,
    }

    return CointegrationTestResult(
        tested_ranks=tuple(range(n_assets)),
        raw_statistics=np.asarray(result.lr1, dtype=float),
        critical_values=np.asarray(result.cvt[:, column], dtype=float),
        fit_artifacts=fit_artifacts
    )


def bartlett_correction_factor(fit_artifacts: Dict[str, Any],
                               rank: int,
                               train: pd.DataFrame) -> float:
    """Unit Bartlett factor: statistics are used as reported by the test."""
    return 1.0


def reinsel_ahn_correction_factor(fit_artifacts: Dict[str, Any],
                                  rank: int,
                                  train: pd.DataFrame) -> float:
    """
    Degrees-of-freedom scaling T / (T - k*p) of the trace statistic.

    T is the effective sample, k the number of assets and p the order of the
    levels VAR (lagged differences + 1). Rank 0 is never scaled.
    """
    if rank == 0:
        return 1.0

    n_effective = fit_artifacts['n_effective']
    n_params = fit_artifacts['n_assets'] * (fit_artifacts['lag_order'] + 1)

    if n_effective <= n_params:
        raise ValueError(
            f"Effective sample {n_effective} too small for {n_params} "
            f"parameters per equation"
        )

    return n_effective / (n_effective - n_params)
