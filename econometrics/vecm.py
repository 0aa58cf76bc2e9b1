"""Vector error correction model estimation and forecasting"""

import logging
import numpy as np
import pandas as pd
from typing import Optional
from statsmodels.tsa.vector_ar.vecm import VECM, VECMResults

logger = logging.getLogger(__name__)


def fit_error_correction_model(train: pd.DataFrame,
                               rank: int,
                               lag_order: int = 1,
                               deterministic: str = 'co') -> VECMResults:
    """
    Estimate a VECM with a given cointegration rank.

    Args:
        train: Price levels (rows = time, columns = assets)
        rank: Cointegration rank, 1 <= rank <= number of assets
        lag_order: Number of lagged differences
        deterministic: statsmodels deterministic terms ('n', 'co', 'ci', 'lo', 'li', ...)
    """
    values = np.asarray(train, dtype=float)
    n_assets = values.shape[1]
    if not 0 < rank <= n_assets:
        raise ValueError(f"Cointegration rank must be in [1, {n_assets}], got {rank}")

    model = VECM(
        values,
        k_ar_diff=lag_order,
        coint_rank=rank,
        deterministic=deterministic
    )
    return model.fit()


def forecast(model: VECMResults,
             horizon: int,
             test: Optional[pd.DataFrame] = None) -> np.ndarray:
    """
    Point forecasts for the next `horizon` observations.

    Returns an array of shape (horizon, n_assets). When `test` is given its
    width must match the model.
    """
    if horizon < 1:
        raise ValueError(f"Forecast horizon must be positive, got {horizon}")

    forecasts = np.asarray(model.predict(steps=horizon), dtype=float)

    if test is not None and np.shape(test)[1] != forecasts.shape[1]:
        raise ValueError(
            f"Test slice has {np.shape(test)[1]} assets, model has {forecasts.shape[1]}"
        )

    return forecasts
