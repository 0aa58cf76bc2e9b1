"""Return dispersion used to adapt window sizes"""

import logging
import numpy as np
import pandas as pd
from typing import Callable

from econometrics.data_prep import period_returns

logger = logging.getLogger(__name__)


class ReturnVolatilityEstimator:
    """Pooled standard deviation of continuous returns across all assets"""

    def __init__(self, returns_fn: Callable[[pd.DataFrame], pd.DataFrame] = period_returns):
        self.returns_fn = returns_fn

    def returns(self, prices: pd.DataFrame) -> pd.DataFrame:
        return self.returns_fn(prices)

    def dispersion(self, prices: pd.DataFrame) -> float:
        """
        Sample standard deviation (ddof=1) of every return in the slice,
        pooled over assets and periods. Missing returns are ignored.

        A slice with fewer than two usable returns has no dispersion and
        reports NaN.
        """
        values = np.asarray(self.returns(prices), dtype=float).ravel()
        values = values[np.isfinite(values)]

        if len(values) < 2:
            logger.debug(f"Only {len(values)} usable returns, volatility undefined")
            return float('nan')

        return float(np.std(values, ddof=1))
