"""
Prepare price panels for cointegration and VECM estimation.
"""

import logging
import numpy as np
import pandas as pd
from typing import Union

logger = logging.getLogger(__name__)

PriceData = Union[pd.DataFrame, np.ndarray, list]


def prepare_prices(series: PriceData) -> pd.DataFrame:
    """
    Coerce a price series into a numeric DataFrame (rows = time, columns = assets).

    Args:
        series: DataFrame, 2-D array or nested list of prices

    Returns:
        DataFrame with a RangeIndex and float columns

    Raises:
        ValueError if the series is empty, non-numeric or has fewer than 2 assets
    """
    if isinstance(series, pd.DataFrame):
        prices = series.copy()
    else:
        values = np.asarray(series, dtype=float)
        if values.ndim == 1:
            values = values.reshape(-1, 1)
        if values.ndim != 2:
            raise ValueError(f"Price data must be 2-dimensional, got {values.ndim} dimensions")
        prices = pd.DataFrame(
            values,
            columns=[f'asset_{i}' for i in range(values.shape[1])]
        )

    if len(prices) == 0:
        raise ValueError("Price series is empty")

    if prices.shape[1] < 2:
        raise ValueError(
            f"Cointegration analysis needs at least 2 assets, got {prices.shape[1]}"
        )

    try:
        prices = prices.astype(float)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Price series must be numeric: {str(e)}")

    prices = prices.reset_index(drop=True)

    n_missing = int(prices.isna().sum().sum())
    if n_missing > 0:
        logger.warning(f"Price series contains {n_missing} missing values")

    return prices


def period_returns(prices: PriceData) -> pd.DataFrame:
    """
    Continuous (log) returns between consecutive observations.

    The first observation has no predecessor, so the result has one row
    fewer than the input.
    """
    if not isinstance(prices, pd.DataFrame):
        prices = pd.DataFrame(np.asarray(prices, dtype=float))

    with np.errstate(divide='ignore', invalid='ignore'):
        returns = np.log(prices / prices.shift(1))

    return returns.iloc[1:]
