"""VECM forecast error of a test slice given the detected rank"""

from typing import Callable
import logging
import warnings
import numpy as np
import pandas as pd

from econometrics.vecm import fit_error_correction_model, forecast
from .errors import ComputationError

logger = logging.getLogger(__name__)


class RegimeForecaster:
    """Fits a VECM on the train slice and scores its forecast of the test slice"""

    def __init__(self, lag_order: int = 1,
                 deterministic: str = 'co',
                 fit: Callable = fit_error_correction_model,
                 predict: Callable = forecast):
        """Initialize forecaster with the VECM lag order and deterministic terms"""
        self.lag_order = lag_order
        self.deterministic = deterministic
        self.fit = fit
        self.predict = predict
        self.logger = logging.getLogger('regime.forecaster')

    def forecast_error(self, train: pd.DataFrame, rank: int,
                       test: pd.DataFrame) -> float:
        """
        Mean squared forecast error over all assets and steps of the test
        slice, skipping missing values.
        """
        if rank <= 0:
            raise ValueError(f"Forecasting needs a positive cointegration rank, got {rank}")

        horizon = len(test)
        try:
            with warnings.catch_warnings():
                # statsmodels warns on near-singular fits; a failed fit raises instead
                warnings.simplefilter('ignore')
                model = self.fit(train, rank, lag_order=self.lag_order,
                                 deterministic=self.deterministic)
                fcast = np.asarray(self.predict(model, horizon, test), dtype=float)
        except (np.linalg.LinAlgError, ValueError, FloatingPointError) as e:
            raise ComputationError(f"VECM estimation failed for rank {rank}: {str(e)}") from e

        actual = np.asarray(test, dtype=float)
        if fcast.shape != actual.shape:
            raise ComputationError(
                f"Forecast shape {fcast.shape} does not match test slice {actual.shape}"
            )
        if np.any(np.isinf(fcast)):
            raise ComputationError("VECM forecast diverged to infinity")

        squared_errors = (fcast - actual) ** 2
        if np.all(np.isnan(squared_errors)):
            raise ComputationError("No valid forecast errors in test slice")

        mse = float(np.nanmean(squared_errors))
        self.logger.debug(f"Rank {rank} VECM forecast MSE over {horizon} steps: {mse:.6f}")
        return mse

    @classmethod
    def from_config(cls, config) -> 'RegimeForecaster':
        return cls(lag_order=config.vecm_lag_order,
                   deterministic=config.vecm_deterministic)
