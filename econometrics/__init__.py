"""
Econometric routines consumed by the regime analysis.
Thin adapters over statsmodels for the Johansen test and VECM estimation,
plus return preparation for price panels.
"""

from .data_prep import period_returns, prepare_prices
from .johansen import (
    CointegrationTestResult,
    cointegration_test,
    bartlett_correction_factor,
    reinsel_ahn_correction_factor,
)
from .vecm import fit_error_correction_model, forecast

__all__ = [
    'period_returns', 'prepare_prices',
    'CointegrationTestResult', 'cointegration_test',
    'bartlett_correction_factor', 'reinsel_ahn_correction_factor',
    'fit_error_correction_model', 'forecast',
]
