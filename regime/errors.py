"""Errors and warnings raised by the regime analysis"""

from typing import Optional


class RegimeAnalysisError(Exception):
    """Base class for regime analysis failures"""


class InsufficientDataError(RegimeAnalysisError):
    """Series too short for a single train/test window"""

    def __init__(self, n_obs: int, required: int):
        self.n_obs = n_obs
        self.required = required
        super().__init__(
            f"Dataset too small: {n_obs} observations, "
            f"window + step + 1 = {required} required"
        )


class NoValidWindowError(RegimeAnalysisError):
    """Windows were scheduled but none found a cointegration rank above 0"""

    def __init__(self, n_windows: int):
        self.n_windows = n_windows
        super().__init__(
            f"No valid (rank>0) windows found in {n_windows} windows. "
            f"All metrics set to 0."
        )


class ComputationError(RegimeAnalysisError):
    """Cointegration test or VECM estimation failed on a window"""

    def __init__(self, message: str, window_index: Optional[int] = None):
        self.window_index = window_index
        if window_index is not None:
            message = f"Window {window_index}: {message}"
        super().__init__(message)


class DegenerateVolatilityError(RegimeAnalysisError):
    """Forecast errors average to zero, so their relative dispersion is undefined"""


class RegimeAnalysisWarning(UserWarning):
    """Category for reported, non-fatal outcomes"""
