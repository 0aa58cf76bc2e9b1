import sys
import os

# Add project root to Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.append(project_root)

import pytest
import numpy as np
import pandas as pd

from regime.models import RankDecision


def make_cointegrated_prices(n_obs: int = 300, n_assets: int = 2,
                             seed: int = 42) -> pd.DataFrame:
    """Common stochastic trend plus stationary deviations, all prices positive"""
    rng = np.random.RandomState(seed)
    trend = 100 + np.cumsum(rng.normal(0, 1, n_obs))
    columns = {'asset_0': trend}
    for i in range(1, n_assets):
        # AR(1) deviation keeps each asset tied to the common trend
        deviation = np.zeros(n_obs)
        for t in range(1, n_obs):
            deviation[t] = 0.5 * deviation[t - 1] + rng.normal(0, 0.5)
        columns[f'asset_{i}'] = 20 + (0.5 + 0.25 * i) * trend + deviation
    return pd.DataFrame(columns)


def make_random_walk_prices(n_obs: int = 200, n_assets: int = 2,
                            seed: int = 42) -> pd.DataFrame:
    rng = np.random.RandomState(seed)
    values = 100 * np.exp(np.cumsum(rng.normal(0, 0.01, (n_obs, n_assets)), axis=0))
    return pd.DataFrame(values, columns=[f'asset_{i}' for i in range(n_assets)])


class ScriptedDetector:
    """Returns ranks from a list, one per window, repeating the last one"""

    def __init__(self, ranks, fail_on=()):
        self.ranks = list(ranks)
        self.fail_on = set(fail_on)
        self.calls = 0

    def detect(self, train):
        from regime.errors import ComputationError
        call = self.calls
        self.calls += 1
        if call in self.fail_on:
            raise ComputationError("singular matrix in training slice")
        rank = self.ranks[min(call, len(self.ranks) - 1)]
        return RankDecision(rank=rank)


class ScriptedForecaster:
    """Returns forecast errors from a list, one per rank>0 window"""

    def __init__(self, errors, fail_on=()):
        self.errors = list(errors)
        self.fail_on = set(fail_on)
        self.calls = 0

    def forecast_error(self, train, rank, test):
        from regime.errors import ComputationError
        call = self.calls
        self.calls += 1
        if call in self.fail_on:
            raise ComputationError("VECM did not converge")
        return self.errors[min(call, len(self.errors) - 1)]


@pytest.fixture
def cointegrated_prices():
    return make_cointegrated_prices()


@pytest.fixture
def random_walk_prices():
    return make_random_walk_prices()
