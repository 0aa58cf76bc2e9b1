import pytest
import numpy as np
import pandas as pd

from econometrics.data_prep import period_returns, prepare_prices
from regime.volatility import ReturnVolatilityEstimator


@pytest.fixture
def prices():
    return pd.DataFrame({
        'a': [100.0, 110.0, 99.0, 99.0],
        'b': [50.0, 50.0, 55.0, 60.5],
    })


def test_period_returns_are_continuous(prices):
    returns = period_returns(prices)

    assert len(returns) == 3
    np.testing.assert_allclose(returns['a'].values,
                               np.log([110 / 100, 99 / 110, 99 / 99]))
    np.testing.assert_allclose(returns['b'].values,
                               np.log([1.0, 1.1, 1.1]))


def test_dispersion_pools_assets_and_periods(prices):
    estimator = ReturnVolatilityEstimator()
    expected = np.std(np.log(prices.values[1:] / prices.values[:-1]).ravel(), ddof=1)
    assert estimator.dispersion(prices) == pytest.approx(expected)


def test_dispersion_skips_missing_returns(prices):
    prices.loc[2, 'b'] = np.nan
    values = period_returns(prices).values.ravel()
    expected = np.std(values[np.isfinite(values)], ddof=1)
    assert ReturnVolatilityEstimator().dispersion(prices) == pytest.approx(expected)


def test_dispersion_of_constant_prices_is_zero():
    flat = pd.DataFrame({'a': [10.0] * 5, 'b': [20.0] * 5})
    assert ReturnVolatilityEstimator().dispersion(flat) == 0.0


def test_dispersion_undefined_for_single_observation():
    single = pd.DataFrame({'a': [10.0], 'b': [20.0]})
    assert np.isnan(ReturnVolatilityEstimator().dispersion(single))


def test_prepare_prices_from_array():
    prices = prepare_prices([[1.0, 2.0], [1.5, 2.5]])
    assert list(prices.columns) == ['asset_0', 'asset_1']
    assert prices.dtypes.tolist() == [np.float64, np.float64]


def test_prepare_prices_resets_index():
    frame = pd.DataFrame({'a': [1.0, 2.0], 'b': [3.0, 4.0]},
                         index=pd.date_range('2020-01-01', periods=2))
    prices = prepare_prices(frame)
    assert list(prices.index) == [0, 1]
    assert isinstance(frame.index, pd.DatetimeIndex)


@pytest.mark.parametrize("bad", [
    [],
    [[1.0], [2.0]],
    pd.DataFrame({'a': ['x', 'y'], 'b': ['z', 'w']}),
    np.zeros((2, 2, 2)),
])
def test_prepare_prices_rejects_bad_input(bad):
    with pytest.raises(ValueError):
        prepare_prices(bad)
