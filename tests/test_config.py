import logging

import pytest

from config.model_config import AnalysisConfig, DEFAULT_CONFIG
from regime.aggregator import MetricsAggregator
from regime.forecaster import RegimeForecaster
from utils.progress import ProgressMonitor


def test_defaults():
    assert DEFAULT_CONFIG.coint_lag_order == 4
    assert DEFAULT_CONFIG.vecm_lag_order == 1
    assert DEFAULT_CONFIG.rank_weight == 0.7
    assert DEFAULT_CONFIG.error_weight == 0.3
    assert DEFAULT_CONFIG.failure_policy == 'raise'
    # Unrestricted constant in both the rank test and the forecast model
    assert DEFAULT_CONFIG.det_order == 0
    assert DEFAULT_CONFIG.vecm_deterministic == 'co'
    assert DEFAULT_CONFIG.validate() is DEFAULT_CONFIG


@pytest.mark.parametrize("overrides", [
    {'coint_lag_order': 0},
    {'vecm_lag_order': -1},
    {'det_order': 2},
    {'significance': 0.2},
    {'correction': 'bootstrap'},
    {'failure_policy': 'ignore'},
    {'rank_weight': -0.1},
])
def test_validate_rejects_bad_values(overrides):
    with pytest.raises(ValueError):
        AnalysisConfig(**overrides).validate()


def test_from_dict_ignores_unknown_keys(caplog):
    with caplog.at_level(logging.WARNING):
        config = AnalysisConfig.from_dict({'failure_policy': 'skip', 'plot': True})
    assert config.failure_policy == 'skip'
    assert 'plot' in caplog.text


def test_components_from_config():
    config = AnalysisConfig(vecm_lag_order=2, vecm_deterministic='ci',
                            rank_weight=0.6, error_weight=0.4)
    forecaster = RegimeForecaster.from_config(config)
    aggregator = MetricsAggregator.from_config(config)
    assert (forecaster.lag_order, forecaster.deterministic) == (2, 'ci')
    assert (aggregator.rank_weight, aggregator.error_weight) == (0.6, 0.4)


def test_progress_monitor_counts_windows(caplog):
    with caplog.at_level(logging.INFO, logger='progress'):
        with ProgressMonitor(total=4, desc="Fixed windows", disable=True, log_every=2) as monitor:
            for _ in range(4):
                monitor.update(status="rank=1")
    assert monitor.current == 4
    assert 'Progress: 2/4' in caplog.text
    assert 'Completed Fixed windows (4 windows)' in caplog.text


def test_progress_monitor_without_total(caplog):
    with caplog.at_level(logging.INFO, logger='progress'):
        monitor = ProgressMonitor(disable=True, log_every=1)
        monitor.update()
        monitor.close()
    assert 'Progress: 1 windows' in caplog.text
