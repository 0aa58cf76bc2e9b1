import pytest
import numpy as np

from regime.aggregator import MetricsAggregator
from regime.errors import DegenerateVolatilityError, RegimeAnalysisWarning
from regime.models import RegimeMetrics, RunAccumulator


@pytest.fixture
def aggregator():
    return MetricsAggregator()


def fold(aggregator, windows):
    acc = aggregator.start()
    for rank, mse in windows:
        acc = aggregator.update(acc, rank, mse)
    return acc


def test_empty_accumulator(aggregator):
    acc = aggregator.start()
    assert acc.processed_count == 0
    assert acc.rank_changes == 0
    assert acc.previous_rank is None
    assert acc.errors == ()
    assert acc.total_error == 0.0


def test_rank_zero_windows_are_ignored(aggregator):
    acc = fold(aggregator, [(1, 0.5), (0, None), (0, None), (1, 0.7)])
    assert acc.processed_count == 2
    assert acc.rank_changes == 0
    assert acc.errors == (0.5, 0.7)


def test_rank_changes_counted_between_processed_windows(aggregator):
    # The rank 0 window between the two rank 2 windows does not break the run
    acc = fold(aggregator, [(1, 1.0), (2, 1.0), (0, None), (2, 1.0), (1, 1.0)])
    assert acc.processed_count == 4
    assert acc.rank_changes == 2
    assert acc.previous_rank == 1


def test_record_returns_new_accumulator():
    acc = RunAccumulator()
    updated = acc.record(1, 0.25)
    assert acc.processed_count == 0
    assert updated.processed_count == 1
    assert updated.total_error == 0.25


def test_update_requires_error_for_processed_window(aggregator):
    with pytest.raises(ValueError):
        aggregator.update(aggregator.start(), 1, None)


def test_no_processed_windows_gives_zero_metrics(aggregator):
    metrics = aggregator.finalize(fold(aggregator, [(0, None), (0, None)]))
    assert metrics == RegimeMetrics(0.0, 0.0, 0.0)


def test_constant_rank_has_no_instability(aggregator):
    metrics = aggregator.finalize(fold(aggregator, [(1, 0.2), (1, 0.4), (1, 0.3)]))
    assert metrics.rank_instability == 0.0


def test_metric_formulas(aggregator):
    windows = [(1, 0.2), (2, 0.4), (2, 0.1), (1, 0.5), (1, 0.3)]
    acc = fold(aggregator, windows)
    metrics = aggregator.finalize(acc)

    errors = np.array([mse for _, mse in windows])
    rank_instability = 2 / 5
    error_volatility = np.std(errors, ddof=1) / np.mean(errors)

    assert metrics.rank_instability == pytest.approx(rank_instability)
    assert 0.0 <= metrics.rank_instability <= 1.0
    assert metrics.normalized_mse == pytest.approx(np.mean(errors))
    assert metrics.normalized_mse == pytest.approx(np.mean(acc.errors))
    assert aggregator.last_error_volatility == pytest.approx(error_volatility)
    assert metrics.regime_stability_index == pytest.approx(
        0.7 * rank_instability + 0.3 * error_volatility
    )


def test_alternating_ranks_bound_instability(aggregator):
    windows = [(1 + i % 2, 1.0 + i) for i in range(20)]
    metrics = aggregator.finalize(fold(aggregator, windows))
    assert metrics.rank_instability == pytest.approx(19 / 20)
    assert metrics.rank_instability <= 1.0


def test_single_window_has_zero_error_volatility(aggregator):
    metrics = aggregator.finalize(fold(aggregator, [(2, 0.8)]))
    assert aggregator.last_error_volatility == 0.0
    assert metrics.regime_stability_index == 0.0
    assert metrics.normalized_mse == pytest.approx(0.8)


def test_zero_mean_error_is_reported(aggregator):
    acc = fold(aggregator, [(1, 0.0), (2, 0.0)])
    with pytest.warns(RegimeAnalysisWarning):
        metrics = aggregator.finalize(acc)

    assert aggregator.last_error_volatility == 0.0
    assert metrics.rank_instability == pytest.approx(0.5)
    assert metrics.regime_stability_index == pytest.approx(0.35)
    assert len(aggregator.issues) == 1
    assert isinstance(aggregator.issues[0], DegenerateVolatilityError)


def test_custom_weights():
    aggregator = MetricsAggregator(rank_weight=0.5, error_weight=0.5)
    metrics = aggregator.finalize(fold(aggregator, [(1, 1.0), (2, 3.0)]))
    error_volatility = np.std([1.0, 3.0], ddof=1) / 2.0
    assert metrics.regime_stability_index == pytest.approx(0.5 * 0.5 + 0.5 * error_volatility)


def test_metrics_helpers():
    nan_metrics = RegimeMetrics.insufficient_data()
    assert all(np.isnan(v) for v in nan_metrics.as_dict().values())
    assert RegimeMetrics.no_valid_windows().as_dict() == {
        'regime_stability_index': 0.0,
        'rank_instability': 0.0,
        'normalized_mse': 0.0
    }


def test_start_clears_previous_run(aggregator):
    with pytest.warns(RegimeAnalysisWarning):
        aggregator.finalize(fold(aggregator, [(1, 0.0), (1, 0.0)]))
    assert len(aggregator.issues) == 1

    acc = aggregator.start()
    assert aggregator.issues == []
    assert aggregator.last_error_volatility is None
    assert aggregator.finalize(acc) == RegimeMetrics(0.0, 0.0, 0.0)
    assert aggregator.last_error_volatility is None
