"""Rolling-window cointegration regime analysis"""

import logging
import warnings
from typing import Iterator, List, Optional, Tuple

from config.model_config import AnalysisConfig, DEFAULT_CONFIG
from utils.progress import ProgressMonitor
from .aggregator import MetricsAggregator
from .errors import (
    ComputationError,
    InsufficientDataError,
    NoValidWindowError,
    RegimeAnalysisError,
    RegimeAnalysisWarning,
)
from .forecaster import RegimeForecaster
from .models import AnalysisReport, RegimeMetrics, RunAccumulator, Window, WindowOutcome
from .rank_detector import RankDetector
from .scheduler import AdaptiveWindowScheduler, FixedWindowScheduler, WindowScheduler

logger = logging.getLogger(__name__)


class RegimeAnalysis:
    """
    Drives one run: schedules windows, detects the cointegration rank of each
    train slice, scores a VECM forecast of the test slice when the rank is
    positive and folds the result into the run accumulator.

    A window only reaches the accumulator once both its rank detection and
    its forecast have succeeded, so stopping between windows never leaves a
    partial contribution behind.
    """

    def __init__(self,
                 scheduler: WindowScheduler,
                 detector: Optional[RankDetector] = None,
                 forecaster: Optional[RegimeForecaster] = None,
                 aggregator: Optional[MetricsAggregator] = None,
                 config: Optional[AnalysisConfig] = None,
                 monitor: Optional[ProgressMonitor] = None):
        self.config = (config or DEFAULT_CONFIG).validate()
        self.scheduler = scheduler
        self.detector = detector or RankDetector.from_config(self.config)
        self.forecaster = forecaster or RegimeForecaster.from_config(self.config)
        self.aggregator = aggregator or MetricsAggregator.from_config(self.config)
        self.failure_policy = self.config.failure_policy
        self.monitor = monitor
        self.issues: List[RegimeAnalysisError] = []

    def _report(self, issue: RegimeAnalysisError) -> None:
        """Record a non-fatal outcome and surface it as a warning"""
        self.issues.append(issue)
        logger.warning(str(issue))
        warnings.warn(str(issue), RegimeAnalysisWarning, stacklevel=3)

    def _window_failed(self, window: Window, error: ComputationError,
                       decision=None) -> WindowOutcome:
        failure = ComputationError(str(error), window_index=window.index)
        if self.failure_policy == 'raise':
            logger.error(f"Regime analysis aborted: {str(failure)}")
            raise failure from error

        self._report(failure)
        return WindowOutcome(window=window, decision=decision,
                             skipped_reason=str(failure))

    def process_window(self, window: Window,
                       acc: RunAccumulator) -> Tuple[WindowOutcome, RunAccumulator]:
        """Rank, forecast and fold a single window"""
        try:
            decision = self.detector.detect(window.train)
        except ComputationError as e:
            return self._window_failed(window, e), acc

        if not decision.is_cointegrated:
            logger.debug(f"Window {window.index} (start {window.start}): no cointegration")
            return WindowOutcome(window=window, decision=decision), acc

        try:
            mse = self.forecaster.forecast_error(window.train, decision.rank, window.test)
        except ComputationError as e:
            return self._window_failed(window, e, decision), acc

        logger.debug(
            f"Window {window.index} (start {window.start}, size {window.size}): "
            f"rank {decision.rank}, MSE {mse:.6f}"
        )
        outcome = WindowOutcome(window=window, decision=decision, mse=mse)
        return outcome, self.aggregator.update(acc, decision.rank, mse)

    def steps(self) -> Iterator[Tuple[WindowOutcome, RunAccumulator]]:
        """Yield each window's outcome with the accumulator after it"""
        acc = self.aggregator.start()
        for window in self.scheduler:
            outcome, acc = self.process_window(window, acc)
            if self.monitor is not None:
                self.monitor.update(status=f"rank={outcome.rank}")
            yield outcome, acc

    def run(self) -> AnalysisReport:
        """Process every scheduled window and finalize the metrics"""
        outcomes: List[WindowOutcome] = []
        self.issues = []
        acc = self.aggregator.start()

        try:
            for outcome, acc in self.steps():
                outcomes.append(outcome)
        except InsufficientDataError as e:
            self._report(e)
            return AnalysisReport(
                metrics=RegimeMetrics.insufficient_data(),
                issues=list(self.issues)
            )
        finally:
            if self.monitor is not None:
                self.monitor.close()

        if acc.processed_count == 0:
            self._report(NoValidWindowError(len(outcomes)))

        metrics = self.aggregator.finalize(acc)
        return AnalysisReport(
            metrics=metrics,
            outcomes=outcomes,
            accumulator=acc,
            issues=list(self.issues) + list(self.aggregator.issues),
            error_volatility=self.aggregator.last_error_volatility
        )


def _monitor(config: AnalysisConfig, total: Optional[int], desc: str) -> Optional[ProgressMonitor]:
    if not config.show_progress:
        return None
    return ProgressMonitor(total=total, desc=desc, logger=logger)


def analyze_fixed_windows(series,
                          window_size: int,
                          step_size: int,
                          config: Optional[AnalysisConfig] = None,
                          detector: Optional[RankDetector] = None,
                          forecaster: Optional[RegimeForecaster] = None) -> AnalysisReport:
    """Fixed rolling-window regime analysis with the per-window trail"""
    config = (config or DEFAULT_CONFIG).validate()
    scheduler = FixedWindowScheduler(series, window_size, step_size)
    logger.info(
        f"Fixed-window regime analysis: {scheduler.n_obs} observations, "
        f"window {window_size}, step {step_size}"
    )
    analysis = RegimeAnalysis(
        scheduler,
        detector=detector,
        forecaster=forecaster,
        config=config,
        monitor=_monitor(config, scheduler.expected_windows(), "Fixed windows")
    )
    return analysis.run()


def analyze_adaptive_windows(series,
                             base_window: float,
                             vol_mult: float,
                             shrink_fact: float,
                             grow_fact: float,
                             step_size: int,
                             min_window: int,
                             max_window: int,
                             config: Optional[AnalysisConfig] = None,
                             detector: Optional[RankDetector] = None,
                             forecaster: Optional[RegimeForecaster] = None) -> AnalysisReport:
    """Volatility-adaptive window regime analysis with the per-window trail"""
    config = (config or DEFAULT_CONFIG).validate()
    scheduler = AdaptiveWindowScheduler(
        series,
        base_window=base_window,
        vol_mult=vol_mult,
        shrink_fact=shrink_fact,
        grow_fact=grow_fact,
        step_size=step_size,
        min_window=min_window,
        max_window=max_window
    )
    logger.info(
        f"Adaptive-window regime analysis: {scheduler.n_obs} observations, "
        f"base window {base_window} in [{min_window}, {max_window}], step {step_size}"
    )
    analysis = RegimeAnalysis(
        scheduler,
        detector=detector,
        forecaster=forecaster,
        config=config,
        monitor=_monitor(config, None, "Adaptive windows")
    )
    return analysis.run()


def run_fixed_window_regime_analysis(series,
                                     window_size: int,
                                     step_size: int,
                                     config: Optional[AnalysisConfig] = None) -> RegimeMetrics:
    """
    Regime stability metrics over a fixed rolling window.

    Returns all-NaN metrics when the series is shorter than
    window_size + step_size + 1 and all-zero metrics when no window has a
    positive cointegration rank; both cases also raise a RegimeAnalysisWarning.
    """
    return analyze_fixed_windows(series, window_size, step_size, config=config).metrics


def run_adaptive_window_regime_analysis(series,
                                        base_window: float,
                                        vol_mult: float,
                                        shrink_fact: float,
                                        grow_fact: float,
                                        step_size: int,
                                        min_window: int,
                                        max_window: int,
                                        config: Optional[AnalysisConfig] = None) -> RegimeMetrics:
    """Regime stability metrics over a window that adapts to volatility"""
    return analyze_adaptive_windows(
        series, base_window, vol_mult, shrink_fact, grow_fact,
        step_size, min_window, max_window, config=config
    ).metrics
