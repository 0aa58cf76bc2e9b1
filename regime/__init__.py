"""
Cointegration regime stability analysis.
Re-tests cointegration rank and re-fits a VECM over rolling or
volatility-adaptive windows and summarizes how stable the regime is.
"""

from .analysis import (
    RegimeAnalysis,
    analyze_fixed_windows,
    analyze_adaptive_windows,
    run_fixed_window_regime_analysis,
    run_adaptive_window_regime_analysis,
)
from .aggregator import MetricsAggregator
from .errors import (
    RegimeAnalysisError,
    InsufficientDataError,
    NoValidWindowError,
    ComputationError,
    DegenerateVolatilityError,
    RegimeAnalysisWarning,
)
from .forecaster import RegimeForecaster
from .models import (
    Window,
    WindowState,
    RankDecision,
    WindowOutcome,
    RunAccumulator,
    RegimeMetrics,
    AnalysisReport,
)
from .rank_detector import RankDetector
from .scheduler import FixedWindowScheduler, AdaptiveWindowScheduler
from .volatility import ReturnVolatilityEstimator

__all__ = [
    'RegimeAnalysis', 'analyze_fixed_windows', 'analyze_adaptive_windows',
    'run_fixed_window_regime_analysis', 'run_adaptive_window_regime_analysis',
    'MetricsAggregator', 'RegimeForecaster', 'RankDetector',
    'FixedWindowScheduler', 'AdaptiveWindowScheduler', 'ReturnVolatilityEstimator',
    'Window', 'WindowState', 'RankDecision', 'WindowOutcome', 'RunAccumulator',
    'RegimeMetrics', 'AnalysisReport',
    'RegimeAnalysisError', 'InsufficientDataError', 'NoValidWindowError',
    'ComputationError', 'DegenerateVolatilityError', 'RegimeAnalysisWarning',
]
