"""Rolling and volatility-adaptive window scheduling"""

from abc import ABC, abstractmethod
import logging
import math
from typing import Iterator, List, Optional

from econometrics.data_prep import prepare_prices
from .errors import InsufficientDataError
from .models import Window, WindowState
from .volatility import ReturnVolatilityEstimator

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to nearest integer with halves going up (2.5 -> 3)"""
    return int(math.floor(value + 0.5))


def _check_positive(name: str, value) -> None:
    if value is None or value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")


class WindowScheduler(ABC):
    """Produces train/test windows over a price series, lazily and in time order"""

    def __init__(self, series, window_size: int, step_size: int):
        _check_positive('window_size', window_size)
        _check_positive('step_size', step_size)
        if int(step_size) != step_size:
            raise ValueError(f"step_size must be an integer, got {step_size}")

        self.series = prepare_prices(series)
        self.window_size = window_size
        self.step_size = int(step_size)
        self.logger = logging.getLogger(f'regime.scheduler.{self.mode}')

    mode = 'base'

    @property
    def n_obs(self) -> int:
        return len(self.series)

    @property
    def required_length(self) -> int:
        """Shortest series that can hold one train slice, its test slice and one spare row"""
        return self.window_size + self.step_size + 1

    def check_length(self) -> None:
        if self.n_obs < self.required_length:
            raise InsufficientDataError(self.n_obs, self.required_length)

    def _make_window(self, index: int, start: int, size: int,
                     volatility: Optional[float] = None) -> Window:
        train_end = start + size
        return Window(
            index=index,
            start=start,
            size=size,
            step=self.step_size,
            train=self.series.iloc[start:train_end],
            test=self.series.iloc[train_end:train_end + self.step_size],
            volatility=volatility
        )

    @abstractmethod
    def __iter__(self) -> Iterator[Window]:
        pass


class FixedWindowScheduler(WindowScheduler):
    """Constant-size window advanced by a constant step"""

    mode = 'fixed'

    def __init__(self, series, window_size: int, step_size: int):
        super().__init__(series, window_size, step_size)
        if int(window_size) != window_size:
            raise ValueError(f"window_size must be an integer, got {window_size}")
        self.window_size = int(window_size)

    def expected_windows(self) -> int:
        """floor((n - window - step) / step) + 1, or 0 when the series is too short"""
        if self.n_obs < self.required_length:
            return 0
        return (self.n_obs - self.window_size - self.step_size) // self.step_size + 1

    def __iter__(self) -> Iterator[Window]:
        self.check_length()

        last_start = self.n_obs - self.window_size - self.step_size
        for index, start in enumerate(range(0, last_start + 1, self.step_size)):
            yield self._make_window(index, start, self.window_size)


class AdaptiveWindowScheduler(WindowScheduler):
    """
    Window whose size reacts to the volatility of the slice it just covered.

    After each window the size for the next one is shrunk when the train
    slice was more volatile than vol_mult times the whole-series volatility,
    grown when it was calmer than the whole series, and otherwise kept.
    The size always stays within [min_window, max_window].
    """

    mode = 'adaptive'

    def __init__(self, series,
                 base_window: float,
                 vol_mult: float,
                 shrink_fact: float,
                 grow_fact: float,
                 step_size: int,
                 min_window: int,
                 max_window: int,
                 volatility: Optional[ReturnVolatilityEstimator] = None):
        super().__init__(series, base_window, step_size)
        _check_positive('min_window', min_window)
        _check_positive('max_window', max_window)
        if min_window > max_window:
            raise ValueError(f"min_window {min_window} exceeds max_window {max_window}")
        if vol_mult <= 1:
            raise ValueError(f"vol_mult must be > 1, got {vol_mult}")
        if not 0 < shrink_fact < 1:
            raise ValueError(f"shrink_fact must be in (0, 1), got {shrink_fact}")
        if grow_fact <= 1:
            raise ValueError(f"grow_fact must be > 1, got {grow_fact}")

        self.base_window = base_window
        self.vol_mult = vol_mult
        self.shrink_fact = shrink_fact
        self.grow_fact = grow_fact
        self.min_window = min_window
        self.max_window = max_window
        self.volatility = volatility or ReturnVolatilityEstimator()

        self.state: Optional[WindowState] = None
        self.size_history: List[int] = []

    def clamp(self, size: float) -> float:
        return min(self.max_window, max(self.min_window, size))

    def initial_state(self) -> WindowState:
        """Whole-series reference volatility and the clamped base window"""
        reference = self.volatility.dispersion(self.series)
        self.logger.info(
            f"Reference volatility over {self.n_obs} observations: {reference:.6f}"
        )
        return WindowState(size=self.clamp(self.base_window),
                           reference_volatility=reference)

    def next_size(self, size: float, window_volatility: float,
                  reference_volatility: float) -> float:
        """Size of the following window; shrink is checked before growth"""
        if window_volatility > self.vol_mult * reference_volatility and size > self.min_window:
            return max(self.min_window, size * self.shrink_fact)
        if window_volatility < reference_volatility and size < self.max_window:
            return min(self.max_window, size * self.grow_fact)
        return size

    def __iter__(self) -> Iterator[Window]:
        self.check_length()

        state = self.initial_state()
        self.state = state
        self.size_history = []
        index = 0

        while state.start + state.size <= self.n_obs - self.step_size:
            size = round_half_up(state.size)
            if state.start + size + self.step_size > self.n_obs:
                break

            train = self.series.iloc[state.start:state.start + size]
            window_volatility = self.volatility.dispersion(train)
            window = self._make_window(index, state.start, size, volatility=window_volatility)
            self.size_history.append(size)

            yield window

            new_size = self.next_size(state.size, window_volatility,
                                      state.reference_volatility)
            if new_size != state.size:
                self.logger.debug(
                    f"Window {index}: volatility {window_volatility:.6f} vs "
                    f"reference {state.reference_volatility:.6f}, "
                    f"size {state.size:.2f} -> {new_size:.2f}"
                )
            state.size = new_size
            state.start += self.step_size
            index += 1
