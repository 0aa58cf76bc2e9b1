from dataclasses import dataclass, fields
import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)

CORRECTIONS = ('bartlett', 'reinsel_ahn')
FAILURE_POLICIES = ('raise', 'skip')
SIGNIFICANCE_LEVELS = (0.10, 0.05, 0.01)


@dataclass(frozen=True)
class AnalysisConfig:
    """Model settings shared by the fixed and adaptive window runs"""
    coint_lag_order: int = 4        # Lagged differences in the Johansen test
    det_order: int = 0              # Constant in the cointegrating relation
    significance: float = 0.05
    correction: str = 'bartlett'    # One of CORRECTIONS
    vecm_lag_order: int = 1
    vecm_deterministic: str = 'co'   # Unrestricted constant, as in the rank test
    rank_weight: float = 0.7
    error_weight: float = 0.3
    failure_policy: str = 'raise'   # One of FAILURE_POLICIES
    show_progress: bool = False

    def validate(self) -> 'AnalysisConfig':
        """Check settings, raising ValueError on the first bad value"""
        if self.coint_lag_order < 1:
            raise ValueError(f"coint_lag_order must be >= 1, got {self.coint_lag_order}")
        if self.vecm_lag_order < 0:
            raise ValueError(f"vecm_lag_order must be >= 0, got {self.vecm_lag_order}")
        if self.det_order not in (-1, 0, 1):
            raise ValueError(f"det_order must be -1, 0 or 1, got {self.det_order}")
        if self.significance not in SIGNIFICANCE_LEVELS:
            raise ValueError(
                f"significance must be one of {SIGNIFICANCE_LEVELS}, got {self.significance}"
            )
        if self.correction not in CORRECTIONS:
            raise ValueError(f"correction must be one of {CORRECTIONS}, got {self.correction!r}")
        if self.failure_policy not in FAILURE_POLICIES:
            raise ValueError(
                f"failure_policy must be one of {FAILURE_POLICIES}, got {self.failure_policy!r}"
            )
        if self.rank_weight < 0 or self.error_weight < 0:
            raise ValueError("Stability index weights must be non-negative")
        return self

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> 'AnalysisConfig':
        """Build a config from a mapping, ignoring unknown keys"""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {unknown}")
        return cls(**{k: v for k, v in values.items() if k in known}).validate()


DEFAULT_CONFIG = AnalysisConfig()
