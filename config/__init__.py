"""Run configuration for regime stability analysis"""

from .model_config import AnalysisConfig, DEFAULT_CONFIG

__all__ = ['AnalysisConfig', 'DEFAULT_CONFIG']
