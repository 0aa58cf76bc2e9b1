"""Utility functions and classes for regime analysis runs"""

from .progress import ProgressMonitor

__all__ = ['ProgressMonitor']
