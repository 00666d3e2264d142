"""Bayesian optimization loop."""

from .sequential_bo import SequentialBO

__all__ = ['SequentialBO']
