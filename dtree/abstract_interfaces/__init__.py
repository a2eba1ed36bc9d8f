"""
Abstract interfaces for the dtree library.

These base classes fix the fit/predict contract that every learning algorithm
and fitted model in the library follows.
"""

from dtree.abstract_interfaces.algorithm import Algorithm, Model

__all__ = ['Algorithm', 'Model']
