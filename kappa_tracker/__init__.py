"""Kappa Tracker: quest / hideout / team progress tracking"""

__version__ = "0.1.0"
