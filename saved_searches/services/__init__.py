"""Background services."""

from .periodic_check import PeriodicNewResultsCheck

__all__ = ["PeriodicNewResultsCheck"]
