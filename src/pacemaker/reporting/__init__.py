"""Run history reports."""

from pacemaker.reporting.formatter import HistoryFormatter

__all__ = ["HistoryFormatter"]
