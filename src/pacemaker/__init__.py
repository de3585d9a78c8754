"""Pacemaker — run tracking and real-time pace feedback."""

__version__ = "0.1.0"
