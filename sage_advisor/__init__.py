"""Sage Advisor — advisory and decision-support engine."""

__version__ = "1.0.0"
