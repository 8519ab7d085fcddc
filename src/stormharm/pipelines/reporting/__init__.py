"""Reporting pipeline — harm totals per event category."""

from .pipeline import create_pipeline

__all__ = ["create_pipeline"]
