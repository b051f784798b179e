"""Reporting utilities for AnnealNet."""

from .artifacts import write_manifest
from .metrics import CsvSink, HistoryCapture, JsonlSink
from .plots import PlotAdapter
from .summary import write_summary

__all__ = [
    "CsvSink",
    "HistoryCapture",
    "JsonlSink",
    "PlotAdapter",
    "write_manifest",
    "write_summary",
]
