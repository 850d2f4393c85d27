"""Pixel classification, diff rendering and mismatch metrics."""

from shotdiff.compare.classifier import classify
from shotdiff.compare.metrics import ComparisonMetrics, aggregate
from shotdiff.compare.options import ColorScheme, CompareOptions
from shotdiff.compare.render import render

__all__ = [
    "ColorScheme",
    "CompareOptions",
    "ComparisonMetrics",
    "aggregate",
    "classify",
    "render",
]
