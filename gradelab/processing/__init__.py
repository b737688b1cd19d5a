"""
Pixel processing modules for GradeLab

Includes basic tonal/color adjustments, histograms and edit history.
"""

from .adjustment_processor import PixelAdjustmentProcessor, contrast_factor
from .histogram import HistogramGenerator
from .history import HistoryStack, HistoryAction, HistorySnapshot

__all__ = [
    "PixelAdjustmentProcessor",
    "contrast_factor",
    "HistogramGenerator",
    "HistoryStack",
    "HistoryAction",
    "HistorySnapshot",
]
