"""
GradeLab: parametric photo color adjustments and 3D LUT export

Applies tonal, color balance, HSL and tone-range color grading adjustments
to RGBA pixel buffers, and bakes the same grading into CUBE, 3DL and CSP
lookup tables.
"""

__version__ = "0.1.0"

# Core imports for easy access
from .config import load_config
from .models import Adjustments, ColorGrading, HSLAdjustments, ImageBuffer
from .processing import PixelAdjustmentProcessor, HistogramGenerator
from .lut import LUTExporter, LUTExportOptions, generate_lut

__all__ = [
    "load_config",
    "Adjustments",
    "ColorGrading",
    "HSLAdjustments",
    "ImageBuffer",
    "PixelAdjustmentProcessor",
    "HistogramGenerator",
    "LUTExporter",
    "LUTExportOptions",
    "generate_lut",
]
