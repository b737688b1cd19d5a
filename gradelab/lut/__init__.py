"""
3D LUT export for GradeLab.
"""

from .models import (
    LUTFormat, LUTDomain, LUTExportOptions, ExportState, ExportProgress,
    SUPPORTED_RESOLUTIONS,
)
from .formats import to_fixed, format_number, format_header, format_samples
from .sampler import LUTSampler, generate_lut
from .exporter import LUTExporter, save_lut

__all__ = [
    'LUTFormat',
    'LUTDomain',
    'LUTExportOptions',
    'ExportState',
    'ExportProgress',
    'SUPPORTED_RESOLUTIONS',
    'to_fixed',
    'format_number',
    'format_header',
    'format_samples',
    'LUTSampler',
    'generate_lut',
    'LUTExporter',
    'save_lut',
]
