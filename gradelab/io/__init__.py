"""
Image input for GradeLab.
"""

from .decoder import ImageDecoder, RAW_FORMATS, is_raw_format

__all__ = ['ImageDecoder', 'RAW_FORMATS', 'is_raw_format']
