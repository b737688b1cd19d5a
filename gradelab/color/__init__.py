"""
Color modules for GradeLab

Includes the color wheel transform, tone range classification, HSL
adjustments and tone-range color grading.
"""

from .wheel import (
    ColorWheelPoint, ColorWheelState, cartesian_to_polar, polar_to_cartesian, hue_to_rgb
)
from .tone_range import ToneRangeClassifier, luminance
from .hsl import HSLProcessor, ColorRange, ColorRangeSet, apply_hsl, rgb_to_hsl, hsl_to_rgb
from .color_grading import ColorGradingTransform

__all__ = [
    "ColorWheelPoint",
    "ColorWheelState",
    "cartesian_to_polar",
    "polar_to_cartesian",
    "hue_to_rgb",
    "ToneRangeClassifier",
    "luminance",
    "HSLProcessor",
    "ColorRange",
    "ColorRangeSet",
    "apply_hsl",
    "rgb_to_hsl",
    "hsl_to_rgb",
    "ColorGradingTransform",
]
