"""
Tone-range color grading.

Adds a shadows, midtones or highlights RGB offset to each normalized color
depending on the luminance of the input color, then clamps to [0, 1].
"""

import logging
from typing import Optional, Tuple, Union

import numpy as np

from ..models import ColorGrading, HSLAdjustments, ImageBuffer, ToneRange, as_pixel_array
from .hsl import apply_hsl, apply_hsl_array
from .tone_range import TONE_RANGE_CODES, ToneRangeClassifier, default_classifier

logger = logging.getLogger(__name__)


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


class ColorGradingTransform:
    """
    Pure per-color mapping built from tone-range offsets.

    An optional HSL table runs first when supplied; without it the mapping
    is grading only.
    """

    def __init__(self, classifier: Optional[ToneRangeClassifier] = None):
        self.classifier = classifier or default_classifier

    def apply(self, r: float, g: float, b: float,
              color_grading: ColorGrading) -> Tuple[float, float, float]:
        """
        Grade one normalized color.

        Args:
            r, g, b: Normalized input channels
            color_grading: Offsets per tone range (-100 to +100)

        Returns:
            Graded (r, g, b) clamped to [0, 1]
        """
        tone_range = self.classifier.classify(r, g, b)
        offset = color_grading.offset_for(tone_range)

        return (
            _clamp01(r + offset.red / 100),
            _clamp01(g + offset.green / 100),
            _clamp01(b + offset.blue / 100),
        )

    def apply_array(self, rgb: np.ndarray, color_grading: ColorGrading) -> np.ndarray:
        """Vectorized ``apply`` for normalized RGB in the last axis."""
        codes = self.classifier.classify_array(rgb)
        offsets = np.array(
            [color_grading.offset_for(t).as_normalized() for t in TONE_RANGE_CODES],
            dtype=np.float64
        )
        return np.clip(rgb + offsets[codes], 0.0, 1.0)

    def compose(self, r: float, g: float, b: float, color_grading: ColorGrading,
                hsl: Optional[HSLAdjustments] = None) -> Tuple[float, float, float]:
        """HSL shift (when given) followed by tone-range grading."""
        if hsl is not None:
            r, g, b = apply_hsl(r, g, b, hsl)
        return self.apply(r, g, b, color_grading)

    def compose_array(self, rgb: np.ndarray, color_grading: ColorGrading,
                      hsl: Optional[HSLAdjustments] = None) -> np.ndarray:
        if hsl is not None:
            rgb = apply_hsl_array(rgb, hsl)
        return self.apply_array(rgb, color_grading)

    def tone_range_of(self, r: float, g: float, b: float) -> ToneRange:
        return self.classifier.classify(r, g, b)

    def process(self, pixels: Union[np.ndarray, bytes], width: int, height: int,
                color_grading: ColorGrading,
                hsl: Optional[HSLAdjustments] = None) -> np.ndarray:
        """
        Grade an RGBA buffer.

        Args:
            pixels: Interleaved RGBA uint8 samples
            width: Image width
            height: Image height
            color_grading: Offsets per tone range
            hsl: Optional HSL table applied before grading

        Returns:
            New flat uint8 buffer; alpha is copied unchanged
        """
        result = as_pixel_array(pixels, width, height).copy()
        rgba = result.reshape(-1, 4)
        graded = self.compose_array(rgba[:, :3] / 255, color_grading, hsl)
        rgba[:, :3] = np.floor(graded * 255 + 0.5).astype(np.uint8)
        logger.debug(f"Graded {width}x{height} buffer")
        return result

    def process_buffer(self, buffer: ImageBuffer, color_grading: ColorGrading,
                       hsl: Optional[HSLAdjustments] = None) -> ImageBuffer:
        return ImageBuffer(buffer.width, buffer.height,
                           self.process(buffer.pixels, buffer.width, buffer.height,
                                        color_grading, hsl))
