"""
Tone range classification.

Buckets a normalized RGB triple into shadows, midtones or highlights by
Rec.601 luminance. Thresholds are hard cuts with no blending, so graded
output bands at the 0.33 and 0.67 boundaries.
"""

from typing import Union

import numpy as np

from ..models import ToneRange

SHADOW_THRESHOLD = 0.33
HIGHLIGHT_THRESHOLD = 0.67

# Integer codes used by the vectorized classifier
SHADOWS_CODE = 0
MIDTONES_CODE = 1
HIGHLIGHTS_CODE = 2

TONE_RANGE_CODES = (ToneRange.SHADOWS, ToneRange.MIDTONES, ToneRange.HIGHLIGHTS)

Number = Union[float, np.ndarray]


def luminance(r: Number, g: Number, b: Number) -> Number:
    """Rec.601 luminance of normalized channels (scalars or arrays)."""
    return 0.299 * r + 0.587 * g + 0.114 * b


class ToneRangeClassifier:
    """Classifies luminance into one of three tone ranges."""

    def __init__(self, shadow_threshold: float = SHADOW_THRESHOLD,
                 highlight_threshold: float = HIGHLIGHT_THRESHOLD):
        self.shadow_threshold = shadow_threshold
        self.highlight_threshold = highlight_threshold

    def classify_luminance(self, lum: float) -> ToneRange:
        if lum < self.shadow_threshold:
            return ToneRange.SHADOWS
        elif lum < self.highlight_threshold:
            return ToneRange.MIDTONES
        return ToneRange.HIGHLIGHTS

    def classify(self, r: float, g: float, b: float) -> ToneRange:
        """Tone range of a normalized RGB triple."""
        return self.classify_luminance(luminance(r, g, b))

    def classify_array(self, rgb: np.ndarray) -> np.ndarray:
        """
        Vectorized classification.

        Args:
            rgb: Array with normalized RGB in the last axis

        Returns:
            int8 array of tone range codes (0 shadows, 1 midtones, 2 highlights)
        """
        lum = luminance(rgb[..., 0], rgb[..., 1], rgb[..., 2])
        codes = np.full(lum.shape, HIGHLIGHTS_CODE, dtype=np.int8)
        codes[lum < self.highlight_threshold] = MIDTONES_CODE
        codes[lum < self.shadow_threshold] = SHADOWS_CODE
        return codes


default_classifier = ToneRangeClassifier()


def classify(r: float, g: float, b: float) -> ToneRange:
    return default_classifier.classify(r, g, b)
