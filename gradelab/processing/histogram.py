"""
Channel histograms for RGBA buffers.
"""

import logging
from typing import Union

import numpy as np

from ..models import Histogram, ImageBuffer, as_pixel_array

logger = logging.getLogger(__name__)

BINS = 256


class HistogramGenerator:
    """Computes 256-bin red, green, blue and luminance histograms."""

    def generate(self, pixels: Union[np.ndarray, bytes], width: int, height: int) -> Histogram:
        """
        Count channel values for every pixel.

        Luminance is the Rec.601 weighted sum of the 8-bit channels, rounded
        half up and capped at 255. Alpha is ignored.

        Args:
            pixels: Interleaved RGBA uint8 samples
            width: Image width
            height: Image height

        Returns:
            Histogram whose channels each sum to width * height
        """
        rgba = as_pixel_array(pixels, width, height).reshape(-1, 4)
        r = rgba[:, 0]
        g = rgba[:, 1]
        b = rgba[:, 2]

        lum = np.floor(0.299 * r + 0.587 * g + 0.114 * b + 0.5).astype(np.int64)
        lum = np.minimum(lum, BINS - 1)

        histogram = Histogram(
            red=np.bincount(r, minlength=BINS),
            green=np.bincount(g, minlength=BINS),
            blue=np.bincount(b, minlength=BINS),
            luminance=np.bincount(lum, minlength=BINS),
        )
        logger.debug(f"Generated histogram for {width}x{height} buffer")
        return histogram

    def generate_for(self, buffer: ImageBuffer) -> Histogram:
        return self.generate(buffer.pixels, buffer.width, buffer.height)
