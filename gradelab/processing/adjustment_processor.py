"""
Basic tonal and color adjustments for RGBA buffers.

Every pixel is processed independently in normalized [0, 1] space:
exposure, contrast, highlight/shadow split tone, whites/blacks,
temperature/tint, saturation and vibrance, then written back as 8-bit with
clamping. Alpha is never modified.
"""

import time
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..errors import ComputationError
from ..models import Adjustments, ImageBuffer, as_pixel_array
from ..utils.logging import ProcessingStats

logger = logging.getLogger(__name__)


def contrast_factor(contrast: float) -> float:
    """
    Contrast multiplier around the 0.5 pivot.

    Args:
        contrast: Contrast as a fraction (0 = unchanged)

    Returns:
        Factor that is exactly 1.0 at contrast 0

    Raises:
        ComputationError: If the denominator vanishes (contrast = 259/255)
            or the factor is not finite
    """
    denominator = 255 * (259 - contrast * 255)
    if denominator == 0:
        raise ComputationError(f"Contrast {contrast} zeroes the contrast factor denominator")
    factor = (259 * (contrast * 255 + 255)) / denominator
    if not np.isfinite(factor):
        raise ComputationError(f"Contrast {contrast} produced a non-finite factor")
    return factor


class PixelAdjustmentProcessor:
    """Applies Adjustments to interleaved 8-bit RGBA buffers."""

    def __init__(self, validate_adjustments: bool = True):
        """
        Initialize the processor.

        Args:
            validate_adjustments: Range-check adjustments before processing
        """
        self.validate_adjustments = validate_adjustments

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'PixelAdjustmentProcessor':
        section = config.get('processing', {}) or {}
        return cls(validate_adjustments=section.get('validate_adjustments', True))

    def process(self, pixels: Union[np.ndarray, bytes], width: int, height: int,
                adjustments: Adjustments) -> np.ndarray:
        """
        Apply basic adjustments to an RGBA buffer.

        Args:
            pixels: Interleaved RGBA uint8 samples, len == width * height * 4
            width: Image width
            height: Image height
            adjustments: Adjustment values in processor scale

        Returns:
            New flat uint8 buffer with the same length as the input
        """
        source = as_pixel_array(pixels, width, height)
        if self.validate_adjustments:
            adjustments.validate()

        logger.debug(f"Processing {width}x{height} buffer")

        result = source.copy()
        rgba = result.reshape(-1, 4)
        rgb = self.apply_normalized(rgba[:, :3] / 255, adjustments)

        rgba[:, :3] = np.floor(np.clip(rgb * 255, 0, 255) + 0.5).astype(np.uint8)
        return result

    def apply_normalized(self, rgb: np.ndarray, adjustments: Adjustments) -> np.ndarray:
        """
        Run the adjustment chain on normalized RGB (shape (..., 3)).

        Values are not clamped; out-of-gamut results are clipped only when
        written back to 8-bit.
        """
        with np.errstate(over='ignore', invalid='ignore'):
            out = self._chain(rgb, adjustments)
        if not np.all(np.isfinite(out)):
            raise ComputationError("Adjustment chain produced non-finite values")
        return out

    def _chain(self, rgb: np.ndarray, adjustments: Adjustments) -> np.ndarray:
        r = rgb[..., 0].astype(np.float64)
        g = rgb[..., 1].astype(np.float64)
        b = rgb[..., 2].astype(np.float64)

        # Exposure
        exposure = np.power(2.0, adjustments.exposure)
        r = r * exposure
        g = g * exposure
        b = b * exposure

        # Contrast
        factor = contrast_factor(adjustments.contrast)
        r = factor * (r - 0.5) + 0.5
        g = factor * (g - 0.5) + 0.5
        b = factor * (b - 0.5) + 0.5

        # Highlights/shadows split on current luminance
        lum = 0.299 * r + 0.587 * g + 0.114 * b
        split = np.where(
            lum > 0.5,
            1 + adjustments.highlights * (lum - 0.5) * 2,
            1 + adjustments.shadows * (0.5 - lum) * 2,
        )
        r = r * split
        g = g * split
        b = b * split

        # Whites/blacks, weighted by the red channel
        extremes = (1 + adjustments.whites * r) * (1 + adjustments.blacks * (1 - r))
        r = r * extremes
        g = g * extremes
        b = b * extremes

        # Temperature/tint
        temperature = adjustments.temperature / 100
        tint = adjustments.tint / 100
        r = r * (1 + temperature * 0.3)
        g = g * (1 + tint * 0.2)
        b = b * (1 - temperature * 0.3)

        # Saturation
        gray = 0.299 * r + 0.587 * g + 0.114 * b
        saturation = 1 + adjustments.saturation
        r = gray + (r - gray) * saturation
        g = gray + (g - gray) * saturation
        b = gray + (b - gray) * saturation

        # Vibrance: muted pixels get more of the boost
        spread = np.maximum(np.maximum(np.abs(r - gray), np.abs(g - gray)), np.abs(b - gray))
        vibrance = 1 + adjustments.vibrance * (1 - spread)
        r = gray + (r - gray) * vibrance
        g = gray + (g - gray) * vibrance
        b = gray + (b - gray) * vibrance

        return np.stack([r, g, b], axis=-1)

    def process_buffer(self, buffer: ImageBuffer, adjustments: Adjustments) -> ImageBuffer:
        return ImageBuffer(buffer.width, buffer.height,
                           self.process(buffer.pixels, buffer.width, buffer.height, adjustments))

    def process_batch(self, buffers: Sequence[Union[ImageBuffer, Tuple[Any, int, int]]],
                      adjustments: Adjustments,
                      stats: Optional[ProcessingStats] = None) -> List[Optional[ImageBuffer]]:
        """
        Process several images with the same adjustments.

        A failing image is logged and returned as None; the rest of the batch
        still runs.

        Args:
            buffers: Images to process, as ImageBuffer or (pixels, width, height)
            adjustments: Adjustments applied to every image
            stats: Optional statistics collector

        Returns:
            One result per input, None where processing failed
        """
        stats = stats or ProcessingStats()
        stats.set_total(len(buffers))
        results: List[Optional[ImageBuffer]] = []

        for index, buffer in enumerate(buffers):
            started = time.perf_counter()
            try:
                if not isinstance(buffer, ImageBuffer):
                    pixels, width, height = buffer
                    buffer = ImageBuffer(width, height, pixels)
                results.append(self.process_buffer(buffer, adjustments))
                stats.add_result(True, time.perf_counter() - started)
            except Exception as e:
                logger.warning(f"Failed to process image {index}: {e}")
                stats.add_error(index, str(e))
                stats.add_result(False, time.perf_counter() - started)
                results.append(None)

        stats.log_summary(logging.DEBUG)
        return results
