"""
Chunked 3D LUT sampling.

Walks the N x N x N input grid with red varying fastest and blue slowest,
maps every sample through the color grading transform and serializes it.
Work is split into fixed-size chunks so callers decide when to yield.
"""

import logging
from typing import Iterator, List, Optional, Union

import numpy as np

from ..color.color_grading import ColorGradingTransform
from ..errors import GradeLabError
from ..models import Adjustments, ColorGrading, HSLAdjustments
from .formats import format_header, format_samples
from .models import ExportProgress, LUTExportOptions

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1000


class LUTSampler:
    """
    Step-wise LUT generator.

    Each ``step()`` samples and formats up to ``chunk_size`` grid points and
    returns the progress so far, or None once the grid is complete.
    """

    def __init__(self, color_grading: ColorGrading, options: LUTExportOptions,
                 hsl: Optional[HSLAdjustments] = None,
                 transform: Optional[ColorGradingTransform] = None,
                 chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Args:
            color_grading: Tone-range offsets to bake into the LUT
            options: Export options; validated here, before any sampling
            hsl: HSL table, used only when ``options.apply_hsl`` is set
            transform: Color transform (default ColorGradingTransform())
            chunk_size: Samples per step
        """
        options.validate()
        if chunk_size < 1:
            raise GradeLabError(f"chunk_size must be positive, got {chunk_size}")

        self.color_grading = color_grading
        self.hsl = hsl if options.apply_hsl else None
        self.options = options
        self.transform = transform or ColorGradingTransform()
        self.chunk_size = chunk_size

        self.size = options.resolution
        self.total = self.size ** 3
        self.step_size = 1 / (self.size - 1)
        self.samples_done = 0

        self._format = options.lut_format
        self._parts: List[str] = [format_header(options)]

    @property
    def finished(self) -> bool:
        return self.samples_done >= self.total

    def grid_points(self, start: int, stop: int) -> np.ndarray:
        """Normalized input colors for flat sample indices [start, stop)."""
        index = np.arange(start, stop)
        n = self.size
        r = index % n
        g = (index // n) % n
        b = index // (n * n)
        return np.stack([r * self.step_size, g * self.step_size, b * self.step_size], axis=-1)

    def step(self) -> Optional[ExportProgress]:
        if self.finished:
            return None

        start = self.samples_done
        stop = min(start + self.chunk_size, self.total)

        output = self.transform.compose_array(self.grid_points(start, stop),
                                              self.color_grading, self.hsl)
        self._parts.append(format_samples(output, self._format))
        self.samples_done = stop

        return ExportProgress(self.samples_done, self.total)

    def __iter__(self) -> Iterator[ExportProgress]:
        while True:
            progress = self.step()
            if progress is None:
                return
            yield progress

    def result(self) -> str:
        """Complete LUT text; only available once every sample is written."""
        if not self.finished:
            raise GradeLabError(
                f"LUT sampling incomplete: {self.samples_done}/{self.total} samples"
            )
        return "".join(self._parts)

    def run(self) -> str:
        """Sample the whole grid without yielding."""
        for _ in self:
            pass
        return self.result()


def generate_lut(adjustments: Union[Adjustments, ColorGrading],
                 hsl_adjustments: Optional[HSLAdjustments] = None,
                 options: Optional[LUTExportOptions] = None) -> str:
    """
    Synchronously build LUT text.

    Args:
        adjustments: Full Adjustments (grading and HSL taken from it) or a
            bare ColorGrading
        hsl_adjustments: Overrides the HSL table from ``adjustments``
        options: Export options (defaults to 33-point CUBE)

    Returns:
        LUT file contents
    """
    color_grading, hsl = split_adjustments(adjustments, hsl_adjustments)
    sampler = LUTSampler(color_grading, options or LUTExportOptions(), hsl=hsl)
    return sampler.run()


def split_adjustments(adjustments: Union[Adjustments, ColorGrading],
                      hsl_adjustments: Optional[HSLAdjustments] = None):
    """Resolve the (ColorGrading, HSLAdjustments) pair used for sampling."""
    if isinstance(adjustments, Adjustments):
        return adjustments.color_grading, hsl_adjustments or adjustments.hsl
    if isinstance(adjustments, ColorGrading):
        return adjustments, hsl_adjustments
    raise GradeLabError(f"Expected Adjustments or ColorGrading, got {type(adjustments).__name__}")
