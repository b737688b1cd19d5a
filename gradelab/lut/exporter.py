"""
Asynchronous LUT export with observable progress.

The exporter owns a single state/progress pair shared by all calls:
IDLE -> EXPORTING -> DONE or FAILED -> IDLE. Running two exports on the
same instance at once is not supported; both would publish into the same
progress value. There is no cancellation; a caller that loses interest can
only discard the result.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from ..color.color_grading import ColorGradingTransform
from ..models import Adjustments, ColorGrading, HSLAdjustments
from ..utils.logging import StructuredLogger
from .models import ExportState, LUTExportOptions
from .sampler import DEFAULT_CHUNK_SIZE, LUTSampler, split_adjustments

logger = logging.getLogger(__name__)
slog = StructuredLogger(__name__)

ProgressListener = Callable[[ExportState, float], None]


class LUTExporter:
    """Samples color grading into LUT text without blocking the event loop."""

    def __init__(self, default_options: Optional[LUTExportOptions] = None,
                 progress_interval: int = DEFAULT_CHUNK_SIZE,
                 transform: Optional[ColorGradingTransform] = None):
        """
        Args:
            default_options: Options used when export_lut gets none
            progress_interval: Samples between progress updates and yields
            transform: Color transform shared by every export
        """
        self.default_options = default_options or LUTExportOptions()
        self.progress_interval = progress_interval
        self.transform = transform or ColorGradingTransform()

        self.state = ExportState.IDLE
        self.progress = 0.0
        self.error: Optional[str] = None
        self._listeners: List[ProgressListener] = []

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'LUTExporter':
        section = config.get('lut', {}) or {}
        return cls(
            default_options=LUTExportOptions.from_config(config),
            progress_interval=section.get('progress_interval', DEFAULT_CHUNK_SIZE),
        )

    @property
    def is_exporting(self) -> bool:
        return self.state is ExportState.EXPORTING

    def add_listener(self, listener: ProgressListener) -> None:
        """Register a callback receiving (state, progress) on every change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: ProgressListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def clear_error(self) -> None:
        self.error = None

    def _publish(self, state: ExportState, progress: float) -> None:
        self.state = state
        self.progress = progress
        for listener in list(self._listeners):
            try:
                listener(state, progress)
            except Exception as e:
                logger.warning(f"Progress listener error: {e}")

    async def export_lut(self, adjustments: Union[Adjustments, ColorGrading],
                         hsl_adjustments: Optional[HSLAdjustments] = None,
                         options: Optional[LUTExportOptions] = None) -> str:
        """
        Sample the grading into LUT text.

        Yields to the event loop after every ``progress_interval`` samples
        and publishes progress in percent.

        Args:
            adjustments: Full Adjustments or a bare ColorGrading
            hsl_adjustments: HSL table, applied only with options.apply_hsl
            options: Export options (defaults to ``default_options``)

        Returns:
            LUT file contents

        Raises:
            ValidationError: Unsupported format, resolution or domain
        """
        options = options or self.default_options
        if self.is_exporting:
            logger.warning("LUT export started while another export is running on this exporter")

        self.error = None
        self._publish(ExportState.EXPORTING, 0.0)
        log = slog.bind(format=getattr(options.format, 'value', options.format),
                        resolution=options.resolution)

        try:
            color_grading, hsl = split_adjustments(adjustments, hsl_adjustments)
            sampler = LUTSampler(color_grading, options, hsl=hsl,
                                 transform=self.transform,
                                 chunk_size=self.progress_interval)
            log.debug("Starting LUT export", samples=sampler.total)

            for step in sampler:
                self._publish(ExportState.EXPORTING, step.percent)
                await asyncio.sleep(0)

            output = sampler.result()
        except Exception as e:
            self.error = str(e) or e.__class__.__name__
            log.error("LUT export failed", error=self.error)
            self._publish(ExportState.FAILED, self.progress)
            raise
        else:
            log.info("LUT export complete", samples=sampler.total, chars=len(output))
            self._publish(ExportState.DONE, 100.0)
            return output
        finally:
            self._publish(ExportState.IDLE, 0.0)

    async def export_to_file(self, path: Union[str, Path],
                             adjustments: Union[Adjustments, ColorGrading],
                             hsl_adjustments: Optional[HSLAdjustments] = None,
                             options: Optional[LUTExportOptions] = None) -> Path:
        """Export and write the LUT; a missing suffix gets the format's extension."""
        options = options or self.default_options
        text = await self.export_lut(adjustments, hsl_adjustments, options)
        return save_lut(path, text, options)

    def write(self, path: Union[str, Path], text: str,
              options: Optional[LUTExportOptions] = None) -> Path:
        return save_lut(path, text, options or self.default_options)


def save_lut(path: Union[str, Path], text: str, options: LUTExportOptions) -> Path:
    """
    Write LUT text to disk.

    Args:
        path: Destination; the format's extension is added when it has none
        text: LUT contents
        options: Options the text was produced with

    Returns:
        Path written
    """
    path = Path(path)
    if not path.suffix:
        path = path.with_suffix(options.lut_format.extension)
    # Newlines are part of the format; never translate them
    with open(path, 'w', encoding='utf-8', newline='\n') as f:
        f.write(text)
    logger.info(f"Wrote {options.lut_format.value} LUT to {path}")
    return path
