"""
Logging helpers: key/value log lines, batch counters and console setup.
"""

import json
import logging
import sys
import time
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

LOG_COLORS = {
    'DEBUG': 'cyan',
    'INFO': 'green',
    'WARNING': 'yellow',
    'ERROR': 'red',
    'CRITICAL': 'red,bg_white',
}


class StructuredLogger:
    """
    Wraps a stdlib logger and appends context as JSON.

    ``log.bind(format="CUBE").info("done", samples=4913)`` emits
    ``done | {"format": "CUBE", "samples": 4913}``.
    """

    def __init__(self, name: str, context: Optional[Dict[str, Any]] = None):
        self.logger = logging.getLogger(name)
        self.context = dict(context or {})

    def bind(self, **context) -> 'StructuredLogger':
        return StructuredLogger(self.logger.name, {**self.context, **context})

    def log(self, level: int, message: str, **fields) -> None:
        if not self.logger.isEnabledFor(level):
            return
        payload = {**self.context, **fields}
        if payload:
            message = f"{message} | {json.dumps(payload, default=str)}"
        self.logger.log(level, message)

    def debug(self, message: str, **fields):
        self.log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields):
        self.log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields):
        self.log(logging.WARNING, message, **fields)

    def error(self, message: str, **fields):
        self.log(logging.ERROR, message, **fields)


class ProcessingStats:
    """Counters for a batch of images run through the adjustment chain."""

    def __init__(self):
        self.started = time.monotonic()
        self.total_images = 0
        self.processed_images = 0
        self.failed_images = 0
        self.durations: List[float] = []
        self.errors: List[Dict[str, Any]] = []

    def set_total(self, total: int):
        self.total_images = total

    def add_result(self, success: bool, processing_time: Optional[float] = None):
        """Count one finished image; ``processing_time`` is in seconds."""
        self.processed_images += 1
        self.failed_images += 0 if success else 1
        if processing_time is not None:
            self.durations.append(processing_time)

    def add_error(self, index: int, error: str):
        self.errors.append({'index': index, 'error': error})

    def get_progress_percentage(self) -> float:
        return 100 * self.processed_images / self.total_images if self.total_images else 0.0

    def get_average_processing_time(self) -> float:
        return sum(self.durations) / len(self.durations) if self.durations else 0.0

    def get_summary(self) -> Dict[str, Any]:
        elapsed = time.monotonic() - self.started
        return {
            'total_images': self.total_images,
            'processed_images': self.processed_images,
            'succeeded_images': self.processed_images - self.failed_images,
            'failed_images': self.failed_images,
            'errors': len(self.errors),
            'elapsed_time': elapsed,
            'average_time_per_image': self.get_average_processing_time(),
        }

    def log_summary(self, level: int = logging.INFO, max_errors: int = 10):
        summary = self.get_summary()
        logger.log(level, "Batch: %d/%d images, %d failed, %.2fs",
                   summary['processed_images'], summary['total_images'],
                   summary['failed_images'], summary['elapsed_time'])
        for entry in self.errors[:max_errors]:
            logger.log(level, "  image %s: %s", entry['index'], entry['error'])
        hidden = len(self.errors) - max_errors
        if hidden > 0:
            logger.log(level, "  (%d more errors not shown)", hidden)


def _console_formatter(fmt: str, color: bool) -> logging.Formatter:
    if color and sys.stdout.isatty():
        try:
            import colorlog
        except ImportError:
            return logging.Formatter(fmt)
        colored = '%(log_color)s' + fmt.replace('%(message)s', '%(reset)s%(message)s')
        return colorlog.ColoredFormatter(colored, log_colors=LOG_COLORS)
    return logging.Formatter(fmt)


def setup_console_logging(level: str = "INFO", color: bool = True,
                          fmt: str = DEFAULT_FORMAT) -> logging.Handler:
    """
    Attach a stdout handler to the root logger.

    Args:
        level: Level name for the root logger
        color: Use colorlog when installed and stdout is a terminal
        fmt: Record format

    Returns:
        The installed handler, so callers can remove it again
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_console_formatter(fmt, color))

    root = logging.getLogger()
    root.setLevel(logging.getLevelName(level.upper()))
    root.addHandler(handler)
    return handler


def setup_logging_from_config(config: Dict[str, Any]) -> logging.Handler:
    settings = config.get('logging', {}) or {}
    return setup_console_logging(level=settings.get('level', 'INFO'),
                                 color=settings.get('color', True),
                                 fmt=settings.get('format', DEFAULT_FORMAT))
