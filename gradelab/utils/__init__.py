"""Utility modules for GradeLab."""

from .logging import (
    StructuredLogger, ProcessingStats, setup_console_logging, setup_logging_from_config,
)

__all__ = ['StructuredLogger', 'ProcessingStats', 'setup_console_logging', 'setup_logging_from_config']
