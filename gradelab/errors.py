"""
Exception hierarchy for GradeLab
"""


class GradeLabError(Exception):
    """Base exception for GradeLab operations."""
    pass


class ValidationError(GradeLabError, ValueError):
    """Raised when options, buffers or adjustment values are malformed."""
    pass


class ComputationError(GradeLabError, ArithmeticError):
    """Raised when a numeric transform cannot produce finite values."""
    pass


class PresetError(GradeLabError):
    """Base exception for preset store operations."""
    pass


class PresetNotFoundError(PresetError, KeyError):
    """Raised when a preset id is not in the store."""
    pass


class BuiltInPresetError(PresetError):
    """Raised when attempting to modify or delete a built-in preset."""
    pass


class DecodeError(GradeLabError):
    """Raised when image bytes cannot be decoded into an RGBA buffer."""
    pass
