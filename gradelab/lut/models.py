"""
Data models for LUT export.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union

from ..errors import ValidationError


class LUTFormat(Enum):
    """Supported 3D LUT text formats."""
    CUBE = "CUBE"
    THREE_DL = "3DL"
    CSP = "CSP"

    @property
    def extension(self) -> str:
        return "." + self.value.lower()

    @classmethod
    def parse(cls, value: Union['LUTFormat', str]) -> 'LUTFormat':
        """Accept an enum member or a case-insensitive format name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value == value.strip().upper():
                    return member
        raise ValidationError(f"Unsupported LUT format: {value!r}")


SUPPORTED_RESOLUTIONS = (17, 33, 65)


class ExportState(Enum):
    """Lifecycle of a LUT export."""
    IDLE = "idle"
    EXPORTING = "exporting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class LUTDomain:
    """Input range the LUT is defined over."""
    min: float = 0.0
    max: float = 1.0


@dataclass
class LUTExportOptions:
    """Options controlling LUT sampling and serialization."""
    format: Union[LUTFormat, str] = LUTFormat.CUBE
    resolution: int = 33
    title: str = "GradeLab LUT"
    description: str = ""
    domain: LUTDomain = field(default_factory=LUTDomain)
    apply_hsl: bool = False  # run the HSL table before tone-range grading

    def __post_init__(self):
        if isinstance(self.domain, dict):
            self.domain = LUTDomain(**self.domain)
        try:
            self.format = LUTFormat.parse(self.format)
        except ValidationError:
            # Reported by validate() before any sampling starts
            pass

    @property
    def lut_format(self) -> LUTFormat:
        return LUTFormat.parse(self.format)

    def validate(self) -> None:
        """
        Raises:
            ValidationError: If the format, resolution or domain is unsupported
        """
        LUTFormat.parse(self.format)
        if isinstance(self.resolution, bool) or self.resolution not in SUPPORTED_RESOLUTIONS:
            raise ValidationError(
                f"Unsupported LUT resolution {self.resolution!r}; expected one of {SUPPORTED_RESOLUTIONS}"
            )
        if not (math.isfinite(self.domain.min) and math.isfinite(self.domain.max)):
            raise ValidationError("LUT domain bounds must be finite")
        if self.domain.min >= self.domain.max:
            raise ValidationError(
                f"LUT domain min ({self.domain.min}) must be below max ({self.domain.max})"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LUTExportOptions':
        return cls(**data)

    @classmethod
    def from_config(cls, config: Dict[str, Any],
                    overrides: Optional[Dict[str, Any]] = None) -> 'LUTExportOptions':
        """Build options from the ``lut`` config section plus explicit overrides."""
        section = dict(config.get('lut', {}) or {})
        section.pop('progress_interval', None)
        section.update(overrides or {})
        return cls.from_dict(section)


@dataclass(frozen=True)
class ExportProgress:
    """Samples written so far out of the full grid."""
    samples_done: int
    total: int

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 0.0
        return self.samples_done / self.total * 100

    @property
    def finished(self) -> bool:
        return self.samples_done >= self.total
