"""
Core data models for GradeLab.

Adjustment values, tone-range color grading offsets, per-hue HSL shifts,
RGBA image buffers and histograms shared by the processing, color and LUT
modules.
"""

import copy
from dataclasses import dataclass, field, asdict, fields
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple, Union

import numpy as np

from .errors import ValidationError


class ToneRange(Enum):
    """Luminance buckets used by color grading and tone classification."""
    SHADOWS = "shadows"
    MIDTONES = "midtones"
    HIGHLIGHTS = "highlights"


# Hue ranges in the order the HSL table is indexed
HSL_RANGE_NAMES = (
    "red", "orange", "yellow", "green", "aqua", "blue", "purple", "magenta",
)

# Processor-scale limits. Fractions in [-1, 1] keep the contrast factor
# denominator 255 * (259 - contrast * 255) strictly positive.
ADJUSTMENT_RANGES: Dict[str, Tuple[float, float]] = {
    'exposure': (-5.0, 5.0),       # stops
    'contrast': (-1.0, 1.0),
    'highlights': (-1.0, 1.0),
    'shadows': (-1.0, 1.0),
    'whites': (-1.0, 1.0),
    'blacks': (-1.0, 1.0),
    'saturation': (-1.0, 1.0),
    'vibrance': (-1.0, 1.0),
    'temperature': (-100.0, 100.0),
    'tint': (-100.0, 100.0),
    'clarity': (-1.0, 1.0),
    'dehaze': (-1.0, 1.0),
    'vignette': (-1.0, 1.0),
}

# Fields whose UI slider runs -100..100 but the processor consumes as a fraction
_FRACTION_FIELDS = (
    'contrast', 'highlights', 'shadows', 'whites', 'blacks', 'saturation',
    'vibrance', 'clarity', 'dehaze', 'vignette',
)

GRADING_OFFSET_RANGE = (-100.0, 100.0)
HSL_HUE_RANGE = (-180.0, 180.0)
HSL_AMOUNT_RANGE = (-100.0, 100.0)


def _check_range(name: str, value: float, bounds: Tuple[float, float]) -> None:
    low, high = bounds
    if not np.isfinite(value):
        raise ValidationError(f"{name} must be a finite number, got {value}")
    if value < low or value > high:
        raise ValidationError(f"{name}={value} is outside [{low}, {high}]")


@dataclass
class RGBOffset:
    """Per-channel offset applied to one tone range (-100 to +100)."""
    red: float = 0.0
    green: float = 0.0
    blue: float = 0.0

    def is_zero(self) -> bool:
        return self.red == 0 and self.green == 0 and self.blue == 0

    def as_normalized(self) -> Tuple[float, float, float]:
        """Offsets scaled to normalized [0, 1] channel units."""
        return self.red / 100, self.green / 100, self.blue / 100


@dataclass
class ColorGrading:
    """Independent RGB offsets for shadows, midtones and highlights."""
    shadows: RGBOffset = field(default_factory=RGBOffset)
    midtones: RGBOffset = field(default_factory=RGBOffset)
    highlights: RGBOffset = field(default_factory=RGBOffset)

    def offset_for(self, tone_range: ToneRange) -> RGBOffset:
        """Select the offset record for a tone range."""
        if tone_range is ToneRange.SHADOWS:
            return self.shadows
        elif tone_range is ToneRange.MIDTONES:
            return self.midtones
        elif tone_range is ToneRange.HIGHLIGHTS:
            return self.highlights
        raise ValidationError(f"Unknown tone range: {tone_range!r}")

    def is_identity(self) -> bool:
        return all(offset.is_zero() for offset in (self.shadows, self.midtones, self.highlights))

    def validate(self) -> None:
        for tone_range in ToneRange:
            offset = self.offset_for(tone_range)
            for channel in ('red', 'green', 'blue'):
                _check_range(f"color_grading.{tone_range.value}.{channel}",
                             getattr(offset, channel), GRADING_OFFSET_RANGE)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ColorGrading':
        data = data or {}
        return cls(**{
            tone_range.value: RGBOffset(**data.get(tone_range.value, {}))
            for tone_range in ToneRange
        })


@dataclass
class HSLColor:
    """Hue (degrees), saturation and lightness shift for one hue range."""
    hue: float = 0.0         # -180 to +180
    saturation: float = 0.0  # -100 to +100
    lightness: float = 0.0   # -100 to +100

    def is_zero(self) -> bool:
        return self.hue == 0 and self.saturation == 0 and self.lightness == 0


@dataclass
class HSLAdjustments:
    """Secondary adjustments for the 8 fixed hue ranges."""
    red: HSLColor = field(default_factory=HSLColor)
    orange: HSLColor = field(default_factory=HSLColor)
    yellow: HSLColor = field(default_factory=HSLColor)
    green: HSLColor = field(default_factory=HSLColor)
    aqua: HSLColor = field(default_factory=HSLColor)
    blue: HSLColor = field(default_factory=HSLColor)
    purple: HSLColor = field(default_factory=HSLColor)
    magenta: HSLColor = field(default_factory=HSLColor)

    def for_range(self, name: str) -> HSLColor:
        if name not in HSL_RANGE_NAMES:
            raise ValidationError(f"Unknown hue range: {name}")
        return getattr(self, name)

    def __iter__(self) -> Iterator[Tuple[str, HSLColor]]:
        for name in HSL_RANGE_NAMES:
            yield name, getattr(self, name)

    def as_table(self) -> np.ndarray:
        """(8, 3) array of hue, saturation, lightness rows in range order."""
        return np.array(
            [[c.hue, c.saturation, c.lightness] for _, c in self],
            dtype=np.float64
        )

    def is_identity(self) -> bool:
        return all(color.is_zero() for _, color in self)

    def validate(self) -> None:
        for name, color in self:
            _check_range(f"hsl.{name}.hue", color.hue, HSL_HUE_RANGE)
            _check_range(f"hsl.{name}.saturation", color.saturation, HSL_AMOUNT_RANGE)
            _check_range(f"hsl.{name}.lightness", color.lightness, HSL_AMOUNT_RANGE)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'HSLAdjustments':
        data = data or {}
        return cls(**{name: HSLColor(**data.get(name, {})) for name in HSL_RANGE_NAMES})


@dataclass
class Adjustments:
    """
    Tonal and color adjustments for one image.

    All values default to 0, which is the identity transform. Values are
    stored in processor scale: exposure in stops, temperature and tint on
    -100..100, everything else as a fraction in -1..1. Use ``from_ui`` to
    convert slider values.
    """
    exposure: float = 0.0
    contrast: float = 0.0
    highlights: float = 0.0
    shadows: float = 0.0
    whites: float = 0.0
    blacks: float = 0.0
    saturation: float = 0.0
    vibrance: float = 0.0
    temperature: float = 0.0
    tint: float = 0.0
    clarity: float = 0.0
    dehaze: float = 0.0
    vignette: float = 0.0

    hsl: HSLAdjustments = field(default_factory=HSLAdjustments)
    color_grading: ColorGrading = field(default_factory=ColorGrading)

    def copy(self) -> 'Adjustments':
        """Deep copy that shares no mutable state with this instance."""
        return copy.deepcopy(self)

    def is_identity(self) -> bool:
        basic = all(getattr(self, name) == 0 for name in ADJUSTMENT_RANGES)
        return basic and self.hsl.is_identity() and self.color_grading.is_identity()

    def validate(self) -> None:
        """
        Check every value against its declared range.

        Raises:
            ValidationError: On the first out-of-range or non-finite value
        """
        for name, bounds in ADJUSTMENT_RANGES.items():
            _check_range(name, getattr(self, name), bounds)
        self.hsl.validate()
        self.color_grading.validate()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'Adjustments':
        data = dict(data or {})
        hsl = HSLAdjustments.from_dict(data.pop('hsl', None))
        grading = ColorGrading.from_dict(data.pop('color_grading', None))
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValidationError(f"Unknown adjustment fields: {sorted(unknown)}")
        return cls(hsl=hsl, color_grading=grading, **data)

    @classmethod
    def from_ui(cls, values: Dict[str, Any]) -> 'Adjustments':
        """
        Build adjustments from UI slider values.

        Args:
            values: Mapping with -100..100 sliders for the fractional fields,
                stops for exposure and -100..100 for temperature/tint. HSL and
                color grading tables are passed through unchanged.

        Returns:
            Adjustments in processor scale
        """
        data = copy.deepcopy(dict(values))
        for name in _FRACTION_FIELDS:
            if name in data:
                data[name] = float(data[name]) / 100.0
        return cls.from_dict(data)


@dataclass
class ImageBuffer:
    """Interleaved 8-bit RGBA pixels, row-major."""
    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self):
        self.pixels = as_pixel_array(self.pixels, self.width, self.height)

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def as_array(self) -> np.ndarray:
        """View of the pixels shaped (height, width, 4)."""
        return self.pixels.reshape(self.height, self.width, 4)

    def copy(self) -> 'ImageBuffer':
        return ImageBuffer(self.width, self.height, self.pixels.copy())

    @classmethod
    def from_array(cls, array: np.ndarray) -> 'ImageBuffer':
        """Wrap an (H, W, 4) uint8 array."""
        if array.ndim != 3 or array.shape[2] != 4:
            raise ValidationError(f"Expected (H, W, 4) RGBA array, got shape {array.shape}")
        height, width = array.shape[:2]
        return cls(width, height, np.ascontiguousarray(array).reshape(-1))


def as_pixel_array(pixels: Union[np.ndarray, bytes, bytearray],
                   width: int, height: int) -> np.ndarray:
    """
    Validate and flatten an RGBA sample buffer.

    Args:
        pixels: uint8 array (any shape) or raw bytes
        width: Image width in pixels
        height: Image height in pixels

    Returns:
        Flat uint8 array of length width * height * 4
    """
    if width <= 0 or height <= 0:
        raise ValidationError(f"Invalid dimensions {width}x{height}")

    if isinstance(pixels, (bytes, bytearray, memoryview)):
        array = np.frombuffer(pixels, dtype=np.uint8)
    else:
        array = np.asarray(pixels)
        if array.dtype != np.uint8:
            raise ValidationError(f"Expected uint8 samples, got {array.dtype}")
        array = array.reshape(-1)

    expected = width * height * 4
    if array.size != expected:
        raise ValidationError(
            f"Buffer holds {array.size} samples, expected {expected} for {width}x{height} RGBA"
        )
    return array


@dataclass
class Histogram:
    """256-bin counts for the red, green, blue and luminance channels."""
    red: np.ndarray
    green: np.ndarray
    blue: np.ndarray
    luminance: np.ndarray

    def total(self) -> int:
        """Number of pixels counted (identical for every channel)."""
        return int(self.red.sum())

    def to_dict(self) -> Dict[str, list]:
        return {
            'red': self.red.tolist(),
            'green': self.green.tolist(),
            'blue': self.blue.tolist(),
            'luminance': self.luminance.tolist(),
        }
