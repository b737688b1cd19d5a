"""
Color wheel coordinate transforms.

Converts between the cartesian position of a wheel handle and its polar
(hue, saturation) reading. Hue 0 sits at the top of the wheel and grows
clockwise in screen coordinates; saturation is the distance from the center
as a percentage of the wheel radius.
"""

import math
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from ..models import ColorGrading, RGBOffset, ToneRange

logger = logging.getLogger(__name__)


def cartesian_to_polar(x: float, y: float, radius: float) -> Tuple[float, float]:
    """
    Convert a handle position to (hue, saturation).

    Args:
        x: Horizontal offset from the wheel center
        y: Vertical offset from the wheel center (screen coordinates)
        radius: Wheel radius in the same units as x and y

    Returns:
        Tuple of hue in [0, 360) and saturation in [0, 100]
    """
    distance = math.sqrt(x * x + y * y)
    angle = math.atan2(y, x) * (180 / math.pi)

    hue = (angle + 90 + 360) % 360
    saturation = min((distance / radius) * 100, 100)
    return hue, saturation


def polar_to_cartesian(hue: float, saturation: float, radius: float) -> Tuple[float, float]:
    """Convert (hue, saturation) back to a handle position."""
    angle = (hue - 90) * (math.pi / 180)
    distance = (saturation / 100) * radius
    return distance * math.cos(angle), distance * math.sin(angle)


def hue_to_rgb(hue: float) -> Tuple[int, int, int]:
    """Fully saturated 8-bit RGB for a hue in degrees."""
    h = (hue % 360) / 60
    x = 1 - abs((h % 2) - 1)

    if h < 1:
        r, g, b = 1, x, 0
    elif h < 2:
        r, g, b = x, 1, 0
    elif h < 3:
        r, g, b = 0, 1, x
    elif h < 4:
        r, g, b = 0, x, 1
    elif h < 5:
        r, g, b = x, 0, 1
    else:
        r, g, b = 1, 0, x

    return tuple(int(math.floor(c * 255 + 0.5)) for c in (r, g, b))


@dataclass
class ColorWheelPoint:
    """Handle position on one wheel, in both cartesian and polar form."""
    x: float = 0.0
    y: float = 0.0
    hue: float = 0.0
    saturation: float = 0.0

    @classmethod
    def from_cartesian(cls, x: float, y: float, radius: float) -> 'ColorWheelPoint':
        distance = math.hypot(x, y)
        if distance > radius:
            # Keep the handle on the rim
            scale = radius / distance
            x, y = x * scale, y * scale
        hue, saturation = cartesian_to_polar(x, y, radius)
        return cls(x=x, y=y, hue=hue, saturation=saturation)

    @classmethod
    def from_polar(cls, hue: float, saturation: float, radius: float) -> 'ColorWheelPoint':
        saturation = max(0.0, min(saturation, 100.0))
        hue = hue % 360
        x, y = polar_to_cartesian(hue, saturation, radius)
        return cls(x=x, y=y, hue=hue, saturation=saturation)

    def to_offset(self) -> RGBOffset:
        """
        Neutral-preserving RGB offset for this wheel position.

        The wheel hue picks a direction away from gray; saturation scales it
        so that the rim reaches roughly +/-67 on the dominant channel.
        """
        if self.saturation == 0:
            return RGBOffset()
        rgb = [c / 255 for c in hue_to_rgb(self.hue)]
        mean = sum(rgb) / 3
        red, green, blue = ((c - mean) * self.saturation for c in rgb)
        return RGBOffset(red=red, green=green, blue=blue)


@dataclass
class ColorWheelState:
    """Three grading wheels plus the one currently being edited."""
    shadows: ColorWheelPoint = field(default_factory=ColorWheelPoint)
    midtones: ColorWheelPoint = field(default_factory=ColorWheelPoint)
    highlights: ColorWheelPoint = field(default_factory=ColorWheelPoint)
    active_wheel: ToneRange = ToneRange.MIDTONES
    radius: float = 100.0

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'ColorWheelState':
        section = config.get('color_wheel', {}) or {}
        return cls(radius=section.get('radius', 100.0))

    def point(self, wheel: ToneRange) -> ColorWheelPoint:
        return getattr(self, wheel.value)

    def set_active(self, wheel: ToneRange) -> None:
        self.active_wheel = wheel

    def update_point(self, wheel: ToneRange, x: float, y: float,
                     radius: Optional[float] = None) -> ColorWheelPoint:
        """Move a wheel handle and recompute its polar reading."""
        point = ColorWheelPoint.from_cartesian(x, y, radius or self.radius)
        setattr(self, wheel.value, point)
        logger.debug(f"Wheel {wheel.value} -> hue={point.hue:.1f} sat={point.saturation:.1f}")
        return point

    def reset(self, wheel: Optional[ToneRange] = None) -> None:
        """Reset one wheel, or all three when no wheel is given."""
        wheels = [wheel] if wheel else list(ToneRange)
        for w in wheels:
            setattr(self, w.value, ColorWheelPoint())

    def to_color_grading(self) -> ColorGrading:
        return ColorGrading(**{w.value: self.point(w).to_offset() for w in ToneRange})

    def to_dict(self) -> Dict[str, Any]:
        data = {w.value: vars(self.point(w)).copy() for w in ToneRange}
        data['active_wheel'] = self.active_wheel.value
        return data
