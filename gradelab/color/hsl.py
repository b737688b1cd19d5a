"""
Per-hue-range HSL adjustments.

Pixels are converted to HSL, assigned to one of 8 fixed hue ranges and
shifted by that range's hue/saturation/lightness amounts before converting
back to RGB. Ranges are half-open: red covers [345, 15), orange [15, 45) and
so on around the circle.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple, Union

import numpy as np

from ..errors import ValidationError
from ..models import HSL_RANGE_NAMES, HSLAdjustments, ImageBuffer, as_pixel_array

logger = logging.getLogger(__name__)

# Upper bounds of red..purple; hues at or above 345 wrap back to red
_RANGE_BOUNDS = np.array([15.0, 45.0, 75.0, 165.0, 195.0, 255.0, 285.0, 345.0])


def rgb_to_hsl(r: float, g: float, b: float) -> Tuple[float, float, float]:
    """Normalized RGB to (hue degrees, saturation 0-1, lightness 0-1)."""
    mx = max(r, g, b)
    mn = min(r, g, b)
    delta = mx - mn
    l = (mx + mn) / 2

    if delta == 0:
        return 0.0, 0.0, l

    s = delta / (2 - mx - mn) if l > 0.5 else delta / (mx + mn)

    if mx == r:
        h = ((g - b) / delta + (6 if g < b else 0)) * 60
    elif mx == g:
        h = ((b - r) / delta + 2) * 60
    else:
        h = ((r - g) / delta + 4) * 60
    return h, s, l


def _hue_channel(p, q, t):
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def hsl_to_rgb(h: float, s: float, l: float) -> Tuple[float, float, float]:
    """(hue degrees, saturation 0-1, lightness 0-1) to normalized RGB."""
    if s == 0:
        return l, l, l

    q = l * (1 + s) if l < 0.5 else l + s - l * s
    p = 2 * l - q
    h_norm = h / 360
    return (
        _hue_channel(p, q, h_norm + 1 / 3),
        _hue_channel(p, q, h_norm),
        _hue_channel(p, q, h_norm - 1 / 3),
    )


def hue_range_index(hue: Union[float, np.ndarray]) -> Union[int, np.ndarray]:
    """Index into HSL_RANGE_NAMES for a hue (scalar or array)."""
    index = np.searchsorted(_RANGE_BOUNDS, np.mod(hue, 360.0), side='right')
    index = np.where(index == len(_RANGE_BOUNDS), 0, index)
    if np.ndim(index) == 0:
        return int(index)
    return index


def hue_range_name(hue: float) -> str:
    return HSL_RANGE_NAMES[hue_range_index(hue)]


def apply_hsl(r: float, g: float, b: float,
              hsl: HSLAdjustments) -> Tuple[float, float, float]:
    """
    Apply the HSL table to one normalized RGB triple.

    Returns:
        Adjusted triple clamped to [0, 1]
    """
    h, s, l = rgb_to_hsl(r, g, b)
    adjustment = hsl.for_range(hue_range_name(h))

    new_h = (h + adjustment.hue) % 360
    new_s = min(max(s + adjustment.saturation / 100, 0.0), 1.0)
    new_l = min(max(l + adjustment.lightness / 100, 0.0), 1.0)

    out = hsl_to_rgb(new_h, new_s, new_l)
    return tuple(min(max(c, 0.0), 1.0) for c in out)


def rgb_to_hsl_array(rgb: np.ndarray) -> np.ndarray:
    """Vectorized ``rgb_to_hsl`` over the last axis."""
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    mx = rgb.max(axis=-1)
    mn = rgb.min(axis=-1)
    delta = mx - mn
    l = (mx + mn) / 2
    chromatic = delta != 0

    with np.errstate(divide='ignore', invalid='ignore'):
        s = np.where(l > 0.5, delta / (2 - mx - mn), delta / (mx + mn))
        h = np.select(
            [mx == r, mx == g],
            [((g - b) / delta + np.where(g < b, 6.0, 0.0)) * 60,
             ((b - r) / delta + 2) * 60],
            default=((r - g) / delta + 4) * 60,
        )

    h = np.where(chromatic, h, 0.0)
    s = np.where(chromatic, s, 0.0)
    return np.stack([h, s, l], axis=-1)


def _hue_channel_array(p, q, t):
    t = np.where(t < 0, t + 1, t)
    t = np.where(t > 1, t - 1, t)
    return np.select(
        [t < 1 / 6, t < 1 / 2, t < 2 / 3],
        [p + (q - p) * 6 * t, q, p + (q - p) * (2 / 3 - t) * 6],
        default=p,
    )


def hsl_to_rgb_array(hsl: np.ndarray) -> np.ndarray:
    """Vectorized ``hsl_to_rgb`` over the last axis."""
    h, s, l = hsl[..., 0], hsl[..., 1], hsl[..., 2]
    q = np.where(l < 0.5, l * (1 + s), l + s - l * s)
    p = 2 * l - q
    h_norm = h / 360

    rgb = np.stack([
        _hue_channel_array(p, q, h_norm + 1 / 3),
        _hue_channel_array(p, q, h_norm),
        _hue_channel_array(p, q, h_norm - 1 / 3),
    ], axis=-1)

    gray = (s == 0)[..., None]
    return np.where(gray, l[..., None], rgb)


def apply_hsl_array(rgb: np.ndarray, hsl: HSLAdjustments) -> np.ndarray:
    """Vectorized ``apply_hsl`` for an array with normalized RGB in the last axis."""
    if hsl.is_identity():
        return np.clip(rgb, 0.0, 1.0)

    converted = rgb_to_hsl_array(rgb)
    table = hsl.as_table()
    shift = table[hue_range_index(converted[..., 0])]

    new_h = np.mod(converted[..., 0] + shift[..., 0], 360.0)
    new_s = np.clip(converted[..., 1] + shift[..., 1] / 100, 0.0, 1.0)
    new_l = np.clip(converted[..., 2] + shift[..., 2] / 100, 0.0, 1.0)

    out = hsl_to_rgb_array(np.stack([new_h, new_s, new_l], axis=-1))
    return np.clip(out, 0.0, 1.0)


class HSLProcessor:
    """Applies an HSL table to RGBA buffers. Alpha is left untouched."""

    def process(self, pixels: Union[np.ndarray, bytes], width: int, height: int,
                hsl: HSLAdjustments) -> np.ndarray:
        """
        Args:
            pixels: Interleaved RGBA uint8 samples
            width: Image width
            height: Image height
            hsl: Per-range adjustments

        Returns:
            New flat uint8 buffer of the same length
        """
        source = as_pixel_array(pixels, width, height)
        logger.debug(f"Applying HSL adjustments to {width * height} pixels")

        result = source.copy()
        if hsl.is_identity():
            return result

        rgba = result.reshape(-1, 4)
        rgb = rgba[:, :3].astype(np.float64) / 255
        adjusted = apply_hsl_array(rgb, hsl)
        rgba[:, :3] = np.floor(adjusted * 255 + 0.5).astype(np.uint8)
        return result

    def process_buffer(self, buffer: ImageBuffer, hsl: HSLAdjustments) -> ImageBuffer:
        return ImageBuffer(buffer.width, buffer.height,
                           self.process(buffer.pixels, buffer.width, buffer.height, hsl))


@dataclass
class ColorRange:
    """A named hue range that can be toggled for targeted editing."""
    name: str
    hue_range: Tuple[float, float]
    color: str
    is_active: bool = False


def default_color_ranges() -> List[ColorRange]:
    return [
        ColorRange('red', (345, 15), '#ff0000'),
        ColorRange('orange', (15, 45), '#ff8000'),
        ColorRange('yellow', (45, 75), '#ffff00'),
        ColorRange('green', (75, 165), '#00ff00'),
        ColorRange('aqua', (165, 195), '#00ffff'),
        ColorRange('blue', (195, 255), '#0080ff'),
        ColorRange('purple', (255, 285), '#8000ff'),
        ColorRange('magenta', (285, 345), '#ff00ff'),
    ]


@dataclass
class ColorRangeSet:
    """Active/inactive state of the 8 hue ranges."""
    ranges: List[ColorRange] = field(default_factory=default_color_ranges)

    def _index(self, name: str) -> int:
        for i, color_range in enumerate(self.ranges):
            if color_range.name == name:
                return i
        raise ValidationError(f"Unknown color range: {name}")

    def toggle(self, name: str) -> None:
        i = self._index(name)
        self.ranges[i] = replace(self.ranges[i], is_active=not self.ranges[i].is_active)

    def set_active(self, name: str, is_active: bool) -> None:
        i = self._index(name)
        self.ranges[i] = replace(self.ranges[i], is_active=is_active)

    def clear_active(self) -> None:
        self.ranges = [replace(r, is_active=False) for r in self.ranges]

    @property
    def active(self) -> List[ColorRange]:
        return [r for r in self.ranges if r.is_active]

    def range_for_hue(self, hue: float) -> Optional[ColorRange]:
        name = hue_range_name(hue)
        for color_range in self.ranges:
            if color_range.name == name:
                return color_range
        return None
