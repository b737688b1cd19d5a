"""
Image decoding into RGBA buffers.

Camera RAW files go through rawpy; everything else (JPEG, PNG, TIFF, WebP...)
through Pillow. Decoded images are always returned as 8-bit RGBA.
"""

import io
import logging
from typing import Any, Dict, Optional

import numpy as np
import rawpy
from PIL import Image, UnidentifiedImageError

from ..errors import DecodeError
from ..models import ImageBuffer

logger = logging.getLogger(__name__)

RAW_FORMATS = frozenset({
    'arw', 'srf', 'sr2', 'cr2', 'cr3', 'crw', 'nef', 'nrw', 'dng', 'raf',
    'orf', 'rw2', 'pef', 'srw', 'x3f', 'erf', 'kdc', 'mos', 'mrw', '3fr', 'iiq',
})


def _normalize_format(format: Optional[str]) -> str:
    if not format:
        return ''
    return format.lower().lstrip('.').split('/')[-1]


def is_raw_format(format: Optional[str]) -> bool:
    """Whether a file extension or MIME subtype names a camera RAW format."""
    return _normalize_format(format) in RAW_FORMATS


class ImageDecoder:
    """Decodes image bytes into ImageBuffer instances."""

    def __init__(self, use_camera_wb: bool = True, half_size: bool = False):
        """
        Args:
            use_camera_wb: Use the camera's white balance for RAW files
            half_size: Demosaic RAW files at half resolution (faster previews)
        """
        self.use_camera_wb = use_camera_wb
        self.half_size = half_size

    def decode(self, data: bytes, format: Optional[str] = None) -> ImageBuffer:
        """
        Decode image bytes.

        Args:
            data: Encoded file contents
            format: File extension or MIME type hint; RAW formats select rawpy

        Returns:
            RGBA ImageBuffer

        Raises:
            DecodeError: If the data cannot be decoded
        """
        if not data:
            raise DecodeError("No image data")

        if is_raw_format(format):
            rgb = self._decode_raw(data)
            alpha = np.full(rgb.shape[:2] + (1,), 255, dtype=np.uint8)
            rgba = np.concatenate([rgb, alpha], axis=2)
        else:
            with self._open(data) as image:
                rgba = np.asarray(image.convert('RGBA'), dtype=np.uint8)

        buffer = ImageBuffer.from_array(rgba)
        logger.debug(f"Decoded {_normalize_format(format) or 'image'}: {buffer.width}x{buffer.height}")
        return buffer

    def get_metadata(self, data: bytes, format: Optional[str] = None) -> Dict[str, Any]:
        """
        Read dimensions and basic properties without decoding the pixels.

        Returns:
            Dictionary with width, height, format and mode
        """
        if is_raw_format(format):
            try:
                with rawpy.imread(io.BytesIO(data)) as raw:
                    sizes = raw.sizes
                    return {
                        'width': sizes.width,
                        'height': sizes.height,
                        'format': _normalize_format(format).upper(),
                        'mode': 'RAW',
                        'raw_width': sizes.raw_width,
                        'raw_height': sizes.raw_height,
                    }
            except (rawpy.LibRawError, OSError, ValueError) as e:
                raise DecodeError(f"Failed to read RAW metadata: {e}") from e

        with self._open(data) as image:
            return {
                'width': image.width,
                'height': image.height,
                'format': image.format,
                'mode': image.mode,
            }

    def _decode_raw(self, data: bytes) -> np.ndarray:
        try:
            with rawpy.imread(io.BytesIO(data)) as raw:
                return raw.postprocess(
                    use_camera_wb=self.use_camera_wb,
                    half_size=self.half_size,
                    output_bps=8,
                )
        except (rawpy.LibRawError, OSError, ValueError) as e:
            raise DecodeError(f"Failed to decode RAW image: {e}") from e

    @staticmethod
    def _open(data: bytes) -> Image.Image:
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
            return image
        except (UnidentifiedImageError, OSError) as e:
            raise DecodeError(f"Failed to decode image: {e}") from e
