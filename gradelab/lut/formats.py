"""
Text serialization for CUBE, 3DL and CSP LUT files.

Number formatting follows the conventions colour tools expect from these
files: data floats carry exactly six decimals rounded half up, header
numbers are written in shortest form ("0", "1", "0.5"), and CSP samples are
16-bit integers.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import List

import numpy as np

from .models import LUTExportOptions, LUTFormat

CSP_SCALE = 65535


def to_fixed(value: float, digits: int = 6) -> str:
    """
    Fixed-point text with ties rounded away from zero.

    ``format()`` rounds exact binary ties to even; a tie at ``digits``
    places can only happen when value * 2**(digits + 1) is an odd integer,
    so only that case goes through Decimal.
    """
    value = float(value)
    if value == 0:
        value = 0.0  # no "-0.000000"
    scaled = value * (1 << (digits + 1))
    if scaled.is_integer() and int(scaled) % 2 == 1:
        quantum = Decimal(1).scaleb(-digits)
        text = str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))
    else:
        text = f"{value:.{digits}f}"
    return text


def format_number(value: float) -> str:
    """Shortest text for a header number: integers without a decimal point."""
    value = float(value)
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    if 1e-6 <= abs(value) < 1e21:
        return np.format_float_positional(value, trim='-')
    mantissa, exponent = repr(value).split('e')
    sign = '-' if exponent.startswith('-') else '+'
    return f"{mantissa}e{sign}{exponent.lstrip('+-').lstrip('0') or '0'}"


def format_header(options: LUTExportOptions) -> str:
    """Header block, including the trailing blank line where the format has one."""
    size = options.resolution
    lut_format = options.lut_format
    lines: List[str] = []

    if lut_format is LUTFormat.CUBE:
        lines.append(f'TITLE "{options.title}"')
        if options.description:
            lines.append(f"# {options.description}")
        domain_min = format_number(options.domain.min)
        domain_max = format_number(options.domain.max)
        lines.append(f"DOMAIN_MIN {domain_min} {domain_min} {domain_min}")
        lines.append(f"DOMAIN_MAX {domain_max} {domain_max} {domain_max}")
        lines.append(f"LUT_3D_SIZE {size}")
        lines.append("")

    elif lut_format is LUTFormat.THREE_DL:
        lines.append(f"# {options.title}")
        if options.description:
            lines.append(f"# {options.description}")
        lines.append(f"# LUT size: {size}x{size}x{size}")
        lines.append("")

    elif lut_format is LUTFormat.CSP:
        lines.extend(["CSPLUTV100", "3D", "", "BEGIN METADATA"])
        lines.append(f'TITLE "{options.title}"')
        if options.description:
            lines.append(f'DESCRIPTION "{options.description}"')
        lines.extend(["END METADATA", ""])
        lines.append(f"{size} {size} {size}")

    return "\n".join(lines) + "\n"


def format_samples(rgb: np.ndarray, lut_format: LUTFormat) -> str:
    """
    One line per sample, newline-terminated.

    Args:
        rgb: (n, 3) array of output colors in [0, 1]
        lut_format: Target format

    Returns:
        Concatenated data lines
    """
    if len(rgb) == 0:
        return ""

    if lut_format is LUTFormat.CSP:
        ints = np.floor(np.asarray(rgb, dtype=np.float64) * CSP_SCALE + 0.5).astype(np.int64)
        lines = [f"{r} {g} {b}" for r, g, b in ints.tolist()]
    else:
        lines = [
            f"{to_fixed(r)} {to_fixed(g)} {to_fixed(b)}"
            for r, g, b in np.asarray(rgb, dtype=np.float64).tolist()
        ]
    return "\n".join(lines) + "\n"
