"""
Color Space — hex ↔ RGB ↔ CIELAB conversions used by the pencil matcher.

Hex colors are strict `#RRGGBB` strings (case-insensitive on input, uppercase
on output). Lab uses the sRGB transfer curve, the sRGB→XYZ matrix and the D65
reference white, with the CIE ε/κ constants for the Lab transfer function.
"""
from __future__ import annotations

import re

HEX_PATTERN = re.compile(r"^#([0-9a-fA-F]{6})$")

# D65 reference white (2° observer)
D65_WHITE = (0.95047, 1.00000, 1.08883)

# CIE constants for the XYZ → Lab transfer function
LAB_EPSILON = 216 / 24389
LAB_KAPPA = 24389 / 27


class InvalidColorFormat(ValueError):
    """Raised when a color string is not a `#RRGGBB` hex value."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid color format: {value!r} (expected #RRGGBB)")
        self.value = value


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Parse `#RRGGBB` into an (r, g, b) tuple of ints in [0, 255]."""
    if not isinstance(hex_color, str):
        raise InvalidColorFormat(hex_color)
    match = HEX_PATTERN.match(hex_color.strip())
    if match is None:
        raise InvalidColorFormat(hex_color)
    h = match.group(1)
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def _clamp_channel(value: float) -> int:
    return max(0, min(255, int(round(value))))


def rgb_to_hex(r: float, g: float, b: float) -> str:
    """Format an RGB triple as uppercase `#RRGGBB`, clamping each channel."""
    return "#{:02X}{:02X}{:02X}".format(
        _clamp_channel(r), _clamp_channel(g), _clamp_channel(b)
    )


def normalize_hex(hex_color: str) -> str:
    """Validate a hex color and return it in canonical uppercase form."""
    return rgb_to_hex(*hex_to_rgb(hex_color))


def _linearize(c: float) -> float:
    return c / 12.92 if c <= 0.04045 else ((c + 0.055) / 1.055) ** 2.4


def _lab_f(t: float) -> float:
    return t ** (1 / 3) if t > LAB_EPSILON else (LAB_KAPPA * t + 16) / 116


def rgb_to_lab(r: int, g: int, b: int) -> tuple[float, float, float]:
    """Convert RGB (0-255) to CIELAB (D65)."""
    rl = _linearize(r / 255.0)
    gl = _linearize(g / 255.0)
    bl = _linearize(b / 255.0)

    # sRGB → XYZ (D65)
    x = rl * 0.4124564 + gl * 0.3575761 + bl * 0.1804375
    y = rl * 0.2126729 + gl * 0.7151522 + bl * 0.0721750
    z = rl * 0.0193339 + gl * 0.1191920 + bl * 0.9503041

    fx = _lab_f(x / D65_WHITE[0])
    fy = _lab_f(y / D65_WHITE[1])
    fz = _lab_f(z / D65_WHITE[2])

    L = 116 * fy - 16
    a = 500 * (fx - fy)
    b_val = 200 * (fy - fz)
    return L, a, b_val


def hex_to_lab(hex_color: str) -> tuple[float, float, float]:
    return rgb_to_lab(*hex_to_rgb(hex_color))
