"""
Pixel Sampler — picks a color from an uploaded photo.

Averages a 3×3 window around the requested pixel (clipped at the image edges)
for stability against sensor noise, ignoring fully transparent pixels.
"""
from __future__ import annotations

import base64
import io

import numpy as np
from PIL import Image

from .color_space import rgb_to_hex

SAMPLE_RADIUS = 1


class SampleOutOfBounds(ValueError):
    pass


def image_bytes_from_base64(b64: str) -> bytes:
    """Strip data URI prefix if present and decode base64."""
    if b64.startswith("data:"):
        header, sep, b64 = b64.partition(",")
        if not sep or not b64:
            raise ValueError(f"Data URI {header!r} has no payload")
    return base64.b64decode(b64, validate=True)


def load_rgba(image_bytes: bytes) -> np.ndarray:
    """Decode image bytes into an (H, W, 4) uint8 array."""
    img = Image.open(io.BytesIO(image_bytes)).convert("RGBA")
    return np.asarray(img, dtype=np.uint8)


def sample_pixels(pixels: np.ndarray, x: int, y: int, radius: int = SAMPLE_RADIUS) -> str:
    height, width = pixels.shape[:2]
    if not (0 <= x < width and 0 <= y < height):
        raise SampleOutOfBounds(f"Pixel ({x}, {y}) outside {width}×{height} image")

    window = pixels[
        max(0, y - radius): y + radius + 1,
        max(0, x - radius): x + radius + 1,
    ].reshape(-1, 4)
    visible = window[window[:, 3] > 0]
    if len(visible) == 0:
        raise SampleOutOfBounds(f"Pixel ({x}, {y}) is fully transparent")

    r, g, b = np.floor(visible[:, :3].astype(np.float64).mean(axis=0) + 0.5)
    return rgb_to_hex(r, g, b)


def sample_color(image_bytes: bytes, x: int, y: int, radius: int = SAMPLE_RADIUS) -> str:
    """Return the averaged `#RRGGBB` color around (x, y)."""
    return sample_pixels(load_rgba(image_bytes), x, y, radius)
