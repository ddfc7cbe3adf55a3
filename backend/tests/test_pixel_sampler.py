"""Unit tests for pixel_sampler.py — averaged color picking from images."""
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

import base64
import io

import numpy as np
import pytest
from PIL import Image

from backend.services.pixel_sampler import (
    SampleOutOfBounds,
    image_bytes_from_base64,
    load_rgba,
    sample_color,
    sample_pixels,
)


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _png_bytes(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def _solid_png(color=(200, 100, 50), size=(16, 16)) -> bytes:
    return _png_bytes(Image.new("RGB", size, color=color))


# ─────────────────────────────────────────────────────────────────────────────
# Tests: sampling
# ─────────────────────────────────────────────────────────────────────────────

class TestSampleColor:
    def test_solid_image(self):
        assert sample_color(_solid_png(), 8, 8) == "#C86432"

    def test_corner_window_is_clipped(self):
        assert sample_color(_solid_png(), 0, 0) == "#C86432"
        assert sample_color(_solid_png(), 15, 15) == "#C86432"

    def test_averages_three_by_three(self):
        pixels = np.zeros((3, 3, 4), dtype=np.uint8)
        pixels[..., 3] = 255
        pixels[1, 1, :3] = 90   # centre
        # 90 / 9 = 10 per channel
        assert sample_pixels(pixels, 1, 1) == "#0A0A0A"

    def test_average_rounds_half_up(self):
        pixels = np.zeros((1, 2, 4), dtype=np.uint8)
        pixels[..., 3] = 255
        pixels[0, 1, :3] = 1
        # mean of 0 and 1 = 0.5 → 1
        assert sample_pixels(pixels, 0, 0) == "#010101"

    def test_transparent_pixels_ignored(self):
        img = Image.new("RGBA", (3, 3), color=(10, 20, 30, 255))
        img.putpixel((0, 0), (255, 255, 255, 0))
        assert sample_color(_png_bytes(img), 1, 1) == "#0A141E"

    def test_fully_transparent_window(self):
        img = Image.new("RGBA", (3, 3), color=(10, 20, 30, 0))
        with pytest.raises(SampleOutOfBounds):
            sample_color(_png_bytes(img), 1, 1)

    @pytest.mark.parametrize("x,y", [(-1, 0), (0, -1), (16, 0), (0, 16)])
    def test_out_of_bounds(self, x, y):
        with pytest.raises(SampleOutOfBounds):
            sample_color(_solid_png(), x, y)

    def test_load_rgba_shape(self):
        assert load_rgba(_solid_png(size=(5, 7))).shape == (7, 5, 4)


# ─────────────────────────────────────────────────────────────────────────────
# Tests: base64 decoding
# ─────────────────────────────────────────────────────────────────────────────

class TestBase64:
    def test_plain(self):
        raw = _solid_png()
        assert image_bytes_from_base64(base64.b64encode(raw).decode()) == raw

    def test_data_uri(self):
        raw = _solid_png()
        uri = "data:image/png;base64," + base64.b64encode(raw).decode()
        assert image_bytes_from_base64(uri) == raw

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            image_bytes_from_base64("not base64!!")

    @pytest.mark.parametrize("uri", ["data:image/png;base64", "data:image/png;base64,"])
    def test_data_uri_without_payload(self, uri):
        with pytest.raises(ValueError, match="no payload"):
            image_bytes_from_base64(uri)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
