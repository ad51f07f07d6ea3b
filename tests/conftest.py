# Lowkey test configuration and shared fixtures

import os
import sys

import numpy as np
import pytest
from PIL import Image, PngImagePlugin

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from src.services.lowkey.core.bit_codec import Carrier


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def make_carrier(rng):
    """Factory for in-memory carriers filled with random pixels."""
    def _make(width=10, height=10):
        return Carrier(rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8))
    return _make


@pytest.fixture
def solid_carrier():
    """Factory for carriers whose channels all hold the same value."""
    def _make(width, height, value=0):
        return Carrier(np.full((height, width, 4), value, dtype=np.uint8))
    return _make


@pytest.fixture
def make_png(tmp_path, rng):
    """Factory writing a random RGBA PNG and returning its path."""
    def _make(name="carrier.png", width=10, height=10, **save_kwargs):
        pixels = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
        path = tmp_path / name
        Image.fromarray(pixels).save(path, format="PNG", **save_kwargs)
        return path
    return _make


@pytest.fixture
def png_with_metadata(make_png):
    """PNG carrying an ICC profile, a text comment, pHYs and a private chunk."""
    info = PngImagePlugin.PngInfo()
    info.add_text("Comment", "holiday photo")
    info.add(b"prVt", b"\x00\x01private-data")
    return make_png(
        "with_metadata.png",
        width=40,
        height=30,
        pnginfo=info,
        dpi=(300, 300),
        icc_profile=b"not-a-real-icc-profile",
    )


@pytest.fixture
def jpeg_image(tmp_path, rng):
    pixels = rng.integers(0, 256, size=(30, 30, 3), dtype=np.uint8)
    path = tmp_path / "photo.jpg"
    Image.fromarray(pixels).save(path, format="JPEG", quality=90)
    return path


@pytest.fixture
def message_file(tmp_path):
    path = tmp_path / "message.txt"
    path.write_bytes(b"This is a secret message.")
    return path
