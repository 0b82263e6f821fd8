"""Shared fixtures for CropScan tests."""
from __future__ import annotations

import io
import struct
import zlib

import numpy as np
import pytest
from PIL import Image


@pytest.fixture
def leaf_image(tmp_path):
    path = tmp_path / "leaf.png"
    Image.new("RGB", (32, 24), color=(34, 139, 34)).save(path)
    return path


@pytest.fixture
def noisy_image(tmp_path):
    rng = np.random.default_rng(0)
    pixels = rng.integers(0, 256, size=(20, 37, 3), dtype=np.uint8)
    path = tmp_path / "noisy.jpg"
    Image.fromarray(pixels).save(path)
    return path


@pytest.fixture
def broken_image(tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"definitely not a png")
    return path


def oversized_png_bytes(width: int = 60000, height: int = 60000) -> bytes:
    """A tiny PNG whose header claims a huge canvas."""
    buffer = io.BytesIO()
    Image.new("RGB", (1, 1)).save(buffer, format="PNG")
    data = bytearray(buffer.getvalue())
    data[16:24] = struct.pack(">II", width, height)
    data[29:33] = struct.pack(">I", zlib.crc32(bytes(data[12:29])))
    return bytes(data)


@pytest.fixture
def oversized_image(tmp_path):
    path = tmp_path / "huge.png"
    path.write_bytes(oversized_png_bytes())
    return path
