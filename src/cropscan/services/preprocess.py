"""Image preprocessing for the local classification model."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import numpy as np
from PIL import Image
from torchvision import transforms

from .errors import DecodeError


@lru_cache(maxsize=8)
def image_transform(target_size: int) -> transforms.Compose:
    """Stretch to a square input and scale samples to [0, 1] in CHW order."""
    return transforms.Compose(
        [
            transforms.Resize((target_size, target_size)),
            transforms.ToTensor(),
        ]
    )


def load_image(image_path: str | Path) -> Image.Image:
    """Decode an image file into RGB, raising ``DecodeError`` on failure."""
    try:
        with Image.open(image_path) as image:
            return image.convert("RGB")
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
        raise DecodeError(f"Cannot decode image {image_path}: {exc}") from exc


def preprocess(image_path: str | Path, target_size: int) -> np.ndarray:
    """Return a read-only ``(1, 3, target_size, target_size)`` float32 tensor."""
    if target_size <= 0:
        raise ValueError(f"target_size must be positive, got {target_size}")
    image = load_image(image_path)
    tensor = image_transform(target_size)(image).unsqueeze(0)
    array = np.ascontiguousarray(tensor.numpy(), dtype=np.float32)
    array.setflags(write=False)
    return array


__all__ = ["image_transform", "load_image", "preprocess"]
