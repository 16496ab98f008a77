import io
import logging
from typing import Optional

import numpy as np
from PIL import Image

from texture_adder.api.bitmap import Bitmap, Surface

logging.basicConfig(level=logging.DEBUG)

RED = (255, 0, 0)
BLUE = (0, 0, 255)
WHITE = (255, 255, 255)
GRAY = (128, 128, 128)


def solid_image(color: tuple, size: tuple[int, int] = (4, 4), mode: str = "RGB") -> Image.Image:
    return Image.new(mode, size, color)


def solid_bitmap(color: tuple, size: tuple[int, int] = (4, 4), name: str = "solid") -> Bitmap:
    return Bitmap.frompil(solid_image(color, size), name)


def noise_image(size: tuple[int, int] = (64, 48), seed: int = 0, alpha: bool = False) -> Image.Image:
    rng = np.random.default_rng(seed)
    channels = 4 if alpha else 3
    data = rng.integers(0, 256, size=(size[1], size[0], channels), dtype=np.uint8)
    return Image.fromarray(data)


def noise_bitmap(size: tuple[int, int] = (64, 48), seed: int = 0, name: str = "noise") -> Bitmap:
    return Bitmap.frompil(noise_image(size, seed), name)


def gradient_image(size: tuple[int, int] = (64, 48)) -> Image.Image:
    width, height = size
    x = np.linspace(0, 255, width, dtype=np.float32)[None, :].repeat(height, 0)
    y = np.linspace(0, 255, height, dtype=np.float32)[:, None].repeat(width, 1)
    data = np.stack([x, y, 255 - x], axis=2).round().astype(np.uint8)
    return Image.fromarray(data)


def surface_from(image: Image.Image) -> Surface:
    return Surface.frompil(image)


def to_bytes(image: Image.Image, format: str = "PNG", **kwargs) -> bytes:
    with io.BytesIO() as f:
        image.save(f, format=format, **kwargs)
        return f.getvalue()


def pixels(surface: Surface, alpha: Optional[bool] = False) -> np.ndarray:
    """8-bit pixels of a surface."""
    image = surface.topil()
    data = np.asarray(image)
    if not alpha and data.shape[2] == 4:
        data = data[:, :, :3]
    return data
