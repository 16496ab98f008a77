"""
PIL IO module.
"""
import logging
from typing import Optional

import numpy as np
from PIL import Image, ImageOps

logger = logging.getLogger(__name__)


def to_rgba(image: Image.Image) -> Image.Image:
    """Convert PIL image of any mode to RGBA, honoring the EXIF orientation."""
    image = ImageOps.exif_transpose(image)
    if image.mode == "RGBA":
        return image
    if image.mode == "P" and "transparency" in image.info:
        image = image.convert("RGBA")
    elif image.mode == "CMYK":
        image = image.convert("RGB")
    elif image.mode in ("I", "I;16", "F"):
        # High bit-depth grayscale; scale down to 8 bits.
        array = np.asarray(image, dtype=np.float32)
        maximum = 65535.0 if array.max() > 255 else 255.0
        image = Image.fromarray(
            np.clip(array / maximum * 255.0 + 0.5, 0, 255).astype(np.uint8)
        )
    return image.convert("RGBA")


def get_array(image: Image.Image) -> tuple[np.ndarray, np.ndarray]:
    """Get float32 ``(color, alpha)`` arrays from an RGBA image."""
    assert image.mode == "RGBA", "Expected RGBA image: %s" % image.mode
    data = np.asarray(image, dtype=np.float32) / 255.0
    return data[:, :, :3], data[:, :, 3:4]


def quantize(data: np.ndarray) -> np.ndarray:
    """Map ``[0, 1]`` floats to 8-bit integers by rounding."""
    return np.clip(np.round(data * 255.0), 0, 255).astype(np.uint8)


def to_pil(color: np.ndarray, alpha: Optional[np.ndarray] = None) -> Image.Image:
    """Convert float ``color`` and optional ``alpha`` arrays to a PIL image."""
    if alpha is None:
        return Image.fromarray(quantize(color))
    return Image.fromarray(quantize(np.concatenate((color, alpha), axis=2)))


def flatten(image: Image.Image, background: tuple[int, int, int] = (255, 255, 255)) -> Image.Image:
    """Drop the alpha channel by compositing over a solid background."""
    if image.mode != "RGBA":
        return image.convert("RGB")
    backdrop = Image.new("RGBA", image.size, background + (255,))
    return Image.alpha_composite(backdrop, image).convert("RGB")
