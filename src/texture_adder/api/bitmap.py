"""
Bitmap and surface data structures.

A :py:class:`Bitmap` is a decoded source image, immutable once the loader
produced it. A :py:class:`Surface` is the working raster of one export:
float32 ``color`` and ``alpha`` arrays with values in ``[0.0, 1.0]``.
Pipeline stages never modify a surface in place, they return a new one.
"""

import logging
from typing import Optional

import numpy as np
from attrs import define, field
from PIL import Image

from texture_adder.api import pil_io
from texture_adder.errors import SurfaceAllocationError

logger = logging.getLogger(__name__)


@define(frozen=True, eq=False)
class Bitmap:
    """
    Decoded raster image.

    .. py:attribute:: image

        RGBA :py:class:`PIL.Image.Image`. Do not modify.

    .. py:attribute:: name

        Source description, e.g. the texture file name.
    """

    image: Image.Image = field(repr=False)
    name: str = "<bytes>"

    @image.validator
    def _check_image(self, attribute, value):
        if value.mode != "RGBA":
            raise ValueError("Bitmap requires an RGBA image: %s" % value.mode)
        if value.width <= 0 or value.height <= 0:
            raise ValueError("Bitmap requires a non-empty image: %s" % (value.size,))

    @classmethod
    def frompil(cls, image: Image.Image, name: str = "<image>") -> "Bitmap":
        """Create a bitmap from any PIL image, converting it to RGBA."""
        return cls(pil_io.to_rgba(image), name)

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    def numpy(self, size: Optional[tuple[int, int]] = None) -> tuple[np.ndarray, np.ndarray]:
        """
        Get ``(color, alpha)`` arrays, optionally scaled to fill ``size``.

        :param size: ``(width, height)`` to scale to. Default is the bitmap size.
        :return: float32 arrays of shape ``(H, W, 3)`` and ``(H, W, 1)``.
        """
        image = self.image
        if size is not None and size != image.size:
            logger.debug("Resampling %s from %s to %s" % (self.name, image.size, size))
            image = image.resize(size, Image.Resampling.LANCZOS)
        return pil_io.get_array(image)


@define(frozen=True, eq=False)
class Surface:
    """
    Working raster of one export.

    .. py:attribute:: color

        float32 array of shape ``(height, width, 3)``.

    .. py:attribute:: alpha

        float32 array of shape ``(height, width, 1)``.
    """

    color: np.ndarray = field(repr=False)
    alpha: np.ndarray = field(repr=False)

    def __attrs_post_init__(self):
        if self.color.shape[:2] != self.alpha.shape[:2]:
            raise ValueError(
                "Color and alpha shapes differ: %s vs %s"
                % (self.color.shape, self.alpha.shape)
            )

    @classmethod
    def empty(cls, width: int, height: int) -> "Surface":
        """
        Allocate a fully transparent surface.

        :raise SurfaceAllocationError: on non-positive size or out of memory.
        """
        if width <= 0 or height <= 0:
            raise SurfaceAllocationError(
                "Invalid surface size: %d x %d" % (width, height)
            )
        try:
            color = np.zeros((height, width, 3), dtype=np.float32)
            alpha = np.zeros((height, width, 1), dtype=np.float32)
        except MemoryError as e:
            raise SurfaceAllocationError(
                "Cannot allocate %d x %d surface" % (width, height)
            ) from e
        return cls(color, alpha)

    @classmethod
    def frompil(cls, image: Image.Image) -> "Surface":
        color, alpha = pil_io.get_array(pil_io.to_rgba(image))
        return cls(color, alpha)

    @property
    def width(self) -> int:
        return self.color.shape[1]

    @property
    def height(self) -> int:
        return self.color.shape[0]

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def is_opaque(self) -> bool:
        return bool(np.all(self.alpha >= 1.0))

    def topil(self) -> Image.Image:
        """
        Convert to an 8-bit PIL image. RGB when opaque, otherwise RGBA.
        """
        if self.width == 0 or self.height == 0:
            raise SurfaceAllocationError("Empty surface: %s" % (self.size,))
        if self.is_opaque:
            return pil_io.to_pil(self.color)
        return pil_io.to_pil(self.color, self.alpha)

    def equals(self, other: "Surface") -> bool:
        """Exact pixel-wise comparison."""
        return np.array_equal(self.color, other.color) and np.array_equal(
            self.alpha, other.alpha
        )
