"""Composite implementation for the photo and texture pass."""

import logging
from typing import Optional, Union

import numpy as np

from texture_adder.api.bitmap import Bitmap, Surface
from texture_adder.composite import utils
from texture_adder.composite.blend import get_blend_func, normal
from texture_adder.constants import BlendMode
from texture_adder.errors import SurfaceAllocationError

logger = logging.getLogger(__name__)


def surface_size(width: int, height: int, pixel_ratio: float = 1.0) -> tuple[int, int]:
    """Physical surface size for a logical ``(width, height)``."""
    return (
        int(np.floor(width * pixel_ratio + 0.5)),
        int(np.floor(height * pixel_ratio + 0.5)),
    )


def composite(
    photo: Bitmap,
    texture: Optional[Bitmap],
    width: int,
    height: int,
    blend_mode: Union[BlendMode, str] = BlendMode.OVERLAY,
    opacity: float = 1.0,
    pixel_ratio: float = 1.0,
) -> Surface:
    """
    Composite the texture over the photo and return a new surface.

    The steps run in a fixed order: allocate a transparent surface of
    ``(width, height) * pixel_ratio``, draw the photo scaled to fill it with
    normal compositing, then draw the texture scaled to fill it with the
    given blend mode and opacity. For an opaque photo, every output pixel is
    ``B(photo, texture) * opacity + photo * (1 - opacity)``.

    Args:
        photo: Backdrop bitmap
        texture: Overlay bitmap. Must be loaded before compositing
        width: Logical target width
        height: Logical target height
        blend_mode: :py:class:`~texture_adder.constants.BlendMode` of the texture
        opacity: Texture opacity in [0.0, 1.0]
        pixel_ratio: Multiplier from logical to physical pixels

    Returns:
        :py:class:`~texture_adder.api.bitmap.Surface` of the composite

    Raises:
        SurfaceAllocationError: If the surface size is not positive or
            memory runs out
        ValueError: If the texture is missing, the blend mode is unknown or
            the opacity is out of range

    Examples:
        >>> surface = composite(photo, texture, 1920, 1080, 'multiply', 0.8)
        >>> surface.topil().save('composite.png')
    """
    if texture is None:
        raise ValueError("Texture is not loaded")
    blend_fn = get_blend_func(blend_mode)
    if not 0.0 <= opacity <= 1.0:
        raise ValueError("Opacity must be in [0, 1]: %r" % opacity)

    size = surface_size(width, height, pixel_ratio)
    try:
        compositor = Compositor(size)
        compositor.draw(photo, normal, 1.0)
        compositor.draw(texture, blend_fn, opacity)
        return compositor.finish()
    except MemoryError as e:
        raise SurfaceAllocationError(
            "Out of memory compositing %d x %d surface" % size
        ) from e


class Compositor(object):
    """Composite context.

    Holds the working color and alpha of one composite call. Blend state
    applies to a single :py:meth:`draw` and does not persist.

    Example::

        compositor = Compositor((width, height))
        compositor.draw(photo, normal, 1.0)
        compositor.draw(texture, multiply, 0.5)
        surface = compositor.finish()
    """

    def __init__(self, size: tuple[int, int]):
        self._size = size
        surface = Surface.empty(*size)
        self._color = surface.color
        self._alpha = surface.alpha

    @property
    def width(self) -> int:
        return self._size[0]

    @property
    def height(self) -> int:
        return self._size[1]

    def draw(self, bitmap: Bitmap, blend_fn, opacity: float) -> None:
        """Draw the bitmap scaled to fill the surface."""
        logger.debug(
            "Drawing %s with %s at opacity %g" % (bitmap.name, blend_fn.__name__, opacity)
        )
        color, alpha = bitmap.numpy(self._size)
        self._apply_source(color, alpha * np.float32(opacity), blend_fn)

    def _apply_source(self, color: np.ndarray, alpha: np.ndarray, blend_fn) -> None:
        alpha_b = self._alpha
        color_b = self._color

        alpha_r = utils.union(alpha_b, alpha)
        color_t = alpha * ((1.0 - alpha_b) * color + alpha_b * blend_fn(color_b, color))
        self._color = utils.clip(
            utils.divide((1.0 - alpha) * alpha_b * color_b + color_t, alpha_r)
        )
        self._alpha = alpha_r

    def finish(self) -> Surface:
        return Surface(self._color.astype(np.float32), self._alpha.astype(np.float32))
