"""
Tone adjustment pass.

The adjustments reproduce the CSS filter chain
``brightness(b) contrast(c) saturate(s)``, so a front end previewing
through CSS and the export pipeline agree. Every step clamps its result
to ``[0, 1]`` as the CSS filter primitives do. A step whose parameter is
exactly ``1`` is the identity and is skipped.

This module is the single implementation of the tone transform; both the
preview renderer and the export pipeline call :py:func:`apply_tone`.
"""

import logging

import numpy as np

from texture_adder.api.bitmap import Surface
from texture_adder.composite.utils import clip
from texture_adder.errors import SurfaceAllocationError
from texture_adder.settings import ToneParameters

logger = logging.getLogger(__name__)

# Luminance weights of the feColorMatrix saturate definition.
LUMINANCE = np.array([0.213, 0.715, 0.072], dtype=np.float32)


def brightness(color: np.ndarray, amount: float) -> np.ndarray:
    """Linear transfer with slope ``amount``."""
    return clip(color * np.float32(amount))


def contrast(color: np.ndarray, amount: float) -> np.ndarray:
    """Linear transfer with slope ``amount`` around mid-gray."""
    intercept = 0.5 - 0.5 * amount
    return clip(color * np.float32(amount) + np.float32(intercept))


def saturation_matrix(amount: float) -> np.ndarray:
    """
    Get the 3x3 ``saturate()`` matrix.

    Rows map to output channels. ``amount=0`` maps every pixel to its
    luminance, values above 1 push colors away from it.
    """
    s = np.float32(amount)
    lum = np.tile(LUMINANCE, (3, 1))
    return (lum + s * (np.eye(3, dtype=np.float32) - lum)).astype(np.float32)


def saturate(color: np.ndarray, amount: float) -> np.ndarray:
    """Interpolate each pixel toward (or away from) its luminance."""
    matrix = saturation_matrix(amount)
    return clip(np.einsum("hwc,kc->hwk", color, matrix).astype(np.float32))


def apply_tone(surface: Surface, params: ToneParameters) -> Surface:
    """
    Apply brightness, contrast and saturation to the surface.

    The order is fixed: brightness, then contrast, then saturation. Negative
    parameters have already been clamped to zero by
    :py:class:`~texture_adder.settings.ToneParameters`. Alpha is unchanged.

    :param surface: :py:class:`~texture_adder.api.bitmap.Surface` to adjust.
    :param params: :py:class:`~texture_adder.settings.ToneParameters`.
    :return: New :py:class:`~texture_adder.api.bitmap.Surface`.
    :raise SurfaceAllocationError: when memory runs out.
    """
    logger.debug("Applying tone %s" % (params,))
    color = surface.color
    try:
        if params.brightness != 1.0:
            color = brightness(color, params.brightness)
        if params.contrast != 1.0:
            color = contrast(color, params.contrast)
        if params.saturation != 1.0:
            color = saturate(color, params.saturation)
        if color is surface.color:
            color = color.copy()
        return Surface(color, surface.alpha.copy())
    except MemoryError as e:
        raise SurfaceAllocationError(
            "Out of memory adjusting %d x %d surface" % surface.size
        ) from e


def css_filter(params: ToneParameters) -> str:
    """
    Get the CSS ``filter`` value equivalent to :py:func:`apply_tone`.

    Example::

        >>> css_filter(ToneParameters(1.2, 1.0, 0.5))
        'brightness(1.2) contrast(1) saturate(0.5)'
    """
    return "brightness({:g}) contrast({:g}) saturate({:g})".format(
        params.brightness, params.contrast, params.saturation
    )
