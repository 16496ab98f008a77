"""
Blend mode implementations.

Each function takes the backdrop color ``Cb`` and the source color ``Cs`` as
float arrays in ``[0, 1]`` and returns the blended color ``B(Cb, Cs)``
following the W3C compositing and blending formulas. Inputs are not
modified.
"""
import logging

import numpy as np

from texture_adder.constants import BlendMode

logger = logging.getLogger(__name__)


# Separable blend functions
def normal(Cb, Cs):
    return Cs


def multiply(Cb, Cs):
    return Cb * Cs


def screen(Cb, Cs):
    return Cb + Cs - (Cb * Cs)


def overlay(Cb, Cs):
    return hard_light(Cs, Cb)


def darken(Cb, Cs):
    return np.minimum(Cb, Cs)


def lighten(Cb, Cs):
    return np.maximum(Cb, Cs)


def hard_light(Cb, Cs):
    index = Cs > 0.5
    B = multiply(Cb, 2 * Cs)
    B[index] = screen(Cb, 2 * Cs - 1)[index]
    return B


def difference(Cb, Cs):
    return np.abs(Cb - Cs)


"""Blend function table."""
BLEND_FUNC = {
    BlendMode.OVERLAY: overlay,
    BlendMode.MULTIPLY: multiply,
    BlendMode.SCREEN: screen,
    BlendMode.DARKEN: darken,
    BlendMode.LIGHTEN: lighten,
    BlendMode.DIFFERENCE: difference,
}


def get_blend_func(blend_mode):
    """
    Look up the blend function of the given mode.

    :raise ValueError: when ``blend_mode`` is not a
        :py:class:`~texture_adder.constants.BlendMode` member or its value.
    """
    return BLEND_FUNC[BlendMode(blend_mode)]
