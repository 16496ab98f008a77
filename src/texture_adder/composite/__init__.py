"""
Composite module for the two rendering passes.

Key modules:

- :py:mod:`texture_adder.composite.composite`: Pass 1, photo and texture
- :py:mod:`texture_adder.composite.blend`: Blend mode implementations
- :py:mod:`texture_adder.composite.tone`: Pass 2, brightness, contrast and
  saturation

Example usage::

    from texture_adder.composite import apply_tone, composite
    from texture_adder.settings import ToneParameters

    surface = composite(photo, texture, photo.width, photo.height, 'overlay', 1.0)
    surface = apply_tone(surface, ToneParameters(brightness=1.1))
    surface.topil().save('output.png')

The engine uses NumPy float32 arrays in [0, 1]; conversion to 8-bit happens
only when a surface is turned into a PIL image.
"""

from texture_adder.composite.composite import composite
from texture_adder.composite.tone import apply_tone

__all__ = [
    "apply_tone",
    "composite",
]
