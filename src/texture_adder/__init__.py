"""
texture-adder: blend a photograph with a texture overlay and export it.

The package implements a two-pass rendering pipeline. The first pass
composites a texture over a photo with a blend mode and opacity, the second
applies brightness, contrast and saturation to the merged result. The final
surface is encoded to PNG, JPEG or WebP and handed to a delivery sink.

Basic usage::

    import asyncio
    from texture_adder import ExportSettings, Session

    session = Session()
    with open('photo.jpg', 'rb') as f:
        asyncio.run(session.upload(f.read()))
    session.select_texture('magazine.jpg')
    result = asyncio.run(session.export(ExportSettings(blend_mode='multiply')))

Architecture:

- :py:mod:`texture_adder.api`: Bitmaps, loading, sessions and previews
- :py:mod:`texture_adder.composite`: Blend modes, compositor and tone pass
- :py:mod:`texture_adder.export`: Size planning, encoding and delivery
"""

from texture_adder.api.session import Session
from texture_adder.settings import ExportSettings
from texture_adder.version import __version__

__all__ = ["ExportSettings", "Session", "__version__"]
