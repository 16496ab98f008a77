"""
Editing session.

A :py:class:`Session` holds what the editor keeps between exports: the
uploaded photo, the selected texture, the delivery sink chosen at start and
the preview cache. Every export receives an explicit
:py:class:`~texture_adder.settings.ExportSettings`.
"""

import logging
import os
from typing import Optional, Union

from PIL import Image

from texture_adder.api.bitmap import Bitmap
from texture_adder.api.loader import Loader
from texture_adder.api.preview import PreviewRenderer
from texture_adder.constants import DEFAULT_TEXTURE
from texture_adder.export.delivery import DeliverySink, select_sink
from texture_adder.export.pipeline import Exporter, Observer, PipelineResult
from texture_adder.settings import ExportSettings

logger = logging.getLogger(__name__)


class Session(object):
    """
    Editing session.

    Example::

        session = Session(sink=select_sink('exports'))
        await session.upload(data)
        session.select_texture('tonor.png')
        image = await session.preview(ExportSettings(brightness_percent=120))
        result = await session.export(ExportSettings(format='jpeg'))

    :param loader: :py:class:`~texture_adder.api.loader.Loader`.
    :param sink: Delivery sink; default writes to the current directory.
    :param preview_edge: Longer edge of preview images.
    """

    def __init__(
        self,
        loader: Optional[Loader] = None,
        sink: Optional[DeliverySink] = None,
        preview_edge: Optional[int] = 1024,
    ):
        self.loader = loader or Loader()
        self.sink = sink if sink is not None else select_sink()
        self.photo: Optional[Bitmap] = None
        self.texture_name = DEFAULT_TEXTURE
        self._preview = PreviewRenderer(preview_edge)

    async def upload(self, data: bytes) -> Bitmap:
        """Decode and keep a new photo. The old photo stays on failure."""
        photo = await self.loader.load_bitmap(data)
        self.photo = photo
        self._preview.invalidate()
        logger.info("Loaded photo %d x %d" % (photo.width, photo.height))
        return photo

    async def open(self, path: Union[str, os.PathLike]) -> Bitmap:
        """Decode and keep a photo from a file."""
        photo = await self.loader.load_path(path)
        self.photo = photo
        self._preview.invalidate()
        return photo

    def select_texture(self, name: str) -> None:
        """Select a texture from the catalogue."""
        self.loader.texture_path(name)
        self.texture_name = name

    async def texture(self) -> Bitmap:
        return await self.loader.load_texture(self.texture_name)

    def _require_photo(self) -> Bitmap:
        if self.photo is None:
            raise ValueError("No photo loaded")
        return self.photo

    async def preview(self, settings: ExportSettings) -> Image.Image:
        """Render the preview image for the current photo and texture."""
        photo = self._require_photo()
        texture = await self.texture()
        return self._preview.render_pil(photo, texture, settings)

    async def export(
        self, settings: ExportSettings, observer: Optional[Observer] = None
    ) -> PipelineResult:
        """Export the current photo and texture and deliver the result."""
        photo = self._require_photo()
        exporter = Exporter(self.loader, self.sink, observer)
        return await exporter.export(photo, self.texture_name, settings)
