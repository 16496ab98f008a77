"""
Image source loader.

Decodes user uploads and texture assets into
:py:class:`~texture_adder.api.bitmap.Bitmap` objects. Decoding runs in a
worker thread so the event loop is free while Pillow works.

Example::

    import asyncio
    from texture_adder.api.loader import Loader

    loader = Loader()
    photo = asyncio.run(loader.load_bitmap(open('photo.jpg', 'rb').read()))
    texture = asyncio.run(loader.load_bitmap('magazine.jpg'))
"""

import asyncio
import io
import logging
import os
from pathlib import Path
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError

from texture_adder.api.bitmap import Bitmap
from texture_adder.constants import TEXTURES
from texture_adder.errors import DecodeError

logger = logging.getLogger(__name__)

TEXTURE_DIR_ENV = "TEXTURE_ADDER_TEXTURE_DIR"


def default_texture_dir() -> Path:
    """Texture directory from the environment, or the packaged one."""
    env = os.environ.get(TEXTURE_DIR_ENV)
    if env:
        return Path(env)
    return Path(__file__).resolve().parent.parent / "textures"


def decode(data: bytes, name: str = "<bytes>") -> Bitmap:
    """
    Decode image bytes into a bitmap.

    Images above Pillow's ``MAX_IMAGE_PIXELS`` are decoded with a warning,
    only those beyond twice the limit are rejected.

    :raise DecodeError: when the data is empty or not a decodable image.
    """
    if not data:
        raise DecodeError("Empty image data: %s" % name)
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            bitmap = Bitmap.frompil(image, name)
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        SyntaxError,
        ValueError,
    ) as e:
        raise DecodeError("Cannot decode %s: %s" % (name, e)) from e
    logger.debug("Decoded %s: %d x %d" % (name, bitmap.width, bitmap.height))
    return bitmap


class Loader(object):
    """
    Image source loader.

    Texture names are resolved against the fixed
    :py:data:`~texture_adder.constants.TEXTURES` catalogue in
    ``texture_dir``. Decoded textures are cached by name.

    :param texture_dir: directory holding the texture files. Default is
        ``$TEXTURE_ADDER_TEXTURE_DIR`` or the packaged ``textures`` directory.
    """

    def __init__(self, texture_dir: Optional[Union[str, os.PathLike]] = None):
        self._texture_dir = Path(texture_dir) if texture_dir else default_texture_dir()
        self._textures: dict[str, Bitmap] = {}

    @property
    def texture_dir(self) -> Path:
        return self._texture_dir

    def texture_path(self, name: str) -> Path:
        """
        Resolve a texture name to its file.

        :raise DecodeError: when the name is not in the catalogue.
        """
        if name not in TEXTURES:
            raise DecodeError("Unknown texture: %r" % (name,))
        return self._texture_dir / name

    async def load_bitmap(self, source: Union[bytes, bytearray, memoryview, str]) -> Bitmap:
        """
        Decode raw image bytes or a named texture.

        :param source: image bytes, or a texture name from the catalogue.
        :return: :py:class:`~texture_adder.api.bitmap.Bitmap`.
        :raise DecodeError: when the source cannot be decoded.
        """
        if isinstance(source, str):
            return await self.load_texture(source)
        if isinstance(source, (bytes, bytearray, memoryview)):
            return await asyncio.to_thread(decode, bytes(source))
        raise TypeError("Expected bytes or texture name, got %s" % type(source).__name__)

    async def load_texture(self, name: str) -> Bitmap:
        """Decode the named texture, or return the cached bitmap."""
        bitmap = self._textures.get(name)
        if bitmap is not None:
            return bitmap
        path = self.texture_path(name)
        bitmap = await self.load_path(path, name=name)
        self._textures[name] = bitmap
        return bitmap

    async def load_path(self, path: Union[str, os.PathLike], name: Optional[str] = None) -> Bitmap:
        """
        Read and decode an image file.

        :raise DecodeError: when the file cannot be read or decoded.
        """
        path = Path(path)
        name = name or path.name
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise DecodeError("Cannot read %s: %s" % (path, e)) from e
        return await asyncio.to_thread(decode, data, name)

    def clear_cache(self) -> None:
        self._textures.clear()
