"""
Surface encoder.

Serializes a :py:class:`~texture_adder.api.bitmap.Surface` to PNG, JPEG or
WebP bytes with Pillow. The format of the produced buffer is verified by
sniffing; a buffer of the wrong type is re-encoded in the requested format.
"""

import io
import logging
from typing import Optional, Union

from attrs import define, field
from PIL import Image, UnidentifiedImageError, features

from texture_adder.api import pil_io
from texture_adder.api.bitmap import Surface
from texture_adder.constants import (
    DEFAULT_FILENAME,
    DEFAULT_QUALITY,
    MAX_QUALITY,
    MIN_QUALITY,
    ImageFormat,
)
from texture_adder.errors import EncodeError, SurfaceAllocationError

logger = logging.getLogger(__name__)


@define(frozen=True)
class EncodedImage:
    """
    Encoded output of one export.

    .. py:attribute:: data

        Encoded bytes.

    .. py:attribute:: format

        :py:class:`~texture_adder.constants.ImageFormat` of ``data``.
    """

    data: bytes = field(repr=False)
    format: ImageFormat
    filename: str = DEFAULT_FILENAME + ".png"

    @property
    def mime_type(self) -> str:
        return self.format.mime_type

    def __len__(self) -> int:
        return len(self.data)


def is_supported(format: ImageFormat) -> bool:
    """Whether the Pillow build can encode the format."""
    if format == ImageFormat.WEBP:
        return bool(features.check("webp"))
    return True


def sniff_format(data: bytes) -> Optional[ImageFormat]:
    """Detect the image format of encoded bytes."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            name = image.format
    except (UnidentifiedImageError, OSError):
        return None
    try:
        return ImageFormat[name]
    except KeyError:
        return None


def _save(image: Image.Image, format: ImageFormat, quality: Optional[float]) -> bytes:
    kwargs = {}
    if format == ImageFormat.JPEG:
        image = pil_io.flatten(image)
        kwargs["quality"] = int(round(quality * 100))
    elif format == ImageFormat.WEBP:
        kwargs["quality"] = int(round(quality * 100))
        kwargs["lossless"] = False
    with io.BytesIO() as f:
        image.save(f, format=format.pil_format, **kwargs)
        return f.getvalue()


def _rewrap(data: bytes, format: ImageFormat, quality: Optional[float]) -> bytes:
    """Re-encode a buffer of the wrong type in the requested format."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            return _save(pil_io.to_rgba(image), format, quality)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise EncodeError("Cannot re-encode buffer as %s: %s" % (format.name, e)) from e


def encode(
    surface: Surface,
    format: Union[ImageFormat, str] = ImageFormat.PNG,
    quality: Optional[float] = None,
) -> bytes:
    """
    Encode the surface.

    :param surface: :py:class:`~texture_adder.api.bitmap.Surface` to encode.
    :param format: :py:class:`~texture_adder.constants.ImageFormat`.
    :param quality: Lossy quality in [0.5, 1.0], default 0.92. Ignored for PNG.
    :return: Encoded bytes of the requested format.
    :raise EncodeError: when no buffer of the requested format can be produced.
    """
    format = ImageFormat(format)
    if not format.lossy:
        quality = None
    elif quality is None:
        quality = DEFAULT_QUALITY
    elif not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise ValueError(
            "Quality must be in [%g, %g]: %r" % (MIN_QUALITY, MAX_QUALITY, quality)
        )

    if not is_supported(format):
        raise EncodeError("Encoder for %s is not available" % format.name)
    try:
        image = surface.topil()
    except (SurfaceAllocationError, MemoryError) as e:
        raise EncodeError("Cannot convert surface: %s" % (str(e) or "out of memory")) from e

    try:
        data = _save(image, format, quality)
    except (OSError, ValueError, KeyError, MemoryError) as e:
        raise EncodeError("Cannot encode %s: %s" % (format.name, e)) from e
    if not data:
        raise EncodeError("Encoder produced an empty %s buffer" % format.name)

    actual = sniff_format(data)
    if actual != format:
        logger.warning(
            "Encoder produced %s instead of %s, re-encoding"
            % (actual.name if actual else "unknown data", format.name)
        )
        data = _rewrap(data, format, quality)
        if sniff_format(data) != format:
            raise EncodeError("Encoder cannot produce %s" % format.name)
    logger.debug("Encoded %d x %d surface as %s: %d bytes" % (
        surface.width, surface.height, format.name, len(data)))
    return data


def encode_image(
    surface: Surface,
    format: Union[ImageFormat, str] = ImageFormat.PNG,
    quality: Optional[float] = None,
    base_name: str = DEFAULT_FILENAME,
) -> EncodedImage:
    """Encode the surface and wrap it with its type and filename."""
    format = ImageFormat(format)
    data = encode(surface, format, quality)
    return EncodedImage(data, format, base_name + format.extension)
