import io
import logging

import numpy as np
import pytest
from PIL import Image, features

from texture_adder.api.bitmap import Surface
from texture_adder.constants import ImageFormat
from texture_adder.errors import EncodeError
from texture_adder.export import encoder

from ..utils import RED, noise_image, solid_image

logger = logging.getLogger(__name__)

requires_webp = pytest.mark.skipif(
    not features.check("webp"), reason="Pillow is built without WebP"
)


@pytest.fixture
def surface():
    return Surface.frompil(noise_image((64, 64), seed=12))


def _format(data):
    with Image.open(io.BytesIO(data)) as image:
        return image.format


def test_png_ignores_quality(surface):
    low = encoder.encode(surface, "png", quality=0.5)
    high = encoder.encode(surface, "png", quality=1.0)
    default = encoder.encode(surface, "png")
    assert low == high == default
    assert _format(low) == "PNG"


def test_png_is_lossless(surface):
    data = encoder.encode(surface, ImageFormat.PNG)
    with Image.open(io.BytesIO(data)) as image:
        assert np.array_equal(np.asarray(image), np.asarray(surface.topil()))


def test_png_keeps_alpha():
    surface = Surface.frompil(noise_image((8, 8), alpha=True))
    with Image.open(io.BytesIO(encoder.encode(surface, "png"))) as image:
        assert image.mode == "RGBA"


def test_jpeg_quality_changes_size(surface):
    low = encoder.encode(surface, "jpeg", quality=0.5)
    high = encoder.encode(surface, "jpeg", quality=1.0)
    assert len(low) != len(high)
    assert len(low) < len(high)
    assert _format(low) == _format(high) == "JPEG"


def test_jpeg_default_quality(surface):
    assert encoder.encode(surface, "jpeg") == encoder.encode(surface, "jpeg", 0.92)


def test_jpeg_flattens_alpha():
    surface = Surface.frompil(Image.new("RGBA", (8, 8), (0, 0, 0, 0)))
    data = encoder.encode(surface, "jpeg")
    with Image.open(io.BytesIO(data)) as image:
        assert image.mode == "RGB"
        assert image.getpixel((4, 4)) == pytest.approx((255, 255, 255), abs=2)


@requires_webp
def test_webp(surface):
    low = encoder.encode(surface, "webp", quality=0.5)
    high = encoder.encode(surface, "webp", quality=1.0)
    assert _format(low) == "WEBP"
    assert len(low) <= len(high)


@pytest.mark.parametrize("quality", [0.49, 1.01, 0.0])
def test_invalid_quality(surface, quality):
    with pytest.raises(ValueError):
        encoder.encode(surface, "jpeg", quality=quality)


def test_unknown_format(surface):
    with pytest.raises(ValueError):
        encoder.encode(surface, "gif")


def test_empty_surface():
    surface = Surface(np.zeros((0, 0, 3), np.float32), np.zeros((0, 0, 1), np.float32))
    with pytest.raises(EncodeError):
        encoder.encode(surface, "png")


def test_unsupported_format(surface, monkeypatch):
    monkeypatch.setattr(encoder, "is_supported", lambda format: False)
    with pytest.raises(EncodeError):
        encoder.encode(surface, "webp")


def test_save_failure(surface, monkeypatch):
    def broken_save(image, format, quality):
        raise OSError("encoder error")

    monkeypatch.setattr(encoder, "_save", broken_save)
    with pytest.raises(EncodeError):
        encoder.encode(surface, "png")


def test_wrong_type_is_rewrapped(surface, monkeypatch):
    original = encoder._save
    calls = []

    def quirky_save(image, format, quality):
        calls.append(format)
        if len(calls) == 1:
            # Host encoder falls back to PNG.
            return original(image, ImageFormat.PNG, None)
        return original(image, format, quality)

    monkeypatch.setattr(encoder, "_save", quirky_save)
    data = encoder.encode(surface, "jpeg", 0.9)
    assert _format(data) == "JPEG"
    assert calls == [ImageFormat.JPEG, ImageFormat.JPEG]


def test_wrong_type_persisting_fails(surface, monkeypatch):
    original = encoder._save
    monkeypatch.setattr(
        encoder, "_save", lambda image, format, quality: original(image, ImageFormat.PNG, None)
    )
    with pytest.raises(EncodeError):
        encoder.encode(surface, "jpeg")


@pytest.mark.parametrize("format, expected", [
    ("png", "PNG"), ("jpeg", "JPEG"),
])
def test_sniff_format(format, expected):
    data = encoder.encode(Surface.frompil(solid_image(RED)), format)
    assert encoder.sniff_format(data) == ImageFormat[expected]


def test_sniff_garbage():
    assert encoder.sniff_format(b"garbage") is None


def test_encode_image(surface):
    image = encoder.encode_image(surface, "jpeg", 0.7, "photo")
    assert image.filename == "photo.jpg"
    assert image.mime_type == "image/jpeg"
    assert image.format == ImageFormat.JPEG
    assert len(image) == len(image.data)


def test_out_of_memory_converting_surface(surface, monkeypatch):
    def out_of_memory(self):
        raise MemoryError()

    monkeypatch.setattr(Surface, "topil", out_of_memory)
    with pytest.raises(EncodeError):
        encoder.encode(surface, "png")
