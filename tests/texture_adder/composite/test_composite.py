import logging

import numpy as np
import pytest
from PIL import Image

from texture_adder.api.bitmap import Bitmap, Surface
from texture_adder.composite.blend import BLEND_FUNC
from texture_adder.composite.composite import Compositor, composite, surface_size
from texture_adder.composite.tone import apply_tone
from texture_adder.constants import BlendMode
from texture_adder.errors import SurfaceAllocationError
from texture_adder.settings import ToneParameters

from ..utils import BLUE, RED, noise_bitmap, solid_bitmap

logger = logging.getLogger(__name__)


def test_difference_red_blue_is_magenta():
    photo = solid_bitmap(RED)
    texture = solid_bitmap(BLUE)
    surface = composite(photo, texture, 4, 4, BlendMode.DIFFERENCE, 1.0)
    surface = apply_tone(surface, ToneParameters())
    assert surface.size == (4, 4)
    expected = np.zeros((4, 4, 3), dtype=np.float32)
    expected[:, :, 0] = 1.0
    expected[:, :, 2] = 1.0
    assert np.array_equal(surface.color, expected)
    assert np.array_equal(np.asarray(surface.topil()), np.full((4, 4, 3), (255, 0, 255)))


@pytest.mark.parametrize("mode", list(BlendMode))
def test_zero_opacity_is_photo(mode):
    photo = noise_bitmap(seed=1)
    texture = noise_bitmap(seed=2)
    surface = composite(photo, texture, photo.width, photo.height, mode, 0.0)
    color, alpha = photo.numpy()
    assert np.array_equal(surface.color, color)
    assert np.array_equal(surface.alpha, alpha)


@pytest.mark.parametrize("mode", list(BlendMode))
def test_full_opacity_is_blend(mode):
    photo = noise_bitmap(seed=3)
    texture = noise_bitmap(seed=4)
    surface = composite(photo, texture, photo.width, photo.height, mode, 1.0)
    Cb, _ = photo.numpy()
    Cs, _ = texture.numpy()
    expected = np.clip(BLEND_FUNC[mode](Cb, Cs), 0, 1)
    np.testing.assert_allclose(surface.color, expected, atol=1e-6)


@pytest.mark.parametrize("mode", list(BlendMode))
@pytest.mark.parametrize("opacity", [0.25, 0.5, 0.8])
def test_partial_opacity_formula(mode, opacity):
    photo = noise_bitmap(seed=5)
    texture = noise_bitmap(seed=6)
    surface = composite(photo, texture, photo.width, photo.height, mode, opacity)
    Cb, _ = photo.numpy()
    Cs, _ = texture.numpy()
    expected = BLEND_FUNC[mode](Cb, Cs) * opacity + Cb * (1 - opacity)
    np.testing.assert_allclose(surface.color, expected, atol=1e-5)
    assert np.all(surface.alpha == 1.0)


def test_pass_order_matters():
    photo = noise_bitmap(seed=7)
    texture = noise_bitmap(seed=8)
    tone = ToneParameters(brightness=1.5)
    size = photo.width, photo.height

    blended_first = apply_tone(composite(photo, texture, *size, "multiply", 1.0), tone)

    toned_photo = Bitmap.frompil(apply_tone(Surface.frompil(photo.image), tone).topil())
    toned_first = composite(toned_photo, texture, *size, "multiply", 1.0)

    assert not np.allclose(blended_first.color, toned_first.color, atol=1e-3)


def test_texture_alpha_scales_opacity():
    photo = solid_bitmap(RED)
    texture = Bitmap.frompil(Image.new("RGBA", (4, 4), (0, 0, 255, 0)))
    surface = composite(photo, texture, 4, 4, "difference", 1.0)
    color, _ = photo.numpy()
    assert np.array_equal(surface.color, color)


def test_texture_is_scaled_to_fill():
    photo = solid_bitmap(RED, (8, 6))
    texture = solid_bitmap(BLUE, (3, 2))
    surface = composite(photo, texture, 8, 6, "lighten", 1.0)
    assert surface.size == (8, 6)
    np.testing.assert_allclose(surface.color[:, :, 0], 1.0, atol=0.01)
    np.testing.assert_allclose(surface.color[:, :, 2], 1.0, atol=0.01)


def test_target_size_and_pixel_ratio():
    photo = noise_bitmap((40, 20))
    texture = noise_bitmap((10, 10), seed=9)
    surface = composite(photo, texture, 20, 10, "screen", 0.5, pixel_ratio=2.0)
    assert surface.size == (40, 20)
    surface = composite(photo, texture, 20, 10, "screen", 0.5, pixel_ratio=1.5)
    assert surface.size == (30, 15)


@pytest.mark.parametrize(
    "size, ratio, expected",
    [((10, 10), 1.0, (10, 10)), ((3, 5), 1.5, (5, 8)), ((1, 1), 2.0, (2, 2))],
)
def test_surface_size(size, ratio, expected):
    assert surface_size(size[0], size[1], ratio) == expected


def test_composite_does_not_modify_bitmaps():
    photo = noise_bitmap(seed=10)
    texture = noise_bitmap(seed=11)
    before = np.asarray(photo.image).copy(), np.asarray(texture.image).copy()
    composite(photo, texture, 20, 10, "overlay", 0.7)
    assert np.array_equal(np.asarray(photo.image), before[0])
    assert np.array_equal(np.asarray(texture.image), before[1])


def test_missing_texture():
    with pytest.raises(ValueError):
        composite(solid_bitmap(RED), None, 4, 4, "overlay", 1.0)


@pytest.mark.parametrize("mode", ["source-over", "hue", "color-burn"])
def test_unknown_blend_mode(mode):
    with pytest.raises(ValueError):
        composite(solid_bitmap(RED), solid_bitmap(BLUE), 4, 4, mode, 1.0)


@pytest.mark.parametrize("opacity", [-0.1, 1.01])
def test_invalid_opacity(opacity):
    with pytest.raises(ValueError):
        composite(solid_bitmap(RED), solid_bitmap(BLUE), 4, 4, "overlay", opacity)


@pytest.mark.parametrize("size", [(0, 4), (4, 0), (-1, 3)])
def test_invalid_surface_size(size):
    with pytest.raises(SurfaceAllocationError):
        composite(solid_bitmap(RED), solid_bitmap(BLUE), size[0], size[1], "overlay", 1.0)


def test_compositor_starts_transparent():
    compositor = Compositor((3, 2))
    surface = compositor.finish()
    assert surface.size == (3, 2)
    assert np.all(surface.alpha == 0)


def test_out_of_memory_is_allocation_error(monkeypatch):
    def out_of_memory(self, size=None):
        raise MemoryError("resample")

    monkeypatch.setattr(Bitmap, "numpy", out_of_memory)
    with pytest.raises(SurfaceAllocationError):
        composite(solid_bitmap(RED), solid_bitmap(BLUE), 4, 4, "overlay", 1.0)
