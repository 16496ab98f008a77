"""Pytest configuration for texture-adder tests."""

from pathlib import Path

import pytest
from PIL import Image

from texture_adder.api.loader import Loader
from texture_adder.constants import TEXTURES

from .texture_adder.utils import noise_image


@pytest.fixture
def texture_dir(tmp_path: Path) -> Path:
    """Directory holding a generated image for every catalogue texture."""
    directory = tmp_path / "textures"
    directory.mkdir()
    for index, name in enumerate(TEXTURES):
        image: Image.Image = noise_image((40, 30), seed=index, alpha=name.endswith(".png"))
        if name.endswith(".jpg"):
            image.convert("RGB").save(directory / name, format="JPEG", quality=90)
        else:
            image.save(directory / name, format="PNG")
    return directory


@pytest.fixture
def loader(texture_dir: Path) -> Loader:
    return Loader(texture_dir)
