from texture_adder.api.bitmap import Bitmap, Surface
from texture_adder.api.loader import Loader

__all__ = ["Bitmap", "Loader", "Surface"]
