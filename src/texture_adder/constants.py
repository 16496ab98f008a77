"""
Various constants for texture_adder
"""
from enum import Enum


class BlendMode(Enum):
    """
    Blend modes available for the texture layer.

    Values are the canvas compositing operator names.
    """
    OVERLAY = 'overlay'
    MULTIPLY = 'multiply'
    SCREEN = 'screen'
    DARKEN = 'darken'
    LIGHTEN = 'lighten'
    DIFFERENCE = 'difference'


class SizePreset(Enum):
    """
    Output size presets. The value is the cap on the longer edge.
    """
    ORIGINAL = 'original'
    UHD_4K = '4k'
    QHD_2K = '2k'
    FHD_1080P = '1080p'

    @property
    def cap(self):
        return {
            SizePreset.ORIGINAL: None,
            SizePreset.UHD_4K: 3840,
            SizePreset.QHD_2K: 2560,
            SizePreset.FHD_1080P: 1920,
        }[self]


class ImageFormat(Enum):
    """
    Output image formats.
    """
    PNG = 'png'
    JPEG = 'jpeg'
    WEBP = 'webp'

    @property
    def mime_type(self):
        return 'image/' + self.value

    @property
    def extension(self):
        return {
            ImageFormat.PNG: '.png',
            ImageFormat.JPEG: '.jpg',
            ImageFormat.WEBP: '.webp',
        }[self]

    @property
    def pil_format(self):
        """Format name as reported and accepted by Pillow."""
        return self.name

    @property
    def lossy(self):
        return self is not ImageFormat.PNG


class ExportState(Enum):
    """
    States of a single export invocation.
    """
    IDLE = 'idle'
    DECODING = 'decoding'
    COMPOSITING = 'compositing'
    APPLYING_FILTERS = 'applying-filters'
    ENCODING = 'encoding'
    DELIVERING = 'delivering'
    DONE = 'done'
    FAILED = 'failed'


#: Texture assets shipped with the application, in menu order.
TEXTURES = (
    'magazine.jpg',
    'vinyl-bleed.jpg',
    '60s-mustard.jpg',
    'royal-navy.jpg',
    'tonor.png',
    'heavy-grain.png',
)

DEFAULT_TEXTURE = 'magazine.jpg'

DEFAULT_QUALITY = 0.92
MIN_QUALITY = 0.5
MAX_QUALITY = 1.0

DEFAULT_FILENAME = 'blended-image'

SHARE_TITLE = 'Blended Image'
SHARE_TEXT = 'Exported from Texture Adder'
