"""
Live preview rendering.

The preview goes through the same two passes as the export. The pass 1
composite is cached, so moving a tone slider only reruns pass 2, the same
:py:func:`~texture_adder.composite.tone.apply_tone` the export calls. For
equal size and settings the preview is pixel-identical to the exported
surface.
"""

import logging
from typing import Optional

from PIL import Image

from texture_adder.api.bitmap import Bitmap, Surface
from texture_adder.composite.composite import composite
from texture_adder.composite.tone import apply_tone
from texture_adder.constants import SizePreset
from texture_adder.export.planner import plan_output_size
from texture_adder.settings import ExportSettings

logger = logging.getLogger(__name__)


class PreviewRenderer(object):
    """
    Preview renderer with a one-entry composite cache.

    :param max_edge: Cap on the longer edge of the preview, ``None`` to
        render at full size.
    """

    def __init__(self, max_edge: Optional[int] = 1024):
        self.max_edge = max_edge
        self._key = None
        self._composite: Optional[Surface] = None

    def preview_size(self, photo: Bitmap) -> tuple[int, int]:
        if self.max_edge is None:
            return plan_output_size(photo.width, photo.height, SizePreset.ORIGINAL)
        scale = min(1.0, self.max_edge / max(photo.width, photo.height))
        return (
            max(1, int(photo.width * scale + 0.5)),
            max(1, int(photo.height * scale + 0.5)),
        )

    def _get_composite(
        self, photo: Bitmap, texture: Bitmap, settings: ExportSettings
    ) -> Surface:
        width, height = self.preview_size(photo)
        key = (photo, texture, settings.blend_mode, settings.opacity, width, height)
        if not self._is_cached(key):
            logger.debug("Recompositing preview at %d x %d" % (width, height))
            self._composite = composite(
                photo, texture, width, height, settings.blend_mode, settings.opacity
            )
            self._key = key
        return self._composite

    def render(self, photo: Bitmap, texture: Bitmap, settings: ExportSettings) -> Surface:
        """Render the preview surface."""
        return apply_tone(self._get_composite(photo, texture, settings), settings.tone)

    def render_pil(
        self, photo: Bitmap, texture: Bitmap, settings: ExportSettings
    ) -> Image.Image:
        return self.render(photo, texture, settings).topil()

    def _is_cached(self, key) -> bool:
        # Bitmaps compare by identity.
        return self._composite is not None and self._key == key

    def invalidate(self) -> None:
        self._key = None
        self._composite = None
