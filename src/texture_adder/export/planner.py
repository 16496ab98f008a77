"""
Resolution planning.

Example::

    >>> plan_output_size(5000, 2000, SizePreset.FHD_1080P)
    (1920, 768)
"""

import logging
import math
from typing import Optional, Union

from attrs import define, field

from texture_adder.api.bitmap import Bitmap
from texture_adder.composite.composite import surface_size
from texture_adder.constants import DEFAULT_FILENAME, ImageFormat, SizePreset
from texture_adder.settings import ExportSettings
from texture_adder.validators import in_

logger = logging.getLogger(__name__)


def _round(value: float) -> int:
    # Half-up rounding, 0.5 always goes up.
    return int(math.floor(value + 0.5))


def plan_output_size(
    source_width: int, source_height: int, preset: Union[SizePreset, str]
) -> tuple[int, int]:
    """
    Compute the output size for a preset, preserving the aspect ratio.

    The longer edge is capped at the preset limit. Images are never
    upscaled and each dimension is at least 1.

    :param source_width: Source width, positive.
    :param source_height: Source height, positive.
    :param preset: :py:class:`~texture_adder.constants.SizePreset`.
    :return: ``(width, height)`` tuple.
    """
    if source_width <= 0 or source_height <= 0:
        raise ValueError(
            "Source size must be positive: %r x %r" % (source_width, source_height)
        )
    cap = SizePreset(preset).cap
    scale = 1.0
    if cap is not None:
        scale = min(1.0, cap / max(source_width, source_height))
    return (
        max(1, _round(source_width * scale)),
        max(1, _round(source_height * scale)),
    )


@define(frozen=True)
class ExportPlan:
    """
    Resolved configuration of one export.

    .. py:attribute:: width
    .. py:attribute:: height

        Logical output size.

    .. py:attribute:: pixel_ratio

        Multiplier from logical to physical pixels.

    .. py:attribute:: format

        :py:class:`~texture_adder.constants.ImageFormat`.

    .. py:attribute:: quality

        Lossy quality, ``None`` for PNG.
    """

    width: int
    height: int
    pixel_ratio: float = 1.0
    format: ImageFormat = field(
        default=ImageFormat.PNG, converter=ImageFormat, validator=in_(ImageFormat)
    )
    quality: Optional[float] = None
    base_name: str = DEFAULT_FILENAME

    @property
    def surface_size(self) -> tuple[int, int]:
        return surface_size(self.width, self.height, self.pixel_ratio)

    @property
    def mime_type(self) -> str:
        return self.format.mime_type

    @property
    def filename(self) -> str:
        return self.base_name + self.format.extension


def plan_export(photo: Bitmap, settings: ExportSettings) -> ExportPlan:
    """Build the :py:class:`ExportPlan` for a photo and settings."""
    width, height = plan_output_size(photo.width, photo.height, settings.size_preset)
    plan = ExportPlan(
        width=width,
        height=height,
        pixel_ratio=settings.pixel_ratio,
        format=settings.format,
        quality=settings.quality if settings.format.lossy else None,
        base_name=settings.filename,
    )
    logger.debug("Planned %s for %d x %d source" % (plan, photo.width, photo.height))
    return plan
