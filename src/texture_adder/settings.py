"""
Per-export configuration.

The UI keeps its controls as percentages (``opacity 0..100``,
``brightness 0..200``, ...). :py:class:`ExportSettings` is the immutable
snapshot of those controls that is threaded into every pipeline call; the
pipeline itself holds no session state between calls.

Example::

    from texture_adder.settings import ExportSettings

    settings = ExportSettings(
        blend_mode='multiply',
        opacity_percent=80,
        brightness_percent=120,
        size_preset='1080p',
        format='jpeg',
    )
    settings.tone  # ToneParameters(brightness=1.2, contrast=1.0, saturation=1.0)
"""

import logging
from typing import Optional

from attrs import define, evolve, field

from texture_adder.constants import (
    DEFAULT_FILENAME,
    DEFAULT_QUALITY,
    MAX_QUALITY,
    MIN_QUALITY,
    BlendMode,
    ImageFormat,
    SizePreset,
)
from texture_adder.validators import in_, non_negative, range_

logger = logging.getLogger(__name__)


@define(frozen=True)
class ToneParameters:
    """
    Brightness, contrast and saturation multipliers where ``1.0`` is the
    identity. Negative values are clamped to zero.
    """

    brightness: float = field(default=1.0, converter=non_negative)
    contrast: float = field(default=1.0, converter=non_negative)
    saturation: float = field(default=1.0, converter=non_negative)

    @classmethod
    def from_percent(
        cls, brightness: float = 100, contrast: float = 100, saturation: float = 100
    ) -> "ToneParameters":
        """Build parameters from slider percentages (100 is identity)."""
        return cls(
            brightness=non_negative(brightness) / 100,
            contrast=non_negative(contrast) / 100,
            saturation=non_negative(saturation) / 100,
        )

    @property
    def is_identity(self) -> bool:
        return self.brightness == 1.0 and self.contrast == 1.0 and self.saturation == 1.0


_quality_range = range_(MIN_QUALITY, MAX_QUALITY)


def _quality(value: Optional[float]) -> float:
    return DEFAULT_QUALITY if value is None else float(value)


@define(frozen=True)
class ExportSettings:
    """
    Snapshot of the editor controls for one export.

    .. py:attribute:: blend_mode

        :py:class:`~texture_adder.constants.BlendMode` of the texture layer.

    .. py:attribute:: opacity_percent

        Texture opacity in ``[0, 100]``.

    .. py:attribute:: brightness_percent
    .. py:attribute:: contrast_percent
    .. py:attribute:: saturation_percent

        Tone sliders, ``100`` is identity. Negative values are clamped.

    .. py:attribute:: size_preset

        :py:class:`~texture_adder.constants.SizePreset` capping the longer edge.

    .. py:attribute:: format

        :py:class:`~texture_adder.constants.ImageFormat` of the output.

    .. py:attribute:: quality

        Lossy quality in ``[0.5, 1.0]``, ignored for PNG.

    .. py:attribute:: use_device_pixel_ratio

        Render at ``device_pixel_ratio`` times the planned size.
    """

    blend_mode: BlendMode = field(
        default=BlendMode.OVERLAY, converter=BlendMode, validator=in_(BlendMode)
    )
    opacity_percent: float = field(default=100.0, converter=float, validator=range_(0, 100))
    brightness_percent: float = field(default=100.0, converter=non_negative)
    contrast_percent: float = field(default=100.0, converter=non_negative)
    saturation_percent: float = field(default=100.0, converter=non_negative)
    size_preset: SizePreset = field(
        default=SizePreset.ORIGINAL, converter=SizePreset, validator=in_(SizePreset)
    )
    format: ImageFormat = field(
        default=ImageFormat.PNG, converter=ImageFormat, validator=in_(ImageFormat)
    )
    quality: float = field(default=DEFAULT_QUALITY, converter=_quality)
    use_device_pixel_ratio: bool = field(default=False, converter=bool)
    device_pixel_ratio: float = field(default=1.0, converter=float)
    filename: str = DEFAULT_FILENAME

    @quality.validator
    def _check_quality(self, attribute, value):
        if self.format.lossy:
            _quality_range(self, attribute, value)

    @device_pixel_ratio.validator
    def _check_pixel_ratio(self, attribute, value):
        if not value > 0:
            raise ValueError("device_pixel_ratio must be positive: %r" % value)

    @property
    def opacity(self) -> float:
        return self.opacity_percent / 100

    @property
    def tone(self) -> ToneParameters:
        return ToneParameters.from_percent(
            self.brightness_percent, self.contrast_percent, self.saturation_percent
        )

    @property
    def pixel_ratio(self) -> float:
        return self.device_pixel_ratio if self.use_device_pixel_ratio else 1.0

    def replace(self, **changes) -> "ExportSettings":
        """Return a copy with the given fields changed."""
        return evolve(self, **changes)
