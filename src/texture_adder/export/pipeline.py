"""
Export orchestration.

One call to :py:meth:`Exporter.export` walks the states::

    IDLE -> DECODING -> COMPOSITING -> APPLYING_FILTERS -> ENCODING
         -> DELIVERING -> DONE

and jumps to ``FAILED`` from any step. Progress is reported to an optional
observer; observer errors are logged and never affect the output. A failed
export delivers nothing and is not retried.
"""

import logging
from typing import Callable, Optional, Union

from attrs import define, field

from texture_adder.api.bitmap import Bitmap
from texture_adder.api.loader import Loader
from texture_adder.composite.composite import composite
from texture_adder.composite.tone import apply_tone
from texture_adder.constants import ExportState
from texture_adder.errors import ExportError
from texture_adder.export.delivery import DeliverySink
from texture_adder.export.encoder import EncodedImage, encode_image
from texture_adder.export.planner import ExportPlan, plan_export
from texture_adder.settings import ExportSettings

logger = logging.getLogger(__name__)

#: Observer callable: ``observer(state, fraction, label)``.
Observer = Callable[[ExportState, float, str], None]

PhotoSource = Union[Bitmap, bytes, bytearray, memoryview]
TextureSource = Union[Bitmap, str]

_PROGRESS = {
    ExportState.DECODING: (0.1, "Loading images"),
    ExportState.COMPOSITING: (0.3, "Blending texture"),
    ExportState.APPLYING_FILTERS: (0.6, "Applying adjustments"),
    ExportState.ENCODING: (0.75, "Encoding"),
    ExportState.DELIVERING: (0.9, "Saving"),
    ExportState.DONE: (1.0, "Done"),
}


@define(frozen=True)
class PipelineResult:
    """
    Outcome of one export.

    .. py:attribute:: image

        :py:class:`~texture_adder.export.encoder.EncodedImage` on success.

    .. py:attribute:: error

        Human-readable failure reason on failure.

    .. py:attribute:: failed_state

        State in which the export failed.
    """

    image: Optional[EncodedImage] = None
    error: Optional[str] = None
    failed_state: Optional[ExportState] = None
    plan: Optional[ExportPlan] = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        return self.image is not None

    @property
    def data(self) -> Optional[bytes]:
        return self.image.data if self.image else None

    @property
    def mime_type(self) -> Optional[str]:
        return self.image.mime_type if self.image else None

    @property
    def filename(self) -> Optional[str]:
        return self.image.filename if self.image else None


class Exporter(object):
    """
    Export orchestrator.

    :param loader: :py:class:`~texture_adder.api.loader.Loader` for byte or
        texture name sources.
    :param sink: :py:class:`~texture_adder.export.delivery.DeliverySink`, or
        ``None`` to skip delivery and only return the encoded image.
    :param observer: Optional progress callback.
    """

    def __init__(
        self,
        loader: Optional[Loader] = None,
        sink: Optional[DeliverySink] = None,
        observer: Optional[Observer] = None,
    ):
        self._loader = loader or Loader()
        self._sink = sink
        self._observer = observer
        self.state = ExportState.IDLE

    def _enter(self, state: ExportState, label: Optional[str] = None) -> None:
        self.state = state
        fraction, default_label = _PROGRESS.get(state, (1.0, state.value))
        label = label or default_label
        logger.debug("Export %s: %s" % (state.value, label))
        if self._observer is None:
            return
        try:
            self._observer(state, fraction, label)
        except Exception:
            logger.exception("Progress observer failed in %s" % state.value)

    async def _load(self, source, kind: str) -> Bitmap:
        if isinstance(source, Bitmap):
            return source
        if source is None:
            raise ValueError("No %s given" % kind)
        return await self._loader.load_bitmap(source)

    async def export(
        self,
        photo: PhotoSource,
        texture: TextureSource,
        settings: ExportSettings,
    ) -> PipelineResult:
        """
        Run one export.

        :param photo: Photo bitmap or raw image bytes.
        :param texture: Texture bitmap or texture name.
        :param settings: :py:class:`~texture_adder.settings.ExportSettings`.
        :return: :py:class:`PipelineResult`.
        """
        self.state = ExportState.IDLE
        plan = None
        try:
            self._enter(ExportState.DECODING)
            photo_bitmap = await self._load(photo, "photo")
            texture_bitmap = await self._load(texture, "texture")
            plan = plan_export(photo_bitmap, settings)

            self._enter(ExportState.COMPOSITING)
            surface = composite(
                photo_bitmap,
                texture_bitmap,
                plan.width,
                plan.height,
                settings.blend_mode,
                settings.opacity,
                plan.pixel_ratio,
            )

            self._enter(ExportState.APPLYING_FILTERS)
            surface = apply_tone(surface, settings.tone)

            self._enter(ExportState.ENCODING)
            image = encode_image(surface, plan.format, plan.quality, plan.base_name)
            del surface

            if self._sink is not None:
                self._enter(ExportState.DELIVERING)
                self._sink.deliver(image.data, image.mime_type, image.filename)
        except ExportError as e:
            failed_state = self.state
            self._enter(ExportState.FAILED, str(e))
            logger.error("Export failed while %s: %s" % (failed_state.value, e))
            return PipelineResult(error=str(e), failed_state=failed_state, plan=plan)

        self._enter(ExportState.DONE)
        return PipelineResult(image=image, plan=plan)


async def export_image(
    photo: PhotoSource,
    texture: TextureSource,
    settings: Optional[ExportSettings] = None,
    sink: Optional[DeliverySink] = None,
    loader: Optional[Loader] = None,
    observer: Optional[Observer] = None,
) -> PipelineResult:
    """Shortcut running a single :py:class:`Exporter` export."""
    exporter = Exporter(loader=loader, sink=sink, observer=observer)
    return await exporter.export(photo, texture, settings or ExportSettings())
