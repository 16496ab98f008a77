"""
Errors raised by the export pipeline.

Every pipeline stage either returns its output or raises one of the
:py:class:`ExportError` subclasses below. The export orchestrator turns them
into a failed :py:class:`~texture_adder.export.pipeline.PipelineResult`.
"""


class ExportError(Exception):
    """Base class of pipeline failures."""


class DecodeError(ExportError):
    """Image bytes or a texture asset could not be decoded."""


class SurfaceAllocationError(ExportError):
    """A working surface could not be allocated."""


class EncodeError(ExportError):
    """The encoder could not produce a buffer in the requested format."""


class DeliveryError(ExportError):
    """The delivery sink rejected the encoded image."""
