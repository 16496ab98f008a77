"""
Delivery sinks.

A sink receives the encoded bytes, their MIME type and a suggested filename.
The sink is chosen once per session with :py:func:`select_sink`, the export
path only calls :py:meth:`DeliverySink.deliver`.

Example::

    from texture_adder.export.delivery import select_sink

    sink = select_sink(directory='exports', share=my_share_function)
    sink.deliver(data, 'image/png', 'blended-image.png')
"""

import logging
import os
import webbrowser
from pathlib import Path
from typing import (
    BinaryIO,
    Callable,
    Optional,
    Protocol,
    Tuple,
    Union,
    runtime_checkable,
)

from texture_adder.constants import SHARE_TEXT, SHARE_TITLE
from texture_adder.errors import DeliveryError

logger = logging.getLogger(__name__)

#: Share callable: ``share(path, mime_type, title, text)``.
ShareFunc = Callable[[Path, str, str, str], None]


@runtime_checkable
class DeliverySink(Protocol):
    """Receiver of an encoded image."""

    def deliver(self, data: bytes, mime_type: str, filename: str) -> None: ...


class DownloadSink(object):
    """
    Write the file into a directory, the equivalent of a browser download.

    Existing files are not overwritten; a numeric suffix is appended.
    """

    def __init__(self, directory: Union[str, os.PathLike] = "."):
        self.directory = Path(directory)
        self.last_path: Optional[Path] = None

    def _create(self, filename: str) -> Tuple[Path, BinaryIO]:
        # Exclusive create, so a file appearing concurrently is never replaced.
        base = self.directory / Path(filename).name
        path, index = base, 0
        while True:
            try:
                return path, open(path, "xb")
            except FileExistsError:
                index += 1
                path = self.directory / ("%s-%d%s" % (base.stem, index, base.suffix))

    def deliver(self, data: bytes, mime_type: str, filename: str) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path, f = self._create(filename)
        except OSError as e:
            raise DeliveryError("Cannot save %s: %s" % (filename, e)) from e
        try:
            with f:
                f.write(data)
        except OSError as e:
            path.unlink(missing_ok=True)
            raise DeliveryError("Cannot save %s: %s" % (path, e)) from e
        self.last_path = path
        logger.info("Saved %s (%s, %d bytes)" % (path, mime_type, len(data)))


class ViewerSink(DownloadSink):
    """
    Save the file, then open it in the system viewer so the user can keep it
    from there.
    """

    def __init__(
        self,
        directory: Union[str, os.PathLike] = ".",
        opener: Callable[[str], bool] = webbrowser.open,
    ):
        super(ViewerSink, self).__init__(directory)
        self._opener = opener

    def deliver(self, data: bytes, mime_type: str, filename: str) -> None:
        super(ViewerSink, self).deliver(data, mime_type, filename)
        assert self.last_path is not None
        uri = self.last_path.resolve().as_uri()
        if not self._opener(uri):
            logger.warning("No viewer available for %s" % uri)


class ShareSink(object):
    """
    Hand the file to a native share function.

    The file is first saved through ``staging``. When sharing fails, the saved
    file is kept, which is the same outcome as a plain download.
    """

    def __init__(
        self,
        share: ShareFunc,
        staging: DownloadSink,
        title: str = SHARE_TITLE,
        text: str = SHARE_TEXT,
    ):
        self._share = share
        self._staging = staging
        self.title = title
        self.text = text
        self.shared = False

    @property
    def last_path(self) -> Optional[Path]:
        return self._staging.last_path

    def deliver(self, data: bytes, mime_type: str, filename: str) -> None:
        self._staging.deliver(data, mime_type, filename)
        path = self._staging.last_path
        assert path is not None
        try:
            self._share(path, mime_type, self.title, self.text)
        except Exception as e:
            self.shared = False
            logger.warning("Share failed, kept %s: %s" % (path, e))
            return
        self.shared = True
        logger.info("Shared %s" % path)


def can_share(share: Optional[ShareFunc], probe: Optional[Callable[[], bool]] = None) -> bool:
    """Feature probe for the native share mechanism."""
    if share is None:
        return False
    if probe is None:
        return True
    try:
        return bool(probe())
    except Exception as e:
        logger.debug("Share probe failed: %s" % e)
        return False


def select_sink(
    directory: Union[str, os.PathLike] = ".",
    share: Optional[ShareFunc] = None,
    probe: Optional[Callable[[], bool]] = None,
    open_viewer: bool = False,
) -> DeliverySink:
    """
    Choose the delivery sink for a session.

    :param directory: Where files are written.
    :param share: Native share function, if the host has one.
    :param probe: Optional capability check for ``share``.
    :param open_viewer: Open saved files in the system viewer.
    :return: :py:class:`ShareSink` when sharing is available, otherwise
        :py:class:`ViewerSink` or :py:class:`DownloadSink`.
    """
    fallback: DownloadSink = ViewerSink(directory) if open_viewer else DownloadSink(directory)
    if can_share(share, probe):
        assert share is not None
        logger.debug("Using native share")
        return ShareSink(share, DownloadSink(directory))
    logger.debug("Using %s" % type(fallback).__name__)
    return fallback
