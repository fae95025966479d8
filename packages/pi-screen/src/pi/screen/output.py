"""Output destinations for rendered frames.

Provides an ``Output`` protocol and two concrete implementations:
``FdOutput`` writes straight to a file descriptor (standard output by
default) and ``StreamOutput`` writes to a binary file object.  Both retry
short writes and interrupted system calls until every byte is out, and turn
any other failure into :class:`~pi.screen.errors.OutputError`.

Setting ``PI_SCREEN_WRITE_LOG`` to a path mirrors everything written to that
file, which is handy when debugging escape sequences.
"""

from __future__ import annotations

import errno
import logging
import os
from typing import BinaryIO, Protocol

from pi.screen.config import get_write_log_path
from pi.screen.errors import OutputError

logger = logging.getLogger(__name__)

STDOUT_FILENO = 1


# ---------------------------------------------------------------------------
# Output protocol
# ---------------------------------------------------------------------------


class Output(Protocol):
    """Interface for a byte sink the renderer writes frames to."""

    def write(self, data: bytes) -> None:
        """Write all of *data* or raise ``OutputError``."""
        ...


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def write_all(fd: int, data: bytes) -> None:
    """Write every byte of *data* to *fd*.

    Short writes are continued and ``EINTR`` is retried; any other error is
    raised as ``OutputError``.
    """
    view = memoryview(data)
    while view:
        try:
            written = os.write(fd, view)
        except InterruptedError:
            continue
        except OSError as exc:
            raise OutputError(exc.errno, f"write to fd {fd} failed: {exc.strerror}") from exc
        if written <= 0:
            raise OutputError(errno.EIO, f"write to fd {fd} made no progress")
        view = view[written:]


def _append_write_log(path: str, data: bytes) -> None:
    try:
        with open(path, "ab") as f:
            f.write(data)
    except OSError:
        pass


# ---------------------------------------------------------------------------
# Implementations
# ---------------------------------------------------------------------------


class FdOutput:
    """Write frames to a raw file descriptor (standard output by default)."""

    def __init__(self, fd: int = STDOUT_FILENO) -> None:
        self._fd = fd
        self._write_log_path = get_write_log_path()

    @property
    def fd(self) -> int:
        return self._fd

    def is_tty(self) -> bool:
        """Whether the descriptor is an interactive terminal."""
        try:
            return os.isatty(self._fd)
        except OSError:
            return False

    def write(self, data: bytes) -> None:
        if not data:
            return
        try:
            write_all(self._fd, data)
        except OutputError:
            logger.warning("Output to fd %d failed after partial frame", self._fd)
            raise
        if self._write_log_path:
            _append_write_log(self._write_log_path, data)


class StreamOutput:
    """Write frames to a binary stream such as ``sys.stdout.buffer``."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self._write_log_path = get_write_log_path()

    def write(self, data: bytes) -> None:
        if not data:
            return
        view = memoryview(data)
        try:
            while view:
                try:
                    written = self._stream.write(view)
                except InterruptedError:
                    continue
                if written is None:
                    raise OutputError(errno.EAGAIN, "stream is not ready for writing")
                view = view[written:]
            self._stream.flush()
        except OutputError:
            logger.warning("Output to stream failed after partial frame")
            raise
        except OSError as exc:
            logger.warning("Output to stream failed after partial frame")
            raise OutputError(exc.errno, f"stream write failed: {exc}") from exc
        if self._write_log_path:
            _append_write_log(self._write_log_path, data)
