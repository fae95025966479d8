"""Exception hierarchy for the screen-rendering core.

Every error raised by :mod:`pi.screen` derives from :class:`ScreenError` and
also from the closest built-in exception, so callers can catch either.
Out-of-bounds drawing and malformed UTF-8 are *not* errors: drawing calls clip
silently and the UTF-8 decoder recovers byte by byte.
"""

from __future__ import annotations


class ScreenError(Exception):
    """Base class for all screen-rendering errors."""


class InvalidDimensionError(ScreenError, ValueError):
    """A grid width or height is zero, negative, not an integer, or over the limit."""

    def __init__(self, width: object, height: object, max_width: int, max_height: int) -> None:
        self.width = width
        self.height = height
        self.max_width = max_width
        self.max_height = max_height
        super().__init__(
            f"invalid grid dimensions {width}x{height} "
            f"(allowed 1..{max_width} x 1..{max_height})"
        )


class AllocationError(ScreenError, MemoryError):
    """Cell storage could not be obtained; the target object is unchanged."""


class OutputError(ScreenError, OSError):
    """Writing to the output destination failed.

    The frame may have been partially emitted.  ``DiffRenderer`` reacts by
    marking its front grid dirty, so the next render repaints the whole screen
    (the same effect as :meth:`pi.screen.renderer.DiffRenderer.flush_all`).
    """
