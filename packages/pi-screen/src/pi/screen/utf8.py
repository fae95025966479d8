"""UTF-8 decoding and encoding, one codepoint at a time.

The decoders never fail: a truncated or malformed sequence (bad continuation
byte, overlong form, UTF-16 surrogate, value above U+10FFFF) is reported as a
single byte whose "codepoint" is the raw lead byte.  This keeps rendering going
on garbage input instead of corrupting the column arithmetic of everything that
follows.
"""

from __future__ import annotations

from typing import Iterator

MAX_CODEPOINT = 0x10FFFF
REPLACEMENT_CHARACTER = 0xFFFD

_REPLACEMENT_BYTES = b"\xef\xbf\xbd"


def _is_continuation(byte: int) -> bool:
    return (byte & 0xC0) == 0x80


def _sequence_length(lead: int) -> int:
    """Expected sequence length for *lead*, or 0 if it cannot start one."""
    if (lead & 0x80) == 0:
        return 1
    if (lead & 0xE0) == 0xC0:
        return 2
    if (lead & 0xF0) == 0xE0:
        return 3
    if (lead & 0xF8) == 0xF0:
        return 4
    return 0


def _combine(data: bytes | bytearray, offset: int, length: int) -> int | None:
    """Assemble a validated multi-byte sequence, or ``None`` if it is invalid.

    The caller guarantees ``length`` bytes are available at ``offset``.
    """
    lead = data[offset]
    for i in range(1, length):
        if not _is_continuation(data[offset + i]):
            return None

    if length == 2:
        cp = ((lead & 0x1F) << 6) | (data[offset + 1] & 0x3F)
        return cp if cp >= 0x80 else None

    if length == 3:
        cp = (
            ((lead & 0x0F) << 12)
            | ((data[offset + 1] & 0x3F) << 6)
            | (data[offset + 2] & 0x3F)
        )
        if cp < 0x800 or 0xD800 <= cp <= 0xDFFF:
            return None
        return cp

    cp = (
        ((lead & 0x07) << 18)
        | ((data[offset + 1] & 0x3F) << 12)
        | ((data[offset + 2] & 0x3F) << 6)
        | (data[offset + 3] & 0x3F)
    )
    if cp < 0x10000 or cp > MAX_CODEPOINT:
        return None
    return cp


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def decode_bounded(
    data: bytes | bytearray,
    offset: int = 0,
    remaining: int | None = None,
) -> tuple[int, int]:
    """Decode one codepoint from ``data[offset:offset + remaining]``.

    Returns ``(codepoint, bytes_consumed)``.  ``remaining`` defaults to the rest
    of *data*; nothing past ``offset + remaining`` is ever read.  When no bytes
    are available ``(0, 0)`` is returned.
    """
    available = len(data) - offset
    if remaining is None or remaining > available:
        remaining = available
    if remaining <= 0:
        return (0, 0)

    lead = data[offset]
    length = _sequence_length(lead)
    if length == 1:
        return (lead, 1)
    if length == 0 or remaining < length:
        return (lead, 1)

    cp = _combine(data, offset, length)
    if cp is None:
        return (lead, 1)
    return (cp, length)


def decode_unbounded(data: bytes | bytearray, offset: int = 0) -> tuple[int, int]:
    """Decode one codepoint from NUL-terminated *data* starting at *offset*.

    Equivalent to :func:`decode_bounded` with the length taken from the first
    zero byte (or the end of *data*).  A terminator at *offset* yields
    ``(0, 0)``.
    """
    end = offset
    limit = min(len(data), offset + 4)
    while end < limit and data[end] != 0:
        end += 1
    return decode_bounded(data, offset, end - offset)


def iter_codepoints(
    data: bytes | bytearray,
    length: int | None = None,
) -> Iterator[tuple[int, int, int]]:
    """Yield ``(codepoint, offset, size)`` for every codepoint in *data*.

    Stops at the first NUL byte or after *length* bytes.
    """
    end = len(data) if length is None else min(length, len(data))
    pos = 0
    while pos < end:
        cp, size = decode_bounded(data, pos, end - pos)
        if size == 0 or cp == 0:
            return
        yield cp, pos, size
        pos += size


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def encode_into(codepoint: int, buf: bytearray, offset: int = 0) -> int:
    """Write the UTF-8 form of *codepoint* into *buf* at *offset*.

    *buf* must have room for 4 bytes at *offset*.  Returns the number of bytes
    written (1..4).  Surrogates and values outside ``0..0x10FFFF`` are
    written as U+FFFD.
    """
    if 0 <= codepoint < 0x80:
        buf[offset] = codepoint
        return 1
    if 0x80 <= codepoint < 0x800:
        buf[offset] = 0xC0 | (codepoint >> 6)
        buf[offset + 1] = 0x80 | (codepoint & 0x3F)
        return 2
    if 0x800 <= codepoint < 0x10000 and not 0xD800 <= codepoint <= 0xDFFF:
        buf[offset] = 0xE0 | (codepoint >> 12)
        buf[offset + 1] = 0x80 | ((codepoint >> 6) & 0x3F)
        buf[offset + 2] = 0x80 | (codepoint & 0x3F)
        return 3
    if 0x10000 <= codepoint <= MAX_CODEPOINT:
        buf[offset] = 0xF0 | (codepoint >> 18)
        buf[offset + 1] = 0x80 | ((codepoint >> 12) & 0x3F)
        buf[offset + 2] = 0x80 | ((codepoint >> 6) & 0x3F)
        buf[offset + 3] = 0x80 | (codepoint & 0x3F)
        return 4

    buf[offset : offset + 3] = _REPLACEMENT_BYTES
    return 3


def encode(codepoint: int) -> bytes:
    """Return the UTF-8 bytes of *codepoint* (U+FFFD when not a scalar value)."""
    buf = bytearray(4)
    n = encode_into(codepoint, buf)
    return bytes(buf[:n])
