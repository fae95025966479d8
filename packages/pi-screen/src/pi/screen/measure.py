"""Column measurement for text that may contain ANSI escape sequences.

Every function accepts either ``str`` or UTF-8 ``bytes``.  A ``str`` is walked
codepoint by codepoint; ``bytes`` go through the recovering decoder in
:mod:`pi.screen.utf8`, so malformed input still measures (one column per bad
byte) instead of raising.

Escape sequences recognised (and given zero width):

* CSI: ``ESC[`` parameters (0x20-0x3F) and a final byte (0x40-0x7E)
* OSC: ``ESC]`` ... ``BEL`` or ``ESC\\``
* any other ``ESC`` followed by one byte

An unterminated sequence at the end of the input is skipped to the end.
Measuring works on scalar codepoints, not grapheme clusters: a combining mark
split from its base character across two strings is measured on its own.
"""

from __future__ import annotations

from typing import Iterator, Sequence, TypeVar

from pi.screen.utf8 import decode_bounded
from pi.screen.width import char_width

TextT = TypeVar("TextT", str, bytes)

ESC = 0x1B
BEL = 0x07

# Longest escape sequence the scanner will walk before giving up.
MAX_ANSI_SEQUENCE_LENGTH = 64

_ESCAPE = -1


def _codes(text: str | bytes | bytearray) -> Sequence[int]:
    if isinstance(text, str):
        return [ord(ch) for ch in text]
    return text


def _skip_escape(codes: Sequence[int], pos: int, end: int) -> int:
    if pos >= end or codes[pos] != ESC:
        return 0

    start = pos
    max_end = min(pos + MAX_ANSI_SEQUENCE_LENGTH, end)

    pos += 1
    if pos >= end:
        return 1

    introducer = codes[pos]
    if introducer == 0x5B:  # '[' -- CSI
        pos += 1
        while pos < max_end:
            c = codes[pos]
            if 0x40 <= c <= 0x7E:
                return pos - start + 1
            if c < 0x20 or c > 0x3F:
                break
            pos += 1
        return pos - start

    if introducer == 0x5D:  # ']' -- OSC
        pos += 1
        while pos < max_end:
            if codes[pos] == BEL:
                return pos - start + 1
            if codes[pos] == ESC and pos + 1 < end and codes[pos + 1] == 0x5C:
                return pos - start + 2
            pos += 1
        return pos - start

    return 2


def skip_ansi_sequence(text: str | bytes, pos: int = 0, end: int | None = None) -> int:
    """Return the length of the escape sequence starting at *pos*, or 0.

    Lengths are in characters for ``str`` and in bytes for ``bytes``.
    """
    if end is None:
        end = len(text)
    return _skip_escape(_codes(text), pos, min(end, len(text)))


def _tokens(
    text: str | bytes | bytearray,
    length: int | None = None,
) -> Iterator[tuple[int, int, int]]:
    """Yield ``(start, stop, codepoint)`` spans; escape sequences get ``_ESCAPE``.

    Walking stops at a NUL codepoint or after *length* units.
    """
    codes = _codes(text)
    end = len(codes) if length is None else max(0, min(length, len(codes)))
    is_str = isinstance(text, str)
    pos = 0
    while pos < end:
        skip = _skip_escape(codes, pos, end)
        if skip > 0:
            yield pos, pos + skip, _ESCAPE
            pos += skip
            continue

        if is_str:
            cp, size = codes[pos], 1
        else:
            cp, size = decode_bounded(text, pos, end - pos)
        if size <= 0 or cp == 0:
            return
        yield pos, pos + size, cp
        pos += size


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def string_width(text: str | bytes, length: int | None = None) -> int:
    """Display width of *text*, ignoring escape sequences.

    *length* limits how much of *text* is examined (characters for ``str``,
    bytes for ``bytes``).
    """
    if not text:
        return 0
    width = 0
    for _, _, cp in _tokens(text, length):
        if cp != _ESCAPE:
            width += char_width(cp)
    return width


def strip_ansi(text: TextT) -> TextT:
    """Remove every escape sequence from *text*."""
    parts = [text[start:stop] for start, stop, cp in _tokens(text) if cp != _ESCAPE]
    return text[:0].join(parts)


def slice_ansi(text: TextT, start: int, end: int) -> TextT:
    """Return the part of *text* between display columns *start* and *end*.

    Escape sequences inside the range are kept, and the last sequence seen
    before *start* is prepended to the first visible character so the slice
    keeps its styling.  Returns an empty result when ``start < 0`` or
    ``end <= start``.
    """
    if start < 0 or end <= start:
        return text[:0]

    parts: list[TextT] = []
    pending: TextT | None = None
    column = 0

    for span_start, span_stop, cp in _tokens(text):
        chunk = text[span_start:span_stop]
        if cp == _ESCAPE:
            if column < start:
                pending = chunk
            elif column < end:
                parts.append(chunk)
            continue

        if start <= column < end:
            if not parts and pending is not None:
                parts.append(pending)
            parts.append(chunk)

        column += char_width(cp)
        if column >= end:
            break

    return text[:0].join(parts)


def pad(text: str, width: int, align: str = "l", pad_char: str = " ") -> str:
    """Pad *text* with *pad_char* to *width* display columns.

    *align* is ``"l"``, ``"r"`` or ``"c"`` (case-insensitive; anything else is
    left).  Centring puts the odd column on the right.  Text that is already
    at least *width* columns wide is returned unchanged.

    Only the first character of *pad_char* is used; an empty *pad_char*, or
    one that is not exactly one column wide, pads with spaces.
    """
    pad_char = pad_char[:1]
    if not pad_char or char_width(ord(pad_char)) != 1:
        pad_char = " "
    width = max(width, 0)
    text_width = string_width(text)
    if text_width >= width:
        return text

    padding = width - text_width
    mode = align.lower()
    if mode == "r":
        left, right = padding, 0
    elif mode == "c":
        left = padding // 2
        right = padding - left
    else:
        left, right = 0, padding

    return pad_char * left + text + pad_char * right
