"""Display width of a single codepoint.

An approximate East-Asian-width table covering ASCII, CJK, Hangul, fullwidth
forms and the common emoji blocks.  Everything else, including the
"ambiguous width" symbol blocks, is treated as narrow, which is how most
terminals draw it.
"""

from __future__ import annotations

ZWJ = 0x200D
VS15 = 0xFE0E
VS16 = 0xFE0F
KEYCAP = 0x20E3

# Each range is inclusive.
_WIDE_RANGES: tuple[tuple[int, int], ...] = (
    (0x1100, 0x115F),    # Hangul Jamo
    (0x2E80, 0x9FFF),    # CJK radicals .. unified ideographs
    (0xAC00, 0xD7AF),    # Hangul syllables
    (0xF900, 0xFAFF),    # CJK compatibility ideographs
    (0xFE10, 0xFE1F),    # Vertical forms
    (0xFE30, 0xFE6F),    # CJK compatibility forms
    (0xFF00, 0xFF60),    # Fullwidth forms
    (0xFFE0, 0xFFE6),    # Fullwidth signs
    (0x20000, 0x2FFFF),  # CJK extensions
)

_EMOJI_RANGES: tuple[tuple[int, int], ...] = (
    (0x1F300, 0x1F9FF),  # Misc symbols and pictographs, emoticons, ...
    (0x1FA00, 0x1FAFF),  # Symbols and pictographs extended-A, chess
    (0x1F1E6, 0x1F1FF),  # Regional indicators
)


def is_emoji_modifier(codepoint: int) -> bool:
    """Fitzpatrick skin-tone modifiers U+1F3FB..U+1F3FF."""
    return 0x1F3FB <= codepoint <= 0x1F3FF


def _in_ranges(codepoint: int, ranges: tuple[tuple[int, int], ...]) -> bool:
    for lo, hi in ranges:
        if lo <= codepoint <= hi:
            return True
    return False


def char_width(codepoint: int) -> int:
    """Return the number of terminal columns *codepoint* occupies (0, 1 or 2)."""
    if codepoint < 0x20 or codepoint == 0x7F:
        return 0
    if codepoint < 0x80:
        return 1

    if codepoint in (ZWJ, VS15, VS16):
        return 0
    if is_emoji_modifier(codepoint):
        return 0
    if 0x0300 <= codepoint <= 0x036F:
        return 0
    if codepoint == KEYCAP:
        return 0

    if _in_ranges(codepoint, _WIDE_RANGES):
        return 2
    if _in_ranges(codepoint, _EMOJI_RANGES):
        return 2

    # U+2300..U+2BFF (technical symbols, dingbats, ...) is East Asian
    # Ambiguous and lands here.
    return 1
