"""ANSI / VT100 escape-sequence builders.

Every function returns the exact bytes to send to the terminal.  Numeric
arguments are clamped (coordinates and counts to ``0..99999``, colour channels
and palette indices to ``0..255``) so that no sequence is ever longer than
:data:`ANSI_MAX_LENGTH` bytes, whatever the caller passes in.
"""

from __future__ import annotations

ANSI_MAX_LENGTH = 32

_CSI = b"\x1b["
_MAX_COORD = 99999

# ---------------------------------------------------------------------------
# Fixed sequences
# ---------------------------------------------------------------------------

_CURSOR_HIDE = b"\x1b[?25l"
_CURSOR_SHOW = b"\x1b[?25h"
_CURSOR_SAVE = b"\x1b[s"
_CURSOR_RESTORE = b"\x1b[u"
_CLEAR_SCREEN = b"\x1b[2J\x1b[H"
_CLEAR_LINE = b"\x1b[2K"
_ALT_SCREEN_ENTER = b"\x1b[?1049h"
_ALT_SCREEN_EXIT = b"\x1b[?1049l"
_SYNC_START = b"\x1b[?2026h"
_SYNC_END = b"\x1b[?2026l"
_ERASE_LINE_START = b"\x1b[1K"
_ERASE_LINE_END = b"\x1b[0K"
_ERASE_SCREEN_END = b"\x1b[0J"
_ERASE_SCREEN_START = b"\x1b[1J"

_RESET = b"\x1b[0m"
_BOLD = b"\x1b[1m"
_DIM = b"\x1b[2m"
_ITALIC = b"\x1b[3m"
_UNDERLINE = b"\x1b[4m"
_INVERSE = b"\x1b[7m"
_STRIKETHROUGH = b"\x1b[9m"


def _coord(value: int) -> int:
    return min(max(int(value), 0), _MAX_COORD)


def _byte(value: int) -> int:
    return min(max(int(value), 0), 255)


def _csi(params: str, final: str) -> bytes:
    return _CSI + params.encode("ascii") + final.encode("ascii")


# ---------------------------------------------------------------------------
# Cursor
# ---------------------------------------------------------------------------


def cursor_move(col: int, row: int) -> bytes:
    """Move to 0-based (*col*, *row*); the wire format is 1-based."""
    return _csi(f"{_coord(row) + 1};{_coord(col) + 1}", "H")


def cursor_hide() -> bytes:
    return _CURSOR_HIDE


def cursor_show() -> bytes:
    return _CURSOR_SHOW


def cursor_save() -> bytes:
    return _CURSOR_SAVE


def cursor_restore() -> bytes:
    return _CURSOR_RESTORE


def cursor_column(col: int) -> bytes:
    return _csi(str(_coord(col) + 1), "G")


def cursor_next_line(lines: int = 1) -> bytes:
    return _csi(str(_coord(lines)), "E")


def cursor_prev_line(lines: int = 1) -> bytes:
    return _csi(str(_coord(lines)), "F")


# ---------------------------------------------------------------------------
# Screen
# ---------------------------------------------------------------------------


def clear_screen() -> bytes:
    """Erase the whole screen and home the cursor."""
    return _CLEAR_SCREEN


def clear_line() -> bytes:
    return _CLEAR_LINE


def erase_line_start() -> bytes:
    return _ERASE_LINE_START


def erase_line_end() -> bytes:
    return _ERASE_LINE_END


def erase_screen_start() -> bytes:
    return _ERASE_SCREEN_START


def erase_screen_end() -> bytes:
    return _ERASE_SCREEN_END


def scroll_up(lines: int = 1) -> bytes:
    return _csi(str(_coord(lines)), "S")


def scroll_down(lines: int = 1) -> bytes:
    return _csi(str(_coord(lines)), "T")


def alternate_screen_enter() -> bytes:
    return _ALT_SCREEN_ENTER


def alternate_screen_exit() -> bytes:
    return _ALT_SCREEN_EXIT


def sync_start() -> bytes:
    """Begin a synchronized update (DEC private mode 2026)."""
    return _SYNC_START


def sync_end() -> bytes:
    """End a synchronized update; supporting terminals paint the batch at once."""
    return _SYNC_END


# ---------------------------------------------------------------------------
# SGR: colours and attributes
# ---------------------------------------------------------------------------


def fg_rgb(r: int, g: int, b: int) -> bytes:
    return _csi(f"38;2;{_byte(r)};{_byte(g)};{_byte(b)}", "m")


def bg_rgb(r: int, g: int, b: int) -> bytes:
    return _csi(f"48;2;{_byte(r)};{_byte(g)};{_byte(b)}", "m")


def fg_256(color: int) -> bytes:
    return _csi(f"38;5;{_byte(color)}", "m")


def bg_256(color: int) -> bytes:
    return _csi(f"48;5;{_byte(color)}", "m")


def reset() -> bytes:
    return _RESET


def bold() -> bytes:
    return _BOLD


def dim() -> bytes:
    return _DIM


def italic() -> bytes:
    return _ITALIC


def underline() -> bytes:
    return _UNDERLINE


def inverse() -> bytes:
    return _INVERSE


def strikethrough() -> bytes:
    return _STRIKETHROUGH


# ---------------------------------------------------------------------------
# Colour conversion
# ---------------------------------------------------------------------------


def _cube_index(channel: int) -> int:
    if channel < 48:
        return 0
    if channel < 115:
        return 1
    return min((channel - 35) // 40, 5)


def rgb_to_ansi256(r: int, g: int, b: int) -> int:
    """Map an RGB colour onto the xterm 256-colour palette.

    Greys use the 24-step ramp at 232-255 (with the cube's black and white at
    the ends); everything else goes to the 6x6x6 cube at 16-231.
    """
    r, g, b = _byte(r), _byte(g), _byte(b)
    if r == g == b:
        if r < 8:
            return 16
        if r > 248:
            return 231
        return min(232 + (r - 8) // 10, 255)
    return 16 + 36 * _cube_index(r) + 6 * _cube_index(g) + _cube_index(b)
