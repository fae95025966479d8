"""Two-dimensional grid of styled character cells.

A :class:`CellGrid` is the drawing surface that layout and paint code fill in
each frame and that :class:`~pi.screen.renderer.DiffRenderer` reconciles with
the terminal.  Coordinates are 0-based ``(x, y)`` = ``(column, row)``.

Wide characters occupy two columns: the glyph itself and a *continuation*
cell (codepoint ``0``) right after it, which never carries a style of its own.
Drawing outside the grid is silently clipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pi.screen.config import get_grid_limits
from pi.screen.errors import AllocationError, InvalidDimensionError
from pi.screen.style import DEFAULT_STYLE, Style, style_transition
from pi.screen.utf8 import MAX_CODEPOINT, REPLACEMENT_CHARACTER, iter_codepoints
from pi.screen.width import char_width

logger = logging.getLogger(__name__)

CONTINUATION = 0
SPACE = 0x20

# serialize() budget: worst case per cell (full SGR + glyph), per row, slack.
_SERIALIZE_CELL_COST = 60
_SERIALIZE_ROW_COST = 10
_SERIALIZE_SLACK = 64
_RESET = "\x1b[0m"


@dataclass
class Cell:
    codepoint: int = SPACE
    style: Style = DEFAULT_STYLE
    dirty: bool = True

    @property
    def is_continuation(self) -> bool:
        return self.codepoint == CONTINUATION

    @property
    def width(self) -> int:
        """Columns this cell's glyph covers (0 for a continuation cell)."""
        if self.codepoint == CONTINUATION:
            return 0
        return char_width(self.codepoint)


def _allocate_cells(count: int) -> list[Cell]:
    return [Cell() for _ in range(count)]


def _build_storage(count: int) -> list[Cell]:
    try:
        return _allocate_cells(count)
    except MemoryError as exc:
        raise AllocationError(f"cannot allocate {count} cells") from exc


def _validate_dimensions(width: object, height: object) -> None:
    limits = get_grid_limits()
    for value, maximum in ((width, limits.max_width), (height, limits.max_height)):
        if (
            not isinstance(value, int)
            or isinstance(value, bool)
            or not 1 <= value <= maximum
        ):
            raise InvalidDimensionError(width, height, limits.max_width, limits.max_height)


def _glyph(codepoint: int) -> str:
    if 0 < codepoint <= MAX_CODEPOINT and not 0xD800 <= codepoint <= 0xDFFF:
        return chr(codepoint)
    return chr(REPLACEMENT_CHARACTER)


class CellGrid:
    """An owned, resizable ``width x height`` array of :class:`Cell`."""

    def __init__(self, width: int, height: int) -> None:
        _validate_dimensions(width, height)
        self._cells: list[Cell] = _build_storage(width * height)
        self._width = width
        self._height = height

    def __repr__(self) -> str:
        return f"CellGrid(width={self._width}, height={self._height})"

    # -- properties ---------------------------------------------------------

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def __len__(self) -> int:
        return len(self._cells)

    # -- sizing --------------------------------------------------------------

    def resize(self, width: int, height: int) -> None:
        """Change the grid size, keeping the overlapping top-left region.

        New cells are dirty spaces.  Raises ``InvalidDimensionError`` or
        ``AllocationError``; in both cases the grid is left exactly as it was.
        """
        _validate_dimensions(width, height)
        new_cells = _build_storage(width * height)

        copy_width = min(self._width, width)
        for y in range(min(self._height, height)):
            src = y * self._width
            dst = y * width
            new_cells[dst : dst + copy_width] = self._cells[src : src + copy_width]

        logger.debug(
            "Resized grid %dx%d -> %dx%d", self._width, self._height, width, height
        )
        self._cells = new_cells
        self._width = width
        self._height = height

    # -- drawing -------------------------------------------------------------

    def clear(self) -> None:
        """Reset every cell to a dirty, default-styled space."""
        for cell in self._cells:
            cell.codepoint = SPACE
            cell.style = DEFAULT_STYLE
            cell.dirty = True

    def set_cell(
        self,
        x: int,
        y: int,
        codepoint: int,
        style: Style | None = None,
    ) -> None:
        """Set one cell; ``None`` style means the default style.

        Coordinates outside the grid are ignored.  Overwriting either half of
        a wide character turns its other half into a plain space.
        """
        if not (0 <= x < self._width and 0 <= y < self._height):
            return

        row = y * self._width
        cell = self._cells[row + x]

        if codepoint != CONTINUATION and cell.is_continuation and x > 0:
            head = self._cells[row + x - 1]
            if head.width == 2:
                _blank(head)

        if x + 1 < self._width and cell.width == 2 and char_width(codepoint) != 2:
            tail = self._cells[row + x + 1]
            if tail.is_continuation:
                _blank(tail)

        cell.codepoint = codepoint
        if codepoint == CONTINUATION or style is None:
            cell.style = DEFAULT_STYLE
        else:
            cell.style = style
        cell.dirty = True

    def write_text(
        self,
        x: int,
        y: int,
        text: str | bytes,
        style: Style | None = None,
    ) -> None:
        """Draw *text* left to right from column *x* on row *y*.

        ``bytes`` are decoded as UTF-8 (malformed bytes become one-column
        glyphs).  Zero-width codepoints are dropped and a NUL ends the text.
        Wide characters get a continuation cell when the next column fits.
        """
        if not text:
            return

        if isinstance(text, str):
            codepoints = (ord(ch) for ch in text)
        else:
            codepoints = (cp for cp, _, _ in iter_codepoints(text))

        cx = x
        for cp in codepoints:
            if cx >= self._width or cp == 0:
                break
            w = char_width(cp)
            if w == 0:
                continue

            self.set_cell(cx, y, cp, style)
            if w == 2:
                if cx >= 0 and cx + 1 < self._width:
                    self.set_cell(cx + 1, y, CONTINUATION)
                elif cx == -1:
                    # Left half clipped off-grid: don't leave a stray right half.
                    self.set_cell(0, y, SPACE, style)
            cx += w

    def fill_rect(
        self,
        x: int,
        y: int,
        w: int,
        h: int,
        codepoint: int,
        style: Style | None = None,
    ) -> None:
        """Set every cell of the rectangle, clipped to the grid.

        A wide *codepoint* is laid out in pairs from column *x*, each glyph
        followed by its continuation cell.  A pair cut by the rectangle or
        grid edge leaves a space in the column that remains.
        """
        x0, x1 = max(x, 0), min(x + w, self._width)
        y0, y1 = max(y, 0), min(y + h, self._height)
        if char_width(codepoint) != 2:
            for cy in range(y0, y1):
                for cx in range(x0, x1):
                    self.set_cell(cx, cy, codepoint, style)
            return

        # First pair that reaches the grid, keeping pairs aligned to x.
        start = x + (x0 - x) // 2 * 2 if x < x0 else x
        for cy in range(y0, y1):
            for cx in range(start, x1, 2):
                if cx >= x0 and cx + 1 < x1:
                    self.set_cell(cx, cy, codepoint, style)
                    self.set_cell(cx + 1, cy, CONTINUATION)
                elif cx >= x0:
                    self.set_cell(cx, cy, SPACE, style)
                elif cx + 1 == x0 and x0 < x1:
                    self.set_cell(x0, cy, SPACE, style)

    # -- access --------------------------------------------------------------

    def get_cell(self, x: int, y: int) -> Cell | None:
        """Return the live cell at (*x*, *y*), or ``None`` when out of bounds."""
        if not (0 <= x < self._width and 0 <= y < self._height):
            return None
        return self._cells[y * self._width + x]

    def row_cells(self, y: int) -> list[Cell]:
        """The live cells of row *y* (empty when *y* is out of bounds)."""
        if not 0 <= y < self._height:
            return []
        start = y * self._width
        return self._cells[start : start + self._width]

    def row_text(self, y: int) -> str:
        """Glyphs of row *y* without styling, continuation cells skipped."""
        if not 0 <= y < self._height:
            return ""
        start = y * self._width
        return "".join(
            _glyph(cell.codepoint)
            for cell in self._cells[start : start + self._width]
            if not cell.is_continuation
        )

    # -- dirty tracking ------------------------------------------------------

    def mark_all_dirty(self) -> None:
        for cell in self._cells:
            cell.dirty = True

    def mark_clean(self) -> None:
        for cell in self._cells:
            cell.dirty = False

    # -- serialization -------------------------------------------------------

    def serialize(self, max_chars: int | None = None) -> str:
        """Render the grid as one string with inline SGR codes.

        Rows are joined with ``"\\n"`` and continuation cells are skipped.  A
        style sequence is only written when the style changes, and any row
        that ends styled is closed with a reset, so a default-styled grid is
        plain text.  Output is capped at a worst-case budget computed from the
        grid size (or *max_chars*); when the cap is hit the string is cut at a
        cell boundary and still ends unstyled.
        """
        if max_chars is None:
            budget = (
                self._width * self._height * _SERIALIZE_CELL_COST
                + self._height * _SERIALIZE_ROW_COST
                + _SERIALIZE_SLACK
            )
        else:
            budget = max_chars

        reserve = len(_RESET)
        parts: list[str] = []
        size = 0
        current = DEFAULT_STYLE
        truncated = False

        for y in range(self._height):
            if y > 0:
                if size + 1 + reserve > budget:
                    break
                parts.append("\n")
                size += 1

            start = y * self._width
            for cell in self._cells[start : start + self._width]:
                if cell.is_continuation:
                    continue
                piece = style_transition(current, cell.style).decode("ascii")
                piece += _glyph(cell.codepoint)
                if size + len(piece) + reserve > budget:
                    truncated = True
                    break
                parts.append(piece)
                size += len(piece)
                current = cell.style

            if current != DEFAULT_STYLE:
                parts.append(_RESET)
                size += len(_RESET)
                current = DEFAULT_STYLE
            if truncated:
                break

        return "".join(parts)


def _blank(cell: Cell) -> None:
    cell.codepoint = SPACE
    cell.style = DEFAULT_STYLE
    cell.dirty = True
