"""Differential renderer: reconcile a target grid with the terminal.

:class:`DiffRenderer` keeps a *front* :class:`~pi.screen.grid.CellGrid` that
mirrors what the terminal is showing.  Each :meth:`~DiffRenderer.render` call
compares the caller's target grid with the front grid and writes only the
cells that differ, tracking the terminal cursor and the active SGR style so
that redundant ``cursor_move`` and style sequences are never sent.  Every
frame is wrapped in a synchronized-update block (``ESC[?2026h`` ...
``ESC[?2026l``) and written in as few output calls as possible.

Typical use::

    renderer = DiffRenderer(80, 24)
    renderer.enter_alternate_screen()
    frame = CellGrid(80, 24)
    frame.write_text(0, 0, "hello", Style(bold=True))
    renderer.render(frame)
    ...
    renderer.exit_alternate_screen()
    renderer.close()
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, fields

from pi.screen import ansi
from pi.screen.config import OUTPUT_BUFFER_SIZE
from pi.screen.errors import OutputError, ScreenError
from pi.screen.grid import CellGrid
from pi.screen.output import FdOutput, Output
from pi.screen.style import DEFAULT_STYLE, Style, style_sequence, style_transition
from pi.screen.utf8 import encode
from pi.screen.width import char_width

logger = logging.getLogger(__name__)


class ScreenMode(enum.Enum):
    NORMAL = "normal"
    ALTERNATE = "alternate"


@dataclass
class RenderStats:
    """Counters accumulated across frames (see :meth:`DiffRenderer.reset_stats`)."""

    frames: int = 0
    cells_written: int = 0
    cursor_moves: int = 0
    bytes_written: int = 0
    write_calls: int = 0

    def reset(self) -> None:
        for f in fields(self):
            setattr(self, f.name, 0)


# ---------------------------------------------------------------------------
# DiffRenderer
# ---------------------------------------------------------------------------


class DiffRenderer:
    """Write the minimal byte stream that turns the screen into a target grid.

    The terminal is assumed to start blank, with the default style active and
    the cursor at an unknown position.  If the screen may have been touched by
    anything else, call :meth:`flush_all` so the next frame repaints every
    cell.
    """

    def __init__(self, width: int, height: int, output: Output | None = None) -> None:
        front = CellGrid(width, height)
        front.mark_clean()
        self._front: CellGrid | None = front
        self._output: Output = output if output is not None else FdOutput()

        # Terminal state as last written; ``None`` means unknown.
        self._cursor: tuple[int, int] | None = None
        self._style: Style | None = DEFAULT_STYLE
        self._cursor_visible = True
        self._mode = ScreenMode.NORMAL

        self._stats = RenderStats()

    def __repr__(self) -> str:
        if self._front is None:
            return "DiffRenderer(closed)"
        return f"DiffRenderer(width={self._front.width}, height={self._front.height})"

    # -- properties ---------------------------------------------------------

    @property
    def front(self) -> CellGrid:
        """The grid believed to be on screen.  Read it, don't draw into it."""
        return self._require_front()

    @property
    def mode(self) -> ScreenMode:
        return self._mode

    @property
    def cursor_visible(self) -> bool:
        return self._cursor_visible

    @property
    def cursor_position(self) -> tuple[int, int] | None:
        """Where the next glyph would land, as ``(col, row)``, if known."""
        return self._cursor

    @property
    def closed(self) -> bool:
        return self._front is None

    @property
    def stats(self) -> RenderStats:
        return self._stats

    def reset_stats(self) -> None:
        self._stats.reset()

    # -- lifecycle ------------------------------------------------------------

    def close(self) -> None:
        """Release the front grid.  Calling ``close`` twice is harmless."""
        if self._front is None:
            return
        self._front = None
        self._cursor = None
        logger.debug("Renderer closed after %d frames", self._stats.frames)

    def resize(self, width: int, height: int) -> None:
        """Resize the front grid and schedule a full repaint."""
        front = self._require_front()
        front.resize(width, height)
        front.mark_all_dirty()
        self._cursor = None

    def flush_all(self) -> None:
        """Forget what is on screen; the next :meth:`render` repaints everything."""
        self._require_front().mark_all_dirty()

    # -- screen mode ----------------------------------------------------------

    def enter_alternate_screen(self) -> None:
        front = self._require_front()
        if self._mode is ScreenMode.ALTERNATE:
            return
        self._write(
            ansi.alternate_screen_enter() + ansi.clear_screen() + ansi.cursor_hide()
        )
        front.clear()
        front.mark_clean()
        self._cursor = (0, 0)
        self._cursor_visible = False
        self._mode = ScreenMode.ALTERNATE
        logger.debug("Entered alternate screen")

    def exit_alternate_screen(self) -> None:
        front = self._require_front()
        if self._mode is ScreenMode.NORMAL:
            return
        self._write(ansi.cursor_show() + ansi.alternate_screen_exit())
        front.mark_all_dirty()
        self._cursor = None
        self._cursor_visible = True
        self._mode = ScreenMode.NORMAL
        logger.debug("Left alternate screen")

    # -- cursor ---------------------------------------------------------------

    def show_cursor(self) -> None:
        self._require_front()
        self._write(ansi.cursor_show())
        self._cursor_visible = True

    def hide_cursor(self) -> None:
        self._require_front()
        self._write(ansi.cursor_hide())
        self._cursor_visible = False

    def move_cursor(self, col: int, row: int) -> None:
        front = self._require_front()
        self._write(ansi.cursor_move(col, row))
        self._stats.cursor_moves += 1
        if 0 <= col < front.width and 0 <= row < front.height:
            self._cursor = (col, row)
        else:
            self._cursor = None

    # -- rendering ------------------------------------------------------------

    def render(self, target: CellGrid) -> None:
        """Bring the screen in line with *target*.

        Only the region shared by *target* and the front grid is considered.
        Raises ``OutputError`` if the output fails; the renderer then treats
        the screen as unknown and repaints it in full on the next frame.
        """
        front = self._require_front()
        out = bytearray()

        # -- 1. Open the synchronized update --------------------------------
        out += ansi.sync_start()

        # -- 2. Emit changed cells -----------------------------------------
        width = min(target.width, front.width)
        height = min(target.height, front.height)
        written = 0

        try:
            for y in range(height):
                target_row = target.row_cells(y)
                front_row = front.row_cells(y)
                for x in range(width):
                    cell = target_row[x]
                    if cell.is_continuation:
                        continue

                    current = front_row[x]
                    if (
                        not current.dirty
                        and current.codepoint == cell.codepoint
                        and current.style == cell.style
                    ):
                        continue

                    if self._cursor != (x, y):
                        self._emit(out, ansi.cursor_move(x, y))
                        self._stats.cursor_moves += 1

                    if self._style is None:
                        self._emit(out, ansi.reset() + style_sequence(cell.style))
                    else:
                        transition = style_transition(self._style, cell.style)
                        if transition:
                            self._emit(out, transition)
                    self._style = cell.style

                    self._emit(out, encode(cell.codepoint))
                    written += 1

                    current.codepoint = cell.codepoint
                    current.style = cell.style
                    current.dirty = False

                    w = char_width(cell.codepoint)
                    if w == 2 and x + 1 < width:
                        follower = target_row[x + 1]
                        if follower.is_continuation:
                            shadow = front_row[x + 1]
                            shadow.codepoint = follower.codepoint
                            shadow.style = follower.style
                            shadow.dirty = False

                    if x + w < front.width:
                        self._cursor = (x + w, y)
                    else:
                        # Past the right edge the terminal's cursor is in a
                        # pending-wrap state we can't rely on.
                        self._cursor = None

            # -- 3. Leave the terminal in the default style -------------------
            if written:
                self._emit(out, ansi.reset())
                self._style = DEFAULT_STYLE

            # -- 4. Close the synchronized update ---------------------------
            self._emit(out, ansi.sync_end())

            # -- 5. Flush ---------------------------------------------------
            self._flush(out)
        except OutputError:
            self._forget_terminal_state()
            raise

        self._stats.frames += 1
        self._stats.cells_written += written
        logger.debug(
            "Rendered frame %d: %d cells, %d cursor moves",
            self._stats.frames,
            written,
            self._stats.cursor_moves,
        )

    def render_with_cursor(self, target: CellGrid, show_cursor: bool) -> None:
        """Render *target*, then show or hide the terminal cursor."""
        self.render(target)
        if show_cursor:
            self.show_cursor()
        else:
            self.hide_cursor()

    # -- internals ------------------------------------------------------------

    def _require_front(self) -> CellGrid:
        if self._front is None:
            raise ScreenError("renderer is closed")
        return self._front

    def _emit(self, out: bytearray, data: bytes) -> None:
        if len(out) + len(data) >= OUTPUT_BUFFER_SIZE:
            self._flush(out)
        out += data

    def _flush(self, out: bytearray) -> None:
        if not out:
            return
        self._output.write(bytes(out))
        self._stats.bytes_written += len(out)
        self._stats.write_calls += 1
        del out[:]

    def _write(self, data: bytes) -> None:
        try:
            self._output.write(data)
        except OutputError:
            self._forget_terminal_state()
            raise
        self._stats.bytes_written += len(data)
        self._stats.write_calls += 1

    def _forget_terminal_state(self) -> None:
        # Some unknown prefix of the output reached the terminal.
        if self._front is not None:
            self._front.mark_all_dirty()
        self._cursor = None
        self._style = None
