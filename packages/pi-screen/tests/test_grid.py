"""Tests for pi.screen.grid -- CellGrid drawing, resizing and serialization."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

import pi.screen.grid as grid_module
from pi.screen.config import reset_grid_limits, set_grid_limits
from pi.screen.errors import AllocationError, InvalidDimensionError, ScreenError
from pi.screen.grid import CONTINUATION, SPACE, Cell, CellGrid
from pi.screen.measure import string_width
from pi.screen.style import DEFAULT_STYLE, Style
from pi.screen.width import char_width

BOLD = Style(bold=True)
RED = Style(fg=(255, 0, 0))


@pytest.fixture(autouse=True)
def _restore_limits() -> Iterator[None]:
    yield
    reset_grid_limits()


def snapshot(grid: CellGrid) -> list[tuple[int, Style, bool]]:
    cells = []
    for y in range(grid.height):
        for x in range(grid.width):
            cell = grid.get_cell(x, y)
            assert cell is not None
            cells.append((cell.codepoint, cell.style, cell.dirty))
    return cells


def _fail_allocation(count: int) -> list[Cell]:
    raise MemoryError


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestCreate:
    def test_starts_as_dirty_spaces(self) -> None:
        grid = CellGrid(4, 2)
        assert (grid.width, grid.height) == (4, 2)
        assert len(grid) == 8
        for codepoint, style, dirty in snapshot(grid):
            assert codepoint == SPACE
            assert style == DEFAULT_STYLE
            assert dirty

    @pytest.mark.parametrize(
        "width, height",
        [(0, 5), (5, 0), (-1, 1), (501, 1), (1, 501), (True, 1), (1.5, 2)],
    )
    def test_invalid_dimensions(self, width: object, height: object) -> None:
        with pytest.raises(InvalidDimensionError) as excinfo:
            CellGrid(width, height)  # type: ignore[arg-type]
        assert isinstance(excinfo.value, ValueError)
        assert isinstance(excinfo.value, ScreenError)

    def test_limits_are_configurable(self) -> None:
        set_grid_limits(1000, 40)
        grid = CellGrid(800, 40)
        assert grid.width == 800
        with pytest.raises(InvalidDimensionError):
            CellGrid(10, 41)

    def test_allocation_failure(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(grid_module, "_allocate_cells", _fail_allocation)
        with pytest.raises(AllocationError) as excinfo:
            CellGrid(5, 5)
        assert isinstance(excinfo.value, MemoryError)


# ---------------------------------------------------------------------------
# Drawing
# ---------------------------------------------------------------------------


class TestWriteText:
    def test_hi_serializes_as_plain_text(self) -> None:
        grid = CellGrid(10, 2)
        grid.write_text(0, 0, "Hi", DEFAULT_STYLE)
        assert string_width("Hi") == 2
        assert grid.serialize() == "Hi" + " " * 8 + "\n" + " " * 10

    def test_emoji_gets_continuation_cell(self) -> None:
        grid = CellGrid(5, 1)
        grid.write_text(0, 0, "\U0001f600")
        assert char_width(0x1F600) == 2
        assert grid.get_cell(0, 0).codepoint == 0x1F600  # type: ignore[union-attr]
        assert grid.get_cell(1, 0).codepoint == CONTINUATION  # type: ignore[union-attr]
        for x in range(2, 5):
            assert grid.get_cell(x, 0).codepoint == SPACE  # type: ignore[union-attr]

    def test_wide_pairs_in_a_row(self) -> None:
        grid = CellGrid(6, 1)
        grid.write_text(1, 0, "中文")
        codepoints = [grid.get_cell(x, 0).codepoint for x in range(6)]  # type: ignore[union-attr]
        assert codepoints == [SPACE, ord("中"), CONTINUATION, ord("文"), CONTINUATION, SPACE]

    def test_continuation_never_styled(self) -> None:
        grid = CellGrid(4, 1)
        grid.write_text(0, 0, "中", BOLD)
        assert grid.get_cell(0, 0).style == BOLD  # type: ignore[union-attr]
        assert grid.get_cell(1, 0).style == DEFAULT_STYLE  # type: ignore[union-attr]

    def test_wide_at_last_column_has_no_continuation(self) -> None:
        grid = CellGrid(3, 1)
        grid.write_text(2, 0, "中")
        assert grid.get_cell(2, 0).codepoint == ord("中")  # type: ignore[union-attr]

    def test_wide_clipped_on_the_left_leaves_a_space(self) -> None:
        grid = CellGrid(5, 1)
        grid.write_text(0, 0, "abcde")
        grid.write_text(-1, 0, "中x")
        assert grid.row_text(0) == " xcde"

    def test_clipped_on_the_right(self) -> None:
        grid = CellGrid(3, 1)
        grid.write_text(1, 0, "hello")
        assert grid.row_text(0) == " he"

    def test_out_of_bounds_row_is_ignored(self) -> None:
        grid = CellGrid(3, 1)
        grid.write_text(0, 1, "x")
        grid.write_text(0, -1, "x")
        assert grid.row_text(0) == "   "

    def test_zero_width_codepoints_dropped(self) -> None:
        grid = CellGrid(4, 1)
        grid.write_text(0, 0, "e\u0301x")
        assert grid.row_text(0) == "ex  "

    def test_nul_ends_text(self) -> None:
        grid = CellGrid(4, 1)
        grid.write_text(0, 0, "ab\x00cd")
        assert grid.row_text(0) == "ab  "

    def test_bytes_with_malformed_sequence(self) -> None:
        grid = CellGrid(4, 1)
        grid.write_text(0, 0, b"a\xffb")
        codepoints = [grid.get_cell(x, 0).codepoint for x in range(3)]  # type: ignore[union-attr]
        assert codepoints == [ord("a"), 0xFF, ord("b")]

    def test_bytes_utf8(self) -> None:
        grid = CellGrid(4, 1)
        grid.write_text(0, 0, "中".encode())
        assert grid.get_cell(1, 0).is_continuation  # type: ignore[union-attr]


class TestSetCell:
    def test_out_of_bounds_is_noop(self) -> None:
        grid = CellGrid(2, 2)
        before = snapshot(grid)
        grid.set_cell(2, 0, ord("x"))
        grid.set_cell(0, -1, ord("x"))
        assert snapshot(grid) == before

    def test_none_style_means_default(self) -> None:
        grid = CellGrid(2, 1)
        grid.set_cell(0, 0, ord("x"), None)
        assert grid.get_cell(0, 0).style == DEFAULT_STYLE  # type: ignore[union-attr]

    def test_marks_dirty(self) -> None:
        grid = CellGrid(2, 1)
        grid.mark_clean()
        grid.set_cell(1, 0, ord("x"), RED)
        assert not grid.get_cell(0, 0).dirty  # type: ignore[union-attr]
        assert grid.get_cell(1, 0).dirty  # type: ignore[union-attr]

    def test_overwriting_continuation_blanks_head(self) -> None:
        grid = CellGrid(4, 1)
        grid.write_text(0, 0, "中", BOLD)
        grid.set_cell(1, 0, ord("x"))
        head = grid.get_cell(0, 0)
        assert head is not None
        assert head.codepoint == SPACE
        assert head.style == DEFAULT_STYLE
        assert grid.row_text(0) == " x  "

    def test_overwriting_head_blanks_continuation(self) -> None:
        grid = CellGrid(4, 1)
        grid.write_text(0, 0, "中")
        grid.set_cell(0, 0, ord("y"))
        assert grid.get_cell(1, 0).codepoint == SPACE  # type: ignore[union-attr]
        assert grid.row_text(0) == "y   "

    def test_wide_over_wide_keeps_pair(self) -> None:
        grid = CellGrid(4, 1)
        grid.write_text(0, 0, "中")
        grid.write_text(0, 0, "文")
        assert grid.get_cell(0, 0).codepoint == ord("文")  # type: ignore[union-attr]
        assert grid.get_cell(1, 0).is_continuation  # type: ignore[union-attr]


class TestFillRect:
    def test_fills_region(self) -> None:
        grid = CellGrid(4, 3)
        grid.fill_rect(1, 1, 2, 2, ord("#"), RED)
        assert grid.row_text(0) == "    "
        assert grid.row_text(1) == " ## "
        assert grid.row_text(2) == " ## "
        assert grid.get_cell(2, 2).style == RED  # type: ignore[union-attr]

    def test_clipped(self) -> None:
        grid = CellGrid(3, 2)
        grid.fill_rect(-1, -1, 2, 2, ord("#"))
        assert grid.row_text(0) == "#  "
        assert grid.row_text(1) == "   "

    def test_entirely_outside(self) -> None:
        grid = CellGrid(3, 2)
        grid.fill_rect(5, 5, 2, 2, ord("#"))
        grid.fill_rect(0, 0, 0, 5, ord("#"))
        assert grid.row_text(0) == "   "

    def test_wide_codepoint_laid_out_in_pairs(self) -> None:
        grid = CellGrid(4, 2)
        grid.fill_rect(0, 0, 4, 2, ord("中"), BOLD)
        for y in range(2):
            codepoints = [cell.codepoint for cell in grid.row_cells(y)]
            assert codepoints == [ord("中"), CONTINUATION, ord("中"), CONTINUATION]
        assert grid.get_cell(1, 0).style == DEFAULT_STYLE  # type: ignore[union-attr]

    def test_wide_codepoint_odd_width_leaves_space(self) -> None:
        grid = CellGrid(3, 1)
        grid.fill_rect(0, 0, 3, 1, ord("中"))
        codepoints = [cell.codepoint for cell in grid.row_cells(0)]
        assert codepoints == [ord("中"), CONTINUATION, SPACE]

    def test_wide_codepoint_clipped_on_the_left(self) -> None:
        grid = CellGrid(4, 1)
        grid.fill_rect(-1, 0, 5, 1, ord("中"))
        codepoints = [cell.codepoint for cell in grid.row_cells(0)]
        assert codepoints == [SPACE, ord("中"), CONTINUATION, SPACE]


class TestAccess:
    def test_get_cell_is_live(self) -> None:
        grid = CellGrid(2, 1)
        cell = grid.get_cell(0, 0)
        grid.set_cell(0, 0, ord("z"))
        assert cell is grid.get_cell(0, 0)
        assert cell is not None and cell.codepoint == ord("z")

    def test_get_cell_out_of_bounds(self) -> None:
        grid = CellGrid(2, 1)
        assert grid.get_cell(2, 0) is None
        assert grid.get_cell(-1, 0) is None

    def test_row_text_out_of_bounds(self) -> None:
        assert CellGrid(2, 1).row_text(3) == ""

    def test_row_cells_are_live(self) -> None:
        grid = CellGrid(3, 2)
        row = grid.row_cells(1)
        assert len(row) == 3
        grid.set_cell(2, 1, ord("q"))
        assert row[2].codepoint == ord("q")
        assert row[2] is grid.get_cell(2, 1)

    def test_row_cells_out_of_bounds(self) -> None:
        assert CellGrid(2, 1).row_cells(1) == []
        assert CellGrid(2, 1).row_cells(-1) == []


# ---------------------------------------------------------------------------
# Dirty tracking and clear
# ---------------------------------------------------------------------------


class TestDirtyTracking:
    def test_mark_clean_and_all_dirty(self) -> None:
        grid = CellGrid(3, 2)
        grid.mark_clean()
        assert not any(dirty for _, _, dirty in snapshot(grid))
        grid.mark_all_dirty()
        assert all(dirty for _, _, dirty in snapshot(grid))

    def test_clear(self) -> None:
        grid = CellGrid(3, 1)
        grid.write_text(0, 0, "abc", BOLD)
        grid.mark_clean()
        grid.clear()
        assert snapshot(grid) == [(SPACE, DEFAULT_STYLE, True)] * 3


# ---------------------------------------------------------------------------
# Resize
# ---------------------------------------------------------------------------


class TestResize:
    def test_shrink_then_grow_preserves_overlap(self) -> None:
        grid = CellGrid(6, 3)
        grid.write_text(0, 0, "abcdef", RED)
        grid.write_text(0, 1, "ghijkl")
        grid.resize(3, 2)
        assert (grid.width, grid.height) == (3, 2)
        grid.resize(6, 3)
        assert grid.row_text(0) == "abc   "
        assert grid.row_text(1) == "ghi   "
        assert grid.row_text(2) == "      "
        assert grid.get_cell(2, 0).style == RED  # type: ignore[union-attr]

    def test_new_cells_are_dirty_spaces(self) -> None:
        grid = CellGrid(2, 1)
        grid.mark_clean()
        grid.resize(3, 2)
        new_cell = grid.get_cell(2, 1)
        assert new_cell is not None
        assert (new_cell.codepoint, new_cell.dirty) == (SPACE, True)
        assert not grid.get_cell(0, 0).dirty  # type: ignore[union-attr]

    def test_invalid_dimensions_leave_grid_untouched(self) -> None:
        grid = CellGrid(4, 2)
        grid.write_text(0, 0, "data")
        before = snapshot(grid)
        with pytest.raises(InvalidDimensionError):
            grid.resize(0, 2)
        assert (grid.width, grid.height) == (4, 2)
        assert snapshot(grid) == before

    def test_allocation_failure_leaves_grid_untouched(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        grid = CellGrid(4, 2)
        grid.write_text(0, 0, "中ab", BOLD)
        grid.write_text(0, 1, "xy", RED)
        before = snapshot(grid)
        monkeypatch.setattr(grid_module, "_allocate_cells", _fail_allocation)
        with pytest.raises(AllocationError):
            grid.resize(10, 10)
        assert (grid.width, grid.height) == (4, 2)
        assert snapshot(grid) == before


# ---------------------------------------------------------------------------
# serialize
# ---------------------------------------------------------------------------


class TestSerialize:
    def test_style_changes_inline(self) -> None:
        grid = CellGrid(3, 1)
        grid.write_text(0, 0, "ab", BOLD)
        assert grid.serialize() == "\x1b[1mab\x1b[0m "

    def test_row_ending_styled_is_reset(self) -> None:
        grid = CellGrid(2, 2)
        grid.write_text(0, 0, "ab", BOLD)
        assert grid.serialize() == "\x1b[1mab\x1b[0m\n  "

    def test_continuation_cells_skipped(self) -> None:
        grid = CellGrid(3, 1)
        grid.write_text(0, 0, "中")
        assert grid.serialize() == "中 "

    def test_budget_truncates_at_cell_boundary(self) -> None:
        grid = CellGrid(10, 2)
        grid.write_text(0, 0, "Hi", BOLD)
        result = grid.serialize(max_chars=12)
        assert result == "\x1b[1mHi\x1b[0m"
        assert len(result) <= 12

    def test_tiny_budget(self) -> None:
        grid = CellGrid(4, 1)
        grid.write_text(0, 0, "abcd")
        assert grid.serialize(max_chars=3) == ""
