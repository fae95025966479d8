"""pi-screen: cell-grid terminal rendering with minimal differential output."""

# ANSI escape-sequence builders
from pi.screen import ansi

# Configuration
from pi.screen.config import (
    DEFAULT_MAX_DIMENSION,
    HARD_MAX_DIMENSION,
    OUTPUT_BUFFER_SIZE,
    GridLimits,
    get_grid_limits,
    reset_grid_limits,
    set_grid_limits,
)

# Errors
from pi.screen.errors import (
    AllocationError,
    InvalidDimensionError,
    OutputError,
    ScreenError,
)

# Cell grid
from pi.screen.grid import CONTINUATION, Cell, CellGrid

# Text measurement
from pi.screen.measure import pad, skip_ansi_sequence, slice_ansi, strip_ansi, string_width

# Output destinations
from pi.screen.output import FdOutput, Output, StreamOutput

# Differential renderer
from pi.screen.renderer import DiffRenderer, RenderStats, ScreenMode

# Styles
from pi.screen.style import DEFAULT_STYLE, Style, style_sequence, style_transition

# UTF-8 codec
from pi.screen.utf8 import decode_bounded, decode_unbounded, encode, iter_codepoints

# Codepoint width
from pi.screen.width import char_width

__all__ = [
    # ANSI
    "ansi",
    # Configuration
    "DEFAULT_MAX_DIMENSION",
    "HARD_MAX_DIMENSION",
    "OUTPUT_BUFFER_SIZE",
    "GridLimits",
    "get_grid_limits",
    "reset_grid_limits",
    "set_grid_limits",
    # Errors
    "AllocationError",
    "InvalidDimensionError",
    "OutputError",
    "ScreenError",
    # Grid
    "CONTINUATION",
    "Cell",
    "CellGrid",
    # Measurement
    "pad",
    "skip_ansi_sequence",
    "slice_ansi",
    "strip_ansi",
    "string_width",
    # Output
    "FdOutput",
    "Output",
    "StreamOutput",
    # Renderer
    "DiffRenderer",
    "RenderStats",
    "ScreenMode",
    # Style
    "DEFAULT_STYLE",
    "Style",
    "style_sequence",
    "style_transition",
    # UTF-8
    "decode_bounded",
    "decode_unbounded",
    "encode",
    "iter_codepoints",
    # Width
    "char_width",
]
