"""Grid-size limits and other process-wide settings.

Limits are read from the environment on import (``PI_SCREEN_MAX_WIDTH`` and
``PI_SCREEN_MAX_HEIGHT``) and can be changed at runtime with
:func:`set_grid_limits`.  They are enforced uniformly by
:class:`~pi.screen.grid.CellGrid` construction and resize.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from pi.screen.errors import InvalidDimensionError

logger = logging.getLogger(__name__)

HARD_MAX_DIMENSION = 10000
DEFAULT_MAX_DIMENSION = 500

# Frame buffer size used by the renderer before it has to flush mid-frame.
OUTPUT_BUFFER_SIZE = 65536

_ENV_MAX_WIDTH = "PI_SCREEN_MAX_WIDTH"
_ENV_MAX_HEIGHT = "PI_SCREEN_MAX_HEIGHT"
_ENV_WRITE_LOG = "PI_SCREEN_WRITE_LOG"


@dataclass
class GridLimits:
    max_width: int
    max_height: int


def _dimension_from_env(name: str) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return DEFAULT_MAX_DIMENSION
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return DEFAULT_MAX_DIMENSION
    if not 1 <= value <= HARD_MAX_DIMENSION:
        logger.warning(
            "Ignoring %s=%d: must be between 1 and %d", name, value, HARD_MAX_DIMENSION
        )
        return DEFAULT_MAX_DIMENSION
    return value


def _limits_from_env() -> GridLimits:
    return GridLimits(
        max_width=_dimension_from_env(_ENV_MAX_WIDTH),
        max_height=_dimension_from_env(_ENV_MAX_HEIGHT),
    )


_grid_limits = _limits_from_env()


def get_grid_limits() -> GridLimits:
    """Return a copy of the active limits."""
    return GridLimits(_grid_limits.max_width, _grid_limits.max_height)


def set_grid_limits(max_width: int, max_height: int) -> None:
    """Change the maximum grid size accepted by ``CellGrid``.

    Existing grids are not affected.  Raises ``InvalidDimensionError`` unless
    both values are in ``1..HARD_MAX_DIMENSION``.
    """
    global _grid_limits
    for value in (max_width, max_height):
        if (
            not isinstance(value, int)
            or isinstance(value, bool)
            or not 1 <= value <= HARD_MAX_DIMENSION
        ):
            raise InvalidDimensionError(
                max_width, max_height, HARD_MAX_DIMENSION, HARD_MAX_DIMENSION
            )
    _grid_limits = GridLimits(max_width, max_height)


def reset_grid_limits() -> None:
    """Re-read the limits from the environment."""
    global _grid_limits
    _grid_limits = _limits_from_env()


def get_write_log_path() -> str:
    """Path that output destinations mirror their writes to, or ``""``."""
    return os.environ.get(_ENV_WRITE_LOG, "")
