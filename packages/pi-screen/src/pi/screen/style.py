"""Cell style value type and SGR transitions between styles."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from pi.screen import ansi

RGB = tuple[int, int, int]


def _normalize_color(value: object, name: str) -> RGB | None:
    if value is None:
        return None
    try:
        r, g, b = value  # type: ignore[misc]
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an (r, g, b) triple, got {value!r}") from None
    channels = (int(r), int(g), int(b))
    if any(not 0 <= c <= 255 for c in channels):
        raise ValueError(f"{name} channels must be in 0..255, got {value!r}")
    return channels


@dataclass(frozen=True)
class Style:
    """Foreground/background colour plus six text attributes.

    Styles are plain values: two styles are equal when every field is equal.
    ``None`` colours mean "terminal default".
    """

    fg: RGB | None = None
    bg: RGB | None = None
    bold: bool = False
    dim: bool = False
    italic: bool = False
    underline: bool = False
    inverse: bool = False
    strikethrough: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "fg", _normalize_color(self.fg, "fg"))
        object.__setattr__(self, "bg", _normalize_color(self.bg, "bg"))

    @property
    def is_default(self) -> bool:
        return self == DEFAULT_STYLE


DEFAULT_STYLE = Style()

# Emission order for attributes; colours always follow.
_ATTRIBUTES: tuple[tuple[str, Callable[[], bytes]], ...] = (
    ("bold", ansi.bold),
    ("dim", ansi.dim),
    ("italic", ansi.italic),
    ("underline", ansi.underline),
    ("inverse", ansi.inverse),
    ("strikethrough", ansi.strikethrough),
)


def style_sequence(style: Style) -> bytes:
    """SGR bytes that turn on everything in *style*, assuming a reset terminal."""
    parts: list[bytes] = []
    for name, encoder in _ATTRIBUTES:
        if getattr(style, name):
            parts.append(encoder())
    if style.fg is not None:
        parts.append(ansi.fg_rgb(*style.fg))
    if style.bg is not None:
        parts.append(ansi.bg_rgb(*style.bg))
    return b"".join(parts)


def _needs_reset(old: Style, new: Style) -> bool:
    for name, _ in _ATTRIBUTES:
        if getattr(old, name) and not getattr(new, name):
            return True
    return (old.fg is not None and new.fg is None) or (
        old.bg is not None and new.bg is None
    )


def style_transition(old: Style, new: Style) -> bytes:
    """SGR bytes that take the terminal from *old* to *new*.

    There is no per-attribute "off" here: when anything has to be switched
    off, the transition is a reset followed by the whole of *new*.  Otherwise
    only the newly enabled attributes and the changed colours are sent.
    """
    if old == new:
        return b""
    if _needs_reset(old, new):
        return ansi.reset() + style_sequence(new)

    parts: list[bytes] = []
    for name, encoder in _ATTRIBUTES:
        if getattr(new, name) and not getattr(old, name):
            parts.append(encoder())
    if new.fg is not None and new.fg != old.fg:
        parts.append(ansi.fg_rgb(*new.fg))
    if new.bg is not None and new.bg != old.bg:
        parts.append(ansi.bg_rgb(*new.bg))
    return b"".join(parts)
