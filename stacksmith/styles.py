"""Terminal text styles used by the interactive menus."""

from __future__ import annotations

from dataclasses import dataclass, replace

COLOR_PRIMARY = "#ffc27d"
COLOR_SECONDARY = "#50fa7b"
COLOR_ERROR = "#ff5555"
COLOR_SUBDUED = "#666666"
COLOR_HIGHLIGHT = "#bd93f9"
COLOR_BACKGROUND = "#333333"

_RESET = "\x1b[0m"


def _rgb(color: str) -> tuple[int, int, int]:
    if len(color) != 7 or not color.startswith("#"):
        raise ValueError(f"invalid colour: {color!r}")
    try:
        return int(color[1:3], 16), int(color[3:5], 16), int(color[5:7], 16)
    except ValueError as exc:
        raise ValueError(f"invalid colour: {color!r}") from exc


@dataclass(frozen=True)
class Style:
    """Foreground, background and weight applied to a piece of text."""

    foreground: str | None = None
    background: str | None = None
    bold: bool = False

    def __post_init__(self) -> None:
        for color in (self.foreground, self.background):
            if color is not None:
                _rgb(color)

    def render(self, text: str) -> str:
        """Wrap ``text`` in the escape sequences for this style."""
        codes = []
        if self.bold:
            codes.append("1")
        if self.foreground is not None:
            codes.append("38;2;{};{};{}".format(*_rgb(self.foreground)))
        if self.background is not None:
            codes.append("48;2;{};{};{}".format(*_rgb(self.background)))
        if not codes:
            return text
        return f"\x1b[{';'.join(codes)}m{text}{_RESET}"

    def with_background(self, color: str) -> Style:
        """Return a copy of this style with a background colour."""
        return replace(self, background=color)


TITLE = Style(foreground=COLOR_PRIMARY, bold=True)
SELECTED = Style(foreground=COLOR_PRIMARY, bold=True)
NORMAL = Style()
SUBDUED = Style(foreground=COLOR_SUBDUED)
ERROR = Style(foreground=COLOR_ERROR)
SUCCESS = Style(foreground=COLOR_SECONDARY)
HELP_TEXT = Style(foreground=COLOR_SUBDUED)
CURSOR = Style(foreground=COLOR_PRIMARY)
HIGHLIGHT = Style(background=COLOR_BACKGROUND)


def cursor_style(active: bool) -> str:
    """Return the cursor marker for a list row."""
    return CURSOR.render(">") if active else " "


def format_help_text(text: str) -> str:
    """Render navigation help text."""
    return HELP_TEXT.render(text)