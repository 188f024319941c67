"""The main command menu and the loop that drives interactive models in a terminal."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Protocol, TypeVar

from blessed import Terminal

from stacksmith import styles


class _Model(Protocol):
    def update(self, key: str) -> bool: ...

    def view(self) -> str: ...


ModelT = TypeVar("ModelT", bound=_Model)

_SEQUENCE_NAMES = {
    "KEY_UP": "up",
    "KEY_DOWN": "down",
    "KEY_LEFT": "left",
    "KEY_RIGHT": "right",
    "KEY_ENTER": "enter",
    "KEY_ESCAPE": "esc",
    "KEY_BACKSPACE": "backspace",
    "KEY_TAB": "tab",
}

_CHARACTER_NAMES = {
    "\x03": "ctrl+c",
    "\r": "enter",
    "\n": "enter",
    "\t": "tab",
    "\x1b": "esc",
    "\x7f": "backspace",
    "\x08": "backspace",
}


@dataclass
class MenuItem:
    """One entry in the main menu."""

    title: str
    desc: str
    emoji: str
    command: str


@dataclass
class MenuModel:
    """Cursor and selection state of the main menu."""

    choices: list[MenuItem] = field(default_factory=list)
    cursor: int = 0
    selected: str = ""

    def update(self, key: str) -> bool:
        """Apply a key press; return True when the menu is finished."""
        if key in ("ctrl+c", "q"):
            return True
        if key in ("up", "k"):
            if self.cursor > 0:
                self.cursor -= 1
        elif key in ("down", "j"):
            if self.cursor < len(self.choices) - 1:
                self.cursor += 1
        elif key in ("enter", " "):
            self.selected = self.choices[self.cursor].command
            return True
        return False

    def view(self) -> str:
        parts = [styles.TITLE.render("🧑‍🏭 Stacksmith") + "\n\n"]
        for index, choice in enumerate(self.choices):
            active = index == self.cursor
            title_style = styles.SELECTED if active else styles.NORMAL
            title = f"{choice.emoji} {choice.title}"
            parts.append(
                f"{styles.cursor_style(active)} {title_style.render(title)}\n"
                f"     {styles.SUBDUED.render(choice.desc)}\n\n"
            )
        parts.append(styles.format_help_text("↑/↓: Navigate • Enter: Select • q: Quit"))
        return "".join(parts)


def default_choices() -> list[MenuItem]:
    """Return the entries of the main menu."""
    return [
        MenuItem("Stack", "Create a new branch atop another", "🪵", "stack"),
        MenuItem("Sync", "Rebase multiple branches sequentially", "🧽", "sync"),
        MenuItem("Fix PR", "Rebase one branch onto a new base", "🔧", "fix-pr"),
        MenuItem("Push", "Smart push with upstream detection", "⬆️", "push"),
        MenuItem("Graph", "Show commit graph", "🌳", "graph"),
        MenuItem("TUI", "Full-screen DAG browser and stack navigator", "🖥", "tui"),
        MenuItem("Quit", "Exit Stacksmith", "👋", "quit"),
    ]


def _key_name(text: str, sequence_name: str | None) -> str:
    if sequence_name:
        return _SEQUENCE_NAMES.get(sequence_name, "")
    return _CHARACTER_NAMES.get(text, text)


def run_model(model: ModelT) -> ModelT:
    """Show ``model`` full screen and feed it key presses until it finishes.

    Raises RuntimeError when there is no interactive terminal.
    """
    if not sys.stdin.isatty() or not sys.stdout.isatty():
        raise RuntimeError("an interactive terminal is required")
    term = Terminal()
    with term.fullscreen(), term.raw(), term.hidden_cursor():
        while True:
            screen = model.view().replace("\n", "\r\n")
            print(term.home + term.clear + screen, end="", flush=True)
            key = term.inkey()
            name = _key_name(str(key), key.name if key.is_sequence else None)
            if name and model.update(name):
                return model


def run_menu() -> str:
    """Show the main menu and return the chosen command, or "" when quit."""
    try:
        model = run_model(MenuModel(choices=default_choices()))
    except (RuntimeError, OSError) as err:
        print(f"Error running menu: {err}")
        raise SystemExit(1) from err
    return model.selected