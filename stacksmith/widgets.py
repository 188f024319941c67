"""Reusable pieces of the interactive prompts: a selectable list and prompt state."""

from __future__ import annotations

from dataclasses import dataclass, field

from stacksmith import styles


@dataclass
class SelectableList:
    """A list with a cursor and ordered multi-selection."""

    items: list[str]
    cursor: int = 0
    selected: set[int] = field(default_factory=set)
    order_map: dict[str, int] = field(default_factory=dict)
    next_order: int = 1

    def move_up(self) -> None:
        if self.cursor > 0:
            self.cursor -= 1

    def move_down(self) -> None:
        if self.cursor < len(self.items) - 1:
            self.cursor += 1

    def toggle_selected(self) -> None:
        """Select or deselect the item under the cursor, keeping selection order."""
        index = self.cursor
        item = self.items[index]
        if index in self.selected:
            self.selected.discard(index)
            removed = self.order_map.pop(item, None)
            if removed is not None:
                self.order_map = {
                    name: order - 1 if order > removed else order
                    for name, order in self.order_map.items()
                }
            self.next_order -= 1
        else:
            self.selected.add(index)
            self.order_map[item] = self.next_order
            self.next_order += 1

    def selected_items(self) -> list[str]:
        """Return the selected items in the order they were selected."""
        return sorted(self.order_map, key=self.order_map.__getitem__)

    def selected_count(self) -> int:
        return len(self.order_map)

    def render(self, show_checkboxes: bool, show_order: bool) -> str:
        """Render one line per item with cursor, optional checkbox and order."""
        lines = []
        for index, item in enumerate(self.items):
            active = index == self.cursor
            item_style = styles.SELECTED if active else styles.NORMAL
            is_selected = index in self.selected
            line = styles.cursor_style(active) + " "
            if show_checkboxes:
                line += ("[x]" if is_selected else "[ ]") + " "
            if show_order and is_selected:
                order = self.order_map.get(item)
                line += f" {order} " if order is not None else "   "
            elif show_checkboxes:
                line += "   "
            lines.append(line + item_style.render(item) + "\n")
        return "".join(lines)


@dataclass
class BasePrompt:
    """State and rendering shared by every prompt."""

    title: str
    error_msg: str = ""
    cancelled: bool = False

    def render_title(self) -> str:
        return styles.TITLE.render(self.title) + "\n\n"

    def render_error(self) -> str:
        if self.error_msg and not self.cancelled:
            return "\n\n" + styles.ERROR.render(self.error_msg)
        return ""

    def render_help_text(self, text: str) -> str:
        return "\n\n" + styles.HELP_TEXT.render(text)

    def cancel(self) -> None:
        self.cancelled = True
        self.error_msg = "cancelled"

    def set_error(self, msg: str) -> None:
        self.error_msg = msg

    def clear_error(self) -> None:
        self.error_msg = ""