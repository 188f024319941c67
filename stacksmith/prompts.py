"""Interactive prompts that collect the arguments of the stack, sync and fix-pr commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from stacksmith import styles
from stacksmith.git import GitError, GitExecutor
from stacksmith.menu import run_model
from stacksmith.widgets import BasePrompt, SelectableList

_DEFAULT_PARENT = "main"


def _empty_list() -> SelectableList:
    return SelectableList([])


@dataclass
class StackPromptModel(BasePrompt):
    """Two text fields: the new branch name and the branch it is stacked on."""

    title: str = "🪵 Create a new branch"
    new_branch: str = ""
    parent_branch: str = _DEFAULT_PARENT
    current_field: int = 0
    cursor_pos: int = 0

    def _value(self) -> str:
        return self.new_branch if self.current_field == 0 else self.parent_branch

    def _set_value(self, value: str) -> None:
        if self.current_field == 0:
            self.new_branch = value
        else:
            self.parent_branch = value

    def update(self, key: str) -> bool:
        """Apply a key press; return True when the prompt is finished."""
        if key in ("ctrl+c", "esc"):
            self.cancel()
            return True

        if key == "enter":
            if self.current_field == 0:
                if not self.new_branch:
                    self.set_error("New branch name cannot be empty")
                    return False
                self.current_field = 1
                self.cursor_pos = len(self.parent_branch)
                self.clear_error()
                return False
            if not self.parent_branch:
                self.set_error("Parent branch name cannot be empty")
                return False
            return True

        if key == "tab":
            if self.current_field == 0 and self.new_branch:
                self.current_field = 1
                self.cursor_pos = len(self.parent_branch)
            elif self.current_field == 1 and self.parent_branch:
                self.current_field = 0
                self.cursor_pos = len(self.new_branch)
            self.clear_error()
            return False

        value = self._value()
        if key == "backspace":
            if value and self.cursor_pos > 0:
                self._set_value(value[: self.cursor_pos - 1] + value[self.cursor_pos :])
                self.cursor_pos -= 1
            self.clear_error()
        elif key == "left":
            if self.cursor_pos > 0:
                self.cursor_pos -= 1
        elif key == "right":
            if self.cursor_pos < len(value):
                self.cursor_pos += 1
        elif len(key) == 1:
            self._set_value(value[: self.cursor_pos] + key + value[self.cursor_pos :])
            self.cursor_pos += 1
            self.clear_error()
        return False

    def _render_field(self, label: str, value: str, active: bool) -> str:
        if not active:
            return label + value
        cursor = styles.NORMAL.with_background(styles.COLOR_SUBDUED)
        text = styles.SELECTED.render(label)
        if self.cursor_pos == len(value):
            return text + value + cursor.render(" ")
        return (
            text
            + value[: self.cursor_pos]
            + cursor.render(value[self.cursor_pos])
            + value[self.cursor_pos + 1 :]
        )

    def view(self) -> str:
        return (
            self.render_title()
            + self._render_field("New branch name: ", self.new_branch, self.current_field == 0)
            + "\n"
            + self._render_field("Parent branch: ", self.parent_branch, self.current_field == 1)
            + self.render_error()
            + self.render_help_text("Tab: Switch fields • Enter: Confirm • Esc: Return to menu")
        )


class SyncStep(Enum):
    SELECTING_BRANCHES = auto()
    CONFIRMING_SELECTION = auto()


@dataclass
class SyncPromptModel(BasePrompt):
    """Ordered multi-selection of the branches to sync, then a confirmation."""

    title: str = "🧽 Sync branch stack"
    branch_list: SelectableList = field(default_factory=_empty_list)
    step: SyncStep = SyncStep.SELECTING_BRANCHES

    def update(self, key: str) -> bool:
        """Apply a key press; return True when the prompt is finished."""
        selecting = self.step is SyncStep.SELECTING_BRANCHES
        if key in ("ctrl+c", "esc"):
            self.cancel()
            return True
        if key in ("up", "k"):
            if selecting:
                self.branch_list.move_up()
                self.clear_error()
        elif key in ("down", "j"):
            if selecting:
                self.branch_list.move_down()
                self.clear_error()
        elif key == "enter":
            if not selecting:
                return True
            if self.branch_list.selected_count() == 0 and self.branch_list.items:
                self.branch_list.toggle_selected()
            if self.branch_list.selected_count() >= 2:
                self.clear_error()
                self.step = SyncStep.CONFIRMING_SELECTION
            else:
                self.set_error("Please select at least 2 branches to sync")
        elif key == " ":
            if selecting and self.branch_list.items:
                self.branch_list.toggle_selected()
        return False

    def view(self) -> str:
        parts = [self.render_title()]
        if self.step is SyncStep.SELECTING_BRANCHES:
            parts.append("Select branches to sync in order (parent to child):\n")
            parts.append("(use space to select, enter to continue)\n\n")
            parts.append(self.branch_list.render(True, True))
            help_text = "↑/↓: Navigate • Space: Select • Enter: Continue • Esc: Return to menu"
        else:
            parts.append("Ready to sync branches in this order:\n\n")
            previous = None
            for number, name in enumerate(self.branch_list.selected_items(), start=1):
                if previous is None:
                    parts.append(f"  {number}. {name} (base)\n")
                else:
                    parts.append(f"  {number}. {name} ← {previous}\n")
                previous = name
            parts.append("\n" + styles.SUCCESS.render("Press Enter to confirm and begin sync"))
            help_text = "Enter: Confirm • Esc: Return to menu"
        parts.append(self.render_error())
        parts.append(self.render_help_text(help_text))
        return "".join(parts)


class FixPrState(Enum):
    SELECTING_BRANCH = auto()
    SELECTING_TARGET = auto()
    CONFIRMING = auto()


@dataclass
class FixPrPromptModel(BasePrompt):
    """Pick a branch, then the new base it should be rebased onto."""

    title: str = "🔧 Fix PR branch target"
    branch_list: SelectableList = field(default_factory=_empty_list)
    target_list: SelectableList = field(default_factory=_empty_list)
    selected_branch: str = ""
    target_branch: str = ""
    state: FixPrState = FixPrState.SELECTING_BRANCH

    @classmethod
    def for_branches(cls, branches: list[str]) -> FixPrPromptModel:
        """Build a prompt offering ``branches`` both as branch and as target."""
        return cls(branch_list=SelectableList(list(branches)), target_list=SelectableList(list(branches)))

    def _active_list(self) -> SelectableList | None:
        if self.state is FixPrState.SELECTING_BRANCH:
            return self.branch_list
        if self.state is FixPrState.SELECTING_TARGET:
            return self.target_list
        return None

    def update(self, key: str) -> bool:
        """Apply a key press; return True when the prompt is finished."""
        if key in ("ctrl+c", "esc"):
            self.cancel()
            return True
        if key in ("up", "k", "down", "j"):
            active = self._active_list()
            if active is not None:
                if key in ("up", "k"):
                    active.move_up()
                else:
                    active.move_down()
            self.clear_error()
            return False
        if key != "enter":
            return False

        if self.state is FixPrState.SELECTING_BRANCH:
            if self.branch_list.items:
                self.selected_branch = self.branch_list.items[self.branch_list.cursor]
                self.state = FixPrState.SELECTING_TARGET
            return False
        if self.state is FixPrState.SELECTING_TARGET:
            if not self.target_list.items:
                return False
            self.target_branch = self.target_list.items[self.target_list.cursor]
            if self.target_branch == self.selected_branch:
                self.set_error("Branch cannot target itself")
                return False
            self.clear_error()
            self.state = FixPrState.CONFIRMING
            return False
        return True

    def view(self) -> str:
        parts = [self.render_title()]
        if self.state is FixPrState.SELECTING_BRANCH:
            parts.append("Select the branch to retarget:\n\n")
            parts.append(self.branch_list.render(False, False))
        elif self.state is FixPrState.SELECTING_TARGET:
            parts.append(styles.SELECTED.render("Selected branch: ") + self.selected_branch + "\n\n")
            parts.append("Select new target branch:\n\n")
            for index, branch in enumerate(self.target_list.items):
                active = index == self.target_list.cursor
                item_style = styles.SELECTED if active else styles.NORMAL
                if branch == self.selected_branch:
                    item_style = styles.SUBDUED
                parts.append(f"{styles.cursor_style(active)} {item_style.render(branch)}\n")
        else:
            parts.append("Ready to rebase:\n\n")
            parts.append(f"  Branch: {styles.SELECTED.render(self.selected_branch)}\n")
            parts.append(f"  New target: {styles.SELECTED.render(self.target_branch)}\n\n")
            parts.append(styles.SUCCESS.render("Press Enter to confirm and begin rebase"))
        parts.append(self.render_error())
        if self.state is FixPrState.CONFIRMING:
            help_text = "Enter: Confirm • Esc: Return to menu"
        else:
            help_text = "↑/↓: Navigate • Enter: Select • Esc: Return to menu"
        parts.append(self.render_help_text(help_text))
        return "".join(parts)


def parse_branch_lines(output: str) -> list[str]:
    """Turn ``git branch`` output into branch names, dropping the current-branch marker."""
    branches = []
    for line in output.strip().split("\n"):
        name = line.strip()
        if name.startswith("*"):
            name = name.removeprefix("* ")
        name = name.strip()
        if name:
            branches.append(name)
    return branches


def _run(model):
    try:
        return run_model(model)
    except (RuntimeError, OSError) as err:
        print(f"Error running prompt: {err}")
        return None


def run_stack_prompt() -> tuple[str, str] | None:
    """Ask for a new branch and its parent; None when cancelled or failed."""
    try:
        default_parent = GitExecutor().current_branch() or _DEFAULT_PARENT
    except GitError:
        default_parent = _DEFAULT_PARENT
    model = _run(StackPromptModel(parent_branch=default_parent))
    if model is None or model.cancelled:
        return None
    if model.new_branch and model.parent_branch:
        return model.new_branch, model.parent_branch
    return None


def run_sync_prompt() -> list[str] | None:
    """Ask for the branches to sync, parent first; None when cancelled or failed."""
    git = GitExecutor()
    try:
        branches = parse_branch_lines(git.execute("branch"))
    except GitError as err:
        print(f"Error getting branches: {err}")
        return None
    model = _run(SyncPromptModel(branch_list=SelectableList(branches)))
    if model is None or model.cancelled:
        return None
    if (
        model.step is SyncStep.CONFIRMING_SELECTION
        and model.branch_list.selected_count() >= 2
    ):
        return model.branch_list.selected_items()
    return None


def run_fix_pr_prompt() -> tuple[str, str] | None:
    """Ask for a branch and its new target; None when cancelled or failed."""
    git = GitExecutor()
    try:
        branches = parse_branch_lines(git.execute("branch"))
    except GitError as err:
        print(f"Error getting branches: {err}")
        return None
    try:
        remote_output = git.execute("branch", "-r")
    except GitError:
        remote_output = ""
    for line in remote_output.strip().split("\n"):
        name = line.strip()
        if name.startswith("origin/") and "HEAD" not in name:
            branches.append(name)

    model = _run(FixPrPromptModel.for_branches(branches))
    if model is None or model.cancelled:
        return None
    if model.state is FixPrState.CONFIRMING and model.selected_branch and model.target_branch:
        return model.selected_branch, model.target_branch
    return None