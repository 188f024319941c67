"""Formatted console output: status lines, hints for git errors and the branch tree."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import TextIO

from stacksmith.git import (
    BranchNotFoundError,
    GitError,
    MergeConflictError,
    NotARepositoryError,
    RemoteError,
)
from stacksmith.stack import BranchNode, BranchStack

RED = "\033[0;31m"
GREEN = "\033[0;32m"
BLUE = "\033[0;34m"
YELLOW = "\033[1;33m"
CYAN = "\033[0;36m"
PURPLE = "\033[0;35m"
GRAY = "\033[0;37m"
RESET = "\033[0m"
BOLD = "\033[1m"

DIVIDER = "━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━"


@dataclass
class Printer:
    """Writes the tool's messages, prefixed with a coloured application name."""

    app_name: str = "stacksmith"
    verbose: bool = False
    out: TextIO | None = None

    def _write(self, text: str) -> None:
        print(text, file=self.out if self.out is not None else sys.stdout)

    def _tagged(self, color: str, text: str) -> None:
        self._write(f"{color}{self.app_name}{RESET} {text}")

    def success(self, message: str) -> None:
        self._tagged(GREEN, f"✅ {message}")

    def info(self, message: str) -> None:
        self._tagged(BLUE, f"ℹ️ {message}")

    def warning(self, message: str) -> None:
        self._tagged(YELLOW, f"⚠️ {message}")

    def error(self, message: str) -> None:
        self._tagged(RED, f"❌ {message}")

    def error_with_solution(self, message: str, solution: str) -> None:
        """Print an error followed by a suggested fix, when one is given."""
        self.error(message)
        if solution:
            self._write(f"   {YELLOW}↳ {solution}{RESET}")

    def handle_git_error(self, err: BaseException) -> None:
        """Print ``err`` in the friendliest form its type allows."""
        if isinstance(err, BranchNotFoundError):
            self.error_with_solution(
                f"Branch '{err.branch_name}' not found",
                "Check the branch name or run 'git branch' to see available branches",
            )
        elif isinstance(err, MergeConflictError):
            self.error_with_solution(
                f"Merge conflict when rebasing {err.branch} onto {err.target}",
                "Resolve the conflicts, then run 'git rebase --continue'",
            )
        elif isinstance(err, RemoteError):
            self.error_with_solution(
                f"Error communicating with remote '{err.remote}'",
                "Check your network connection and remote repository access",
            )
        elif isinstance(err, GitError) and not isinstance(err, NotARepositoryError):
            if self.verbose:
                self.error(str(err))
            else:
                first_line = err.stderr.split("\n")[0]
                self.error(f"Git error: {first_line}" if first_line else "Git error")
                self.info("Run with --verbose for more details")
        else:
            self.error(str(err))

    def smith(self, message: str) -> None:
        self._tagged(GREEN, f"🧑🏾‍🏭 {message}")

    def forge_success(self, new_branch: str, parent_branch: str) -> None:
        self._tagged(GREEN, f"🪵 Forged new branch {new_branch} atop {parent_branch}. 🌲")

    def push_success(self, branch: str) -> None:
        self._tagged(GREEN, f"⬆️ Lifted {branch} to remote forge.")

    def new_upstream_success(self, branch: str) -> None:
        self._tagged(GREEN, f"🆕 First lift for {branch} — set upstream.")

    def graph_header(self) -> None:
        self._tagged(GREEN, "🌳 Behold your branching masterpiece:")

    def sync_start(self) -> None:
        self._tagged(GREEN, "🧽 Polishing your branch stack... 🪞")

    def rebase_start(self, child: str, parent: str) -> None:
        self._tagged(GREEN, f"🔄 Rebasing {child} onto {parent}...")

    def fix_pr_start(self, branch: str, target: str) -> None:
        self._tagged(GREEN, f"🔧 Reworking {branch} onto {target}... 🪄")

    def retarget_reminder(self, branch: str, target: str) -> None:
        self._tagged(YELLOW, f"📢 Don't forget to retarget the PR for {branch} to {target}!")

    def divider(self) -> None:
        self._write(DIVIDER)

    def coming_soon(self, feature: str) -> None:
        self._tagged(CYAN, f"🔧 {feature} coming soon...")

    def bullet_point(self, text: str) -> None:
        self._write(f"  • {text}")

    def step(self, number: int, text: str) -> None:
        self._write(f"  {BOLD}{number}.{RESET} {text}")

    def command_example(self, command: str) -> None:
        self._write(f"    {GRAY}$ {command}{RESET}")

    def start_progress(self, operation: str) -> None:
        self._tagged(BLUE, f"⏳ {operation}...")

    def end_progress(self, result: str) -> None:
        self._tagged(GREEN, f"⌛ {result}")

    def render_branch_stack(self, stack: BranchStack) -> str:
        """Render the stack as a text tree, orphaned branches in their own section."""
        parts: list[str] = []
        for position, root in enumerate(stack.roots):
            is_last = position == len(stack.roots) - 1 and not stack.orphans
            _render_node(parts, root, "", is_last)

        if stack.orphans:
            if stack.roots:
                parts.append("\n")
            parts.append(f"{YELLOW}⚠️ Orphaned Branches:{RESET}\n")
            for position, orphan in enumerate(stack.orphans):
                _render_node(parts, orphan, "", position == len(stack.orphans) - 1)

        return "".join(parts)


def _node_color(node: BranchNode) -> str:
    if node.is_head:
        return GREEN
    if node.is_orphan or node.behind > 0:
        return YELLOW
    return BLUE


def _node_status(node: BranchNode) -> str:
    status = []
    if node.is_head:
        status.append("👈")
    if node.behind > 0 or node.ahead > 0:
        status.append(f"🔁 (+{node.ahead}/-{node.behind})")
    if node.is_merged:
        status.append("✔")
    if node.is_orphan:
        status.append("⚠️ orphaned")
    return " ".join(status)


def _render_node(parts: list[str], node: BranchNode, prefix: str, is_last: bool) -> None:
    connector = "└── " if is_last else "├── "
    parts.append(
        f"{prefix}{connector}{_node_color(node)}{node.name:<20}{RESET}{_node_status(node)}\n"
    )
    child_prefix = prefix + ("    " if is_last else "│   ")
    for position, child in enumerate(node.children):
        _render_node(parts, child, child_prefix, position == len(node.children) - 1)