"""Command-line entry point: the subcommands and the interactive main menu."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Sequence
from itertools import pairwise

from stacksmith.git import GitError, GitExecutor
from stacksmith.menu import run_menu
from stacksmith.printer import Printer
from stacksmith.prompts import run_fix_pr_prompt, run_stack_prompt, run_sync_prompt
from stacksmith.stack import build_branch_stack, create_stacked_branch

VERSION = "dev"
BUILD_TIME = "unknown"
APP_NAME = "stacksmith"
SHELLS = ("bash", "zsh", "fish")

_DESCRIPTION = (
    "Stacksmith is a lightweight, expressive CLI for managing stacked Git branches\n"
    "using vanilla Git. Whether you're crafting one-liner PRs or sculpting a majestic stack,\n"
    "Stacksmith helps you move fast and stay clean — artisan-style."
)

_COMPLETION_HELP = """To load completions:

Bash:
  $ source <(stacksmith completion bash)

Zsh:
  $ source <(stacksmith completion zsh)

Fish:
  $ stacksmith completion fish | source
"""

# name, usage of positional arguments, emoji, summary, long description, max args
_COMMANDS: tuple[tuple[str, str, str, str, str, int | None], ...] = (
    ("stack", "[new-branch] [parent-branch]", "🪵", "Create a new branch atop another",
     "Forge a new stacked branch on top of an existing parent branch.", 2),
    ("sync", "[branch1] [branch2] ...", "🧽", "Rebase multiple branches sequentially",
     "Rebase and push a stack of branches in sequence.", 100),
    ("fix-pr", "[branch] [target]", "🔧", "Rebase one branch onto a new base",
     "Rebase a branch onto a new target and remind to retarget the PR.", 2),
    ("push", "", "⬆️", "Smart push with upstream detection",
     "Push the current branch with upstream handling.", 0),
    ("graph", "", "🌳", "Show commit graph (git log --graph)",
     "Visualize the branch stack structure showing parent-child relationships.", 0),
    ("tui", "", "🖥", "Full-screen DAG browser and stack navigator",
     "Launch the full-screen terminal UI for managing git branch stacks.", 0),
)

_EXTRA_COMMANDS = (
    ("completion", "Generate completion script"),
    ("help", "Help about any command"),
)


class _UsageError(Exception):
    """The command line could not be parsed."""


class _Parser(argparse.ArgumentParser):
    """Argument parser that raises instead of exiting, and knows its subcommands."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.commands: dict[str, argparse.ArgumentParser] = {}

    def error(self, message: str) -> None:  # type: ignore[override]
        raise _UsageError(message)


def _printer() -> Printer:
    return Printer(APP_NAME)


def run_stack(args: Sequence[str]) -> bool:
    """Create a new branch atop a parent; ask interactively when arguments are missing."""
    printer = _printer()
    if len(args) < 2:
        answer = run_stack_prompt()
        if answer is None:
            return False
        new_branch, parent_branch = answer
    else:
        new_branch, parent_branch = args[0], args[1]

    git = GitExecutor()
    try:
        create_stacked_branch(git, new_branch, parent_branch)
    except (GitError, OSError, ValueError) as err:
        printer.error(f"Error creating branch: {err}")
        return False
    printer.forge_success(new_branch, parent_branch)
    return True


def run_sync(args: Sequence[str]) -> bool:
    """Rebase and push each branch onto the one before it, in order."""
    printer = _printer()
    if len(args) < 2:
        branches = run_sync_prompt()
        if branches is None:
            return False
    else:
        branches = list(args)

    git = GitExecutor()
    printer.sync_start()
    for parent, child in pairwise(branches):
        printer.rebase_start(child, parent)
        try:
            git.checkout_branch(child)
        except GitError as err:
            printer.error(f"Error checking out {child}: {err}")
            return False
        try:
            git.fetch_remote()
        except GitError as err:
            printer.error(f"Error fetching remote: {err}")
            return False
        try:
            git.rebase_branch(parent)
        except GitError as err:
            printer.error(f"Error rebasing {child} onto {parent}: {err}")
            return False
        try:
            git.push_branch()
        except GitError as err:
            printer.error(f"Error pushing {child}: {err}")
            return False
        printer.push_success(child)

    printer.success("Stack sync complete!")
    return True


def run_fix_pr(args: Sequence[str]) -> bool:
    """Rebase a branch onto the remote copy of a new target and push it."""
    printer = _printer()
    if len(args) < 2:
        answer = run_fix_pr_prompt()
        if answer is None:
            return False
        branch, target = answer
    else:
        branch, target = args[0], args[1]

    git = GitExecutor()
    printer.fix_pr_start(branch, target)
    try:
        git.checkout_branch(branch)
    except GitError as err:
        printer.error(f"Error checking out {branch}: {err}")
        return False
    try:
        git.fetch_remote()
    except GitError as err:
        printer.error(f"Error fetching remote: {err}")
        return False

    rebase_target = target if target.startswith("origin/") else "origin/" + target
    try:
        git.rebase_branch(rebase_target)
    except GitError as err:
        printer.error(f"Error rebasing onto {rebase_target}: {err}")
        return False
    try:
        git.push_branch()
    except GitError as err:
        printer.error(f"Error pushing {branch}: {err}")
        return False

    printer.success(f"Successfully rebased {branch} onto {target}")
    printer.retarget_reminder(branch, target)
    return True


def run_push(args: Sequence[str]) -> bool:
    """Push the current branch, setting its upstream on the first push."""
    printer = _printer()
    git = GitExecutor()
    try:
        current = git.current_branch()
    except GitError as err:
        printer.error(f"Error getting current branch: {err}")
        return False
    try:
        upstream = git.has_upstream()
    except GitError as err:
        printer.error(f"Error checking upstream: {err}")
        return False

    printer.info(f"Pushing branch {current}...")
    if upstream:
        try:
            git.push_branch()
        except GitError as err:
            printer.error(f"Error pushing branch: {err}")
            return False
        printer.push_success(current)
    else:
        try:
            git.set_upstream_branch(current)
        except GitError as err:
            printer.error(f"Error setting upstream: {err}")
            return False
        printer.new_upstream_success(current)
    return True


def run_graph(args: Sequence[str]) -> bool:
    """Show the branch stack as a tree, falling back to git's own graph."""
    printer = _printer()
    git = GitExecutor()
    printer.graph_header()
    printer.divider()

    try:
        stack = build_branch_stack(git)
    except (GitError, OSError, ValueError) as err:
        printer.error(f"Error analyzing branch structure: {err}")
        try:
            graph = git.show_graph()
        except GitError:
            graph = ""
        print(graph)
        return False

    if not stack.roots and not stack.orphans:
        printer.info("No branches found or unable to determine branch relationships.")
        return True

    print(printer.render_branch_stack(stack))
    printer.divider()
    printer.info(
        "Legend: "
        "👈 HEAD branch • "
        "✔ merged into parent • "
        "🔁 (+n/-m) ahead/behind counts • "
        "⚠ orphaned branch"
    )
    printer.info("Branch relationships stored in .stacksmith/stack.yml")
    printer.info("Tip: For a more detailed view, try 'stacksmith tui' (coming soon)")
    return True


def run_tui(args: Sequence[str]) -> bool:
    """Describe the planned full-screen interface."""
    printer = _printer()
    printer.coming_soon("Full-screen TUI")
    printer.divider()
    print("The TUI will feature:")
    printer.bullet_point("Interactive branch DAG visualization")
    printer.bullet_point("One-key branch operations (rebase, push, retarget)")
    printer.bullet_point("Visual commit history exploration")
    printer.bullet_point("Stack health monitoring")
    printer.divider()
    printer.info("For now, try 'stacksmith graph' to see a basic branch structure")
    return True


def _completion_entries() -> list[tuple[str, str]]:
    return [(name, summary) for name, _, _, summary, _, _ in _COMMANDS] + list(_EXTRA_COMMANDS)


def completion_script(shell: str) -> str:
    """Return a shell completion script for ``shell``.

    Raises ValueError for a shell other than bash, zsh or fish.
    """
    entries = _completion_entries()
    names = " ".join(name for name, _ in entries)
    shells = " ".join(SHELLS)
    if shell == "bash":
        return (
            f"_{APP_NAME}_completions() {{\n"
            '    local cur="${COMP_WORDS[COMP_CWORD]}"\n'
            '    if [ "$COMP_CWORD" -eq 1 ]; then\n'
            f'        COMPREPLY=( $(compgen -W "{names}" -- "$cur") )\n'
            '    elif [ "${COMP_WORDS[1]}" = "completion" ] && [ "$COMP_CWORD" -eq 2 ]; then\n'
            f'        COMPREPLY=( $(compgen -W "{shells}" -- "$cur") )\n'
            "    fi\n"
            "}\n"
            f"complete -F _{APP_NAME}_completions {APP_NAME}\n"
        )
    if shell == "zsh":
        described = "".join(f"    '{name}:{summary}'\n" for name, summary in entries)
        return (
            f"#compdef {APP_NAME}\n"
            f"_{APP_NAME}() {{\n"
            "  local -a commands\n"
            "  commands=(\n"
            f"{described}"
            "  )\n"
            "  if (( CURRENT == 2 )); then\n"
            "    _describe 'command' commands\n"
            "  elif (( CURRENT == 3 )) && [[ $words[2] == completion ]]; then\n"
            f"    _values 'shell' {shells}\n"
            "  fi\n"
            "}\n"
            f"compdef _{APP_NAME} {APP_NAME}\n"
        )
    if shell == "fish":
        lines = [f"complete -c {APP_NAME} -f"]
        lines += [
            f"complete -c {APP_NAME} -n '__fish_use_subcommand' -a {name} -d '{summary}'"
            for name, summary in entries
        ]
        lines.append(
            f"complete -c {APP_NAME} -n '__fish_seen_subcommand_from completion' -a '{shells}'"
        )
        return "\n".join(lines) + "\n"
    raise ValueError(f"unsupported shell: {shell}")


_HANDLERS: dict[str, Callable[[Sequence[str]], bool]] = {
    "stack": run_stack,
    "sync": run_sync,
    "fix-pr": run_fix_pr,
    "push": run_push,
    "graph": run_graph,
    "tui": run_tui,
}


def launch_main_menu() -> None:
    """Show the main menu repeatedly, running the chosen command each time."""
    while True:
        selected = run_menu()
        if selected in ("", "quit"):
            return

        handler = _HANDLERS.get(selected)
        if handler is None:
            print(f"Unknown command: {selected}")
        else:
            handler([])

        print()
        print("Would you like to return to the Stacksmith menu? [Y/n]: ", end="", flush=True)
        try:
            response = input()
        except EOFError:
            response = ""
        if response.strip().lower() in ("n", "no"):
            return
        print()


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser with every subcommand."""
    parser = _Parser(
        prog=APP_NAME,
        description="🧑🏾‍🏭 Stacksmith - Artisan Git Stacking Tool\n\n" + _DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--version", action="store_true", help="version for stacksmith")
    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    for name, usage, emoji, summary, description, max_args in _COMMANDS:
        sub = subparsers.add_parser(
            name,
            help=f"{emoji} {summary}",
            description=description,
            usage=f"{APP_NAME} {name} {usage}".rstrip(),
        )
        sub.add_argument("args", nargs="*", help=argparse.SUPPRESS)
        sub.set_defaults(max_args=max_args)
        parser.commands[name] = sub

    completion = subparsers.add_parser(
        "completion",
        help="Generate completion script",
        description=_COMPLETION_HELP,
        usage=f"{APP_NAME} completion [bash|zsh|fish]",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    completion.add_argument("shell", nargs="?")
    completion.add_argument("extra", nargs="*", help=argparse.SUPPRESS)
    parser.commands["completion"] = completion

    help_parser = subparsers.add_parser(
        "help",
        help="ℹ️ Help about any command",
        description=(
            "Help provides help for any command in the application.\n"
            "Simply type stacksmith help [path to command] for full details."
        ),
        usage=f"{APP_NAME} help [command]",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    help_parser.add_argument("topic", nargs="*")
    parser.commands["help"] = help_parser
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line and return the process exit status."""
    parser = build_parser()
    try:
        ns = parser.parse_args(list(sys.argv[1:] if argv is None else argv))
    except _UsageError as err:
        print(err)
        return 1

    if ns.version:
        print(f"Stacksmith Version: {VERSION}\nBuild Time: {BUILD_TIME}")
        return 0

    if ns.command is None:
        launch_main_menu()
        return 0

    if ns.command == "help":
        target = parser.commands.get(ns.topic[0]) if ns.topic else None
        (target or parser).print_help()
        return 0

    if ns.command == "completion":
        try:
            sys.stdout.write(completion_script(ns.shell or ""))
        except ValueError:
            parser.commands["completion"].print_help()
        return 0

    if ns.max_args is not None and len(ns.args) > ns.max_args:
        if ns.max_args == 0:
            print(f'unknown command "{ns.args[0]}" for "{APP_NAME} {ns.command}"')
        else:
            print(f"accepts at most {ns.max_args} arg(s), received {len(ns.args)}")
        return 1

    _HANDLERS[ns.command](ns.args)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())