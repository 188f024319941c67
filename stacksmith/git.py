"""Running git commands and turning their failures into typed exceptions."""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass


class GitError(Exception):
    """A git command failed for a reason not covered by a more specific error."""

    def __init__(self, git_args: Sequence[str] = (), stderr: str = "", cause: str = "") -> None:
        self.git_args = tuple(git_args)
        self.stderr = stderr
        self.cause = cause
        super().__init__(self._message())

    def _message(self) -> str:
        return (
            f"git error: {self.cause}\n"
            f"Command: git {' '.join(self.git_args)}\n"
            f"Output: {self.stderr}"
        )

    def __str__(self) -> str:
        return self._message()


class NotARepositoryError(GitError):
    """The working directory is not inside a git repository."""

    def _message(self) -> str:
        return "not in a git repository"


class BranchNotFoundError(GitError):
    """A branch named in a command does not exist."""

    def __init__(self, branch_name: str, git_args: Sequence[str] = (), stderr: str = "") -> None:
        self.branch_name = branch_name
        super().__init__(git_args, stderr)

    def _message(self) -> str:
        return f"branch not found: {self.branch_name}"


class RemoteError(GitError):
    """The remote repository could not be reached."""

    def __init__(
        self, remote: str, cause: str = "", git_args: Sequence[str] = (), stderr: str = ""
    ) -> None:
        self.remote = remote
        super().__init__(git_args, stderr, cause)

    def _message(self) -> str:
        return f"remote error with {self.remote}: {self.cause}"


class MergeConflictError(GitError):
    """A rebase or merge stopped on conflicts."""

    def __init__(
        self, branch: str, target: str, git_args: Sequence[str] = (), stderr: str = ""
    ) -> None:
        self.branch = branch
        self.target = target
        super().__init__(git_args, stderr)

    def _message(self) -> str:
        return f"merge conflict when rebasing {self.branch} onto {self.target}"


def _split_lines(output: str) -> list[str]:
    return output.strip().split("\n")


@dataclass
class GitExecutor:
    """Runs git commands, optionally in a given working directory."""

    work_dir: str = ""

    def execute(self, *args: str) -> str:
        """Run ``git`` with ``args`` and return its standard output."""
        try:
            proc = subprocess.run(
                ["git", *args],
                cwd=self.work_dir or None,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as exc:
            raise GitError(args, "", str(exc)) from exc
        if proc.returncode == 0:
            return proc.stdout
        raise self._classify(args, proc.stderr or "", f"exit status {proc.returncode}")

    def _classify(self, args: Sequence[str], stderr: str, cause: str) -> GitError:
        if "not a git repository" in stderr:
            return NotARepositoryError(args, stderr, cause)

        if "did not match any" in stderr and ("pathspec" in stderr or "reference" in stderr):
            branch_name = next(
                (
                    arg
                    for arg in args
                    if not arg.startswith("-") and arg not in ("checkout", "branch")
                ),
                "",
            )
            return BranchNotFoundError(branch_name, args, stderr)

        if "conflict" in stderr and ("merge" in stderr or "rebase" in stderr):
            try:
                current = self.current_branch()
            except GitError:
                current = ""
            return MergeConflictError(current, _argument_after(args, "rebase", ""), args, stderr)

        if "could not read from remote repository" in stderr:
            remote = _argument_after(args, "push", "origin")
            return RemoteError(remote, cause, args, stderr)

        return GitError(args, stderr, cause)

    def current_branch(self) -> str:
        """Return the name of the checked-out branch."""
        return self.execute("rev-parse", "--abbrev-ref", "HEAD").strip()

    def has_upstream(self) -> bool:
        """Tell whether the current branch has an upstream configured."""
        try:
            self.execute("rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}")
        except GitError as err:
            if type(err) is GitError and "upstream" in err.stderr and "not set" in err.stderr:
                return False
            raise
        return True

    def checkout_branch(self, branch: str) -> None:
        self.execute("checkout", branch)

    def create_branch(self, new_branch: str, parent_branch: str) -> None:
        """Create ``new_branch`` from ``parent_branch`` and check it out."""
        self.execute("checkout", "-b", new_branch, parent_branch)

    def rebase_branch(self, target_branch: str) -> None:
        """Rebase the current branch onto ``target_branch``."""
        self.execute("rebase", target_branch)

    def push_branch(self) -> None:
        """Push the current branch with ``--force-with-lease``."""
        self.execute("push", "--force-with-lease")

    def set_upstream_branch(self, branch: str) -> None:
        """Push ``branch`` to origin and set it as upstream."""
        self.execute("push", "--set-upstream", "origin", branch, "--force-with-lease")

    def fetch_remote(self) -> None:
        self.execute("fetch")

    def show_graph(self) -> str:
        """Return the decorated one-line commit graph of all refs."""
        return self.execute("log", "--graph", "--oneline", "--decorate", "--all")

    def list_branches(self) -> list[str]:
        """Return the local branch names."""
        branches = []
        for line in _split_lines(self.execute("branch")):
            branch = line.strip()
            if branch.startswith("*"):
                branch = branch.removeprefix("* ")
            branches.append(branch)
        return branches

    def list_remote_branches(self) -> list[str]:
        """Return remote-tracking branch names, leaving out HEAD pointers."""
        return [
            line.strip()
            for line in _split_lines(self.execute("branch", "-r"))
            if "HEAD" not in line
        ]

    def is_branch_merged(self, branch: str, target: str) -> bool:
        """Tell whether every commit of ``branch`` is contained in ``target``."""
        output = self.execute("branch", "--merged", target)
        return any(
            line.strip().removeprefix("* ") == branch for line in _split_lines(output)
        )

    def ahead_behind(self, branch: str, target: str) -> tuple[int, int]:
        """Return ``(ahead, behind)`` of ``branch`` relative to ``target``.

        Raises ValueError when git's output cannot be parsed.
        """
        output = self.execute("rev-list", "--left-right", "--count", f"{target}...{branch}")
        parts = output.strip().split("\t")
        if len(parts) != 2:
            raise ValueError("unexpected rev-list output format")
        behind, ahead = (int(part) for part in parts)
        return ahead, behind


def _argument_after(args: Sequence[str], keyword: str, default: str) -> str:
    for position, arg in enumerate(args):
        if arg == keyword and position + 1 < len(args):
            return args[position + 1]
    return default