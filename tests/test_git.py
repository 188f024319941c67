import subprocess

import pytest

from stacksmith.git import (
    BranchNotFoundError,
    GitError,
    GitExecutor,
    MergeConflictError,
    NotARepositoryError,
    RemoteError,
)


class FakeGit:
    def __init__(self):
        self.calls = []
        self.responses = {}

    def set(self, args, stdout="", stderr="", returncode=0):
        self.responses[tuple(args)] = (returncode, stdout, stderr)

    def __call__(self, cmd, **kwargs):
        self.calls.append((list(cmd), kwargs.get("cwd")))
        returncode, stdout, stderr = self.responses.get(tuple(cmd[1:]), (0, "", ""))
        return subprocess.CompletedProcess(cmd, returncode, stdout, stderr)

    @property
    def arg_lists(self):
        return [cmd[1:] for cmd, _ in self.calls]


@pytest.fixture
def fake(monkeypatch):
    runner = FakeGit()
    monkeypatch.setattr(subprocess, "run", runner)
    return runner


def test_execute_returns_stdout_and_runs_git(fake):
    fake.set(["status"], stdout="clean\n")
    output = GitExecutor("/repo").execute("status")
    assert output == "clean\n"
    cmd, cwd = fake.calls[0]
    assert cmd == ["git", "status"]
    assert cwd == "/repo"


def test_execute_without_work_dir_uses_no_cwd(fake):
    fake.set(["fetch"], stdout="fetched\n")
    output = GitExecutor().execute("fetch")
    assert output == "fetched\n"
    assert fake.calls[0][1] is None


def test_not_a_repository(fake):
    fake.set(["status"], stderr="fatal: not a git repository", returncode=128)
    with pytest.raises(NotARepositoryError) as info:
        GitExecutor().execute("status")
    assert str(info.value) == "not in a git repository"


def test_branch_not_found_extracts_name(fake):
    fake.set(
        ["checkout", "feature"],
        stderr="error: pathspec 'feature' did not match any file(s) known to git",
        returncode=1,
    )
    with pytest.raises(BranchNotFoundError) as info:
        GitExecutor().checkout_branch("feature")
    assert info.value.branch_name == "feature"
    assert str(info.value) == "branch not found: feature"


def test_branch_not_found_skips_flags(fake):
    fake.set(
        ["checkout", "-b", "new", "missing"],
        stderr="fatal: reference did not match any",
        returncode=128,
    )
    with pytest.raises(BranchNotFoundError) as info:
        GitExecutor().create_branch("new", "missing")
    assert info.value.branch_name == "new"


def test_merge_conflict_reports_branches(fake):
    fake.set(["rev-parse", "--abbrev-ref", "HEAD"], stdout="child\n")
    fake.set(
        ["rebase", "parent"],
        stderr="CONFLICT (content): merge conflict in a.txt\nrebase stopped",
        returncode=1,
    )
    with pytest.raises(MergeConflictError) as info:
        GitExecutor().rebase_branch("parent")
    assert info.value.branch == "child"
    assert info.value.target == "parent"
    assert str(info.value) == "merge conflict when rebasing child onto parent"


def test_remote_error_uses_push_argument(fake):
    fake.set(
        ["push", "upstream"],
        stderr="fatal: could not read from remote repository",
        returncode=128,
    )
    with pytest.raises(RemoteError) as info:
        GitExecutor().execute("push", "upstream")
    assert info.value.remote == "upstream"
    assert str(info.value).startswith("remote error with upstream: ")


def test_remote_error_defaults_to_origin(fake):
    fake.set(["fetch"], stderr="could not read from remote repository", returncode=128)
    with pytest.raises(RemoteError) as info:
        GitExecutor().fetch_remote()
    assert info.value.remote == "origin"


def test_generic_error_message(fake):
    fake.set(["log", "--bad"], stderr="unknown option", returncode=129)
    with pytest.raises(GitError) as info:
        GitExecutor().execute("log", "--bad")
    assert type(info.value) is GitError
    text = str(info.value)
    assert "Command: git log --bad" in text
    assert text.endswith("Output: unknown option")
    assert info.value.stderr == "unknown option"


def test_specific_errors_are_git_errors(fake):
    fake.set(["status"], stderr="not a git repository", returncode=128)
    with pytest.raises(GitError):
        GitExecutor().execute("status")


def test_current_branch_strips(fake):
    fake.set(["rev-parse", "--abbrev-ref", "HEAD"], stdout="  main\n")
    assert GitExecutor().current_branch() == "main"


UPSTREAM = ["rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}"]


def test_has_upstream_true(fake):
    fake.set(UPSTREAM, stdout="origin/main\n")
    assert GitExecutor().has_upstream() is True


def test_has_upstream_false_when_not_set(fake):
    fake.set(UPSTREAM, stderr="fatal: no upstream configured, upstream not set", returncode=128)
    assert GitExecutor().has_upstream() is False


def test_has_upstream_raises_other_errors(fake):
    fake.set(UPSTREAM, stderr="fatal: not a git repository", returncode=128)
    with pytest.raises(NotARepositoryError):
        GitExecutor().has_upstream()


def test_push_branch_arguments(fake):
    fake.set(["push", "--force-with-lease"], stderr="rejected", returncode=1)
    with pytest.raises(GitError) as info:
        GitExecutor().push_branch()
    assert "Command: git push --force-with-lease" in str(info.value)
    assert fake.arg_lists == [["push", "--force-with-lease"]]


def test_set_upstream_branch_arguments(fake):
    fake.set(
        ["push", "--set-upstream", "origin", "topic", "--force-with-lease"],
        stderr="rejected",
        returncode=1,
    )
    with pytest.raises(GitError) as info:
        GitExecutor().set_upstream_branch("topic")
    assert "Command: git push --set-upstream origin topic --force-with-lease" in str(info.value)
    assert fake.arg_lists == [["push", "--set-upstream", "origin", "topic", "--force-with-lease"]]


def test_show_graph_returns_log(fake):
    fake.set(["log", "--graph", "--oneline", "--decorate", "--all"], stdout="* abc msg\n")
    assert GitExecutor().show_graph() == "* abc msg\n"


def test_list_branches_strips_current_marker(fake):
    fake.set(["branch"], stdout="  feature\n* main\n  topic\n")
    assert GitExecutor().list_branches() == ["feature", "main", "topic"]


def test_list_remote_branches_skips_head(fake):
    fake.set(["branch", "-r"], stdout="  origin/HEAD -> origin/main\n  origin/main\n  origin/dev\n")
    assert GitExecutor().list_remote_branches() == ["origin/main", "origin/dev"]


def test_is_branch_merged(fake):
    fake.set(["branch", "--merged", "main"], stdout="  done\n* main\n")
    git = GitExecutor()
    assert git.is_branch_merged("done", "main") is True
    assert git.is_branch_merged("main", "main") is True
    assert git.is_branch_merged("open", "main") is False


def test_ahead_behind_order(fake):
    fake.set(["rev-list", "--left-right", "--count", "main...topic"], stdout="3\t5\n")
    assert GitExecutor().ahead_behind("topic", "main") == (5, 3)


def test_ahead_behind_bad_format(fake):
    fake.set(["rev-list", "--left-right", "--count", "main...topic"], stdout="garbage\n")
    with pytest.raises(ValueError):
        GitExecutor().ahead_behind("topic", "main")


def test_ahead_behind_non_numeric(fake):
    fake.set(["rev-list", "--left-right", "--count", "main...topic"], stdout="x\ty\n")
    with pytest.raises(ValueError):
        GitExecutor().ahead_behind("topic", "main")


def test_missing_git_binary(monkeypatch):
    def boom(cmd, **kwargs):
        raise FileNotFoundError("no git here")

    monkeypatch.setattr(subprocess, "run", boom)
    with pytest.raises(GitError) as info:
        GitExecutor().execute("status")
    assert "no git here" in str(info.value)