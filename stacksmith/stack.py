"""Branch relationships: the stored stack file and the branch tree built from git."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import yaml

from stacksmith.git import GitError, GitExecutor

STACK_FILE_HEADER = "# Stacksmith branch relationships\n"
MAIN_BRANCH_CANDIDATES = ("main", "master")


@dataclass
class StackConfig:
    """Stored child-to-parent branch relationships and repository metadata."""

    relationships: dict[str, str] = field(default_factory=dict)
    main_branch: str = ""
    last_updated: datetime | None = None


@dataclass
class BranchNode:
    """A local branch placed in the stack tree."""

    name: str
    commit_sha: str
    is_head: bool = False
    is_orphan: bool = False
    children: list[BranchNode] = field(default_factory=list)
    ahead: int = 0
    behind: int = 0
    is_merged: bool = False


@dataclass
class BranchStack:
    """The whole tree of branches: roots, orphans and every node by name."""

    roots: list[BranchNode] = field(default_factory=list)
    all_nodes: dict[str, BranchNode] = field(default_factory=dict)
    main_branch: str = ""
    orphans: list[BranchNode] = field(default_factory=list)


@dataclass
class BranchInfo:
    """A branch's head commit and the first parent of that commit."""

    name: str
    commit_sha: str
    parent_sha: str


def dump_stack_config(config: StackConfig) -> str:
    """Serialise ``config`` as the YAML text of the stack file, header included."""
    document = {
        "relationships": dict(config.relationships),
        "metadata": {
            "main_branch": config.main_branch,
            "last_updated": config.last_updated,
        },
    }
    body = yaml.safe_dump(
        document, sort_keys=False, default_flow_style=False, allow_unicode=True
    )
    header = STACK_FILE_HEADER
    if config.last_updated is not None:
        header += f"# Last updated: {config.last_updated:%Y-%m-%d %H:%M:%S}\n"
    return header + "\n" + body


def parse_stack_config(text: str) -> StackConfig:
    """Read a stack file's YAML text.

    Raises ValueError when the document does not have the expected shape.
    """
    data = yaml.safe_load(text)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("stack config must be a mapping")

    relationships = data.get("relationships") or {}
    if not isinstance(relationships, dict):
        raise ValueError("relationships must be a mapping")

    metadata = data.get("metadata") or {}
    if not isinstance(metadata, dict):
        raise ValueError("metadata must be a mapping")

    last_updated = metadata.get("last_updated")
    if isinstance(last_updated, str):
        last_updated = datetime.fromisoformat(last_updated)
    elif last_updated is not None and not isinstance(last_updated, datetime):
        raise ValueError(f"invalid last_updated value: {last_updated!r}")

    return StackConfig(
        relationships={str(child): str(parent) for child, parent in relationships.items()},
        main_branch=str(metadata.get("main_branch") or ""),
        last_updated=last_updated,
    )


def _stack_file(git: GitExecutor) -> Path:
    root = git.execute("rev-parse", "--show-toplevel").strip()
    return Path(root) / ".git" / "stacksmith" / "stack.yml"


def _branch_exists(git: GitExecutor, branch: str) -> bool:
    try:
        git.execute("rev-parse", "--verify", branch)
    except GitError:
        return False
    return True


def load_stack_config(git: GitExecutor) -> StackConfig:
    """Load the repository's stack file, or a fresh config when there is none."""
    path = _stack_file(git)
    if not path.exists():
        main_branch = next(
            (name for name in MAIN_BRANCH_CANDIDATES if _branch_exists(git, name)), ""
        )
        return StackConfig(main_branch=main_branch)
    return parse_stack_config(path.read_text(encoding="utf-8"))


def save_stack_config(git: GitExecutor, config: StackConfig) -> None:
    """Stamp ``config`` with the current time and write it to the stack file."""
    path = _stack_file(git)
    path.parent.mkdir(parents=True, exist_ok=True)
    config.last_updated = datetime.now().astimezone()
    path.write_text(dump_stack_config(config), encoding="utf-8")


def record_branch_relationship(git: GitExecutor, child_branch: str, parent_branch: str) -> None:
    """Store ``parent_branch`` as the parent of ``child_branch``."""
    config = load_stack_config(git)
    config.relationships[child_branch] = parent_branch
    save_stack_config(git, config)


def create_stacked_branch(git: GitExecutor, new_branch: str, parent_branch: str) -> None:
    """Create ``new_branch`` from ``parent_branch`` and record the relationship."""
    git.create_branch(new_branch, parent_branch)
    record_branch_relationship(git, new_branch, parent_branch)


def branches_with_commits(git: GitExecutor) -> dict[str, str]:
    """Return every local branch mapped to its head commit SHA."""
    output = git.execute(
        "for-each-ref", "--format=%(refname:short) %(objectname)", "refs/heads/"
    )
    branches: dict[str, str] = {}
    for line in output.strip().split("\n"):
        parts = line.strip().split(" ", 1)
        if len(parts) == 2:
            branches[parts[0]] = parts[1]
    return branches


def find_parent_commits(git: GitExecutor, branches: dict[str, str]) -> dict[str, BranchInfo]:
    """Find the first parent of each branch's head commit.

    Branches whose head has no parent, or whose lookup fails, are left out.
    """
    result: dict[str, BranchInfo] = {}
    for name, sha in branches.items():
        try:
            output = git.execute("rev-list", "--parents", "-n", "1", sha)
        except GitError:
            continue
        parts = output.split()
        if len(parts) >= 2:
            result[name] = BranchInfo(name=name, commit_sha=sha, parent_sha=parts[1])
    return result


def find_most_likely_parent(
    git: GitExecutor, branch: str, branch_infos: dict[str, BranchInfo]
) -> str | None:
    """Guess which other branch ``branch`` was created from, or None."""
    info = branch_infos.get(branch)
    if info is None:
        return None

    others = [name for name in branch_infos if name != branch]
    for name in others:
        if branch_infos[name].commit_sha == info.parent_sha:
            return name

    if not others:
        return None
    try:
        output = git.execute("branch", "--contains", info.parent_sha)
    except GitError:
        return None
    containing = {line.strip().removeprefix("*").strip() for line in output.strip().split("\n")}
    return next((name for name in others if name in containing), None)


def build_branch_tree(
    git: GitExecutor,
    branches: dict[str, str],
    branch_infos: dict[str, BranchInfo],
    config: StackConfig,
) -> BranchStack:
    """Arrange ``branches`` into a tree, repairing ``config`` along the way."""
    nodes = {name: BranchNode(name=name, commit_sha=sha) for name, sha in branches.items()}
    processed: set[str] = set()
    has_parent: set[str] = set()

    main_branch = config.main_branch
    if not main_branch:
        main_branch = next((name for name in MAIN_BRANCH_CANDIDATES if name in nodes), "")
        if main_branch:
            config.main_branch = main_branch

    config.relationships = {
        child: parent for child, parent in config.relationships.items() if child in nodes
    }

    for child, parent in config.relationships.items():
        if parent not in nodes:
            continue
        has_parent.add(child)
        if child not in processed:
            nodes[parent].children.append(nodes[child])
            processed.add(child)

    for name, node in nodes.items():
        if name in processed or name == main_branch or name in has_parent:
            continue
        parent = find_most_likely_parent(git, name, branch_infos)
        if parent is not None and parent in nodes:
            nodes[parent].children.append(node)
            config.relationships[name] = parent
            processed.add(name)
            has_parent.add(name)

    roots: list[BranchNode] = []
    orphans: list[BranchNode] = []
    if main_branch and main_branch in nodes:
        roots.append(nodes[main_branch])
        processed.add(main_branch)

    for name, node in nodes.items():
        if name in processed or name in has_parent:
            continue
        if node.children:
            roots.append(node)
        else:
            node.is_orphan = True
            orphans.append(node)
        processed.add(name)

    try:
        current = git.current_branch()
    except GitError:
        current = ""
    if current in nodes:
        nodes[current].is_head = True

    for child, parent in config.relationships.items():
        if child not in nodes or parent not in nodes:
            continue
        try:
            nodes[child].ahead, nodes[child].behind = git.ahead_behind(child, parent)
        except (GitError, ValueError):
            pass
        try:
            nodes[child].is_merged = git.is_branch_merged(child, parent)
        except GitError:
            pass

    return BranchStack(roots=roots, all_nodes=nodes, main_branch=main_branch, orphans=orphans)


def build_branch_stack(git: GitExecutor) -> BranchStack:
    """Analyse the repository and build its branch stack, saving what was learned."""
    branches = branches_with_commits(git)
    infos = find_parent_commits(git, branches)
    config = load_stack_config(git)
    stack = build_branch_tree(git, branches, infos, config)
    try:
        save_stack_config(git, config)
    except (OSError, GitError) as err:
        print(f"Warning: Failed to save stack config: {err}", file=sys.stderr)
    return stack