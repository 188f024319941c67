# stacksmith

A lightweight command-line tool for managing stacked Git branches using plain Git.
It suits small one-change pull requests and long stacks of dependent branches alike.

## Installation

```
pip install .
```

Git must be installed and on your `PATH`. The tests need the `test` extra:

```
pip install .[test]
pytest
```

## Usage

If you run `stacksmith` with no arguments, it opens an interactive menu. This needs a real terminal. Use the arrow keys (or `j`/`k`) to move and Enter or Space to choose. Press `q` or Ctrl+C to quit. When a command finishes, you are asked whether to return to the menu. Answer `n` or `no` to exit.

```
stacksmith
```

Each action also has its own subcommand.

### Create a stacked branch

```
stacksmith stack feature-b feature-a
```

This creates `feature-b` from `feature-a` and checks it out. It then records the parent–child link in `.git/stacksmith/stack.yml`.

With fewer than two arguments, it opens a prompt with two fields: the new branch name and the parent branch. The parent field starts with the current branch, or `main` if the current branch cannot be determined.

### Sync a stack

```
stacksmith sync main feature-a feature-b
```

This goes through the stack in order, up to 100 branches. Each branch after the first is handled in four steps:

1. check it out
2. fetch
3. rebase it onto the branch before it
4. push it with `--force-with-lease`

Processing stops at the first error.

With fewer than two branches, it lists your local branches. Space selects a branch, and the order of selection gives the parent-to-child order. Enter continues and Enter again confirms. If nothing has been selected, the first Enter selects the highlighted branch.

### Move a PR onto a new base

```
stacksmith fix-pr feature-b main
```

This checks out `feature-b` and fetches. It then rebases the branch onto `origin/main` and pushes it with `--force-with-lease`. Finally it reminds you to change the pull request's target branch. A target that already starts with `origin/` is used as it is.

With fewer than two arguments, you pick the branch and then the new target from a list. The list holds the local branches and the `origin/` remote-tracking branches. A branch cannot target itself.

### Push

```
stacksmith push
```

If the current branch has an upstream, this pushes it with `--force-with-lease`. Otherwise it runs `git push --set-upstream origin <branch> --force-with-lease`.

### Show the stack

```
stacksmith graph
```

Prints the branch hierarchy as a tree. The markers mean:

- `👈` the current (HEAD) branch
- `✔` the branch is merged into its parent
- `🔁 (+n/-m)` the branch is n commits ahead of its parent and m behind
- `⚠️ orphaned` the branch has no known parent and no children

Parents come from the relationships stored in `.git/stacksmith/stack.yml`. Relationships for branches that no longer exist are dropped. Where no relationship is stored, a parent is inferred from the commit history. The updated relationships are saved back to the file.

If the stack cannot be analysed, stacksmith prints the output of `git log --graph --oneline --decorate --all` instead.

### Shell completion

```
stacksmith completion bash
stacksmith completion zsh
stacksmith completion fish
```

Each prints a completion script for the named shell. For example, in bash:

```
source <(stacksmith completion bash)
```

### Help and version

```
stacksmith help
stacksmith help sync
stacksmith --version
```

## Using it from Python

- `stacksmith.git.GitExecutor` runs git commands. Failures are raised as `GitError` or one of its subclasses: `NotARepositoryError`, `BranchNotFoundError`, `RemoteError` and `MergeConflictError`.
- `stacksmith.stack.build_branch_stack(git)` returns a `BranchStack` of `BranchNode` trees.
- `stacksmith.printer.Printer().render_branch_stack(stack)` turns a stack into the text tree shown by `graph`.
- `stacksmith.stack.load_stack_config`, `save_stack_config` and `record_branch_relationship` read and write the stored relationships.

## What it does not do

`stacksmith tui` does not open a full-screen branch browser. It only prints a list of planned features and points you to `stacksmith graph`.