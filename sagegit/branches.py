"""Everyday branch operations: push, squash, start and switch."""

from __future__ import annotations

from typing import Any, Callable


class BranchError(Exception):
    """Raised when a branch operation cannot proceed."""


def _require_repo(git: Any, message: str) -> None:
    try:
        repo = git.is_repo()
    except Exception as exc:
        raise BranchError(f"{message}: {exc}" if "error" in message else message) from exc
    if not repo:
        raise BranchError(message)


def _call(what: str, action: Callable[..., Any], *args: Any) -> Any:
    try:
        return action(*args)
    except BranchError:
        raise
    except Exception as exc:
        raise BranchError(f"{what}: {exc}") from exc


def push_current_branch(git: Any, force: bool) -> None:
    """Push the current branch, optionally forcing."""
    _require_repo(git, "not a repo or error checking repo")
    branch = git.current_branch()
    git.push(branch, force)


def squash_commits(git: Any, start_commit: str, all_commits: bool) -> None:
    """Start an interactive rebase squashing commits after start_commit.

    With all_commits, squash from the first commit; refused on the head branch.
    """
    _require_repo(git, "not a git repo")
    branch = _call("failed to get current branch", git.current_branch)
    is_head = _call(
        "failed to check if current branch is head", git.is_head_branch, branch
    )
    if is_head and all_commits:
        raise BranchError("cannot squash all commits on the head branch")
    if all_commits:
        start_commit = _call("failed to get first commit", git.get_first_commit)
    if not start_commit:
        raise BranchError("no start commit specified")
    _call("failed to start interactive rebase", git.squash_commits, start_commit)


def start_branch(git: Any, new_branch: str, push: bool) -> None:
    """Create new_branch from the freshly pulled default branch and switch to it."""
    _require_repo(git, "not a git repo")
    try:
        default = git.default_branch()
    except Exception:  # an undetectable default branch falls back to main
        default = "main"
    git.fetch_all()
    git.checkout(default)
    git.pull()
    git.create_branch(new_branch)
    git.checkout(new_branch)
    if push:
        git.push(new_branch, False)


def switch_branch(git: Any, branch: str) -> None:
    """Check out an existing branch."""
    _require_repo(git, "not a git repo")
    git.checkout(branch)