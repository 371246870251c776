"""Synchronise the current branch with its parent branch."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable

from sagegit.sync_result import (
    SyncError,
    SyncOptions,
    handle_sync_flags,
    handle_sync_result,
)

_MARKS = {"running": "…", "done": "✓", "failed": "✗", "skipped": "-"}

_NOT_A_REPO = "Error: Not a Git repository. Please navigate to a valid Git project"


@dataclass
class SyncProgress:
    """Tracks the state of each step of a sync run, in the order they were reached."""

    steps: dict[str, str] = field(default_factory=dict)

    def start_step(self, name: str) -> None:
        """Mark a step as running."""
        self.steps[name] = "running"

    def complete_step(self, name: str, success: bool) -> None:
        """Mark a step as finished, successfully or not."""
        self.steps[name] = "done" if success else "failed"

    def skip_step(self, name: str) -> None:
        """Mark a step as not needed."""
        self.steps[name] = "skipped"

    def summary(self) -> str:
        """Return a readable list of the steps and their outcomes."""
        lines = ["Sync summary:"]
        for name, state in self.steps.items():
            lines.append(f"  {_MARKS.get(state, '?')} {name} ({state})")
        return "\n".join(lines)


def _attempt(message: str, action: Callable[..., Any], *args: Any) -> Any:
    try:
        return action(*args)
    except SyncError:
        raise
    except Exception as exc:
        raise SyncError(message=f"{message}: {exc}") from exc


def verify_repo_state(git: Any) -> None:
    """Raise unless inside a repository with a branch checked out."""
    try:
        repo = git.is_repo()
    except Exception as exc:
        raise SyncError(message="not a git repository") from exc
    if not repo:
        raise SyncError(message="not a git repository")
    head = _attempt("failed to get current branch", git.current_branch)
    if head == "HEAD":
        raise SyncError(message="cannot sync in detached HEAD state")


def get_branch_info(git: Any, target_branch: str) -> tuple[str, str]:
    """Return (current branch, parent branch), checking that the parent exists."""
    current = _attempt("failed to get current branch", git.current_branch)
    parent = target_branch or _attempt(
        "failed to get default branch", git.default_branch
    )
    branches = _attempt("failed to list branches", git.list_branches)
    if parent not in branches:
        raise SyncError(message=f"target branch '{parent}' does not exist")
    return current, parent


def preferred_merge_strategy(git: Any) -> str:
    """Return 'merge' or 'rebase' from git config sage.merge.strategy, else ''."""
    try:
        strategy = str(git.run("config", "--get", "sage.merge.strategy")).strip()
    except Exception:
        return ""
    return strategy if strategy in ("merge", "rebase") else ""


def rebase_branch(git: Any, parent_branch: str) -> None:
    """Rebase the current branch onto the parent branch."""
    current = _attempt("failed to get current branch", git.current_branch)
    _attempt(f"failed to checkout {current}", git.checkout, current)
    _attempt(
        f"failed to rebase onto {parent_branch}",
        git.run_interactive,
        "rebase",
        "--onto",
        parent_branch,
        parent_branch,
        current,
    )


def is_behind_remote(git: Any, branch: str) -> bool:
    """Return True if HEAD differs from the merge base with origin/<branch>."""
    base = git.get_merge_base(branch, f"origin/{branch}")
    head = git.get_commit_hash("HEAD")
    return base != head


def _integrate_diverged(git: Any, current: str, parent: str, opts: SyncOptions) -> None:
    strategy = preferred_merge_strategy(git)
    try:
        divergence = int(git.get_branch_divergence(current, parent))
    except Exception:
        divergence = 0
    if opts.verbose:
        print(f"Branch has diverged by {divergence} commits")

    if strategy == "merge":
        if opts.verbose:
            print("Using merge strategy based on configuration")
        _attempt(f"failed to merge {parent}", git.merge, parent)
    elif strategy == "rebase":
        if opts.verbose:
            print("Using rebase strategy based on configuration")
        rebase_branch(git, parent)
    elif divergence > 10:
        if opts.verbose:
            print("Using merge strategy to preserve branch history")
        print("Branch has diverged significantly - using merge strategy")
        _attempt(f"failed to merge {parent}", git.pull_merge)
    else:
        if opts.verbose:
            print("Using rebase strategy for a clean history")
        rebase_branch(git, parent)


def integrate_changes(git: Any, parent_branch: str, opts: SyncOptions) -> None:
    """Bring the parent branch's changes into the current branch."""
    current = _attempt("failed to get current branch", git.current_branch)
    merge_base = _attempt(
        "failed to get merge base", git.get_merge_base, current, parent_branch
    )
    head = _attempt("failed to get current HEAD", git.get_commit_hash, current)
    if merge_base != head:
        _integrate_diverged(git, current, parent_branch, opts)
    else:
        _attempt(f"failed to fast-forward to {parent_branch}", git.merge, parent_branch)


def _has_uncommitted_changes(git: Any) -> bool:
    return not _attempt("failed to check working directory", git.is_clean)


def _stash_working_directory(git: Any) -> bool:
    if _attempt("failed to check working directory", git.is_clean):
        return False
    _attempt("failed to stash changes", git.stash, f"sage-sync-{int(time.time())}")
    return True


def _restore_changes(git: Any, progress: SyncProgress) -> None:
    progress.start_step("restore")
    try:
        git.stash_pop()
    except Exception as exc:
        progress.complete_step("restore", False)
        raise SyncError(kind="stash", message="Failed to restore your changes") from exc
    progress.complete_step("restore", True)


def _abandon(git: Any, progress: SyncProgress, step: str, stashed: bool) -> None:
    progress.complete_step(step, False)
    if stashed:
        try:
            _restore_changes(git, progress)
        except SyncError:
            pass


def _perform_sync(git: Any, opts: SyncOptions, progress: SyncProgress) -> None:
    if opts.dry_run:
        print("Dry run: Previewing sync operations without modifying your repository")

    progress.start_step("verify")
    try:
        verify_repo_state(git)
    except SyncError as exc:
        progress.complete_step("verify", False)
        raise SyncError(message=_NOT_A_REPO) from exc
    progress.complete_step("verify", True)

    current, parent = get_branch_info(git, opts.target_branch)

    stashed = False
    if _has_uncommitted_changes(git):
        progress.start_step("stash")
        try:
            stashed = _stash_working_directory(git)
        except SyncError as exc:
            progress.complete_step("stash", False)
            raise SyncError(message=f"Failed to stash changes: {exc}") from exc
        progress.complete_step("stash", True)
    else:
        progress.skip_step("stash")

    progress.start_step("fetch")
    try:
        git.fetch_all()
    except Exception as exc:
        _abandon(git, progress, "fetch", stashed)
        raise SyncError(message=f"Failed to fetch updates: {exc}") from exc
    progress.complete_step("fetch", True)

    progress.start_step("pull")
    try:
        git.pull()
    except Exception as exc:
        _abandon(git, progress, "pull", stashed)
        raise SyncError(message=f"Failed to pull updates: {exc}") from exc
    progress.complete_step("pull", True)

    is_main = current == parent
    head = _attempt("failed to get current HEAD", git.get_commit_hash, current)
    merge_base = _attempt("failed to get merge base", git.get_merge_base, current, parent)

    if merge_base != head:
        progress.start_step("integrate")
        try:
            _integrate_diverged(git, current, parent, opts)
        except SyncError:
            _abandon(git, progress, "integrate", stashed)
            raise
        progress.complete_step("integrate", True)
    else:
        progress.skip_step("integrate")

    try:
        behind = is_behind_remote(git, current)
    except Exception:
        behind = False

    if behind and not is_main and not opts.no_push:
        progress.start_step("push")
        try:
            _attempt("failed to push changes", git.push_with_lease, current)
        except SyncError:
            _abandon(git, progress, "push", stashed)
            raise
        progress.complete_step("push", True)
    else:
        progress.skip_step("push")
        if not behind and is_main:
            print("Branch is up to date")

    if stashed:
        _restore_changes(git, progress)
        return
    progress.skip_step("restore")

    if is_main:
        print("Branch is up to date")
    else:
        print(f"Branch '{current}' is now up to date")
    print(progress.summary())


def sync_branch(git: Any, opts: SyncOptions) -> SyncProgress:
    """Synchronise the current branch with its parent; returns the step record."""
    progress = SyncProgress()
    if opts.dry_run:
        print("Dry run: Previewing sync operations without modifying your repository")
    if opts.verbose:
        print("Verbose mode: Displaying detailed operation logs")

    result = handle_sync_flags(git, opts.abort, opts.continue_sync)
    if result.needs_action:
        handle_sync_result(result)
        return progress

    _perform_sync(git, opts, progress)
    return progress