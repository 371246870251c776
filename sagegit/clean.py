"""Find and delete branches that have been merged or whose pull requests are closed."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from sagegit.branches import BranchError


@dataclass
class CleanableBranches:
    """Branches that can be deleted locally and on the remote."""

    local_branches: list[str] = field(default_factory=list)
    remote_branches: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class DeletionResult:
    """The outcome of deleting one branch; error is None on success."""

    branch: str
    error: Exception | None = None


def _closed_pr_branches(github: Any) -> set[str]:
    try:
        prs = github.list_prs("all")
    except Exception:  # without GitHub, git's merge information still applies
        return set()
    return {pr.head_ref for pr in prs or [] if pr.state == "closed" or pr.merged}


def _remote_branches(git: Any) -> set[str]:
    try:
        output = git.run("branch", "-r", "--format=%(refname:short)")
    except Exception:
        return set()
    names = set()
    for name in str(output).strip().split("\n"):
        if name and not name.startswith("origin/HEAD"):
            names.add(name.removeprefix("origin/"))
    return names


def find_cleanable_branches(git: Any, github: Any) -> CleanableBranches | None:
    """List merged or closed-PR branches, leaving out the current and default ones.

    Returns None outside a repository.
    """
    if not git.is_repo():
        return None
    try:
        git.fetch_all()
    except Exception as exc:
        raise BranchError(f"failed to fetch remote updates: {exc}") from exc
    try:
        default = git.default_branch()
    except Exception:  # an undetectable default branch falls back to main
        default = "main"
    current = git.current_branch()
    branches = git.list_branches()
    merged = set(git.merged_branches(default))
    closed = _closed_pr_branches(github)
    remote = _remote_branches(git)

    result = CleanableBranches()
    for branch in branches:
        if not branch or branch in (default, current):
            continue
        if branch in merged or branch in closed:
            result.local_branches.append(branch)
            if branch in remote:
                result.remote_branches.append(branch)
    return result


def _delete_local(git: Any, branch: str) -> DeletionResult:
    try:
        git.delete_branch(branch)
    except Exception as exc:
        return DeletionResult(branch=branch, error=exc)
    return DeletionResult(branch=branch)


def delete_local_branches(git: Any, branches: list[str]) -> list[DeletionResult]:
    """Delete local branches concurrently; results follow the input order."""
    if not branches:
        return []
    with ThreadPoolExecutor(max_workers=len(branches)) as pool:
        return list(pool.map(lambda b: _delete_local(git, b), branches))


def delete_remote_branches(git: Any, branches: list[str]) -> list[DeletionResult]:
    """Delete branches on origin; a branch already gone counts as deleted."""
    results = []
    for branch in branches:
        error: Exception | None = None
        try:
            git.delete_remote_branch(branch)
        except Exception as exc:
            if "remote ref does not exist" not in str(exc):
                error = exc
        results.append(DeletionResult(branch=f"origin/{branch}", error=error))
    return results