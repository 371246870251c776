"""Working tree status of a repository."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class FileChange:
    """One changed file with a status symbol and a readable description."""

    symbol: str
    file: str
    description: str


@dataclass
class RepoStatus:
    """The current branch and its changed files."""

    branch: str
    changes: list[FileChange] = field(default_factory=list)


def interpret_status(index_status: str, work_tree_status: str) -> tuple[str, str]:
    """Describe a porcelain v1 status pair as (symbol, description)."""
    if index_status == "?" and work_tree_status == "?":
        return "?", "Untracked"
    match index_status:
        case "M":
            if work_tree_status == "M":
                return "M", "Staged+Unstaged Modified"
            return "M", "Staged Modified"
        case "A":
            if work_tree_status == "M":
                return "M", "Staged Added, with modifications"
            if work_tree_status == "D":
                return "D", "Staged Added, but deleted"
            return "A", "Staged Added"
        case "D":
            if work_tree_status == "M":
                return "M", "Staged Deleted, but modified"
            return "D", "Staged Deleted"
        case "R":
            if work_tree_status == "M":
                return "R", "Staged Renamed, with modifications"
            return "R", "Staged Renamed"
        case "C":
            if work_tree_status == "M":
                return "C", "Staged Copied, with modifications"
            return "C", "Staged Copied"
        case " ":
            unstaged = {
                "M": ("M", "Unstaged Modified"),
                "D": ("D", "Unstaged Deleted"),
                "A": ("A", "Unstaged Added"),
            }
            if work_tree_status in unstaged:
                return unstaged[work_tree_status]
    return " ", f"Unknown Status: index=[{index_status}] worktree=[{work_tree_status}]"


def status_description(status: str) -> str:
    """Return a one-word description of a single status letter."""
    return {
        "M": "Modified",
        "A": "Added",
        "D": "Deleted",
        "R": "Renamed",
    }.get(status, "Unknown")


def parse_porcelain(porcelain: str) -> list[FileChange]:
    """Parse `git status --porcelain` output into file changes."""
    if not porcelain:
        return []
    changes = []
    for line in porcelain.rstrip("\n").split("\n"):
        if len(line) < 4:
            continue
        index_status, work_tree_status = line[0], line[1]
        path = line[2:].lstrip(" ")
        if not path:
            continue
        if " -> " in path:
            parts = path.split(" -> ")
            if len(parts) == 2:
                path = parts[1]
        symbol, desc = interpret_status(index_status, work_tree_status)
        changes.append(FileChange(symbol=symbol, file=path, description=desc))
    return changes


def get_repo_status(git: Any) -> RepoStatus | None:
    """Return the branch and changes of the repository; None outside a repository."""
    if not git.is_repo():
        return None
    branch = git.current_branch()
    porcelain = git.status_porcelain()
    return RepoStatus(branch=branch, changes=parse_porcelain(porcelain))