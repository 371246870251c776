"""Commit history of a branch."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


class HistoryError(Exception):
    """Raised when history cannot be read."""


@dataclass
class CommitStats:
    """Line and file counts for one commit."""

    added: int = 0
    deleted: int = 0
    modified: int = 0
    files: dict[str, int] = field(default_factory=dict)


@dataclass
class CommitInfo:
    """One commit from the log."""

    hash: str
    short_hash: str
    author_name: str
    date: datetime
    message: str
    stats: CommitStats = field(default_factory=CommitStats)


@dataclass
class HistoryResult:
    """The commits of a branch."""

    branch_name: str
    commits: list[CommitInfo] = field(default_factory=list)


def _to_int(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        return 0


def _commit_from_line(line: str) -> CommitInfo | None:
    parts = line.split("\x00")
    if len(parts) < 4:
        return None
    timestamp = _to_int(parts[2])
    date = datetime.fromtimestamp(timestamp, tz=timezone.utc).astimezone()
    return CommitInfo(
        hash=parts[0],
        short_hash=parts[0][:7],
        author_name=parts[1],
        date=date,
        message=parts[3],
    )


def parse_git_log(log: str, stats: bool) -> list[CommitInfo]:
    """Parse NUL-separated log records, with numstat lines when stats is set."""
    commits: list[CommitInfo] = []
    current: CommitInfo | None = None
    lines = log.strip().split("\n")
    pos = 0
    while pos < len(lines):
        line = lines[pos]
        if "\x00" in line:
            if current is not None:
                commits.append(current)
                current = None
            current = _commit_from_line(line)
            if current is not None and stats and pos + 3 < len(lines):
                # The line right after the header is a separator.
                pos += 1
                while pos + 1 < len(lines):
                    stat_line = lines[pos + 1]
                    if stat_line == "" or "\x00" in stat_line:
                        break
                    fields = stat_line.split()
                    if len(fields) >= 3:
                        added, deleted = _to_int(fields[0]), _to_int(fields[1])
                        current.stats.added += added
                        current.stats.deleted += deleted
                        current.stats.modified += 1
                        current.stats.files[fields[2]] = added + deleted
                    pos += 1
        pos += 1
    if current is not None:
        commits.append(current)
    return commits


def get_history(
    git: Any, branch: str, limit: int, show_stats: bool, show_all: bool
) -> HistoryResult:
    """Return the commits of a branch, the current one when branch is empty."""
    try:
        repo = git.is_repo()
    except Exception as exc:
        raise HistoryError("not a git repository") from exc
    if not repo:
        raise HistoryError("not a git repository")
    if not branch:
        branch = git.current_branch()
    log = git.log(branch, limit, show_stats, show_all)
    return HistoryResult(branch_name=branch, commits=parse_git_log(log, show_stats))