"""Repository statistics: active files, contributors and branches."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from sagegit.history import parse_git_log

_RANGE_SHIFTS = {
    "day": (0, 0, -1),
    "week": (0, 0, -7),
    "month": (0, -1, 0),
    "year": (-1, 0, 0),
}


class StatsError(Exception):
    """Raised when statistics cannot be gathered."""


@dataclass
class StatsOptions:
    """Settings for a statistics report."""

    time_range: str = ""
    limit: int = 10
    detailed: bool = False


@dataclass
class FileStats:
    """Changes made to one file."""

    path: str
    changes: int = 0
    last_modified: datetime | None = None
    authors: dict[str, int] = field(default_factory=dict)


@dataclass
class AuthorStats:
    """Contributions of one author."""

    name: str
    commits: int = 0
    additions: int = 0
    deletions: int = 0
    files_changed: dict[str, int] = field(default_factory=dict)


@dataclass
class BranchStats:
    """Activity on one branch."""

    name: str
    last_commit: datetime | None = None
    commit_count: int = 0
    merge_conflicts: int = 0


@dataclass
class RepoStats:
    """Statistics of a repository keyed by file path, author and branch."""

    files: dict[str, FileStats] = field(default_factory=dict)
    authors: dict[str, AuthorStats] = field(default_factory=dict)
    branches: dict[str, BranchStats] = field(default_factory=dict)


def _add_date(moment: datetime, years: int, months: int, days: int) -> datetime:
    """Shift a date by calendar units, letting an overflowing day roll forward."""
    month_index = moment.month - 1 + months
    year = moment.year + years + month_index // 12
    month = month_index % 12 + 1
    first = moment.replace(year=year, month=month, day=1)
    return first + timedelta(days=moment.day - 1 + days)


def since_for_range(time_range: str, now: datetime | None = None) -> datetime | None:
    """Return the start of a 'day', 'week', 'month' or 'year' range; None otherwise."""
    shift = _RANGE_SHIFTS.get(time_range)
    if shift is None:
        return None
    if now is None:
        now = datetime.now().astimezone()
    return _add_date(now, *shift)


def _require_repo(git: Any) -> None:
    try:
        repo = git.is_repo()
    except Exception as exc:
        raise StatsError("not a git repository") from exc
    if not repo:
        raise StatsError("not a git repository")


def _collect_branches(git: Any, stats: RepoStats) -> None:
    try:
        branches = git.list_branches()
    except Exception as exc:
        raise StatsError(f"failed to list branches: {exc}") from exc
    for branch in branches:
        try:
            last_commit = git.get_branch_last_commit(branch)
            commit_count = git.get_branch_commit_count(branch)
        except Exception:
            continue
        try:
            conflicts = git.get_branch_merge_conflicts(branch)
        except Exception:
            conflicts = 0
        stats.branches[branch] = BranchStats(
            name=branch,
            last_commit=last_commit,
            commit_count=commit_count,
            merge_conflicts=conflicts,
        )


def collect_stats(git: Any, opts: StatsOptions) -> RepoStats:
    """Gather file, author and branch statistics within the chosen time range."""
    _require_repo(git)
    since = since_for_range(opts.time_range)
    stats = RepoStats()
    _collect_branches(git, stats)

    try:
        log = git.log("", 0, True, True)
    except Exception as exc:
        raise StatsError(f"failed to get git log: {exc}") from exc

    for commit in parse_git_log(log, True):
        if since is not None and commit.date < since:
            continue
        name = commit.author_name
        author = stats.authors.setdefault(name, AuthorStats(name=name))
        author.commits += 1
        author.additions += commit.stats.added
        author.deletions += commit.stats.deleted
        for path, changes in commit.stats.files.items():
            file_stats = stats.files.setdefault(path, FileStats(path=path))
            file_stats.changes += changes
            file_stats.last_modified = commit.date
            file_stats.authors[name] = file_stats.authors.get(name, 0) + 1
            author.files_changed[path] = author.files_changed.get(path, 0) + 1
    return stats


def _day(moment: datetime | None) -> str:
    return moment.strftime("%Y-%m-%d") if moment else "0001-01-01"


def _average(total: int, count: int) -> str:
    return f"{total / count:.2f}" if count else "NaN"


def _top(items, key, limit: int) -> list:
    return sorted(items, key=key, reverse=True)[: max(limit, 0)]


def _file_section(stats: RepoStats, limit: int) -> list[str]:
    lines = ["📁 Most Active Files:", ""]
    for fs in _top(stats.files.values(), lambda f: f.changes, limit):
        lines += [
            f"  • {fs.path}",
            f"    Changes: {fs.changes}, Last Modified: {_day(fs.last_modified)}",
            f"    Contributors: {len(fs.authors)}",
        ]
    return lines + [""]


def _author_section(stats: RepoStats, limit: int) -> list[str]:
    lines = ["👥 Top Contributors:", ""]
    for author in _top(stats.authors.values(), lambda a: a.commits, limit):
        lines += [
            f"  • {author.name}",
            f"    Commits: {author.commits}, Files Changed: {len(author.files_changed)}",
            f"    Added: {author.additions}, Deleted: {author.deletions}",
        ]
    return lines + [""]


def _branch_section(stats: RepoStats, limit: int) -> list[str]:
    lines = ["🌿 Branch Activity:", ""]
    for branch in _top(stats.branches.values(), lambda b: b.commit_count, limit):
        lines += [
            f"  • {branch.name}",
            f"    Commits: {branch.commit_count}, Last Activity: {_day(branch.last_commit)}",
        ]
        if branch.merge_conflicts > 0:
            lines.append(f"    Merge Conflicts: {branch.merge_conflicts}")
    return lines + [""]


def _metrics_section(stats: RepoStats) -> list[str]:
    total_changes = sum(f.changes for f in stats.files.values())
    total_commits = sum(a.commits for a in stats.authors.values())
    return [
        "📈 Additional Metrics:",
        "",
        "  • Repository Health:",
        f"    Total Files: {len(stats.files)}",
        f"    Total Contributors: {len(stats.authors)}",
        f"    Average Changes per File: {_average(total_changes, len(stats.files))}",
        f"    Average Commits per Author: {_average(total_commits, len(stats.authors))}",
        "",
    ]


def format_stats(stats: RepoStats, limit: int, detailed: bool) -> str:
    """Render statistics as a text report showing at most `limit` entries per list."""
    lines = ["", "📊 Repository Statistics", ""]
    lines += _file_section(stats, limit)
    lines += _author_section(stats, limit)
    if detailed:
        lines += _branch_section(stats, limit)
        lines += _metrics_section(stats)
    return "\n".join(lines) + "\n"


def get_stats(git: Any, opts: StatsOptions) -> RepoStats:
    """Gather statistics, print the report and return the statistics."""
    stats = collect_stats(git, opts)
    print(format_stats(stats, opts.limit, opts.detailed), end="")
    return stats