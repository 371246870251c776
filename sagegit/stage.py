"""Choose which changed files to stage."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any


class StageError(Exception):
    """Raised when files cannot be staged."""


@dataclass(frozen=True)
class FileStatus:
    """A changed file and a one-word description of its change."""

    path: str
    status: str


@dataclass
class ChangeGroup:
    """A named group of related changes."""

    name: str
    description: str
    files: list[FileStatus] = field(default_factory=list)


_STATUS_SYMBOLS = {"Added": "+", "Modified": "~", "Deleted": "-", "Renamed": "→"}


def _status_lines(status: str):
    """Yield (index code, work tree code, path) for each porcelain line."""
    for line in status.rstrip().split("\n"):
        if len(line) < 3 or not line.strip():
            continue
        path = line[3:].strip()
        if " -> " in path:
            path = path.split(" -> ")[1]
        yield line[0], line[1], path


def _human_status(x: str, y: str) -> str:
    if "M" in (x, y):
        return "Modified"
    if y in ("A", "?") or x == "A":
        return "Added"
    if "D" in (x, y):
        return "Deleted"
    if "R" in (x, y):
        return "Renamed"
    return "Unknown"


def parse_unstaged_files(status: str) -> list[FileStatus]:
    """Return files from `git status --porcelain` output that are not fully staged."""
    files = []
    for x, y, path in _status_lines(status):
        if x in (" ", "?") or y in ("M", "A", "?", "D", "R"):
            files.append(FileStatus(path=path, status=_human_status(x, y)))
    return files


def parse_staged_files(status: str) -> list[str]:
    """Return the paths that have changes in the staging area."""
    return [path for x, _y, path in _status_lines(status) if x not in (" ", "?")]


def _class_char(pattern: str, i: int) -> tuple[str, int]:
    if i >= len(pattern) or pattern[i] in "-]":
        raise ValueError("syntax error in pattern")
    if pattern[i] == "\\":
        i += 1
        if i >= len(pattern):
            raise ValueError("syntax error in pattern")
    return pattern[i], i + 1


def _glob_regex(pattern: str) -> re.Pattern[str]:
    """Compile a shell pattern whose wildcards do not cross '/'."""
    out = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "\\":
            i += 1
            if i >= n:
                raise ValueError("syntax error in pattern")
            out.append(re.escape(pattern[i]))
        elif c == "[":
            i += 1
            negate = i < n and pattern[i] == "^"
            if negate:
                i += 1
            items: list[str] = []
            while True:
                if i >= n:
                    raise ValueError("syntax error in pattern")
                if pattern[i] == "]" and items:
                    break
                lo, i = _class_char(pattern, i)
                if i < n and pattern[i] == "-":
                    hi, i = _class_char(pattern, i + 1)
                    if hi < lo:
                        raise ValueError("syntax error in pattern")
                    items.append(f"{re.escape(lo)}-{re.escape(hi)}")
                else:
                    items.append(re.escape(lo))
            out.append("[" + ("^" if negate else "") + "".join(items) + "]")
        else:
            out.append(re.escape(c))
        i += 1
    return re.compile("".join(out), re.DOTALL)


def _ask_multi(message: str, options: list[str]) -> list[str]:
    print(message)
    for number, option in enumerate(options, 1):
        print(f"  {number}. {option}")
    try:
        answer = input("Enter numbers separated by commas, 'all', or nothing: ")
    except EOFError as exc:
        raise StageError("selection cancelled: no input") from exc
    answer = answer.strip().lower()
    if not answer:
        return []
    if answer == "all":
        return list(options)
    chosen: list[str] = []
    for token in answer.replace(",", " ").split():
        if not token.isdigit() or not 1 <= int(token) <= len(options):
            raise StageError(f"selection cancelled: invalid choice {token!r}")
        option = options[int(token) - 1]
        if option not in chosen:
            chosen.append(option)
    return chosen


def _add(git: Any, path: str) -> None:
    try:
        git.run_interactive("add", path)
    except Exception as exc:
        raise StageError(f"failed to stage {path}: {exc}") from exc


def stage_files(git: Any, patterns: list[str] | None) -> list[str]:
    """Stage files matching the patterns, or ask which ones to stage.

    Returns the paths that were staged.
    """
    try:
        status = git.status_porcelain()
    except Exception as exc:
        raise StageError(f"failed to get status: {exc}") from exc

    files = parse_unstaged_files(status)
    if not files:
        staged = parse_staged_files(status)
        if staged:
            print(f"! No unstaged files (you have {len(staged)} staged files ready to commit)")
            print("Use sage commit --only-staged to commit these staged changes")
        else:
            print("! No files to stage")
        return []

    if patterns:
        staged_paths = []
        for pattern in patterns:
            try:
                regex = _glob_regex(pattern)
            except ValueError as exc:
                raise StageError(f"invalid pattern {pattern!r}: {exc}") from exc
            for file in files:
                if regex.fullmatch(file.path):
                    _add(git, file.path)
                    staged_paths.append(file.path)
        if staged_paths:
            print(f"✓ Staged {len(staged_paths)} files matching patterns")
        else:
            print("! No files matched the provided patterns")
        return staged_paths

    options = [f"{file.path} ({file.status})" for file in files]
    selected = _ask_multi("Select files to stage:", options)
    if not selected:
        print("! No files selected to stage")
        return []
    staged_paths = []
    for choice in selected:
        path = choice.split(" (")[0].strip()
        _add(git, path)
        staged_paths.append(path)
    print(f"✓ Staged {len(staged_paths)} files")
    return staged_paths


def format_file_list(files: list[FileStatus]) -> str:
    """Render files as 'path (Status)' lines."""
    return "\n".join(f"{file.path} ({file.status})" for file in files)


def format_groups(groups: list[ChangeGroup]) -> str:
    """Render groups as 'name: description' lines."""
    return "\n".join(f"{group.name}: {group.description}" for group in groups)


def parse_groups(response: str) -> list[ChangeGroup]:
    """Parse 'name: description' lines into empty change groups."""
    groups = []
    for line in response.strip().split("\n"):
        name, sep, description = line.partition(":")
        if not sep:
            continue
        groups.append(ChangeGroup(name=name.strip(), description=description.strip()))
    return groups


def indent(text: str, prefix: str) -> str:
    """Prefix every non-empty line of text, dropping empty lines."""
    return "\n".join(prefix + line for line in text.split("\n") if line)