"""Help resolve merge conflicts by opening conflicted files in an editor."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from dataclasses import dataclass
from typing import Any

_TEXTEDIT = "open -a TextEdit"

_EDITOR_CANDIDATES = {
    "darwin": ("code", "subl", "atom", "vim", "nano"),
    "linux": ("code", "subl", "gedit", "vim", "nano"),
    "windows": ("code", "notepad++"),
}

_FALLBACKS = {"darwin": _TEXTEDIT, "windows": "notepad"}


class ConflictError(Exception):
    """Raised when conflicts cannot be listed or an editor cannot be run."""


@dataclass
class ConflictOptions:
    """Settings for conflict resolution."""

    auto_resolve: bool = False
    editor: str = ""


def _platform() -> str:
    if sys.platform == "darwin":
        return "darwin"
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform in ("win32", "cygwin"):
        return "windows"
    return sys.platform


def find_editor(custom_editor: str) -> str:
    """Choose an editor: the given one, $EDITOR, or a common one for this platform."""
    if custom_editor:
        return custom_editor
    env_editor = os.environ.get("EDITOR", "")
    if env_editor:
        return env_editor
    platform = _platform()
    for candidate in _EDITOR_CANDIDATES.get(platform, ()):
        if shutil.which(candidate):
            return candidate
    return _FALLBACKS.get(platform, "")


def open_in_editor(editor: str, path: str) -> None:
    """Open a file in the editor and wait for it to exit."""
    command = ["open", "-a", "TextEdit", path] if editor == _TEXTEDIT else [editor, path]
    try:
        proc = subprocess.run(command, check=False)
    except OSError as exc:
        raise ConflictError(str(exc)) from exc
    if proc.returncode != 0:
        raise ConflictError(f"exit status {proc.returncode}")


def _ask_files(options: list[str]) -> list[str]:
    print("Select files to edit:")
    for number, option in enumerate(options, 1):
        print(f"  {number}. {option}")
    try:
        answer = input("Enter numbers separated by commas, 'all', or nothing: ")
    except EOFError:
        return []
    answer = answer.strip().lower()
    if not answer:
        return []
    if answer == "all":
        return list(options)
    chosen: list[str] = []
    for token in answer.replace(",", " ").split():
        if not token.isdigit() or not 1 <= int(token) <= len(options):
            raise ConflictError(f"invalid choice {token!r}")
        option = options[int(token) - 1]
        if option not in chosen:
            chosen.append(option)
    return chosen


def resolve_conflicts(git: Any, opts: ConflictOptions) -> list[str]:
    """List conflicted files and open the chosen ones in an editor.

    Returns the files that were chosen for editing.
    """
    try:
        output = git.list_conflicted_files()
    except Exception as exc:
        raise ConflictError(f"failed to list conflicts: {exc}") from exc

    conflicts = [name for name in str(output).strip().split("\n") if name]
    if not conflicts:
        raise ConflictError("no conflicts detected")

    print(f"Found {len(conflicts)} files with conflicts")
    for number, name in enumerate(conflicts, 1):
        print(f"{number}. {name}")
    print()

    selected = _ask_files(conflicts)
    if not selected:
        print("No files selected. You'll need to resolve conflicts manually.")
        return []

    editor = find_editor(opts.editor)
    if not editor:
        print("No editor configured. Please resolve conflicts manually.")
        return selected

    for path in selected:
        try:
            open_in_editor(editor, path)
        except ConflictError as exc:
            print(f"Failed to open {path}: {exc}")

    print("\nAfter resolving conflicts:")
    print("1. Save and close the files")
    print("2. Use 'git add' to mark conflicts as resolved")
    print("3. Run 'sage sync --continue' to complete the operation")
    return selected