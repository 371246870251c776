"""Outcomes and errors of branch synchronisation, and abort/continue handling."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

_RESOLVE_STEPS = """To continue:
1. Run 'sage resolve' for interactive conflict resolution
2. Or resolve conflicts manually
3. Run 'sage sync --continue'

To start over: 'sage sync --abort'"""

_CONFLICT_MESSAGE = (
    "Merge conflicts detected. Please resolve conflicts and run 'sage sync --continue'"
)


@dataclass
class SyncOptions:
    """Settings for a sync run."""

    target_branch: str = ""
    no_push: bool = False
    dry_run: bool = False
    verbose: bool = False
    abort: bool = False
    continue_sync: bool = False


@dataclass
class SyncResult:
    """The outcome of a sync step or of an abort/continue request."""

    success: bool = False
    needs_action: bool = False
    action: str = ""
    message: str = ""
    conflicts: list[str] = field(default_factory=list)
    stashed_files: bool = False
    stash_ref: str = ""
    original_ref: str = ""
    start_time: datetime | None = None


class SyncError(Exception):
    """A sync failure carrying guidance on how to recover.

    ``kind`` is one of "conflict", "diverged", "stash", "rebase", "merge",
    or empty for a plain message.
    """

    def __init__(
        self, kind: str = "", message: str = "", conflicts: list[str] | None = None
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.conflicts = list(conflicts or [])

    def __str__(self) -> str:
        match self.kind:
            case "conflict":
                files = "\n".join(self.conflicts)
                return (
                    f"Conflicts found in these files:\n{files}\n\n"
                    "To resolve:\n"
                    "1. Run 'sage resolve' for interactive conflict resolution\n"
                    "2. Or resolve conflicts manually\n"
                    "3. Run 'sage sync --continue'\n\n"
                    "To start over: 'sage sync --abort'"
                )
            case "diverged":
                return (
                    "Remote branch has new changes.\n\n"
                    f"{self.message}\n\n"
                    "To update:\n"
                    "1. Use 'sage sync --force' (recommended)\n"
                    "2. Or merge manually and run 'sage sync'"
                )
            case "stash":
                return (
                    f"{self.message}\n\n"
                    "Your changes are safely stashed.\n"
                    "Run 'git stash pop' to restore them."
                )
            case "rebase" | "merge":
                return f"Unable to automatically update your branch.\n\n{_RESOLVE_STEPS}"
            case _:
                return self.message


def _probe(check: Callable[[], bool]) -> bool:
    try:
        return bool(check())
    except Exception:
        return False


def _conflicted_files(git: Any) -> list[str]:
    try:
        output = git.list_conflicted_files()
    except Exception:
        output = ""
    return output.split("\n")


def handle_abort(git: Any) -> SyncResult:
    """Abort a merge or rebase in progress."""
    if _probe(git.is_merging):
        try:
            git.merge_abort()
        except Exception as exc:
            return SyncResult(success=False, message=f"Failed to abort merge: {exc}")
        return SyncResult(success=True, message="Successfully aborted merge")
    if _probe(git.is_rebasing):
        try:
            git.rebase_abort()
        except Exception as exc:
            return SyncResult(success=False, message=f"Failed to abort rebase: {exc}")
        return SyncResult(success=True, message="Successfully aborted rebase")
    return SyncResult(success=False, message="No merge or rebase in progress to abort")


def handle_continue(git: Any) -> SyncResult:
    """Continue a merge or rebase in progress, reporting remaining conflicts."""
    if _probe(git.is_merging):
        try:
            git.merge_continue()
        except Exception:
            return SyncResult(
                success=False,
                needs_action=True,
                action="resolve_conflicts",
                message="Merge conflicts need to be resolved",
                conflicts=_conflicted_files(git),
            )
        return SyncResult(success=True, message="Successfully continued merge")
    if _probe(git.is_rebasing):
        try:
            git.rebase_continue()
        except Exception:
            return SyncResult(
                success=False,
                needs_action=True,
                action="resolve_conflicts",
                message="Rebase conflicts need to be resolved",
                conflicts=_conflicted_files(git),
            )
        return SyncResult(success=True, message="Successfully continued rebase")
    return SyncResult(success=False, message="No merge or rebase in progress to continue")


def handle_sync_flags(git: Any, abort: bool, cont: bool) -> SyncResult:
    """Act on --abort or --continue; a plain success when neither is set."""
    if abort:
        return handle_abort(git)
    if cont:
        return handle_continue(git)
    return SyncResult(success=True)


def handle_sync_result(result: SyncResult) -> None:
    """Raise for a failed result, otherwise report its message."""
    if not result.success:
        if result.needs_action and result.action == "resolve_conflicts":
            raise SyncError(
                kind="conflict",
                message="Merge conflicts need to be resolved",
                conflicts=result.conflicts,
            )
        raise SyncError(message=result.message)
    print(result.message)


def handle_sync_error(git: Any, err: Exception) -> Exception:
    """Turn a raw sync failure into a SyncError with guidance where one applies."""
    text = str(err)
    if "conflict" in text:
        return SyncError(
            kind="conflict", message=_CONFLICT_MESSAGE, conflicts=_conflicted_files(git)
        )
    if "failed to rebase" in text or "failed to merge" in text:
        return SyncError(kind="conflict", message=_CONFLICT_MESSAGE)
    return err