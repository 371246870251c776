import pytest

from sagegit.sync import (
    SyncProgress,
    get_branch_info,
    integrate_changes,
    is_behind_remote,
    preferred_merge_strategy,
    rebase_branch,
    sync_branch,
    verify_repo_state,
)
from sagegit.sync_result import SyncError, SyncOptions


class FakeGit:
    def __init__(
        self,
        *,
        repo=True,
        branch="feature",
        default="main",
        branches=("main", "feature"),
        clean=True,
        head="abc",
        merge_base="abc",
        remote_base=None,
        divergence=0,
        strategy="",
        merging=False,
        rebasing=False,
        conflicts="",
        fail=(),
    ):
        self.repo = repo
        self.branch = branch
        self.default = default
        self.branches = list(branches)
        self.clean = clean
        self.head = head
        self.base = merge_base
        self.remote_base = head if remote_base is None else remote_base
        self.divergence = divergence
        self.strategy = strategy
        self.merging = merging
        self.rebasing = rebasing
        self.conflicts = conflicts
        self.fail = set(fail)
        self.calls = []

    def _record(self, name, *args):
        self.calls.append((name, *args))
        if name in self.fail:
            raise RuntimeError(f"{name} failed")

    def names(self):
        return [c[0] for c in self.calls]

    def is_repo(self):
        self._record("is_repo")
        return self.repo

    def current_branch(self):
        self._record("current_branch")
        return self.branch

    def default_branch(self):
        self._record("default_branch")
        return self.default

    def list_branches(self):
        self._record("list_branches")
        return self.branches

    def is_clean(self):
        self._record("is_clean")
        return self.clean

    def stash(self, message):
        self._record("stash", message)

    def stash_pop(self):
        self._record("stash_pop")

    def fetch_all(self):
        self._record("fetch_all")

    def pull(self):
        self._record("pull")

    def get_commit_hash(self, ref):
        self._record("get_commit_hash", ref)
        return self.head

    def get_merge_base(self, a, b):
        self._record("get_merge_base", a, b)
        if b.startswith("origin/"):
            return self.remote_base
        return self.base

    def get_branch_divergence(self, a, b):
        self._record("get_branch_divergence", a, b)
        return self.divergence

    def merge(self, branch):
        self._record("merge", branch)

    def pull_merge(self):
        self._record("pull_merge")

    def checkout(self, branch):
        self._record("checkout", branch)

    def run(self, *args):
        self._record("run", *args)
        return self.strategy

    def run_interactive(self, *args):
        self._record("run_interactive", *args)

    def push_with_lease(self, branch):
        self._record("push_with_lease", branch)

    def is_merging(self):
        return self.merging

    def is_rebasing(self):
        return self.rebasing

    def merge_abort(self):
        self._record("merge_abort")

    def rebase_abort(self):
        self._record("rebase_abort")

    def merge_continue(self):
        self._record("merge_continue")

    def rebase_continue(self):
        self._record("rebase_continue")

    def list_conflicted_files(self):
        return self.conflicts


def test_progress_tracks_distinct_states():
    progress = SyncProgress()
    progress.skip_step("stash")
    progress.start_step("fetch")
    progress.complete_step("fetch", True)
    progress.complete_step("push", False)
    assert list(progress.steps) == ["stash", "fetch", "push"]
    assert len(set(progress.steps.values())) == 3
    summary = progress.summary()
    assert all(name in summary for name in ("stash", "fetch", "push"))


def test_verify_repo_state_outside_repo():
    with pytest.raises(SyncError, match="not a git repository"):
        verify_repo_state(FakeGit(repo=False))


def test_verify_repo_state_detached_head():
    with pytest.raises(SyncError, match="detached HEAD"):
        verify_repo_state(FakeGit(branch="HEAD"))


def test_get_branch_info_uses_default_branch():
    assert get_branch_info(FakeGit(), "") == ("feature", "main")


def test_get_branch_info_missing_target():
    with pytest.raises(SyncError, match="target branch 'develop' does not exist"):
        get_branch_info(FakeGit(), "develop")


@pytest.mark.parametrize(
    "configured, expected",
    [("merge\n", "merge"), ("rebase", "rebase"), ("squash", "")],
)
def test_preferred_merge_strategy(configured, expected):
    assert preferred_merge_strategy(FakeGit(strategy=configured)) == expected


def test_preferred_merge_strategy_when_config_fails():
    assert preferred_merge_strategy(FakeGit(strategy="merge", fail={"run"})) == ""


def test_rebase_branch_runs_rebase_onto_parent():
    git = FakeGit()
    rebase_branch(git, "main")
    assert ("checkout", "feature") in git.calls
    assert ("run_interactive", "rebase", "--onto", "main", "main", "feature") in git.calls


def test_rebase_branch_failure_is_reported():
    git = FakeGit(fail={"run_interactive"})
    with pytest.raises(SyncError, match="failed to rebase onto main"):
        rebase_branch(git, "main")


def test_is_behind_remote():
    assert is_behind_remote(FakeGit(head="abc", remote_base="old"), "feature") is True
    assert is_behind_remote(FakeGit(head="abc", remote_base="abc"), "feature") is False


def test_integrate_changes_fast_forwards_when_not_diverged():
    git = FakeGit(head="abc", merge_base="abc")
    integrate_changes(git, "main", SyncOptions())
    assert ("merge", "main") in git.calls
    assert "run_interactive" not in git.names()


def test_integrate_changes_merges_when_far_diverged():
    git = FakeGit(head="abc", merge_base="old", divergence=20)
    integrate_changes(git, "main", SyncOptions())
    assert "pull_merge" in git.names()
    assert "run_interactive" not in git.names()


def test_integrate_changes_rebases_when_slightly_diverged():
    git = FakeGit(head="abc", merge_base="old", divergence=3)
    integrate_changes(git, "main", SyncOptions())
    assert ("run_interactive", "rebase", "--onto", "main", "main", "feature") in git.calls
    assert "pull_merge" not in git.names()


def test_integrate_changes_honours_configured_merge():
    git = FakeGit(head="abc", merge_base="old", divergence=20, strategy="merge")
    integrate_changes(git, "main", SyncOptions())
    assert ("merge", "main") in git.calls
    assert "pull_merge" not in git.names()


def test_sync_clean_and_up_to_date():
    git = FakeGit()
    progress = sync_branch(git, SyncOptions())
    assert list(progress.steps) == [
        "verify", "stash", "fetch", "pull", "integrate", "push", "restore",
    ]
    assert "stash" not in git.names()
    assert "push_with_lease" not in git.names()
    assert progress.steps["stash"] == progress.steps["push"] == progress.steps["restore"]


def test_sync_stashes_and_restores_dirty_tree():
    git = FakeGit(clean=False)
    progress = sync_branch(git, SyncOptions())
    stashes = [c for c in git.calls if c[0] == "stash"]
    assert len(stashes) == 1
    assert stashes[0][1].startswith("sage-sync-")
    assert git.names()[-1] == "stash_pop"
    assert progress.steps["stash"] == progress.steps["restore"] == progress.steps["fetch"]


def test_sync_fetch_failure_restores_stash():
    git = FakeGit(clean=False, fail={"fetch_all"})
    with pytest.raises(SyncError, match="Failed to fetch updates"):
        sync_branch(git, SyncOptions())
    assert "stash_pop" in git.names()
    assert "pull" not in git.names()


def test_sync_pushes_when_behind_remote():
    git = FakeGit(remote_base="old")
    sync_branch(git, SyncOptions())
    assert ("push_with_lease", "feature") in git.calls


def test_sync_no_push_option():
    git = FakeGit(remote_base="old")
    sync_branch(git, SyncOptions(no_push=True))
    assert "push_with_lease" not in git.names()


def test_sync_does_not_push_default_branch():
    git = FakeGit(branch="main", remote_base="old")
    sync_branch(git, SyncOptions())
    assert "push_with_lease" not in git.names()


def test_sync_restore_failure():
    git = FakeGit(clean=False, fail={"stash_pop"})
    with pytest.raises(SyncError) as info:
        sync_branch(git, SyncOptions())
    assert info.value.kind == "stash"
    assert "Failed to restore your changes" in str(info.value)


def test_sync_outside_repository():
    with pytest.raises(SyncError, match="Not a Git repository"):
        sync_branch(FakeGit(repo=False), SyncOptions())


def test_sync_continue_with_conflicts():
    git = FakeGit(merging=True, conflicts="a.txt\nb.txt", fail={"merge_continue"})
    with pytest.raises(SyncError) as info:
        sync_branch(git, SyncOptions(continue_sync=True))
    assert info.value.kind == "conflict"
    assert info.value.conflicts == ["a.txt", "b.txt"]
    assert "fetch_all" not in git.names()