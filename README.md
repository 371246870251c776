# sagegit

`sagegit` is a library of Git workflow helpers. It covers everyday
repository work: keeping a feature branch in step with its parent, staging
changes, reading status and history, gathering repository statistics,
cleaning up merged branches and opening conflicted files in an editor.

It needs Python 3.11 or later and has no third-party runtime dependencies.

## What is in the package

| Module | Purpose |
| --- | --- |
| `sagegit.status` | Parses `git status --porcelain` output into readable file changes |
| `sagegit.history` | Parses `git log` output into commits with optional per-file stats |
| `sagegit.stats` | Most active files, top contributors and branch activity |
| `sagegit.branches` | Start, switch, push and squash branches |
| `sagegit.sync` / `sagegit.sync_result` | Fetch, pull, rebase or merge onto the parent branch, with abort/continue handling |
| `sagegit.clean` | Finds and deletes branches that are merged or whose pull request is closed |
| `sagegit.stage` | Pattern-based and interactive staging |
| `sagegit.conflict` | Lists conflicted files and opens them in an editor |
| `sagegit.github_models` | Data types for pull requests, reviews, checks and comment threads |

## The Git service object

The application functions do not run Git themselves. They take a Git
service object as their first argument and call methods on it, such as
`is_repo()`, `current_branch()`, `default_branch()`, `list_branches()`,
`status_porcelain()`, `log(branch, limit, show_stats, show_all)`,
`fetch_all()`, `pull()`, `checkout(branch)`, `push(branch, force)`,
`run(*args)` and `run_interactive(*args)`. Any object that provides the
methods a function uses will do, which also makes them easy to drive with a
test double.

Failures are raised as the module's own error class: `BranchError`,
`HistoryError`, `StatsError`, `StageError`, `ConflictError` or `SyncError`.

## Status and history

```python
from sagegit import status, history

for change in status.parse_porcelain(" M README.md\n?? notes.txt\n"):
    print(change.symbol, change.file, change.description)

status.interpret_status("M", " ")   # -> ("M", "Staged Modified")

result = history.get_history(git, "", 20, True, False)   # current branch
for commit in result.commits:
    print(commit.short_hash, commit.author_name, commit.message, commit.stats.added)
```

`status.get_repo_status(git)` returns a `RepoStatus` with the branch and its
changes, or `None` outside a repository. `history.parse_git_log(log, stats)`
reads records whose fields are separated by NUL characters (hash, author,
Unix timestamp, subject), followed by numstat lines when `stats` is true.

## Statistics

```python
from sagegit.stats import StatsOptions, collect_stats, format_stats, get_stats

stats = collect_stats(git, StatsOptions(time_range="month", limit=5))
print(format_stats(stats, 5, detailed=True))

get_stats(git, StatsOptions(time_range="week", detailed=True))   # prints the report
```

`time_range` may be `"day"`, `"week"`, `"month"` or `"year"`; anything else
means all history.

## Branches

```python
from sagegit import branches

branches.start_branch(git, "feature/login", push=True)
branches.switch_branch(git, "main")
branches.push_current_branch(git, force=False)
branches.squash_commits(git, "abc1234", all_commits=False)
```

`start_branch` fetches, checks out and pulls the default branch (falling back
to `main`), then creates and checks out the new branch. Squashing every
commit is refused on the head branch.

## Syncing

`sync_branch` stashes uncommitted work, fetches and pulls, integrates the
parent branch (rebase for a small divergence, a merging pull when the branch
is more than ten commits away, or whatever `sage.merge.strategy` in Git
config says), pushes with lease when the branch is behind its remote, and
restores the stash. It returns a `SyncProgress` recording each step.

```python
from sagegit.sync import sync_branch
from sagegit.sync_result import SyncOptions, SyncError

try:
    progress = sync_branch(git, SyncOptions(target_branch="main", verbose=True))
    print(progress.summary())
except SyncError as exc:
    print(exc)   # includes guidance for conflicts or a failed stash restore

sync_branch(git, SyncOptions(abort=True))           # abandon a merge or rebase
sync_branch(git, SyncOptions(continue_sync=True))   # continue after resolving
```

## Cleaning up branches

```python
from sagegit import clean

found = clean.find_cleanable_branches(git, github_client)
for result in clean.delete_local_branches(git, found.local_branches):
    print(result.branch, result.error)
clean.delete_remote_branches(git, found.remote_branches)
```

A branch counts as cleanable when Git reports it merged into the default
branch, or when a pull request for it is closed or merged. The second
argument needs a `list_prs(state)` method returning objects like
`github_models.PullRequest`; if it fails, only Git's merge information is
used. The current and default branches are never listed. Remote branches
that are already gone count as deleted.

## Staging and conflicts

```python
from sagegit import stage, conflict

stage.stage_files(git, ["*.py"])   # stage unstaged files matching the patterns
stage.stage_files(git, None)       # pick files from a numbered list

conflict.resolve_conflicts(git, conflict.ConflictOptions(editor="vim"))
```

Patterns follow shell rules, with `*` and `?` not crossing `/`. The
interactive prompts read from standard input: numbers separated by commas,
`all`, or nothing. The editor for conflicts is the one given, then
`$EDITOR`, then a common editor found on the platform.

## What the package does not do

- It ships no command-line program; everything is called from Python.
- It does not include a concrete Git service; you supply the object that
  runs Git.
- It has no settings storage of its own; preferences are read only from Git
  config (`sage.merge.strategy`).
- It has no GitHub client. `sagegit.github_models` provides the data types
  (`PullRequest.from_dict`, `PullRequest.update_payload`, `Review`, `Check`,
  `UnresolvedThread`, `TokenSource`), but creating, listing or merging pull
  requests is left to whatever client you pass in.

## Running the tests

Install the package with its `test` extra and run pytest from the project
directory.