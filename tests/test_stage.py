from unittest import mock

import pytest

from sagegit.stage import (
    ChangeGroup,
    FileStatus,
    StageError,
    format_file_list,
    format_groups,
    indent,
    parse_groups,
    parse_staged_files,
    parse_unstaged_files,
    stage_files,
)


class FakeGit:
    def __init__(self, status, fail_add=False):
        self.status = status
        self.fail_add = fail_add
        self.added = []

    def status_porcelain(self):
        return self.status

    def run_interactive(self, *args):
        if self.fail_add:
            raise RuntimeError("boom")
        assert args[0] == "add"
        self.added.append(args[1])


STATUS = " M src/app.py\n?? notes.txt\nM  done.py\nR  old.py -> new.py\n D gone.py\n"


def test_parse_unstaged_files():
    files = parse_unstaged_files(STATUS)
    assert files == [
        FileStatus("src/app.py", "Modified"),
        FileStatus("notes.txt", "Added"),
        FileStatus("gone.py", "Deleted"),
    ]


def test_parse_staged_files_uses_new_rename_path():
    assert parse_staged_files(STATUS) == ["done.py", "new.py"]


def test_partially_staged_file_is_unstaged():
    files = parse_unstaged_files("MM both.py\n")
    assert files == [FileStatus("both.py", "Modified")]
    assert parse_staged_files("MM both.py\n") == ["both.py"]


def test_stage_files_with_patterns():
    git = FakeGit(STATUS)
    assert stage_files(git, ["*.py"]) == ["gone.py"]
    assert git.added == ["gone.py"]


def test_pattern_star_does_not_cross_separator():
    git = FakeGit(STATUS)
    assert stage_files(git, ["src/*"]) == ["src/app.py"]
    assert stage_files(FakeGit(STATUS), ["*app.py"]) == []


def test_pattern_character_class():
    git = FakeGit(" M a1.py\n M b1.py\n")
    assert stage_files(git, ["[a-a]?.py"]) == ["a1.py"]


def test_invalid_pattern_raises():
    with pytest.raises(StageError, match="invalid pattern"):
        stage_files(FakeGit(STATUS), ["[abc"])


def test_nothing_to_stage_returns_empty():
    git = FakeGit("M  done.py\n")
    assert stage_files(git, ["*"]) == []
    assert git.added == []


def test_add_failure_raises():
    with pytest.raises(StageError, match="failed to stage"):
        stage_files(FakeGit(STATUS, fail_add=True), ["notes.txt"])


def test_interactive_selection():
    git = FakeGit(STATUS)
    with mock.patch("builtins.input", return_value="1, 3"):
        staged = stage_files(git, [])
    assert staged == ["src/app.py", "gone.py"]
    assert git.added == staged


def test_interactive_blank_selection_stages_nothing():
    git = FakeGit(STATUS)
    with mock.patch("builtins.input", return_value=""):
        assert stage_files(git, None) == []
    assert git.added == []


def test_interactive_invalid_choice_raises():
    with mock.patch("builtins.input", return_value="9"):
        with pytest.raises(StageError):
            stage_files(FakeGit(STATUS), [])


def test_parse_groups_skips_lines_without_colon():
    groups = parse_groups("feature: Add new user authentication system\nnoise\ndocs: Update API documentation")
    assert [g.name for g in groups] == ["feature", "docs"]
    assert groups[1].description == "Update API documentation"
    assert all(g.files == [] for g in groups)


def test_groups_round_trip():
    groups = [ChangeGroup("auth", "Login flow"), ChangeGroup("ui", "Buttons")]
    assert parse_groups(format_groups(groups)) == groups


def test_format_file_list():
    files = [FileStatus("a.py", "Added"), FileStatus("b.py", "Deleted")]
    assert format_file_list(files).split("\n") == ["a.py (Added)", "b.py (Deleted)"]


def test_indent_drops_empty_lines():
    assert indent("one\n\ntwo\n", "> ") == "> one\n> two"