"""Tests for the git-sync-creation-date command."""

from datetime import datetime, timezone

import pytest
from click.testing import CliRunner

from creation_date_sync.cli import main as cli_main
from creation_date_sync.cli.main import main
from creation_date_sync.core.file_times import NullCreationTimeSetter
from creation_date_sync.errors import CreationTimeNotSupportedError

from .conftest import D1, D2, D3, encode_name_table, pack_tree


@pytest.fixture
def project(git_project):
    git_project.commit("C1", D1, add=["a.txt", "docs/guide.md"])
    git_project.commit("C2", D2, rename={"a.txt": "b.txt"})
    git_project.commit("C3", D3, add=["c.txt"])
    return git_project


@pytest.fixture
def recording_setter(monkeypatch):
    setter = NullCreationTimeSetter()
    monkeypatch.setattr(cli_main, "get_creation_time_setter", lambda: setter)
    return setter


def applied(setter, root):
    root = root.resolve()
    return {
        path.resolve().relative_to(root).as_posix(): when for path, when in setter.calls
    }


def test_sync_applies_history_dates(project, recording_setter):
    runner = CliRunner()
    result = runner.invoke(main, ["--repo", str(project.root)])

    assert result.exit_code == 0, result.output
    assert "Current HEAD:" in result.output
    assert "Collected 4 new records" in result.output
    assert "Processed: 3" in result.output
    assert applied(recording_setter, project.root) == {
        "b.txt": D1,
        "docs/guide.md": D1,
        "c.txt": D3,
    }


def test_initial_commit_override(project, recording_setter):
    runner = CliRunner()
    result = runner.invoke(
        main, ["--repo", str(project.root), "--creation-time", "1994-02-13T17:14:00+00:00"]
    )

    assert result.exit_code == 0, result.output
    override = datetime(1994, 2, 13, 17, 14, tzinfo=timezone.utc)
    dates = applied(recording_setter, project.root)
    assert dates["b.txt"] == override
    assert dates["c.txt"] == D3


def test_text_stamp_file_takes_precedence(project, recording_setter, tmp_path):
    stamp_file = tmp_path / "stamps.txt"
    stamp_file.write_text(
        "Legacy\\Project\\docs\\guide.md:2003-03-03T00:00:00+00:00\n"
        "Legacy\\Other\\thing.txt:2003-03-03T00:00:00+00:00\n"
    )
    runner = CliRunner()
    result = runner.invoke(
        main,
        [
            "--repo",
            str(project.root),
            "--creation-time-file",
            str(stamp_file),
            "--creation-time-file-root",
            "Legacy/Project",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Imported 1 records" in result.output
    dates = applied(recording_setter, project.root)
    assert dates["docs/guide.md"] == datetime(2003, 3, 3, tzinfo=timezone.utc)
    assert dates["c.txt"] == D3


def test_binary_stamp_file(project, recording_setter, tmp_path):
    old = datetime(2002, 2, 2, tzinfo=timezone.utc)
    strings, names = encode_name_table(["docs", "guide.md"])
    bin_file = tmp_path / "stamps.bin"
    bin_file.write_bytes(
        pack_tree(
            strings,
            [
                (0, 0, old),
                (names["docs"], 2 | 0x80000000, old),
                (names["guide.md"], 0x80000000, old),
                (0, 1, old),
            ],
        )
    )
    runner = CliRunner()
    result = runner.invoke(
        main,
        [
            "--repo",
            str(project.root),
            "--creation-time-bin-file",
            str(bin_file),
            "--creation-time-file-root",
            "/",
        ],
    )

    assert result.exit_code == 0, result.output
    assert applied(recording_setter, project.root)["docs/guide.md"] == old


def test_working_tree_deletions_are_not_processed(project, recording_setter):
    (project.root / "c.txt").unlink()
    (project.root / "b.txt").unlink()
    runner = CliRunner()
    result = runner.invoke(main, ["--repo", str(project.root)])

    assert result.exit_code == 0, result.output
    assert "Processed: 1" in result.output
    assert "WARNINGS:" not in result.output


def test_warnings_are_listed_and_exit_zero(project, recording_setter, monkeypatch):
    # a.txt still has a stamp from history but was renamed away on disk
    monkeypatch.setattr(
        cli_main.GitHistoryRepository,
        "list_tracked_files",
        lambda self: ["b.txt", "gone.txt", "a.txt"],
    )
    runner = CliRunner()
    result = runner.invoke(main, ["--repo", str(project.root)])

    assert result.exit_code == 0, result.output
    assert "WARNINGS:" in result.output
    assert "Cannot find file in commits: gone.txt" in result.output
    assert "File no longer exist: a.txt" in result.output
    assert "Warnings: 2" in result.output
    assert list(applied(recording_setter, project.root)) == ["b.txt"]


def test_dry_run_does_not_need_platform_support(project, monkeypatch):
    def unsupported():
        raise CreationTimeNotSupportedError("nope")

    monkeypatch.setattr(cli_main, "get_creation_time_setter", unsupported)
    runner = CliRunner()
    result = runner.invoke(main, ["--repo", str(project.root), "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "Processed: 3" in result.output


def test_unsupported_platform_exits_one(project, monkeypatch):
    def unsupported():
        raise CreationTimeNotSupportedError("File creation time cannot be set on Linux.")

    monkeypatch.setattr(cli_main, "get_creation_time_setter", unsupported)
    runner = CliRunner()
    result = runner.invoke(main, ["--repo", str(project.root)])

    assert result.exit_code == 1
    assert "cannot be set on Linux" in result.output


def test_conflicting_stamp_files(project, tmp_path):
    stamp_file = tmp_path / "stamps.txt"
    stamp_file.write_text("")
    runner = CliRunner()
    result = runner.invoke(
        main,
        [
            "--repo",
            str(project.root),
            "--creation-time-file",
            str(stamp_file),
            "--creation-time-bin-file",
            str(stamp_file),
            "--creation-time-file-root",
            "/",
        ],
    )

    assert result.exit_code == 1
    assert "cannot be used together" in result.output


def test_stamp_file_without_root(project, tmp_path):
    stamp_file = tmp_path / "stamps.txt"
    stamp_file.write_text("")
    runner = CliRunner()
    result = runner.invoke(
        main, ["--repo", str(project.root), "--creation-time-file", str(stamp_file)]
    )

    assert result.exit_code == 1
    assert "--creation-time-file-root" in result.output


def test_not_a_repository(tmp_path):
    outside = tmp_path / "plain"
    outside.mkdir()
    runner = CliRunner()
    result = runner.invoke(main, ["--repo", str(outside)])

    assert result.exit_code == 1
    assert "not a part of Git repo" in result.output


def test_malformed_stamp_file_aborts(project, recording_setter, tmp_path):
    stamp_file = tmp_path / "stamps.txt"
    stamp_file.write_text("a.txt:2001-01-01T00:00:00+00:00\nbroken line\n")
    runner = CliRunner()
    result = runner.invoke(
        main,
        [
            "--repo",
            str(project.root),
            "--creation-time-file",
            str(stamp_file),
            "--creation-time-file-root",
            "/",
        ],
    )

    assert result.exit_code == 1
    assert "line 1" in result.output
    assert recording_setter.calls == []


def test_missing_bin_prefix_aborts(project, recording_setter, tmp_path):
    old = datetime(2002, 2, 2, tzinfo=timezone.utc)
    strings, names = encode_name_table(["docs"])
    bin_file = tmp_path / "stamps.bin"
    bin_file.write_bytes(
        pack_tree(strings, [(0, 0, old), (names["docs"], 0x80000000, old), (0, 1, old)])
    )
    runner = CliRunner()
    result = runner.invoke(
        main,
        [
            "--repo",
            str(project.root),
            "--creation-time-bin-file",
            str(bin_file),
            "--creation-time-file-root",
            "src/missing",
        ],
    )

    assert result.exit_code == 1
    assert "src/missing" in result.output
    assert recording_setter.calls == []


def test_unexpected_error_prints_traceback(project, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(cli_main, "import_stamps_from_commits", explode)
    monkeypatch.setattr(cli_main, "get_creation_time_setter", NullCreationTimeSetter)
    runner = CliRunner()
    result = runner.invoke(main, ["--repo", str(project.root)])

    assert result.exit_code == 1
    assert "Unexpected error happened" in result.output
    assert "disk on fire" in result.output


def test_version():
    runner = CliRunner()
    result = runner.invoke(main, ["--version"])

    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_verbose_dry_run(project):
    runner = CliRunner()
    result = runner.invoke(main, ["--repo", str(project.root), "--dry-run", "--verbose"])

    assert result.exit_code == 0, result.output
    assert "Time elapsed:" in result.output
