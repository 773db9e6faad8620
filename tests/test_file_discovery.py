from __future__ import annotations

import datetime as dt
import os
from pathlib import Path
from types import SimpleNamespace

import pytest

from zensort.file_discovery import (
    creation_time,
    gather_root_files,
    read_file_record,
    should_ignore,
    skip_reason_for_entry,
)


class TestShouldIgnore:
    @pytest.mark.parametrize(
        "name",
        ["movie.crdownload", "movie.mp4.crdownload", "a.CRDOWNLOAD", "scratch.tmp", "SCRATCH.TMP", "b.Tmp"],
    )
    def test_in_progress_and_temp_files_are_ignored(self, name: str) -> None:
        assert should_ignore(Path("/downloads") / name)

    @pytest.mark.parametrize("name", ["movie.mp4", "notes", "tmp", "crdownload.txt", "file.tmp.txt", ".tmp"])
    def test_other_files_are_not_ignored(self, name: str) -> None:
        assert not should_ignore(Path("/downloads") / name)

    def test_accepts_plain_strings(self) -> None:
        assert should_ignore("partial.crdownload")


class TestCreationTime:
    def test_prefers_birthtime(self) -> None:
        stat_result = SimpleNamespace(st_birthtime=0.0, st_ctime=86400.0 * 10, st_mtime=86400.0 * 20)

        assert creation_time(stat_result) == dt.datetime.fromtimestamp(0.0)

    def test_falls_back_to_mtime_on_posix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("zensort.file_discovery.sys.platform", "linux")
        stat_result = SimpleNamespace(st_ctime=86400.0 * 10, st_mtime=86400.0 * 20)

        assert creation_time(stat_result) == dt.datetime.fromtimestamp(86400.0 * 20)

    def test_uses_ctime_on_windows(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("zensort.file_discovery.sys.platform", "win32")
        stat_result = SimpleNamespace(st_ctime=86400.0 * 10, st_mtime=86400.0 * 20)

        assert creation_time(stat_result) == dt.datetime.fromtimestamp(86400.0 * 10)


class TestReadFileRecord:
    def test_snapshot_fields(self, tmp_path: Path) -> None:
        target = tmp_path / "Holiday.JPG"
        target.write_bytes(b"jpeg")

        record = read_file_record(target)

        assert record.path == target
        assert record.name == "Holiday.JPG"
        assert record.extension == ".jpg"
        assert isinstance(record.created, dt.datetime)

    def test_no_extension(self, tmp_path: Path) -> None:
        target = tmp_path / "README"
        target.write_text("hello")

        assert read_file_record(target).extension == ""

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            read_file_record(tmp_path / "gone.txt")

    def test_relative_path_is_made_absolute(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "a.txt").write_text("a")
        monkeypatch.chdir(tmp_path)

        record = read_file_record(Path("a.txt"))

        assert record.path.is_absolute()
        assert record.path == tmp_path / "a.txt"


class TestSkipReason:
    def test_regular_file(self, tmp_path: Path) -> None:
        target = tmp_path / "a.txt"
        target.write_text("a")

        assert skip_reason_for_entry(target) is None

    def test_directory(self, tmp_path: Path) -> None:
        assert skip_reason_for_entry(tmp_path) == "not a regular file"

    def test_missing(self, tmp_path: Path) -> None:
        assert skip_reason_for_entry(tmp_path / "missing") == "not a regular file"


class TestGatherRootFiles:
    def test_lists_only_immediate_regular_files(self, tmp_path: Path) -> None:
        (tmp_path / "b.txt").write_text("b")
        (tmp_path / "A.pdf").write_text("a")
        (tmp_path / "Images").mkdir()
        (tmp_path / "Images" / "nested.jpg").write_text("n")

        names = [path.name for path in gather_root_files(tmp_path)]

        assert names == ["A.pdf", "b.txt"]

    def test_ignored_files_are_still_listed(self, tmp_path: Path) -> None:
        (tmp_path / "video.mp4.crdownload").write_text("partial")

        assert [path.name for path in gather_root_files(tmp_path)] == ["video.mp4.crdownload"]

    def test_symlinks_are_skipped(self, tmp_path: Path) -> None:
        real = tmp_path / "real.txt"
        real.write_text("r")
        try:
            os.symlink(real, tmp_path / "link.txt")
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported here")

        assert [path.name for path in gather_root_files(tmp_path)] == ["real.txt"]

    def test_missing_root_yields_nothing(self, tmp_path: Path) -> None:
        assert list(gather_root_files(tmp_path / "missing")) == []

    def test_empty_root(self, tmp_path: Path) -> None:
        assert list(gather_root_files(tmp_path)) == []
