"""Tests for routing files into the summary."""

from datetime import datetime, timedelta

import pytest

from sumfiles.config import AppConfig, ProgramOpts, RunState
from sumfiles.errors import TooManyErrorsError
from sumfiles.ingest import extension_of, ingest
from sumfiles.log import setup_logging
from sumfiles.models import FileRecord, GroupMode
from sumfiles.summary import Summary

NOW = datetime(2026, 6, 15, 12, 0, 0)


def text_oracle(path):
    return "text/plain"


@pytest.fixture
def cfg():
    return AppConfig()


@pytest.fixture
def state():
    return RunState()


class TestExtensionOf:
    """Test extension_of function."""

    def test_simple(self):
        assert extension_of("src/main.go") == "go"

    def test_last_component_wins(self):
        assert extension_of("archive.tar.gz") == "gz"

    def test_no_dot_is_other(self):
        assert extension_of("Makefile") is None

    def test_long_extension_is_other(self):
        assert extension_of("archive.tar.gz.backup_longext") is None

    def test_max_length_is_inclusive(self):
        assert extension_of("a.123456789") == "123456789"
        assert extension_of("a.1234567890") is None

    def test_custom_max_length(self):
        assert extension_of("a.json", max_length=3) is None

    def test_dot_in_directory(self):
        assert extension_of("v1.2/README") == "2/README"
        assert extension_of("v1.2/Makefile") is None


class TestIngestByExtension:
    """Test ingest in extension mode."""

    def test_round_trip(self, cfg, state):
        summ = Summary.for_mode("/r", GroupMode.EXTENSION)
        opts = ProgramOpts()
        for record in [
            FileRecord("a.go", 500, NOW),
            FileRecord("b.go", 2000, NOW),
            FileRecord("c.txt", 10, NOW - timedelta(days=400)),
        ]:
            ingest(summ, opts, cfg, state, record, now=NOW)

        assert sorted(summ.entries) == ["go", "txt"]
        assert summ.entries["go"].file_count == 2
        assert summ.entries["go"].total_bytes == 2500
        assert summ.entries["txt"].file_count == 1
        assert summ.entries["txt"].total_bytes == 10
        assert summ.total == 2510
        assert summ.min_mtime == NOW - timedelta(days=400)
        assert summ.max_mtime == NOW

    def test_dropped_files_count_in_total_only(self, cfg, state):
        summ = Summary.for_mode("/r", GroupMode.EXTENSION)
        opts = ProgramOpts()
        assert ingest(summ, opts, cfg, state, FileRecord("archive.tar.gz.backup_longext", 3000, NOW)) is None
        assert ingest(summ, opts, cfg, state, FileRecord("Makefile", 700, NOW)) is None
        assert dict(summ.entries) == {}
        assert summ.total == 3700

    def test_dropped_files_are_not_line_counted(self, cfg, state):
        calls = []

        def oracle(path):
            calls.append(path)
            return "text/plain"

        summ = Summary.for_mode("/r", GroupMode.EXTENSION)
        ingest(summ, ProgramOpts(lines=True), cfg, state, FileRecord("README", 10, NOW), oracle=oracle)
        assert calls == []
        assert summ.exception_count == 0


class TestIngestByTime:
    """Test ingest in time mode."""

    def test_routes_into_buckets(self, cfg, state):
        summ = Summary.for_mode("/r", GroupMode.TIME)
        opts = ProgramOpts(time=True)
        ingest(summ, opts, cfg, state, FileRecord("a.go", 5, NOW - timedelta(days=1)), now=NOW)
        ingest(summ, opts, cfg, state, FileRecord("b", 7, NOW - timedelta(days=1)), now=NOW)
        ingest(summ, opts, cfg, state, FileRecord("c.txt", 9, NOW - timedelta(days=100)), now=NOW)
        ingest(summ, opts, cfg, state, FileRecord("d.txt", 11, NOW - timedelta(days=1000)), now=NOW)

        assert sorted(summ.groups) == ["01recent", "02year", "03older"]
        recent = summ.groups["01recent"].entries["2026-06-14"]
        assert recent.file_count == 2
        assert recent.total_bytes == 12
        assert summ.groups["02year"].entries["2026-03"].total_bytes == 9
        assert summ.groups["03older"].entries["2023"].total_bytes == 11
        assert summ.total == 32


class TestIngestLines:
    """Test line counting during ingest."""

    def test_counts_lines_once(self, cfg, state, tmp_path):
        path = tmp_path / "code.py"
        path.write_bytes(b"one\ntwo\nthree")
        summ = Summary.for_mode(str(tmp_path), GroupMode.EXTENSION)
        entry = ingest(
            summ, ProgramOpts(lines=True), cfg, state, FileRecord(str(path), 13, NOW), oracle=text_oracle
        )
        assert entry.line_count == 2
        assert summ.exception_count == 0
        assert state.oracle_initialized

    def test_lines_accumulate_across_files(self, cfg, state, tmp_path):
        summ = Summary.for_mode(str(tmp_path), GroupMode.EXTENSION)
        opts = ProgramOpts(lines=True)
        for name, body in [("a.py", b"x\n" * 3), ("b.py", b"y\n" * 4)]:
            path = tmp_path / name
            path.write_bytes(body)
            ingest(summ, opts, cfg, state, FileRecord(str(path), len(body), NOW), oracle=text_oracle)
        assert summ.entries["py"].line_count == 7
        assert summ.entries["py"].file_count == 2

    def test_time_mode_counts_lines(self, cfg, state, tmp_path):
        path = tmp_path / "notes.md"
        path.write_bytes(b"a\nb\n")
        summ = Summary.for_mode(str(tmp_path), GroupMode.TIME)
        entry = ingest(
            summ,
            ProgramOpts(time=True, lines=True),
            cfg,
            state,
            FileRecord(str(path), 4, NOW),
            oracle=text_oracle,
            now=NOW,
        )
        assert entry.line_count == 2

    def test_binary_contributes_no_lines(self, cfg, state, tmp_path):
        path = tmp_path / "blob.bin"
        path.write_bytes(b"\x00\n\n")
        summ = Summary.for_mode(str(tmp_path), GroupMode.EXTENSION)
        entry = ingest(
            summ,
            ProgramOpts(lines=True),
            cfg,
            state,
            FileRecord(str(path), 3, NOW),
            oracle=lambda p: "application/octet-stream",
        )
        assert entry.line_count == 0
        assert summ.exception_count == 0

    def test_failure_is_counted_not_raised(self, cfg, state, tmp_path):
        summ = Summary.for_mode(str(tmp_path), GroupMode.EXTENSION)
        missing = str(tmp_path / "gone.txt")
        entry = ingest(summ, ProgramOpts(lines=True), cfg, state, FileRecord(missing, 2048, NOW), oracle=text_oracle)
        assert summ.exception_count == 1
        assert entry.total_bytes == 2048
        assert entry.file_count == 1
        assert entry.line_count == 0

    def test_failure_is_silent_without_debug(self, cfg, state, tmp_path, capsys):
        logger = setup_logging(debug=False)
        try:
            summ = Summary.for_mode(str(tmp_path), GroupMode.EXTENSION)
            missing = str(tmp_path / "gone.txt")
            ingest(summ, ProgramOpts(lines=True), cfg, state, FileRecord(missing, 10, NOW), oracle=text_oracle)
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
        assert summ.exception_count == 1
        assert capsys.readouterr().err == ""

    def test_error_limit_raises(self, state, tmp_path):
        cfg = AppConfig(max_errors=1)
        summ = Summary.for_mode(str(tmp_path), GroupMode.EXTENSION)
        opts = ProgramOpts(lines=True)
        ingest(summ, opts, cfg, state, FileRecord(str(tmp_path / "a.txt"), 1, NOW), oracle=text_oracle)
        with pytest.raises(TooManyErrorsError):
            ingest(summ, opts, cfg, state, FileRecord(str(tmp_path / "b.txt"), 1, NOW), oracle=text_oracle)
        assert summ.exception_count == 2
