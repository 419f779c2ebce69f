"""Tests for the bounded-concurrency archive pump (core/archive_pump.py).

The writer is a :class:`FakeWriter`; paths are real files under
``tmp_path`` so the entry mapper runs for real.

Coverage:
* Concurrency ceiling is never exceeded, for several ceilings.
* Entry set: one per file, one per immediate child of each directory.
* Missing paths are skipped with a warning; access errors are counted.
* Writer fatal errors stop dispatch, abort the writer and propagate.
* Empty path list finalizes immediately; verbose logging; progress hook.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from conftest import FakeWriter, RecordingLogger

from pnpack.core.archive_pump import ArchivePump
from pnpack.exceptions import ArchiveWriterError, ValidationError


def _make_files(root: Path, count: int) -> list[str]:
    paths: list[str] = []
    for i in range(count):
        target = root / f"f{i:03d}.js"
        target.write_text(f"// {i}\n")
        paths.append(str(target))
    return paths


def _run(pump: ArchivePump, paths: list[str], root: Path):  # noqa: ANN202
    return asyncio.run(pump.run(paths, str(root)))


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestConstruction:
    @pytest.mark.parametrize("concurrency", [0, -1])
    def test_ceiling_below_one_rejected(
        self, concurrency: int, logger: RecordingLogger,
    ) -> None:
        with pytest.raises(ValidationError, match="at least 1"):
            ArchivePump(FakeWriter(), concurrency=concurrency, logger=logger)


# ---------------------------------------------------------------------------
# Concurrency ceiling
# ---------------------------------------------------------------------------

class TestConcurrencyCeiling:
    @pytest.mark.parametrize("ceiling", [1, 2, 4, 7])
    def test_in_flight_never_exceeds_ceiling(
        self, tmp_path: Path, logger: RecordingLogger, ceiling: int,
    ) -> None:
        paths = _make_files(tmp_path, 20)
        writer = FakeWriter(delay=0.005)
        pump = ArchivePump(writer, concurrency=ceiling, logger=logger)

        summary = _run(pump, paths, tmp_path)

        assert pump.peak_in_flight == ceiling
        assert writer.peak <= ceiling
        assert summary.added == 20
        assert writer.finalized is True

    def test_ceiling_one_serializes(self, tmp_path: Path, logger: RecordingLogger) -> None:
        paths = _make_files(tmp_path, 5)
        writer = FakeWriter(delay=0.002)
        pump = ArchivePump(writer, concurrency=1, logger=logger)

        _run(pump, paths, tmp_path)

        assert writer.peak == 1
        assert [e.source_path for e in writer.entries] == paths

    def test_ceiling_above_list_size_never_waits(
        self, tmp_path: Path, logger: RecordingLogger,
    ) -> None:
        paths = _make_files(tmp_path, 3)
        pump = ArchivePump(FakeWriter(), concurrency=50, logger=logger)

        summary = _run(pump, paths, tmp_path)

        assert pump.peak_in_flight == 3
        assert summary.paths == 3


# ---------------------------------------------------------------------------
# Entry coverage
# ---------------------------------------------------------------------------

class TestEntryCoverage:
    def test_files_and_directory_children(
        self, tmp_path: Path, logger: RecordingLogger,
    ) -> None:
        pkg = tmp_path / "pkg"
        (pkg / "lib").mkdir(parents=True)
        (pkg / "lib" / "nested.js").write_text("")
        (pkg / "index.js").write_text("")
        single = tmp_path / "README.md"
        single.write_text("hi")

        writer = FakeWriter()
        pump = ArchivePump(writer, concurrency=3, logger=logger)
        summary = _run(pump, [str(pkg), str(single)], tmp_path)

        assert writer.names == {"pkg/index.js", "pkg/lib", "README.md"}
        assert summary.added == 3
        assert summary.skipped == summary.failed == 0

    def test_missing_path_skipped_with_warning(
        self, tmp_path: Path, logger: RecordingLogger,
    ) -> None:
        paths = _make_files(tmp_path, 2)
        gone = str(tmp_path / "deleted-dir")
        writer = FakeWriter()
        pump = ArchivePump(writer, concurrency=2, logger=logger)

        summary = _run(pump, [paths[0], gone, paths[1]], tmp_path)

        assert summary.skipped == 1
        assert summary.added == 2
        assert any(gone in w and "no longer exists" in w for w in logger.warnings)
        assert writer.finalized is True

    def test_per_entry_access_error_is_logged_and_counted(
        self, tmp_path: Path, logger: RecordingLogger,
    ) -> None:
        paths = _make_files(tmp_path, 3)
        writer = FakeWriter(unreadable=frozenset({"f001.js"}))
        pump = ArchivePump(writer, concurrency=2, logger=logger)

        summary = _run(pump, paths, tmp_path)

        assert summary.failed == 1
        assert summary.added == 2
        assert summary.ok is False
        assert any("f001.js" in e and "permission denied" in e for e in logger.errors)
        assert writer.finalized is True

    def test_path_outside_root_fails_without_aborting(
        self, tmp_path: Path, logger: RecordingLogger,
    ) -> None:
        inside = tmp_path / "ws"
        inside.mkdir()
        paths = _make_files(inside, 1)
        outside = tmp_path / "elsewhere.js"
        outside.write_text("")

        writer = FakeWriter()
        pump = ArchivePump(writer, concurrency=2, logger=logger)
        summary = _run(pump, [str(outside), *paths], inside)

        assert summary.failed == 1
        assert writer.names == {"f000.js"}

    def test_empty_list_finalizes_immediately(
        self, tmp_path: Path, logger: RecordingLogger,
    ) -> None:
        writer = FakeWriter()
        pump = ArchivePump(writer, concurrency=4, logger=logger)

        summary = _run(pump, [], tmp_path)

        assert writer.finalized is True
        assert writer.entries == []
        assert summary.paths == 0


# ---------------------------------------------------------------------------
# Fatal writer errors
# ---------------------------------------------------------------------------

class TestFatalWriterError:
    def test_fatal_error_aborts_and_propagates(
        self, tmp_path: Path, logger: RecordingLogger,
    ) -> None:
        paths = _make_files(tmp_path, 30)
        writer = FakeWriter(delay=0.002, fatal_on="f002.js")
        pump = ArchivePump(writer, concurrency=2, logger=logger)

        with pytest.raises(ArchiveWriterError, match="disk full"):
            _run(pump, paths, tmp_path)

        assert writer.aborted is True
        assert writer.finalized is False
        assert len(writer.entries) < 30

    def test_finalize_failure_aborts(self, tmp_path: Path, logger: RecordingLogger) -> None:
        class FailingFinalize(FakeWriter):
            async def finalize(self) -> None:
                raise ArchiveWriterError("flush failed")

        writer = FailingFinalize()
        pump = ArchivePump(writer, concurrency=1, logger=logger)

        with pytest.raises(ArchiveWriterError, match="flush failed"):
            _run(pump, _make_files(tmp_path, 1), tmp_path)
        assert writer.aborted is True


# ---------------------------------------------------------------------------
# Verbose and progress
# ---------------------------------------------------------------------------

class TestNotices:
    def test_verbose_logs_each_path(self, tmp_path: Path, logger: RecordingLogger) -> None:
        paths = _make_files(tmp_path, 3)
        pump = ArchivePump(FakeWriter(), concurrency=2, logger=logger, verbose=True)

        _run(pump, paths, tmp_path)

        assert sorted(logger.infos) == sorted(f"Adding {p}" for p in paths)

    def test_quiet_by_default(self, tmp_path: Path, logger: RecordingLogger) -> None:
        pump = ArchivePump(FakeWriter(), concurrency=2, logger=logger)
        _run(pump, _make_files(tmp_path, 3), tmp_path)
        assert logger.infos == []

    def test_progress_called_once_per_path(
        self, tmp_path: Path, logger: RecordingLogger,
    ) -> None:
        paths = _make_files(tmp_path, 4)
        gone = str(tmp_path / "gone")
        seen: list[str] = []
        pump = ArchivePump(
            FakeWriter(),
            concurrency=2,
            logger=logger,
            progress_callback=seen.append,
        )

        _run(pump, [*paths, gone], tmp_path)

        assert sorted(seen) == sorted([*paths, gone])
