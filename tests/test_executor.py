"""Tests for the per-file copy unit and its helpers."""

from __future__ import annotations

import hashlib
import os
import threading
import time
from datetime import datetime
from pathlib import Path

import pytest

from sortcopy.classification.models import ClassificationMode
from sortcopy.ingestion.detectors import HashComputer
from sortcopy.logs.sinks import MemoryLogSink
from sortcopy.organization import (
    CopyExecutor,
    CopyStatus,
    DirectoryLedger,
    RunConfig,
    RunContext,
)
from sortcopy.organization.executor import set_creation_time


def _config(tmp_path: Path, mode: ClassificationMode, **kwargs) -> RunConfig:
    return RunConfig(origin=tmp_path / "origin", destination=tmp_path / "dest", mode=mode, **kwargs)


def test_hash_computer_streams_in_chunks(tmp_path: Path) -> None:
    path = tmp_path / "blob.bin"
    data = os.urandom(5000)
    path.write_bytes(data)

    assert HashComputer(chunk_bytes=1024).compute(path) == hashlib.md5(data).hexdigest()


def test_same_content_compares_size_then_digest(tmp_path: Path) -> None:
    first = tmp_path / "a"
    second = tmp_path / "b"
    third = tmp_path / "c"
    first.write_bytes(b"abcd")
    second.write_bytes(b"abcd")
    third.write_bytes(b"abce")
    hasher = HashComputer()

    assert hasher.same_content(first, second)
    assert not hasher.same_content(first, third)
    third.write_bytes(b"abcde")
    assert not hasher.same_content(first, third)


def test_directory_ledger_creates_once(tmp_path: Path) -> None:
    ledger = DirectoryLedger()
    target = tmp_path / "x" / "y"

    assert ledger.ensure(target) is True
    assert target.is_dir()
    assert target in ledger
    assert ledger.ensure(target) is False
    assert len(ledger) == 1


def test_destination_for_renames_only_when_requested(tmp_path: Path) -> None:
    source = tmp_path / "origin" / "img.png"
    source.parent.mkdir()
    source.write_bytes(b"png")
    executor = CopyExecutor(MemoryLogSink())
    date = datetime(2024, 3, 5, 10, 15, 30)

    plain = executor.destination_for(
        source, _config(tmp_path, ClassificationMode.BY_CREATION_DATE), date
    )
    renamed = executor.destination_for(
        source, _config(tmp_path, ClassificationMode.BY_CREATION_DATE, rename=True), date
    )

    assert plain == tmp_path / "dest" / "2024" / "3" / "img.png"
    assert renamed == tmp_path / "dest" / "2024" / "3" / "2024-03-05_10-15-30..png"


def test_destination_for_unclassifiable(tmp_path: Path) -> None:
    executor = CopyExecutor(MemoryLogSink())
    config = _config(tmp_path, ClassificationMode.BY_METADATA_DATE, pending=False)

    assert executor.destination_for(tmp_path / "a.txt", config, None) is None


def test_process_records_outcome(tmp_path: Path) -> None:
    source = tmp_path / "origin" / "song.mp3"
    source.parent.mkdir()
    source.write_bytes(b"ID3")
    sink = MemoryLogSink()
    context = RunContext()

    outcome = CopyExecutor(sink).process(
        source, _config(tmp_path, ClassificationMode.BY_TYPE), context
    )

    assert outcome.status is CopyStatus.COPIED
    assert outcome.destination == tmp_path / "dest" / "Music" / "song.mp3"
    assert context.count(CopyStatus.COPIED) == 1
    assert tmp_path / "dest" / "Music" in context.ledger
    assert sink.messages == [
        f"Processing: {source}",
        f"File copied from: {source} to {outcome.destination}",
    ]


def test_apply_attributes_copies_times(tmp_path: Path) -> None:
    source = tmp_path / "src.txt"
    target = tmp_path / "dst.txt"
    source.write_text("a", encoding="utf-8")
    target.write_text("a", encoding="utf-8")
    stamp = datetime(2019, 2, 3, 4, 5, 6).timestamp()
    os.utime(source, (stamp, stamp))

    CopyExecutor(MemoryLogSink()).apply_attributes(source, target, None)

    assert target.stat().st_mtime_ns == source.stat().st_mtime_ns


@pytest.mark.skipif(os.name == "nt", reason="creation time is settable on Windows")
def test_set_creation_time_is_unsupported_off_windows(tmp_path: Path) -> None:
    path = tmp_path / "file.txt"
    path.write_text("x", encoding="utf-8")

    assert set_creation_time(path, datetime(2020, 1, 1)) is False


class RecordingExceptionSink:
    """Exception sink keeping records in memory."""

    def __init__(self) -> None:
        self.exceptions: list[tuple[str, str]] = []

    def append_exception(self, kind: str, date_iso: str, time_hms: str, reason: str) -> None:
        self.exceptions.append((kind, reason))

    def append_custom_message(self, text: str) -> None:
        pass


def test_attribute_failure_still_counts_as_copied(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    source = tmp_path / "origin" / "clip.mp4"
    source.parent.mkdir()
    source.write_bytes(b"video")
    exceptions = RecordingExceptionSink()
    context = RunContext()

    def failing_utime(*args, **kwargs):
        raise OSError("read-only file system")

    monkeypatch.setattr(os, "utime", failing_utime)
    outcome = CopyExecutor(MemoryLogSink(), exception_sink=exceptions).process(
        source, _config(tmp_path, ClassificationMode.BY_TYPE), context
    )

    assert outcome.status is CopyStatus.COPIED
    assert (tmp_path / "dest" / "Videos" / "clip.mp4").read_bytes() == b"video"
    assert context.count(CopyStatus.COPIED) == 1
    assert context.count(CopyStatus.FAILED) == 0
    assert exceptions.exceptions == [("builtins.OSError", "read-only file system")]


def test_destination_lock_serializes_same_path(tmp_path: Path) -> None:
    context = RunContext()
    target = tmp_path / "dest" / "same.txt"
    active = 0
    overlap: list[int] = []
    guard = threading.Lock()

    def worker() -> None:
        nonlocal active
        with context.destination_lock(target):
            with guard:
                active += 1
                overlap.append(active)
            time.sleep(0.01)
            with guard:
                active -= 1

    threads = [threading.Thread(target=worker) for _ in range(6)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert overlap == [1] * 6
