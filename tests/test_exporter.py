"""Tests for local export."""
from pathlib import Path

from hoardhelper.exporter import export_file
from hoardhelper.models import ExportResult


def test_copies_and_creates_directories(tmp_path: Path) -> None:
    source = tmp_path / "Show.S01E01.mkv"
    source.write_bytes(b"video")
    destination = tmp_path / "lib" / "Show" / "Season 01" / "Show - S01E01.mkv"

    assert export_file(source, destination) == ExportResult(success=True)
    assert destination.read_bytes() == b"video"
    assert source.exists()


def test_refuses_existing_destination(tmp_path: Path) -> None:
    source = tmp_path / "a.mkv"
    source.write_bytes(b"new")
    destination = tmp_path / "b.mkv"
    destination.write_bytes(b"old")

    assert export_file(source, destination) == ExportResult(success=False, error="File already exists")
    assert destination.read_bytes() == b"old"


def test_refuses_missing_destination(tmp_path: Path) -> None:
    result = export_file(tmp_path / "a.mkv", None)
    assert result == ExportResult(success=False, error="Invalid destination path")


def test_missing_source_reports_error(tmp_path: Path) -> None:
    result = export_file(tmp_path / "missing.mkv", tmp_path / "out" / "x.mkv")
    assert not result.success
    assert result.error
