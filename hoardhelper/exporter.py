"""Local export: copy organised files into a directory tree."""
import logging
import shutil
from pathlib import Path

from .models import ExportResult

log = logging.getLogger(__name__)


def export_file(full_path: str | Path, destination: str | Path | None) -> ExportResult:
    """
    Copy a file to its new destination, creating parent directories.

    Args:
        full_path: Source file
        destination: Destination file path

    Returns:
        ExportResult; existing destinations are never overwritten
    """
    if not destination:
        return ExportResult(success=False, error="Invalid destination path")

    dest = Path(destination)
    if dest.exists():
        return ExportResult(success=False, error="File already exists")

    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(full_path, dest)
    except OSError as e:
        log.error("Export of %s failed: %s", full_path, e)
        return ExportResult(success=False, error=str(e))

    log.info("Exported %s -> %s", full_path, dest)
    return ExportResult(success=True)
