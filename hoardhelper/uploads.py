"""Upload queue: parsed files waiting to be sent to the remote library.

Entries are created from dropped paths, can be edited (which re-derives
the proposed path), and are uploaded with a bounded number of attempts.
Every finished upload is recorded in the history when one is attached.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Callable, Iterable, Literal, Protocol

from .cleaner import sanitize_safe
from .formatter import build_path
from .history import UploadHistory
from .models import ExportResult, FileMetadata, FileStatus, ParseResult
from .parser import pad, parse_filename
from .settings import Settings
from .webdav import FILE_EXISTS_ERROR, ProgressCallback, WebDAVError

log = logging.getLogger(__name__)

StatusCallback = Callable[[int, FileStatus], None]


class Uploader(Protocol):
    def upload(
        self,
        local_path: str,
        remote_destination: str | None,
        on_progress: ProgressCallback | None = None,
    ) -> ExportResult:
        ...


class UploadQueue:
    """Ordered list of FileMetadata plus the upload/retry workflow.

    Constructor args:
        uploader: Object with an ``upload(local, remote, on_progress)``
                  method, normally a WebDAVClient.
        settings: Settings providing root folders and attempt limit.
        history:  Optional UploadHistory receiving every outcome.
    """

    def __init__(
        self,
        uploader: Uploader | None,
        settings: Settings,
        history: UploadHistory | None = None,
    ):
        self._uploader = uploader
        self._settings = settings
        self._history = history
        self.entries: list[FileMetadata] = []

    # -- Building entries ------------------------------------------

    def _propose(self, parsed: ParseResult, retry_id: str | None = None) -> FileMetadata:
        proposed = build_path(parsed, self._settings.base_overrides())
        entry = FileMetadata(parsed=parsed, proposed=proposed, retry_id=retry_id)
        if not parsed.series:
            entry.status = FileStatus.failed("Could not parse metadata")
        elif proposed is None:
            entry.status = FileStatus.failed("Path generation failed")
        else:
            entry.status = FileStatus.ready()
        return entry

    def add_paths(self, paths: Iterable[str]) -> list[FileMetadata]:
        """Parse *paths* and append them to the queue."""
        added = []
        for path in paths:
            entry = self._propose(parse_filename(path))
            log.debug("Queued %s -> %s", entry.original_name, entry.proposed)
            added.append(entry)
        self.entries.extend(added)
        return added

    def edit(
        self,
        index: int,
        *,
        series: str | None = None,
        season: int | None = None,
        episode: int | None = None,
        media_type: Literal["tv", "movie"] | None = None,
    ) -> FileMetadata:
        """
        Apply user corrections to an entry and regenerate its path.

        Raises:
            IndexError: If *index* is not in the queue
            ValueError: If season or episode is negative
        """
        for name, value in (("season", season), ("episode", episode)):
            if value is not None and value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")

        entry = self.entries[index]
        parsed = entry.parsed

        new_type = media_type or parsed.media_type
        new_series = sanitize_safe(series) if series is not None else parsed.series
        if new_type == "tv":
            new_season = season if season is not None else parsed.season
            if new_season is None:
                new_season = 1
            new_episode = episode if episode is not None else parsed.episode
            if new_episode is None:
                new_episode = 0
            parsed = dataclasses.replace(
                parsed,
                media_type="tv",
                series=new_series,
                season=new_season,
                episode=new_episode,
                formatted_season=pad(new_season),
                formatted_episode=pad(new_episode),
            )
        else:
            parsed = dataclasses.replace(
                parsed,
                media_type="movie",
                series=new_series,
                season=None,
                episode=None,
                formatted_season=None,
                formatted_episode=None,
            )

        updated = self._propose(parsed, retry_id=entry.retry_id)
        self.entries[index] = updated
        return updated

    def retry(self, history_id: str) -> FileMetadata | None:
        """Queue a failed history entry again; None if it is unknown."""
        if self._history is None:
            raise ValueError("Retry requires an upload history")
        item = self._history.get(history_id)
        if item is None:
            return None
        entry = self._propose(parse_filename(item.full_path), retry_id=item.id)
        self.entries.append(entry)
        return entry

    def clear(self) -> None:
        self.entries.clear()

    # -- Uploading -------------------------------------------------

    def _attempt(self, entry: FileMetadata, on_progress: ProgressCallback) -> ExportResult:
        try:
            return self._uploader.upload(entry.full_path, entry.proposed, on_progress)
        except (WebDAVError, OSError) as e:
            return ExportResult(success=False, error=str(e))

    def upload_entry(
        self,
        index: int,
        on_status: StatusCallback | None = None,
    ) -> ExportResult:
        """Upload one entry with up to ``max_upload_attempts`` attempts."""
        if self._uploader is None:
            raise WebDAVError("No uploader configured")

        entry = self.entries[index]
        if not entry.valid:
            return ExportResult(success=False, error=entry.status.label())

        def set_status(status: FileStatus) -> None:
            entry.status = status
            if on_status:
                on_status(index, status)

        set_status(FileStatus.processing(0))
        max_attempts = self._settings.max_upload_attempts
        result = ExportResult(success=False)
        for attempt in range(1, max_attempts + 1):
            result = self._attempt(
                entry, lambda percent: set_status(FileStatus.processing(percent))
            )
            if result.success:
                break
            if result.error == FILE_EXISTS_ERROR:
                log.warning("%s already exists remotely", entry.proposed)
                break
            log.warning(
                "Upload failed (attempt %d/%d) for %s: %s",
                attempt, max_attempts, entry.original_name, result.error,
            )

        if result.success:
            set_status(FileStatus.secured())
        else:
            set_status(FileStatus.failed(result.error or "Upload failed"))

        if self._history is not None:
            self._history.record(entry, result.success, result.error)
        return result

    def upload_all(self, on_status: StatusCallback | None = None) -> list[ExportResult]:
        """Upload every valid entry; secured entries leave the queue."""
        results = []
        for index, entry in enumerate(self.entries):
            if not entry.valid:
                log.info("Skipping invalid entry %s", entry.original_name)
                continue
            results.append(self.upload_entry(index, on_status))

        self.entries = [e for e in self.entries if e.status.kind != "secured"]
        return results
