"""Data models for the hoardhelper package."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal


MediaType = Literal["tv", "movie", "ambiguous"]


@dataclass(frozen=True)
class ParseResult:
    """Structured information extracted from one release filename.

    ``season``, ``episode`` and the two formatted fields are only set for
    ``media_type == "tv"``.
    """
    media_type: Literal["tv", "movie"]
    series: str
    ext: str
    original_name: str
    full_path: str
    season: int | None = None
    episode: int | None = None
    formatted_season: str | None = None
    formatted_episode: str | None = None

    @property
    def is_tv(self) -> bool:
        return self.media_type == "tv"


@dataclass(frozen=True)
class FileStatus:
    """Tagged status of a queued file.

    Use the constructors (``pending()``, ``processing()``, ...) rather
    than building instances by hand.
    """
    kind: Literal["pending", "processing", "ready", "error", "secured"]
    percent: int | None = None
    message: str | None = None

    @classmethod
    def pending(cls) -> FileStatus:
        return cls("pending")

    @classmethod
    def processing(cls, percent: int = 0) -> FileStatus:
        return cls("processing", percent=max(0, min(100, int(percent))))

    @classmethod
    def ready(cls) -> FileStatus:
        return cls("ready")

    @classmethod
    def failed(cls, message: str) -> FileStatus:
        return cls("error", message=message)

    @classmethod
    def secured(cls) -> FileStatus:
        return cls("secured")

    @property
    def is_error(self) -> bool:
        return self.kind == "error"

    def label(self) -> str:
        """Human-readable text for list views."""
        if self.kind == "processing":
            return f"Uploading {self.percent or 0}%"
        if self.kind == "error":
            return self.message or "Error"
        return self.kind.capitalize()


@dataclass
class FileMetadata:
    """A parsed file travelling through the upload queue."""
    parsed: ParseResult
    proposed: str | None = None
    status: FileStatus = field(default_factory=FileStatus.pending)
    retry_id: str | None = None

    @property
    def valid(self) -> bool:
        return self.proposed is not None and not self.status.is_error

    @property
    def original_name(self) -> str:
        return self.parsed.original_name

    @property
    def full_path(self) -> str:
        return self.parsed.full_path

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.parsed.media_type,
            "series": self.parsed.series,
            "season": self.parsed.season,
            "episode": self.parsed.episode,
            "formattedSeason": self.parsed.formatted_season,
            "formattedEpisode": self.parsed.formatted_episode,
            "ext": self.parsed.ext,
            "originalName": self.parsed.original_name,
            "fullPath": self.parsed.full_path,
            "proposed": self.proposed,
            "valid": self.valid,
            "status": self.status.label(),
        }


@dataclass
class TorrentFile:
    """One file of a torrent as reported by the debrid service."""
    id: int
    path: str
    bytes: int
    selected: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TorrentFile:
        return cls(
            id=int(data["id"]),
            path=str(data["path"]),
            bytes=int(data.get("bytes", 0)),
            selected=int(data.get("selected", 0)),
        )


@dataclass
class FileWithSubtitleInfo(TorrentFile):
    """A video file plus the IDs of the subtitles that belong to it."""
    subtitle_file_ids: list[int] = field(default_factory=list)


@dataclass
class MediaDetectionResult:
    """Partition of a torrent listing plus the detected media type."""
    media_type: MediaType
    video_files: list[TorrentFile] = field(default_factory=list)
    subtitle_files: list[TorrentFile] = field(default_factory=list)
    junk_files: list[TorrentFile] = field(default_factory=list)


@dataclass
class ExportResult:
    """Outcome of a copy or upload."""
    success: bool
    error: str | None = None


@dataclass
class HistoryItem:
    """A finished upload, successful or not."""
    id: str
    original_name: str
    full_path: str
    proposed: str | None
    media_type: str
    series: str
    uploaded_at: str
    upload_status: Literal["success", "failed"]
    error_message: str | None = None
    is_retry: bool = False
