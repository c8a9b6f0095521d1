"""
HoardHelper - Media Library Organiser

Classifies release filenames and torrent listings, proposes canonical
library paths and uploads the files to a WebDAV library.
"""
from .models import (
    ParseResult,
    FileStatus,
    FileMetadata,
    TorrentFile,
    FileWithSubtitleInfo,
    MediaDetectionResult,
    ExportResult,
    HistoryItem,
)
from .cleaner import sanitize_safe, clean_series_name
from .parser import parse_filename, parse
from .formatter import generate_new_path, prepend_target_base, build_path
from .detection import (
    detect_media_type,
    classify,
    group_subtitles_with_videos,
    match_subtitles,
    get_files_with_subtitle_info,
)
from .settings import Settings, SettingsManager
from .webdav import WebDAVClient, WebDAVError
from .uploads import UploadQueue
from .history import UploadHistory

__version__ = "1.0.0"
__all__ = [
    "ParseResult",
    "FileStatus",
    "FileMetadata",
    "TorrentFile",
    "FileWithSubtitleInfo",
    "MediaDetectionResult",
    "ExportResult",
    "HistoryItem",
    "sanitize_safe",
    "clean_series_name",
    "parse_filename",
    "parse",
    "generate_new_path",
    "prepend_target_base",
    "build_path",
    "detect_media_type",
    "classify",
    "group_subtitles_with_videos",
    "match_subtitles",
    "get_files_with_subtitle_info",
    "Settings",
    "SettingsManager",
    "WebDAVClient",
    "WebDAVError",
    "UploadQueue",
    "UploadHistory",
]
