"""Media-type detection for torrent file listings.

Pure Python, no I/O.  ``detect_media_type`` splits a listing into video,
subtitle and junk files and decides whether the group is a movie, a TV
season or something the user has to disambiguate.
"""
from __future__ import annotations

import logging
import re
from typing import Iterable

from .models import FileWithSubtitleInfo, MediaDetectionResult, MediaType, TorrentFile

log = logging.getLogger(__name__)

VIDEO_EXTENSIONS = {
    '.mkv', '.mp4', '.avi', '.mov', '.wmv', '.flv', '.webm',
    '.m4v', '.ts', '.m2ts',
}

SUBTITLE_EXTENSIONS = {'.srt', '.sub', '.idx'}

JUNK_EXTENSIONS = {'.txt', '.nfo', '.rar', '.zip', '.7z', '.r00'}

# Anything smaller (samples, proof clips, fillers) is junk unless it is a
# subtitle.
JUNK_SIZE_THRESHOLD = 50 * 1024 * 1024

# Number of episode-pattern matches from which a listing is a TV season.
TV_EPISODE_THRESHOLD = 3

EPISODE_MATCH_PATTERNS = [
    re.compile(r's(\d{1,2})e(\d{1,2})', re.IGNORECASE | re.ASCII),
    re.compile(r'(\d{1,2})x(\d{1,2})', re.IGNORECASE | re.ASCII),
]


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def get_file_extension(filename: str) -> str:
    """Lowercased extension including the dot, '' when there is none."""
    index = filename.rfind('.')
    if index == -1:
        return ''
    return filename[index:].lower()


def get_base_filename(filename: str) -> str:
    """Lowercased file name without directories and extension."""
    base = filename.rsplit('/', 1)[-1]
    if '.' in base:
        base = base[:base.rfind('.')]
    return base.lower()


# ------------------------------------------------------------------
# Predicates
# ------------------------------------------------------------------

def is_video_file(file: TorrentFile) -> bool:
    return get_file_extension(file.path) in VIDEO_EXTENSIONS


def is_subtitle_file(file: TorrentFile) -> bool:
    return get_file_extension(file.path) in SUBTITLE_EXTENSIONS


def is_junk_file(file: TorrentFile) -> bool:
    """Junk by extension, or any non-subtitle below the size threshold."""
    ext = get_file_extension(file.path)
    if ext in JUNK_EXTENSIONS:
        return True
    return ext not in SUBTITLE_EXTENSIONS and file.bytes < JUNK_SIZE_THRESHOLD


# ------------------------------------------------------------------
# Classification
# ------------------------------------------------------------------

def get_filtered_video_files(files: Iterable[TorrentFile]) -> list[TorrentFile]:
    """Video files that are not junk."""
    return [f for f in files if is_video_file(f) and not is_junk_file(f)]


def count_episode_matches(files: Iterable[TorrentFile]) -> int:
    """Count files whose path looks like an episode (each file at most once)."""
    count = 0
    for file in files:
        if any(pattern.search(file.path) for pattern in EPISODE_MATCH_PATTERNS):
            count += 1
    return count


def media_type_for_count(episode_count: int) -> MediaType:
    if episode_count >= TV_EPISODE_THRESHOLD:
        return "tv"
    if episode_count == 0:
        return "movie"
    return "ambiguous"


def detect_media_type(files: list[TorrentFile]) -> MediaDetectionResult:
    """
    Partition a torrent listing and decide its media type.

    Args:
        files: Files as reported by the torrent source

    Returns:
        MediaDetectionResult; an empty listing yields empty lists and
        ``movie``
    """
    video_files = get_filtered_video_files(files)
    subtitle_files = [f for f in files if is_subtitle_file(f)]
    junk_files = [f for f in files if is_junk_file(f)]

    episode_count = count_episode_matches(video_files)
    media_type = media_type_for_count(episode_count)
    log.debug(
        "Detected %s: %d video, %d subtitle, %d junk, %d episode matches",
        media_type, len(video_files), len(subtitle_files), len(junk_files),
        episode_count,
    )
    return MediaDetectionResult(
        media_type=media_type,
        video_files=video_files,
        subtitle_files=subtitle_files,
        junk_files=junk_files,
    )


classify = detect_media_type


# ------------------------------------------------------------------
# Subtitle association
# ------------------------------------------------------------------

def _subtitle_matches(video_base: str, subtitle: TorrentFile) -> bool:
    # Prefix check covers language suffixes: "episode01.en" vs "episode01".
    return get_base_filename(subtitle.path).startswith(video_base)


def find_matching_subtitle(
    video_file: TorrentFile,
    subtitle_files: Iterable[TorrentFile],
) -> TorrentFile | None:
    """First subtitle belonging to *video_file*, or None."""
    video_base = get_base_filename(video_file.path)
    for subtitle in subtitle_files:
        if _subtitle_matches(video_base, subtitle):
            return subtitle
    return None


def group_subtitles_with_videos(
    video_files: Iterable[TorrentFile],
    subtitle_files: Iterable[TorrentFile],
) -> dict[int, list[int]]:
    """
    Map every video file ID to the IDs of its subtitles.

    Subtitle IDs keep the order of *subtitle_files*; videos without
    subtitles map to an empty list.
    """
    subtitles = list(subtitle_files)
    subtitle_map: dict[int, list[int]] = {}
    for video in video_files:
        video_base = get_base_filename(video.path)
        subtitle_map[video.id] = [
            sub.id for sub in subtitles if _subtitle_matches(video_base, sub)
        ]
    return subtitle_map


match_subtitles = group_subtitles_with_videos


def get_files_with_subtitle_info(
    video_files: list[TorrentFile],
    subtitle_files: list[TorrentFile],
) -> list[FileWithSubtitleInfo]:
    """Video files augmented with their subtitle IDs."""
    subtitle_map = group_subtitles_with_videos(video_files, subtitle_files)
    return [
        FileWithSubtitleInfo(
            id=video.id,
            path=video.path,
            bytes=video.bytes,
            selected=video.selected,
            subtitle_file_ids=subtitle_map.get(video.id, []),
        )
        for video in video_files
    ]


# ------------------------------------------------------------------
# Boundary validation
# ------------------------------------------------------------------

def validate_torrent_files(files: Iterable[TorrentFile]) -> list[TorrentFile]:
    """
    Reject malformed listing entries before they reach the classifier.

    Raises:
        ValueError: If an entry has a negative id or size, or a path that
            does not start with '/'
    """
    validated = []
    for file in files:
        if file.id < 0:
            raise ValueError(f"Invalid file id {file.id} for {file.path!r}")
        if not file.path.startswith('/'):
            raise ValueError(f"File path must start with '/': {file.path!r}")
        if file.bytes < 0:
            raise ValueError(f"Invalid size {file.bytes} for {file.path!r}")
        validated.append(file)
    return validated
