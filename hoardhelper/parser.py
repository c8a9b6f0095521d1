"""Parser module for extracting series/episode information from file names."""
import logging
import os
import re
from typing import Callable

from .cleaner import clean_series_name
from .models import ParseResult

log = logging.getLogger(__name__)

# A handler turns a successful match into (raw title, season, episode).
EpisodeHandler = Callable[[re.Match], tuple[str, int, int]]


def _season_episode(match: re.Match) -> tuple[str, int, int]:
    return match.group(1), int(match.group(2), 10), int(match.group(3), 10)


def _absolute_episode(match: re.Match) -> tuple[str, int, int]:
    # Fansub releases number episodes without a season.
    return match.group(1), 1, int(match.group(2), 10)


# Episode patterns, evaluated in order; the first match wins.  The loose
# anime pattern must come last so that years or resolutions are never
# read as episode numbers when a stricter pattern applies.
EPISODE_PATTERNS: list[tuple[re.Pattern, EpisodeHandler]] = [
    # Show.Name.S01E04 / Show Name s1e4
    (re.compile(r'^(.*?)[.\s_]+S(\d+)E(\d+)', re.IGNORECASE | re.ASCII),
     _season_episode),
    # Show.Name.1x04
    (re.compile(r'^(.*?)[.\s_]+(\d+)x(\d+)', re.IGNORECASE | re.ASCII),
     _season_episode),
    # [Group] Show Name - 01 [1080p]
    (re.compile(r'^(?:\[.*?\]\s*)?(.*?)[\s_]+-\s+(\d+)(?:[\s_]+.*)?$', re.ASCII),
     _absolute_episode),
]


def pad(number: int) -> str:
    """Zero-pad to two digits without ever truncating (3 -> '03', 123 -> '123')."""
    return f"{number:02d}"


def split_filename(filepath: str) -> tuple[str, str, str]:
    """Return ``(basename, stem, extension)`` for *filepath*.

    Both ``/`` and ``\\`` are treated as directory separators so that
    Windows paths parse the same way on every platform.
    """
    filename = re.split(r'[\\/]', filepath)[-1]
    stem, ext = os.path.splitext(filename)
    return filename, stem, ext


def parse_filename(filepath: str) -> ParseResult:
    """
    Parse a release filename into a ParseResult.

    Never raises.  Names without a recognised episode pattern are
    classified as movies and the whole stem becomes the title.

    Args:
        filepath: Full path (or bare name) of the file

    Returns:
        ParseResult for the file
    """
    filename, stem, ext = split_filename(filepath)

    for pattern, handler in EPISODE_PATTERNS:
        match = pattern.match(stem)
        if not match:
            continue
        raw_title, season, episode = handler(match)
        result = ParseResult(
            media_type="tv",
            series=clean_series_name(raw_title),
            ext=ext,
            original_name=filename,
            full_path=filepath,
            season=season,
            episode=episode,
            formatted_season=pad(season),
            formatted_episode=pad(episode),
        )
        log.debug(
            "Parsed %r as tv: %r S%sE%s",
            filename, result.series, result.formatted_season, result.formatted_episode,
        )
        return result

    result = ParseResult(
        media_type="movie",
        series=clean_series_name(stem),
        ext=ext,
        original_name=filename,
        full_path=filepath,
    )
    log.debug("Parsed %r as movie: %r", filename, result.series)
    return result


# Name used by callers that treat the core as a service.
parse = parse_filename
