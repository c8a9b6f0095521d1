"""Formatter module for generating destination paths."""
import logging
import posixpath
import re
from pathlib import Path
from typing import Mapping

from .models import ParseResult

log = logging.getLogger(__name__)

# Local export directory used when no remote store is configured.
EXPORT_DIR = Path("export")

_DOT_RUN = re.compile(r'\.{2,}')
_SLASH_RUN = re.compile(r'/{2,}')


def format_episode_code(formatted_season: str | None, formatted_episode: str | None) -> str:
    """
    Format the episode code from already padded numbers.

    Args:
        formatted_season: Zero-padded season ("01")
        formatted_episode: Zero-padded episode ("04")

    Returns:
        Episode code (e.g., 'S01E04'); missing parts default to '00'
    """
    return f"S{formatted_season or '00'}E{formatted_episode or '00'}"


def generate_new_path(parsed: ParseResult | None) -> str | None:
    """
    Build the library-relative path for a parsed file.

    Layout:
        movie: {series}/{series}{ext}
        tv:    {series}/Season {SS}/{series} - S{SS}E{EE}{ext}

    The result always uses forward slashes since it addresses a remote
    WebDAV store, not the local filesystem.

    Args:
        parsed: Parsed file information

    Returns:
        Relative path, or None when *parsed* is None
    """
    if parsed is None:
        return None

    series = parsed.series
    if parsed.media_type == "movie":
        relative = posixpath.join(series, f"{series}{parsed.ext}")
    else:
        season = parsed.formatted_season or "00"
        code = format_episode_code(parsed.formatted_season, parsed.formatted_episode)
        relative = posixpath.join(
            series,
            f"Season {season}",
            f"{series} - {code}{parsed.ext}",
        )

    relative = relative.replace("\\", "/")
    # A title ending in "." followed by the extension must not form "..".
    relative = _DOT_RUN.sub(".", relative)
    return _SLASH_RUN.sub("/", relative)


def target_base_for(parsed: ParseResult, base_overrides: Mapping[str, str] | None) -> str:
    """Return the configured root folder for the file's media type ('' if none)."""
    if not base_overrides:
        return ""
    key = "tv" if parsed.media_type == "tv" else "movie"
    return base_overrides.get(key) or ""


def prepend_target_base(
    parsed: ParseResult,
    relative_path: str | None,
    base_overrides: Mapping[str, str] | None,
) -> str | None:
    """
    Prefix a generated path with the user's root folder for its media type.

    The root comes from configuration, so every ``..`` is removed from it
    before joining.  Exactly one ``/`` separates root and relative part.

    Args:
        parsed: Parsed file information (selects the tv or movie root)
        relative_path: Output of generate_new_path
        base_overrides: Mapping with optional 'tv' and 'movie' roots

    Returns:
        Joined path, *relative_path* unchanged when no root is set, or
        None when *relative_path* is None
    """
    if not relative_path:
        return relative_path

    target_base = target_base_for(parsed, base_overrides)
    if not target_base:
        return relative_path

    safe_base = target_base.replace("\\", "/").replace("..", "")
    base = safe_base.rstrip("/")
    rel = relative_path.lstrip("/")
    joined = f"{base}/{rel}"
    return _SLASH_RUN.sub("/", joined)


def build_path(
    parsed: ParseResult | None,
    base_overrides: Mapping[str, str] | None = None,
) -> str | None:
    """Generate the destination path for *parsed* including its root folder."""
    if parsed is None:
        return None
    proposed = prepend_target_base(parsed, generate_new_path(parsed), base_overrides)
    log.debug("Proposed path for %r: %r", parsed.original_name, proposed)
    return proposed


def export_path(parsed: ParseResult | None, export_dir: Path | None = None) -> Path | None:
    """
    Map a parsed file into a local export directory.

    Args:
        parsed: Parsed file information
        export_dir: Local root (defaults to ./export)

    Returns:
        Absolute local destination, or None when *parsed* is None
    """
    relative = generate_new_path(parsed)
    if relative is None:
        return None
    root = (export_dir or EXPORT_DIR).resolve()
    return root.joinpath(*relative.split("/"))
