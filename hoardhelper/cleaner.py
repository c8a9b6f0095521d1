"""Title cleaning and filename sanitisation.

Two layers live here:

``sanitize_safe``
    Whitelist scrubber.  Everything that is not ``[A-Za-z0-9 .-_()]`` is
    dropped and runs of dots are collapsed, so the result can never act
    as a path (no separators, no ``..``, no control bytes).

``clean_series_name``
    Removes scene-release noise (resolution, source, codecs, audio,
    edition tags, hashes, release groups) from the title part of a
    filename and finishes with ``sanitize_safe``.
"""
import logging
import re

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Sanitiser
# ---------------------------------------------------------------------------

_UNSAFE_CHARS = re.compile(r'[^a-zA-Z0-9 .\-_()]')
_DOT_RUN = re.compile(r'\.{2,}')


def sanitize_safe(value: str) -> str:
    """Strip *value* down to characters that are safe in a file name.

    Never fails.  The output never contains ``..``, ``/``, ``\\`` or
    any character outside the whitelist.
    """
    safe = _UNSAFE_CHARS.sub('', value)
    safe = _DOT_RUN.sub('.', safe)
    return safe.strip()


# ---------------------------------------------------------------------------
# Pattern groups
# ---------------------------------------------------------------------------

# Bracketed content  [anything]
_BRACKETS = r'\[.*?\]'

# Resolution / quality
_RESOLUTION = r'\b(?:1080[pi]|720[pi]|480[pi]|2160[pi]|4k|8k)\b'

# Source / rip type and streaming services
_SOURCE = (
    r'\b(?:WEB-?DL|BluRay|HDTV|BD|DVD(?:Rip)?|CAM(?:Rip)?|TS|TC|WEBRip'
    r'|DSNP|Netflix)\b'
)

# Video codec
_CODEC = r'\b(?:x264|x265|HEVC|H\.?264|H\.?265|AVC|VC-?1)\b'

# Audio codec
_AUDIO = (
    r'\b(?:AAC[0-9.]*|DTS-?HD?|AC3|EAC3|DDP[0-9.]*|TrueHD|Atmos|FLAC'
    r'|MP3|Opus|Vorbis)\b'
)

# Audio channels
_CHANNELS = r'\b(?:[257]\.[01]|Stereo|Dual-Audio)\b'

# Quality / edition tags
_RELEASE = (
    r'\b(?:HDR(?:10)?|10bit|REMUX|PROPER|REPACK|EXTENDED|UNRATED'
    r'|DIRECTORS\s+CUT|MULTI)\b'
)

# CRC / release hashes, e.g. [A1B2C3D4] after the brackets are gone
_HASH = r'\b[a-f0-9]{8}\b'

# Applied in order while the dots are still intact, so tags such as
# "AAC5.1" or "H.264" are matched as a unit.
_ALL_NOISE = [
    re.compile(pattern, re.IGNORECASE | re.ASCII)
    for pattern in (
        _RESOLUTION,
        _SOURCE,
        _CODEC,
        _AUDIO,
        _CHANNELS,
        _RELEASE,
        _HASH,
    )
]

# Separators and characters that are illegal in file names; parentheses
# are kept because movie years are usually written as "(2010)".
_SEPARATORS = r'[._\\:*?"<>|]'

# Trailing release group after dash  (e.g.  " -SPARKS")
_TRAILING_GROUP = r'\s+-[a-zA-Z0-9]+$'


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def remove_noise(name: str) -> str:
    """Blank out every noise tag in *name* (separators untouched)."""
    for pattern in _ALL_NOISE:
        name = pattern.sub(' ', name)
    return name


def clean_series_name(raw_name: str) -> str:
    """Turn the title part of a release name into a presentable title.

    >>> clean_series_name("Game.of.Thrones")
    'Game of Thrones'
    >>> clean_series_name("Avatar.2009.EXTENDED.1080p.BluRay.x264-[YTS.MX]")
    'Avatar 2009'
    """
    name = re.sub(_BRACKETS, ' ', raw_name)
    name = remove_noise(name)
    name = re.sub(_SEPARATORS, ' ', name)

    # Applied twice for the odd "Title -GRP -GRP2" double suffix.
    name = re.sub(_TRAILING_GROUP, '', name)
    name = re.sub(_TRAILING_GROUP, '', name)

    name = re.sub(r'\s+', ' ', name).strip()
    name = re.sub(r'-+$', '', name)

    cleaned = sanitize_safe(name)
    log.debug("Cleaned title %r -> %r", raw_name, cleaned)
    return cleaned
