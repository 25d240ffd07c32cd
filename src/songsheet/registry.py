import re

from .exceptions import UnsupportedFormatError
from .parsers.base import SourceParser
from .parsers.plain_text import PlainTextParser
from .parsers.video_psalm import VideoPsalmParser

_PARSERS: list[type[SourceParser]] = [
    VideoPsalmParser,
    PlainTextParser,
]


def normalize_format_name(name: str) -> str:
    """Lowercase *name* and drop spaces, hyphens and underscores.

    "Video Psalm", "video-psalm" and "VIDEO_PSALM" all become "videopsalm".
    """
    return re.sub(r"[\s_-]", "", name.lower())


def get_parser(name: str, on_song_error: str = "abort") -> SourceParser:
    """Return an instantiated parser for the given source format name.

    Raises UnsupportedFormatError if no parser matches.
    """
    format_name = normalize_format_name(name)
    for cls in _PARSERS:
        if cls.can_handle(format_name):
            return cls(on_song_error=on_song_error)
    raise UnsupportedFormatError(name)
