"""Parser for plain-text song files, one song per file.

File layout::

    Amazing Grace                ← title, followed by a blank line

    Amazing grace, how sweet     ← untagged stanza: verse
    the sound

    #c                           ← tag line: ``#c`` chorus, ``#b`` bridge
    Chorus text

    Second verse

Stanzas are separated by blank lines.  A tag line must be exactly ``#``, one
letter, and a line break; any other letter is an error.
"""

import logging
from pathlib import Path

from ..exceptions import (
    InvalidTagError,
    InvalidTitleError,
    ParseError,
    SongError,
    SourceReadError,
)
from ..models import Song, StanzaKind
from .base import SourceParser
from .utils import StanzaClass, StanzaCollector, classify_letter_tag, read_source, strip_bom

logger = logging.getLogger(__name__)

TAG_START = "#"
LINE_BREAK = "\n"
SEPARATOR = "\n\n"


class PlainTextParser(SourceParser):
    """Parser for plain-text song files.

    :meth:`load` accepts either a single file or a directory of song files.
    In a directory, ``on_song_error="skip"`` skips files that fail to parse.
    """

    format_names = ("plaintext", "text", "txt")

    def parse(self, text: str, source: str = "<input>") -> list[Song]:
        logger.debug("Parsing %s as plain text.", source)
        text = strip_bom(text).replace("\r\n", "\n")

        title, rest = _split_title(text, source)
        collector = StanzaCollector(title)

        while rest.strip():
            kind, rest = _stanza_kind(rest, source)
            body, rest = _split_block(rest)
            collector.add(kind, body)

        # The order comes from the stanzas just added, so this cannot fail
        # for anything read from a file.
        return [collector.build()]

    def load(self, path: Path) -> list[Song]:
        if not path.is_dir():
            return super().load(path)

        songs: list[Song] = []
        for file_path in _song_files(path):
            try:
                songs.extend(self.parse(read_source(file_path), str(file_path)))
            except (ParseError, SongError) as exc:
                if self.on_song_error == "abort":
                    raise
                logger.warning("Skipping %s: %s", file_path, exc)
        logger.debug("Parsed %d songs from %s.", len(songs), path)
        return songs


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _split_title(text: str, source: str) -> tuple[str, str]:
    """Return ``(title, rest)``; the title line must be followed by a blank line."""
    end = text.find(LINE_BREAK)
    if end <= 0 or not text.startswith(SEPARATOR, end):
        raise InvalidTitleError(source)
    return text[:end], text[end + len(SEPARATOR):]


def _stanza_kind(text: str, source: str) -> tuple[StanzaKind, str]:
    """Consume an optional ``#x`` tag line and return the stanza's kind.

    Untagged stanzas are verses and nothing is consumed.
    """
    if not text.startswith(TAG_START):
        return StanzaKind.VERSE, text

    letter = text[1:2]
    if text[2:3] != LINE_BREAK:
        raise InvalidTagError(source, text[1:].split(LINE_BREAK, 1)[0])

    cls = classify_letter_tag(letter)
    if cls is StanzaClass.UNKNOWN:
        raise InvalidTagError(source, letter)
    return cls.kind, text[3:]


def _split_block(text: str) -> tuple[str, str]:
    """Return ``(stanza, rest)``, splitting at the next blank line."""
    body, found, rest = text.partition(SEPARATOR)
    if not found:
        return text.rstrip(LINE_BREAK), ""
    return body.rstrip(LINE_BREAK), rest


def _song_files(directory: Path) -> list[Path]:
    """Regular, non-hidden files in *directory*, sorted by name."""
    try:
        entries = list(directory.iterdir())
    except OSError as exc:
        raise SourceReadError(str(directory), str(exc)) from exc
    return sorted(p for p in entries if p.is_file() and not p.name.startswith("."))
