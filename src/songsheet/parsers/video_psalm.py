"""Parser for VideoPsalm JSON song-book exports.

Document structure (field names are case-sensitive)::

    {
      "Songs": [
        {
          "Text": "Amazing Grace",          → Song.title
          "Verses": [
            {"Text": "Amazing grace ..."},  → verse (no tag)
            {"Text": "...", "Tag": 1},      → chorus
            {"Text": "...", "Tag": 3},      → bridge
            {"Text": "...", "Tag": 6}       → repeat marker, ignored
          ]
        }
      ]
    }

Other fields (``Author``, ``Copyright``, ...) are ignored.  VideoPsalm
writes its exports with a leading byte-order mark, which is stripped before
decoding.
"""

import json
import logging

from ..exceptions import ParseError, SongError
from ..models import Song
from .base import SourceParser
from .utils import StanzaClass, StanzaCollector, classify_numeric_tag, strip_bom

logger = logging.getLogger(__name__)


class VideoPsalmParser(SourceParser):
    """Parser for VideoPsalm ``.json`` song books."""

    format_names = ("videopsalm", "json")

    def parse(self, text: str, source: str = "<input>") -> list[Song]:
        logger.debug("Parsing %s as VideoPsalm JSON.", source)
        try:
            data = json.loads(strip_bom(text))
        except json.JSONDecodeError as exc:
            raise ParseError(source, f"invalid JSON: {exc}") from exc

        records = _song_records(data, source)

        songs: list[Song] = []
        for index, record in enumerate(records):
            title, stanzas = _unpack_song(record, index, source)
            try:
                songs.append(_build_song(title, stanzas))
            except SongError as exc:
                if self.on_song_error == "abort":
                    raise
                logger.warning("Skipping %s: %s", title, exc)

        logger.debug("Parsed %d songs from %s.", len(songs), source)
        return songs


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _song_records(data: object, source: str) -> list:
    if not isinstance(data, dict) or "Songs" not in data:
        raise ParseError(source, 'expected an object with a "Songs" field')
    records = data["Songs"]
    if not isinstance(records, list):
        raise ParseError(source, '"Songs" must be a list')
    return records


def _unpack_song(
    record: object, index: int, source: str
) -> tuple[str, list[tuple[str, int | None]]]:
    """Check one song record's shape and return ``(title, [(text, tag), ...])``."""
    where = f"song {index}"
    if not isinstance(record, dict):
        raise ParseError(source, f"{where} is not an object")

    title = record.get("Text")
    if not isinstance(title, str) or not title:
        raise ParseError(source, f'{where} has no "Text" title')

    raw_stanzas = record.get("Verses")
    if not isinstance(raw_stanzas, list):
        raise ParseError(source, f'"{title}" has no "Verses" list')

    stanzas = []
    for n, stanza in enumerate(raw_stanzas):
        if not isinstance(stanza, dict) or not isinstance(stanza.get("Text"), str):
            raise ParseError(source, f'stanza {n} of "{title}" has no "Text"')
        tag = stanza.get("Tag")
        # bool is a subclass of int, but true/false is not a valid tag
        if tag is not None and (isinstance(tag, bool) or not isinstance(tag, int)):
            raise ParseError(source, f'stanza {n} of "{title}" has a non-integer "Tag"')
        stanzas.append((stanza["Text"], tag))
    return title, stanzas


def _build_song(title: str, stanzas: list[tuple[str, int | None]]) -> Song:
    logger.debug("Creating song %s.", title)
    collector = StanzaCollector(title)
    for text, tag in stanzas:
        cls = classify_numeric_tag(tag)
        if cls is StanzaClass.REPEAT:
            logger.info("Repeat stanza in %s: ignoring.\nRepeating: %s", title, text)
            continue
        if cls is StanzaClass.UNKNOWN:
            logger.warning("Unknown tag type %s in %s.", tag, title)
            continue
        collector.add(cls.kind, text)
    return collector.build()
