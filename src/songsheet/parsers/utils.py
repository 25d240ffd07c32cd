"""Shared parsing utilities used by both source parsers.

Every parser turns its input into a stream of classified stanzas:

  1. classify_numeric_tag() / classify_letter_tag() — source tag → StanzaClass
  2. StanzaCollector.add()                          — feed the builder, extend the order
  3. StanzaCollector.build()                        — set the order and validate

Stanzas classified as REPEAT or UNKNOWN never reach the collector, so they
leave both the order string and the song's fields untouched.
"""

import logging
from enum import Enum, auto
from pathlib import Path

from ..exceptions import SourceReadError
from ..models import Song, StanzaKind

logger = logging.getLogger(__name__)

BOM = "\ufeff"

# VideoPsalm tag values, from observation of exported song books.
CHORUS_TAG = 1
BRIDGE_TAG = 3
REPEAT_TAG = 6


# ---------------------------------------------------------------------------
# StanzaClass
# ---------------------------------------------------------------------------


class StanzaClass(Enum):
    VERSE = auto()
    CHORUS = auto()
    BRIDGE = auto()
    REPEAT = auto()  # noted repeat marker; text is discarded
    UNKNOWN = auto()  # unrecognised tag

    @property
    def kind(self) -> StanzaKind | None:
        """The :class:`StanzaKind` for this class, or None for skipped stanzas."""
        return _KIND_FOR_CLASS.get(self)


_KIND_FOR_CLASS = {
    StanzaClass.VERSE: StanzaKind.VERSE,
    StanzaClass.CHORUS: StanzaKind.CHORUS,
    StanzaClass.BRIDGE: StanzaKind.BRIDGE,
}

_NUMERIC_TAGS = {
    None: StanzaClass.VERSE,
    CHORUS_TAG: StanzaClass.CHORUS,
    BRIDGE_TAG: StanzaClass.BRIDGE,
    REPEAT_TAG: StanzaClass.REPEAT,
}

_LETTER_TAGS = {
    "c": StanzaClass.CHORUS,
    "b": StanzaClass.BRIDGE,
}


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def classify_numeric_tag(tag: int | None) -> StanzaClass:
    """Classify a VideoPsalm stanza tag.  A missing tag means a verse."""
    return _NUMERIC_TAGS.get(tag, StanzaClass.UNKNOWN)


def classify_letter_tag(letter: str) -> StanzaClass:
    """Classify the letter of a plain-text ``#x`` tag line."""
    return _LETTER_TAGS.get(letter, StanzaClass.UNKNOWN)


# ---------------------------------------------------------------------------
# Order assembly
# ---------------------------------------------------------------------------


class StanzaCollector:
    """Accumulate stanzas for one song, recording their order as they arrive."""

    def __init__(self, title: str):
        self.builder = Song.builder(title)
        self._order: list[str] = []

    @property
    def order(self) -> str:
        return "".join(self._order)

    def add(self, kind: StanzaKind, text: str) -> None:
        self.builder.add(kind, text)
        self._order.append(kind.value)

    def build(self) -> Song:
        return self.builder.set_order(self.order).build()


# ---------------------------------------------------------------------------
# Source text
# ---------------------------------------------------------------------------


def strip_bom(text: str) -> str:
    """Remove a single leading byte-order mark, if present."""
    return text.removeprefix(BOM)


def read_source(path: Path) -> str:
    """Read a song source as UTF-8.

    Raises :class:`~songsheet.exceptions.SourceReadError` on any OS or decoding
    failure, naming the offending path.
    """
    logger.debug("Reading %s.", path)
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceReadError(str(path), str(exc)) from exc
