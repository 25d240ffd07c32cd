import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

from .exceptions import (
    NoBridgeError,
    NoChorusError,
    NoOrderError,
    NotEnoughVersesError,
    VerseOutOfBoundsError,
)

logger = logging.getLogger(__name__)


class StanzaKind(Enum):
    """Performance role of a stanza. The value is its letter in an order string."""

    VERSE = "v"
    CHORUS = "c"
    BRIDGE = "b"


_KINDS_BY_LETTER = {kind.value: kind for kind in StanzaKind}


@dataclass(frozen=True)
class Song:
    """A validated song, ready to be rendered.

    ``order`` is the performance sequence: each ``v`` consumes the next entry
    of ``verses``, each ``c``/``b`` repeats the single chorus/bridge.
    Instances are only created through :class:`SongBuilder`.
    """

    title: str
    order: str
    verses: tuple[str, ...] = ()
    chorus: str | None = None
    bridge: str | None = None

    @staticmethod
    def builder(title: str) -> "SongBuilder":
        return SongBuilder(title)

    def stanzas(self, strict: bool = True) -> Iterator[tuple[StanzaKind, str]]:
        """Yield ``(kind, text)`` pairs in performance order.

        Raises :class:`~songsheet.exceptions.VerseOutOfBoundsError` when the
        order asks for more verses than the song has.  With ``strict=False``
        the missing verse is logged and skipped instead.
        """
        cursor = 0
        for letter in self.order:
            kind = _KINDS_BY_LETTER.get(letter)
            if kind is None:
                continue
            if kind is StanzaKind.VERSE:
                if cursor >= len(self.verses):
                    if strict:
                        raise VerseOutOfBoundsError(self.title, cursor, len(self.verses))
                    logger.warning(
                        "Verse %d missing in %s: skipping.", cursor, self.title
                    )
                    cursor += 1
                    continue
                yield kind, self.verses[cursor]
                cursor += 1
            elif kind is StanzaKind.CHORUS:
                if self.chorus is not None:
                    yield kind, self.chorus
            elif self.bridge is not None:
                yield kind, self.bridge


@dataclass
class SongBuilder:
    """Partially assembled song.  Nothing is validated until :meth:`build`."""

    title: str
    verses: list[str] = field(default_factory=list)
    chorus: str | None = None
    bridge: str | None = None
    order: str | None = None

    def add_verse(self, verse: str) -> "SongBuilder":
        self.verses.append(verse)
        return self

    def set_chorus(self, chorus: str) -> "SongBuilder":
        if self.chorus is not None:
            logger.debug("Replacing chorus of %s.", self.title)
        self.chorus = chorus
        return self

    def set_bridge(self, bridge: str) -> "SongBuilder":
        if self.bridge is not None:
            logger.debug("Replacing bridge of %s.", self.title)
        self.bridge = bridge
        return self

    def set_order(self, order: str) -> "SongBuilder":
        self.order = order
        return self

    def add(self, kind: StanzaKind, text: str) -> "SongBuilder":
        """Route *text* to the setter matching *kind*."""
        if kind is StanzaKind.VERSE:
            return self.add_verse(text)
        if kind is StanzaKind.CHORUS:
            return self.set_chorus(text)
        return self.set_bridge(text)

    def build(self) -> Song:
        """Validate the collected fields and return an immutable :class:`Song`.

        Raises a :class:`~songsheet.exceptions.SongError` subclass naming the
        song when the order cannot be satisfied.  Having more ``v`` slots than
        verses is allowed here; it only fails when rendered.
        """
        if self.order is None:
            raise NoOrderError(self.title)
        if StanzaKind.CHORUS.value in self.order and self.chorus is None:
            raise NoChorusError(self.title)
        if StanzaKind.BRIDGE.value in self.order and self.bridge is None:
            raise NoBridgeError(self.title)

        expected = self.order.count(StanzaKind.VERSE.value)
        if expected < len(self.verses):
            raise NotEnoughVersesError(self.title, expected, len(self.verses))

        return Song(
            title=self.title,
            order=self.order,
            verses=tuple(self.verses),
            chorus=self.chorus,
            bridge=self.bridge,
        )
