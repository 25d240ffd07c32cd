from abc import ABC, abstractmethod
from pathlib import Path

from ..models import Song
from .utils import read_source

ON_SONG_ERROR_CHOICES = ("abort", "skip")


class SourceParser(ABC):
    """Abstract base class for all song source parsers.

    ``on_song_error`` decides what happens when one song in a batch is
    invalid: ``"abort"`` re-raises and the whole batch fails, ``"skip"`` logs
    the error and carries on with the next song.
    """

    #: Normalised format names this parser answers to (see registry).
    format_names: tuple[str, ...] = ()

    def __init__(self, on_song_error: str = "abort"):
        if on_song_error not in ON_SONG_ERROR_CHOICES:
            raise ValueError(f"on_song_error must be one of {ON_SONG_ERROR_CHOICES}")
        self.on_song_error = on_song_error

    @classmethod
    def can_handle(cls, format_name: str) -> bool:
        """Return True if this parser handles the normalised *format_name*."""
        return format_name in cls.format_names

    @abstractmethod
    def parse(self, text: str, source: str = "<input>") -> list[Song]:
        """Parse source text and return validated songs in document order.

        *source* names the input in error messages.

        Raises ParseError on malformed input and SongError when a song fails
        validation.
        """

    def load(self, path: Path) -> list[Song]:
        """Convenience method: read + parse."""
        return self.parse(read_source(path), str(path))
