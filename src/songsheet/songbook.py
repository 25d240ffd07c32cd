import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from .config import Config
from .latex import LatexFormatter
from .models import Song
from .registry import get_parser

logger = logging.getLogger(__name__)


class Compiler(Protocol):
    def compile(self, tex_path: Path) -> int: ...

    def clean(self) -> int: ...


def load_songs(config: Config) -> list[Song]:
    """Parse the configured source and drop excluded titles."""
    parser = get_parser(config.source_format, on_song_error=config.on_song_error)
    logger.info("Reading songs from %s.", config.source_path)
    songs = parser.load(config.source_path)
    return exclude_songs(songs, config.exclude)


def exclude_songs(songs: Iterable[Song], titles: Iterable[str]) -> list[Song]:
    """Return *songs* without those titled in *titles*, keeping their order."""
    excluded = set(titles)
    kept = []
    for song in songs:
        if song.title in excluded:
            logger.info("Excluding %s.", song.title)
            continue
        kept.append(song)
    return kept


def build_songbook(
    config: Config, compiler: Compiler | None = None, compile_pdf: bool = True
) -> Path:
    """Generate the ``.tex`` file for *config* and, optionally, compile it.

    After a successful compile the auxiliary files are cleaned and the
    ``.tex`` file is removed unless ``keep_tex_file`` is set.  A ``.tex``
    file left behind by an error is incomplete.

    Returns the path of the ``.tex`` file.
    """
    songs = load_songs(config)
    logger.info("Rendering %d songs.", len(songs))
    LatexFormatter(config.template).write_file(songs, config.tex_file)

    if not compile_pdf:
        return config.tex_file

    compiler = compiler or config.compiler()
    compiler.compile(config.tex_file)
    compiler.clean()

    if not config.keep_tex_file:
        logger.debug("Removing %s.", config.tex_file)
        config.tex_file.unlink(missing_ok=True)
    return config.tex_file
