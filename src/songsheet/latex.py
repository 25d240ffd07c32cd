r"""LaTeX song-sheet generator.

Renders a list of :class:`~songsheet.models.Song` to a complete LaTeX
document for ``latexmk``.

Stanza → LaTeX construct mapping
--------------------------------

+---------+--------------------------------+-------------------------------+
| Stanza  | Emitted block                  | Applied to each line          |
+=========+================================+===============================+
| verse   | ``\verse {line}... \end``      | ``verse_format`` (none)       |
+---------+--------------------------------+-------------------------------+
| chorus  | ``\chorus {line}... \end``     | ``chorus_format``             |
+---------+--------------------------------+-------------------------------+
| bridge  | ``\bridge {line}... \end``     | ``bridge_format``             |
+---------+--------------------------------+-------------------------------+

Each construct swallows one brace group per line until it meets ``\end``, so
every lyric line is typeset as one paragraph.  Songs are wrapped in the
``song`` environment, which bumps the ``songcount`` counter and adds the
title to the index.

Usage::

    from songsheet.latex import LatexFormatter
    formatter = LatexFormatter()
    formatter.write_file(songs, Path("songsheet.tex"))
"""

import io
import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from .exceptions import LatexWriteError, PackageError
from .models import Song, StanzaKind

logger = logging.getLogger(__name__)

MISSING_VERSE_CHOICES = ("error", "skip")

# Characters with special meaning to LaTeX that may appear in lyrics.
_SPECIAL_CHARS_RE = re.compile(r"([%${}#&])")

_CONSTRUCTS = {
    StanzaKind.VERSE: r"\verse",
    StanzaKind.CHORUS: r"\chorus",
    StanzaKind.BRIDGE: r"\bridge",
}


def escape_latex(text: str) -> str:
    r"""Prefix each of ``% $ { } # &`` with a backslash.

    Single pass: escaping already-escaped text escapes it again.
    """
    return _SPECIAL_CHARS_RE.sub(r"\\\1", text)


# ---------------------------------------------------------------------------
# Template
# ---------------------------------------------------------------------------


@dataclass
class Package:
    """A LaTeX package with optional options."""

    name: str
    options: list[str] | None = None

    @classmethod
    def from_args(cls, args: list[str]) -> "Package":
        """Build a package from ``[name, option, ...]``."""
        if not args:
            raise PackageError("must provide package name")
        name, *options = args
        return cls(name=name, options=options or None)


def default_packages() -> list[Package]:
    return [
        Package.from_args(["geometry", "left=1cm", "right=1cm", "top=1cm", "bottom=2cm"]),
        Package.from_args(["hyperref", "hyperindex"]),
        Package("makeidx"),
        Package("pdfpages"),
        Package("fancyhdr"),
        Package("graphicx"),
        Package("adjustbox"),
        Package("multicol"),
        Package("totcount"),
        Package("xcolor"),
    ]


@dataclass
class DocumentTemplate:
    """Everything about the generated document that is not song content."""

    doc_class: str = "article"
    doc_options: list[str] = field(default_factory=lambda: ["a4paper", "twoside", "titlepage"])
    version: tuple[int, int, int] = (1, 0, 0)
    packages: list[Package] = field(default_factory=default_packages)
    verse_format: str = ""
    chorus_format: str = r"\quad\textit"
    bridge_format: str = r"\textit"
    cover: str = r"\includepdf{./titleimage.jpg}"
    preamble_extra: str | None = None
    missing_verse: str = "error"  # "error" or "skip"

    def __post_init__(self):
        if self.missing_verse not in MISSING_VERSE_CHOICES:
            raise ValueError(f"missing_verse must be one of {MISSING_VERSE_CHOICES}")


# ---------------------------------------------------------------------------
# Formatter
# ---------------------------------------------------------------------------


class LatexFormatter:
    """Render songs to a LaTeX document."""

    def __init__(self, template: DocumentTemplate | None = None):
        self.template = template or DocumentTemplate()

    def write(self, songs: Iterable[Song], stream: TextIO) -> None:
        """Write the whole document for *songs* to *stream*, flushing once at the end.

        Raises :class:`~songsheet.exceptions.VerseOutOfBoundsError` if a
        song's order runs past its verses (unless the template's
        ``missing_verse`` is ``"skip"``).  Stream errors propagate as-is.
        """
        for line in self._lines(songs):
            stream.write(line)
            stream.write("\n")
        stream.flush()

    def render(self, songs: Iterable[Song]) -> str:
        """Return the document for *songs* as a string."""
        buf = io.StringIO()
        self.write(songs, buf)
        return buf.getvalue()

    def write_file(self, songs: Iterable[Song], path: Path) -> None:
        """Write the document to *path* (UTF-8).

        OS-level failures are raised as
        :class:`~songsheet.exceptions.LatexWriteError`.
        """
        logger.info("Writing %s.", path)
        try:
            with open(path, "w", encoding="utf-8", newline="\n") as stream:
                self.write(songs, stream)
        except OSError as exc:
            raise LatexWriteError(str(path), str(exc)) from exc

    def _lines(self, songs: Iterable[Song]) -> Iterator[str]:
        yield from _preamble(self.template)
        yield from _document_start(self.template)
        strict = self.template.missing_verse == "error"
        count = 0
        for song in songs:
            yield ""
            yield from _render_song(song, strict)
            count += 1
        yield ""
        yield r"\end{multicols}"
        yield r"\end{document}"
        logger.debug("Rendered %d songs.", count)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _preamble(t: DocumentTemplate) -> Iterator[str]:
    yield rf"\documentclass[{', '.join(t.doc_options)}]{{{t.doc_class}}}"

    yield ""
    major, minor, patch = t.version
    yield rf"\def\ssver{{{major}.{minor}.{patch}}}"

    yield ""
    yield "% ====   Packages   ===="
    for p in t.packages:
        opts = f"[{', '.join(p.options)}]" if p.options else ""
        yield rf"\usepackage{opts}{{{p.name}}}"

    yield ""
    yield "% ====   Index   ===="
    yield r"\makeindex"

    yield ""
    yield "% ====   Counters   ===="
    yield r"\newtotcounter{songcount}"
    yield r"\newtotcounter{psalmcount}"
    yield r"\definecolor{title dark}{HTML}{7E73A7}"

    yield ""
    yield "% ====   Footer   ===="
    yield r"\pagestyle{fancy}"
    yield r"\fancyhf{}"
    yield r"\cfoot{{\small\thepage} \\ v{\ssver}}"
    yield r"\renewcommand{\headrulewidth}{0pt}"

    yield ""
    yield r"\makeatletter"
    yield from _stanza_construct("verse", t.verse_format, redefine=True, group=False)
    yield from _stanza_construct("chorus", t.chorus_format)
    yield from _stanza_construct("bridge", t.bridge_format)
    yield ""
    yield r"\makeatother"

    yield ""
    yield "% ====   Song   ===="
    yield r"\newenvironment{song}[1]%"
    yield r"{%"
    yield (
        r"    \begin{minipage}[t]{0.94\columnwidth}"
        r"{\stepcounter{songcount}\textbf{\large #1}\index{#1}}%"
    )
    yield r"        \par\vspace{2pt}"
    yield r"}%"
    yield r"{%"
    yield r"    \end{minipage}%"
    yield r"    \vspace{2em}%"
    yield r"}"

    yield ""
    yield "% ====   Psalm   ===="
    yield r"\newenvironment{psalm}[2]%"
    yield r"{%"
    yield r"    \begin{minipage}[t]{0.94\columnwidth}%"
    yield (
        r"        \begin{center}"
        r"{\stepcounter{psalmcount}\textbf{\large #1}\index{#1}{\normalsize #2}}%"
    )
    yield r"            \par\vspace{2pt}"
    yield r"}%"
    yield r"{%"
    yield r"        \end{center}%"
    yield r"    \end{minipage}%"
    yield r"    \vspace{2em}%"
    yield r"}%"

    yield ""
    yield "% ====   Utility Commands   ===="
    yield r"\newcommand{\extra}[1]{\textit{\normalsize (#1)}}"
    yield r"\renewcommand{\sp}{\textit{\normalsize (Sing Psalms)}}"
    yield r"\newcommand{\tr}{\textit{\normalsize (Scottish Psalter)}}"
    yield r"\newcommand{\LORD}{\textsc{Lord}}"
    yield r"\newcommand{\cp}[1]{{\tiny\ttfamily#1}}"

    if t.preamble_extra is not None:
        yield ""
        yield "% ====   Rest of Preamble   ===="
        yield t.preamble_extra


def _stanza_construct(
    name: str, fmt: str, redefine: bool = False, group: bool = True
) -> Iterator[str]:
    r"""Define ``\<name>``: apply *fmt* to each following ``{line}`` until ``\end``.

    LaTeX already has a ``\verse`` environment, hence *redefine*.  The verse
    format is applied to the bare argument, chorus/bridge formats to a group.
    """
    body = f"{fmt}{{#1}}" if group else f"{fmt}#1"
    define = r"\renewcommand" if redefine else r"\newcommand"
    yield ""
    yield f"% ====   {name.capitalize()}   ===="
    yield rf"{define}{{\{name}}}{{\@{name}i}}"
    yield (
        rf"\newcommand{{\@{name}i}}"
        rf"{{\@ifnextchar\end{{\@{name}end}}{{\@{name}ii}}}} % chktex 10"
    )
    yield rf"\newcommand{{\@{name}ii}}[1]{{{body}\par\@{name}i}}"
    yield rf"\newcommand{{\@{name}end}}[1]{{\vskip1em}}"


def _document_start(t: DocumentTemplate) -> Iterator[str]:
    yield ""
    yield "% ====   Document   ===="
    yield r"\begin{document}"
    yield r"\sffamily"
    yield ""
    yield r"\begin{titlepage}"
    yield t.cover
    yield r"\end{titlepage}"
    yield ""
    yield r"\setcounter{page}{2}  % Make title page, page 1"
    yield r"\printindex"
    yield r"\begin{multicols}{2}"
    yield r"\raggedcolumns{}"


def _render_song(song: Song, strict: bool) -> Iterator[str]:
    title = escape_latex(song.title)
    yield f"% ====   {title}   ===="
    yield rf"\begin{{song}}{{{title}}}"
    for kind, text in song.stanzas(strict=strict):
        yield f"    {_CONSTRUCTS[kind]}"
        for line in text.splitlines():
            yield f"        {{{escape_latex(line)}}}"
        yield r"    \end"
    yield r"\end{song}"
