class SongSheetError(Exception):
    """Base exception for songsheet."""


# ---------------------------------------------------------------------------
# Configuration / input
# ---------------------------------------------------------------------------


class ConfigError(SongSheetError):
    """Raised when the configuration file cannot be read or is invalid."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Config error in {path}: {reason}")


class SourceReadError(SongSheetError):
    """Raised when a song source cannot be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f'Could not read "{path}": {reason}')


class UnsupportedFormatError(SongSheetError):
    """Raised when no parser matches the configured source format."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No parser found for source format: {name}")


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class ParseError(SongSheetError):
    """Raised when a song source is structurally malformed."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Parse error for {source}: {reason}")


class InvalidTitleError(ParseError):
    """Raised when a plain-text song has no title separated by a blank line."""

    def __init__(self, source: str):
        super().__init__(
            source, "invalid song title; the title must be separated by a blank line"
        )


class InvalidTagError(ParseError):
    """Raised when a plain-text stanza tag is not recognised."""

    def __init__(self, source: str, tag: str):
        self.tag = tag
        super().__init__(source, f"invalid stanza tag {tag!r}")


# ---------------------------------------------------------------------------
# Song construction
# ---------------------------------------------------------------------------


class SongError(SongSheetError):
    """Raised when a song fails validation at build time."""

    def __init__(self, song_title: str, message: str):
        self.song_title = song_title
        super().__init__(message)


class NoOrderError(SongError):
    def __init__(self, song_title: str):
        super().__init__(song_title, f'"{song_title}" has no order specified.')


class NoChorusError(SongError):
    def __init__(self, song_title: str):
        super().__init__(
            song_title, f'Order calls for a chorus, but none specified for "{song_title}".'
        )


class NoBridgeError(SongError):
    def __init__(self, song_title: str):
        super().__init__(
            song_title, f'Order calls for a bridge, but none specified for "{song_title}".'
        )


class NotEnoughVersesError(SongError):
    def __init__(self, song_title: str, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            song_title,
            f"Order calls for {expected} verses, but {actual} specified for "
            f'"{song_title}".',
        )


# ---------------------------------------------------------------------------
# LaTeX generation / compilation
# ---------------------------------------------------------------------------


class LatexError(SongSheetError):
    """Base exception for LaTeX generation failures."""


class LatexWriteError(LatexError):
    """Raised when the generated document cannot be written."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f'Could not write "{path}": {reason}')


class VerseOutOfBoundsError(LatexError):
    """Raised when a song's order asks for a verse it does not have."""

    def __init__(self, song_title: str, index: int, size: int):
        self.song_title = song_title
        self.index = index
        self.size = size
        super().__init__(
            f'Verse out of bounds in "{song_title}": tried to get verse {index} '
            f"but there are only {size}."
        )


class PackageError(LatexError):
    """Raised when a LaTeX package specification is invalid."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Error adding LaTeX package: {reason}")


class CompileError(SongSheetError):
    """Raised when the external LaTeX toolchain fails."""

    def __init__(self, command: list[str], returncode: int | None, reason: str = ""):
        self.command = command
        self.returncode = returncode
        self.reason = reason
        msg = f"Command failed: {' '.join(command)}"
        if returncode is not None:
            msg += f" (exit status {returncode})"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
