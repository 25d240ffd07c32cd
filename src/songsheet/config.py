"""TOML configuration.

Every key is optional::

    [source]
    format = "videopsalm"        # or "plaintext"
    path = "songs.json"          # a file, or a directory for plaintext
    exclude = ["Some Title"]
    on_song_error = "abort"      # or "skip"

    [output]
    tex_file = "songsheet.tex"
    keep_tex_file = false

    [latex]
    command = "latexmk"
    args = ["-pdflua", "-interaction=nonstopmode"]
    clean_args = ["-c"]
    timeout = 600                # seconds

    [document]
    class = "article"
    options = ["a4paper", "twoside", "titlepage"]
    version = "1.0.0"
    packages = [["geometry", "left=1cm"], ["makeidx"]]   # replaces the defaults
    verse_format = ""
    chorus_format = '\\quad\\textit'
    bridge_format = '\\textit'
    cover = '\\includepdf{./titleimage.jpg}'
    preamble_extra = "..."
    preamble_file = "preamble.tex"
    missing_verse = "error"      # or "skip"

Relative paths are resolved against the directory holding the config file.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import tomli

from .compiler import DEFAULT_ARGS, DEFAULT_CLEAN_ARGS, DEFAULT_COMMAND, LatexCompiler
from .exceptions import ConfigError, PackageError
from .latex import MISSING_VERSE_CHOICES, DocumentTemplate, Package
from .parsers.base import ON_SONG_ERROR_CHOICES

logger = logging.getLogger(__name__)


@dataclass
class Config:
    source_format: str = "videopsalm"
    source_path: Path = Path("songs.json")
    exclude: frozenset[str] = frozenset()
    on_song_error: str = "abort"
    tex_file: Path = Path("songsheet.tex")
    keep_tex_file: bool = False
    latex_command: str = DEFAULT_COMMAND
    latex_args: list[str] = field(default_factory=lambda: list(DEFAULT_ARGS))
    clean_args: list[str] = field(default_factory=lambda: list(DEFAULT_CLEAN_ARGS))
    timeout: float | None = None
    template: DocumentTemplate = field(default_factory=DocumentTemplate)

    def compiler(self) -> LatexCompiler:
        """A compiler running in the directory of the generated ``.tex`` file."""
        return LatexCompiler(
            command=self.latex_command,
            args=self.latex_args,
            clean_args=self.clean_args,
            timeout=self.timeout,
            cwd=self.tex_file.parent,
        )


def load_config(config_file: Path) -> Config:
    """Load *config_file* and check every value it sets.

    Raises :class:`~songsheet.exceptions.ConfigError` naming the file when it
    cannot be read, is not valid TOML, or holds a value of the wrong type.
    """
    config_file = Path(config_file)
    path = str(config_file)
    logger.debug("Loading config %s.", config_file)
    try:
        with open(config_file, "rb") as f:
            data = tomli.load(f)
    except OSError as exc:
        raise ConfigError(path, f"could not read file: {exc}") from exc
    except tomli.TOMLDecodeError as exc:
        raise ConfigError(path, f"invalid TOML: {exc}") from exc

    base = config_file.parent
    reader = _Reader(path, data)

    config = Config()
    config.source_format = reader.get("source", "format", str, config.source_format)
    config.source_path = base / reader.get("source", "path", str, str(config.source_path))
    config.exclude = frozenset(reader.get_str_list("source", "exclude", []))
    config.on_song_error = reader.get_choice(
        "source", "on_song_error", ON_SONG_ERROR_CHOICES, config.on_song_error
    )

    config.tex_file = base / reader.get("output", "tex_file", str, str(config.tex_file))
    config.keep_tex_file = reader.get("output", "keep_tex_file", bool, config.keep_tex_file)

    config.latex_command = reader.get("latex", "command", str, config.latex_command)
    config.latex_args = reader.get_str_list("latex", "args", config.latex_args)
    config.clean_args = reader.get_str_list("latex", "clean_args", config.clean_args)
    timeout = reader.get("latex", "timeout", (int, float), None)
    if timeout is not None:
        if timeout <= 0:
            raise ConfigError(path, "latex.timeout must be positive")
        config.timeout = float(timeout)

    config.template = _read_template(reader, base)
    return config


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _read_template(reader: "_Reader", base: Path) -> DocumentTemplate:
    t = DocumentTemplate()
    t.doc_class = reader.get("document", "class", str, t.doc_class)
    t.doc_options = reader.get_str_list("document", "options", t.doc_options)
    t.verse_format = reader.get("document", "verse_format", str, t.verse_format)
    t.chorus_format = reader.get("document", "chorus_format", str, t.chorus_format)
    t.bridge_format = reader.get("document", "bridge_format", str, t.bridge_format)
    t.cover = reader.get("document", "cover", str, t.cover)
    t.missing_verse = reader.get_choice(
        "document", "missing_verse", MISSING_VERSE_CHOICES, t.missing_verse
    )

    version = reader.get("document", "version", (str, list), None)
    if version is not None:
        t.version = parse_version(version, reader.path)

    packages = reader.get("document", "packages", list, None)
    if packages is not None:
        t.packages = _parse_packages(packages, reader.path)

    extras = []
    preamble_extra = reader.get("document", "preamble_extra", str, None)
    if preamble_extra is not None:
        extras.append(preamble_extra)
    preamble_file = reader.get("document", "preamble_file", str, None)
    if preamble_file is not None:
        preamble_path = base / preamble_file
        try:
            extras.append(preamble_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigError(reader.path, f"could not read {preamble_path}: {exc}") from exc
    if extras:
        t.preamble_extra = "\n".join(extras)
    return t


def parse_version(value: str | list, path: str = "<config>") -> tuple[int, int, int]:
    """Parse ``"1.2.3"`` or ``[1, 2, 3]`` into a version triple."""
    parts = value.split(".") if isinstance(value, str) else value
    try:
        numbers = tuple(int(p) for p in parts)
    except (TypeError, ValueError):
        numbers = ()
    if len(numbers) != 3 or any(n < 0 for n in numbers):
        raise ConfigError(path, f"document.version must be MAJOR.MINOR.PATCH, got {value!r}")
    return numbers


def _parse_packages(entries: list, path: str) -> list[Package]:
    packages = []
    for entry in entries:
        if isinstance(entry, str):
            entry = [entry]
        if not isinstance(entry, list) or not all(isinstance(a, str) for a in entry):
            raise ConfigError(path, f"invalid package entry {entry!r}")
        try:
            packages.append(Package.from_args(entry))
        except PackageError as exc:
            raise ConfigError(path, str(exc)) from exc
    return packages


class _Reader:
    """Typed access to ``[table] key`` values of a parsed TOML document."""

    def __init__(self, path: str, data: dict):
        self.path = path
        self.data = data

    def _table(self, table: str) -> dict:
        value = self.data.get(table, {})
        if not isinstance(value, dict):
            raise ConfigError(self.path, f"[{table}] must be a table")
        return value

    def get(self, table: str, key: str, types, default):
        values = self._table(table)
        if key not in values:
            return default
        value = values[key]
        # TOML booleans must not pass for numbers
        wrong_bool = isinstance(value, bool) and bool not in _as_tuple(types)
        if wrong_bool or not isinstance(value, types):
            raise ConfigError(self.path, f"{table}.{key} has the wrong type")
        return value

    def get_str_list(self, table: str, key: str, default: list[str]) -> list[str]:
        value = self.get(table, key, list, None)
        if value is None:
            return list(default)
        if not all(isinstance(v, str) for v in value):
            raise ConfigError(self.path, f"{table}.{key} must be a list of strings")
        return value

    def get_choice(self, table: str, key: str, choices: tuple[str, ...], default: str) -> str:
        value = self.get(table, key, str, default)
        if value not in choices:
            raise ConfigError(self.path, f"{table}.{key} must be one of {', '.join(choices)}")
        return value


def _as_tuple(types) -> tuple:
    return types if isinstance(types, tuple) else (types,)
