import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from songsheet.config import Config
from songsheet.exceptions import CompileError, ParseError, VerseOutOfBoundsError
from songsheet.models import Song
from songsheet.songbook import build_songbook, exclude_songs, load_songs

FIXTURES = Path(__file__).parent / "fixtures"


def _book(tmp_path: Path, *titles: str) -> Path:
    path = tmp_path / "book.json"
    songs = [{"Text": t, "Verses": [{"Text": f"{t} verse"}]} for t in titles]
    path.write_text(json.dumps({"Songs": songs}), encoding="utf-8")
    return path


def _config(tmp_path: Path, source: Path, **kwargs) -> Config:
    return Config(source_path=source, tex_file=tmp_path / "songsheet.tex", **kwargs)


# ---------------------------------------------------------------------------
# exclude_songs
# ---------------------------------------------------------------------------


def _s(title: str) -> Song:
    return Song.builder(title).set_order("").build()


def test_exclude_keeps_relative_order():
    songs = [_s("A"), _s("B"), _s("C"), _s("D")]
    assert [s.title for s in exclude_songs(songs, {"B"})] == ["A", "C", "D"]


def test_exclude_nothing():
    songs = [_s("A"), _s("B")]
    assert exclude_songs(songs, []) == songs


# ---------------------------------------------------------------------------
# load_songs
# ---------------------------------------------------------------------------


def test_load_videopsalm_fixture():
    config = Config(source_path=FIXTURES / "videopsalm" / "hymns.json")
    assert len(load_songs(config)) == 3


def test_load_plaintext_directory():
    config = Config(source_format="plaintext", source_path=FIXTURES / "plain_text" / "songs")
    assert [s.title for s in load_songs(config)] == ["The Lord's My Shepherd", "In Christ Alone"]


def test_load_songs_structural_error_aborts(tmp_path):
    path = tmp_path / "book.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ParseError):
        load_songs(Config(source_path=path))


# ---------------------------------------------------------------------------
# build_songbook
# ---------------------------------------------------------------------------


def test_excluded_song_absent_from_document(tmp_path):
    source = _book(tmp_path, "Keep Me", "Drop Me")
    config = _config(tmp_path, source, exclude=frozenset({"Drop Me"}))
    tex = build_songbook(config, compile_pdf=False)
    out = tex.read_text(encoding="utf-8")
    assert out.count(r"\begin{song}") == 1
    assert r"\begin{song}{Keep Me}" in out
    assert "Drop Me" not in out


def test_compile_clean_and_remove_tex(tmp_path):
    config = _config(tmp_path, _book(tmp_path, "Hymn"))
    written = []

    def fake_compile(path):
        written.append(path.exists())
        return 0

    compiler = MagicMock()
    compiler.compile.side_effect = fake_compile
    tex = build_songbook(config, compiler=compiler)
    compiler.compile.assert_called_once_with(config.tex_file)
    compiler.clean.assert_called_once_with()
    assert written == [True]
    assert not tex.exists()


def test_keep_tex_file(tmp_path):
    config = _config(tmp_path, _book(tmp_path, "Hymn"), keep_tex_file=True)
    tex = build_songbook(config, compiler=MagicMock())
    assert tex.exists()


def test_no_compile_keeps_tex_and_skips_compiler(tmp_path):
    config = _config(tmp_path, _book(tmp_path, "Hymn"))
    compiler = MagicMock()
    tex = build_songbook(config, compiler=compiler, compile_pdf=False)
    assert tex.exists()
    compiler.compile.assert_not_called()
    compiler.clean.assert_not_called()


def test_compile_error_propagates_and_keeps_tex(tmp_path):
    config = _config(tmp_path, _book(tmp_path, "Hymn"))
    compiler = MagicMock()
    compiler.compile.side_effect = CompileError(["latexmk"], 1)
    with pytest.raises(CompileError):
        build_songbook(config, compiler=compiler)
    compiler.clean.assert_not_called()
    assert config.tex_file.exists()


def test_render_error_stops_before_compile(tmp_path, monkeypatch):
    config = _config(tmp_path, _book(tmp_path, "Hymn"))
    bad = Song(title="Hymn", order="vv", verses=("one",))
    monkeypatch.setattr("songsheet.songbook.load_songs", lambda config: [bad])
    compiler = MagicMock()
    with pytest.raises(VerseOutOfBoundsError):
        build_songbook(config, compiler=compiler)
    compiler.compile.assert_not_called()


def test_output_is_deterministic(tmp_path):
    source = FIXTURES / "videopsalm" / "hymns.json"
    first = build_songbook(_config(tmp_path, source), compile_pdf=False).read_bytes()
    second = build_songbook(_config(tmp_path, source), compile_pdf=False).read_bytes()
    assert first == second
