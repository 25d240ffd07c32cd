import logging
from pathlib import Path

import pytest

from songsheet.exceptions import InvalidTagError, InvalidTitleError, ParseError
from songsheet.parsers.plain_text import PlainTextParser

FIXTURES = Path(__file__).parent / "fixtures" / "plain_text"


def _parse(text: str):
    songs = PlainTextParser().parse(text)
    assert len(songs) == 1
    return songs[0]


# ---------------------------------------------------------------------------
# can_handle
# ---------------------------------------------------------------------------


def test_can_handle_plaintext():
    assert PlainTextParser.can_handle("plaintext")


def test_cannot_handle_videopsalm():
    assert not PlainTextParser.can_handle("videopsalm")


# ---------------------------------------------------------------------------
# parse
# ---------------------------------------------------------------------------


def test_minimal_fixture():
    song = _parse("Title\n\nLine one\n\n#c\nChorus line\n\n")
    assert song.title == "Title"
    assert song.verses == ("Line one",)
    assert song.chorus == "Chorus line"
    assert song.bridge is None
    assert song.order == "vc"


def test_minimal_fixture_file():
    [song] = PlainTextParser().load(FIXTURES / "minimal.txt")
    assert song.order == "vc"


def test_title_only():
    song = _parse("Title\n\n")
    assert song.title == "Title"
    assert song.order == ""
    assert song.verses == ()


def test_last_stanza_without_separator():
    song = _parse("Title\n\nFirst\n\nSecond line a\nSecond line b")
    assert song.verses == ("First", "Second line a\nSecond line b")
    assert song.order == "vv"


def test_trailing_newline_stripped_from_last_stanza():
    song = _parse("Title\n\nOnly verse\n")
    assert song.verses == ("Only verse",)


def test_bridge_tag():
    song = _parse("Title\n\n#b\nBridge\n\nVerse\n\n")
    assert song.bridge == "Bridge"
    assert song.order == "bv"


def test_multiline_stanzas_keep_line_breaks():
    song = _parse("Title\n\nline one\nline two\n\n#c\nchorus one\nchorus two\n\n")
    assert song.verses == ("line one\nline two",)
    assert song.chorus == "chorus one\nchorus two"


def test_repeated_chorus_tag_keeps_last_and_extends_order():
    song = _parse("Title\n\n#c\nFirst\n\nVerse\n\n#c\nSecond\n\n")
    assert song.chorus == "Second"
    assert song.order == "cvc"


def test_bom_stripped():
    song = _parse("\ufeffTitle\n\nVerse\n\n")
    assert song.title == "Title"


def test_crlf_line_endings():
    song = _parse("Title\r\n\r\nVerse one\r\n\r\n#c\r\nChorus\r\n")
    assert song.title == "Title"
    assert song.verses == ("Verse one",)
    assert song.chorus == "Chorus"
    assert song.order == "vc"


def test_shepherd_fixture():
    [song] = PlainTextParser().load(FIXTURES / "songs" / "01-the-lord-s-my-shepherd.txt")
    assert song.title == "The Lord's My Shepherd"
    assert song.order == "vcvbv"
    assert len(song.verses) == 3
    assert song.verses[2] == "Goodness and mercy all my life\nShall surely follow me"
    assert song.bridge == "And I will trust, and I will trust"


# ---------------------------------------------------------------------------
# parse — errors
# ---------------------------------------------------------------------------


def test_title_not_followed_by_blank_line():
    with pytest.raises(InvalidTitleError):
        PlainTextParser().parse("Title\nVerse\n\n")


def test_no_line_break_at_all():
    with pytest.raises(InvalidTitleError):
        PlainTextParser().parse("Title")


def test_empty_title():
    with pytest.raises(InvalidTitleError):
        PlainTextParser().parse("\n\nVerse\n\n")


def test_invalid_title_names_source():
    with pytest.raises(InvalidTitleError) as exc_info:
        PlainTextParser().parse("Title", source="song.txt")
    assert exc_info.value.source == "song.txt"


def test_unknown_tag_letter():
    with pytest.raises(InvalidTagError) as exc_info:
        PlainTextParser().parse("Title\n\n#x\nStanza\n\n")
    assert exc_info.value.tag == "x"


def test_verse_tag_is_not_accepted():
    with pytest.raises(InvalidTagError):
        PlainTextParser().parse("Title\n\n#v\nStanza\n\n")


def test_tag_must_end_line():
    with pytest.raises(InvalidTagError):
        PlainTextParser().parse("Title\n\n#chorus\nStanza\n\n")


def test_tag_at_end_of_input():
    with pytest.raises(InvalidTagError):
        PlainTextParser().parse("Title\n\n#c")


def test_syntax_errors_are_parse_errors():
    with pytest.raises(ParseError):
        PlainTextParser().parse("Title\n\n#q\nx")


# ---------------------------------------------------------------------------
# load — directories
# ---------------------------------------------------------------------------


def test_load_directory_sorted_and_skips_hidden():
    songs = PlainTextParser().load(FIXTURES / "songs")
    assert [s.title for s in songs] == ["The Lord's My Shepherd", "In Christ Alone"]


def test_load_directory_aborts_on_bad_file(tmp_path):
    (tmp_path / "a.txt").write_text("Good\n\nVerse\n", encoding="utf-8")
    (tmp_path / "b.txt").write_text("Bad title only", encoding="utf-8")
    with pytest.raises(InvalidTitleError) as exc_info:
        PlainTextParser().load(tmp_path)
    assert exc_info.value.source == str(tmp_path / "b.txt")


def test_load_directory_skips_bad_file_with_skip_policy(tmp_path, caplog):
    (tmp_path / "a.txt").write_text("Good\n\nVerse\n", encoding="utf-8")
    (tmp_path / "b.txt").write_text("Bad\n\n#z\nVerse\n", encoding="utf-8")
    with caplog.at_level(logging.WARNING, logger="songsheet"):
        songs = PlainTextParser(on_song_error="skip").load(tmp_path)
    assert [s.title for s in songs] == ["Good"]
    assert "b.txt" in caplog.text


def test_load_empty_directory(tmp_path):
    assert PlainTextParser().load(tmp_path) == []
