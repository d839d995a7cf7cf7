from __future__ import annotations

from linkresolver.document.sentences import extract_sentence


def test_extract_sentence_stops_at_terminators_and_keeps_closing_one() -> None:
    text = "First one. See [X](q) here! Last?"
    position = text.index("[X]")

    assert extract_sentence(text, position) == "See [X](q) here!"


def test_extract_sentence_uses_newlines_as_boundaries() -> None:
    text = "# Heading\nA line with [a](b) inside\nNext line."
    position = text.index("[a]")

    assert extract_sentence(text, position) == "A line with [a](b) inside"


def test_extract_sentence_without_terminators_returns_whole_text() -> None:
    text = "  just words and [a](b) more words  "

    assert extract_sentence(text, text.index("[a]")) == text.strip()


def test_extract_sentence_runs_to_end_of_text_when_unterminated() -> None:
    text = "Intro sentence. tail with [a](b)"

    assert extract_sentence(text, text.index("[a]")) == "tail with [a](b)"


def test_extract_sentence_clamps_out_of_range_positions() -> None:
    text = "One. Two"

    assert extract_sentence(text, 500) == "Two"
    assert extract_sentence(text, -3) == "One."
    assert extract_sentence("", 0) == ""
