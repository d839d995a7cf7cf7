"""Sentence boundary helpers used to give each link its surrounding context."""

from __future__ import annotations

SENTENCE_TERMINATORS = frozenset(".!?\n")


def extract_sentence(text: str, position: int) -> str:
    """Return the sentence of ``text`` that encloses ``position``.

    The scan walks backward to the previous terminator (``.``, ``!``, ``?``
    or a newline) and forward to the next one, keeping the closing
    terminator when the text does not end first. Without terminators the
    whole text is returned.
    """

    position = min(max(position, 0), len(text))
    start = position
    while start > 0 and text[start - 1] not in SENTENCE_TERMINATORS:
        start -= 1

    end = position
    while end < len(text) and text[end] not in SENTENCE_TERMINATORS:
        end += 1
    if end < len(text):
        end += 1

    return text[start:end].strip()


__all__ = ["SENTENCE_TERMINATORS", "extract_sentence"]
