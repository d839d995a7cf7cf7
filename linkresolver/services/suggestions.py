"""Parsing of the tagged ``URL:`` / ``CONFIDENCE:`` / ``REASONING:`` replies."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Literal

from .errors import SuggestionParseError

URL_TAG = "URL:"
CONFIDENCE_TAG = "CONFIDENCE:"
REASONING_TAG = "REASONING:"

_NUMBER_RE = re.compile(r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)")


@dataclass(frozen=True, slots=True)
class Suggestion:
    """A URL proposed by the model for one candidate."""

    url: str
    confidence: float = 0.0
    reasoning: str = ""


@dataclass(frozen=True, slots=True)
class SuggestionOption:
    """One numbered entry of the list presented to the user."""

    url: str
    source: Literal["model", "search"] = "model"
    confidence: float | None = None
    title: str = ""
    reasoning: str = ""

    @classmethod
    def from_suggestion(cls, suggestion: Suggestion) -> "SuggestionOption":
        return cls(
            url=suggestion.url,
            source="model",
            confidence=suggestion.confidence,
            reasoning=suggestion.reasoning,
        )


def parse_confidence(value: str) -> float:
    """Return the leading number of ``value`` clamped to ``[0, 1]``.

    Values written as percentages (``85%``) are scaled down. Anything that
    does not start with a number yields ``0.0``.
    """

    match = _NUMBER_RE.match(value.strip())
    if match is None:
        return 0.0
    number = float(match.group(0))
    if value.strip()[match.end():].lstrip().startswith("%"):
        number /= 100.0
    if math.isnan(number):
        return 0.0
    return min(1.0, max(0.0, number))


def _strip_brackets(value: str) -> str:
    value = value.strip()
    if len(value) > 1 and value[0] in "[<" and value[-1] in "]>":
        return value[1:-1].strip()
    return value


def parse_suggestion(reply: str) -> Suggestion:
    """Extract the first tagged URL, confidence and reasoning lines of ``reply``."""

    url: str | None = None
    confidence: float | None = None
    reasoning: str | None = None
    for raw_line in reply.splitlines():
        line = raw_line.strip()
        if url is None and line.startswith(URL_TAG):
            url = _strip_brackets(line[len(URL_TAG):])
        elif confidence is None and line.startswith(CONFIDENCE_TAG):
            confidence = parse_confidence(line[len(CONFIDENCE_TAG):])
        elif reasoning is None and line.startswith(REASONING_TAG):
            reasoning = line[len(REASONING_TAG):].strip()

    if not url:
        raise SuggestionParseError("could not parse URL from AI response")
    return Suggestion(url=url, confidence=confidence or 0.0, reasoning=reasoning or "")


__all__ = [
    "CONFIDENCE_TAG",
    "REASONING_TAG",
    "Suggestion",
    "SuggestionOption",
    "URL_TAG",
    "parse_confidence",
    "parse_suggestion",
]
