"""Grammar of the one-line commands typed while reviewing a suggestion."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from ..document.links import is_url


class InvalidUserURLError(ValueError):
    """Raised when the user typed something URL-like without a supported scheme."""


@dataclass(frozen=True, slots=True)
class Accept:
    """``y`` or ``yN``: accept option ``index`` (1-based)."""

    index: int = 1


@dataclass(frozen=True, slots=True)
class View:
    """``v`` or ``vN``: open option ``index`` in the browser."""

    index: int = 1


@dataclass(frozen=True, slots=True)
class UseURL:
    """A literal URL typed by the user."""

    url: str


@dataclass(frozen=True, slots=True)
class AddContext:
    """Free text that refines the request."""

    text: str


@dataclass(frozen=True, slots=True)
class Empty:
    """Nothing was typed."""


Command = Union[Accept, View, UseURL, AddContext, Empty]

_INDEXED_RE = re.compile(r"^(?P<verb>[yv])(?P<index>\d+)$")
_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)


def looks_like_url(text: str) -> bool:
    """Return ``True`` for single tokens with a ``scheme://`` or ``www.`` prefix.

    Bare dotted words such as ``Node.js`` or ``README.md`` are context.
    """

    if not text or any(char.isspace() for char in text):
        return False
    return bool(_SCHEME_RE.match(text) or text.lower().startswith("www."))


def parse_command(raw: str) -> Command:
    """Translate one line of user input into a :data:`Command`.

    Raises :class:`InvalidUserURLError` for address-like input whose scheme
    is not ``http``, ``https`` or ``ftp``.
    """

    text = raw.strip()
    if not text:
        return Empty()
    lowered = text.lower()
    if lowered == "y":
        return Accept()
    if lowered == "v":
        return View()
    match = _INDEXED_RE.match(lowered)
    if match is not None:
        index = int(match.group("index"))
        if match.group("verb") == "y":
            return Accept(index=index)
        return View(index=index)
    if is_url(text):
        return UseURL(text)
    if looks_like_url(text):
        raise InvalidUserURLError(
            f"{text!r} is not a usable URL; it must start with http://, https:// or ftp://"
        )
    return AddContext(text)


__all__ = [
    "Accept",
    "AddContext",
    "Command",
    "Empty",
    "InvalidUserURLError",
    "UseURL",
    "View",
    "looks_like_url",
    "parse_command",
]
