"""Discovery of bracket-paren placeholder links."""

from __future__ import annotations

import logging
import re

from .models import LinkCandidate, Settled, Span
from .sentences import extract_sentence

logger = logging.getLogger(__name__)

URL_PREFIXES = ("http://", "https://", "ftp://")

# Labels may not contain brackets and descriptions may not contain
# parentheses, so nested constructs only match their innermost link.
_LINK_RE = re.compile(r"(?<!!)\[(?P<label>[^\[\]\n]+)\]\((?P<description>[^()\n]+)\)")


def is_url(value: str) -> bool:
    """Return ``True`` when ``value`` starts with a supported URL scheme."""

    return value.startswith(URL_PREFIXES)


def extract_links(text: str) -> list[LinkCandidate]:
    """Return every placeholder link in ``text`` in document order.

    Links whose description is already a URL are returned settled with full
    confidence so they never reach the resolver.
    """

    candidates: list[LinkCandidate] = []
    for match in _LINK_RE.finditer(text):
        label = match.group("label")
        description = match.group("description")
        candidate = LinkCandidate(
            label=label,
            description=description,
            sentence_context=extract_sentence(text, match.start()),
            span=Span(match.start(), match.end()),
        )
        if is_url(description):
            candidate.settle(description, 1.0)
        candidates.append(candidate)

    logger.debug(
        "Links extracted",
        extra={
            "total": len(candidates),
            "already_urls": sum(1 for candidate in candidates if candidate.is_settled),
        },
    )
    return candidates


__all__ = ["URL_PREFIXES", "extract_links", "is_url"]
