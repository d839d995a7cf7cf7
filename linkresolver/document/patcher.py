"""Apply settled link resolutions back onto the original document text."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .models import LinkCandidate, render_link

logger = logging.getLogger(__name__)


class PatchConflictError(RuntimeError):
    """Raised when a span no longer points at the link it was extracted from."""


def apply_resolutions(original_text: str, candidates: Iterable[LinkCandidate]) -> str:
    """Return ``original_text`` with every settled candidate's URL written in.

    Replacements run right to left over working copies of the spans. After
    each one, the length delta is added to every pending span at or beyond
    the replaced region, so no replacement ever reads a stale offset. Text
    left of a replacement never moves. The candidates themselves are left
    untouched.
    """

    pending = sorted(
        (
            [candidate.span.start, candidate.span.end, candidate]
            for candidate in candidates
            if candidate.is_settled and candidate.resolved_url
        ),
        key=lambda entry: entry[0],
        reverse=True,
    )
    if not pending:
        return original_text

    result = original_text
    applied = 0
    for index, (start, end, candidate) in enumerate(pending):
        old_link = candidate.original_markup
        new_link = render_link(candidate.label, candidate.resolved_url)
        if result[start:end] != old_link:
            raise PatchConflictError(
                f"Expected {old_link!r} at [{start}, {end}) but found {result[start:end]!r}"
            )
        result = result[:start] + new_link + result[end:]
        applied += 1

        delta = len(new_link) - len(old_link)
        # Spans are patched right to left; pending spans never start at or after ``end``.
        if delta:
            for entry in pending[index + 1 :]:
                if entry[0] >= end:
                    entry[0] += delta
                    entry[1] += delta

    logger.info("Applied link resolutions", extra={"applied": applied})
    return result


__all__ = ["PatchConflictError", "apply_resolutions"]
