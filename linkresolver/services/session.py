"""End-to-end processing of one document."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ..document import (
    LinkCandidate,
    apply_resolutions,
    extract_links,
    read_document,
    write_document,
)
from ..logging import log_call
from .resolver import ConversationalResolver, InteractionController


logger = logging.getLogger(__name__)


@dataclass
class SessionOutcome:
    """What a run did to the document."""

    candidates: list[LinkCandidate] = field(default_factory=list)
    output_path: Path | None = None
    text: str | None = None

    @property
    def settled(self) -> list[LinkCandidate]:
        return [candidate for candidate in self.candidates if candidate.is_settled]

    @property
    def skipped(self) -> list[LinkCandidate]:
        return [candidate for candidate in self.candidates if candidate.is_skipped]

    @property
    def found_links(self) -> bool:
        return bool(self.candidates)


class ResolutionSession:
    """Read a document, resolve its placeholder links and write it back once."""

    def __init__(
        self,
        resolver: ConversationalResolver,
        interaction: InteractionController,
    ) -> None:
        self.resolver = resolver
        self.interaction = interaction

    def resolve_text(self, text: str) -> SessionOutcome:
        """Resolve every candidate in ``text`` and return the patched result."""

        candidates = extract_links(text)
        outcome = SessionOutcome(candidates=candidates)
        if not candidates:
            self.interaction.notify("No links found to process.")
            return outcome

        self.interaction.notify(f"Found {len(candidates)} links to process.")
        total = len(candidates)
        for position, candidate in enumerate(candidates, start=1):
            if candidate.is_settled:
                self.interaction.notify(
                    f"Link {position}: {candidate.original_markup} - Already a URL, skipping"
                )
                continue
            self.interaction.begin_link(candidate, position, total)
            self.resolver.resolve(candidate)

        self.interaction.show_summary(candidates)
        outcome.text = apply_resolutions(text, candidates)
        logger.info(
            "Document resolved",
            extra={
                "links": total,
                "settled": len(outcome.settled),
                "skipped": len(outcome.skipped),
            },
        )
        return outcome

    @log_call(logger=logger, level=logging.INFO)
    def process_file(
        self,
        input_path: str | Path,
        output_path: str | Path | None = None,
        *,
        in_place: bool = False,
    ) -> SessionOutcome:
        """Resolve ``input_path`` and write the result to ``output_path``.

        With ``in_place`` the input file is overwritten instead. Nothing is
        written when the document contains no links.
        """

        if not in_place and output_path is None:
            raise ValueError("output_path is required unless in_place is set")
        document = read_document(input_path)
        outcome = self.resolve_text(document.text)
        if outcome.text is None:
            return outcome

        target = Path(input_path) if in_place else Path(output_path)  # type: ignore[arg-type]
        outcome.output_path = write_document(target, outcome.text, encoding=document.encoding)
        if in_place:
            self.interaction.notify(f"File updated in-place: {target}")
        else:
            self.interaction.notify(f"Output written to: {target}")
        return outcome


__all__ = ["ResolutionSession", "SessionOutcome"]
