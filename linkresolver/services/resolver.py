"""Conversational state machine that settles one placeholder link at a time."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from ..document.models import ChatTurn, LinkCandidate
from ..logging import log_call
from . import prompts
from .chat_client import ChatReply
from .commands import (
    Accept,
    AddContext,
    Empty,
    InvalidUserURLError,
    UseURL,
    View,
    parse_command,
)
from .errors import AutomaticRetryLimitError, ServiceCallError
from .search_client import SearchResult
from .suggestions import Suggestion, SuggestionOption, parse_suggestion
from .verifier import VerificationResult


logger = logging.getLogger(__name__)


DEFAULT_CONFIDENCE_FLOOR = 0.8
DEFAULT_MAX_AUTOMATIC_ROUNDS = 5


class ChatService(Protocol):
    def complete(self, messages: Sequence[ChatTurn]) -> ChatReply: ...


class VerificationService(Protocol):
    def verify(self, url: str) -> VerificationResult: ...


class SearchService(Protocol):
    def search(self, query: str) -> list[SearchResult]: ...


class InteractionController(Protocol):
    """Surface that shows progress and reads the user's decisions.

    ``read_command`` raises :class:`EOFError` when no more input can be read.
    """

    def begin_link(self, candidate: LinkCandidate, position: int, total: int) -> None: ...

    def show_status(self, message: str) -> None: ...

    def present_options(
        self, candidate: LinkCandidate, options: Sequence[SuggestionOption]
    ) -> None: ...

    def read_command(self, candidate: LinkCandidate) -> str: ...

    def confirm_retry(self, candidate: LinkCandidate, error: Exception) -> bool: ...

    def open_url(self, url: str) -> None: ...

    def notify(self, message: str) -> None: ...

    def show_summary(self, candidates: Sequence[LinkCandidate]) -> None: ...


class ConversationalResolver:
    """Drive a candidate from ``Unresolved`` to ``Settled`` or ``Skipped``."""

    def __init__(
        self,
        chat_client: ChatService,
        interaction: InteractionController,
        *,
        verifier: VerificationService | None = None,
        search_client: SearchService | None = None,
        confidence_floor: float = DEFAULT_CONFIDENCE_FLOOR,
        max_automatic_rounds: int = DEFAULT_MAX_AUTOMATIC_ROUNDS,
    ) -> None:
        self.chat_client = chat_client
        self.interaction = interaction
        self.verifier = verifier
        self.search_client = search_client
        self.confidence_floor = confidence_floor
        self.max_automatic_rounds = max(max_automatic_rounds, 1)

    @log_call(logger=logger, level=logging.INFO)
    def resolve(self, candidate: LinkCandidate) -> LinkCandidate:
        """Run the resolution loop until ``candidate`` reaches a terminal state."""

        automatic_rounds = 0
        while not candidate.is_terminal:
            if automatic_rounds >= self.max_automatic_rounds:
                limit_error = AutomaticRetryLimitError(
                    f"Asked again automatically {automatic_rounds} times without a usable URL"
                )
                if not self._offer_retry(candidate, limit_error):
                    break
                automatic_rounds = 0

            try:
                suggestion = self._request_suggestion(candidate)
            except ServiceCallError as exc:
                if not self._offer_retry(candidate, exc):
                    break
                continue

            if candidate.is_rejected(suggestion.url):
                logger.info(
                    "Model re-offered a rejected URL",
                    extra={"url": suggestion.url, "round": candidate.round},
                )
                self.interaction.show_status(
                    f"AI suggested a previously rejected URL: {suggestion.url}. "
                    "Automatically asking AI for a different link..."
                )
                candidate.transcript = candidate.transcript.append(
                    "user", prompts.already_rejected_message(suggestion.url)
                )
                automatic_rounds += 1
                continue

            if self.verifier is not None and not self._verify(candidate, suggestion.url):
                automatic_rounds += 1
                continue
            automatic_rounds = 0

            try:
                options = self._build_options(candidate, suggestion)
            except ServiceCallError as exc:
                if not self._offer_retry(candidate, exc):
                    break
                continue

            try:
                self._decide(candidate, options)
            except EOFError:
                logger.info("Input closed while reviewing link", extra={"label": candidate.label})
                break

        if not candidate.is_terminal:
            candidate.skip()
            self.interaction.notify("Skipping this link.")
        return candidate

    def _request_suggestion(self, candidate: LinkCandidate) -> Suggestion:
        """Ask the chat service for a URL, seeding the transcript on first use."""

        if candidate.transcript.is_empty:
            candidate.transcript = candidate.transcript.reseed(
                prompts.build_seed_prompt(candidate)
            )
        round_number = candidate.next_round()
        self.interaction.show_status("Requesting new suggestion from AI...")
        reply = self.chat_client.complete(candidate.transcript.messages())
        candidate.transcript = candidate.transcript.append("assistant", reply.content)
        suggestion = parse_suggestion(reply.content)
        logger.info(
            "Suggestion received",
            extra={
                "round": round_number,
                "url": suggestion.url,
                "confidence": suggestion.confidence,
            },
        )
        return suggestion

    def _verify(self, candidate: LinkCandidate, url: str) -> bool:
        assert self.verifier is not None
        self.interaction.show_status(f"Verifying URL accessibility: {url}")
        result = self.verifier.verify(url)
        if result.reachable:
            return True
        self.interaction.show_status(
            f"The suggested URL is not accessible (HTTP {result.status}). "
            "Asking AI for a working alternative..."
        )
        self._reject(candidate, url)
        candidate.transcript = candidate.transcript.append(
            "user",
            prompts.unreachable_message(url, result.status, candidate.rejected_urls),
        )
        return False

    def _reject(self, candidate: LinkCandidate, url: str) -> None:
        """Record ``url`` as rejected and reseed with the rewritten clause."""

        if not candidate.reject(url):
            return
        logger.info(
            "URL rejected",
            extra={"url": url, "rejected_count": len(candidate.rejected_urls)},
        )
        seed = candidate.transcript.seed
        if seed is not None:
            candidate.transcript = candidate.transcript.reseed(
                prompts.with_rejected_clause(seed.content, candidate.rejected_urls)
            )

    def _build_options(
        self, candidate: LinkCandidate, suggestion: Suggestion
    ) -> list[SuggestionOption]:
        options = [SuggestionOption.from_suggestion(suggestion)]
        if self.search_client is None:
            return options
        self.interaction.show_status("Searching the web for alternatives...")
        seen = {suggestion.url}
        for result in self.search_client.search(prompts.search_query(candidate)):
            if result.url in seen or candidate.is_rejected(result.url):
                continue
            seen.add(result.url)
            options.append(
                SuggestionOption(
                    url=result.url,
                    source="search",
                    title=result.title,
                    reasoning=result.snippet,
                )
            )
        return options

    def _decide(self, candidate: LinkCandidate, options: Sequence[SuggestionOption]) -> None:
        """Read commands until the candidate settles or a new round is needed."""

        self.interaction.present_options(candidate, options)
        while True:
            raw = self.interaction.read_command(candidate)
            try:
                command = parse_command(raw)
            except InvalidUserURLError as exc:
                self.interaction.notify(str(exc))
                continue

            if isinstance(command, Empty):
                continue

            if isinstance(command, (Accept, View)):
                if not 1 <= command.index <= len(options):
                    self.interaction.notify(
                        f"Choose a number between 1 and {len(options)}."
                    )
                    continue
                option = options[command.index - 1]
                if isinstance(command, View):
                    self._open(option.url)
                    continue
                if option.source == "model":
                    confidence = option.confidence or 0.0
                    if confidence < self.confidence_floor:
                        self.interaction.notify(
                            "Cannot accept - confidence too low. Please add more context."
                        )
                        continue
                else:
                    confidence = 1.0
                candidate.settle(option.url, confidence)
                self.interaction.notify(f"Link settled: {option.url}")
                return

            if isinstance(command, UseURL):
                candidate.settle(command.url, 1.0)
                self.interaction.notify(
                    f"Link settled with user-provided URL: {command.url}"
                )
                return

            if isinstance(command, AddContext):
                self._reject(candidate, options[0].url)
                candidate.transcript = candidate.transcript.append(
                    "user",
                    prompts.context_message(command.text, candidate.rejected_urls),
                )
                self.interaction.show_status(
                    f"Added context: {command.text}. Refining search with additional context..."
                )
                return

    def _open(self, url: str) -> None:
        try:
            self.interaction.open_url(url)
        except OSError as exc:
            logger.warning("Could not open browser", extra={"url": url, "error": str(exc)})
            self.interaction.notify(f"Error opening browser: {exc}")
        else:
            self.interaction.notify(f"Opened {url} in browser")

    def _offer_retry(self, candidate: LinkCandidate, error: Exception) -> bool:
        logger.warning(
            "Resolution step failed",
            extra={"label": candidate.label, "error": str(error)},
        )
        try:
            return self.interaction.confirm_retry(candidate, error)
        except EOFError:
            return False


__all__ = [
    "ChatService",
    "ConversationalResolver",
    "DEFAULT_CONFIDENCE_FLOOR",
    "DEFAULT_MAX_AUTOMATIC_ROUNDS",
    "InteractionController",
    "SearchService",
    "VerificationService",
]
