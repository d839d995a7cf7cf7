"""Deterministic stand-ins for the external services and the user."""

from __future__ import annotations

from collections.abc import Sequence

from linkresolver.document.models import ChatTurn, LinkCandidate, Span
from linkresolver.services.chat_client import ChatReply
from linkresolver.services.search_client import SearchResult
from linkresolver.services.verifier import VerificationResult


def reply(url: str, confidence: float = 0.9, reasoning: str = "Looks right.") -> str:
    return f"URL: {url}\nCONFIDENCE: {confidence}\nREASONING: {reasoning}"


def make_candidate(
    label: str = "docs",
    description: str = "python packaging guide",
    sentence: str = "Read the [docs](python packaging guide) first.",
) -> LinkCandidate:
    return LinkCandidate(
        label=label,
        description=description,
        sentence_context=sentence,
        span=Span(9, 9 + len(f"[{label}]({description})")),
    )


class StubChatClient:
    """Return queued replies; queued exceptions are raised instead."""

    def __init__(self, replies: Sequence[str | Exception] = ()) -> None:
        self.replies = list(replies)
        self.calls: list[list[ChatTurn]] = []

    def complete(self, messages: Sequence[ChatTurn]) -> ChatReply:
        self.calls.append(list(messages))
        if not self.replies:
            raise AssertionError("unexpected chat request")
        current = self.replies.pop(0)
        if isinstance(current, Exception):
            raise current
        return ChatReply(role="assistant", content=current, raw_response={})


class StubVerifier:
    def __init__(self, statuses: dict[str, int] | None = None, default: int = 200) -> None:
        self.statuses = dict(statuses or {})
        self.default = default
        self.checked: list[str] = []

    def verify(self, url: str) -> VerificationResult:
        self.checked.append(url)
        status = self.statuses.get(url, self.default)
        return VerificationResult(url=url, reachable=200 <= status < 400, status=status)


class StubSearch:
    def __init__(self, results: Sequence[SearchResult | Exception] = ()) -> None:
        self.results = list(results)
        self.queries: list[str] = []

    def search(self, query: str) -> list[SearchResult]:
        self.queries.append(query)
        for item in self.results:
            if isinstance(item, Exception):
                raise item
        return list(self.results)  # type: ignore[arg-type]


class ScriptedInteraction:
    """Feed scripted commands and record everything shown to the user."""

    def __init__(
        self,
        commands: Sequence[str] = (),
        *,
        retry_answers: Sequence[bool] = (),
        browser_error: OSError | None = None,
    ) -> None:
        self.commands = list(commands)
        self.retry_answers = list(retry_answers)
        self.browser_error = browser_error
        self.presented: list[list[str]] = []
        self.rejected_snapshots: list[tuple[str, ...]] = []
        self.statuses: list[str] = []
        self.notices: list[str] = []
        self.retry_errors: list[Exception] = []
        self.opened: list[str] = []
        self.begun: list[tuple[str, int, int]] = []
        self.summaries: list[list[str]] = []

    def begin_link(self, candidate: LinkCandidate, position: int, total: int) -> None:
        self.begun.append((candidate.label, position, total))

    def show_status(self, message: str) -> None:
        self.statuses.append(message)

    def present_options(self, candidate: LinkCandidate, options) -> None:
        self.presented.append([option.url for option in options])
        self.rejected_snapshots.append(candidate.rejected_urls)

    def read_command(self, candidate: LinkCandidate) -> str:
        if not self.commands:
            raise EOFError("script exhausted")
        return self.commands.pop(0)

    def confirm_retry(self, candidate: LinkCandidate, error: Exception) -> bool:
        self.retry_errors.append(error)
        if not self.retry_answers:
            return False
        return self.retry_answers.pop(0)

    def open_url(self, url: str) -> None:
        if self.browser_error is not None:
            raise self.browser_error
        self.opened.append(url)

    def notify(self, message: str) -> None:
        self.notices.append(message)

    def show_summary(self, candidates) -> None:
        self.summaries.append([candidate.label for candidate in candidates])
