"""Data structures describing placeholder links and their resolution state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Union

Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open ``[start, end)`` range into the original document text."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.start >= self.end:
            raise ValueError(f"Invalid span [{self.start}, {self.end})")

    def __len__(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "Span") -> bool:
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True, slots=True)
class Unresolved:
    """Candidate still inside the resolution loop."""

    round: int = 0


@dataclass(frozen=True, slots=True)
class Settled:
    """Candidate with an accepted URL."""

    url: str
    confidence: float = 0.0

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("A settled link requires a URL")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence out of range: {self.confidence}")


@dataclass(frozen=True, slots=True)
class Skipped:
    """Candidate the user declined to resolve."""


LinkState = Union[Unresolved, Settled, Skipped]


@dataclass(frozen=True, slots=True)
class ChatTurn:
    """A single role-tagged message exchanged with the chat service."""

    role: Role
    content: str

    def to_payload(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True, slots=True)
class ConversationTranscript:
    """Append-only history of a candidate's conversation.

    ``seeds`` keeps every revision of the opening prompt; the latest one is
    what the service sees. ``turns`` holds everything exchanged after it.
    Both only ever grow: each operation returns a new transcript.
    """

    seeds: tuple[ChatTurn, ...] = ()
    turns: tuple[ChatTurn, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.seeds

    @property
    def seed(self) -> ChatTurn | None:
        return self.seeds[-1] if self.seeds else None

    def reseed(self, content: str) -> "ConversationTranscript":
        """Return a transcript whose current seed is ``content``."""

        return ConversationTranscript(
            seeds=self.seeds + (ChatTurn("user", content),),
            turns=self.turns,
        )

    def append(self, role: Role, content: str) -> "ConversationTranscript":
        if not self.seeds:
            raise ValueError("Transcript must be seeded before appending turns")
        return ConversationTranscript(
            seeds=self.seeds,
            turns=self.turns + (ChatTurn(role, content),),
        )

    def messages(self) -> list[ChatTurn]:
        """Return the messages to send: the current seed followed by all turns."""

        if not self.seeds:
            return []
        return [self.seeds[-1], *self.turns]

    def __len__(self) -> int:
        return len(self.messages())


@dataclass(eq=False)
class LinkCandidate:
    """A placeholder link discovered in the document."""

    label: str
    description: str
    sentence_context: str
    span: Span
    state: LinkState = field(default_factory=Unresolved)
    transcript: ConversationTranscript = field(default_factory=ConversationTranscript)
    _rejected: list[str] = field(default_factory=list, repr=False)

    @property
    def original_markup(self) -> str:
        return render_link(self.label, self.description)

    @property
    def is_settled(self) -> bool:
        return isinstance(self.state, Settled)

    @property
    def is_skipped(self) -> bool:
        return isinstance(self.state, Skipped)

    @property
    def is_terminal(self) -> bool:
        return not isinstance(self.state, Unresolved)

    @property
    def resolved_url(self) -> str | None:
        if isinstance(self.state, Settled):
            return self.state.url
        return None

    @property
    def confidence(self) -> float:
        if isinstance(self.state, Settled):
            return self.state.confidence
        return 0.0

    @property
    def round(self) -> int:
        if isinstance(self.state, Unresolved):
            return self.state.round
        return 0

    @property
    def rejected_urls(self) -> tuple[str, ...]:
        return tuple(self._rejected)

    def is_rejected(self, url: str) -> bool:
        return url in self._rejected

    def reject(self, url: str) -> bool:
        """Remember ``url`` as ruled out; return ``False`` if already known."""

        if not url or url in self._rejected:
            return False
        self._rejected.append(url)
        return True

    def settle(self, url: str, confidence: float) -> None:
        self.state = Settled(url=url, confidence=confidence)

    def skip(self) -> None:
        self.state = Skipped()

    def next_round(self) -> int:
        """Advance the pending round counter and return the new round."""

        if not isinstance(self.state, Unresolved):
            raise ValueError("Only unresolved candidates can start a new round")
        self.state = Unresolved(round=self.state.round + 1)
        return self.state.round


def render_link(label: str, target: str) -> str:
    """Return the bracket-paren markup for ``label`` pointing at ``target``."""

    return f"[{label}]({target})"


__all__ = [
    "ChatTurn",
    "ConversationTranscript",
    "LinkCandidate",
    "LinkState",
    "Role",
    "Settled",
    "Skipped",
    "Span",
    "Unresolved",
    "render_link",
]
