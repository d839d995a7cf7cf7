"""Terminal interaction surface."""

from __future__ import annotations

import re
import sys
import webbrowser
from collections.abc import Sequence
from typing import TextIO

from ..document.models import LinkCandidate
from ..services.suggestions import SuggestionOption

RESET = "\033[0m"
BOLD_CYAN = "\033[1;36m"
YELLOW = "\033[33m"
GREEN = "\033[32m"
BRIGHT_GREEN = "\033[92m"
CYAN = "\033[36m"
WHITE = "\033[37m"
GREY = "\033[90m"

DECISION_PROMPT = (
    "Accept this URL? (y to accept, v to view in browser, "
    "paste a URL to use it, or add context): "
)
LIST_PROMPT = (
    "Choose with yN to accept or vN to view (y/v for 1), "
    "paste a URL to use it, or add context: "
)
BANNER_WIDTH = 86


def highlight_link(sentence: str, label: str, description: str, *, color: bool = True) -> str:
    """Return ``sentence`` with the ``[label](description)`` link emphasised."""

    if not color:
        return sentence
    pattern = re.compile(re.escape(f"[{label}]({description})"))
    highlighted = pattern.sub(
        lambda _match: (
            f"{GREEN}[{BRIGHT_GREEN}{label}{GREEN}]({BRIGHT_GREEN}{description}{GREEN}){RESET}{WHITE}"
        ),
        sentence,
    )
    return f"{WHITE}{highlighted}{RESET}"


class ConsoleInteraction:
    """Read commands from a text stream and print progress to another."""

    def __init__(
        self,
        *,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        color: bool | None = None,
        browser_open=None,
    ) -> None:
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        if color is None:
            color = bool(getattr(self._stdout, "isatty", lambda: False)())
        self._color = color
        self._browser_open = browser_open or webbrowser.open
        self._multiple = False

    def _paint(self, text: str, code: str) -> str:
        return f"{code}{text}{RESET}" if self._color else text

    def _write(self, text: str = "", *, end: str = "\n") -> None:
        self._stdout.write(text + end)
        self._stdout.flush()

    def _readline(self) -> str:
        line = self._stdin.readline()
        if not line:
            raise EOFError("input closed")
        return line.strip()

    def begin_link(self, candidate: LinkCandidate, position: int, total: int) -> None:
        title = f"PROCESSING LINK {position} OF {total}"
        self._write()
        self._write(self._paint("=" * BANNER_WIDTH, BOLD_CYAN))
        self._write(self._paint(title.center(BANNER_WIDTH), BOLD_CYAN))
        self._write(self._paint("=" * BANNER_WIDTH, BOLD_CYAN))
        self._write()
        context = highlight_link(
            candidate.sentence_context,
            candidate.label,
            candidate.description,
            color=self._color,
        )
        self._write(f"{self._paint('Context:', YELLOW)} {context}")

    def show_status(self, message: str) -> None:
        self._write(message)

    def present_options(
        self, candidate: LinkCandidate, options: Sequence[SuggestionOption]
    ) -> None:
        if not options:
            return
        primary = options[0]
        if primary.reasoning:
            self._write()
            self._write(self._paint(primary.reasoning, GREY))
        self._multiple = len(options) > 1
        if not self._multiple:
            percent = f"{(primary.confidence or 0.0) * 100:.0f}%"
            self._write(
                f"{self._paint(f'Suggested URL ({percent}):', YELLOW)} "
                f"{self._paint(primary.url, CYAN)}"
            )
            return
        for index, option in enumerate(options, start=1):
            if option.source == "model":
                tag = f"AI {(option.confidence or 0.0) * 100:.0f}%"
            else:
                tag = "search"
            title = f" - {option.title}" if option.title else ""
            self._write(
                f"  {index}. [{tag}] {self._paint(option.url, CYAN)}{title}"
            )

    def read_command(self, candidate: LinkCandidate) -> str:
        self._write(LIST_PROMPT if self._multiple else DECISION_PROMPT, end="")
        return self._readline()

    def confirm_retry(self, candidate: LinkCandidate, error: Exception) -> bool:
        self._write(f"API Error: {error}")
        self._write("Would you like to retry? (y/n): ", end="")
        return self._readline().lower() == "y"

    def open_url(self, url: str) -> None:
        if not self._browser_open(url):
            raise OSError("no runnable browser found")

    def notify(self, message: str) -> None:
        self._write(message)

    def show_summary(self, candidates: Sequence[LinkCandidate]) -> None:
        self._write()
        self._write("=== Final Summary ===")
        for index, candidate in enumerate(candidates, start=1):
            marker = "✓" if candidate.is_settled else "✗"
            target = candidate.resolved_url or candidate.description
            self._write(f"{marker} Link {index}: [{candidate.label}] → {target}")


__all__ = ["ConsoleInteraction", "highlight_link"]
