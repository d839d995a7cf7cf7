"""Prompt text sent to the chat service while resolving a link."""

from __future__ import annotations

import re
from collections.abc import Sequence

from ..document.models import LinkCandidate

SEED_TEMPLATE = """Given this context: "{context}"

Find the most appropriate URL for the description: "{description}"

Provide your response in exactly this format:
URL: [the URL you found]
CONFIDENCE: [a number between 0.0 and 1.0]
REASONING: [brief explanation of why you chose this URL and how confident you are]

Be conservative with confidence scores. Only use 0.8+ if you're very sure this is the exact resource the user wants.

IMPORTANT: If the user provides feedback about a URL being wrong or broken, you MUST provide a completely different URL. Do not repeat URLs that have been rejected."""

REJECTED_CLAUSE_PREFIX = "IMPORTANT: Do NOT suggest any of these previously rejected URLs:"

_REJECTED_CLAUSE_RE = re.compile(
    r"\n\n" + re.escape(REJECTED_CLAUSE_PREFIX) + r"[^\n]*"
)


def rejected_clause(rejected_urls: Sequence[str]) -> str:
    if not rejected_urls:
        return ""
    return f"\n\n{REJECTED_CLAUSE_PREFIX} {', '.join(rejected_urls)}"


def with_rejected_clause(prompt: str, rejected_urls: Sequence[str]) -> str:
    """Return ``prompt`` carrying exactly one clause listing ``rejected_urls``."""

    clause = rejected_clause(rejected_urls)
    if _REJECTED_CLAUSE_RE.search(prompt):
        return _REJECTED_CLAUSE_RE.sub(lambda _match: clause, prompt, count=1)
    return prompt + clause


def build_seed_prompt(candidate: LinkCandidate) -> str:
    """Return the opening prompt for ``candidate``."""

    prompt = SEED_TEMPLATE.format(
        context=candidate.sentence_context,
        description=candidate.description,
    )
    return with_rejected_clause(prompt, candidate.rejected_urls)


def already_rejected_message(url: str) -> str:
    return f"You already suggested {url} and I rejected it. Please provide a different URL."


def unreachable_message(url: str, status: int, rejected_urls: Sequence[str]) -> str:
    return (
        f"The URL {url} is not accessible (HTTP {status}). Please provide a working URL "
        f"that is NOT any of these rejected URLs: {', '.join(rejected_urls)}"
    )


def context_message(context: str, rejected_urls: Sequence[str]) -> str:
    return (
        f"{context} (Note: Do NOT suggest any of these rejected URLs: "
        f"{', '.join(rejected_urls)})"
    )


def search_query(candidate: LinkCandidate) -> str:
    """Return the web search query used for ``candidate``."""

    if candidate.label.strip().lower() in candidate.description.lower():
        return candidate.description.strip()
    return f"{candidate.label.strip()} {candidate.description.strip()}"


__all__ = [
    "REJECTED_CLAUSE_PREFIX",
    "SEED_TEMPLATE",
    "already_rejected_message",
    "build_seed_prompt",
    "context_message",
    "rejected_clause",
    "search_query",
    "unreachable_message",
    "with_rejected_clause",
]
