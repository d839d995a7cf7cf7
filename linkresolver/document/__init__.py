"""Placeholder link discovery, document models and patching."""

from .io import DocumentError, LoadedDocument, read_document, write_document
from .links import URL_PREFIXES, extract_links, is_url
from .models import (
    ChatTurn,
    ConversationTranscript,
    LinkCandidate,
    LinkState,
    Settled,
    Skipped,
    Span,
    Unresolved,
    render_link,
)
from .patcher import PatchConflictError, apply_resolutions
from .sentences import extract_sentence

__all__ = [
    "ChatTurn",
    "ConversationTranscript",
    "DocumentError",
    "LinkCandidate",
    "LinkState",
    "LoadedDocument",
    "PatchConflictError",
    "Settled",
    "Skipped",
    "Span",
    "URL_PREFIXES",
    "Unresolved",
    "apply_resolutions",
    "extract_links",
    "extract_sentence",
    "is_url",
    "read_document",
    "render_link",
    "write_document",
]
