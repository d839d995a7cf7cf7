"""External service clients and the link resolution workflow."""

from .chat_client import (
    ChatClient,
    ChatConnectionError,
    ChatReply,
    ChatResponseError,
    ChatServiceError,
)
from .commands import InvalidUserURLError, parse_command
from .errors import AutomaticRetryLimitError, ServiceCallError, SuggestionParseError
from .resolver import ConversationalResolver, InteractionController
from .search_client import SearchClient, SearchResult, SearchServiceError
from .session import ResolutionSession, SessionOutcome
from .suggestions import Suggestion, SuggestionOption, parse_suggestion
from .verifier import UrlVerifier, VerificationResult

__all__ = [
    "AutomaticRetryLimitError",
    "ChatClient",
    "ChatConnectionError",
    "ChatReply",
    "ChatResponseError",
    "ChatServiceError",
    "ConversationalResolver",
    "InteractionController",
    "InvalidUserURLError",
    "ResolutionSession",
    "SearchClient",
    "SearchResult",
    "SearchServiceError",
    "ServiceCallError",
    "SessionOutcome",
    "Suggestion",
    "SuggestionOption",
    "SuggestionParseError",
    "UrlVerifier",
    "VerificationResult",
    "parse_command",
    "parse_suggestion",
]
