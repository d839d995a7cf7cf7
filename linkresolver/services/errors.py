"""Exceptions shared by the external service clients and the resolver."""

from __future__ import annotations


class ServiceCallError(RuntimeError):
    """Base exception for failures the user may retry."""


class SuggestionParseError(ServiceCallError):
    """Raised when a model reply does not carry a ``URL:`` line."""


class AutomaticRetryLimitError(ServiceCallError):
    """Raised when the resolver re-asked the model too often without the user."""


__all__ = ["AutomaticRetryLimitError", "ServiceCallError", "SuggestionParseError"]
