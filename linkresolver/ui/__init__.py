"""Interaction surfaces for reviewing link suggestions."""

from .console import ConsoleInteraction, highlight_link

__all__ = ["ConsoleInteraction", "highlight_link"]
