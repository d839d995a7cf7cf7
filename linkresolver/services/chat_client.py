"""Client for OpenAI-compatible chat completion endpoints."""

from __future__ import annotations

import http.client
import json
import logging
import socket
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any
from urllib import error, request

from ..document.models import ChatTurn
from ..logging import log_call
from .errors import ServiceCallError


logger = logging.getLogger(__name__)


DEFAULT_BASE_URL = "https://api.openai.com"
DEFAULT_MODEL = "gpt-4o-mini"
CHAT_COMPLETIONS_PATH = "/v1/chat/completions"
RETRYABLE_STATUSES = frozenset({408, 409, 429, 500, 502, 503, 504})


class ChatServiceError(ServiceCallError):
    """Base exception for chat service failures."""


class ChatConnectionError(ChatServiceError):
    """Raised when the chat service cannot be reached."""


class ChatResponseError(ChatServiceError):
    """Raised when the chat service returns an invalid response."""


@dataclass(frozen=True)
class ChatReply:
    """The first completion returned for a request."""

    role: str
    content: str
    raw_response: dict[str, Any]


class ChatClient:
    """Small HTTP client for the chat completions API."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        timeout: float = 60.0,
        max_retries: int = 2,
        retry_backoff: float = 0.5,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/") or DEFAULT_BASE_URL
        self._model = model
        self.timeout = timeout
        self.max_retries = max(max_retries, 0)
        self.retry_backoff = retry_backoff
        logger.debug(
            "Chat client configured",
            extra={"base_url": self._base_url, "model": self._model},
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def model(self) -> str:
        return self._model

    @log_call(logger=logger, include_result=True)
    def complete(self, messages: Sequence[ChatTurn]) -> ChatReply:
        """Send the conversation ``messages`` and return the first completion."""

        payload = {
            "model": self._model,
            "messages": [message.to_payload() for message in messages],
        }
        logger.info(
            "Dispatching chat request",
            extra={
                "message_count": len(payload["messages"]),
                "model": self._model,
                "base_url": self._base_url,
            },
        )
        data = self._request_json("POST", CHAT_COMPLETIONS_PATH, payload)
        return self._parse_chat_response(data)

    def _request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> bytes:
        url = f"{self._base_url}{path}"
        data: bytes | None = None
        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }
        if payload is not None:
            data = json.dumps(payload).encode("utf-8")
            headers["Content-Type"] = "application/json"
        request_obj = request.Request(url, data=data, headers=headers, method=method)
        last_error: ChatServiceError | None = None
        for attempt in range(self.max_retries + 1):
            try:
                logger.debug(
                    "Chat request attempt",
                    extra={"method": method, "url": url, "attempt": attempt + 1},
                )
                with request.urlopen(request_obj, timeout=self.timeout) as response:
                    return response.read()
            except error.HTTPError as exc:
                body = exc.read() if hasattr(exc, "read") else b""
                last_error = ChatResponseError(
                    self._build_http_error_message(exc.code, body)
                )
                if not self._should_retry(exc.code):
                    break
            except error.URLError as exc:
                if isinstance(exc.reason, (TimeoutError, socket.timeout)):
                    last_error = ChatConnectionError("Chat request timed out")
                else:
                    last_error = ChatConnectionError(str(exc.reason))
            except TimeoutError:
                last_error = ChatConnectionError("Chat request timed out")
            except (OSError, http.client.HTTPException) as exc:
                last_error = ChatConnectionError(
                    f"Chat connection failed: {exc or type(exc).__name__}"
                )
            if attempt < self.max_retries:
                logger.warning(
                    "Chat request failed, retrying",
                    extra={
                        "method": method,
                        "url": url,
                        "attempt": attempt + 1,
                        "error": str(last_error),
                    },
                )
                time.sleep(self.retry_backoff * (2**attempt))
        if last_error is not None:
            raise last_error
        raise ChatServiceError("Unexpected chat request failure")

    def _request_json(
        self, method: str, path: str, payload: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        body = self._request(method, path, payload)
        if not body:
            raise ChatResponseError("Empty response from chat service")
        try:
            data = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            raise ChatResponseError("Invalid JSON from chat service") from None
        if not isinstance(data, dict):
            raise ChatResponseError("Chat service response is not an object")
        return data

    @staticmethod
    def _should_retry(status: int | None) -> bool:
        return status is None or status in RETRYABLE_STATUSES

    @staticmethod
    def _parse_chat_response(data: dict[str, Any]) -> ChatReply:
        choices = data.get("choices")
        if not isinstance(choices, Iterable):
            raise ChatResponseError("Chat response missing choices")
        first = next(iter(choices), None)
        if not isinstance(first, dict):
            raise ChatResponseError("No response from AI")
        message = first.get("message")
        if not isinstance(message, dict):
            raise ChatResponseError("Chat response missing message")
        content = ChatClient._normalize_message_content(message.get("content"))
        role = message.get("role") if isinstance(message.get("role"), str) else "assistant"
        return ChatReply(role=role, content=content, raw_response=data)

    @staticmethod
    def _normalize_message_content(content: Any) -> str:
        """Return a usable string from ``content`` or raise an error."""

        if isinstance(content, str):
            return content
        if isinstance(content, Iterable):
            parts: list[str] = []
            for item in content:
                if isinstance(item, str):
                    parts.append(item)
                elif isinstance(item, dict):
                    text = item.get("text")
                    if isinstance(text, str):
                        parts.append(text)
            if parts:
                return "".join(parts)
        raise ChatResponseError("Chat message missing content")

    @staticmethod
    def _build_http_error_message(status: int | None, body: bytes | str | None) -> str:
        summary = ChatClient._summarize_error_body(body)
        if status is not None:
            if summary:
                return f"Chat service returned HTTP {status}: {summary}"
            return f"Chat service returned HTTP {status}"
        return summary or "Chat request failed"

    @staticmethod
    def _summarize_error_body(body: bytes | str | None) -> str:
        if body is None:
            return ""
        if isinstance(body, bytes):
            text = body.decode("utf-8", errors="replace")
        else:
            text = str(body)
        text = text.strip()
        if not text:
            return ""
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            return " ".join(text.split())
        if isinstance(data, dict):
            for bucket in (data.get("error"), data):
                if not isinstance(bucket, dict):
                    continue
                message = bucket.get("message") or bucket.get("detail")
                if message:
                    return " ".join(str(message).split())
        return " ".join(text.split())


__all__ = [
    "ChatClient",
    "ChatConnectionError",
    "ChatReply",
    "ChatResponseError",
    "ChatServiceError",
]
