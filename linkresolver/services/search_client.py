"""Ranked web search through a SearxNG instance."""

from __future__ import annotations

import http.client
import json
import logging
from dataclasses import dataclass
from typing import Any
from urllib import error, parse, request

from ..logging import log_call
from .errors import ServiceCallError

logger = logging.getLogger(__name__)


class SearchServiceError(ServiceCallError):
    """Raised when the search service cannot answer a query."""


@dataclass(frozen=True, slots=True)
class SearchResult:
    url: str
    title: str = ""
    snippet: str = ""


class SearchClient:
    """Query the SearxNG JSON API and return de-duplicated results in rank order."""

    def __init__(
        self,
        base_url: str,
        *,
        max_results: int = 5,
        timeout: float = 15.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self.max_results = max(max_results, 1)
        self.timeout = timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    @log_call(logger=logger, include_result=True)
    def search(self, query: str) -> list[SearchResult]:
        if not query.strip():
            return []
        params = parse.urlencode({"q": query, "format": "json", "safesearch": "1"})
        url = f"{self._base_url}/search?{params}"
        request_obj = request.Request(url, headers={"Accept": "application/json"})
        try:
            with request.urlopen(request_obj, timeout=self.timeout) as response:
                body = response.read()
        except error.HTTPError as exc:
            raise SearchServiceError(f"Search service returned HTTP {exc.code}") from exc
        except (error.URLError, TimeoutError) as exc:
            reason = getattr(exc, "reason", exc)
            raise SearchServiceError(f"Search service unreachable: {reason}") from exc
        except (OSError, http.client.HTTPException) as exc:
            raise SearchServiceError(
                f"Search service connection failed: {exc or type(exc).__name__}"
            ) from exc

        try:
            data = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            raise SearchServiceError("Invalid JSON from search service") from None
        return self._parse_results(data)

    def _parse_results(self, data: Any) -> list[SearchResult]:
        batch = data.get("results", []) if isinstance(data, dict) else []
        results: list[SearchResult] = []
        seen: set[str] = set()
        for item in batch if isinstance(batch, list) else []:
            if not isinstance(item, dict):
                continue
            url = str(item.get("url") or "").strip()
            if not url or url in seen:
                continue
            seen.add(url)
            results.append(
                SearchResult(
                    url=url,
                    title=str(item.get("title") or "").strip(),
                    snippet=str(item.get("content") or "").strip(),
                )
            )
            if len(results) >= self.max_results:
                break
        return results


__all__ = ["SearchClient", "SearchResult", "SearchServiceError"]
