"""Reachability checks for suggested URLs."""

from __future__ import annotations

import http.client
import logging
from dataclasses import dataclass
from urllib import error, request

from ..logging import log_call

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
USER_AGENT = "linkresolver/0.1 (+link verification)"


@dataclass(frozen=True, slots=True)
class VerificationResult:
    """Outcome of checking a URL. ``status`` is ``0`` for transport failures."""

    url: str
    reachable: bool
    status: int


class UrlVerifier:
    """Check that a URL answers with a 2xx or 3xx status."""

    def __init__(self, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout

    @log_call(logger=logger, include_result=True)
    def verify(self, url: str) -> VerificationResult:
        """Request ``url`` with HEAD, falling back to GET on transport failure."""

        status = self._fetch_status(url, "HEAD")
        if status is None:
            logger.debug("HEAD request failed, retrying with GET", extra={"url": url})
            status = self._fetch_status(url, "GET")
        if status is None:
            return VerificationResult(url=url, reachable=False, status=0)
        return VerificationResult(url=url, reachable=200 <= status < 400, status=status)

    def _fetch_status(self, url: str, method: str) -> int | None:
        """Return the HTTP status for ``method`` or ``None`` when nothing answered."""

        try:
            request_obj = request.Request(
                url, headers={"User-Agent": USER_AGENT}, method=method
            )
            with request.urlopen(request_obj, timeout=self.timeout) as response:
                return response.getcode()
        except error.HTTPError as exc:
            return exc.code
        except (
            error.URLError,
            TimeoutError,
            ValueError,
            OSError,
            http.client.HTTPException,
        ) as exc:
            logger.info(
                "URL check failed",
                extra={"url": url, "method": method, "error": str(exc)},
            )
            return None


__all__ = ["UrlVerifier", "VerificationResult"]
