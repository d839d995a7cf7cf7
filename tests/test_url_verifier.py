from __future__ import annotations

import socket
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from linkresolver.services import UrlVerifier, VerificationResult


def _make_handler(state: dict[str, list[tuple[str, str]]]) -> type[BaseHTTPRequestHandler]:
    class Handler(BaseHTTPRequestHandler):
        def _respond(self, method: str) -> None:
            state["requests"].append((method, self.path))
            if self.path == "/ok":
                self.send_response(200)
            elif self.path == "/moved":
                self.send_response(301)
                self.send_header("Location", "/ok")
            elif self.path == "/no-head" and method == "HEAD":
                self.close_connection = True
                return
            elif self.path == "/no-head":
                self.send_response(200)
            elif self.path == "/head-not-allowed" and method == "HEAD":
                self.send_response(405)
            else:
                self.send_response(404)
            self.send_header("Content-Length", "0")
            self.end_headers()

        def do_HEAD(self) -> None:  # noqa: N802 - signature defined by BaseHTTPRequestHandler
            self._respond("HEAD")

        def do_GET(self) -> None:  # noqa: N802 - signature defined by BaseHTTPRequestHandler
            self._respond("GET")

        def log_message(self, format: str, *args: object) -> None:  # noqa: D401, N802 - disable noisy logs
            """Silence default request logging during tests."""

    return Handler


@pytest.fixture()
def site() -> tuple[dict[str, list[tuple[str, str]]], str]:
    state: dict[str, list[tuple[str, str]]] = {"requests": []}
    server = ThreadingHTTPServer(("127.0.0.1", 0), _make_handler(state))
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    base_url = f"http://{server.server_address[0]}:{server.server_address[1]}"
    try:
        yield state, base_url
    finally:
        server.shutdown()
        thread.join()


def test_reachable_url_is_accepted(site: tuple[dict, str]) -> None:
    state, base_url = site

    result = UrlVerifier(timeout=5).verify(f"{base_url}/ok")

    assert result.reachable is True
    assert result.status == 200
    assert state["requests"] == [("HEAD", "/ok")]


def test_missing_page_reports_status(site: tuple[dict, str]) -> None:
    _state, base_url = site

    result = UrlVerifier(timeout=5).verify(f"{base_url}/gone")

    assert result.reachable is False
    assert result.status == 404


def test_redirects_are_followed(site: tuple[dict, str]) -> None:
    _state, base_url = site

    result = UrlVerifier(timeout=5).verify(f"{base_url}/moved")

    assert result.reachable is True
    assert result.status == 200


def test_get_is_used_when_head_gets_no_answer(site: tuple[dict, str]) -> None:
    state, base_url = site

    result = UrlVerifier(timeout=5).verify(f"{base_url}/no-head")

    assert result.reachable is True
    assert state["requests"] == [("HEAD", "/no-head"), ("GET", "/no-head")]


def test_error_status_from_head_is_final(site: tuple[dict, str]) -> None:
    state, base_url = site

    result = UrlVerifier(timeout=5).verify(f"{base_url}/head-not-allowed")

    assert result.reachable is False
    assert result.status == 405
    assert state["requests"] == [("HEAD", "/head-not-allowed")]


def test_unreachable_host_reports_status_zero() -> None:
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]

    result = UrlVerifier(timeout=2).verify(f"http://127.0.0.1:{port}/")

    assert result.reachable is False
    assert result.status == 0


def test_malformed_url_is_unreachable() -> None:
    result = UrlVerifier().verify("not a url")

    assert result.reachable is False
    assert result.status == 0


@pytest.mark.parametrize("payload", [b"", b"SSH-2.0-OpenSSH_9.6\r\n", b"HTTP/1.1 abc\r\n\r\n"])
def test_broken_servers_are_unreachable(raw_server, payload: bytes) -> None:
    url = raw_server(payload) + "/page"

    result = UrlVerifier(timeout=2).verify(url)

    assert result == VerificationResult(url=url, reachable=False, status=0)
