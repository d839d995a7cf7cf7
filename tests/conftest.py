from __future__ import annotations

import socket
import sys
import threading
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture()
def config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the per-user configuration directory at a temporary location."""

    home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home))
    monkeypatch.setenv("APPDATA", str(home))
    return home


@pytest.fixture()
def raw_server():
    """Start TCP servers that read a request, send fixed bytes and hang up.

    Calling the fixture with a payload returns the server's base URL. An
    empty payload closes the connection without any reply.
    """

    running: list[tuple[socket.socket, threading.Event, threading.Thread]] = []

    def start(payload: bytes = b"") -> str:
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.bind(("127.0.0.1", 0))
        listener.listen()
        listener.settimeout(0.2)
        stop = threading.Event()

        def serve() -> None:
            while not stop.is_set():
                try:
                    conn, _address = listener.accept()
                except socket.timeout:
                    continue
                except OSError:
                    break
                with conn:
                    conn.settimeout(2)
                    try:
                        conn.recv(65536)
                        if payload:
                            conn.sendall(payload)
                    except OSError:
                        pass

        thread = threading.Thread(target=serve, daemon=True)
        thread.start()
        running.append((listener, stop, thread))
        host, port = listener.getsockname()
        return f"http://{host}:{port}"

    yield start

    for listener, stop, thread in running:
        stop.set()
        thread.join()
        listener.close()
