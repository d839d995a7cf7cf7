"""Reading and writing the document being resolved."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import chardet

from ..logging import log_call

logger = logging.getLogger(__name__)


class DocumentError(RuntimeError):
    """Raised when the input cannot be read or the output cannot be written."""


@dataclass(frozen=True, slots=True)
class LoadedDocument:
    """Document text together with the encoding it was decoded with."""

    path: Path
    text: str
    encoding: str


@log_call(logger=logger)
def read_document(path: str | Path) -> LoadedDocument:
    """Read ``path`` as text, detecting the encoding when it is not UTF-8."""

    resolved = Path(path)
    try:
        raw = resolved.read_bytes()
    except OSError as exc:
        raise DocumentError(f"failed to read input file {resolved}: {exc}") from exc

    encoding = "utf-8"
    try:
        text = raw.decode(encoding)
    except UnicodeDecodeError:
        detected = chardet.detect(raw)
        encoding = detected.get("encoding") or "utf-8"
        logger.info(
            "Input is not UTF-8, using detected encoding",
            extra={"path": str(resolved), "encoding": encoding},
        )
        text = raw.decode(encoding, errors="replace")
    return LoadedDocument(path=resolved, text=text, encoding=encoding)


@log_call(logger=logger)
def write_document(path: str | Path, text: str, *, encoding: str = "utf-8") -> Path:
    """Write ``text`` to ``path`` in one operation and return the path."""

    resolved = Path(path)
    try:
        with resolved.open("w", encoding=encoding, newline="") as fh:
            fh.write(text)
    except (OSError, UnicodeEncodeError) as exc:
        raise DocumentError(f"failed to write output file {resolved}: {exc}") from exc
    return resolved


__all__ = ["DocumentError", "LoadedDocument", "read_document", "write_document"]
