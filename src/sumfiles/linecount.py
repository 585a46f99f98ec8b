import logging
import mimetypes
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO

from .config import RunState
from .errors import LineCountError
from .models import LineCount

logger = logging.getLogger(__name__)

TextOracle = Callable[[str], str]

SNIFF_BYTES: int = 1024
ANOMALY_LOG: Path = Path("lc_anomalies.txt")


def init_oracle(state: RunState) -> None:
    if not state.oracle_initialized:
        mimetypes.init()
        state.oracle_initialized = True


def detect_mime(path: str) -> str:
    """
    Return a MIME-like description of a file.

    A `text/*` guess from the file name is trusted as is. Anything else is
    confirmed by sniffing the head of the file, so text formats with an
    unknown or non-text registered type (source files, JSON, ...) are still
    reported as text. Returns an empty string when the file can't be read.
    """
    guessed, _ = mimetypes.guess_type(path)
    if guessed is not None and guessed.startswith("text/"):
        return guessed

    try:
        with open(path, "rb") as f:
            head: bytes = f.read(SNIFF_BYTES)
    except OSError:
        return ""

    if not head:
        return "inode/x-empty"
    if b"\x00" in head:
        return guessed or "application/octet-stream"
    try:
        _ = head.decode("utf-8")
    except UnicodeDecodeError as e:
        # A multi-byte character cut off at the sniff boundary is still text.
        if e.start < len(head) - 3:
            return guessed or "application/octet-stream"
    return "text/plain"


def is_text(mime: str) -> bool:
    return "text" in mime


def count_newlines(stream: BinaryIO, chunk_size: int = 32 * 1024) -> int:
    count: int = 0
    for chunk in iter(lambda: stream.read(chunk_size), b""):
        count += chunk.count(b"\n")
    return count


def _count_file(path: str, chunk_size: int) -> int:
    try:
        with open(path, "rb") as f:
            return count_newlines(f, chunk_size)
    except OSError as e:
        raise LineCountError(f"{path}: {e.strerror or e}") from e


def trace_anomaly(path: str, mime: str, trace_path: Path = ANOMALY_LOG) -> None:
    try:
        with trace_path.open("a", encoding="utf-8") as f:
            _ = f.write(f"{path}: mimetype={mime}\n")
    except OSError as e:
        logger.warning("Unable to write %s: %s", trace_path, e)


def maybe_count_lines(
    path: str,
    oracle: TextOracle = detect_mime,
    *,
    chunk_size: int = 32 * 1024,
    trace_path: Path | None = None,
) -> LineCount:
    """
    Count the lines of `path` when the oracle reports it as text.

    Non-text files contribute zero lines without an error. I/O failures
    never raise; they come back as a `LineCount` carrying the reason.
    """
    mime: str = oracle(path)

    if not is_text(mime):
        if trace_path is not None and not mime:
            trace_anomaly(path, mime, trace_path)
        return LineCount(lines=0)

    try:
        lines: int = _count_file(path, chunk_size)
    except LineCountError as e:
        return LineCount(lines=0, error=str(e))

    logger.debug("%s: %d lines", path, lines)
    return LineCount(lines=lines)
