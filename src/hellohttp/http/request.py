"""
=============================================================================
REQUEST READER
=============================================================================

Pulls line-delimited text off a raw byte stream.

The server only ever looks at the REQUEST LINE, but it still reads the
whole header block so the client sees its request consumed before the
response arrives:

    GET / HTTP/1.1\r\n          ← line 0 (the only line routing uses)
    Host: localhost\r\n         ← read, kept, ignored
    User-Agent: curl/8.0\r\n    ← read, kept, ignored
    \r\n                        ← blank line: stop reading here

=============================================================================
TOLERANT DECODING
=============================================================================

A line that is not valid UTF-8 is DROPPED and reading continues with the
next line. Nothing is raised to the caller:

    b"GET / HTTP/1.1\r\n"      → "GET / HTTP/1.1"
    b"X-Bad: \xff\xfe\r\n"      → (dropped)
    b"Host: x\r\n"              → "Host: x"
    b"\r\n"                     → stop

If the dropped line happens to be line 0, the next decodable line is
treated as the request line.

=============================================================================
"""

import logging
from typing import BinaryIO, Iterator, List


logger = logging.getLogger(__name__)


def _strip_line_ending(raw: bytes) -> bytes:
    """Remove a trailing \\n and, before it, an optional \\r."""
    if raw.endswith(b"\n"):
        raw = raw[:-1]
        if raw.endswith(b"\r"):
            raw = raw[:-1]
    return raw


def iter_lines(stream: BinaryIO) -> Iterator[str]:
    """
    Lazily yield decoded lines from a binary stream until it ends.

    Undecodable lines are skipped. A peer that resets the connection
    mid-read is treated the same as one that closed it cleanly.

    Args:
        stream: Any binary file-like object with readline()
                (e.g. socket.makefile("rb") or io.BytesIO).

    Yields:
        Each line with its line ending removed.
    """
    while True:
        try:
            raw = stream.readline()
        except (ConnectionResetError, BrokenPipeError):
            # Client disconnected abruptly
            return

        if not raw:
            return  # EOF

        try:
            yield _strip_line_ending(raw).decode("utf-8")
        except UnicodeDecodeError:
            logger.debug(f"Dropping undecodable request line: {raw[:64]!r}")
            continue


def read_request_lines(stream: BinaryIO) -> List[str]:
    """
    Read request lines up to (not including) the first blank line.

    Reading stops at the first empty line or at end of stream, whichever
    comes first. Returns an empty list if the client closed without
    sending anything.
    """
    lines: List[str] = []
    for line in iter_lines(stream):
        if not line:
            break
        lines.append(line)
    return lines
