"""
=============================================================================
RESPONSE WRITER
=============================================================================

Turns a routing decision into bytes on the wire.

=============================================================================
WIRE FORMAT
=============================================================================

    HTTP/1.1 200 OK\r\n              ← Status line
    Content-Length: 15\r\n           ← Byte length of the body
    \r\n                             ← The one blank line
    <html>ok</html>                  ← Body bytes, exactly Content-Length

No other headers are sent. Because the connection is closed right after
the response, Content-Length is what tells the client the body is
complete rather than truncated.

=============================================================================
ALL OR NOTHING
=============================================================================

The payload is built in full before anything is written, then handed to
the stream in ONE write() followed by an explicit flush(). If the write
comes up short or the socket errors, that is a WriteFailure: there is no
"partially responded" state to recover from.

=============================================================================
"""

import logging
from dataclasses import dataclass
from typing import BinaryIO

from ..exceptions import ResourceUnavailable, WriteFailure
from ..handlers.static import FileStore
from .router import RoutingDecision
from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)


@dataclass
class HTTPResponse:
    """
    A response ready to be serialized.

    Attributes:
        status: Status code (enum).
        body: Response body bytes.
        version: Protocol version for the status line.
    """

    status: HTTPStatus = HTTPStatus.OK
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 404 NOT FOUND"
        """
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def content_length(self) -> int:
        return len(self.body)

    def to_bytes(self) -> bytes:
        """Serialize to `<status-line>\\r\\nContent-Length: N\\r\\n\\r\\n<body>`."""
        head = f"{self.status_line}\r\nContent-Length: {self.content_length}\r\n\r\n"
        return head.encode("ascii") + self.body


def build_response(decision: RoutingDecision, store: FileStore) -> HTTPResponse:
    """
    Load the body for a decision and wrap it in a response.

    The resource is fetched fresh on every call; nothing is cached.

    Raises:
        ResourceUnavailable: If the store can't produce the resource.
    """
    try:
        body = store.load(decision.resource)
    except ResourceUnavailable:
        raise
    except Exception as e:
        # Any store failure means the same thing: there is no body to send
        raise ResourceUnavailable(decision.resource, str(e) or type(e).__name__) from e

    return HTTPResponse(status=decision.status, body=body)


def send_bytes(stream: BinaryIO, payload: bytes) -> int:
    """
    Write a payload in a single call and flush it.

    Returns:
        Number of bytes written.

    Raises:
        WriteFailure: On a short write or any socket error.
    """
    try:
        written = stream.write(payload)
        stream.flush()
    except OSError as e:
        raise WriteFailure(f"Write failed: {e}", expected=len(payload)) from e

    # Buffered streams return len(payload) or raise; raw ones may come up short
    if written is not None and written != len(payload):
        raise WriteFailure(
            f"Short write: {written} of {len(payload)} bytes",
            written=written,
            expected=len(payload),
        )
    return len(payload)


def write_response(decision: RoutingDecision, store: FileStore, stream: BinaryIO) -> int:
    """
    Load, format and send the response for a routing decision.

    Args:
        decision: Output of the router.
        store: Where the body comes from.
        stream: Writable binary stream for the connection.

    Returns:
        Number of bytes written.

    Raises:
        ResourceUnavailable: If the body can't be loaded (nothing is sent).
        WriteFailure: If the response isn't fully written.
    """
    response = build_response(decision, store)
    payload = response.to_bytes()
    logger.debug(f"Sending {response.status_line!r} with {response.content_length} byte body")
    return send_bytes(stream, payload)
