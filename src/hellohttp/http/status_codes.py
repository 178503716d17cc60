"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The statuses this server can answer with. There are only two outcomes of
routing, so there are only two codes:

    HTTP/1.1 200 OK             the root page was requested
    HTTP/1.1 404 NOT FOUND      anything else

Note the reason phrase "NOT FOUND" is upper-case on the wire. Clients
must not depend on the reason phrase (RFC 9112 §4), and existing
clients of this server already see it in this form, so it stays.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes with their reason phrases.

    IntEnum, so a status compares equal to its number:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'NOT FOUND'
    """

    OK = 200
    NOT_FOUND = 404

    @property
    def phrase(self) -> str:
        """Reason phrase that follows the code in a status line."""
        return _STATUS_PHRASES[self]

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "NOT FOUND",
}
