"""
=============================================================================
HTTP PROTOCOL MODULE
=============================================================================

    request.py       - Reading request lines off a byte stream
    router.py        - Mapping the request line to a status and resource
    response.py      - Formatting and writing the response
    status_codes.py  - The status codes this server answers with

=============================================================================
"""

from .status_codes import HTTPStatus
from .request import iter_lines, read_request_lines
from .router import (
    ERROR_RESOURCE,
    INDEX_RESOURCE,
    ROOT_REQUEST_LINE,
    Route,
    Router,
    RoutingDecision,
    default_router,
    route_request,
)
from .response import HTTPResponse, build_response, send_bytes, write_response

__all__ = [
    "HTTPStatus",
    "iter_lines",
    "read_request_lines",
    "ERROR_RESOURCE",
    "INDEX_RESOURCE",
    "ROOT_REQUEST_LINE",
    "Route",
    "Router",
    "RoutingDecision",
    "default_router",
    "route_request",
    "HTTPResponse",
    "build_response",
    "send_bytes",
    "write_response",
]
