"""
=============================================================================
REQUEST ROUTER
=============================================================================

Maps the first request line to a (status, resource) pair.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          ROUTING FLOW                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Request Lines                                                      │
    │   ["GET / HTTP/1.1", "Host: x", ...]                                 │
    │        │                                                             │
    │        │  only line 0 is looked at                                   │
    │        ▼                                                             │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  ROUTER                                                      │   │
    │   │                                                              │   │
    │   │  Registered Routes (exact, case-sensitive match):            │   │
    │   │    "GET / HTTP/1.1"  → 200 OK, hello.html    ← MATCH!         │   │
    │   │                                                              │   │
    │   │  Fallback:                                                   │   │
    │   │    anything else     → 404 NOT FOUND, 404.html               │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │        │                                                             │
    │        ▼                                                             │
    │   RoutingDecision(status=200, resource="hello.html")                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

There is no path normalisation, no query-string handling and no header
inspection. "get / HTTP/1.1", "GET / HTTP/1.0" and "GET /?a=1 HTTP/1.1"
are all 404s.

The route table is the one place to grow if more pages are ever needed;
the reader and writer don't know routes exist.

=============================================================================
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)


INDEX_RESOURCE = "hello.html"
"""Resource key served for the root request."""

ERROR_RESOURCE = "404.html"
"""Resource key served for every request that matches no route."""

ROOT_REQUEST_LINE = "GET / HTTP/1.1"


@dataclass(frozen=True)
class RoutingDecision:
    """
    The outcome of routing one request.

    Attributes:
        status: Status to answer with.
        resource: Key to load the response body from the file store.
    """

    status: HTTPStatus
    resource: str

    @property
    def found(self) -> bool:
        return self.status.is_success


@dataclass(frozen=True)
class Route:
    """A single exact-match route: one request line to one resource."""

    request_line: str
    resource: str
    status: HTTPStatus = HTTPStatus.OK

    def matches(self, request_line: str) -> bool:
        """Byte-exact, case-sensitive comparison."""
        return request_line == self.request_line


class Router:
    """
    Exact-match request router.

    Routes are checked in the order they were added; the first match wins.
    If nothing matches, the fallback decision is returned.

    Usage:
        router = Router()
        router.add_route("GET / HTTP/1.1", "hello.html")

        decision = router.decide(["GET / HTTP/1.1", "Host: x"])
        decision.status        # HTTPStatus.OK
        decision.resource      # "hello.html"
    """

    def __init__(self, not_found: Optional[RoutingDecision] = None):
        self._routes: List[Route] = []
        self.not_found = not_found or RoutingDecision(HTTPStatus.NOT_FOUND, ERROR_RESOURCE)

    @property
    def routes(self) -> List[Route]:
        return list(self._routes)

    def add_route(
        self,
        request_line: str,
        resource: str,
        status: HTTPStatus = HTTPStatus.OK,
    ) -> "Router":
        """
        Register an exact request line.

        Returns:
            Self for method chaining.
        """
        self._routes.append(Route(request_line, resource, status))
        logger.debug(f"Registered route {request_line!r} → {resource}")
        return self

    def decide(self, lines: Sequence[str]) -> RoutingDecision:
        """
        Route a request by its first line.

        Args:
            lines: Request Lines from the reader. Must not be empty; an
                   empty request never gets this far.

        Returns:
            The decision for the first matching route, or the fallback.

        Raises:
            ValueError: If lines is empty.
        """
        if not lines:
            raise ValueError("Cannot route an empty request")

        request_line = lines[0]
        for route in self._routes:
            if route.matches(request_line):
                return RoutingDecision(route.status, route.resource)

        return self.not_found


def default_router() -> Router:
    """Router with the single root route this server ships with."""
    return Router().add_route(ROOT_REQUEST_LINE, INDEX_RESOURCE)


def route_request(lines: Sequence[str]) -> RoutingDecision:
    """Route with the default router."""
    return default_router().decide(lines)
