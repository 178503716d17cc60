"""
=============================================================================
STATIC FILE STORE
=============================================================================

Resolves a resource key to the bytes served as a response body.

The core only needs one thing from a store:

    load(key) -> bytes          raise ResourceUnavailable if it can't

Two stores are provided:

    StaticFileStore("/var/www")     files on disk, re-read per request
    MemoryFileStore({...})          a fixed mapping, handy in tests

Stores are shared by every connection thread but are only ever read, so
they need no locking.

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

Keys come from the route table, not from the client, but the disk store
still refuses to leave its root directory:

    full_path = (root_dir / key).resolve()
    full_path.relative_to(root_dir)  # Raises if outside root!

=============================================================================
"""

import logging
from pathlib import Path
from typing import Dict, Mapping, Protocol, Union
from ..exceptions import ResourceUnavailable


logger = logging.getLogger(__name__)


class FileStore(Protocol):
    """Anything that can load a resource's bytes by key."""

    def load(self, key: str) -> bytes:
        ...


class StaticFileStore:
    """
    Serves resources from files under a root directory.

    Files are read on every call, so edits on disk show up on the next
    request without a restart.

    Usage:
        store = StaticFileStore("./public")
        store.load("hello.html")   # b"<html>..."
        store.load("nope.html")    # raises ResourceUnavailable
    """

    def __init__(self, root_dir: Union[str, Path]):
        # Resolve to absolute path (important for the traversal check)
        self.root_dir = Path(root_dir).resolve()

        if not self.root_dir.is_dir():
            raise ValueError(f"Document root does not exist: {root_dir}")

    def resolve(self, key: str) -> Path:
        """
        Map a key to a path inside the root directory.

        Raises:
            ResourceUnavailable: If the key escapes the root directory or
                                 isn't a usable path.
        """
        try:
            full_path = (self.root_dir / key.lstrip("/")).resolve()
        except (OSError, RuntimeError, ValueError) as e:
            # Embedded null byte (ValueError) or symlink loop (RuntimeError before 3.13)
            raise ResourceUnavailable(key, str(e)) from e
        try:
            full_path.relative_to(self.root_dir)
        except ValueError:
            logger.warning(f"Path traversal attempt: {key}")
            raise ResourceUnavailable(key, "outside document root")
        return full_path

    def load(self, key: str) -> bytes:
        path = self.resolve(key)
        if not path.is_file():
            raise ResourceUnavailable(key, "no such file")
        try:
            return path.read_bytes()
        except OSError as e:
            raise ResourceUnavailable(key, e.strerror or str(e)) from e

    def __repr__(self) -> str:
        return f"StaticFileStore({str(self.root_dir)!r})"


class MemoryFileStore:
    """Serves resources from an in-memory mapping of key to bytes or str."""

    def __init__(self, resources: Mapping[str, Union[bytes, str]]):
        self._resources: Dict[str, bytes] = {
            key: value.encode("utf-8") if isinstance(value, str) else bytes(value)
            for key, value in resources.items()
        }

    def load(self, key: str) -> bytes:
        try:
            return self._resources[key]
        except KeyError:
            raise ResourceUnavailable(key, "not in store") from None

    def __contains__(self, key: str) -> bool:
        return key in self._resources
