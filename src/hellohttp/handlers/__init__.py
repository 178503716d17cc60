"""
Resource stores that supply response bodies.
"""

from .static import FileStore, MemoryFileStore, StaticFileStore

__all__ = ["FileStore", "MemoryFileStore", "StaticFileStore"]
