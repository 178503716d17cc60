"""
Unit tests for response formatting and writing.
"""

import io

import pytest

from hellohttp import MemoryFileStore, ResourceUnavailable, StaticFileStore, WriteFailure
from hellohttp.http.response import HTTPResponse, build_response, send_bytes, write_response
from hellohttp.http.router import ERROR_RESOURCE, INDEX_RESOURCE, RoutingDecision
from hellohttp.http.status_codes import HTTPStatus


OK_DECISION = RoutingDecision(HTTPStatus.OK, INDEX_RESOURCE)
NOT_FOUND_DECISION = RoutingDecision(HTTPStatus.NOT_FOUND, ERROR_RESOURCE)


class RecordingStream(io.BytesIO):
    """BytesIO that remembers how many write and flush calls it saw."""

    def __init__(self):
        super().__init__()
        self.writes = 0
        self.flushes = 0

    def write(self, data):
        self.writes += 1
        return super().write(data)

    def flush(self):
        self.flushes += 1
        super().flush()


class ShortWriteStream:
    """A raw stream that only accepts half of what it's given."""

    def write(self, data):
        return len(data) // 2

    def flush(self):
        pass


class BrokenStream:
    """A stream whose peer has gone away."""

    def write(self, data):
        raise BrokenPipeError("Broken pipe")

    def flush(self):
        pass


class FailingFlushStream:
    def write(self, data):
        return len(data)

    def flush(self):
        raise ConnectionResetError("Connection reset by peer")


class TestHTTPResponse:
    """Tests for HTTPResponse."""

    def test_status_lines(self):
        """Status lines use the exact reason phrases."""
        assert HTTPResponse(status=HTTPStatus.OK).status_line == "HTTP/1.1 200 OK"
        assert HTTPResponse(status=HTTPStatus.NOT_FOUND).status_line == "HTTP/1.1 404 NOT FOUND"

    def test_to_bytes(self):
        """Serialization is status line, Content-Length, blank line, body."""
        response = HTTPResponse(status=HTTPStatus.OK, body=b"<html>ok</html>")

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\nContent-Length: 15\r\n\r\n<html>ok</html>"
        )

    def test_content_length_counts_bytes(self):
        """Content-Length is bytes, not characters."""
        body = "héllo wörld".encode("utf-8")
        response = HTTPResponse(body=body)

        assert response.content_length == len(body) == 13
        assert b"Content-Length: 13\r\n" in response.to_bytes()

    def test_single_header_separator(self):
        """Exactly one blank line separates headers from body."""
        data = HTTPResponse(body=b"<p>line one</p>\n<p>line two</p>").to_bytes()

        assert data.count(b"\r\n\r\n") == 1
        head, body = data.split(b"\r\n\r\n")
        assert head.split(b"\r\n") == [b"HTTP/1.1 200 OK", b"Content-Length: 31"]
        assert body == b"<p>line one</p>\n<p>line two</p>"

    def test_empty_body(self):
        """An empty resource gives Content-Length 0."""
        assert HTTPResponse().to_bytes() == b"HTTP/1.1 200 OK\r\nContent-Length: 0\r\n\r\n"

    def test_no_other_headers(self):
        """Only Content-Length is emitted."""
        head = HTTPResponse(body=b"x").to_bytes().split(b"\r\n\r\n")[0]

        assert head.count(b"\r\n") == 1


class TestBuildResponse:
    """Tests for build_response()."""

    def test_loads_body_from_store(self, store):
        response = build_response(NOT_FOUND_DECISION, store)

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body == b"<html>no</html>"

    def test_missing_resource(self):
        """A missing resource raises ResourceUnavailable."""
        with pytest.raises(ResourceUnavailable) as exc_info:
            build_response(OK_DECISION, MemoryFileStore({}))

        assert exc_info.value.key == INDEX_RESOURCE

    def test_store_os_error_becomes_resource_unavailable(self):
        """Raw I/O errors from a store are wrapped."""
        class DiskStore:
            def load(self, key):
                raise PermissionError(13, "Permission denied")

        with pytest.raises(ResourceUnavailable):
            build_response(OK_DECISION, DiskStore())

    def test_any_store_error_becomes_resource_unavailable(self):
        """A store failing in its own way is still just an unavailable resource."""
        class LookupStore:
            def load(self, key):
                raise KeyError(key)

        with pytest.raises(ResourceUnavailable) as exc_info:
            build_response(OK_DECISION, LookupStore())

        assert exc_info.value.key == INDEX_RESOURCE
        assert isinstance(exc_info.value.__cause__, KeyError)

    def test_unusable_key_on_disk(self, tmp_path):
        """A key the filesystem can't represent is unavailable, not a crash."""
        decision = RoutingDecision(HTTPStatus.OK, "hello\x00.html")

        with pytest.raises(ResourceUnavailable):
            build_response(decision, StaticFileStore(tmp_path))


class TestWriteResponse:
    """Tests for write_response() and send_bytes()."""

    def test_writes_full_response_once_and_flushes(self, store):
        """One write, one flush, the whole response."""
        stream = RecordingStream()

        written = write_response(OK_DECISION, store, stream)

        assert stream.getvalue() == b"HTTP/1.1 200 OK\r\nContent-Length: 15\r\n\r\n<html>ok</html>"
        assert written == len(stream.getvalue())
        assert stream.writes == 1
        assert stream.flushes >= 1

    def test_nothing_written_when_resource_missing(self):
        """ResourceUnavailable means no bytes go out."""
        stream = RecordingStream()

        with pytest.raises(ResourceUnavailable):
            write_response(OK_DECISION, MemoryFileStore({}), stream)

        assert stream.getvalue() == b""
        assert stream.writes == 0

    def test_short_write(self):
        """A partial write is a WriteFailure."""
        with pytest.raises(WriteFailure) as exc_info:
            send_bytes(ShortWriteStream(), b"0123456789")

        assert exc_info.value.written == 5
        assert exc_info.value.expected == 10

    def test_broken_pipe(self, store):
        """Socket errors while writing are a WriteFailure."""
        with pytest.raises(WriteFailure):
            write_response(OK_DECISION, store, BrokenStream())

    def test_flush_failure(self, store):
        """Errors on flush are a WriteFailure too."""
        with pytest.raises(WriteFailure):
            write_response(OK_DECISION, store, FailingFlushStream())


class TestHTTPStatus:
    """Tests for HTTPStatus enum."""

    def test_status_phrases(self):
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.NOT_FOUND.phrase == "NOT FOUND"

    def test_status_is_int(self):
        assert HTTPStatus.OK == 200
        assert HTTPStatus.NOT_FOUND == 404
        assert HTTPStatus.OK.is_success
        assert not HTTPStatus.NOT_FOUND.is_success
