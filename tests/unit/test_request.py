"""
Unit tests for request line parsing.
"""

import pytest

from rawhttp.http.request import (
    HTTPRequest,
    HTTPParseError,
    first_line,
    split_request_line,
    parse_request,
)


class TestSplitRequestLine:
    """Tests for split_request_line()."""

    def test_full_request(self):
        """Test that only the first line is tokenized."""
        raw = (
            b"GET /notes.txt HTTP/1.1\r\n"
            b"Host: localhost:8080\r\n"
            b"User-Agent: pytest\r\n"
            b"\r\n"
        )
        assert split_request_line(raw) == ["GET", "/notes.txt", "HTTP/1.1"]

    def test_empty_buffer(self):
        assert split_request_line(b"") == []

    def test_blank_first_line(self):
        """A blank first line yields no tokens even if later lines have some."""
        assert split_request_line(b"\r\nGET / HTTP/1.1\r\n\r\n") == []

    def test_no_line_terminator(self):
        """Without a newline the whole buffer is the first line."""
        assert split_request_line(b"GET /a.txt HTTP/1.1") == ["GET", "/a.txt", "HTTP/1.1"]

    def test_bare_lf_terminator(self):
        assert split_request_line(b"GET / HTTP/1.0\nHost: x\n\n") == ["GET", "/", "HTTP/1.0"]

    def test_extra_whitespace_is_discarded(self):
        """Runs of spaces and tabs never produce empty tokens."""
        raw = b"  GET \t  /index.html   HTTP/1.1  \r\n"
        assert split_request_line(raw) == ["GET", "/index.html", "HTTP/1.1"]

    def test_single_token(self):
        assert split_request_line(b"GET\r\n\r\n") == ["GET"]

    def test_more_than_three_tokens(self):
        """No validation of token count beyond what the caller needs."""
        assert split_request_line(b"GET / HTTP/1.1 extra\r\n") == ["GET", "/", "HTTP/1.1", "extra"]

    def test_invalid_utf8_is_replaced(self):
        """Invalid byte sequences become U+FFFD instead of raising."""
        tokens = split_request_line(b"GET /caf\xe9.txt HTTP/1.1\r\n")
        assert tokens == ["GET", "/caf�.txt", "HTTP/1.1"]

    def test_valid_utf8_is_decoded(self):
        tokens = split_request_line("GET /café.txt HTTP/1.1\r\n".encode("utf-8"))
        assert tokens[1] == "/café.txt"

    def test_first_line_strips_crlf(self):
        assert first_line(b"GET / HTTP/1.1\r\nHost: x") == b"GET / HTTP/1.1"


class TestParseRequest:
    """Tests for parse_request()."""

    def test_parse_simple_get(self):
        """Test parsing a simple GET request."""
        request = parse_request(b"GET / HTTP/1.1\r\n\r\n", ("127.0.0.1", 12345))

        assert request.method == "GET"
        assert request.path == "/"
        assert request.version == "HTTP/1.1"
        assert request.client_address == ("127.0.0.1", 12345)

    def test_version_is_optional(self):
        request = parse_request(b"GET /notes.txt")

        assert request.path == "/notes.txt"
        assert request.version == ""

    def test_method_is_not_validated(self):
        """Unknown methods are parsed; rejecting them is the router's job."""
        request = parse_request(b"BREW /pot HTTP/1.1\r\n")
        assert request.method == "BREW"

    def test_method_is_case_sensitive(self):
        request = parse_request(b"get / HTTP/1.1\r\n")
        assert request.method == "get"

    def test_path_is_not_normalized(self):
        request = parse_request(b"GET /../etc/passwd HTTP/1.1\r\n")
        assert request.path == "/../etc/passwd"

    @pytest.mark.parametrize("raw", [
        b"",
        b"\r\n",
        b"   \r\n",
        b"GET\r\n\r\n",
        b"GET",
    ])
    def test_fewer_than_two_tokens(self, raw: bytes):
        """Test handling of malformed request line."""
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(raw)

        assert exc_info.value.status_code == 400
        assert str(exc_info.value) == "Invalid request format"


class TestHTTPRequest:
    """Tests for HTTPRequest dataclass."""

    def test_defaults(self):
        request = HTTPRequest(method="GET", path="/")

        assert request.version == ""
        assert request.client_address is None
