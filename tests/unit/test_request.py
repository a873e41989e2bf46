"""
Unit tests for request parsing.
"""

import pytest
from pydantic import ValidationError

from userservice.http.request import (
    RawRequest,
    extract_body,
    extract_resource_id,
    parse_request,
    parse_user_id,
    resource_id_segment,
)


GET_ONE = (
    b"GET /api/rust/users/42 HTTP/1.1\r\n"
    b"Host: localhost:8080\r\n"
    b"User-Agent: pytest\r\n"
    b"\r\n"
)

POST_USER = (
    b"POST /api/rust/users HTTP/1.1\r\n"
    b"Host: localhost:8080\r\n"
    b"Content-Type: application/json\r\n"
    b"\r\n"
    b'{"name": "Ann", "email": "a@x.com"}'
)


class TestParseRequest:
    """Tests for parse_request()."""

    def test_method_and_path(self):
        request = parse_request(GET_ONE, ("127.0.0.1", 12345))

        assert request.method == "GET"
        assert request.path == "/api/rust/users/42"
        assert request.client_address == ("127.0.0.1", 12345)

    def test_resource_id(self):
        request = parse_request(GET_ONE)
        assert request.resource_id == "42"
        assert request.user_id() == 42

    def test_body_after_blank_line(self):
        request = parse_request(POST_USER)

        assert request.method == "POST"
        assert request.path == "/api/rust/users"
        assert request.body == '{"name": "Ann", "email": "a@x.com"}'

    def test_collection_path_reads_past_the_request_line(self):
        # Fifth "/" piece of the whole text: "users HTTP" ends the fourth,
        # so the id comes from the protocol version.
        request = parse_request(POST_USER)
        assert request.resource_id == "1.1"

    def test_request_without_id_segment(self):
        request = parse_request(b"GET /api HTTP 1.1\r\n\r\n")
        assert request.resource_id == ""

    def test_accepts_text(self):
        request = parse_request("DELETE /api/rust/users/7 HTTP/1.1\r\n\r\n")
        assert request.method == "DELETE"
        assert request.resource_id == "7"

    def test_invalid_utf8_is_replaced(self):
        request = parse_request(b"GET /api/rust/users/\xff HTTP/1.1\r\n\r\n")
        assert request.method == "GET"
        assert request.resource_id == "\ufffd"

    def test_garbage_never_raises(self):
        request = parse_request(b"garbage")
        assert request.method == "garbage"
        assert request.path == ""
        assert request.resource_id == ""
        assert request.body == ""

    def test_text_is_kept(self):
        request = parse_request(GET_ONE)
        assert request.text == GET_ONE.decode()


class TestExtractResourceId:
    """Tests for the id segment extraction."""

    def test_cut_at_whitespace(self):
        assert extract_resource_id("PUT /api/rust/users/5 HTTP/1.1\r\n") == "5"

    def test_only_the_segment_before_the_next_slash(self):
        text = "GET /api/rust/users/5/posts HTTP/1.1\r\n"
        assert extract_resource_id(text) == "5"

    def test_trailing_slash_picks_up_protocol(self):
        # Not an integer, so the handlers answer 500
        assert extract_resource_id("GET /api/rust/users/ HTTP/1.1\r\n") == "HTTP"

    def test_blank_segment(self):
        assert extract_resource_id("GET /api/rust/users/") == ""

    def test_too_few_segments(self):
        assert extract_resource_id("GET /api/rust HTTP/1.1\r\n") == ""

    def test_non_numeric_kept_as_text(self):
        assert extract_resource_id("GET /api/rust/users/abc HTTP/1.1\r\n") == "abc"

    def test_other_segment(self):
        text = "GET /users/7 HTTP/1.1\r\nContent-Type: application/json\r\n\r\n"
        assert extract_resource_id(text, resource_id_segment("/users")) == "7"


class TestResourceIdSegment:
    """Tests for locating the id under a users path."""

    def test_default_path(self):
        assert resource_id_segment("/api/rust/users") == 4

    def test_short_path(self):
        assert resource_id_segment("/users") == 2

    def test_trailing_slash_ignored(self):
        assert resource_id_segment("/v2/people/") == 3


class TestExtractBody:
    """Tests for the body extraction."""

    def test_no_separator(self):
        assert extract_body("GET / HTTP/1.1\r\nHost: x\r\n") == ""

    def test_empty_body(self):
        assert extract_body("GET / HTTP/1.1\r\n\r\n") == ""

    def test_split_at_first_separator(self):
        text = "POST / HTTP/1.1\r\n\r\nfirst\r\n\r\nsecond"
        assert extract_body(text) == "first\r\n\r\nsecond"


class TestRawRequest:
    """Tests for the typed accessors."""

    def test_user_id_not_a_number(self):
        request = RawRequest(method="GET", path="/api/rust/users/abc", resource_id="abc")
        with pytest.raises(ValueError):
            request.user_id()

    def test_user_id_empty(self):
        request = RawRequest(method="GET", path="/api/rust/users/")
        with pytest.raises(ValueError):
            request.user_id()

    def test_user_id_negative(self):
        request = RawRequest(method="GET", path="/api/rust/users/-3", resource_id="-3")
        assert request.user_id() == -3

    def test_user_id_out_of_range(self):
        request = RawRequest(
            method="GET", path="/api/rust/users/", resource_id=str(2**31)
        )
        with pytest.raises(ValueError):
            request.user_id()

    @pytest.mark.parametrize("resource_id", ["4_2", "\u0664\u0662", " 42", "42 ", "0x2a", "4.2", "+"])
    def test_user_id_rejects_loose_integer_forms(self, resource_id):
        request = RawRequest(method="GET", path="/api/rust/users/", resource_id=resource_id)
        with pytest.raises(ValueError):
            request.user_id()

    def test_user_id_signed(self):
        assert parse_user_id("+7") == 7
        assert parse_user_id("007") == 7

    def test_user_from_body(self):
        request = parse_request(POST_USER)
        user = request.user()

        assert user.id is None
        assert user.name == "Ann"
        assert user.email == "a@x.com"

    def test_user_bad_json(self):
        request = RawRequest(method="POST", path="/api/rust/users", body="{not json")
        with pytest.raises(ValidationError):
            request.user()

    def test_user_missing_field(self):
        request = RawRequest(method="POST", path="/api/rust/users", body='{"name": "Ann"}')
        with pytest.raises(ValidationError):
            request.user()
