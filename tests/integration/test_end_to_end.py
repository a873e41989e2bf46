"""
End-to-end tests: raw bytes over a real socket against a running server.
"""

import json
import socket
import threading

import pytest
from sqlalchemy import text


OK_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE",
    "Access-Control-Allow-Headers": "Content-Type",
}

USERS = "/api/rust/users"


def create(test_server, name="Ann", email="a@x.com") -> dict:
    response = test_server.request("POST", USERS, json.dumps({"name": name, "email": email}))
    assert response.status == 200
    return json.loads(response.body)


class TestCrud:
    """The user lifecycle through the HTTP surface."""

    def test_create_then_read(self, test_server):
        created = create(test_server)

        assert isinstance(created["id"], int)
        assert created["name"] == "Ann"
        assert created["email"] == "a@x.com"

        response = test_server.request("GET", f"{USERS}/{created['id']}")
        assert response.status == 200
        assert json.loads(response.body) == created

    def test_create_response_template(self, test_server):
        response = test_server.request("POST", USERS, '{"name":"Ann","email":"a@x.com"}')

        assert response.status_line == "HTTP/1.1 200 OK"
        assert response.headers == OK_HEADERS
        assert response.body.startswith('{"id":')

    def test_read_missing(self, test_server):
        response = test_server.request("GET", f"{USERS}/999")

        assert response.raw == b"HTTP/1.1 404 NOT FOUND\r\n\r\nUser not found"

    def test_list(self, test_server):
        created = [create(test_server, f"user{i}", f"u{i}@x.com") for i in range(3)]

        response = test_server.request("GET", USERS)
        listed = json.loads(response.body)

        assert response.status == 200
        assert len(listed) == 3
        assert sorted(listed, key=lambda u: u["id"]) == sorted(created, key=lambda u: u["id"])

    def test_list_empty(self, test_server):
        assert test_server.request("GET", USERS).body == "[]"

    def test_update(self, test_server):
        created = create(test_server)

        response = test_server.request(
            "PUT", f"{USERS}/{created['id']}", '{"name":"Anne","email":"anne@x.com"}'
        )
        assert response.status == 200
        assert response.body == "User updated"

        stored = json.loads(test_server.request("GET", f"{USERS}/{created['id']}").body)
        assert stored == {"id": created["id"], "name": "Anne", "email": "anne@x.com"}

    def test_update_missing_still_succeeds(self, test_server):
        response = test_server.request("PUT", f"{USERS}/999", '{"name":"A","email":"a"}')

        assert response.status == 200
        assert response.body == "User updated"
        assert test_server.request("GET", USERS).body == "[]"

    def test_delete(self, test_server):
        created = create(test_server)

        response = test_server.request("DELETE", f"{USERS}/{created['id']}")
        assert response.status == 200
        assert response.body == "User deleted"

        assert test_server.request("GET", f"{USERS}/{created['id']}").status == 404

    def test_delete_missing(self, test_server):
        response = test_server.request("DELETE", f"{USERS}/999")
        assert response.raw == b"HTTP/1.1 404 NOT FOUND\r\n\r\nUser not found"

    def test_identical_reads_are_byte_identical(self, test_server):
        created = create(test_server)
        path = f"{USERS}/{created['id']}"

        assert test_server.request("GET", path).raw == test_server.request("GET", path).raw


class TestProtocolEdges:
    """Routing fallbacks, preflight and error templates."""

    def test_options_any_path(self, test_server):
        for path in (USERS, f"{USERS}/1", "/somewhere/else"):
            response = test_server.request("OPTIONS", path)

            assert response.status_line == "HTTP/1.1 200 OK"
            assert response.headers == OK_HEADERS
            assert response.body == ""

    def test_unknown_route(self, test_server):
        response = test_server.request("GET", "/nope")
        assert response.raw == b"HTTP/1.1 404 NOT FOUND\r\n\r\n404 not found"

    def test_unknown_method(self, test_server):
        response = test_server.request("PATCH", f"{USERS}/1", '{"name":"A","email":"a"}')
        assert response.body == "404 not found"

    def test_put_without_id_segment(self, test_server):
        response = test_server.request("PUT", USERS, '{"name":"A","email":"a"}')
        assert response.status == 404

    def test_invalid_json(self, test_server):
        response = test_server.request("POST", USERS, "{oops")
        assert response.raw == b"HTTP/1.1 500 INTERNAL ERROR\r\n\r\nInternal error"

    def test_invalid_id(self, test_server):
        for method in ("GET", "DELETE"):
            response = test_server.request(method, f"{USERS}/abc")
            assert response.raw == b"HTTP/1.1 500 INTERNAL ERROR\r\n\r\nInternal error"

    def test_loose_integer_id(self, test_server):
        for _ in range(42):
            create(test_server)

        assert test_server.request("GET", f"{USERS}/42").status == 200
        for resource_id in ("4_2", "\u0664\u0662"):
            response = test_server.request("GET", f"{USERS}/{resource_id}")
            assert response.raw == b"HTTP/1.1 500 INTERNAL ERROR\r\n\r\nInternal error"

    def test_empty_id(self, test_server):
        response = test_server.request("GET", f"{USERS}/")
        assert response.status == 500

    def test_storage_failure(self, test_server, engine):
        with engine.begin() as conn:
            conn.execute(text("DROP TABLE users"))

        response = test_server.request("GET", USERS)
        assert response.raw == b"HTTP/1.1 500 INTERNAL ERROR\r\n\r\nInternal error"

    def test_error_responses_have_no_headers(self, test_server):
        for method, path, body in [
            ("GET", f"{USERS}/999", ""),
            ("GET", "/nope", ""),
            ("POST", USERS, "not json"),
        ]:
            response = test_server.request(method, path, body)
            assert response.headers == {}

    def test_request_without_body_separator(self, test_server):
        # No blank line: the body is empty and fails to decode
        response = test_server.send(b"POST /api/rust/users HTTP/1.1\r\nHost: x\r\n")
        assert response.endswith(b"Internal error")

    def test_garbage(self, test_server):
        response = test_server.send(b"\x00\xff\xfe garbage")
        assert response == b"HTTP/1.1 404 NOT FOUND\r\n\r\n404 not found"

    def test_silent_client_gets_not_found(self, test_server):
        # Nothing to route: the empty request falls through to 404
        response = test_server.send(b"")
        assert response == b"HTTP/1.1 404 NOT FOUND\r\n\r\n404 not found"

        # Server still serving
        assert test_server.request("GET", USERS).status == 200


class TestConcurrency:

    def test_parallel_creates(self, test_server):
        results = []
        lock = threading.Lock()

        def worker(i):
            response = test_server.request(
                "POST", USERS, json.dumps({"name": f"n{i}", "email": f"e{i}"})
            )
            with lock:
                results.append(response.status)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10.0)

        assert results == [200] * 8
        assert len(json.loads(test_server.request("GET", USERS).body)) == 8


@pytest.mark.parametrize("users_path", ["/users"])
class TestOtherUsersPath:
    """A service configured with a collection path other than the default."""

    def test_item_routes_use_the_configured_path(self, test_server):
        response = test_server.request("POST", "/users", '{"name":"Ann","email":"a@x.com"}')
        created = json.loads(response.body)

        response = test_server.request("GET", f"/users/{created['id']}")
        assert response.status == 200
        assert json.loads(response.body) == created

        response = test_server.request("DELETE", f"/users/{created['id']}")
        assert response.body == "User deleted"

    def test_default_path_is_not_served(self, test_server):
        assert test_server.request("GET", USERS).body == "404 not found"
