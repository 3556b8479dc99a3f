"""Tests for switchboard.http — headers, request, response."""

import pytest

from switchboard.http.headers import Headers
from switchboard.http.request import Request
from switchboard.http.response import Response, plain_text


def _h(*pairs: tuple[str, str]) -> Headers:
    """Shorthand: build Headers from string pairs."""
    raw = tuple((k.encode("latin-1"), v.encode("latin-1")) for k, v in pairs)
    return Headers(raw)


class TestHeaders:
    def test_case_insensitive(self) -> None:
        h = _h(("Content-Type", "application/json"))
        assert h["content-type"] == "application/json"
        assert h["CONTENT-TYPE"] == "application/json"

    def test_missing_key_raises(self) -> None:
        with pytest.raises(KeyError):
            _h(("Accept", "*/*"))["X-Missing"]

    def test_get_default(self) -> None:
        assert _h().get("accept") is None
        assert _h().get("accept", "x") == "x"

    def test_contains(self) -> None:
        h = _h(("Accept", "*/*"))
        assert "accept" in h
        assert "x-missing" not in h
        assert 42 not in h  # type: ignore[operator]

    def test_repeated_header(self) -> None:
        h = _h(("X-Tag", "a"), ("X-Tag", "b"))
        assert h["x-tag"] == "a"
        assert h.get_list("x-tag") == ["a", "b"]
        assert len(h) == 1

    def test_from_dict(self) -> None:
        h = Headers.from_dict({"Accept": "application/bson"})
        assert h.raw == ((b"accept", b"application/bson"),)


def _receive_chunks(*chunks: bytes):
    messages = [
        {"type": "http.request", "body": c, "more_body": i < len(chunks) - 1}
        for i, c in enumerate(chunks)
    ]

    async def receive() -> dict:
        if messages:
            return messages.pop(0)
        return {"type": "http.disconnect"}

    return receive


def _scope(**overrides) -> dict:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/items",
        "query_string": b"q=1",
        "root_path": "",
        "headers": [(b"content-type", b"application/json"), (b"content-length", b"11")],
    }
    scope.update(overrides)
    return scope


class TestRequest:
    def test_from_asgi(self) -> None:
        request = Request.from_asgi(_scope(), _receive_chunks(b""))
        assert request.method == "POST"
        assert request.path == "/items"
        assert request.content_type == "application/json"
        assert request.content_length == 11
        assert request.url == "/items?q=1"
        assert request.accept is None

    def test_bad_content_length(self) -> None:
        scope = _scope(headers=[(b"content-length", b"many")])
        assert Request.from_asgi(scope, _receive_chunks()).content_length is None

    async def test_body_joins_chunks(self) -> None:
        request = Request.from_asgi(_scope(), _receive_chunks(b'{"Name":', b'"w"}'))
        assert await request.body() == b'{"Name":"w"}'

    async def test_body_cached(self) -> None:
        request = Request.from_asgi(_scope(), _receive_chunks(b"abc"))
        assert not request.body_consumed
        assert await request.body() == b"abc"
        assert request.body_consumed
        assert await request.body() == b"abc"

    async def test_disconnect_ends_body(self) -> None:
        async def receive() -> dict:
            return {"type": "http.disconnect"}

        request = Request.from_asgi(_scope(), receive)
        assert await request.body() == b""


class TestResponse:
    def test_defaults(self) -> None:
        response = Response()
        assert response.status == 200
        assert response.body_bytes == b""

    def test_chaining_is_immutable(self) -> None:
        base = Response(b"x")
        changed = base.with_status(201).with_header("X-A", "1").with_headers({"X-B": "2"})
        assert base.status == 200
        assert base.headers == ()
        assert changed.status == 201
        assert changed.header("x-a") == "1"
        assert changed.header("X-B") == "2"
        assert changed.header("x-c") is None

    def test_text(self) -> None:
        assert Response(b"hi").text == "hi"
        assert Response("hi").body_bytes == b"hi"

    def test_with_content_type(self) -> None:
        assert Response().with_content_type("application/bson").content_type == "application/bson"

    def test_plain_text(self) -> None:
        response = plain_text("nope", 400)
        assert response.status == 400
        assert response.content_type == "text/plain; charset=utf-8"
        assert response.text == "nope"
