"""Tests for perch.routing.mux — exact and subtree pattern matching."""

from dataclasses import replace

import pytest

from perch.errors import ConfigurationError
from perch.routing.mux import ServeMux

from conftest import Sink, make_request


def _handler(name: str):
    async def handler(writer, request) -> None:
        await writer.write(name)

    return handler


async def _serve(mux: ServeMux, path: str) -> Sink:
    sink = Sink()
    await mux.serve(sink.writer, make_request(path))
    await sink.writer.finish()
    return sink


class TestMatch:
    def test_exact(self) -> None:
        mux = ServeMux()
        mux.handle("/about", _handler("about"))
        assert mux.match("/about").pattern == "/about"
        assert mux.match("/about/team") is None

    def test_subtree(self) -> None:
        mux = ServeMux()
        mux.handle("/assets/", _handler("assets"))
        assert mux.match("/assets/css/site.css").pattern == "/assets/"
        assert mux.match("/assets/").pattern == "/assets/"

    def test_longest_pattern_wins(self) -> None:
        mux = ServeMux()
        mux.handle("/", _handler("root"))
        mux.handle("/assets/", _handler("assets"))
        mux.handle("/assets/img/", _handler("img"))
        assert mux.match("/assets/img/logo.png").pattern == "/assets/img/"
        assert mux.match("/assets/app.js").pattern == "/assets/"
        assert mux.match("/anything").pattern == "/"

    def test_exact_beats_subtree(self) -> None:
        mux = ServeMux()
        mux.handle("/", _handler("root"))
        mux.handle("/health", _handler("health"))
        assert mux.match("/health").pattern == "/health"

    def test_routes_sorted(self) -> None:
        mux = ServeMux()
        mux.handle("/b", _handler("b"))
        mux.handle("/a/", _handler("a"))
        assert [r.pattern for r in mux.routes] == ["/a/", "/b"]


class TestRegistration:
    def test_duplicate_raises(self) -> None:
        mux = ServeMux()
        mux.handle("/x", _handler("x"))
        with pytest.raises(ConfigurationError, match="Multiple registrations"):
            mux.handle("/x", _handler("y"))

    def test_duplicate_subtree_raises(self) -> None:
        mux = ServeMux()
        mux.handle("/x/", _handler("x"))
        with pytest.raises(ConfigurationError):
            mux.handle("/x/", _handler("y"))

    @pytest.mark.parametrize("pattern", ["", "about", "assets/"])
    def test_relative_pattern_raises(self, pattern) -> None:
        with pytest.raises(ConfigurationError):
            ServeMux().handle(pattern, _handler("x"))

    def test_none_handler_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            ServeMux().handle("/x", None)

    def test_frozen_rejects_registration(self) -> None:
        mux = ServeMux()
        mux.freeze()
        assert mux.frozen is True
        with pytest.raises(RuntimeError):
            mux.handle("/late", _handler("late"))


class TestServe:
    async def test_dispatches_to_handler(self) -> None:
        mux = ServeMux()
        mux.handle("/hello", _handler("hi"))
        sink = await _serve(mux, "/hello")
        assert sink.status == 200
        assert sink.body == b"hi"

    async def test_sync_handler(self) -> None:
        calls = []

        def handler(writer, request) -> None:
            calls.append(request.path)
            writer.write_header(202)

        mux = ServeMux()
        mux.handle("/sync", handler)
        sink = await _serve(mux, "/sync")
        assert calls == ["/sync"]
        assert sink.status == 202

    async def test_unmatched_uses_default_not_found(self) -> None:
        mux = ServeMux()
        mux.handle("/assets/", _handler("assets"))
        sink = await _serve(mux, "/missing")
        assert sink.status == 404
        assert sink.headers["content-type"] == "text/plain; charset=utf-8"
        assert sink.body == b"404 page not found\n"

    async def test_custom_not_found(self) -> None:
        mux = ServeMux(not_found_handler=_handler("custom"))
        sink = await _serve(mux, "/missing")
        assert sink.body == b"custom"

    async def test_subtree_root_redirects(self) -> None:
        mux = ServeMux()
        mux.handle("/assets/", _handler("assets"))
        sink = await _serve(mux, "/assets")
        assert sink.status == 301
        assert sink.headers["location"] == "/assets/"

    async def test_redirect_keeps_query(self) -> None:
        mux = ServeMux()
        mux.handle("/docs/", _handler("docs"))
        sink = Sink()
        request = replace(make_request("/docs"), query_string=b"v=2")
        await mux.serve(sink.writer, request)
        assert sink.headers["location"] == "/docs/?v=2"

    async def test_no_redirect_when_exact_registered(self) -> None:
        mux = ServeMux()
        mux.handle("/assets/", _handler("assets"))
        mux.handle("/assets", _handler("bare"))
        sink = await _serve(mux, "/assets")
        assert sink.body == b"bare"
