"""Tests for switchboard.routing.router — ordered first-match route table."""

import pytest

from switchboard.errors import ConfigurationError, RenderError
from switchboard.routing.pattern import PathPattern
from switchboard.routing.route import Route, RouteMatch
from switchboard.routing.router import Router


class _Dispatcher:
    def check_arity(self, param_count):
        pass

    def bind(self, context, args, body=None):
        raise AssertionError("router tests never bind")


def _route(
    path: str,
    methods: frozenset[str] = frozenset({"GET"}),
    name: str | None = None,
    *,
    prefix: bool = False,
) -> Route:
    pattern = PathPattern.compile(path, prefix=prefix)
    return Route(pattern=pattern, dispatcher=_Dispatcher(), methods=methods, name=name)


class TestRoute:
    def test_path(self) -> None:
        assert _route("/items/{id}").path == "/items/{id}"

    def test_empty_methods_accept_all(self) -> None:
        route = _route("/x", methods=frozenset())
        assert route.accepts("GET")
        assert route.accepts("PURGE")

    def test_method_filter(self) -> None:
        route = _route("/x", methods=frozenset({"POST"}))
        assert route.matches("POST", "/x") == ("/x",)
        assert route.matches("GET", "/x") is None

    def test_has_body(self) -> None:
        assert _route("/x").has_body is False

    def test_url(self) -> None:
        assert _route("/items/{id}").url(id=5) == "/items/5"

    def test_str(self) -> None:
        route = _route("/x", methods=frozenset({"GET", "POST"}), name="x")
        assert str(route) == "Route(name='x', pattern='/x', methods=GET,POST)"
        assert "methods=*" in str(_route("/y", methods=frozenset()))


class TestRouteMatch:
    def test_properties(self) -> None:
        route = _route("/{bucket}/objects/{key}")
        match = RouteMatch(route=route, captures=("/b/objects/k", "b", "k"))
        assert match.matched == "/b/objects/k"
        assert match.args == ("b", "k")
        assert match.path_params == {"bucket": "b", "key": "k"}


class TestRouterOrdering:
    def test_registration_order(self) -> None:
        r = Router()
        first = _route("/items/{id}")
        second = _route("/items/latest")
        r.add(first)
        r.add(second)
        r.compile()

        matches = list(r.iter_matches("GET", "/items/latest"))
        assert [m.route for m in matches] == [first, second]

    def test_skips_wrong_method(self) -> None:
        r = Router()
        post = _route("/items", methods=frozenset({"POST"}))
        get = _route("/items")
        r.add(post)
        r.add(get)

        matches = list(r.iter_matches("GET", "/items"))
        assert [m.route for m in matches] == [get]

    def test_no_match(self) -> None:
        r = Router()
        r.add(_route("/items"))
        assert list(r.iter_matches("GET", "/nothing")) == []

    def test_iter_matches_is_lazy(self) -> None:
        r = Router()
        r.add(_route("/a"))
        r.add(_route("/a"))
        matches = r.iter_matches("GET", "/a")
        assert next(matches).route is r.routes[0]

    def test_captures(self) -> None:
        r = Router()
        r.add(_route("/items/{id}"))
        (match,) = r.iter_matches("GET", "/items/42")
        assert match.args == ("42",)

    def test_routes_is_copy(self) -> None:
        r = Router()
        r.add(_route("/a"))
        r.routes.clear()
        assert len(r) == 1


class TestRouterLifecycle:
    def test_add_after_compile(self) -> None:
        r = Router()
        r.compile()
        assert r.compiled
        with pytest.raises(RuntimeError, match="after compilation"):
            r.add(_route("/late"))

    def test_duplicate_name(self) -> None:
        r = Router()
        r.add(_route("/a", name="item"))
        with pytest.raises(ConfigurationError, match="Duplicate route name 'item'"):
            r.add(_route("/b", name="item"))


class TestReverseRouting:
    def test_url_for(self) -> None:
        r = Router()
        r.add(_route("/{bucket}/objects/{key}", name="object"))
        assert r.url_for("object", bucket="b1", key="k9") == "/b1/objects/k9"

    def test_lookup(self) -> None:
        r = Router()
        route = _route("/a", name="a")
        r.add(route)
        assert r.lookup("a") is route

    def test_unknown_name(self) -> None:
        r = Router()
        with pytest.raises(LookupError, match="No route named 'missing'"):
            r.url_for("missing")

    def test_missing_value(self) -> None:
        r = Router()
        r.add(_route("/items/{id}", name="item"))
        with pytest.raises(RenderError):
            r.url_for("item")
