"""Tests for switchboard.routing.binder — signature inspection and binding."""

import logging
from dataclasses import dataclass

import pytest

from switchboard.errors import ArityError, CoercionError, ConfigurationError
from switchboard.routing.binder import NO_BODY, build_binder, build_method_binder
from switchboard.routing.params import Int8


@dataclass
class Item:
    name: str


class TestBuildBinder:
    def test_counts_positional_parameters(self) -> None:
        def handler(ctx, a: int, b: str) -> None: ...

        binder = build_binder(handler, param_count=2, takes_body=False)
        assert binder.declared == 3
        assert len(binder.converters) == 2

    def test_body_parameter_has_no_converter(self) -> None:
        def handler(ctx, item: Item, item_id: int) -> None: ...

        binder = build_binder(handler, param_count=1, takes_body=True)
        assert binder.declared == 3
        assert len(binder.converters) == 1

    def test_optional_keyword_only_is_ignored(self) -> None:
        def handler(ctx, item_id: int, *, verbose: bool = False) -> None: ...

        binder = build_binder(handler, param_count=1, takes_body=False)
        assert binder.declared == 2

    def test_required_keyword_only_rejected(self) -> None:
        def handler(ctx, *, item_id: int) -> None: ...

        with pytest.raises(ConfigurationError, match="keyword-only"):
            build_binder(handler, param_count=1, takes_body=False)

    def test_variadic_rejected(self) -> None:
        def handler(ctx, *args) -> None: ...

        with pytest.raises(ConfigurationError, match="variadic"):
            build_binder(handler, param_count=1, takes_body=False)

    def test_not_callable(self) -> None:
        with pytest.raises(ConfigurationError, match="callable"):
            build_binder("nope", param_count=0, takes_body=False)  # type: ignore[arg-type]

    def test_arity_mismatch_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        def handler(ctx) -> None: ...

        with caplog.at_level(logging.WARNING, logger="switchboard.routing"):
            binder = build_binder(handler, param_count=1, takes_body=False)
        assert binder.declared == 1
        assert "declares 1 parameter(s)" in caplog.text

    def test_arity_mismatch_strict(self) -> None:
        def handler(ctx) -> None: ...

        with pytest.raises(ArityError) as exc_info:
            build_binder(handler, param_count=1, takes_body=False, strict=True)
        assert exc_info.value.expected == 2
        assert exc_info.value.declared == 1

    def test_unsupported_type_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        def handler(ctx, flag: bool) -> None: ...

        with caplog.at_level(logging.WARNING, logger="switchboard.routing"):
            build_binder(handler, param_count=1, takes_body=False)
        assert "unsupported type bool" in caplog.text

    def test_unsupported_type_strict(self) -> None:
        def handler(ctx, flag: bool) -> None: ...

        with pytest.raises(ConfigurationError, match="unsupported type"):
            build_binder(handler, param_count=1, takes_body=False, strict=True)

    def test_string_annotations_resolve(self) -> None:
        def handler(ctx, shard: "uint8") -> None: ...  # noqa: F821

        binder = build_binder(handler, param_count=1, takes_body=False)
        assert binder.converters[0]("200") == 200


class TestBind:
    async def test_coerces_in_order(self) -> None:
        seen: list[object] = []

        def handler(ctx, shard: Int8, item_id: int, label: str) -> None:
            seen.extend([ctx, shard, item_id, label])

        binder = build_binder(handler, param_count=3, takes_body=False)
        call = binder.bind("ctx", ("-3", "42", "blue"))
        await call()
        assert seen == ["ctx", -3, 42, "blue"]

    async def test_body_comes_after_context(self) -> None:
        seen: list[object] = []

        def handler(ctx, item: Item, item_id: int) -> None:
            seen.extend([item, item_id])

        binder = build_binder(handler, param_count=1, takes_body=True)
        await binder.bind("ctx", ("7",), Item("widget"))()
        assert seen == [Item("widget"), 7]

    async def test_async_handler(self) -> None:
        async def handler(ctx, item_id: int) -> int:
            return item_id * 2

        binder = build_binder(handler, param_count=1, takes_body=False)
        assert await binder.bind("ctx", ("21",))() == 42

    def test_coercion_failure(self) -> None:
        def handler(ctx, item_id: int) -> None: ...

        binder = build_binder(handler, param_count=1, takes_body=False)
        with pytest.raises(CoercionError):
            binder.bind("ctx", ("abc",))

    def test_arity_checked_before_coercion(self) -> None:
        def handler(ctx, a: int) -> None: ...

        binder = build_binder(handler, param_count=2, takes_body=False)
        with pytest.raises(ArityError):
            binder.bind("ctx", ("not-a-number", "x"))

    def test_check_arity_counts_body(self) -> None:
        def handler(ctx, item_id: int) -> None: ...

        binder = build_binder(handler, param_count=1, takes_body=True)
        with pytest.raises(ArityError):
            binder.check_arity(1)
        binder.check_arity(0)

    def test_unsupported_type_never_binds(self) -> None:
        def handler(ctx, flag: bool) -> None: ...

        binder = build_binder(handler, param_count=1, takes_body=False)
        with pytest.raises(CoercionError, match="unsupported argument type"):
            binder.bind("ctx", ("true",))

    def test_handler_not_called_by_bind(self) -> None:
        calls: list[int] = []

        def handler(ctx, item_id: int) -> None:
            calls.append(item_id)

        binder = build_binder(handler, param_count=1, takes_body=False)
        binder.bind("ctx", ("1",))
        assert calls == []

    def test_no_body_sentinel_repr(self) -> None:
        assert repr(NO_BODY) == "NO_BODY"


class Store:
    def __init__(self) -> None:
        self.items = {1: "one"}

    def read(self, ctx, item_id: int) -> str:
        return self.items[item_id]


class TestMethodBinder:
    async def test_bound_method(self) -> None:
        binder = build_method_binder(Store(), "read", param_count=1, takes_body=False)
        assert binder.declared == 2
        assert await binder.bind("ctx", ("1",))() == "one"

    def test_missing_method(self) -> None:
        with pytest.raises(ConfigurationError, match="has no method 'write'"):
            build_method_binder(Store(), "write", param_count=0, takes_body=False)

    def test_non_callable_attribute(self) -> None:
        with pytest.raises(ConfigurationError):
            build_method_binder(Store(), "items", param_count=0, takes_body=False)
