"""Handlers defined under postponed annotations with type-checking-only imports."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from switchboard import Int8, Service
from switchboard.routing.binder import build_binder
from switchboard.routing.params import CONVERTERS
from switchboard.testing import TestClient

if TYPE_CHECKING:
    from switchboard import Context

JSON = {"Accept": "application/json"}


def read_shard(ctx: Context, shard: Int8) -> None:
    ctx.respond(shard)


def read_item(ctx: Context, item_id: int, label: "uint8") -> None:  # noqa: F821
    ctx.respond([item_id, label])


class TestPostponedAnnotations:
    def test_resolvable_names_are_evaluated(self) -> None:
        binder = build_binder(read_shard, param_count=1, takes_body=False)
        assert binder.converters[0]("7") == 7

    def test_converter_names_kept_as_strings(self) -> None:
        binder = build_binder(read_item, param_count=2, takes_body=False)
        assert binder.converters == (CONVERTERS["int64"], CONVERTERS["uint8"])

    async def test_width_alias_route_matches(self) -> None:
        service = Service()
        service.add_route("/shards/{shard}", read_shard, methods="GET")
        async with TestClient(service) as client:
            ok = await client.get("/shards/7", headers=JSON)
            too_big = await client.get("/shards/200", headers=JSON)
        assert ok.status == 200
        assert json.loads(ok.body)["data"] == 7
        assert too_big.status == 404
