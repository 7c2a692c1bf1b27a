"""Integration tests for resource graph retrieval over HTTP."""

import json

import pytest
import respx
from httpx import Response

from src.halgraph.config import HALConfig
from src.halgraph.core.state import to_document
from src.halgraph.hal.client import HALClient
from src.halgraph.utils.exceptions import ResourceNotFoundError

BASE = "https://shop.example.com"


def _hal(href, links=None, embedded=None, **state):
    document = {**state, "_links": {"self": {"href": href}, **(links or {})}}
    if embedded:
        document["_embedded"] = embedded
    return document


@pytest.fixture
def shop_api():
    """A small shop API whose orders, customers and products link to each other."""
    with respx.mock(base_url=BASE, assert_all_called=False) as router:
        router.get("/orders/1", name="order").mock(
            return_value=Response(
                200,
                json=_hal(
                    "/orders/1",
                    links={
                        "customer": {"href": "/customers/7"},
                        "items": [{"href": "/items/1"}, {"href": "/items/2"}],
                    },
                    total=30,
                ),
            )
        )
        router.get("/customers/7", name="customer").mock(
            return_value=Response(
                200,
                json=_hal(
                    "/customers/7",
                    links={"orders": [{"href": "/orders/1"}]},
                    embedded={
                        "address": _hal(
                            "/addresses/3",
                            links={"customer": {"href": "/customers/7"}},
                            city="Berlin",
                        )
                    },
                    name="Ann",
                ),
            )
        )
        router.get("/items/1", name="item1").mock(
            return_value=Response(
                200, json=_hal("/items/1", links={"product": {"href": "/products/p"}}, qty=1)
            )
        )
        router.get("/items/2", name="item2").mock(
            return_value=Response(
                200, json=_hal("/items/2", links={"product": {"href": "/products/p"}}, qty=2)
            )
        )
        router.get("/products/p", name="product").mock(
            return_value=Response(200, json=_hal("/products/p", price=10))
        )
        router.get("/addresses/3", name="address")
        yield router


@pytest.fixture
async def shop_client():
    client = HALClient(HALConfig(base_url=f"{BASE}/"))
    yield client
    await client.close()


class TestGetHalIntegration:
    """End-to-end embedding through HALClient."""

    @pytest.mark.asyncio
    async def test_embeds_nested_graph(self, shop_client, shop_api):
        order = await shop_client.get_hal(
            "/orders/1", {"customer": {"address": None}, "items": {"product": None}}
        )

        customer = order["_embedded"]["customer"]
        items = order["_embedded"]["items"]
        assert customer["name"] == "Ann"
        assert customer["_embedded"]["address"]["city"] == "Berlin"
        assert [item["qty"] for item in items] == [1, 2]
        assert items[0]["_embedded"]["product"] is items[1]["_embedded"]["product"]

    @pytest.mark.asyncio
    async def test_each_resource_requested_once(self, shop_client, shop_api):
        await shop_client.get_hal(
            "/orders/1",
            {
                "customer": {"address": {"customer": None}, "orders": {"customer": None}},
                "items": {"product": None},
            },
        )

        for name in ["order", "customer", "item1", "item2", "product"]:
            assert shop_api[name].call_count == 1
        assert not shop_api["address"].called

    @pytest.mark.asyncio
    async def test_cycles_reuse_instances(self, shop_client, shop_api):
        order = await shop_client.get_hal("/orders/1", {"customer": {"orders": {"customer": None}}})

        customer = order["_embedded"]["customer"]
        assert customer["_embedded"]["orders"][0] is order

        document = to_document(order)
        assert document["_embedded"]["customer"]["_embedded"]["orders"] == [
            {"_links": {"self": {"href": "/orders/1"}}}
        ]

    @pytest.mark.asyncio
    async def test_sends_hal_accept_header(self, shop_client, shop_api):
        await shop_client.get_hal("/orders/1")

        assert shop_api["order"].calls.last.request.headers["Accept"] == "application/hal+json"

    @pytest.mark.asyncio
    async def test_missing_linked_resource_fails_call(self, shop_client):
        with respx.mock(base_url=BASE) as router:
            router.get("/orders/2").mock(
                return_value=Response(
                    200, json=_hal("/orders/2", links={"customer": {"href": "/customers/0"}})
                )
            )
            router.get("/customers/0").mock(return_value=Response(404))

            with pytest.raises(ResourceNotFoundError, match="/customers/0"):
                await shop_client.get_hal("/orders/2", "customer")

    @pytest.mark.asyncio
    async def test_embed_into_decoded_document(self, shop_client, shop_api):
        order = _hal("/orders/1", links={"customer": {"href": "/customers/7"}})

        await shop_client.embed(order, "customer")

        assert order["_embedded"]["customer"]["name"] == "Ann"
        assert not shop_api["order"].called

    @pytest.mark.asyncio
    async def test_put_after_get(self, shop_client, shop_api):
        route = shop_api.put("/orders/1").mock(return_value=Response(204))
        order = await shop_client.get_hal("/orders/1", "customer")
        order["total"] = 35

        await shop_client.put_state(order)

        assert json.loads(route.calls.last.request.content) == {"total": 35}
