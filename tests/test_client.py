import asyncio
import json

import httpx

from qrmenu.client import MenuClient, OrderHistoryPoller


class FakeServer:
    """Minimal stand-in for the customer API."""

    def __init__(self):
        self.requests = []
        self.history_calls = 0
        self.fail_history = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((request.method, request.url.path))
        path = request.url.path

        if path == "/api/table/from-link":
            return httpx.Response(200, json={"table_number": request.url.params["table"]})
        if path == "/api/cart/items":
            body = json.loads(request.content)
            return httpx.Response(200, json={"items": [body], "item_count": body.get("quantity", 1)})
        if path == "/api/checkout":
            body = json.loads(request.content)
            if len(body["customer_name"]) < 2:
                return httpx.Response(422, json={"status": "form", "errors": {"name": "too short"}})
            return httpx.Response(200, json={"status": "success", "order_id": "o-1", "order_code": "PRM-O1", "total": 15000})
        if path == "/api/orders/history":
            self.history_calls += 1
            if self.fail_history:
                return httpx.Response(500, json={"detail": "Failed to load orders"})
            return httpx.Response(200, json={"order_ids": ["o-1"], "orders": []})
        return httpx.Response(404, json={"detail": "Not Found"})


async def test_client_scans_table_on_enter():
    server = FakeServer()
    async with MenuClient("http://menu.test", table="A1", transport=httpx.MockTransport(server)):
        pass
    assert server.requests == [("POST", "/api/table/from-link")]


async def test_add_to_cart_maps_menu_item_fields():
    server = FakeServer()
    async with MenuClient("http://menu.test", transport=httpx.MockTransport(server)) as client:
        cart = await client.add_to_cart({"id": 1, "name": "Ayam Goreng", "price": 15000, "category_id": "ayam"}, quantity=2)

    assert cart["items"][0]["category"] == "ayam"
    assert cart["item_count"] == 2


async def test_checkout_returns_validation_errors_instead_of_raising():
    server = FakeServer()
    async with MenuClient("http://menu.test", transport=httpx.MockTransport(server)) as client:
        rejected = await client.checkout("B", "A1")
        placed = await client.checkout("Budi", "A1")

    assert rejected["errors"] == {"name": "too short"}
    assert placed["order_code"] == "PRM-O1"


async def test_poll_once_delivers_snapshot():
    server = FakeServer()
    seen = []
    async with MenuClient("http://menu.test", transport=httpx.MockTransport(server)) as client:
        poller = OrderHistoryPoller(client, seen.append, interval=5)
        snapshot = await poller.poll_once()

    assert snapshot == {"order_ids": ["o-1"], "orders": []}
    assert seen == [snapshot]
    assert poller.poll_count == 1


async def test_failed_poll_is_skipped():
    server = FakeServer()
    server.fail_history = True
    seen = []
    async with MenuClient("http://menu.test", transport=httpx.MockTransport(server)) as client:
        poller = OrderHistoryPoller(client, seen.append, interval=5)
        assert await poller.poll_once() is None

    assert seen == []
    assert poller.poll_count == 0


async def test_poller_runs_until_stopped():
    server = FakeServer()
    seen = []

    async def on_history(history):
        seen.append(history)

    async with MenuClient("http://menu.test", transport=httpx.MockTransport(server)) as client:
        poller = OrderHistoryPoller(client, on_history, interval=0.01)
        poller.start()
        poller.start()
        await asyncio.sleep(0.1)
        await poller.stop()
        calls = server.history_calls
        await asyncio.sleep(0.05)

    assert not poller.running
    assert len(seen) >= 2
    assert server.history_calls == calls


def test_default_interval_is_five_seconds():
    poller = OrderHistoryPoller(client=None, callback=print)
    assert poller.interval == 5.0
