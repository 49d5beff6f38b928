"""
Customer API Client

Async client for the customer endpoints, keeping the visitor's session
cookie between calls like a browser would. OrderHistoryPoller refreshes
the visitor's order history on a fixed interval, which is how a table's
customers follow their order without any push channel.

Usage:
    async with MenuClient("http://localhost:8001", table="A1") as client:
        await client.add_to_cart(item)
        result = await client.checkout("Budi")
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

from qrmenu.core.config import get_settings

logger = logging.getLogger(__name__)

HistoryCallback = Callable[[dict[str, Any]], Awaitable[None] | None]


class MenuClient:
    """Thin wrapper over httpx.AsyncClient for the customer API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        table: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or get_settings().app_base_url).rstrip("/")
        self.table = table
        self.http = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "MenuClient":
        if self.table:
            await self.set_table_from_link(self.table)
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def close(self) -> None:
        await self.http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        response = await self.http.request(method, path, **kwargs)
        response.raise_for_status()
        return response.json()

    # -- menu -------------------------------------------------------------

    async def categories(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/api/categories")

    async def menu_items(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        params = {k: v for k, v in {"category": category, "search": search}.items() if v}
        return await self._request("GET", "/api/menu-items", params=params)

    # -- table & cart ------------------------------------------------------

    async def set_table_from_link(self, table: str) -> dict[str, Any]:
        return await self._request("POST", "/api/table/from-link", params={"table": table})

    async def add_to_cart(self, item: dict[str, Any], quantity: Optional[int] = None, note: str = "") -> dict[str, Any]:
        payload = {
            "id": item["id"],
            "name": item["name"],
            "price": item["price"],
            "category": item.get("category_id", item.get("category", "")),
            "note": note,
        }
        if quantity is not None:
            payload["quantity"] = quantity
        return await self._request("POST", "/api/cart/items", json=payload)

    async def cart(self) -> dict[str, Any]:
        return await self._request("GET", "/api/cart")

    # -- checkout ----------------------------------------------------------

    async def checkout(
        self,
        customer_name: str,
        table_number: str = "",
        payment_method: str = "pay_at_counter",
        notes: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Submit the checkout form.

        Validation and backend failures are returned as the response body
        (status "form" with errors) instead of raising.
        """
        response = await self.http.post(
            "/api/checkout",
            json={
                "customer_name": customer_name,
                "table_number": table_number,
                "payment_method": payment_method,
                "notes": notes,
            },
        )
        if response.status_code not in (200, 422, 500):
            response.raise_for_status()
        return response.json()

    async def dismiss_checkout(self) -> dict[str, Any]:
        return await self._request("POST", "/api/checkout/dismiss")

    # -- history -----------------------------------------------------------

    async def order_history(self) -> dict[str, Any]:
        return await self._request("GET", "/api/orders/history")


class OrderHistoryPoller:
    """
    Fetch the order history every `interval` seconds and hand each
    snapshot to `callback`. A failed fetch is logged and retried on the
    next tick.
    """

    def __init__(
        self,
        client: MenuClient,
        callback: HistoryCallback,
        interval: Optional[float] = None,
    ):
        self.client = client
        self.callback = callback
        self.interval = interval if interval is not None else get_settings().history_poll_interval_seconds
        self.poll_count = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def poll_once(self) -> Optional[dict[str, Any]]:
        try:
            history = await self.client.order_history()
        except httpx.HTTPError as e:
            logger.warning(f"Order history poll failed: {e}")
            return None

        self.poll_count += 1
        result = self.callback(history)
        if asyncio.iscoroutine(result):
            await result
        return history

    async def _run(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        """Begin polling immediately, then every interval."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
