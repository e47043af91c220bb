"""
Khabee API Client

Async ``httpx`` client for the JSON API. It keeps the session token it
gets from ``verify_otp`` and sends it as a bearer token on every later
call. Service failures come back as the server's ``{success, error}``
body; only transport errors raise.
"""

import logging
from typing import Any, Optional

import httpx

from khabee.client.cart import CartStore

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8001"


class KhabeeClient:
    """
    Args:
        base_url: API root
        token: Existing session token
        transport: Custom transport (e.g. ``httpx.ASGITransport`` in tests)
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.token = token
        self.client = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "KhabeeClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self.client.aclose()

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        response = await self.client.request(method, url, headers=self._headers(), **kwargs)
        if response.status_code >= 500:
            logger.warning(f"{method} {url} -> {response.status_code}")
        return response.json()

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    async def request_otp(self, phone: str) -> dict[str, Any]:
        return await self._request("POST", "/auth/otp", json={"phone": phone})

    async def verify_otp(self, phone: str, code: str) -> dict[str, Any]:
        """Sign in; on success the client uses the new session from now on."""
        data = await self._request("POST", "/auth/verify", json={"phone": phone, "code": code})
        if data.get("success"):
            self.token = data["accessToken"]
        return data

    async def me(self) -> dict[str, Any]:
        return await self._request("GET", "/api/me")

    # -------------------------------------------------------------------------
    # Kitchens
    # -------------------------------------------------------------------------

    async def list_kitchens(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/api/kitchens")

    async def get_kitchen(self, kitchen_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/api/kitchens/{kitchen_id}")

    # -------------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------------

    async def place_order(
        self,
        items: list[dict[str, Any]],
        delivery_address: Optional[str] = None,
        special_instructions: Optional[str] = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"items": items}
        if delivery_address:
            payload["deliveryAddress"] = delivery_address
        if special_instructions:
            payload["specialInstructions"] = special_instructions
        return await self._request("POST", "/api/orders", json=payload)

    async def checkout(
        self,
        cart: CartStore,
        delivery_address: Optional[str] = None,
        special_instructions: Optional[str] = None,
    ) -> dict[str, Any]:
        """Place the cart as an order; the cart is cleared only if that succeeds."""
        result = await self.place_order(
            cart.to_order_items(),
            delivery_address=delivery_address,
            special_instructions=special_instructions,
        )
        if result.get("success"):
            cart.clear_cart()
            logger.info(f"Checked out cart as order {result.get('orderId')}")
        else:
            logger.warning(f"Checkout failed: {result.get('error')}")
        return result

    async def my_orders(self) -> dict[str, Any]:
        return await self._request("GET", "/api/orders")

    async def get_order(self, order_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/api/orders/{order_id}")

    async def kitchen_orders(self, kitchen_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/api/kitchens/{kitchen_id}/orders")

    async def update_order_status(self, order_id: str, status: str) -> dict[str, Any]:
        return await self._request("PATCH", f"/api/orders/{order_id}/status", json={"status": status})
