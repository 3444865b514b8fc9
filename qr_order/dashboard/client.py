"""
HTTP Client for the Order API with retry logic
"""
import logging
from typing import Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from qr_order.config import settings
from qr_order.schemas.order import OrderListResponse, OrderResponse

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class ApiError(Exception):
    """Order API returned an error response"""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class OrdersApiClient:
    """
    Client used by the admin dashboard

    Keeps one httpx.AsyncClient so the admin cookie set by login() is sent
    with every later request. Reads are retried on timeouts and connection
    errors; writes are not.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.DASHBOARD_API_URL
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def close(self) -> None:
        await self.client.aclose()

    @staticmethod
    def _payload(response: httpx.Response) -> dict:
        """
        Decode a JSON body, raising ApiError on any failure

        Raises:
            ApiError: On non-2xx status, a body that is not a JSON object or ok=false
        """
        try:
            data = response.json()
        except ValueError:
            raise ApiError(response.status_code, f"Unexpected response: {response.text[:200]}")
        if not isinstance(data, dict):
            raise ApiError(response.status_code, f"Unexpected response: {response.text[:200]}")

        if response.is_error or not data.get("ok", False):
            raise ApiError(response.status_code, data.get("error") or f"Request failed with status {response.status_code}")
        return data

    @staticmethod
    def _parse(model: Type[ModelT], data, response: httpx.Response) -> ModelT:
        """Validate a response fragment; schema mismatches become ApiError"""
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ApiError(response.status_code, f"Unexpected response: {e.error_count()} invalid field(s)")

    @retry(
        stop=stop_after_attempt(settings.MAX_RETRIES),
        wait=wait_exponential(multiplier=settings.RETRY_DELAY, min=1, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
        reraise=True
    )
    async def list_orders(
        self,
        status: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> OrderListResponse:
        """
        Fetch a page of orders

        Args:
            status: Optional status filter
            limit: Page size, server default when None
            offset: Number of orders to skip

        Returns:
            Orders with total and pending counts
        """
        params = {"offset": offset}
        if status:
            params["status"] = status
        if limit is not None:
            params["limit"] = limit
        response = await self.client.get("/api/orders", params=params)
        return self._parse(OrderListResponse, self._payload(response), response)

    async def update_status(self, key: str, status: str) -> OrderResponse:
        response = await self.client.patch(f"/api/orders/{key}", json={"status": status})
        return self._parse(OrderResponse, self._payload(response).get("order"), response)

    async def reset_orders(self) -> int:
        response = await self.client.post("/api/orders/reset")
        return int(self._payload(response).get("deleted", 0))

    async def login(self, password: str) -> None:
        response = await self.client.post("/api/admin/login", json={"password": password})
        self._payload(response)
        logger.info("Logged in to %s", self.base_url)

    async def logout(self) -> None:
        response = await self.client.post("/api/admin/logout")
        self._payload(response)

    @retry(
        stop=stop_after_attempt(settings.MAX_RETRIES),
        wait=wait_exponential(multiplier=settings.RETRY_DELAY, min=1, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
        reraise=True
    )
    async def get_stop(self) -> bool:
        response = await self.client.get("/api/admin/stop")
        return bool(self._payload(response).get("stopped", False))

    async def set_stop(self, stopped: bool) -> bool:
        response = await self.client.post("/api/admin/stop", json={"stopped": stopped})
        return bool(self._payload(response).get("stopped", False))
