"""BitoPro exchange (v3 REST) client."""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import requests

from config.settings import BitoSettings
from slipbot.api.auth import bito_auth_headers, nonce_ms
from slipbot.api.base import HttpExchangeClient, to_decimal
from slipbot.api.exceptions import NetworkError, RateLimitError, VendorApiError
from slipbot.api.rate_limiter import RateLimiter, rate_limited, with_retry
from slipbot.models import (
    ExchangeName,
    MarketDepth,
    Order,
    OrderRequest,
    OrderStatus,
    PriceLevel,
)

logger = logging.getLogger(__name__)

# BitoPro integer order status -> normalized status
# -1 not triggered, 0 in progress, 1 partially filled and still open,
# 2 filled, 3 partially filled then closed, 4 cancelled, 6 post-only cancelled
_STATUS_MAP = {
    -1: OrderStatus.PENDING,
    0: OrderStatus.PENDING,
    1: OrderStatus.PENDING,
    2: OrderStatus.COMPLETED,
    3: OrderStatus.COMPLETED,
    4: OrderStatus.CANCELLED,
    6: OrderStatus.CANCELLED,
}


class BitoClient(HttpExchangeClient):
    """Wrapper around the BitoPro v3 REST API."""

    name = ExchangeName.BITO

    def __init__(
        self,
        settings: BitoSettings,
        quote_currency: str = "twd",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ):
        super().__init__(
            settings.base_url,
            quote_currency=quote_currency,
            timeout=timeout,
            session=session,
            rate_limiter=rate_limiter,
        )
        self.settings = settings

    def market_pair(self, currency: str) -> str:
        """BitoPro pair id, e.g. ``usdt_twd``."""
        return f"{currency.lower()}_{self.quote_currency}"

    def _signed_get(self, path: str) -> Any:
        payload = {"identity": self.settings.identity, "nonce": nonce_ms()}
        headers = bito_auth_headers(
            self.settings.access_key, self.settings.secret_key, payload
        )
        return self._request("GET", path, headers=headers)

    def _signed_post(self, path: str, body: Dict[str, Any]) -> Any:
        body = {**body, "nonce": nonce_ms()}
        headers = bito_auth_headers(self.settings.access_key, self.settings.secret_key, body)
        headers["Content-Type"] = "application/json"
        return self._request("POST", path, json_body=body, headers=headers)

    @with_retry(max_retries=2, retry_on=(RateLimitError, NetworkError))
    @rate_limited
    def fetch_market_depth(self, currency: str) -> MarketDepth:
        body = self._request(
            "GET",
            f"/order-book/{self.market_pair(currency)}",
            params={"limit": 5},
        )
        if not isinstance(body, dict):
            raise VendorApiError(f"Unexpected BitoPro depth payload: {body!r}")
        return MarketDepth(
            asks=self._convert_levels(body.get("asks"), "asks"),
            bids=self._convert_levels(body.get("bids"), "bids"),
        )

    @with_retry(max_retries=2, retry_on=(RateLimitError, NetworkError))
    @rate_limited
    def fetch_wallet_balance(self, currency: str) -> Decimal:
        """Available balance; ``amount`` would include funds held by open orders."""
        body = self._signed_get("/accounts/balance")
        accounts = body.get("data") if isinstance(body, dict) else None
        if not isinstance(accounts, list):
            raise VendorApiError(f"Unexpected BitoPro balance payload: {body!r}")

        for account in accounts:
            if str(account.get("currency", "")).lower() == currency.lower():
                return to_decimal(account.get("available", "0"), "available")
        return Decimal(0)

    @with_retry(max_retries=2, retry_on=(RateLimitError,))
    @rate_limited
    def place_order(self, request: OrderRequest) -> Order:
        body = self._signed_post(
            f"/orders/{self.market_pair(request.currency)}",
            {
                "action": request.side.value.upper(),
                "amount": format(request.volume, "f"),
                "price": format(request.price, "f"),
                "timestamp": nonce_ms(),
                "type": "limit",
            },
        )
        if not isinstance(body, dict) or body.get("orderId") is None:
            raise VendorApiError(f"Unexpected BitoPro order payload: {body!r}")
        # Creation response carries no status; a new limit order is open
        return Order(id=str(body["orderId"]), status=OrderStatus.PENDING, raw=body)

    @with_retry(max_retries=2, retry_on=(RateLimitError, NetworkError))
    @rate_limited
    def get_order_detail(self, order_id: str, currency: str) -> Order:
        body = self._signed_get(f"/orders/{self.market_pair(currency)}/{order_id}")
        if not isinstance(body, dict) or body.get("id") is None:
            raise VendorApiError(f"Unexpected BitoPro order payload: {body!r}")
        return Order(id=str(body["id"]), status=self.map_status(body.get("status")), raw=body)

    @staticmethod
    def map_status(status: Any) -> OrderStatus:
        """Map a BitoPro order status code onto OrderStatus."""
        try:
            return _STATUS_MAP.get(int(status), OrderStatus.OTHER)
        except (TypeError, ValueError):
            return OrderStatus.OTHER

    @staticmethod
    def _convert_levels(levels: Optional[List[Any]], side: str) -> tuple:
        """BitoPro levels are objects with ``price`` and ``amount``."""
        if levels is None:
            raise VendorApiError(f"BitoPro depth payload missing '{side}'")
        converted = []
        for level in levels:
            if not isinstance(level, dict):
                raise VendorApiError(f"Malformed BitoPro depth level: {level!r}")
            converted.append(
                PriceLevel(
                    to_decimal(level.get("price"), "price"),
                    to_decimal(level.get("amount"), "amount"),
                )
            )
        return tuple(converted)
