"""MAX exchange (v3 REST) client."""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import requests

from config.settings import MaxSettings
from slipbot.api.auth import max_auth_headers, nonce_ms
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

# MAX order states -> normalized status
_STATE_MAP = {
    "wait": OrderStatus.PENDING,
    "done": OrderStatus.COMPLETED,
    "cancel": OrderStatus.CANCELLED,
}


class MaxClient(HttpExchangeClient):
    """Wrapper around the MAX v3 REST API."""

    name = ExchangeName.MAX

    DEPTH_PATH = "/api/v3/depth"
    BALANCE_PATH = "/api/v3/wallet/spot/accounts"
    ORDER_PATH = "/api/v3/wallet/spot/order"
    ORDER_DETAIL_PATH = "/api/v3/order"

    def __init__(
        self,
        settings: MaxSettings,
        quote_currency: str = "twd",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ):
        super().__init__(
            settings.api_base_url,
            quote_currency=quote_currency,
            timeout=timeout,
            session=session,
            rate_limiter=rate_limiter,
        )
        self.settings = settings

    def market_pair(self, currency: str) -> str:
        """MAX market id, e.g. ``usdttwd``."""
        return f"{currency.lower()}{self.quote_currency}"

    def _signed(self, method: str, path: str, params: Dict[str, Any]) -> Any:
        payload = {"nonce": nonce_ms(), "path": path, **params}
        headers = max_auth_headers(
            self.settings.access_key, self.settings.secret_key, payload
        )
        if method == "GET":
            return self._request(method, path, params=payload, headers=headers)
        headers["Content-Type"] = "application/json"
        return self._request(method, path, json_body=payload, headers=headers)

    @with_retry(max_retries=2, retry_on=(RateLimitError, NetworkError))
    @rate_limited
    def fetch_market_depth(self, currency: str) -> MarketDepth:
        """
        Get the top of the order book.

        Args:
            currency: Base currency, e.g. "usdt"

        Returns:
            MarketDepth with up to 5 levels per side
        """
        body = self._request(
            "GET",
            self.DEPTH_PATH,
            params={"market": self.market_pair(currency), "limit": 5},
        )
        if not isinstance(body, dict):
            raise VendorApiError(f"Unexpected MAX depth payload: {body!r}")
        return MarketDepth(
            asks=self._convert_levels(body.get("asks"), "asks"),
            bids=self._convert_levels(body.get("bids"), "bids"),
        )

    @with_retry(max_retries=2, retry_on=(RateLimitError, NetworkError))
    @rate_limited
    def fetch_wallet_balance(self, currency: str) -> Decimal:
        """
        Get available spot balance.

        ``balance`` in MAX's account payload excludes locked and staked funds.
        A currency without an account row has a zero balance.
        """
        body = self._signed("GET", self.BALANCE_PATH, {"currency": currency.lower()})
        if not isinstance(body, list):
            raise VendorApiError(f"Unexpected MAX balance payload: {body!r}")

        for account in body:
            if account.get("currency") == currency.lower():
                return to_decimal(account.get("balance", "0"), "balance")
        return Decimal(0)

    @with_retry(max_retries=2, retry_on=(RateLimitError,))
    @rate_limited
    def place_order(self, request: OrderRequest) -> Order:
        """
        Place a limit order.

        Not retried on transport errors: the order may already exist.
        """
        body = self._signed(
            "POST",
            self.ORDER_PATH,
            {
                "market": self.market_pair(request.currency),
                "side": request.side.value,
                "volume": format(request.volume, "f"),
                "price": format(request.price, "f"),
                "ord_type": "limit",
            },
        )
        return self._convert_order(body)

    @with_retry(max_retries=2, retry_on=(RateLimitError, NetworkError))
    @rate_limited
    def get_order_detail(self, order_id: str, currency: str) -> Order:
        body = self._signed("GET", self.ORDER_DETAIL_PATH, {"id": int(order_id)})
        return self._convert_order(body)

    @staticmethod
    def map_state(state: Optional[str]) -> OrderStatus:
        """Map a MAX order state onto OrderStatus."""
        return _STATE_MAP.get(state or "", OrderStatus.OTHER)

    def _convert_order(self, body: Any) -> Order:
        if not isinstance(body, dict) or body.get("id") is None:
            raise VendorApiError(f"Unexpected MAX order payload: {body!r}")
        return Order(id=str(body["id"]), status=self.map_state(body.get("state")), raw=body)

    @staticmethod
    def _convert_levels(levels: Optional[List[Any]], side: str) -> tuple:
        """MAX levels are ``[price, amount]`` string pairs."""
        if levels is None:
            raise VendorApiError(f"MAX depth payload missing '{side}'")
        converted = []
        for level in levels:
            try:
                price, amount = level[0], level[1]
            except (IndexError, KeyError, TypeError) as e:
                raise VendorApiError(f"Malformed MAX depth level: {level!r}") from e
            converted.append(
                PriceLevel(to_decimal(price, "price"), to_decimal(amount, "amount"))
            )
        return tuple(converted)
