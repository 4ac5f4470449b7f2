"""Hoya exchange client driving the web front end's JSON endpoints."""

import logging
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

import requests

from config.settings import HoyaSettings
from slipbot.api.auth import mask_secret, totp_code
from slipbot.api.base import HttpExchangeClient, to_decimal
from slipbot.api.exceptions import (
    AuthenticationError,
    NetworkError,
    RateLimitError,
    VendorApiError,
)
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

_STATUS_MAP = {
    "pending": OrderStatus.PENDING,
    "open": OrderStatus.PENDING,
    "wait": OrderStatus.PENDING,
    "filled": OrderStatus.COMPLETED,
    "done": OrderStatus.COMPLETED,
    "completed": OrderStatus.COMPLETED,
    "cancelled": OrderStatus.CANCELLED,
    "canceled": OrderStatus.CANCELLED,
    "cancel": OrderStatus.CANCELLED,
}


class HoyaClient(HttpExchangeClient):
    """
    Hoya has no public trading API.

    This client logs into the web UI with account, password and a Google
    Authenticator code, then uses the session cookie (and bearer token when
    the login response carries one) for the same JSON calls the browser
    makes. The session is re-established once if the exchange expires it.

    Hoya does not document these routes or their payloads. The paths come
    from HoyaSettings and must be checked against the live front end before
    ENABLE_HOYA is turned on; a warning is logged whenever a client is built.
    """

    name = ExchangeName.HOYA

    def __init__(
        self,
        settings: HoyaSettings,
        quote_currency: str = "twd",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
        rate_limiter: Optional[RateLimiter] = None,
        otp_provider: Optional[Callable[[], str]] = None,
    ):
        super().__init__(
            settings.base_url,
            quote_currency=quote_currency,
            timeout=timeout,
            session=session,
            rate_limiter=rate_limiter,
        )
        self.settings = settings
        self._otp_provider = otp_provider or (lambda: totp_code(settings.google_auth_key))
        self._auth_headers: Dict[str, str] = {}
        self._logged_in = False
        logger.warning(
            f"Hoya web routes are unverified (login={settings.login_path}, "
            f"depth={settings.depth_path}, balances={settings.balance_path}, "
            f"orders={settings.orders_path}); confirm them before trading"
        )

    def market_symbol(self, currency: str) -> str:
        """Hoya symbol, e.g. ``usdt_twd``."""
        return f"{currency.lower()}_{self.quote_currency}"

    def login(self) -> None:
        """
        Log in with account, password and the current TOTP code.

        Raises:
            AuthenticationError: If the exchange rejects the login
        """
        logger.info(f"Logging into Hoya as {mask_secret(self.settings.account, 3)}")
        body = self._request(
            "POST",
            self.settings.login_path,
            json_body={
                "account": self.settings.account,
                "password": self.settings.password,
                "otp": self._otp_provider(),
            },
        )
        data = self._unwrap(body)
        if isinstance(data, dict) and data.get("success") is False:
            raise AuthenticationError(f"Hoya login rejected: {data.get('message', 'unknown')}")

        token = data.get("token") if isinstance(data, dict) else None
        self._auth_headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._logged_in = True
        logger.info("Hoya login succeeded")

    def _authed(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        if not self._logged_in:
            self.login()
        try:
            return self._request(
                method, path, params=params, json_body=json_body, headers=self._auth_headers
            )
        except AuthenticationError:
            logger.warning("Hoya session expired, logging in again")
            self._logged_in = False
            self.login()
            return self._request(
                method, path, params=params, json_body=json_body, headers=self._auth_headers
            )

    @with_retry(max_retries=2, retry_on=(RateLimitError, NetworkError))
    @rate_limited
    def fetch_market_depth(self, currency: str) -> MarketDepth:
        body = self._unwrap(
            self._authed(
                "GET", self.settings.depth_path, params={"symbol": self.market_symbol(currency)}
            )
        )
        if not isinstance(body, dict):
            raise VendorApiError(f"Unexpected Hoya depth payload: {body!r}")
        return MarketDepth(
            asks=self._convert_levels(body.get("asks"), "asks"),
            bids=self._convert_levels(body.get("bids"), "bids"),
        )

    @with_retry(max_retries=2, retry_on=(RateLimitError, NetworkError))
    @rate_limited
    def fetch_wallet_balance(self, currency: str) -> Decimal:
        accounts = self._unwrap(self._authed("GET", self.settings.balance_path))
        if not isinstance(accounts, list):
            raise VendorApiError(f"Unexpected Hoya balance payload: {accounts!r}")
        for account in accounts:
            if str(account.get("currency", "")).lower() == currency.lower():
                return to_decimal(account.get("available", "0"), "available")
        return Decimal(0)

    @with_retry(max_retries=2, retry_on=(RateLimitError,))
    @rate_limited
    def place_order(self, request: OrderRequest) -> Order:
        body = self._authed(
            "POST",
            self.settings.orders_path,
            json_body={
                "symbol": self.market_symbol(request.currency),
                "side": request.side.value,
                "type": "limit",
                "price": format(request.price, "f"),
                "amount": format(request.volume, "f"),
            },
        )
        return self._convert_order(body, default_status=OrderStatus.PENDING)

    @with_retry(max_retries=2, retry_on=(RateLimitError, NetworkError))
    @rate_limited
    def get_order_detail(self, order_id: str, currency: str) -> Order:
        body = self._authed("GET", f"{self.settings.orders_path}/{order_id}")
        return self._convert_order(body)

    @staticmethod
    def map_status(status: Any) -> OrderStatus:
        """Map a Hoya order status string onto OrderStatus."""
        return _STATUS_MAP.get(str(status or "").lower(), OrderStatus.OTHER)

    @staticmethod
    def _unwrap(body: Any) -> Any:
        """The web API wraps most payloads in ``{"data": ...}``."""
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    def _convert_order(
        self, body: Any, default_status: OrderStatus = OrderStatus.OTHER
    ) -> Order:
        data = self._unwrap(body)
        if not isinstance(data, dict) or data.get("id") is None:
            raise VendorApiError(f"Unexpected Hoya order payload: {body!r}")
        status = (
            self.map_status(data["status"]) if data.get("status") is not None else default_status
        )
        return Order(id=str(data["id"]), status=status, raw=data)

    @staticmethod
    def _convert_levels(levels: Optional[List[Any]], side: str) -> tuple:
        """Levels come as ``{price, amount}`` objects or ``[price, amount]`` pairs."""
        if levels is None:
            raise VendorApiError(f"Hoya depth payload missing '{side}'")
        converted = []
        for level in levels:
            if isinstance(level, dict):
                price, amount = level.get("price"), level.get("amount")
            elif isinstance(level, (list, tuple)) and len(level) >= 2:
                price, amount = level[0], level[1]
            else:
                raise VendorApiError(f"Malformed Hoya depth level: {level!r}")
            converted.append(
                PriceLevel(to_decimal(price, "price"), to_decimal(amount, "amount"))
            )
        return tuple(converted)
