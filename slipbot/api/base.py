"""Exchange client interface and shared HTTP plumbing."""

import logging
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

import requests

from slipbot.api.exceptions import (
    AuthenticationError,
    NetworkError,
    RateLimitError,
    VendorApiError,
)
from slipbot.api.rate_limiter import RateLimiter
from slipbot.models import ExchangeName, MarketDepth, Order, OrderRequest

logger = logging.getLogger(__name__)

_SENSITIVE_HEADER_MARKERS = ("KEY", "SIGNATURE", "PAYLOAD", "AUTHORIZATION", "COOKIE")


class ExchangeClient(ABC):
    """
    Capabilities the slip pipeline needs from an exchange.

    Implementations adapt vendor payloads to MarketDepth / Order / Decimal
    and raise NetworkError, AuthenticationError or VendorApiError on failure.
    """

    name: ExchangeName

    @abstractmethod
    def fetch_market_depth(self, currency: str) -> MarketDepth:
        """Order book snapshot for ``currency`` against the quote currency."""

    @abstractmethod
    def fetch_wallet_balance(self, currency: str) -> Decimal:
        """Available (not locked or staked) balance of ``currency``."""

    @abstractmethod
    def place_order(self, request: OrderRequest) -> Order:
        """Submit a limit order; returns without waiting for a fill."""

    @abstractmethod
    def get_order_detail(self, order_id: str, currency: str) -> Order:
        """Current status of an order."""

    def close(self) -> None:
        """Release network resources."""


def to_decimal(value: Any, field_name: str = "value") -> Decimal:
    """
    Parse a vendor number (usually a string) into Decimal.

    Raises:
        VendorApiError: If the value is missing or not numeric
    """
    if value is None or value == "":
        raise VendorApiError(f"Missing numeric field '{field_name}'")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise VendorApiError(f"Invalid numeric field '{field_name}': {value!r}") from e


def mask_headers(headers: Optional[Dict[str, str]]) -> Dict[str, str]:
    """Copy of headers with credentials truncated for logging."""
    masked = {}
    for key, value in (headers or {}).items():
        if any(marker in key.upper() for marker in _SENSITIVE_HEADER_MARKERS):
            value = f"{str(value)[:10]}..." if len(str(value)) > 10 else "***"
        masked[key] = value
    return masked


class HttpExchangeClient(ExchangeClient):
    """
    Base for exchanges reached over HTTP with ``requests``.

    Owns the session, the per-call timeout and the client's rate limiter,
    and translates transport / HTTP failures into the APIError hierarchy.
    """

    def __init__(
        self,
        base_url: str,
        quote_currency: str = "twd",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ):
        """
        Args:
            base_url: API root, without trailing slash
            quote_currency: Quote side of every market, e.g. "twd"
            timeout: Seconds before an HTTP call is abandoned
            session: Pre-built session (tests pass a fake)
            rate_limiter: Limiter shared by this client's calls
        """
        self.base_url = base_url.rstrip("/")
        self.quote_currency = quote_currency.lower()
        self.timeout = timeout
        self.session = session or requests.Session()
        self.rate_limiter = rate_limiter or RateLimiter()

    def close(self) -> None:
        self.session.close()

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Perform one HTTP call and return the decoded JSON body.

        Raises:
            NetworkError: Connection failure or timeout
            AuthenticationError: 401 / 403
            RateLimitError: 429
            VendorApiError: Any other non-2xx status, or a non-JSON body
        """
        url = f"{self.base_url}{path}"
        logger.debug(
            f"{self.name.value} API Request [{method}] {path} "
            f"headers={mask_headers(headers)} params={params} body={json_body}"
        )

        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            logger.error(f"{self.name.value} API timeout [{method}] {path}: {e}")
            raise NetworkError(f"{self.name.value} request timed out: {path}") from e
        except requests.RequestException as e:
            logger.error(f"{self.name.value} API connection error [{method}] {path}: {e}")
            raise NetworkError(f"{self.name.value} request failed: {e}") from e

        body = self._decode(response)
        status = response.status_code
        logger.debug(f"{self.name.value} API Response [{method}] {path} ({status}): {body}")

        if status in (401, 403):
            logger.error(f"{self.name.value} API rejected credentials ({status}): {body}")
            raise AuthenticationError(
                f"{self.name.value} authentication failed ({status})",
                status_code=status,
                response=body if isinstance(body, dict) else None,
            )
        if status == 429:
            logger.warning(f"{self.name.value} API rate limited on {path}")
            raise RateLimitError(
                retry_after=self._retry_after(response),
                response=body if isinstance(body, dict) else None,
            )
        if not 200 <= status < 300:
            logger.error(f"{self.name.value} API error ({status}) on {path}: {body}")
            raise VendorApiError(
                f"{self.name.value} API error ({status}) on {path}",
                status_code=status,
                response=body if isinstance(body, dict) else None,
            )
        if body is None:
            raise VendorApiError(
                f"{self.name.value} API returned a non-JSON body on {path}",
                status_code=status,
            )
        return body

    @staticmethod
    def _retry_after(response: requests.Response) -> Optional[float]:
        # Only the delta-seconds form is honoured
        value = response.headers.get("Retry-After")
        try:
            return float(value) if value else None
        except ValueError:
            return None

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None
