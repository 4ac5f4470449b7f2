"""Custom exceptions for exchange, trading and notification errors."""

from typing import Optional


class SlipBotError(Exception):
    """Base exception for all bot errors."""

    pass


class ConfigurationError(SlipBotError):
    """Invalid or missing configuration."""

    pass


class APIError(SlipBotError):
    """Base class for exchange API errors."""

    def __init__(
        self, message: str, status_code: Optional[int] = None, response: Optional[dict] = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class NetworkError(APIError):
    """Transport failure: connection refused, DNS, timeout."""

    pass


class AuthenticationError(APIError):
    """Exchange rejected the credentials or the signature."""

    pass


class RateLimitError(APIError):
    """API rate limit exceeded (429)."""

    def __init__(self, retry_after: Optional[float] = None, response: Optional[dict] = None):
        super().__init__("Rate limit exceeded", status_code=429, response=response)
        self.retry_after = retry_after


class VendorApiError(APIError):
    """Exchange answered with an error or a payload we cannot read."""

    pass


class TradingError(SlipBotError):
    """Base class for trading errors."""

    pass


class NoLiquidityError(TradingError):
    """No ask (or bid) price available when one is required."""

    def __init__(self, side: str, market: str = ""):
        where = f" on {market}" if market else ""
        super().__init__(f"No {side} prices available{where}")
        self.side = side
        self.market = market


class NotificationDeliveryError(SlipBotError):
    """Push notification could not be delivered."""

    pass


class MessageTooLongError(NotificationDeliveryError):
    """Message exceeds the push channel's length limit."""

    def __init__(self, length: int, max_length: int):
        super().__init__(f"Message too long: {length} characters (max {max_length})")
        self.length = length
        self.max_length = max_length
