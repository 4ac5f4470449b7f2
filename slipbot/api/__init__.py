"""Exchange API clients and utilities."""

from typing import Optional

from config.settings import Settings
from slipbot.api.base import ExchangeClient, HttpExchangeClient
from slipbot.api.bito_client import BitoClient
from slipbot.api.exceptions import (
    APIError,
    AuthenticationError,
    ConfigurationError,
    MessageTooLongError,
    NetworkError,
    NoLiquidityError,
    NotificationDeliveryError,
    RateLimitError,
    SlipBotError,
    VendorApiError,
)
from slipbot.api.hoya_client import HoyaClient
from slipbot.api.max_client import MaxClient
from slipbot.models import ExchangeName


def create_client(name: ExchangeName, settings: Settings) -> ExchangeClient:
    """
    Factory function to create the client for one exchange.

    Args:
        name: Which exchange
        settings: Full bot settings (exchange section plus slip policy)

    Returns:
        ExchangeClient for that exchange
    """
    common = {
        "quote_currency": settings.slip.quote_currency,
        "timeout": settings.slip.request_timeout_seconds,
    }
    client: Optional[ExchangeClient] = None
    if name == ExchangeName.MAX:
        client = MaxClient(settings.max, **common)
    elif name == ExchangeName.BITO:
        client = BitoClient(settings.bito, **common)
    elif name == ExchangeName.HOYA:
        client = HoyaClient(settings.hoya, **common)

    if client is None:
        raise ConfigurationError(f"Unknown exchange: {name}")
    return client


__all__ = [
    "BitoClient",
    "ExchangeClient",
    "HoyaClient",
    "HttpExchangeClient",
    "MaxClient",
    "create_client",
    "APIError",
    "AuthenticationError",
    "ConfigurationError",
    "MessageTooLongError",
    "NetworkError",
    "NoLiquidityError",
    "NotificationDeliveryError",
    "RateLimitError",
    "SlipBotError",
    "VendorApiError",
]
