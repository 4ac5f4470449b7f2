"""Authentication handling for exchange APIs."""

import base64
import hashlib
import hmac
import json
import logging
import struct
import time
from typing import Dict, List, Optional

from config.settings import Settings
from slipbot.api.exceptions import ConfigurationError
from slipbot.models import EXCHANGE_RUN_ORDER, ExchangeName

logger = logging.getLogger(__name__)

# Env var names per exchange, in the order they are reported when missing
_REQUIRED_ENV = {
    ExchangeName.MAX: (
        ("max", "api_base_url", "MAX_API_BASE_URL"),
        ("max", "access_key", "MAX_ACCESS_KEY"),
        ("max", "secret_key", "MAX_SECRET_KEY"),
    ),
    ExchangeName.BITO: (
        ("bito", "base_url", "BITO_API_BASE_URL"),
        ("bito", "access_key", "BITO_API_ACCESS_KEY"),
        ("bito", "secret_key", "BITO_API_SECRET_KEY"),
        ("bito", "identity", "BITO_API_IDENTITY"),
    ),
    ExchangeName.HOYA: (
        ("hoya", "base_url", "HOYA_BASE_URL"),
        ("hoya", "account", "HOYA_ACCOUNT"),
        ("hoya", "password", "HOYA_PASSWORD"),
        ("hoya", "google_auth_key", "HOYA_GOOGLE_AUTH_KEY"),
    ),
}


def nonce_ms() -> int:
    """Millisecond timestamp used as request nonce."""
    return int(time.time() * 1000)


def encode_payload(payload: dict) -> str:
    """JSON-encode then base64-encode a signing payload."""
    raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def max_auth_headers(access_key: str, secret_key: str, payload: dict) -> Dict[str, str]:
    """
    Build MAX v3 auth headers.

    The payload must already contain ``nonce`` and ``path``.
    """
    encoded = encode_payload(payload)
    signature = hmac.new(
        secret_key.encode("utf-8"), encoded.encode("ascii"), hashlib.sha256
    ).hexdigest()
    return {
        "X-MAX-ACCESSKEY": access_key,
        "X-MAX-PAYLOAD": encoded,
        "X-MAX-SIGNATURE": signature,
    }


def bito_auth_headers(api_key: str, secret_key: str, payload: dict) -> Dict[str, str]:
    """
    Build BitoPro v3 auth headers.

    GET requests sign ``{"identity": ..., "nonce": ...}``; POST requests sign
    the JSON body itself, which must carry a ``nonce``.
    """
    encoded = encode_payload(payload)
    signature = hmac.new(
        secret_key.encode("utf-8"), encoded.encode("ascii"), hashlib.sha384
    ).hexdigest()
    return {
        "X-BITOPRO-APIKEY": api_key,
        "X-BITOPRO-PAYLOAD": encoded,
        "X-BITOPRO-SIGNATURE": signature,
    }


def totp_code(
    seed: str, for_time: Optional[float] = None, step: int = 30, digits: int = 6
) -> str:
    """
    RFC 6238 time-based one-time password, as shown by Google Authenticator.

    Args:
        seed: Base32 secret (spaces and lower case are tolerated)
        for_time: Unix time to compute the code for (defaults to now)
        step: Time step in seconds
        digits: Code length

    Raises:
        ConfigurationError: If the seed is not valid base32
    """
    cleaned = seed.replace(" ", "").upper()
    cleaned += "=" * (-len(cleaned) % 8)
    try:
        key = base64.b32decode(cleaned)
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"Invalid TOTP seed: {e}") from e

    counter = int((time.time() if for_time is None else for_time) // step)
    digest = hmac.new(key, struct.pack(">Q", counter), hashlib.sha1).digest()
    offset = digest[-1] & 0x0F
    code = struct.unpack(">I", digest[offset:offset + 4])[0] & 0x7FFFFFFF
    return str(code % (10**digits)).zfill(digits)


def mask_secret(value: str, visible: int = 6) -> str:
    """Keep the first few characters of a secret for log lines."""
    if not value:
        return ""
    if len(value) <= visible:
        return "***"
    return f"{value[:visible]}..."


def enabled_exchanges(settings: Settings) -> List[ExchangeName]:
    """Enabled exchanges, in run order."""
    return [
        name for name in EXCHANGE_RUN_ORDER
        if getattr(settings.exchanges, name.name.lower())
    ]


def validate_credentials(settings: Settings) -> None:
    """
    Validate that every enabled exchange has its required configuration.

    Disabled exchanges are not checked.

    Args:
        settings: Full bot settings

    Raises:
        ConfigurationError: Naming every missing variable
    """
    missing = []
    for exchange in enabled_exchanges(settings):
        for section, field_name, env_name in _REQUIRED_ENV[exchange]:
            if not getattr(getattr(settings, section), field_name):
                missing.append(env_name)

    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}. "
            f"Set them in your .env file or disable the exchange."
        )

    if settings.exchanges.hoya:
        # Fail at startup rather than at login time
        totp_code(settings.hoya.google_auth_key)

    logger.info("Credentials validated for enabled exchanges")
