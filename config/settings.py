"""Configuration management using Pydantic Settings."""

import os
from decimal import Decimal
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from slipbot.models.market import TradingCurrency

# Load .env file at module import time
load_dotenv()


class MaxSettings(BaseSettings):
    """MAX exchange API configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MAX_",
        env_file=".env",
        extra="ignore",
    )

    api_base_url: str = Field(
        default="https://max-api.maicoin.com", description="MAX REST base URL"
    )
    access_key: str = Field(default="", description="MAX API access key")
    secret_key: str = Field(default="", description="MAX API secret key")


class BitoSettings(BaseSettings):
    """BitoPro exchange API configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BITO_API_",
        env_file=".env",
        extra="ignore",
    )

    base_url: str = Field(
        default="https://api.bitopro.com/v3", description="BitoPro REST base URL"
    )
    access_key: str = Field(default="", description="BitoPro API key")
    secret_key: str = Field(default="", description="BitoPro API secret")
    identity: str = Field(
        default="", description="Account e-mail used in signed GET payloads"
    )


class HoyaSettings(BaseSettings):
    """Hoya web login configuration."""

    model_config = SettingsConfigDict(
        env_prefix="HOYA_",
        env_file=".env",
        extra="ignore",
    )

    base_url: str = Field(default="", description="Hoya web base URL")
    account: str = Field(default="", description="Login account")
    password: str = Field(default="", description="Login password")
    google_auth_key: str = Field(
        default="", description="Base32 TOTP seed for two-factor login"
    )

    # The web front end's JSON routes are not published; override per deployment
    login_path: str = Field(default="/api/v1/auth/login", description="Login route")
    depth_path: str = Field(default="/api/v1/market/depth", description="Order book route")
    balance_path: str = Field(default="/api/v1/wallet/balances", description="Balances route")
    orders_path: str = Field(default="/api/v1/orders", description="Order create/detail route")


class LineSettings(BaseSettings):
    """LINE Messaging API push notification configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LINE_",
        env_file=".env",
        extra="ignore",
    )

    channel_access_token: str = Field(default="", description="Channel access token")
    user_id: str = Field(default="", description="Recipient user ID")
    timeout_seconds: float = Field(default=5.0, gt=0, description="Per-attempt timeout")
    retry_delay_seconds: float = Field(
        default=2.0, ge=0, description="Delay before the retry attempt"
    )
    max_retries: int = Field(default=1, ge=0, le=5, description="Retries after first attempt")

    @property
    def is_configured(self) -> bool:
        """True when both the token and the recipient are set."""
        return bool(self.channel_access_token) and bool(self.user_id)


class ExchangeToggles(BaseSettings):
    """Which exchanges take part in a run."""

    model_config = SettingsConfigDict(
        env_prefix="ENABLE_",
        env_file=".env",
        extra="ignore",
    )

    max: bool = Field(default=False, description="Run the MAX slip")
    bito: bool = Field(default=False, description="Run the BitoPro slip")
    hoya: bool = Field(default=False, description="Run the Hoya slip")


class SlipSettings(BaseSettings):
    """Round-trip trading policy."""

    model_config = SettingsConfigDict(
        env_prefix="SLIP_",
        env_file=".env",
        extra="ignore",
        use_enum_values=True,
    )

    trading_currency: TradingCurrency = Field(
        default=TradingCurrency.USDT.value, description="Base currency to slip"
    )
    quote_currency: str = Field(default="twd", description="Quote currency of the market")

    # Sizing: volume = target_fee_cost / lowest_ask / fee_rate
    fee_rate: Decimal = Field(default=Decimal("0.002"), gt=0, description="Exchange fee rate")
    target_fee_cost: Decimal = Field(
        default=Decimal("0.252"), gt=0, description="Fee cost the buy should incur"
    )
    buy_price_offset: Decimal = Field(
        default=Decimal("0.002"), ge=0, description="Added to the lowest ask for the buy"
    )
    sell_price_offset: Decimal = Field(
        default=Decimal("0"), ge=0, description="Subtracted from the highest bid for the sell"
    )

    # Timing
    poll_interval_seconds: float = Field(default=0.5, gt=0, description="Order poll interval")
    order_timeout_seconds: float = Field(
        default=60.0, gt=0, description="Stop monitoring an order after this long"
    )
    settlement_delay_seconds: float = Field(
        default=1.0, ge=0, description="Wait for the balance ledger after a fill"
    )
    request_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Timeout for each exchange HTTP call"
    )

    @field_validator("trading_currency", "quote_currency", mode="before")
    @classmethod
    def lower_case_symbol(cls, v):
        """Exchanges key markets on lower-case symbols."""
        return v.strip().lower() if isinstance(v, str) else v


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        extra="ignore",
    )

    level: str = Field(default="INFO", description="Log level")
    file: Path = Field(default=Path("logs/slip.log"), description="Log file path")


class Settings(BaseSettings):
    """Main settings container."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    exchanges: ExchangeToggles = Field(default_factory=ExchangeToggles)
    max: MaxSettings = Field(default_factory=MaxSettings)
    bito: BitoSettings = Field(default_factory=BitoSettings)
    hoya: HoyaSettings = Field(default_factory=HoyaSettings)
    line: LineSettings = Field(default_factory=LineSettings)
    slip: SlipSettings = Field(default_factory=SlipSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_yaml(cls, config_path: Path = Path("config/config.yaml")) -> "Settings":
        """Load settings from YAML file, with env vars taking precedence."""
        yaml_config = {}
        if config_path.exists():
            with open(config_path) as f:
                yaml_config = yaml.safe_load(f) or {}

        sections = {
            "exchanges": (ExchangeToggles, "ENABLE_"),
            "max": (MaxSettings, "MAX_"),
            "bito": (BitoSettings, "BITO_API_"),
            "hoya": (HoyaSettings, "HOYA_"),
            "line": (LineSettings, "LINE_"),
            "slip": (SlipSettings, "SLIP_"),
            "logging": (LoggingSettings, "LOG_"),
        }

        built = {}
        for key, (settings_cls, prefix) in sections.items():
            section = dict(yaml_config.get(key) or {})
            # Environment variables take precedence over YAML
            for field_name in list(section):
                if os.environ.get(f"{prefix}{field_name}".upper()):
                    section.pop(field_name)
            built[key] = settings_cls(**section)

        return cls(**built)


def load_settings(config_path: Path = Path("config/config.yaml")) -> Settings:
    """Load settings from config file and environment."""
    if config_path.exists():
        return Settings.from_yaml(config_path)
    return Settings()
