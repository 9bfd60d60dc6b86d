"""
Centralized configuration with environment variable overrides.

Store credentials, notification endpoints, and the travel-rep policy
thresholds are all configurable here. Nothing is hardcoded in the
engine or the collaborators.
"""

import logging
import os
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from travel_status.logging_context import CallIdFilter

load_dotenv()

logger = logging.getLogger(__name__)

STORE_BACKENDS = ("mock", "caspio")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class StoreConfig:
    """Customer store backend and hosted-table credentials."""

    backend: str = os.getenv("STORE_BACKEND", "mock").lower()
    caspio_account_id: str = os.getenv("CASPIO_ACCOUNT_ID", "")
    caspio_client_id: str = os.getenv("CASPIO_CLIENT_ID", "")
    caspio_client_secret: str = os.getenv("CASPIO_CLIENT_SECRET", "")
    customers_table: str = os.getenv("CASPIO_CUSTOMERS_TABLE", "RIMS_DATA")
    packages_table: str = os.getenv("CASPIO_PACKAGES_TABLE", "knowledge_base")
    memos_table: str = os.getenv("CASPIO_MEMOS_TABLE", "RIMS_MEMOS")
    timeout_sec: float = _safe_float("STORE_TIMEOUT", "10.0")

    @property
    def caspio_base_url(self) -> str:
        return f"https://{self.caspio_account_id}.caspio.com"


@dataclass(frozen=True)
class NotificationConfig:
    """Chat space webhook used for live call monitoring."""

    google_chat_webhook_url: str = os.getenv("GOOGLE_CHAT_WEBHOOK_URL", "")
    dashboard_url: str = os.getenv("DASHBOARD_URL", "https://app.retellai.com")
    timeout_sec: float = _safe_float("NOTIFY_TIMEOUT", "5.0")
    default_agent_name: str = os.getenv("DEFAULT_AGENT_NAME", "TravelBucks Concierge")


@dataclass(frozen=True)
class PolicyConfig:
    """Travel-rep assignment window and the calendar used to count days."""

    tr_urgent_days: int = _safe_int("TR_URGENT_DAYS", "45")
    tr_window_end_days: int = _safe_int("TR_WINDOW_END_DAYS", "75")
    travel_timezone: str = os.getenv("TRAVEL_TIMEZONE", "UTC")


@dataclass(frozen=True)
class ServerConfig:
    """HTTP server bind settings."""

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = _safe_int("PORT", "3000")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    store: StoreConfig = field(default_factory=StoreConfig)
    notifications: NotificationConfig = field(default_factory=NotificationConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    service_name: str = os.getenv("SERVICE_NAME", "travel-status")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.store.backend not in STORE_BACKENDS:
        raise ValueError(
            f"STORE_BACKEND must be one of {STORE_BACKENDS}, got {config.store.backend!r}"
        )
    if config.store.backend == "caspio":
        missing = [
            name
            for name, value in [
                ("CASPIO_ACCOUNT_ID", config.store.caspio_account_id),
                ("CASPIO_CLIENT_ID", config.store.caspio_client_id),
                ("CASPIO_CLIENT_SECRET", config.store.caspio_client_secret),
            ]
            if not value
        ]
        if missing:
            raise ValueError(f"STORE_BACKEND=caspio requires: {', '.join(missing)}")
    if config.store.timeout_sec <= 0:
        raise ValueError(f"STORE_TIMEOUT must be > 0, got {config.store.timeout_sec}")
    if config.notifications.timeout_sec <= 0:
        raise ValueError(
            f"NOTIFY_TIMEOUT must be > 0, got {config.notifications.timeout_sec}"
        )
    if config.policy.tr_urgent_days < 0:
        raise ValueError(
            f"TR_URGENT_DAYS must be >= 0, got {config.policy.tr_urgent_days}"
        )
    if config.policy.tr_window_end_days < config.policy.tr_urgent_days:
        raise ValueError(
            "TR_WINDOW_END_DAYS must be >= TR_URGENT_DAYS, "
            f"got {config.policy.tr_window_end_days} < {config.policy.tr_urgent_days}"
        )
    try:
        ZoneInfo(config.policy.travel_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(
            f"Unknown TRAVEL_TIMEZONE: {config.policy.travel_timezone!r}"
        ) from None
    if not 0 < config.server.port < 65536:
        raise ValueError(f"PORT must be between 1 and 65535, got {config.server.port}")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s [%(call_id)s]: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, CallIdFilter) for f in handler.filters):
            handler.addFilter(CallIdFilter())
    logger.info(
        "Configuration loaded for '%s' (store backend: %s)",
        config.service_name, config.store.backend,
    )
    return config


# Singleton instance
settings = load_config()
