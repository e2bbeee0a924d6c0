"""Configuration settings for the reservation service."""

import os
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Mapping

from dotenv import load_dotenv

load_dotenv()


def _to_bool(value: str, *, default: bool = False) -> bool:
    lowered = value.strip().lower()
    if not lowered:
        return default
    return lowered in {"true", "1", "yes", "y", "on"}


class Settings:
    PROJECT_NAME: str = os.getenv("RESERVATION_PROJECT_NAME", "Reservation Service")
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./reservation.db")
    SECRET_KEY: str = os.getenv("SECRET_KEY", "changeme")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CREATE_TABLES_ON_STARTUP: bool = _to_bool(
        os.getenv("CREATE_TABLES_ON_STARTUP", "true"), default=True
    )

    # Upper bound for a single store transaction (statement and lock waits).
    STORE_TRANSACTION_TIMEOUT_SECONDS: float = float(
        os.getenv("STORE_TRANSACTION_TIMEOUT_SECONDS", "5")
    )
    # Hours fetched on each side of a proposed interval when loading the
    # field timeline for conflict detection.
    CONFLICT_WINDOW_HOURS: int = int(os.getenv("CONFLICT_WINDOW_HOURS", "24"))
    PAYMENT_DEADLINE_MINUTES: int = int(os.getenv("PAYMENT_DEADLINE_MINUTES", "5"))
    EXPIRY_SWEEP_INTERVAL_SECONDS: float = float(
        os.getenv("EXPIRY_SWEEP_INTERVAL_SECONDS", "600")
    )

    NOTIFICATION_SERVICE_URL: str = os.getenv(
        "NOTIFICATION_SERVICE_URL",
        "http://localhost:8004",
    )
    NOTIFICATION_SERVICE_TIMEOUT: float = float(
        os.getenv("NOTIFICATION_SERVICE_TIMEOUT", "10")
    )

    def coordinator_options(self) -> Mapping[str, Any]:
        """Options consumed by the booking coordinator."""

        return MappingProxyType(
            {
                "conflict_window_hours": self.CONFLICT_WINDOW_HOURS,
                "payment_deadline_minutes": self.PAYMENT_DEADLINE_MINUTES,
            }
        )


def merge_options(
    base: Mapping[str, Any], incoming: Mapping[str, Any] | None
) -> Mapping[str, Any]:
    """Return a read-only mapping of ``base`` overridden by ``incoming``.

    Every key present in ``incoming`` wins, ``None`` values included. Neither
    input is modified.
    """

    merged = dict(base)
    merged.update(incoming or {})
    return MappingProxyType(merged)


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

__all__ = ["settings", "get_settings", "merge_options", "Settings"]
