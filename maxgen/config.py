"""Application configuration helpers."""
from __future__ import annotations

import math
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Optional, Sequence, Tuple

from dotenv import load_dotenv


class MissingConfigurationError(RuntimeError):
    """Raised at startup when required environment variables are absent."""

    def __init__(self, missing: Sequence[str], *, scope: str = "config") -> None:
        self.missing: Tuple[str, ...] = tuple(missing)
        names = ", ".join(self.missing)
        super().__init__(f"[{scope}] Missing env var: {names}")


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the API process."""

    database_url: str
    db_connect_timeout: int
    auth_jwt_secret: str
    auth_jwt_audience: str
    stripe_secret_key: str
    stripe_webhook_secret: str
    site_url: str
    cors_origins: Tuple[str, ...]
    log_level: str


def _to_timeout(value: Optional[str], *, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        timeout = float(value)
    except ValueError as exc:
        raise ValueError("DB_CONNECT_TIMEOUT must be a number") from exc
    if timeout < 0:
        raise ValueError("DB_CONNECT_TIMEOUT must be non-negative")
    return int(math.ceil(timeout))


def _to_origins(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(origin.strip() for origin in value.split(",") if origin.strip())


def require_env(env: Mapping[str, str], names: Sequence[str], *, scope: str = "config") -> dict[str, str]:
    """Return the requested variables, raising once with every missing name."""

    values: dict[str, str] = {}
    missing = []
    for name in names:
        value = (env.get(name) or "").strip()
        if not value:
            missing.append(name)
            continue
        values[name] = value
    if missing:
        raise MissingConfigurationError(missing, scope=scope)
    return values


_REQUIRED_SETTINGS = (
    "SUPABASE_DB_URL",
    "SUPABASE_JWT_SECRET",
    "STRIPE_SECRET_KEY",
    "STRIPE_WEBHOOK_SECRET",
    "SITE_URL",
)


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Load :class:`Settings` from environment variables."""

    env_mapping = os.environ if env is None else env
    required = require_env(env_mapping, _REQUIRED_SETTINGS)

    return Settings(
        database_url=required["SUPABASE_DB_URL"],
        db_connect_timeout=_to_timeout(env_mapping.get("DB_CONNECT_TIMEOUT"), default=5),
        auth_jwt_secret=required["SUPABASE_JWT_SECRET"],
        auth_jwt_audience=env_mapping.get("SUPABASE_JWT_AUDIENCE") or "authenticated",
        stripe_secret_key=required["STRIPE_SECRET_KEY"],
        stripe_webhook_secret=required["STRIPE_WEBHOOK_SECRET"],
        site_url=required["SITE_URL"].rstrip("/"),
        cors_origins=_to_origins(env_mapping.get("CORS_ORIGINS")),
        log_level=(env_mapping.get("LOG_LEVEL") or "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_dotenv()
    return load_settings()
