from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]  # .../chocoblitz repo root
load_dotenv(dotenv_path=ROOT_DIR / ".env")


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_int(*keys: str, default: int | None = None) -> int | None:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return int(v)


def _get_float(*keys: str, default: float | None = None) -> float | None:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return float(v)


def _get_bool(*keys: str, default: bool = False) -> bool:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return v.lower() in ("1", "true", "yes", "on")


def _get_path(*keys: str, default: str) -> str:
    v = _get_env(*keys, default=default)
    return str(v)


@dataclass(frozen=True)
class Settings:
    bot_token: str
    admin_id: int
    db_path: str
    page_origin: str | None
    api_base_url: str | None
    api_timeout: float
    currency_symbol: str
    decimals: int
    min_password_length: int
    clear_cart_on_logout: bool
    log_level: str


settings = Settings(
    bot_token=_get_env("BOT_TOKEN", "TELEGRAM_BOT_TOKEN", default="") or "",
    admin_id=_get_int("ADMIN_ID", "ADMIN_TG_ID", default=0) or 0,
    db_path=_get_path("DB_PATH", "DATABASE_PATH", default=str(ROOT_DIR / "data" / "storefront.db")),
    page_origin=_get_env("PAGE_ORIGIN"),
    api_base_url=_get_env("API_BASE_URL"),
    api_timeout=_get_float("API_TIMEOUT", default=15.0) or 15.0,
    currency_symbol=_get_env("CURRENCY_SYMBOL", default="$") or "$",
    decimals=_get_int("DECIMALS", default=2) or 2,
    min_password_length=_get_int("MIN_PASSWORD_LENGTH", default=8) or 8,
    clear_cart_on_logout=_get_bool("CLEAR_CART_ON_LOGOUT", default=True),
    log_level=(_get_env("LOG_LEVEL", default="INFO") or "INFO").upper(),
)
