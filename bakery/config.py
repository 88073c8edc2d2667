"""Runtime settings for the bakery core, read from the environment."""
import os
from dataclasses import dataclass
from functools import cache
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]
load_dotenv(dotenv_path=ROOT_DIR / ".env")


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for key in keys:
        value = os.environ.get(key)
        if value is not None and value.strip() != "":
            return value.strip()
    return default


def _get_int(*keys: str, default: int) -> int:
    value = _get_env(*keys)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    currency: str
    cart_ttl_seconds: int
    cart_key_prefix: str
    redis_url: str
    redis_token: str


@cache
def get_settings() -> Settings:
    """Build settings once per process."""
    return Settings(
        currency=(_get_env("CURRENCY", default="BRL") or "BRL").upper(),
        cart_ttl_seconds=max(1, _get_int("CART_TTL_SECONDS", default=86400)),
        cart_key_prefix=_get_env("CART_KEY_PREFIX", default="cart:") or "cart:",
        redis_url=_get_env("UPSTASH_REDIS_REST_URL", default="") or "",
        redis_token=_get_env("UPSTASH_REDIS_REST_TOKEN", default="") or "",
    )


def refresh_settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()
