"""Environment-driven settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .rest import DEFAULT_TIMEOUT

DEFAULT_API_BASE_URL = "http://localhost:5000"


def _int_from_env(env: Mapping[str, str],
                  name: str,
                  default: int | None,
                  minimum: int = 0) -> int | None:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value < minimum:
        raise ValueError(f"{name} must be at least {minimum}, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    api_base_url: str = DEFAULT_API_BASE_URL
    api_token: str | None = None
    search_debounce_ms: int | None = None
    page_size: int | None = None
    http_timeout: int = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if env is None else env
        return cls(
            api_base_url=(env.get("LISTDECK_API_BASE_URL") or DEFAULT_API_BASE_URL).strip(),
            api_token=(env.get("LISTDECK_API_TOKEN") or "").strip() or None,
            search_debounce_ms=_int_from_env(env, "LISTDECK_SEARCH_DEBOUNCE_MS", None),
            page_size=_int_from_env(env, "LISTDECK_PAGE_SIZE", None, minimum=1),
            http_timeout=_int_from_env(env, "LISTDECK_HTTP_TIMEOUT", DEFAULT_TIMEOUT, minimum=1),
        )
