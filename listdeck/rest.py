"""requests-backed Resource/Mutation API for the listing backend."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Mapping
from urllib.parse import quote

import requests

from .errors import ApiError
from .models import Item, Page, Query, page_count

logger = logging.getLogger(__name__)

USER_AGENT = "listdeck/1.0"
DEFAULT_TIMEOUT = 20


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("true", "1"):
            return True
        if text in ("false", "0", ""):
            return False
        raise ApiError(f"Unexpected boolean value: {value!r}")
    return bool(value)


def parse_item(record: Mapping[str, Any]) -> Item:
    """Build an Item from a server record keyed by ``_id`` or ``id``."""
    item_id = record.get("_id")
    if item_id is None:
        item_id = record.get("id")
    if item_id is None:
        raise ApiError(f"Record without an id: {record!r}")
    return Item(
        id=str(item_id),
        is_active=_flag(record.get("isActive", True)),
        data=dict(record),
    )


def _int_or(value: Any, default: int) -> int:
    return default if value is None else int(value)


class RestListClient:
    """Wraps one ``/api/<resource>`` collection of the listing backend."""

    def __init__(self,
                 base_url: str,
                 resource: str,
                 token: str | None = None,
                 timeout: int = DEFAULT_TIMEOUT,
                 session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.resource = resource.strip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
        })
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    @property
    def collection_url(self) -> str:
        return f"{self.base_url}/api/{self.resource}"

    def item_url(self, item_id: str, *suffix: str) -> str:
        parts = [self.collection_url, quote(str(item_id), safe="")]
        parts.extend(suffix)
        return "/".join(parts)

    def request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        logger.debug("%s %s %s", method, url, kwargs.get("params") or "")
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise ApiError(f"{method} {url} failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not response.ok:
            message = None
            if isinstance(payload, dict):
                message = payload.get("message")
            raise ApiError(
                message or f"HTTP error! status: {response.status_code}",
                status_code=response.status_code,
            )
        if not isinstance(payload, dict):
            raise ApiError(f"Unexpected response payload: {payload!r}",
                           status_code=response.status_code)
        if payload.get("success") is False:
            raise ApiError(payload.get("message") or "Request was not successful",
                           status_code=response.status_code)
        return payload

    def get_page(self, query: Query) -> Page:
        payload = self.request("GET", self.collection_url, params=query.to_params())
        records = payload.get("data") or []
        if not isinstance(records, list):
            raise ApiError(f"Unexpected data payload: {records!r}")
        items: List[Item] = [parse_item(record) for record in records]
        total_count = _int_or(payload.get("total"), len(items))
        return Page(
            items=items,
            page=_int_or(payload.get("page"), query.page),
            total_pages=_int_or(payload.get("pages"),
                                page_count(total_count, query.page_size)),
            total_count=total_count,
        )

    def patch_toggle(self, item_id: str) -> bool | None:
        payload = self.request("PATCH", self.item_url(item_id, "toggle"))
        data = payload.get("data")
        if isinstance(data, dict) and "isActive" in data:
            return _flag(data["isActive"])
        return None

    def remove(self, item_id: str) -> None:
        self.request("DELETE", self.item_url(item_id))

    async def fetch_page(self, query: Query) -> Page:
        return await asyncio.to_thread(self.get_page, query)

    async def toggle_status(self, item_id: str) -> bool | None:
        return await asyncio.to_thread(self.patch_toggle, item_id)

    async def delete_item(self, item_id: str) -> None:
        await asyncio.to_thread(self.remove, item_id)
