"""JSON:API menu connector.

Fetches a menu link collection with a single GET via httpx and decodes the
`data` array into `RemoteItemRecord`s. Expected document shape::

    {"data": [{"id": "...", "attributes": {"title": "...", "link": {"uri": "..."},
                                           "parent": "menu_link_content:<id>", ...}}]}
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

import httpx
from loguru import logger

from menusync.connectors.base_connector import BaseConnector
from menusync.exceptions import DecodeError, FetchError
from menusync.sync.records import RemoteItemRecord

# Attributes consumed by the record itself; everything else is passed through.
RESERVED_ATTRIBUTES = frozenset({"title", "link", "parent"})

log = logger.bind(component="jsonapi")


def collection_name_from_endpoint(endpoint: str) -> str:
    """Return the last non-empty path segment of `endpoint`.

    ``https://cms.example.com/jsonapi/menu_items/main/`` -> ``"main"``.
    """
    try:
        path = httpx.URL(endpoint).path
    except httpx.InvalidURL as exc:
        raise ValueError(f"Invalid endpoint URL: {endpoint!r}") from exc
    segments = [s for s in path.strip("/").split("/") if s]
    if not segments:
        raise ValueError(f"Cannot derive a collection name from endpoint: {endpoint!r}")
    return segments[-1]


def _strip_type_tag(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not value:
        return None
    # "menu_link_content:abc" -> "abc"; untagged values are used as-is
    _, sep, tail = value.partition(":")
    parent_id = tail if sep else value
    return parent_id or None


def _decode_entry(position: int, entry: Any) -> Optional[RemoteItemRecord]:
    if not isinstance(entry, Mapping):
        log.warning("Skipping entry #{} in 'data': not an object", position)
        return None
    raw_id = entry.get("id")
    if raw_id is None or str(raw_id) == "":
        log.warning("Skipping entry #{} in 'data': no 'id'", position)
        return None

    attributes = entry.get("attributes")
    if not isinstance(attributes, Mapping):
        attributes = {}

    link = attributes.get("link")
    link_uri = link.get("uri") if isinstance(link, Mapping) else None
    title = attributes.get("title")

    extra: Dict[str, Any] = {
        name: value for name, value in attributes.items() if name not in RESERVED_ATTRIBUTES
    }
    return RemoteItemRecord(
        id=str(raw_id),
        title=str(title) if title is not None else "",
        link_uri=str(link_uri) if link_uri else "",
        parent_id=_strip_type_tag(attributes.get("parent")),
        extra_attributes=MappingProxyType(extra),
    )


def decode_document(payload: Any) -> List[RemoteItemRecord]:
    """Decode a parsed JSON:API document into records, preserving order.

    Raises `DecodeError` when the top-level `data` member is missing or is not
    an array. Entries that are not objects or lack an id are logged and skipped.
    """
    data = payload.get("data") if isinstance(payload, Mapping) else None
    if not isinstance(data, list):
        raise DecodeError("Invalid JSON response format: 'data' must be an array.")
    records = []
    for i, entry in enumerate(data):
        rec = _decode_entry(i, entry)
        if rec is not None:
            records.append(rec)
    return records


class JsonApiMenuConnector(BaseConnector):
    """Connector for JSON:API menu link endpoints.

    Parameters
    ----------
    timeout:
        Request timeout in seconds, handed to httpx.
    verify_ssl:
        Whether to verify SSL certificates.
    headers:
        Extra request headers.
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.headers = {"Accept": "application/vnd.api+json, application/json"}
        if headers:
            self.headers.update(headers)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            verify=self.verify_ssl,
            headers=self.headers,
        )

    async def fetch_records(self, endpoint: str) -> List[RemoteItemRecord]:
        async with self._client() as client:
            try:
                resp = await client.get(endpoint)
                resp.raise_for_status()
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                raise FetchError(f"GET {endpoint} failed: {exc}") from exc
            try:
                payload = resp.json()
            except ValueError as exc:
                raise DecodeError(f"Response from {endpoint} is not valid JSON") from exc
        records = decode_document(payload)
        log.debug("Fetched {} menu records from {}", len(records), endpoint)
        return records
