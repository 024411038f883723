"""Remote menu records as decoded from the JSON:API document."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


@dataclass(frozen=True, slots=True)
class RemoteItemRecord:
    """One remote menu entry, before it is materialized as a local item.

    Attributes
    ----------
    id: str
        Stable external identifier.
    title: str
        Menu link title.
    link_uri: str
        Link destination; empty when the remote entry has none.
    parent_id: str | None
        Id of another record in the same document, type tag already stripped.
    extra_attributes: Mapping[str, Any]
        Every other attribute of the entry, in document order.
    """

    id: str
    title: str = ""
    link_uri: str = ""
    parent_id: Optional[str] = None
    extra_attributes: Mapping[str, Any] = field(default_factory=dict)
