"""Menu import tools for FastMCP.

Import a remote menu, inspect a stored collection, and schedule recurring imports.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional

from fastmcp import FastMCP

from menusync.storage.models import MenuItem
from menusync.storage.repository import repository_scope


def _serialize_menu_item(item: MenuItem, parents: Dict[int, str]) -> Dict[str, Any]:
    return {
        "id": item.remote_id,
        "collection_name": item.collection_name,
        "title": item.title,
        "link_uri": item.link_uri,
        "description": item.description,
        "weight": item.weight,
        "expanded": item.expanded,
        "enabled": item.enabled,
        "parent_id": parents.get(item.parent_pk) if item.parent_pk is not None else None,
        "link_ref": item.link_ref,
        "extra": dict(item.extra or {}),
    }


def register_menu_tools(mcp: FastMCP, get_state: Callable[[], Any]) -> None:
    """Register menu tools on the given FastMCP instance.

    The `get_state` callable should return an object with attributes
    `importer`, `session_factory` and `scheduler`.
    """

    def _require(state_obj: Any, attr: str) -> Any:
        value = getattr(state_obj, attr, None) if state_obj is not None else None
        if value is None:
            raise RuntimeError(
                "Menu import is not configured. Set MENUSYNC_DATABASE__URL and restart the server."
            )
        return value

    @mcp.tool
    async def menu_import(endpoint: str, collection_name: Optional[str] = None) -> Dict[str, Any]:
        """Import menu items from a JSON:API endpoint.

        Parameters
        ----------
        endpoint: str
            URL of the JSON:API endpoint providing menu data.
        collection_name: str | None
            Target menu; defaults to the last path segment of the endpoint.
        """
        importer = _require(get_state(), "importer")
        outcome = await importer.import_menus(endpoint, collection_name)
        if not outcome.ok:
            raise RuntimeError(outcome.message)
        return {"collection_name": outcome.collection_name, "message": outcome.message}

    @mcp.tool
    def menu_list_items(collection_name: str) -> List[Dict[str, Any]]:
        """List the stored items of a menu collection, parents resolved to remote ids."""
        factory = _require(get_state(), "session_factory")
        with repository_scope(factory) as repo:
            items = repo.load_all_by_collection(collection_name)
            parents = {item.pk: item.remote_id for item in items}
            return [_serialize_menu_item(item, parents) for item in items]

    @mcp.tool
    async def menu_schedule_import(
        endpoint: str,
        interval_minutes: int = 15,
        collection_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Schedule a recurring import of a menu endpoint.

        Parameters
        ----------
        endpoint: str
            URL of the JSON:API endpoint providing menu data.
        interval_minutes: int
            Minutes between runs (default 15).
        collection_name: str | None
            Target menu; defaults to the last path segment of the endpoint.
        """
        if interval_minutes < 1:
            raise ValueError("interval_minutes must be at least 1")
        state = get_state()
        importer = _require(state, "importer")
        scheduler = _require(state, "scheduler")
        scheduler.start()
        job_id = scheduler.schedule_import(
            importer,
            endpoint,
            collection_name=collection_name,
            interval=timedelta(minutes=interval_minutes),
        )
        return {"job_id": job_id, "interval_minutes": interval_minutes}
