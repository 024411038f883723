"""Menu reconciliation: make a local collection match a fetched record set.

A run always executes three passes over the full record set:

1. delete pass: local items whose id is not in the fetch are deleted;
2. upsert pass: one item per record is created or updated, in input order;
3. link pass: parent links are set between items saved in this run.

The link pass needs every referenced parent to exist, hence the fixed order.
Per-item failures are logged and skipped. Nothing is rolled back.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from menusync.exceptions import MissingLinkWarning, PersistenceError
from menusync.storage.models import MenuItem
from menusync.storage.repository import MenuRepository
from menusync.sync.records import RemoteItemRecord


@dataclass(frozen=True)
class ReconcileResult:
    created: int = 0
    updated: int = 0
    deleted: int = 0
    linked: int = 0
    skipped: int = 0


class MenuReconciler:
    """Applies fetched records to one collection through a `MenuRepository`.

    Parameters
    ----------
    repository:
        Storage the passes read from and write to.
    log:
        Loguru logger (or anything with the same methods) receiving per-item
        warnings and the run summary.
    """

    def __init__(self, repository: MenuRepository, *, log: Any = None) -> None:
        self._repo = repository
        self._log = log if log is not None else logger.bind(component="reconciler")

    def reconcile(self, records: Sequence[RemoteItemRecord], collection_name: str) -> ReconcileResult:
        """Run the delete, upsert and link passes for `collection_name`.

        Raises `PersistenceError` only when the collection cannot be loaded.
        """
        deleted = self._delete_pass(records, collection_name)
        items, saved, created, updated, skipped = self._upsert_pass(records, collection_name)
        linked = self._link_pass(records, items, saved)
        result = ReconcileResult(
            created=created, updated=updated, deleted=deleted, linked=linked, skipped=skipped
        )
        self._log.info(
            "Reconciled collection '{}': created={}, updated={}, deleted={}, linked={}, skipped={}",
            collection_name,
            result.created,
            result.updated,
            result.deleted,
            result.linked,
            result.skipped,
        )
        return result

    def _delete_pass(self, records: Sequence[RemoteItemRecord], collection_name: str) -> int:
        payload_ids = {r.id for r in records}
        deleted = 0
        for item in self._repo.load_all_by_collection(collection_name):
            if item.remote_id in payload_ids:
                continue
            remote_id = item.remote_id
            try:
                self._repo.delete_item(item)
            except PersistenceError as exc:
                self._log.error("Could not delete menu item {}: {}", remote_id, exc)
                continue
            deleted += 1
        return deleted

    def _upsert_pass(
        self, records: Sequence[RemoteItemRecord], collection_name: str
    ) -> tuple[Dict[str, MenuItem], Dict[str, bool], int, int, int]:
        items: Dict[str, MenuItem] = {}
        saved: Dict[str, bool] = {}
        created = updated = skipped = 0

        for record in records:
            try:
                item = self._repo.load_by_collection_and_id(collection_name, record.id)
            except PersistenceError as exc:
                self._log.error("Could not load menu item {}: {}", record.id, exc)
                skipped += 1
                continue
            is_new = item is None
            if item is None:
                item = self._repo.create_item(collection_name, record.id)

            ok = self._apply_record(item, record)
            # Later duplicates of the same id replace earlier ones
            items[record.id] = item
            saved[record.id] = ok
            if not ok:
                skipped += 1
            elif is_new:
                created += 1
            else:
                updated += 1
        return items, saved, created, updated, skipped

    def _apply_record(self, item: MenuItem, record: RemoteItemRecord) -> bool:
        """Copy `record` onto `item` and save it. Returns whether it was saved."""
        try:
            item.title = record.title
            # Links are rebuilt from scratch by the link pass
            item.parent_pk = None
            for name, value in record.extra_attributes.items():
                item.apply_attribute(name, value)
        except ValueError as exc:
            self._log.error("Menu item {} has an invalid attribute: {}", record.id, exc)
            self._skip_item(item)
            return False

        if not record.link_uri:
            self._log.warning(str(MissingLinkWarning(record.id)))
            self._skip_item(item)
            return False

        item.link_uri = record.link_uri
        try:
            self._repo.save(item)
        except PersistenceError as exc:
            self._log.error("Could not save menu item {}: {}", record.id, exc)
            return False
        return True

    def _skip_item(self, item: MenuItem) -> None:
        # A stored item keeps its values but not a parent link from an earlier run
        self._repo.discard(item)
        if item.pk is None:
            return
        try:
            self._repo.clear_parent_link(item)
        except PersistenceError as exc:
            self._log.error("Could not unlink menu item {}: {}", item.remote_id, exc)

    def _link_pass(
        self,
        records: Sequence[RemoteItemRecord],
        items: Dict[str, MenuItem],
        saved: Dict[str, bool],
    ) -> int:
        linked = 0
        for child_id, parent_id in self._parent_pairs(records, items):
            if parent_id is None:
                continue
            if parent_id == child_id:
                self._log.warning("Menu item {} names itself as parent; ignoring", child_id)
                continue
            if parent_id not in items:
                self._log.debug(
                    "Parent {} of menu item {} is not in this import; leaving it at the top level",
                    parent_id,
                    child_id,
                )
                continue
            if not saved.get(child_id):
                continue
            if not saved.get(parent_id):
                self._log.warning(
                    "Parent {} of menu item {} was not saved; leaving it at the top level",
                    parent_id,
                    child_id,
                )
                continue
            child, parent = items[child_id], items[parent_id]
            try:
                self._repo.set_parent_link(child, parent)
            except PersistenceError as exc:
                self._log.error("Could not link menu item {} to {}: {}", child_id, parent_id, exc)
                continue
            linked += 1
        return linked

    @staticmethod
    def _parent_pairs(
        records: Sequence[RemoteItemRecord], items: Dict[str, MenuItem]
    ) -> List[tuple[str, Optional[str]]]:
        # One pair per id, taken from the last record with that id
        pairs: Dict[str, Optional[str]] = {}
        for record in records:
            if record.id in items:
                pairs[record.id] = record.parent_id
        return list(pairs.items())
