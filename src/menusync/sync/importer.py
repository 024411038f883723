"""Menu import entrypoint: fetch, then reconcile one collection."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from menusync.connectors.base_connector import BaseConnector
from menusync.connectors.jsonapi import collection_name_from_endpoint
from menusync.exceptions import MenuSyncError
from menusync.storage.repository import repository_scope
from menusync.sync.reconciler import MenuReconciler, ReconcileResult
from menusync.sync.records import RemoteItemRecord

SUCCESS_MESSAGE = "Menu items have been imported."
FAILURE_MESSAGE = "Menu import failed; see the log for details."


@dataclass(frozen=True)
class ImportOutcome:
    ok: bool
    collection_name: Optional[str]
    message: str
    result: Optional[ReconcileResult] = None


class MenuImporter:
    """Runs one import per call; every call fetches the endpoint again.

    Imports are not serialized against each other. Callers trigger one import
    per collection at a time.
    """

    def __init__(
        self,
        connector: BaseConnector,
        session_factory: sessionmaker[Session],
        *,
        log: Any = None,
    ) -> None:
        self._connector = connector
        self._session_factory = session_factory
        self._log = log if log is not None else logger.bind(component="importer")

    async def import_menus(
        self, endpoint: str, collection_name: Optional[str] = None
    ) -> ImportOutcome:
        """Import the menu at `endpoint` into `collection_name`.

        When `collection_name` is not given it is derived from the last path
        segment of `endpoint`. Failures are logged and reported through
        `ImportOutcome.ok`; the caller only sees a generic message.
        """
        try:
            name = collection_name or collection_name_from_endpoint(endpoint)
        except ValueError as exc:
            self._log.error("Menu import aborted: {}", exc)
            return ImportOutcome(ok=False, collection_name=None, message=FAILURE_MESSAGE)

        self._log.info("Importing menu '{}' from {}", name, endpoint)
        try:
            records = await self._connector.fetch_records(endpoint)
            # Blocking SQLAlchemy work stays off the event loop
            result = await asyncio.to_thread(self._reconcile, records, name)
        except (MenuSyncError, SQLAlchemyError) as exc:
            self._log.error("Menu import of '{}' from {} failed: {}", name, endpoint, exc)
            return ImportOutcome(ok=False, collection_name=name, message=FAILURE_MESSAGE)

        return ImportOutcome(ok=True, collection_name=name, message=SUCCESS_MESSAGE, result=result)

    def _reconcile(self, records: Sequence[RemoteItemRecord], collection_name: str) -> ReconcileResult:
        with repository_scope(self._session_factory) as repo:
            return MenuReconciler(repo, log=self._log).reconcile(records, collection_name)
