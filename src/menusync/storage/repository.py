"""Menu item repository.

`MenuRepository` is the storage surface the reconciler depends on;
`SqlAlchemyMenuRepository` implements it on a SQLAlchemy session. Every write
commits on its own, so an import is applied item by item without a wrapping
transaction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from menusync.exceptions import PersistenceError
from menusync.storage.database import session_scope
from menusync.storage.models import MenuItem


class MenuRepository(ABC):
    """Abstract storage interface for menu items."""

    @abstractmethod
    def load_by_collection_and_id(self, collection_name: str, remote_id: str) -> Optional[MenuItem]:
        """Return the stored item with `remote_id` in `collection_name`, or None."""

    @abstractmethod
    def load_all_by_collection(self, collection_name: str) -> List[MenuItem]:
        """Return every stored item of `collection_name`."""

    @abstractmethod
    def create_item(self, collection_name: str, remote_id: str) -> MenuItem:
        """Return a new, not yet persisted item seeded with collection and id."""

    @abstractmethod
    def delete_item(self, item: MenuItem) -> None:
        """Delete a stored item."""

    @abstractmethod
    def save(self, item: MenuItem) -> None:
        """Persist a new or modified item."""

    @abstractmethod
    def set_parent_link(self, child: MenuItem, parent: MenuItem) -> None:
        """Persist `parent` as the parent link of `child`."""

    @abstractmethod
    def clear_parent_link(self, item: MenuItem) -> None:
        """Persist `item` without a parent link; other fields keep their stored values."""

    @abstractmethod
    def discard(self, item: MenuItem) -> None:
        """Drop unsaved in-memory changes of `item`."""


class SqlAlchemyMenuRepository(MenuRepository):
    """Repository backed by a SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def load_by_collection_and_id(self, collection_name: str, remote_id: str) -> Optional[MenuItem]:
        stmt = select(MenuItem).where(
            MenuItem.collection_name == collection_name,
            MenuItem.remote_id == remote_id,
        )
        try:
            return self._session.scalars(stmt).first()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to load menu item {remote_id}: {exc}") from exc

    def load_all_by_collection(self, collection_name: str) -> List[MenuItem]:
        stmt = (
            select(MenuItem)
            .where(MenuItem.collection_name == collection_name)
            .order_by(MenuItem.pk)
        )
        try:
            return list(self._session.scalars(stmt))
        except SQLAlchemyError as exc:
            raise PersistenceError(
                f"Failed to load menu items of collection {collection_name}: {exc}"
            ) from exc

    def create_item(self, collection_name: str, remote_id: str) -> MenuItem:
        return MenuItem(collection_name=collection_name, remote_id=remote_id, extra={})

    def delete_item(self, item: MenuItem) -> None:
        self._commit(lambda: self._session.delete(item), f"delete menu item {item.remote_id}")

    def save(self, item: MenuItem) -> None:
        self._commit(lambda: self._session.add(item), f"save menu item {item.remote_id}")

    def set_parent_link(self, child: MenuItem, parent: MenuItem) -> None:
        def _link() -> None:
            child.parent_pk = parent.pk
            self._session.add(child)

        self._commit(_link, f"link menu item {child.remote_id} to {parent.remote_id}")

    def clear_parent_link(self, item: MenuItem) -> None:
        def _unlink() -> None:
            # Reading reloads a discarded item, so only parent_pk is written
            if item.parent_pk is not None:
                item.parent_pk = None
                self._session.add(item)

        self._commit(_unlink, f"unlink menu item {item.remote_id}")

    def discard(self, item: MenuItem) -> None:
        if item in self._session:
            self._session.expire(item)

    def _commit(self, operation, description: str) -> None:
        try:
            operation()
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise PersistenceError(f"Failed to {description}: {exc}") from exc


@contextmanager
def repository_scope(factory: sessionmaker[Session]) -> Iterator[SqlAlchemyMenuRepository]:
    """Yield a repository bound to a fresh session that is closed afterwards."""
    with session_scope(factory) as session:
        yield SqlAlchemyMenuRepository(session)
