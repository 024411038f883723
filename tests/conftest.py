from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import pytest
from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from menusync.storage.database import get_engine, init_db, make_session_factory, session_scope
from menusync.storage.models import MenuItem
from menusync.sync.records import RemoteItemRecord


@pytest.fixture
def session_factory() -> Iterator[sessionmaker[Session]]:
    engine = get_engine("sqlite://")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def log_records() -> Iterator[List[Tuple[str, str]]]:
    """Collect (level, message) pairs emitted through loguru during a test."""
    captured: List[Tuple[str, str]] = []
    handler_id = logger.add(
        lambda m: captured.append((m.record["level"].name, m.record["message"])),
        level="DEBUG",
    )
    yield captured
    logger.remove(handler_id)


# ---------- Helpers shared by test modules ----------


def record(
    rid: str,
    *,
    title: Optional[str] = None,
    uri: Optional[str] = None,
    parent: Optional[str] = None,
    **extra: object,
) -> RemoteItemRecord:
    return RemoteItemRecord(
        id=rid,
        title=title if title is not None else rid.upper(),
        link_uri=f"internal:/{rid}" if uri is None else uri,
        parent_id=parent,
        extra_attributes=dict(extra),
    )


def seed_items(factory: sessionmaker[Session], collection: str, ids: Iterable[str]) -> None:
    with session_scope(factory) as session:
        for rid in ids:
            session.add(
                MenuItem(
                    collection_name=collection,
                    remote_id=rid,
                    title=f"Old {rid}",
                    link_uri=f"internal:/old/{rid}",
                )
            )


def stored_items(factory: sessionmaker[Session], collection: str) -> Dict[str, MenuItem]:
    with session_scope(factory) as session:
        rows = session.scalars(select(MenuItem).where(MenuItem.collection_name == collection))
        return {row.remote_id: row for row in rows}
