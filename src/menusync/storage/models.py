"""SQLAlchemy models for menusync storage.

Defines the `MenuItem` entity: one persisted menu link belonging to a named
collection, with an optional parent link inside the same table.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""


class MenuItem(Base):
    """A menu link stored locally, keyed by its remote id within a collection."""

    __tablename__ = "menu_items"
    __table_args__ = (
        UniqueConstraint("collection_name", "remote_id", name="uq_menu_items_collection_remote"),
    )

    pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    remote_id: Mapped[str] = mapped_column(String(255))
    collection_name: Mapped[str] = mapped_column(String(255), index=True)

    title: Mapped[str] = mapped_column(String(512), default="")
    link_uri: Mapped[str] = mapped_column(String(2048), default="")
    description: Mapped[Optional[str]] = mapped_column(String(1024), default=None)
    weight: Mapped[int] = mapped_column(Integer, default=0)
    expanded: Mapped[bool] = mapped_column(Boolean, default=False)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True)

    # Parent link; deleting the parent row leaves children at the top level
    parent_pk: Mapped[Optional[int]] = mapped_column(
        ForeignKey("menu_items.pk", ondelete="SET NULL"), default=None
    )

    # Attributes without a typed column
    extra: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    @property
    def link_ref(self) -> str:
        """Human-readable handle for this item, used in logs and tool output."""
        return f"menu_item:{self.collection_name}:{self.remote_id}"

    def apply_attribute(self, name: str, value: Any) -> bool:
        """Set a remote attribute on this item.

        Names listed in `TYPED_ATTRIBUTES` go through their typed setter; any
        other name is stored in `extra`. Returns True for a typed field.
        Raises ValueError when a typed value cannot be coerced.
        """
        setter = TYPED_ATTRIBUTES.get(name)
        if setter is not None:
            setter(self, value)
            return True
        # Reassign so the JSON column is flagged as modified
        self.extra = {**(self.extra or {}), name: value}
        return False


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off", ""}:
            return False
    raise ValueError(f"Expected a boolean, got {value!r}")


def _set_description(item: MenuItem, value: Any) -> None:
    item.description = None if value is None else str(value)


def _set_weight(item: MenuItem, value: Any) -> None:
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Expected an integer weight, got {value!r}")
    try:
        item.weight = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Expected an integer weight, got {value!r}") from exc


def _set_expanded(item: MenuItem, value: Any) -> None:
    item.expanded = _coerce_bool(value)


def _set_enabled(item: MenuItem, value: Any) -> None:
    item.enabled = _coerce_bool(value)


TYPED_ATTRIBUTES: Dict[str, Callable[[MenuItem, Any], None]] = {
    "description": _set_description,
    "weight": _set_weight,
    "expanded": _set_expanded,
    "enabled": _set_enabled,
}
