"""SQLAlchemy table metadata for persisted projects and their attachments."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any, cast

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    TypeDecorator,
)

from tallypy.domain.model import BudgetLineItem

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)


def utcnow() -> datetime:
    return datetime.now(UTC)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class TextListType(TypeDecorator[tuple[str, ...]]):
    """Tuple of strings stored as a JSON array."""

    impl = Text
    cache_ok = True

    def process_bind_param(
        self, value: tuple[str, ...] | list[str] | None, dialect: Dialect
    ) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(list(value), ensure_ascii=False)

    def process_result_value(self, value: str | None, dialect: Dialect) -> tuple[str, ...] | None:
        _ = dialect
        if value is None:
            return None
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return None
        items = cast(list[Any], loaded)
        return tuple(str(item) for item in items)


def _decimal_text(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


def _decimal_value(value: object) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(value))


class BudgetBreakdownType(TypeDecorator[tuple[BudgetLineItem, ...]]):
    """Budget line items stored as JSON; amounts are kept as decimal strings."""

    impl = Text
    cache_ok = True

    def process_bind_param(
        self, value: tuple[BudgetLineItem, ...] | None, dialect: Dialect
    ) -> str | None:
        _ = dialect
        if value is None:
            return None
        payload = [
            {
                "item": item.item,
                "amount": _decimal_text(item.amount),
                "unit": item.unit,
                "cost_per_unit": _decimal_text(item.cost_per_unit),
                "total": _decimal_text(item.total),
            }
            for item in value
        ]
        return json.dumps(payload, ensure_ascii=False)

    def process_result_value(
        self, value: str | None, dialect: Dialect
    ) -> tuple[BudgetLineItem, ...] | None:
        _ = dialect
        if value is None:
            return None
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return None
        rows = cast(list[dict[str, Any]], loaded)
        return tuple(
            BudgetLineItem(
                item=str(row.get("item") or ""),
                amount=_decimal_value(row.get("amount")),
                unit=row.get("unit"),
                cost_per_unit=_decimal_value(row.get("cost_per_unit")),
                total=_decimal_value(row.get("total")),
            )
            for row in rows
        )


def _amount_column(name: str) -> Column[Decimal]:
    return Column(name, Numeric(14, 2, asdecimal=True), nullable=True)


project_table = Table(
    "project",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("project_name", String, nullable=False),
    Column("organization", String, nullable=True),
    Column("fiscal_year", Integer, nullable=True),
    _amount_column("budget_requested"),
    _amount_column("budget_approved"),
    _amount_column("budget_average"),
    Column("notes", Text, nullable=True),
    Column("responsible_person", String, nullable=True),
    Column("advisor", String, nullable=True),
    Column("activity_type", String, nullable=True),
    Column("rationale", Text, nullable=True),
    Column("objectives", TextListType, nullable=True),
    Column("targets", Text, nullable=True),
    Column("sdg_goals", TextListType, nullable=True),
    Column("budget_breakdown", BudgetBreakdownType, nullable=True),
    Column("is_published", Boolean, nullable=False, default=True),
    Column("created_at", UTCDateTime, nullable=False, default=utcnow),
    Column("updated_at", UTCDateTime, nullable=True, onupdate=utcnow),
)

project_file_table = Table(
    "project_file",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "project_id",
        Integer,
        ForeignKey("project.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("file_name", String, nullable=False),
    Column("file_url", String, nullable=False),
    Column("file_type", String, nullable=True),
    Column("category", String, nullable=True),
    Column("uploaded_at", UTCDateTime, nullable=False, default=utcnow),
)

Index("ix_project_file_project_id", project_file_table.c.project_id)

WRITABLE_PROJECT_COLUMNS = frozenset(
    column.name
    for column in project_table.columns
    if column.name not in {"id", "created_at", "updated_at"}
)
