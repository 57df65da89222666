from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import select

from tallypy.adapters.sqlalchemy.mappings import project_table
from tallypy.adapters.sqlalchemy.repositories import (
    SqlAlchemyProjectFileRepository,
    SqlAlchemyProjectRepository,
)
from tallypy.domain.model import BudgetLineItem

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


def test_list_all_returns_newest_first_with_files(sqlite_session: Session) -> None:
    projects = SqlAlchemyProjectRepository(sqlite_session)
    files = SqlAlchemyProjectFileRepository(sqlite_session)
    older = projects.add({"project_name": "Sports Day", "organization": "PE Dept"})
    newer = projects.add({"project_name": "Science Week Fair"})
    files.add(
        project_id=older,
        file_name="sports.pdf",
        file_url="file:///sports.pdf",
        file_type=None,
        category=None,
    )

    records = projects.list_all()

    assert [record.id for record in records] == [newer, older]
    assert records[0].has_files is False
    assert records[1].files[0].file_name == "sports.pdf"
    assert records[1].organization == "PE Dept"


def test_update_writes_only_given_columns(sqlite_session: Session) -> None:
    projects = SqlAlchemyProjectRepository(sqlite_session)
    record_id = projects.add(
        {"project_name": "Sports Day", "budget_requested": Decimal(1000), "notes": "keep"}
    )

    projects.update(record_id, {"budget_approved": Decimal(900)})

    row = sqlite_session.execute(
        select(project_table).where(project_table.c.id == record_id)
    ).one()
    assert row.budget_requested == Decimal(1000)
    assert row.budget_approved == Decimal(900)
    assert row.notes == "keep"
    assert row.updated_at is not None


def test_narrative_columns_store_lists_and_breakdowns(sqlite_session: Session) -> None:
    projects = SqlAlchemyProjectRepository(sqlite_session)
    breakdown = (
        BudgetLineItem(item="Saplings", amount=Decimal(200), total=Decimal("4000.00")),
        BudgetLineItem(item="Transport"),
    )
    record_id = projects.add(
        {
            "project_name": "Tree Planting Day",
            "objectives": ("Plant 200 trees", "Teach composting"),
            "sdg_goals": ("SDG 13",),
            "budget_breakdown": breakdown,
        }
    )
    sqlite_session.flush()

    row = sqlite_session.execute(
        select(project_table).where(project_table.c.id == record_id)
    ).one()

    assert row.objectives == ("Plant 200 trees", "Teach composting")
    assert row.sdg_goals == ("SDG 13",)
    assert row.budget_breakdown == breakdown
    assert row.is_published is True


def test_unknown_columns_are_rejected(sqlite_session: Session) -> None:
    projects = SqlAlchemyProjectRepository(sqlite_session)

    with pytest.raises(ValueError, match="colour"):
        projects.add({"project_name": "Sports Day", "colour": "red"})


def test_exists_and_get_for_missing_records(sqlite_session: Session) -> None:
    projects = SqlAlchemyProjectRepository(sqlite_session)

    assert projects.exists(404) is False
    assert projects.get(404) is None
