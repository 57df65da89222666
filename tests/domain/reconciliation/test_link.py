from __future__ import annotations

from decimal import Decimal

import pytest

from tallypy.domain.model import DraftStatus, SourceKind
from tallypy.domain.reconciliation.link import (
    NOTE_LINKED,
    NOTE_MISMATCH,
    NOTE_NO_BUDGET,
    NOTE_NO_PROPOSAL,
    integrity_verdict,
    reconcile,
)

from tests.helpers.drafts import make_budget_draft, make_project_draft


def test_differently_written_names_merge_into_one_linked_draft() -> None:
    budget = make_budget_draft("Robotics Club Annual Trip", source_file="sheet.xlsx")
    project = make_project_draft("robotics-club_annual.trip", source_file="trip.pdf")

    result = reconcile([budget, project])

    assert len(result.drafts) == 1
    merged = result.drafts[0]
    assert merged.status is DraftStatus.LINKED
    assert merged.id == budget.id
    assert merged.source_kind is SourceKind.BUDGET_DOCUMENT
    assert merged.source_file == "sheet.xlsx + trip.pdf"
    assert merged.proposal_file == "trip.pdf"
    assert merged.absorbed_draft_id == project.id
    assert [draft.id for draft in result.superseded] == [project.id]
    assert result.superseded[0].status is DraftStatus.SUPERSEDED


def test_reconcile_does_not_mutate_its_input() -> None:
    budget = make_budget_draft("Tree Planting Day", requested=5000)
    project = make_project_draft("tree planting day", requested=5300)
    raw = [budget, project]

    reconcile(raw)

    assert raw == [budget, project]
    assert budget.status is DraftStatus.NEW
    assert project.status is DraftStatus.NEW
    assert budget.fields.rationale is None


def test_merge_prefers_proposal_fields_but_budget_money() -> None:
    budget = make_budget_draft(
        "Tree Planting Day",
        requested=5000,
        approved=4500,
        organization="Env Club",
        notes="approved with cuts",
    )
    project = make_project_draft(
        "tree planting day",
        requested=5050,
        organization="Environment Club",
        notes="draft note",
    )

    merged = reconcile([budget, project]).drafts[0]

    assert merged.fields.budget_approved == Decimal(4500)
    assert merged.fields.budget_requested == Decimal(5050)
    assert merged.fields.organization == "Environment Club"
    assert merged.fields.rationale == "Because it matters"
    assert merged.fields.objectives == ("Engage students",)
    assert merged.fields.notes == "approved with cuts"
    assert merged.integrity_flag is None
    assert merged.note == NOTE_LINKED


def test_merge_keeps_budget_fields_the_proposal_does_not_state() -> None:
    budget = make_budget_draft("Tree Planting Day", requested=5000, organization="Env Club")
    project = make_project_draft("tree planting day")

    merged = reconcile([budget, project]).drafts[0]

    assert merged.fields.organization == "Env Club"
    assert merged.fields.budget_requested == Decimal(5000)


def test_notes_fall_back_to_proposal_notes() -> None:
    budget = make_budget_draft("Tree Planting Day")
    project = make_project_draft("tree planting day", notes="from proposal")

    assert reconcile([budget, project]).drafts[0].fields.notes == "from proposal"


@pytest.mark.parametrize(
    ("budget_requested", "project_requested", "flagged"),
    [
        (10_000, 10_250, True),
        (10_000, 10_150, True),
        (10_000, 9_850, True),
        (10_000, 10_100, False),
        (10_000, 10_000, False),
        (10_000, 10_099, False),
    ],
)
def test_integrity_threshold(budget_requested: int, project_requested: int, flagged: bool) -> None:
    budget = make_budget_draft("Robotics Club Annual Trip", requested=budget_requested)
    project = make_project_draft("Robotics Club Annual Trip", requested=project_requested)

    merged = reconcile([budget, project]).drafts[0]

    assert (merged.integrity_flag is not None) is flagged
    assert merged.note == (NOTE_MISMATCH if flagged else NOTE_LINKED)


def test_integrity_flag_preserves_both_values_exactly() -> None:
    budget = make_budget_draft("Robotics Club Annual Trip", requested="10000.25")
    project = make_project_draft("Robotics Club Annual Trip", requested="10150.50")

    flag = reconcile([budget, project]).drafts[0].integrity_flag

    assert flag is not None
    assert flag.requested_by_budget_doc == Decimal("10000.25")
    assert flag.requested_by_project_doc == Decimal("10150.50")
    assert flag.difference == Decimal("150.25")


def test_integrity_is_not_judged_without_two_positive_amounts() -> None:
    assert integrity_verdict(budget_requested=None, project_requested=Decimal(900)) is None
    assert integrity_verdict(budget_requested=Decimal(0), project_requested=Decimal(900)) is None
    assert integrity_verdict(budget_requested=Decimal(5000), project_requested=Decimal(-1)) is None


def test_first_budget_draft_claims_the_proposal() -> None:
    first = make_budget_draft("Sports Day", source_file="a.xlsx")
    second = make_budget_draft("Sports Day", source_file="b.xlsx")
    project = make_project_draft("Sports Day")

    result = reconcile([first, second, project])

    assert [draft.status for draft in result.drafts] == [DraftStatus.LINKED, DraftStatus.NEW]
    assert result.drafts[0].id == first.id
    assert result.drafts[1].note == NOTE_NO_PROPOSAL


def test_each_budget_draft_takes_the_first_unclaimed_match() -> None:
    budget_a = make_budget_draft("Science Week")
    budget_b = make_budget_draft("Science Week")
    project_a = make_project_draft("Science Week Opening", source_file="opening.pdf")
    project_b = make_project_draft("Science Week Closing", source_file="closing.pdf")

    result = reconcile([project_a, budget_a, project_b, budget_b])

    assert [draft.proposal_file for draft in result.drafts] == ["opening.pdf", "closing.pdf"]
    assert len(result.superseded) == 2


def test_short_budget_names_never_link() -> None:
    budget = make_budget_draft("Camp")
    project = make_project_draft("Camp")

    result = reconcile([budget, project])

    assert [draft.status for draft in result.drafts] == [DraftStatus.NEW, DraftStatus.NEW]
    assert result.superseded == ()


def test_output_lists_budget_drafts_before_surviving_proposals() -> None:
    project = make_project_draft("Lonely Proposal")
    budget = make_budget_draft("Lonely Budget Row")

    result = reconcile([project, budget])

    assert [draft.id for draft in result.drafts] == [budget.id, project.id]
    assert result.drafts[0].note == NOTE_NO_PROPOSAL
    assert result.drafts[1].note == NOTE_NO_BUDGET


def test_standalone_drafts_keep_existing_record_link_and_note() -> None:
    budget = make_budget_draft("Known Project Row").evolve(
        linked_record_id=12, note='matches existing record "Known Project Row"'
    )

    draft = reconcile([budget]).drafts[0]

    assert draft.status is DraftStatus.UPDATE
    assert draft.linked_record_id == 12
    assert draft.note == f'matches existing record "Known Project Row"; {NOTE_NO_PROPOSAL}'


def test_merged_draft_keeps_budget_link_and_falls_back_to_proposal_link() -> None:
    budget = make_budget_draft("Tree Planting Day").evolve(linked_record_id=3)
    project = make_project_draft("tree planting day").evolve(linked_record_id=8)
    assert reconcile([budget, project]).drafts[0].linked_record_id == 3

    unlinked_budget = make_budget_draft("Tree Planting Day")
    assert reconcile([unlinked_budget, project]).drafts[0].linked_record_id == 8


@pytest.mark.parametrize(
    "names",
    [
        (["Sports Day", "Sports Day", "Sports Day"], ["Sports Day", "Sports Day"]),
        (["Sports Day"], ["Sports Day", "Sports Day Finals", "Sports"]),
        (["Alpha Project", "Beta Project"], ["Gamma Project"]),
        ([], ["Only Proposals Here"]),
    ],
)
def test_no_proposal_is_consumed_twice(names: tuple[list[str], list[str]]) -> None:
    budget_names, project_names = names
    budgets = [make_budget_draft(name) for name in budget_names]
    projects = [make_project_draft(name) for name in project_names]

    result = reconcile([*budgets, *projects])

    absorbed = [draft.absorbed_draft_id for draft in result.drafts if draft.is_merged]
    assert len(absorbed) == len(set(absorbed))
    assert len(result.superseded) == result.linked_count
    assert len(result.superseded) <= len(budgets)
    assert len(result.drafts) + len(result.superseded) == len(budgets) + len(projects)
