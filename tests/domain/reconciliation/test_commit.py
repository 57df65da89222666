from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from tallypy.domain.model import DraftStatus
from tallypy.domain.reconciliation import (
    CommitAction,
    CommitStage,
    CreationDefaults,
    commit_drafts,
    creation_values,
    reconcile,
    update_values,
)

from tests.helpers.drafts import (
    FakeProjectStore,
    make_budget_draft,
    make_project_draft,
    make_record,
    make_upload,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tallypy.domain.model import DraftRecord, UploadedFile
    from tallypy.domain.reconciliation import CommitReport

DEFAULTS = CreationDefaults(fiscal_year=2568)
CATEGORY = "Project proposal (auto-import)"


def _commit(
    drafts: Sequence[DraftRecord],
    store: FakeProjectStore,
    files: Sequence[UploadedFile] = (),
) -> CommitReport:
    return commit_drafts(
        drafts,
        store,
        files={file.name: file for file in files},
        defaults=DEFAULTS,
        attachment_category=CATEGORY,
    )


def test_creation_values_fill_defaults() -> None:
    draft = make_budget_draft(None, requested=300)

    values = creation_values(draft.fields, DEFAULTS)

    assert values["project_name"] == "Untitled Project"
    assert values["organization"] == "Unassigned"
    assert values["fiscal_year"] == 2568
    assert values["budget_requested"] == Decimal(300)
    assert values["budget_approved"] == Decimal(0)
    assert values["budget_average"] == Decimal(0)
    assert values["is_published"] is True


def test_new_draft_creates_record_and_attaches_proposal() -> None:
    store = FakeProjectStore()
    draft = make_project_draft("Brand New Initiative", source_file="new.pdf")

    report = _commit([draft], store, [make_upload("new.pdf")])

    assert report.created == 1
    assert report.session_ended is True
    outcome = report.outcomes[0]
    assert outcome.action is CommitAction.CREATED
    assert outcome.file_id == 1
    assert store.uploads == [(outcome.record_id, "new.pdf", CATEGORY)]


def test_budget_only_update_writes_budget_fields_and_uploads_nothing() -> None:
    store = FakeProjectStore([make_record(5, "Sports Day Finals")])
    draft = make_budget_draft(
        "Sports Day Finals", requested=1200, approved=1000, organization="PE Dept"
    ).evolve(linked_record_id=5, status=DraftStatus.UPDATE)

    report = _commit([draft], store)

    assert report.updated == 1
    assert store.updates == [
        (5, {"budget_requested": Decimal(1200), "budget_approved": Decimal(1000)})
    ]
    assert store.uploads == []


def test_standalone_proposal_update_never_writes_approved_amount() -> None:
    draft = make_project_draft("Sports Day Finals", requested=1300).evolve(linked_record_id=5)
    draft = draft.evolve(fields=draft.fields.with_values(budget_approved=Decimal(999)))

    values = update_values(draft)

    assert "budget_approved" not in values
    assert values["budget_requested"] == Decimal(1300)
    assert values["rationale"] == "Because it matters"
    assert "project_name" not in values


def test_merged_update_writes_budget_and_narrative_fields() -> None:
    budget = make_budget_draft("Tree Planting Day", requested=5000, approved=4500)
    project = make_project_draft("tree planting day", requested=5300)
    merged = reconcile([budget.evolve(linked_record_id=2), project]).drafts[0]

    values = update_values(merged)

    assert values["budget_approved"] == Decimal(4500)
    assert values["budget_requested"] == Decimal(5300)
    assert values["responsible_person"] == "Somchai"
    assert "organization" not in values


def test_committing_same_update_twice_updates_twice_and_never_creates() -> None:
    store = FakeProjectStore([make_record(5, "Sports Day Finals")])
    draft = make_budget_draft("Sports Day Finals", requested=1200).evolve(linked_record_id=5)

    _commit([draft], store)
    _commit([draft], store)

    assert [record_id for record_id, _ in store.updates] == [5, 5]
    assert store.created == []


def test_failure_is_reported_and_the_loop_continues() -> None:
    store = FakeProjectStore([make_record(5, "Broken Record Row")])
    store.fail_update_ids.add(5)
    broken = make_budget_draft("Broken Record Row", requested=10).evolve(linked_record_id=5)
    fine = make_budget_draft("Fine New Row Here", requested=20)

    report = _commit([broken, fine], store)

    assert report.created == 1
    assert report.session_ended is False
    (failure,) = report.failed
    assert failure.draft_id == broken.id
    assert failure.failed_stage is CommitStage.UPDATE
    assert "rejected" in (failure.error or "")


def test_upload_failure_after_create_keeps_record_id() -> None:
    store = FakeProjectStore()
    store.fail_uploads = True
    draft = make_project_draft("Brand New Initiative", source_file="new.pdf")

    report = _commit([draft], store, [make_upload("new.pdf")])

    (failure,) = report.failed
    assert failure.failed_stage is CommitStage.UPLOAD
    assert failure.action is CommitAction.CREATED
    assert failure.record_id == 1
    assert len(store.created) == 1


def test_missing_proposal_bytes_do_not_fail_the_commit() -> None:
    store = FakeProjectStore()
    draft = make_project_draft("Brand New Initiative", source_file="gone.pdf")

    report = _commit([draft], store)

    assert report.session_ended is True
    assert report.outcomes[0].file_id is None


def test_superseded_drafts_are_skipped() -> None:
    store = FakeProjectStore()
    draft = make_project_draft("Absorbed Proposal").evolve(status=DraftStatus.SUPERSEDED)

    report = _commit([draft], store)

    assert report.outcomes == []
    assert store.created == []
