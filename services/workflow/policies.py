"""
Edit-triggered reset policy.

An edit to substantive content after approvals have started invalidates those
approvals: the ledger is cleared and the assessment goes back to the first
level. Edits while still in Draft or at the first level never reset, since no
decision depends on the old content yet.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime

from core.errors import ValidationError
from domain.models import (
    Actor,
    AssessmentContent,
    AssessmentStatus,
    Attachment,
    AttachmentIn,
    RiskAssessment,
)
from domain.value_objects import ChangeSet
from services.workflow.changes import diff_content
from services.workflow.ledger import initialize_ledger
from services.workflow.transitions import INITIAL_STATUS, can_edit

logger = logging.getLogger(__name__)

RESET_NOTICE = (
    "Substantive changes were made after approvals had started. "
    "The approval workflow has been restarted at Crewing Standards and Oversight."
)

_NO_RESET_STATUSES = frozenset({AssessmentStatus.DRAFT, INITIAL_STATUS})


@dataclass
class EditOutcome:
    assessment: RiskAssessment
    changes: ChangeSet
    workflow_reset: bool = False
    notices: list[str] = field(default_factory=list)


def compute_patrol_length_days(start: date | None, end: date | None) -> int | None:
    if start is None or end is None or end < start:
        return None
    days = (end - start).days
    return days or 1


def should_reset_workflow(
    original: RiskAssessment,
    revised: AssessmentContent,
    editor: Actor,
    changes: ChangeSet | None = None,
) -> bool:
    changes = changes if changes is not None else diff_content(original, revised)
    if not changes.has_substantive_changes:
        return False
    if original.status in _NO_RESET_STATUSES:
        return False
    return can_edit(editor, original)


def check_attachment_ids(revised: list[AttachmentIn], existing: list[Attachment]) -> None:
    """Persisted attachments are referenced by id; each id once, and only ids the record holds."""
    known = {a.id for a in existing}
    seen: set[str] = set()
    for att in revised:
        if att.is_new:
            continue
        if att.id in seen:
            raise ValidationError(f"attachment {att.id} listed more than once")
        if att.id not in known:
            raise ValidationError(f"attachment {att.id} does not belong to this assessment")
        seen.add(att.id)


def materialize_attachments(
    revised: list[AttachmentIn], existing: list[Attachment], now: datetime
) -> list[Attachment]:
    check_attachment_ids(revised, existing)
    by_id = {a.id: a for a in existing}
    out: list[Attachment] = []
    for att in revised:
        if not att.is_new:
            out.append(by_id[att.id])
            continue
        out.append(
            Attachment(
                id=f"att-{uuid.uuid4().hex[:12]}",
                name=att.name,
                url=att.url or "",
                type=att.type or "unknown",
                size=att.size or 0,
                uploaded_at=att.uploaded_at or now,
            )
        )
    return out


def apply_edit(
    original: RiskAssessment, revised: AssessmentContent, editor: Actor, now: datetime
) -> EditOutcome:
    """Merge `revised` into `original`, resetting the workflow when required."""
    attachments = materialize_attachments(revised.attachments, original.attachments, now)
    changes = diff_content(original, revised)
    reset = should_reset_workflow(original, revised, editor, changes)

    update = revised.model_dump(exclude={"attachments"})
    update["attachments"] = attachments
    update["patrol_length_days"] = compute_patrol_length_days(
        revised.patrol_start_date, revised.patrol_end_date
    )
    notices: list[str] = []
    if reset:
        update["status"] = INITIAL_STATUS
        update["approval_steps"] = initialize_ledger()
        notices.append(RESET_NOTICE)
        logger.info(
            "workflow reset on %s by %s (was %s; changed: %s)",
            original.reference_number,
            editor.id,
            original.status.value,
            ", ".join(changes.changed_fields),
        )

    # model_validate (not model_copy) so the merged record is re-checked
    merged = RiskAssessment.model_validate({**original.model_dump(), **update})
    return EditOutcome(assessment=merged, changes=changes, workflow_reset=reset, notices=notices)
