"""
Workflow state machine.

Status is a projection of the ledger: `derive_status` is the only place that
computes it, and every mutation path goes through it. `Draft` is the single
exception: it is set at creation and cleared by `submit_draft`.

    Draft --submit--> Pending CSO --A--> Pending SD --A--> Pending DG --A--> Approved
                           |                 |                 |
                           +-------R---------+--------R--------+--> Rejected
                           +-------N---------+--------N--------+--> Needs Information
"""

from __future__ import annotations

import logging
from datetime import datetime

from core.config import settings
from core.errors import InvalidLevelError, PermissionDeniedError, ValidationError
from domain.models import (
    ROLE_FOR_LEVEL,
    Actor,
    ApprovalDecision,
    ApprovalLevel,
    AssessmentStatus,
    Ledger,
    RiskAssessment,
)
from domain.value_objects import ComplianceFlags
from services.workflow.ledger import halted_step, initialize_ledger, record_decision, reopen_step

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset({AssessmentStatus.APPROVED, AssessmentStatus.REJECTED})

_PENDING = {
    ApprovalLevel.CREWING_STANDARDS: AssessmentStatus.PENDING_CREWING_STANDARDS,
    ApprovalLevel.SENIOR_DIRECTOR: AssessmentStatus.PENDING_SENIOR_DIRECTOR,
    ApprovalLevel.DIRECTOR_GENERAL: AssessmentStatus.PENDING_DIRECTOR_GENERAL,
}

INITIAL_STATUS = _PENDING[ApprovalLevel.CREWING_STANDARDS]


def pending_status(level: ApprovalLevel) -> AssessmentStatus:
    return _PENDING[level]


def is_terminal(status: AssessmentStatus) -> bool:
    return status in TERMINAL_STATUSES


def derive_status(ledger: Ledger) -> AssessmentStatus:
    """Overall status from ledger contents alone (never returns Draft)."""
    for step in ledger:
        if step.decision is None:
            return pending_status(step.level)
        if step.decision == ApprovalDecision.REJECTED:
            return AssessmentStatus.REJECTED
        if step.decision == ApprovalDecision.NEEDS_INFORMATION:
            return AssessmentStatus.NEEDS_INFORMATION
    return AssessmentStatus.APPROVED


def can_decide(actor: Actor, level: ApprovalLevel) -> bool:
    return actor.role == ROLE_FOR_LEVEL[level]


def can_edit(actor: Actor, assessment: RiskAssessment) -> bool:
    """Submitter or admin."""
    return actor.is_admin or (
        assessment.submitted_by_uid is not None and actor.id == assessment.submitted_by_uid
    )


def validate_notes(notes: str | None) -> str:
    text = (notes or "").strip()
    if len(text) < settings.DECISION_NOTES_MIN:
        raise ValidationError(
            f"decision notes must be at least {settings.DECISION_NOTES_MIN} characters"
        )
    if len(text) > settings.DECISION_NOTES_MAX:
        raise ValidationError(
            f"decision notes must be {settings.DECISION_NOTES_MAX} characters or less"
        )
    return text


def apply_decision(
    assessment: RiskAssessment,
    level: ApprovalLevel,
    decision: ApprovalDecision,
    actor: Actor,
    notes: str,
    flags: ComplianceFlags | None = None,
    now: datetime | None = None,
) -> RiskAssessment:
    """
    Record `decision` for `level` and return the assessment with a recomputed
    status. Raises before anything is changed.
    """
    if assessment.status == AssessmentStatus.DRAFT:
        raise InvalidLevelError("assessment is still a draft; submit it before deciding")
    if is_terminal(assessment.status):
        raise InvalidLevelError(f"assessment is already {assessment.status.value}")
    text = validate_notes(notes)
    if not can_decide(actor, level):
        raise PermissionDeniedError(f"role {actor.role.value} cannot decide {level.value}")

    ledger = record_decision(assessment.approval_steps, level, decision, actor, text, flags, now)
    status = derive_status(ledger)
    logger.info(
        "decision %s at %s on %s by %s -> %s",
        decision.value,
        level.value,
        assessment.reference_number,
        actor.id,
        status.value,
    )
    return assessment.model_copy(update={"approval_steps": ledger, "status": status})


def submit_draft(assessment: RiskAssessment) -> RiskAssessment:
    """Leave Draft: the only explicit status write outside derive_status."""
    if assessment.status != AssessmentStatus.DRAFT:
        raise InvalidLevelError(f"assessment is not a draft (status: {assessment.status.value})")
    ledger = initialize_ledger()
    return assessment.model_copy(update={"approval_steps": ledger, "status": derive_status(ledger)})


def resume_after_information(assessment: RiskAssessment) -> RiskAssessment:
    """Re-open the step that asked for more information; later steps stay untouched."""
    if assessment.status != AssessmentStatus.NEEDS_INFORMATION:
        raise InvalidLevelError(
            f"assessment is not waiting on information (status: {assessment.status.value})"
        )
    flagged = halted_step(assessment.approval_steps)
    if flagged is None:
        raise InvalidLevelError("no step is waiting on information")
    ledger = reopen_step(assessment.approval_steps, flagged.level)
    return assessment.model_copy(update={"approval_steps": ledger, "status": derive_status(ledger)})
