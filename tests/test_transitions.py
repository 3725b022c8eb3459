import pytest

from conftest import ADMIN, CSO, DG, OUTSIDER, SENIOR, SUBMITTER, make_assessment
from core.errors import InvalidLevelError, PermissionDeniedError, ValidationError
from domain.models import ApprovalDecision, ApprovalLevel, AssessmentStatus
from domain.value_objects import ComplianceFlags
from services.workflow.ledger import initialize_ledger, record_decision
from services.workflow.transitions import (
    apply_decision,
    can_edit,
    derive_status,
    resume_after_information,
    submit_draft,
    validate_notes,
)

CSO_LEVEL = ApprovalLevel.CREWING_STANDARDS
SD_LEVEL = ApprovalLevel.SENIOR_DIRECTOR
DG_LEVEL = ApprovalLevel.DIRECTOR_GENERAL
A = ApprovalDecision.APPROVED


def test_derive_status_for_each_ledger_shape():
    ledger = initialize_ledger()
    assert derive_status(ledger) == AssessmentStatus.PENDING_CREWING_STANDARDS
    ledger = record_decision(ledger, CSO_LEVEL, A, CSO, "ok for level one")
    assert derive_status(ledger) == AssessmentStatus.PENDING_SENIOR_DIRECTOR
    ledger = record_decision(ledger, SD_LEVEL, A, SENIOR, "ok for level two")
    assert derive_status(ledger) == AssessmentStatus.PENDING_DIRECTOR_GENERAL
    halted = record_decision(ledger, DG_LEVEL, ApprovalDecision.NEEDS_INFORMATION, DG, "need more")
    assert derive_status(halted) == AssessmentStatus.NEEDS_INFORMATION
    ledger = record_decision(ledger, DG_LEVEL, A, DG, "ok for level three")
    assert derive_status(ledger) == AssessmentStatus.APPROVED


def test_derive_status_is_idempotent():
    ledger = record_decision(initialize_ledger(), CSO_LEVEL, ApprovalDecision.REJECTED, CSO, "no")
    assert derive_status(ledger) == derive_status(ledger) == AssessmentStatus.REJECTED


def test_happy_path():
    a = make_assessment()
    assert a.status == AssessmentStatus.PENDING_CREWING_STANDARDS
    a = apply_decision(a, CSO_LEVEL, A, CSO, "Mentoring plan is adequate.")
    assert a.status == AssessmentStatus.PENDING_SENIOR_DIRECTOR
    a = apply_decision(a, SD_LEVEL, A, SENIOR, "Concur with the CSO review.")
    assert a.status == AssessmentStatus.PENDING_DIRECTOR_GENERAL
    a = apply_decision(a, DG_LEVEL, A, DG, "Exemption granted for this patrol.")
    assert a.status == AssessmentStatus.APPROVED
    assert all(step.is_decided for step in a.approval_steps)


def test_reject_path_leaves_later_level_empty_forever():
    a = make_assessment()
    a = apply_decision(a, CSO_LEVEL, A, CSO, "Mentoring plan is adequate.")
    a = apply_decision(a, SD_LEVEL, ApprovalDecision.REJECTED, SENIOR, "insufficient mitigation")
    assert a.status == AssessmentStatus.REJECTED
    assert not a.approval_steps[2].is_decided
    with pytest.raises(InvalidLevelError):
        apply_decision(a, DG_LEVEL, A, DG, "Trying to approve anyway.")


def test_decision_for_wrong_level_fails():
    with pytest.raises(InvalidLevelError):
        apply_decision(make_assessment(), DG_LEVEL, A, DG, "Skipping ahead to the end.")


def test_draft_cannot_be_decided():
    draft = make_assessment(status=AssessmentStatus.DRAFT)
    with pytest.raises(InvalidLevelError):
        apply_decision(draft, CSO_LEVEL, A, CSO, "Deciding a draft assessment.")


def test_role_must_match_level():
    with pytest.raises(PermissionDeniedError):
        apply_decision(make_assessment(), CSO_LEVEL, A, SENIOR, "Not my level to decide.")
    with pytest.raises(PermissionDeniedError):
        apply_decision(make_assessment(), CSO_LEVEL, A, ADMIN, "Admins do not approve.")


@pytest.mark.parametrize("notes", ["", "   ", "too short", "x" * 1001])
def test_notes_validated_before_anything_changes(notes):
    a = make_assessment()
    with pytest.raises(ValidationError):
        apply_decision(a, CSO_LEVEL, A, CSO, notes)
    assert not a.approval_steps[0].is_decided


def test_validate_notes_strips():
    assert validate_notes("  insufficient mitigation  ") == "insufficient mitigation"


def test_flags_scoped_to_first_level():
    flags = ComplianceFlags(is_against_fsm=True)
    a = apply_decision(make_assessment(), CSO_LEVEL, A, CSO, "Against FSM but acceptable.", flags)
    assert a.approval_steps[0].is_against_fsm
    a = apply_decision(a, SD_LEVEL, A, SENIOR, "Concur with the CSO review.", flags)
    assert not a.approval_steps[1].is_against_fsm


def test_submit_draft_enters_first_level():
    out = submit_draft(make_assessment(status=AssessmentStatus.DRAFT))
    assert out.status == AssessmentStatus.PENDING_CREWING_STANDARDS
    with pytest.raises(InvalidLevelError):
        submit_draft(out)


def test_resume_after_information_reopens_flagged_level_only():
    a = make_assessment()
    a = apply_decision(a, CSO_LEVEL, A, CSO, "Mentoring plan is adequate.")
    a = apply_decision(a, SD_LEVEL, ApprovalDecision.NEEDS_INFORMATION, SENIOR, "Attach sea service record.")
    assert a.status == AssessmentStatus.NEEDS_INFORMATION

    resumed = resume_after_information(a)
    assert resumed.status == AssessmentStatus.PENDING_SENIOR_DIRECTOR
    assert resumed.approval_steps[0].decision == A
    assert not resumed.approval_steps[1].is_decided

    with pytest.raises(InvalidLevelError):
        resume_after_information(resumed)


def test_can_edit_submitter_or_admin():
    a = make_assessment()
    assert can_edit(SUBMITTER, a)
    assert can_edit(ADMIN, a)
    assert not can_edit(OUTSIDER, a)
    assert not can_edit(CSO, a)
