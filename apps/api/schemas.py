from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from domain.models import ApprovalDecision, ApprovalLevel, AssessmentStatus, RiskAssessment
from domain.value_objects import ComplianceFlags


class DecisionIn(BaseModel):
    level: ApprovalLevel
    decision: ApprovalDecision
    notes: str
    is_against_fsm: bool = False
    is_against_mpr: bool = False
    is_against_crewing_profile: bool = False

    def flags(self) -> ComplianceFlags:
        return ComplianceFlags(
            is_against_fsm=self.is_against_fsm,
            is_against_mpr=self.is_against_mpr,
            is_against_crewing_profile=self.is_against_crewing_profile,
        )


class EditOut(BaseModel):
    assessment: RiskAssessment
    workflow_reset: bool
    changed_fields: list[str] = []
    notices: list[str] = []


class WorkflowOut(BaseModel):
    assessment_id: str
    status: AssessmentStatus
    current_level: Optional[ApprovalLevel] = None
    halted_at: Optional[ApprovalLevel] = None
    can_act: bool
    can_edit: bool
